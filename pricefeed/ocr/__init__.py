"""OCR backend base class, result type, and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import PriceFeedConfig


@dataclass
class OCRResult:
    text: str
    confidence: float = 0.0  # 0.0-1.0, 0.0 when the engine reports none


class OCRBackend(ABC):
    """Abstract base for receipt image to plain text conversion."""

    @abstractmethod
    async def extract_text(self, image_path: str) -> OCRResult:
        """Return the receipt text, one printed line per text line."""
        ...


def create_backend(config: PriceFeedConfig) -> OCRBackend:
    """Create an OCR backend based on configuration."""
    backend_name = config.ocr.backend

    match backend_name:
        case "claude":
            from .claude import ClaudeOCRBackend

            return ClaudeOCRBackend(
                api_key=config.ocr.claude.api_key,
                model=config.ocr.claude.model,
            )
        case "tesseract":
            from .tesseract import TesseractOCRBackend

            return TesseractOCRBackend(
                language=config.ocr.tesseract.language,
                page_segmentation_mode=config.ocr.tesseract.page_segmentation_mode,
            )
        case _:
            raise ValueError(
                f"Unknown OCR backend: {backend_name!r} "
                f"(choose claude or tesseract)"
            )
