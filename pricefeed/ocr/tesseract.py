"""Local Tesseract backend for receipt OCR."""

from __future__ import annotations

import asyncio
from pathlib import Path

from . import OCRBackend, OCRResult


class TesseractOCRBackend(OCRBackend):
    """Run Tesseract on a receipt image.

    Page segmentation mode 6 treats the receipt as a single uniform block
    of text, which keeps item names and prices on the same line.
    """

    def __init__(self, language: str = "eng", page_segmentation_mode: int = 6) -> None:
        self._language = language
        self._psm = page_segmentation_mode

    async def extract_text(self, image_path: str) -> OCRResult:
        try:
            import pytesseract
            from PIL import Image
        except ImportError:
            raise ImportError(
                "pytesseract and Pillow are required: pip install 'pricefeed[tesseract]'"
            ) from None

        path = Path(image_path)
        if not path.exists():
            raise FileNotFoundError(f"Receipt image not found: {path}")

        def _run() -> OCRResult:
            config = f"--psm {self._psm}"
            with Image.open(path) as img:
                text = pytesseract.image_to_string(
                    img, lang=self._language, config=config
                )
                data = pytesseract.image_to_data(
                    img,
                    lang=self._language,
                    config=config,
                    output_type=pytesseract.Output.DICT,
                )
            return OCRResult(text=text.strip(), confidence=_mean_confidence(data))

        return await asyncio.to_thread(_run)


def _mean_confidence(data: dict) -> float:
    """Average word confidence (Tesseract reports 0-100, -1 for non-words)."""
    scores = []
    for raw in data.get("conf", []):
        try:
            score = float(raw)
        except (TypeError, ValueError):
            continue
        if score >= 0:
            scores.append(score)
    if not scores:
        return 0.0
    return sum(scores) / len(scores) / 100.0
