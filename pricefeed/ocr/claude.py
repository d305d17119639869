"""Claude API vision backend for receipt transcription."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

from . import OCRBackend, OCRResult

_PROMPT = """\
This image is a photographed store receipt.
Transcribe the printed text exactly as it appears, one receipt line per
output line, keeping item names, UPC numbers, prices and tax flags in the
order printed. Do not add commentary, headings or formatting.
"""

# Transcriptions carry no per-line score; treat them as reliable
_CLAUDE_CONFIDENCE = 0.9


class ClaudeOCRBackend(OCRBackend):
    """Transcribe receipts using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def extract_text(self, image_path: str) -> OCRResult:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install 'pricefeed[claude]'"
            ) from None

        data = Path(image_path).read_bytes()
        media_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
        content: list[dict] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": base64.standard_b64encode(data).decode(),
                },
            },
            {"type": "text", "text": _PROMPT},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=4096,
            messages=[{"role": "user", "content": content}],
        )

        text = _clean_response(response.content[0].text)
        return OCRResult(text=text, confidence=_CLAUDE_CONFIDENCE if text else 0.0)


def _clean_response(text: str) -> str:
    """Strip markdown fences the model sometimes wraps the transcription in."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned.strip()
