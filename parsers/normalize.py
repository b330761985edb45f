"""Whitespace normalization shared by every extractor."""

import re

from core.exceptions import ExtractionException
from core.models import ErrorCode

# Extracted text shorter than this is not a usable screenplay
MIN_CONTENT_LENGTH = 100

_EXCESS_NEWLINES_RE = re.compile(r"\n{4,}")


def normalize_text(text: str) -> str:
    """Normalize line endings and whitespace.

    ``\\r\\n`` and lone ``\\r`` become ``\\n``, tabs become four spaces, runs
    of four or more newlines collapse to three, and the result is trimmed.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\t", "    ")
    text = _EXCESS_NEWLINES_RE.sub("\n\n\n", text)
    return text.strip()


def require_min_length(text: str, source: str, minimum: int = MIN_CONTENT_LENGTH) -> str:
    """Return *text* unchanged, or raise ``InsufficientContent`` if it is too short."""
    if len(text) < minimum:
        raise ExtractionException(
            ErrorCode.INSUFFICIENT_CONTENT,
            f"{source} produced insufficient text content ({len(text)} < {minimum} chars)",
            details={"extracted_length": len(text), "minimum_required": minimum},
        )
    return text
