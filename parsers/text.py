"""Plain-text (.txt) screenplay extractor."""

import logging

from core.models import ScriptFormat
from parsers.base import ExtractorBase
from parsers.normalize import normalize_text, require_min_length

logger = logging.getLogger(__name__)


def decode_text(content: bytes) -> str:
    """Decode *content* as UTF-8, falling back to Latin-1.

    Latin-1 maps every byte to a code point, so this never raises.
    """
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("UTF-8 decoding failed, falling back to latin-1")
        return content.decode("latin-1")


class PlainTextExtractor(ExtractorBase):
    """Extractor for plain-text screenplay exports."""

    @property
    def supported_format(self) -> ScriptFormat:
        return ScriptFormat.TEXT

    def extract(self, content: bytes) -> str:
        text = normalize_text(decode_text(content))
        require_min_length(text, "Text file", self.min_content_length)
        logger.info("TXT extracted: %d bytes -> %d chars", len(content), len(text))
        return text
