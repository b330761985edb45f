"""Final Draft XML (.fdx) extractor.

Walks the ``<Paragraph>`` elements of an FDX file and renders them as a
plain screenplay text stream, using ``defusedxml`` for secure XML parsing.
Scene headings come out upper-cased on their own block so the scene
segmenter finds them as sluglines.
"""

import logging
import time
from xml.etree.ElementTree import Element

from core.exceptions import ExtractionException
from core.models import ErrorCode, ScriptFormat
from parsers.base import ExtractorBase, collect_partial
from parsers.normalize import MIN_CONTENT_LENGTH, normalize_text, require_min_length
from parsers.secure_xml import parse_xml_safe

logger = logging.getLogger(__name__)

# FDX Paragraph types with dedicated formatting
_SCENE_HEADING = "Scene Heading"
_ACTION = "Action"
_CHARACTER = "Character"
_DIALOGUE = "Dialogue"
_PARENTHETICAL = "Parenthetical"
_TRANSITION = "Transition"
_UNKNOWN = "Unknown"

_FDX_MARKERS = ("<?xml", "<FinalDraft")

# 10 MiB, the default upload ceiling
MAX_FDX_BYTES = 10 * 1024 * 1024


def paragraph_text(para: Element) -> str:
    """Extract the text content of a ``<Paragraph>`` element.

    Text lives either directly in the paragraph or in one or more ``<Text>``
    runs (split wherever the styling changes), which are concatenated.
    """
    runs = para.findall("Text")
    if runs:
        return "".join("".join(run.itertext()) for run in runs).strip()
    return (para.text or "").strip()


def format_paragraph(ptype: str, text: str) -> list[str]:
    """Render one paragraph as output lines according to its type."""
    if ptype == _SCENE_HEADING:
        return [f"\n{text.upper()}\n"]
    if ptype == _ACTION:
        return [text, ""]
    if ptype == _CHARACTER:
        return [f"\n{text.upper()}"]
    if ptype == _PARENTHETICAL:
        # Drop one enclosing pair only; inner groups stay intact
        if text.startswith("(") and text.endswith(")"):
            text = text[1:-1].strip()
        return [f"({text})"]
    if ptype == _TRANSITION:
        return [f"\n{text.upper()}\n"]
    # Dialogue and anything unrecognised pass through unchanged
    return [text]


class FDXExtractor(ExtractorBase):
    """Extractor for Final Draft XML (.fdx) screenplay files."""

    def __init__(
        self,
        min_content_length: int = MIN_CONTENT_LENGTH,
        max_xml_bytes: int = MAX_FDX_BYTES,
    ) -> None:
        super().__init__(min_content_length)
        self.max_xml_bytes = max_xml_bytes

    @property
    def supported_format(self) -> ScriptFormat:
        return ScriptFormat.FDX

    def extract(self, content: bytes) -> str:
        t0 = time.monotonic()

        try:
            xml_text = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ExtractionException(
                ErrorCode.DECODE_ERROR,
                "FDX file is not valid UTF-8",
                details={"position": exc.start},
            )

        if not any(marker in xml_text for marker in _FDX_MARKERS):
            raise ExtractionException(
                ErrorCode.NOT_FDX_FORMAT,
                "File does not appear to be a Final Draft (XML) file",
            )

        root = parse_xml_safe(content, max_size=self.max_xml_bytes)
        paragraphs = self._find_paragraphs(root)
        if not paragraphs:
            raise ExtractionException(
                ErrorCode.NO_PARAGRAPHS,
                "No screenplay paragraphs found in FDX file",
                details={"root_tag": root.tag},
            )

        rendered, skipped = collect_partial(paragraphs, self._render_paragraph, "FDX paragraph")
        blocks = [lines for lines in rendered if lines]
        if not blocks:
            raise ExtractionException(
                ErrorCode.INSUFFICIENT_CONTENT,
                "Could not extract any text from FDX paragraphs",
                details={"paragraph_count": len(paragraphs), "skipped": skipped},
            )

        text = normalize_text("\n".join(line for lines in blocks for line in lines))
        require_min_length(text, "FDX file", self.min_content_length)

        logger.info(
            "FDX extracted: %d/%d paragraphs with text, %d skipped, %d chars in %.2fs",
            len(blocks),
            len(paragraphs),
            skipped,
            len(text),
            time.monotonic() - t0,
        )
        return text

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _find_paragraphs(root: Element) -> list[Element]:
        """Return paragraphs under ``FinalDraft/Content``, else any in the tree."""
        if root.tag == "FinalDraft":
            primary = root.findall("Content/Paragraph")
            if primary:
                return primary
            logger.info("No FinalDraft/Content paragraphs, scanning whole document")
        return list(root.iter("Paragraph"))

    @staticmethod
    def _render_paragraph(para: Element) -> list[str]:
        """Lines for one paragraph; an empty list for paragraphs without text."""
        text = paragraph_text(para)
        if not text:
            return []
        ptype = (para.get("Type") or _UNKNOWN).strip()
        return format_paragraph(ptype, text)
