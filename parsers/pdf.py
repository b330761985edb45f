"""PDF screenplay extractor.

Extracts positioned text runs page by page with ``pdfplumber`` (in-memory
only), rebuilds reading order and line breaks from the run coordinates, and
repairs the letter-spaced output some PDF writers produce when every glyph
is emitted as its own run.
"""

import io
import logging
import re
import time
from dataclasses import dataclass
from typing import Any

from core.exceptions import ExtractionException
from core.models import ErrorCode, ScriptFormat
from parsers.base import ExtractorBase, collect_partial
from parsers.normalize import MIN_CONTENT_LENGTH, normalize_text, require_min_length

logger = logging.getLogger(__name__)

_MAX_PDF_PAGES = 500
LINE_TOLERANCE = 5.0  # PDF units; smaller y differences are the same line
SPACED_TEXT_RATIO = 0.4

_SPACE_BETWEEN_ALNUM_RE = re.compile(r"([^\W_]) (?=[^\W_])")
_SPACE_BEFORE_PERIOD_RE = re.compile(r" +(?=\.)")
_MULTI_SPACE_RE = re.compile(r" {2,}")


@dataclass(frozen=True, slots=True)
class TextRun:
    """A string drawn at a position on the page.

    ``y`` is in PDF space: it grows towards the top of the page.
    """

    text: str
    x: float
    y: float


def _group_lines(runs: list[TextRun], tolerance: float) -> list[list[TextRun]]:
    """Group runs into lines, top of the page first, each line left to right."""
    lines: list[list[TextRun]] = []
    line_y: float | None = None
    for run in sorted(runs, key=lambda r: (-r.y, r.x)):
        if line_y is None or abs(run.y - line_y) >= tolerance:
            lines.append([])
            line_y = run.y
        lines[-1].append(run)
    return [sorted(line, key=lambda r: r.x) for line in lines]


def reconstruct_page_text(runs: list[TextRun], tolerance: float = LINE_TOLERANCE) -> str:
    """Rebuild natural reading order for one page of text runs."""
    rendered: list[str] = []
    for line in _group_lines(runs, tolerance):
        parts: list[str] = []
        for run in line:
            if parts and not parts[-1][-1:].isspace():
                parts.append(" ")
            parts.append(run.text)
        rendered.append("".join(parts))
    return "\n".join(rendered)


def whitespace_ratio(text: str) -> float:
    """Fraction of *text* made of whitespace characters."""
    if not text:
        return 0.0
    return sum(1 for ch in text if ch.isspace()) / len(text)


def repair_letter_spacing(text: str, threshold: float = SPACED_TEXT_RATIO) -> str:
    """Undo one-glyph-per-run spacing (``"I N T ."`` -> ``"INT."``).

    Only applied when more than *threshold* of the text is whitespace;
    normally spaced text is returned untouched since collapsing would merge
    real words.
    """
    if whitespace_ratio(text) <= threshold:
        return text
    logger.info("Detected letter-spaced PDF text, collapsing glyph spacing")
    text = _SPACE_BETWEEN_ALNUM_RE.sub(r"\1", text)
    text = _SPACE_BEFORE_PERIOD_RE.sub("", text)
    return _MULTI_SPACE_RE.sub(" ", text)


def _page_runs(page: Any) -> list[TextRun]:
    """Positioned runs for a pdfplumber page, converted to PDF y-up space."""
    height = float(page.height)
    return [
        TextRun(text=word["text"], x=float(word["x0"]), y=height - float(word["bottom"]))
        for word in page.extract_words()
        if word["text"]
    ]


class PDFExtractor(ExtractorBase):
    """Coordinate-aware PDF screenplay extractor."""

    def __init__(
        self,
        min_content_length: int = MIN_CONTENT_LENGTH,
        line_tolerance: float = LINE_TOLERANCE,
        spaced_text_ratio: float = SPACED_TEXT_RATIO,
        max_pages: int = _MAX_PDF_PAGES,
    ) -> None:
        super().__init__(min_content_length)
        self.line_tolerance = line_tolerance
        self.spaced_text_ratio = spaced_text_ratio
        self.max_pages = max_pages

    @property
    def supported_format(self) -> ScriptFormat:
        return ScriptFormat.PDF

    def extract(self, content: bytes) -> str:
        t0 = time.monotonic()

        pages_runs, page_count, skipped = self._load_runs(content)
        total_runs = sum(len(runs) for runs in pages_runs)
        if total_runs == 0:
            raise ExtractionException(
                ErrorCode.NO_EXTRACTABLE_TEXT,
                "The PDF contains no extractable text. It may be a scanned "
                "(image-only) document; export the screenplay as .txt or .fdx instead.",
                details={"pages": page_count, "skipped_pages": skipped},
            )

        raw = "\n\n".join(
            reconstruct_page_text(runs, self.line_tolerance) for runs in pages_runs if runs
        )
        text = normalize_text(repair_letter_spacing(raw, self.spaced_text_ratio))
        require_min_length(text, "PDF file", self.min_content_length)

        logger.info(
            "PDF extracted: %d pages (%d skipped), %d text runs, %d chars in %.2fs",
            page_count,
            skipped,
            total_runs,
            len(text),
            time.monotonic() - t0,
        )
        return text

    def _load_runs(self, content: bytes) -> tuple[list[list[TextRun]], int, int]:
        """Open the document and collect runs per page.

        Returns ``(runs_per_page, page_count, skipped_pages)``.
        """
        import pdfplumber

        try:
            pdf = pdfplumber.open(io.BytesIO(content))
        except Exception as exc:
            logger.warning("PDF could not be opened: %s", exc)
            raise ExtractionException(
                ErrorCode.INVALID_OR_ENCRYPTED,
                "The file is not a readable PDF or is password-protected",
                details={"reason": type(exc).__name__},
            )

        with pdf:
            try:
                pages = list(pdf.pages)
            except Exception as exc:
                logger.warning("PDF page tree could not be read: %s", exc)
                raise ExtractionException(
                    ErrorCode.INVALID_OR_ENCRYPTED,
                    "The PDF page structure could not be read",
                    details={"reason": type(exc).__name__},
                )
            if not pages:
                raise ExtractionException(
                    ErrorCode.INVALID_OR_ENCRYPTED,
                    "The PDF contains no pages",
                )
            if len(pages) > self.max_pages:
                logger.warning("PDF has %d pages, reading the first %d", len(pages), self.max_pages)
                pages = pages[: self.max_pages]

            pages_runs, skipped = collect_partial(pages, _page_runs, "PDF page")

        return pages_runs, len(pages), skipped
