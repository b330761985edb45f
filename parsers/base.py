"""Abstract base class for screenplay extractors and the extractor factory."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TypeVar

from core.exceptions import ExtractionException
from core.models import ErrorCode, ScriptFormat
from parsers.normalize import MIN_CONTENT_LENGTH

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ExtractorBase(ABC):
    """Interface that every screenplay extractor must implement."""

    def __init__(self, min_content_length: int = MIN_CONTENT_LENGTH) -> None:
        self.min_content_length = min_content_length

    @abstractmethod
    def extract(self, content: bytes) -> str:
        """Turn raw file bytes into normalized screenplay text.

        Raises ``ExtractionException`` with a closed ``ErrorCode``.
        Implementations MUST NOT write anything to disk.
        """

    @property
    @abstractmethod
    def supported_format(self) -> ScriptFormat:
        """The ``ScriptFormat`` this extractor handles."""


def collect_partial(
    items: Iterable[T],
    func: Callable[[T], R],
    label: str,
) -> tuple[list[R], int]:
    """Apply *func* to every item, keeping successes and skipping failures.

    Returns ``(results, skipped)``.  A failing element is logged and dropped;
    callers decide whether the surviving results are enough.
    """
    results: list[R] = []
    skipped = 0
    for index, item in enumerate(items, start=1):
        try:
            results.append(func(item))
        except Exception as exc:
            skipped += 1
            logger.warning("Skipping %s %d: %s", label, index, exc)
    return results, skipped


def get_extractor(
    fmt: str,
    *,
    min_content_length: int = MIN_CONTENT_LENGTH,
    pdf_options: dict[str, float | int] | None = None,
    fdx_options: dict[str, int] | None = None,
) -> ExtractorBase:
    """Return the extractor for *fmt* (``"txt"``, ``"fdx"`` or ``"pdf"``).

    *pdf_options* and *fdx_options* are extra keyword arguments for
    ``PDFExtractor`` and ``FDXExtractor``.  Raises
    ``ExtractionException`` with ``UnsupportedFileType`` for anything else.
    """
    from parsers.fdx import FDXExtractor
    from parsers.pdf import PDFExtractor
    from parsers.text import PlainTextExtractor

    _registry: dict[str, type[ExtractorBase]] = {
        ScriptFormat.TEXT.value: PlainTextExtractor,
        ScriptFormat.FDX.value: FDXExtractor,
        ScriptFormat.PDF.value: PDFExtractor,
    }

    extractor_cls = _registry.get(fmt)
    if extractor_cls is None:
        raise ExtractionException(
            ErrorCode.UNSUPPORTED_FILE_TYPE,
            f"Unsupported file type: {fmt}",
            details={"file_type": fmt, "supported": list(_registry.keys())},
        )
    if extractor_cls is PDFExtractor:
        return PDFExtractor(min_content_length=min_content_length, **(pdf_options or {}))
    if extractor_cls is FDXExtractor:
        return FDXExtractor(min_content_length=min_content_length, **(fdx_options or {}))
    return extractor_cls(min_content_length=min_content_length)
