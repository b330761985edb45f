"""Custom exceptions for the screenplay breakdown service."""

from typing import Any

from core.models import ErrorCode


class BreakdownException(Exception):
    """Base exception for the breakdown service."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ExtractionException(BreakdownException):
    """Raised by an extractor when a file cannot be turned into screenplay text.

    Carries one of the closed ``ErrorCode`` values so the dispatcher can
    translate it without inspecting the message.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        super().__init__(message, details)


class UploadException(BreakdownException):
    """Raised at the dispatcher boundary with a user-facing message and hint."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.hint = hint
        super().__init__(message, details)


class SegmentationException(BreakdownException):
    """Raised by callers of the segmenter when a text yields no scenes."""

    code = ErrorCode.NO_SCENES_FOUND
    hint = "Scene headings must start with INT. or EXT. (e.g. 'INT. KITCHEN - DAY')."
