"""Upload dispatcher: base64 payload in, normalized screenplay text out.

Validates the upload, routes the decoded bytes to the extractor for the
declared file type and translates every extractor failure into a stable
``ErrorCode`` with a remediation hint.  Internal exception text never
crosses this boundary.
"""

import base64
import binascii
import logging
import time
from collections.abc import Mapping
from typing import Any

from api.config import Settings, get_settings
from core.exceptions import ExtractionException, UploadException
from core.models import ErrorCode, ParsedUpload, ScriptFormat, UploadMeta, UploadRequest
from parsers.base import get_extractor

logger = logging.getLogger(__name__)

SUPPORTED_FILE_TYPES = [fmt.value for fmt in ScriptFormat]

_EXPORT_AS_TEXT = "Export the screenplay as plain text: File > Export > Plain Text (.txt)."

_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.DECODE_ERROR: "The file could not be decoded as text. It may be corrupted.",
    ErrorCode.NOT_FDX_FORMAT: "The file does not appear to be a Final Draft (.fdx) document.",
    ErrorCode.MALFORMED_XML: "The Final Draft file structure could not be parsed. "
    "The file may be corrupted.",
    ErrorCode.NO_PARAGRAPHS: "No screenplay content was found in the Final Draft file.",
    ErrorCode.INVALID_OR_ENCRYPTED: "The PDF could not be opened. It may be invalid "
    "or password-protected.",
    ErrorCode.NO_EXTRACTABLE_TEXT: "The PDF contains no text that can be extracted. "
    "It may be a scanned (image-only) document.",
    ErrorCode.INSUFFICIENT_CONTENT: "The file was processed but contains insufficient "
    "text content for screenplay analysis.",
    ErrorCode.FILE_TOO_LARGE: "The file exceeds the maximum allowed size.",
}

_HINTS: dict[ErrorCode, str] = {
    ErrorCode.DECODE_ERROR: "Re-save the file as UTF-8 text. " + _EXPORT_AS_TEXT,
    ErrorCode.NOT_FDX_FORMAT: "Re-export the screenplay from Final Draft, or upload it as .txt.",
    ErrorCode.MALFORMED_XML: "Re-export the screenplay from Final Draft. " + _EXPORT_AS_TEXT,
    ErrorCode.NO_PARAGRAPHS: "Re-export the screenplay from Final Draft. " + _EXPORT_AS_TEXT,
    ErrorCode.INVALID_OR_ENCRYPTED: "Remove the password protection, or export the "
    "screenplay as .txt or .fdx.",
    ErrorCode.NO_EXTRACTABLE_TEXT: "Run OCR on the PDF first, or export the screenplay "
    "as .txt or .fdx.",
    ErrorCode.INSUFFICIENT_CONTENT: "Check that the source file contains the full screenplay.",
    ErrorCode.FILE_TOO_LARGE: "Split the screenplay into several files or remove embedded images.",
}


def _fail(
    code: ErrorCode,
    message: str,
    hint: str | None = None,
    details: dict[str, Any] | None = None,
) -> UploadException:
    return UploadException(code, message, hint=hint, details=details)


def decode_payload(file_data: str) -> bytes:
    """Decode a base64 payload, ignoring embedded whitespace and line breaks."""
    compact = "".join(file_data.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        raise _fail(
            ErrorCode.INVALID_FILE_DATA,
            "File data must be valid base64",
            hint="Re-upload the file.",
        ) from None


def parse_upload(
    request: UploadRequest,
    *,
    settings: Settings | None = None,
    log_extra: Mapping[str, Any] | None = None,
) -> ParsedUpload:
    """Validate an upload and extract its normalized screenplay text.

    Checks run in a fixed order and stop at the first failure:
    file type, base64 payload, empty file, size ceiling, extraction, and a
    final minimum-length check.  Raises ``UploadException``.
    """
    settings = settings or get_settings()
    log = logging.LoggerAdapter(
        logger, {"file_name": request.file_name, "file_type": request.file_type, **(log_extra or {})}
    )
    t0 = time.monotonic()

    # 1. File type
    if request.file_type not in SUPPORTED_FILE_TYPES:
        log.warning("Unsupported file type: %r", request.file_type)
        raise _fail(
            ErrorCode.UNSUPPORTED_FILE_TYPE,
            f'File type "{request.file_type}" is not supported. '
            "Please use .txt, .fdx, or .pdf format.",
            hint="Upload a .txt, .fdx or .pdf file.",
            details={"supported": ", ".join(SUPPORTED_FILE_TYPES)},
        )
    fmt = ScriptFormat(request.file_type)

    # 2-4. Payload
    content = decode_payload(request.file_data)
    if not content:
        raise _fail(ErrorCode.EMPTY_FILE, "The uploaded file is empty", hint="Re-upload the file.")
    if len(content) > settings.max_upload_bytes:
        log.warning("File too large: %d bytes", len(content))
        raise _fail(
            ErrorCode.FILE_TOO_LARGE,
            f"File size exceeds the maximum allowed "
            f"({settings.max_upload_bytes / 1024 / 1024:.0f} MB)",
            hint=_HINTS[ErrorCode.FILE_TOO_LARGE],
            details={"size": len(content), "max_size": settings.max_upload_bytes},
        )

    # 5. Extraction
    extractor = get_extractor(
        fmt.value,
        min_content_length=settings.min_content_length,
        pdf_options=settings.pdf_options,
        fdx_options=settings.fdx_options,
    )
    try:
        text = extractor.extract(content)
    except ExtractionException as exc:
        log.warning("%s extraction failed: [%s] %s", fmt.value.upper(), exc.code.value, exc.message)
        raise _fail(
            exc.code,
            _MESSAGES.get(exc.code, "The file could not be processed."),
            hint=_HINTS.get(exc.code, _EXPORT_AS_TEXT),
        ) from None

    # 6. Final length check, independent of the extractor
    if len(text) < settings.min_content_length:
        log.warning("Extracted text too short: %d chars", len(text))
        raise _fail(
            ErrorCode.INSUFFICIENT_CONTENT,
            _MESSAGES[ErrorCode.INSUFFICIENT_CONTENT],
            hint=_HINTS[ErrorCode.INSUFFICIENT_CONTENT],
            details={
                "extracted_length": len(text),
                "minimum_required": settings.min_content_length,
            },
        )

    elapsed_ms = int((time.monotonic() - t0) * 1000)
    log.info("Upload parsed: %d bytes -> %d chars in %dms", len(content), len(text), elapsed_ms)

    return ParsedUpload(
        screenplay_text=text,
        meta=UploadMeta(
            file_name=request.file_name,
            file_type=fmt,
            text_length=len(text),
            processing_time_ms=elapsed_ms,
        ),
    )
