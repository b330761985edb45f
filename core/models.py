"""Pydantic models for screenplay uploads, scenes and API responses."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ScriptFormat(str, Enum):
    """Supported upload formats (wire values of ``fileType``)."""

    TEXT = "txt"  # Plain text
    FDX = "fdx"  # Final Draft XML
    PDF = "pdf"


class ErrorCode(str, Enum):
    """Closed set of user-facing failure categories."""

    UNSUPPORTED_FILE_TYPE = "UnsupportedFileType"
    INVALID_FILE_DATA = "InvalidFileData"
    EMPTY_FILE = "EmptyFile"
    FILE_TOO_LARGE = "FileTooLarge"
    DECODE_ERROR = "DecodeError"
    NOT_FDX_FORMAT = "NotFdxFormat"
    MALFORMED_XML = "MalformedXml"
    NO_PARAGRAPHS = "NoParagraphs"
    INVALID_OR_ENCRYPTED = "InvalidOrEncrypted"
    NO_EXTRACTABLE_TEXT = "NoExtractableText"
    INSUFFICIENT_CONTENT = "InsufficientContent"
    NO_SCENES_FOUND = "NoScenesFound"


# ---------------------------------------------------------------------------
# Scenes -- transient, re-segmentation replaces the whole list
# ---------------------------------------------------------------------------


class TimeOfDay(str, Enum):
    """Time-of-day designation extracted from scene headings."""

    DAY = "DAY"
    NIGHT = "NIGHT"
    DAWN = "DAWN"
    DUSK = "DUSK"
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    CONTINUOUS = "CONTINUOUS"
    UNKNOWN = "UNKNOWN"


class LocationType(str, Enum):
    """Interior/exterior designation from scene headings."""

    INT = "INT"
    EXT = "EXT"
    INT_EXT = "INT/EXT"
    UNKNOWN = "UNKNOWN"


class Scene(BaseModel):
    """A single scene cut from normalized screenplay text."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1, description="1-based position in the document")
    text: str = Field(..., description="Scene text, starting with its slugline")

    @property
    def heading(self) -> str:
        """The slugline (first line of the scene text)."""
        return self.text.split("\n", 1)[0].strip()


# ---------------------------------------------------------------------------
# Request / response models (camelCase on the wire)
# ---------------------------------------------------------------------------


class UploadRequest(BaseModel):
    """Screenplay upload as produced by the web client.

    ``file_type`` is deliberately a plain string: unsupported values are
    reported by the dispatcher as ``UnsupportedFileType`` rather than as a
    schema validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    file_data: str = Field(..., alias="fileData", description="Base64-encoded file")
    file_name: str = Field(..., alias="fileName", min_length=1, max_length=255)
    file_type: str = Field(..., alias="fileType", description="txt, fdx or pdf")


class UploadMeta(BaseModel):
    """Metadata returned alongside the extracted text."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName")
    file_type: ScriptFormat = Field(..., alias="fileType")
    text_length: int = Field(..., alias="textLength")
    processing_time_ms: int = Field(0, alias="processingTimeMs")


class ParsedUpload(BaseModel):
    """Successful dispatcher result."""

    model_config = ConfigDict(populate_by_name=True)

    screenplay_text: str = Field(..., alias="screenplayText")
    meta: UploadMeta


class SegmentRequest(BaseModel):
    """Normalized screenplay text to cut into scenes."""

    model_config = ConfigDict(populate_by_name=True)

    screenplay_text: str = Field(..., alias="screenplayText", min_length=1)


class SceneResponse(BaseModel):
    """A scene plus the components parsed from its slugline."""

    model_config = ConfigDict(populate_by_name=True)

    number: int
    text: str
    heading: str
    location_type: LocationType = Field(..., alias="locationType")
    location: str
    time_of_day: TimeOfDay = Field(..., alias="timeOfDay")


class SegmentResponse(BaseModel):
    """Ordered scene list for the downstream analysis."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Title from the title page, or a placeholder")
    total_scenes: int = Field(..., alias="totalScenes")
    scenes: list[SceneResponse] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Error detail model."""

    field: str | None = Field(None, description="Field that caused the error")
    message: str = Field(..., description="Error message")
    error_code: str | None = Field(None, description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    hint: str | None = Field(None, description="Suggested remediation")
    details: list[ErrorDetail] = Field(default_factory=list, description="Error details")
    request_id: str | None = Field(None, description="Request ID for tracking")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="API version")
    formats: list[str] = Field(default_factory=list, description="Accepted upload formats")


def error_details(details: dict[str, Any]) -> list[ErrorDetail]:
    """Render an exception ``details`` mapping as ``ErrorDetail`` entries."""
    return [ErrorDetail(field=key, message=str(value)) for key, value in details.items()]
