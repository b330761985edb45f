"""Screenplay upload and segmentation endpoints.

Uploads arrive as JSON with a base64 ``fileData`` payload.  Extraction is
CPU-bound and synchronous, so the handlers are plain ``def`` functions and
run in FastAPI's threadpool.
"""

import logging

from fastapi import APIRouter, Depends, status
from prometheus_client import Counter

from api.config import Settings
from api.dependencies import get_log_context, get_settings_dependency
from core.exceptions import SegmentationException, UploadException
from core.models import (
    ErrorResponse,
    ParsedUpload,
    SegmentRequest,
    SegmentResponse,
    UploadRequest,
)
from services.scenes import build_scene_list
from services.upload_parser import SUPPORTED_FILE_TYPES, parse_upload

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOADS_TOTAL = Counter(
    "screenplay_uploads_total",
    "Screenplay uploads by declared file type and outcome",
    ["file_type", "outcome"],
)
SCENES_SEGMENTED_TOTAL = Counter(
    "screenplay_scenes_segmented_total",
    "Scenes produced by the segmenter",
)

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse},
    status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
}


@router.post(
    "/parse",
    response_model=ParsedUpload,
    status_code=status.HTTP_200_OK,
    summary="Extract screenplay text",
    description="Decode a base64 .txt, .fdx or .pdf upload and return normalized text.",
    responses=_ERROR_RESPONSES,
)
def parse_screenplay(
    body: UploadRequest,
    settings: Settings = Depends(get_settings_dependency),
    log_context: dict[str, str | None] = Depends(get_log_context),
) -> ParsedUpload:
    """Extract normalized screenplay text from an upload."""
    # Only known values become metric labels
    label = body.file_type if body.file_type in SUPPORTED_FILE_TYPES else "other"
    try:
        result = parse_upload(body, settings=settings, log_extra=log_context)
    except UploadException as exc:
        UPLOADS_TOTAL.labels(file_type=label, outcome=exc.code.value).inc()
        raise
    UPLOADS_TOTAL.labels(file_type=label, outcome="success").inc()
    return result


@router.post(
    "/scenes",
    response_model=SegmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Split screenplay text into scenes",
    description="Cut normalized screenplay text at INT./EXT. sluglines.",
    responses={status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse}},
)
def split_screenplay(
    body: SegmentRequest,
    settings: Settings = Depends(get_settings_dependency),
    log_context: dict[str, str | None] = Depends(get_log_context),
) -> SegmentResponse:
    """Return the ordered scene list for a screenplay text."""
    try:
        result = build_scene_list(body.screenplay_text, settings=settings)
    except SegmentationException:
        logger.warning("No scenes found (request_id=%s)", log_context["request_id"])
        raise
    SCENES_SEGMENTED_TOTAL.inc(result.total_scenes)
    return result
