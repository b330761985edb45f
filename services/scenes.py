"""Scene list construction for the per-scene analysis hand-off."""

import logging

from api.config import Settings, get_settings
from core.exceptions import SegmentationException
from core.models import Scene, SceneResponse, SegmentResponse
from parsers.scene_heading import parse_scene_heading
from parsers.scene_splitter import extract_title, segment_scenes

logger = logging.getLogger(__name__)


def describe_scene(scene: Scene) -> SceneResponse:
    """Attach the slugline components to a scene."""
    hc = parse_scene_heading(scene.heading)
    return SceneResponse(
        number=scene.number,
        text=scene.text,
        heading=scene.heading,
        location_type=hc.location_type,
        location=hc.location,
        time_of_day=hc.time_of_day,
    )


def build_scene_list(text: str, *, settings: Settings | None = None) -> SegmentResponse:
    """Segment *text* and describe every scene.

    Raises ``SegmentationException`` (``NoScenesFound``) when the text has
    no INT./EXT. sluglines.
    """
    settings = settings or get_settings()
    scenes = segment_scenes(text, min_length=settings.scene_min_length)
    if not scenes:
        raise SegmentationException(
            "No scene headings (INT. or EXT.) were found in the screenplay",
            details={"text_length": len(text)},
        )

    logger.info("Built scene list: %d scenes", len(scenes))
    return SegmentResponse(
        title=extract_title(text),
        total_scenes=len(scenes),
        scenes=[describe_scene(scene) for scene in scenes],
    )
