"""Deterministic scene segmenter for normalized screenplay text.

Splits text at INT./EXT. sluglines -- the single most reliable structural
signal in any screenplay, regardless of the source format.  The title page
in front of the first slugline is read only for the screenplay title.
"""

import logging
import re

from core.models import Scene

logger = logging.getLogger(__name__)

# Short fragments are title-page remnants or extraction noise
MIN_SCENE_LENGTH = 20

# A line that begins a new scene. Anchored to start-of-line via MULTILINE.
SLUGLINE_RE = re.compile(r"^[ \t]*(?:INT|EXT)\.", re.MULTILINE | re.IGNORECASE)

_SPLIT_RE = re.compile(r"(?=^[ \t]*(?:INT|EXT)\.)", re.MULTILINE | re.IGNORECASE)


def is_slugline(line: str) -> bool:
    """True if *line* starts with ``INT.`` or ``EXT.`` (any case)."""
    return SLUGLINE_RE.match(line) is not None


def segment_scenes(text: str, min_length: int = MIN_SCENE_LENGTH) -> list[Scene]:
    """Split *text* into scenes at every slugline.

    Each scene runs from its slugline up to the next one (or the end of the
    text).  Fragments before the first slugline and fragments shorter than
    *min_length* are discarded.  Returns an empty list when the text has no
    sluglines; this function never raises.
    """
    scenes: list[Scene] = []
    discarded = 0

    for fragment in _SPLIT_RE.split(text):
        block = fragment.strip()
        if not block:
            continue
        if len(block) < min_length or not is_slugline(block):
            discarded += 1
            continue
        scenes.append(Scene(number=len(scenes) + 1, text=block))

    logger.debug("Segmented %d scenes (%d fragments discarded)", len(scenes), discarded)
    return scenes


DEFAULT_TITLE = "Untitled Screenplay"
# Only the top of the title page is searched
_TITLE_SEARCH_LINES = 20
_TITLE_LABEL_RE = re.compile(r"^title:\s*", re.IGNORECASE)


def _mostly_uppercase(line: str, ratio: float = 0.8) -> bool:
    letters = [ch for ch in line if ch.isalpha()]
    if not letters:
        return False
    return sum(1 for ch in letters if ch.isupper()) / len(letters) >= ratio


def extract_title(text: str) -> str:
    """Screenplay title from the title page (the text before the first slugline).

    An explicit ``Title:`` line wins; otherwise the first mostly upper-case
    line longer than three characters.  Falls back to ``DEFAULT_TITLE``.
    """
    first = SLUGLINE_RE.search(text)
    preamble = text[: first.start()] if first else text

    for raw in preamble.split("\n")[:_TITLE_SEARCH_LINES]:
        line = raw.strip()
        if _TITLE_LABEL_RE.match(line):
            title = _TITLE_LABEL_RE.sub("", line).strip()
            if title:
                return title
            continue
        if len(line) > 3 and _mostly_uppercase(line):
            return line
    return DEFAULT_TITLE
