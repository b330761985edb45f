"""Scene heading (slug line) parser.

Parses strings like:
    INT. KITCHEN - DAY           -> (INT, "KITCHEN", DAY)
    EXT. FOREST - NIGHT          -> (EXT, "FOREST", NIGHT)
    INT./EXT. CAR - MOMENTS LATER -> (INT/EXT, "CAR", CONTINUOUS)
    12 INT. HALL - DAY 12        -> (INT, "HALL", DAY)
"""

import re
from dataclasses import dataclass

from core.models import LocationType, TimeOfDay

# ---------------------------------------------------------------------------
# Time-of-day mapping
# ---------------------------------------------------------------------------

_TIME_MAP: dict[str, TimeOfDay] = {
    "DAY": TimeOfDay.DAY,
    "NIGHT": TimeOfDay.NIGHT,
    "DAWN": TimeOfDay.DAWN,
    "SUNRISE": TimeOfDay.DAWN,
    "DUSK": TimeOfDay.DUSK,
    "SUNSET": TimeOfDay.DUSK,
    "MORNING": TimeOfDay.MORNING,
    "AFTERNOON": TimeOfDay.AFTERNOON,
    "EVENING": TimeOfDay.EVENING,
    "CONTINUOUS": TimeOfDay.CONTINUOUS,
    "CONT": TimeOfDay.CONTINUOUS,
    "LATER": TimeOfDay.CONTINUOUS,
    "SAME": TimeOfDay.CONTINUOUS,
    "SAME TIME": TimeOfDay.CONTINUOUS,
    "MOMENTS LATER": TimeOfDay.CONTINUOUS,
    "A MOMENT LATER": TimeOfDay.CONTINUOUS,
    "SECONDS LATER": TimeOfDay.CONTINUOUS,
    "MINUTES LATER": TimeOfDay.CONTINUOUS,
    "HOURS LATER": TimeOfDay.CONTINUOUS,
    "SHORTLY AFTER": TimeOfDay.CONTINUOUS,
}

# ---------------------------------------------------------------------------
# Location-type prefixes (order matters -- longer matches first)
# ---------------------------------------------------------------------------

_LOC_PREFIXES: list[tuple[str, LocationType]] = [
    ("INT./EXT.", LocationType.INT_EXT),
    ("INT/EXT.", LocationType.INT_EXT),
    ("EXT./INT.", LocationType.INT_EXT),
    ("EXT/INT.", LocationType.INT_EXT),
    ("I/E.", LocationType.INT_EXT),
    ("INT.", LocationType.INT),
    ("EXT.", LocationType.EXT),
]

# Separator between location and time-of-day (dash variants)
_SEP_RE = re.compile(r"\s*[-–—]\s*")
# Production scene numbers printed before/after the heading ("12 INT. ... 12")
_LEADING_NUMBER_RE = re.compile(r"^\d+[A-Z]?\.?\s+")
_TRAILING_NUMBERS_RE = re.compile(r"(?:\s+\d+[A-Z]?)+$")


@dataclass(frozen=True, slots=True)
class HeadingComponents:
    """Parsed components of a scene heading."""

    location_type: LocationType
    location: str
    time_of_day: TimeOfDay


def parse_scene_heading(heading: str) -> HeadingComponents:
    """Parse a scene heading string into its constituent parts.

    Returns ``HeadingComponents`` with best-effort extraction.  Unknown
    location types or times default to ``UNKNOWN``.
    """
    text = _LEADING_NUMBER_RE.sub("", heading.strip())
    text = _TRAILING_NUMBERS_RE.sub("", text)
    upper = text.upper()

    # 1. Determine location type by prefix
    loc_type = LocationType.UNKNOWN
    remainder = text
    for prefix, lt in _LOC_PREFIXES:
        if upper.startswith(prefix):
            loc_type = lt
            remainder = text[len(prefix) :].strip()
            break

    # 2. Split remainder on last separator to get location and time-of-day
    parts = _SEP_RE.split(remainder)
    if len(parts) >= 2:
        location = " - ".join(parts[:-1]).strip()
        raw_time = parts[-1].strip().upper()
    else:
        location = remainder.strip()
        raw_time = ""

    location = location.strip(". ")

    # 3. Map time-of-day
    tod = _TIME_MAP.get(raw_time, TimeOfDay.UNKNOWN)

    return HeadingComponents(
        location_type=loc_type,
        location=location if location else heading.strip(),
        time_of_day=tod,
    )
