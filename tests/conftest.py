"""Pytest configuration and fixtures."""

import base64
import io
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from api.config import Settings, get_settings

FDX_FIXTURES = Path(__file__).parent / "fixtures" / "fdx"

# Standard screenplay: Courier 12pt
FONT = "Courier"
FONT_SIZE = 12
LINE_HEIGHT = 14
GLYPH_PITCH = 14  # letter-spaced PDFs: one glyph every 14pt

SCREENPLAY_TEXT = """TITLE PAGE

INT. LIVING ROOM - DAY

A cozy living room with sunlight streaming through the windows.

                         SARAH
          Good morning, everyone.

EXT. GARDEN - MORNING

Tom steps outside and stretches. Birds sing in the trees.

                         TOM
          What a beautiful day.
"""


def read_fdx(name: str) -> bytes:
    return (FDX_FIXTURES / name).read_bytes()


def b64(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def build_pdf(
    pages: list[list[str]],
    *,
    letter_spaced: bool = False,
    encrypt: str | None = None,
) -> bytes:
    """Render *pages* of text lines into an in-memory PDF."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=LETTER, encrypt=encrypt)
    for lines in pages:
        c.setFont(FONT, FONT_SIZE)
        y = LETTER[1] - 72
        for line in lines:
            if letter_spaced:
                for i, ch in enumerate(line):
                    if not ch.isspace():
                        c.drawString(72 + i * GLYPH_PITCH, y, ch)
            else:
                c.drawString(72, y, line)
            y -= LINE_HEIGHT
        if not lines:
            # Image-only page stand-in: graphics, no text
            c.rect(72, 72, 200, 200, fill=1)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def pdf_builder() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture
def screenplay_text() -> str:
    return SCREENPLAY_TEXT


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the process environment cache."""
    return Settings()


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    from api.main import app

    return TestClient(app)
