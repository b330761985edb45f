"""Screenplay extractors (TXT, FDX, PDF) and the scene segmenter."""

from parsers.base import ExtractorBase, collect_partial, get_extractor
from parsers.fdx import FDXExtractor
from parsers.normalize import MIN_CONTENT_LENGTH, normalize_text
from parsers.pdf import PDFExtractor
from parsers.scene_splitter import extract_title, segment_scenes
from parsers.text import PlainTextExtractor

__all__ = [
    "MIN_CONTENT_LENGTH",
    "ExtractorBase",
    "FDXExtractor",
    "PDFExtractor",
    "PlainTextExtractor",
    "collect_partial",
    "get_extractor",
    "normalize_text",
    "extract_title",
    "segment_scenes",
]
