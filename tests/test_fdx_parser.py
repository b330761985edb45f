"""Tests for the Final Draft (.fdx) extractor and secure XML parsing."""

import pytest
from conftest import read_fdx

import parsers.fdx as fdx_module
from core.exceptions import ExtractionException
from core.models import ErrorCode, ScriptFormat
from parsers.base import get_extractor
from parsers.fdx import MAX_FDX_BYTES, FDXExtractor, format_paragraph
from parsers.scene_splitter import segment_scenes
from parsers.secure_xml import parse_xml_safe

# ===================================================================
# Secure XML
# ===================================================================


class TestSecureXML:
    """Tests for parsers.secure_xml.parse_xml_safe."""

    def test_valid_xml(self):
        root = parse_xml_safe(b"<FinalDraft><Content/></FinalDraft>", max_size=1024)
        assert root.tag == "FinalDraft"

    def test_xxe_rejected(self):
        with pytest.raises(ExtractionException) as exc_info:
            parse_xml_safe(read_fdx("xxe_attack.fdx"), max_size=MAX_FDX_BYTES)
        assert exc_info.value.code == ErrorCode.MALFORMED_XML

    def test_entity_bomb_rejected(self):
        with pytest.raises(ExtractionException) as exc_info:
            parse_xml_safe(read_fdx("entity_bomb.fdx"), max_size=MAX_FDX_BYTES)
        assert exc_info.value.code == ErrorCode.MALFORMED_XML
        assert exc_info.value.details["reason"] == "entities_forbidden"

    def test_malformed(self):
        with pytest.raises(ExtractionException) as exc_info:
            parse_xml_safe(read_fdx("malformed.fdx"), max_size=MAX_FDX_BYTES)
        assert exc_info.value.code == ErrorCode.MALFORMED_XML
        assert exc_info.value.details["reason"] == "parse_error"

    def test_size_limit(self):
        with pytest.raises(ExtractionException) as exc_info:
            parse_xml_safe(b"<FinalDraft/>", max_size=5)
        assert exc_info.value.code == ErrorCode.FILE_TOO_LARGE


# ===================================================================
# Paragraph formatting
# ===================================================================


class TestFormatParagraph:
    """Tests for parsers.fdx.format_paragraph."""

    def test_scene_heading(self):
        assert format_paragraph("Scene Heading", "int. kitchen - day") == ["\nINT. KITCHEN - DAY\n"]

    def test_action(self):
        assert format_paragraph("Action", "She enters.") == ["She enters.", ""]

    def test_character(self):
        assert format_paragraph("Character", "Anna") == ["\nANNA"]

    @pytest.mark.parametrize("text", ["to herself", "(to herself)", "( to herself )"])
    def test_parenthetical_wrapped_once(self, text):
        assert format_paragraph("Parenthetical", text) == ["(to herself)"]

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("(to Bob (quietly))", "(to Bob (quietly))"),
            ("re: item (b)", "(re: item (b))"),
            ("(a) or (b)", "(a) or (b)"),
        ],
    )
    def test_parenthetical_inner_groups_kept(self, text, expected):
        assert format_paragraph("Parenthetical", text) == [expected]

    def test_transition(self):
        assert format_paragraph("Transition", "cut to:") == ["\nCUT TO:\n"]

    @pytest.mark.parametrize("ptype", ["Dialogue", "Shot", "General", "Unknown"])
    def test_passthrough(self, ptype):
        assert format_paragraph(ptype, "As written.") == ["As written."]


# ===================================================================
# FDX extractor
# ===================================================================


class TestFDXExtractor:
    """Tests for parsers.fdx.FDXExtractor."""

    def test_supported_format(self):
        assert FDXExtractor().supported_format == ScriptFormat.FDX

    def test_simple_scene(self):
        text = FDXExtractor().extract(read_fdx("simple_scene.fdx"))

        assert text.startswith("INT. KITCHEN - DAY")
        assert "She enters, drops her keys" in text
        assert "\nANNA\n(to herself)\nNot again." in text
        assert text.endswith("CUT TO:")

    def test_simple_scene_segments_to_one_scene(self):
        text = FDXExtractor().extract(read_fdx("simple_scene.fdx"))
        scenes = segment_scenes(text)

        assert len(scenes) == 1
        assert scenes[0].text.startswith("INT. KITCHEN - DAY")

    def test_multi_scene(self):
        text = FDXExtractor().extract(read_fdx("multi_scene.fdx"))

        assert "INT. POLICE STATION - NIGHT" in text
        assert "EXT. HARBOR - CONTINUOUS" in text
        assert "INT./EXT. MARIA'S CAR - MOVING - LATER" in text
        assert "(nervous)" in text
        assert "CLOSE ON the figure's boots." in text
        assert "\nDAVID\nWhere are you headed?" in text

        scenes = segment_scenes(text)
        assert [s.heading for s in scenes] == [
            "INT. POLICE STATION - NIGHT",
            "EXT. HARBOR - CONTINUOUS",
            "INT./EXT. MARIA'S CAR - MOVING - LATER",
        ]

    def test_styled_runs_concatenated(self):
        text = FDXExtractor().extract(read_fdx("styled_runs.fdx"))

        assert text.startswith("EXT. ROOFTOP - NIGHT")
        assert "The city glitters below. Something moves on the ledge." in text
        assert "Wind tears at the antenna mast" in text
        assert "An untyped paragraph is kept as written." in text

    def test_paragraphs_outside_content(self):
        text = FDXExtractor().extract(read_fdx("fallback_paragraphs.fdx"))
        assert text.startswith("INT. LIBRARY - EVENING")

    def test_output_is_normalized(self):
        text = FDXExtractor().extract(read_fdx("multi_scene.fdx"))
        assert "\n\n\n\n" not in text
        assert text == text.strip()

    def test_invalid_utf8(self):
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor().extract(b"\xff\xfe<FinalDraft></FinalDraft>")
        assert exc_info.value.code == ErrorCode.DECODE_ERROR

    def test_not_xml(self):
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor().extract(b"INT. HOUSE - DAY\nThis is a plain text screenplay.")
        assert exc_info.value.code == ErrorCode.NOT_FDX_FORMAT

    def test_malformed(self):
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor().extract(read_fdx("malformed.fdx"))
        assert exc_info.value.code == ErrorCode.MALFORMED_XML

    def test_xxe(self):
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor().extract(read_fdx("xxe_attack.fdx"))
        assert exc_info.value.code == ErrorCode.MALFORMED_XML

    def test_no_paragraphs(self):
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor().extract(read_fdx("no_paragraphs.fdx"))
        assert exc_info.value.code == ErrorCode.NO_PARAGRAPHS

    def test_only_empty_paragraphs(self):
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor().extract(read_fdx("empty_paragraphs.fdx"))
        assert exc_info.value.code == ErrorCode.INSUFFICIENT_CONTENT

    def test_document_over_size_limit(self):
        content = read_fdx("simple_scene.fdx")
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor(max_xml_bytes=len(content) - 1).extract(content)
        assert exc_info.value.code == ErrorCode.FILE_TOO_LARGE
        assert exc_info.value.details["max_size"] == len(content) - 1

    def test_size_limit_from_factory(self):
        extractor = get_extractor("fdx", fdx_options={"max_xml_bytes": 2048})
        assert isinstance(extractor, FDXExtractor)
        assert extractor.max_xml_bytes == 2048

    def test_too_short(self):
        content = (
            b'<?xml version="1.0"?><FinalDraft><Content>'
            b'<Paragraph Type="Scene Heading"><Text>INT. HALL - DAY</Text></Paragraph>'
            b"</Content></FinalDraft>"
        )
        with pytest.raises(ExtractionException) as exc_info:
            FDXExtractor().extract(content)
        assert exc_info.value.code == ErrorCode.INSUFFICIENT_CONTENT

    def test_failing_paragraph_skipped(self, monkeypatch, caplog):
        original = fdx_module.format_paragraph

        def flaky(ptype: str, text: str) -> list[str]:
            if ptype == "Character":
                raise ValueError("unreadable paragraph")
            return original(ptype, text)

        monkeypatch.setattr(fdx_module, "format_paragraph", flaky)
        with caplog.at_level("WARNING"):
            text = FDXExtractor().extract(read_fdx("simple_scene.fdx"))

        assert "ANNA" not in text
        assert "Not again." in text
        assert "Skipping FDX paragraph 3" in caplog.text
