"""Tests for screenplay segmentation and upload parsers."""

import pytest

from core.exceptions import ParsingException
from core.models import ScriptFormat
from parsers import PDFParser, TextParser, detect_format, get_parser, segment_screenplay
from parsers.pdf import PDF_PLACEHOLDER_CONTENT
from parsers.scene_segmenter import FALLBACK_TITLE, find_scene_headings


class TestSegmentScreenplay:
    """Splitting raw text at scene headings."""

    def test_splits_at_int_and_ext(self):
        text = "INT. HOUSE - DAY\nAnna enters.\n\nEXT. PARK - NIGHT\nBen waits."
        scenes = segment_screenplay(text)

        assert [s.title for s in scenes] == ["INT. HOUSE - DAY", "EXT. PARK - NIGHT"]
        assert scenes[0].content == "INT. HOUSE - DAY\nAnna enters."
        assert scenes[1].content == "EXT. PARK - NIGHT\nBen waits."

    def test_no_heading_yields_single_verbatim_scene(self):
        text = "  Just some notes\nwithout headings.  "
        scenes = segment_screenplay(text)

        assert len(scenes) == 1
        assert scenes[0].title == FALLBACK_TITLE == "Scene 1"
        assert scenes[0].content == text

    def test_empty_text_yields_single_empty_scene(self):
        scenes = segment_screenplay("")
        assert len(scenes) == 1
        assert scenes[0].content == ""

    def test_combined_heading_forms(self):
        text = "INT/EXT. CAR - CONTINUOUS\nDriving.\nI/E. PORCH - DUSK\nRain."
        scenes = segment_screenplay(text)

        assert [s.title for s in scenes] == ["INT/EXT. CAR - CONTINUOUS", "I/E. PORCH - DUSK"]

    def test_text_before_first_heading_is_dropped(self):
        text = "TITLE PAGE\nby Someone\n\nINT. HOUSE - DAY\nAnna enters."
        scenes = segment_screenplay(text)

        assert len(scenes) == 1
        assert scenes[0].content.startswith("INT. HOUSE - DAY")
        assert "TITLE PAGE" not in scenes[0].content

    def test_heading_must_start_a_line(self):
        text = "INT. HOUSE - DAY\nShe says PRINT. ME and looks at EXT. signs.\n"
        assert len(segment_screenplay(text)) == 1

    def test_heading_inside_a_word_is_ignored(self):
        text = "INT. HOUSE - DAY\nPOINT. BLANK range.\nTEXT. MESSAGE arrives."
        assert [h.heading for h in find_scene_headings(text)] == ["INT. HOUSE - DAY"]

    def test_indented_heading_is_recognised(self):
        text = "INT. HOUSE - DAY\nA.\n    EXT. YARD - DAY\nB."
        scenes = segment_screenplay(text)
        assert [s.title for s in scenes] == ["INT. HOUSE - DAY", "EXT. YARD - DAY"]

    def test_matching_is_case_sensitive(self):
        text = "int. house - day\nLowercase heading."
        scenes = segment_screenplay(text)
        assert scenes[0].title == "Scene 1"

    def test_token_without_following_space_is_not_a_heading(self):
        assert find_scene_headings("INT.HOUSE\n") == []

    def test_ids_are_unique_and_scenes_are_not_bridges(self):
        text = "\n".join(f"INT. ROOM {i} - DAY\nAction {i}." for i in range(20))
        scenes = segment_screenplay(text)

        assert len(scenes) == 20
        assert len({s.id for s in scenes}) == 20
        assert not any(s.is_bridge_scene for s in scenes)
        assert all(s.characters == [] for s in scenes)

    def test_crlf_line_endings(self):
        text = "INT. HOUSE - DAY\r\nAnna.\r\nEXT. PARK - NIGHT\r\nBen."
        scenes = segment_screenplay(text)
        assert [s.title for s in scenes] == ["INT. HOUSE - DAY", "EXT. PARK - NIGHT"]


class TestFormatDetection:
    """Picking a parser for an upload."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("draft.txt", ScriptFormat.TEXT),
            ("draft.fountain", ScriptFormat.FOUNTAIN),
            ("DRAFT.PDF", ScriptFormat.PDF),
            ("README", ScriptFormat.TEXT),
        ],
    )
    def test_detect_by_extension(self, filename, expected):
        assert detect_format(filename, b"INT. HOUSE - DAY") == expected

    def test_pdf_magic_bytes_win_over_extension(self):
        assert detect_format("draft.txt", b"%PDF-1.7\n...") == ScriptFormat.PDF

    def test_unknown_extension_raises(self):
        with pytest.raises(ParsingException, match="Unsupported file type"):
            detect_format("draft.docx", b"PK\x03\x04")

    def test_unknown_format_has_no_parser(self):
        with pytest.raises(ParsingException):
            get_parser("fdx")

    def test_parsers_registered(self):
        assert isinstance(get_parser("txt"), TextParser)
        assert isinstance(get_parser(ScriptFormat.FOUNTAIN), TextParser)
        assert isinstance(get_parser(ScriptFormat.PDF), PDFParser)


class TestParsers:
    def test_text_parser_strips_bom(self):
        scenes = TextParser().parse(b"\xef\xbb\xbfINT. HOUSE - DAY\nAnna.")
        assert scenes[0].title == "INT. HOUSE - DAY"

    @pytest.mark.parametrize("newline", [b"\r", b"\r\n"])
    def test_text_parser_splits_on_any_line_ending(self, newline):
        content = newline.join([b"INT. HOUSE - DAY", b"Anna.", b"EXT. PARK - NIGHT", b"Ben."])
        scenes = TextParser().parse(content)

        assert [s.title for s in scenes] == ["INT. HOUSE - DAY", "EXT. PARK - NIGHT"]
        assert "\r" not in scenes[0].content

    def test_text_parser_rejects_binary(self):
        with pytest.raises(ParsingException):
            TextParser().parse(b"INT.\x00\x01\x02")

    def test_pdf_yields_placeholder_scene(self):
        scenes = PDFParser().parse(b"%PDF-1.4 binary")

        assert len(scenes) == 1
        assert scenes[0].title == "Scene 1"
        assert scenes[0].content == PDF_PLACEHOLDER_CONTENT
        assert PDFParser().supported_format == ScriptFormat.PDF
