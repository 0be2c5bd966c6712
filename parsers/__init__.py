"""Screenplay upload parsers and the plain-text scene segmenter."""

from parsers.base import ParserBase, detect_format, get_parser
from parsers.pdf import PDFParser
from parsers.scene_segmenter import segment_screenplay
from parsers.text import TextParser

__all__ = [
    "PDFParser",
    "ParserBase",
    "TextParser",
    "detect_format",
    "get_parser",
    "segment_screenplay",
]
