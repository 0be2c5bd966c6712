"""Plain-text and Fountain screenplay parser."""

import logging

from core.exceptions import ParsingException
from core.models import Scene, ScriptFormat
from parsers.base import ParserBase
from parsers.scene_segmenter import segment_screenplay

logger = logging.getLogger(__name__)


class TextParser(ParserBase):
    """Decode UTF-8 text and segment it at scene headings."""

    def parse(self, content: bytes) -> list[Scene]:
        if b"\x00" in content[:1000]:
            raise ParsingException("Text upload contains binary data")

        # A leading BOM would hide a heading on the first line.
        text = content.decode("utf-8-sig", errors="replace")
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        scenes = segment_screenplay(text)
        logger.debug("TextParser produced %d scenes from %d bytes", len(scenes), len(content))
        return scenes

    @property
    def supported_format(self) -> ScriptFormat:
        return ScriptFormat.TEXT
