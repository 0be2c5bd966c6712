"""PDF upload handling.

PDF screenplays are not text-extracted; the upload is accepted and replaced
by a single placeholder scene the writer can paste the screenplay into.
"""

import logging

from core.models import Scene, ScriptFormat, new_scene_id
from parsers.base import ParserBase

logger = logging.getLogger(__name__)

PDF_PLACEHOLDER_TITLE = "Scene 1"
PDF_PLACEHOLDER_CONTENT = (
    "PDF import does not extract text yet.\n"
    "Paste the screenplay text here, or upload it as a .txt or .fountain file "
    "to split it into scenes automatically."
)


class PDFParser(ParserBase):
    """Emit the fixed placeholder document for PDF uploads."""

    def parse(self, content: bytes) -> list[Scene]:
        logger.info("PDF upload (%d bytes) replaced by placeholder scene", len(content))
        return [
            Scene(
                id=new_scene_id(),
                title=PDF_PLACEHOLDER_TITLE,
                content=PDF_PLACEHOLDER_CONTENT,
            )
        ]

    @property
    def supported_format(self) -> ScriptFormat:
        return ScriptFormat.PDF
