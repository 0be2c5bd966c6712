"""Abstract base class for upload parsers, parser factory and format detection."""

from abc import ABC, abstractmethod
from pathlib import PurePath

from core.exceptions import ParsingException
from core.models import Scene, ScriptFormat

_EXTENSIONS: dict[str, ScriptFormat] = {
    ".txt": ScriptFormat.TEXT,
    ".text": ScriptFormat.TEXT,
    ".fountain": ScriptFormat.FOUNTAIN,
    ".spmd": ScriptFormat.FOUNTAIN,
    ".pdf": ScriptFormat.PDF,
}


class ParserBase(ABC):
    """Interface that every upload parser must implement."""

    @abstractmethod
    def parse(self, content: bytes) -> list[Scene]:
        """Turn raw file bytes into an ordered list of scenes.

        Implementations MUST NOT write anything to disk.
        """

    @property
    @abstractmethod
    def supported_format(self) -> ScriptFormat:
        """The ``ScriptFormat`` this parser handles."""


def detect_format(filename: str | None, content: bytes) -> ScriptFormat:
    """Pick the upload format from the file extension, falling back to magic bytes.

    Raises ``ParsingException`` when the file is neither text nor PDF.
    """
    if content[:5].startswith(b"%PDF"):
        return ScriptFormat.PDF

    suffix = PurePath(filename or "").suffix.lower()
    fmt = _EXTENSIONS.get(suffix)
    if fmt is not None:
        return fmt

    if not suffix and b"\x00" not in content[:1000]:
        return ScriptFormat.TEXT

    raise ParsingException(
        f"Unsupported file type: {suffix or 'unknown'}",
        details={"filename": filename, "supported": sorted(_EXTENSIONS)},
    )


def get_parser(fmt: str | ScriptFormat) -> ParserBase:
    """Return the appropriate parser for *fmt* (e.g. ``"txt"``, ``"pdf"``).

    Raises ``ParsingException`` for unsupported formats.
    """
    from parsers.pdf import PDFParser
    from parsers.text import TextParser

    _registry: dict[str, type[ParserBase]] = {
        ScriptFormat.TEXT.value: TextParser,
        ScriptFormat.FOUNTAIN.value: TextParser,
        ScriptFormat.PDF.value: PDFParser,
    }

    key = fmt.value if isinstance(fmt, ScriptFormat) else fmt.lower()
    parser_cls = _registry.get(key)
    if parser_cls is None:
        raise ParsingException(
            f"Unsupported script format: {fmt}",
            details={"format": str(fmt), "supported": list(_registry.keys())},
        )
    return parser_cls()
