"""Deterministic scene segmenter for plain-text screenplays.

Splits raw text at scene headings (slug lines) such as::

    INT. HOUSE - DAY
    EXT. PARK - NIGHT
    INT/EXT. CAR - CONTINUOUS
    I/E. PORCH - DUSK

Each heading starts a new scene that runs up to the next heading.
"""

import logging
import re
from dataclasses import dataclass

from core.models import Scene, new_scene_id

logger = logging.getLogger(__name__)

# Case-sensitive; anchored to start-of-line via MULTILINE so a token is never
# matched inside a longer word (e.g. "PRINT. ME").
SCENE_HEADING_RE = re.compile(
    r"^[ \t]*(?P<heading>"
    r"(?:INT/EXT\.|I/E\.|INT\.|EXT\.)"
    r"[ \t]+[^\r\n]*"
    r")",
    re.MULTILINE,
)

FALLBACK_TITLE = "Scene 1"


@dataclass(frozen=True, slots=True)
class HeadingMatch:
    """A scene heading found in the source text."""

    heading: str
    start: int


def find_scene_headings(text: str) -> list[HeadingMatch]:
    """Return every scene heading in *text* in document order."""
    return [
        HeadingMatch(heading=m.group("heading").strip(), start=m.start("heading"))
        for m in SCENE_HEADING_RE.finditer(text)
    ]


def segment_screenplay(text: str) -> list[Scene]:
    """Split *text* into scenes at scene-heading markers.

    - Without any heading the whole input becomes one scene titled
      ``"Scene 1"`` with the text kept verbatim.
    - Otherwise each heading yields one scene whose content runs from the
      heading to the next heading (or end of text), stripped of surrounding
      whitespace. Text before the first heading is not kept.
    """
    headings = find_scene_headings(text)

    if not headings:
        logger.debug("No scene headings found, returning single scene")
        return [Scene(id=new_scene_id(), title=FALLBACK_TITLE, content=text)]

    scenes: list[Scene] = []
    for i, match in enumerate(headings):
        end = headings[i + 1].start if i + 1 < len(headings) else len(text)
        scenes.append(
            Scene(
                id=new_scene_id(),
                title=match.heading,
                content=text[match.start : end].strip(),
            )
        )

    logger.info("Segmented screenplay into %d scenes", len(scenes))
    return scenes
