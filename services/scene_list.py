"""Ordered scene list editing.

The module-level functions are pure: they take an immutable tuple of scenes
and return a new tuple (or a ``SceneEdit`` carrying one), never touching
their input. ``SceneListModel`` is the stateful owner a single caller keeps
for the open script; it applies those functions, tracks the selection and
the bridge busy flag, and notifies the caller after every change.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass

from core.exceptions import BridgeInProgressException, SynthesisException
from core.models import Scene, new_scene_id

logger = logging.getLogger(__name__)

Scenes = tuple[Scene, ...]

# (previous_content, next_content, characters, script_context) -> bridge text
Synthesize = Callable[[str, str, list[str], str | None], Awaitable[str]]


@dataclass(frozen=True, slots=True)
class SceneEdit:
    """Result of an edit that may move the selection.

    ``selection_changed`` is False for no-op edits. When it is True,
    ``selected_scene_id`` names the scene to select, or is ``None`` when the
    list became empty and nothing is selected.
    """

    scenes: Scenes
    selected_scene_id: str | None = None
    selection_changed: bool = False


# ---------------------------------------------------------------------------
# Pure operations
# ---------------------------------------------------------------------------


def add_scene(current: Sequence[Scene]) -> SceneEdit:
    """Append an empty scene titled ``New Scene N`` and select it."""
    existing_ids = {scene.id for scene in current}
    scene_id = new_scene_id()
    while scene_id in existing_ids:
        scene_id = new_scene_id()

    scene = Scene(id=scene_id, title=f"New Scene {len(current) + 1}")
    return SceneEdit(
        scenes=(*current, scene),
        selected_scene_id=scene.id,
        selection_changed=True,
    )


def delete_scene(current: Sequence[Scene], scene_id: str) -> SceneEdit:
    """Remove the scene with *scene_id* (no-op if absent) and select the first remaining."""
    remaining = tuple(scene for scene in current if scene.id != scene_id)
    return SceneEdit(
        scenes=remaining,
        selected_scene_id=remaining[0].id if remaining else None,
        selection_changed=True,
    )


def rename_scene(current: Sequence[Scene], scene_id: str, new_title: str) -> Scenes:
    return tuple(
        scene.model_copy(update={"title": new_title}, deep=True)
        if scene.id == scene_id
        else scene
        for scene in current
    )


def reorder_scenes(current: Sequence[Scene], from_index: int, to_index: int | None) -> Scenes:
    """Move the scene at *from_index* to *to_index*.

    A missing destination or an index outside ``0 <= i < len`` leaves the
    order unchanged.
    """
    items = list(current)
    if to_index is None or not _valid_index(items, from_index) or not _valid_index(items, to_index):
        return tuple(items)

    moved = items.pop(from_index)
    items.insert(to_index, moved)
    return tuple(items)


def merge_characters(*groups: Iterable[str]) -> list[str]:
    """Union of character names across *groups*, first occurrence wins."""
    merged: dict[str, None] = {}
    for group in groups:
        for name in group:
            merged.setdefault(name, None)
    return list(merged)


def build_bridge_scene(previous: Scene, following: Scene, content: str) -> Scene:
    return Scene(
        id=new_scene_id("bridge"),
        title=f"Bridge: {previous.title} → {following.title}",
        content=content,
        characters=merge_characters(previous.characters, following.characters),
        is_bridge_scene=True,
    )


async def create_bridge(
    current: Sequence[Scene],
    index: int,
    synthesize: Synthesize,
    script_context: str | None = None,
) -> SceneEdit:
    """Synthesize a scene between ``current[index - 1]`` and ``current[index]``.

    Requires ``0 < index < len(current)``; otherwise nothing changes and no
    selection is signalled. On success the bridge is inserted at *index* and
    selected. Any failure of *synthesize* raises ``SynthesisException`` and
    no scene is inserted.
    """
    scenes = tuple(current)
    if not 0 < index < len(scenes):
        logger.debug("Bridge index %d out of range for %d scenes", index, len(scenes))
        return SceneEdit(scenes=scenes)

    previous, following = scenes[index - 1], scenes[index]
    bridge = await _synthesize_bridge(previous, following, synthesize, script_context)

    return SceneEdit(
        scenes=(*scenes[:index], bridge, *scenes[index:]),
        selected_scene_id=bridge.id,
        selection_changed=True,
    )


async def _synthesize_bridge(
    previous: Scene,
    following: Scene,
    synthesize: Synthesize,
    script_context: str | None,
) -> Scene:
    characters = merge_characters(previous.characters, following.characters)
    try:
        content = await synthesize(previous.content, following.content, characters, script_context)
    except SynthesisException:
        raise
    except Exception as exc:
        logger.error("Failed to create bridge scene: %s", exc)
        raise SynthesisException(
            "Failed to generate scene bridge",
            details={"previous": previous.id, "next": following.id, "reason": str(exc)},
        ) from exc

    return build_bridge_scene(previous, following, content)


def insert_bridge(
    current: Sequence[Scene], bridge: Scene, previous_id: str, following_id: str
) -> Scenes:
    """Place *bridge* into a list that may have changed since it was requested.

    The bridge goes before the scene that followed it, else after the scene
    that preceded it, else at the end.
    """
    scenes = tuple(current)
    position = _index_of(scenes, following_id)
    if position is None:
        after = _index_of(scenes, previous_id)
        position = len(scenes) if after is None else after + 1
    return (*scenes[:position], bridge, *scenes[position:])


def _valid_index(items: Sequence[Scene], index: int) -> bool:
    return 0 <= index < len(items)


def _index_of(scenes: Sequence[Scene], scene_id: str) -> int | None:
    for i, scene in enumerate(scenes):
        if scene.id == scene_id:
            return i
    return None


# ---------------------------------------------------------------------------
# Stateful owner
# ---------------------------------------------------------------------------


class SceneListModel:
    """In-memory scene list for one open script.

    ``on_update`` receives the full scene tuple after every mutation (the
    caller persists it whole). ``on_select`` receives the id of the scene
    that became selected after add, delete or bridge.

    Only one bridge may be pending at a time; a second ``create_bridge``
    call while ``bridge_in_progress`` is set raises
    ``BridgeInProgressException``. Other edits may run while a bridge is
    pending. The finished bridge is then placed before the scene that
    followed it when requested, or after the preceding scene if that one
    was deleted meanwhile, or at the end if both are gone.
    """

    def __init__(
        self,
        scenes: Iterable[Scene] = (),
        on_update: Callable[[Scenes], None] | None = None,
        on_select: Callable[[str], None] | None = None,
    ) -> None:
        self._scenes: Scenes = tuple(scenes)
        self._on_update = on_update
        self._on_select = on_select
        self.selected_scene_id: str | None = None
        self.bridge_in_progress = False

    @property
    def scenes(self) -> Scenes:
        return self._scenes

    def __len__(self) -> int:
        return len(self._scenes)

    def add_scene(self) -> Scene:
        edit = add_scene(self._scenes)
        self._apply(edit)
        return edit.scenes[-1]

    def delete_scene(self, scene_id: str) -> None:
        self._apply(delete_scene(self._scenes, scene_id))

    def rename_scene(self, scene_id: str, new_title: str) -> None:
        self._replace(rename_scene(self._scenes, scene_id, new_title))

    def reorder(self, from_index: int, to_index: int | None) -> None:
        self._replace(reorder_scenes(self._scenes, from_index, to_index))

    async def create_bridge(
        self,
        index: int,
        synthesize: Synthesize,
        script_context: str | None = None,
    ) -> Scene | None:
        """Insert a synthesized bridge before position *index*.

        Returns the new scene, or ``None`` when *index* has no scene on both
        sides. Raises ``SynthesisException`` if synthesis fails; the scene
        list is then left exactly as it was.
        """
        if self.bridge_in_progress:
            raise BridgeInProgressException("A bridge scene is already being created")
        if not 0 < index < len(self._scenes):
            return None

        previous, following = self._scenes[index - 1], self._scenes[index]
        self.bridge_in_progress = True
        try:
            bridge = await _synthesize_bridge(previous, following, synthesize, script_context)
        finally:
            self.bridge_in_progress = False

        self._apply(
            SceneEdit(
                scenes=insert_bridge(self._scenes, bridge, previous.id, following.id),
                selected_scene_id=bridge.id,
                selection_changed=True,
            )
        )
        return bridge

    def _apply(self, edit: SceneEdit) -> None:
        self._replace(edit.scenes)
        if edit.selection_changed:
            self.selected_scene_id = edit.selected_scene_id
            if edit.selected_scene_id is not None and self._on_select is not None:
                self._on_select(edit.selected_scene_id)

    def _replace(self, scenes: Scenes) -> None:
        self._scenes = scenes
        if self._on_update is not None:
            self._on_update(scenes)
