"""Script persistence over SQLAlchemy.

Scenes are stored as one JSON array per script and are always written back
whole; the last save wins.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.db_models import ScriptModel
from core.exceptions import NotFoundException, ValidationException
from core.models import Scene, Script, duplicate_scene_ids

logger = logging.getLogger(__name__)


def _dump_scenes(scenes: Iterable[Scene]) -> list[dict]:
    scenes = list(scenes)
    duplicates = duplicate_scene_ids(scenes)
    if duplicates:
        raise ValidationException(
            "Scene ids must be unique within a script",
            details={"scene_ids": ", ".join(duplicates)},
        )
    return [scene.model_dump(mode="json") for scene in scenes]


def _load_scenes(raw: list | None) -> tuple[Scene, ...]:
    return tuple(Scene.model_validate(item) for item in raw or [])


def to_script(row: ScriptModel) -> Script:
    return Script(
        id=row.id,
        title=row.title,
        description=row.description,
        user_id=row.user_id,
        scenes=list(_load_scenes(row.scenes)),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class ScriptRepository:
    """User-scoped CRUD for scripts plus whole-collection scene load/save."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_row(self, script_id: UUID, user_id: str) -> ScriptModel:
        stmt = (
            select(ScriptModel)
            .where(
                ScriptModel.id == script_id,
                ScriptModel.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundException(
                "Script not found or access denied",
                details={"script_id": str(script_id)},
            )
        return row

    async def list_scripts(self, user_id: str) -> list[Script]:
        stmt = (
            select(ScriptModel)
            .where(ScriptModel.user_id == user_id)
            .order_by(ScriptModel.updated_at.desc())
        )
        result = await self.session.execute(stmt)
        return [to_script(row) for row in result.scalars().all()]

    async def get_script(self, script_id: UUID, user_id: str) -> Script:
        return to_script(await self._get_row(script_id, user_id))

    async def create_script(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        scenes: Iterable[Scene] = (),
    ) -> Script:
        now = datetime.utcnow()
        row = ScriptModel(
            user_id=user_id,
            title=title,
            description=description,
            scenes=_dump_scenes(scenes),
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        await self.session.commit()
        logger.info("Created script %s for user %s (%d scenes)", row.id, user_id, len(row.scenes))
        return to_script(row)

    async def update_script(
        self,
        script_id: UUID,
        user_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        scenes: Iterable[Scene] | None = None,
    ) -> Script:
        """Update the given fields; ``scenes`` replaces the whole collection."""
        row = await self._get_row(script_id, user_id)
        if title is not None:
            row.title = title
        if description is not None:
            row.description = description
        if scenes is not None:
            row.scenes = _dump_scenes(scenes)
        row.updated_at = datetime.utcnow()
        await self.session.commit()
        return to_script(row)

    async def delete_script(self, script_id: UUID, user_id: str) -> None:
        row = await self._get_row(script_id, user_id)
        await self.session.delete(row)
        await self.session.commit()
        logger.info("Deleted script %s", script_id)

    async def load_scenes(self, script_id: UUID, user_id: str) -> tuple[Scene, ...]:
        row = await self._get_row(script_id, user_id)
        return _load_scenes(row.scenes)

    async def save_scenes(
        self, script_id: UUID, user_id: str, scenes: Iterable[Scene]
    ) -> tuple[Scene, ...]:
        """Replace the stored scene collection with *scenes*."""
        scenes = tuple(scenes)
        row = await self._get_row(script_id, user_id)
        row.scenes = _dump_scenes(scenes)
        row.updated_at = datetime.utcnow()
        await self.session.commit()
        logger.debug("Saved %d scenes for script %s", len(scenes), script_id)
        return scenes
