"""Pydantic models for scenes, scripts and API request/response schemas."""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def new_scene_id(prefix: str = "scene") -> str:
    """Return a fresh collision-resistant scene identifier."""
    return f"{prefix}-{uuid4().hex}"


SCENE_ID_MAX_LENGTH = 100


def duplicate_scene_ids(scenes: Iterable["Scene"]) -> list[str]:
    """Ids that occur more than once in *scenes*, in first-seen order."""
    seen: set[str] = set()
    duplicates: dict[str, None] = {}
    for scene in scenes:
        if scene.id in seen:
            duplicates.setdefault(scene.id, None)
        seen.add(scene.id)
    return list(duplicates)


def _check_unique_ids(scenes: list["Scene"] | None) -> list["Scene"] | None:
    if scenes:
        duplicates = duplicate_scene_ids(scenes)
        if duplicates:
            raise ValueError(f"Scene ids must be unique within a script: {', '.join(duplicates)}")
    return scenes


class ScriptFormat(str, Enum):
    """Supported screenplay upload formats."""

    TEXT = "txt"
    FOUNTAIN = "fountain"
    PDF = "pdf"  # accepted, but not segmented


class EnhancementType(str, Enum):
    """Kinds of AI-assisted scene enhancement."""

    DIALOGUE = "dialogue"
    ACTION = "action"
    CHARACTER_DEVELOPMENT = "characterDevelopment"
    PLOT_DEVELOPMENT = "plotDevelopment"


class ChatRole(str, Enum):
    """Roles accepted in an assistant conversation history."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# ---------------------------------------------------------------------------
# Scene / Script document model
# ---------------------------------------------------------------------------


class Scene(BaseModel):
    """One narrative unit of a script.

    Scenes are immutable values; every edit produces a new ``Scene`` via
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=new_scene_id,
        min_length=1,
        max_length=SCENE_ID_MAX_LENGTH,
        description="Unique scene identifier",
    )
    title: str = Field(..., description="Human-readable scene label")
    content: str = Field(default="", description="Scene body text")
    characters: list[str] = Field(
        default_factory=list, description="Character names appearing in the scene"
    )
    is_bridge_scene: bool = Field(
        default=False, description="True for scenes synthesized between two neighbours"
    )

    @field_validator("content", mode="before")
    @classmethod
    def coerce_content(cls, v: Any) -> Any:
        """Stored documents may carry a null body."""
        return "" if v is None else v

    @field_validator("characters", mode="before")
    @classmethod
    def dedupe_characters(cls, v: Any) -> Any:
        """Drop duplicate and blank character names, keeping first occurrence."""
        if v is None:
            return []
        if not isinstance(v, list | tuple | set | frozenset):
            return v
        seen: dict[str, None] = {}
        for name in v:
            name = str(name).strip()
            if name:
                seen.setdefault(name, None)
        return list(seen)


class Script(BaseModel):
    """A named, user-owned ordered collection of scenes."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Script identifier")
    title: str = Field(..., description="Script title")
    description: str | None = Field(None, description="Optional logline or notes")
    user_id: str = Field(..., description="Owning user")
    scenes: list[Scene] = Field(default_factory=list, description="Scenes in narrative order")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")


# ---------------------------------------------------------------------------
# Script requests
# ---------------------------------------------------------------------------


class ScriptCreateRequest(BaseModel):
    """Request body for creating a script."""

    title: str = Field(..., min_length=1, max_length=500, description="Script title")
    description: str = Field(default="", max_length=5000, description="Optional description")
    scenes: list[Scene] = Field(default_factory=list, description="Initial scene list")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("scenes")
    @classmethod
    def validate_unique_ids(cls, v: list[Scene]) -> list[Scene]:
        return _check_unique_ids(v)


class ScriptUpdateRequest(BaseModel):
    """Request body for updating a script; omitted fields are left alone."""

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    scenes: list[Scene] | None = Field(
        None, description="Replacement scene list (whole collection)"
    )

    @field_validator("scenes")
    @classmethod
    def validate_unique_ids(cls, v: list[Scene] | None) -> list[Scene] | None:
        return _check_unique_ids(v)


class ScriptListResponse(BaseModel):
    """All scripts owned by the caller."""

    scripts: list[Script] = Field(default_factory=list)
    total: int = Field(..., description="Number of scripts")


class DeleteResponse(BaseModel):
    """Acknowledgement for delete operations."""

    success: bool = Field(default=True)
    message: str = Field(default="Script deleted successfully")


# ---------------------------------------------------------------------------
# Scene list operations
# ---------------------------------------------------------------------------


class RenameSceneRequest(BaseModel):
    """Rename a scene. Any string, including an empty one, is accepted."""

    title: str = Field(..., max_length=500)


class ReorderScenesRequest(BaseModel):
    """Move the scene at ``from_index`` to ``to_index``.

    ``to_index`` is ``None`` when a drag gesture ended without a drop target.
    """

    from_index: int = Field(..., description="Current position of the scene")
    to_index: int | None = Field(None, description="Destination position")


class CreateBridgeRequest(BaseModel):
    """Insert a synthesized bridge scene before position ``index``."""

    index: int = Field(..., description="Position of the following scene")
    script_context: str | None = Field(
        None, max_length=5000, description="Optional free-text context about the script"
    )


class SceneEditResponse(BaseModel):
    """Scene collection after an edit, plus the scene to open next (if any)."""

    script_id: UUID = Field(..., description="Script the scenes belong to")
    scenes: list[Scene] = Field(default_factory=list, description="Scenes in narrative order")
    selected_scene_id: str | None = Field(
        None, description="Scene the client should select, if the edit changed selection"
    )


# ---------------------------------------------------------------------------
# AI assistant requests
# ---------------------------------------------------------------------------


class SceneBridgeRequest(BaseModel):
    """Request body for stand-alone bridge generation."""

    previous_scene: str = Field(..., min_length=1, description="Text of the preceding scene")
    next_scene: str = Field(..., min_length=1, description="Text of the following scene")
    characters: list[str] = Field(default_factory=list, description="Characters to include")
    script_context: str | None = Field(None, max_length=5000)


class SceneBridgeResponse(BaseModel):
    generated_scene: str = Field(..., description="Synthesized bridging scene")


class SceneEnhancementRequest(BaseModel):
    """Request body for scene enhancement."""

    scene_content: str = Field(..., min_length=1, description="Scene text to enhance")
    enhancement_type: EnhancementType = Field(..., description="Aspect to improve")
    characters: list[str] = Field(default_factory=list)
    script_context: str | None = Field(None, max_length=5000)


class SceneEnhancementResponse(BaseModel):
    enhanced_scene: str = Field(..., description="Rewritten scene")


class SceneSuggestionsRequest(BaseModel):
    """Request body for improvement suggestions."""

    scene_content: str = Field(..., min_length=1)
    characters: list[str] = Field(default_factory=list)


class SceneSuggestionsResponse(BaseModel):
    suggestions: list[str] = Field(default_factory=list)


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


class ChatRequest(BaseModel):
    """A message for the screenwriting assistant plus prior turns."""

    message: str = Field(..., min_length=1, max_length=10_000)
    conversation_history: list[ChatMessage] = Field(default_factory=list, max_length=100)


class ChatResponse(BaseModel):
    response: str


# ---------------------------------------------------------------------------
# Health / errors
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy", description="Service health status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")
    version: str = Field(default="0.1.0", description="API version")


class ReadinessResponse(BaseModel):
    """Readiness check response with dependency status."""

    status: str = Field(..., description="Overall readiness status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")
    services: dict[str, bool] = Field(..., description="Service availability status")


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(None, description="Field that caused the error")
    message: str = Field(..., description="Error message")
    error_code: str | None = Field(None, description="Error code for programmatic handling")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(default_factory=list, description="Detailed error info")
    request_id: str | None = Field(None, description="Request tracking ID")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
