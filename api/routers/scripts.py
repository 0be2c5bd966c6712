"""Script and scene list endpoints.

Every scene operation loads the script's scene list, applies one edit from
``services.scene_list`` and writes the whole list back.
"""

import logging
import uuid
from pathlib import PurePath

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, UploadFile, status

from api.config import get_settings
from api.dependencies import get_bridge_synthesizer, get_script_repository, verify_api_key
from api.rate_limiting import rate_limit_combined
from core.db_models import ApiKeyModel
from core.exceptions import BridgeInProgressException
from core.models import (
    CreateBridgeRequest,
    DeleteResponse,
    RenameSceneRequest,
    ReorderScenesRequest,
    SceneEditResponse,
    Script,
    ScriptCreateRequest,
    ScriptListResponse,
    ScriptUpdateRequest,
)
from parsers.base import detect_format, get_parser
from services.bridge_synthesizer import BridgeSynthesizer
from services.scene_list import (
    SceneEdit,
    SceneListModel,
    add_scene,
    delete_scene,
    insert_bridge,
    rename_scene,
    reorder_scenes,
)
from services.script_repository import ScriptRepository

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(rate_limit_combined)])

# Scripts with a bridge synthesis in flight in this process.
_bridges_in_progress: set[uuid.UUID] = set()


def _edit_response(script_id: uuid.UUID, edit: SceneEdit) -> SceneEditResponse:
    return SceneEditResponse(
        script_id=script_id,
        scenes=list(edit.scenes),
        selected_scene_id=edit.selected_scene_id,
    )


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=ScriptListResponse,
    summary="List scripts",
    description="All scripts owned by the caller, most recently updated first.",
)
async def list_scripts(
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> ScriptListResponse:
    scripts = await repo.list_scripts(api_key.user_id)
    return ScriptListResponse(scripts=scripts, total=len(scripts))


@router.post(
    "",
    response_model=Script,
    status_code=status.HTTP_201_CREATED,
    summary="Create script",
)
async def create_script(
    body: ScriptCreateRequest,
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> Script:
    return await repo.create_script(
        api_key.user_id,
        title=body.title,
        description=body.description,
        scenes=body.scenes,
    )


@router.post(
    "/import",
    response_model=Script,
    status_code=status.HTTP_201_CREATED,
    summary="Import screenplay",
    description=(
        "Upload a plain-text or Fountain screenplay; it is split into scenes at "
        "INT./EXT. headings. PDF uploads create a single placeholder scene."
    ),
)
async def import_script(
    file: UploadFile = File(..., description="Screenplay file (.txt, .fountain, .pdf)"),
    title: str | None = Form(None, max_length=500),
    description: str | None = Form(None, max_length=5000),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> Script:
    settings = get_settings()
    raw = await file.read()

    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds maximum size of {settings.max_upload_bytes} bytes",
        )
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )

    fmt = detect_format(file.filename, raw)
    scenes = get_parser(fmt).parse(raw)

    script_title = (title or "").strip() or PurePath(file.filename or "").stem or "Untitled Script"
    logger.info("Importing %s upload as '%s' (%d scenes)", fmt.value, script_title, len(scenes))
    return await repo.create_script(
        api_key.user_id,
        title=script_title,
        description=description,
        scenes=scenes,
    )


@router.get("/{script_id}", response_model=Script, summary="Get script")
async def get_script(
    script_id: uuid.UUID = Path(..., description="Script ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> Script:
    return await repo.get_script(script_id, api_key.user_id)


@router.put(
    "/{script_id}",
    response_model=Script,
    summary="Update script",
    description="Update title/description; a provided scene list replaces the stored one.",
)
async def update_script(
    body: ScriptUpdateRequest,
    script_id: uuid.UUID = Path(..., description="Script ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> Script:
    return await repo.update_script(
        script_id,
        api_key.user_id,
        title=body.title,
        description=body.description,
        scenes=body.scenes,
    )


@router.delete("/{script_id}", response_model=DeleteResponse, summary="Delete script")
async def delete_script(
    script_id: uuid.UUID = Path(..., description="Script ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> DeleteResponse:
    await repo.delete_script(script_id, api_key.user_id)
    return DeleteResponse()


# ---------------------------------------------------------------------------
# Scene list operations
# ---------------------------------------------------------------------------


@router.post(
    "/{script_id}/scenes",
    response_model=SceneEditResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add scene",
    description="Append an empty scene; it becomes the selected scene.",
)
async def add_scene_endpoint(
    script_id: uuid.UUID = Path(..., description="Script ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> SceneEditResponse:
    edit = add_scene(await repo.load_scenes(script_id, api_key.user_id))
    await repo.save_scenes(script_id, api_key.user_id, edit.scenes)
    return _edit_response(script_id, edit)


@router.patch(
    "/{script_id}/scenes/{scene_id}",
    response_model=SceneEditResponse,
    summary="Rename scene",
)
async def rename_scene_endpoint(
    body: RenameSceneRequest,
    script_id: uuid.UUID = Path(..., description="Script ID"),
    scene_id: str = Path(..., max_length=100, description="Scene ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> SceneEditResponse:
    scenes = rename_scene(await repo.load_scenes(script_id, api_key.user_id), scene_id, body.title)
    await repo.save_scenes(script_id, api_key.user_id, scenes)
    return _edit_response(script_id, SceneEdit(scenes=scenes))


@router.delete(
    "/{script_id}/scenes/{scene_id}",
    response_model=SceneEditResponse,
    summary="Delete scene",
    description="Remove a scene; the first remaining scene becomes selected.",
)
async def delete_scene_endpoint(
    script_id: uuid.UUID = Path(..., description="Script ID"),
    scene_id: str = Path(..., max_length=100, description="Scene ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> SceneEditResponse:
    edit = delete_scene(await repo.load_scenes(script_id, api_key.user_id), scene_id)
    await repo.save_scenes(script_id, api_key.user_id, edit.scenes)
    return _edit_response(script_id, edit)


@router.post(
    "/{script_id}/scenes:reorder",
    response_model=SceneEditResponse,
    summary="Reorder scenes",
    description="Move one scene to a new position. Invalid positions leave the order unchanged.",
)
async def reorder_scenes_endpoint(
    body: ReorderScenesRequest,
    script_id: uuid.UUID = Path(..., description="Script ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
) -> SceneEditResponse:
    current = await repo.load_scenes(script_id, api_key.user_id)
    scenes = reorder_scenes(current, body.from_index, body.to_index)
    if scenes != current:
        await repo.save_scenes(script_id, api_key.user_id, scenes)
    return _edit_response(script_id, SceneEdit(scenes=scenes))


@router.post(
    "/{script_id}/scenes:bridge",
    response_model=SceneEditResponse,
    summary="Create bridge scene",
    description=(
        "Generate a scene connecting the scenes at index-1 and index and insert it "
        "between them. Only one bridge per script may be pending at a time."
    ),
)
async def create_bridge_endpoint(
    body: CreateBridgeRequest,
    script_id: uuid.UUID = Path(..., description="Script ID"),
    api_key: ApiKeyModel = Depends(verify_api_key),
    repo: ScriptRepository = Depends(get_script_repository),
    synthesizer: BridgeSynthesizer = Depends(get_bridge_synthesizer),
) -> SceneEditResponse:
    current = await repo.load_scenes(script_id, api_key.user_id)
    model = SceneListModel(current)

    if script_id in _bridges_in_progress:
        raise BridgeInProgressException(
            "A bridge scene is already being created for this script",
            details={"script_id": str(script_id)},
        )

    _bridges_in_progress.add(script_id)
    try:
        bridge = await model.create_bridge(body.index, synthesizer, body.script_context)
    finally:
        _bridges_in_progress.discard(script_id)

    if bridge is None:
        return _edit_response(script_id, SceneEdit(scenes=current))

    # Other edits may have been saved while the bridge was being written.
    previous, following = current[body.index - 1], current[body.index]
    latest = await repo.load_scenes(script_id, api_key.user_id)
    scenes = await repo.save_scenes(
        script_id,
        api_key.user_id,
        insert_bridge(latest, bridge, previous.id, following.id),
    )
    logger.info("Inserted bridge scene %s into script %s", bridge.id, script_id)
    return _edit_response(
        script_id,
        SceneEdit(scenes=scenes, selected_scene_id=bridge.id, selection_changed=True),
    )
