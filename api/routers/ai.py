"""AI writing assistant endpoints."""

import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_bridge_synthesizer, get_scene_assistant, verify_api_key
from api.rate_limiting import rate_limit_combined
from core.models import (
    ChatRequest,
    ChatResponse,
    SceneBridgeRequest,
    SceneBridgeResponse,
    SceneEnhancementRequest,
    SceneEnhancementResponse,
    SceneSuggestionsRequest,
    SceneSuggestionsResponse,
)
from services.bridge_synthesizer import BridgeSynthesizer
from services.scene_assistant import SceneAssistant

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key), Depends(rate_limit_combined)])


@router.post(
    "/bridge-scenes",
    response_model=SceneBridgeResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate bridge scene",
    description="Write a scene that transitions between two given scenes.",
)
async def bridge_scenes(
    body: SceneBridgeRequest,
    synthesizer: BridgeSynthesizer = Depends(get_bridge_synthesizer),
) -> SceneBridgeResponse:
    generated = await synthesizer.synthesize(
        body.previous_scene,
        body.next_scene,
        body.characters,
        body.script_context,
    )
    return SceneBridgeResponse(generated_scene=generated)


@router.post(
    "/enhance-scene",
    response_model=SceneEnhancementResponse,
    summary="Enhance scene",
    description="Rewrite a scene focusing on dialogue, action, character or plot.",
)
async def enhance_scene(
    body: SceneEnhancementRequest,
    assistant: SceneAssistant = Depends(get_scene_assistant),
) -> SceneEnhancementResponse:
    enhanced = await assistant.enhance_scene(
        body.scene_content,
        body.enhancement_type,
        body.characters,
        body.script_context,
    )
    return SceneEnhancementResponse(enhanced_scene=enhanced)


@router.post(
    "/scene-suggestions",
    response_model=SceneSuggestionsResponse,
    summary="Suggest scene improvements",
)
async def scene_suggestions(
    body: SceneSuggestionsRequest,
    assistant: SceneAssistant = Depends(get_scene_assistant),
) -> SceneSuggestionsResponse:
    suggestions = await assistant.suggest_improvements(body.scene_content, body.characters)
    return SceneSuggestionsResponse(suggestions=suggestions)


@router.post("/chat", response_model=ChatResponse, summary="Chat with the writing assistant")
async def chat(
    body: ChatRequest,
    assistant: SceneAssistant = Depends(get_scene_assistant),
) -> ChatResponse:
    reply = await assistant.chat(body.message, body.conversation_history)
    return ChatResponse(response=reply)
