"""AI writing assistance for individual scenes: enhancement, suggestions, chat."""

import logging
import re
from collections.abc import Sequence

from core.models import ChatMessage, ChatRole, EnhancementType
from core.prompt_sanitizer import PromptSanitizer
from llm.base import BaseLLMProvider
from llm.prompt_manager import PromptManager, get_prompt_manager
from services.bridge_synthesizer import format_characters, format_script_context

logger = logging.getLogger(__name__)

# Numbered list markers ("1. ") or blank lines separate suggestions.
_SUGGESTION_SPLIT_RE = re.compile(r"\d+\.\s|\n\n")


def split_suggestions(text: str) -> list[str]:
    """Break a model reply into individual, non-empty suggestions."""
    return [part.strip() for part in _SUGGESTION_SPLIT_RE.split(text) if part.strip()]


class SceneAssistant:
    """Prompt templating over an LLM provider for scene-level help."""

    def __init__(
        self,
        provider: BaseLLMProvider,
        prompts: PromptManager | None = None,
        scene_max_tokens: int = 1500,
        assistant_max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> None:
        self.provider = provider
        self.prompts = prompts or get_prompt_manager()
        self.scene_max_tokens = scene_max_tokens
        self.assistant_max_tokens = assistant_max_tokens
        self.temperature = temperature

    async def enhance_scene(
        self,
        scene_content: str,
        enhancement_type: EnhancementType | str,
        characters: Sequence[str] = (),
        script_context: str | None = None,
    ) -> str:
        """Rewrite *scene_content* focusing on one aspect; returns only the scene."""
        kind = enhancement_type.value if isinstance(enhancement_type, EnhancementType) else enhancement_type
        instruction = self.prompts.get_fragment(
            "enhancement_instructions",
            kind,
            default=self.prompts.get_fragment("enhancement_instructions", "default"),
        )
        system, prompt = self.prompts.get(
            "scenes",
            "enhance",
            scene_content=scene_content,
            enhancement_type=kind,
            characters=format_characters(list(characters)),
            script_context=format_script_context(script_context),
            instruction=instruction,
        )

        logger.info("Enhancing scene (%s, %d chars)", kind, len(scene_content))
        enhanced = await self.provider.generate(
            prompt,
            system_prompt=system,
            temperature=self.temperature,
            max_tokens=self.scene_max_tokens,
        )
        return enhanced.strip()

    async def suggest_improvements(
        self, scene_content: str, characters: Sequence[str] = ()
    ) -> list[str]:
        system, prompt = self.prompts.get(
            "scenes",
            "suggestions",
            scene_content=scene_content,
            characters=format_characters(list(characters)),
        )
        reply = await self.provider.generate(
            prompt,
            system_prompt=system,
            temperature=self.temperature,
            max_tokens=self.assistant_max_tokens,
        )
        return split_suggestions(reply)

    async def chat(self, message: str, conversation_history: Sequence[ChatMessage] = ()) -> str:
        """Answer *message* in the context of the prior conversation turns.

        Client-supplied system turns are dropped; the assistant persona is
        always the only system message.
        """
        messages = [{"role": ChatRole.SYSTEM.value, "content": self.prompts.get_system("assistant", "chat")}]
        for turn in conversation_history:
            if turn.role == ChatRole.SYSTEM:
                continue
            messages.append({"role": turn.role.value, "content": PromptSanitizer.sanitize(turn.content)})
        messages.append(
            {
                "role": ChatRole.USER.value,
                "content": PromptSanitizer.validate_and_sanitize(message, raise_on_unsafe=False),
            }
        )

        reply = await self.provider.generate_chat(
            messages,
            temperature=self.temperature,
            max_tokens=self.assistant_max_tokens,
        )
        return reply.strip()
