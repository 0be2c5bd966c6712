"""Bridge scene synthesis backed by an LLM provider."""

import logging
from abc import ABC, abstractmethod

import httpx

from core.exceptions import LLMException, SynthesisException
from llm.base import BaseLLMProvider
from llm.prompt_manager import PromptManager, get_prompt_manager

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Not specified"


def format_characters(characters: list[str]) -> str:
    return ", ".join(characters) if characters else NOT_SPECIFIED


def format_script_context(script_context: str | None) -> str:
    if script_context and script_context.strip():
        return f"\nSCRIPT CONTEXT: {script_context.strip()}\n"
    return ""


class BridgeSynthesizer(ABC):
    """Writes the content of a scene that connects two neighbouring scenes."""

    @abstractmethod
    async def synthesize(
        self,
        previous_scene: str,
        next_scene: str,
        characters: list[str],
        script_context: str | None = None,
    ) -> str:
        """Return the bridging scene text.

        Raises ``SynthesisException`` when no usable text could be produced.
        """

    async def __call__(
        self,
        previous_scene: str,
        next_scene: str,
        characters: list[str],
        script_context: str | None = None,
    ) -> str:
        return await self.synthesize(previous_scene, next_scene, characters, script_context)


class LLMBridgeSynthesizer(BridgeSynthesizer):
    """Renders the ``scenes.bridge`` prompt and asks the LLM for the scene."""

    def __init__(
        self,
        provider: BaseLLMProvider,
        prompts: PromptManager | None = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> None:
        self.provider = provider
        self.prompts = prompts or get_prompt_manager()
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def synthesize(
        self,
        previous_scene: str,
        next_scene: str,
        characters: list[str],
        script_context: str | None = None,
    ) -> str:
        system, prompt = self.prompts.get(
            "scenes",
            "bridge",
            previous_scene=previous_scene,
            next_scene=next_scene,
            characters=format_characters(characters),
            script_context=format_script_context(script_context),
        )

        try:
            generated = await self.provider.generate(
                prompt,
                system_prompt=system,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except (LLMException, httpx.HTTPError) as e:
            logger.error(f"Bridge synthesis via {self.provider.provider_name} failed: {e}")
            raise SynthesisException(
                "Failed to generate scene bridge",
                details={"provider": self.provider.provider_name, "reason": str(e)},
            ) from e

        generated = (generated or "").strip()
        if not generated:
            raise SynthesisException(
                "Bridge synthesis returned an empty scene",
                details={"provider": self.provider.provider_name},
            )
        return generated
