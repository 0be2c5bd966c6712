"""OpenAI-compatible chat completions provider (OpenAI, Azure proxies, vLLM...)."""

import logging
from typing import Any

import httpx

from core.exceptions import LLMException
from core.prompt_sanitizer import PromptSanitizer
from llm.base import BaseLLMProvider

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a skilled screenwriter assistant that specializes in screenplay "
    "format and narrative flow."
)


class OpenAICompatibleProvider(BaseLLMProvider):
    """Provider for any ``/chat/completions`` endpoint speaking the OpenAI schema."""

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize OpenAI-compatible provider."""
        super().__init__(config)
        self.api_key = config.get("api_key")
        self.model = config.get("model", "gpt-4")
        self.base_url = config.get("base_url", "https://api.openai.com/v1").rstrip("/")
        self.timeout = config.get("timeout", 120)

        if not self.api_key:
            raise ValueError("OpenAI API key is required")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        **kwargs: Any,
    ) -> str:
        """Generate text with prompt injection protection."""
        clean_prompt = PromptSanitizer.validate_and_sanitize(prompt, raise_on_unsafe=False)

        if system_prompt is None:
            system_prompt = DEFAULT_SYSTEM_PROMPT

        locked_system, final_prompt = PromptSanitizer.wrap_with_system_lock(
            clean_prompt, system_prompt
        )

        messages = [
            {"role": "system", "content": locked_system},
            {"role": "user", "content": final_prompt},
        ]
        return await self.generate_chat(
            messages, temperature=temperature, max_tokens=max_tokens, **kwargs
        )

    async def generate_chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
        **kwargs: Any,
    ) -> str:
        """Call ``/chat/completions`` and return the first choice's content."""
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMException(
                f"OpenAI API request failed: {str(e)}",
                details={"provider": self.provider_name},
            )

        try:
            return result["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Malformed OpenAI response: {e}")
            raise LLMException(
                "Malformed response from OpenAI API",
                details={"provider": self.provider_name},
            )

    async def health_check(self) -> bool:
        """Check API availability by listing models."""
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                return response.status_code == 200
        except Exception as e:
            logger.error(f"OpenAI health check failed: {e}")
            return False

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "openai"
