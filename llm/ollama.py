"""Ollama local LLM provider."""

import logging
from typing import Any

import httpx

from core.exceptions import LLMException
from core.prompt_sanitizer import PromptSanitizer
from llm.base import BaseLLMProvider
from llm.openai_compatible import DEFAULT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class OllamaProvider(BaseLLMProvider):
    """Ollama local LLM provider."""

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize Ollama provider."""
        super().__init__(config)
        self.base_url = config.get("base_url", "http://localhost:11434").rstrip("/")
        self.model = config.get("model", "llama3")
        self.timeout = config.get("timeout", 120)

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        **kwargs: Any,
    ) -> str:
        """Generate text using Ollama API with prompt injection protection."""
        clean_prompt = PromptSanitizer.validate_and_sanitize(prompt, raise_on_unsafe=False)

        if system_prompt is None:
            system_prompt = DEFAULT_SYSTEM_PROMPT

        locked_system, final_prompt = PromptSanitizer.wrap_with_system_lock(
            clean_prompt, system_prompt
        )

        payload = {
            "model": self.model,
            "prompt": final_prompt,
            "system": locked_system,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        payload["options"].update(kwargs)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/api/generate",
                    json=payload,
                )
                response.raise_for_status()
                result = response.json()
                return result["response"]

        except httpx.HTTPError as e:
            logger.error(f"Ollama API error: {e}")
            raise LLMException(
                f"Ollama API request failed: {str(e)}",
                details={"provider": "ollama", "base_url": self.base_url},
            )
        except KeyError:
            raise LLMException(
                "Malformed response from Ollama",
                details={"provider": "ollama", "base_url": self.base_url},
            )

    async def generate_chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
        **kwargs: Any,
    ) -> str:
        """Generate text using the Ollama Chat API."""
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        payload["options"].update(kwargs)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/api/chat",
                    json=payload,
                )
                response.raise_for_status()
                result = response.json()
                return result["message"]["content"]

        except httpx.HTTPError as e:
            logger.error(f"Ollama Chat API error: {e}")
            raise LLMException(
                f"Ollama Chat API request failed: {str(e)}",
                details={"provider": "ollama", "base_url": self.base_url},
            )
        except KeyError:
            raise LLMException(
                "Malformed chat response from Ollama",
                details={"provider": "ollama", "base_url": self.base_url},
            )

    async def health_check(self) -> bool:
        """Check Ollama availability."""
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except Exception as e:
            logger.error(f"Ollama health check failed: {e}")
            return False

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "ollama"
