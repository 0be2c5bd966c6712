"""LLM provider package for the Bridge API."""

from llm.base import BaseLLMProvider
from llm.factory import get_llm_provider
from llm.prompt_manager import PromptManager, get_prompt_manager

__all__ = ["BaseLLMProvider", "PromptManager", "get_llm_provider", "get_prompt_manager"]
