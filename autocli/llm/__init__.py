"""LLM client for the model endpoint."""

from .client import AssistantMessage, LLMClient, LLMError, LLMResponse

__all__ = ["AssistantMessage", "LLMClient", "LLMError", "LLMResponse"]
