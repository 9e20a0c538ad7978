"""LLM integration: Anthropic client wrapper and prompt templates."""

from campusvoice.llm.client import LLMClient, LLMNotConfigured, LLMResponse, extract_json_object

__all__ = [
    "LLMClient",
    "LLMNotConfigured",
    "LLMResponse",
    "extract_json_object",
]
