"""LLM provider implementations."""

from .base import LLMProvider, ToolDefinition, ToolCall, GenerationResult
from .manager import ProviderManager

__all__ = [
    "LLMProvider",
    "ProviderManager",
    "ToolDefinition",
    "ToolCall",
    "GenerationResult",
]
