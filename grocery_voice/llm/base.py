"""Abstract base class for LLM providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Any


@dataclass
class ToolCall:
    """Represents a tool call from the LLM."""
    id: str
    name: str
    arguments: dict[str, Any]


@dataclass
class GenerationResult:
    """Result from generate_with_tools."""
    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str = "stop"  # "stop", "tool_use", "length"

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


@dataclass
class ToolDefinition:
    """Definition of a tool for the LLM."""
    name: str
    description: str
    parameters: dict[str, Any]  # JSON Schema format

    def to_anthropic_format(self) -> dict:
        """Convert to Anthropic tool format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }

    def to_openai_format(self) -> dict:
        """Convert to OpenAI function tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


def answered_tool_ids(messages: list[dict]) -> set[str]:
    """IDs of tool calls that have a matching tool_result message.

    Calls to unknown tools get no result; providers drop them from the wire
    copy of the history since both APIs reject unanswered tool calls.
    """
    return {
        msg.get("tool_use_id", "")
        for msg in messages
        if msg["role"] == "tool_result"
    }


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    History messages use a provider-neutral format:

    - ``{"role": "system" | "user", "content": str}``
    - ``{"role": "assistant", "content": str, "tool_calls": list[ToolCall]}``
    - ``{"role": "tool_result", "tool_use_id": str, "tool_name": str, "content": str}``
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name (e.g., 'openai', 'anthropic')."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the current model name."""
        ...

    @abstractmethod
    async def generate_with_tools(
        self,
        messages: list[dict],
        tools: list[ToolDefinition],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> GenerationResult:
        """Generate a response with tool calling support.

        Args:
            messages: Conversation history in the provider-neutral format.
            tools: List of tool definitions available to the model.
            temperature: Sampling temperature (0.0 to 1.0).
            max_tokens: Maximum tokens in response.

        Returns:
            GenerationResult with text and/or tool calls.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is properly configured and available."""
        ...

    def supports_tools(self) -> bool:
        """Check if this provider supports native tool/function calling."""
        return False
