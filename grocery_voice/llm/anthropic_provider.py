"""Anthropic Claude LLM provider implementation."""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from grocery_voice.errors import MalformedResponseError
from .base import LLMProvider, ToolDefinition, ToolCall, GenerationResult, answered_tool_ids

logger = logging.getLogger(__name__)


@dataclass
class UsageStats:
    """Track token usage (session-based)."""
    input_tokens: int = 0
    output_tokens: int = 0
    requests: int = 0

    def add(self, input_tokens: int, output_tokens: int) -> None:
        """Add usage from a request."""
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens
        self.requests += 1

    def reset(self) -> None:
        """Reset all counters."""
        self.input_tokens = 0
        self.output_tokens = 0
        self.requests = 0


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider with native tool calling."""

    def __init__(self, api_key: str, model: str, client=None):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key.
            model: Model name (e.g., claude-3-haiku-20240307).
            client: Optional pre-built AsyncAnthropic client.
        """
        self._api_key = api_key
        self._model = model
        self._client = client
        self.usage = UsageStats()

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

    def _get_client(self):
        """Get or create Anthropic client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    def _prepare_messages(self, messages: list[dict]) -> tuple[str, list[dict]]:
        """Prepare messages for Anthropic API.

        Consecutive tool results are merged into one user message, as the
        API expects every result for an assistant turn in the next message.

        Returns:
            Tuple of (system_prompt, anthropic_messages)
        """
        system_prompt = ""
        anthropic_messages = []
        answered = answered_tool_ids(messages)

        for msg in messages:
            role = msg["role"]
            content = msg.get("content", "")

            if role == "system":
                system_prompt = content
            elif role == "tool_result":
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.get("tool_use_id", ""),
                    "content": content,
                }
                previous = anthropic_messages[-1] if anthropic_messages else None
                if (
                    previous
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                    and previous["content"]
                    and previous["content"][0].get("type") == "tool_result"
                ):
                    previous["content"].append(block)
                else:
                    anthropic_messages.append({"role": "user", "content": [block]})
            elif role == "assistant" and msg.get("tool_calls"):
                blocks = []
                if content:
                    blocks.append({"type": "text", "text": content})
                for call in msg["tool_calls"]:
                    if call.id not in answered:
                        continue
                    blocks.append({
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.name,
                        "input": call.arguments,
                    })
                if blocks:
                    anthropic_messages.append({"role": "assistant", "content": blocks})
            else:
                anthropic_messages.append({"role": role, "content": content})

        return system_prompt, anthropic_messages

    async def generate_with_tools(
        self,
        messages: list[dict],
        tools: list[ToolDefinition],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> GenerationResult:
        """Generate a response with native tool calling support."""
        client = self._get_client()
        system_prompt, anthropic_messages = self._prepare_messages(messages)

        # Convert tools to Anthropic format
        anthropic_tools = [tool.to_anthropic_format() for tool in tools]

        request = {
            "model": self._model,
            "max_tokens": max_tokens or 4096,
            "messages": anthropic_messages,
            "temperature": temperature,
        }
        if system_prompt:
            request["system"] = system_prompt
        if anthropic_tools:
            request["tools"] = anthropic_tools

        try:
            response = await client.messages.create(**request)
        except Exception as e:
            logger.error(f"Anthropic tool calling error: {e}")
            raise

        # Track usage
        if getattr(response, "usage", None) is not None:
            self.usage.add(
                response.usage.input_tokens,
                response.usage.output_tokens,
            )

        return self._parse_response(response)

    def _parse_response(self, response) -> GenerationResult:
        """Convert an Anthropic message into a GenerationResult."""
        text = ""
        tool_calls = []

        for block in response.content or []:
            if block.type == "text":
                text += block.text
            elif block.type == "tool_use":
                arguments = block.input
                if isinstance(arguments, str):
                    try:
                        arguments = json.loads(arguments)
                    except json.JSONDecodeError as e:
                        raise MalformedResponseError(
                            f"Tool call '{block.name}' has invalid arguments"
                        ) from e
                tool_calls.append(ToolCall(
                    id=block.id,
                    name=block.name,
                    arguments=arguments if isinstance(arguments, dict) else {},
                ))

        # Determine finish reason
        finish_reason = "stop"
        if response.stop_reason == "tool_use":
            finish_reason = "tool_use"
        elif response.stop_reason == "max_tokens":
            finish_reason = "length"

        return GenerationResult(
            text=text,
            tool_calls=tool_calls,
            finish_reason=finish_reason,
        )

    def is_available(self) -> bool:
        """Check if Anthropic is properly configured."""
        return bool(self._api_key)

    def supports_tools(self) -> bool:
        """Anthropic Claude supports native tool calling."""
        return True
