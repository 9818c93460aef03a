"""OpenAI chat completions provider implementation."""

import json
import logging
from typing import Optional

import httpx

from grocery_voice.errors import MalformedResponseError
from .base import LLMProvider, ToolDefinition, ToolCall, GenerationResult, answered_tool_ids

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI provider using the chat completions API with function tools."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key.
            model: Model name (e.g., gpt-4o-mini).
            base_url: API root URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _prepare_messages(self, messages: list[dict]) -> list[dict]:
        """Convert history messages to OpenAI chat format."""
        openai_messages = []
        answered = answered_tool_ids(messages)

        for msg in messages:
            role = msg["role"]
            content = msg.get("content", "")

            if role == "tool_result":
                openai_messages.append({
                    "role": "tool",
                    "tool_call_id": msg.get("tool_use_id", ""),
                    "content": content,
                })
            elif role == "assistant" and msg.get("tool_calls"):
                calls = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments),
                        },
                    }
                    for call in msg["tool_calls"]
                    if call.id in answered
                ]
                converted = {"role": "assistant", "content": content or None}
                if calls:
                    converted["tool_calls"] = calls
                elif not content:
                    continue
                openai_messages.append(converted)
            else:
                openai_messages.append({"role": role, "content": content})

        return openai_messages

    async def generate_with_tools(
        self,
        messages: list[dict],
        tools: list[ToolDefinition],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> GenerationResult:
        """Generate a response with native function calling support."""
        client = await self._get_client()

        payload = {
            "model": self._model,
            "messages": self._prepare_messages(messages),
            "temperature": temperature,
        }
        if tools:
            payload["tools"] = [tool.to_openai_format() for tool in tools]
        if max_tokens:
            payload["max_tokens"] = max_tokens

        try:
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.error(f"OpenAI tool calling error: {e}")
            raise

        return self._parse_response(data)

    def _parse_response(self, data: dict) -> GenerationResult:
        """Convert a chat completion payload into a GenerationResult."""
        try:
            choice = data["choices"][0]
            message = choice["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError("OpenAI response has no choices") from e

        tool_calls = []
        for call in message.get("tool_calls") or []:
            function = call.get("function", {})
            raw_args = function.get("arguments") or "{}"
            try:
                arguments = json.loads(raw_args)
            except json.JSONDecodeError as e:
                raise MalformedResponseError(
                    f"Tool call '{function.get('name')}' has invalid arguments"
                ) from e
            tool_calls.append(ToolCall(
                id=call.get("id", ""),
                name=function.get("name", ""),
                arguments=arguments if isinstance(arguments, dict) else {},
            ))

        finish_reason = "stop"
        if choice.get("finish_reason") == "tool_calls" or tool_calls:
            finish_reason = "tool_use"
        elif choice.get("finish_reason") == "length":
            finish_reason = "length"

        return GenerationResult(
            text=message.get("content") or "",
            tool_calls=tool_calls,
            finish_reason=finish_reason,
        )

    def is_available(self) -> bool:
        """Check if OpenAI is properly configured."""
        return bool(self._api_key)

    def supports_tools(self) -> bool:
        """OpenAI chat models support native function calling."""
        return True

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
