import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest

from grocery_voice.config import Config
from grocery_voice.errors import MalformedResponseError
from grocery_voice.llm.anthropic_provider import AnthropicProvider
from grocery_voice.llm.base import ToolCall, ToolDefinition
from grocery_voice.llm.manager import ProviderManager
from grocery_voice.llm.openai_provider import OpenAIProvider

TOOLS = [ToolDefinition("getList", "Get the current grocery list", {"type": "object", "properties": {}})]


def history_with_tool_round():
    return [
        {"role": "system", "content": "be helpful"},
        {"role": "user", "content": "what's on my list?"},
        {
            "role": "assistant",
            "content": "",
            "tool_calls": [
                ToolCall(id="call_1", name="getList", arguments={}),
                ToolCall(id="call_2", name="orderPizza", arguments={"size": "large"}),
            ],
        },
        {"role": "tool_result", "tool_use_id": "call_1", "tool_name": "getList", "content": '{"items": []}'},
    ]


def openai_provider(handler):
    return OpenAIProvider("sk-test", "gpt-4o-mini", transport=httpx.MockTransport(handler))


def test_openai_parses_tool_calls():
    requests = []

    def handler(request):
        requests.append(json.loads(request.content))
        return httpx.Response(200, json={
            "choices": [{
                "finish_reason": "tool_calls",
                "message": {
                    "content": None,
                    "tool_calls": [{
                        "id": "call_9",
                        "type": "function",
                        "function": {"name": "addItem", "arguments": '{"name": "milk", "quantity": 2}'},
                    }],
                },
            }],
        })

    result = asyncio.run(openai_provider(handler).generate_with_tools(
        [{"role": "user", "content": "add 2 milk"}], TOOLS, temperature=0.2,
    ))

    assert result.text == ""
    assert result.finish_reason == "tool_use"
    assert result.tool_calls == [ToolCall(id="call_9", name="addItem", arguments={"name": "milk", "quantity": 2})]
    assert requests[0]["tools"][0]["function"]["name"] == "getList"
    assert requests[0]["temperature"] == 0.2


def test_openai_sends_only_answered_tool_calls():
    provider = OpenAIProvider("sk-test", "gpt-4o-mini")
    messages = provider._prepare_messages(history_with_tool_round())

    assistant = messages[2]
    assert [call["id"] for call in assistant["tool_calls"]] == ["call_1"]
    assert messages[3] == {"role": "tool", "tool_call_id": "call_1", "content": '{"items": []}'}


def test_openai_http_error_propagates():
    provider = openai_provider(lambda request: httpx.Response(500, json={"error": "boom"}))
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(provider.generate_with_tools([{"role": "user", "content": "hi"}], TOOLS))


def test_openai_malformed_response():
    provider = openai_provider(lambda request: httpx.Response(200, json={"choices": []}))
    with pytest.raises(MalformedResponseError):
        asyncio.run(provider.generate_with_tools([{"role": "user", "content": "hi"}], TOOLS))


def test_openai_invalid_tool_arguments():
    provider = openai_provider(lambda request: httpx.Response(200, json={
        "choices": [{"message": {"tool_calls": [{"id": "c", "function": {"name": "addItem", "arguments": "{oops"}}]}}],
    }))
    with pytest.raises(MalformedResponseError):
        asyncio.run(provider.generate_with_tools([{"role": "user", "content": "hi"}], TOOLS))


def test_anthropic_prepares_tool_round():
    provider = AnthropicProvider("key", "claude-3-haiku-20240307")
    history = history_with_tool_round()
    history.append({"role": "tool_result", "tool_use_id": "call_3", "tool_name": "getList", "content": "{}"})

    system, messages = provider._prepare_messages(history)

    assert system == "be helpful"
    assert messages[1]["role"] == "assistant"
    assert [block["id"] for block in messages[1]["content"]] == ["call_1"]
    # Consecutive tool results share one user message
    assert len(messages) == 3
    assert [block["tool_use_id"] for block in messages[2]["content"]] == ["call_1", "call_3"]


def test_anthropic_generate_with_tools_uses_client():
    created = []

    class FakeMessages:
        async def create(self, **kwargs):
            created.append(kwargs)
            return SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="Let me add that."),
                    SimpleNamespace(type="tool_use", id="tu_1", name="addItem", input={"name": "eggs"}),
                ],
                stop_reason="tool_use",
                usage=SimpleNamespace(input_tokens=10, output_tokens=5),
            )

    provider = AnthropicProvider("key", "claude-3-haiku-20240307", client=SimpleNamespace(messages=FakeMessages()))
    result = asyncio.run(provider.generate_with_tools(
        [{"role": "system", "content": "sys"}, {"role": "user", "content": "add eggs"}], TOOLS,
    ))

    assert result.text == "Let me add that."
    assert result.tool_calls == [ToolCall(id="tu_1", name="addItem", arguments={"name": "eggs"})]
    assert result.finish_reason == "tool_use"
    assert created[0]["system"] == "sys"
    assert created[0]["tools"][0]["input_schema"] == TOOLS[0].parameters
    assert provider.usage.requests == 1


def test_manager_without_credentials_is_degraded():
    cfg = Config()
    cfg.openai.api_key = ""
    cfg.anthropic.api_key = ""

    manager = ProviderManager(cfg)
    manager.initialize()

    assert manager.get_active() is None
    assert manager.list_providers() == []


def test_manager_falls_back_to_configured_provider():
    cfg = Config()
    cfg.openai.api_key = ""
    cfg.anthropic.api_key = "key"
    cfg.default_provider = "openai"

    manager = ProviderManager(cfg)
    manager.initialize()

    assert manager.get_active().name == "anthropic"
