import json

import pytest
from pydantic import BaseModel

from grocery_voice.core.tool_registry import Tool, ToolRegistry


class EchoArgs(BaseModel):
    word: str
    times: int = 1


def echo(args: EchoArgs) -> dict:
    return {"echo": " ".join([args.word] * args.times)}


@pytest.fixture
def registry():
    return ToolRegistry([Tool("echo", "Repeat a word", EchoArgs, echo)])


def test_dispatch_applies_defaults(registry, tool_call):
    assert json.loads(registry.dispatch(tool_call("echo", word="hi"))) == {"echo": "hi"}


def test_dispatch_coerces_types(registry, tool_call):
    output = json.loads(registry.dispatch(tool_call("echo", word="hi", times="2")))
    assert output == {"echo": "hi hi"}


def test_handler_not_run_on_invalid_arguments(tool_call):
    calls = []

    def handler(args):
        calls.append(args)
        return {}

    registry = ToolRegistry([Tool("echo", "Repeat a word", EchoArgs, handler)])
    output = json.loads(registry.dispatch(tool_call("echo", times="many")))

    assert output["success"] is False
    assert calls == []


def test_duplicate_names_are_rejected(registry):
    with pytest.raises(ValueError):
        registry.register(Tool("echo", "again", EchoArgs, echo))


def test_adding_a_tool_is_adding_a_record(registry, tool_call):
    registry.register(Tool("shout", "Upper-case a word", EchoArgs, lambda a: {"echo": a.word.upper()}))
    assert registry.get("shout") is not None
    assert json.loads(registry.dispatch(tool_call("shout", word="hi"))) == {"echo": "HI"}
