from decimal import Decimal
from typing import Callable, Optional

import pytest

from grocery_voice.core.models import GroceryItem, PriceQuote
from grocery_voice.core.prices import PriceOracle
from grocery_voice.llm.base import GenerationResult, LLMProvider, ToolCall


class FakeProvider(LLMProvider):
    """Scripted stand-in for a language model.

    Returns the scripted results in order; once exhausted, ``repeat`` (if
    given) builds a result from the 1-based call number, otherwise an empty
    reply with no tool calls.
    """

    def __init__(
        self,
        script: Optional[list[GenerationResult]] = None,
        repeat: Optional[Callable[[int], GenerationResult]] = None,
        available: bool = True,
        error: Optional[Exception] = None,
    ):
        self.script = list(script or [])
        self.repeat = repeat
        self.available = available
        self.error = error
        self.calls: list[dict] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def generate_with_tools(self, messages, tools, temperature=0.7, max_tokens=None):
        self.calls.append({"messages": list(messages), "tools": list(tools)})
        if self.error is not None:
            raise self.error
        if self.script:
            return self.script.pop(0)
        if self.repeat is not None:
            return self.repeat(len(self.calls))
        return GenerationResult(text="")

    def is_available(self) -> bool:
        return self.available

    def supports_tools(self) -> bool:
        return True


@pytest.fixture
def fake_provider():
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def tool_call():
    """Factory for ToolCall objects: tool_call("addItem", name="milk")."""
    counter = {"n": 0}

    def make(tool_name: str, /, call_id: Optional[str] = None, **arguments) -> ToolCall:
        counter["n"] += 1
        return ToolCall(id=call_id or f"call_{counter['n']}", name=tool_name, arguments=arguments)

    return make


@pytest.fixture
def oracle():
    return PriceOracle()


@pytest.fixture
def small_oracle():
    return PriceOracle({
        "Milk": [
            PriceQuote(Decimal("3.99"), "Walmart"),
            PriceQuote(Decimal("4.29"), "Target"),
            PriceQuote(Decimal("3.79"), "Kroger"),
        ],
        "tea": [
            PriceQuote(Decimal("2.00"), "Aldi"),
            PriceQuote(Decimal("2.00"), "Lidl"),
        ],
    })


@pytest.fixture
def grocery_items():
    return [
        GroceryItem.create("Milk", quantity=2, unit="gallons", category="Dairy"),
        GroceryItem.create("Bread", unit="loaf", category="Bakery"),
        GroceryItem.create("milk", quantity=1, unit="carton", category="Dairy"),
    ]
