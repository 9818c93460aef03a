"""Core orchestration components."""

from .states import TurnState, TurnResult
from .models import GroceryItem, PriceQuote, PriceComparison
from .prices import PriceOracle
from .prompt_builder import PromptBuilder
from .tool_registry import Tool, ToolRegistry
from .grocery_tools import build_grocery_registry
from .orchestrator import ConversationOrchestrator
from .assistant import GroceryAssistant, TurnResponse

__all__ = [
    "TurnState",
    "TurnResult",
    "GroceryItem",
    "PriceQuote",
    "PriceComparison",
    "PriceOracle",
    "PromptBuilder",
    "Tool",
    "ToolRegistry",
    "build_grocery_registry",
    "ConversationOrchestrator",
    "GroceryAssistant",
    "TurnResponse",
]
