"""Turn boundary: one utterance plus the caller's list in, reply plus list out."""

import logging
from dataclasses import dataclass
from typing import Optional

from grocery_voice.errors import AssistantUnavailableError, TurnFailedError
from grocery_voice.llm.base import LLMProvider
from .grocery_tools import build_grocery_registry
from .models import GroceryItem
from .orchestrator import ConversationOrchestrator
from .prices import PriceOracle

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "The assistant is unavailable right now because no language model is configured. "
    "Your list has not been changed."
)
TRUNCATION_NOTICE = (
    "I made some changes but couldn't finish everything in one go. "
    "Check your list to see what was updated."
)
DEFAULT_REPLY = "Done! Your list is up to date."
FAILURE_MESSAGE = "Failed to process request"


@dataclass
class TurnResponse:
    """Assistant reply and the (possibly mutated) list."""
    response: str
    items: list[GroceryItem]
    steps: int = 0
    truncated: bool = False


class GroceryAssistant:
    """Runs conversational turns against caller-supplied lists."""

    def __init__(
        self,
        provider: Optional[LLMProvider],
        system_prompt: str,
        oracle: Optional[PriceOracle] = None,
        max_steps: int = ConversationOrchestrator.DEFAULT_MAX_STEPS,
        temperature: float = 0.2,
    ):
        self.provider = provider
        self.oracle = oracle or PriceOracle()
        self.orchestrator: Optional[ConversationOrchestrator] = None
        if provider is not None:
            self.orchestrator = ConversationOrchestrator(
                provider,
                system_prompt,
                max_steps=max_steps,
                temperature=temperature,
            )

    def is_available(self) -> bool:
        """Whether a configured language model can serve turns."""
        return self.provider is not None and self.provider.is_available()

    async def run_turn(self, message: str, items: list[GroceryItem]) -> TurnResponse:
        """Run one turn, mutating ``items`` in place.

        Raises:
            AssistantUnavailableError: No language model is configured.
            TurnFailedError: The model or its transport failed.
        """
        if not self.is_available():
            raise AssistantUnavailableError("No language model provider is configured")

        registry = build_grocery_registry(items, self.oracle)
        try:
            result = await self.orchestrator.run(message, registry)
        except Exception as e:
            logger.error(f"Turn failed: {e}")
            raise TurnFailedError(str(e)) from e

        if result.truncated:
            response = result.text if result.text.strip() else TRUNCATION_NOTICE
        else:
            response = result.text if result.text.strip() else DEFAULT_REPLY

        return TurnResponse(
            response=response,
            items=items,
            steps=result.steps,
            truncated=result.truncated,
        )

    async def chat(self, payload: dict) -> dict:
        """JSON boundary: ``{message, items}`` in, ``{response, items}`` out.

        Failures yield ``{"error": ...}``; without a model the list comes
        back unchanged with ``degraded`` set.
        """
        message = payload.get("message") or ""
        raw_items = payload.get("items") or []

        if not self.is_available():
            logger.warning("Chat request received without a configured model")
            return {"response": UNAVAILABLE_MESSAGE, "items": raw_items, "degraded": True}

        try:
            items = [GroceryItem.from_dict(data) for data in raw_items]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid items in chat request: {e}")
            return {"error": FAILURE_MESSAGE}

        try:
            turn = await self.run_turn(message, items)
        except TurnFailedError:
            return {"error": FAILURE_MESSAGE}

        return {
            "response": turn.response,
            "items": [item.to_dict() for item in turn.items],
        }
