"""State definitions for the conversational turn state machine."""

from enum import Enum
from dataclasses import dataclass, field


class TurnState(Enum):
    """Possible states of one conversational turn."""
    AWAITING_MODEL = "awaiting_model"        # Waiting on the language model
    DISPATCHING_TOOLS = "dispatching_tools"  # Running requested tool calls
    DONE = "done"                            # Final answer ready


@dataclass
class TurnResult:
    """Outcome of running the orchestrator for one utterance."""
    text: str
    steps: int
    truncated: bool = False
    messages: list[dict] = field(default_factory=list)
