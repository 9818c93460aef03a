"""LangGraph state machine for the bounded tool-calling turn loop."""

import logging
from typing import TypedDict, Literal

from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, END

from grocery_voice.core.states import TurnState, TurnResult
from grocery_voice.core.tool_registry import ToolRegistry
from grocery_voice.llm.base import LLMProvider, ToolCall

logger = logging.getLogger(__name__)

AWAITING_MODEL = TurnState.AWAITING_MODEL.value
DISPATCHING_TOOLS = TurnState.DISPATCHING_TOOLS.value
DONE = TurnState.DONE.value


class GraphState(TypedDict):
    """State passed through the graph."""
    messages: list[dict]
    state: str

    # Latest model output
    text: str
    pending_calls: list[ToolCall]

    # Control flow
    step: int
    truncated: bool


class ConversationOrchestrator:
    """Runs one utterance through the model ⇄ tool loop.

    AWAITING_MODEL calls the model; if it requests tools and the step bound
    allows, DISPATCHING_TOOLS runs them in order and loops back. DONE is
    reached when the model stops requesting tools or the bound is hit.
    """

    DEFAULT_MAX_STEPS = 5

    def __init__(
        self,
        provider: LLMProvider,
        system_prompt: str,
        max_steps: int = DEFAULT_MAX_STEPS,
        temperature: float = 0.2,
    ):
        """Initialize the orchestrator.

        Args:
            provider: LLM provider with tool calling support.
            system_prompt: Instruction describing the assistant's role.
            max_steps: Maximum number of tool dispatch rounds per turn.
            temperature: Sampling temperature for model calls.
        """
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")

        self.provider = provider
        self.system_prompt = system_prompt
        self.max_steps = max_steps
        self.temperature = temperature

        # Every round visits two nodes, plus the final model call and DONE
        self.recursion_limit = 2 * max_steps + 4

        self.graph = self._build_graph()
        self.app = self.graph.compile()

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph state machine."""
        graph = StateGraph(GraphState)

        graph.add_node(AWAITING_MODEL, self._awaiting_model)
        graph.add_node(DISPATCHING_TOOLS, self._dispatching_tools)
        graph.add_node(DONE, self._done)

        graph.set_entry_point(AWAITING_MODEL)

        graph.add_conditional_edges(
            AWAITING_MODEL,
            self._route_after_model,
            {
                "dispatch": DISPATCHING_TOOLS,
                "done": DONE,
            }
        )
        graph.add_edge(DISPATCHING_TOOLS, AWAITING_MODEL)
        graph.add_edge(DONE, END)

        return graph

    # Node implementations

    async def _awaiting_model(self, state: GraphState, config: RunnableConfig) -> dict:
        """Ask the model for the next reply or tool calls."""
        registry: ToolRegistry = config["configurable"]["registry"]

        result = await self.provider.generate_with_tools(
            messages=state["messages"],
            tools=registry.get_all_tool_definitions(),
            temperature=self.temperature,
        )

        if result.has_tool_calls:
            logger.info(
                f"Model requested {len(result.tool_calls)} tool calls "
                f"(step {state['step'] + 1}/{self.max_steps})"
            )

        return {
            "state": AWAITING_MODEL,
            "text": result.text,
            "pending_calls": result.tool_calls,
        }

    async def _dispatching_tools(self, state: GraphState, config: RunnableConfig) -> dict:
        """Run requested tool calls sequentially, in the order the model gave them."""
        registry: ToolRegistry = config["configurable"]["registry"]
        calls = state["pending_calls"]

        tool_results = []
        for call in calls:
            output = registry.dispatch(call)
            if output is None:
                continue
            tool_results.append({
                "role": "tool_result",
                "tool_use_id": call.id,
                "tool_name": call.name,
                "content": output,
            })

        assistant_message = {
            "role": "assistant",
            "content": state["text"],
            "tool_calls": calls,
        }

        return {
            "state": DISPATCHING_TOOLS,
            "messages": state["messages"] + [assistant_message] + tool_results,
            "pending_calls": [],
            "step": state["step"] + 1,
        }

    async def _done(self, state: GraphState) -> dict:
        """Finish the turn, flagging it when pending tool calls were dropped."""
        truncated = bool(state["pending_calls"])
        if truncated:
            dropped = ", ".join(call.name for call in state["pending_calls"])
            logger.warning(
                f"Step bound of {self.max_steps} reached; dropping pending tool calls: {dropped}"
            )
        return {"state": DONE, "truncated": truncated}

    # Routing functions

    def _route_after_model(self, state: GraphState) -> Literal["dispatch", "done"]:
        if not state["pending_calls"]:
            return "done"
        if state["step"] >= self.max_steps:
            return "done"
        return "dispatch"

    async def run(self, message: str, registry: ToolRegistry) -> TurnResult:
        """Run one utterance to completion against the tools in ``registry``."""
        initial: GraphState = {
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": message},
            ],
            "state": AWAITING_MODEL,
            "text": "",
            "pending_calls": [],
            "step": 0,
            "truncated": False,
        }
        config = {
            "configurable": {"registry": registry},
            "recursion_limit": self.recursion_limit,
        }
        final = await self.app.ainvoke(initial, config)

        return TurnResult(
            text=final["text"],
            steps=final["step"],
            truncated=final["truncated"],
            messages=final["messages"],
        )
