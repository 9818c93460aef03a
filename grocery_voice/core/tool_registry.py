"""Tool registry mapping tool names to schemas and handlers."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from grocery_voice.llm.base import ToolCall, ToolDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    """A named operation the model can invoke.

    ``args_model`` declares required/optional fields and defaults; it is both
    advertised to the model as JSON Schema and used to validate arguments.
    """
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[BaseModel], dict[str, Any]]

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=_clean_schema(self.args_model.model_json_schema()),
        )


def _clean_schema(schema: Any) -> Any:
    """Drop pydantic 'title' keys the model does not need."""
    if isinstance(schema, dict):
        return {
            key: _clean_schema(value)
            for key, value in schema.items()
            if key != "title"
        }
    if isinstance(schema, list):
        return [_clean_schema(value) for value in schema]
    return schema


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


class ToolRegistry:
    """Capability table of tools available to the language model."""

    def __init__(self, tools: Optional[list[Tool]] = None):
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """Add a tool; names must be unique."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def get_all_tool_definitions(self) -> list[ToolDefinition]:
        """Get tool definitions for every registered tool.

        Returns:
            List of ToolDefinition objects.
        """
        return [tool.to_definition() for tool in self._tools.values()]

    def validate_arguments(self, tool: Tool, arguments: dict[str, Any]) -> BaseModel:
        """Validate and coerce raw arguments, applying schema defaults.

        Raises:
            ValidationError: If the arguments do not satisfy the schema.
        """
        return tool.args_model.model_validate(arguments or {})

    def dispatch(self, call: ToolCall) -> Optional[str]:
        """Run one tool call and serialize its result.

        Returns:
            The JSON result, or None when the tool name is not registered.
        """
        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning(f"Skipping unknown tool '{call.name}'")
            return None

        logger.info(f"Executing tool: {call.name} with args: {call.arguments}")

        try:
            args = self.validate_arguments(tool, call.arguments)
        except ValidationError as e:
            message = f"Invalid arguments for {call.name}: {_format_validation_error(e)}"
            logger.warning(message)
            return json.dumps({"success": False, "message": message})

        result = tool.handler(args)
        result_text = json.dumps(result, default=str)
        logger.info(f"Tool {call.name} result: {result_text[:200]}{'...' if len(result_text) > 200 else ''}")
        return result_text
