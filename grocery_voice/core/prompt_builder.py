"""System prompt builder for the grocery assistant."""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


BASE_PROMPT = """You are a helpful grocery list assistant. You help users manage their shopping list through natural conversation.

You can:
- Add items to their list with quantities and units
- Remove items from their list
- Mark items as completed
- Answer questions about their list
- Compare prices across stores
- Suggest categories for items
- Provide helpful shopping tips

Use the tools to change the list whenever the user asks for a change; never claim a change you did not make.
Be conversational, friendly, and concise. When users ask about their list, describe it naturally.
When adding items, try to infer reasonable quantities if not specified."""


class PromptBuilder:
    """Builds the system prompt from the base text and an optional extra file."""

    def __init__(self, extra_file: Optional[Path] = None, priced_items: Optional[list[str]] = None):
        self.extra_file = extra_file
        self.priced_items = priced_items or []
        self._cached_prompt: Optional[str] = None

    def _read_file(self, path: Path) -> Optional[str]:
        """Read a file if it exists."""
        if path.exists():
            try:
                return path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning(f"Failed to read prompt file {path}: {e}")
                return None
        logger.warning(f"Prompt file {path} does not exist")
        return None

    def build_system_prompt(self) -> str:
        """Build the complete system prompt."""
        if self._cached_prompt:
            return self._cached_prompt

        sections = [BASE_PROMPT]

        if self.priced_items:
            sections.append(
                "Store price data is available for: " + ", ".join(self.priced_items) + "."
            )

        if self.extra_file:
            extra = self._read_file(self.extra_file)
            if extra:
                sections.append(extra.strip())

        self._cached_prompt = "\n\n".join(sections)
        return self._cached_prompt
