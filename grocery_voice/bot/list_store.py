"""Per-user persistence of grocery lists for the Telegram transport."""

import json
import logging
from pathlib import Path

from grocery_voice.core.models import GroceryItem

logger = logging.getLogger(__name__)


class ListStore:
    """Stores each user's list as a JSON file."""

    def __init__(self, directory: Path):
        self.directory = directory

    def _path(self, user_id: int) -> Path:
        return self.directory / f"{user_id}.json"

    def load(self, user_id: int) -> list[GroceryItem]:
        """Load a user's list; a missing or unreadable file yields an empty list."""
        path = self._path(user_id)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return [GroceryItem.from_dict(item) for item in data.get("items", [])]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load list for user {user_id}: {e}")
            return []

    def save(self, user_id: int, items: list[GroceryItem]) -> None:
        """Save a user's list to disk."""
        self.directory.mkdir(parents=True, exist_ok=True)
        data = {"items": [item.to_dict() for item in items]}
        self._path(user_id).write_text(json.dumps(data, indent=2), encoding="utf-8")

    def clear(self, user_id: int) -> None:
        """Delete a user's stored list."""
        path = self._path(user_id)
        if path.exists():
            path.unlink()
