"""Telegram bot handlers and commands."""

from .handlers import setup_handlers
from .commands import setup_commands
from .list_store import ListStore

__all__ = ["setup_handlers", "setup_commands", "ListStore"]
