"""Grocery Voice: manage a shopping list by talking to it."""

__version__ = "0.1.0"
