"""Grocery list tools: the operations the assistant can run on a list."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from .models import GroceryItem
from .prices import PriceOracle
from .tool_registry import Tool, ToolRegistry

logger = logging.getLogger(__name__)


class AddItemArgs(BaseModel):
    name: str = Field(min_length=1, description="The name of the item")
    quantity: float = Field(default=1, gt=0, description="The quantity needed")
    unit: Optional[str] = Field(
        default=None, description="The unit of measurement (e.g., lbs, oz, dozen, boxes)"
    )
    category: Optional[str] = Field(
        default=None, description="The category (e.g., dairy, produce, meat)"
    )


class ItemNameArgs(BaseModel):
    name: str = Field(min_length=1, description="The name of the item on the list")


class ComparePricesArgs(BaseModel):
    name: str = Field(min_length=1, description="The name of the item to compare prices for")


class NoArgs(BaseModel):
    pass


class GroceryListTools:
    """Handlers bound to one shared list for the duration of a turn.

    The list is mutated in place; no copies are made.
    """

    def __init__(self, items: list[GroceryItem], oracle: PriceOracle):
        self.items = items
        self.oracle = oracle

    def _find_index(self, name: str) -> Optional[int]:
        for index, item in enumerate(self.items):
            if item.matches(name):
                return index
        return None

    def add_item(self, args: AddItemArgs) -> dict:
        item = GroceryItem.create(
            name=args.name,
            quantity=args.quantity,
            unit=args.unit,
            category=args.category,
            quote=self.oracle.estimate(args.name),
        )
        self.items.append(item)
        return {"success": True, "item": item.to_dict()}

    def remove_item(self, args: ItemNameArgs) -> dict:
        index = self._find_index(args.name)
        if index is None:
            return {"success": False, "message": f"Could not find {args.name} in your list"}
        del self.items[index]
        return {"success": True, "message": f"Removed {args.name} from your list"}

    def mark_completed(self, args: ItemNameArgs) -> dict:
        index = self._find_index(args.name)
        if index is None:
            return {"success": False, "message": f"Could not find {args.name} in your list"}
        self.items[index].completed = True
        return {"success": True, "message": f"Marked {args.name} as completed"}

    def get_list(self, args: NoArgs) -> dict:
        return {"items": [item.to_dict() for item in self.items]}

    def compare_prices(self, args: ComparePricesArgs) -> dict:
        comparison = self.oracle.compare(args.name)
        if comparison is None:
            return {"success": False, "message": f"Sorry, I don't have price data for {args.name} yet."}
        return {"success": True, **comparison.to_dict()}

    def as_tools(self) -> list[Tool]:
        return [
            Tool("addItem", "Add a new item to the grocery list", AddItemArgs, self.add_item),
            Tool("removeItem", "Remove an item from the grocery list", ItemNameArgs, self.remove_item),
            Tool("markCompleted", "Mark an item as completed/purchased", ItemNameArgs, self.mark_completed),
            Tool("getList", "Get the current grocery list", NoArgs, self.get_list),
            Tool(
                "comparePrices",
                "Compare prices for an item across different stores",
                ComparePricesArgs,
                self.compare_prices,
            ),
        ]


def build_grocery_registry(items: list[GroceryItem], oracle: PriceOracle) -> ToolRegistry:
    """Build a registry whose tools operate on ``items``."""
    return ToolRegistry(GroceryListTools(items, oracle).as_tools())
