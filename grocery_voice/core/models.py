"""Data models for grocery list items and price quotes."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def new_item_id() -> str:
    """Generate a unique item identifier."""
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_quantity(value: Any) -> float:
    """Parse a caller-supplied quantity; missing means 1, otherwise it must be positive."""
    if value is None:
        return 1
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Invalid quantity: {value!r}")
    quantity = float(value)
    if not quantity > 0:
        raise ValueError(f"Quantity must be positive: {value!r}")
    return value if isinstance(value, (int, float)) else quantity


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted)."""
    if isinstance(value, datetime):
        return value
    if not value:
        return _utcnow()
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class PriceQuote:
    """A price for an item at one store."""
    price: Decimal
    store: str

    def to_dict(self) -> dict:
        return {"price": float(self.price), "store": self.store}


@dataclass(frozen=True)
class PriceComparison:
    """All known quotes for an item plus the cheapest one."""
    quotes: tuple[PriceQuote, ...]
    cheapest: PriceQuote

    def to_dict(self) -> dict:
        return {
            "quotes": [quote.to_dict() for quote in self.quotes],
            "cheapest": self.cheapest.to_dict(),
        }


@dataclass
class GroceryItem:
    """One entry on a shopping list."""
    id: str
    name: str
    quantity: float = 1
    unit: Optional[str] = None
    category: Optional[str] = None
    price_estimate: Optional[Decimal] = None
    store: Optional[str] = None
    completed: bool = False
    added_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        name: str,
        quantity: float = 1,
        unit: Optional[str] = None,
        category: Optional[str] = None,
        quote: Optional[PriceQuote] = None,
    ) -> "GroceryItem":
        """Create a new item with a freshly generated ID."""
        return cls(
            id=new_item_id(),
            name=name,
            quantity=quantity,
            unit=unit,
            category=category,
            price_estimate=quote.price if quote else None,
            store=quote.store if quote else None,
        )

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.casefold() == name.casefold()

    def to_dict(self) -> dict:
        """Convert to the camelCase wire format."""
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "category": self.category,
            "priceEstimate": float(self.price_estimate) if self.price_estimate is not None else None,
            "store": self.store,
            "completed": self.completed,
            "addedAt": self.added_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GroceryItem":
        """Create from a wire-format dictionary.

        Accepts both camelCase and snake_case keys. A missing ID is replaced
        with a fresh one.

        Raises:
            ValueError: If the entry is not a dictionary or a field is malformed.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Item must be an object, got {type(data).__name__}")

        price = data.get("priceEstimate", data.get("price_estimate"))
        try:
            price_estimate = Decimal(str(price)) if price is not None else None
        except InvalidOperation as e:
            raise ValueError(f"Invalid price estimate: {price!r}") from e

        return cls(
            id=str(data.get("id") or new_item_id()),
            name=data["name"],
            quantity=_parse_quantity(data.get("quantity")),
            unit=data.get("unit"),
            category=data.get("category"),
            price_estimate=price_estimate,
            store=data.get("store"),
            completed=bool(data.get("completed", False)),
            added_at=_parse_timestamp(data.get("addedAt", data.get("added_at"))),
        )
