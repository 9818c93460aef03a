"""Static store price lookup."""

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from .models import PriceComparison, PriceQuote

logger = logging.getLogger(__name__)


def _quotes(*pairs: tuple[str, str]) -> tuple[PriceQuote, ...]:
    return tuple(PriceQuote(Decimal(price), store) for price, store in pairs)


# Reference prices keyed by normalized item name
DEFAULT_PRICE_TABLE: Mapping[str, tuple[PriceQuote, ...]] = MappingProxyType({
    "milk": _quotes(("3.99", "Walmart"), ("4.29", "Target"), ("3.79", "Kroger")),
    "bread": _quotes(("2.49", "Walmart"), ("2.99", "Target"), ("2.29", "Kroger")),
    "eggs": _quotes(("3.49", "Walmart"), ("3.99", "Target"), ("3.29", "Kroger")),
    "chicken": _quotes(("8.99", "Walmart"), ("9.49", "Target"), ("8.49", "Kroger")),
    "apples": _quotes(("4.99", "Walmart"), ("5.49", "Target"), ("4.79", "Kroger")),
})


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def cheapest_quote(quotes: Sequence[PriceQuote]) -> PriceQuote:
    """Return the lowest-priced quote; the earliest one wins ties."""
    best = quotes[0]
    for quote in quotes[1:]:
        if quote.price < best.price:
            best = quote
    return best


class PriceOracle:
    """Resolves item names to store price quotes.

    The backing table is read-only; pass a different mapping to swap it.
    """

    def __init__(self, table: Mapping[str, Sequence[PriceQuote]] = DEFAULT_PRICE_TABLE):
        self._table = MappingProxyType({
            normalize_name(name): tuple(quotes) for name, quotes in table.items()
        })

    def _lookup(self, name: str) -> Optional[tuple[PriceQuote, ...]]:
        quotes = self._table.get(normalize_name(name))
        if not quotes:
            logger.debug(f"No price data for '{name}'")
            return None
        return quotes

    def estimate(self, name: str) -> Optional[PriceQuote]:
        """Cheapest known quote for an item, or None if there is no data."""
        quotes = self._lookup(name)
        if quotes is None:
            return None
        return cheapest_quote(quotes)

    def compare(self, name: str) -> Optional[PriceComparison]:
        """All quotes for an item with the cheapest, or None if there is no data."""
        quotes = self._lookup(name)
        if quotes is None:
            return None
        return PriceComparison(quotes=quotes, cheapest=cheapest_quote(quotes))

    def known_items(self) -> list[str]:
        return sorted(self._table)
