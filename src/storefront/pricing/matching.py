"""Applicability matcher: decides which rules are candidates for a cart."""

from dataclasses import dataclass

from storefront.pricing.lines import CartLine
from storefront.pricing.rules import BuyXGetYFree


class LineIndex:
    """Cart lines grouped by SKU, in their original listing order."""

    def __init__(self, lines):
        self.lines = tuple(lines)
        self._by_sku = {}
        for position, line in enumerate(self.lines):
            self._by_sku.setdefault(line.sku, []).append(position)

    @property
    def skus(self) -> frozenset:
        return frozenset(self._by_sku)

    def positions(self, sku) -> tuple[int, ...]:
        return tuple(self._by_sku.get(sku, ()))

    def lines_for(self, sku) -> tuple[CartLine, ...]:
        return tuple(self.lines[position] for position in self.positions(sku))

    def quantity(self, sku) -> int:
        return sum(line.quantity for line in self.lines_for(sku))

    def __contains__(self, sku):
        return sku in self._by_sku


@dataclass(frozen=True)
class Match:
    """A candidate rule with the positions of the cart lines it refers to.

    For BuyXGetYFree ``trigger`` holds the trigger-SKU lines and ``target``
    the free-SKU lines; the single-SKU kinds only fill ``target``.
    """

    rule: object
    target: tuple[int, ...]
    trigger: tuple[int, ...] = ()


def match(rule, index: LineIndex) -> Match | None:
    """Return a ``Match`` when ``rule`` is a candidate for the indexed cart."""
    if rule is None:
        return None

    if isinstance(rule, BuyXGetYFree):
        if rule.trigger_sku not in index or rule.free_sku not in index:
            return None
        return Match(
            rule=rule,
            target=index.positions(rule.free_sku),
            trigger=index.positions(rule.trigger_sku),
        )

    # Quantity pre-check keeps trivially failing rules out of the calculator
    if rule.sku not in index or index.quantity(rule.sku) < rule.min_quantity:
        return None
    return Match(rule=rule, target=index.positions(rule.sku))
