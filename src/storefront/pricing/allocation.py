"""Discount allocation: assigns a priced cart's discount to its lines.

Two strategies exist side by side and are chosen by the call path:

``SKU_ATTRIBUTED``
    Each promotion's discount stays on the lines of the SKU it matched, as
    attributed by the calculator. Used when checking out an owner's cart.

``PROPORTIONAL``
    The cart-level discount is spread over all lines by their share of the
    pre-discount subtotal. Used by the generic cart-subtotal paths, where
    the discount is not tied to particular lines.

Either way no line is discounted below zero, and the line discounts add up
to the cart discount (limited to the subtotal, since totals never go
negative).
"""

from enum import Enum

from storefront.pricing.engine import PromotionResult
from storefront.shared.money import ZERO, distribute, round_money


class AllocationStrategy(Enum):
    SKU_ATTRIBUTED = "SKU_Attributed"
    PROPORTIONAL = "Proportional"


def allocatable(result: PromotionResult):
    """The part of the total discount that lines can absorb."""
    return min(round_money(result.total_discount), round_money(result.subtotal))


def allocate_proportionally(result: PromotionResult) -> tuple:
    subtotal = result.subtotal
    if subtotal <= ZERO or not result.lines:
        return tuple(ZERO for _ in result.lines)

    amount = allocatable(result)
    shares = {position: amount * line.charged_subtotal / subtotal for position, line in enumerate(result.lines)}
    caps = {position: line.charged_subtotal for position, line in enumerate(result.lines)}
    allotted = distribute(amount, shares, caps)
    return tuple(allotted[position] for position in range(len(result.lines)))


def allocate_by_sku(result: PromotionResult) -> tuple:
    attributed = result.line_discounts()
    allotted = {
        position: min(attributed.get(position, ZERO), line.charged_subtotal)
        for position, line in enumerate(result.lines)
    }

    # Stacked rules can overflow a line, and sub-cent lines can cap a rule's
    # parts below its rounded amount; either way the rest goes where there is room.
    spill = allocatable(result) - sum(allotted.values(), ZERO)
    if spill > ZERO:
        headroom = {
            position: line.charged_subtotal - allotted[position]
            for position, line in enumerate(result.lines)
            if line.charged_subtotal > allotted[position]
        }
        room = sum(headroom.values(), ZERO)
        if room > ZERO:
            spill = min(spill, room)
            shares = {position: spill * space / room for position, space in headroom.items()}
            for position, extra in distribute(spill, shares, headroom).items():
                allotted[position] += extra

    return tuple(allotted[position] for position in range(len(result.lines)))


_STRATEGIES = {
    AllocationStrategy.SKU_ATTRIBUTED: allocate_by_sku,
    AllocationStrategy.PROPORTIONAL: allocate_proportionally,
}


def allocate(result: PromotionResult, strategy: AllocationStrategy) -> tuple:
    """Per-line discounts, aligned with ``result.lines``."""
    return _STRATEGIES[AllocationStrategy(strategy)](result)
