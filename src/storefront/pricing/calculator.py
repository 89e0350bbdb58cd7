"""Discount calculator: one pure function per promotion kind.

Each calculator receives a ``Match`` and the ``LineIndex`` it was produced
from, and returns a ``Discount``: the promotion's amount rounded to the
minor unit plus the part of it attributed to each cart line. Intermediate
arithmetic stays at full ``Decimal`` precision; rounding happens once.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from storefront.pricing.matching import LineIndex, Match
from storefront.pricing.rules import BulkPercentDiscount, BuyNPayM, BuyXGetYFree
from storefront.shared.money import ZERO, distribute, round_money

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Discount:
    amount: Decimal
    line_amounts: dict = field(default_factory=dict)
    summary: str = ""

    @classmethod
    def none(cls):
        return cls(amount=ZERO)


def _attributed(raw_total, raw_parts, index):
    """Round ``raw_total`` and split it over lines, capped at billed line subtotals."""
    amount = round_money(raw_total)
    if amount <= ZERO:
        return amount, {}
    caps = {position: index.lines[position].charged_subtotal for position in raw_parts}
    return amount, distribute(amount, raw_parts, caps)


def buy_x_get_y_free(matched: Match, index: LineIndex) -> Discount:
    rule = matched.rule
    trigger_total = sum(index.lines[position].quantity for position in matched.trigger)
    free_total = sum(index.lines[position].quantity for position in matched.target)

    eligible_sets = trigger_total // rule.trigger_quantity
    entitled = eligible_sets * rule.free_quantity
    granted = min(entitled, free_total)
    if granted <= 0:
        return Discount.none()

    # Free units are taken from the reward lines in listing order
    raw_parts = {}
    remaining = granted
    for position in matched.target:
        if remaining <= 0:
            break
        line = index.lines[position]
        units = min(remaining, line.quantity)
        raw_parts[position] = line.unit_price * units
        remaining -= units

    amount, line_amounts = _attributed(sum(raw_parts.values(), ZERO), raw_parts, index)
    return Discount(
        amount=amount,
        line_amounts=line_amounts,
        summary=f"Free: {granted} x {rule.free_sku}",
    )


def buy_n_pay_m(matched: Match, index: LineIndex) -> Discount:
    rule = matched.rule
    lines = [index.lines[position] for position in matched.target]
    total_quantity = sum(line.quantity for line in lines)

    complete_sets = total_quantity // rule.set_size
    free_units = complete_sets * rule.free_units
    if free_units <= 0:
        return Discount.none()

    # Lines of one SKU are assumed to share a price; the first line's wins
    unit_price = lines[0].unit_price
    raw_total = min(unit_price * free_units, sum((line.subtotal for line in lines), ZERO))

    raw_parts = {}
    remaining = raw_total
    for position, line in zip(matched.target, lines, strict=True):
        if remaining <= ZERO:
            break
        part = min(remaining, line.subtotal)
        raw_parts[position] = part
        remaining -= part

    amount, line_amounts = _attributed(raw_total, raw_parts, index)
    return Discount(
        amount=amount,
        line_amounts=line_amounts,
        summary=f"Pay {rule.paid_units} get {rule.free_units} free: {free_units} x {rule.sku}",
    )


def bulk_percent_discount(matched: Match, index: LineIndex) -> Discount:
    rule = matched.rule
    rate = rule.discount_percent / HUNDRED
    raw_parts = {position: index.lines[position].subtotal * rate for position in matched.target}

    amount, line_amounts = _attributed(sum(raw_parts.values(), ZERO), raw_parts, index)
    return Discount(
        amount=amount,
        line_amounts=line_amounts,
        summary=f"{rule.discount_percent.normalize():f}% off {rule.sku}",
    )


_CALCULATORS = {
    BuyXGetYFree: buy_x_get_y_free,
    BuyNPayM: buy_n_pay_m,
    BulkPercentDiscount: bulk_percent_discount,
}


def calculate(matched: Match, index: LineIndex) -> Discount:
    """Dispatch to the calculator for the matched rule's kind."""
    return _CALCULATORS[type(matched.rule)](matched, index)
