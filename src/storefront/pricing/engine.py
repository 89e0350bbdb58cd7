"""Promotion aggregator: runs every active rule over a cart.

Rules are evaluated in the order they are listed and each one sees the
original cart quantities: promotions do not consume stock from each other,
so a unit given away by one rule still counts towards another rule's
minimum quantity.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from storefront.pricing.calculator import calculate
from storefront.pricing.matching import LineIndex, match
from storefront.shared.money import ZERO


@dataclass(frozen=True)
class AppliedPromotion:
    rule_id: str
    kind: str
    description: str
    discount_amount: Decimal
    line_amounts: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class PromotionResult:
    lines: tuple
    applied: tuple[AppliedPromotion, ...]
    skipped: tuple[str, ...] = ()

    @property
    def subtotal(self) -> Decimal:
        """Sum of the billed line subtotals, so it always matches the lines."""
        return sum((line.charged_subtotal for line in self.lines), ZERO)

    @property
    def total_discount(self) -> Decimal:
        return sum((promotion.discount_amount for promotion in self.applied), ZERO)

    @property
    def total(self) -> Decimal:
        return max(ZERO, self.subtotal - self.total_discount)

    def line_discounts(self) -> dict:
        """Discount attributed to each line position by the rules that matched it."""
        totals = {}
        for promotion in self.applied:
            for position, amount in promotion.line_amounts.items():
                totals[position] = totals.get(position, ZERO) + amount
        return totals


def _describe(rule, summary):
    if rule.description and summary:
        return f"{rule.description} ({summary})"
    return rule.description or summary


def apply_promotions(lines, rules) -> PromotionResult:
    """Evaluate ``rules`` against ``lines``.

    Args:
        lines: The cart's ``CartLine`` values, in listing order.
        rules: Parsed rules in the promotion repository's listing order.
            ``None`` entries (inapplicable rules) are ignored.

    Returns:
        A ``PromotionResult`` holding one ``AppliedPromotion`` per rule that
        produced a non-zero discount. Rules whose calculation failed are
        reported by id in ``skipped``.
    """
    index = LineIndex(lines)
    applied = []
    skipped = []

    for rule in rules:
        candidate = match(rule, index)
        if candidate is None:
            continue
        try:
            discount = calculate(candidate, index)
        except (ArithmeticError, ValueError):
            skipped.append(rule.rule_id)
            continue
        if discount.amount <= ZERO:
            continue
        applied.append(
            AppliedPromotion(
                rule_id=rule.rule_id,
                kind=rule.kind.value,
                description=_describe(rule, discount.summary),
                discount_amount=discount.amount,
                line_amounts=discount.line_amounts,
            )
        )

    return PromotionResult(lines=index.lines, applied=tuple(applied), skipped=tuple(skipped))
