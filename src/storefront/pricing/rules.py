"""Promotion rule model: typed, validated views of stored rule documents.

A promotion stores its parameters as a loose JSON document. ``parse_rule``
turns that document into one of three frozen rule types, or returns ``None``
when the document cannot describe a working rule. A ``None`` rule is inert:
it contributes no discount and never raises, so one bad promotion cannot
break pricing for the rest of the cart.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storefront.shared.money import ZERO, to_decimal


class RuleKind(Enum):
    BUY_X_GET_Y_FREE = "BUY_ONE_GET_ONE_FREE"
    BUY_N_PAY_M = "BUY_3_PAY_2"
    BULK_PERCENT_DISCOUNT = "BULK_DISCOUNT"


@dataclass(frozen=True)
class BuyXGetYFree:
    """Buying ``trigger_quantity`` of one SKU grants ``free_quantity`` of another."""

    rule_id: str
    description: str
    trigger_sku: str
    free_sku: str
    trigger_quantity: int
    free_quantity: int

    kind = RuleKind.BUY_X_GET_Y_FREE


@dataclass(frozen=True)
class BuyNPayM:
    """Every ``paid_units + free_units`` units bought, ``free_units`` are free."""

    rule_id: str
    description: str
    sku: str
    min_quantity: int
    paid_units: int
    free_units: int

    kind = RuleKind.BUY_N_PAY_M

    @property
    def set_size(self) -> int:
        return self.paid_units + self.free_units


@dataclass(frozen=True)
class BulkPercentDiscount:
    """A percentage off every unit of a SKU once ``min_quantity`` is reached."""

    rule_id: str
    description: str
    sku: str
    min_quantity: int
    discount_percent: Decimal

    kind = RuleKind.BULK_PERCENT_DISCOUNT


Rule = BuyXGetYFree | BuyNPayM | BulkPercentDiscount


def _sku(parameters, key):
    value = parameters.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _number(parameters, key):
    value = parameters.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    number = to_decimal(value)
    if not number.is_finite():
        return None
    return number


def _positive_int(parameters, key):
    """Positive whole number, accepting JSON floats such as ``3.0``."""
    number = _number(parameters, key)
    if number is None or number <= ZERO or number != number.to_integral_value():
        return None
    return int(number)


def _percentage(parameters, key):
    percent = _number(parameters, key)
    if percent is None or percent <= ZERO or percent > 100:
        return None
    return percent


def parse_rule(rule_id, kind, parameters, description=""):
    """Build the typed rule for a stored promotion, or ``None`` if inapplicable.

    Args:
        rule_id: Identifier of the stored promotion.
        kind: A ``RuleKind`` or its stored string value.
        parameters: The deserialized rule document (a dict). Extra keys are
            ignored; anything else than a dict makes the rule inapplicable.
        description: Human description of the promotion.
    """
    try:
        kind = RuleKind(kind)
    except ValueError:
        return None
    if not isinstance(parameters, dict):
        return None

    rule_id = str(rule_id)
    description = description or ""

    if kind is RuleKind.BUY_X_GET_Y_FREE:
        trigger_sku = _sku(parameters, "trigger_sku")
        free_sku = _sku(parameters, "free_sku")
        trigger_quantity = _positive_int(parameters, "trigger_quantity")
        free_quantity = _positive_int(parameters, "free_quantity")
        if None in (trigger_sku, free_sku, trigger_quantity, free_quantity):
            return None
        # A line cannot be its own trigger and reward
        if trigger_sku == free_sku:
            return None
        return BuyXGetYFree(
            rule_id=rule_id,
            description=description,
            trigger_sku=trigger_sku,
            free_sku=free_sku,
            trigger_quantity=trigger_quantity,
            free_quantity=free_quantity,
        )

    if kind is RuleKind.BUY_N_PAY_M:
        sku = _sku(parameters, "sku")
        min_quantity = _positive_int(parameters, "min_quantity")
        paid_units = _positive_int(parameters, "paid_quantity_divisor")
        free_units = _positive_int(parameters, "free_quantity_divisor")
        if None in (sku, min_quantity, paid_units, free_units):
            return None
        return BuyNPayM(
            rule_id=rule_id,
            description=description,
            sku=sku,
            min_quantity=min_quantity,
            paid_units=paid_units,
            free_units=free_units,
        )

    sku = _sku(parameters, "sku")
    min_quantity = _positive_int(parameters, "min_quantity")
    discount_percent = _percentage(parameters, "discount_percentage")
    if None in (sku, min_quantity, discount_percent):
        return None
    return BulkPercentDiscount(
        rule_id=rule_id,
        description=description,
        sku=sku,
        min_quantity=min_quantity,
        discount_percent=discount_percent,
    )
