"""Money helpers: Decimal arithmetic rounded to the currency minor unit.

Aggregates persist amounts as floats; all pricing arithmetic happens on
``Decimal`` values and is rounded half-up to two places only when a final
amount is produced.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Tolerance for comparing persisted (float) amounts
TOLERANCE = 0.005


def to_decimal(value) -> Decimal:
    """Convert an int, float, str or Decimal amount to ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc


def round_money(value) -> Decimal:
    """Round to the minor unit (2 places) using round-half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_float(value: Decimal) -> float:
    """Rounded float representation for persistence and JSON payloads."""
    return float(round_money(value))


def amounts_match(left, right) -> bool:
    return abs(float(left) - float(right)) < TOLERANCE


def distribute(amount: Decimal, shares: dict, caps: dict | None = None) -> dict:
    """Split a rounded ``amount`` over full-precision ``shares`` in whole cents.

    Every share is truncated to cents, then the cents still missing from
    ``amount`` go one at a time to the shares with the largest truncated
    remainder (ties broken by key order). The result sums exactly to
    ``amount``; a share never exceeds its entry in ``caps``.
    """
    caps = caps or {}
    allotted = {key: to_decimal(share).quantize(CENT, rounding=ROUND_DOWN) for key, share in shares.items()}
    missing = int((round_money(amount) - sum(allotted.values(), ZERO)) / CENT)

    by_remainder = sorted(
        shares,
        key=lambda key: to_decimal(shares[key]) - allotted[key],
        reverse=True,
    )
    while missing > 0:
        progressed = False
        for key in by_remainder:
            if missing == 0:
                break
            cap = caps.get(key)
            if cap is not None and allotted[key] + CENT > cap:
                continue
            allotted[key] += CENT
            missing -= 1
            progressed = True
        if not progressed:
            break
    return allotted
