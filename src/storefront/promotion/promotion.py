"""Promotion aggregate: a stored, typed discount policy.

The rule parameters are kept as the JSON document they were authored with.
``to_rule()`` turns that document into the pricing engine's typed rule; a
document that cannot describe a working rule yields ``None`` and the
promotion simply grants nothing at pricing time.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, Text

from storefront.domain import storefront
from storefront.pricing.rules import RuleKind, parse_rule
from storefront.promotion.events import PromotionActivated, PromotionCreated, PromotionDeactivated


@storefront.aggregate
class Promotion:
    kind = String(required=True, choices=RuleKind, max_length=50)
    description = String(max_length=255)
    rule = Text()  # JSON object of rule parameters
    active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, kind, description, parameters, active=True):
        """Author a promotion, rejecting parameters the engine could not apply."""
        if parse_rule("new", kind, parameters, description) is None:
            raise ValidationError({"rule": [f"Invalid parameters for a {kind} promotion"]})

        now = datetime.now(UTC)
        promotion = cls(
            kind=RuleKind(kind).value,
            description=description,
            rule=json.dumps(parameters),
            active=active,
            created_at=now,
            updated_at=now,
        )
        promotion.raise_(
            PromotionCreated(
                promotion_id=str(promotion.id),
                kind=promotion.kind,
                description=description,
                rule=promotion.rule,
                active=bool(active),
            )
        )
        return promotion

    # -------------------------------------------------------------------
    # Rule view
    # -------------------------------------------------------------------
    def parameters(self) -> dict:
        """The stored rule document; an unreadable document reads as empty."""
        if not self.rule:
            return {}
        try:
            parameters = json.loads(self.rule)
        except (TypeError, ValueError):
            return {}
        return parameters if isinstance(parameters, dict) else {}

    def to_rule(self):
        return parse_rule(self.id, self.kind, self.parameters(), self.description)

    # -------------------------------------------------------------------
    # Toggling
    # -------------------------------------------------------------------
    def activate(self):
        if self.active:
            raise ValidationError({"active": ["Promotion is already active"]})
        now = datetime.now(UTC)
        self.active = True
        self.updated_at = now
        self.raise_(PromotionActivated(promotion_id=str(self.id), activated_at=now))

    def deactivate(self):
        if not self.active:
            raise ValidationError({"active": ["Promotion is already inactive"]})
        now = datetime.now(UTC)
        self.active = False
        self.updated_at = now
        self.raise_(PromotionDeactivated(promotion_id=str(self.id), deactivated_at=now))
