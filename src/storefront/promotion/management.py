"""Promotion management: commands and handler."""

import json

from protean import current_domain, handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text

from storefront.domain import storefront
from storefront.promotion.promotion import Promotion


@storefront.command(part_of="Promotion")
class CreatePromotion:
    kind = String(required=True, max_length=50)
    description = String(max_length=255)
    rule = Text(required=True)  # JSON: rule parameters
    active = Boolean(default=True)


@storefront.command(part_of="Promotion")
class ActivatePromotion:
    promotion_id = Identifier(required=True)


@storefront.command(part_of="Promotion")
class DeactivatePromotion:
    promotion_id = Identifier(required=True)


@storefront.command(part_of="Promotion")
class DeletePromotion:
    promotion_id = Identifier(required=True)


@storefront.command_handler(part_of=Promotion)
class ManagePromotionsHandler:
    @handle(CreatePromotion)
    def create_promotion(self, command):
        try:
            parameters = json.loads(command.rule) if isinstance(command.rule, str) else command.rule
        except ValueError as exc:
            raise ValidationError({"rule": ["Rule must be a JSON object"]}) from exc
        promotion = Promotion.create(
            kind=command.kind,
            description=command.description or "",
            parameters=parameters,
            active=command.active if command.active is not None else True,
        )
        current_domain.repository_for(Promotion).add(promotion)
        return str(promotion.id)

    @handle(ActivatePromotion)
    def activate_promotion(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.activate()
        repo.add(promotion)

    @handle(DeactivatePromotion)
    def deactivate_promotion(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.deactivate()
        repo.add(promotion)

    @handle(DeletePromotion)
    def delete_promotion(self, command):
        repo = current_domain.repository_for(Promotion)
        repo.remove(repo.get(command.promotion_id))
