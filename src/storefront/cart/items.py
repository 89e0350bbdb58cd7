"""Cart item management: commands and handler.

Carts are addressed by owner: adding the first item opens the owner's active
cart. Stock is checked against the inventory port before an item is added
or its quantity raised.
"""

from protean import current_domain, handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, Integer, String

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.inventory import get_stock_checker


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=50)
    name = String(max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    owner_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    owner_id = Identifier(required=True)
    item_id = Identifier(required=True)


def _ensure_stock(sku, quantity):
    if not get_stock_checker().has_stock(sku, quantity):
        raise ValidationError({"quantity": [f"Insufficient stock for {sku}"]})


def _active_cart(repo, owner_id):
    cart = repo.active_for_owner(owner_id)
    if cart is None:
        raise ObjectNotFoundError(f"No active cart for owner {owner_id}")
    return cart


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.active_for_owner(command.owner_id) or ShoppingCart.create(owner_id=command.owner_id)

        existing = next((i for i in cart.items if str(i.product_id) == str(command.product_id)), None)
        already_held = existing.quantity if existing else 0
        sku = existing.sku if existing else command.sku
        _ensure_stock(sku, already_held + command.quantity)

        cart.add_item(
            product_id=command.product_id,
            sku=command.sku,
            name=command.name,
            unit_price=command.unit_price,
            quantity=command.quantity,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _active_cart(repo, command.owner_id)

        item = next((i for i in cart.items if str(i.id) == str(command.item_id)), None)
        if item is not None and command.new_quantity > item.quantity:
            _ensure_stock(item.sku, command.new_quantity)

        cart.update_item_quantity(item_id=command.item_id, new_quantity=command.new_quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _active_cart(repo, command.owner_id)
        cart.remove_item(item_id=command.item_id)
        repo.add(cart)
