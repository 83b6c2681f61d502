"""Cart item management: commands and handler.

Adding to the cart is advisory: stock is checked but not held. Units are only
taken off the shelf when the order is placed.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.exceptions import ConflictError, NotFoundError
from marketplace.shared.transaction import find, lock_for_update

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class UpdateCartItemQuantity:
    user_id = Identifier(required=True)
    cart_item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class RemoveCartItem:
    user_id = Identifier(required=True)
    cart_item_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


def _locked_cart(user_id) -> Cart | None:
    cart = current_domain.repository_for(Cart).for_user(user_id)
    if cart is None:
        return None
    return lock_for_update(Cart, cart.id)


def _owned_cart(user_id, cart_item_id) -> Cart:
    """The user's cart, provided it holds ``cart_item_id``."""
    cart = _locked_cart(user_id)
    if cart is None:
        raise NotFoundError("Cart item not found", cart_item_id=str(cart_item_id))
    cart.item(cart_item_id)
    return cart


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = find(Product, command.product_id)
        if not product.is_purchasable:
            raise ConflictError(
                f"This product is {product.status} and cannot be added to the cart",
                product_id=str(product.id),
                status=product.status,
            )

        if not product.has_stock(command.variant_id, command.quantity):
            raise product.insufficient_stock(command.variant_id, command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)
        item = cart.add_item(
            product_id=product.id,
            variant_id=command.variant_id,
            shop_id=product.shop_id,
            quantity=command.quantity,
            unit_price=product.unit_price_of(command.variant_id),
        )
        repo.add(cart)
        return str(item.id)

    @handle(UpdateCartItemQuantity)
    def update_quantity(self, command):
        cart = _owned_cart(command.user_id, command.cart_item_id)
        item = cart.item(command.cart_item_id)

        # Only the increase needs to be on hand; the existing units were checked when added
        delta = command.quantity - item.quantity
        if delta > 0:
            product = find(Product, item.product_id)
            if not product.has_stock(item.variant_id, delta):
                raise product.insufficient_stock(item.variant_id, delta)

        cart.update_item_quantity(command.cart_item_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)
        return str(command.cart_item_id)

    @handle(RemoveCartItem)
    def remove_item(self, command):
        cart = _owned_cart(command.user_id, command.cart_item_id)
        cart.remove_item(command.cart_item_id)
        current_domain.repository_for(Cart).add(cart)
        return str(command.cart_item_id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = _locked_cart(command.user_id)
        if cart is None:
            raise NotFoundError("No items in cart", user_id=str(command.user_id))

        removed = cart.clear()
        current_domain.repository_for(Cart).add(cart)
        logger.info("Cart cleared", user_id=str(command.user_id), items=len(removed))
        return removed
