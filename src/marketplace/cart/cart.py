"""Cart aggregate: one cart per user, created lazily on the first add.

Each line keeps the unit price computed when it was added. Later quantity
changes reuse that snapshot; they never re-price against the product's
current discount.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from marketplace.cart.events import (
    CartCheckedOut,
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from marketplace.domain import marketplace
from marketplace.exceptions import NotFoundError
from marketplace.shared.pricing import line_total, sum_amounts, to_amount


@marketplace.entity(part_of="Cart")
class CartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)
    added_at = DateTime()


@marketplace.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def item(self, item_id) -> CartItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFoundError("Cart item not found", cart_item_id=str(item_id))
        return item

    def add_item(self, product_id, variant_id, shop_id, quantity, unit_price):
        """Add a new line priced at ``unit_price`` (a Decimal from the Pricing Engine)."""
        now = datetime.now(UTC)
        item = CartItem(
            user_id=self.user_id,
            product_id=product_id,
            variant_id=variant_id,
            shop_id=shop_id,
            quantity=quantity,
            unit_price=to_amount(unit_price),
            total_price=to_amount(line_total(unit_price, quantity)),
            added_at=now,
        )
        self.add_items(item)
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
                quantity=quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity) -> CartItem:
        item = self.item(item_id)
        previous_quantity = item.quantity

        item.quantity = new_quantity
        item.total_price = to_amount(line_total(item.unit_price, new_quantity))
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                total_price=item.total_price,
            )
        )
        return item

    def remove_item(self, item_id):
        item = self.item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def _drop_all_items(self) -> list[str]:
        removed = [str(item.id) for item in self.items]
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        return removed

    def clear(self) -> list[str]:
        """Remove every line and return the removed ids."""
        if not self.items:
            raise NotFoundError("No items in cart", user_id=str(self.user_id))

        removed = self._drop_all_items()
        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), item_ids=removed))
        return removed

    def check_out(self, order_id):
        """Empty the cart after its lines were copied into ``order_id``."""
        count = len(self.items)
        self._drop_all_items()
        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                order_id=str(order_id),
                item_count=count,
            )
        )

    @property
    def total(self):
        return sum_amounts(item.total_price for item in self.items)

