"""Repository for the Cart aggregate."""

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace
from marketplace.shared.transaction import lock_for_update


@marketplace.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id) -> Cart | None:
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def get_or_create(self, user_id) -> Cart:
        """The user's cart locked for update, or a new unsaved one.

        Two first adds racing for one user both build a new cart; the unique
        ``user_id`` index rejects the second at commit and the retry finds
        the cart the first one saved.
        """
        cart = self.for_user(user_id)
        if cart is None:
            return Cart.create(user_id=user_id)
        return lock_for_update(Cart, cart.id)
