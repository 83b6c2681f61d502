"""Order placement: turns the user's cart into an order.

The whole workflow is one unit of work: stock is checked and reserved under
row locks, the order and its items are written, and the cart is emptied.
If any step fails, nothing is persisted; the cart stays as it was and no
stock is consumed.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace
from marketplace.exceptions import EmptyCartError
from marketplace.inventory.ledger import InventoryLedger
from marketplace.order.numbering import next_order_number
from marketplace.order.order import Order
from marketplace.shared.transaction import lock_for_update

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    billing_address = Text(required=True)


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = current_domain.repository_for(Cart).for_user(command.user_id)
        if cart is not None:
            cart = lock_for_update(Cart, cart.id)
        if cart is None or not cart.items:
            raise EmptyCartError("Cart is empty", user_id=str(command.user_id))

        lines = list(cart.items)

        ledger = InventoryLedger()
        ledger.reserve(lines)

        order = Order.place(
            user_id=command.user_id,
            order_number=next_order_number(),
            billing_address=command.billing_address,
            lines=lines,
        )
        cart.check_out(order.id)

        ledger.save()
        current_domain.repository_for(Order).add(order)
        current_domain.repository_for(Cart).add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            total_amount=order.total_amount,
            items=len(lines),
        )
        return str(order.id)
