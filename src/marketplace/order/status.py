"""Order status changes: commands and handler.

Admins move orders along the status graph; owners may only cancel. The
order row is locked before its status is read, and cancelling hands every
line's units back to the Inventory Ledger in the same unit of work. A repeat
request for the current status changes nothing, so stock is restored once
per order no matter how often it is cancelled.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.exceptions import ForbiddenError
from marketplace.inventory.ledger import InventoryLedger
from marketplace.order.order import Order, OrderStatus
from marketplace.shared.transaction import lock_for_update

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        order = lock_for_update(Order, command.order_id)
        return self._move(order, command.status, changed_by="admin")

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = lock_for_update(Order, command.order_id)
        if not order.is_owned_by(command.user_id):
            raise ForbiddenError("You can only cancel your own orders", order_id=str(order.id))
        return self._move(order, OrderStatus.CANCELLED.value, changed_by="user")

    def _move(self, order, new_status, changed_by):
        previous = order.order_status
        if not order.transition_to(new_status, changed_by=changed_by):
            logger.info("Order already in requested status", order_id=str(order.id), status=previous)
            return order.order_status

        if order.status is OrderStatus.CANCELLED:
            ledger = InventoryLedger()
            ledger.restore(list(order.items))
            ledger.save()
            logger.info(
                "Stock restored for cancelled order",
                order_id=str(order.id),
                previous_status=previous,
                cancelled_by=changed_by,
            )

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.order_status,
        )
        return order.order_status
