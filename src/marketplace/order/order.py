"""Order aggregate and its status machine.

An order is created in one step from the checked-out cart lines. Its items
are snapshots and are never changed afterwards; only the order's status
moves, along this graph::

    pending ──► shipped ──► delivered
       │           │
       └─────┬─────┘
             ▼
         cancelled

``delivered`` and ``cancelled`` are terminal.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.exceptions import ConflictError
from marketplace.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from marketplace.shared.pricing import sum_amounts, to_amount


class OrderStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Unknown order status '{value}', expected one of: {allowed}"]}) from None


@marketplace.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)


@marketplace.aggregate
class Order:
    user_id = Identifier(required=True)
    order_number = String(required=True, max_length=50, unique=True)
    total_amount = Float(required=True, min_value=0.0)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    billing_address = Text(required=True)
    items = HasMany(OrderItem)
    cancelled_by = String(max_length=20)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_line_totals(self):
        if not self.items:
            return
        if to_amount(sum_amounts(i.total_price for i in self.items)) != self.total_amount:
            raise ValidationError({"total_amount": ["Order total must equal the sum of its line totals"]})

    @classmethod
    def place(cls, user_id, order_number, billing_address, lines):
        """Build a pending order from cart lines, copying their prices verbatim."""
        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=line.product_id,
                variant_id=line.variant_id,
                shop_id=line.shop_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line.total_price,
            )
            for line in lines
        ]
        order = cls(
            user_id=user_id,
            order_number=order_number,
            billing_address=billing_address,
            total_amount=to_amount(sum_amounts(i.total_price for i in items)),
            order_status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            items=items,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                order_number=order_number,
                total_amount=order.total_amount,
                item_count=len(items),
                items=json.dumps(
                    [
                        {
                            "product_id": str(i.product_id),
                            "variant_id": str(i.variant_id),
                            "shop_id": str(i.shop_id),
                            "quantity": i.quantity,
                            "unit_price": i.unit_price,
                            "total_price": i.total_price,
                        }
                        for i in items
                    ]
                ),
                placed_at=now,
            )
        )
        return order

    @property
    def status(self) -> OrderStatus:
        return OrderStatus(self.order_status)

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def transition_to(self, new_status, changed_by="admin") -> bool:
        """Move to ``new_status``; returns False when already there.

        Raises ConflictError for a transition the graph does not allow.
        """
        target = parse_status(new_status)
        previous = self.status
        if target is previous:
            return False

        if target not in _TRANSITIONS[previous]:
            raise ConflictError(
                f"Cannot change order status from {previous.value} to {target.value}",
                order_id=str(self.id),
                current_status=previous.value,
                requested_status=target.value,
            )

        now = datetime.now(UTC)
        self.order_status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                changed_at=now,
            )
        )

        if target is OrderStatus.CANCELLED:
            self.cancelled_by = changed_by
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    user_id=str(self.user_id),
                    previous_status=previous.value,
                    cancelled_by=changed_by,
                    cancelled_at=now,
                )
            )
        return True
