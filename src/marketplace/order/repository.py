"""Repository for the Order aggregate."""

from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order, OrderItem

_SCAN_CHUNK = 500


def _scan(query):
    """Every record matching ``query``, fetched a chunk at a time."""
    offset = 0
    while True:
        items = query.offset(offset).limit(_SCAN_CHUNK).all().items
        yield from items
        if len(items) < _SCAN_CHUNK:
            return
        offset += _SCAN_CHUNK


@marketplace.repository(part_of=Order)
class OrderRepository:
    def with_number(self, order_number) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def ids_with_lines_from(self, shop_id) -> list[str]:
        """Ids of orders holding at least one line sold by ``shop_id``."""
        items = current_domain.repository_for(OrderItem)._dao.query.filter(shop_id=str(shop_id))
        return sorted({str(item.order_id) for item in _scan(items)})

    def search(self, user_id=None, status=None, shop_id=None, limit=50, offset=0) -> list[Order]:
        """Orders matching every given filter, newest first."""
        query = self._dao.query
        if user_id:
            query = query.filter(user_id=str(user_id))
        if status:
            query = query.filter(order_status=status)
        if shop_id:
            order_ids = self.ids_with_lines_from(shop_id)
            if not order_ids:
                return []
            query = query.filter(id__in=order_ids)

        return query.order_by("-created_at").offset(offset).limit(limit).all().items
