"""Inventory Ledger: on-hand stock per product variant.

The counter lives on ``Variant.quantity``; a variant is addressed by
``(product_id, variant_id)``. A ledger instance belongs to one unit of work:
it locks every Product it touches the first time it is read, keeps the
loaded aggregates, and writes them back once with ``save()``. Nothing is
persisted when the unit of work rolls back.
"""

from collections import defaultdict

from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.shared.transaction import lock_for_update


class InventoryLedger:
    def __init__(self) -> None:
        self._products: dict[str, Product] = {}

    def product(self, product_id) -> Product:
        """The locked Product aggregate, loaded once per unit of work."""
        key = str(product_id)
        if key not in self._products:
            self._products[key] = lock_for_update(Product, key)
        return self._products[key]

    def available(self, product_id, variant_id) -> int:
        return self.product(product_id).variant(variant_id).quantity

    def check_availability(self, product_id, variant_id, quantity) -> bool:
        return self.available(product_id, variant_id) >= quantity

    def decrement(self, product_id, variant_id, quantity) -> None:
        """Take ``quantity`` units out; raises InsufficientStockError instead of going negative."""
        self.product(product_id).withdraw_stock(variant_id, quantity)

    def increment(self, product_id, variant_id, quantity) -> None:
        self.product(product_id).restore_stock(variant_id, quantity)

    def reserve(self, lines) -> None:
        """Decrement stock for every line, or for none of them.

        Lines for the same variant are summed and checked as one demand.
        Products are locked in id order so overlapping reservations queue
        instead of deadlocking.
        """
        demand = defaultdict(int)
        for line in lines:
            demand[(str(line.product_id), str(line.variant_id))] += line.quantity

        for product_id in sorted({product_id for product_id, _ in demand}):
            self.product(product_id)

        for (product_id, variant_id), quantity in demand.items():
            if not self.check_availability(product_id, variant_id, quantity):
                raise self.product(product_id).insufficient_stock(variant_id, quantity)

        for (product_id, variant_id), quantity in demand.items():
            self.decrement(product_id, variant_id, quantity)

    def restore(self, lines) -> None:
        """Put the units of each line back on hand, locking products in id order."""
        for product_id in sorted({str(line.product_id) for line in lines}):
            self.product(product_id)

        for line in lines:
            self.increment(line.product_id, line.variant_id, line.quantity)

    def save(self) -> None:
        repo = current_domain.repository_for(Product)
        for product in self._products.values():
            repo.add(product)
