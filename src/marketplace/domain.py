"""Marketplace domain: shops, products, carts and orders.

A single domain owns every aggregate so that checkout can convert a cart into
an order and withdraw stock from the catalogue inside one unit of work.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
