"""Order number generation.

Numbers look like ``ORD-1718000000000-3FA9C1``: a millisecond timestamp and a
random suffix. A number already on file is skipped and a fresh one drawn;
the unique constraint on ``Order.order_number`` backs this up at commit.
"""

import secrets
import time

import structlog
from protean.utils.globals import current_domain

from marketplace.config import get_settings
from marketplace.exceptions import ConflictError
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


def generate_order_number(prefix: str = "ORD") -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def next_order_number() -> str:
    """An order number not yet used by any stored order."""
    settings = get_settings()
    repo = current_domain.repository_for(Order)

    for attempt in range(1, settings.order_number_attempts + 1):
        candidate = generate_order_number(settings.order_number_prefix)
        if repo.with_number(candidate) is None:
            return candidate
        logger.warning("Order number collision", order_number=candidate, attempt=attempt)

    raise ConflictError("Could not allocate a unique order number, please retry")
