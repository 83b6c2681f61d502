"""Marketplace API package."""

from marketplace.api.catalogue import category_router, product_router, shop_router
from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import admin_router, cart_router, order_router, seller_router

routers = [shop_router, category_router, product_router, cart_router, order_router, admin_router, seller_router]

__all__ = [
    "admin_router",
    "cart_router",
    "category_router",
    "order_router",
    "product_router",
    "register_error_handlers",
    "routers",
    "seller_router",
    "shop_router",
]
