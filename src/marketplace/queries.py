"""Read side: plain-dict views over the aggregates for the API.

Nothing here writes. Listings are paginated with ``limit``/``offset``,
clamped to the configured page sizes.
"""

from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.category import Category
from marketplace.catalogue.product import Product
from marketplace.catalogue.shop import Shop
from marketplace.config import get_settings
from marketplace.exceptions import ForbiddenError, NotFoundError
from marketplace.order.order import Order, parse_status
from marketplace.shared.pricing import compute_unit_price, sum_amounts, to_amount
from marketplace.shared.transaction import find


def page(limit=None, offset=None) -> tuple[int, int]:
    settings = get_settings()
    limit = settings.default_page_size if limit is None else limit
    return max(1, min(limit, settings.max_page_size)), max(0, offset or 0)


def _product_or_none(product_id, cache) -> Product | None:
    key = str(product_id)
    if key not in cache:
        try:
            cache[key] = find(Product, key)
        except NotFoundError:
            cache[key] = None
    return cache[key]


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
def shop_view(shop: Shop) -> dict:
    return {
        "id": str(shop.id),
        "owner_id": str(shop.owner_id),
        "shop_name": shop.shop_name,
        "description": shop.description,
        "address": shop.address,
        "status": shop.status,
        "created_at": shop.created_at,
        "updated_at": shop.updated_at,
    }


def product_view(product: Product) -> dict:
    return {
        "id": str(product.id),
        "shop_id": str(product.shop_id),
        "category_id": str(product.category_id) if product.category_id else None,
        "title": product.title,
        "slug": product.slug,
        "discount_type": product.discount_type,
        "discount_amount": product.discount_amount,
        "status": product.status,
        "variants": [
            {
                "id": str(v.id),
                "label": v.label,
                "quantity": v.quantity,
                "base_price": v.base_price,
                "unit_price": to_amount(
                    compute_unit_price(v.base_price, product.discount_type, product.discount_amount)
                ),
            }
            for v in product.variants
        ],
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def get_product(product_id) -> dict:
    return product_view(find(Product, product_id))


def get_shop(shop_id) -> dict:
    return shop_view(find(Shop, shop_id))


def category_view(category: Category) -> dict:
    return {
        "id": str(category.id),
        "category_name": category.category_name,
        "slug": category.slug,
        "parent_id": str(category.parent_id) if category.parent_id else None,
        "status": category.status,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def get_category(category_id) -> dict:
    return category_view(find(Category, category_id))


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
def cart_item_view(item, product: Product | None = None) -> dict:
    view = {
        "id": str(item.id),
        "user_id": str(item.user_id),
        "product_id": str(item.product_id),
        "variant_id": str(item.variant_id),
        "shop_id": str(item.shop_id),
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "total_price": item.total_price,
        "added_at": item.added_at,
    }
    if product is not None:
        variant = next((v for v in product.variants if str(v.id) == str(item.variant_id)), None)
        view["product"] = {"id": str(product.id), "title": product.title, "shop_id": str(product.shop_id)}
        view["variant"] = (
            {"id": str(variant.id), "label": variant.label, "base_price": variant.base_price} if variant else None
        )
    return view


def get_cart_item(user_id, cart_item_id) -> dict:
    cart = current_domain.repository_for(Cart).for_user(user_id)
    if cart is None:
        raise NotFoundError("Cart item not found", cart_item_id=str(cart_item_id))
    return cart_item_view(cart.item(cart_item_id))


def cart_summary(user_id) -> dict:
    """The user's cart with product and variant details for every line."""
    cart = current_domain.repository_for(Cart).for_user(user_id)
    if cart is None:
        return {"cart": {"user_id": str(user_id), "cart_id": None, "items": [], "total_cart_value": 0.0}}

    products = {}
    items = []
    for item in sorted(cart.items, key=lambda i: i.added_at):
        view = cart_item_view(item, _product_or_none(item.product_id, products))
        view.setdefault("product", None)
        view.setdefault("variant", None)
        items.append(view)

    return {
        "cart": {
            "user_id": str(user_id),
            "cart_id": str(cart.id),
            "items": items,
            "total_cart_value": to_amount(cart.total),
        }
    }


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
def order_view(order: Order, shop_id=None) -> dict:
    """An order with its lines, optionally narrowed to one shop's lines."""
    items = [i for i in order.items if shop_id is None or str(i.shop_id) == str(shop_id)]
    view = {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "order_number": order.order_number,
        "total_amount": order.total_amount,
        "order_status": order.order_status,
        "payment_status": order.payment_status,
        "billing_address": order.billing_address,
        "created_at": order.created_at,
        "items": [
            {
                "id": str(i.id),
                "product_id": str(i.product_id),
                "variant_id": str(i.variant_id),
                "shop_id": str(i.shop_id),
                "quantity": i.quantity,
                "unit_price": i.unit_price,
                "total_price": i.total_price,
            }
            for i in items
        ],
    }
    if shop_id is not None:
        view["shop_total"] = to_amount(sum_amounts(i.total_price for i in items))
    return view


def get_order(order_id, user_id, role="user") -> dict:
    order = find(Order, order_id)
    if role != "admin" and not order.is_owned_by(user_id):
        raise ForbiddenError("You can only view your own orders", order_id=str(order_id))
    return order_view(order)


def list_user_orders(user_id, status=None, limit=None, offset=None) -> list[dict]:
    if status:
        parse_status(status)
    limit, offset = page(limit, offset)
    orders = current_domain.repository_for(Order).search(
        user_id=user_id,
        status=status,
        limit=limit,
        offset=offset,
    )
    return [order_view(o) for o in orders]


def list_all_orders(user_id=None, status=None, shop_id=None, limit=None, offset=None) -> list[dict]:
    if status:
        parse_status(status)
    limit, offset = page(limit, offset)
    orders = current_domain.repository_for(Order).search(
        user_id=user_id,
        status=status,
        shop_id=shop_id,
        limit=limit,
        offset=offset,
    )
    return [order_view(o) for o in orders]


def list_seller_orders(owner_id, status=None, limit=None, offset=None) -> list[dict]:
    """Orders with lines from the caller's shop, showing only those lines."""
    shop = current_domain.repository_for(Shop).for_owner(owner_id)
    if shop is None:
        raise NotFoundError("Shop not found for this user", user_id=str(owner_id))

    if status:
        parse_status(status)
    limit, offset = page(limit, offset)
    orders = current_domain.repository_for(Order).search(
        status=status,
        shop_id=shop.id,
        limit=limit,
        offset=offset,
    )
    return [order_view(o, shop_id=shop.id) for o in orders]
