"""FastAPI routes for carts and orders."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from marketplace import queries
from marketplace.api.auth import Identity, current_identity, require_admin
from marketplace.api.dispatch import dispatch
from marketplace.api.schemas import (
    AddToCartRequest,
    OrderStatusValue,
    PlaceOrderRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from marketplace.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItemQuantity
from marketplace.order.placement import PlaceOrder
from marketplace.order.status import CancelOrder, UpdateOrderStatus

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.post("", status_code=201)
async def add_to_cart(body: AddToCartRequest, identity: Identity = Depends(current_identity)):
    item_id = await dispatch(
        AddToCart(
            user_id=identity.id,
            product_id=str(body.product_id),
            variant_id=str(body.variant_id),
            quantity=body.quantity,
        )
    )
    return {"message": "Item added to cart", "cart_item": queries.get_cart_item(identity.id, item_id)}


@cart_router.get("")
async def get_cart(identity: Identity = Depends(current_identity)):
    return queries.cart_summary(identity.id)


@cart_router.patch("/{cart_item_id}", status_code=201)
async def update_cart_item(
    cart_item_id: UUID,
    body: UpdateCartItemRequest,
    identity: Identity = Depends(current_identity),
):
    await dispatch(
        UpdateCartItemQuantity(
            user_id=identity.id,
            cart_item_id=str(cart_item_id),
            quantity=body.quantity,
        )
    )
    return {"message": "Cart item updated", "cart_item": queries.get_cart_item(identity.id, cart_item_id)}


@cart_router.delete("/{cart_item_id}")
async def remove_cart_item(cart_item_id: UUID, identity: Identity = Depends(current_identity)):
    await dispatch(RemoveCartItem(user_id=identity.id, cart_item_id=str(cart_item_id)))
    return {"message": "Cart item removed"}


@cart_router.delete("")
async def clear_cart(identity: Identity = Depends(current_identity)):
    deleted = await dispatch(ClearCart(user_id=identity.id))
    return {"message": "Cart cleared", "deleted_ids": deleted}


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/api/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def place_order(body: PlaceOrderRequest, identity: Identity = Depends(current_identity)):
    order_id = await dispatch(PlaceOrder(user_id=identity.id, billing_address=body.billing_address))
    return {
        "message": "Order placed successfully",
        "order": queries.get_order(order_id, identity.id, identity.role),
    }


@order_router.get("")
async def list_orders(
    status: OrderStatusValue | None = None,
    limit: int | None = Query(default=None, ge=1),
    offset: int | None = Query(default=None, ge=0),
    identity: Identity = Depends(current_identity),
):
    return {"orders": queries.list_user_orders(identity.id, status=status, limit=limit, offset=offset)}


@order_router.get("/{order_id}")
async def get_order(order_id: UUID, identity: Identity = Depends(current_identity)):
    return {"order": queries.get_order(order_id, identity.id, identity.role)}


@order_router.patch("/{order_id}/cancel")
async def cancel_order(order_id: UUID, identity: Identity = Depends(current_identity)):
    status = await dispatch(CancelOrder(order_id=str(order_id), user_id=identity.id))
    return {"message": "Order cancelled", "order_status": status}


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.get("/orders")
async def list_all_orders(
    user_id: UUID | None = None,
    status: OrderStatusValue | None = None,
    shop_id: UUID | None = None,
    limit: int | None = Query(default=None, ge=1),
    offset: int | None = Query(default=None, ge=0),
):
    orders = queries.list_all_orders(
        user_id=str(user_id) if user_id else None,
        status=status,
        shop_id=str(shop_id) if shop_id else None,
        limit=limit,
        offset=offset,
    )
    return {"orders": orders}


@admin_router.patch("/orders/{order_id}/status")
async def update_order_status(order_id: UUID, body: UpdateOrderStatusRequest):
    status = await dispatch(UpdateOrderStatus(order_id=str(order_id), status=body.status))
    return {"message": "Order status updated", "order_status": status}


# ---------------------------------------------------------------------------
# Seller Router
# ---------------------------------------------------------------------------
seller_router = APIRouter(prefix="/api/seller", tags=["seller"])


@seller_router.get("/orders")
async def list_seller_orders(
    status: OrderStatusValue | None = None,
    limit: int | None = Query(default=None, ge=1),
    offset: int | None = Query(default=None, ge=0),
    identity: Identity = Depends(current_identity),
):
    orders = queries.list_seller_orders(identity.id, status=status, limit=limit, offset=offset)
    return {"message": "Seller orders fetched", "orders": orders}
