"""Concurrent writers: checkout never oversells, and a user never gets two carts."""

import threading
from concurrent.futures import ThreadPoolExecutor
from uuid import uuid4

from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart
from marketplace.domain import marketplace
from marketplace.exceptions import InsufficientStockError
from marketplace.order.order import Order
from marketplace.order.placement import PlaceOrder
from marketplace.order.status import CancelOrder
from marketplace.shared.transaction import process
from protean import current_domain

BUYERS = 6
QUANTITY = 2
STOCK = 5


def _run_concurrently(fn, args_list):
    barrier = threading.Barrier(len(args_list))

    def _task(args):
        with marketplace.domain_context():
            barrier.wait()
            try:
                return fn(*args)
            except InsufficientStockError as exc:
                return exc

    with ThreadPoolExecutor(max_workers=len(args_list)) as pool:
        return list(pool.map(_task, args_list))


def _place(user_id):
    return process(PlaceOrder(user_id=user_id, billing_address="1 Market Row"))


class TestConcurrentPlacement:
    def test_exactly_floor_stock_over_quantity_succeed(self, make_product, stock_of):
        product_id, variant_id = make_product(quantity=STOCK)
        buyers = [str(uuid4()) for _ in range(BUYERS)]
        for buyer in buyers:
            process(AddToCart(user_id=buyer, product_id=product_id, variant_id=variant_id, quantity=QUANTITY))

        results = _run_concurrently(_place, [(buyer,) for buyer in buyers])

        placed = [r for r in results if isinstance(r, str)]
        rejected = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(placed) == STOCK // QUANTITY
        assert len(rejected) == BUYERS - STOCK // QUANTITY
        assert stock_of(product_id, variant_id) == STOCK - len(placed) * QUANTITY
        assert len(current_domain.repository_for(Order)._dao.query.all().items) == len(placed)

    def test_concurrent_cancels_restore_once(self, make_product, stock_of):
        product_id, variant_id = make_product(quantity=STOCK)
        buyer = str(uuid4())
        process(AddToCart(user_id=buyer, product_id=product_id, variant_id=variant_id, quantity=QUANTITY))
        order_id = _place(buyer)

        results = _run_concurrently(
            lambda: process(CancelOrder(order_id=order_id, user_id=buyer)),
            [() for _ in range(4)],
        )

        assert results == ["cancelled"] * 4
        assert stock_of(product_id, variant_id) == STOCK


class TestConcurrentFirstAdd:
    def test_racing_first_adds_share_one_cart(self, make_product):
        product_id, variant_id = make_product(quantity=50)
        buyer = str(uuid4())

        results = _run_concurrently(
            lambda: process(AddToCart(user_id=buyer, product_id=product_id, variant_id=variant_id, quantity=1)),
            [() for _ in range(8)],
        )

        assert all(isinstance(r, str) for r in results)
        carts = current_domain.repository_for(Cart)._dao.query.filter(user_id=buyer).all().items
        assert len(carts) == 1
        assert len(current_domain.repository_for(Cart).for_user(buyer).items) == 8
