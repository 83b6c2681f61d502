"""Shared BDD fixtures and step definitions for checkout and order status."""

import pytest
from marketplace.cart.items import AddToCart
from marketplace.order.placement import PlaceOrder
from marketplace.shared.transaction import process
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the business error a step ran into."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a product priced {price:f} with a flat discount of {discount:f} and {stock:d} units in stock"),
    target_fixture="listing",
)
def discounted_product(make_product, price, discount, stock):
    product_id, variant_id = make_product(
        base_price=price,
        quantity=stock,
        discount_type="flat",
        discount_amount=discount,
    )
    return {"product_id": product_id, "variant_id": variant_id}


def _add_to_cart(listing, buyer_id, quantity):
    process(
        AddToCart(
            user_id=buyer_id,
            product_id=listing["product_id"],
            variant_id=listing["variant_id"],
            quantity=quantity,
        )
    )


@given(parsers.cfparse("the buyer has {quantity:d} units in the cart"))
def buyer_cart(listing, buyer_id, quantity):
    _add_to_cart(listing, buyer_id, quantity)


@given(parsers.cfparse("the buyer has placed an order for {quantity:d} units"), target_fixture="order_id")
def placed_order(listing, buyer_id, quantity):
    _add_to_cart(listing, buyer_id, quantity)
    return process(PlaceOrder(user_id=buyer_id, billing_address="7 Elm Road"))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("{stock:d} units remain in stock"))
def remaining_stock(listing, stock_of, stock):
    assert stock_of(listing["product_id"], listing["variant_id"]) == stock


@then(parsers.cfparse('the request is rejected with "{message}"'))
def request_rejected(error, message):
    assert error["exc"] is not None
    assert message in error["exc"].message
