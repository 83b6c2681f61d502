"""Integration tests for checkout, order listings and status changes over HTTP."""

from uuid import uuid4

import pytest


@pytest.fixture()
def checkout(client, make_product, buyer_headers):
    """Factory: add ``quantity`` of a fresh product to the buyer's cart and place the order."""

    def _checkout(quantity=3, **product):
        product_id, variant_id = make_product(**product)
        client.post(
            "/api/cart",
            json={"product_id": product_id, "variant_id": variant_id, "quantity": quantity},
            headers=buyer_headers,
        )
        response = client.post("/api/orders", json={"billing_address": "7 Elm Road"}, headers=buyer_headers)
        return response, product_id, variant_id

    return _checkout


class TestPlaceOrder:
    def test_discounted_checkout(self, client, checkout, buyer_headers, stock_of):
        response, product_id, variant_id = checkout(quantity=3, discount_type="flat", discount_amount=5)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Order placed successfully"
        assert body["order"]["order_status"] == "pending"
        assert body["order"]["payment_status"] == "pending"
        assert body["order"]["total_amount"] == 45.0
        assert body["order"]["items"][0]["unit_price"] == 15.0
        assert stock_of(product_id, variant_id) == 2

        cart = client.get("/api/cart", headers=buyer_headers).json()["cart"]
        assert cart["items"] == []

    def test_empty_cart(self, client, buyer_headers):
        response = client.post("/api/orders", json={"billing_address": "7 Elm Road"}, headers=buyer_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Cart is empty"

    def test_blank_billing_address(self, client, buyer_headers):
        response = client.post("/api/orders", json={"billing_address": "   "}, headers=buyer_headers)
        assert response.status_code == 400
        assert "billing_address" in response.json()["errors"]

    def test_stock_gone_since_added(self, client, make_product, buyer_headers, seller_headers, stock_of):
        product_id, variant_id = make_product(quantity=3)
        client.post(
            "/api/cart",
            json={"product_id": product_id, "variant_id": variant_id, "quantity": 3},
            headers=buyer_headers,
        )
        client.patch(
            f"/api/products/{product_id}/variants/{variant_id}",
            json={"quantity": 1},
            headers=seller_headers,
        )

        response = client.post("/api/orders", json={"billing_address": "7 Elm Road"}, headers=buyer_headers)

        assert response.status_code == 409
        assert response.json()["available"] == 1
        assert stock_of(product_id, variant_id) == 1
        assert len(client.get("/api/cart", headers=buyer_headers).json()["cart"]["items"]) == 1


class TestReadOrders:
    def test_list_own_orders(self, client, checkout, buyer_headers):
        checkout()
        checkout()

        orders = client.get("/api/orders", headers=buyer_headers).json()["orders"]
        assert len(orders) == 2
        assert orders[0]["created_at"] >= orders[1]["created_at"]

    def test_invalid_status_filter(self, client, buyer_headers):
        response = client.get("/api/orders?status=lost", headers=buyer_headers)
        assert response.status_code == 400

    def test_order_detail(self, client, checkout, buyer_headers):
        order_id = checkout()[0].json()["order"]["id"]

        response = client.get(f"/api/orders/{order_id}", headers=buyer_headers)
        assert response.status_code == 200
        assert response.json()["order"]["billing_address"] == "7 Elm Road"

    def test_order_detail_of_another_user(self, client, checkout, headers_for):
        order_id = checkout()[0].json()["order"]["id"]

        response = client.get(f"/api/orders/{order_id}", headers=headers_for(uuid4()))
        assert response.status_code == 403

    def test_unknown_order(self, client, buyer_headers):
        response = client.get(f"/api/orders/{uuid4()}", headers=buyer_headers)
        assert response.status_code == 404


class TestCancelOrder:
    def test_owner_cancels_and_stock_returns(self, client, checkout, buyer_headers, stock_of):
        response, product_id, variant_id = checkout(quantity=3)
        order_id = response.json()["order"]["id"]

        response = client.patch(f"/api/orders/{order_id}/cancel", headers=buyer_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Order cancelled", "order_status": "cancelled"}
        assert stock_of(product_id, variant_id) == 5

    def test_cancel_twice_restores_once(self, client, checkout, buyer_headers, stock_of):
        response, product_id, variant_id = checkout(quantity=3)
        order_id = response.json()["order"]["id"]

        client.patch(f"/api/orders/{order_id}/cancel", headers=buyer_headers)
        client.patch(f"/api/orders/{order_id}/cancel", headers=buyer_headers)

        assert stock_of(product_id, variant_id) == 5

    def test_cannot_cancel_someone_elses_order(self, client, checkout, headers_for):
        order_id = checkout()[0].json()["order"]["id"]

        response = client.patch(f"/api/orders/{order_id}/cancel", headers=headers_for(uuid4()))
        assert response.status_code == 403
        assert response.json()["message"] == "You can only cancel your own orders"


class TestAdminStatus:
    def test_ship_then_deliver(self, client, checkout, admin_headers):
        order_id = checkout()[0].json()["order"]["id"]

        shipped = client.patch(f"/api/admin/orders/{order_id}/status", json={"status": "shipped"}, headers=admin_headers)
        delivered = client.patch(
            f"/api/admin/orders/{order_id}/status", json={"status": "delivered"}, headers=admin_headers
        )

        assert shipped.json() == {"message": "Order status updated", "order_status": "shipped"}
        assert delivered.json()["order_status"] == "delivered"

    def test_illegal_transition(self, client, checkout, admin_headers):
        order_id = checkout()[0].json()["order"]["id"]
        client.patch(f"/api/admin/orders/{order_id}/status", json={"status": "shipped"}, headers=admin_headers)
        client.patch(f"/api/admin/orders/{order_id}/status", json={"status": "delivered"}, headers=admin_headers)

        response = client.patch(
            f"/api/admin/orders/{order_id}/status", json={"status": "cancelled"}, headers=admin_headers
        )
        assert response.status_code == 409
        assert response.json()["message"] == "Cannot change order status from delivered to cancelled"

    def test_unknown_status_value(self, client, checkout, admin_headers):
        order_id = checkout()[0].json()["order"]["id"]
        response = client.patch(f"/api/admin/orders/{order_id}/status", json={"status": "lost"}, headers=admin_headers)
        assert response.status_code == 400

    def test_non_admin_forbidden(self, client, checkout, buyer_headers):
        order_id = checkout()[0].json()["order"]["id"]
        response = client.patch(
            f"/api/admin/orders/{order_id}/status", json={"status": "shipped"}, headers=buyer_headers
        )
        assert response.status_code == 403

    def test_admin_cancel_restores_stock(self, client, checkout, admin_headers, stock_of):
        response, product_id, variant_id = checkout(quantity=2)
        order_id = response.json()["order"]["id"]

        client.patch(f"/api/admin/orders/{order_id}/status", json={"status": "cancelled"}, headers=admin_headers)

        assert stock_of(product_id, variant_id) == 5

    def test_admin_filters_by_user(self, client, checkout, admin_headers, buyer_id):
        checkout()

        mine = client.get(f"/api/admin/orders?user_id={buyer_id}", headers=admin_headers).json()["orders"]
        others = client.get(f"/api/admin/orders?user_id={uuid4()}", headers=admin_headers).json()["orders"]

        assert len(mine) == 1
        assert others == []


class TestSellerOrders:
    def test_seller_sees_own_lines(self, client, checkout, seller_headers):
        checkout(quantity=2)

        response = client.get("/api/seller/orders", headers=seller_headers)

        assert response.status_code == 200
        orders = response.json()["orders"]
        assert len(orders) == 1
        assert orders[0]["shop_total"] == 40.0

    def test_user_without_shop(self, client, buyer_headers):
        response = client.get("/api/seller/orders", headers=buyer_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Shop not found for this user"
