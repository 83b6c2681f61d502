"""Tests for the Shop and Category aggregates."""

import pytest
from marketplace.catalogue.category import Category, CategoryStatus
from marketplace.catalogue.events import CategoryStatusChanged, ShopStatusChanged, ShopUpdated
from marketplace.catalogue.shop import Shop, ShopStatus
from protean.exceptions import ValidationError


def _shop():
    shop = Shop.create(owner_id="user-001", shop_name="Corner Store", address="1 Market Row")
    shop._events.clear()
    return shop


class TestShop:
    def test_update_keeps_omitted_fields(self):
        shop = _shop()
        shop.update_details(description="Open daily")

        assert shop.shop_name == "Corner Store"
        assert shop.address == "1 Market Row"
        assert shop.description == "Open daily"
        assert isinstance(shop._events[-1], ShopUpdated)

    def test_change_status(self):
        shop = _shop()
        shop.change_status(ShopStatus.INACTIVE.value)

        assert not shop.is_active
        event = shop._events[-1]
        assert isinstance(event, ShopStatusChanged)
        assert event.previous_status == "active"
        assert event.new_status == "inactive"

    def test_same_status_is_a_no_op(self):
        shop = _shop()
        shop.change_status(ShopStatus.ACTIVE.value)
        assert shop._events == []

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            _shop().change_status("closed")

    def test_admin_manages_any_shop(self):
        shop = _shop()
        assert shop.is_managed_by("someone-else", "admin")
        assert not shop.is_managed_by("someone-else", "user")


class TestCategory:
    def test_create_top_level(self):
        category = Category.create(category_name="Apparel", slug="apparel")
        assert category.is_top_level
        assert category.is_active

    def test_subcategory(self):
        category = Category.create(category_name="Shirts", slug="shirts", parent_id="cat-001")
        assert not category.is_top_level

    def test_deactivate(self):
        category = Category.create(category_name="Apparel", slug="apparel")
        category._events.clear()
        category.change_status(CategoryStatus.INACTIVE.value)

        assert not category.is_active
        assert isinstance(category._events[-1], CategoryStatusChanged)

    def test_name_length(self):
        with pytest.raises(ValidationError):
            Category.create(category_name="x" * 51, slug="long")
