"""Domain events for the Shop, Category and Product aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Shop")
class ShopCreated:
    """A seller opened a shop."""

    __version__ = 1

    shop_id: Identifier(required=True)
    owner_id: Identifier(required=True)
    shop_name: String(required=True)
    created_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductCreated:
    """A product was listed in a shop."""

    __version__ = 1

    product_id: Identifier(required=True)
    shop_id: Identifier(required=True)
    category_id: Identifier()
    title: String(required=True)
    slug: String(required=True)
    status: String(required=True)
    created_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class VariantAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    label: String(required=True)
    base_price: Float(required=True)
    quantity: Integer(required=True)


@marketplace.event(part_of="Product")
class VariantUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    label: String(required=True)
    base_price: Float(required=True)
    quantity: Integer(required=True)


@marketplace.event(part_of="Product")
class ProductDiscountSet:
    """The product's discount policy changed; cart snapshots taken earlier keep their price."""

    __version__ = 1

    product_id: Identifier(required=True)
    discount_type: String(required=True)
    discount_amount: Float(required=True)


@marketplace.event(part_of="Product")
class ProductStatusChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)


@marketplace.event(part_of="Product")
class StockWithdrawn:
    """On-hand stock of a variant was reserved for an order."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    quantity: Integer(required=True)
    remaining: Integer(required=True)


@marketplace.event(part_of="Product")
class StockRestored:
    """Stock came back to a variant after an order was cancelled."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    quantity: Integer(required=True)
    available: Integer(required=True)


@marketplace.event(part_of="Shop")
class ShopUpdated:
    __version__ = 1

    shop_id: Identifier(required=True)
    shop_name: String(required=True)
    description: String()
    address: String()


@marketplace.event(part_of="Shop")
class ShopStatusChanged:
    """A shop was opened or closed for new listings."""

    __version__ = 1

    shop_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)


@marketplace.event(part_of="Category")
class CategoryCreated:
    __version__ = 1

    category_id: Identifier(required=True)
    category_name: String(required=True)
    slug: String(required=True)
    parent_id: Identifier()
    created_at: DateTime(required=True)


@marketplace.event(part_of="Category")
class CategoryUpdated:
    __version__ = 1

    category_id: Identifier(required=True)
    category_name: String(required=True)
    slug: String(required=True)
    parent_id: Identifier()


@marketplace.event(part_of="Category")
class CategoryStatusChanged:
    __version__ = 1

    category_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)
