"""Shop, category and product management: commands and handlers.

Every management command names the user acting on it. Only the owner of a
shop, or an admin, may change the shop and its products. Categories are
managed by admins.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.category import Category
from marketplace.catalogue.product import Product
from marketplace.catalogue.shop import Shop
from marketplace.domain import marketplace
from marketplace.exceptions import ConflictError, ForbiddenError
from marketplace.shared.transaction import find, lock_for_update


@marketplace.command(part_of="Shop")
class CreateShop:
    owner_id: Identifier(required=True)
    shop_name: String(required=True, max_length=150)
    description: Text()
    address: Text()


@marketplace.command(part_of="Shop")
class UpdateShop:
    requested_by: Identifier(required=True)
    requester_role: String(max_length=20, default="user")
    shop_id: Identifier(required=True)
    shop_name: String(max_length=150)
    description: Text()
    address: Text()


@marketplace.command(part_of="Shop")
class ChangeShopStatus:
    requested_by: Identifier(required=True)
    requester_role: String(max_length=20, default="user")
    shop_id: Identifier(required=True)
    status: String(required=True, max_length=20)


@marketplace.command(part_of="Category")
class CreateCategory:
    requester_role: String(max_length=20, default="user")
    category_name: String(required=True, max_length=50)
    slug: String(required=True, max_length=100)
    parent_id: Identifier()


@marketplace.command(part_of="Category")
class UpdateCategory:
    requester_role: String(max_length=20, default="user")
    category_id: Identifier(required=True)
    category_name: String(max_length=50)
    slug: String(max_length=100)
    parent_id: Identifier()


@marketplace.command(part_of="Category")
class ChangeCategoryStatus:
    requester_role: String(max_length=20, default="user")
    category_id: Identifier(required=True)
    status: String(required=True, max_length=20)


@marketplace.command(part_of="Product")
class CreateProduct:
    requested_by: Identifier(required=True)
    requester_role: String(max_length=20, default="user")
    shop_id: Identifier(required=True)
    category_id: Identifier()
    title: String(required=True, max_length=255)
    slug: String(required=True, max_length=255)
    discount_type: String(max_length=20)
    discount_amount: Float(min_value=0.0)


@marketplace.command(part_of="Product")
class AddVariant:
    requested_by: Identifier(required=True)
    requester_role: String(max_length=20, default="user")
    product_id: Identifier(required=True)
    label: String(required=True, max_length=100)
    base_price: Float(required=True, min_value=0.0)
    quantity: Integer(default=0, min_value=0)


@marketplace.command(part_of="Product")
class UpdateVariant:
    requested_by: Identifier(required=True)
    requester_role: String(max_length=20, default="user")
    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    label: String(max_length=100)
    base_price: Float(min_value=0.0)
    quantity: Integer(min_value=0)


@marketplace.command(part_of="Product")
class SetProductDiscount:
    requested_by: Identifier(required=True)
    requester_role: String(max_length=20, default="user")
    product_id: Identifier(required=True)
    discount_type: String(required=True, max_length=20)
    discount_amount: Float(min_value=0.0)


@marketplace.command(part_of="Product")
class ChangeProductStatus:
    requested_by: Identifier(required=True)
    requester_role: String(max_length=20, default="user")
    product_id: Identifier(required=True)
    status: String(required=True, max_length=20)


def _ensure_can_manage(shop, command):
    if not shop.is_managed_by(command.requested_by, command.requester_role):
        raise ForbiddenError(
            "Only the shop owner or an admin can manage this shop",
            shop_id=str(shop.id),
        )


def _ensure_admin(command):
    if command.requester_role != "admin":
        raise ForbiddenError("Only admins can manage categories")


def _ensure_top_level_parent(parent_id, category_id=None):
    if parent_id is None:
        return
    if category_id is not None and str(parent_id) == str(category_id):
        raise ConflictError("A category cannot be its own parent", category_id=str(category_id))

    parent = find(Category, parent_id)
    if not parent.is_top_level:
        raise ConflictError("parent_id must refer to a top-level category", parent_id=str(parent_id))


@marketplace.command_handler(part_of=Shop)
class ManageShopHandler:
    @handle(CreateShop)
    def create_shop(self, command):
        repo = current_domain.repository_for(Shop)
        if repo.for_owner(command.owner_id) is not None:
            raise ConflictError("User already owns a shop", owner_id=str(command.owner_id))

        shop = Shop.create(
            owner_id=command.owner_id,
            shop_name=command.shop_name,
            description=command.description,
            address=command.address,
        )
        repo.add(shop)
        return str(shop.id)

    @handle(UpdateShop)
    def update_shop(self, command):
        shop = lock_for_update(Shop, command.shop_id)
        _ensure_can_manage(shop, command)

        shop.update_details(
            shop_name=command.shop_name,
            description=command.description,
            address=command.address,
        )
        current_domain.repository_for(Shop).add(shop)
        return str(shop.id)

    @handle(ChangeShopStatus)
    def change_status(self, command):
        shop = lock_for_update(Shop, command.shop_id)
        _ensure_can_manage(shop, command)

        shop.change_status(command.status)
        current_domain.repository_for(Shop).add(shop)
        return shop.status


@marketplace.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        _ensure_admin(command)
        repo = current_domain.repository_for(Category)
        if repo.with_slug(command.slug) is not None:
            raise ConflictError(f"Category slug '{command.slug}' is already taken", slug=command.slug)
        _ensure_top_level_parent(command.parent_id)

        category = Category.create(
            category_name=command.category_name,
            slug=command.slug,
            parent_id=command.parent_id,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        _ensure_admin(command)
        repo = current_domain.repository_for(Category)
        category = lock_for_update(Category, command.category_id)

        if command.slug is not None and command.slug != category.slug:
            if repo.with_slug(command.slug) is not None:
                raise ConflictError(f"Category slug '{command.slug}' is already taken", slug=command.slug)
        _ensure_top_level_parent(command.parent_id, category_id=category.id)
        if command.parent_id is not None and repo.has_children(category.id):
            raise ConflictError("A category with subcategories must stay top-level", category_id=str(category.id))

        category.update_details(
            category_name=command.category_name,
            slug=command.slug,
            parent_id=command.parent_id,
        )
        repo.add(category)
        return str(category.id)

    @handle(ChangeCategoryStatus)
    def change_status(self, command):
        _ensure_admin(command)
        category = lock_for_update(Category, command.category_id)

        category.change_status(command.status)
        current_domain.repository_for(Category).add(category)
        return category.status


@marketplace.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        shop = find(Shop, command.shop_id)
        _ensure_can_manage(shop, command)
        if not shop.is_active:
            raise ConflictError("Products cannot be added to an inactive shop", shop_id=str(shop.id))

        if command.category_id is not None:
            category = find(Category, command.category_id)
            if not category.is_active:
                raise ConflictError(
                    "Products cannot be added to an inactive category",
                    category_id=str(category.id),
                )

        repo = current_domain.repository_for(Product)
        if repo.with_slug(command.slug) is not None:
            raise ConflictError(f"Slug '{command.slug}' is already taken", slug=command.slug)

        product = Product.create(
            shop_id=command.shop_id,
            category_id=command.category_id,
            title=command.title,
            slug=command.slug,
            discount_type=command.discount_type,
            discount_amount=command.discount_amount,
        )
        repo.add(product)
        return str(product.id)

    @handle(AddVariant)
    def add_variant(self, command):
        product = lock_for_update(Product, command.product_id)
        _ensure_can_manage(find(Shop, product.shop_id), command)

        variant = product.add_variant(
            label=command.label,
            base_price=command.base_price,
            quantity=command.quantity or 0,
        )
        current_domain.repository_for(Product).add(product)
        return str(variant.id)

    @handle(UpdateVariant)
    def update_variant(self, command):
        product = lock_for_update(Product, command.product_id)
        _ensure_can_manage(find(Shop, product.shop_id), command)

        product.update_variant(
            command.variant_id,
            label=command.label,
            base_price=command.base_price,
            quantity=command.quantity,
        )
        current_domain.repository_for(Product).add(product)
        return str(command.variant_id)

    @handle(SetProductDiscount)
    def set_discount(self, command):
        product = lock_for_update(Product, command.product_id)
        _ensure_can_manage(find(Shop, product.shop_id), command)

        product.set_discount(command.discount_type, command.discount_amount)
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(ChangeProductStatus)
    def change_status(self, command):
        product = lock_for_update(Product, command.product_id)
        _ensure_can_manage(find(Shop, product.shop_id), command)

        product.change_status(command.status)
        current_domain.repository_for(Product).add(product)
        return str(product.id)
