"""FastAPI routes for shops, categories, products and variants."""

from uuid import UUID

from fastapi import APIRouter, Depends

from marketplace import queries
from marketplace.api.auth import Identity, current_identity
from marketplace.api.dispatch import dispatch
from marketplace.api.schemas import (
    AddVariantRequest,
    ChangeCategoryStatusRequest,
    ChangeProductStatusRequest,
    ChangeShopStatusRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    CreateShopRequest,
    SetDiscountRequest,
    UpdateCategoryRequest,
    UpdateShopRequest,
    UpdateVariantRequest,
)
from marketplace.catalogue.management import (
    AddVariant,
    ChangeCategoryStatus,
    ChangeProductStatus,
    ChangeShopStatus,
    CreateCategory,
    CreateProduct,
    CreateShop,
    SetProductDiscount,
    UpdateCategory,
    UpdateShop,
    UpdateVariant,
)

shop_router = APIRouter(prefix="/api/shops", tags=["shops"])
category_router = APIRouter(prefix="/api/categories", tags=["categories"])
product_router = APIRouter(prefix="/api/products", tags=["products"])


def _acting(identity: Identity) -> dict:
    return {"requested_by": identity.id, "requester_role": identity.role}


# --- Shop endpoints ---


@shop_router.post("", status_code=201)
async def create_shop(body: CreateShopRequest, identity: Identity = Depends(current_identity)):
    shop_id = await dispatch(
        CreateShop(
            owner_id=identity.id,
            shop_name=body.shop_name,
            description=body.description,
            address=body.address,
        )
    )
    return {"message": "Shop created", "shop": queries.get_shop(shop_id)}


@shop_router.patch("/{shop_id}")
async def update_shop(shop_id: UUID, body: UpdateShopRequest, identity: Identity = Depends(current_identity)):
    await dispatch(
        UpdateShop(
            shop_id=str(shop_id),
            shop_name=body.shop_name,
            description=body.description,
            address=body.address,
            **_acting(identity),
        )
    )
    return {"message": "Shop updated", "shop": queries.get_shop(shop_id)}


@shop_router.patch("/{shop_id}/status")
async def change_shop_status(
    shop_id: UUID,
    body: ChangeShopStatusRequest,
    identity: Identity = Depends(current_identity),
):
    status = await dispatch(ChangeShopStatus(shop_id=str(shop_id), status=body.status, **_acting(identity)))
    return {"message": "Shop status updated", "status": status}


# --- Category endpoints ---


@category_router.post("", status_code=201)
async def create_category(body: CreateCategoryRequest, identity: Identity = Depends(current_identity)):
    category_id = await dispatch(
        CreateCategory(
            category_name=body.category_name,
            slug=body.slug,
            parent_id=str(body.parent_id) if body.parent_id else None,
            requester_role=identity.role,
        )
    )
    return {"message": "Category created", "category": queries.get_category(category_id)}


@category_router.get("/{category_id}")
async def get_category(category_id: UUID):
    return {"category": queries.get_category(category_id)}


@category_router.patch("/{category_id}")
async def update_category(
    category_id: UUID,
    body: UpdateCategoryRequest,
    identity: Identity = Depends(current_identity),
):
    await dispatch(
        UpdateCategory(
            category_id=str(category_id),
            category_name=body.category_name,
            slug=body.slug,
            parent_id=str(body.parent_id) if body.parent_id else None,
            requester_role=identity.role,
        )
    )
    return {"message": "Category updated", "category": queries.get_category(category_id)}


@category_router.patch("/{category_id}/status")
async def change_category_status(
    category_id: UUID,
    body: ChangeCategoryStatusRequest,
    identity: Identity = Depends(current_identity),
):
    status = await dispatch(
        ChangeCategoryStatus(category_id=str(category_id), status=body.status, requester_role=identity.role)
    )
    return {"message": "Category status updated", "status": status}


# --- Product endpoints ---


@product_router.post("", status_code=201)
async def create_product(body: CreateProductRequest, identity: Identity = Depends(current_identity)):
    product_id = await dispatch(
        CreateProduct(
            shop_id=str(body.shop_id),
            category_id=str(body.category_id) if body.category_id else None,
            title=body.title,
            slug=body.slug,
            discount_type=body.discount_type,
            discount_amount=body.discount_amount,
            **_acting(identity),
        )
    )
    return {"message": "Product created", "product": queries.get_product(product_id)}


@product_router.get("/{product_id}")
async def get_product(product_id: UUID):
    return {"product": queries.get_product(product_id)}


@product_router.post("/{product_id}/variants", status_code=201)
async def add_variant(product_id: UUID, body: AddVariantRequest, identity: Identity = Depends(current_identity)):
    variant_id = await dispatch(
        AddVariant(
            product_id=str(product_id),
            label=body.label,
            base_price=body.base_price,
            quantity=body.quantity,
            **_acting(identity),
        )
    )
    return {"message": "Variant added", "variant_id": variant_id, "product": queries.get_product(product_id)}


@product_router.patch("/{product_id}/variants/{variant_id}")
async def update_variant(
    product_id: UUID,
    variant_id: UUID,
    body: UpdateVariantRequest,
    identity: Identity = Depends(current_identity),
):
    await dispatch(
        UpdateVariant(
            product_id=str(product_id),
            variant_id=str(variant_id),
            label=body.label,
            base_price=body.base_price,
            quantity=body.quantity,
            **_acting(identity),
        )
    )
    return {"message": "Variant updated", "product": queries.get_product(product_id)}


@product_router.patch("/{product_id}/discount")
async def set_discount(product_id: UUID, body: SetDiscountRequest, identity: Identity = Depends(current_identity)):
    await dispatch(
        SetProductDiscount(
            product_id=str(product_id),
            discount_type=body.discount_type,
            discount_amount=body.discount_amount,
            **_acting(identity),
        )
    )
    return {"message": "Discount updated", "product": queries.get_product(product_id)}


@product_router.patch("/{product_id}/status")
async def change_status(
    product_id: UUID,
    body: ChangeProductStatusRequest,
    identity: Identity = Depends(current_identity),
):
    await dispatch(ChangeProductStatus(product_id=str(product_id), status=body.status, **_acting(identity)))
    return {"message": "Product status updated", "product": queries.get_product(product_id)}
