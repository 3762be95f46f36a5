"""Catalog router — all /api/products/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from atompoint.auth.dependencies import get_current_user, require_admin
from atompoint.auth.schemas import MessageResponse
from atompoint.db.models import Product, User
from atompoint.dependencies import get_store
from atompoint.products.schemas import (
    GroupedProductsResponse,
    ProductCreateRequest,
    ProductEnvelope,
    ProductResponse,
    ProductUpdateRequest,
)
from atompoint.products.service import (
    create_product,
    delete_product,
    get_product,
    group_products,
    update_product,
)
from atompoint.store.base import Store

router = APIRouter(prefix="/api/products", tags=["Products"])


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse.model_validate(product)


@router.get("", response_model=GroupedProductsResponse)
async def list_products(
    _user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> GroupedProductsResponse:
    """Available products grouped by operator and category."""
    products = await store.products.list_all(only_available=True)
    grouped = group_products(products)
    return GroupedProductsResponse(
        products={
            operator: {category: [_product_response(p) for p in items] for category, items in categories.items()}
            for operator, categories in grouped.items()
        }
    )


@router.get("/{product_id}", response_model=ProductEnvelope)
async def get_product_endpoint(
    product_id: int,
    _user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> ProductEnvelope:
    """Get one product."""
    return ProductEnvelope(product=_product_response(await get_product(store, product_id)))


@router.post("", response_model=ProductEnvelope, status_code=201)
async def create_product_endpoint(
    body: ProductCreateRequest,
    _admin: User = Depends(require_admin),
    store: Store = Depends(get_store),
) -> ProductEnvelope:
    """Create a product (admin only)."""
    product = await create_product(store, **body.model_dump())
    await store.commit()
    return ProductEnvelope(product=_product_response(product))


@router.put("/{product_id}", response_model=ProductEnvelope)
async def update_product_endpoint(
    product_id: int,
    body: ProductUpdateRequest,
    _admin: User = Depends(require_admin),
    store: Store = Depends(get_store),
) -> ProductEnvelope:
    """Update a product (admin only)."""
    product = await update_product(store, product_id, **body.model_dump())
    await store.commit()
    return ProductEnvelope(product=_product_response(product))


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product_endpoint(
    product_id: int,
    _admin: User = Depends(require_admin),
    store: Store = Depends(get_store),
) -> MessageResponse:
    """Delete a product (admin only)."""
    await delete_product(store, product_id)
    await store.commit()
    return MessageResponse(message="Product deleted successfully")
