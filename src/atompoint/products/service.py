"""Catalog queries and admin edits."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from atompoint.db.models import Product
from atompoint.errors import ProductNotFoundError, ValidationError
from atompoint.store.base import Store

logger = structlog.get_logger()


def group_products(products: Iterable[Product]) -> dict[str, dict[str, list[Product]]]:
    """Group products by operator, then category, keeping input order within each group."""
    grouped: dict[str, dict[str, list[Product]]] = {}
    for product in products:
        grouped.setdefault(product.operator, {}).setdefault(product.category, []).append(product)
    return grouped


async def get_product(store: Store, product_id: int) -> Product:
    product = await store.products.get(product_id)
    if product is None:
        raise ProductNotFoundError
    return product


async def create_product(store: Store, **fields: Any) -> Product:
    product = await store.products.create(**fields)
    logger.info("product_created", product_id=product.id, operator=product.operator, name=product.name)
    return product


async def update_product(store: Store, product_id: int, **fields: Any) -> Product:
    changes = {k: v for k, v in fields.items() if v is not None}
    if not changes:
        msg = "No fields to update"
        raise ValidationError(msg)
    product = await store.products.update(product_id, **changes)
    if product is None:
        raise ProductNotFoundError
    logger.info("product_updated", product_id=product_id, fields=sorted(changes))
    return product


async def delete_product(store: Store, product_id: int) -> None:
    if not await store.products.delete(product_id):
        raise ProductNotFoundError
    logger.info("product_deleted", product_id=product_id)
