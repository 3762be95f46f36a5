"""Request/response schemas for catalog endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from atompoint.db.base import MAX_INT


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    operator: str
    category: str
    name: str
    price_mmk: int
    price_cr: int
    available: bool
    created_at: datetime


class ProductEnvelope(BaseModel):
    product: ProductResponse


class GroupedProductsResponse(BaseModel):
    """Products keyed by operator, then category."""

    products: dict[str, dict[str, list[ProductResponse]]]


class ProductCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    operator: str = Field(..., min_length=1, max_length=64)
    category: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=128)
    price_mmk: int = Field(..., ge=0, le=MAX_INT, alias="priceMMK")
    price_cr: int = Field(..., gt=0, le=MAX_INT, alias="priceCr")
    available: bool = True


class ProductUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    operator: str | None = Field(None, min_length=1, max_length=64)
    category: str | None = Field(None, min_length=1, max_length=64)
    name: str | None = Field(None, min_length=1, max_length=128)
    price_mmk: int | None = Field(None, ge=0, le=MAX_INT, alias="priceMMK")
    price_cr: int | None = Field(None, gt=0, le=MAX_INT, alias="priceCr")
    available: bool | None = None
