"""
app/schemas/upstream.py

Wire schemas for the teaching marketplace API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.price_averaging import (
    Category,
    Subcategory,
    TeacherCategoryPrice,
    TeacherListing,
)


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class SubcategoryPayload(_UpstreamModel):
    id: str = ""
    name: str
    code: int | None = None

    def to_domain(self) -> Subcategory:
        return Subcategory(id=self.id, name=self.name, code=self.code)


class CategoryPayload(_UpstreamModel):
    id: str = ""
    name: str
    children_categories: list[SubcategoryPayload] | None = Field(
        default=None,
        alias="childrenCategories",
    )

    def to_domain(self) -> Category:
        children = self.children_categories or []
        return Category(
            id=self.id,
            name=self.name,
            subcategories=tuple(child.to_domain() for child in children),
        )


class TeacherCategoryPayload(_UpstreamModel):
    name: str | None = None
    # Left untyped: non-numeric prices are skipped by the aggregator, not rejected here.
    price_per_hour: Any = Field(default=None, alias="pricePerHour")


class TeacherPayload(_UpstreamModel):
    id: str = ""
    categories: list[TeacherCategoryPayload] | None = None

    def to_domain(self) -> TeacherListing:
        entries = tuple(
            TeacherCategoryPrice(name=entry.name, price_per_hour=entry.price_per_hour)
            for entry in self.categories or []
            if entry.name is not None
        )
        return TeacherListing(id=self.id, categories=entries)


class SearchResponsePayload(_UpstreamModel):
    teachers: list[TeacherPayload] | None = None
    total_results: int | None = Field(default=None, alias="totalResults")


class SearchRequestPayload(_UpstreamModel):
    categories: list[int]
    page: int = Field(..., ge=0)
    page_size: int = Field(..., ge=1, alias="pageSize")


class AveragePriceRequestPayload(_UpstreamModel):
    category_name: str = Field(..., alias="categoryName")
    average_price: float = Field(..., ge=0, alias="averagePrice")
