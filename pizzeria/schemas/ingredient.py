"""Ingredient catalog and inventory schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from pizzeria.models.enums import IngredientType


class IngredientCreate(BaseModel):
    """Create a catalog ingredient."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    price: float = Field(..., ge=0)
    stock: int = Field(50, ge=0)
    threshold: int = Field(10, ge=0)
    category: str | None = Field(None, max_length=50)
    image_url: str | None = Field(None, max_length=500)
    spice_level: int | None = Field(None, ge=0, le=5)
    is_organic: bool | None = None
    is_halal: bool | None = None


class IngredientUpdate(BaseModel):
    """Update descriptive fields of a catalog ingredient."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, min_length=1, max_length=500)
    price: float | None = Field(None, ge=0)
    threshold: int | None = Field(None, ge=0)
    category: str | None = Field(None, max_length=50)
    image_url: str | None = Field(None, max_length=500)
    spice_level: int | None = Field(None, ge=0, le=5)
    is_organic: bool | None = None
    is_halal: bool | None = None


class InventoryUpdate(BaseModel):
    """Admin absolute-set of stock levels and pricing."""

    stock: int | None = Field(None, ge=0)
    threshold: int | None = Field(None, ge=0)
    price: float | None = Field(None, ge=0)
    is_available: bool | None = None


class IngredientResponse(BaseModel):
    """Ingredient response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: IngredientType
    name: str
    description: str
    price: float
    stock: int
    threshold: int
    category: str | None
    image_url: str | None
    is_active: bool
    is_available: bool
    spice_level: int | None = None
    is_organic: bool | None = None
    is_halal: bool | None = None
    created_at: datetime
    updated_at: datetime


class IngredientCatalog(BaseModel):
    """Active ingredients grouped by type for the pizza builder."""

    bases: list[IngredientResponse]
    sauces: list[IngredientResponse]
    cheeses: list[IngredientResponse]
    veggies: list[IngredientResponse]
    meats: list[IngredientResponse]


class InventoryStatistics(BaseModel):
    """Aggregate stock figures across all five catalogs."""

    total_items: int
    low_stock_items: int
    out_of_stock_items: int
    available_items: int


class InventoryOverview(BaseModel):
    """All catalog rows plus statistics."""

    inventory: IngredientCatalog
    statistics: InventoryStatistics
