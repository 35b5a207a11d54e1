"""Ingredient catalog and stock management.

All stock writes go through this module, and every statement that changes
stock also clears ``is_available`` when stock reaches zero.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import and_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pizzeria.exceptions import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    StockConflictError,
)
from pizzeria.models.enums import IngredientType
from pizzeria.models.ingredient import INGREDIENT_MODELS, get_ingredient_model
from pizzeria.models.mixins import IngredientMixin
from pizzeria.schemas.ingredient import IngredientCreate, IngredientUpdate, InventoryUpdate

logger = logging.getLogger(__name__)

# (ingredient type, ingredient id) -> quantity
StockRequirements = Mapping[tuple[IngredientType, int], int]

EXTRA_FIELDS = ("spice_level", "is_organic", "is_halal")


def alert_entry(item: IngredientMixin) -> dict[str, Any]:
    """Flatten a catalog row for stock alerts and dashboards."""
    return {
        "type": item.ingredient_type,
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "stock": item.stock,
        "threshold": item.threshold,
        "price": float(item.price),
    }


class InventoryService:
    """Service for catalog CRUD and stock mutations."""

    def __init__(self, db: Session):
        self.db = db

    # --- Catalog ---

    def list_ingredients(
        self, ingredient_type: IngredientType, include_inactive: bool = False
    ) -> list[IngredientMixin]:
        """List one catalog sorted by name."""
        model = get_ingredient_model(ingredient_type)
        query = self.db.query(model)
        if not include_inactive:
            query = query.filter(model.is_active.is_(True))
        return query.order_by(model.name).all()

    def get_catalog(self, include_inactive: bool = False) -> dict[str, list[IngredientMixin]]:
        """All five catalogs keyed by plural type name."""
        return {
            ingredient_type.plural: self.list_ingredients(ingredient_type, include_inactive)
            for ingredient_type in IngredientType
        }

    def get_ingredient(self, ingredient_type: IngredientType, ingredient_id: int) -> IngredientMixin:
        """Get one catalog row or raise NotFoundError."""
        model = get_ingredient_model(ingredient_type)
        item = self.db.get(model, ingredient_id)
        if item is None:
            raise NotFoundError(f"{ingredient_type.value.capitalize()} not found")
        return item

    def create_ingredient(
        self, ingredient_type: IngredientType, data: IngredientCreate
    ) -> IngredientMixin:
        """Create a catalog row."""
        model = get_ingredient_model(ingredient_type)
        values = data.model_dump(exclude=set(EXTRA_FIELDS))
        item = model(**values, is_active=True, is_available=data.stock > 0)
        for field in EXTRA_FIELDS:
            value = getattr(data, field)
            if value is not None and hasattr(model, field):
                setattr(item, field, value)

        self.db.add(item)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                f"A {ingredient_type.value} named '{data.name}' already exists"
            ) from None
        self.db.refresh(item)
        logger.info(f"Created {ingredient_type.value} '{item.name}' (id={item.id})")
        return item

    def update_ingredient(
        self, ingredient_type: IngredientType, ingredient_id: int, data: IngredientUpdate
    ) -> IngredientMixin:
        """Update descriptive fields; stock changes go through update_inventory_item."""
        item = self.get_ingredient(ingredient_type, ingredient_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            if field in EXTRA_FIELDS and not hasattr(item, field):
                continue
            setattr(item, field, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                f"A {ingredient_type.value} with this name already exists"
            ) from None
        self.db.refresh(item)
        return item

    def set_active(
        self, ingredient_type: IngredientType, ingredient_id: int, is_active: bool
    ) -> IngredientMixin:
        """Soft-delete or restore a catalog row."""
        item = self.get_ingredient(ingredient_type, ingredient_id)
        item.is_active = is_active
        self.db.commit()
        self.db.refresh(item)
        logger.info(
            f"{'Activated' if is_active else 'Deactivated'} {ingredient_type.value} '{item.name}'"
        )
        return item

    def toggle_active(self, ingredient_type: IngredientType, ingredient_id: int) -> IngredientMixin:
        """Flip is_active."""
        item = self.get_ingredient(ingredient_type, ingredient_id)
        return self.set_active(ingredient_type, ingredient_id, not item.is_active)

    # --- Stock ---

    def update_inventory_item(
        self, ingredient_type: IngredientType, ingredient_id: int, data: InventoryUpdate
    ) -> IngredientMixin:
        """Absolute-set stock, threshold, price or availability."""
        item = self.get_ingredient(ingredient_type, ingredient_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        new_stock = changes.get("stock", item.stock)
        if changes.get("is_available") and new_stock == 0:
            raise BusinessRuleError("An item with zero stock cannot be marked available")

        if "threshold" in changes:
            item.threshold = changes["threshold"]
        if "price" in changes:
            item.price = changes["price"]
        if "stock" in changes:
            item.stock = changes["stock"]
            item.is_available = item.stock > 0
        if "is_available" in changes:
            item.is_available = changes["is_available"]

        self.db.commit()
        self.db.refresh(item)
        logger.info(
            f"Updated {ingredient_type.value} '{item.name}': stock={item.stock} "
            f"threshold={item.threshold} available={item.is_available}"
        )
        return item

    def decrement_stock(self, requirements: StockRequirements) -> None:
        """Atomically take stock for every requirement, without committing.

        Each row is updated only if it still holds enough stock. The first
        shortfall raises StockConflictError; the caller owns the transaction
        and must roll it back.
        """
        for (ingredient_type, ingredient_id), quantity in sorted(
            requirements.items(), key=lambda kv: (kv[0][0].value, kv[0][1])
        ):
            model = get_ingredient_model(ingredient_type)
            result = self.db.execute(
                update(model)
                .where(model.id == ingredient_id, model.stock >= quantity)
                .values(
                    stock=model.stock - quantity,
                    is_available=and_(model.is_available, model.stock > quantity),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                logger.warning(
                    f"Stock shortfall for {ingredient_type.value} {ingredient_id} "
                    f"(needed {quantity})"
                )
                raise StockConflictError(
                    f"Insufficient stock for {ingredient_type.value} {ingredient_id}"
                )

    def find_stock_alerts(self) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Partition catalog rows at or under threshold into (low, out)."""
        low_stock: list[dict[str, Any]] = []
        out_of_stock: list[dict[str, Any]] = []
        for ingredient_type, model in INGREDIENT_MODELS.items():
            try:
                low_stock.extend(
                    alert_entry(item)
                    for item in self.db.query(model)
                    .filter(model.stock <= model.threshold, model.stock > 0)
                    .order_by(model.name)
                    .all()
                )
                out_of_stock.extend(
                    alert_entry(item)
                    for item in self.db.query(model)
                    .filter(model.stock == 0)
                    .order_by(model.name)
                    .all()
                )
            except Exception as e:
                logger.error(f"Error checking {ingredient_type.label}: {e}")
        return low_stock, out_of_stock

    def mark_unavailable(self, out_of_stock: list[dict[str, Any]]) -> int:
        """Clear is_available on zero-stock rows that still claim availability."""
        updated = 0
        for entry in out_of_stock:
            model = get_ingredient_model(entry["type"])
            result = self.db.execute(
                update(model)
                .where(model.id == entry["id"], model.stock == 0, model.is_available.is_(True))
                .values(is_available=False)
                .execution_options(synchronize_session=False)
            )
            updated += result.rowcount
        if updated:
            self.db.commit()
            logger.info(f"Updated availability status for {updated} out-of-stock items")
        return updated

    def inventory_overview(self) -> dict[str, Any]:
        """All catalog rows (active or not) with aggregate statistics."""
        catalog = self.get_catalog(include_inactive=True)
        items = [item for rows in catalog.values() for item in rows]
        return {
            "inventory": catalog,
            "statistics": {
                "total_items": len(items),
                "low_stock_items": sum(1 for item in items if item.stock <= item.threshold),
                "out_of_stock_items": sum(1 for item in items if item.stock == 0),
                "available_items": sum(1 for item in items if item.is_available),
            },
        }

