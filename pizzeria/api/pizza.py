"""Ingredient catalog endpoints: public browsing and admin management."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from pizzeria.api.dependencies import get_current_admin, get_inventory_service
from pizzeria.models.enums import IngredientType
from pizzeria.models.user import User
from pizzeria.schemas.common import ApiResponse
from pizzeria.schemas.ingredient import (
    IngredientCatalog,
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
)
from pizzeria.services.inventory import InventoryService

router = APIRouter(prefix="/api/v1/pizza", tags=["pizza"])


@router.get("/ingredients", response_model=ApiResponse[IngredientCatalog])
def get_all_ingredients(
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """All active ingredients grouped by category."""
    catalog = service.get_catalog()
    return ApiResponse(
        message="Ingredients retrieved successfully",
        data=IngredientCatalog.model_validate(
            {
                key: [IngredientResponse.model_validate(item) for item in items]
                for key, items in catalog.items()
            }
        ),
    )


@router.get("/ingredients/{ingredient_type}", response_model=ApiResponse[list[IngredientResponse]])
def list_ingredients(
    ingredient_type: IngredientType,
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Active ingredients of one category."""
    items = service.list_ingredients(ingredient_type)
    return ApiResponse(
        message=f"{ingredient_type.label} options retrieved successfully",
        data=[IngredientResponse.model_validate(item) for item in items],
    )


@router.get(
    "/ingredients/{ingredient_type}/{ingredient_id}",
    response_model=ApiResponse[IngredientResponse],
)
def get_ingredient(
    ingredient_type: IngredientType,
    ingredient_id: int,
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Get one ingredient."""
    item = service.get_ingredient(ingredient_type, ingredient_id)
    return ApiResponse(
        message=f"{ingredient_type.label} retrieved successfully",
        data=IngredientResponse.model_validate(item),
    )


# --- Admin ---


@router.post(
    "/ingredients/{ingredient_type}",
    response_model=ApiResponse[IngredientResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_ingredient(
    ingredient_type: IngredientType,
    data: IngredientCreate,
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Add an ingredient to a catalog."""
    item = service.create_ingredient(ingredient_type, data)
    return ApiResponse(
        message=f"{ingredient_type.label} created successfully",
        data=IngredientResponse.model_validate(item),
    )


@router.put(
    "/ingredients/{ingredient_type}/{ingredient_id}",
    response_model=ApiResponse[IngredientResponse],
)
def update_ingredient(
    ingredient_type: IngredientType,
    ingredient_id: int,
    data: IngredientUpdate,
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Update an ingredient's descriptive fields."""
    item = service.update_ingredient(ingredient_type, ingredient_id, data)
    return ApiResponse(
        message=f"{ingredient_type.label} updated successfully",
        data=IngredientResponse.model_validate(item),
    )


@router.delete(
    "/ingredients/{ingredient_type}/{ingredient_id}",
    response_model=ApiResponse[IngredientResponse],
)
def deactivate_ingredient(
    ingredient_type: IngredientType,
    ingredient_id: int,
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Soft-delete an ingredient. Past orders keep their snapshots."""
    item = service.set_active(ingredient_type, ingredient_id, False)
    return ApiResponse(
        message=f"{ingredient_type.label} deactivated successfully",
        data=IngredientResponse.model_validate(item),
    )


@router.patch(
    "/ingredients/{ingredient_type}/{ingredient_id}/toggle",
    response_model=ApiResponse[IngredientResponse],
)
def toggle_ingredient(
    ingredient_type: IngredientType,
    ingredient_id: int,
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Flip an ingredient between active and inactive."""
    item = service.toggle_active(ingredient_type, ingredient_id)
    state = "activated" if item.is_active else "deactivated"
    return ApiResponse(
        message=f"{ingredient_type.label} {state} successfully",
        data=IngredientResponse.model_validate(item),
    )
