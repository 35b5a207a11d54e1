"""Ingredient catalog models, one table per ingredient type."""

from sqlalchemy import Boolean, Column, Integer

from pizzeria.database import Base
from pizzeria.models.enums import IngredientType
from pizzeria.models.mixins import IngredientMixin


class PizzaBase(Base, IngredientMixin):
    """Pizza base (crust dough)."""

    __tablename__ = "pizza_bases"
    ingredient_type = IngredientType.BASE


class PizzaSauce(Base, IngredientMixin):
    """Pizza sauce."""

    __tablename__ = "pizza_sauces"
    ingredient_type = IngredientType.SAUCE

    spice_level = Column(Integer, nullable=True)  # 0 (mild) .. 5 (very hot)


class PizzaCheese(Base, IngredientMixin):
    """Pizza cheese."""

    __tablename__ = "pizza_cheeses"
    ingredient_type = IngredientType.CHEESE


class PizzaVeggie(Base, IngredientMixin):
    """Vegetable topping."""

    __tablename__ = "pizza_veggies"
    ingredient_type = IngredientType.VEGGIE

    is_organic = Column(Boolean, nullable=False, default=False)


class PizzaMeat(Base, IngredientMixin):
    """Meat topping."""

    __tablename__ = "pizza_meats"
    ingredient_type = IngredientType.MEAT

    is_halal = Column(Boolean, nullable=False, default=False)


INGREDIENT_MODELS: dict[IngredientType, type[IngredientMixin]] = {
    IngredientType.BASE: PizzaBase,
    IngredientType.SAUCE: PizzaSauce,
    IngredientType.CHEESE: PizzaCheese,
    IngredientType.VEGGIE: PizzaVeggie,
    IngredientType.MEAT: PizzaMeat,
}


def get_ingredient_model(ingredient_type: IngredientType | str) -> type[IngredientMixin]:
    """Resolve the catalog model for an ingredient type."""
    return INGREDIENT_MODELS[IngredientType(ingredient_type)]
