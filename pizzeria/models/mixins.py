"""Mixins for SQLAlchemy models."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import declared_attr


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class IngredientMixin(TimestampMixin):
    """Columns shared by the five ingredient catalogs.

    Rows are never hard-deleted once an order could reference them; admins
    deactivate them instead (``is_active``). ``is_available`` tracks
    ``stock > 0`` and is maintained wherever stock changes.
    """

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=50)
    threshold = Column(Integer, nullable=False, default=10)
    category = Column(String(50), nullable=True)
    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_available = Column(Boolean, nullable=False, default=True)

    @declared_attr
    def __table_args__(cls):  # noqa: N805
        return (
            CheckConstraint("price >= 0", name=f"ck_{cls.__tablename__}_price"),
            CheckConstraint("stock >= 0", name=f"ck_{cls.__tablename__}_stock"),
            CheckConstraint("threshold >= 0", name=f"ck_{cls.__tablename__}_threshold"),
        )

    @property
    def type(self):
        """Catalog this row belongs to."""
        return self.ingredient_type

    @property
    def is_low_stock(self) -> bool:
        """Check if stock is at or under the restock threshold."""
        return self.stock <= self.threshold
