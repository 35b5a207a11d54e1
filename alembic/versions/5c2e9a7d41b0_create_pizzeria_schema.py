"""create pizzeria schema

Revision ID: 5c2e9a7d41b0
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c2e9a7d41b0"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ORDER_STATUSES = (
    "pending",
    "confirmed",
    "preparing",
    "baking",
    "ready",
    "out-for-delivery",
    "delivered",
    "cancelled",
)

# table name -> category-specific columns
INGREDIENT_TABLES = {
    "pizza_bases": [],
    "pizza_sauces": [lambda: sa.Column("spice_level", sa.Integer(), nullable=True)],
    "pizza_cheeses": [],
    "pizza_veggies": [
        lambda: sa.Column("is_organic", sa.Boolean(), nullable=False, server_default=sa.false())
    ],
    "pizza_meats": [
        lambda: sa.Column("is_halal", sa.Boolean(), nullable=False, server_default=sa.false())
    ],
}


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    order_status = sa.Enum(*ORDER_STATUSES, name="orderstatus")

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column(
            "role",
            sa.Enum("user", "admin", name="userrole"),
            nullable=False,
            server_default="user",
            index=True,
        ),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_verification_token", sa.String(64), nullable=True, index=True),
        sa.Column("password_reset_token", sa.String(64), nullable=True, index=True),
        sa.Column("password_reset_expires", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    # Ingredient catalogs share one column set
    for table, extras in INGREDIENT_TABLES.items():
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, index=True),
            sa.Column("name", sa.String(100), nullable=False, unique=True),
            sa.Column("description", sa.Text(), nullable=False, server_default=""),
            sa.Column("price", sa.Numeric(10, 2), nullable=False),
            sa.Column("stock", sa.Integer(), nullable=False, server_default="50"),
            sa.Column("threshold", sa.Integer(), nullable=False, server_default="10"),
            sa.Column("category", sa.String(50), nullable=True),
            sa.Column("image_url", sa.String(500), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
            sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
            *[make() for make in extras],
            *_timestamps(),
            sa.CheckConstraint("price >= 0", name=f"ck_{table}_price"),
            sa.CheckConstraint("stock >= 0", name=f"ck_{table}_stock"),
            sa.CheckConstraint("threshold >= 0", name=f"ck_{table}_threshold"),
        )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("order_id", sa.String(20), nullable=False, unique=True, index=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("status", order_status, nullable=False, server_default="pending", index=True),
        sa.Column(
            "payment_status",
            sa.Enum("pending", "paid", "failed", "refunded", name="paymentstatus"),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("payment_intent_id", sa.String(100), nullable=True, unique=True, index=True),
        sa.Column("payment_id", sa.String(100), nullable=True),
        sa.Column("payment_signature", sa.String(128), nullable=True),
        sa.Column("delivery_address", sa.JSON(), nullable=False),
        sa.Column("delivery_instructions", sa.String(500), nullable=True),
        sa.Column("estimated_delivery_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_delivery_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("review", sa.String(1000), nullable=True),
        sa.Column("rated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refund_requested", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("refund_reason", sa.String(500), nullable=True),
        sa.Column("refund_requested_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_orders_user_status", "orders", ["user_id", "status"])
    op.create_index("ix_orders_user_created", "orders", ["user_id", "created_at"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False, index=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "size",
            sa.Enum("Small", "Medium", "Large", "Extra Large", name="pizzasize"),
            nullable=False,
        ),
        sa.Column(
            "crust_type",
            sa.Enum("Thin", "Thick", "Stuffed", name="crusttype"),
            nullable=False,
        ),
        sa.Column("special_instructions", sa.String(500), nullable=True),
        sa.Column("item_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("ingredients", sa.JSON(), nullable=False),
    )

    op.create_table(
        "order_tracking",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False, index=True),
        # Reuses the type created with the orders table
        sa.Column(
            "status",
            sa.Enum(*ORDER_STATUSES, name="orderstatus", create_type=False),
            nullable=False,
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "source",
            sa.Enum("system", "customer", "admin", "admin-override", name="trackingsource"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("order_tracking")
    op.drop_table("order_items")
    op.drop_index("ix_orders_user_created", table_name="orders")
    op.drop_index("ix_orders_user_status", table_name="orders")
    op.drop_table("orders")
    for table in reversed(INGREDIENT_TABLES):
        op.drop_table(table)
    op.drop_table("users")

    for enum_name in ("trackingsource", "crusttype", "pizzasize", "paymentstatus", "orderstatus", "userrole"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
