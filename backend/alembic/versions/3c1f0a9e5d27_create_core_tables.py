"""create users, products and action_history

Revision ID: 3c1f0a9e5d27
Revises:
Create Date: 2026-10-19 10:12:41.507113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f0a9e5d27"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="operator"),
        sa.Column("password_hash", sa.String(), nullable=False),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default="Other"),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("expiry_date", sa.Date(), nullable=False),
        sa.Column("avg_daily_sales", sa.Float(), nullable=False, server_default="0"),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        # SAFETY CONSTRAINTS
        sa.CheckConstraint("quantity >= 0", name="ck_quantity_non_negative"),
        sa.CheckConstraint("avg_daily_sales >= 0", name="ck_sales_non_negative"),
        sa.CheckConstraint("price >= 0", name="ck_price_non_negative"),
    )
    op.create_index(op.f("ix_products_id"), "products", ["id"], unique=False)
    op.create_index("ix_products_expiry_date", "products", ["expiry_date"], unique=False)

    op.create_table(
        "action_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("action_type", sa.String(), nullable=False),
        sa.Column("discount_percentage", sa.Integer(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("decided_by", sa.Integer(), nullable=True),
        sa.Column("actor", sa.String(), nullable=False, server_default="system"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("action_type IN ('discount', 'donation')", name="ck_action_type"),
        sa.CheckConstraint(
            "(action_type = 'discount' AND discount_percentage BETWEEN 1 AND 100)"
            " OR (action_type = 'donation' AND discount_percentage IS NULL)",
            name="ck_discount_percentage",
        ),
    )
    op.create_index(op.f("ix_action_history_id"), "action_history", ["id"], unique=False)
    op.create_index(op.f("ix_action_history_product_id"), "action_history", ["product_id"], unique=False)
    op.create_index(op.f("ix_action_history_action_type"), "action_history", ["action_type"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_action_history_action_type"), table_name="action_history")
    op.drop_index(op.f("ix_action_history_product_id"), table_name="action_history")
    op.drop_index(op.f("ix_action_history_id"), table_name="action_history")
    op.drop_table("action_history")

    op.drop_index("ix_products_expiry_date", table_name="products")
    op.drop_index(op.f("ix_products_id"), table_name="products")
    op.drop_table("products")

    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
