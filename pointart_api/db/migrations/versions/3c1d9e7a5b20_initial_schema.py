"""Initial schema.

- inventory: stationery, gift_store, embroidery, machines, art_services, product_categories
- sales: stationery_sales, gift_daily_sales
- customers, invoices, invoice_items
- accounts: users, profiles, auth_sessions
- system: notifications, audit_log, app_settings
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c1d9e7a5b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id", postgresql.UUID(as_uuid=False), primary_key=True, server_default=sa.text("uuid_generate_v4()")
    )


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    ]


def _money(name: str, nullable: bool = True, default: str | None = None) -> sa.Column:
    kwargs = {"server_default": sa.text(default)} if default is not None else {}
    return sa.Column(name, sa.Numeric(18, 2), nullable=nullable, **kwargs)


def _date() -> sa.Column:
    return sa.Column("date", sa.Date(), nullable=False, server_default=sa.text("CURRENT_DATE"))


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp";')

    # Inventory
    op.create_table(
        "stationery",
        _id(),
        sa.Column("item", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _money("rate", nullable=False, default="0"),
        _money("selling_price"),
        _money("profit_per_unit"),
        sa.Column("stock", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False, server_default=sa.text("10")),
        sa.Column("sensitivity", sa.Text(), nullable=False, server_default=sa.text("'normal'")),
        sa.Column("status", sa.Text(), nullable=True),
        sa.Column("sold_by", sa.Text(), nullable=True),
        _date(),
        sa.Column("updated_by", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "gift_store",
        _id(),
        sa.Column("item", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _money("rate", nullable=False, default="0"),
        _money("selling_price"),
        _money("profit"),
        sa.Column("status", sa.Text(), nullable=True),
        sa.Column("sold_by", sa.Text(), nullable=True),
        _date(),
        sa.Column("updated_by", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "embroidery",
        _id(),
        sa.Column("job_description", sa.Text(), nullable=False),
        _money("quotation", nullable=False, default="0"),
        _money("deposit", nullable=False, default="0"),
        _money("balance"),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        _money("rate", nullable=False, default="0"),
        _money("expenditure", nullable=False, default="0"),
        _money("profit"),
        _money("sales"),
        sa.Column("done_by", sa.Text(), nullable=True),
        _date(),
        sa.Column("updated_by", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "machines",
        _id(),
        sa.Column("machine_name", sa.Text(), nullable=False),
        sa.Column("service_description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        _money("rate", nullable=False, default="0"),
        _money("sales"),
        sa.Column("done_by", sa.Text(), nullable=True),
        _date(),
        sa.Column("updated_by", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "art_services",
        _id(),
        sa.Column("service_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        _money("rate", nullable=False, default="0"),
        _money("quotation"),
        _money("deposit", nullable=False, default="0"),
        _money("balance"),
        _money("expenditure", nullable=False, default="0"),
        _money("profit"),
        _money("sales"),
        sa.Column("done_by", sa.Text(), nullable=True),
        _date(),
        sa.Column("updated_by", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "product_categories",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("module", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Sales ledgers
    op.create_table(
        "stationery_sales",
        _id(),
        sa.Column(
            "item_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("stationery.id", ondelete="CASCADE", name="fk_stationery_sales_item_id_stationery"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        _money("rate"),
        _money("selling_price", nullable=False),
        _money("total_amount", nullable=False),
        _money("profit", nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sold_by", sa.Text(), nullable=True),
        _date(),
        *_timestamps(),
    )
    op.create_index("ix_stationery_sales_item_id", "stationery_sales", ["item_id"])
    op.create_index("ix_stationery_sales_date", "stationery_sales", ["date"])

    op.create_table(
        "gift_daily_sales",
        _id(),
        sa.Column("item", sa.Text(), nullable=False),
        sa.Column("code", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit", sa.Text(), nullable=False, server_default=sa.text("'pcs'")),
        _money("bpx", nullable=False),
        _money("spx", nullable=False),
        _money("total_amount"),
        _money("profit"),
        sa.Column("sold_by", sa.Text(), nullable=True),
        _date(),
        *_timestamps(),
    )
    op.create_index("ix_gift_daily_sales_date", "gift_daily_sales", ["date"])

    # Customers and invoices
    op.create_table(
        "customers",
        _id(),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("company", sa.Text(), nullable=True),
        sa.Column("customer_type", sa.Text(), nullable=False, server_default=sa.text("'individual'")),
        _money("total_purchases", nullable=False, default="0"),
        _money("outstanding_balance", nullable=False, default="0"),
        _money("credit_limit", nullable=False, default="0"),
        sa.Column("preferred_contact", sa.Text(), nullable=True),
        sa.Column("marketing_consent", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("tags", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("last_purchase_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "invoices",
        _id(),
        sa.Column("invoice_number", sa.Text(), nullable=False),
        sa.Column("reference_number", sa.Text(), nullable=False),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        _money("total_amount", nullable=False, default="0"),
        sa.Column("amount_in_words", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
        sa.UniqueConstraint("reference_number", name="uq_invoices_reference_number"),
    )
    op.create_table(
        "invoice_items",
        _id(),
        sa.Column(
            "invoice_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("invoices.id", ondelete="CASCADE", name="fk_invoice_items_invoice_id_invoices"),
            nullable=False,
        ),
        sa.Column("serial_number", sa.Integer(), nullable=False),
        sa.Column("particulars", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        _money("rate", nullable=False),
        _money("amount", nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])

    # Accounts
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "profiles",
        _id(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_profiles_user_id_users"),
            nullable=False,
        ),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), nullable=False, server_default=sa.text("'user'")),
        sa.Column("sales_initials", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_profiles_user_id"),
    )
    op.create_table(
        "auth_sessions",
        _id(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_auth_sessions_user_id_users"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"])

    # System
    op.create_table(
        "notifications",
        _id(),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.Text(), nullable=False, server_default=sa.text("'medium'")),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("data", postgresql.JSONB(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "audit_log",
        _id(),
        sa.Column("user_id", sa.Text(), nullable=True),
        sa.Column("user_name", sa.Text(), nullable=True),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("table_name", sa.Text(), nullable=True),
        sa.Column("record_id", sa.Text(), nullable=True),
        sa.Column("old_values", postgresql.JSONB(), nullable=True),
        sa.Column("new_values", postgresql.JSONB(), nullable=True),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_table(
        "app_settings",
        _id(),
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("value", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("key", name="uq_app_settings_key"),
    )


def downgrade() -> None:
    for table in (
        "app_settings",
        "audit_log",
        "notifications",
        "auth_sessions",
        "profiles",
        "users",
        "invoice_items",
        "invoices",
        "customers",
        "gift_daily_sales",
        "stationery_sales",
        "product_categories",
        "art_services",
        "machines",
        "embroidery",
        "gift_store",
        "stationery",
    ):
        op.drop_table(table)
