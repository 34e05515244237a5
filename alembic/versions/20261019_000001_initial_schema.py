"""Initial schema.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19 00:00:01.000000
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261019_000001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


event_status_enum = postgresql.ENUM("draft", "confirmed", "cancelled", name="eventstatus", create_type=False)
sleep_log_kind_enum = postgresql.ENUM("sleep", "wake", name="sleeplogkind", create_type=False)
transaction_type_enum = postgresql.ENUM("income", "expense", name="transactiontype", create_type=False)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
    ]


def _user_fk() -> sa.Column:
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    bind = op.get_bind()
    event_status_enum.create(bind, checkfirst=True)
    sleep_log_kind_enum.create(bind, checkfirst=True)
    transaction_type_enum.create(bind, checkfirst=True)

    op.create_table(
        "users",
        *_audit_columns(),
        sa.Column("telegram_id", sa.BigInteger(), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_users_telegram_id", "users", ["telegram_id"], unique=True)

    op.create_table(
        "bot_states",
        *_audit_columns(),
        _user_fk(),
        sa.Column("current_state", sa.String(length=32), nullable=True),
        sa.Column(
            "state_data",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("last_message_id", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_bot_states_user_id", "bot_states", ["user_id"], unique=True)

    op.create_table(
        "events",
        *_audit_columns(),
        _user_fk(),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("all_day", sa.Boolean(), nullable=True),
        sa.Column("status", event_status_enum, nullable=False, server_default=sa.text("'draft'")),
    )
    op.create_index("ix_events_user_id", "events", ["user_id"])
    op.create_index(
        "uq_events_one_draft_per_user",
        "events",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'draft'"),
    )

    op.create_table(
        "sleep_logs",
        *_audit_columns(),
        _user_fk(),
        sa.Column("kind", sleep_log_kind_enum, nullable=False),
        sa.Column("logged_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_sleep_logs_user_id", "sleep_logs", ["user_id"])
    op.create_index("ix_sleep_logs_logged_at", "sleep_logs", ["logged_at"])

    op.create_table(
        "water_logs",
        *_audit_columns(),
        _user_fk(),
        sa.Column("amount_ml", sa.Integer(), nullable=False),
        sa.Column("logged_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_water_logs_user_id", "water_logs", ["user_id"])
    op.create_index("ix_water_logs_logged_at", "water_logs", ["logged_at"])

    op.create_table(
        "financial_categories",
        *_audit_columns(),
        _user_fk(),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("emoji", sa.String(length=16), nullable=False),
        sa.Column("category_type", transaction_type_enum, nullable=False),
    )
    op.create_index("ix_financial_categories_user_id", "financial_categories", ["user_id"])

    op.create_table(
        "financial_transactions",
        *_audit_columns(),
        _user_fk(),
        sa.Column(
            "category_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("financial_categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("transaction_type", transaction_type_enum, nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("description", sa.String(length=512), nullable=True),
        sa.Column("occurred_on", sa.Date(), nullable=False),
    )
    op.create_index("ix_financial_transactions_user_id", "financial_transactions", ["user_id"])
    op.create_index("ix_financial_transactions_occurred_on", "financial_transactions", ["occurred_on"])

    op.create_table(
        "fixed_bills",
        *_audit_columns(),
        _user_fk(),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("emoji", sa.String(length=16), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("is_variable", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("estimated_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("due_day", sa.Integer(), nullable=False),
        sa.Column("billing_day", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_fixed_bills_user_id", "fixed_bills", ["user_id"])

    op.create_table(
        "bill_values",
        *_audit_columns(),
        sa.Column(
            "bill_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("fixed_bills.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "defined_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.UniqueConstraint("bill_id", "month", "year", name="uq_bill_values_period"),
    )
    op.create_index("ix_bill_values_bill_id", "bill_values", ["bill_id"])

    op.create_table(
        "financial_goals",
        *_audit_columns(),
        _user_fk(),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("target_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("current_amount", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_financial_goals_user_id", "financial_goals", ["user_id"])


def downgrade() -> None:
    for table in (
        "financial_goals",
        "bill_values",
        "fixed_bills",
        "financial_transactions",
        "financial_categories",
        "water_logs",
        "sleep_logs",
        "events",
        "bot_states",
        "users",
    ):
        op.drop_table(table)
    bind = op.get_bind()
    transaction_type_enum.drop(bind, checkfirst=True)
    sleep_log_kind_enum.drop(bind, checkfirst=True)
    event_status_enum.drop(bind, checkfirst=True)
