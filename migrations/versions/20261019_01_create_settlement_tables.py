"""create users, bills, verifications and wallet transaction tables

Revision ID: 4f1c2a9e7b30
Revises: 
Create Date: 2026-10-19 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4f1c2a9e7b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("organization_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="public"),
        sa.Column("wallet_balance_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("verification_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("free_verifications_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("wallet_balance_cents >= 0", name="ck_users_wallet_balance_non_negative"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "bills",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("bill_number", sa.String(length=50), nullable=False),
        sa.Column("bill_type", sa.String(length=32), nullable=False),
        sa.Column("access_level", sa.String(length=20), nullable=False, server_default="public"),
        sa.Column("issuer_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("issuer_name", sa.String(length=255), nullable=False),
        sa.Column("bill_data", sa.Text(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="INR"),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("data_hash", sa.String(length=64), nullable=False, unique=True),
        sa.Column("blockchain_status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deletion_reason", sa.Text()),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_bills_bill_number", "bills", ["bill_number"], unique=True)
    op.create_index("ix_bills_issuer_id", "bills", ["issuer_id"])

    op.create_table(
        "verifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("bill_id", sa.String(length=36), sa.ForeignKey("bills.id")),
        sa.Column("bill_number", sa.String(length=50), nullable=False),
        sa.Column("requester_id", sa.String(length=36), sa.ForeignKey("users.id")),
        sa.Column("requester_ip", sa.String(length=45)),
        sa.Column("requester_user_agent", sa.Text()),
        sa.Column("disclosure", sa.String(length=20), nullable=False),
        sa.Column("data_revealed", sa.Text()),
        sa.Column("amount_charged_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("was_free", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("pricing_rule_applied", sa.String(length=50)),
        sa.Column("verification_status", sa.String(length=20), nullable=False),
        sa.Column("response_time_ms", sa.Integer()),
        sa.Column("verified_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_verifications_bill_id", "verifications", ["bill_id"])
    op.create_index("ix_verifications_bill_number", "verifications", ["bill_number"])
    op.create_index("ix_verifications_requester_id", "verifications", ["requester_id"])
    op.create_index("ix_verifications_verification_status", "verifications", ["verification_status"])
    op.create_index("ix_verifications_verified_at", "verifications", ["verified_at"])

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("balance_before_cents", sa.Integer(), nullable=False),
        sa.Column("balance_after_cents", sa.Integer(), nullable=False),
        sa.Column("bill_id", sa.String(length=36), sa.ForeignKey("bills.id")),
        sa.Column("reference", sa.String(length=100)),
        sa.Column("description", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_wallet_transactions_user_id", "wallet_transactions", ["user_id"])
    op.create_index("ix_wallet_transactions_user_created", "wallet_transactions", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_wallet_transactions_user_created", table_name="wallet_transactions")
    op.drop_index("ix_wallet_transactions_user_id", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")

    op.drop_index("ix_verifications_verified_at", table_name="verifications")
    op.drop_index("ix_verifications_verification_status", table_name="verifications")
    op.drop_index("ix_verifications_requester_id", table_name="verifications")
    op.drop_index("ix_verifications_bill_number", table_name="verifications")
    op.drop_index("ix_verifications_bill_id", table_name="verifications")
    op.drop_table("verifications")

    op.drop_index("ix_bills_issuer_id", table_name="bills")
    op.drop_index("ix_bills_bill_number", table_name="bills")
    op.drop_table("bills")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
