"""Initial schema for RentLine

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates all tables for:
- Auth (profiles, refresh_tokens)
- Property Management (properties, units, expenses)
- Tenancy Management (tenancies, join_requests)
- Payments (payments, payout_requests)
- Maintenance (maintenance_requests)
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _identity() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.CHAR(36), nullable=False),
    ]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create all tables."""

    # =====================
    # AUTH
    # =====================

    op.create_table(
        "profiles",
        *_identity(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("role", sa.Enum("tenant", "landlord", "admin", name="roleslug"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_profiles_role", "profiles", ["role"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token_hash"),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_refresh_tokens_profile", "refresh_tokens", ["profile_id"])

    # =====================
    # PROPERTY MANAGEMENT
    # =====================

    op.create_table(
        "properties",
        *_identity(),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("country", sa.String(120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_searchable", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["landlord_id"], ["profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_properties_landlord", "properties", ["landlord_id"])
    op.create_index("ix_properties_searchable", "properties", ["is_searchable"])

    op.create_table(
        "units",
        *_identity(),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("unit_number", sa.String(50), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("bathrooms", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.Enum("vacant", "occupied", "maintenance", name="unitstatus"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.CheckConstraint("rent_amount > 0", name="ck_units_rent_positive"),
    )
    op.create_index("ix_units_number", "units", ["property_id", "unit_number"], unique=True)
    op.create_index("ix_units_status", "units", ["status"])

    op.create_table(
        "expenses",
        *_identity(),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_expenses_property", "expenses", ["property_id"])

    # =====================
    # TENANCY MANAGEMENT
    # =====================

    op.create_table(
        "tenancies",
        *_identity(),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Enum("active", "ended", name="tenancystatus"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["tenant_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_tenancies_tenant", "tenancies", ["tenant_id"])
    op.create_index("ix_tenancies_unit_status", "tenancies", ["unit_id", "status"])

    op.create_table(
        "join_requests",
        *_identity(),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "approved", "rejected", "cancelled", name="joinrequeststatus"),
            nullable=False,
        ),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("tenancy_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["tenant_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_join_requests_tenant", "join_requests", ["tenant_id"])
    op.create_index("ix_join_requests_property_status", "join_requests", ["property_id", "status"])

    # =====================
    # PAYMENTS
    # =====================

    op.create_table(
        "payments",
        *_identity(),
        sa.Column("tenancy_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Enum("pending", "completed", "failed", name="paymentstatus"), nullable=False),
        sa.Column(
            "method",
            sa.Enum("momo", "card", "cash", "bank_transfer", name="paymentmethod"),
            nullable=False,
        ),
        sa.Column("reference", sa.String(120), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["tenancy_id"], ["tenancies.id"], ondelete="CASCADE"),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )
    op.create_index("ix_payments_tenancy_date", "payments", ["tenancy_id", "payment_date"])
    op.create_index("ix_payments_status", "payments", ["status"])

    op.create_table(
        "payout_requests",
        *_identity(),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "processing", "completed", "failed", name="payoutstatus"),
            nullable=False,
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("transaction_id", sa.String(120), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["landlord_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.CheckConstraint("amount > 0", name="ck_payouts_amount_positive"),
    )
    op.create_index("ix_payout_requests_landlord", "payout_requests", ["landlord_id"])

    # =====================
    # MAINTENANCE
    # =====================

    op.create_table(
        "maintenance_requests",
        *_identity(),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(60), nullable=False),
        sa.Column(
            "urgency",
            sa.Enum("low", "medium", "high", "emergency", name="maintenanceurgency"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("pending", "in_progress", "completed", "cancelled", name="maintenancestatus"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["tenant_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_maintenance_tenant", "maintenance_requests", ["tenant_id"])
    op.create_index("ix_maintenance_unit_status", "maintenance_requests", ["unit_id", "status"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("maintenance_requests")
    op.drop_table("payout_requests")
    op.drop_table("payments")
    op.drop_table("join_requests")
    op.drop_table("tenancies")
    op.drop_table("expenses")
    op.drop_table("units")
    op.drop_table("properties")
    op.drop_table("refresh_tokens")
    op.drop_table("profiles")
