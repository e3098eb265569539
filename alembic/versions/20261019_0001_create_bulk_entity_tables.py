"""create members, applications, claims and transactions tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "membership_number",
            sa.String(length=20),
            nullable=True,
            comment="PP-YYYY-NNNNNN, assigned after insert",
        ),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("surname", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("id_number", sa.String(length=32), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("package_id", sa.String(length=64), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("valid_from", sa.Date(), nullable=True),
        sa.Column("valid_until", sa.Date(), nullable=True),
        sa.Column("dependents", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_members"),
        sa.UniqueConstraint("membership_number", name="uq_members_membership_number"),
    )
    op.create_index("ix_members_email", "members", ["email"], unique=False)
    op.create_index("ix_members_id_number", "members", ["id_number"], unique=False)
    op.create_index("ix_members_status", "members", ["status"], unique=False)

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_number", sa.String(length=20), nullable=True),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("surname", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("id_number", sa.String(length=32), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("employer_name", sa.String(length=255), nullable=True),
        sa.Column("package_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_applications"),
        sa.UniqueConstraint("application_number", name="uq_applications_application_number"),
    )
    op.create_index("ix_applications_status", "applications", ["status"], unique=False)
    op.create_index("ix_applications_submitted_at", "applications", ["submitted_at"], unique=False)

    op.create_table(
        "claims",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("claim_number", sa.String(length=20), nullable=True),
        sa.Column("membership_number", sa.String(length=20), nullable=False),
        sa.Column("type", sa.String(length=40), nullable=False),
        sa.Column("provider", sa.String(length=255), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=False),
        sa.Column("submission_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("approved_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("receipt_number", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_claims"),
        sa.UniqueConstraint("claim_number", name="uq_claims_claim_number"),
    )
    op.create_index("ix_claims_membership_number", "claims", ["membership_number"], unique=False)
    op.create_index("ix_claims_service_date", "claims", ["service_date"], unique=False)
    op.create_index("ix_claims_status", "claims", ["status"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("transaction_number", sa.String(length=20), nullable=True),
        sa.Column("membership_number", sa.String(length=20), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("method", sa.String(length=32), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("reference", sa.String(length=120), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_transactions"),
        sa.UniqueConstraint("transaction_number", name="uq_transactions_transaction_number"),
    )
    op.create_index(
        "ix_transactions_membership_number",
        "transactions",
        ["membership_number"],
        unique=False,
    )
    op.create_index(
        "ix_transactions_transaction_date",
        "transactions",
        ["transaction_date"],
        unique=False,
    )
    op.create_index("ix_transactions_status", "transactions", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_transactions_status", table_name="transactions")
    op.drop_index("ix_transactions_transaction_date", table_name="transactions")
    op.drop_index("ix_transactions_membership_number", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_claims_status", table_name="claims")
    op.drop_index("ix_claims_service_date", table_name="claims")
    op.drop_index("ix_claims_membership_number", table_name="claims")
    op.drop_table("claims")

    op.drop_index("ix_applications_submitted_at", table_name="applications")
    op.drop_index("ix_applications_status", table_name="applications")
    op.drop_table("applications")

    op.drop_index("ix_members_status", table_name="members")
    op.drop_index("ix_members_id_number", table_name="members")
    op.drop_index("ix_members_email", table_name="members")
    op.drop_table("members")
