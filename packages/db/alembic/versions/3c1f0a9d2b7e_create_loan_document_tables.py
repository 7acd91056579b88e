# This project was developed with assistance from AI tools.
"""create loan document tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-12 09:41:17.402118

"""

import sqlalchemy as sa
from alembic import op

revision = "3c1f0a9d2b7e"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "loans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("borrower_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("property_address", sa.Text(), nullable=True),
        sa.Column("loan_number", sa.String(100), nullable=True),
        sa.Column("funder", sa.String(100), nullable=True),
        sa.Column("drive_folder", sa.String(255), nullable=True),
        sa.Column(
            "requirement_assignments", sa.JSON(), nullable=False, server_default=sa.text("'{}'")
        ),
        sa.Column(
            "completed_requirements", sa.JSON(), nullable=False, server_default=sa.text("'[]'")
        ),
        sa.Column(
            "custom_requirements", sa.JSON(), nullable=False, server_default=sa.text("'[]'")
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_loans_loan_number", "loans", ["loan_number"])

    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("loan_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("role", sa.String(100), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["loan_id"], ["loans.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contacts_loan_id", "contacts", ["loan_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("loan_id", sa.Integer(), nullable=False),
        sa.Column("source_channel", sa.String(20), nullable=False),
        sa.Column("source_ref", sa.String(500), nullable=False),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("mime_type", sa.String(255), nullable=True),
        sa.Column("size_bytes", sa.BigInteger(), nullable=True),
        sa.Column("category", sa.String(20), nullable=False, server_default="OTHER"),
        sa.Column("storage_key", sa.String(500), nullable=True),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "observed_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["loan_id"], ["loans.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("loan_id", "source_channel", "source_ref", name="uq_document_source"),
    )
    op.create_index("ix_documents_loan_id", "documents", ["loan_id"])


def downgrade() -> None:
    op.drop_index("ix_documents_loan_id", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_contacts_loan_id", table_name="contacts")
    op.drop_table("contacts")
    op.drop_index("ix_loans_loan_number", table_name="loans")
    op.drop_table("loans")
