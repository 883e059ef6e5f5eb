"""documents_schema

Create the shared document store schema:
- documents (every document keyed by its path, JSON body, revision)
- store_revision (single row counter that orders all writes)

Revision ID: 3c1f0a7d9e42
Revises:
Create Date: 2026-10-19 10:12:44.518203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1f0a7d9e42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # DOCUMENTS table
    # ========================================================================
    op.create_table(
        "documents",
        sa.Column("path", sa.String(length=1024), nullable=False),
        sa.Column("collection", sa.String(length=1024), nullable=False),
        sa.Column("collection_id", sa.String(length=255), nullable=False),
        sa.Column("data", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("revision", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("path"),
    )
    op.create_index("idx_documents_collection", "documents", ["collection"])
    op.create_index("idx_documents_collection_id", "documents", ["collection_id"])
    op.create_index("idx_documents_revision", "documents", ["revision"])

    # ========================================================================
    # STORE_REVISION table (single row)
    # ========================================================================
    op.create_table(
        "store_revision",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("revision", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.execute("INSERT INTO store_revision (id, revision) VALUES (1, 0)")


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("store_revision")
    op.drop_index("idx_documents_revision", table_name="documents")
    op.drop_index("idx_documents_collection_id", table_name="documents")
    op.drop_index("idx_documents_collection", table_name="documents")
    op.drop_table("documents")
