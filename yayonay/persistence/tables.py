"""SQLAlchemy table definitions for YayoNay.

The shared store keeps every document in one table keyed by its path. They
match the schema defined in Alembic migrations. The cooldown marker table
belongs to the local store and is created on startup instead.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
)

# Metadata object for the shared store tables
metadata = MetaData()

# Separate metadata for the local (per-device) store
local_metadata = MetaData()

# ============================================================================
# DOCUMENTS TABLE
# ============================================================================
documents_table = Table(
    "documents",
    metadata,
    Column("path", String(1024), primary_key=True),
    Column("collection", String(1024), nullable=False),  # Parent collection path
    Column("collection_id", String(255), nullable=False),  # Last collection segment
    # NULL marks a deleted document; the row stays so pollers see the delete
    Column("data", JSON(none_as_null=True), nullable=True),
    Column("revision", Integer, nullable=False),  # Store revision of last write
)

Index("idx_documents_collection", documents_table.c.collection)
Index("idx_documents_collection_id", documents_table.c.collection_id)
Index("idx_documents_revision", documents_table.c.revision)

# ============================================================================
# STORE REVISION TABLE (single row)
# ============================================================================
store_revision_table = Table(
    "store_revision",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("revision", Integer, nullable=False, server_default="0"),
)

STORE_REVISION_ROW_ID = 1

# ============================================================================
# COOLDOWN MARKERS TABLE (local store)
# ============================================================================
cooldown_markers_table = Table(
    "cooldown_markers",
    local_metadata,
    Column("user_id", String(128), primary_key=True),
    Column("item_key", String(512), primary_key=True),
    Column("last_vote_at", DateTime(timezone=True), nullable=False),
    Column("last_vote", Boolean, nullable=True),
)
