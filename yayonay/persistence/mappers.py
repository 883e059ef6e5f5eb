"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from datetime import timezone
from typing import Any, Dict

from yayonay.domain.model.cooldown import CooldownMarker
from yayonay.domain.value import UserId


def row_to_marker(row: Dict[str, Any]) -> CooldownMarker:
    """Convert database row to CooldownMarker domain model.

    SQLite drops the UTC offset of stored timestamps, so naive values read
    back are re-attached to UTC.

    Args:
        row: Database row as dict

    Returns:
        CooldownMarker domain model
    """
    last_vote_at = row["last_vote_at"]
    if last_vote_at.tzinfo is None:
        last_vote_at = last_vote_at.replace(tzinfo=timezone.utc)
    return CooldownMarker(
        user_id=UserId(row["user_id"]),
        item_key=row["item_key"],
        last_vote_at=last_vote_at,
        last_vote=row.get("last_vote"),
    )


def marker_to_dict(marker: CooldownMarker) -> Dict[str, Any]:
    """Convert CooldownMarker domain model to database dict.

    Timestamps are normalized to UTC before storage.

    Args:
        marker: CooldownMarker domain model

    Returns:
        Dict suitable for database insertion/update
    """
    last_vote_at = marker.last_vote_at
    if last_vote_at.tzinfo is None:
        last_vote_at = last_vote_at.replace(tzinfo=timezone.utc)
    return {
        "user_id": marker.user_id,
        "item_key": marker.item_key,
        "last_vote_at": last_vote_at.astimezone(timezone.utc),
        "last_vote": marker.last_vote,
    }
