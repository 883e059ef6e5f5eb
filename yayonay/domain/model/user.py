"""User profile as seen by the engagement engine.

Profiles are owned by the account system; the engine reads the display
fields when denormalizing them into comments and writes the vote activity
counters.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from yayonay.domain.model.common import DocumentModel
from yayonay.domain.value import UserId


class UserProfile(DocumentModel):
    """Display fields and vote activity of a user."""

    id: UserId = Field(exclude=True)
    username: str
    image_url: Optional[str] = Field(default=None, alias="imageURL")
    votes_count: int = 0
    last_vote_date: Optional[datetime] = None


class Activity(DocumentModel):
    """An entry in a user's recent activity feed."""

    type: str
    item_id: str
    title: str
    timestamp: datetime
