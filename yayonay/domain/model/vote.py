"""Vote ledger record.

One record per (user, item[, attribute]). The record is the eligibility
witness: its timestamp drives the cooldown and its absence is what makes a
vote the user's first on the item.
"""

from datetime import datetime
from typing import Optional

from yayonay.domain.model.common import DocumentModel
from yayonay.domain.value import CategoryId, SubCategoryId, SubQuestionId, UserId


class VoteRecord(DocumentModel):
    """A user's current vote on an item.

    Business rules:
    - At most one live record per ledger key (user, item, attribute)
    - A later vote replaces ``is_yay``; counters move by the delta
    - ``previous_vote``/``last_change_at`` are set only when the vote changed
    """

    user_id: UserId
    item_key: str
    category_id: CategoryId
    sub_category_id: SubCategoryId
    sub_question_id: Optional[SubQuestionId] = None
    attribute: Optional[str] = None
    is_yay: bool
    timestamp: datetime
    previous_vote: Optional[bool] = None
    last_change_at: Optional[datetime] = None
