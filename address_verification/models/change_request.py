# address_verification/models/change_request.py
from enum import Enum
from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import Field
from beanie import Document, PydanticObjectId
from pymongo import ASCENDING, DESCENDING, IndexModel

from address_verification.models.person import utcnow


class ChangeStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# --- ChangeRequest Model ---
class ChangeRequest(Document):
    """
    A proposed edit to a Person, waiting for an admin decision.

    `proposed_data` is kept exactly as submitted (including a nested
    `address` object, if any); flattening happens on display and approval.
    """

    subject_code: str
    person_id: Optional[PydanticObjectId] = None  # None for new entries
    prior_snapshot: Optional[Dict[str, Any]] = None
    proposed_data: Dict[str, Any]
    status: ChangeStatus = ChangeStatus.PENDING
    is_new_entry: bool = False

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_pending(self) -> bool:
        return self.status == ChangeStatus.PENDING

    class Settings:
        name = "address_changes"
        indexes = [
            # At most one pending request per subject
            IndexModel(
                [("subject_code", ASCENDING), ("status", ASCENDING)],
                name="one_pending_per_subject",
                unique=True,
                partialFilterExpression={"status": ChangeStatus.PENDING.value},
            ),
            IndexModel([("status", ASCENDING), ("created_at", DESCENDING)]),
        ]
