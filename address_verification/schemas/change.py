# address_verification/schemas/change.py
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from beanie import PydanticObjectId

from address_verification.models.change_request import ChangeStatus
from address_verification.schemas.misc import Pagination


# --- Public form ---
class SubmissionRequest(BaseModel):
    reference_code: Optional[str] = None
    # Free-form on purpose: only first/last name are checked by the service
    data: Dict[str, Any]


class SubmissionResult(BaseModel):
    message: str
    type: Literal["update", "new"]
    reference_code: Optional[str] = None


class LookupResult(BaseModel):
    exists: bool
    data: Optional[Dict[str, Any]] = None


# --- Admin review ---
class ApproveRequest(BaseModel):
    add_to_system: bool = False


class PersonSummary(BaseModel):
    id: PydanticObjectId
    unique_code: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class ChangeRequestPublic(BaseModel):
    id: PydanticObjectId
    subject_code: str
    person_id: Optional[PydanticObjectId] = None
    person: Optional[PersonSummary] = None
    prior_snapshot: Optional[Dict[str, Any]] = None
    proposed_data: Dict[str, Any] = Field(default_factory=dict)
    status: ChangeStatus
    is_new_entry: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChangeRequestList(BaseModel):
    changes: List[ChangeRequestPublic]
    pagination: Pagination


class ChangeDecision(BaseModel):
    message: str
    change: ChangeRequestPublic


class PendingCount(BaseModel):
    count: int
