# address_verification/routes/changes.py
from fastapi import APIRouter, Depends, Query
from typing import Literal, Optional
from beanie import PydanticObjectId

from address_verification.configs import configs
from address_verification.schemas.change import (
    ApproveRequest,
    ChangeDecision,
    ChangeRequestList,
    ChangeRequestPublic,
    PendingCount,
    PersonSummary,
)
from address_verification.schemas.misc import Pagination
from address_verification.services.change_request_service import ChangeRequestService
from address_verification.dependencies.services import get_change_request_service

router = APIRouter()

_pagination = configs.get("pagination", {})
DEFAULT_LIMIT = int(_pagination.get("default_limit", 20))
MAX_LIMIT = int(_pagination.get("max_limit", 100))


@router.get("/pending-count", response_model=PendingCount)
async def pending_count(
    change_service: ChangeRequestService = Depends(get_change_request_service),
):
    return {"count": await change_service.pending_count()}


@router.get("/", response_model=ChangeRequestList)
async def list_changes(
    status: Literal["pending", "approved", "rejected", "all"] = "pending",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    change_service: ChangeRequestService = Depends(get_change_request_service),
):
    changes, total, persons = await change_service.list_changes(
        status, skip=(page - 1) * limit, limit=limit
    )
    items = []
    for change in changes:
        item = ChangeRequestPublic.model_validate(change)
        person = persons.get(change.person_id)
        if person:
            item.person = PersonSummary.model_validate(person)
        items.append(item)
    return {"changes": items, "pagination": Pagination.build(page, limit, total)}


@router.post("/{change_id}/approve", response_model=ChangeDecision)
async def approve_change(
    change_id: PydanticObjectId,
    approve_request: Optional[ApproveRequest] = None,
    change_service: ChangeRequestService = Depends(get_change_request_service),
):
    """
    Applies the change to the person directory. With `add_to_system`, a
    manually typed neighborhood is also added to the address cache in the
    background; failures there do not undo the approval.
    """
    add_to_system = approve_request.add_to_system if approve_request else False
    change = await change_service.approve(change_id, add_to_system=add_to_system)
    return {
        "message": "Değişiklik onaylandı",
        "change": ChangeRequestPublic.model_validate(change),
    }


@router.post("/{change_id}/reject", response_model=ChangeDecision)
async def reject_change(
    change_id: PydanticObjectId,
    change_service: ChangeRequestService = Depends(get_change_request_service),
):
    change = await change_service.reject(change_id)
    return {
        "message": "Değişiklik reddedildi",
        "change": ChangeRequestPublic.model_validate(change),
    }
