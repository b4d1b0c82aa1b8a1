# address_verification/routes/public.py
from fastapi import APIRouter, Depends

from address_verification.schemas.change import (
    LookupResult,
    SubmissionRequest,
    SubmissionResult,
)
from address_verification.services.change_request_service import ChangeRequestService
from address_verification.services.person_service import PersonService
from address_verification.dependencies.services import (
    get_change_request_service,
    get_person_service,
)

router = APIRouter()


# Must be declared before "/{reference_code}"
@router.post("/track-click/{reference_code}")
async def track_click(
    reference_code: str, person_service: PersonService = Depends(get_person_service)
):
    await person_service.track_click(reference_code)
    return {"success": True}


@router.post("/submit", response_model=SubmissionResult)
async def submit(
    submission: SubmissionRequest,
    change_service: ChangeRequestService = Depends(get_change_request_service),
):
    """
    Public form submission. Updates to a known person become (or replace)
    its pending change request; unknown codes become new-entry requests.
    """
    return await change_service.submit(submission.reference_code, submission.data)


@router.get("/{reference_code}", response_model=LookupResult)
async def lookup(
    reference_code: str,
    change_service: ChangeRequestService = Depends(get_change_request_service),
):
    return await change_service.lookup(reference_code)
