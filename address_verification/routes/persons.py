# address_verification/routes/persons.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
from beanie import PydanticObjectId

from address_verification.configs import configs
from address_verification.schemas.misc import Message, Pagination
from address_verification.schemas.person import (
    PersonCreate,
    PersonList,
    PersonPublic,
    PersonUpdate,
)
from address_verification.services.person_service import PersonService
from address_verification.dependencies.services import get_person_service

router = APIRouter()

_pagination = configs.get("pagination", {})
DEFAULT_LIMIT = int(_pagination.get("default_limit", 20))
MAX_LIMIT = int(_pagination.get("max_limit", 100))


@router.get("/", response_model=PersonList)
async def list_persons(
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    person_service: PersonService = Depends(get_person_service),
):
    persons, total = await person_service.list_persons(
        search, skip=(page - 1) * limit, limit=limit
    )
    return {
        "persons": [PersonPublic.model_validate(p) for p in persons],
        "pagination": Pagination.build(page, limit, total),
    }


@router.get("/{person_id}", response_model=PersonPublic)
async def get_person(
    person_id: PydanticObjectId,
    person_service: PersonService = Depends(get_person_service),
):
    person = await person_service.get_person_by_id(person_id)
    if not person:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Kişi bulunamadı"
        )
    return PersonPublic.model_validate(person)


@router.post("/", response_model=PersonPublic, status_code=status.HTTP_201_CREATED)
async def create_person(
    person_create: PersonCreate,
    person_service: PersonService = Depends(get_person_service),
):
    """Creates a person directly, with a freshly generated reference code."""
    person = await person_service.create_person(person_create.model_dump())
    return PersonPublic.model_validate(person)


@router.put("/{person_id}", response_model=PersonPublic)
async def update_person(
    person_id: PydanticObjectId,
    person_update: PersonUpdate,
    person_service: PersonService = Depends(get_person_service),
):
    person = await person_service.update_person(
        person_id, person_update.model_dump(exclude_unset=True)
    )
    if not person:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Kişi bulunamadı"
        )
    return PersonPublic.model_validate(person)


@router.delete("/{person_id}", response_model=Message)
async def delete_person(
    person_id: PydanticObjectId,
    person_service: PersonService = Depends(get_person_service),
):
    success = await person_service.delete_person(person_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Kişi bulunamadı"
        )
    return {"message": "Kişi başarıyla silindi"}
