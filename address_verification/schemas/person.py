# address_verification/schemas/person.py
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from beanie import PydanticObjectId

from address_verification.schemas.misc import Pagination


class PersonBase(BaseModel):
    first_name: str
    last_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    neighborhood: Optional[str] = None
    street: Optional[str] = None
    building_no: Optional[str] = None
    apartment_no: Optional[str] = None
    postal_code: Optional[str] = None
    full_address: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class PersonCreate(PersonBase):
    pass


class PersonUpdate(BaseModel):
    # All optional: only the fields sent are changed
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    neighborhood: Optional[str] = None
    street: Optional[str] = None
    building_no: Optional[str] = None
    apartment_no: Optional[str] = None
    postal_code: Optional[str] = None
    full_address: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class PersonPublic(PersonBase):
    id: PydanticObjectId
    unique_code: str
    link_visits: List[datetime] = Field(default_factory=list)
    form_submissions: List[datetime] = Field(default_factory=list)
    button_clicks: List[datetime] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PersonList(BaseModel):
    persons: List[PersonPublic]
    pagination: Pagination
