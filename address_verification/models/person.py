# address_verification/models/person.py
from typing import List, Optional
from datetime import datetime, timezone
from pydantic import Field
from beanie import Document, Indexed


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Contact and flattened address fields a submission may set on a Person.
PERSON_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "email",
    "province",
    "district",
    "neighborhood",
    "street",
    "building_no",
    "apartment_no",
    "postal_code",
    "full_address",
)


# --- Person Model ---
class Person(Document):
    unique_code: Indexed(str, unique=True)
    first_name: str
    last_name: str
    phone: Optional[str] = None
    email: Optional[str] = None

    # Address is stored as free text, not as GeoNode ids, since submitters
    # may type neighborhoods that are not in the cache.
    province: Optional[str] = None
    district: Optional[str] = None
    neighborhood: Optional[str] = None
    street: Optional[str] = None
    building_no: Optional[str] = None
    apartment_no: Optional[str] = None
    postal_code: Optional[str] = None
    full_address: Optional[str] = None

    # Engagement logs, append-only
    link_visits: List[datetime] = Field(default_factory=list)
    form_submissions: List[datetime] = Field(default_factory=list)
    button_clicks: List[datetime] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def snapshot(self) -> dict:
        """Copy of the contact/address fields, used as a change's prior data."""
        return {field: getattr(self, field) for field in PERSON_FIELDS}

    class Settings:
        name = "persons"
