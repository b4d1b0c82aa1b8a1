# address_verification/services/person_service.py
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from beanie import PydanticObjectId
from pymongo.errors import DuplicateKeyError

from address_verification.models.person import PERSON_FIELDS, Person, utcnow
from address_verification.services.errors import InvalidError, NotFoundError
from address_verification.services.reference_code import (
    generate_reference_code,
    normalize_reference_code,
)

logger = logging.getLogger(__name__)

TELEMETRY_FIELDS = ("link_visits", "form_submissions", "button_clicks")
REQUIRED_FIELDS = ("first_name", "last_name")
_CODE_ATTEMPTS = 5
_SCALAR_TYPES = (str, int, float, bool)


def person_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keeps only the keys a Person record stores. Submissions are free-form,
    so numbers (e.g. a building number sent as 12) are stored as text and
    nested objects or lists are dropped.
    """
    fields = {}
    for key, value in data.items():
        if key not in PERSON_FIELDS:
            continue
        if value is not None and not isinstance(value, _SCALAR_TYPES):
            continue
        if isinstance(value, (int, float, bool)):
            value = str(value)
        if isinstance(value, str):
            value = value.strip()
            if key == "email":
                value = value.lower()
        fields[key] = value
    return fields


def _require_names(fields: Dict[str, Any], partial: bool = False) -> None:
    for key in REQUIRED_FIELDS:
        if partial and key not in fields:
            continue
        if not fields.get(key):
            raise InvalidError("İsim ve soyisim alanları zorunludur")


class PersonService:
    """Authoritative directory of verified persons, keyed by reference code."""

    def __init__(self):
        pass

    async def get_person_by_id(self, person_id: PydanticObjectId) -> Optional[Person]:
        return await Person.get(person_id)

    async def find_by_code(self, code: Optional[str]) -> Optional[Person]:
        if not code or not code.strip():
            return None
        return await Person.find_one({"unique_code": normalize_reference_code(code)})

    async def list_persons(
        self, search: Optional[str] = None, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Person], int]:
        query: Dict[str, Any] = {}
        if search:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query = {
                "$or": [
                    {field: pattern}
                    for field in ("first_name", "last_name", "email", "phone", "unique_code")
                ]
            }
        persons = (
            await Person.find(query).sort("-created_at").skip(skip).limit(limit).to_list()
        )
        total = await Person.find(query).count()
        return persons, total

    async def create_person(
        self, fields: Dict[str, Any], unique_code: Optional[str] = None
    ) -> Person:
        """
        Creates a person. Without an explicit code a fresh one is generated,
        retrying on the rare collision with an existing code.
        """
        data = person_fields(fields)
        _require_names(data)

        if unique_code:
            person = Person(unique_code=normalize_reference_code(unique_code), **data)
            await person.insert()
            return person

        for _ in range(_CODE_ATTEMPTS):
            person = Person(unique_code=generate_reference_code(), **data)
            try:
                await person.insert()
                return person
            except DuplicateKeyError:
                logger.warning(f"Reference code {person.unique_code} taken; retrying.")
        raise InvalidError("Benzersiz kod üretilemedi, lütfen tekrar deneyin")

    async def update_person(
        self, person_id: PydanticObjectId, fields: Dict[str, Any]
    ) -> Optional[Person]:
        """
        Partial update: only the given fields change. Names may be changed
        but never cleared.
        """
        update_data = person_fields(fields)
        _require_names(update_data, partial=True)
        person = await self.get_person_by_id(person_id)
        if not person:
            return None
        update_data["updated_at"] = utcnow()
        await person.set(update_data)
        return person

    async def delete_person(self, person_id: PydanticObjectId) -> bool:
        person = await self.get_person_by_id(person_id)
        if not person:
            return False
        await person.delete()
        return True

    async def record_event(self, person: Person, field_name: str) -> None:
        """Appends a timestamp to one of the person's engagement logs."""
        if field_name not in TELEMETRY_FIELDS:
            raise ValueError(f"Unknown telemetry field: {field_name}")
        await person.update({"$push": {field_name: utcnow()}})

    async def track_click(self, code: str) -> Person:
        person = await self.find_by_code(code)
        if not person:
            raise NotFoundError("Kişi bulunamadı")
        await self.record_event(person, "button_clicks")
        return person
