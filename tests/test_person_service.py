import pytest

from address_verification.services.errors import InvalidError
from address_verification.services.person_service import person_fields


def test_person_fields_keeps_known_scalar_fields():
    fields = person_fields(
        {
            "first_name": "  Ayşe ",
            "building_no": 12,
            "email": " Ayse.Yilmaz@Example.COM ",
            "address": {"district": "Çankaya"},
            "street": {"name": "Gül Sokak"},
            "phone": ["555", "556"],
            "postal_code": None,
        }
    )

    assert fields == {
        "first_name": "Ayşe",
        "building_no": "12",
        "email": "ayse.yilmaz@example.com",
        "postal_code": None,
    }


async def test_create_lowercases_email(person_service):
    person = await person_service.create_person(
        {"first_name": "Ayşe", "last_name": "Yılmaz", "email": "AYSE@Example.com"}
    )
    assert person.email == "ayse@example.com"


async def test_update_cannot_clear_names(person_service):
    person = await person_service.create_person({"first_name": "Ayşe", "last_name": "Yılmaz"})

    with pytest.raises(InvalidError):
        await person_service.update_person(person.id, {"first_name": None})
    with pytest.raises(InvalidError):
        await person_service.update_person(person.id, {"last_name": "   "})

    stored = await person_service.find_by_code(person.unique_code)
    assert stored.first_name == "Ayşe"
    assert stored.last_name == "Yılmaz"


async def test_update_changes_only_given_fields(person_service):
    person = await person_service.create_person(
        {"first_name": "Ayşe", "last_name": "Yılmaz", "phone": "555"}
    )

    updated = await person_service.update_person(person.id, {"last_name": "Kara"})

    assert updated.last_name == "Kara"
    assert updated.phone == "555"
