# tests/conftest.py
import copy

import pytest
from mongomock_motor import AsyncMongoMockClient

from address_verification.models.geo_node import GeoNode, GeoNodeType
from address_verification.services import background
from address_verification.services.address_resolver import AddressResolver
from address_verification.services.change_request_service import ChangeRequestService
from address_verification.services.db import init_database
from address_verification.services.geo_node_service import GeoNodeService
from address_verification.services.person_service import PersonService


class FakeGeoSource:
    """In-memory stand-in for TurkiyeApiClient that records every call."""

    def __init__(self, provinces=None, province_details=None, district_details=None):
        self.provinces = provinces
        self.province_details = province_details or {}
        self.district_details = district_details or {}
        self.calls = []

    def fetch_provinces(self):
        self.calls.append(("provinces", None))
        return copy.deepcopy(self.provinces)

    def fetch_province_detail(self, province_id):
        self.calls.append(("province", str(province_id)))
        return copy.deepcopy(self.province_details.get(str(province_id)))

    def fetch_district_detail(self, district_id):
        self.calls.append(("district", str(district_id)))
        return copy.deepcopy(self.district_details.get(str(district_id)))

    def count(self, kind, source_id=None):
        return sum(
            1
            for call_kind, call_id in self.calls
            if call_kind == kind and (source_id is None or call_id == str(source_id))
        )


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["adres-dogrulama-test"]
    await init_database(database)
    yield database
    await background.drain()


@pytest.fixture
def geo_source():
    return FakeGeoSource(
        provinces=[
            {"id": 35, "name": "İzmir"},
            {"id": 6, "name": "Ankara"},
            {"id": 19, "name": "Çorum"},
        ],
        province_details={
            "6": {
                "districts": [
                    {"id": 1231, "name": "Keçiören"},
                    {"id": 1130, "name": "Çankaya"},
                ]
            },
            "19": {"districts": [{"id": 1100, "name": "Merkez"}]},
            "35": {"districts": []},
        },
        district_details={
            "1130": {
                "neighborhoods": [
                    {"id": 501, "name": "Kızılay"},
                    {"id": 502, "name": "Bahçelievler Mahallesi"},
                ],
                "villages": [{"id": 503, "name": "Yakupabdal"}],
            },
            "1231": {"neighborhoods": [{"id": 601, "name": "Etlik"}], "villages": []},
        },
    )


@pytest.fixture
def store(db):
    return GeoNodeService()


@pytest.fixture
def resolver(store, geo_source):
    return AddressResolver(store=store, source=geo_source)


@pytest.fixture
def person_service(db):
    return PersonService()


@pytest.fixture
def change_service(person_service, resolver):
    return ChangeRequestService(person_service=person_service, resolver=resolver)


@pytest.fixture
async def ankara(store):
    """Ankara > Çankaya already cached, without neighborhoods."""
    province = GeoNode(
        id="province_6", type=GeoNodeType.PROVINCE, name="Ankara", formatted_address="Ankara"
    )
    district = GeoNode(
        id="district_1130",
        type=GeoNodeType.DISTRICT,
        parent_id="province_6",
        name="Çankaya",
        formatted_address="Çankaya, Ankara",
    )
    await store.upsert(province)
    await store.upsert(district)
    return province, district


@pytest.fixture
def make_geo_source():
    return FakeGeoSource
