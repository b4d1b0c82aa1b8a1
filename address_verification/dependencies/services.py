# address_verification/dependencies/services.py
# Service providers for the routes. Tests swap them through
# app.dependency_overrides (e.g. to replace the address API client).
from functools import lru_cache

from fastapi import Depends

from address_verification.services.address_resolver import AddressResolver
from address_verification.services.change_request_service import ChangeRequestService
from address_verification.services.geo_node_service import GeoNodeService
from address_verification.services.geo_source import TurkiyeApiClient
from address_verification.services.person_service import PersonService


@lru_cache
def get_geo_source() -> TurkiyeApiClient:
    return TurkiyeApiClient()


def get_geo_node_service() -> GeoNodeService:
    return GeoNodeService()


def get_person_service() -> PersonService:
    return PersonService()


def get_address_resolver(
    store: GeoNodeService = Depends(get_geo_node_service),
    source: TurkiyeApiClient = Depends(get_geo_source),
) -> AddressResolver:
    return AddressResolver(store=store, source=source)


def get_change_request_service(
    person_service: PersonService = Depends(get_person_service),
    resolver: AddressResolver = Depends(get_address_resolver),
) -> ChangeRequestService:
    return ChangeRequestService(person_service=person_service, resolver=resolver)
