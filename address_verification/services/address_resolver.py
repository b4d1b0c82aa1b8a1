# address_verification/services/address_resolver.py
"""
Cache-or-fetch access to the province > district > neighborhood hierarchy.

Each level is served from the GeoNode cache when the cache already holds it,
otherwise it is fetched from the address API, upserted and returned. A parent
counts as fully cached as soon as it has any child rows; the province list
counts as complete once it reaches the configured province total.

Only internal place ids leave this module. Source API ids appear solely
inside place ids ("district_1757").
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from address_verification.configs import configs
from address_verification.models.geo_node import GeoNode, GeoNodeType
from address_verification.services import background
from address_verification.services.collation import sorted_by_name
from address_verification.services.errors import InvalidError, NotFoundError
from address_verification.services.geo_node_service import (
    GeoNodeService,
    compose_formatted_address,
)
from address_verification.services.geo_source import TurkiyeApiClient

logger = logging.getLogger(__name__)

PROVINCE_COUNT = int(configs.get("address", {}).get("province_count", 81))

FALLBACK_NEIGHBORHOOD_NAME = "Diğer"
NEIGHBORHOOD_SUFFIX = "Mahallesi"
VILLAGE_SUFFIX = "Köyü"
_NEIGHBORHOOD_MARKERS = ("Mahallesi", "Mah.", "Köyü")


def place_id_for(node_type: GeoNodeType, source_id: Any) -> str:
    return f"{node_type.value}_{source_id}"


def source_id_of(place_id: str, node_type: GeoNodeType) -> Optional[str]:
    """Numeric source id inside a sourced place id; None for manual/fallback ids."""
    prefix = f"{node_type.value}_"
    if not place_id.startswith(prefix):
        return None
    source_id = place_id[len(prefix):]
    return source_id if source_id.isdigit() else None


def neighborhood_name(name: str) -> str:
    name = name.strip()
    if any(marker in name for marker in _NEIGHBORHOOD_MARKERS):
        return name
    return f"{name} {NEIGHBORHOOD_SUFFIX}"


def village_name(name: str) -> str:
    name = name.strip()
    if name.endswith(VILLAGE_SUFFIX):
        return name
    return f"{name} {VILLAGE_SUFFIX}"


def province_node(item: Dict[str, Any]) -> GeoNode:
    return GeoNode(
        id=place_id_for(GeoNodeType.PROVINCE, item["id"]),
        type=GeoNodeType.PROVINCE,
        parent_id=None,
        name=item["name"],
        formatted_address=item["name"],
    )


def district_node(item: Dict[str, Any], province: Optional[GeoNode], province_id: str) -> GeoNode:
    return GeoNode(
        id=place_id_for(GeoNodeType.DISTRICT, item["id"]),
        type=GeoNodeType.DISTRICT,
        parent_id=province_id,
        name=item["name"],
        formatted_address=compose_formatted_address(item["name"], province),
    )


def neighborhood_nodes(
    detail: Dict[str, Any], district: Optional[GeoNode], district_id: str
) -> List[GeoNode]:
    """Neighborhoods and villages of one district, merged into one level."""
    names = [(item["id"], neighborhood_name(item["name"])) for item in detail["neighborhoods"]]
    names += [(item["id"], village_name(item["name"])) for item in detail.get("villages", [])]
    return [
        GeoNode(
            id=place_id_for(GeoNodeType.NEIGHBORHOOD, source_id),
            type=GeoNodeType.NEIGHBORHOOD,
            parent_id=district_id,
            name=name,
            formatted_address=compose_formatted_address(name, district),
        )
        for source_id, name in names
    ]


def as_options(nodes: List[GeoNode]) -> List[Dict[str, str]]:
    return [{"id": node.id, "name": node.name} for node in sorted_by_name(nodes)]


class AddressResolver:
    def __init__(
        self,
        store: Optional[GeoNodeService] = None,
        source: Optional[TurkiyeApiClient] = None,
        province_count: int = PROVINCE_COUNT,
    ):
        self.store = store or GeoNodeService()
        self.source = source or TurkiyeApiClient()
        self.province_count = province_count

    async def resolve(
        self, level: GeoNodeType, parent_id: Optional[str] = None
    ) -> List[Dict[str, str]]:
        if level == GeoNodeType.PROVINCE:
            return await self.get_provinces()
        if not parent_id:
            raise InvalidError("Üst kayıt zorunludur")
        if level == GeoNodeType.DISTRICT:
            return await self.get_districts(parent_id)
        if level == GeoNodeType.NEIGHBORHOOD:
            return await self.get_neighborhoods(parent_id)
        raise InvalidError(f"'{level.value}' seviyesi dış kaynaktan alınamaz")

    async def get_provinces(self) -> List[Dict[str, str]]:
        cached = await self.store.find_by_type_and_parent(GeoNodeType.PROVINCE)
        if len(cached) >= self.province_count:
            return as_options(cached)

        logger.info("Fetching provinces from the address API...")
        provinces = await run_in_threadpool(self.source.fetch_provinces)
        if provinces is None:
            logger.warning("Province list unavailable; returning the cached subset.")
            return as_options(cached)

        nodes = [province_node(item) for item in provinces]
        await self.store.upsert_many(nodes)
        logger.info(f"Cached {len(nodes)} provinces.")
        return as_options(nodes)

    async def get_districts(self, province_id: str) -> List[Dict[str, str]]:
        cached = await self.store.find_by_type_and_parent(GeoNodeType.DISTRICT, province_id)
        if cached:
            return as_options(cached)

        source_id = source_id_of(province_id, GeoNodeType.PROVINCE)
        if source_id is None:
            logger.warning(f"Province {province_id} has no source id; no districts to fetch.")
            return []

        logger.info(f"Fetching districts for province {source_id}...")
        detail = await run_in_threadpool(self.source.fetch_province_detail, source_id)
        if detail is None:
            logger.warning(f"Districts unavailable for province {province_id}.")
            return []

        province = await self.store.get(province_id)
        nodes = [district_node(item, province, province_id) for item in detail["districts"]]
        await self.store.upsert_many(nodes)
        logger.info(f"Cached {len(nodes)} districts for {province_id}.")
        return as_options(nodes)

    async def get_neighborhoods(self, district_id: str) -> List[Dict[str, str]]:
        cached = await self.store.find_by_type_and_parent(
            GeoNodeType.NEIGHBORHOOD, district_id
        )
        if cached:
            return as_options(cached)

        detail = None
        source_id = source_id_of(district_id, GeoNodeType.DISTRICT)
        if source_id is not None:
            logger.info(f"Fetching neighborhoods for district {source_id}...")
            detail = await run_in_threadpool(self.source.fetch_district_detail, source_id)

        district = await self.store.get(district_id)
        if detail is None:
            logger.warning(
                f"Neighborhoods unavailable for {district_id}; "
                f"adding '{FALLBACK_NEIGHBORHOOD_NAME}' placeholder."
            )
            fallback = GeoNode(
                id=f"{GeoNodeType.NEIGHBORHOOD.value}_{district_id}_diger",
                type=GeoNodeType.NEIGHBORHOOD,
                parent_id=district_id,
                name=FALLBACK_NEIGHBORHOOD_NAME,
                formatted_address=compose_formatted_address(
                    FALLBACK_NEIGHBORHOOD_NAME, district
                ),
            )
            await self.store.upsert(fallback)
            return as_options([fallback])

        nodes = neighborhood_nodes(detail, district, district_id)
        await self.store.upsert_many(nodes)
        logger.info(f"Cached {len(nodes)} neighborhoods for {district_id}.")
        return as_options(nodes)

    async def full_sync(self) -> Dict[str, int]:
        """
        Walks every province, district and neighborhood through the
        cache-or-fetch path. Takes minutes against the live API.
        """
        logger.info("Starting full address synchronization...")
        totals = {"provinces": 0, "districts": 0, "neighborhoods": 0}

        provinces = await self.get_provinces()
        totals["provinces"] = len(provinces)
        logger.info(f"Found {len(provinces)} provinces. Processing details...")

        for province in provinces:
            districts = await self.get_districts(province["id"])
            totals["districts"] += len(districts)
            for district in districts:
                neighborhoods = await self.get_neighborhoods(district["id"])
                totals["neighborhoods"] += len(neighborhoods)
            logger.info(
                f"Completed {province['name']}: {len(districts)} districts processed."
            )

        logger.info(
            "Sync completed! Total: {provinces} provinces, {districts} districts, "
            "{neighborhoods} neighborhoods.".format(**totals)
        )
        return totals

    def start_full_sync(self) -> asyncio.Task:
        """Runs `full_sync` as a detached task and returns immediately."""
        return background.spawn(self.full_sync(), name="address-full-sync")

    async def add_manual_neighborhood(
        self, province_name: str, district_name: str, neighborhood_name: str
    ) -> GeoNode:
        province = await self.store.find_by_type_and_name(
            GeoNodeType.PROVINCE, province_name or ""
        )
        if province is None:
            raise NotFoundError(f"İl bulunamadı: {province_name}")

        district = await self.store.find_by_type_and_name(
            GeoNodeType.DISTRICT, district_name or "", parent_id=province.id
        )
        if district is None:
            raise NotFoundError(f"İlçe bulunamadı: {district_name} ({province.name})")

        return await self.store.create_custom_node(
            GeoNodeType.NEIGHBORHOOD, neighborhood_name, parent_id=district.id
        )
