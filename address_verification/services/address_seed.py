# address_verification/services/address_seed.py
import json
import logging
import os
from typing import Any, Dict, Iterator, Optional

from address_verification.configs import configs, env
from address_verification.models.geo_node import GeoNode
from address_verification.services.address_resolver import (
    district_node,
    neighborhood_nodes,
    province_node,
)
from address_verification.services.geo_node_service import GeoNodeService
from address_verification.services.geo_source import TurkiyeApiClient

logger = logging.getLogger(__name__)

_address_config = configs.get("address", {})


def default_seed_file() -> Optional[str]:
    return env.get("ADDRESS_SEED_FILE") or _address_config.get("seed_file")


def iter_seed_nodes(data: Dict[str, Any]) -> Iterator[GeoNode]:
    """
    Flattens a full hierarchy dump into nodes, parents before children:
    {"provinces": [{"id", "name", "districts": [{"id", "name",
    "neighborhoods": [...], "villages": [...]}]}]}
    """
    for province in data.get("provinces", []):
        p_node = province_node(province)
        yield p_node
        for district in province.get("districts") or []:
            d_node = district_node(district, p_node, p_node.id)
            yield d_node
            detail = {
                "neighborhoods": district.get("neighborhoods") or [],
                "villages": district.get("villages") or [],
            }
            yield from neighborhood_nodes(detail, d_node, d_node.id)


def build_address_dump(source: Optional[TurkiyeApiClient] = None) -> Dict[str, Any]:
    """
    Walks the whole address API into the dump format `iter_seed_nodes`
    reads. Blocking; a full run takes several minutes.
    """
    source = source or TurkiyeApiClient()
    provinces = source.fetch_provinces()
    if provinces is None:
        raise RuntimeError("Province list unavailable from the address API")

    logger.info(f"Found {len(provinces)} provinces. Fetching details...")
    dump = {"provinces": []}
    for index, province in enumerate(provinces, start=1):
        province_data = {"id": province["id"], "name": province["name"], "districts": []}
        detail = source.fetch_province_detail(province["id"])
        if detail is None:
            logger.warning(f"Districts unavailable for {province['name']}.")
        for district in (detail or {}).get("districts", []):
            district_detail = source.fetch_district_detail(district["id"]) or {}
            province_data["districts"].append(
                {
                    "id": district["id"],
                    "name": district["name"],
                    "neighborhoods": district_detail.get("neighborhoods", []),
                    "villages": district_detail.get("villages", []),
                }
            )
        dump["provinces"].append(province_data)
        logger.info(
            f"[{index}/{len(provinces)}] {province['name']}: "
            f"{len(province_data['districts'])} districts."
        )
    return dump


def write_address_dump(path: str, source: Optional[TurkiyeApiClient] = None) -> Dict[str, Any]:
    dump = build_address_dump(source)
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dump, f, ensure_ascii=False, indent=2)
    logger.info(f"Address dump written to {path}.")
    return dump


async def seed_addresses(
    seed_file: Optional[str] = None,
    store: Optional[GeoNodeService] = None,
    skip_threshold: Optional[int] = None,
) -> int:
    """
    Loads a hierarchy dump into the cache unless the cache is already
    populated. Returns the number of nodes written.
    """
    seed_file = seed_file or default_seed_file()
    store = store or GeoNodeService()
    if skip_threshold is None:
        skip_threshold = int(_address_config.get("seed_skip_threshold", 1000))

    if not seed_file or not os.path.exists(seed_file):
        logger.info("Address seed file not found. Skipping auto-seed.")
        return 0

    count = await store.count_all()
    if count > skip_threshold:
        logger.info(f"Address cache already has {count} records. Skipping seed.")
        return 0

    logger.info(f"Seeding address cache from {seed_file}...")
    with open(seed_file, "r", encoding="utf-8") as f:
        data = json.load(f)

    written = await store.upsert_many(iter_seed_nodes(data))
    logger.info(f"Address seed completed: {written} nodes upserted.")
    return written
