import json

import pytest

from address_verification.models.geo_node import GeoNode, GeoNodeType
from address_verification.services.address_seed import (
    build_address_dump,
    iter_seed_nodes,
    seed_addresses,
    write_address_dump,
)

DUMP = {
    "provinces": [
        {
            "id": 6,
            "name": "Ankara",
            "districts": [
                {
                    "id": 1130,
                    "name": "Çankaya",
                    "neighborhoods": [{"id": 501, "name": "Kızılay"}],
                    "villages": [{"id": 503, "name": "Yakupabdal"}],
                }
            ],
        },
        {"id": 19, "name": "Çorum"},
    ]
}


def write_dump(tmp_path):
    path = tmp_path / "addresses.json"
    path.write_text(json.dumps(DUMP, ensure_ascii=False), encoding="utf-8")
    return str(path)


async def test_iter_seed_nodes_yields_parents_first(db):
    nodes = list(iter_seed_nodes(DUMP))

    assert [n.id for n in nodes] == [
        "province_6",
        "district_1130",
        "neighborhood_501",
        "neighborhood_503",
        "province_19",
    ]
    assert nodes[2].name == "Kızılay Mahallesi"
    assert nodes[3].formatted_address == "Yakupabdal Köyü, Çankaya, Ankara"


async def test_seed_loads_an_empty_cache(store, tmp_path):
    written = await seed_addresses(write_dump(tmp_path), store=store)

    assert written == 5
    assert await store.count_by_type(GeoNodeType.NEIGHBORHOOD) == 2
    assert (await store.get("district_1130")).parent_id == "province_6"


async def test_seed_skips_a_populated_cache(store, tmp_path):
    await store.upsert(GeoNode(id="province_1", type=GeoNodeType.PROVINCE, name="Adana"))

    written = await seed_addresses(write_dump(tmp_path), store=store, skip_threshold=0)

    assert written == 0
    assert await store.count_all() == 1


async def test_seed_without_file_is_a_no_op(store, tmp_path):
    assert await seed_addresses(str(tmp_path / "missing.json"), store=store) == 0
    assert await store.count_all() == 0


async def test_dump_round_trips_through_the_seed(store, resolver, geo_source, tmp_path):
    path = str(tmp_path / "dump" / "addresses.json")
    dump = write_address_dump(path, geo_source)

    [ankara] = [p for p in dump["provinces"] if p["id"] == 6]
    assert [d["name"] for d in ankara["districts"]] == ["Keçiören", "Çankaya"]
    calls_after_dump = len(geo_source.calls)

    written = await seed_addresses(path, store=store)

    assert written == 3 + 3 + 4
    neighborhoods = await resolver.get_neighborhoods("district_1130")
    assert [n["name"] for n in neighborhoods] == [
        "Bahçelievler Mahallesi",
        "Kızılay Mahallesi",
        "Yakupabdal Köyü",
    ]
    assert len(geo_source.calls) == calls_after_dump


def test_dump_needs_the_province_list(make_geo_source):
    with pytest.raises(RuntimeError):
        build_address_dump(make_geo_source(provinces=None))
