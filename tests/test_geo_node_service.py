import pytest

from address_verification.models.geo_node import GeoNode, GeoNodeType
from address_verification.services.errors import (
    HasChildrenError,
    InvalidError,
    NotFoundError,
)


def province(source_id, name):
    return GeoNode(
        id=f"province_{source_id}", type=GeoNodeType.PROVINCE, name=name, formatted_address=name
    )


def district(source_id, name, parent_id):
    return GeoNode(
        id=f"district_{source_id}", type=GeoNodeType.DISTRICT, parent_id=parent_id, name=name
    )


async def test_repeated_upsert_keeps_a_single_node(store):
    for _ in range(3):
        await store.upsert(province(6, "Ankara"))

    assert await store.count_all() == 1
    node = await store.get("province_6")
    assert node.name == "Ankara"
    assert node.place_id == "province_6"


async def test_upsert_replaces_content_for_same_place_id(store):
    await store.upsert(province(6, "Ankara"))
    await store.upsert(province(6, "ANKARA"))

    assert await store.count_by_type(GeoNodeType.PROVINCE) == 1
    assert (await store.get("province_6")).name == "ANKARA"


async def test_children_are_sorted_in_turkish_order(store):
    for source_id, name in [(35, "İzmir"), (6, "Ankara"), (19, "Çorum"), (16, "Bursa"), (20, "Denizli")]:
        await store.upsert(province(source_id, name))

    nodes = await store.find_by_type_and_parent(GeoNodeType.PROVINCE)
    assert [n.name for n in nodes] == ["Ankara", "Bursa", "Çorum", "Denizli", "İzmir"]


async def test_children_of_unknown_parent_is_empty(store):
    assert await store.find_by_type_and_parent(GeoNodeType.DISTRICT, "province_99") == []


async def test_find_by_name_is_case_insensitive(store):
    await store.upsert(province(34, "İstanbul"))
    await store.upsert(province(6, "Ankara"))

    assert (await store.find_by_type_and_name(GeoNodeType.PROVINCE, "ankara")).id == "province_6"
    assert (await store.find_by_type_and_name(GeoNodeType.PROVINCE, "İSTANBUL")).id == "province_34"
    assert await store.find_by_type_and_name(GeoNodeType.PROVINCE, "Ank") is None


async def test_find_by_name_scoped_to_parent(store):
    await store.upsert(province(19, "Çorum"))
    await store.upsert(province(5, "Amasya"))
    await store.upsert(district(1100, "Merkez", "province_19"))
    await store.upsert(district(1200, "Merkez", "province_5"))

    found = await store.find_by_type_and_name(
        GeoNodeType.DISTRICT, "merkez", parent_id="province_5"
    )
    assert found.id == "district_1200"


async def test_search_matches_name_substring(store):
    await store.upsert(province(35, "İzmir"))
    await store.upsert(province(6, "Ankara"))

    nodes = await store.search(GeoNodeType.PROVINCE, name_contains="izm")
    assert [n.name for n in nodes] == ["İzmir"]


async def test_delete_refuses_while_children_exist(store):
    await store.upsert(province(6, "Ankara"))
    await store.upsert(district(1130, "Çankaya", "province_6"))

    with pytest.raises(HasChildrenError) as exc_info:
        await store.delete("province_6")
    assert exc_info.value.child_count == 1
    assert exc_info.value.status_code == 400
    assert "1 alt kaydı" in exc_info.value.detail
    assert await store.get("province_6") is not None

    await store.delete("district_1130")
    await store.delete("province_6")
    assert await store.count_all() == 0


async def test_delete_missing_node(store):
    with pytest.raises(NotFoundError):
        await store.delete("province_404")


async def test_create_custom_node_under_parent(store, ankara):
    node = await store.create_custom_node(
        GeoNodeType.NEIGHBORHOOD, " Yeni Mahalle ", parent_id="district_1130"
    )

    assert node.id.startswith("neighborhood_custom_")
    assert node.is_manual
    assert node.name == "Yeni Mahalle"
    assert node.formatted_address == "Yeni Mahalle, Çankaya, Ankara"
    assert (await store.get(node.id)).parent_id == "district_1130"


async def test_create_custom_node_checks_the_parent_level(store, ankara):
    with pytest.raises(InvalidError):
        await store.create_custom_node(
            GeoNodeType.NEIGHBORHOOD, "Yeni", parent_id="province_6"
        )
    with pytest.raises(NotFoundError):
        await store.create_custom_node(
            GeoNodeType.NEIGHBORHOOD, "Yeni", parent_id="district_404"
        )
    with pytest.raises(InvalidError):
        await store.create_custom_node(GeoNodeType.DISTRICT, "Yeni")
    with pytest.raises(InvalidError):
        await store.create_custom_node(
            GeoNodeType.PROVINCE, "Yeni", parent_id="province_6"
        )
    with pytest.raises(InvalidError):
        await store.create_custom_node(GeoNodeType.PROVINCE, "   ")

    assert await store.count_all() == 2


async def test_list_with_parents_resolves_ancestor_names(store, ankara):
    manual = await store.create_custom_node(
        GeoNodeType.NEIGHBORHOOD, "Yeni Mahalle", parent_id="district_1130"
    )
    await store.upsert(
        GeoNode(
            id="neighborhood_501",
            type=GeoNodeType.NEIGHBORHOOD,
            parent_id="district_1130",
            name="Kızılay Mahallesi",
        )
    )

    rows = await store.list_with_parents(GeoNodeType.NEIGHBORHOOD)

    assert [row["name"] for row in rows] == ["Kızılay Mahallesi", "Yeni Mahalle"]
    assert all(row["district_name"] == "Çankaya" for row in rows)
    assert all(row["province_name"] == "Ankara" for row in rows)
    assert {row["place_id"]: row["is_manual"] for row in rows} == {
        "neighborhood_501": False,
        manual.id: True,
    }


async def test_list_districts_with_missing_parent(store):
    await store.upsert(district(1130, "Çankaya", "province_6"))

    rows = await store.list_with_parents(GeoNodeType.DISTRICT)
    assert rows[0]["province_name"] == "-"
    assert rows[0]["district_name"] is None
