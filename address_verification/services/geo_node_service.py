# address_verification/services/geo_node_service.py
import logging
import re
import time
from typing import Any, Dict, Iterable, List, Optional

from address_verification.models.geo_node import CUSTOM_MARKER, GeoNode, GeoNodeType
from address_verification.services.collation import sorted_by_name, turkish_equals
from address_verification.services.errors import (
    HasChildrenError,
    InvalidError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

# Letters whose Turkish case pairs differ from the default Unicode ones
_TURKISH_CASE_CLASSES = {
    "i": "[iİ]",
    "İ": "[iİ]",
    "ı": "[ıI]",
    "I": "[ıI]",
}


def turkish_pattern(text: str) -> str:
    """Escapes `text` for a case-insensitive Mongo regex that honours i/İ and ı/I."""
    return "".join(_TURKISH_CASE_CLASSES.get(char, re.escape(char)) for char in text)


def compose_formatted_address(name: str, parent: Optional[GeoNode]) -> str:
    if parent is None:
        return name
    return f"{name}, {parent.formatted_address or parent.name}"


class GeoNodeService:
    """Durable store of address hierarchy nodes, keyed by place id."""

    def __init__(self):
        pass

    async def upsert(self, node: GeoNode) -> GeoNode:
        """Creates or replaces the node with the same place id."""
        await node.save()
        return node

    async def upsert_many(self, nodes: Iterable[GeoNode]) -> int:
        count = 0
        for node in nodes:
            await self.upsert(node)
            count += 1
        return count

    async def get(self, place_id: str) -> Optional[GeoNode]:
        return await GeoNode.get(place_id)

    async def find_by_type_and_parent(
        self, node_type: GeoNodeType, parent_id: Optional[str] = None
    ) -> List[GeoNode]:
        """Children of `parent_id` at the given level, in Turkish alphabetical order."""
        nodes = await GeoNode.find(
            {"type": node_type.value, "parent_id": parent_id}
        ).to_list()
        return sorted_by_name(nodes)

    async def find_by_type_and_name(
        self, node_type: GeoNodeType, name: str, parent_id: Optional[str] = None
    ) -> Optional[GeoNode]:
        """
        Case-insensitive exact name lookup, optionally scoped to one parent.
        Scoping matters for districts: several provinces have a district
        called "Merkez".
        """
        name = name.strip()
        if not name:
            return None
        query: Dict[str, Any] = {
            "type": node_type.value,
            "name": {"$regex": f"^{turkish_pattern(name)}$", "$options": "i"},
        }
        if parent_id is not None:
            query["parent_id"] = parent_id
        candidates = await GeoNode.find(query).to_list()
        for candidate in candidates:
            if turkish_equals(candidate.name, name):
                return candidate
        return None

    async def search(
        self,
        node_type: GeoNodeType,
        parent_id: Optional[str] = None,
        name_contains: Optional[str] = None,
    ) -> List[GeoNode]:
        query: Dict[str, Any] = {"type": node_type.value}
        if parent_id:
            query["parent_id"] = parent_id
        if name_contains:
            query["name"] = {
                "$regex": turkish_pattern(name_contains.strip()),
                "$options": "i",
            }
        return sorted_by_name(await GeoNode.find(query).to_list())

    async def get_many(self, place_ids: Iterable[str]) -> Dict[str, GeoNode]:
        ids = list({pid for pid in place_ids if pid})
        if not ids:
            return {}
        nodes = await GeoNode.find({"_id": {"$in": ids}}).to_list()
        return {node.id: node for node in nodes}

    async def list_with_parents(
        self,
        node_type: GeoNodeType,
        parent_id: Optional[str] = None,
        name_contains: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Admin listing: matching nodes plus the names of their province and
        district ancestors.
        """
        nodes = await self.search(node_type, parent_id, name_contains)
        parents = await self.get_many(node.parent_id for node in nodes)
        if node_type in (GeoNodeType.NEIGHBORHOOD, GeoNodeType.STREET):
            parents.update(
                await self.get_many(parent.parent_id for parent in parents.values())
            )

        rows = []
        for node in nodes:
            province_name = None
            district_name = None
            parent = parents.get(node.parent_id)
            if node_type == GeoNodeType.DISTRICT:
                province_name = parent.name if parent else "-"
            elif node_type == GeoNodeType.NEIGHBORHOOD:
                district_name = parent.name if parent else "-"
                grand_parent = parents.get(parent.parent_id) if parent else None
                province_name = grand_parent.name if grand_parent else "-"
            rows.append(
                {
                    "place_id": node.id,
                    "type": node.type,
                    "name": node.name,
                    "parent_id": node.parent_id,
                    "formatted_address": node.formatted_address,
                    "is_manual": node.is_manual,
                    "province_name": province_name,
                    "district_name": district_name,
                }
            )
        return rows

    async def count_by_type(self, node_type: GeoNodeType) -> int:
        return await GeoNode.find({"type": node_type.value}).count()

    async def count_all(self) -> int:
        return await GeoNode.find_all().count()

    async def count_children(self, place_id: str) -> int:
        return await GeoNode.find({"parent_id": place_id}).count()

    async def create_custom_node(
        self,
        node_type: GeoNodeType,
        name: str,
        parent_id: Optional[str] = None,
    ) -> GeoNode:
        """
        Adds a manually entered node. The parent must exist and sit one
        level above `node_type`; provinces take no parent.
        """
        name = (name or "").strip()
        if not name:
            raise InvalidError("İsim ve tür zorunludur")

        expected_parent_type = node_type.parent_type
        parent = None
        if expected_parent_type is None:
            if parent_id:
                raise InvalidError("İl kayıtları bir üst kayda bağlanamaz")
        else:
            if not parent_id:
                raise InvalidError("Üst kayıt zorunludur")
            parent = await self.get(parent_id)
            if parent is None:
                raise NotFoundError(f"Üst kayıt bulunamadı: {parent_id}")
            if parent.type != expected_parent_type:
                raise InvalidError(
                    f"Üst kayıt türü '{expected_parent_type.value}' olmalıdır"
                )

        node = GeoNode(
            id=f"{node_type.value}{CUSTOM_MARKER}{time.time_ns()}",
            type=node_type,
            parent_id=parent.id if parent else None,
            name=name,
            formatted_address=compose_formatted_address(name, parent),
        )
        await node.insert()
        logger.info(f"Added manual {node_type.value} '{name}' ({node.id}).")
        return node

    async def delete(self, place_id: str) -> None:
        node = await self.get(place_id)
        if node is None:
            raise NotFoundError("Kayıt bulunamadı")

        child_count = await self.count_children(node.id)
        if child_count > 0:
            raise HasChildrenError(child_count)

        await node.delete()
        logger.info(f"Deleted address node {place_id}.")
