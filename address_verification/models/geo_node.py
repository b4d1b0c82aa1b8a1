# address_verification/models/geo_node.py
from enum import Enum
from typing import Optional
from pydantic import Field
from beanie import Document
from pymongo import ASCENDING, IndexModel


CUSTOM_MARKER = "_custom_"


class GeoNodeType(str, Enum):
    """Levels of the address hierarchy, top to bottom."""

    PROVINCE = "province"
    DISTRICT = "district"
    NEIGHBORHOOD = "neighborhood"
    STREET = "street"

    @property
    def parent_type(self) -> Optional["GeoNodeType"]:
        order = list(GeoNodeType)
        index = order.index(self)
        return order[index - 1] if index > 0 else None


# --- GeoNode Model ---
class GeoNode(Document):
    """
    One cached entry of the province/district/neighborhood/street hierarchy.

    The document id is the place id ("province_6", "district_1757",
    "neighborhood_custom_<timestamp>"), so saving a node is an idempotent
    replace-or-insert keyed by place id.
    """

    id: str
    type: GeoNodeType
    parent_id: Optional[str] = None  # place id of the immediate ancestor
    name: str
    formatted_address: Optional[str] = None

    @property
    def place_id(self) -> str:
        return self.id

    @property
    def is_manual(self) -> bool:
        return CUSTOM_MARKER in self.id

    class Settings:
        name = "address_cache"
        indexes = [
            IndexModel([("type", ASCENDING), ("parent_id", ASCENDING)]),
            IndexModel([("type", ASCENDING), ("name", ASCENDING)]),
        ]
