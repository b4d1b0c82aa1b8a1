# address_verification/schemas/geo.py
from typing import Optional
from pydantic import BaseModel, ConfigDict
from address_verification.models.geo_node import GeoNodeType


class GeoOption(BaseModel):
    """One selectable entry of an address drop-down."""

    id: str
    name: str


class GeoNodeCreate(BaseModel):
    type: GeoNodeType
    name: str
    parent_id: Optional[str] = None


class GeoNodePublic(BaseModel):
    place_id: str
    type: GeoNodeType
    name: str
    parent_id: Optional[str] = None
    formatted_address: Optional[str] = None
    is_manual: bool = False

    model_config = ConfigDict(from_attributes=True)


class GeoNodeListItem(GeoNodePublic):
    province_name: Optional[str] = None
    district_name: Optional[str] = None


class GeoNodeCreated(BaseModel):
    message: str
    data: GeoNodePublic
