# address_verification/routes/address_management.py
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from address_verification.models.geo_node import GeoNodeType
from address_verification.schemas.geo import (
    GeoNodeCreate,
    GeoNodeCreated,
    GeoNodeListItem,
    GeoNodePublic,
)
from address_verification.schemas.misc import Message
from address_verification.services.geo_node_service import GeoNodeService
from address_verification.dependencies.services import get_geo_node_service

router = APIRouter()


@router.get("/list", response_model=List[GeoNodeListItem])
async def list_address_nodes(
    type: GeoNodeType,
    parent_id: Optional[str] = None,
    search: Optional[str] = Query(default=None, description="Name substring"),
    store: GeoNodeService = Depends(get_geo_node_service),
):
    """Cached nodes of one level with their province/district names."""
    return await store.list_with_parents(type, parent_id=parent_id, name_contains=search)


@router.post("/add", response_model=GeoNodeCreated)
async def add_address_node(
    node_create: GeoNodeCreate, store: GeoNodeService = Depends(get_geo_node_service)
):
    """Adds a manual node; its place id carries the `_custom_` marker."""
    node = await store.create_custom_node(
        node_create.type, node_create.name, parent_id=node_create.parent_id
    )
    return {"message": "Kayıt eklendi", "data": GeoNodePublic.model_validate(node)}


@router.delete("/{place_id}", response_model=Message)
async def delete_address_node(
    place_id: str, store: GeoNodeService = Depends(get_geo_node_service)
):
    """Deletes a node; refused while other nodes still reference it as parent."""
    await store.delete(place_id)
    return {"message": "Kayıt silindi"}
