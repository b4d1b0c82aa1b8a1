# address_verification/routes/address.py
from fastapi import APIRouter, Depends, status
from typing import List

from address_verification.schemas.geo import GeoOption
from address_verification.schemas.misc import Message
from address_verification.services.address_resolver import AddressResolver
from address_verification.dependencies.services import get_address_resolver

router = APIRouter()


@router.get("/provinces", response_model=List[GeoOption])
async def get_provinces(resolver: AddressResolver = Depends(get_address_resolver)):
    """Provinces in Turkish alphabetical order, fetched once and then cached."""
    return await resolver.get_provinces()


@router.get("/districts/{province_id}", response_model=List[GeoOption])
async def get_districts(
    province_id: str, resolver: AddressResolver = Depends(get_address_resolver)
):
    return await resolver.get_districts(province_id)


@router.get("/neighborhoods/{district_id}", response_model=List[GeoOption])
async def get_neighborhoods(
    district_id: str, resolver: AddressResolver = Depends(get_address_resolver)
):
    """
    Neighborhoods and villages of a district. When the address API cannot
    provide them a single "Diğer" entry is returned so the form stays usable.
    """
    return await resolver.get_neighborhoods(district_id)


@router.post("/sync", response_model=Message, status_code=status.HTTP_202_ACCEPTED)
async def sync_all_addresses(resolver: AddressResolver = Depends(get_address_resolver)):
    """Starts a full hierarchy sync in the background; does not wait for it."""
    resolver.start_full_sync()
    return {
        "message": "Senkronizasyon işlemi arka planda başlatıldı. "
        "Bu işlem 5-10 dakika sürebilir. Sunucu loglarını kontrol edebilirsiniz."
    }
