# storefront/api/routers/addresses.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import AddressIn, AddressOut
from storefront.services.address_resolver import AddressResolver
from storefront.services.zip_code_cache import ZipCodeCache
from storefront.services.zip_code_client import ZipCodeClient

router = APIRouter(prefix="/addresses", tags=["addresses"])


def get_zip_code_client() -> ZipCodeClient:
    return ZipCodeClient()


def get_zip_code_cache() -> ZipCodeCache:
    return ZipCodeCache()


def get_service(
    db: Session = Depends(get_db),
    zip_code_client: ZipCodeClient = Depends(get_zip_code_client),
    zip_code_cache: ZipCodeCache = Depends(get_zip_code_cache),
) -> AddressResolver:
    return AddressResolver(db, zip_code_client, zip_code_cache)


@router.post("/", response_model=AddressOut, status_code=201)
def add_address(
    payload: AddressIn,
    customer_id: UUID = Query(...),
    svc: AddressResolver = Depends(get_service),
):
    return svc.resolve(
        customer_id=customer_id,
        city=payload.city,
        state=payload.state,
        zip_code=payload.zip_code,
        street_name=payload.street_name,
        street_number=payload.street_number,
    )


@router.get("/", response_model=List[AddressOut])
def list_addresses(
    customer_id: UUID = Query(...),
    svc: AddressResolver = Depends(get_service),
):
    return svc.list_addresses(customer_id)
