#storefront/api/routers/carts.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import (
    ItemIn,
    QuantityIn,
    CartOut,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(customer_id: UUID = Query(...), db: Session = Depends(get_db)):
    return get_service(db).snapshot(customer_id)


@router.post("/items", response_model=CartOut)
def add_to_cart(
    payload: ItemIn,
    customer_id: UUID = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).add_item(customer_id, payload.product_id, payload.quantity)


@router.post("/items/{product_id}/increase", response_model=CartOut)
def increase_cart_item(
    product_id: UUID,
    payload: QuantityIn,
    customer_id: UUID = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).increase_item(customer_id, product_id, payload.quantity)


@router.post("/items/{product_id}/decrease", response_model=CartOut)
def decrease_cart_item(
    product_id: UUID,
    payload: QuantityIn,
    customer_id: UUID = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).decrease_item(customer_id, product_id, payload.quantity)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_from_cart(
    product_id: UUID,
    customer_id: UUID = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(customer_id, product_id)
