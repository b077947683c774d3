# storefront/api/routers/checkout.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import CheckoutIn, OrderOut
from storefront.services.checkout_service import CheckoutService

router = APIRouter(tags=["checkout"])


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    customer_id: UUID = Query(...),
    db: Session = Depends(get_db),
):
    """
    Records an already authorized payment and converts the cart into an order.
    Sync endpoint: runs to commit or rollback even if the client disconnects.
    """
    return CheckoutService(db).checkout(
        customer_id=customer_id,
        address_id=payload.address_id,
        transaction_id=payload.transaction_id,
        gateway_name=payload.gateway_name,
    )


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: UUID,
    customer_id: UUID = Query(...),
    db: Session = Depends(get_db),
):
    return CheckoutService(db).get_order(customer_id, order_id)
