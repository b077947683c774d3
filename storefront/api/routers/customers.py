from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import CustomerCreate, CustomerRead
from storefront.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("/", response_model=CustomerRead, status_code=201)
def register_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    return CustomerService(db).register(payload)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: UUID, db: Session = Depends(get_db)):
    return CustomerService(db).get_customer(customer_id)
