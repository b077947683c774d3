import re

from sqlalchemy.orm import Session

from storefront.data.database import unit_of_work
from storefront.data.models.customer import CustomerModel
from storefront.domain.errors import ConflictError, ErrorCode, ValidationFailed
from storefront.domain.schemas import CustomerCreate, CustomerRead
from storefront.repos.customer_repo import CustomerRepo
from storefront.services.cart_service import CartService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class CustomerService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepo(db)
        self.carts = CartService(db)

    def register(self, payload: CustomerCreate) -> CustomerRead:
        """Customer and cart are created together or not at all."""
        if len(payload.name) < 2:
            raise ValidationFailed(ErrorCode.INVALID_CUSTOMER, "name must be at least 2 characters")
        if not _EMAIL_RE.fullmatch(payload.email):
            raise ValidationFailed(ErrorCode.INVALID_CUSTOMER, "email address is invalid")

        with unit_of_work(self.db):
            if self.repo.get_by_email(payload.email):
                raise ConflictError(
                    ErrorCode.EMAIL_TAKEN, "this email address has already been taken by someone"
                )

            customer = self.repo.create_customer(
                CustomerModel(name=payload.name, email=payload.email)
            )
            self.carts.get_or_create(customer.id)

        logger.info(f"Registered customer {customer.id}")
        return CustomerRead.model_validate(customer)

    def get_customer(self, customer_id) -> CustomerRead:
        customer = self.repo.get_customer(customer_id)
        if not customer:
            raise ConflictError(ErrorCode.CUSTOMER_NOT_FOUND, "customer not found")
        return CustomerRead.model_validate(customer)
