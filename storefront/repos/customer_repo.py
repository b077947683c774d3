from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.customer import CustomerModel


class CustomerRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_customer(self, customer_id) -> CustomerModel | None:
        return self.db.get(CustomerModel, customer_id)

    def get_by_email(self, email: str) -> CustomerModel | None:
        return self.db.execute(
            select(CustomerModel).where(CustomerModel.email == email)
        ).scalar_one_or_none()

    def create_customer(self, customer: CustomerModel) -> CustomerModel:
        self.db.add(customer)
        self.db.flush()
        return customer
