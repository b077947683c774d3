# storefront/repos/address_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.address import AddressModel


class AddressRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_address(self, address_id) -> AddressModel | None:
        return self.db.get(AddressModel, address_id)

    def has_default(self, customer_id) -> bool:
        found = self.db.execute(
            select(AddressModel.id)
            .where(AddressModel.customer_id == customer_id, AddressModel.is_default.is_(True))
            .limit(1)
        ).first()
        return found is not None

    def create_address(self, address: AddressModel) -> AddressModel:
        self.db.add(address)
        self.db.flush()
        return address

    def list_by_customer(self, customer_id) -> list[AddressModel]:
        return list(
            self.db.execute(
                select(AddressModel)
                .where(AddressModel.customer_id == customer_id)
                .order_by(AddressModel.created_at, AddressModel.id)
            ).scalars()
        )
