# storefront/repos/inventory_repo.py
from sqlalchemy import select, update, inspect
from sqlalchemy.orm import Session

from storefront.data.models.inventory import InventoryModel


class InventoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, inventory_id) -> InventoryModel | None:
        return self.db.get(InventoryModel, inventory_id)

    def get_by_product(self, product_id, for_update: bool = False) -> InventoryModel | None:
        stmt = select(InventoryModel).where(InventoryModel.product_id == product_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, inventory: InventoryModel) -> InventoryModel:
        self.db.add(inventory)
        self.db.flush()
        return inventory

    def add_stock(self, inventory_id, amount: int) -> int:
        result = self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.id == inventory_id)
            .values(stock_quantity=InventoryModel.stock_quantity + amount)
            .execution_options(synchronize_session=False)
        )
        self._expire_loaded("id", inventory_id)
        return result.rowcount

    def decrement_if_available(self, product_id, amount: int) -> int:
        # UPDATE inventories SET stock_quantity = stock_quantity - :n
        # WHERE product_id = :p AND stock_quantity >= :n
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.product_id == product_id,
                InventoryModel.stock_quantity >= amount,
            )
            .values(stock_quantity=InventoryModel.stock_quantity - amount)
            .execution_options(synchronize_session=False)
        )
        self._expire_loaded("product_id", product_id)
        return result.rowcount

    def _expire_loaded(self, column: str, value) -> None:
        #bulk UPDATE bypasses the session, reload stock on next access
        for obj in list(self.db.identity_map.values()):
            if isinstance(obj, InventoryModel) and inspect(obj).dict.get(column) == value:
                self.db.expire(obj, ["stock_quantity"])
