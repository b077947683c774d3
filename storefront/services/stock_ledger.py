# storefront/services/stock_ledger.py
from dataclasses import dataclass

from sqlalchemy.orm import Session

from storefront.data.database import unit_of_work
from storefront.data.models.inventory import InventoryModel
from storefront.domain.errors import ConflictError, ErrorCode, ValidationFailed
from storefront.repos.inventory_repo import InventoryRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Applied:
    product_id: object
    amount: int


@dataclass(frozen=True)
class Rejected:
    product_id: object
    amount: int
    reason: ErrorCode


StockWrite = Applied | Rejected


class StockLedger:
    """
    The only writer of inventory.
    - add_stock: admin operation, runs in its own transaction
    - decrement: checkout only, inside the caller's transaction
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = InventoryRepo(db)

    def get_available(self, product_id, lock: bool = False) -> int:
        inventory = self.repo.get_by_product(product_id, for_update=lock)
        if not inventory:
            raise ConflictError(ErrorCode.INVENTORY_NOT_FOUND, "inventory not found")
        return inventory.stock_quantity

    def reserve(self, product_id, quantity: int, lock: bool = False) -> None:
        """Sufficiency check only; nothing is written."""
        available = self.get_available(product_id, lock=lock)
        if quantity > available:
            logger.warning(
                f"Product {product_id}: requested {quantity}, available {available}"
            )
            raise ConflictError(
                ErrorCode.INSUFFICIENT_STOCK,
                "product quantity exceeds the stock available",
            )

    def add_stock(self, inventory_id, amount: int) -> InventoryModel:
        if amount <= 0:
            raise ValidationFailed(
                ErrorCode.INVALID_AMOUNT, "stock quantity must be higher than zero"
            )

        with unit_of_work(self.db):
            rowcount = self.repo.add_stock(inventory_id, amount)
            if rowcount == 0:
                raise ConflictError(ErrorCode.INVENTORY_NOT_FOUND, "inventory not found")
            inventory = self.repo.get(inventory_id)

        logger.info(
            f"Inventory {inventory_id}: +{amount}, stock now {inventory.stock_quantity}"
        )
        return inventory

    def try_decrement(self, product_id, amount: int) -> StockWrite:
        rowcount = self.repo.decrement_if_available(product_id, amount)
        if rowcount == 0:
            return Rejected(product_id, amount, ErrorCode.INSUFFICIENT_STOCK)
        return Applied(product_id, amount)

    def decrement(self, product_id, amount: int) -> None:
        outcome = self.try_decrement(product_id, amount)
        if isinstance(outcome, Rejected):
            logger.warning(f"Decrement of {amount} rejected for product {product_id}")
            raise ConflictError(
                outcome.reason, "product quantity exceeds the stock available"
            )
