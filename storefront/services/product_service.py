# storefront/services/product_service.py
from sqlalchemy.orm import Session

from storefront.data.database import unit_of_work
from storefront.data.models.inventory import InventoryModel
from storefront.data.models.product import ProductModel, PUBLISHED, UNPUBLISHED
from storefront.domain.errors import ConflictError, ErrorCode, ValidationFailed
from storefront.domain.schemas import ProductCreate, ProductRead
from storefront.repos.inventory_repo import InventoryRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)
        self.inventories = InventoryRepo(db)

    def add_product(self, payload: ProductCreate) -> ProductRead:
        if payload.price <= 0:
            raise ValidationFailed(ErrorCode.INVALID_PRICE, "the product price cannot be zero")

        #product starts unpublished with an empty inventory
        with unit_of_work(self.db):
            product = self.repo.create_product(
                ProductModel(
                    status=UNPUBLISHED,
                    name=payload.name,
                    description=payload.description,
                    price=payload.price,
                )
            )
            inventory = self.inventories.create(
                InventoryModel(product_id=product.id, stock_quantity=0)
            )

        logger.info(f"Product {product.id} created with inventory {inventory.id}")
        return self._read(product, inventory)

    def publish_product(self, product_id) -> ProductRead:
        with unit_of_work(self.db):
            product = self.repo.get_product(product_id)
            if not product:
                raise ConflictError(ErrorCode.PRODUCT_NOT_FOUND, "product not found")
            product.status = PUBLISHED

        logger.info(f"Product {product_id} published")
        return self._read(product, self.inventories.get_by_product(product_id))

    def get_product(self, product_id) -> ProductRead:
        product = self.repo.get_product(product_id)
        if not product:
            raise ConflictError(ErrorCode.PRODUCT_NOT_FOUND, "product not found")
        return self._read(product, self.inventories.get_by_product(product_id))

    @staticmethod
    def _read(product: ProductModel, inventory: InventoryModel | None) -> ProductRead:
        return ProductRead(
            id=product.id,
            status=product.status,
            name=product.name,
            description=product.description,
            price=product.price,
            inventory_id=inventory.id if inventory else None,
            stock_quantity=inventory.stock_quantity if inventory else 0,
        )
