from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product
