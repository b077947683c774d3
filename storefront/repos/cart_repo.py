# storefront/repos/cart_repo.py
from sqlalchemy import select, update, delete, inspect
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.inventory import InventoryModel
from storefront.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_customer(self, customer_id, for_update: bool = False) -> CartModel | None:
        stmt = select(CartModel).where(CartModel.customer_id == customer_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_item(self, cart_id, product_id) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def increment_item(self, item: CartItemModel, delta: int) -> int:
        result = self.db.execute(
            update(CartItemModel)
            .where(CartItemModel.id == item.id)
            .values(quantity=CartItemModel.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        self.db.expire(item, ["quantity"])
        return result.rowcount

    def increment_item_within_stock(self, item: CartItemModel, delta: int) -> int:
        # UPDATE cart_items SET quantity = quantity + :d
        # WHERE id = :id AND quantity + :d <= (SELECT stock_quantity FROM inventories WHERE product_id = :p)
        stock = (
            select(InventoryModel.stock_quantity)
            .where(InventoryModel.product_id == CartItemModel.product_id)
            .scalar_subquery()
        )
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.id == item.id,
                CartItemModel.quantity + delta <= stock,
            )
            .values(quantity=CartItemModel.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        self.db.expire(item, ["quantity"])
        return result.rowcount

    def decrement_item(self, item: CartItemModel, delta: int) -> int:
        #only while something stays in the line, otherwise the caller deletes it
        result = self.db.execute(
            update(CartItemModel)
            .where(CartItemModel.id == item.id, CartItemModel.quantity > delta)
            .values(quantity=CartItemModel.quantity - delta)
            .execution_options(synchronize_session=False)
        )
        self.db.expire(item, ["quantity"])
        return result.rowcount

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def delete_cart_items(self, cart_id) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        #bulk delete bypasses the session, drop the stale objects
        for obj in list(self.db.identity_map.values()):
            if isinstance(obj, CartItemModel) and inspect(obj).dict.get("cart_id", cart_id) == cart_id:
                self.db.expunge(obj)
        return result.rowcount

    def get_cart_lines(self, cart_id) -> list[tuple[CartItemModel, ProductModel]]:
        rows = self.db.execute(
            select(CartItemModel, ProductModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.created_at, CartItemModel.id)
        ).all()
        return [(row[0], row[1]) for row in rows]
