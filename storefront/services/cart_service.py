from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.database import unit_of_work
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import ConflictError, ErrorCode, ValidationFailed
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.stock_ledger import StockLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _require_positive(quantity: int, message: str) -> None:
    if quantity <= 0:
        raise ValidationFailed(ErrorCode.INVALID_QUANTITY, message)


class CartService:
    """
    Commands (add, increase, decrease, remove) change the cart,
    the query (snapshot) only reads.

    Every command locks the cart row first, so commands and checkout
    for the same customer run one after another. Stock checks and the
    quantity write happen in the same transaction.
    """

    def __init__(self, db: Session, stock_ledger: StockLedger | None = None):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.stock_ledger = stock_ledger or StockLedger(db)

    #query
    def snapshot(self, customer_id) -> Dict[str, Any]:
        cart = self._require_cart(customer_id)
        lines = self.repo.get_cart_lines(cart.id)

        items = [
            {
                "id": item.id,
                "product_id": product.id,
                "name": product.name,
                "description": product.description,
                "quantity": item.quantity,
                "price": product.price,
            }
            for item, product in lines
        ]

        return {
            "cart_id": cart.id,
            "total_items": len(items),
            "total_quantity": sum(i["quantity"] for i in items),
            "total_price": sum(i["quantity"] * i["price"] for i in items),
            "items": items,
        }

    #commands
    def get_or_create(self, customer_id) -> CartModel:
        cart = self.repo.get_cart_by_customer(customer_id)
        if cart:
            return cart

        created = self.repo.create_cart(CartModel(customer_id=customer_id))
        logger.info(f"Created cart {created.id} for customer {customer_id}")
        return created

    def add_item(self, customer_id, product_id, quantity: int) -> Dict[str, Any]:
        _require_positive(quantity, "product quantity cannot be zero")

        with unit_of_work(self.db):
            cart = self._require_cart(customer_id, lock=True)

            if not self.products.get_product(product_id):
                raise ConflictError(ErrorCode.PRODUCT_NOT_FOUND, "product not found")

            # only the requested quantity is checked, not the merged total
            self._check_stock(product_id, quantity)

            existing_item = self.repo.get_cart_item(cart.id, product_id)
            if existing_item:
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, "
                    f"quantity {existing_item.quantity} -> {existing_item.quantity + quantity}"
                )
                self.repo.increment_item(existing_item, quantity)
            else:
                self._insert_item(cart, product_id, quantity)

        return self.snapshot(customer_id)

    def increase_item(self, customer_id, product_id, delta: int) -> Dict[str, Any]:
        _require_positive(
            delta, "you cannot increase the quantity of product with a value equal to zero"
        )

        with unit_of_work(self.db):
            cart = self._require_cart(customer_id, lock=True)
            item = self._require_item(cart, product_id)

            # raises when the product has no inventory row
            self.stock_ledger.get_available(product_id, lock=True)

            rowcount = self.repo.increment_item_within_stock(item, delta)
            if rowcount == 0:
                logger.warning(
                    f"Cart {cart.id}: increase of product {product_id} by {delta} exceeds stock"
                )
                raise ConflictError(
                    ErrorCode.STOCK_EXCEEDED, "product quantity exceeds the stock available"
                )

        logger.info(f"Cart {cart.id}: product {product_id} increased by {delta}")
        return self.snapshot(customer_id)

    def decrease_item(self, customer_id, product_id, delta: int) -> Dict[str, Any]:
        _require_positive(
            delta, "you cannot decrease the quantity of product with a value equal to zero"
        )

        with unit_of_work(self.db):
            cart = self._require_cart(customer_id, lock=True)
            item = self._require_item(cart, product_id)

            # decreasing past zero removes the line
            if self.repo.decrement_item(item, delta) == 0:
                self.repo.delete_cart_item(item)
                logger.info(f"Cart {cart.id}: product {product_id} removed (decrease by {delta})")
            else:
                logger.info(f"Cart {cart.id}: product {product_id} decreased by {delta}")

        return self.snapshot(customer_id)

    def remove_item(self, customer_id, product_id) -> Dict[str, Any]:
        with unit_of_work(self.db):
            cart = self._require_cart(customer_id, lock=True)
            item = self._require_item(cart, product_id)
            self.repo.delete_cart_item(item)

        logger.info(f"Cart {cart.id}: product {product_id} removed")
        return self.snapshot(customer_id)

    def _require_cart(self, customer_id, lock: bool = False) -> CartModel:
        cart = self.repo.get_cart_by_customer(customer_id, for_update=lock)
        if not cart:
            raise ConflictError(ErrorCode.CART_NOT_FOUND, "cart not found")
        return cart

    def _require_item(self, cart: CartModel, product_id) -> CartItemModel:
        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise ConflictError(ErrorCode.ITEM_NOT_FOUND, "product not found in cart")
        return item

    def _check_stock(self, product_id, quantity: int) -> None:
        try:
            self.stock_ledger.reserve(product_id, quantity, lock=True)
        except ConflictError as e:
            if e.code is not ErrorCode.INSUFFICIENT_STOCK:
                raise
            raise ConflictError(ErrorCode.STOCK_EXCEEDED, e.message) from e

    def _insert_item(self, cart: CartModel, product_id, quantity: int) -> None:
        logger.info(f"Adding product {product_id} to cart {cart.id}")
        try:
            with self.db.begin_nested():
                self.repo.add_cart_item(
                    CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
                )
        except IntegrityError:
            #line created concurrently, merge into it
            item = self.repo.get_cart_item(cart.id, product_id)
            if not item:
                raise
            self.repo.increment_item(item, quantity)
