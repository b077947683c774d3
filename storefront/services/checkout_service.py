# storefront/services/checkout_service.py
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.database import unit_of_work
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.payment import PaymentModel
from storefront.domain.errors import ConflictError, ErrorCode, InvariantViolation
from storefront.repos.address_repo import AddressRepo
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.stock_ledger import StockLedger
from storefront.utils.settings import PAYMENT_GATEWAY_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Turns a cart into an order.

    Snapshot -> ValidateStock -> Decrement -> CreateOrder -> CreateOrderItems
    -> CreatePayment -> ClearCart -> Commit

    Everything runs in one transaction; any failure rolls all of it back
    and the caller retries the whole checkout.
    """

    def __init__(self, db: Session, stock_ledger: StockLedger | None = None):
        self.db = db
        self.carts = CartRepo(db)
        self.addresses = AddressRepo(db)
        self.repo = OrderRepo(db)
        self.stock_ledger = stock_ledger or StockLedger(db)

    def checkout(
        self,
        customer_id,
        address_id,
        transaction_id: str,
        gateway_name: str | None = None,
    ) -> Dict[str, Any]:
        """
        The payment was already authorized by the gateway, here it is only recorded.
        """
        with unit_of_work(self.db):
            cart = self.carts.get_cart_by_customer(customer_id, for_update=True)
            if not cart:
                raise ConflictError(ErrorCode.CART_NOT_FOUND, "cart not found")

            address = self.addresses.get_address(address_id)
            if not address or address.customer_id != customer_id:
                raise ConflictError(ErrorCode.ADDRESS_NOT_FOUND, "address not found")

            # snapshot: prices are frozen here
            snapshot = [
                (product.id, item.quantity, product.price)
                for item, product in self.carts.get_cart_lines(cart.id)
            ]
            if not snapshot:
                raise ConflictError(ErrorCode.EMPTY_CART, "cart is empty")

            total_quantity = sum(quantity for _, quantity, _ in snapshot)
            total_price = sum(quantity * price for _, quantity, price in snapshot)

            # fixed lock order across concurrent checkouts
            for product_id, quantity, _ in sorted(snapshot, key=lambda line: str(line[0])):
                self.stock_ledger.reserve(product_id, quantity, lock=True)
                self.stock_ledger.decrement(product_id, quantity)

            order = self.repo.create_order(
                OrderModel(
                    customer_id=customer_id,
                    address_id=address.id,
                    total_quantity=total_quantity,
                    total_price=total_price,
                )
            )

            self.repo.add_order_items([
                OrderItemModel(order_id=order.id, product_id=product_id, quantity=quantity, price=price)
                for product_id, quantity, price in snapshot
            ])

            payment = self.repo.add_payment(
                PaymentModel(
                    order_id=order.id,
                    payment_gateway_name=gateway_name or PAYMENT_GATEWAY_NAME,
                    payment_gateway_transaction_id=transaction_id,
                )
            )

            cleared = self.carts.delete_cart_items(cart.id)
            if cleared != len(snapshot):
                raise InvariantViolation(
                    f"cart {cart.id} changed during checkout ({cleared} of {len(snapshot)} lines cleared)"
                )

        logger.info(
            f"Order {order.id} created for customer {customer_id}: "
            f"{total_quantity} items, total {total_price}, payment {payment.payment_gateway_transaction_id}"
        )
        return self.get_order(customer_id, order.id)

    def get_order(self, customer_id, order_id) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order or order.customer_id != customer_id:
            raise ConflictError(ErrorCode.ORDER_NOT_FOUND, "order not found")

        # historic prices always come from order_items
        items = self.repo.get_order_items(order.id)
        if not items:
            raise InvariantViolation(f"order {order.id} has no items")

        payment = self.repo.get_payment(order.id)

        return {
            "id": order.id,
            "customer_id": order.customer_id,
            "address_id": order.address_id,
            "total_quantity": order.total_quantity,
            "total_price": order.total_price,
            "created_at": order.created_at,
            "items": [
                {
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "price": i.price,
                }
                for i in items
            ],
            "payment": {
                "payment_gateway_name": payment.payment_gateway_name,
                "payment_gateway_transaction_id": payment.payment_gateway_transaction_id,
            } if payment else None,
        }
