# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.payment import PaymentModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_items(self, items: list[OrderItemModel]) -> None:
        self.db.add_all(items)
        self.db.flush()

    def add_payment(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_order(self, order_id) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_items(self, order_id) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.created_at, OrderItemModel.id)
            ).scalars()
        )

    def get_payment(self, order_id) -> PaymentModel | None:
        return self.db.execute(
            select(PaymentModel).where(PaymentModel.order_id == order_id)
        ).scalar_one_or_none()
