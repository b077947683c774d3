import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, BigInteger, ForeignKey, DateTime, Uuid

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    # unit price at checkout time
    price = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
