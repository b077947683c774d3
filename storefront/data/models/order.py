import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, BigInteger, ForeignKey, DateTime, Uuid

from storefront.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)
    address_id = Column(Uuid, ForeignKey("addresses.id"), nullable=False)

    # snapshots taken at checkout, never recomputed from products
    total_quantity = Column(Integer, nullable=False)
    total_price = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
