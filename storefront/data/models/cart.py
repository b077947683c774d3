#storefront/data/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, DateTime, Uuid

from storefront.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
