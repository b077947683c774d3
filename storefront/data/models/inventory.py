import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Uuid, CheckConstraint

from storefront.data.database import Base


class InventoryModel(Base):
    __tablename__ = "inventories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False, unique=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (CheckConstraint("stock_quantity >= 0", name="ck_inventory_stock_non_negative"),)
