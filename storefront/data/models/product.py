import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, BigInteger, DateTime, Uuid

from storefront.data.database import Base

UNPUBLISHED = "unpublished"
PUBLISHED = "published"


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    status = Column(String, nullable=False, default=UNPUBLISHED)  # unpublished, published
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    # minor currency units (cents)
    price = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
