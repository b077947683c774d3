import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Uuid

from storefront.data.database import Base


class CustomerModel(Base):
    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
