import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, ForeignKey, DateTime, Uuid, Index, text

from storefront.data.database import Base


class AddressModel(Base):
    __tablename__ = "addresses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)
    is_default = Column(Boolean, nullable=False, default=False)

    street = Column(String, nullable=False)
    number = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String(2), nullable=False)
    zip_code = Column(String(5), nullable=False)
    address_line = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # at most one default address per customer
    __table_args__ = (
        Index(
            "uq_addresses_default_per_customer",
            "customer_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default = 1"),
        ),
    )
