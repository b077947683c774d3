# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from datetime import datetime
from uuid import UUID


class CustomerCreate(BaseModel):
    """Registering a customer."""

    name: str = Field(..., max_length=100, description="Customer name")
    email: str = Field(..., max_length=254, description="Unique email address")


class CustomerRead(BaseModel):
    id: UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Adding a product to the catalog; price in cents."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    price: int = Field(..., description="Price in minor currency units")


class ProductRead(BaseModel):
    id: UUID
    status: str
    name: str
    description: str | None = None
    price: int
    inventory_id: UUID | None = None
    stock_quantity: int = 0


class StockIn(BaseModel):
    stock: int = Field(..., description="Units to add (must be > 0)")


class InventoryOut(BaseModel):
    id: UUID
    product_id: UUID
    stock_quantity: int

    model_config = ConfigDict(from_attributes=True)


class ItemIn(BaseModel):
    """Adding a product to the cart."""

    product_id: UUID
    quantity: int


class QuantityIn(BaseModel):
    """Increasing or decreasing a cart line."""

    quantity: int


class CartItemOut(BaseModel):
    id: UUID
    product_id: UUID
    name: str
    description: str | None = None
    quantity: int
    price: int


class CartOut(BaseModel):
    """Live view of the cart, prices as they are now."""

    cart_id: UUID
    total_items: int
    total_quantity: int
    total_price: int
    items: List[CartItemOut]


class AddressIn(BaseModel):
    city: str
    state: str
    zip_code: str
    street_name: str
    street_number: str


class AddressOut(BaseModel):
    id: UUID
    customer_id: UUID
    is_default: bool
    street: str
    number: str
    city: str
    state: str
    zip_code: str
    address_line: str

    model_config = ConfigDict(from_attributes=True)


class CheckoutIn(BaseModel):
    address_id: UUID
    transaction_id: str = Field(..., min_length=1, description="Gateway transaction id")
    gateway_name: str | None = None


class OrderItemOut(BaseModel):
    product_id: UUID
    quantity: int
    price: int


class PaymentOut(BaseModel):
    payment_gateway_name: str
    payment_gateway_transaction_id: str


class OrderOut(BaseModel):
    """Order snapshot; totals and prices frozen at checkout."""

    id: UUID
    customer_id: UUID
    address_id: UUID
    total_quantity: int
    total_price: int
    created_at: datetime
    items: List[OrderItemOut]
    payment: PaymentOut | None = None


class ErrorOut(BaseModel):
    code: str
    message: str
