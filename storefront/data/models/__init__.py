#import all models so SQLAlchemy registers them in Base.metadata

from storefront.data.models.customer import CustomerModel
from storefront.data.models.product import ProductModel
from storefront.data.models.inventory import InventoryModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.address import AddressModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.payment import PaymentModel

__all__ = [
    "CustomerModel",
    "ProductModel",
    "InventoryModel",
    "CartModel",
    "CartItemModel",
    "AddressModel",
    "OrderModel",
    "OrderItemModel",
    "PaymentModel",
]
