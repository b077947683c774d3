import uuid

import pytest

from storefront.data.models.cart import CartModel
from storefront.data.models.customer import CustomerModel
from storefront.data.models.product import PUBLISHED, UNPUBLISHED
from storefront.domain.errors import ConflictError, ErrorCode, ValidationFailed
from storefront.domain.schemas import CustomerCreate, ProductCreate
from storefront.services.cart_service import CartService
from storefront.services.customer_service import CustomerService
from storefront.services.product_service import ProductService


class TestRegisterCustomer:
    def test_creates_cart(self, db, customer):
        cart = db.query(CartModel).filter_by(customer_id=customer.id).one()
        snapshot = CartService(db).snapshot(customer.id)

        assert snapshot["cart_id"] == cart.id
        assert snapshot["total_items"] == 0

    def test_email_taken(self, db, customer):
        with pytest.raises(ConflictError) as exc:
            CustomerService(db).register(CustomerCreate(name="Johnny", email="john.doe@gmail.com"))
        assert exc.value.code is ErrorCode.EMAIL_TAKEN
        assert db.query(CustomerModel).count() == 1
        assert db.query(CartModel).count() == 1

    @pytest.mark.parametrize(
        "name,email",
        [
            ("J", "j@example.com"),
            ("Jane", "not-an-email"),
            ("Jane", "jane@example"),
        ],
    )
    def test_invalid(self, db, name, email):
        with pytest.raises(ValidationFailed) as exc:
            CustomerService(db).register(CustomerCreate(name=name, email=email))
        assert exc.value.code is ErrorCode.INVALID_CUSTOMER
        assert db.query(CustomerModel).count() == 0

    def test_get_customer(self, db, customer):
        assert CustomerService(db).get_customer(customer.id) == customer

    def test_get_unknown_customer(self, db):
        with pytest.raises(ConflictError) as exc:
            CustomerService(db).get_customer(uuid.uuid4())
        assert exc.value.code is ErrorCode.CUSTOMER_NOT_FOUND


class TestProducts:
    def test_add_product(self, db):
        product = ProductService(db).add_product(
            ProductCreate(name="Monitor", description="27 inch", price=99286)
        )

        assert product.status == UNPUBLISHED
        assert product.price == 99286
        assert product.inventory_id is not None
        assert product.stock_quantity == 0

    @pytest.mark.parametrize("price", [0, -100])
    def test_invalid_price(self, db, price):
        with pytest.raises(ValidationFailed) as exc:
            ProductService(db).add_product(ProductCreate(name="Free", price=price))
        assert exc.value.code is ErrorCode.INVALID_PRICE

    def test_publish(self, db, make_product):
        product = make_product(stock=3)

        published = ProductService(db).publish_product(product.id)

        assert published.status == PUBLISHED
        assert published.stock_quantity == 3

    def test_publish_unknown(self, db):
        with pytest.raises(ConflictError) as exc:
            ProductService(db).publish_product(uuid.uuid4())
        assert exc.value.code is ErrorCode.PRODUCT_NOT_FOUND
