"""End to end through the HTTP layer."""

import uuid

import pytest
from sqlalchemy.exc import OperationalError

from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService


def _register(client, email="john.doe@gmail.com"):
    resp = client.post("/customers/", json={"name": "John Doe", "email": email})
    assert resp.status_code == 201
    return resp.json()["id"]


def _product(client, name, price, stock):
    resp = client.post("/products", json={"name": name, "price": price})
    assert resp.status_code == 201
    product = resp.json()
    resp = client.post(f"/inventories/{product['inventory_id']}/stock", json={"stock": stock})
    assert resp.status_code == 200
    assert resp.json()["stock_quantity"] == stock
    return product


def _address(client, customer_id, **overrides):
    body = {
        "city": "Austin",
        "state": "TX",
        "zip_code": "73301",
        "street_name": "Delivery Road",
        "street_number": "321",
    }
    body.update(overrides)
    return client.post("/addresses/", params={"customer_id": customer_id}, json=body)


def test_health(client):
    assert client.get("/health").status_code == 204


def test_full_purchase(client):
    customer_id = _register(client)
    a = _product(client, "A", 2999, 10)
    b = _product(client, "B", 99286, 5)
    params = {"customer_id": customer_id}

    assert client.post("/cart/items", params=params, json={"product_id": a["id"], "quantity": 8}).status_code == 200
    resp = client.post("/cart/items", params=params, json={"product_id": b["id"], "quantity": 4})
    assert resp.json()["total_price"] == 421136

    address = _address(client, customer_id)
    assert address.status_code == 201
    assert address.json()["is_default"] is True

    resp = client.post(
        "/checkout", params=params, json={"address_id": address.json()["id"], "transaction_id": "pay-123"}
    )
    assert resp.status_code == 201
    order = resp.json()
    assert order["total_quantity"] == 12
    assert order["total_price"] == 421136
    assert order["payment"] == {
        "payment_gateway_name": "mercado_pago",
        "payment_gateway_transaction_id": "pay-123",
    }

    assert client.get("/cart/", params=params).json()["items"] == []
    assert client.get(f"/products/{a['id']}").json()["stock_quantity"] == 2
    assert client.get(f"/orders/{order['id']}", params=params).json()["total_price"] == 421136


def test_cart_adjustments(client):
    customer_id = _register(client)
    a = _product(client, "A", 2999, 10)
    params = {"customer_id": customer_id}
    client.post("/cart/items", params=params, json={"product_id": a["id"], "quantity": 8})

    resp = client.post(f"/cart/items/{a['id']}/increase", params=params, json={"quantity": 6})
    assert resp.status_code == 409
    assert resp.json()["code"] == "stock_exceeded"

    resp = client.post(f"/cart/items/{a['id']}/decrease", params=params, json={"quantity": 3})
    assert resp.json()["items"][0]["quantity"] == 5

    resp = client.delete(f"/cart/items/{a['id']}", params=params)
    assert resp.status_code == 200
    assert resp.json()["total_items"] == 0


@pytest.mark.parametrize(
    "overrides,code",
    [
        ({"state": "XX"}, "invalid_state"),
        ({"zip_code": "123"}, "invalid_zip"),
        ({"street_number": "12b"}, "invalid_street_number"),
    ],
)
def test_address_validation_is_400(client, overrides, code):
    customer_id = _register(client)

    resp = _address(client, customer_id, **overrides)

    assert resp.status_code == 400
    assert resp.json()["code"] == code


def test_address_mismatch_is_409(client):
    customer_id = _register(client)

    resp = _address(client, customer_id, city="Dallas")

    assert resp.status_code == 409
    assert resp.json() == {
        "code": "address_mismatch",
        "message": "ZIP code location does not match with provided city and state",
    }


def test_cache_down_is_503(client, fake_redis):
    customer_id = _register(client)
    fake_redis.down = True

    resp = _address(client, customer_id)

    assert resp.status_code == 503
    assert resp.headers["Retry-After"] == "1"
    assert resp.json()["code"] == "upstream_unavailable"


def test_zero_quantity_is_400(client):
    customer_id = _register(client)
    a = _product(client, "A", 2999, 10)

    resp = client.post(
        "/cart/items", params={"customer_id": customer_id}, json={"product_id": a["id"], "quantity": 0}
    )

    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_quantity"


def test_empty_cart_checkout_is_409(client):
    customer_id = _register(client)
    address_id = _address(client, customer_id).json()["id"]

    resp = client.post(
        "/checkout", params={"customer_id": customer_id}, json={"address_id": address_id, "transaction_id": "t"}
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "empty_cart"


def test_duplicate_email_is_409(client):
    _register(client)

    resp = client.post("/customers/", json={"name": "John", "email": "john.doe@gmail.com"})

    assert resp.status_code == 409
    assert resp.json()["code"] == "email_taken"


def test_unknown_order_is_409(client):
    customer_id = _register(client)

    resp = client.get(f"/orders/{uuid.uuid4()}", params={"customer_id": customer_id})

    assert resp.status_code == 409
    assert resp.json()["code"] == "order_not_found"


def _store_timeout(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("canceling statement due to statement timeout"))


@pytest.mark.parametrize(
    "target,name,path",
    [
        (CartService, "snapshot", "/cart/"),
        (OrderRepo, "get_order", f"/orders/{uuid.uuid4()}"),
    ],
)
def test_store_failure_on_read_is_503(client, monkeypatch, target, name, path):
    customer_id = _register(client)
    monkeypatch.setattr(target, name, _store_timeout)

    resp = client.get(path, params={"customer_id": customer_id})

    assert resp.status_code == 503
    assert resp.headers["Retry-After"] == "1"
    assert resp.json() == {"code": "upstream_unavailable", "message": "relational store is unavailable"}


def test_error_body_is_documented(client):
    responses = client.get("/openapi.json").json()["paths"]["/checkout"]["post"]["responses"]

    for status in ("400", "409", "500", "503"):
        assert responses[status]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorOut")
