from fastapi.testclient import TestClient

from conftest import CHECKOUT_DETAILS, login, stock_of
from main import app
from models.log import Log
from models.order import Order
from models.product import Product


def place_guest_order(client, product_id, quantity=1):
    client.post("/cart", json={"product_id": product_id, "quantity": quantity})
    return client.post("/orders", json=CHECKOUT_DETAILS)


def test_guest_checkout(client, make_product):
    product = make_product(price=10000, stock=5)
    client.post("/cart", json={"product_id": product.id, "quantity": 3})
    client.post(f"/cart/{product.id}/decrement")

    response = client.post("/orders", json=CHECKOUT_DETAILS)

    assert response.status_code == 201
    order = response.json()
    assert order["total_amount"] == 20000
    assert order["status"] == "pending"
    assert order["user_id"] is None
    assert order["customer_name"] == CHECKOUT_DETAILS["customer_name"]
    assert stock_of(product.id) == 3
    assert client.get("/cart").json() == []


def test_guest_sees_own_order_only(client, make_product):
    product = make_product()
    order_id = place_guest_order(client, product.id, 2).json()["id"]

    detail = client.get(f"/orders/{order_id}")
    assert detail.status_code == 200
    body = detail.json()
    assert body["order"]["id"] == order_id
    assert [(i["product_id"], i["quantity"], i["price_at_purchase"]) for i in body["items"]] == [(product.id, 2, 10000)]
    assert [o["id"] for o in client.get("/orders").json()] == [order_id]

    stranger = TestClient(app)
    response = stranger.get(f"/orders/{order_id}")
    assert response.status_code == 404
    assert response.json()["code"] == "order_not_found"
    assert stranger.get("/orders").json() == []


def test_customer_orders_are_private(client, make_user, make_product):
    make_user("karim")
    make_user("salma")
    product = make_product()
    headers = login(client, "karim")

    client.post("/cart", json={"product_id": product.id}, headers=headers)
    order = client.post("/orders", json=CHECKOUT_DETAILS, headers=headers).json()
    assert order["user_id"] is not None

    assert [o["id"] for o in client.get("/orders", headers=headers).json()] == [order["id"]]
    assert client.get(f"/orders/{order['id']}", headers=headers).status_code == 200

    other = TestClient(app)
    other_headers = login(other, "salma")
    assert other.get(f"/orders/{order['id']}", headers=other_headers).status_code == 404
    assert other.get("/orders", headers=other_headers).json() == []


def test_admin_can_view_any_order(client, admin_headers, make_product):
    product = make_product()
    guest = TestClient(app)
    order_id = place_guest_order(guest, product.id).json()["id"]

    assert client.get(f"/orders/{order_id}", headers=admin_headers).status_code == 200


def test_empty_cart_checkout(client, db):
    response = client.post("/orders", json=CHECKOUT_DETAILS)
    assert response.status_code == 400
    assert response.json()["code"] == "empty_cart"
    assert db.query(Order).count() == 0


def test_checkout_payload_is_validated(client, make_product):
    product = make_product()
    client.post("/cart", json={"product_id": product.id})

    missing_address = {k: v for k, v in CHECKOUT_DETAILS.items() if k != "shipping_address"}
    assert client.post("/orders", json=missing_address).status_code == 422
    assert client.post("/orders", json={**CHECKOUT_DETAILS, "customer_email": "nope"}).status_code == 422
    assert stock_of(product.id) == 5
    assert len(client.get("/cart").json()) == 1


def test_insufficient_stock_is_reported_and_logged(client, db, make_product):
    product = make_product(stock=3)
    client.post("/cart", json={"product_id": product.id, "quantity": 3})
    db.query(Product).filter(Product.id == product.id).update({Product.stock: 1})
    db.commit()

    response = client.post("/orders", json=CHECKOUT_DETAILS)

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "insufficient_stock"
    assert (body["product_id"], body["requested"], body["available"]) == (product.id, 3, 1)
    assert db.query(Order).count() == 0
    assert stock_of(product.id) == 1
    assert len(client.get("/cart").json()) == 1

    failure = db.query(Log).filter(Log.action == "ORDER_CREATE").one()
    assert failure.status == "FAIL"
    assert failure.meta["code"] == "insufficient_stock"


def test_logout_forgets_guest_orders(client, make_product):
    product = make_product()
    order_id = place_guest_order(client, product.id).json()["id"]

    client.post("/logout")

    assert client.get(f"/orders/{order_id}").status_code == 404
