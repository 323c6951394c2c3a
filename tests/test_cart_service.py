import threading

import pytest

from database import SessionLocal
from models.cart import CartItem
from services import cart as cart_service
from services.cart_store import SESSION_CART_KEY, DatabaseCartStore, SessionCartStore, store_for
from services.errors import InvalidQuantity, OutOfStock, ProductNotFound
from services.identity import Authenticated, Guest


@pytest.fixture(params=["session", "database"])
def store(request, db, make_user):
    if request.param == "session":
        return SessionCartStore({})
    user = make_user("karim")
    return DatabaseCartStore(db, user.id)


def as_pairs(lines):
    return [(line.product.id, line.quantity) for line in lines]


def test_store_for_picks_backend_from_identity(db):
    assert isinstance(store_for(Guest("abc"), db, {}), SessionCartStore)
    assert isinstance(store_for(Authenticated(user_id=1), db, {}), DatabaseCartStore)


def test_add_then_view(db, store, make_product):
    kettlebell = make_product()
    rope = make_product(name="Jump rope", price=1500)

    cart_service.add_to_cart(db, store, kettlebell.id, 2)
    lines = cart_service.add_to_cart(db, store, rope.id, 1)

    assert as_pairs(lines) == [(kettlebell.id, 2), (rope.id, 1)]
    assert as_pairs(cart_service.get_cart(db, store)) == [(kettlebell.id, 2), (rope.id, 1)]


def test_add_existing_line_sums_quantities(db, store, make_product):
    product = make_product(stock=10)
    cart_service.add_to_cart(db, store, product.id, 2)
    lines = cart_service.add_to_cart(db, store, product.id, 3)
    assert as_pairs(lines) == [(product.id, 5)]


def test_decrement_lowers_then_drops_line(db, store, make_product):
    product = make_product()
    cart_service.add_to_cart(db, store, product.id, 2)

    assert as_pairs(cart_service.decrement_cart(db, store, product.id)) == [(product.id, 1)]
    assert cart_service.decrement_cart(db, store, product.id) == []
    # Decrementing a missing line is a no-op
    assert cart_service.decrement_cart(db, store, product.id) == []


def test_remove_is_idempotent(db, store, make_product):
    product = make_product()
    cart_service.add_to_cart(db, store, product.id, 1)

    assert cart_service.remove_from_cart(db, store, product.id) == []
    assert cart_service.remove_from_cart(db, store, product.id) == []


def test_clear(db, store, make_product):
    a = make_product()
    b = make_product(name="Yoga mat")
    cart_service.add_to_cart(db, store, a.id, 1)
    cart_service.add_to_cart(db, store, b.id, 1)

    assert cart_service.clear_cart(db, store) == []
    assert cart_service.get_cart(db, store) == []


@pytest.mark.parametrize("quantity", [0, -1, True, 1.5, "2"])
def test_invalid_quantity_rejected(db, store, make_product, quantity):
    product = make_product()
    with pytest.raises(InvalidQuantity):
        cart_service.add_to_cart(db, store, product.id, quantity)
    assert store.lines() == {}


def test_unknown_product_rejected(db, store):
    with pytest.raises(ProductNotFound) as exc:
        cart_service.add_to_cart(db, store, 999, 1)
    assert exc.value.context["product_id"] == 999


def test_out_of_stock_rejected(db, store, make_product):
    product = make_product(stock=2)
    with pytest.raises(OutOfStock) as exc:
        cart_service.add_to_cart(db, store, product.id, 3)

    assert exc.value.context == {"product_id": product.id, "requested": 3, "available": 2}
    assert store.lines() == {}


def test_deleted_product_is_hidden_from_cart(db, store, make_product):
    kept = make_product()
    gone = make_product(name="Discontinued bench")
    cart_service.add_to_cart(db, store, kept.id, 1)
    cart_service.add_to_cart(db, store, gone.id, 1)

    db.delete(gone)
    db.commit()

    assert as_pairs(cart_service.get_cart(db, store)) == [(kept.id, 1)]


def test_lines_reflect_live_product_data(db, store, make_product):
    product = make_product(price=10000)
    cart_service.add_to_cart(db, store, product.id, 1)

    product.discount = 20
    db.commit()

    [line] = cart_service.get_cart(db, store)
    assert line.product.effective_price == 8000


def test_session_store_layout():
    session = {}
    store = SessionCartStore(session)
    store.add(7, 2)
    assert session[SESSION_CART_KEY] == {"7": 2}

    store.remove(7)
    assert SESSION_CART_KEY not in session


def test_database_store_survives_new_instances(db, make_user, make_product):
    user = make_user("karim")
    product = make_product()
    cart_service.add_to_cart(db, DatabaseCartStore(db, user.id), product.id, 2)

    assert DatabaseCartStore(db, user.id).lines() == {product.id: 2}
    assert db.query(CartItem).filter(CartItem.user_id == user.id).count() == 1


def test_database_carts_are_per_user(db, make_user, make_product):
    first = make_user("karim")
    second = make_user("salma")
    product = make_product()

    cart_service.add_to_cart(db, DatabaseCartStore(db, first.id), product.id, 1)

    assert DatabaseCartStore(db, second.id).lines() == {}


def test_merge_guest_cart(db, make_user, make_product):
    user = make_user("karim")
    a = make_product()
    b = make_product(name="Resistance band")
    user_store = DatabaseCartStore(db, user.id)
    cart_service.add_to_cart(db, user_store, a.id, 1)

    session = {}
    guest = SessionCartStore(session)
    guest.add(a.id, 2)
    guest.add(b.id, 1)
    guest.add(999, 4)  # unknown product

    merged = cart_service.merge_guest_cart(db, session, user.id)

    assert merged == 2
    assert user_store.lines() == {a.id: 3, b.id: 1}
    assert SESSION_CART_KEY not in session


def test_merge_empty_guest_cart(db, make_user):
    user = make_user("karim")
    assert cart_service.merge_guest_cart(db, {}, user.id) == 0


def test_cart_summary(db, make_product):
    store = SessionCartStore({})
    product = make_product(price=10000, stock=10)

    assert cart_service.cart_summary([]) == {"items": 0, "subtotal": 0, "shipping": 0, "total": 0}

    cart_service.add_to_cart(db, store, product.id, 2)
    summary = cart_service.cart_summary(cart_service.get_cart(db, store))
    assert summary == {"items": 2, "subtotal": 20000, "shipping": 3000, "total": 23000}

    cart_service.add_to_cart(db, store, product.id, 4)
    summary = cart_service.cart_summary(cart_service.get_cart(db, store))
    assert summary == {"items": 6, "subtotal": 60000, "shipping": 0, "total": 60000}


def test_remove_ordered_keeps_what_was_added_since(db, store, make_product):
    a = make_product(stock=10)
    b = make_product(name="Yoga mat", stock=10)
    c = make_product(name="Gym chalk", stock=10)
    store.add(a.id, 3)
    store.add(b.id, 2)
    store.add(c.id, 1)

    store.remove_ordered({a.id: 2, b.id: 2, 999: 1})

    assert store.lines() == {a.id: 1, c.id: 1}


def test_concurrent_adds_for_one_user_are_summed(db, make_user, make_product):
    user_id = make_user("karim").id
    product_id = make_product(stock=100).id
    rounds = 10
    barrier = threading.Barrier(2)
    errors = []

    def add_repeatedly():
        session = SessionLocal()
        try:
            user_store = DatabaseCartStore(session, user_id)
            barrier.wait()
            for _ in range(rounds):
                user_store.add(product_id, 1)
        except Exception as e:  # reported through the assertion below
            errors.append(repr(e))
        finally:
            session.close()

    threads = [threading.Thread(target=add_repeatedly) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    assert DatabaseCartStore(db, user_id).lines() == {product_id: 2 * rounds}
    assert db.query(CartItem).filter(CartItem.user_id == user_id).count() == 1
