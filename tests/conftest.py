import os
import tempfile

# Point the application at a throwaway SQLite file before anything imports config
_TMP_DIR = tempfile.mkdtemp(prefix="sportshop-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine, init_db
from main import app
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash

PASSWORD = "secret123"

CHECKOUT_DETAILS = {
    "customer_name": "Karim Benali",
    "customer_email": "karim@example.com",
    "customer_phone": "+212600000000",
    "shipping_address": "12 Rue des Sports, Casablanca 20000",
}


@pytest.fixture(autouse=True)
def reset_db():
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_product(db):
    def _make(name="Kettlebell 16kg", price=10000, stock=5, discount=0,
              category="equipment", subcategory="weights", featured=False):
        product = Product(
            name=name, description=f"{name} description", price=price, stock=stock,
            discount=discount, category=category, subcategory=subcategory, featured=featured,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def make_user(db):
    def _make(username="karim", is_admin=False, email=None):
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=get_password_hash(PASSWORD),
            full_name=username.title(),
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


def login(client, username, password=PASSWORD):
    response = client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, make_user):
    make_user("admin", is_admin=True)
    return login(client, "admin")


@pytest.fixture
def customer_headers(client, make_user):
    make_user("karim")
    return login(client, "karim")


def stock_of(product_id):
    session = SessionLocal()
    try:
        return session.query(Product.stock).filter(Product.id == product_id).scalar()
    finally:
        session.close()
