import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

import mongomock
import pytest
from fastapi.testclient import TestClient

import database

database.client = mongomock.MongoClient()
database.db = database.client["storefront_test"]

from main import app  # noqa: E402
from schemas import Product as ProductSchema, User as UserSchema  # noqa: E402
from security import hash_password, token_for  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    for name in database.db.list_collection_names():
        database.db.drop_collection(name)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user():
    def _make(email="shopper@example.com", password="secret123", role="user", name="Shopper"):
        doc = UserSchema(name=name, email=email, password_hash=hash_password(password), role=role).model_dump()
        res = database.db["user"].insert_one(doc)
        return database.db["user"].find_one({"_id": res.inserted_id})
    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role="admin", name="Admin")


def auth_headers(user_doc):
    return {"Authorization": f"Bearer {token_for(user_doc)}"}


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_product():
    def _make(**overrides):
        data = {
            "name": "Desk Lamp",
            "description": "LED lamp with dimmer",
            "price": 40.0,
            "category": "Home & Garden",
            "brand": "Lumo",
            "stock": 5,
            "images": [{"url": "https://img.example.com/lamp.jpg", "alt": "lamp"}],
        }
        data.update(overrides)
        doc = ProductSchema(**data).model_dump()
        doc["created_at"] = doc["updated_at"] = database.now()
        res = database.db["product"].insert_one(doc)
        return database.db["product"].find_one({"_id": res.inserted_id})
    return _make


@pytest.fixture
def headers_for():
    return auth_headers
