import json

import pytest
from fastapi.testclient import TestClient

from bookstore.domain.models import Identity, Role
from bookstore.infrastructure.json_store import JsonFileStore
from bookstore.infrastructure.repositories import (
    DocumentBookRepository,
    DocumentCartRepository,
    DocumentOrderRepository,
    DocumentSessionRepository,
    DocumentUserRepository,
)
from bookstore.infrastructure.security import PasslibPasswordHasher
from bookstore.main import create_app

ADMIN_EMAIL = "admin@bookstore.io"
ADMIN_PASSWORD = "admin-secret"

BOOKS = [
    {
        "id": "1",
        "name": "Dune",
        "description": "Desert planet",
        "categories": {"genre": "sci-fi"},
        "list_price": 12.0,
        "original_price": 10.0,
        "discount_price": 8.0,
    },
    {
        "id": "2",
        "name": "Emma",
        "description": "",
        "categories": {"genre": "classic"},
        "list_price": 10.0,
        "original_price": 10.0,
        "discount_price": None,
    },
    # json-server data sets often carry numeric ids
    {
        "id": 3,
        "name": "Ulysses",
        "description": "",
        "categories": {},
        "list_price": 20.0,
        "original_price": 20.0,
    },
]


def seed_database(path) -> None:
    admin = {
        "id": "admin-1",
        "email": ADMIN_EMAIL,
        "password": PasslibPasswordHasher().hash(ADMIN_PASSWORD),
        "fullname": "Store Admin",
        "phone": None,
        "role": "admin",
        "createdAt": "2024-01-01T00:00:00+00:00",
        "updatedAt": "2024-01-01T00:00:00+00:00",
    }
    data = {"books": BOOKS, "users": [admin], "carts": [], "orders": [], "sessions": []}
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "api.json"
    seed_database(path)
    return path


@pytest.fixture
async def store(db_path):
    store = JsonFileStore(db_path)
    await store.start()
    yield store
    await store.close()


@pytest.fixture
def books(store):
    return DocumentBookRepository(store)


@pytest.fixture
def carts(store):
    return DocumentCartRepository(store)


@pytest.fixture
def orders(store):
    return DocumentOrderRepository(store)


@pytest.fixture
def users(store):
    return DocumentUserRepository(store)


@pytest.fixture
def sessions(store):
    return DocumentSessionRepository(store)


@pytest.fixture
def alice():
    return Identity(id="alice", email="alice@bookstore.io", role=Role.USER)


@pytest.fixture
def bob():
    return Identity(id="bob", email="bob@bookstore.io", role=Role.USER)


@pytest.fixture
def admin():
    return Identity(id="admin-1", email=ADMIN_EMAIL, role=Role.ADMIN)


@pytest.fixture
def client(db_path):
    with TestClient(create_app(store=JsonFileStore(db_path))) as c:
        yield c


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, email: str, password: str = "secret") -> dict:
    response = client.post("/register", json={"email": email, "password": password, "fullname": email.split("@")[0]})
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email: str, password: str) -> str:
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["accessToken"]
