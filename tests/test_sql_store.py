import asyncio

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from bookstore.application.create_order import CreateOrderDTO, CreateOrderUseCase, OrderLineDTO
from bookstore.application.get_cart import GetCartUseCase
from bookstore.application.update_cart import AddCartItemUseCase
from bookstore.domain.exceptions import StorageError
from bookstore.infrastructure.document_store import SQLAlchemyDocumentStore
from bookstore.infrastructure.repositories import (
    DocumentBookRepository,
    DocumentCartRepository,
    DocumentOrderRepository,
)

from conftest import BOOKS


@pytest.fixture
async def sql_store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    store = SQLAlchemyDocumentStore(engine)
    await store.start()
    for book in BOOKS:
        await store.insert("books", dict(book, id=str(book["id"])))
    yield store
    await store.close()


async def test_get_and_find(sql_store):
    assert (await sql_store.get("books", "1"))["name"] == "Dune"
    assert await sql_store.get("books", "missing") is None
    assert [doc["id"] for doc in await sql_store.find("books")] == ["1", "2", "3"]


async def test_find_by_field(sql_store):
    await sql_store.insert("orders", {"id": "o1", "userId": "alice"})
    await sql_store.insert("orders", {"id": "o2", "userId": "bob"})

    assert [doc["id"] for doc in await sql_store.find("orders", userId="bob")] == ["o2"]


async def test_same_id_in_different_collections(sql_store):
    await sql_store.insert("carts", {"id": "1", "userId": "1", "items": []})

    assert (await sql_store.get("books", "1"))["name"] == "Dune"
    assert (await sql_store.get("carts", "1"))["items"] == []


async def test_insert_duplicate_id(sql_store):
    with pytest.raises(StorageError):
        await sql_store.insert("books", {"id": "1", "name": "Copy"})


async def test_ensure_creates_once(sql_store):
    first = await sql_store.ensure("carts", "alice", {"userId": "alice", "items": []})
    second = await sql_store.ensure("carts", "alice", {"userId": "alice", "items": ["ignored"]})

    assert first == second
    assert len(await sql_store.find("carts")) == 1


async def test_apply_and_delete(sql_store):
    def discount(doc):
        doc["discount_price"] = 5.0
        return doc

    updated = await sql_store.apply("books", "2", discount)
    assert updated["discount_price"] == 5.0
    assert (await sql_store.get("books", "2"))["discount_price"] == 5.0
    assert await sql_store.apply("books", "missing", discount) is None

    assert await sql_store.delete("books", "2") is True
    assert await sql_store.delete("books", "2") is False


async def test_failed_mutation_is_rolled_back(sql_store):
    def explode(doc):
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await sql_store.apply("books", "1", explode)
    assert (await sql_store.get("books", "1"))["name"] == "Dune"


async def test_cart_and_order_flow(sql_store):
    books = DocumentBookRepository(sql_store)
    carts = DocumentCartRepository(sql_store)
    orders = DocumentOrderRepository(sql_store)

    await AddCartItemUseCase(carts, books)("alice", "1", 1)
    await AddCartItemUseCase(carts, books)("alice", "1", 2)
    view = await GetCartUseCase(carts, books)("alice")
    assert view.items[0].quantity == 3
    assert view.total == 24.0

    order = await CreateOrderUseCase(orders, carts, books)(
        CreateOrderDTO(
            user_id="alice",
            items=[OrderLineDTO(book_id="1", quantity=3)],
            shipping_address="1 Main St",
            payment_method="card",
        )
    )
    assert order.total_price == 24.0
    assert [o.id for o in await orders.list(user_id="alice")] == [order.id]
    assert (await carts.get_for_user("alice")).items == []


async def test_concurrent_cart_creation(sql_store):
    carts = DocumentCartRepository(sql_store)

    created = await asyncio.gather(*(carts.get_or_create("bob") for _ in range(5)))

    assert {cart.id for cart in created} == {"bob"}
    assert len(await sql_store.find("carts")) == 1
