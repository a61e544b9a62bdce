import asyncio

import pytest

from bookstore.application.get_cart import GetCartUseCase
from bookstore.application.update_cart import (
    AddCartItemUseCase,
    RemoveCartItemUseCase,
    SetCartItemQuantityUseCase,
)
from bookstore.domain.exceptions import (
    BookNotFoundError,
    CartItemNotFoundError,
    CartNotFoundError,
    InvalidArgumentError,
)


async def test_cart_is_created_on_first_access(store, carts, books):
    assert await carts.get_for_user("alice") is None

    view = await GetCartUseCase(carts, books)("alice")
    assert view.id == "alice"
    assert view.user_id == "alice"
    assert view.items == []
    assert view.total == 0

    await GetCartUseCase(carts, books)("alice")
    assert len(await store.find("carts", userId="alice")) == 1


async def test_adding_same_book_twice_merges_lines(carts, books):
    add = AddCartItemUseCase(carts, books)
    await add("alice", "1", 2)
    view = await add("alice", "1", 3)

    assert len(view.items) == 1
    assert view.items[0].book_id == "1"
    assert view.items[0].quantity == 5


async def test_cart_totals(carts, books):
    add = AddCartItemUseCase(carts, books)
    await add("alice", "1", 2)
    view = await add("alice", "2", 1)

    assert view.total_items == 3
    assert view.subtotal == pytest.approx(30.0)
    assert view.total == pytest.approx(26.0)
    assert view.total_discount == pytest.approx(4.0)
    dune = next(line for line in view.items if line.book_id == "1")
    assert dune.name == "Dune"
    assert dune.price == 8.0


async def test_numeric_book_ids_are_addressable(carts, books):
    view = await AddCartItemUseCase(carts, books)("alice", "3", 1)
    assert view.items[0].name == "Ulysses"
    assert view.total == 20.0


@pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
async def test_add_rejects_invalid_quantity(carts, books, quantity):
    with pytest.raises(InvalidArgumentError):
        await AddCartItemUseCase(carts, books)("alice", "1", quantity)


async def test_add_requires_book_id(carts, books):
    with pytest.raises(InvalidArgumentError):
        await AddCartItemUseCase(carts, books)("alice", None, 1)


async def test_add_unknown_book(carts, books):
    with pytest.raises(BookNotFoundError):
        await AddCartItemUseCase(carts, books)("alice", "missing", 1)
    assert await carts.get_for_user("alice") is None


async def test_quantity_zero_removes_line(carts, books):
    view = await AddCartItemUseCase(carts, books)("alice", "1", 2)
    item_id = view.items[0].id

    view = await SetCartItemQuantityUseCase(carts, books)("alice", item_id, 0)
    assert view.items == []


async def test_set_quantity_replaces_value(carts, books):
    view = await AddCartItemUseCase(carts, books)("alice", "2", 2)
    view = await SetCartItemQuantityUseCase(carts, books)("alice", view.items[0].id, 7)
    assert view.items[0].quantity == 7
    assert view.total == 70.0


@pytest.mark.parametrize("quantity", [-1, "3", 2.5])
async def test_set_quantity_rejects_invalid_values(carts, books, quantity):
    view = await AddCartItemUseCase(carts, books)("alice", "1", 1)
    with pytest.raises(InvalidArgumentError):
        await SetCartItemQuantityUseCase(carts, books)("alice", view.items[0].id, quantity)

    cart = await carts.get_for_user("alice")
    assert cart.items[0].quantity == 1


async def test_items_of_another_user_are_not_reachable(carts, books):
    view = await AddCartItemUseCase(carts, books)("alice", "1", 1)
    item_id = view.items[0].id
    await GetCartUseCase(carts, books)("bob")

    with pytest.raises(CartItemNotFoundError):
        await SetCartItemQuantityUseCase(carts, books)("bob", item_id, 3)
    with pytest.raises(CartItemNotFoundError):
        await RemoveCartItemUseCase(carts, books)("bob", item_id)

    cart = await carts.get_for_user("alice")
    assert cart.items[0].quantity == 1


async def test_mutating_without_a_cart(carts, books):
    with pytest.raises(CartNotFoundError):
        await SetCartItemQuantityUseCase(carts, books)("bob", "whatever", 1)
    with pytest.raises(CartNotFoundError):
        await RemoveCartItemUseCase(carts, books)("bob", "whatever")


async def test_remove_item(carts, books):
    add = AddCartItemUseCase(carts, books)
    await add("alice", "1", 1)
    view = await add("alice", "2", 1)
    emma = next(line for line in view.items if line.book_id == "2")

    view = await RemoveCartItemUseCase(carts, books)("alice", emma.id)
    assert [line.book_id for line in view.items] == ["1"]


async def test_deleted_book_is_hidden_but_kept(carts, books):
    await AddCartItemUseCase(carts, books)("alice", "2", 1)
    await books.delete("2")

    view = await GetCartUseCase(carts, books)("alice")
    assert view.items == []
    assert view.total == 0
    cart = await carts.get_for_user("alice")
    assert len(cart.items) == 1


async def test_concurrent_adds_are_not_lost(carts, books):
    add = AddCartItemUseCase(carts, books)
    await asyncio.gather(*(add("alice", "1", 1) for _ in range(10)))

    cart = await carts.get_for_user("alice")
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 10
