from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookstore.application.accounts import (
    AuthenticateUseCase,
    DeleteUserUseCase,
    FindUserByEmailUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    LoginUseCase,
    LogoutUseCase,
    RegisterUseCase,
    SessionIssuer,
    UpdateUserUseCase,
)
from bookstore.application.catalog import (
    CreateBookUseCase, DeleteBookUseCase, GetBookUseCase, ListBooksUseCase, UpdateBookUseCase
)
from bookstore.application.create_order import CreateOrderUseCase
from bookstore.application.get_cart import GetCartUseCase
from bookstore.application.get_order import GetOrderUseCase, ListOrdersUseCase
from bookstore.application.interfaces import DocumentStore, PasswordHasher
from bookstore.application.update_cart import (
    AddCartItemUseCase, RemoveCartItemUseCase, SetCartItemQuantityUseCase
)
from bookstore.application.update_order_status import UpdateOrderStatusUseCase
from bookstore.domain.models import Identity
from bookstore.infrastructure.repositories import (
    DocumentBookRepository,
    DocumentCartRepository,
    DocumentOrderRepository,
    DocumentSessionRepository,
    DocumentUserRepository,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_book_repository(store: DocumentStore = Depends(get_store)):
    return DocumentBookRepository(store)


def get_user_repository(store: DocumentStore = Depends(get_store)):
    return DocumentUserRepository(store)


def get_cart_repository(store: DocumentStore = Depends(get_store)):
    return DocumentCartRepository(store)


def get_order_repository(store: DocumentStore = Depends(get_store)):
    return DocumentOrderRepository(store)


def get_session_repository(store: DocumentStore = Depends(get_store)):
    return DocumentSessionRepository(store)


def get_session_issuer(request: Request, sessions=Depends(get_session_repository)):
    return SessionIssuer(sessions, request.app.state.session_ttl)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_identity(
    token: Optional[str] = Depends(get_bearer_token),
    sessions=Depends(get_session_repository),
    users=Depends(get_user_repository),
) -> Identity:
    """Auth gate: every protected route depends on this"""
    return await AuthenticateUseCase(sessions, users)(token)


# Use case factories
def get_list_books_use_case(books=Depends(get_book_repository)):
    return ListBooksUseCase(books)


def get_get_book_use_case(books=Depends(get_book_repository)):
    return GetBookUseCase(books)


def get_create_book_use_case(books=Depends(get_book_repository)):
    return CreateBookUseCase(books)


def get_update_book_use_case(books=Depends(get_book_repository)):
    return UpdateBookUseCase(books)


def get_delete_book_use_case(books=Depends(get_book_repository)):
    return DeleteBookUseCase(books)


def get_get_cart_use_case(carts=Depends(get_cart_repository), books=Depends(get_book_repository)):
    return GetCartUseCase(carts, books)


def get_add_cart_item_use_case(carts=Depends(get_cart_repository), books=Depends(get_book_repository)):
    return AddCartItemUseCase(carts, books)


def get_set_cart_item_quantity_use_case(carts=Depends(get_cart_repository), books=Depends(get_book_repository)):
    return SetCartItemQuantityUseCase(carts, books)


def get_remove_cart_item_use_case(carts=Depends(get_cart_repository), books=Depends(get_book_repository)):
    return RemoveCartItemUseCase(carts, books)


def get_create_order_use_case(
    orders=Depends(get_order_repository),
    carts=Depends(get_cart_repository),
    books=Depends(get_book_repository),
):
    return CreateOrderUseCase(orders, carts, books)


def get_get_order_use_case(orders=Depends(get_order_repository), books=Depends(get_book_repository)):
    return GetOrderUseCase(orders, books)


def get_list_orders_use_case(orders=Depends(get_order_repository), books=Depends(get_book_repository)):
    return ListOrdersUseCase(orders, books)


def get_update_order_status_use_case(request: Request, orders=Depends(get_order_repository)):
    return UpdateOrderStatusUseCase(orders, request.app.state.status_policy)


def get_register_use_case(users=Depends(get_user_repository), hasher=Depends(get_hasher), issuer=Depends(get_session_issuer)):
    return RegisterUseCase(users, hasher, issuer)


def get_login_use_case(users=Depends(get_user_repository), hasher=Depends(get_hasher), issuer=Depends(get_session_issuer)):
    return LoginUseCase(users, hasher, issuer)


def get_logout_use_case(sessions=Depends(get_session_repository)):
    return LogoutUseCase(sessions)


def get_get_user_use_case(users=Depends(get_user_repository)):
    return GetUserUseCase(users)


def get_find_user_by_email_use_case(users=Depends(get_user_repository)):
    return FindUserByEmailUseCase(users)


def get_list_users_use_case(users=Depends(get_user_repository)):
    return ListUsersUseCase(users)


def get_update_user_use_case(users=Depends(get_user_repository)):
    return UpdateUserUseCase(users)


def get_delete_user_use_case(users=Depends(get_user_repository)):
    return DeleteUserUseCase(users)
