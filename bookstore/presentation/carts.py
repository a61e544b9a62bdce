from fastapi import APIRouter, Depends

from bookstore.application.get_cart import CartView, GetCartUseCase
from bookstore.application.update_cart import (
    AddCartItemUseCase,
    RemoveCartItemUseCase,
    SetCartItemQuantityUseCase,
)
from bookstore.domain.models import Identity
from bookstore.presentation.dependencies import (
    get_add_cart_item_use_case,
    get_current_identity,
    get_get_cart_use_case,
    get_remove_cart_item_use_case,
    get_set_cart_item_quantity_use_case,
)
from bookstore.presentation.schemas import AddCartItemRequest, ErrorResponse, UpdateCartItemRequest

router = APIRouter(prefix="/carts", tags=["Carts"])


@router.get("/me", response_model=CartView)
async def get_cart(
    identity: Identity = Depends(get_current_identity),
    use_case: GetCartUseCase = Depends(get_get_cart_use_case),
):
    """The caller's cart, created empty on first access"""
    return await use_case(identity.id)


@router.post(
    "/me/items",
    response_model=CartView,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_cart_item(
    request: AddCartItemRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: AddCartItemUseCase = Depends(get_add_cart_item_use_case),
):
    """Add a book; an existing line for the same book is incremented"""
    return await use_case(identity.id, request.book_id, request.quantity)


@router.patch(
    "/me/items/{item_id}",
    response_model=CartView,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_cart_item_quantity(
    item_id: str,
    request: UpdateCartItemRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: SetCartItemQuantityUseCase = Depends(get_set_cart_item_quantity_use_case),
):
    """Quantity 0 removes the line"""
    return await use_case(identity.id, item_id, request.quantity)


@router.delete("/me/items/{item_id}", response_model=CartView, responses={404: {"model": ErrorResponse}})
async def remove_cart_item(
    item_id: str,
    identity: Identity = Depends(get_current_identity),
    use_case: RemoveCartItemUseCase = Depends(get_remove_cart_item_use_case),
):
    return await use_case(identity.id, item_id)
