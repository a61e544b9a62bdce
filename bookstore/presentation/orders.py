from typing import Optional, List

from fastapi import APIRouter, Depends, Query, status

from bookstore.application.create_order import CreateOrderDTO, CreateOrderUseCase, OrderLineDTO
from bookstore.application.get_order import GetOrderUseCase, ListOrdersUseCase, OrderView
from bookstore.application.update_order_status import UpdateOrderStatusUseCase
from bookstore.domain.models import Identity, Order
from bookstore.presentation.dependencies import (
    get_create_order_use_case,
    get_current_identity,
    get_get_order_use_case,
    get_list_orders_use_case,
    get_update_order_status_use_case,
)
from bookstore.presentation.schemas import CreateOrderRequest, ErrorResponse, UpdateOrderStatusRequest

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=List[OrderView])
async def list_orders(
    user_id: Optional[str] = Query(None, alias="userId"),
    order_status: Optional[str] = Query(None, alias="status"),
    identity: Identity = Depends(get_current_identity),
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case),
):
    """All orders for an admin, otherwise only the caller's own"""
    return await use_case(identity, user_id=user_id or None, status=order_status or None)


@router.get(
    "/{order_id}",
    response_model=OrderView,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    use_case: GetOrderUseCase = Depends(get_get_order_use_case),
):
    return await use_case(identity, order_id)


@router.post(
    "",
    response_model=Order,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    request: CreateOrderRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
):
    """Place an order and empty the caller's cart"""
    dto = CreateOrderDTO(
        user_id=identity.id,
        items=[OrderLineDTO(book_id=item.book_id, quantity=item.quantity) for item in request.items or []],
        shipping_address=request.shipping_address,
        payment_method=request.payment_method,
    )
    return await use_case(dto)


@router.patch(
    "/{order_id}/status",
    response_model=Order,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: UpdateOrderStatusUseCase = Depends(get_update_order_status_use_case),
):
    """Admin only"""
    return await use_case(identity, order_id, request.status)
