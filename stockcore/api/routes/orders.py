"""Customer order endpoints."""

from fastapi import APIRouter, Depends, status

from stockcore.api.dependencies import (
    get_create_order_use_case,
    get_order_query_use_case,
    get_set_order_status_use_case,
)
from stockcore.application.dto.requests import CreateOrderRequest, SetOrderStatusRequest
from stockcore.application.dto.responses import ErrorResponse
from stockcore.application.use_cases import (
    CreateOrderUseCase,
    OrderQueryUseCase,
    SetOrderStatusUseCase,
)
from stockcore.core.entities import Order

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post(
    "",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
) -> Order:
    return await use_case.execute(request)


@router.get("/{order_id}", response_model=Order, responses={404: {"model": ErrorResponse}})
async def get_order(
    order_id: int,
    use_case: OrderQueryUseCase = Depends(get_order_query_use_case),
) -> Order:
    return await use_case.get(order_id)


@router.post(
    "/{order_id}/status",
    response_model=Order,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def set_order_status(
    order_id: int,
    request: SetOrderStatusRequest,
    use_case: SetOrderStatusUseCase = Depends(get_set_order_status_use_case),
) -> Order:
    return await use_case.execute(order_id, request)
