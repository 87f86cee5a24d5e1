"""Purchase order endpoints."""

from fastapi import APIRouter, Depends, status

from stockcore.api.dependencies import (
    get_create_purchase_order_use_case,
    get_purchase_order_query_use_case,
    get_receive_purchase_order_use_case,
    get_set_purchase_order_status_use_case,
)
from stockcore.application.dto.requests import (
    CreatePurchaseOrderRequest,
    ReceivePurchaseOrderRequest,
    SetPurchaseOrderStatusRequest,
)
from stockcore.application.dto.responses import ErrorResponse
from stockcore.application.use_cases import (
    CreatePurchaseOrderUseCase,
    PurchaseOrderQueryUseCase,
    ReceivePurchaseOrderUseCase,
    SetPurchaseOrderStatusUseCase,
)
from stockcore.core.entities import PurchaseOrder

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])

ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post("", response_model=PurchaseOrder, status_code=status.HTTP_201_CREATED, responses=ERRORS)
async def create_purchase_order(
    request: CreatePurchaseOrderRequest,
    use_case: CreatePurchaseOrderUseCase = Depends(get_create_purchase_order_use_case),
) -> PurchaseOrder:
    return await use_case.execute(request)


@router.get(
    "/{purchase_order_id}",
    response_model=PurchaseOrder,
    responses={404: {"model": ErrorResponse}},
)
async def get_purchase_order(
    purchase_order_id: int,
    use_case: PurchaseOrderQueryUseCase = Depends(get_purchase_order_query_use_case),
) -> PurchaseOrder:
    return await use_case.get(purchase_order_id)


@router.post("/{purchase_order_id}/status", response_model=PurchaseOrder, responses=ERRORS)
async def set_purchase_order_status(
    purchase_order_id: int,
    request: SetPurchaseOrderStatusRequest,
    use_case: SetPurchaseOrderStatusUseCase = Depends(get_set_purchase_order_status_use_case),
) -> PurchaseOrder:
    """Order or cancel; received statuses come from receiving goods."""
    return await use_case.execute(purchase_order_id, request)


@router.post("/{purchase_order_id}/receive", response_model=PurchaseOrder, responses=ERRORS)
async def receive_purchase_order(
    purchase_order_id: int,
    request: ReceivePurchaseOrderRequest,
    use_case: ReceivePurchaseOrderUseCase = Depends(get_receive_purchase_order_use_case),
) -> PurchaseOrder:
    return await use_case.execute(purchase_order_id, request)
