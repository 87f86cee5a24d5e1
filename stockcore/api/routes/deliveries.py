"""Delivery endpoints."""

from fastapi import APIRouter, Depends, status

from stockcore.api.dependencies import (
    get_create_delivery_use_case,
    get_delivery_query_use_case,
    get_set_delivery_status_use_case,
)
from stockcore.application.dto.requests import CreateDeliveryRequest, SetDeliveryStatusRequest
from stockcore.application.dto.responses import ErrorResponse
from stockcore.application.use_cases import (
    CreateDeliveryUseCase,
    DeliveryQueryUseCase,
    SetDeliveryStatusUseCase,
)
from stockcore.core.entities import Delivery

router = APIRouter(prefix="/api/deliveries", tags=["deliveries"])

ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post("", response_model=Delivery, status_code=status.HTTP_201_CREATED, responses=ERRORS)
async def create_delivery(
    request: CreateDeliveryRequest,
    use_case: CreateDeliveryUseCase = Depends(get_create_delivery_use_case),
) -> Delivery:
    """Create a delivery from a sale, an order, or between two locations."""
    return await use_case.execute(request)


@router.get("/{delivery_id}", response_model=Delivery, responses={404: {"model": ErrorResponse}})
async def get_delivery(
    delivery_id: int,
    use_case: DeliveryQueryUseCase = Depends(get_delivery_query_use_case),
) -> Delivery:
    return await use_case.get(delivery_id)


@router.post("/{delivery_id}/status", response_model=Delivery, responses=ERRORS)
async def set_delivery_status(
    delivery_id: int,
    request: SetDeliveryStatusRequest,
    use_case: SetDeliveryStatusUseCase = Depends(get_set_delivery_status_use_case),
) -> Delivery:
    return await use_case.execute(delivery_id, request)
