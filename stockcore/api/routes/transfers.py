"""Transfer and journey endpoints."""

from fastapi import APIRouter, Depends, Query, status

from stockcore.api.dependencies import (
    get_create_journey_use_case,
    get_create_transfer_use_case,
    get_post_transfer_use_case,
    get_receive_transfer_use_case,
    get_ship_transfer_use_case,
    get_transfer_query_use_case,
)
from stockcore.application.dto.requests import (
    CreateTransferRequest,
    ReceiveTransferRequest,
    ShipTransferRequest,
)
from stockcore.application.dto.responses import ErrorResponse, TransferListResponse
from stockcore.application.use_cases import (
    CreateJourneyUseCase,
    CreateTransferDraftUseCase,
    PostTransferUseCase,
    ReceiveTransferUseCase,
    ShipTransferUseCase,
    TransferQueryUseCase,
)
from stockcore.core.entities import Journey, Transfer

router = APIRouter(prefix="/api/transfers", tags=["transfers"])

ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post("", response_model=Transfer, status_code=status.HTTP_201_CREATED, responses=ERRORS)
async def create_transfer(
    request: CreateTransferRequest,
    use_case: CreateTransferDraftUseCase = Depends(get_create_transfer_use_case),
) -> Transfer:
    """Create a DRAFT transfer between two locations."""
    return await use_case.execute(request)


@router.post(
    "/journeys",
    response_model=Journey,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
)
async def create_journey(
    request: CreateTransferRequest,
    use_case: CreateJourneyUseCase = Depends(get_create_journey_use_case),
) -> Journey:
    """Create an outbound and an inbound leg through the in-transit location."""
    return await use_case.execute(request)


@router.post("/direct", response_model=Transfer, status_code=status.HTTP_201_CREATED, responses=ERRORS)
async def post_transfer(
    request: CreateTransferRequest,
    use_case: PostTransferUseCase = Depends(get_post_transfer_use_case),
) -> Transfer:
    """Move stock in one step: create, ship and receive every line."""
    return await use_case.execute(request)


@router.get("", response_model=TransferListResponse)
async def list_transfers(
    limit: int | None = Query(default=None, ge=1),
    use_case: TransferQueryUseCase = Depends(get_transfer_query_use_case),
) -> TransferListResponse:
    transfers = await use_case.list_recent(limit=limit)
    return TransferListResponse(transfers=transfers, total=len(transfers))


@router.get("/journeys/{journey_id}", response_model=Journey, responses={404: {"model": ErrorResponse}})
async def get_journey(
    journey_id: str,
    use_case: TransferQueryUseCase = Depends(get_transfer_query_use_case),
) -> Journey:
    return await use_case.get_journey(journey_id)


@router.get("/{transfer_id}", response_model=Transfer, responses={404: {"model": ErrorResponse}})
async def get_transfer(
    transfer_id: int,
    use_case: TransferQueryUseCase = Depends(get_transfer_query_use_case),
) -> Transfer:
    return await use_case.get(transfer_id)


@router.post("/{transfer_id}/ship", response_model=Transfer, responses=ERRORS)
async def ship_transfer(
    transfer_id: int,
    request: ShipTransferRequest | None = None,
    use_case: ShipTransferUseCase = Depends(get_ship_transfer_use_case),
) -> Transfer:
    return await use_case.execute(transfer_id, request)


@router.post("/{transfer_id}/receive", response_model=Transfer, responses=ERRORS)
async def receive_transfer(
    transfer_id: int,
    request: ReceiveTransferRequest,
    use_case: ReceiveTransferUseCase = Depends(get_receive_transfer_use_case),
) -> Transfer:
    """Receive part or all of a shipped transfer."""
    return await use_case.execute(transfer_id, request)
