"""Balance queries and direct ledger movements."""

from fastapi import APIRouter, Depends, Query, status

from stockcore.api.dependencies import (
    get_apply_movement_use_case,
    get_record_loss_use_case,
    get_record_return_use_case,
    get_set_stock_level_use_case,
    get_stock_query_use_case,
)
from stockcore.application.dto.requests import (
    ApplyMovementRequest,
    RecordLossRequest,
    RecordReturnRequest,
    SetStockLevelRequest,
)
from stockcore.application.dto.responses import (
    BalanceListResponse,
    BalanceResponse,
    BalancesResponse,
    ErrorResponse,
    MovementListResponse,
    MovementResultResponse,
)
from stockcore.application.use_cases import (
    ApplyMovementUseCase,
    RecordLossUseCase,
    RecordReturnUseCase,
    SetStockLevelUseCase,
    StockQueryUseCase,
)

router = APIRouter(prefix="/api/stock", tags=["stock"])

WRITE_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post(
    "/movements",
    response_model=MovementResultResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_ERRORS,
)
async def apply_movement(
    request: ApplyMovementRequest,
    use_case: ApplyMovementUseCase = Depends(get_apply_movement_use_case),
) -> MovementResultResponse:
    """Apply one IN, OUT or ADJUST movement."""
    return MovementResultResponse.from_result(await use_case.execute(request))


@router.post(
    "/returns",
    response_model=MovementResultResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_ERRORS,
)
async def record_return(
    request: RecordReturnRequest,
    use_case: RecordReturnUseCase = Depends(get_record_return_use_case),
) -> MovementResultResponse:
    return MovementResultResponse.from_result(await use_case.execute(request))


@router.post(
    "/losses",
    response_model=MovementResultResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_ERRORS,
)
async def record_loss(
    request: RecordLossRequest,
    use_case: RecordLossUseCase = Depends(get_record_loss_use_case),
) -> MovementResultResponse:
    return MovementResultResponse.from_result(await use_case.execute(request))


@router.put(
    "/level",
    response_model=MovementResultResponse,
    responses=WRITE_ERRORS,
)
async def set_stock_level(
    request: SetStockLevelRequest,
    use_case: SetStockLevelUseCase = Depends(get_set_stock_level_use_case),
) -> MovementResultResponse:
    """Legacy absolute correction; movement is null when nothing changed."""
    return MovementResultResponse.from_result(await use_case.execute(request))


@router.get("/{location_id}", response_model=BalanceListResponse, responses={404: {"model": ErrorResponse}})
async def list_balances(
    location_id: int,
    use_case: StockQueryUseCase = Depends(get_stock_query_use_case),
) -> BalanceListResponse:
    balances = await use_case.list_by_location(location_id)
    return BalanceListResponse(location_id=location_id, balances=balances, total=len(balances))


@router.get("/{location_id}/items/{item_id}", response_model=BalanceResponse)
async def get_balance(
    location_id: int,
    item_id: int,
    use_case: StockQueryUseCase = Depends(get_stock_query_use_case),
) -> BalanceResponse:
    quantity = await use_case.get_balance(location_id, item_id)
    return BalanceResponse(location_id=location_id, item_id=item_id, quantity=quantity)


@router.get("/{location_id}/items", response_model=BalancesResponse)
async def get_balances(
    location_id: int,
    item_ids: list[int] = Query(..., description="Item IDs to look up"),
    use_case: StockQueryUseCase = Depends(get_stock_query_use_case),
) -> BalancesResponse:
    quantities = await use_case.get_balances_batch(location_id, item_ids)
    return BalancesResponse(location_id=location_id, quantities=quantities)


@router.get(
    "/{location_id}/movements",
    response_model=MovementListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def last_movements(
    location_id: int,
    item_id: int | None = None,
    limit: int | None = Query(default=None, ge=1),
    use_case: StockQueryUseCase = Depends(get_stock_query_use_case),
) -> MovementListResponse:
    """Latest movements at a location, newest first."""
    movements = await use_case.last_movements(location_id, item_id=item_id, limit=limit)
    return MovementListResponse(location_id=location_id, item_id=item_id, movements=movements)
