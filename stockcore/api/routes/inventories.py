"""Inventory count endpoints."""

from fastapi import APIRouter, Depends, status

from stockcore.api.dependencies import (
    get_cancel_inventory_use_case,
    get_create_inventory_use_case,
    get_generate_lines_use_case,
    get_inventory_query_use_case,
    get_post_inventory_use_case,
    get_record_count_use_case,
)
from stockcore.application.dto.requests import (
    CreateInventoryRequest,
    GenerateLinesRequest,
    PostInventoryRequest,
    RecordCountRequest,
)
from stockcore.application.dto.responses import ErrorResponse, GenerateLinesResponse
from stockcore.application.use_cases import (
    CancelInventoryUseCase,
    CreateInventoryUseCase,
    GenerateInventoryLinesUseCase,
    InventoryQueryUseCase,
    PostInventoryUseCase,
    RecordInventoryCountUseCase,
)
from stockcore.core.entities import InventoryCount, InventoryLine

router = APIRouter(prefix="/api/inventories", tags=["inventories"])

ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post("", response_model=InventoryCount, status_code=status.HTTP_201_CREATED, responses=ERRORS)
async def create_inventory(
    request: CreateInventoryRequest,
    use_case: CreateInventoryUseCase = Depends(get_create_inventory_use_case),
) -> InventoryCount:
    return await use_case.execute(request)


@router.get("/{inventory_id}", response_model=InventoryCount, responses={404: {"model": ErrorResponse}})
async def get_inventory(
    inventory_id: int,
    use_case: InventoryQueryUseCase = Depends(get_inventory_query_use_case),
) -> InventoryCount:
    return await use_case.get(inventory_id)


@router.post("/{inventory_id}/lines", response_model=GenerateLinesResponse, responses=ERRORS)
async def generate_lines(
    inventory_id: int,
    request: GenerateLinesRequest | None = None,
    use_case: GenerateInventoryLinesUseCase = Depends(get_generate_lines_use_case),
) -> GenerateLinesResponse:
    """Snapshot expected quantities; a second call is rejected."""
    created = await use_case.execute(inventory_id, request)
    return GenerateLinesResponse(inventory_id=inventory_id, lines_created=created)


@router.patch("/{inventory_id}/lines/{line_id}", response_model=InventoryLine, responses=ERRORS)
async def record_count(
    inventory_id: int,
    line_id: int,
    request: RecordCountRequest,
    use_case: RecordInventoryCountUseCase = Depends(get_record_count_use_case),
) -> InventoryLine:
    return await use_case.execute(inventory_id, line_id, request)


@router.post("/{inventory_id}/post", response_model=InventoryCount, responses=ERRORS)
async def post_inventory(
    inventory_id: int,
    request: PostInventoryRequest,
    use_case: PostInventoryUseCase = Depends(get_post_inventory_use_case),
) -> InventoryCount:
    """Reconcile counted lines against current balances."""
    return await use_case.execute(inventory_id, request)


@router.post("/{inventory_id}/cancel", response_model=InventoryCount, responses=ERRORS)
async def cancel_inventory(
    inventory_id: int,
    use_case: CancelInventoryUseCase = Depends(get_cancel_inventory_use_case),
) -> InventoryCount:
    return await use_case.execute(inventory_id)
