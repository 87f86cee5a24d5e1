"""Sale endpoints."""

from fastapi import APIRouter, Depends, status

from stockcore.api.dependencies import (
    get_cancel_sale_use_case,
    get_create_sale_use_case,
    get_post_sale_use_case,
    get_sale_query_use_case,
)
from stockcore.application.dto.requests import CreateSaleRequest
from stockcore.application.dto.responses import ErrorResponse
from stockcore.application.use_cases import (
    CancelSaleUseCase,
    CreateSaleUseCase,
    PostSaleUseCase,
    SaleQueryUseCase,
)
from stockcore.core.entities import Sale

router = APIRouter(prefix="/api/sales", tags=["sales"])

ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.post("", response_model=Sale, status_code=status.HTTP_201_CREATED, responses=ERRORS)
async def create_sale(
    request: CreateSaleRequest,
    use_case: CreateSaleUseCase = Depends(get_create_sale_use_case),
) -> Sale:
    return await use_case.execute(request)


@router.get("/{sale_id}", response_model=Sale, responses={404: {"model": ErrorResponse}})
async def get_sale(
    sale_id: int,
    use_case: SaleQueryUseCase = Depends(get_sale_query_use_case),
) -> Sale:
    return await use_case.get(sale_id)


@router.post("/{sale_id}/post", response_model=Sale, responses=ERRORS)
async def post_sale(
    sale_id: int,
    use_case: PostSaleUseCase = Depends(get_post_sale_use_case),
) -> Sale:
    """Issue the sale's stock; all lines or none."""
    return await use_case.execute(sale_id)


@router.post("/{sale_id}/cancel", response_model=Sale, responses=ERRORS)
async def cancel_sale(
    sale_id: int,
    use_case: CancelSaleUseCase = Depends(get_cancel_sale_use_case),
) -> Sale:
    return await use_case.execute(sale_id)
