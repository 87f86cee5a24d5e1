"""Response DTOs for API endpoints.

Engine entities are pydantic models and are returned as-is; the models
here wrap them where an endpoint returns more than one entity.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from stockcore.core.entities import Balance, Movement, MovementResult, Transfer


class MovementResultResponse(BaseModel):
    """Balance after a movement and the movement written (none for a no-op)."""

    balance: Balance
    movement: Movement | None = None

    @classmethod
    def from_result(cls, result: MovementResult) -> "MovementResultResponse":
        return cls(balance=result.balance, movement=result.movement)


class BalanceResponse(BaseModel):
    location_id: int
    item_id: int
    quantity: int = Field(..., description="On-hand quantity, 0 when never stocked")


class BalancesResponse(BaseModel):
    """Quantities for several items at one location."""

    location_id: int
    quantities: dict[int, int]


class BalanceListResponse(BaseModel):
    location_id: int
    balances: list[Balance]
    total: int


class MovementListResponse(BaseModel):
    location_id: int
    item_id: int | None = None
    movements: list[Movement]


class TransferListResponse(BaseModel):
    transfers: list[Transfer]
    total: int


class GenerateLinesResponse(BaseModel):
    inventory_id: int
    lines_created: int


class ProviderHealthResponse(BaseModel):
    """Health status for a single backing service."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    details: dict | None = Field(default=None, description="Structured error details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
