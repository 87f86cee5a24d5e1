"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from stockcore.api.dependencies import EngineContext, get_engine_context
from stockcore.api.main import app
from stockcore.application.services import reset_services, resolve_transit_location
from stockcore.config import get_settings, reset_settings
from stockcore.core.entities import (
    Category,
    Item,
    Location,
    LocationKind,
    MovementKind,
    ReferenceKind,
    TransitLocation,
)
from stockcore.core.interfaces import UnitOfWorkFactory
from stockcore.core.services import (
    DatedUUIDNumberAllocator,
    EventBus,
    MovementLedger,
    register_delivery_listeners,
)
from stockcore.infrastructure.storage.sqlite import ConnectionPool, SQLiteUnitOfWork
from stockcore.infrastructure.storage.sqlite.migrations import initialize_database


@dataclass
class Catalog:
    """Master data seeded for engine tests."""

    depot: Location
    warehouse: Location
    store: Location
    hardware: Category
    bolt: Item
    nut: Item
    paint: Item


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a temporary data dir and drop cached singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


@pytest.fixture
async def db_path(tmp_path: Path) -> Path:
    """Create a temporary database with every migration applied."""
    path = tmp_path / "stock.db"
    results = await initialize_database(path)
    assert results and all(r.success for r in results)
    return path


@pytest.fixture
async def pool(db_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(db_path, pool_size=3, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def uow_factory(pool: ConnectionPool) -> UnitOfWorkFactory:
    return lambda: SQLiteUnitOfWork(pool)


@pytest.fixture
async def transit(uow_factory: UnitOfWorkFactory) -> TransitLocation:
    return await resolve_transit_location(uow_factory)


@pytest.fixture
async def catalog(uow_factory: UnitOfWorkFactory, transit: TransitLocation) -> Catalog:
    """Two depots, a store, one category with two items and one loose item."""
    async with uow_factory() as uow:
        depot = await uow.master.create_location(
            Location(code="DEP-1", name="Main depot", kind=LocationKind.DEPOT)
        )
        warehouse = await uow.master.create_location(
            Location(code="DEP-2", name="North warehouse", kind=LocationKind.DEPOT)
        )
        store = await uow.master.create_location(
            Location(code="STO-1", name="High street store", kind=LocationKind.STORE)
        )
        hardware = await uow.master.create_category(Category(name="Hardware"))
        bolt = await uow.master.create_item(
            Item(sku="BOLT-M8", name="Bolt M8", category_id=hardware.id)
        )
        nut = await uow.master.create_item(Item(sku="NUT-M8", name="Nut M8", category_id=hardware.id))
        paint = await uow.master.create_item(Item(sku="PAINT-W", name="White paint"))
    return Catalog(
        depot=depot,
        warehouse=warehouse,
        store=store,
        hardware=hardware,
        bolt=bolt,
        nut=nut,
        paint=paint,
    )


@pytest.fixture
def event_bus() -> EventBus:
    return register_delivery_listeners(EventBus())


@pytest.fixture
def engine_context(
    uow_factory: UnitOfWorkFactory,
    transit: TransitLocation,
    event_bus: EventBus,
) -> EngineContext:
    return EngineContext(
        uow_factory=uow_factory,
        transit=transit,
        event_bus=event_bus,
        allocator=DatedUUIDNumberAllocator(),
        settings=get_settings(),
    )


@pytest.fixture
def stock_in(
    uow_factory: UnitOfWorkFactory, transit: TransitLocation
) -> Callable[[int, int, int], Awaitable[int]]:
    """Put stock on hand through a MANUAL IN movement; returns the new balance."""

    async def _stock_in(location_id: int, item_id: int, qty: int) -> int:
        async with uow_factory() as uow:
            result = await MovementLedger(uow, transit).apply_movement(
                MovementKind.IN, location_id, item_id, qty, ReferenceKind.MANUAL
            )
        return result.balance.quantity

    return _stock_in


@pytest.fixture
def balance_of(
    uow_factory: UnitOfWorkFactory,
) -> Callable[[int, int], Awaitable[int]]:
    async def _balance_of(location_id: int, item_id: int) -> int:
        async with uow_factory() as uow:
            balance = await uow.stock.get_balance(location_id, item_id)
        return balance.quantity if balance else 0

    return _balance_of


@pytest.fixture
def api_prefix() -> str:
    return "/api"


@pytest.fixture
async def async_client(engine_context: EngineContext) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with every use case built on the test database."""
    app.dependency_overrides[get_engine_context] = lambda: engine_context
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_engine_context, None)
