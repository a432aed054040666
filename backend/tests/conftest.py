"""
Shared fixtures: in-memory SQLite (aiosqlite) database, message bus and a
small automotive catalog (three parts, one service kit, one BOM).
"""
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import autoparts.models  # noqa: F401
from autoparts.config import Settings
from autoparts.db.base import Base
from autoparts.events.wiring import build_event_bus
from autoparts.models.sku import SKUType
from autoparts.services.bom_service import BOMService
from autoparts.services.catalog_service import CatalogService
from autoparts.services.sales_order_service import SalesOrderService


# ============================================================================
# Database
# ============================================================================

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with maker() as session:
        yield session


@pytest.fixture
def settings():
    return Settings(EVENT_BROADCAST_ENABLED=False, AUTO_REORDER_ENABLED=True)


@pytest.fixture
def bus(settings):
    return build_event_bus(settings)


# ============================================================================
# Catalog
# ============================================================================

@pytest_asyncio.fixture
async def warehouse(db):
    # First warehouse gets id 1, the configured default warehouse.
    return await CatalogService.create_warehouse(db, "Main Distribution Center", "MAIN")


@pytest_asyncio.fixture
async def vendors(db):
    return [
        await CatalogService.create_vendor(db, "Mann+Hummel Filters", "MANN"),
        await CatalogService.create_vendor(db, "NGK Spark Plug Co.", "NGK"),
        await CatalogService.create_vendor(db, "Bosch Automotive Supply", "BOSCH"),
        await CatalogService.create_vendor(db, "Denso Parts Distribution", "DENSO"),
        await CatalogService.create_vendor(db, "Retired Vendor", "OLD", is_active=False),
    ]


@pytest_asyncio.fixture
async def parts(db, warehouse, vendors):
    """Oil Filter, Air Filter and Spark Plugs, keyed by short name."""
    mann, ngk = vendors[0], vendors[1]
    return {
        "oil": await CatalogService.create_sku(db, "OF-001", "Oil Filter", unit_cost=Decimal("8.50"), vendor_id=mann.id),
        "air": await CatalogService.create_sku(db, "AF-001", "Air Filter", unit_cost=Decimal("14.00"), vendor_id=mann.id),
        "spark": await CatalogService.create_sku(db, "SP-001", "Spark Plugs", vendor_id=ngk.id),
    }


@pytest_asyncio.fixture
async def kit(db, warehouse):
    return await CatalogService.create_sku(db, "KIT-SVC-01", "Basic Service Kit", SKUType.KIT)


@pytest_asyncio.fixture
async def service_bom(db, kit, parts):
    """Kit recipe: 12 oil filters, 25 air filters, 8 spark plugs."""
    return await BOMService.create_bom_template(
        db,
        kit.id,
        "Basic Service Kit",
        [
            {"component_sku_id": parts["oil"].id, "quantity_required": 12},
            {"component_sku_id": parts["air"].id, "quantity_required": 25},
            {"component_sku_id": parts["spark"].id, "quantity_required": 8},
        ],
    )


@pytest_asyncio.fixture
async def sales_order(db, service_bom):
    return await SalesOrderService.create_sales_order(db, "Northside Garage", service_bom.id, 1)
