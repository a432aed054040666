"""Celery task bodies run against the test database."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from autoparts.services.production_plan_service import ProductionPlanService
from autoparts.services.purchase_order_service import PurchaseOrderService
from autoparts.services.supplier_order_service import SupplierOrderService
from autoparts.tasks import production_tasks
from tests.helpers import receive_stock


@pytest.fixture
def task_db(engine, monkeypatch):
    """Point the task module at the test engine without letting it dispose the shared pool."""
    monkeypatch.setattr(production_tasks, "async_session_maker", async_sessionmaker(engine, expire_on_commit=False))
    monkeypatch.setattr(production_tasks, "engine", MagicMock(dispose=AsyncMock()))


async def test_recheck_task_reports_ready_plans(db, bus, parts, sales_order, task_db):
    await receive_stock(db, bus, parts["oil"], 50)
    await receive_stock(db, bus, parts["air"], 5)
    plan = (await ProductionPlanService.list_production_plans(db))[0]
    await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
    await receive_stock(db, bus, parts["air"], 20)
    await receive_stock(db, bus, parts["spark"], 8)
    await db.commit()

    result = await production_tasks._recheck_async()

    assert result == {"checked": 1, "ready": [plan.plan_number]}


async def test_vendor_scan_task_counts_notifications(db, bus, parts, task_db):
    po = await PurchaseOrderService.create_purchase_order(db, 1, [{"sku_id": parts["spark"].id, "quantity_ordered": 5}])
    _, order = await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "not_available")
    await SupplierOrderService.pause_supplier_order_workflow(db, bus, order.id, "Vendor stopped shipping")
    await db.commit()

    assert await production_tasks._scan_vendors_async() == 1
