"""
Production planning: verification against stock, shortage purchase orders,
re-verification on material receipt and the plan/kit production lifecycle.
"""
import pytest
from sqlalchemy import select

from autoparts.core.exceptions import InvalidTransitionError, NotFoundError, StorageError, ValidationError
from autoparts.models.production import KitProductionOrder, ProductionPlan
from autoparts.models.purchase_order import PurchaseOrder
from autoparts.services.bom_service import BOMService
from autoparts.services.catalog_service import CatalogService
from autoparts.services.kit_production_service import KitProductionService
from autoparts.services.ledger_service import LedgerService
from autoparts.services.production_plan_service import ProductionPlanService, purchase_order_dedup_key
from autoparts.services.purchase_order_service import PurchaseOrderService
from autoparts.services.sales_order_service import SalesOrderService
from autoparts.services.supplier_order_service import SupplierOrderService
from tests.helpers import count_rows, receive_stock


async def plan_for(db, sales_order) -> ProductionPlan:
    return await db.scalar(select(ProductionPlan).where(ProductionPlan.sales_order_id == sales_order.id))


async def shortage_pos(db, plan) -> dict[int, int]:
    """{sku_id: quantity_ordered} of the plan's purchase orders."""
    pos = await PurchaseOrderService.list_purchase_orders(db, production_plan_id=plan.id)
    return {po.items[0].sku_id: po.items[0].quantity_ordered for po in pos}


@pytest.fixture
async def short_stock(db, bus, parts):
    """Oil 50 (need 12), Air 5 (need 25), Spark 0 (need 8)."""
    await receive_stock(db, bus, parts["oil"], 50)
    await receive_stock(db, bus, parts["air"], 5)


@pytest.fixture
async def full_stock(db, bus, parts):
    await receive_stock(db, bus, parts["oil"], 50)
    await receive_stock(db, bus, parts["air"], 25)
    await receive_stock(db, bus, parts["spark"], 8)


# ============================================================================
# Verification
# ============================================================================

class TestVerifyInventory:

    async def test_shortages_raise_purchase_orders(self, db, bus, parts, sales_order, short_stock):
        plan = await plan_for(db, sales_order)

        result = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        assert result.previous_status == "pending_verification"
        assert result.status == "awaiting_materials"
        assert plan.status == "awaiting_materials"
        assert not result.all_sufficient
        assert await shortage_pos(db, plan) == {parts["air"].id: 20, parts["spark"].id: 8}
        assert plan.purchase_orders_generated is True
        assert plan.purchase_orders_count == 2
        assert plan.last_verified_at is not None

        by_code = {c["sku_code"]: c for c in plan.inventory_check}
        assert by_code["OF-001"]["sufficient"] is True
        assert (by_code["AF-001"]["available"], by_code["AF-001"]["shortage"]) == (5, 20)
        assert (by_code["SP-001"]["required"], by_code["SP-001"]["shortage"]) == (8, 8)

        notice = bus.get_recent("notification")[-1]
        assert notice.title == "Awaiting materials"
        assert notice.entity_id == plan.id

    async def test_shortage_po_details(self, db, bus, parts, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        po = await db.scalar(
            select(PurchaseOrder).where(PurchaseOrder.dedup_key == purchase_order_dedup_key(plan.id, parts["spark"].id))
        )
        assert po.vendor_id == parts["spark"].vendor_id
        assert po.production_plan_id == plan.id
        assert po.warehouse_id == 1
        assert po.status == "pending"
        assert plan.plan_number in po.notes
        assert "SP-001" in po.notes

    async def test_all_sufficient_is_ready_without_orders(self, db, bus, sales_order, full_stock):
        plan = await plan_for(db, sales_order)

        result = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        assert result.status == "production_ready"
        assert result.all_sufficient
        assert result.purchase_order_ids == []
        assert plan.purchase_orders_generated is False
        assert await count_rows(db, PurchaseOrder) == 0
        assert bus.get_recent("notification")[-1].title == "Production ready"

    async def test_order_quantity_scales_requirement(self, db, bus, parts, service_bom, short_stock):
        order = await SalesOrderService.create_sales_order(db, "Fleet Services", service_bom.id, 3)
        plan = await plan_for(db, order)

        result = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        assert result.order_quantity == 3
        assert await shortage_pos(db, plan) == {parts["air"].id: 70, parts["spark"].id: 24}

    async def test_reverify_reuses_open_orders(self, db, bus, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        first = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        second = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        assert second.purchase_order_ids == []
        assert sorted(second.existing_purchase_order_ids) == sorted(first.purchase_order_ids)
        assert await count_rows(db, PurchaseOrder) == 2
        assert plan.purchase_orders_count == 2

    async def test_cancelled_order_is_replaced(self, db, bus, parts, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        first = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        for po_id in first.purchase_order_ids:
            po = await PurchaseOrderService.get_purchase_order(db, po_id)
            if po.items[0].sku_id == parts["spark"].id:
                await PurchaseOrderService.cancel_purchase_order(db, bus, po.id)

        second = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        assert len(second.purchase_order_ids) == 1
        assert plan.purchase_orders_count == 3

    async def test_failed_purchase_order_becomes_warning(self, db, bus, parts, sales_order, short_stock, monkeypatch):
        original = PurchaseOrderService.create_purchase_order

        async def flaky_create(db, warehouse_id, items, **kwargs):
            if items[0]["sku_id"] == parts["spark"].id:
                raise StorageError("disk full")
            return await original(db, warehouse_id, items, **kwargs)

        monkeypatch.setattr(PurchaseOrderService, "create_purchase_order", staticmethod(flaky_create))
        plan = await plan_for(db, sales_order)

        result = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        assert result.status == "awaiting_materials"
        assert len(result.purchase_order_ids) == 1
        assert len(result.warnings) == 1
        assert "SP-001" in result.warnings[0]
        assert await shortage_pos(db, plan) == {parts["air"].id: 20}
        assert plan.purchase_orders_count == 1
        notice = bus.get_recent("notification")[-1]
        assert notice.severity == "warning"
        assert "failed" in notice.message

    async def test_unknown_plan(self, db, bus):
        with pytest.raises(NotFoundError):
            await ProductionPlanService.verify_inventory_for_production(db, bus, 404)


# ============================================================================
# Re-verification on material receipt
# ============================================================================

class TestRecheckOnMaterial:

    async def test_receipts_move_plan_to_ready(self, db, bus, parts, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        pos = await PurchaseOrderService.list_purchase_orders(db, production_plan_id=plan.id)
        items = {po.items[0].sku_id: po.items[0] for po in pos}
        bus.clear_recent()

        await PurchaseOrderService.receive_purchase_order_item(db, bus, items[parts["air"].id].id, 20)
        assert plan.status == "awaiting_materials"
        assert bus.get_recent("notification") == []

        await PurchaseOrderService.receive_purchase_order_item(db, bus, items[parts["spark"].id].id, 8)

        assert plan.status == "production_ready"
        assert [n.title for n in bus.get_recent("notification")] == ["Production ready"]
        assert await count_rows(db, PurchaseOrder) == 2

    async def test_recheck_skips_other_statuses(self, db, bus, sales_order, full_stock):
        plan = await plan_for(db, sales_order)

        results = await ProductionPlanService.recheck_awaiting_materials_plans(db, bus)

        assert results == []
        assert plan.status == "pending_verification"

    async def test_recheck_is_silent_while_still_short(self, db, bus, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        bus.clear_recent()

        results = await ProductionPlanService.recheck_awaiting_materials_plans(db, bus)

        assert [r.plan_id for r in results] == [plan.id]
        assert bus.get_recent("notification") == []


# ============================================================================
# Shortage orders that go through a warehouse check
# ============================================================================

class TestEscalatedShortages:

    async def test_checked_and_escalated_orders_make_plan_ready(self, db, bus, parts, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        pos = {
            po.items[0].sku_id: po
            for po in await PurchaseOrderService.list_purchase_orders(db, production_plan_id=plan.id)
        }
        spark_po, air_po = pos[parts["spark"].id], pos[parts["air"].id]

        _, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
            db, bus, spark_po.items[0].id, "partial_available", 3
        )
        assert supplier_order.quantity_ordered == 5
        await SupplierOrderService.update_supplier_order_status(db, bus, supplier_order.id, "received")

        assert spark_po.status == "received"
        assert spark_po.items[0].quantity_received == 8
        assert spark_po.dedup_key is None
        assert plan.status == "awaiting_materials"

        await PurchaseOrderService.check_item_in_warehouse(db, bus, air_po.items[0].id, "in_warehouse")

        assert air_po.status == "received"
        assert air_po.dedup_key is None
        assert plan.status == "production_ready"
        assert await LedgerService.get_available_quantity(db, parts["spark"].id, 1) == 8
        assert await LedgerService.get_available_quantity(db, parts["air"].id, 1) == 25
        assert await count_rows(db, PurchaseOrder) == 2

    async def test_cancelled_escalation_lets_plan_reorder(self, db, bus, parts, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        spark_po = next(
            po for po in await PurchaseOrderService.list_purchase_orders(db, production_plan_id=plan.id)
            if po.items[0].sku_id == parts["spark"].id
        )
        _, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
            db, bus, spark_po.items[0].id, "not_available"
        )

        await SupplierOrderService.update_supplier_order_status(db, bus, supplier_order.id, "cancelled")
        assert spark_po.dedup_key is None

        results = await ProductionPlanService.recheck_awaiting_materials_plans(db, bus)

        assert len(results[0].purchase_order_ids) == 1
        replacement = await PurchaseOrderService.get_purchase_order(db, results[0].purchase_order_ids[0])
        assert replacement.dedup_key == purchase_order_dedup_key(plan.id, parts["spark"].id)
        assert replacement.items[0].quantity_ordered == 8


# ============================================================================
# Production warehouse
# ============================================================================

class TestProductionWarehouse:

    async def test_stock_at_other_warehouses_is_not_counted(self, db, bus, parts, sales_order):
        depot = await CatalogService.create_warehouse(db, "North Depot", "NORTH")
        for name, quantity in (("oil", 50), ("air", 25), ("spark", 8)):
            await receive_stock(db, bus, parts[name], quantity, warehouse_id=depot.id)
        plan = await plan_for(db, sales_order)

        result = await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        assert result.status == "awaiting_materials"
        assert {c.sku_code: c.available for c in result.components} == {"OF-001": 0, "AF-001": 0, "SP-001": 0}
        assert await shortage_pos(db, plan) == {parts["oil"].id: 12, parts["air"].id: 25, parts["spark"].id: 8}
        with pytest.raises(InvalidTransitionError):
            await ProductionPlanService.start_production(db, bus, plan.id)

    async def test_production_consumes_default_warehouse_only(self, db, bus, parts, kit, sales_order, full_stock):
        depot = await CatalogService.create_warehouse(db, "North Depot", "NORTH")
        await receive_stock(db, bus, parts["oil"], 30, warehouse_id=depot.id)
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        await ProductionPlanService.start_production(db, bus, plan.id)
        order = await KitProductionService.get_kit_production_order(db, plan.production_order_id)
        assert order.warehouse_id == 1

        await KitProductionService.start_kit_production(db, bus, order.id)
        await KitProductionService.complete_kit_production(db, bus, order.id)

        assert plan.status == "completed"
        assert (await LedgerService.get_record(db, parts["oil"].id, 1)).quantity_on_hand == 38
        assert (await LedgerService.get_record(db, parts["oil"].id, depot.id)).quantity_on_hand == 30
        assert (await LedgerService.get_record(db, kit.id, 1)).quantity_on_hand == 1


# ============================================================================
# Lifecycle
# ============================================================================

class TestPlanLifecycle:

    async def test_start_requires_ready(self, db, bus, sales_order, short_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        with pytest.raises(InvalidTransitionError):
            await ProductionPlanService.start_production(db, bus, plan.id)

        assert plan.status == "awaiting_materials"
        assert plan.production_order_id is None
        assert await count_rows(db, KitProductionOrder) == 0

    async def test_start_creates_kit_production_order(self, db, bus, service_bom, sales_order, full_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)

        await ProductionPlanService.start_production(db, bus, plan.id)

        assert plan.status == "in_production"
        order = await KitProductionService.get_kit_production_order(db, plan.production_order_id)
        assert order.status == "planned"
        assert order.bom_template_id == service_bom.id
        assert order.quantity_planned == 1
        assert order.order_number.startswith("KPO-")

    async def test_plan_is_locked_once_in_production(self, db, bus, sales_order, full_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        await ProductionPlanService.start_production(db, bus, plan.id)

        with pytest.raises(InvalidTransitionError):
            await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        results = await ProductionPlanService.recheck_awaiting_materials_plans(db, bus)

        assert results == []
        assert plan.status == "in_production"

    async def test_completing_kit_production_completes_plan(self, db, bus, parts, kit, sales_order, full_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        await ProductionPlanService.start_production(db, bus, plan.id)
        await KitProductionService.start_kit_production(db, bus, plan.production_order_id)

        order = await KitProductionService.complete_kit_production(db, bus, plan.production_order_id)

        assert order.status == "completed"
        assert order.quantity_completed == 1
        assert plan.status == "completed"
        assert (await LedgerService.get_record(db, parts["oil"].id, 1)).quantity_on_hand == 38
        assert (await LedgerService.get_record(db, parts["air"].id, 1)).quantity_on_hand == 0
        assert (await LedgerService.get_record(db, kit.id, 1)).quantity_on_hand == 1

    async def test_cancelled_kit_order_leaves_plan_in_production(self, db, bus, sales_order, full_stock):
        plan = await plan_for(db, sales_order)
        await ProductionPlanService.verify_inventory_for_production(db, bus, plan.id)
        await ProductionPlanService.start_production(db, bus, plan.id)

        await KitProductionService.cancel_kit_production(db, bus, plan.production_order_id)

        assert plan.status == "in_production"


class TestKitProduction:

    async def test_cost_rollup(self, db, service_bom):
        # 12 x 8.50 + 25 x 14.00 + 8 x 25.00 = 652.00 per kit
        order = await KitProductionService.create_kit_production_order(db, service_bom.id, 2)

        assert order.total_material_cost == 1304
        assert order.total_cost == 1304

    async def test_completion_without_stock_is_atomic(self, db, bus, parts, kit, service_bom):
        await receive_stock(db, bus, parts["oil"], 50)
        order = await KitProductionService.create_kit_production_order(db, service_bom.id, 1)
        await KitProductionService.start_kit_production(db, bus, order.id)

        with pytest.raises(NotFoundError):
            await KitProductionService.complete_kit_production(db, bus, order.id)

        assert (await LedgerService.get_record(db, parts["oil"].id, 1)).quantity_on_hand == 50
        assert await LedgerService.get_record(db, kit.id, 1) is None

    async def test_transitions(self, db, bus, service_bom):
        order = await KitProductionService.create_kit_production_order(db, service_bom.id, 1)

        with pytest.raises(InvalidTransitionError):
            await KitProductionService.complete_kit_production(db, bus, order.id)
        await KitProductionService.start_kit_production(db, bus, order.id)
        await KitProductionService.hold_kit_production(db, bus, order.id)
        order = await KitProductionService.start_kit_production(db, bus, order.id)

        assert order.status == "in_progress"
        with pytest.raises(ValidationError):
            await KitProductionService.create_kit_production_order(db, service_bom.id, 0)


# ============================================================================
# Plan creation and stats
# ============================================================================

class TestPlanSync:

    async def test_sales_order_creates_one_plan(self, db, sales_order):
        plan = await plan_for(db, sales_order)

        assert plan.status == "pending_verification"
        assert plan.plan_number.startswith("PP-")
        assert plan.plan_number.endswith(f"-{sales_order.id}")

    async def test_sync_is_find_or_create(self, db, service_bom, sales_order):
        walk_in = await SalesOrderService.create_sales_order(db, "Walk-in", production_required=False)

        first = await ProductionPlanService.sync_production_plans(db)
        second = await ProductionPlanService.sync_production_plans(db)

        assert [p.id for p in first] == [p.id for p in second]
        assert len(first) == 1
        assert await count_rows(db, ProductionPlan) == 1
        assert await plan_for(db, walk_in) is None

    async def test_inactive_template_is_rejected(self, db, service_bom):
        await BOMService.archive_bom_template(db, service_bom.id)

        with pytest.raises(ValidationError):
            await SalesOrderService.create_sales_order(db, "Fleet Services", service_bom.id, 1)
        assert await count_rows(db, ProductionPlan) == 0

    async def test_stats(self, db, bus, service_bom, sales_order, short_stock):
        await SalesOrderService.create_sales_order(db, "Fleet Services", service_bom.id, 1)
        await ProductionPlanService.verify_inventory_for_production(db, bus, (await plan_for(db, sales_order)).id)

        stats = await ProductionPlanService.get_plan_stats(db)

        assert stats.total == 2
        assert stats.active == 2
        assert stats.awaiting_materials == 1
        assert stats.pending_verification == 1
        assert stats.completed == 0
