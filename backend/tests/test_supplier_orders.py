"""Supplier orders: forward-only fulfillment, receipt into stock and the pause/resume gate."""
import pytest

from autoparts.core.exceptions import InvalidTransitionError, ValidationError
from autoparts.db.base import today
from autoparts.services.ledger_service import LedgerService
from autoparts.services.purchase_order_service import PurchaseOrderService
from autoparts.services.supplier_order_service import SupplierOrderService


@pytest.fixture
async def escalated(db, bus, parts):
    """A 40 x Air Filter PO item that the warehouse could not fill."""
    po = await PurchaseOrderService.create_purchase_order(
        db, 1, [{"sku_id": parts["air"].id, "quantity_ordered": 40}]
    )
    item, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
        db, bus, po.items[0].id, "not_available"
    )
    return po, item, supplier_order


class TestFulfillment:

    async def test_full_path_receives_into_default_warehouse(self, db, bus, parts, escalated):
        po, item, order = escalated
        for status in ("sent", "confirmed", "in_transit"):
            order = await SupplierOrderService.update_supplier_order_status(db, bus, order.id, status)

        order = await SupplierOrderService.update_supplier_order_status(
            db, bus, order.id, "received", tracking_number="1Z999"
        )

        assert order.status == "received"
        assert order.workflow_status == "resumed"
        assert order.actual_delivery_date == today()
        assert order.tracking_number == "1Z999"
        record = await LedgerService.get_record(db, parts["air"].id, 1)
        assert record.quantity_on_hand == 40
        assert item.quantity_received == 40
        assert po.status == "received"

        material = bus.get_recent("material-available")
        assert [(m.sku_id, m.quantity_added) for m in material] == [(parts["air"].id, 40)]

    async def test_steps_may_be_skipped(self, db, bus, escalated):
        _, _, order = escalated

        order = await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "in_transit")

        assert order.status == "in_transit"

    async def test_partial_remainder_completes_partly_found_item(self, db, bus, parts):
        po = await PurchaseOrderService.create_purchase_order(
            db, 1, [{"sku_id": parts["air"].id, "quantity_ordered": 40}], dedup_key="plan:4:sku:2"
        )
        item, order = await PurchaseOrderService.check_item_in_warehouse(
            db, bus, po.items[0].id, "partial_available", 15
        )
        assert po.status == "partial"

        await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "received")

        assert item.quantity_received == 40
        assert po.status == "received"
        assert po.dedup_key is None
        assert (await LedgerService.get_record(db, parts["air"].id, 1)).quantity_on_hand == 40

    async def test_cancellation_releases_the_dedup_key(self, db, bus, parts):
        po = await PurchaseOrderService.create_purchase_order(
            db, 1, [{"sku_id": parts["spark"].id, "quantity_ordered": 8}], dedup_key="plan:4:sku:3"
        )
        _, order = await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "not_available")

        await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "cancelled")

        assert po.dedup_key is None
        assert po.status == "pending"

    @pytest.mark.parametrize("backwards", ["pending", "sent"])
    async def test_backwards_moves_are_rejected(self, db, bus, escalated, backwards):
        _, _, order = escalated
        await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "confirmed")

        with pytest.raises(InvalidTransitionError):
            await SupplierOrderService.update_supplier_order_status(db, bus, order.id, backwards)

    async def test_terminal_states_are_final(self, db, bus, escalated):
        _, _, order = escalated
        await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "cancelled")

        with pytest.raises(InvalidTransitionError):
            await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "received")
        with pytest.raises(InvalidTransitionError):
            await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "cancelled")

    async def test_unknown_status(self, db, bus, escalated):
        _, _, order = escalated
        with pytest.raises(ValidationError):
            await SupplierOrderService.update_supplier_order_status(db, bus, order.id, "lost")


class TestPauseResume:

    async def test_pause_then_resume(self, db, bus, escalated):
        _, _, order = escalated

        order = await SupplierOrderService.pause_supplier_order_workflow(db, bus, order.id, "  Vendor unavailable ")
        assert order.workflow_status == "paused"
        assert order.pause_reason == "Vendor unavailable"

        order = await SupplierOrderService.resume_supplier_order_workflow(db, bus, order.id, "Stock confirmed")
        assert order.workflow_status == "active"
        assert order.pause_reason is None
        assert order.resume_reason == "Stock confirmed"

    async def test_pause_requires_reason(self, db, bus, escalated):
        _, _, order = escalated
        with pytest.raises(ValidationError):
            await SupplierOrderService.pause_supplier_order_workflow(db, bus, order.id, "   ")

    async def test_resume_requires_paused(self, db, bus, escalated):
        _, _, order = escalated
        with pytest.raises(InvalidTransitionError):
            await SupplierOrderService.resume_supplier_order_workflow(db, bus, order.id)

    async def test_list_by_workflow_status(self, db, bus, escalated):
        _, _, order = escalated
        await SupplierOrderService.pause_supplier_order_workflow(db, bus, order.id, "Supplier issue")

        paused = await SupplierOrderService.list_supplier_orders(db, workflow_status="paused")
        active = await SupplierOrderService.list_supplier_orders(db, workflow_status="active")

        assert [o.id for o in paused] == [order.id]
        assert active == []
