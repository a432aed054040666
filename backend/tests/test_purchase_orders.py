"""Purchase orders: warehouse checks, escalation to supplier orders, receipt and cancellation."""
from datetime import timedelta

import pytest

from autoparts.core.exceptions import InvalidTransitionError, ValidationError
from autoparts.db.base import today
from autoparts.models.supplier_order import SupplierOrder
from autoparts.services.ledger_service import LedgerService
from autoparts.services.purchase_order_service import PurchaseOrderService
from tests.helpers import count_rows


@pytest.fixture
async def po(db, parts):
    return await PurchaseOrderService.create_purchase_order(
        db, 1, [{"sku_id": parts["air"].id, "quantity_ordered": 40}]
    )


class TestCreatePurchaseOrder:

    async def test_defaults(self, db, po):
        assert po.status == "pending"
        assert po.order_date == today()
        assert po.expected_delivery_date == today() + timedelta(days=7)
        assert po.order_number.endswith(f"-{po.id:04d}")

    async def test_ids_increase(self, db, parts, po):
        second = await PurchaseOrderService.create_purchase_order(
            db, 1, [{"sku_id": parts["oil"].id, "quantity_ordered": 1}]
        )
        assert second.id > po.id
        assert second.items[0].id > po.items[0].id

    async def test_rejects_empty_or_non_positive(self, db, parts, warehouse):
        with pytest.raises(ValidationError):
            await PurchaseOrderService.create_purchase_order(db, 1, [])
        with pytest.raises(ValidationError):
            await PurchaseOrderService.create_purchase_order(
                db, 1, [{"sku_id": parts["oil"].id, "quantity_ordered": 0}]
            )


class TestWarehouseCheck:

    async def test_not_available_escalates(self, db, bus, parts, po):
        item = po.items[0]

        item, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
            db, bus, item.id, "not_available", checker_id=3
        )

        assert item.warehouse_status == "new_order_required"
        assert await count_rows(db, SupplierOrder) == 1
        assert supplier_order.purchase_order_item_id == item.id
        assert supplier_order.workflow_status == "active"
        assert supplier_order.status == "pending"
        assert supplier_order.quantity_ordered == 40
        assert supplier_order.supplier_id == parts["air"].vendor_id
        assert supplier_order.expected_delivery_date == today() + timedelta(days=5)
        assert supplier_order.order_number.startswith("SUP-")

        checks = await PurchaseOrderService.list_warehouse_checks(db, item_id=item.id)
        assert [(c.status, c.quantity_found, c.checker_id) for c in checks] == [("not_available", 0, 3)]

    async def test_partial_available_books_found_units_and_orders_the_remainder(self, db, bus, parts, po):
        item, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
            db, bus, po.items[0].id, "partial_available", 15, location="A-12"
        )

        assert item.warehouse_status == "new_order_required"
        assert supplier_order.quantity_ordered == 25
        assert item.quantity_received == 15
        assert po.status == "partial"
        assert (await LedgerService.get_record(db, parts["air"].id, 1)).quantity_on_hand == 15
        material = bus.get_recent("material-available")[-1]
        assert (material.sku_id, material.quantity_added) == (parts["air"].id, 15)

    async def test_partial_available_after_a_receipt_uses_the_outstanding_quantity(self, db, bus, po):
        await PurchaseOrderService.receive_purchase_order_item(db, bus, po.items[0].id, 10)

        with pytest.raises(ValidationError):
            await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "partial_available", 30)
        _, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
            db, bus, po.items[0].id, "partial_available", 20
        )

        assert supplier_order.quantity_ordered == 10

    async def test_in_warehouse_settles_the_item(self, db, bus, parts):
        po = await PurchaseOrderService.create_purchase_order(
            db, 1, [{"sku_id": parts["air"].id, "quantity_ordered": 40}], dedup_key="plan:7:sku:2"
        )
        item, supplier_order = await PurchaseOrderService.check_item_in_warehouse(
            db, bus, po.items[0].id, "in_warehouse"
        )

        assert item.warehouse_status == "in_warehouse"
        assert supplier_order is None
        assert item.quantity_received == 40
        assert po.status == "received"
        assert po.dedup_key is None
        assert (await LedgerService.get_record(db, parts["air"].id, 1)).quantity_on_hand == 40
        assert await count_rows(db, SupplierOrder) == 0
        with pytest.raises(InvalidTransitionError):
            await PurchaseOrderService.check_item_in_warehouse(db, bus, item.id, "not_available")

    async def test_only_check_outcomes_are_accepted(self, db, bus, po):
        with pytest.raises(ValidationError):
            await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "new_order_required")
        with pytest.raises(ValidationError):
            await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "partial_available", 40)
        with pytest.raises(ValidationError):
            await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "in_warehouse", 10)

    async def test_closed_orders_cannot_be_checked(self, db, bus, po):
        await PurchaseOrderService.cancel_purchase_order(db, bus, po.id)

        with pytest.raises(InvalidTransitionError):
            await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "in_warehouse")

    async def test_supplier_falls_back_to_default(self, db, bus, warehouse):
        from autoparts.services.catalog_service import CatalogService

        orphan = await CatalogService.create_sku(db, "WB-001", "Wiper Blades")
        po = await PurchaseOrderService.create_purchase_order(db, 1, [{"sku_id": orphan.id, "quantity_ordered": 3}])

        _, supplier_order = await PurchaseOrderService.check_item_in_warehouse(db, bus, po.items[0].id, "not_available")

        assert supplier_order.supplier_id == 1
        assert supplier_order.is_regular_supplier is False


class TestReceiveAndCancel:

    async def test_partial_then_full_receipt(self, db, bus, parts, po):
        item = po.items[0]

        po = await PurchaseOrderService.receive_purchase_order_item(db, bus, item.id, 15)
        assert po.status == "partial"
        assert (await LedgerService.get_record(db, parts["air"].id, 1)).quantity_on_hand == 15

        po = await PurchaseOrderService.receive_purchase_order_item(db, bus, item.id, 25)
        assert po.status == "received"
        assert item.quantity_received == 40

        material = bus.get_recent("material-available")[-1]
        assert (material.sku_id, material.quantity_added, material.item_code) == (parts["air"].id, 25, "AF-001")

        with pytest.raises(InvalidTransitionError):
            await PurchaseOrderService.receive_purchase_order_item(db, bus, item.id, 1)

    async def test_over_receipt_is_rejected(self, db, bus, po):
        with pytest.raises(ValidationError):
            await PurchaseOrderService.receive_purchase_order_item(db, bus, po.items[0].id, 41)

    async def test_cancel(self, db, bus, po):
        await PurchaseOrderService.send_purchase_order(db, bus, po.id)
        po = await PurchaseOrderService.cancel_purchase_order(db, bus, po.id)

        assert po.status == "cancelled"
        with pytest.raises(InvalidTransitionError):
            await PurchaseOrderService.cancel_purchase_order(db, bus, po.id)
