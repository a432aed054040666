"""Reorder requests: default sizing, lifecycle and approval into purchase orders."""
import re
from decimal import Decimal

import pytest

from autoparts.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from autoparts.models.purchase_order import PurchaseOrderItem
from autoparts.models.warehouse import Alert
from autoparts.services.alert_service import AlertService
from autoparts.services.ledger_service import LedgerService
from autoparts.services.purchase_order_service import PurchaseOrderService
from autoparts.services.reorder_service import ReorderService
from tests.helpers import count_rows, receive_stock


class TestCreateReorderRequest:

    async def test_default_quantity_without_record(self, db, bus, parts):
        request = await ReorderService.create_reorder_request(db, bus, parts["spark"].id, 1, "manual")

        assert request.quantity_requested == 100
        assert request.status == "pending"
        assert request.priority == "medium"

    async def test_default_quantity_tops_up_to_max(self, db, bus, parts):
        await receive_stock(db, bus, parts["oil"], 30)
        await LedgerService.set_stock_levels(db, parts["oil"].id, 1, max_stock_level=150)

        request = await ReorderService.create_reorder_request(db, bus, parts["oil"].id, 1, "low_stock")

        assert request.quantity_requested == 120

    async def test_overstocked_sku_is_rejected(self, db, bus, parts):
        await receive_stock(db, bus, parts["oil"], 120)

        with pytest.raises(ValidationError):
            await ReorderService.create_reorder_request(db, bus, parts["oil"].id, 1, "manual")

    async def test_unknown_sku_and_reason(self, db, bus, parts):
        with pytest.raises(NotFoundError):
            await ReorderService.create_reorder_request(db, bus, 999, 1, "manual")
        with pytest.raises(ValidationError):
            await ReorderService.create_reorder_request(db, bus, parts["oil"].id, 1, "whim")

    async def test_alert_severity_follows_reason(self, db, bus, parts):
        await ReorderService.create_reorder_request(db, bus, parts["spark"].id, 1, "out_of_stock", 10)
        await ReorderService.create_reorder_request(db, bus, parts["air"].id, 1, "low_stock", 10)

        alerts = await AlertService.list_alerts(db, alert_type="reorder_request")
        assert {a.title: a.severity for a in alerts} == {
            "Reorder Request: Spark Plugs": "high",
            "Reorder Request: Air Filter": "medium",
        }


class TestReorderLifecycle:

    async def test_approval_creates_one_purchase_order(self, db, bus, parts):
        request = await ReorderService.create_reorder_request(db, bus, parts["air"].id, 1, "manual", 40)

        await ReorderService.update_reorder_request_status(db, bus, request.id, "approved", approved_by=7)

        pos = await PurchaseOrderService.list_purchase_orders(db, reorder_request_id=request.id)
        assert len(pos) == 1
        po = pos[0]
        assert re.fullmatch(r"PO-\d{4}-\d{4}", po.order_number)
        assert po.vendor_id == parts["air"].vendor_id
        assert len(po.items) == 1
        item = po.items[0]
        assert item.quantity_ordered == 40
        assert item.warehouse_status == "not_checked"
        assert item.unit_cost == Decimal("14.00")
        assert po.total_amount == Decimal("560.00")
        assert request.approved_by == 7

    async def test_approval_uses_default_cost(self, db, bus, parts):
        request = await ReorderService.create_reorder_request(db, bus, parts["spark"].id, 1, "manual", 4)
        await ReorderService.update_reorder_request_status(db, bus, request.id, "approved")

        po = (await PurchaseOrderService.list_purchase_orders(db, reorder_request_id=request.id))[0]
        assert po.items[0].unit_cost == Decimal("25.00")

    async def test_double_approval_is_rejected(self, db, bus, parts):
        request = await ReorderService.create_reorder_request(db, bus, parts["air"].id, 1, "manual", 40)
        await ReorderService.update_reorder_request_status(db, bus, request.id, "approved")

        with pytest.raises(InvalidTransitionError):
            await ReorderService.update_reorder_request_status(db, bus, request.id, "approved")
        assert await count_rows(db, PurchaseOrderItem) == 1

    @pytest.mark.parametrize(
        "path",
        [
            ["approved", "ordered", "cancelled"],
            ["approved", "cancelled"],
            ["cancelled"],
        ],
    )
    async def test_allowed_paths(self, db, bus, parts, path):
        request = await ReorderService.create_reorder_request(db, bus, parts["oil"].id, 1, "manual", 5)
        for status in path:
            request = await ReorderService.update_reorder_request_status(db, bus, request.id, status)
        assert request.status == path[-1]

    async def test_pending_cannot_jump_to_ordered(self, db, bus, parts):
        request = await ReorderService.create_reorder_request(db, bus, parts["oil"].id, 1, "manual", 5)

        with pytest.raises(InvalidTransitionError):
            await ReorderService.update_reorder_request_status(db, bus, request.id, "ordered")
        assert (await ReorderService.get_reorder_request(db, request.id)).status == "pending"

    async def test_creation_persists_alert(self, db, bus, parts):
        await ReorderService.create_reorder_request(db, bus, parts["oil"].id, 1, "manual", 5)
        assert await count_rows(db, Alert) == 1
