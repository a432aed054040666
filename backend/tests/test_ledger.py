"""
Inventory ledger: delta updates, the available-quantity invariant,
transaction trail and low-stock detection.
"""
import pytest

from autoparts.core.exceptions import NotFoundError, ValidationError
from autoparts.models.reorder import ReorderRequest
from autoparts.models.warehouse import Alert, InventoryTransaction, TransactionType
from autoparts.services.ledger_service import LedgerService
from autoparts.services.reorder_service import ReorderService
from tests.helpers import count_rows, receive_stock


class TestUpdateInventoryLevel:

    async def test_positive_delta_creates_record(self, db, bus, parts):
        record = await receive_stock(db, bus, parts["oil"], 50)

        assert record.quantity_on_hand == 50
        assert record.quantity_reserved == 0
        assert record.quantity_available == 50
        assert await LedgerService.get_available_quantity(db, parts["oil"].id) == 50

    async def test_available_tracks_on_hand_minus_reserved(self, db, bus, parts):
        sku = parts["oil"]
        await receive_stock(db, bus, sku, 30)
        await LedgerService.set_stock_levels(db, sku.id, 1, quantity_reserved=10)

        for delta in (5, -8, 12):
            record = await LedgerService.update_inventory_level(db, bus, sku.id, 1, delta)
            assert record.quantity_available == record.quantity_on_hand - record.quantity_reserved

        assert record.quantity_on_hand == 39
        assert record.quantity_available == 29

    async def test_overdraw_is_rejected_without_partial_write(self, db, bus, parts):
        sku = parts["air"]
        await receive_stock(db, bus, sku, 30)
        await LedgerService.set_stock_levels(db, sku.id, 1, quantity_reserved=10)

        with pytest.raises(ValidationError):
            await LedgerService.update_inventory_level(db, bus, sku.id, 1, -25, TransactionType.SHIPMENT)

        record = await LedgerService.get_record(db, sku.id, 1)
        assert record.quantity_on_hand == 30
        assert record.quantity_available == 20
        assert await count_rows(db, InventoryTransaction, InventoryTransaction.sku_id == sku.id) == 1

    async def test_negative_delta_on_missing_record(self, db, bus, parts):
        with pytest.raises(NotFoundError):
            await LedgerService.update_inventory_level(db, bus, parts["spark"].id, 1, -1)

    async def test_unknown_sku_or_zero_delta(self, db, bus, warehouse):
        with pytest.raises(NotFoundError):
            await LedgerService.update_inventory_level(db, bus, 999, warehouse.id, 5)
        with pytest.raises(ValidationError):
            await LedgerService.update_inventory_level(db, bus, 999, warehouse.id, 0)

    async def test_every_update_is_logged_and_published(self, db, bus, parts):
        sku = parts["oil"]
        await receive_stock(db, bus, sku, 20)
        await LedgerService.update_inventory_level(
            db, bus, sku.id, 1, -4, TransactionType.SHIPMENT, reference_id=77, notes="SO-77"
        )

        history = await LedgerService.get_transaction_history(db, sku_id=sku.id)
        assert [(t.transaction_type, t.quantity) for t in history] == [("shipment", -4), ("receipt", 20)]
        assert history[0].reference_id == 77

        updates = bus.get_recent("inventory-updated")
        assert (updates[-1].old_quantity, updates[-1].new_quantity) == (20, 16)

    async def test_available_quantity_sums_warehouses(self, db, bus, parts):
        from autoparts.services.catalog_service import CatalogService

        overflow = await CatalogService.create_warehouse(db, "Overflow", "OVF")
        await receive_stock(db, bus, parts["oil"], 10)
        await receive_stock(db, bus, parts["oil"], 7, warehouse_id=overflow.id)

        assert await LedgerService.get_available_quantity(db, parts["oil"].id) == 17
        assert await LedgerService.get_available_quantity(db, parts["oil"].id, 1) == 10
        assert await LedgerService.get_available_quantity(db, parts["oil"].id, overflow.id) == 7
        assert await LedgerService.get_available_quantity(db, parts["spark"].id) == 0


class TestLowStock:

    async def test_low_stock_raises_alert_and_reorder(self, db, bus, parts):
        sku = parts["oil"]
        await receive_stock(db, bus, sku, 30)
        await LedgerService.set_stock_levels(db, sku.id, 1, reorder_point=10, max_stock_level=150)

        await LedgerService.update_inventory_level(db, bus, sku.id, 1, -25, TransactionType.SHIPMENT)

        event = bus.get_recent("low-stock")[-1]
        assert event.sku_id == sku.id
        assert event.quantity_available == 5
        assert not event.is_out_of_stock

        requests = await ReorderService.list_reorder_requests(db, sku_id=sku.id)
        assert len(requests) == 1
        assert requests[0].reason == "low_stock"
        assert requests[0].quantity_requested == 145
        assert await count_rows(db, Alert, Alert.alert_type == "low_stock") == 1

    async def test_open_request_suppresses_duplicate_reorder(self, db, bus, parts):
        sku = parts["oil"]
        await receive_stock(db, bus, sku, 30)
        await LedgerService.set_stock_levels(db, sku.id, 1, reorder_point=10)

        await LedgerService.update_inventory_level(db, bus, sku.id, 1, -22)
        await LedgerService.update_inventory_level(db, bus, sku.id, 1, -3)

        assert await count_rows(db, ReorderRequest, ReorderRequest.sku_id == sku.id) == 1
        assert await count_rows(db, Alert, Alert.alert_type == "low_stock") == 2

    async def test_out_of_stock(self, db, bus, parts):
        sku = parts["spark"]
        await receive_stock(db, bus, sku, 5)
        await LedgerService.update_inventory_level(db, bus, sku.id, 1, -5, TransactionType.SHIPMENT)

        assert bus.get_recent("low-stock")[-1].is_out_of_stock
        request = (await ReorderService.list_reorder_requests(db, sku_id=sku.id))[0]
        assert (request.reason, request.priority, request.quantity_requested) == ("out_of_stock", "high", 100)

    async def test_auto_reorder_can_be_disabled(self, db, parts):
        from autoparts.config import Settings
        from autoparts.events.wiring import build_event_bus

        quiet_bus = build_event_bus(Settings(AUTO_REORDER_ENABLED=False))
        await receive_stock(db, quiet_bus, parts["spark"], 2)
        await LedgerService.update_inventory_level(db, quiet_bus, parts["spark"].id, 1, -2)

        assert await count_rows(db, ReorderRequest) == 0
        assert await count_rows(db, Alert, Alert.alert_type == "out_of_stock") == 1
