"""AutoParts ERP: PurchaseOrderService, create, list, receive, cancel and warehouse checks."""
import logging
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import get_settings
from autoparts.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from autoparts.db.base import today
from autoparts.events import EventBus, InventoryRefresh, MaterialAvailable, OrdersRefresh
from autoparts.models.purchase_order import (
    POStatus,
    PurchaseOrder,
    PurchaseOrderItem,
    WarehouseCheck,
    WarehouseStatus,
)
from autoparts.models.sku import SKU
from autoparts.models.supplier_order import SupplierOrder
from autoparts.models.warehouse import TransactionType, Warehouse
from autoparts.services.ledger_service import LedgerService
from autoparts.services.numbering import yearly_number

logger = logging.getLogger(__name__)

OPEN_PO_STATUSES = (POStatus.PENDING.value, POStatus.SENT.value, POStatus.PARTIAL.value)

# Outcomes a checker may record; new_order_required is set by escalation only.
CHECK_OUTCOMES = (
    WarehouseStatus.IN_WAREHOUSE,
    WarehouseStatus.NOT_AVAILABLE,
    WarehouseStatus.PARTIAL_AVAILABLE,
)


def recompute_po_status(po: PurchaseOrder) -> None:
    """Derive partial/received from item receipts. Received orders drop their dedup key."""
    if po.status == POStatus.CANCELLED.value:
        return
    if all(item.quantity_received >= item.quantity_ordered for item in po.items):
        po.status = POStatus.RECEIVED.value
        po.dedup_key = None
    elif any(item.quantity_received > 0 for item in po.items):
        po.status = POStatus.PARTIAL.value


class PurchaseOrderService:
    """CRUD + business logic for Purchase Orders and their warehouse checks."""

    @staticmethod
    async def create_purchase_order(
        db: AsyncSession,
        warehouse_id: int,
        items: list[dict],
        *,
        vendor_id: int | None = None,
        reorder_request_id: int | None = None,
        production_plan_id: int | None = None,
        notes: str | None = None,
        dedup_key: str | None = None,
        expected_delivery_date=None,
    ) -> PurchaseOrder:
        """Create a pending PO with its items. Items: {sku_id, quantity_ordered, unit_cost?, notes?}."""
        settings = get_settings()
        if not items:
            raise ValidationError("Purchase order requires at least one item")
        if await db.get(Warehouse, warehouse_id) is None:
            raise NotFoundError("Warehouse", warehouse_id)

        po_items = []
        total = Decimal("0")
        for item_data in items:
            quantity = int(item_data["quantity_ordered"])
            if quantity <= 0:
                raise ValidationError("quantity_ordered must be positive")
            sku = await db.get(SKU, item_data["sku_id"])
            if sku is None:
                raise NotFoundError("SKU", item_data["sku_id"])
            unit_cost = item_data.get("unit_cost")
            if unit_cost is None:
                unit_cost = sku.unit_cost or settings.DEFAULT_UNIT_COST
            unit_cost = Decimal(str(unit_cost))
            line_total = unit_cost * quantity
            total += line_total
            po_items.append(
                PurchaseOrderItem(
                    sku_id=sku.id,
                    quantity_ordered=quantity,
                    quantity_received=0,
                    unit_cost=unit_cost,
                    line_total=line_total,
                    warehouse_status=WarehouseStatus.NOT_CHECKED.value,
                    notes=item_data.get("notes"),
                )
            )

        order_date = today()
        po = PurchaseOrder(
            vendor_id=vendor_id,
            warehouse_id=warehouse_id,
            reorder_request_id=reorder_request_id,
            production_plan_id=production_plan_id,
            status=POStatus.PENDING.value,
            order_date=order_date,
            expected_delivery_date=expected_delivery_date
            or order_date + timedelta(days=settings.PURCHASE_ORDER_LEAD_TIME_DAYS),
            total_amount=total,
            notes=notes,
            dedup_key=dedup_key,
            items=po_items,
        )
        db.add(po)
        await db.flush()
        po.order_number = yearly_number("PO", po.id, order_date)
        await db.flush()
        logger.info("Created purchase order %s with %d item(s)", po.order_number, len(po_items))
        return po

    @staticmethod
    async def get_purchase_order(db: AsyncSession, po_id: int) -> PurchaseOrder:
        po = await db.scalar(select(PurchaseOrder).where(PurchaseOrder.id == po_id))
        if po is None:
            raise NotFoundError("PurchaseOrder", po_id)
        return po

    @staticmethod
    async def list_purchase_orders(
        db: AsyncSession,
        status: str | None = None,
        *,
        production_plan_id: int | None = None,
        reorder_request_id: int | None = None,
    ) -> list[PurchaseOrder]:
        q = select(PurchaseOrder)
        if status:
            q = q.where(PurchaseOrder.status == status)
        if production_plan_id is not None:
            q = q.where(PurchaseOrder.production_plan_id == production_plan_id)
        if reorder_request_id is not None:
            q = q.where(PurchaseOrder.reorder_request_id == reorder_request_id)
        result = await db.execute(q.order_by(PurchaseOrder.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_item(db: AsyncSession, item_id: int) -> PurchaseOrderItem:
        item = await db.get(PurchaseOrderItem, item_id)
        if item is None:
            raise NotFoundError("PurchaseOrderItem", item_id)
        return item

    @staticmethod
    async def list_purchase_order_items(
        db: AsyncSession,
        warehouse_status: str | None = None,
        purchase_order_id: int | None = None,
    ) -> list[PurchaseOrderItem]:
        q = select(PurchaseOrderItem)
        if warehouse_status:
            q = q.where(PurchaseOrderItem.warehouse_status == warehouse_status)
        if purchase_order_id is not None:
            q = q.where(PurchaseOrderItem.purchase_order_id == purchase_order_id)
        result = await db.execute(q.order_by(PurchaseOrderItem.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def list_warehouse_checks(db: AsyncSession, item_id: int | None = None) -> list[WarehouseCheck]:
        q = select(WarehouseCheck)
        if item_id is not None:
            q = q.where(WarehouseCheck.purchase_order_item_id == item_id)
        result = await db.execute(q.order_by(WarehouseCheck.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def check_item_in_warehouse(
        db: AsyncSession,
        bus: EventBus,
        item_id: int,
        status: WarehouseStatus | str,
        quantity_found: int = 0,
        *,
        location: str | None = None,
        notes: str | None = None,
        checker_id: int | None = None,
    ) -> tuple[PurchaseOrderItem, SupplierOrder | None]:
        """
        Record a manual warehouse check for a PO item.
        - in_warehouse: the outstanding quantity is found on the shelf and
          booked against the item, which settles it.
        - not_available: a supplier order is raised for the outstanding quantity.
        - partial_available: the found units are booked against the item and a
          supplier order is raised for the missing remainder.
        Escalated items end in new_order_required.
        """
        from autoparts.services.supplier_order_service import SupplierOrderService

        try:
            status = WarehouseStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown warehouse status: {status}")
        if status not in CHECK_OUTCOMES:
            raise ValidationError(f"'{status.value}' is not a warehouse check outcome")

        item = await PurchaseOrderService.get_item(db, item_id)
        if item.warehouse_status != WarehouseStatus.NOT_CHECKED.value:
            raise InvalidTransitionError("PurchaseOrderItem", item.warehouse_status, status.value)
        po = await PurchaseOrderService.get_purchase_order(db, item.purchase_order_id)
        if po.status in (POStatus.RECEIVED.value, POStatus.CANCELLED.value):
            raise InvalidTransitionError("PurchaseOrder", po.status, status.value)

        outstanding = item.quantity_ordered - item.quantity_received
        if quantity_found < 0:
            raise ValidationError("quantity_found must be >= 0")
        if status == WarehouseStatus.IN_WAREHOUSE:
            if quantity_found not in (0, outstanding):
                raise ValidationError(
                    f"in_warehouse covers all {outstanding} outstanding unit(s); use partial_available for fewer"
                )
            quantity_found = outstanding
        elif status == WarehouseStatus.NOT_AVAILABLE:
            quantity_found = 0
        elif not 0 < quantity_found < outstanding:
            raise ValidationError(
                f"partial_available needs 0 < quantity_found < {outstanding}, got {quantity_found}"
            )

        db.add(
            WarehouseCheck(
                purchase_order_item_id=item.id,
                checker_id=checker_id,
                status=status.value,
                quantity_found=quantity_found,
                location=location,
                notes=notes,
            )
        )
        item.warehouse_status = status.value
        await db.flush()
        logger.info("Warehouse check on PO item %s: %s (found %s)", item.id, status.value, quantity_found)

        if quantity_found:
            await PurchaseOrderService._book_receipt(
                db, bus, po, item, quantity_found, f"Found in warehouse for {po.order_number}"
            )

        supplier_order = None
        if status in (WarehouseStatus.NOT_AVAILABLE, WarehouseStatus.PARTIAL_AVAILABLE):
            supplier_order = await SupplierOrderService.create_supplier_order_from_item(
                db, bus, item, quantity=outstanding - quantity_found
            )
            item.warehouse_status = WarehouseStatus.NEW_ORDER_REQUIRED.value
            await db.flush()

        if quantity_found:
            await bus.publish(db, InventoryRefresh())
        await bus.publish(db, OrdersRefresh())
        return item, supplier_order

    @staticmethod
    async def _book_receipt(
        db: AsyncSession,
        bus: EventBus,
        po: PurchaseOrder,
        item: PurchaseOrderItem,
        quantity: int,
        notes: str,
    ) -> None:
        """Credit the PO's warehouse, count the units against the item and announce them."""
        sku = await db.get(SKU, item.sku_id)
        await LedgerService.update_inventory_level(
            db,
            bus,
            item.sku_id,
            po.warehouse_id,
            quantity,
            TransactionType.RECEIPT,
            reference_id=po.id,
            notes=notes,
        )
        item.quantity_received += quantity
        recompute_po_status(po)
        await db.flush()
        logger.info("Received %s x SKU %s on %s (status %s)", quantity, item.sku_id, po.order_number, po.status)

        await bus.publish(
            db,
            MaterialAvailable(
                sku_id=item.sku_id,
                quantity_added=quantity,
                item_code=sku.sku_code,
                item_name=sku.name,
            ),
        )

    @staticmethod
    async def send_purchase_order(db: AsyncSession, bus: EventBus, po_id: int) -> PurchaseOrder:
        po = await PurchaseOrderService.get_purchase_order(db, po_id)
        if po.status != POStatus.PENDING.value:
            raise InvalidTransitionError("PurchaseOrder", po.status, POStatus.SENT.value)
        po.status = POStatus.SENT.value
        await db.flush()
        await bus.publish(db, OrdersRefresh())
        return po

    @staticmethod
    async def receive_purchase_order_item(
        db: AsyncSession,
        bus: EventBus,
        item_id: int,
        quantity: int,
        notes: str | None = None,
    ) -> PurchaseOrder:
        """
        Receive goods against one PO item.
        Credits the ledger at the PO's warehouse, updates PO status and
        announces the material so waiting production plans are re-verified.
        """
        if quantity <= 0:
            raise ValidationError("Received quantity must be positive")
        item = await PurchaseOrderService.get_item(db, item_id)
        po = await PurchaseOrderService.get_purchase_order(db, item.purchase_order_id)
        if po.status in (POStatus.RECEIVED.value, POStatus.CANCELLED.value):
            raise InvalidTransitionError("PurchaseOrder", po.status, POStatus.RECEIVED.value)
        remaining = item.quantity_ordered - item.quantity_received
        if quantity > remaining:
            raise ValidationError(f"Cannot receive {quantity} for item {item.id}: only {remaining} remaining")

        await PurchaseOrderService._book_receipt(
            db, bus, po, item, quantity, notes or f"PO receipt: {po.order_number}"
        )
        await bus.publish(db, InventoryRefresh())
        await bus.publish(db, OrdersRefresh())
        return po

    @staticmethod
    async def cancel_purchase_order(db: AsyncSession, bus: EventBus, po_id: int) -> PurchaseOrder:
        """Cancel a PO. Only allowed in pending or sent status."""
        po = await PurchaseOrderService.get_purchase_order(db, po_id)
        if po.status not in (POStatus.PENDING.value, POStatus.SENT.value):
            raise InvalidTransitionError("PurchaseOrder", po.status, POStatus.CANCELLED.value)
        po.status = POStatus.CANCELLED.value
        po.dedup_key = None
        await db.flush()
        logger.info("Cancelled purchase order %s", po.order_number)
        await bus.publish(db, OrdersRefresh())
        return po
