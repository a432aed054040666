"""AutoParts ERP: SupplierOrderService, external supplier orders and their pause/resume gate.

Fulfillment status only moves forward (pending -> sent -> confirmed ->
in_transit -> received), with cancelled reachable from any open state.
workflow_status is a separate gate toggled by pause/resume.
"""
import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import get_settings
from autoparts.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from autoparts.db.base import today
from autoparts.events import EventBus, InventoryRefresh, MaterialAvailable, OrdersRefresh
from autoparts.models.purchase_order import PurchaseOrderItem
from autoparts.models.sku import SKU
from autoparts.models.supplier_order import SupplierOrder, SupplierOrderStatus, WorkflowStatus
from autoparts.models.warehouse import TransactionType
from autoparts.services.ledger_service import LedgerService
from autoparts.services.numbering import yearly_number
from autoparts.services.purchase_order_service import PurchaseOrderService, recompute_po_status

logger = logging.getLogger(__name__)

FULFILLMENT_SEQUENCE = [
    SupplierOrderStatus.PENDING.value,
    SupplierOrderStatus.SENT.value,
    SupplierOrderStatus.CONFIRMED.value,
    SupplierOrderStatus.IN_TRANSIT.value,
    SupplierOrderStatus.RECEIVED.value,
]
TERMINAL_STATUSES = (SupplierOrderStatus.RECEIVED.value, SupplierOrderStatus.CANCELLED.value)


class SupplierOrderService:

    @staticmethod
    async def create_supplier_order_from_item(
        db: AsyncSession,
        bus: EventBus,
        item: PurchaseOrderItem,
        quantity: int | None = None,
        notes: str | None = None,
    ) -> SupplierOrder:
        """Raise a supplier order covering a PO item the warehouse could not fill."""
        settings = get_settings()
        quantity = item.quantity_ordered if quantity is None else quantity
        if quantity <= 0:
            raise ValidationError("Supplier order quantity must be positive")

        sku = await db.get(SKU, item.sku_id)
        if sku is None:
            raise NotFoundError("SKU", item.sku_id)
        order_date = today()
        order = SupplierOrder(
            purchase_order_item_id=item.id,
            sku_id=item.sku_id,
            supplier_id=sku.vendor_id or settings.DEFAULT_SUPPLIER_ID,
            status=SupplierOrderStatus.PENDING.value,
            is_regular_supplier=sku.vendor_id is not None,
            order_date=order_date,
            expected_delivery_date=order_date + timedelta(days=settings.SUPPLIER_LEAD_TIME_DAYS),
            quantity_ordered=quantity,
            unit_cost=item.unit_cost,
            total_cost=item.unit_cost * quantity,
            workflow_status=WorkflowStatus.ACTIVE.value,
            notes=notes or f"Raised after warehouse check of PO item {item.id}",
        )
        db.add(order)
        await db.flush()
        order.order_number = yearly_number("SUP", order.id, order_date)
        await db.flush()
        logger.info(
            "Supplier order %s: %s x %s from supplier %s",
            order.order_number, quantity, sku.sku_code, order.supplier_id,
        )
        await bus.publish(db, OrdersRefresh())
        return order

    @staticmethod
    async def get_supplier_order(db: AsyncSession, order_id: int) -> SupplierOrder:
        order = await db.get(SupplierOrder, order_id)
        if order is None:
            raise NotFoundError("SupplierOrder", order_id)
        return order

    @staticmethod
    async def list_supplier_orders(
        db: AsyncSession,
        status: str | None = None,
        workflow_status: str | None = None,
    ) -> list[SupplierOrder]:
        q = select(SupplierOrder)
        if status:
            q = q.where(SupplierOrder.status == status)
        if workflow_status:
            q = q.where(SupplierOrder.workflow_status == workflow_status)
        result = await db.execute(q.order_by(SupplierOrder.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def update_supplier_order_status(
        db: AsyncSession,
        bus: EventBus,
        order_id: int,
        status: SupplierOrderStatus | str,
        tracking_number: str | None = None,
    ) -> SupplierOrder:
        try:
            status = SupplierOrderStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown supplier order status: {status}")

        order = await SupplierOrderService.get_supplier_order(db, order_id)
        current = order.status
        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError("SupplierOrder", current, status.value)
        if status != SupplierOrderStatus.CANCELLED and (
            FULFILLMENT_SEQUENCE.index(status.value) <= FULFILLMENT_SEQUENCE.index(current)
        ):
            raise InvalidTransitionError("SupplierOrder", current, status.value)

        order.status = status.value
        if tracking_number:
            order.tracking_number = tracking_number
        await db.flush()
        logger.info("Supplier order %s: %s -> %s", order.order_number, current, status.value)

        if status == SupplierOrderStatus.RECEIVED:
            await SupplierOrderService._receive(db, bus, order)
        else:
            if status == SupplierOrderStatus.CANCELLED:
                await SupplierOrderService._release_purchase_order(db, order)
            await bus.publish(db, OrdersRefresh())
        return order

    @staticmethod
    async def _release_purchase_order(db: AsyncSession, order: SupplierOrder) -> None:
        # A cancelled escalation must not keep holding the plan's dedup key.
        item = await db.get(PurchaseOrderItem, order.purchase_order_item_id)
        if item is None:
            return
        po = await PurchaseOrderService.get_purchase_order(db, item.purchase_order_id)
        if po.dedup_key is not None:
            logger.info("Released %s from %s after supplier order cancellation", po.dedup_key, po.order_number)
            po.dedup_key = None
            await db.flush()

    @staticmethod
    async def _receive(db: AsyncSession, bus: EventBus, order: SupplierOrder) -> None:
        settings = get_settings()
        order.actual_delivery_date = today()
        order.workflow_status = WorkflowStatus.RESUMED.value
        await db.flush()

        await LedgerService.update_inventory_level(
            db,
            bus,
            order.sku_id,
            settings.DEFAULT_WAREHOUSE_ID,
            order.quantity_ordered,
            TransactionType.RECEIPT,
            reference_id=order.id,
            notes=f"Supplier order receipt: {order.order_number}",
        )

        item = await db.get(PurchaseOrderItem, order.purchase_order_item_id)
        if item is not None:
            po = await PurchaseOrderService.get_purchase_order(db, item.purchase_order_id)
            item.quantity_received = min(item.quantity_ordered, item.quantity_received + order.quantity_ordered)
            recompute_po_status(po)
            await db.flush()

        sku = await db.get(SKU, order.sku_id)
        await bus.publish(
            db,
            MaterialAvailable(
                sku_id=order.sku_id,
                quantity_added=order.quantity_ordered,
                item_code=sku.sku_code,
                item_name=sku.name,
            ),
        )
        await bus.publish(db, InventoryRefresh())
        await bus.publish(db, OrdersRefresh())

    @staticmethod
    async def pause_supplier_order_workflow(
        db: AsyncSession,
        bus: EventBus,
        order_id: int,
        reason: str,
    ) -> SupplierOrder:
        if not reason or not reason.strip():
            raise ValidationError("A pause reason is required")
        order = await SupplierOrderService.get_supplier_order(db, order_id)
        order.workflow_status = WorkflowStatus.PAUSED.value
        order.pause_reason = reason.strip()
        await db.flush()
        logger.info("Supplier order %s paused: %s", order.order_number, order.pause_reason)
        await bus.publish(db, OrdersRefresh())
        return order

    @staticmethod
    async def resume_supplier_order_workflow(
        db: AsyncSession,
        bus: EventBus,
        order_id: int,
        reason: str | None = None,
    ) -> SupplierOrder:
        order = await SupplierOrderService.get_supplier_order(db, order_id)
        if order.workflow_status != WorkflowStatus.PAUSED.value:
            raise InvalidTransitionError("SupplierOrder workflow", order.workflow_status, WorkflowStatus.ACTIVE.value)
        order.workflow_status = WorkflowStatus.ACTIVE.value
        order.pause_reason = None
        order.resume_reason = reason
        await db.flush()
        logger.info("Supplier order %s resumed: %s", order.order_number, reason)
        await bus.publish(db, OrdersRefresh())
        return order
