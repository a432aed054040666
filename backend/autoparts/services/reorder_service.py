"""AutoParts ERP: ReorderService, shortage requests and their approval into purchase orders."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import get_settings
from autoparts.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from autoparts.events import DashboardRefresh, EventBus, LowStockDetected
from autoparts.models.reorder import ReorderPriority, ReorderReason, ReorderRequest, ReorderStatus
from autoparts.models.sku import SKU
from autoparts.models.warehouse import AlertSeverity, Warehouse
from autoparts.services.alert_service import AlertService
from autoparts.services.ledger_service import LedgerService
from autoparts.services.purchase_order_service import PurchaseOrderService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    ReorderStatus.PENDING.value: {ReorderStatus.APPROVED.value, ReorderStatus.CANCELLED.value},
    ReorderStatus.APPROVED.value: {ReorderStatus.ORDERED.value, ReorderStatus.CANCELLED.value},
    ReorderStatus.ORDERED.value: {ReorderStatus.CANCELLED.value},
    ReorderStatus.CANCELLED.value: set(),
}

OPEN_STATUSES = (ReorderStatus.PENDING.value, ReorderStatus.APPROVED.value)


class ReorderService:

    @staticmethod
    async def create_reorder_request(
        db: AsyncSession,
        bus: EventBus,
        sku_id: int,
        warehouse_id: int,
        reason: ReorderReason | str,
        quantity: int | None = None,
        *,
        priority: ReorderPriority | str | None = None,
        notes: str | None = None,
        requested_by: int | None = None,
    ) -> ReorderRequest:
        """
        Open a reorder request for a SKU at a warehouse.
        Without an explicit quantity the request tops the record up to its
        max stock level (100 when unset or when no record exists).
        """
        settings = get_settings()
        try:
            reason = ReorderReason(reason)
            priority = ReorderPriority(priority or ReorderPriority.MEDIUM)
        except ValueError as e:
            raise ValidationError(str(e))

        sku = await db.get(SKU, sku_id)
        if sku is None:
            raise NotFoundError("SKU", sku_id)
        if await db.get(Warehouse, warehouse_id) is None:
            raise NotFoundError("Warehouse", warehouse_id)

        if quantity is None:
            record = await LedgerService.get_record(db, sku_id, warehouse_id)
            if record is None:
                quantity = settings.DEFAULT_REORDER_QUANTITY
            else:
                max_level = record.max_stock_level or settings.DEFAULT_REORDER_QUANTITY
                quantity = max_level - record.quantity_on_hand
        if quantity <= 0:
            raise ValidationError(
                f"Reorder quantity must be positive, got {quantity}",
                details={"sku_id": sku_id, "warehouse_id": warehouse_id},
            )

        request = ReorderRequest(
            sku_id=sku_id,
            warehouse_id=warehouse_id,
            quantity_requested=quantity,
            reason=reason.value,
            status=ReorderStatus.PENDING.value,
            priority=priority.value,
            requested_by=requested_by,
            notes=notes,
        )
        db.add(request)
        await db.flush()

        await AlertService.create_alert(
            db,
            alert_type="reorder_request",
            title=f"Reorder Request: {sku.name}",
            message=f"Reorder of {quantity} x {sku.sku_code} requested ({reason.value.replace('_', ' ')})",
            severity=AlertSeverity.HIGH if reason == ReorderReason.OUT_OF_STOCK else AlertSeverity.MEDIUM,
            entity_type="reorder_request",
            entity_id=request.id,
        )
        logger.info("Reorder request %s: %s x SKU %s (%s)", request.id, quantity, sku_id, reason.value)
        await bus.publish(db, DashboardRefresh())
        return request

    @staticmethod
    async def get_reorder_request(db: AsyncSession, request_id: int) -> ReorderRequest:
        request = await db.get(ReorderRequest, request_id)
        if request is None:
            raise NotFoundError("ReorderRequest", request_id)
        return request

    @staticmethod
    async def list_reorder_requests(
        db: AsyncSession,
        status: str | None = None,
        sku_id: int | None = None,
    ) -> list[ReorderRequest]:
        q = select(ReorderRequest)
        if status:
            q = q.where(ReorderRequest.status == status)
        if sku_id is not None:
            q = q.where(ReorderRequest.sku_id == sku_id)
        result = await db.execute(q.order_by(ReorderRequest.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def find_open_request(db: AsyncSession, sku_id: int, warehouse_id: int) -> ReorderRequest | None:
        return await db.scalar(
            select(ReorderRequest)
            .where(
                ReorderRequest.sku_id == sku_id,
                ReorderRequest.warehouse_id == warehouse_id,
                ReorderRequest.status.in_(OPEN_STATUSES),
            )
            .limit(1)
        )

    @staticmethod
    async def update_reorder_request_status(
        db: AsyncSession,
        bus: EventBus,
        request_id: int,
        status: ReorderStatus | str,
        approved_by: int | None = None,
    ) -> ReorderRequest:
        """Move a request along its lifecycle. Approval raises the purchase order."""
        settings = get_settings()
        try:
            status = ReorderStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown reorder status: {status}")

        request = await ReorderService.get_reorder_request(db, request_id)
        if status.value not in ALLOWED_TRANSITIONS[request.status]:
            raise InvalidTransitionError("ReorderRequest", request.status, status.value)

        request.status = status.value
        if status == ReorderStatus.APPROVED:
            request.approved_by = approved_by
            sku = await db.get(SKU, request.sku_id)
            po = await PurchaseOrderService.create_purchase_order(
                db,
                request.warehouse_id,
                [{
                    "sku_id": request.sku_id,
                    "quantity_ordered": request.quantity_requested,
                    "unit_cost": sku.unit_cost or settings.DEFAULT_UNIT_COST,
                }],
                vendor_id=sku.vendor_id,
                reorder_request_id=request.id,
                notes=f"Generated from reorder request #{request.id} ({request.reason})",
            )
            logger.info("Reorder request %s approved, purchase order %s", request.id, po.order_number)
        await db.flush()
        await bus.publish(db, DashboardRefresh())
        return request

    @staticmethod
    async def auto_reorder(db: AsyncSession, bus: EventBus, event: LowStockDetected) -> ReorderRequest | None:
        """Open a request for a low-stock signal unless one is already open."""
        existing = await ReorderService.find_open_request(db, event.sku_id, event.warehouse_id)
        if existing is not None:
            logger.debug("Reorder request %s already open for SKU %s", existing.id, event.sku_id)
            return None
        try:
            return await ReorderService.create_reorder_request(
                db,
                bus,
                event.sku_id,
                event.warehouse_id,
                ReorderReason.OUT_OF_STOCK if event.is_out_of_stock else ReorderReason.LOW_STOCK,
                priority=ReorderPriority.HIGH if event.is_out_of_stock else ReorderPriority.MEDIUM,
                notes="Raised automatically on low stock",
            )
        except ValidationError as e:
            logger.warning("Auto reorder skipped for SKU %s: %s", event.sku_id, e)
            return None
