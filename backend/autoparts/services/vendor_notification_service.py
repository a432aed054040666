"""AutoParts ERP: VendorNotificationService, paused supplier orders waiting for a vendor decision."""
import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import get_settings
from autoparts.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from autoparts.events import EventBus, NotificationRaised
from autoparts.models.sku import SKU, Vendor
from autoparts.models.supplier_order import SupplierOrder, WorkflowStatus
from autoparts.schemas.vendor_alert import NotificationCount, VendorAlert, VendorNotification, VendorSuggestion
from autoparts.services.supplier_order_service import SupplierOrderService

logger = logging.getLogger(__name__)

VENDOR_KEYWORDS = ("vendor", "supplier")
PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def needs_vendor(pause_reason: str | None) -> bool:
    reason = (pause_reason or "").lower()
    return any(word in reason for word in VENDOR_KEYWORDS)


def value_priority(value: Decimal) -> str:
    settings = get_settings()
    if value > settings.VENDOR_ALERT_HIGH_VALUE:
        return "high"
    if value > settings.VENDOR_ALERT_MEDIUM_VALUE:
        return "medium"
    return "low"


class VendorNotificationService:

    @staticmethod
    async def get_paused_orders_needing_vendors(db: AsyncSession) -> list[VendorAlert]:
        """Paused orders whose pause reason is about the vendor, most urgent first."""
        settings = get_settings()
        orders = (
            await db.execute(
                select(SupplierOrder).where(SupplierOrder.workflow_status == WorkflowStatus.PAUSED.value)
            )
        ).scalars().all()
        vendors = (
            await db.execute(select(Vendor).where(Vendor.is_active.is_(True)).order_by(Vendor.name))
        ).scalars().all()

        alerts: list[VendorAlert] = []
        for order in orders:
            if not needs_vendor(order.pause_reason):
                continue
            sku = await db.get(SKU, order.sku_id)
            if sku is None:
                logger.warning("Supplier order %s references missing SKU %s", order.id, order.sku_id)
                continue
            value = (sku.unit_cost or settings.DEFAULT_UNIT_COST) * order.quantity_ordered
            suggestions = [v for v in vendors if v.id != sku.vendor_id][: settings.MAX_SUGGESTED_VENDORS]
            alerts.append(
                VendorAlert(
                    supplier_order_id=order.id,
                    order_number=order.order_number,
                    sku_id=sku.id,
                    sku_code=sku.sku_code,
                    sku_name=sku.name,
                    quantity=order.quantity_ordered,
                    estimated_value=value,
                    priority=value_priority(value),
                    pause_reason=order.pause_reason,
                    current_vendor_id=sku.vendor_id,
                    suggested_vendors=[VendorSuggestion.model_validate(v) for v in suggestions],
                    paused_since=order.updated_at,
                )
            )
        alerts.sort(key=lambda a: (PRIORITY_RANK[a.priority], -a.estimated_value))
        return alerts

    @staticmethod
    async def generate_vendor_notifications(db: AsyncSession) -> list[VendorNotification]:
        notifications: list[VendorNotification] = []
        for alert in await VendorNotificationService.get_paused_orders_needing_vendors(db):
            notifications.append(
                VendorNotification(
                    type="vendor_assignment_needed",
                    title=f"Vendor needed: {alert.sku_name}",
                    message=(
                        f"{alert.order_number} ({alert.quantity} x {alert.sku_code}, "
                        f"~{alert.estimated_value:.2f}) is paused: {alert.pause_reason}"
                    ),
                    priority=alert.priority,
                    supplier_order_id=alert.supplier_order_id,
                )
            )
            if alert.priority == "high":
                notifications.append(
                    VendorNotification(
                        type="urgent_reorder",
                        title=f"Urgent: {alert.sku_name}",
                        message=f"High-value order {alert.order_number} is blocked until a vendor is assigned",
                        priority="high",
                        supplier_order_id=alert.supplier_order_id,
                    )
                )
        return notifications

    @staticmethod
    async def get_notification_count(db: AsyncSession) -> NotificationCount:
        alerts = await VendorNotificationService.get_paused_orders_needing_vendors(db)
        return NotificationCount(total=len(alerts), urgent=sum(1 for a in alerts if a.priority == "high"))

    @staticmethod
    async def publish_vendor_notifications(db: AsyncSession, bus: EventBus) -> int:
        """Push the current vendor notifications onto the bus. Returns how many went out."""
        notifications = await VendorNotificationService.generate_vendor_notifications(db)
        for n in notifications:
            await bus.publish(
                db,
                NotificationRaised(
                    title=n.title,
                    message=n.message,
                    severity="error" if n.type == "urgent_reorder" else "warning",
                    entity_type="supplier_order",
                    entity_id=n.supplier_order_id,
                ),
            )
        return len(notifications)

    @staticmethod
    async def assign_vendor_to_order(
        db: AsyncSession,
        bus: EventBus,
        order_id: int,
        vendor_id: int,
    ) -> SupplierOrder:
        """Bind the vendor to the order's SKU and supplier order, then resume the order."""
        order = await SupplierOrderService.get_supplier_order(db, order_id)
        if order.workflow_status != WorkflowStatus.PAUSED.value:
            raise InvalidTransitionError("SupplierOrder workflow", order.workflow_status, WorkflowStatus.ACTIVE.value)
        vendor = await db.get(Vendor, vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor", vendor_id)
        if not vendor.is_active:
            raise ValidationError(f"Vendor {vendor.code} is inactive")
        sku = await db.get(SKU, order.sku_id)
        if sku is None:
            raise NotFoundError("SKU", order.sku_id)

        sku.vendor_id = vendor.id
        order.supplier_id = vendor.id
        order.is_regular_supplier = True
        await db.flush()
        logger.info("Vendor %s assigned to %s (SKU %s)", vendor.code, order.order_number, sku.sku_code)
        return await SupplierOrderService.resume_supplier_order_workflow(db, bus, order.id, "Vendor assigned")
