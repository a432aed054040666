"""AutoParts ERP: vendor assignment alert endpoints."""
from fastapi import APIRouter

from autoparts.api.deps import Bus, DbSession
from autoparts.schemas.common import ApiResponse, Meta
from autoparts.schemas.supplier_order import SupplierOrderResponse
from autoparts.schemas.vendor_alert import NotificationCount, VendorAlert, VendorAssignment, VendorNotification
from autoparts.services.vendor_notification_service import VendorNotificationService

router = APIRouter()


@router.get("", response_model=ApiResponse[list[VendorAlert]])
async def list_vendor_alerts(db: DbSession):
    """Paused supplier orders waiting for a vendor, sorted by priority then value."""
    alerts = await VendorNotificationService.get_paused_orders_needing_vendors(db)
    return ApiResponse(data=alerts, meta=Meta(total_count=len(alerts)))


@router.get("/notifications", response_model=ApiResponse[list[VendorNotification]])
async def list_vendor_notifications(db: DbSession):
    return ApiResponse(data=await VendorNotificationService.generate_vendor_notifications(db))


@router.get("/count", response_model=ApiResponse[NotificationCount])
async def get_notification_count(db: DbSession):
    return ApiResponse(data=await VendorNotificationService.get_notification_count(db))


@router.post("/{order_id}/assign", response_model=ApiResponse[SupplierOrderResponse])
async def assign_vendor(order_id: int, body: VendorAssignment, db: DbSession, bus: Bus):
    """Assign a vendor to a paused supplier order and resume it."""
    order = await VendorNotificationService.assign_vendor_to_order(db, bus, order_id, body.vendor_id)
    await db.commit()
    return ApiResponse(data=SupplierOrderResponse.model_validate(order))
