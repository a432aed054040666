"""AutoParts ERP: background production planning tasks."""
import asyncio
import logging

from autoparts.db.session import async_session_maker, engine
from autoparts.events.wiring import build_event_bus
from autoparts.services.production_plan_service import ProductionPlanService
from autoparts.services.vendor_notification_service import VendorNotificationService
from autoparts.worker import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="autoparts.tasks.production_tasks.recheck_awaiting_materials_plans")
def recheck_awaiting_materials_plans() -> dict:
    """Re-verify every plan waiting on materials (e.g. after a bulk receipt import)."""
    return asyncio.run(_recheck_async())


async def _recheck_async() -> dict:
    bus = build_event_bus()
    async with async_session_maker() as db:
        try:
            results = await ProductionPlanService.recheck_awaiting_materials_plans(db, bus)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    await engine.dispose()
    ready = [r.plan_number for r in results if r.all_sufficient]
    logger.info("Recheck task: %d plan(s) verified, %d ready", len(results), len(ready))
    return {"checked": len(results), "ready": ready}


@celery_app.task(name="autoparts.tasks.production_tasks.scan_vendor_assignments")
def scan_vendor_assignments() -> int:
    """Periodic: announce paused supplier orders that still need a vendor."""
    return asyncio.run(_scan_vendors_async())


async def _scan_vendors_async() -> int:
    bus = build_event_bus()
    async with async_session_maker() as db:
        sent = await VendorNotificationService.publish_vendor_notifications(db, bus)
        await db.commit()
    await engine.dispose()
    if sent:
        logger.info("Vendor scan: %d notification(s) published", sent)
    return sent
