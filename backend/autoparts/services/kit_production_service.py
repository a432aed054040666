"""AutoParts ERP: KitProductionService, assembling kits from BOM components."""
import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import get_settings
from autoparts.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from autoparts.db.base import today
from autoparts.events import DashboardRefresh, EventBus, InventoryRefresh, NotificationRaised
from autoparts.models.production import KitProductionOrder, KitProductionStatus, PlanStatus, ProductionPlan
from autoparts.models.warehouse import TransactionType
from autoparts.services.bom_service import BOMService
from autoparts.services.ledger_service import LedgerService
from autoparts.services.numbering import yearly_number

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    KitProductionStatus.PLANNED.value: {KitProductionStatus.IN_PROGRESS.value, KitProductionStatus.CANCELLED.value},
    KitProductionStatus.IN_PROGRESS.value: {
        KitProductionStatus.COMPLETED.value,
        KitProductionStatus.ON_HOLD.value,
        KitProductionStatus.CANCELLED.value,
    },
    KitProductionStatus.ON_HOLD.value: {KitProductionStatus.IN_PROGRESS.value, KitProductionStatus.CANCELLED.value},
    KitProductionStatus.COMPLETED.value: set(),
    KitProductionStatus.CANCELLED.value: set(),
}


def _check_transition(order: KitProductionOrder, target: KitProductionStatus) -> None:
    if target.value not in ALLOWED_TRANSITIONS[order.status]:
        raise InvalidTransitionError("KitProductionOrder", order.status, target.value)


class KitProductionService:

    @staticmethod
    async def create_kit_production_order(
        db: AsyncSession,
        bom_template_id: int,
        quantity_planned: int,
        *,
        warehouse_id: int | None = None,
        planned_start_date: date | None = None,
        planned_completion_date: date | None = None,
        supervisor_id: int | None = None,
        notes: str | None = None,
    ) -> KitProductionOrder:
        """Create a planned production order with costs rolled up from the BOM."""
        settings = get_settings()
        if quantity_planned <= 0:
            raise ValidationError("quantity_planned must be positive")
        template = await BOMService.get_bom_template_with_components(db, bom_template_id)

        material_cost = sum((c.line_cost for c in template.components), Decimal("0")) * quantity_planned
        labor_cost = template.labor_cost * quantity_planned
        overhead_cost = template.overhead_cost * quantity_planned
        start = planned_start_date or today()
        order = KitProductionOrder(
            kit_sku_id=template.kit_sku_id,
            bom_template_id=template.id,
            warehouse_id=warehouse_id or settings.DEFAULT_WAREHOUSE_ID,
            quantity_planned=quantity_planned,
            quantity_completed=0,
            status=KitProductionStatus.PLANNED.value,
            planned_start_date=start,
            planned_completion_date=planned_completion_date
            or start + timedelta(days=settings.PRODUCTION_LEAD_TIME_DAYS),
            total_material_cost=material_cost,
            labor_cost=labor_cost,
            overhead_cost=overhead_cost,
            total_cost=material_cost + labor_cost + overhead_cost,
            supervisor_id=supervisor_id,
            notes=notes,
        )
        db.add(order)
        await db.flush()
        order.order_number = yearly_number("KPO", order.id, start)
        await db.flush()
        logger.info("Created kit production order %s: %s x template %s", order.order_number, quantity_planned, template.id)
        return order

    @staticmethod
    async def get_kit_production_order(db: AsyncSession, order_id: int) -> KitProductionOrder:
        order = await db.get(KitProductionOrder, order_id)
        if order is None:
            raise NotFoundError("KitProductionOrder", order_id)
        return order

    @staticmethod
    async def list_kit_production_orders(db: AsyncSession, status: str | None = None) -> list[KitProductionOrder]:
        q = select(KitProductionOrder)
        if status:
            q = q.where(KitProductionOrder.status == status)
        result = await db.execute(q.order_by(KitProductionOrder.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def start_kit_production(db: AsyncSession, bus: EventBus, order_id: int) -> KitProductionOrder:
        order = await KitProductionService.get_kit_production_order(db, order_id)
        _check_transition(order, KitProductionStatus.IN_PROGRESS)
        order.status = KitProductionStatus.IN_PROGRESS.value
        if order.actual_start_date is None:
            order.actual_start_date = today()
        await db.flush()
        await bus.publish(db, DashboardRefresh())
        return order

    @staticmethod
    async def hold_kit_production(db: AsyncSession, bus: EventBus, order_id: int) -> KitProductionOrder:
        order = await KitProductionService.get_kit_production_order(db, order_id)
        _check_transition(order, KitProductionStatus.ON_HOLD)
        order.status = KitProductionStatus.ON_HOLD.value
        await db.flush()
        await bus.publish(db, DashboardRefresh())
        return order

    @staticmethod
    async def complete_kit_production(
        db: AsyncSession,
        bus: EventBus,
        order_id: int,
        quantity_completed: int | None = None,
    ) -> KitProductionOrder:
        """
        Finish a production run.
        - Debits quantity_required x quantity_completed of every component.
        - Credits the kit SKU by quantity_completed.
        - Completes the production plan that started this order, if any.
        All ledger movements succeed together or not at all.
        """
        order = await KitProductionService.get_kit_production_order(db, order_id)
        _check_transition(order, KitProductionStatus.COMPLETED)
        quantity = order.quantity_planned if quantity_completed is None else quantity_completed
        if not 0 < quantity <= order.quantity_planned:
            raise ValidationError(f"quantity_completed must be between 1 and {order.quantity_planned}")
        template = await BOMService.get_bom_template_with_components(db, order.bom_template_id)

        async with db.begin_nested():
            for comp in template.components:
                await LedgerService.update_inventory_level(
                    db,
                    bus,
                    comp.component_sku_id,
                    order.warehouse_id,
                    -comp.quantity_required * quantity,
                    TransactionType.PRODUCTION,
                    reference_id=order.id,
                    notes=f"Consumed by {order.order_number}",
                )
            await LedgerService.update_inventory_level(
                db,
                bus,
                order.kit_sku_id,
                order.warehouse_id,
                quantity,
                TransactionType.PRODUCTION,
                reference_id=order.id,
                notes=f"Produced by {order.order_number}",
            )

        order.quantity_completed = quantity
        order.status = KitProductionStatus.COMPLETED.value
        order.actual_completion_date = today()
        plans = (
            await db.execute(
                select(ProductionPlan).where(
                    ProductionPlan.production_order_id == order.id,
                    ProductionPlan.status == PlanStatus.IN_PRODUCTION.value,
                )
            )
        ).scalars().all()
        for plan in plans:
            plan.status = PlanStatus.COMPLETED.value
            logger.info("Production plan %s completed by %s", plan.plan_number, order.order_number)
        await db.flush()

        await bus.publish(
            db,
            NotificationRaised(
                title="Production completed",
                message=f"{order.order_number}: {quantity} kit(s) added to stock",
                severity="success",
                entity_type="kit_production_order",
                entity_id=order.id,
            ),
        )
        await bus.publish(db, InventoryRefresh())
        await bus.publish(db, DashboardRefresh())
        return order

    @staticmethod
    async def cancel_kit_production(db: AsyncSession, bus: EventBus, order_id: int) -> KitProductionOrder:
        """Cancel an unfinished order. A linked plan stays in_production."""
        order = await KitProductionService.get_kit_production_order(db, order_id)
        _check_transition(order, KitProductionStatus.CANCELLED)
        order.status = KitProductionStatus.CANCELLED.value
        await db.flush()
        logger.info("Cancelled kit production order %s", order.order_number)
        await bus.publish(db, DashboardRefresh())
        return order
