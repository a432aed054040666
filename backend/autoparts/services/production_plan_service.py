"""AutoParts ERP: ProductionPlanService, sales order -> BOM -> inventory verification -> production.

A plan exists once per (sales order, BOM template). Verification compares the
exploded BOM against available stock at the production warehouse (the
configured default warehouse, where kit production orders run), marks the plan production_ready or
awaiting_materials, and raises one purchase order per short component. Goods
receipts announce MaterialAvailable, which re-verifies every waiting plan.
"""
import logging
from collections import Counter

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import get_settings
from autoparts.core.exceptions import (
    AutoPartsError,
    IntegrationWarning,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from autoparts.db.base import utcnow
from autoparts.events import DashboardRefresh, EventBus, NotificationRaised, OrdersRefresh
from autoparts.models.bom import BOMTemplate
from autoparts.models.production import PlanStatus, ProductionPlan
from autoparts.models.purchase_order import PurchaseOrder
from autoparts.models.sales_order import SalesOrder
from autoparts.models.sku import SKU
from autoparts.schemas.production import ComponentCheck, PlanStats, VerificationResult
from autoparts.services.bom_service import BOMService
from autoparts.services.kit_production_service import KitProductionService
from autoparts.services.ledger_service import LedgerService
from autoparts.services.numbering import plan_number
from autoparts.services.purchase_order_service import PurchaseOrderService

logger = logging.getLogger(__name__)

# Once production has started a plan is never verified again.
LOCKED_STATUSES = (PlanStatus.IN_PRODUCTION.value, PlanStatus.COMPLETED.value)


def purchase_order_dedup_key(plan_id: int, sku_id: int) -> str:
    return f"plan:{plan_id}:sku:{sku_id}"


class ProductionPlanService:

    @staticmethod
    async def get_production_plan(db: AsyncSession, plan_id: int) -> ProductionPlan:
        plan = await db.get(ProductionPlan, plan_id)
        if plan is None:
            raise NotFoundError("ProductionPlan", plan_id)
        return plan

    @staticmethod
    async def list_production_plans(db: AsyncSession, status: str | None = None) -> list[ProductionPlan]:
        q = select(ProductionPlan)
        if status:
            q = q.where(ProductionPlan.status == status)
        result = await db.execute(q.order_by(ProductionPlan.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def create_plan_for_sales_order(db: AsyncSession, sales_order: SalesOrder) -> ProductionPlan:
        """Find-or-create the plan for a sales order and its BOM template."""
        if sales_order.bom_template_id is None:
            raise ValidationError(f"Sales order {sales_order.id} has no BOM template")

        def _lookup():
            return select(ProductionPlan).where(
                ProductionPlan.sales_order_id == sales_order.id,
                ProductionPlan.bom_template_id == sales_order.bom_template_id,
            )

        plan = await db.scalar(_lookup())
        if plan is not None:
            return plan
        try:
            async with db.begin_nested():
                plan = ProductionPlan(
                    plan_number=plan_number(sales_order.id),
                    sales_order_id=sales_order.id,
                    bom_template_id=sales_order.bom_template_id,
                    status=PlanStatus.PENDING_VERIFICATION.value,
                    inventory_check=[],
                    purchase_orders_generated=False,
                    purchase_orders_count=0,
                )
                db.add(plan)
                await db.flush()
        except IntegrityError:
            # Created concurrently by another session
            plan = await db.scalar(_lookup())
            if plan is None:
                raise
            return plan
        logger.info("Created production plan %s for sales order %s", plan.plan_number, sales_order.id)
        return plan

    @staticmethod
    async def sync_production_plans(db: AsyncSession) -> list[ProductionPlan]:
        """Ensure every production-required sales order with a BOM has exactly one plan."""
        rows = await db.execute(
            select(SalesOrder)
            .join(BOMTemplate, BOMTemplate.id == SalesOrder.bom_template_id)
            .where(SalesOrder.production_required.is_(True))
            .order_by(SalesOrder.id)
        )
        plans = []
        for sales_order in rows.scalars().all():
            plans.append(await ProductionPlanService.create_plan_for_sales_order(db, sales_order))
        return plans

    @staticmethod
    async def verify_inventory_for_production(
        db: AsyncSession,
        bus: EventBus,
        plan_id: int,
        silent: bool = False,
    ) -> VerificationResult:
        """
        Check every BOM component of the plan against available stock at the
        production warehouse.

        Each short component gets a purchase order sized to its shortage unless
        an open one already exists for this plan and component. A failed
        purchase order is reported in warnings; the rest of the pass is kept.
        """
        settings = get_settings()
        plan = await ProductionPlanService.get_production_plan(db, plan_id)
        if plan.status in LOCKED_STATUSES:
            raise InvalidTransitionError(
                "ProductionPlan",
                plan.status,
                "verified",
                message=f"Plan {plan.plan_number} is {plan.status} and can no longer be re-verified",
            )

        # 1-2. BOM and order quantity
        template = await BOMService.get_bom_template_with_components(db, plan.bom_template_id)
        if not template.components:
            raise ValidationError(f"BOM template {template.id} has no components")
        sales_order = await db.get(SalesOrder, plan.sales_order_id)
        if sales_order is None:
            raise NotFoundError("SalesOrder", plan.sales_order_id)
        order_quantity = sales_order.quantity or 1

        # 3. Per-component requirement against stock
        checks: list[ComponentCheck] = []
        vendors: dict[int, int | None] = {}
        for comp in template.components:
            sku = await db.get(SKU, comp.component_sku_id)
            if sku is None:
                raise NotFoundError("SKU", comp.component_sku_id)
            vendors[sku.id] = sku.vendor_id
            required = comp.quantity_required * order_quantity
            available = await LedgerService.get_available_quantity(db, sku.id, settings.DEFAULT_WAREHOUSE_ID)
            checks.append(
                ComponentCheck(
                    component_sku_id=sku.id,
                    sku_code=sku.sku_code,
                    sku_name=sku.name,
                    quantity_required=comp.quantity_required,
                    required=required,
                    available=available,
                    sufficient=available >= required,
                    shortage=max(0, required - available),
                    unit_cost=sku.unit_cost or settings.DEFAULT_UNIT_COST,
                )
            )

        # 4. Status
        previous_status = plan.status
        all_sufficient = all(c.sufficient for c in checks)
        plan.status = PlanStatus.PRODUCTION_READY.value if all_sufficient else PlanStatus.AWAITING_MATERIALS.value
        plan.inventory_check = [c.model_dump(mode="json") for c in checks]
        plan.last_verified_at = utcnow()
        await db.flush()

        # 5. Purchase orders for shortages
        created: list[int] = []
        existing: list[int] = []
        warnings: list[str] = []
        for check in checks:
            if check.sufficient:
                continue
            key = purchase_order_dedup_key(plan.id, check.component_sku_id)
            open_po = await db.scalar(select(PurchaseOrder.id).where(PurchaseOrder.dedup_key == key))
            if open_po is not None:
                existing.append(open_po)
                continue
            try:
                async with db.begin_nested():
                    po = await PurchaseOrderService.create_purchase_order(
                        db,
                        settings.DEFAULT_WAREHOUSE_ID,
                        [{
                            "sku_id": check.component_sku_id,
                            "quantity_ordered": check.shortage,
                            "unit_cost": check.unit_cost,
                        }],
                        vendor_id=vendors.get(check.component_sku_id),
                        production_plan_id=plan.id,
                        dedup_key=key,
                        notes=(
                            f"Auto-generated for production plan {plan.plan_number} "
                            f"(BOM {template.name} v{template.version}): "
                            f"{check.sku_code} short by {check.shortage}"
                        ),
                    )
                created.append(po.id)
            except (AutoPartsError, SQLAlchemyError) as e:
                warning = IntegrationWarning(
                    f"Purchase order for {check.sku_code} could not be created: {e}",
                    details={"plan_id": plan.id, "sku_id": check.component_sku_id},
                )
                logger.warning("%s", warning)
                warnings.append(warning.message)

        # 6. Persist
        if created:
            plan.purchase_orders_generated = True
            plan.purchase_orders_count = (plan.purchase_orders_count or 0) + len(created)
            plan.purchase_orders_created_at = utcnow()
        await db.flush()
        logger.info(
            "Verified plan %s: %s -> %s, %d PO(s) created, %d already open",
            plan.plan_number, previous_status, plan.status, len(created), len(existing),
        )

        result = VerificationResult(
            plan_id=plan.id,
            plan_number=plan.plan_number,
            previous_status=previous_status,
            status=plan.status,
            order_quantity=order_quantity,
            all_sufficient=all_sufficient,
            components=checks,
            purchase_order_ids=created,
            existing_purchase_order_ids=existing,
            warnings=warnings,
        )

        # 7. Tell the user
        became_ready = all_sufficient and previous_status != PlanStatus.PRODUCTION_READY.value
        if not silent or became_ready:
            await bus.publish(db, ProductionPlanService._summary_notification(result))
        if created:
            await bus.publish(db, OrdersRefresh())
        await bus.publish(db, DashboardRefresh())
        return result

    @staticmethod
    def _summary_notification(result: VerificationResult) -> NotificationRaised:
        if result.all_sufficient:
            title, message, severity = (
                "Production ready",
                f"All materials available for plan {result.plan_number}",
                "success",
            )
        else:
            short = sum(1 for c in result.components if not c.sufficient)
            title = "Awaiting materials"
            message = (
                f"Plan {result.plan_number}: {short} component(s) short, "
                f"{len(result.purchase_order_ids)} purchase order(s) created"
            )
            severity = "warning" if result.warnings else "info"
        if result.warnings:
            message += f"; {len(result.warnings)} purchase order(s) failed"
        return NotificationRaised(
            title=title,
            message=message,
            severity=severity,
            entity_type="production_plan",
            entity_id=result.plan_id,
        )

    @staticmethod
    async def start_production(db: AsyncSession, bus: EventBus, plan_id: int) -> ProductionPlan:
        """Open a kit production order for a ready plan and move it to in_production."""
        settings = get_settings()
        plan = await ProductionPlanService.get_production_plan(db, plan_id)
        if plan.status != PlanStatus.PRODUCTION_READY.value:
            raise InvalidTransitionError(
                "ProductionPlan",
                plan.status,
                PlanStatus.IN_PRODUCTION.value,
                message=f"Plan {plan.plan_number} is {plan.status}; only production_ready plans can start",
            )
        sales_order = await db.get(SalesOrder, plan.sales_order_id)
        if sales_order is None:
            raise NotFoundError("SalesOrder", plan.sales_order_id)

        order = await KitProductionService.create_kit_production_order(
            db,
            plan.bom_template_id,
            sales_order.quantity or 1,
            warehouse_id=settings.DEFAULT_WAREHOUSE_ID,
            notes=f"Production for plan {plan.plan_number} / {sales_order.order_number}",
        )
        plan.status = PlanStatus.IN_PRODUCTION.value
        plan.production_order_id = order.id
        await db.flush()
        logger.info("Plan %s in production as %s", plan.plan_number, order.order_number)

        await bus.publish(
            db,
            NotificationRaised(
                title="Production started",
                message=f"{order.order_number} created for plan {plan.plan_number}",
                severity="success",
                entity_type="production_plan",
                entity_id=plan.id,
            ),
        )
        await bus.publish(db, DashboardRefresh())
        return plan

    @staticmethod
    async def recheck_awaiting_materials_plans(db: AsyncSession, bus: EventBus) -> list[VerificationResult]:
        """Silently re-verify every awaiting_materials plan; a failing plan is skipped."""
        plan_ids = (
            await db.execute(
                select(ProductionPlan.id)
                .where(ProductionPlan.status == PlanStatus.AWAITING_MATERIALS.value)
                .order_by(ProductionPlan.id)
            )
        ).scalars().all()
        results = []
        for plan_id in plan_ids:
            try:
                async with db.begin_nested():
                    results.append(
                        await ProductionPlanService.verify_inventory_for_production(db, bus, plan_id, silent=True)
                    )
            except (AutoPartsError, SQLAlchemyError) as e:
                logger.error("Re-verification of plan %s failed: %s", plan_id, e)
        ready = sum(1 for r in results if r.status == PlanStatus.PRODUCTION_READY.value)
        logger.info("Rechecked %d awaiting plan(s), %d now production ready", len(plan_ids), ready)
        return results

    @staticmethod
    async def get_plan_stats(db: AsyncSession) -> PlanStats:
        rows = await db.execute(
            select(ProductionPlan.status, func.count(ProductionPlan.id)).group_by(ProductionPlan.status)
        )
        counts = Counter({status: count for status, count in rows.all()})
        total = sum(counts.values())
        return PlanStats(
            total=total,
            active=total - counts[PlanStatus.COMPLETED.value],
            pending_verification=counts[PlanStatus.PENDING_VERIFICATION.value],
            production_ready=counts[PlanStatus.PRODUCTION_READY.value],
            awaiting_materials=counts[PlanStatus.AWAITING_MATERIALS.value],
            in_production=counts[PlanStatus.IN_PRODUCTION.value],
            completed=counts[PlanStatus.COMPLETED.value],
        )
