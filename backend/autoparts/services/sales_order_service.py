"""AutoParts ERP: SalesOrderService, customer orders that may require kit production."""
import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.exceptions import NotFoundError, ValidationError
from autoparts.db.base import today
from autoparts.models.bom import BOMTemplate
from autoparts.models.sales_order import SalesOrder
from autoparts.services.numbering import yearly_number
from autoparts.services.production_plan_service import ProductionPlanService

logger = logging.getLogger(__name__)


class SalesOrderService:

    @staticmethod
    async def create_sales_order(
        db: AsyncSession,
        customer_name: str,
        bom_template_id: int | None = None,
        quantity: int = 1,
        *,
        unit_price: Decimal | None = None,
        production_required: bool | None = None,
        priority: str = "medium",
    ) -> SalesOrder:
        """Create a sales order. Kit orders get their production plan straight away."""
        if quantity <= 0:
            raise ValidationError("quantity must be positive")
        if bom_template_id is not None:
            template = await db.get(BOMTemplate, bom_template_id)
            if template is None:
                raise NotFoundError("BOMTemplate", bom_template_id)
            if not template.is_active:
                raise ValidationError(f"BOM template {template.id} v{template.version} is no longer active")
        if production_required is None:
            production_required = bom_template_id is not None

        order = SalesOrder(
            customer_name=customer_name,
            bom_template_id=bom_template_id,
            quantity=quantity,
            unit_price=unit_price,
            production_required=production_required,
            priority=priority,
        )
        db.add(order)
        await db.flush()
        order.order_number = yearly_number("SO", order.id, today())
        await db.flush()
        logger.info("Created sales order %s for %s", order.order_number, customer_name)

        if production_required and bom_template_id is not None:
            await ProductionPlanService.create_plan_for_sales_order(db, order)
        return order

    @staticmethod
    async def get_sales_order(db: AsyncSession, order_id: int) -> SalesOrder:
        order = await db.get(SalesOrder, order_id)
        if order is None:
            raise NotFoundError("SalesOrder", order_id)
        return order

    @staticmethod
    async def list_sales_orders(db: AsyncSession, production_required: bool | None = None) -> list[SalesOrder]:
        q = select(SalesOrder)
        if production_required is not None:
            q = q.where(SalesOrder.production_required.is_(production_required))
        result = await db.execute(q.order_by(SalesOrder.id.desc()))
        return list(result.scalars().all())
