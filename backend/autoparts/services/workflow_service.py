"""AutoParts ERP: WorkflowService, one-glance counts across the reorder-to-production pipeline."""
from collections import Counter

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.models.production import KitProductionOrder, KitProductionStatus
from autoparts.models.purchase_order import POStatus, PurchaseOrder, WarehouseCheck
from autoparts.models.reorder import ReorderRequest, ReorderStatus
from autoparts.models.supplier_order import SupplierOrder, SupplierOrderStatus, WorkflowStatus
from autoparts.schemas.workflow import (
    KitProductionCounts,
    PurchaseOrderCounts,
    ReorderCounts,
    SupplierOrderCounts,
    WorkflowSummary,
)


async def _count_by(db: AsyncSession, column) -> Counter:
    rows = await db.execute(select(column, func.count()).group_by(column))
    return Counter({key: count for key, count in rows.all()})


class WorkflowService:

    @staticmethod
    async def get_workflow_summary(db: AsyncSession) -> WorkflowSummary:
        reorders = await _count_by(db, ReorderRequest.status)
        pos = await _count_by(db, PurchaseOrder.status)
        supplier_status = await _count_by(db, SupplierOrder.status)
        supplier_workflow = await _count_by(db, SupplierOrder.workflow_status)
        kits = await _count_by(db, KitProductionOrder.status)
        checks = await db.scalar(select(func.count(WarehouseCheck.id)))
        open_supplier_orders = await db.scalar(
            select(func.count(SupplierOrder.id)).where(
                SupplierOrder.workflow_status != WorkflowStatus.PAUSED.value,
                SupplierOrder.status.not_in(
                    (SupplierOrderStatus.RECEIVED.value, SupplierOrderStatus.CANCELLED.value)
                ),
            )
        )

        return WorkflowSummary(
            reorder_requests=ReorderCounts(
                pending=reorders[ReorderStatus.PENDING.value],
                approved=reorders[ReorderStatus.APPROVED.value],
                total=sum(reorders.values()),
            ),
            purchase_orders=PurchaseOrderCounts(
                pending=pos[POStatus.PENDING.value],
                in_progress=pos[POStatus.SENT.value] + pos[POStatus.PARTIAL.value],
                total=sum(pos.values()),
            ),
            warehouse_checks=checks or 0,
            supplier_orders=SupplierOrderCounts(
                active=open_supplier_orders or 0,
                paused=supplier_workflow[WorkflowStatus.PAUSED.value],
                received=supplier_status[SupplierOrderStatus.RECEIVED.value],
                total=sum(supplier_status.values()),
            ),
            kit_production=KitProductionCounts(
                planned=kits[KitProductionStatus.PLANNED.value],
                in_progress=kits[KitProductionStatus.IN_PROGRESS.value],
                completed=kits[KitProductionStatus.COMPLETED.value],
                total=sum(kits.values()),
            ),
        )
