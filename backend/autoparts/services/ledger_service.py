"""AutoParts ERP: LedgerService, per-SKU per-warehouse inventory levels.

Every change is a delta. The record is updated in place, an InventoryTransaction
is appended, and InventoryUpdated / LowStockDetected go out on the bus.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.exceptions import NotFoundError, ValidationError
from autoparts.events import EventBus, InventoryUpdated, LowStockDetected
from autoparts.models.sku import SKU
from autoparts.models.warehouse import (
    AlertSeverity,
    InventoryRecord,
    InventoryTransaction,
    TransactionType,
    Warehouse,
)
from autoparts.services.alert_service import AlertService

logger = logging.getLogger(__name__)


class LedgerService:
    """Inventory levels with an append-only transaction trail."""

    @staticmethod
    async def get_inventory(
        db: AsyncSession,
        sku_id: int | None = None,
        warehouse_id: int | None = None,
        low_stock_only: bool = False,
    ) -> list[InventoryRecord]:
        q = select(InventoryRecord)
        if sku_id is not None:
            q = q.where(InventoryRecord.sku_id == sku_id)
        if warehouse_id is not None:
            q = q.where(InventoryRecord.warehouse_id == warehouse_id)
        if low_stock_only:
            q = q.where(InventoryRecord.quantity_available <= InventoryRecord.reorder_point)
        result = await db.execute(q.order_by(InventoryRecord.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_record(db: AsyncSession, sku_id: int, warehouse_id: int) -> InventoryRecord | None:
        return await db.scalar(
            select(InventoryRecord).where(
                InventoryRecord.sku_id == sku_id,
                InventoryRecord.warehouse_id == warehouse_id,
            )
        )

    @staticmethod
    async def get_available_quantity(db: AsyncSession, sku_id: int, warehouse_id: int | None = None) -> int:
        """Available units of a SKU at one warehouse, or summed over all warehouses."""
        q = select(func.coalesce(func.sum(InventoryRecord.quantity_available), 0)).where(
            InventoryRecord.sku_id == sku_id
        )
        if warehouse_id is not None:
            q = q.where(InventoryRecord.warehouse_id == warehouse_id)
        total = await db.scalar(q)
        return int(total or 0)

    @staticmethod
    async def update_inventory_level(
        db: AsyncSession,
        bus: EventBus,
        sku_id: int,
        warehouse_id: int,
        delta: int,
        reason: TransactionType | str = TransactionType.ADJUSTMENT,
        *,
        reference_id: int | None = None,
        notes: str | None = None,
    ) -> InventoryRecord:
        """Apply a signed quantity delta to on-hand stock.

        Raises ValidationError when available stock would go negative and
        NotFoundError when a negative delta targets a missing record.
        """
        try:
            reason = TransactionType(reason)
        except ValueError:
            raise ValidationError(f"Unknown transaction type: {reason}")
        if delta == 0:
            raise ValidationError("Inventory delta must be non-zero")

        record = await LedgerService.get_record(db, sku_id, warehouse_id)
        if record is None:
            if delta < 0:
                raise NotFoundError("InventoryRecord", f"{sku_id}@{warehouse_id}")
            if await db.get(SKU, sku_id) is None:
                raise NotFoundError("SKU", sku_id)
            if await db.get(Warehouse, warehouse_id) is None:
                raise NotFoundError("Warehouse", warehouse_id)
            record = InventoryRecord(
                sku_id=sku_id,
                warehouse_id=warehouse_id,
                quantity_on_hand=0,
                quantity_reserved=0,
                quantity_available=0,
                safety_stock_level=0,
                reorder_point=0,
            )
            db.add(record)

        old_on_hand = record.quantity_on_hand
        new_on_hand = old_on_hand + delta
        new_available = new_on_hand - record.quantity_reserved
        if new_on_hand < 0 or new_available < 0:
            raise ValidationError(
                f"Insufficient stock for SKU {sku_id} at warehouse {warehouse_id}: "
                f"available {record.quantity_available}, change {delta}",
                details={"sku_id": sku_id, "warehouse_id": warehouse_id, "delta": delta},
            )

        record.quantity_on_hand = new_on_hand
        record.quantity_available = new_available
        db.add(
            InventoryTransaction(
                sku_id=sku_id,
                warehouse_id=warehouse_id,
                transaction_type=reason.value,
                quantity=delta,
                reference_id=reference_id,
                notes=notes,
            )
        )
        await db.flush()
        logger.info(
            "Inventory SKU %s @ warehouse %s: %s -> %s (%s)",
            sku_id, warehouse_id, old_on_hand, new_on_hand, reason.value,
        )

        await bus.publish(
            db,
            InventoryUpdated(
                sku_id=sku_id,
                warehouse_id=warehouse_id,
                old_quantity=old_on_hand,
                new_quantity=new_on_hand,
                transaction_type=reason.value,
            ),
        )
        if record.quantity_available <= record.reorder_point:
            await LedgerService._raise_low_stock(db, bus, record)
        return record

    @staticmethod
    async def set_stock_levels(
        db: AsyncSession,
        sku_id: int,
        warehouse_id: int,
        *,
        reorder_point: int | None = None,
        safety_stock_level: int | None = None,
        max_stock_level: int | None = None,
        quantity_reserved: int | None = None,
    ) -> InventoryRecord:
        """Adjust thresholds and reservations without touching on-hand stock."""
        record = await LedgerService.get_record(db, sku_id, warehouse_id)
        if record is None:
            raise NotFoundError("InventoryRecord", f"{sku_id}@{warehouse_id}")
        for name, value in (
            ("reorder_point", reorder_point),
            ("safety_stock_level", safety_stock_level),
            ("max_stock_level", max_stock_level),
            ("quantity_reserved", quantity_reserved),
        ):
            if value is not None and value < 0:
                raise ValidationError(f"{name} must be >= 0")
        if quantity_reserved is not None:
            if quantity_reserved > record.quantity_on_hand:
                raise ValidationError("Cannot reserve more than quantity on hand")
            record.quantity_reserved = quantity_reserved
            record.quantity_available = record.quantity_on_hand - quantity_reserved
        if reorder_point is not None:
            record.reorder_point = reorder_point
        if safety_stock_level is not None:
            record.safety_stock_level = safety_stock_level
        if max_stock_level is not None:
            record.max_stock_level = max_stock_level
        await db.flush()
        return record

    @staticmethod
    async def get_transaction_history(
        db: AsyncSession,
        sku_id: int | None = None,
        warehouse_id: int | None = None,
        limit: int = 100,
    ) -> list[InventoryTransaction]:
        q = select(InventoryTransaction)
        if sku_id is not None:
            q = q.where(InventoryTransaction.sku_id == sku_id)
        if warehouse_id is not None:
            q = q.where(InventoryTransaction.warehouse_id == warehouse_id)
        result = await db.execute(q.order_by(InventoryTransaction.id.desc()).limit(limit))
        return list(result.scalars().all())

    @staticmethod
    async def _raise_low_stock(db: AsyncSession, bus: EventBus, record: InventoryRecord) -> None:
        out_of_stock = record.quantity_available == 0
        sku = await db.get(SKU, record.sku_id)
        label = sku.name if sku else f"SKU {record.sku_id}"
        await AlertService.create_alert(
            db,
            alert_type="out_of_stock" if out_of_stock else "low_stock",
            title=f"{'Out of stock' if out_of_stock else 'Low stock'}: {label}",
            message=(
                f"{label} has {record.quantity_available} units available at warehouse "
                f"{record.warehouse_id} (reorder point {record.reorder_point})"
            ),
            severity=AlertSeverity.HIGH if out_of_stock else AlertSeverity.MEDIUM,
            entity_type="inventory",
            entity_id=record.id,
        )
        await bus.publish(
            db,
            LowStockDetected(
                sku_id=record.sku_id,
                warehouse_id=record.warehouse_id,
                quantity_available=record.quantity_available,
                reorder_point=record.reorder_point,
                is_out_of_stock=out_of_stock,
            ),
        )
