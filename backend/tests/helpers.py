from sqlalchemy import func, select

from autoparts.models.warehouse import TransactionType
from autoparts.services.ledger_service import LedgerService


async def receive_stock(db, bus, sku, quantity, warehouse_id=1):
    return await LedgerService.update_inventory_level(
        db, bus, sku.id, warehouse_id, quantity, TransactionType.RECEIPT, notes="test stock"
    )


async def count_rows(db, model, *where):
    q = select(func.count()).select_from(model)
    if where:
        q = q.where(*where)
    return await db.scalar(q)
