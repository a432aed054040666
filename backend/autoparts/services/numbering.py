"""AutoParts ERP: human-readable document numbers derived from database ids."""
import time
from datetime import date

from autoparts.db.base import today


def yearly_number(prefix: str, entity_id: int, on: date | None = None) -> str:
    """PO-2025-0042 style number. entity_id is the row id assigned on flush."""
    year = (on or today()).year
    return f"{prefix}-{year}-{entity_id:04d}"


def plan_number(sales_order_id: int) -> str:
    return f"PP-{int(time.time() * 1000)}-{sales_order_id}"
