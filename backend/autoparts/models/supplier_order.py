"""AutoParts ERP: SupplierOrder model."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from autoparts.db.base import Base, utcnow


class SupplierOrderStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    CONFIRMED = "confirmed"
    IN_TRANSIT = "in_transit"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class WorkflowStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    RESUMED = "resumed"


class SupplierOrder(Base):
    """Order placed with an external supplier after a failed warehouse check.

    status (fulfillment) and workflow_status (pause gating) are independent
    state machines: an order can be sent and paused at the same time.
    """

    __tablename__ = "supplier_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str | None] = mapped_column(String(30), nullable=True, unique=True)
    purchase_order_item_id: Mapped[int] = mapped_column(ForeignKey("purchase_order_items.id", ondelete="RESTRICT"), nullable=False)
    sku_id: Mapped[int] = mapped_column(ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False)
    supplier_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SupplierOrderStatus.PENDING.value)
    is_regular_supplier: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    actual_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    quantity_ordered: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tracking_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    workflow_status: Mapped[str] = mapped_column(String(20), nullable=False, default=WorkflowStatus.ACTIVE.value)
    pause_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    resume_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version}
