"""AutoParts ERP: PurchaseOrder, PurchaseOrderItem and WarehouseCheck models."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoparts.db.base import Base, utcnow


class POStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    PARTIAL = "partial"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class WarehouseStatus(str, Enum):
    NOT_CHECKED = "not_checked"
    IN_WAREHOUSE = "in_warehouse"
    NOT_AVAILABLE = "not_available"
    PARTIAL_AVAILABLE = "partial_available"
    NEW_ORDER_REQUIRED = "new_order_required"


class PurchaseOrder(Base):
    """Purchase Order header. Created from an approved reorder request or a production plan shortage."""

    __tablename__ = "purchase_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str | None] = mapped_column(String(30), nullable=True, unique=True)
    vendor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    warehouse_id: Mapped[int] = mapped_column(ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False)
    reorder_request_id: Mapped[int | None] = mapped_column(ForeignKey("reorder_requests.id", ondelete="SET NULL"), nullable=True)
    production_plan_id: Mapped[int | None] = mapped_column(ForeignKey("production_plans.id", ondelete="SET NULL"), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=POStatus.PENDING.value)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # One open auto-generated order per (plan, component); released on receipt or cancel.
    dedup_key: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items: Mapped[list["PurchaseOrderItem"]] = relationship(
        "PurchaseOrderItem", back_populates="purchase_order", cascade="all, delete-orphan", lazy="selectin"
    )


class PurchaseOrderItem(Base):
    """A single line on a Purchase Order, tracked through the warehouse check."""

    __tablename__ = "purchase_order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id: Mapped[int] = mapped_column(ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False)
    sku_id: Mapped[int] = mapped_column(ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False)
    quantity_ordered: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    warehouse_status: Mapped[str] = mapped_column(String(30), nullable=False, default=WarehouseStatus.NOT_CHECKED.value)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    purchase_order: Mapped["PurchaseOrder"] = relationship("PurchaseOrder", back_populates="items", lazy="raise")


class WarehouseCheck(Base):
    """Append-only audit of a single manual warehouse check."""

    __tablename__ = "warehouse_checks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    purchase_order_item_id: Mapped[int] = mapped_column(ForeignKey("purchase_order_items.id", ondelete="CASCADE"), nullable=False)
    checker_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    quantity_found: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    check_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
