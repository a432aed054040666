"""AutoParts ERP: KitProductionOrder and ProductionPlan models."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from autoparts.db.base import Base, utcnow


class KitProductionStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class PlanStatus(str, Enum):
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    PRODUCTION_READY = "production_ready"
    AWAITING_MATERIALS = "awaiting_materials"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"


class KitProductionOrder(Base):
    """A job to assemble kit SKUs from their BOM components."""

    __tablename__ = "kit_production_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str | None] = mapped_column(String(30), nullable=True, unique=True)
    kit_sku_id: Mapped[int] = mapped_column(ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False)
    bom_template_id: Mapped[int] = mapped_column(ForeignKey("bom_templates.id", ondelete="RESTRICT"), nullable=False)
    warehouse_id: Mapped[int] = mapped_column(ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False)
    quantity_planned: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=KitProductionStatus.PLANNED.value)
    planned_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    actual_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    planned_completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    actual_completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_material_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    labor_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    overhead_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    supervisor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ProductionPlan(Base):
    """Per (sales order, BOM template) record of inventory verification and production readiness.

    inventory_check holds the snapshot of the latest verification pass; status is
    derived from it until production starts.
    """

    __tablename__ = "production_plans"
    __table_args__ = (
        UniqueConstraint("sales_order_id", "bom_template_id", name="uq_production_plans_order_template"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    sales_order_id: Mapped[int] = mapped_column(ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False)
    bom_template_id: Mapped[int] = mapped_column(ForeignKey("bom_templates.id", ondelete="RESTRICT"), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=PlanStatus.PENDING_VERIFICATION.value)
    inventory_check: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    production_order_id: Mapped[int | None] = mapped_column(
        ForeignKey("kit_production_orders.id", ondelete="SET NULL"), nullable=True
    )
    purchase_orders_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    purchase_orders_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    purchase_orders_created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version}
