"""AutoParts ERP: BOMTemplate and BOMComponent models."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoparts.db.base import Base, utcnow


class BOMTemplate(Base):
    """Bill of Materials: the component recipe for one kit SKU, per version."""

    __tablename__ = "bom_templates"
    __table_args__ = (UniqueConstraint("kit_sku_id", "version", name="uq_bom_templates_kit_version"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kit_sku_id: Mapped[int] = mapped_column(ForeignKey("skus.id", ondelete="CASCADE"), nullable=False)
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0")
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    labor_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    overhead_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    components: Mapped[list["BOMComponent"]] = relationship(
        "BOMComponent",
        back_populates="bom_template",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="BOMComponent.id",
    )


class BOMComponent(Base):
    """A single component line within a BOM template."""

    __tablename__ = "bom_components"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bom_template_id: Mapped[int] = mapped_column(ForeignKey("bom_templates.id", ondelete="CASCADE"), nullable=False)
    component_sku_id: Mapped[int] = mapped_column(ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False)
    quantity_required: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    line_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_critical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    bom_template: Mapped["BOMTemplate"] = relationship("BOMTemplate", back_populates="components", lazy="raise")
