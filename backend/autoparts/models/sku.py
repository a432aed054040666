"""AutoParts ERP: SKU and Vendor models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from autoparts.db.base import Base, utcnow


class SKUType(str, Enum):
    SINGLE = "single"
    KIT = "kit"


class SKUStatus(str, Enum):
    ACTIVE = "active"
    UPCOMING = "upcoming"
    DISCONTINUED = "discontinued"


class Vendor(Base):
    """External supplier of parts."""

    __tablename__ = "vendors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class SKU(Base):
    """Stock-keeping unit. Kits are assembled from components listed on a BOM template."""

    __tablename__ = "skus"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sku_code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku_type: Mapped[str] = mapped_column(String(20), nullable=False, default=SKUType.SINGLE.value)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SKUStatus.ACTIVE.value)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    vendor_id: Mapped[int | None] = mapped_column(ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
