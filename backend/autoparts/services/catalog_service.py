"""AutoParts ERP: CatalogService, SKUs, vendors and warehouses."""
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.core.exceptions import NotFoundError, ValidationError
from autoparts.models.sku import SKU, SKUStatus, SKUType, Vendor
from autoparts.models.warehouse import Warehouse


class CatalogService:
    """Master data the workflow reads: parts, kits, vendors, warehouses."""

    @staticmethod
    async def create_sku(
        db: AsyncSession,
        sku_code: str,
        name: str,
        sku_type: SKUType | str = SKUType.SINGLE,
        *,
        category: str | None = None,
        unit_cost: Decimal | None = None,
        unit_price: Decimal | None = None,
        vendor_id: int | None = None,
        status: SKUStatus | str = SKUStatus.ACTIVE,
    ) -> SKU:
        try:
            sku_type = SKUType(sku_type)
            status = SKUStatus(status)
        except ValueError as e:
            raise ValidationError(str(e))
        if vendor_id is not None and await db.get(Vendor, vendor_id) is None:
            raise NotFoundError("Vendor", vendor_id)
        existing = await db.scalar(select(SKU.id).where(SKU.sku_code == sku_code))
        if existing is not None:
            raise ValidationError(f"SKU code already exists: {sku_code}")

        sku = SKU(
            sku_code=sku_code,
            name=name,
            sku_type=sku_type.value,
            status=status.value,
            category=category,
            unit_cost=unit_cost,
            unit_price=unit_price,
            vendor_id=vendor_id,
        )
        db.add(sku)
        await db.flush()
        return sku

    @staticmethod
    async def get_sku(db: AsyncSession, sku_id: int) -> SKU:
        sku = await db.get(SKU, sku_id)
        if sku is None:
            raise NotFoundError("SKU", sku_id)
        return sku

    @staticmethod
    async def list_skus(
        db: AsyncSession,
        *,
        sku_type: str | None = None,
        search: str | None = None,
    ) -> list[SKU]:
        q = select(SKU)
        if sku_type:
            q = q.where(SKU.sku_type == sku_type)
        if search:
            term = f"%{search}%"
            q = q.where(or_(SKU.sku_code.ilike(term), SKU.name.ilike(term)))
        result = await db.execute(q.order_by(SKU.sku_code))
        return list(result.scalars().all())

    @staticmethod
    async def create_vendor(
        db: AsyncSession,
        name: str,
        code: str,
        contact_email: str | None = None,
        is_active: bool = True,
    ) -> Vendor:
        existing = await db.scalar(select(Vendor.id).where(Vendor.code == code))
        if existing is not None:
            raise ValidationError(f"Vendor code already exists: {code}")
        vendor = Vendor(name=name, code=code, contact_email=contact_email, is_active=is_active)
        db.add(vendor)
        await db.flush()
        return vendor

    @staticmethod
    async def list_vendors(db: AsyncSession, active_only: bool = False) -> list[Vendor]:
        q = select(Vendor)
        if active_only:
            q = q.where(Vendor.is_active.is_(True))
        result = await db.execute(q.order_by(Vendor.name))
        return list(result.scalars().all())

    @staticmethod
    async def create_warehouse(
        db: AsyncSession,
        name: str,
        code: str,
        address: str | None = None,
    ) -> Warehouse:
        existing = await db.scalar(select(Warehouse.id).where(Warehouse.code == code))
        if existing is not None:
            raise ValidationError(f"Warehouse code already exists: {code}")
        warehouse = Warehouse(name=name, code=code, address=address)
        db.add(warehouse)
        await db.flush()
        return warehouse

    @staticmethod
    async def list_warehouses(db: AsyncSession) -> list[Warehouse]:
        result = await db.execute(
            select(Warehouse).where(Warehouse.is_active.is_(True)).order_by(Warehouse.code)
        )
        return list(result.scalars().all())
