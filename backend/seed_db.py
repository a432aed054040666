import asyncio
from decimal import Decimal

from sqlalchemy import select

from autoparts.db.session import async_session_maker, init_db
from autoparts.events.wiring import build_event_bus
from autoparts.models.sku import SKU, SKUType, Vendor
from autoparts.models.warehouse import TransactionType, Warehouse
from autoparts.services.bom_service import BOMService
from autoparts.services.catalog_service import CatalogService
from autoparts.services.ledger_service import LedgerService
from autoparts.services.sales_order_service import SalesOrderService

VENDORS = [
    ("Bosch Automotive Supply", "BOSCH"),
    ("Denso Parts Distribution", "DENSO"),
    ("NGK Spark Plug Co.", "NGK"),
    ("Mann+Hummel Filters", "MANN"),
]

# (code, name, unit cost, vendor code, initial stock, reorder point, max stock)
PARTS = [
    ("OF-001", "Oil Filter", "8.50", "MANN", 50, 20, 200),
    ("AF-001", "Air Filter", "14.00", "MANN", 5, 10, 150),
    ("SP-001", "Spark Plugs (set of 4)", "22.00", "NGK", 0, 8, 100),
    ("BP-001", "Brake Pads (front)", "35.00", "BOSCH", 40, 10, 120),
    ("WB-001", "Wiper Blades", "12.00", None, 75, 15, 150),
]


async def seed_database():
    print("Creating tables...")
    await init_db()
    bus = build_event_bus()

    async with async_session_maker() as db:
        # 1. Warehouse
        warehouse = await db.scalar(select(Warehouse).where(Warehouse.code == "MAIN"))
        if not warehouse:
            warehouse = await CatalogService.create_warehouse(
                db, "Main Distribution Center", "MAIN", "1 Parts Avenue"
            )
            print(f"Created warehouse {warehouse.code} ({warehouse.id})")

        # 2. Vendors
        vendors = {}
        for name, code in VENDORS:
            vendor = await db.scalar(select(Vendor).where(Vendor.code == code))
            if not vendor:
                vendor = await CatalogService.create_vendor(db, name, code)
            vendors[code] = vendor
        await db.commit()

        # 3. Parts and opening stock
        parts = {}
        for code, name, cost, vendor_code, stock, reorder_point, max_level in PARTS:
            sku = await db.scalar(select(SKU).where(SKU.sku_code == code))
            if not sku:
                sku = await CatalogService.create_sku(
                    db,
                    code,
                    name,
                    category="maintenance",
                    unit_cost=Decimal(cost),
                    vendor_id=vendors[vendor_code].id if vendor_code else None,
                )
                if stock > 0:
                    await LedgerService.update_inventory_level(
                        db, bus, sku.id, warehouse.id, stock, TransactionType.RECEIPT, notes="Opening stock"
                    )
                    await LedgerService.set_stock_levels(
                        db, sku.id, warehouse.id, reorder_point=reorder_point, max_stock_level=max_level
                    )
            parts[code] = sku
        await db.commit()

        # 4. Service kit + BOM
        kit = await db.scalar(select(SKU).where(SKU.sku_code == "KIT-SVC-01"))
        if not kit:
            kit = await CatalogService.create_sku(
                db, "KIT-SVC-01", "Basic Service Kit", SKUType.KIT, category="kits", unit_price=Decimal("129.00")
            )
            template = await BOMService.create_bom_template(
                db,
                kit.id,
                "Basic Service Kit",
                [
                    {"component_sku_id": parts["OF-001"].id, "quantity_required": 12},
                    {"component_sku_id": parts["AF-001"].id, "quantity_required": 25},
                    {"component_sku_id": parts["SP-001"].id, "quantity_required": 8, "is_critical": True},
                ],
                labor_cost=Decimal("15.00"),
                overhead_cost=Decimal("5.00"),
            )
            print(f"Created BOM template {template.id} for {kit.sku_code}")

            # 5. A sales order that needs production
            order = await SalesOrderService.create_sales_order(db, "Northside Garage", template.id, 1)
            print(f"Created sales order {order.order_number}")
        await db.commit()
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed_database())
