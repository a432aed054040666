"""AutoParts ERP: BOMService, versioned kit recipes: create, read, archive, explode.

Templates are immutable once created. A changed recipe is a new version of the
same kit; creating it deactivates the previous active version, while plans and
production orders keep pointing at the version they were built from.
"""
import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.config import get_settings
from autoparts.core.exceptions import NotFoundError, ValidationError
from autoparts.models.bom import BOMComponent, BOMTemplate
from autoparts.models.sku import SKU, SKUType

logger = logging.getLogger(__name__)


def _next_version(versions: list[str]) -> str:
    majors = []
    for v in versions:
        try:
            majors.append(int(str(v).split(".")[0]))
        except ValueError:
            continue
    return f"{max(majors, default=0) + 1}.0"


class BOMService:
    """Registry of Bill of Materials templates for kit SKUs."""

    @staticmethod
    async def create_bom_template(
        db: AsyncSession,
        kit_sku_id: int,
        name: str,
        components: list[dict],
        version: str | None = None,
        *,
        description: str | None = None,
        labor_cost: Decimal = Decimal("0"),
        overhead_cost: Decimal = Decimal("0"),
        created_by: int | None = None,
    ) -> BOMTemplate:
        """Create a BOM template with its components atomically.

        components: [{component_sku_id, quantity_required, unit_cost?, is_critical?, notes?}]
        """
        settings = get_settings()
        # 1. Kit must exist, be a kit and have components
        if not components:
            raise ValidationError("Kit SKU must have at least one component")
        kit = await db.get(SKU, kit_sku_id)
        if kit is None:
            raise NotFoundError("SKU", kit_sku_id)
        if kit.sku_type != SKUType.KIT.value:
            raise ValidationError(f"SKU {kit.sku_code} is not a kit")

        # 2. Component lines
        seen: set[int] = set()
        lines = []
        material_cost = Decimal("0")
        for comp in components:
            component_sku_id = int(comp["component_sku_id"])
            quantity = int(comp["quantity_required"])
            if component_sku_id == kit_sku_id:
                raise ValidationError("Circular reference: kit cannot be a component of itself")
            if component_sku_id in seen:
                raise ValidationError(f"Component SKU {component_sku_id} listed more than once")
            if quantity <= 0:
                raise ValidationError("quantity_required must be positive")
            seen.add(component_sku_id)
            component_sku = await db.get(SKU, component_sku_id)
            if component_sku is None:
                raise NotFoundError("SKU", component_sku_id)

            unit_cost = comp.get("unit_cost")
            if unit_cost is None:
                unit_cost = component_sku.unit_cost or settings.DEFAULT_UNIT_COST
            unit_cost = Decimal(str(unit_cost))
            line_cost = unit_cost * quantity
            material_cost += line_cost
            lines.append(
                BOMComponent(
                    component_sku_id=component_sku_id,
                    quantity_required=quantity,
                    unit_cost=unit_cost,
                    line_cost=line_cost,
                    is_critical=bool(comp.get("is_critical", False)),
                    notes=comp.get("notes"),
                )
            )

        # 3. Versioning
        existing = list(
            (await db.execute(select(BOMTemplate).where(BOMTemplate.kit_sku_id == kit_sku_id))).scalars().all()
        )
        if version is None:
            version = _next_version([t.version for t in existing])
        elif any(t.version == version for t in existing):
            raise ValidationError(f"BOM version {version} already exists for kit {kit.sku_code}")
        for previous in existing:
            if previous.is_active:
                previous.is_active = False
                logger.info("BOM template %s v%s superseded", previous.id, previous.version)

        labor_cost = Decimal(str(labor_cost))
        overhead_cost = Decimal(str(overhead_cost))
        template = BOMTemplate(
            kit_sku_id=kit_sku_id,
            version=version,
            name=name,
            description=description,
            is_active=True,
            labor_cost=labor_cost,
            overhead_cost=overhead_cost,
            total_cost=material_cost + labor_cost + overhead_cost,
            created_by=created_by,
            components=lines,
        )
        db.add(template)
        await db.flush()
        logger.info("Created BOM template %s for kit %s v%s", template.id, kit.sku_code, version)
        return template

    @staticmethod
    async def get_bom_template_with_components(db: AsyncSession, template_id: int) -> BOMTemplate:
        """Get single template with components (selectin loaded)."""
        template = await db.scalar(select(BOMTemplate).where(BOMTemplate.id == template_id))
        if template is None:
            raise NotFoundError("BOMTemplate", template_id)
        return template

    @staticmethod
    async def list_bom_templates(
        db: AsyncSession,
        kit_sku_id: int | None = None,
        include_inactive: bool = False,
    ) -> list[BOMTemplate]:
        q = select(BOMTemplate)
        if not include_inactive:
            q = q.where(BOMTemplate.is_active.is_(True))
        if kit_sku_id is not None:
            q = q.where(BOMTemplate.kit_sku_id == kit_sku_id)
        result = await db.execute(q.order_by(BOMTemplate.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def archive_bom_template(db: AsyncSession, template_id: int) -> BOMTemplate:
        """Soft-delete by setting is_active=False."""
        template = await BOMService.get_bom_template_with_components(db, template_id)
        template.is_active = False
        await db.flush()
        return template

    @staticmethod
    async def explode_bom(db: AsyncSession, template_id: int, quantity: int = 1) -> dict[int, int]:
        """
        Expand a template for a given kit quantity.
        Returns {component_sku_id: total_required_quantity}.
        """
        if quantity <= 0:
            raise ValidationError("Explode quantity must be positive")
        template = await BOMService.get_bom_template_with_components(db, template_id)
        result: dict[int, int] = {}
        for comp in template.components:
            result[comp.component_sku_id] = result.get(comp.component_sku_id, 0) + comp.quantity_required * quantity
        return result
