"""Catalog, ledger, reorder, purchasing, supplier orders, BOM and production planning

Revision ID: 0001
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False))
    return cols


def upgrade() -> None:
    # ── 1. Catalog ───────────────────────────────────────────────────────────
    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(updated=False),
    )
    op.create_table(
        "skus",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sku_code", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sku_type", sa.String(20), nullable=False, server_default="single"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_skus_vendor_id", "skus", ["vendor_id"])
    op.create_table(
        "warehouses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(updated=False),
    )

    # ── 2. Inventory ledger ──────────────────────────────────────────────────
    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_on_hand", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quantity_reserved", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quantity_available", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("safety_stock_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reorder_point", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_stock_level", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("sku_id", "warehouse_id", name="uq_inventory_sku_warehouse"),
        sa.CheckConstraint("quantity_available >= 0", name="ck_inventory_available_non_negative"),
    )
    op.create_table(
        "inventory_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("transaction_type", sa.String(30), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reference_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_inventory_transactions_sku_wh", "inventory_transactions", ["sku_id", "warehouse_id"])
    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("alert_type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(updated=False),
    )

    # ── 3. Reorder requests ──────────────────────────────────────────────────
    op.create_table(
        "reorder_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_requested", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("requested_by", sa.Integer(), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_reorder_requests_sku_status", "reorder_requests", ["sku_id", "status"])

    # ── 4. BOM templates ─────────────────────────────────────────────────────
    op.create_table(
        "bom_templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("kit_sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.String(20), nullable=False, server_default="1.0"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("labor_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("overhead_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("kit_sku_id", "version", name="uq_bom_templates_kit_version"),
    )
    op.create_table(
        "bom_components",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("bom_template_id", sa.Integer(), sa.ForeignKey("bom_templates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("component_sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_required", sa.Integer(), nullable=False),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("line_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_critical", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_bom_components_template", "bom_components", ["bom_template_id"])

    # ── 5. Sales orders, kit production, production plans ────────────────────
    op.create_table(
        "sales_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_number", sa.String(30), nullable=True, unique=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("bom_template_id", sa.Integer(), sa.ForeignKey("bom_templates.id", ondelete="SET NULL"), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("production_required", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
    )
    op.create_table(
        "kit_production_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_number", sa.String(30), nullable=True, unique=True),
        sa.Column("kit_sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("bom_template_id", sa.Integer(), sa.ForeignKey("bom_templates.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_planned", sa.Integer(), nullable=False),
        sa.Column("quantity_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="planned"),
        sa.Column("planned_start_date", sa.Date(), nullable=True),
        sa.Column("actual_start_date", sa.Date(), nullable=True),
        sa.Column("planned_completion_date", sa.Date(), nullable=True),
        sa.Column("actual_completion_date", sa.Date(), nullable=True),
        sa.Column("total_material_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("labor_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("overhead_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("supervisor_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "production_plans",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("plan_number", sa.String(50), nullable=False, unique=True),
        sa.Column("sales_order_id", sa.Integer(), sa.ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bom_template_id", sa.Integer(), sa.ForeignKey("bom_templates.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="pending_verification"),
        sa.Column("inventory_check", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column(
            "production_order_id",
            sa.Integer(),
            sa.ForeignKey("kit_production_orders.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("purchase_orders_generated", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("purchase_orders_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("purchase_orders_created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("sales_order_id", "bom_template_id", name="uq_production_plans_order_template"),
    )
    op.create_index("ix_production_plans_status", "production_plans", ["status"])

    # ── 6. Purchasing ────────────────────────────────────────────────────────
    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_number", sa.String(30), nullable=True, unique=True),
        sa.Column("vendor_id", sa.Integer(), nullable=True),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "reorder_request_id",
            sa.Integer(),
            sa.ForeignKey("reorder_requests.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "production_plan_id",
            sa.Integer(),
            sa.ForeignKey("production_plans.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "dedup_key",
            sa.String(100),
            nullable=True,
            unique=True,
            comment="plan:<plan_id>:sku:<sku_id> while the order is open",
        ),
        *_timestamps(),
    )
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["status"])
    op.create_index("ix_purchase_orders_production_plan_id", "purchase_orders", ["production_plan_id"])
    op.create_table(
        "purchase_order_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "purchase_order_id",
            sa.Integer(),
            sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_ordered", sa.Integer(), nullable=False),
        sa.Column("quantity_received", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("line_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("warehouse_status", sa.String(30), nullable=False, server_default="not_checked"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_purchase_order_items_po", "purchase_order_items", ["purchase_order_id"])
    op.create_table(
        "warehouse_checks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "purchase_order_item_id",
            sa.Integer(),
            sa.ForeignKey("purchase_order_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("checker_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("quantity_found", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("check_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_table(
        "supplier_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_number", sa.String(30), nullable=True, unique=True),
        sa.Column(
            "purchase_order_item_id",
            sa.Integer(),
            sa.ForeignKey("purchase_order_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("sku_id", sa.Integer(), sa.ForeignKey("skus.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("supplier_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("is_regular_supplier", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("actual_delivery_date", sa.Date(), nullable=True),
        sa.Column("quantity_ordered", sa.Integer(), nullable=False),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("tracking_number", sa.String(100), nullable=True),
        sa.Column("workflow_status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("pause_reason", sa.Text(), nullable=True),
        sa.Column("resume_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_supplier_orders_workflow_status", "supplier_orders", ["workflow_status"])


def downgrade() -> None:
    for table in (
        "supplier_orders",
        "warehouse_checks",
        "purchase_order_items",
        "purchase_orders",
        "production_plans",
        "kit_production_orders",
        "sales_orders",
        "bom_components",
        "bom_templates",
        "reorder_requests",
        "alerts",
        "inventory_transactions",
        "inventory",
        "warehouses",
        "skus",
        "vendors",
    ):
        op.drop_table(table)
