"""AutoParts ERP: reorder-to-production orchestration backend."""

__version__ = "0.1.0"
