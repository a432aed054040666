"""AutoParts ERP: Celery worker configuration."""
from celery import Celery

from autoparts.config import get_settings

settings = get_settings()

celery_app = Celery(
    "autoparts_erp",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.REDIS_URL,
    include=["autoparts.tasks.production_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_default_retry_delay=60,
    task_routes={
        "autoparts.tasks.*": {"queue": "default"},
    },
)

# Celery Beat schedule
celery_app.conf.beat_schedule = {
    "scan-vendor-assignments": {
        "task": "autoparts.tasks.production_tasks.scan_vendor_assignments",
        "schedule": settings.VENDOR_SCAN_INTERVAL_SECONDS,
    },
}
