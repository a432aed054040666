"""AutoParts ERP: AlertService, persisted dashboard alerts."""
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.models.warehouse import Alert, AlertSeverity

logger = logging.getLogger(__name__)


class AlertService:

    @staticmethod
    async def create_alert(
        db: AsyncSession,
        alert_type: str,
        title: str,
        message: str,
        severity: AlertSeverity | str = AlertSeverity.MEDIUM,
        entity_type: str | None = None,
        entity_id: int | None = None,
    ) -> Alert:
        alert = Alert(
            alert_type=alert_type,
            title=title,
            message=message,
            severity=severity.value if isinstance(severity, AlertSeverity) else severity,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        db.add(alert)
        await db.flush()
        logger.info("Alert %s [%s]: %s", alert_type, alert.severity, title)
        return alert

    @staticmethod
    async def list_alerts(
        db: AsyncSession,
        unread_only: bool = False,
        alert_type: str | None = None,
        limit: int = 100,
    ) -> list[Alert]:
        q = select(Alert)
        if unread_only:
            q = q.where(Alert.is_read.is_(False))
        if alert_type:
            q = q.where(Alert.alert_type == alert_type)
        q = q.order_by(Alert.id.desc()).limit(limit)
        result = await db.execute(q)
        return list(result.scalars().all())

    @staticmethod
    async def mark_read(db: AsyncSession, alert_ids: list[int]) -> int:
        if not alert_ids:
            return 0
        result = await db.execute(
            update(Alert).where(Alert.id.in_(alert_ids)).values(is_read=True)
        )
        await db.flush()
        return result.rowcount or 0
