"""AutoParts ERP: FastAPI dependencies (DB session, message bus)."""
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from autoparts.db.session import get_db
from autoparts.events import EventBus


def get_event_bus(request: Request) -> EventBus:
    """The bus built at startup and kept on app.state."""
    return request.app.state.event_bus


DbSession = Annotated[AsyncSession, Depends(get_db)]
Bus = Annotated[EventBus, Depends(get_event_bus)]
