"""
AutoParts ERP: FastAPI ASGI entry point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from autoparts import __version__
from autoparts.api.v1.router import api_router
from autoparts.config import get_settings
from autoparts.core.exceptions import AutoPartsError, InvalidTransitionError, NotFoundError, StorageError, ValidationError
from autoparts.core.logging import configure_logging
from autoparts.core.redis import close_redis
from autoparts.core.responses import error_response
from autoparts.events.wiring import build_event_bus

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: logging, message bus, Redis shutdown."""
    configure_logging(settings.LOG_LEVEL)
    if getattr(app.state, "event_bus", None) is None:
        app.state.event_bus = build_event_bus(settings)
    logger.info("AutoParts ERP %s starting (%s)", __version__, settings.ENVIRONMENT)
    yield
    await close_redis()


def _status_for(exc: AutoPartsError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, InvalidTransitionError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app() -> FastAPI:
    app = FastAPI(
        title="AutoParts ERP",
        description="Reorder-to-production orchestration for automotive parts distribution",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AutoPartsError)
    async def autoparts_error_handler(request: Request, exc: AutoPartsError):
        code = _status_for(exc)
        if code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=code, content=error_response(exc.code, exc.message, meta=exc.details))

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error on %s %s", request.method, request.url.path)
        err = StorageError("A storage error occurred")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response(err.code, err.message),
        )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        """Health check for load balancers and Docker."""
        return {"status": "ok", "service": "autoparts-erp"}

    return app


app = create_app()
