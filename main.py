#main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.bridge.service import reset_bridge_payout_service
from app.bridge.validate import validate_bridge_startup
from db import close_pool
from middleware import RequestContextMiddleware
from routes.bridge_readiness import router as bridge_readiness_router
from routes.health import router as health_router
from routes.metrics import router as metrics_router
from services.observability import RequestIdFilter
from settings import settings

logger = logging.getLogger("offramp")


def _configure_logging() -> None:
    logging.basicConfig(
        level=(settings.LOG_LEVEL or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s [%(request_id)s]: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_bridge_startup()
    yield
    reset_bridge_payout_service()
    close_pool()


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(title="Offramp Payouts API", version=settings.APP_VERSION, lifespan=lifespan)

    app.add_middleware(RequestContextMiddleware)

    # -----------------------------
    # ROUTERS
    # -----------------------------

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(bridge_readiness_router)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


app = create_app()
