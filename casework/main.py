from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from casework.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from casework.db.init_db import init_db
from casework.logging_config import configure_app_logging
from casework.routers import admin, appointments, cases, health, tasks, users
from casework.security.config import load_security_config
from casework.security.dependencies import enforce_security
from casework.security.errors import AccessError
from casework.settings import get_settings

logger = logging.getLogger(__name__)


async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "code": exc.code})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Keep the `{"error": ...}` shape for plain HTTP errors too (404 route, 405, ...).
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "code": "validation_error", "details": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(settings.resolved_security_config_path())
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())
        init_db(seed=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured + seed if enabled)")

        yield

    # Global dependency: every route goes through the access engine.
    app = FastAPI(title="Casework", dependencies=[Depends(enforce_security)], lifespan=lifespan)

    app.add_exception_handler(AccessError, access_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(cases.router)
    app.include_router(appointments.router)
    app.include_router(tasks.router)
    app.include_router(admin.router)

    return app


app = create_app()
