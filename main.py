# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from military_assets.routers import (
    auth_router,
    activity_router,
    user_router,
    base_router,
    asset_type_router,
    asset_router,
    purchase_router,
    transfer_router,
    expenditure_router,
    assignment_router,
    report_router,
)

from military_assets.core import config
from military_assets.core.db import Database, init_models
from military_assets.core.scheduler import create_scheduler
from military_assets.core.exceptions import AppException
from military_assets.core.logging import setup_logging
from military_assets.middleware.request_logging import request_logging_middleware
from military_assets.utils.response import APIErrorResponse
from military_assets.core.error_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    integrity_error_handler,
    persistence_error_handler,
    unhandled_exception_handler,
)

APP_NAME = "Military Asset Management API"

ERROR_RESPONSES = {
    status_code: {"model": APIErrorResponse}
    for status_code in (400, 401, 403, 404, 409)
}

# ------------------------------------------------------------------------------
# LOGGING
# ------------------------------------------------------------------------------
setup_logging()
logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# LIFESPAN
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application", extra={"environment": config.APP_ENV})
    database: Database = app.state.database

    if config.IS_DEVELOPMENT:
        await init_models(database)
    else:
        logger.info("Non-development mode: init_models() skipped")

    scheduler = create_scheduler(database)
    if not config.IS_PRODUCTION or config.ENABLE_SCHEDULER:
        scheduler.start()
        logger.info("Scheduler started")
    else:
        logger.info("Scheduler disabled (production)")

    yield

    logger.info("Shutting down application")
    if scheduler.running:
        scheduler.shutdown()
    await database.dispose()


# ------------------------------------------------------------------------------
# APP FACTORY
# ------------------------------------------------------------------------------
def create_app(database: Database | None = None) -> FastAPI:
    app = FastAPI(
        title=APP_NAME,
        description="Asset ledger, transfers and assignments across military bases",
        version=config.APP_VERSION,
        docs_url="/docs" if not config.IS_PRODUCTION else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.database = database or Database.from_settings()

    # --------------------------------------------------------------------------
    # EXCEPTION HANDLERS
    # --------------------------------------------------------------------------
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------------------
    # MIDDLEWARE
    # --------------------------------------------------------------------------
    app.middleware("http")(request_logging_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --------------------------------------------------------------------------
    # HEALTH CHECK
    # --------------------------------------------------------------------------
    @app.get("/", tags=["Health"])
    async def health_check():
        return {
            "status": "ok",
            "service": "military-asset-api",
            "environment": config.APP_ENV,
            "version": config.APP_VERSION,
        }

    # --------------------------------------------------------------------------
    # ROUTERS
    # --------------------------------------------------------------------------
    for router in (
        auth_router,
        user_router,
        activity_router,
        base_router,
        asset_type_router,
        asset_router,
        purchase_router,
        transfer_router,
        expenditure_router,
        assignment_router,
        report_router,
    ):
        app.include_router(router, responses=ERROR_RESPONSES)

    return app


app = create_app()
