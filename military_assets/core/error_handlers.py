import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from military_assets.constants.error_codes import ErrorCode
from military_assets.core import config
from military_assets.core.exceptions import AppException
from military_assets.utils.response import error_response

logger = logging.getLogger(__name__)

HTTP_STATUS_TO_ERROR_CODE = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
}


def _where(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


def _debug_detail(exc: Exception):
    return repr(exc) if config.IS_DEVELOPMENT else None


# -------------------------
# DOMAIN ERRORS
# -------------------------
async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.detail, extra=_where(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.detail, exc.error_code, jsonable_encoder(exc.details)),
    )


# -------------------------
# MALFORMED INPUT (400, handled before any service runs)
# -------------------------
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=error_response(
            "Invalid request data",
            ErrorCode.VALIDATION_ERROR,
            jsonable_encoder(exc.errors()),
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            exc.detail,
            HTTP_STATUS_TO_ERROR_CODE.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
        ),
        headers=getattr(exc, "headers", None),
    )


# -------------------------
# DATABASE
# -------------------------
def _constraint_error_code(exc: IntegrityError) -> ErrorCode:
    # a balance CHECK only trips when a concurrent writer won the race for the same row
    if "ck_asset_balance" in str(exc.orig):
        return ErrorCode.INSUFFICIENT_BALANCE
    return ErrorCode.CONFLICT


async def integrity_error_handler(request: Request, exc: IntegrityError):
    error_code = _constraint_error_code(exc)
    logger.warning("Constraint violation (%s)", error_code.value, extra=_where(request))
    return JSONResponse(
        status_code=409,
        content=error_response("Database constraint violation", error_code, _debug_detail(exc)),
    )


async def persistence_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database operation failed", extra=_where(request))
    return JSONResponse(
        status_code=500,
        content=error_response(
            "Database operation failed. No changes were applied.",
            ErrorCode.PERSISTENCE_ERROR,
            _debug_detail(exc),
        ),
    )


# -------------------------
# LAST RESORT
# -------------------------
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", extra=_where(request))
    return JSONResponse(
        status_code=500,
        content=error_response(
            "Something went wrong. Please try again.",
            ErrorCode.INTERNAL_ERROR,
            _debug_detail(exc),
        ),
    )
