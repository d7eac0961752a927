import logging
import time
import uuid

from fastapi import Request

from military_assets.core.config import SLOW_REQUEST_MS
from military_assets.core.logging import ACCESS_LOGGER

logger = logging.getLogger(ACCESS_LOGGER)

REQUEST_ID_HEADER = "X-Request-ID"


async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    response.headers[REQUEST_ID_HEADER] = request_id

    # get_current_user stores the RoleContext once the bearer token checks out
    ctx = getattr(request.state, "user", None)
    level = logging.WARNING if elapsed_ms >= SLOW_REQUEST_MS else logging.INFO

    logger.log(
        level,
        "",
        extra={
            "request_id": request_id,
            "client_addr": request.client.host if request.client else "unknown",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms,
            "user_id": str(ctx.user_id) if ctx else None,
        },
    )
    return response
