"""
Error Handlers
==============
Maps the auth error taxonomy to HTTP responses.

Clients only ever see the error's public message and machine code; anything
unexpected becomes a generic 500.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from spendly_auth.exceptions import AuthError, RateLimitError

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_rejected",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
    )

    headers = {}
    if isinstance(exc, RateLimitError) and exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers or None,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({
        ".".join(str(part) for part in err.get("loc", ())[1:]) or "body"
        for err in exc.errors()
    })
    logger.warning("request_body_invalid", path=request.url.path, fields=fields)
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Missing or invalid fields: " + ", ".join(fields),
            "code": "VALIDATION_ERROR",
            "fields": fields,
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": INTERNAL_ERROR_MESSAGE,
            "code": "INTERNAL_ERROR",
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
