"""
Structured Logging
==================
structlog configuration and request logging for the auth service.

Usage:
    from spendly_auth.structured_logging import setup_logging, RequestLoggingMiddleware

    setup_logging(service_name="spendly-auth", json_output=True)
    app.add_middleware(RequestLoggingMiddleware)

Modules log with ``structlog.get_logger(__name__)`` and event-style names:

    logger.info("otp_sent", phone=mask_phone(phone), provider="twilio")
"""

import logging
import re
import sys
import time
import uuid

import structlog

REQUEST_ID_HEADER = b"x-request-id"
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structlog on top of the standard library root logger.

    Args:
        service_name: Added to every event as ``service``
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines for production, key/value console output otherwise
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.get_logger("spendly_auth").info(
        "logging_configured",
        service=service_name,
        level=level.upper(),
    )


def resolve_request_id(raw) -> str:
    """
    Caller-supplied request ID if it is short and made of ``[A-Za-z0-9._-]``,
    otherwise a fresh one.
    """
    if raw:
        candidate = raw.decode("latin-1")
        if REQUEST_ID_PATTERN.fullmatch(candidate):
            return candidate
    return uuid.uuid4().hex[:12]


class RequestLoggingMiddleware:
    """
    ASGI middleware that tags each request with a request ID and logs it.

    The ID comes from ``X-Request-ID`` when the caller sends one, and is
    echoed back on the response.
    """

    def __init__(self, app):
        self.app = app
        self.logger = structlog.get_logger("spendly_auth.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = resolve_request_id(headers.get(REQUEST_ID_HEADER))
        method = scope.get("method", "")
        path = scope.get("path", "")

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                message.setdefault("headers", [])
                message["headers"] = list(message["headers"]) + [
                    (REQUEST_ID_HEADER, request_id.encode()),
                ]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            log = self.logger.info
            if status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            log(
                "http_request",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=duration_ms,
            )
            structlog.contextvars.clear_contextvars()
