"""Correlation ID middleware.

Tags every HTTP request with a correlation ID (taken from the
``X-Correlation-ID`` request header when it is usable, generated
otherwise) so that router, service and alert dispatcher log lines of one
request can be joined. The ID is echoed on the response.
"""

import time
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from glucos.logging_config import correlation_id_ctx, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Longer incoming IDs are replaced with a fresh UUID
MAX_CORRELATION_ID_LENGTH = 128

# Probe endpoints are logged at debug level only
QUIET_PATHS = frozenset({"/health", "/health/live"})


def resolve_correlation_id(scope: Scope) -> str:
    """Return the caller's correlation ID, or a new UUID if absent or oversized."""
    incoming = Headers(scope=scope).get(CORRELATION_ID_HEADER, "").strip()
    if 0 < len(incoming) <= MAX_CORRELATION_ID_LENGTH:
        return incoming
    return str(uuid.uuid4())


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class CorrelationIdMiddleware:
    """Pure ASGI middleware; non-HTTP scopes pass through untouched."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = resolve_correlation_id(scope)
        token = correlation_id_ctx.set(correlation_id)

        method, path = scope["method"], scope["path"]
        log = logger.debug if path in QUIET_PATHS else logger.info
        status_code: int | None = None
        started = time.perf_counter()

        async def send_with_header(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[CORRELATION_ID_HEADER] = correlation_id
            await send(message)

        log("Request started", method=method, path=path)
        try:
            await self.app(scope, receive, send_with_header)
        except Exception:
            logger.exception(
                "Request failed",
                method=method,
                path=path,
                duration_ms=_elapsed_ms(started),
            )
            raise
        else:
            log(
                "Request completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=_elapsed_ms(started),
            )
        finally:
            correlation_id_ctx.reset(token)
