from __future__ import annotations

import time
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from clinica.core.logging import get_logger, set_request_id

# health check do provedor chama a cada poucos segundos
_QUIET_PATHS = frozenset({"/healthz"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id + linha de log de início/fim para cada chamada da API."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        structlog.contextvars.clear_contextvars()
        rid = set_request_id(request.headers.get("X-Request-ID"))

        quiet = request.url.path in _QUIET_PATHS
        log = get_logger("http").bind(path=request.url.path, method=request.method)
        if not quiet:
            log.info("request.start")

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log.exception("request.error")
            raise
        duration_ms = round((time.perf_counter() - started) * 1000.0, 2)

        response.headers["X-Request-ID"] = rid
        if quiet:
            return response

        end = log.bind(
            status_code=response.status_code,
            duration_ms=duration_ms,
            user_id=getattr(request.state, "user_id", None),
        )
        if response.status_code >= 500:
            end.warning("request.end")
        else:
            end.info("request.end")
        return response
