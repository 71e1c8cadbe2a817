"""
Middleware that logs every catalog request with structured fields.
The Datadog handler lifts the `extra` attributes into searchable facets.
"""
import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("catalog_app")

HEALTH_PATHS = {"/health", "/api/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in HEALTH_PATHS:
            return await call_next(request)

        start_time = time.time()
        method = request.method
        fields = {
            "http.method": method,
            "http.url": path,
            "http.client_ip": request.client.host if request.client else "unknown",
            "http.client_port": request.client.port if request.client else 0,
            "http.request_id": request.headers.get("X-Request-ID", ""),
        }

        logger.info(f"{method} {path}", extra={**fields, "event_type": "http_request_start"})

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"{method} {path} 500 - {str(e)}",
                extra={
                    **fields,
                    "http.status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                    "error.type": type(e).__name__,
                    "event_type": "http_request_error",
                },
                exc_info=True
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"{method} {path} {response.status_code}",
            extra={
                **fields,
                "http.status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "event_type": "http_request_complete",
            }
        )
        return response
