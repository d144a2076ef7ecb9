import json
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from config.settings import settings

logger = logging.getLogger("app.requests")


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        # error handlers read this to report latency_ms
        request.state.started_at = start
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)

        if settings.REQUEST_LOG_JSON:
            logger.info(json.dumps({
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": latency_ms,
                "trace_id": request.headers.get("X-Request-ID"),
            }))
        else:
            logger.info(f"{request.method} {request.url.path} {response.status_code} {latency_ms}ms")
        return response
