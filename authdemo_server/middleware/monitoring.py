"""Monitoring and observability middleware"""
import time
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from authdemo_server.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "authdemo_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "authdemo_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

http_errors_total = Counter(
    "authdemo_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

# Demo-specific metrics
chat_turns_total = Counter(
    "authdemo_chat_turns_total",
    "Total agent turns served",
    ["template_id", "kind"]  # kind: user | continuation
)

tool_calls_total = Counter(
    "authdemo_tool_calls_total",
    "Total tool calls reported by the agent",
    ["tool_id", "type"]  # type: executed | approval_required
)

approval_decisions_total = Counter(
    "authdemo_approval_decisions_total",
    "Total approval decisions folded into agent turns",
    ["decision"]
)

environment_resets_total = Counter(
    "authdemo_environment_resets_total",
    "Total environment resets"
)

authentication_failures_total = Counter(
    "authdemo_authentication_failures_total",
    "Total authentication failures",
    ["type"]  # client, admin
)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()

        method = request.method
        endpoint = request.url.path

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            status = response.status_code

            duration = time.time() - start_time
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()

            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            if duration > 5.0:  # seconds
                logger.warning(
                    f"Slow request detected: {method} {endpoint}",
                    extra={"request_id": request_id, "status_code": status, "action": "slow_request"}
                )

            if status >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status=status
                ).inc()

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration:.3f}s"

            return response

        except Exception as e:
            http_errors_total.labels(
                method=method,
                endpoint=endpoint,
                status=500
            ).inc()

            logger.error(
                f"Request failed: {method} {endpoint}: {e}",
                extra={"request_id": request_id},
                exc_info=True
            )
            raise


def record_chat_turn(template_id: str, continuation: bool):
    """Record one served agent turn"""
    chat_turns_total.labels(
        template_id=template_id,
        kind="continuation" if continuation else "user"
    ).inc()


def record_tool_call(tool_id: str, call_type: str):
    """Record a tool call descriptor returned to the client"""
    tool_calls_total.labels(tool_id=tool_id, type=call_type).inc()


def record_approval_decision(decision: str):
    """Record an approval decision applied to a pending record"""
    approval_decisions_total.labels(decision=decision).inc()


def record_environment_reset():
    environment_resets_total.inc()


def record_auth_failure(auth_type: str):
    """Record authentication failure"""
    authentication_failures_total.labels(type=auth_type).inc()
