"""Middleware modules for production-ready features"""
from authdemo_server.middleware.monitoring import (
    MonitoringMiddleware,
    record_approval_decision,
    record_auth_failure,
    record_chat_turn,
    record_environment_reset,
    record_tool_call,
)
from authdemo_server.middleware.rate_limit import limiter

__all__ = [
    "MonitoringMiddleware",
    "record_approval_decision",
    "record_auth_failure",
    "record_chat_turn",
    "record_environment_reset",
    "record_tool_call",
    "limiter",
]
