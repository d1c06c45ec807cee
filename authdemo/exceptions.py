"""Exceptions raised by the AuthDemo SDK"""
from typing import Optional


class GatewayError(Exception):
    """The agent gateway call failed (transport, non-2xx status, unparseable body)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(GatewayError):
    """HTTP 429 from the gateway. Transient, retry later."""


class QuotaExceededError(GatewayError):
    """HTTP 402 from the gateway. The demo's AI usage is exhausted."""


class ApprovalGateError(Exception):
    """The approval gate was used out of order"""
