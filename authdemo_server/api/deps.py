"""API dependencies for authentication.

Two credentials exist:
  - Authorization: Bearer <DEMO_API_KEY>   demo clients (SDK, web app)
  - X-Admin-Key: <ADMIN_API_KEY>           template authoring
"""
import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from authdemo_server.config import settings
from authdemo_server.middleware.monitoring import record_auth_failure

_bearer_scheme = HTTPBearer(auto_error=False)


def require_client(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    """Require the demo client bearer credential.

    Raises 401 when no bearer token is sent and 403 when it is wrong.
    """
    if not credentials:
        record_auth_failure("client")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Provide Authorization: Bearer <token>.",
        )
    if not hmac.compare_digest(credentials.credentials, settings.DEMO_API_KEY):
        record_auth_failure("client")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid demo client token",
        )
    return "client"


def require_admin(x_admin_key: Optional[str] = Header(None)) -> str:
    """Require admin authentication via ``X-Admin-Key``"""
    if not x_admin_key:
        record_auth_failure("admin")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Provide X-Admin-Key header.",
        )
    if not hmac.compare_digest(x_admin_key, settings.ADMIN_API_KEY):
        record_auth_failure("admin")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin key",
        )
    return "admin"
