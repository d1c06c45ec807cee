"""HTTP client for the agent gateway and environment endpoints"""
import logging
from typing import Any, Callable, Dict, List, Literal, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from authdemo.catalog import DemoTemplate
from authdemo.exceptions import GatewayError, QuotaExceededError, RateLimitedError

logger = logging.getLogger(__name__)


class ToolCallDescriptor(BaseModel):
    """A tool invocation reported by the agent.

    ``executed`` descriptors already carry their (mock) result;
    ``approval_required`` descriptors carry the arguments that will be replayed
    once a human decides.
    """

    type: Literal["executed", "approval_required"]
    tool_id: str
    tool_name: str
    tool_description: str = ""
    scopes: List[str] = Field(default_factory=list)
    result: Optional[Any] = None
    args: Dict[str, Any] = Field(default_factory=dict)
    auth0_feature: Optional[str] = None

    @property
    def requires_approval(self) -> bool:
        return self.type == "approval_required"


class PendingApproval(BaseModel):
    """A human (or synthetic) decision folded into the next gateway turn"""

    decision: Literal["approved", "denied"]
    tool_id: str
    args: Dict[str, Any] = Field(default_factory=dict)


class GatewayReply(BaseModel):
    content: str = ""
    tool_calls: List[ToolCallDescriptor] = Field(default_factory=list)


class AgentGatewayClient:
    """Client for the AuthDemo backend.

    The gateway keeps no conversation state: every ``converse`` call carries
    the full history, the template narrative and the tool catalog.

    Authentication is an opaque bearer credential obtained from
    ``token_provider`` on every request, so a refreshed identity token is
    picked up without rebuilding the client.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the gateway client.

        Args:
            base_url:       Base URL of the backend (e.g. ``http://localhost:8000``).
            token_provider: Callable returning the bearer credential, or None for anonymous calls.
            timeout:        Per-request timeout in seconds.
            session:        Optional pre-configured ``requests.Session``.
        """
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self.session = session or requests.Session()

    # ---------------------------------------------------------------------------
    # Internal transport
    # ---------------------------------------------------------------------------

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        """Send a request and translate failures into SDK exceptions.

        Raises:
            RateLimitedError:   On HTTP 429.
            QuotaExceededError: On HTTP 402.
            GatewayError:       On any other non-2xx status or a transport failure.
        """
        headers = kwargs.pop("headers", {})
        if self.token_provider is not None:
            token = self.token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise GatewayError(f"Request to {endpoint} failed: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitedError(
                _error_message(response, "Rate limits exceeded, please try again later."), status_code=429
            )
        if response.status_code == 402:
            raise QuotaExceededError(
                _error_message(response, "AI usage limit reached for this demo."), status_code=402
            )
        if not 200 <= response.status_code < 300:
            raise GatewayError(
                _error_message(response, f"Gateway returned HTTP {response.status_code}"),
                status_code=response.status_code,
            )
        return response

    # ---------------------------------------------------------------------------
    # Agent gateway
    # ---------------------------------------------------------------------------

    def converse(
        self,
        history: List[Dict[str, str]],
        template: DemoTemplate,
        env_id: str,
        pending_approvals: Optional[List[PendingApproval]] = None,
    ) -> GatewayReply:
        """
        Run one agent turn.

        Args:
            history:           Full chat history as ``[{role, content}]``.
            template:          Template supplying the tool catalog and narrative.
            env_id:            Demo environment the turn belongs to.
            pending_approvals: Decisions to fold into this turn.

        Returns:
            The assistant text and the tool calls it made.
        """
        body: Dict[str, Any] = {
            "messages": history,
            "template_id": template.id,
            "env_id": env_id,
            "system_prompt_parts": template.system_prompt_parts,
            "knowledge_pack": template.knowledge_pack,
            "tools": [tool.model_dump() for tool in template.tools],
        }
        if pending_approvals:
            body["pending_approvals"] = [p.model_dump() for p in pending_approvals]

        response = self._request("POST", "/demo-chat", json=body)
        try:
            return GatewayReply.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise GatewayError(f"Unparseable gateway response: {exc}") from exc

    # ---------------------------------------------------------------------------
    # Environments
    # ---------------------------------------------------------------------------

    def reset_environment(self, env_id: str) -> Dict[str, Any]:
        """Ask the backend to discard persisted rows for ``env_id``"""
        response = self._request("POST", "/reset-environment", json={"env_id": env_id})
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Unparseable reset response: {exc}") from exc

    def get_custom_demo(self, env_id: str) -> Dict[str, Any]:
        """Fetch a persisted custom demo record with its resolved template"""
        response = self._request("GET", f"/demos/{env_id}")
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Unparseable demo response: {exc}") from exc


def _error_message(response: requests.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or body.get("detail")
        if message:
            return str(message)
    return default
