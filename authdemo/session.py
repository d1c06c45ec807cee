"""Demo session bootstrap: template resolution, orchestrator and autopilot wiring"""
import logging
from typing import Any, Dict, Optional

from authdemo.autopilot import AutopilotDriver, AutopilotScript, get_script
from authdemo.catalog import DemoTemplate, generate_env_id, resolve_template
from authdemo.exceptions import GatewayError
from authdemo.gateway import AgentGatewayClient
from authdemo.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


class DemoSession:
    """One running demo: a resolved template, its orchestrator and autopilot.

    Use ``from_template`` for the built-in catalog and ``from_custom_demo`` for
    a demo persisted by the builder.
    """

    def __init__(
        self,
        gateway: AgentGatewayClient,
        template: DemoTemplate,
        env_id: str,
        identity: Optional[str] = None,
    ):
        self.gateway = gateway
        self.template = template
        self.env_id = env_id
        self.identity = identity

        self.orchestrator = Orchestrator(gateway, template, env_id)
        script = get_script(template.id)
        self.autopilot: Optional[AutopilotDriver] = (
            AutopilotDriver(self.orchestrator, script) if script else None
        )
        self.orchestrator.record_session_start(identity)
        logger.info("Demo session started", extra={"env_id": env_id, "template_id": template.id})

    @classmethod
    def from_template(
        cls,
        gateway: AgentGatewayClient,
        template_id: str,
        auth0_sub: str,
        identity: Optional[str] = None,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> "DemoSession":
        template = resolve_template(template_id, config_overrides)
        if template is None:
            raise ValueError(f"Unknown template: {template_id}")
        return cls(gateway, template, generate_env_id(auth0_sub, template_id), identity=identity)

    @classmethod
    def from_custom_demo(
        cls,
        gateway: AgentGatewayClient,
        env_id: str,
        identity: Optional[str] = None,
    ) -> "DemoSession":
        """Load a persisted demo record and run it under its own env id.

        Raises:
            GatewayError: If the record cannot be fetched or its template cannot be resolved.
        """
        record = gateway.get_custom_demo(env_id)
        resolved = record.get("template")
        if resolved:
            template = DemoTemplate.model_validate(resolved)
        else:
            template = resolve_template(record.get("template_id", ""), record.get("config_overrides"))
        if template is None:
            raise GatewayError(f"Custom demo {env_id} references an unknown template")
        return cls(gateway, template, record.get("env_id", env_id), identity=identity)

    @property
    def script(self) -> Optional[AutopilotScript]:
        return self.autopilot.script if self.autopilot else None

    def send(self, text: str) -> None:
        self.orchestrator.send_user_message(text)

    def approve(self) -> None:
        self.orchestrator.resolve_approval("approved")

    def deny(self) -> None:
        self.orchestrator.resolve_approval("denied")

    def reset(self) -> None:
        """Discard the whole session state, local and remote"""
        if self.autopilot:
            self.autopilot.stop()
        self.orchestrator.reset()
