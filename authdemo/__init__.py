from authdemo.approval import ApprovalGate, ApprovalRequest
from authdemo.autopilot import AUTOPILOT_SCRIPTS, AutopilotDriver, AutopilotScript, AutopilotStep, get_script
from authdemo.catalog import (
    DEMO_TEMPLATES,
    FEATURE_LIBRARY,
    GLOBAL_CATALOG,
    TOOL_LIBRARY,
    DemoTemplate,
    FeatureDef,
    ToolCatalog,
    ToolDef,
    apply_builder_overlay,
    generate_env_id,
    get_template_by_id,
    resolve_template,
)
from authdemo.conversation import ChatMessage, ConversationStore, ToolCallDisplay
from authdemo.exceptions import ApprovalGateError, GatewayError, QuotaExceededError, RateLimitedError
from authdemo.gateway import AgentGatewayClient, GatewayReply, PendingApproval, ToolCallDescriptor
from authdemo.orchestrator import Notice, Orchestrator, OrchestratorState
from authdemo.session import DemoSession
from authdemo.timeline import TimelineEvent, TimelineRecorder

__version__ = "0.1.0"

__all__ = [
    "AgentGatewayClient",
    "ApprovalGate",
    "ApprovalGateError",
    "ApprovalRequest",
    "AUTOPILOT_SCRIPTS",
    "AutopilotDriver",
    "AutopilotScript",
    "AutopilotStep",
    "ChatMessage",
    "ConversationStore",
    "DEMO_TEMPLATES",
    "DemoSession",
    "DemoTemplate",
    "FEATURE_LIBRARY",
    "FeatureDef",
    "GLOBAL_CATALOG",
    "GatewayError",
    "GatewayReply",
    "Notice",
    "Orchestrator",
    "OrchestratorState",
    "PendingApproval",
    "QuotaExceededError",
    "RateLimitedError",
    "TOOL_LIBRARY",
    "TimelineEvent",
    "TimelineRecorder",
    "ToolCallDescriptor",
    "ToolCallDisplay",
    "ToolCatalog",
    "ToolDef",
    "apply_builder_overlay",
    "generate_env_id",
    "get_template_by_id",
    "get_script",
    "resolve_template",
]
