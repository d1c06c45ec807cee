"""Conversation / tool call / approval orchestration for one demo session.

The orchestrator is a small state machine:

    IDLE --send--> AWAITING_AGENT --reply--> IDLE
                                  \\--approval required--> AWAITING_APPROVAL
    AWAITING_APPROVAL --resolve--> AWAITING_AGENT --follow-up--> IDLE

It is the only writer of the conversation, the timeline, the approval gate and
the pending tool context. Callers observe it through ``subscribe``.
"""
import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel

from authdemo.approval import ApprovalGate, ApprovalRequest, Decision
from authdemo.catalog import DemoTemplate
from authdemo.conversation import ChatMessage, ConversationStore, ToolCallDisplay
from authdemo.exceptions import GatewayError, QuotaExceededError, RateLimitedError
from authdemo.gateway import AgentGatewayClient, GatewayReply, PendingApproval, ToolCallDescriptor
from authdemo.timeline import TimelineEvent, TimelineRecorder

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "Sorry, I encountered an error. Please try again."
EMPTY_REPLY_MESSAGE = "I don't have anything to add to that yet."
APPROVED_FALLBACK = "Action completed."
DENIED_FALLBACK = "Action was denied."
PREVIEW_LENGTH = 60

Listener = Callable[[str, Any], None]


class OrchestratorState(str, Enum):
    IDLE = "idle"
    AWAITING_AGENT = "awaiting_agent"
    AWAITING_APPROVAL = "awaiting_approval"


class Notice(BaseModel):
    """Transient, non-blocking notification for the UI"""

    level: str  # info | warning | error
    message: str


class PendingToolContext(BaseModel):
    """Continuation of a turn suspended on the approval gate"""

    history: List[Dict[str, str]]
    partial_content: str = ""
    descriptor: ToolCallDescriptor
    pending_call: ToolCallDisplay
    tool_calls: List[ToolCallDisplay]


def _preview(text: str) -> str:
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH] + "..."


def _scope_detail(scopes: List[str]) -> Optional[str]:
    return f"Scopes: {', '.join(scopes)}" if scopes else None


def _data_summary(descriptor: ToolCallDescriptor) -> Dict[str, str]:
    summary: Dict[str, str] = {}
    for key, value in descriptor.args.items():
        label = key.replace("_", " ").strip().title()
        summary[label] = value if isinstance(value, str) else json.dumps(value, default=str)
    if descriptor.scopes:
        summary["Requested Scopes"] = ", ".join(descriptor.scopes)
    return summary


class Orchestrator:
    """Drives one chat session against the agent gateway.

    Every public operation runs to completion before returning; the only places
    a turn waits are the gateway call and the approval gate. A send while a turn
    is in progress is ignored, so at most one gateway round-trip is in flight.
    """

    def __init__(self, gateway: AgentGatewayClient, template: DemoTemplate, env_id: str):
        self.gateway = gateway
        self.template = template
        self.env_id = env_id

        self.conversation = ConversationStore()
        self.timeline = TimelineRecorder()
        self.approval_gate = ApprovalGate()

        self.last_tool: Optional[str] = None
        self._pending: Optional[PendingToolContext] = None
        self._state = OrchestratorState.IDLE
        self._generation = 0
        self._listeners: List[Listener] = []

    # ---------------------------------------------------------------------------
    # Observation
    # ---------------------------------------------------------------------------

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state == OrchestratorState.IDLE

    @property
    def messages(self) -> List[ChatMessage]:
        return self.conversation.messages

    @property
    def events(self) -> List[TimelineEvent]:
        return self.timeline.events

    @property
    def pending_context(self) -> Optional[PendingToolContext]:
        return self._pending

    @property
    def pending_tool_calls(self) -> List[ToolCallDisplay]:
        """Tool cards of the suspended turn (empty unless awaiting approval)"""
        return list(self._pending.tool_calls) if self._pending else []

    @property
    def current_approval(self) -> Optional[ApprovalRequest]:
        return self.approval_gate.current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(event, payload)``; returns an unsubscribe callable.

        Events: ``message``, ``timeline``, ``state``, ``approval``, ``notice``, ``reset``.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                logger.exception("Orchestrator listener failed", extra={"event": event})

    def _set_state(self, state: OrchestratorState) -> None:
        if state != self._state:
            self._state = state
            self._emit("state", state)

    def _append(self, role: str, content: str, tool_calls: Optional[List[ToolCallDisplay]] = None) -> ChatMessage:
        message = self.conversation.append(role, content, tool_calls)
        self._emit("message", message)
        return message

    def _record(self, type: str, title: str, detail: Optional[str] = None,
                status: Optional[str] = None, feature: Optional[str] = None) -> TimelineEvent:
        event = self.timeline.record(type, title, detail=detail, status=status, feature=feature)
        self._emit("timeline", event)
        return event

    def _notify(self, level: str, message: str) -> None:
        self._emit("notice", Notice(level=level, message=message))

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    # ---------------------------------------------------------------------------
    # Session events
    # ---------------------------------------------------------------------------

    def record_session_start(self, identity: Optional[str]) -> None:
        """Narrate the (already completed) sign-in as the first timeline event"""
        self._record(
            "auth",
            "User authenticated",
            detail=f"Signed in as {identity}" if identity else None,
            status="success",
            feature="Identity Context",
        )

    # ---------------------------------------------------------------------------
    # Turns
    # ---------------------------------------------------------------------------

    def send_user_message(self, text: str, feature: Optional[str] = None) -> None:
        """Send a user turn; ignored when ``text`` is blank or a turn is in progress"""
        text = (text or "").strip()
        if not text or self._state != OrchestratorState.IDLE:
            logger.debug("Ignoring send", extra={"state": self._state.value})
            return

        self._append("user", text)
        self._record("message", "User message", detail=_preview(text), feature=feature)
        self._set_state(OrchestratorState.AWAITING_AGENT)

        generation = self._generation
        history = self.conversation.history()
        try:
            reply = self.gateway.converse(history, self.template, self.env_id)
        except (RateLimitedError, QuotaExceededError) as exc:
            if self._is_stale(generation):
                return
            logger.warning("Agent turn rejected by gateway", extra={"env_id": self.env_id, "error": str(exc)})
            self._notify("warning", str(exc))
            self._set_state(OrchestratorState.IDLE)
            return
        except Exception:
            if self._is_stale(generation):
                return
            logger.exception("Agent turn failed", extra={"env_id": self.env_id})
            self._append("assistant", APOLOGY_MESSAGE)
            self._set_state(OrchestratorState.IDLE)
            return

        if self._is_stale(generation):
            logger.info("Discarding agent reply for a reset session", extra={"env_id": self.env_id})
            return
        self._handle_reply(history, reply, generation)

    def _handle_reply(self, history: List[Dict[str, str]], reply: GatewayReply, generation: int) -> None:
        tool_calls: List[ToolCallDisplay] = []
        executed: List[ToolCallDescriptor] = []

        for descriptor in reply.tool_calls:
            if descriptor.requires_approval:
                # Only the first approval of a turn is surfaced.
                self._suspend(history, reply.content, descriptor, tool_calls)
                return
            tool_calls.append(self._record_executed(descriptor))
            executed.append(descriptor)

        content = reply.content
        if executed:
            content, chained = self._follow_up(history, content, executed, generation)
            if self._is_stale(generation):
                return
            tool_calls.extend(self._record_executed(d) for d in chained)

        if not content:
            content = f"I used {', '.join(d.tool_name for d in executed)}." if executed else EMPTY_REPLY_MESSAGE
        self._append("assistant", content, tool_calls)
        self._set_state(OrchestratorState.IDLE)

    def _record_executed(self, descriptor: ToolCallDescriptor) -> ToolCallDisplay:
        display = ToolCallDisplay(
            tool_id=descriptor.tool_id,
            tool_name=descriptor.tool_name,
            tool_description=descriptor.tool_description,
            scopes=descriptor.scopes,
            status="completed",
            requires_approval=False,
            result=descriptor.result,
        )
        self._record(
            "tool_call",
            f"Tool called: {descriptor.tool_name}",
            detail=_scope_detail(descriptor.scopes),
            status="success",
            feature=descriptor.auth0_feature or "Fine-Grained Authorization",
        )
        self.last_tool = descriptor.tool_name
        return display

    def _follow_up(self, history: List[Dict[str, str]], content: str,
                   executed: List[ToolCallDescriptor], generation: int) -> Tuple[str, List[ToolCallDescriptor]]:
        """Let the agent report back on read-only tool results within the same turn.

        Returns the combined text and any further tools the follow-up ran.
        """
        names = ", ".join(d.tool_name for d in executed)
        follow_history = history + [{"role": "assistant", "content": content or f"I used {names} to help with your request."}]
        decisions = [PendingApproval(decision="approved", tool_id=d.tool_id, args=d.args) for d in executed]
        try:
            follow = self.gateway.converse(follow_history, self.template, self.env_id, pending_approvals=decisions)
        except (RateLimitedError, QuotaExceededError) as exc:
            if not self._is_stale(generation):
                self._notify("warning", str(exc))
            return content, []
        except Exception:
            logger.exception("Tool follow-up failed", extra={"env_id": self.env_id})
            return content, []

        chained = []
        for descriptor in follow.tool_calls:
            if descriptor.requires_approval:
                logger.info("Dropping chained approval request", extra={"tool_id": descriptor.tool_id})
                continue
            chained.append(descriptor)
        return "\n\n".join(part for part in (content, follow.content) if part), chained

    def _suspend(self, history: List[Dict[str, str]], partial: str,
                 descriptor: ToolCallDescriptor, tool_calls: List[ToolCallDisplay]) -> None:
        pending_call = ToolCallDisplay(
            tool_id=descriptor.tool_id,
            tool_name=descriptor.tool_name,
            tool_description=descriptor.tool_description,
            scopes=descriptor.scopes,
            status="pending",
            requires_approval=True,
        )
        tool_calls.append(pending_call)
        feature = descriptor.auth0_feature or "Async Authorization"
        self._record(
            "approval",
            f"Approval required: {descriptor.tool_name}",
            detail=_scope_detail(descriptor.scopes),
            status="pending",
            feature=feature,
        )

        request = ApprovalRequest(
            tool_id=descriptor.tool_id,
            tool_name=descriptor.tool_name,
            tool_description=descriptor.tool_description,
            scopes=descriptor.scopes,
            data_summary=_data_summary(descriptor),
            feature=feature,
            explanation=(
                f"{descriptor.tool_name} needs {', '.join(descriptor.scopes) or 'elevated access'}. "
                "The agent is paused until you approve or deny this action on your behalf."
            ),
        )
        self._pending = PendingToolContext(
            history=history,
            partial_content=partial,
            descriptor=descriptor,
            pending_call=pending_call,
            tool_calls=tool_calls,
        )
        if partial.strip():
            self._append("assistant", partial)
        self.approval_gate.request(request)
        self.last_tool = descriptor.tool_name
        self._set_state(OrchestratorState.AWAITING_APPROVAL)
        self._emit("approval", request)

    def resolve_approval(self, decision: Decision) -> None:
        """Apply the human decision and finish the suspended turn.

        A no-op when nothing is pending. Always ends in IDLE, even when the
        follow-up gateway call fails.
        """
        ctx = self._pending
        if ctx is None or self._state != OrchestratorState.AWAITING_APPROVAL:
            return

        request = self.approval_gate.current
        if request is not None:
            self.approval_gate.decide(request.id, decision)
        feature = request.feature if request else "Async Authorization"
        self._pending = None
        self._emit("approval", None)

        approved = decision == "approved"
        tool_name = ctx.descriptor.tool_name
        ctx.pending_call.status = "approved" if approved else "denied"
        self._record(
            "approval",
            f"{'Approved' if approved else 'Denied'}: {tool_name}",
            detail=_scope_detail(ctx.descriptor.scopes),
            status="success" if approved else "denied",
            feature=feature,
        )
        if approved:
            self._record(
                "token_exchange",
                "Token exchange",
                detail=f"Delegated credential issued for {tool_name} ({', '.join(ctx.descriptor.scopes)})",
                status="success",
                feature="Token Vault",
            )

        self._set_state(OrchestratorState.AWAITING_AGENT)
        generation = self._generation
        decisions = [PendingApproval(decision=decision, tool_id=ctx.descriptor.tool_id, args=ctx.descriptor.args)]
        reply: Optional[GatewayReply] = None
        try:
            reply = self.gateway.converse(ctx.history, self.template, self.env_id, pending_approvals=decisions)
        except GatewayError as exc:
            if self._is_stale(generation):
                return
            logger.warning("Approval follow-up failed", extra={"env_id": self.env_id, "error": str(exc)})
            self._notify("error", f"The agent could not finish after your decision: {exc}")
        except Exception:
            if self._is_stale(generation):
                return
            logger.exception("Approval follow-up failed", extra={"env_id": self.env_id})
            self._notify("error", "The agent could not finish after your decision.")

        if self._is_stale(generation):
            return

        if approved and reply is not None:
            ctx.pending_call.status = "completed"
        tool_calls = list(ctx.tool_calls)
        if reply is not None:
            for descriptor in reply.tool_calls:
                if descriptor.requires_approval:
                    logger.info("Dropping chained approval request", extra={"tool_id": descriptor.tool_id})
                    continue
                if approved and descriptor.tool_id == ctx.descriptor.tool_id and ctx.pending_call.result is None:
                    ctx.pending_call.result = descriptor.result
                    continue
                tool_calls.append(self._record_executed(descriptor))

        content = reply.content if reply is not None and reply.content else (
            APPROVED_FALLBACK if approved else DENIED_FALLBACK
        )
        self._append("assistant", content, tool_calls)
        self._set_state(OrchestratorState.IDLE)

    # ---------------------------------------------------------------------------
    # Reset
    # ---------------------------------------------------------------------------

    def reset(self) -> None:
        """Return to a fresh session; any reply still in flight is discarded"""
        self._generation += 1
        self.conversation.clear()
        self.timeline.clear()
        self.approval_gate.clear()
        self._pending = None
        self.last_tool = None
        self._set_state(OrchestratorState.IDLE)
        self._emit("reset", self.env_id)

        try:
            self.gateway.reset_environment(self.env_id)
        except Exception as exc:
            logger.warning("Remote environment reset failed", extra={"env_id": self.env_id, "error": str(exc)})
