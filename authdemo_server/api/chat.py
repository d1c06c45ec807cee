"""Agent gateway endpoint.

One stateless agent turn per request: the client resends the whole history,
the template narrative and the tool catalog every time. Decisions on earlier
approval-gated calls arrive as ``pending_approvals`` and are folded in as tool
results before the agent runs.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from authdemo.catalog import ToolDef
from authdemo.gateway import ToolCallDescriptor
from authdemo_server.agent import (
    AgentError,
    ToolResult,
    build_system_prompt,
    execute_mock_tool,
    get_agent,
)
from authdemo_server.api.deps import require_client
from authdemo_server.config import settings
from authdemo_server.database import get_db
from authdemo_server.middleware.monitoring import record_approval_decision, record_chat_turn, record_tool_call
from authdemo_server.middleware.rate_limit import limiter
from authdemo_server.models.approval import ApprovalRecord
from authdemo_server.models.audit_event import AuditEvent
from authdemo_server.models.conversation import ConversationTurn
from authdemo_server.models.tool_execution import ToolExecution
from authdemo_server.schemas.chat import DemoChatRequest, DemoChatResponse, PendingApprovalIn
from authdemo_server.utils.logger import logger
from authdemo_server.utils.webhook import send_webhook

router = APIRouter(tags=["chat"])

DENIED_MESSAGE = "The user denied this action. Explain that the approval was denied and suggest alternatives."


def _audit(db: Session, env_id: str, event_type: str, title: str, detail: Optional[str] = None,
           status_: Optional[str] = None, feature: Optional[str] = None, request_id: Optional[str] = None):
    db.add(AuditEvent(
        env_id=env_id,
        event_type=event_type,
        title=title,
        detail=detail,
        status=status_,
        feature=feature,
        request_id=request_id,
    ))


def _scope_detail(tool: Optional[ToolDef]) -> Optional[str]:
    if tool is None or not tool.scopes:
        return None
    return f"Scopes: {', '.join(tool.scopes)}"


def _check_quota(db: Session, env_id: str) -> None:
    """Raise 402 once the environment used up its daily user turns"""
    if settings.CHAT_TURN_QUOTA <= 0:
        return
    since = datetime.utcnow() - timedelta(hours=24)
    used = db.query(ConversationTurn).filter(
        ConversationTurn.env_id == env_id,
        ConversationTurn.role == "user",
        ConversationTurn.created_at >= since,
    ).count()
    if used >= settings.CHAT_TURN_QUOTA:
        logger.warning("Chat turn quota exhausted", extra={"env_id": env_id, "action": "quota"})
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="AI usage limit reached for this demo.",
        )


def _fold_decision(db: Session, env_id: str, decision: PendingApprovalIn,
                   tool: Optional[ToolDef], request_id: Optional[str]) -> ToolResult:
    """Apply one decision: run the mock when approved and settle the pending record.

    A decision without a pending record reports a tool that already ran this
    turn; its stored result is folded in and nothing new is persisted.
    """
    tool_name = tool.name if tool else decision.tool_id
    approved = decision.decision == "approved"

    record = db.query(ApprovalRecord).filter(
        ApprovalRecord.env_id == env_id,
        ApprovalRecord.tool_id == decision.tool_id,
        ApprovalRecord.status == "pending",
    ).order_by(ApprovalRecord.created_at.desc(), ApprovalRecord.id.desc()).first()

    if record is None:
        if not approved:
            return ToolResult(tool_id=decision.tool_id, status="denied_by_user", message=DENIED_MESSAGE)
        executed = db.query(ToolExecution).filter(
            ToolExecution.env_id == env_id,
            ToolExecution.tool_id == decision.tool_id,
            ToolExecution.status == "executed",
        ).order_by(ToolExecution.created_at.desc(), ToolExecution.id.desc()).first()
        result = executed.result if executed is not None else execute_mock_tool(decision.tool_id, decision.args)
        return ToolResult(tool_id=decision.tool_id, status="approved_and_executed", result=result)

    if approved:
        outcome = ToolResult(
            tool_id=decision.tool_id,
            status="approved_and_executed",
            result=execute_mock_tool(decision.tool_id, decision.args),
        )
    else:
        outcome = ToolResult(tool_id=decision.tool_id, status="denied_by_user", message=DENIED_MESSAGE)

    db.add(ToolExecution(
        env_id=env_id,
        tool_id=decision.tool_id,
        tool_name=tool_name,
        status=outcome.status,
        args=decision.args,
        result=outcome.result,
    ))

    record.status = decision.decision
    record.decision_at = datetime.utcnow()
    record_approval_decision(decision.decision)
    _audit(db, env_id, "approval", f"{'Approved' if approved else 'Denied'}: {tool_name}",
           detail=_scope_detail(tool), status_="success" if approved else "denied",
           feature="Async Authorization", request_id=request_id)
    if approved:
        _audit(db, env_id, "token_exchange", "Token exchange",
               detail=f"Delegated credential issued for {tool_name}", status_="success",
               feature="Token Vault", request_id=request_id)

    send_webhook(f"approval.{decision.decision}", {
        "approval_id": record.approval_id,
        "env_id": env_id,
        "tool_id": record.tool_id,
        "tool_name": record.tool_name,
        "scopes": record.scopes or [],
    })
    return outcome


def _dispatch(db: Session, env_id: str, tool: ToolDef, args: Dict, request_id: Optional[str]) -> ToolCallDescriptor:
    """Turn a requested tool into a descriptor, gating it when it needs approval"""
    if tool.requires_approval:
        record = ApprovalRecord(
            env_id=env_id,
            tool_id=tool.id,
            tool_name=tool.name,
            tool_description=tool.description,
            scopes=tool.scopes,
            args=args,
        )
        db.add(record)
        db.flush()
        db.add(ToolExecution(env_id=env_id, tool_id=tool.id, tool_name=tool.name,
                             status="approval_required", args=args))
        _audit(db, env_id, "approval", f"Approval required: {tool.name}", detail=_scope_detail(tool),
               status_="pending", feature="Async Authorization", request_id=request_id)
        send_webhook("approval.created", {
            "approval_id": record.approval_id,
            "env_id": env_id,
            "tool_id": tool.id,
            "tool_name": tool.name,
            "scopes": tool.scopes,
        })
        record_tool_call(tool.id, "approval_required")
        return ToolCallDescriptor(
            type="approval_required",
            tool_id=tool.id,
            tool_name=tool.name,
            tool_description=tool.description,
            scopes=tool.scopes,
            args=args,
            auth0_feature="Async Authorization",
        )

    result = execute_mock_tool(tool.id, args)
    db.add(ToolExecution(env_id=env_id, tool_id=tool.id, tool_name=tool.name,
                         status="executed", args=args, result=result))
    _audit(db, env_id, "tool_call", f"Tool called: {tool.name}", detail=_scope_detail(tool),
           status_="success", feature="Fine-Grained Authorization", request_id=request_id)
    record_tool_call(tool.id, "executed")
    return ToolCallDescriptor(
        type="executed",
        tool_id=tool.id,
        tool_name=tool.name,
        tool_description=tool.description,
        scopes=tool.scopes,
        args=args,
        result=result,
    )


@router.post("/demo-chat", response_model=DemoChatResponse)
@limiter.limit(settings.CHAT_RATE_LIMIT)
def demo_chat(
    request: Request,
    payload: DemoChatRequest,
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """
    Run one agent turn.

    - Folds ``pending_approvals`` in as tool results (approved ones run the mock tool)
    - Tools that need approval come back as ``approval_required`` and are not run
    - Everything else runs immediately and comes back as ``executed`` with its result

    Errors: 401/403 auth, 429 rate limit, 402 turn quota or model credit, 502 model failure.
    """
    env_id = payload.env_id
    request_id = getattr(request.state, "request_id", None)
    continuation = payload.is_continuation

    if not continuation:
        _check_quota(db, env_id)

    tool_by_id = {t.id: t for t in payload.tools}
    system_prompt = build_system_prompt(
        payload.template_id, env_id, payload.system_prompt_parts, payload.knowledge_pack, payload.tools
    )
    tool_results: List[ToolResult] = [
        _fold_decision(db, env_id, decision, tool_by_id.get(decision.tool_id), request_id)
        for decision in payload.pending_approvals or []
    ]

    history = [m.model_dump() for m in payload.messages]
    agent = get_agent()
    try:
        turn = agent.run(system_prompt, history, payload.tools, tool_results)
    except AgentError as e:
        db.rollback()
        logger.warning(
            f"Agent turn failed: {e.message}",
            extra={"env_id": env_id, "request_id": request_id, "status_code": e.status_code},
        )
        raise HTTPException(status_code=e.status_code, detail=e.message)

    descriptors: List[ToolCallDescriptor] = []
    for requested in turn.tool_requests:
        tool = tool_by_id.get(requested.tool_id)
        if tool is None:
            logger.warning("Agent requested a tool outside the catalog",
                           extra={"env_id": env_id, "tool_id": requested.tool_id})
            continue
        descriptors.append(_dispatch(db, env_id, tool, requested.args, request_id))

    if not continuation and history and history[-1]["role"] == "user":
        db.add(ConversationTurn(env_id=env_id, role="user", content=history[-1]["content"]))
        _audit(db, env_id, "message", "User message", detail=history[-1]["content"][:200],
               request_id=request_id)
    if turn.content:
        db.add(ConversationTurn(env_id=env_id, role="assistant", content=turn.content))
    db.commit()

    record_chat_turn(payload.template_id, continuation)
    logger.info(
        f"Agent turn served: {len(descriptors)} tool call(s)",
        extra={"env_id": env_id, "template_id": payload.template_id, "request_id": request_id,
               "action": "continuation" if continuation else "user_turn"},
    )
    return DemoChatResponse(content=turn.content, tool_calls=descriptors)
