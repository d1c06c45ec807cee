"""Demo environment reset and read-only listings"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from authdemo_server.api.deps import require_client
from authdemo_server.database import get_db
from authdemo_server.middleware.monitoring import record_environment_reset
from authdemo_server.models.approval import ApprovalRecord
from authdemo_server.models.audit_event import AuditEvent
from authdemo_server.models.conversation import ConversationTurn
from authdemo_server.models.tool_execution import ToolExecution
from authdemo_server.schemas.environment import (
    ApprovalRecordResponse,
    AuditEventResponse,
    ConversationTurnResponse,
    ResetRequest,
    ResetResponse,
)
from authdemo_server.utils.logger import logger

router = APIRouter(tags=["environments"])


@router.post("/reset-environment", response_model=ResetResponse)
def reset_environment(
    data: ResetRequest,
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """
    Discard everything persisted for an environment.

    Idempotent: resetting an empty environment succeeds with zero counts.
    Saved custom demo records are kept.
    """
    env_id = data.env_id
    deleted = {
        "messages": db.query(ConversationTurn).filter(ConversationTurn.env_id == env_id).delete(synchronize_session=False),
        "approvals": db.query(ApprovalRecord).filter(ApprovalRecord.env_id == env_id).delete(synchronize_session=False),
        "audit_events": db.query(AuditEvent).filter(AuditEvent.env_id == env_id).delete(synchronize_session=False),
        "tool_executions": db.query(ToolExecution).filter(ToolExecution.env_id == env_id).delete(synchronize_session=False),
    }
    db.commit()

    record_environment_reset()
    logger.info("Environment reset", extra={"env_id": env_id, "action": "reset"})
    return ResetResponse(env_id=env_id, deleted=deleted)


@router.get("/environments/{env_id}/messages", response_model=List[ConversationTurnResponse])
def list_messages(
    env_id: str,
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """Conversation memory in chronological order"""
    return db.query(ConversationTurn).filter(
        ConversationTurn.env_id == env_id
    ).order_by(ConversationTurn.created_at, ConversationTurn.id).limit(limit).all()


@router.get("/environments/{env_id}/approvals", response_model=List[ApprovalRecordResponse])
def list_approvals(
    env_id: str,
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status: pending, approved, denied"),
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """Approval records, newest first"""
    query = db.query(ApprovalRecord).filter(ApprovalRecord.env_id == env_id)
    if status_filter:
        query = query.filter(ApprovalRecord.status == status_filter)
    return query.order_by(ApprovalRecord.created_at.desc(), ApprovalRecord.id.desc()).all()


@router.get("/environments/{env_id}/audit", response_model=List[AuditEventResponse])
def list_audit_events(
    env_id: str,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """Audit events, newest first"""
    return db.query(AuditEvent).filter(
        AuditEvent.env_id == env_id
    ).order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).offset(offset).limit(limit).all()
