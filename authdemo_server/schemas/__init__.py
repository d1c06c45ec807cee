"""Pydantic schemas for API requests and responses"""
from authdemo_server.schemas.chat import ChatMessageIn, DemoChatRequest, DemoChatResponse, PendingApprovalIn
from authdemo_server.schemas.environment import (
    ApprovalRecordResponse,
    AuditEventResponse,
    ConversationTurnResponse,
    DemoCreate,
    DemoDetailResponse,
    DemoResponse,
    ResetRequest,
    ResetResponse,
)
from authdemo_server.schemas.template import ScriptRequest, ScriptResponse, TemplateCreate, TemplateSummary

__all__ = [
    "ApprovalRecordResponse",
    "AuditEventResponse",
    "ChatMessageIn",
    "ConversationTurnResponse",
    "DemoChatRequest",
    "DemoChatResponse",
    "DemoCreate",
    "DemoDetailResponse",
    "DemoResponse",
    "PendingApprovalIn",
    "ResetRequest",
    "ResetResponse",
    "ScriptRequest",
    "ScriptResponse",
    "TemplateCreate",
    "TemplateSummary",
]
