"""Database models"""
from authdemo_server.models.approval import ApprovalRecord
from authdemo_server.models.audit_event import AuditEvent
from authdemo_server.models.conversation import ConversationTurn
from authdemo_server.models.demo import DemoEnvironment, StoredTemplate
from authdemo_server.models.tool_execution import ToolExecution

__all__ = ["ApprovalRecord", "AuditEvent", "ConversationTurn", "DemoEnvironment", "StoredTemplate", "ToolExecution"]
