"""Agent gateway schemas"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from authdemo.catalog import ToolDef
from authdemo.gateway import ToolCallDescriptor


class ChatMessageIn(BaseModel):
    """One history entry as the client resends it"""

    role: Literal["user", "assistant", "system"]
    content: str = ""


class PendingApprovalIn(BaseModel):
    """Decision folded into this turn"""

    decision: Literal["approved", "denied"]
    tool_id: str
    args: Dict[str, Any] = Field(default_factory=dict)


class DemoChatRequest(BaseModel):
    """Schema for one agent turn"""

    messages: List[ChatMessageIn] = Field(default_factory=list)
    template_id: str = Field(..., min_length=1, max_length=100)
    env_id: str = Field(..., min_length=1, max_length=64)
    system_prompt_parts: List[str] = Field(default_factory=list)
    knowledge_pack: str = ""
    tools: List[ToolDef] = Field(default_factory=list)
    pending_approvals: Optional[List[PendingApprovalIn]] = None

    @property
    def is_continuation(self) -> bool:
        """True when the turn only reports decisions on earlier tool calls"""
        return bool(self.pending_approvals)


class DemoChatResponse(BaseModel):
    """Assistant text plus the tool calls made in this turn"""

    content: str = ""
    tool_calls: List[ToolCallDescriptor] = Field(default_factory=list)
