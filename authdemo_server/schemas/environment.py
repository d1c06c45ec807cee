"""Environment and custom demo schemas"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from authdemo.catalog import DemoTemplate


class ResetRequest(BaseModel):
    """Schema for an environment reset"""

    env_id: str = Field(..., min_length=1, max_length=64)


class ResetResponse(BaseModel):
    """Rows removed by a reset"""

    env_id: str
    deleted: Dict[str, int]


class ConversationTurnResponse(BaseModel):
    """Schema for a persisted chat message"""

    role: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class ApprovalRecordResponse(BaseModel):
    """Schema for an approval record"""

    approval_id: str
    env_id: str
    tool_id: str
    tool_name: str
    scopes: Optional[List[str]] = None
    args: Optional[Dict[str, Any]] = None
    status: str                          # pending | approved | denied
    created_at: datetime
    decision_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuditEventResponse(BaseModel):
    """Schema for an audit event"""

    event_id: str
    env_id: str
    event_type: str
    title: str
    detail: Optional[str] = None
    status: Optional[str] = None
    feature: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DemoCreate(BaseModel):
    """Schema for saving a custom demo"""

    auth0_sub: str = Field(..., min_length=1, max_length=255, description="Identity subject of the owner")
    template_id: str = Field(..., min_length=1, max_length=100)
    env_type: str = Field("custom", max_length=30)
    env_id: Optional[str] = Field(None, max_length=64, description="Derived from auth0_sub and template_id when omitted")
    config_overrides: Optional[Dict[str, Any]] = None


class DemoResponse(BaseModel):
    """Schema for a saved custom demo"""

    env_id: str
    auth0_sub: str
    template_id: str
    env_type: str
    config_overrides: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DemoDetailResponse(DemoResponse):
    """Saved demo plus the template a session should run with"""

    template: DemoTemplate
