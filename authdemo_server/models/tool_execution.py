"""Tool execution model"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from authdemo_server.database import Base


class ToolExecution(Base):
    """ToolExecution model - every mock tool run and every gated request"""

    __tablename__ = "tool_executions"

    id = Column(Integer, primary_key=True, index=True)
    env_id = Column(String(64), nullable=False, index=True)
    tool_id = Column(String(100), nullable=False, index=True)
    tool_name = Column(String(255), nullable=False)
    # executed | approval_required | approved_and_executed | denied_by_user
    status = Column(String(30), nullable=False)
    args = Column(JSON, nullable=True)
    result = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
