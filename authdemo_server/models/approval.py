"""ApprovalRecord model"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text

from authdemo_server.database import Base


def generate_uuid_string():
    """Generate UUID as string for SQLite compatibility"""
    return str(uuid.uuid4())


class ApprovalRecord(Base):
    """ApprovalRecord model - a tool call that paused on the approval gate"""

    __tablename__ = "approval_records"

    id = Column(Integer, primary_key=True, index=True)
    approval_id = Column(String(36), default=generate_uuid_string, unique=True, nullable=False, index=True)
    env_id = Column(String(64), nullable=False, index=True)
    tool_id = Column(String(100), nullable=False, index=True)
    tool_name = Column(String(255), nullable=False)
    tool_description = Column(Text, nullable=True)
    scopes = Column(JSON, nullable=True)
    args = Column(JSON, nullable=True)
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending | approved | denied
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    decision_at = Column(DateTime, nullable=True)
