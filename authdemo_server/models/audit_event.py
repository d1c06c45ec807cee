"""Audit event model"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from authdemo_server.database import Base


def generate_uuid_string():
    """Generate UUID as string for SQLite compatibility"""
    return str(uuid.uuid4())


class AuditEvent(Base):
    """AuditEvent model - append-only server-side record of what the agent did"""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(String(36), default=generate_uuid_string, unique=True, nullable=False, index=True)
    env_id = Column(String(64), nullable=False, index=True)
    event_type = Column(String(30), nullable=False, index=True)  # tool_call | approval | token_exchange | message
    title = Column(String(255), nullable=False)
    detail = Column(Text, nullable=True)
    status = Column(String(20), nullable=True)  # success | denied | pending
    feature = Column(String(100), nullable=True)
    request_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
