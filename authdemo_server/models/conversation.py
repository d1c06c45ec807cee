"""Conversation memory model"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from authdemo_server.database import Base


class ConversationTurn(Base):
    """ConversationTurn model - one persisted chat message of a demo environment"""

    __tablename__ = "conversation_turns"

    id = Column(Integer, primary_key=True, index=True)
    env_id = Column(String(64), nullable=False, index=True)
    role = Column(String(20), nullable=False)  # user | assistant
    content = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
