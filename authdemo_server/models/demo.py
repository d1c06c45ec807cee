"""Custom demo and stored template models"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text

from authdemo_server.database import Base


class DemoEnvironment(Base):
    """DemoEnvironment model - a demo saved from the builder"""

    __tablename__ = "demo_environments"

    id = Column(Integer, primary_key=True, index=True)
    env_id = Column(String(64), unique=True, nullable=False, index=True)
    auth0_sub = Column(String(255), nullable=False, index=True)
    template_id = Column(String(100), nullable=False)
    env_type = Column(String(30), default="custom", nullable=False)
    config_overrides = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class StoredTemplate(Base):
    """StoredTemplate model - admin-authored DemoTemplate config"""

    __tablename__ = "stored_templates"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    config = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
