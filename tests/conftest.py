"""Pytest configuration and fixtures"""
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from authdemo.catalog import get_template_by_id
from authdemo.exceptions import GatewayError
from authdemo.gateway import GatewayReply
from authdemo_server.config import settings
from authdemo_server.database import Base, get_db
from authdemo_server.main import app
from authdemo_server.middleware.rate_limit import limiter

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def scripted_agent(monkeypatch):
    """Keep every test on the deterministic agent, even with a key in the environment"""
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", None)
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database session override"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    """Admin authentication headers"""
    return {"X-Admin-Key": settings.ADMIN_API_KEY}


@pytest.fixture
def client_headers() -> dict:
    """Demo client bearer headers"""
    return {"Authorization": f"Bearer {settings.DEMO_API_KEY}"}


@pytest.fixture
def travel_template():
    return get_template_by_id("travel-agent")


@pytest.fixture
def chat_payload(travel_template):
    """Build a /demo-chat body for the travel template"""

    def build(messages, env_id="env-test", pending_approvals=None, template=None):
        template = template or travel_template
        body = {
            "messages": messages,
            "template_id": template.id,
            "env_id": env_id,
            "system_prompt_parts": template.system_prompt_parts,
            "knowledge_pack": template.knowledge_pack,
            "tools": [t.model_dump() for t in template.tools],
        }
        if pending_approvals is not None:
            body["pending_approvals"] = pending_approvals
        return body

    return build


class FakeGateway:
    """In-memory stand-in for ``AgentGatewayClient``.

    ``replies`` are consumed in order by ``converse``; an exception instance is
    raised instead of returned, and a callable is invoked first (it may reset
    the orchestrator to simulate a late reply).
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []
        self.resets = []
        self.reset_error = None
        self.custom_demos = {}

    def queue(self, *replies):
        self.replies.extend(replies)

    def converse(self, history, template, env_id, pending_approvals=None):
        self.calls.append({
            "history": [dict(m) for m in history],
            "template_id": template.id,
            "env_id": env_id,
            "pending_approvals": list(pending_approvals or []),
        })
        reply = self.replies.pop(0)
        if callable(reply):
            reply = reply()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def reset_environment(self, env_id):
        self.resets.append(env_id)
        if self.reset_error is not None:
            raise self.reset_error
        return {"env_id": env_id, "deleted": {}}

    def get_custom_demo(self, env_id):
        if env_id not in self.custom_demos:
            raise GatewayError(f"Demo {env_id} not found", status_code=404)
        return self.custom_demos[env_id]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def reply():
    """Shorthand for building gateway replies from plain dicts"""

    def build(content="", tool_calls=None):
        return GatewayReply.model_validate({"content": content, "tool_calls": tool_calls or []})

    return build
