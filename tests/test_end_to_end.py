"""SDK session driven against the real gateway application"""
import pytest
from fastapi.testclient import TestClient

from authdemo.gateway import AgentGatewayClient
from authdemo.orchestrator import OrchestratorState
from authdemo.session import DemoSession
from authdemo_server.config import settings


@pytest.fixture
def live_gateway(client: TestClient) -> AgentGatewayClient:
    return AgentGatewayClient("http://testserver", token_provider=lambda: settings.DEMO_API_KEY, session=client)


def test_travel_walkthrough(live_gateway: AgentGatewayClient, client: TestClient, client_headers: dict):
    """Walk the travel script: two reads, one approved booking, then reset"""
    session = DemoSession.from_template(live_gateway, "travel-agent", "auth0|e2e", identity="demo@example.com")
    orchestrator = session.orchestrator
    session.autopilot.start()

    session.autopilot.advance()
    first = orchestrator.messages[-1]
    assert first.tool_calls[0].tool_id == "search_flights"
    assert first.tool_calls[0].status == "completed"
    assert "United Airlines" in first.content
    assert orchestrator.is_idle

    session.autopilot.advance()
    assert orchestrator.messages[-1].tool_calls[0].tool_id == "search_hotels"

    session.autopilot.advance()
    assert orchestrator.state == OrchestratorState.AWAITING_APPROVAL
    assert orchestrator.current_approval.tool_name == "Book Flight"
    pending = client.get(
        f"/environments/{session.env_id}/approvals", params={"status": "pending"}, headers=client_headers
    ).json()
    assert [a["tool_id"] for a in pending] == ["book_flight"]

    session.approve()
    final = orchestrator.messages[-1]
    assert final.tool_calls[0].status == "completed"
    assert "**Book Flight** completed" in final.content
    assert orchestrator.is_idle
    approved = client.get(
        f"/environments/{session.env_id}/approvals", params={"status": "approved"}, headers=client_headers
    ).json()
    assert len(approved) == 1

    session.reset()
    assert orchestrator.messages == []
    assert session.autopilot.step_index == 0
    assert client.get(f"/environments/{session.env_id}/messages", headers=client_headers).json() == []


def test_denied_booking(live_gateway: AgentGatewayClient):
    session = DemoSession.from_template(live_gateway, "travel-agent", "auth0|e2e")

    session.send("Book the cheapest flight option")
    session.deny()

    final = session.orchestrator.messages[-1]
    assert final.tool_calls[0].status == "denied"
    assert "You denied **Book Flight**" in final.content


def test_bad_credential_surfaces_apology(client: TestClient):
    gateway = AgentGatewayClient("http://testserver", token_provider=lambda: "wrong", session=client)
    session = DemoSession.from_template(gateway, "travel-agent", "auth0|e2e")

    session.send("Hello")

    assert session.orchestrator.messages[-1].content == "Sorry, I encountered an error. Please try again."
    assert session.orchestrator.is_idle


def test_custom_demo_session(live_gateway: AgentGatewayClient, client: TestClient, client_headers: dict):
    client.post(
        "/demos",
        json={"auth0_sub": "auth0|e2e", "template_id": "exec-assistant", "env_id": "exec-demo",
              "config_overrides": {"enabled_tools": ["read_calendar", "send_email"]}},
        headers=client_headers
    )

    session = DemoSession.from_custom_demo(live_gateway, "exec-demo")

    assert session.env_id == "exec-demo"
    assert [t.id for t in session.template.tools] == ["read_calendar", "send_email"]
    session.send("What's on my calendar today?")
    assert session.orchestrator.messages[-1].tool_calls[0].tool_id == "read_calendar"
