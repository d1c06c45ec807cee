"""Tests for template, tool, feature and autopilot catalogs"""
import pytest
from fastapi.testclient import TestClient

from authdemo_server.agent.generator import template_from_config
from authdemo_server.agent.runtime import AgentError


@pytest.fixture
def template_data() -> dict:
    """Admin-authored template"""
    return {
        "id": "bank-bot",
        "name": "Banking Assistant",
        "description": "Moves money with approval.",
        "tools": [
            {"id": "check_balance", "name": "Check Balance", "description": "View balance",
             "scopes": ["accounts:read"], "industry": "fintech"},
            {"id": "transfer_funds", "name": "Transfer Funds", "description": "Move money",
             "scopes": ["accounts:write", "payments:transfer"], "requires_approval": True, "industry": "fintech"},
        ],
        "system_prompt_parts": ["You are a banking assistant."],
    }


def test_list_templates(client: TestClient):
    """Test built-in templates are listed"""
    response = client.get("/templates")
    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data] == ["travel-agent", "exec-assistant", "personal-shopper", "dev-copilot", "generic-agent"]
    assert all(t["source"] == "builtin" for t in data)
    assert data[0]["tool_count"] == 5


def test_get_template(client: TestClient):
    response = client.get("/templates/travel-agent")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "AI Travel Agent"
    assert len(data["tools"]) == 5
    assert data["knowledge_pack"]


def test_get_template_not_found(client: TestClient):
    response = client.get("/templates/nonexistent")
    assert response.status_code == 404


def test_create_template_requires_admin(client: TestClient, client_headers: dict, template_data: dict):
    """Test only admins can store templates"""
    assert client.post("/templates", json=template_data).status_code == 401
    assert client.post("/templates", json=template_data, headers={"X-Admin-Key": "wrong"}).status_code == 403


def test_create_template(client: TestClient, admin_headers: dict, template_data: dict):
    """Test a stored template joins the catalog"""
    response = client.post("/templates", json=template_data, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["id"] == "bank-bot"

    listing = client.get("/templates").json()
    assert listing[-1]["id"] == "bank-bot"
    assert listing[-1]["source"] == "stored"
    assert listing[-1]["tool_count"] == 2

    fetched = client.get("/templates/bank-bot").json()
    assert fetched["tools"][1]["requires_approval"] is True


def test_create_template_duplicate(client: TestClient, admin_headers: dict, template_data: dict):
    client.post("/templates", json=template_data, headers=admin_headers)
    response = client.post("/templates", json=template_data, headers=admin_headers)
    assert response.status_code == 409


def test_create_template_validation(client: TestClient, admin_headers: dict, template_data: dict):
    """Test template ids are slugs and at least one tool is required"""
    bad_id = dict(template_data, id="Bank Bot!")
    assert client.post("/templates", json=bad_id, headers=admin_headers).status_code == 422

    no_tools = dict(template_data, tools=[])
    assert client.post("/templates", json=no_tools, headers=admin_headers).status_code == 422


def test_stored_template_overrides_builtin(client: TestClient, admin_headers: dict, template_data: dict):
    data = dict(template_data, id="travel-agent", name="Custom Travel")
    client.post("/templates", json=data, headers=admin_headers)

    listing = client.get("/templates").json()
    travel = [t for t in listing if t["id"] == "travel-agent"]
    assert len(travel) == 1
    assert travel[0]["source"] == "stored"
    assert client.get("/templates/travel-agent").json()["name"] == "Custom Travel"


def test_list_tools(client: TestClient):
    all_tools = client.get("/tools").json()
    travel = client.get("/tools", params={"industry": "travel"}).json()

    assert len(all_tools) > len(travel)
    assert travel
    assert all(t["industry"] == "travel" for t in travel)


def test_list_features(client: TestClient):
    features = client.get("/features").json()
    ids = {f["id"] for f in features}
    assert {"token-vault", "async-auth", "fga"} <= ids


def test_get_autopilot_script(client: TestClient):
    response = client.get("/templates/travel-agent/autopilot")
    assert response.status_code == 200
    data = response.json()
    assert data["template_id"] == "travel-agent"
    assert len(data["steps"]) == 5
    assert data["steps"][2]["highlight_feature"] == "Async Authorization"


def test_get_autopilot_script_not_found(client: TestClient):
    assert client.get("/templates/nonexistent/autopilot").status_code == 404


def test_generate_script_outline(client: TestClient, client_headers: dict):
    """Test the presenter script falls back to an outline without a model key"""
    response = client.post(
        "/templates/travel-agent/script", json={"customer_name": "Acme Travel"}, headers=client_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["generated_by"] == "outline"
    assert data["script"].startswith("# AI Travel Agent: Demo Script")
    assert "Acme Travel" in data["script"]
    assert "Book Flight" in data["script"]


def test_generate_script_requires_auth(client: TestClient):
    assert client.post("/templates/travel-agent/script", json={}).status_code == 401


def test_generate_script_not_found(client: TestClient, client_headers: dict):
    response = client.post("/templates/nonexistent/script", json={}, headers=client_headers)
    assert response.status_code == 404


def test_generate_template_from_description(client: TestClient, client_headers: dict):
    """Test keyword generation picks one industry's workflow"""
    response = client.post(
        "/templates/generate",
        json={
            "description": "Concierge for a boutique airline that books flights and hotels",
            "company_url": "https://www.acme-air.com",
        },
        headers=client_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["generated_by"] == "keywords"
    assert data["customer_name"] == "Acme Air"

    template = data["template"]
    assert template["id"] == "acme-air-travel-agent"
    assert {t["industry"] for t in template["tools"]} == {"travel"}
    assert template["tools"][0]["requires_approval"] is False
    assert "async-auth" in [f["id"] for f in template["features"]]

    steps = data["autopilot"]["steps"]
    assert data["autopilot"]["template_id"] == "acme-air-travel-agent"
    assert steps[0]["highlight_feature"] == "Fine-Grained Authorization"
    assert steps[-1]["highlight_feature"] == "Async Authorization"


def test_generated_template_can_be_stored(client: TestClient, client_headers: dict, admin_headers: dict):
    generated = client.post(
        "/templates/generate",
        json={"description": "Payroll and benefits helper for the people team", "customer_name": "Globex"},
        headers=client_headers
    ).json()["template"]

    response = client.post("/templates", json=generated, headers=admin_headers)
    assert response.status_code == 201
    assert client.get(f"/templates/{generated['id']}").json()["name"] == "Globex HR Agent"


def test_generate_template_unmatched_description(client: TestClient, client_headers: dict):
    response = client.post(
        "/templates/generate",
        json={"description": "Something entirely unrelated"},
        headers=client_headers
    )
    assert response.status_code == 200
    template = response.json()["template"]
    assert {t["industry"] for t in template["tools"]} == {"custom"}
    assert template["name"] == "Your Company Generic Agent"


def test_generate_template_requires_auth(client: TestClient):
    response = client.post("/templates/generate", json={"description": "Travel agent"})
    assert response.status_code == 401


def test_template_from_model_config_keeps_library_tools():
    template, script = template_from_config({
        "name": "Fidelity Wealth Advisor",
        "tools": [
            {"id": "view_portfolio", "description": "See your Fidelity positions"},
            {"id": "made_up_tool", "description": "Not in the library"},
            {"id": "execute_trade"},
        ],
        "auth0Features": [{"id": "async-auth"}, {"id": "nope"}],
        "autopilotSteps": [{"label": "Check", "message": "Show my portfolio", "feature": "Token Vault"}],
    }, "Fidelity")

    assert template.id == "fidelity-wealth-advisor"
    assert [t.id for t in template.tools] == ["view_portfolio", "execute_trade"]
    assert template.tools[0].description == "See your Fidelity positions"
    assert template.tools[1].requires_approval is True
    assert [f.id for f in template.features] == ["async-auth"]
    assert script.steps[0].user_message == "Show my portfolio"


def test_template_from_model_config_without_known_tools():
    with pytest.raises(AgentError):
        template_from_config({"name": "Empty", "tools": [{"id": "made_up_tool"}]}, None)
