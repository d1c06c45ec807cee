"""Tests for tool, feature and template catalogs"""
import pytest
from pydantic import ValidationError

from authdemo.catalog import (
    DEMO_TEMPLATES,
    GLOBAL_CATALOG,
    INDUSTRY_GROUPS,
    apply_builder_overlay,
    generate_env_id,
    get_template_by_id,
    resolve_template,
)


def test_generate_env_id_is_stable():
    assert generate_env_id("a", "b") == "21e1"
    assert generate_env_id("auth0|123", "travel-agent") == generate_env_id("auth0|123", "travel-agent")
    assert generate_env_id("auth0|123", "travel-agent") != generate_env_id("auth0|123", "exec-assistant")


def test_generate_env_id_is_base36():
    env_id = generate_env_id("google-oauth2|1098765432", "personal-shopper")
    assert env_id
    assert set(env_id) <= set("0123456789abcdefghijklmnopqrstuvwxyz")


def test_builtin_templates():
    ids = [t.id for t in DEMO_TEMPLATES]
    assert ids == ["travel-agent", "exec-assistant", "personal-shopper", "dev-copilot", "generic-agent"]
    for template in DEMO_TEMPLATES:
        assert template.tools
        assert any(t.requires_approval for t in template.tools)
        tool_ids = [t.id for t in template.tools]
        assert len(tool_ids) == len(set(tool_ids))


def test_get_template_by_id():
    assert get_template_by_id("travel-agent").name == "AI Travel Agent"
    assert get_template_by_id("missing") is None


def test_templates_are_immutable():
    template = get_template_by_id("travel-agent")
    with pytest.raises(ValidationError):
        template.name = "Changed"


def test_global_catalog_by_industry():
    travel = GLOBAL_CATALOG.by_industry("travel")
    assert "search_flights" in travel
    assert "check_balance" not in travel
    assert all(t.industry in INDUSTRY_GROUPS for t in GLOBAL_CATALOG)


def test_catalog_only_keeps_order_and_skips_unknown():
    subset = GLOBAL_CATALOG.only(["send_email", "nope", "read_calendar"])
    assert [t.id for t in subset] == ["send_email", "read_calendar"]


def test_overlay_does_not_touch_base():
    base = get_template_by_id("travel-agent")

    derived = apply_builder_overlay(
        base,
        enabled_tools=["search_flights", "book_flight"],
        enabled_features=["async-auth"],
        extra_tools=["check_balance", "search_flights"],
        custom_prompt="  Always quote prices in EUR.  ",
        custom_knowledge="Customer is Acme Travel.",
    )

    assert [t.id for t in derived.tools] == ["search_flights", "book_flight", "check_balance"]
    assert [f.id for f in derived.features] == ["async-auth"]
    assert derived.system_prompt_parts[-1] == "Always quote prices in EUR."
    assert derived.knowledge_pack.endswith("\n\nCustomer is Acme Travel.")

    assert len(base.tools) == 5
    assert len(base.system_prompt_parts) == 3
    assert "Acme" not in base.knowledge_pack


def test_resolve_builtin():
    assert resolve_template("travel-agent") is get_template_by_id("travel-agent")
    assert resolve_template("missing") is None


def test_resolve_overlay_keys():
    template = resolve_template("travel-agent", {"enabled_tools": ["get_itinerary"]})
    assert [t.id for t in template.tools] == ["get_itinerary"]


def test_resolve_full_template_override():
    override = {
        "name": "Bank Bot",
        "tools": [
            {"id": "check_balance", "name": "Check Balance", "description": "View balance", "scopes": ["accounts:read"]},
        ],
    }

    template = resolve_template("my-bank", override)

    assert template.id == "my-bank"
    assert template.name == "Bank Bot"
    assert template.tools[0].requires_approval is False


def test_resolve_stored_template_wins():
    stored = {
        "name": "Stored Travel",
        "tools": [{"id": "search_flights", "name": "Search Flights", "description": "Search"}],
    }

    template = resolve_template("travel-agent", stored=stored)

    assert template.name == "Stored Travel"
    assert [t.id for t in template.tools] == ["search_flights"]
