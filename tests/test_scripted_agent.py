"""Tests for the deterministic agent runtime"""
import pytest

from authdemo.catalog import get_template_by_id
from authdemo_server.agent.runtime import (
    AnthropicAgent,
    ScriptedAgent,
    ToolResult,
    get_agent,
    match_tool,
    to_anthropic_messages,
)
from authdemo_server.config import settings


@pytest.mark.parametrize("template_id,message,expected", [
    ("travel-agent", "Search for flights from New York to San Francisco next week", "search_flights"),
    ("travel-agent", "Also search for hotels in San Francisco for 3 nights", "search_hotels"),
    ("travel-agent", "Book the cheapest flight option", "book_flight"),
    ("travel-agent", "Now book the Marriott hotel", "book_hotel"),
    ("travel-agent", "Show me my complete travel itinerary", "get_itinerary"),
    ("exec-assistant", "What's on my calendar today?", "read_calendar"),
    ("exec-assistant", "Find Jane Smith's contact info", "search_contacts"),
    ("exec-assistant", "Draft an email to Jane about the product review meeting", "draft_email"),
    ("exec-assistant", "Send that email to Jane", "send_email"),
    ("exec-assistant", "Schedule a 30-minute product review meeting with Jane tomorrow at 2 PM", "schedule_meeting"),
    ("personal-shopper", "Add the Premium Wireless Headphones to my cart", "add_to_cart"),
    ("personal-shopper", "Place the order", "place_order"),
    ("personal-shopper", "Track my recent order", "track_order"),
])
def test_match_tool(template_id, message, expected):
    tools = get_template_by_id(template_id).tools
    assert match_tool(message, tools).id == expected


def test_match_tool_ties_go_to_earlier_tool():
    tools = get_template_by_id("travel-agent").tools
    assert match_tool("flights", tools).id == "search_flights"


def test_match_tool_no_match():
    tools = get_template_by_id("travel-agent").tools
    assert match_tool("Hello there", tools) is None


def test_scripted_agent_requests_tool():
    tools = get_template_by_id("travel-agent").tools
    history = [{"role": "user", "content": "Book the cheapest flight option"}]

    turn = ScriptedAgent().run("", history, tools, [])

    assert [r.tool_id for r in turn.tool_requests] == ["book_flight"]
    assert turn.tool_requests[0].args == {"reason": "Book the cheapest flight option"}
    assert "approval" in turn.content
    assert "flights:write, payments:charge" in turn.content


def test_scripted_agent_lists_capabilities_without_match():
    tools = get_template_by_id("travel-agent").tools

    turn = ScriptedAgent().run("", [{"role": "user", "content": "Hello"}], tools, [])

    assert turn.tool_requests == []
    assert turn.content.startswith("Here is what I can do in this demo:")
    assert "**Book Flight**" in turn.content
    assert "(requires your approval)" in turn.content


def test_scripted_agent_narrates_tool_results():
    tools = get_template_by_id("travel-agent").tools
    results = [
        ToolResult(tool_id="book_flight", status="approved_and_executed", result={"confirmation": "DL-ABC123"}),
        ToolResult(tool_id="book_hotel", status="denied_by_user", message="User denied this action"),
    ]

    turn = ScriptedAgent().run("", [{"role": "user", "content": "Book it"}], tools, results)

    assert turn.tool_requests == []
    assert "**Book Flight** completed" in turn.content
    assert "DL-ABC123" in turn.content
    assert "You denied **Book Hotel**" in turn.content


def test_to_anthropic_messages_normalizes_roles():
    history = [
        {"role": "assistant", "content": "Welcome!"},
        {"role": "user", "content": "Hi"},
        {"role": "user", "content": "Search flights"},
        {"role": "assistant", "content": ""},
        {"role": "system", "content": "ignored"},
    ]
    results = [ToolResult(tool_id="search_flights", status="approved_and_executed", result={"flights": []})]

    messages = to_anthropic_messages(history, results)

    assert len(messages) == 1
    assert messages[0]["role"] == "user"
    assert messages[0]["content"].startswith("Hi\n\nSearch flights\n\nTool results:")


def test_to_anthropic_messages_never_empty():
    assert to_anthropic_messages([], []) == [{"role": "user", "content": "Hello"}]


def test_get_agent_follows_settings(monkeypatch):
    assert isinstance(get_agent(), ScriptedAgent)

    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "sk-ant-test")
    assert isinstance(get_agent(), AnthropicAgent)
