"""Tests for the conversation / approval orchestrator"""
import pytest

from authdemo.catalog import get_template_by_id
from authdemo.exceptions import GatewayError, QuotaExceededError, RateLimitedError
from authdemo.orchestrator import APOLOGY_MESSAGE, APPROVED_FALLBACK, Orchestrator, OrchestratorState

SEARCH_FLIGHTS = {
    "type": "executed",
    "tool_id": "search_flights",
    "tool_name": "Search Flights",
    "scopes": ["flights:read"],
    "result": {"flights": [{"airline": "Delta", "price": "$289"}]},
}

BOOK_FLIGHT = {
    "type": "approval_required",
    "tool_id": "book_flight",
    "tool_name": "Book Flight",
    "tool_description": "Book a flight on behalf of user",
    "scopes": ["flights:write", "payments:charge"],
    "args": {"reason": "cheapest option"},
}


@pytest.fixture
def orchestrator(gateway):
    return Orchestrator(gateway, get_template_by_id("travel-agent"), "env-1")


@pytest.fixture
def awaiting_approval(orchestrator, gateway, reply):
    """Orchestrator suspended on a Book Flight approval"""
    gateway.queue(reply("I'll book that for you.", [BOOK_FLIGHT]))
    orchestrator.send_user_message("Book the cheapest flight")
    return orchestrator


def test_executed_tool_turn(orchestrator, gateway, reply):
    """A read-only tool call completes inside a single turn"""
    gateway.queue(
        reply("Here are the flights.", [SEARCH_FLIGHTS]),
        reply("Delta at $289 is the cheapest."),
    )

    orchestrator.send_user_message("Search flights from NYC to SF.")

    messages = orchestrator.messages
    assert [m.role for m in messages] == ["user", "assistant"]
    assert messages[0].content == "Search flights from NYC to SF."

    assistant = messages[1]
    assert len(assistant.tool_calls) == 1
    assert assistant.tool_calls[0].status == "completed"
    assert assistant.tool_calls[0].result == SEARCH_FLIGHTS["result"]
    assert assistant.content == "Here are the flights.\n\nDelta at $289 is the cheapest."

    # Newest first: tool call narrated after the user message
    assert [e.type for e in orchestrator.events] == ["tool_call", "message"]
    assert orchestrator.events[0].feature == "Fine-Grained Authorization"
    assert orchestrator.state == OrchestratorState.IDLE
    assert orchestrator.last_tool == "Search Flights"


def test_executed_tool_follow_up_carries_synthetic_approval(orchestrator, gateway, reply):
    """The follow-up turn reports executed tools as approved decisions"""
    gateway.queue(reply("", [SEARCH_FLIGHTS]), reply("Found 3 flights."))

    orchestrator.send_user_message("Search flights")

    assert len(gateway.calls) == 2
    follow_up = gateway.calls[1]
    assert [p.decision for p in follow_up["pending_approvals"]] == ["approved"]
    assert follow_up["pending_approvals"][0].tool_id == "search_flights"
    assert follow_up["history"][-1]["role"] == "assistant"
    assert orchestrator.messages[-1].content == "Found 3 flights."


def test_follow_up_tool_calls_become_cards(orchestrator, gateway, reply):
    search_hotels = dict(SEARCH_FLIGHTS, tool_id="search_hotels", tool_name="Search Hotels",
                         scopes=["hotels:read"], result={"hotels": []})
    gateway.queue(
        reply("Here are the flights.", [SEARCH_FLIGHTS]),
        reply("I also checked hotels.", [search_hotels, BOOK_FLIGHT]),
    )

    orchestrator.send_user_message("Plan my trip")

    cards = orchestrator.messages[-1].tool_calls
    assert [c.tool_name for c in cards] == ["Search Flights", "Search Hotels"]
    assert cards[1].result == {"hotels": []}
    assert [e.title for e in orchestrator.events if e.type == "tool_call"] == [
        "Tool called: Search Hotels",
        "Tool called: Search Flights",
    ]
    assert orchestrator.current_approval is None
    assert orchestrator.is_idle
    assert orchestrator.last_tool == "Search Hotels"


def test_follow_up_failure_keeps_first_reply(orchestrator, gateway, reply):
    gateway.queue(reply("Here are the flights.", [SEARCH_FLIGHTS]), GatewayError("boom", status_code=500))

    orchestrator.send_user_message("Search flights")

    assert orchestrator.messages[-1].content == "Here are the flights."
    assert orchestrator.messages[-1].tool_calls[0].status == "completed"
    assert orchestrator.is_idle


def test_plain_reply_makes_single_call(orchestrator, gateway, reply):
    gateway.queue(reply("Hi! I can search and book travel."))

    orchestrator.send_user_message("Hello")

    assert len(gateway.calls) == 1
    assert gateway.calls[0]["pending_approvals"] == []
    assert orchestrator.messages[-1].content == "Hi! I can search and book travel."
    assert orchestrator.messages[-1].tool_calls == []


def test_empty_reply_gets_fallback_text(orchestrator, gateway, reply):
    gateway.queue(reply(""))

    orchestrator.send_user_message("Hello")

    assert orchestrator.messages[-1].role == "assistant"
    assert orchestrator.messages[-1].content


def test_blank_message_ignored(orchestrator, gateway):
    orchestrator.send_user_message("   ")

    assert orchestrator.messages == []
    assert gateway.calls == []


def test_approval_required_suspends_turn(awaiting_approval, gateway):
    """An approval-required tool call opens the gate and parks the turn"""
    orchestrator = awaiting_approval

    assert orchestrator.state == OrchestratorState.AWAITING_APPROVAL
    request = orchestrator.current_approval
    assert request is not None
    assert request.tool_name == "Book Flight"
    assert request.scopes == ["flights:write", "payments:charge"]
    assert request.data_summary["Requested Scopes"] == "flights:write, payments:charge"
    assert request.data_summary["Reason"] == "cheapest option"

    pending = orchestrator.pending_tool_calls
    assert len(pending) == 1
    assert pending[0].status == "pending"
    assert pending[0].requires_approval is True

    # Partial text is shown, but no assistant message carries the tool card yet
    assert orchestrator.messages[-1].content == "I'll book that for you."
    assert all(not m.tool_calls for m in orchestrator.messages)
    assert orchestrator.events[0].type == "approval"
    assert orchestrator.events[0].status == "pending"
    assert len(gateway.calls) == 1


def test_mixed_turn_keeps_executed_and_pending_cards(orchestrator, gateway, reply):
    gateway.queue(reply("", [SEARCH_FLIGHTS, BOOK_FLIGHT]))

    orchestrator.send_user_message("Find and book the cheapest flight")

    statuses = [c.status for c in orchestrator.pending_tool_calls]
    assert statuses == ["completed", "pending"]
    assert orchestrator.state == OrchestratorState.AWAITING_APPROVAL
    # Empty partial text is not appended
    assert [m.role for m in orchestrator.messages] == ["user"]


def test_only_first_approval_is_surfaced(orchestrator, gateway, reply):
    book_hotel = dict(BOOK_FLIGHT, tool_id="book_hotel", tool_name="Book Hotel")
    gateway.queue(reply("", [BOOK_FLIGHT, book_hotel]))

    orchestrator.send_user_message("Book everything")

    assert orchestrator.current_approval.tool_name == "Book Flight"
    assert [c.tool_id for c in orchestrator.pending_tool_calls] == ["book_flight"]


def test_send_while_awaiting_approval_is_ignored(awaiting_approval, gateway):
    before = len(awaiting_approval.messages)

    awaiting_approval.send_user_message("Hello?")

    assert len(awaiting_approval.messages) == before
    assert len(gateway.calls) == 1


def test_send_while_awaiting_agent_is_ignored(orchestrator, gateway, reply):
    def reentrant_send():
        orchestrator.send_user_message("Are you there?")
        return reply("Done.")

    gateway.queue(reentrant_send)

    orchestrator.send_user_message("Hello")

    assert [m.content for m in orchestrator.messages] == ["Hello", "Done."]
    assert len(gateway.calls) == 1


def test_approve_completes_turn(awaiting_approval, gateway, reply):
    orchestrator = awaiting_approval
    pending_call = orchestrator.pending_tool_calls[0]
    message_count = len(orchestrator.messages)
    gateway.queue(reply("Booked! Confirmation DL-ABC123."))

    orchestrator.resolve_approval("approved")

    assert orchestrator.state == OrchestratorState.IDLE
    assert orchestrator.pending_context is None
    assert orchestrator.current_approval is None
    assert len(orchestrator.messages) == message_count + 1

    final = orchestrator.messages[-1]
    assert final.content == "Booked! Confirmation DL-ABC123."
    assert [c.id for c in final.tool_calls] == [pending_call.id]
    assert final.tool_calls[0].status == "completed"

    decision = gateway.calls[-1]["pending_approvals"][0]
    assert decision.decision == "approved"
    assert decision.tool_id == "book_flight"
    assert decision.args == {"reason": "cheapest option"}

    types = [e.type for e in orchestrator.events]
    assert types[:2] == ["token_exchange", "approval"]
    assert orchestrator.events[0].feature == "Token Vault"
    assert orchestrator.events[1].status == "success"


def test_approve_fills_result_from_echoed_descriptor(awaiting_approval, gateway, reply):
    echoed = dict(BOOK_FLIGHT, type="executed", result={"confirmation": "DL-XYZ"})
    gateway.queue(reply("Booked.", [echoed]))

    awaiting_approval.resolve_approval("approved")

    final = awaiting_approval.messages[-1]
    assert len(final.tool_calls) == 1
    assert final.tool_calls[0].result == {"confirmation": "DL-XYZ"}


def test_deny_completes_turn(awaiting_approval, gateway, reply):
    orchestrator = awaiting_approval
    gateway.queue(reply("Okay, I will not book it."))

    orchestrator.resolve_approval("denied")

    final = orchestrator.messages[-1]
    assert final.content == "Okay, I will not book it."
    assert final.tool_calls[0].status == "denied"
    assert orchestrator.state == OrchestratorState.IDLE
    assert orchestrator.events[0].type == "approval"
    assert orchestrator.events[0].status == "denied"
    assert all(e.type != "token_exchange" for e in orchestrator.events)
    assert gateway.calls[-1]["pending_approvals"][0].decision == "denied"


def test_second_resolve_is_noop(awaiting_approval, gateway, reply):
    orchestrator = awaiting_approval
    gateway.queue(reply("Booked."))
    orchestrator.resolve_approval("approved")
    messages = len(orchestrator.messages)
    events = len(orchestrator.events)

    orchestrator.resolve_approval("approved")
    orchestrator.resolve_approval("denied")

    assert len(orchestrator.messages) == messages
    assert len(orchestrator.events) == events
    assert len(gateway.calls) == 2


def test_resolve_without_pending_is_noop(orchestrator, gateway):
    orchestrator.resolve_approval("approved")

    assert orchestrator.messages == []
    assert gateway.calls == []
    assert orchestrator.is_idle


def test_approve_follow_up_failure_uses_fallback(awaiting_approval, gateway):
    notices = []
    awaiting_approval.subscribe(lambda event, payload: notices.append(payload) if event == "notice" else None)
    gateway.queue(GatewayError("down", status_code=503))

    awaiting_approval.resolve_approval("approved")

    assert awaiting_approval.messages[-1].content == APPROVED_FALLBACK
    assert awaiting_approval.messages[-1].tool_calls[0].status == "approved"
    assert awaiting_approval.is_idle
    assert notices and notices[0].level == "error"


def test_chained_approval_is_dropped(awaiting_approval, gateway, reply):
    book_hotel = dict(BOOK_FLIGHT, tool_id="book_hotel", tool_name="Book Hotel")
    gateway.queue(reply("Flight booked, shall I book the hotel too?", [book_hotel]))

    awaiting_approval.resolve_approval("approved")

    assert awaiting_approval.is_idle
    assert awaiting_approval.current_approval is None
    assert [c.tool_id for c in awaiting_approval.messages[-1].tool_calls] == ["book_flight"]


def test_transport_error_appends_apology(orchestrator, gateway):
    gateway.queue(GatewayError("connection refused"))

    orchestrator.send_user_message("Hello")

    assert [m.role for m in orchestrator.messages] == ["user", "assistant"]
    assert orchestrator.messages[-1].content == APOLOGY_MESSAGE
    assert orchestrator.state == OrchestratorState.IDLE


@pytest.mark.parametrize("error", [
    RateLimitedError("Rate limits exceeded, please try again later.", status_code=429),
    QuotaExceededError("AI usage limit reached for this demo.", status_code=402),
])
def test_rate_limit_and_quota_raise_notice(orchestrator, gateway, error):
    notices = []
    orchestrator.subscribe(lambda event, payload: notices.append(payload) if event == "notice" else None)
    gateway.queue(error)

    orchestrator.send_user_message("Hello")

    assert [m.role for m in orchestrator.messages] == ["user"]
    assert len(notices) == 1
    assert notices[0].level == "warning"
    assert notices[0].message == str(error)
    assert orchestrator.is_idle


def test_reset_clears_session(awaiting_approval, gateway):
    orchestrator = awaiting_approval

    orchestrator.reset()

    assert orchestrator.messages == []
    assert orchestrator.events == []
    assert orchestrator.current_approval is None
    assert orchestrator.pending_context is None
    assert orchestrator.last_tool is None
    assert orchestrator.state == OrchestratorState.IDLE
    assert gateway.resets == ["env-1"]


def test_reset_tolerates_remote_failure(orchestrator, gateway):
    gateway.reset_error = GatewayError("unreachable")

    orchestrator.reset()

    assert orchestrator.is_idle
    assert gateway.resets == ["env-1"]


def test_reset_tolerates_unexpected_remote_error(orchestrator, gateway):
    gateway.reset_error = ValueError("Expecting value: line 1 column 1 (char 0)")

    orchestrator.reset()

    assert orchestrator.is_idle
    assert gateway.resets == ["env-1"]


def test_reply_arriving_after_reset_is_discarded(orchestrator, gateway, reply):
    def reset_then_reply():
        orchestrator.reset()
        return reply("Too late.", [SEARCH_FLIGHTS])

    gateway.queue(reset_then_reply)

    orchestrator.send_user_message("Hello")

    assert orchestrator.messages == []
    assert orchestrator.events == []
    assert orchestrator.is_idle
    assert len(gateway.calls) == 1


def test_error_arriving_after_reset_is_discarded(orchestrator, gateway):
    def reset_then_fail():
        orchestrator.reset()
        return GatewayError("late failure")

    gateway.queue(reset_then_fail)

    orchestrator.send_user_message("Hello")

    assert orchestrator.messages == []


def test_listener_events(orchestrator, gateway, reply):
    seen = []
    unsubscribe = orchestrator.subscribe(lambda event, payload: seen.append(event))
    gateway.queue(reply("", [BOOK_FLIGHT]), reply("Booked."))

    orchestrator.send_user_message("Book it")
    orchestrator.resolve_approval("approved")

    assert seen[0] == "message"
    assert "approval" in seen
    assert seen.count("state") >= 3
    assert seen[-1] == "state"

    unsubscribe()
    orchestrator.reset()
    assert "reset" not in seen


def test_failing_listener_does_not_break_turn(orchestrator, gateway, reply):
    def broken(event, payload):
        raise RuntimeError("listener bug")

    orchestrator.subscribe(broken)
    gateway.queue(reply("Hi."))

    orchestrator.send_user_message("Hello")

    assert orchestrator.messages[-1].content == "Hi."


def test_session_start_event(orchestrator):
    orchestrator.record_session_start("jane@example.com")

    event = orchestrator.events[0]
    assert event.type == "auth"
    assert event.status == "success"
    assert event.feature == "Identity Context"
    assert "jane@example.com" in event.detail


def test_user_message_event_carries_feature_and_preview(orchestrator, gateway, reply):
    gateway.queue(reply("Ok."))
    text = "x" * 100

    orchestrator.send_user_message(text, feature="Token Vault")

    event = orchestrator.events[0]
    assert event.type == "message"
    assert event.feature == "Token Vault"
    assert event.detail == "x" * 60 + "..."
