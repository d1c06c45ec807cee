"""Tests for scripted autopilot walkthroughs"""
import pytest

from authdemo.autopilot import AUTOPILOT_SCRIPTS, AutopilotDriver, get_script
from authdemo.catalog import DEMO_TEMPLATES, get_template_by_id
from authdemo.orchestrator import Orchestrator

BOOK_FLIGHT = {
    "type": "approval_required",
    "tool_id": "book_flight",
    "tool_name": "Book Flight",
    "scopes": ["flights:write", "payments:charge"],
}


@pytest.fixture
def driver(gateway):
    orchestrator = Orchestrator(gateway, get_template_by_id("travel-agent"), "env-1")
    return AutopilotDriver(orchestrator, get_script("travel-agent"))


def test_every_builtin_template_has_a_script():
    for template in DEMO_TEMPLATES:
        script = get_script(template.id)
        assert script is not None, template.id
        assert script.template_id == template.id
        assert script.steps


def test_script_step_ids_are_unique():
    for script in AUTOPILOT_SCRIPTS.values():
        ids = [step.id for step in script.steps]
        assert len(ids) == len(set(ids))


def test_unknown_script():
    assert get_script("no-such-template") is None


def test_advance_requires_start(driver, gateway):
    assert driver.advance() is None
    assert gateway.calls == []


def test_advance_sends_steps_in_order(driver, gateway, reply):
    gateway.queue(reply("Here you go."), reply("And hotels."))
    driver.start()

    first = driver.advance()
    second = driver.advance()

    assert first.id == "step-1"
    assert second.id == "step-2"
    assert driver.step_index == 2
    assert driver.current_step == second
    assert driver.next_step.id == "step-3"
    assert driver.waiting is False

    sent = [m.content for m in driver.orchestrator.messages if m.role == "user"]
    assert sent == [first.user_message, second.user_message]
    assert driver.orchestrator.events[-1].feature == first.highlight_feature


def test_advance_is_noop_while_orchestrator_busy(driver, gateway, reply):
    gateway.queue(reply("", [BOOK_FLIGHT]))
    driver.start()
    driver.advance()
    assert not driver.orchestrator.is_idle

    assert driver.advance() is None
    assert driver.step_index == 1
    assert len(gateway.calls) == 1


def test_advance_after_completion(driver, gateway, reply):
    steps = len(driver.script.steps)
    gateway.queue(*[reply("Ok.") for _ in range(steps)])
    driver.start()

    for _ in range(steps):
        assert driver.advance() is not None

    assert driver.is_complete
    assert driver.next_step is None
    assert driver.advance() is None
    assert len(gateway.calls) == steps


def test_stop_returns_to_first_step(driver, gateway, reply):
    gateway.queue(reply("Ok."))
    driver.start()
    driver.advance()

    driver.stop()

    assert driver.active is False
    assert driver.step_index == 0
    assert driver.current_step is None
    assert driver.next_step is None
