# tests/unit/runtime/test_executor.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from enum import Enum
from unittest.mock import MagicMock, call

import pytest

from stateful.core.errors import IllegalTransition, NotALeafState, UnknownStateReference
from stateful.runtime.executor import StateMachine


class Stage(Enum):
    FEEDBACK = "needs_feedback"


@pytest.fixture
def machine(kata_spec, host, observer):
    return StateMachine(host, kata_spec, [observer])


def test_state_machine_init(machine, kata_spec, host):
    assert machine.instance is host
    assert machine.spec is kata_spec
    assert machine.current == "draft"
    assert machine.info.name == "draft"
    assert machine.values == kata_spec.values


def test_same_state_is_a_no_op(machine, host, observer, effect):
    assert machine.change("draft", effect) is False
    assert machine.change_strict("draft", effect) is False
    assert machine.current == "draft"
    effect.assert_not_called()
    observer.assert_not_called()
    assert "state" not in vars(host)


def test_same_state_is_a_no_op_for_every_leaf(kata_spec, host, observer):
    machine = StateMachine(host, kata_spec, [observer])
    for value in kata_spec.values:
        host.state = value
        assert machine.change(value) is False
        assert machine.change_strict(value) is False
    observer.assert_not_called()


def test_successful_change(machine, host, observer):
    assert machine.change("needs_feedback") is True
    assert host.state == "needs_feedback"
    observer.assert_called_once_with(host)


def test_unknown_target(machine, observer):
    assert machine.change("archived") is False
    with pytest.raises(UnknownStateReference):
        machine.change_strict("archived")
    assert machine.current == "draft"
    observer.assert_not_called()


def test_group_target(machine, observer):
    assert machine.change("beta") is False
    with pytest.raises(NotALeafState):
        machine.change_strict("beta")
    with pytest.raises(NotALeafState):
        machine.change_strict("published")
    assert machine.current == "draft"
    observer.assert_not_called()


def test_unreachable_target(machine, observer):
    assert machine.change("retired") is False
    with pytest.raises(IllegalTransition) as excinfo:
        machine.change_strict("retired")
    assert excinfo.value.current == "draft"
    assert excinfo.value.target == "retired"
    assert excinfo.value.attribute == "state"
    assert machine.current == "draft"
    observer.assert_not_called()


def test_non_string_target(machine):
    assert machine.change(None) is False
    assert machine.change(42) is False
    with pytest.raises(UnknownStateReference):
        machine.change_strict(42)


def test_enum_target(machine):
    assert machine.change(Stage.FEEDBACK) is True
    assert machine.current == "needs_feedback"


def test_effect_runs_after_mutation_and_before_observers(kata_spec, host):
    events = []
    observer = MagicMock(side_effect=lambda doc: events.append(("observer", doc.state)))
    machine = StateMachine(host, kata_spec, [observer])

    result = machine.change("needs_feedback", lambda: events.append(("effect", host.state)))

    assert result is True
    assert events == [("effect", "needs_feedback"), ("observer", "needs_feedback")]


def test_effect_runs_once(machine, effect):
    assert machine.change_strict("needs_approval", effect) is True
    effect.assert_called_once_with()


def test_effect_is_skipped_on_rejection(machine, effect):
    assert machine.change("approved", effect) is False
    effect.assert_not_called()


def test_effect_errors_propagate(machine, observer):
    def failing():
        raise RuntimeError("effect failed")

    with pytest.raises(RuntimeError):
        machine.change("needs_feedback", failing)
    # the value was already stored when the effect ran
    assert machine.current == "needs_feedback"
    observer.assert_not_called()


def test_observer_errors_propagate(kata_spec, host):
    machine = StateMachine(host, kata_spec, [MagicMock(side_effect=ValueError("observer failed"))])
    with pytest.raises(ValueError):
        machine.change("needs_feedback")


def test_observers_fire_in_registration_order(kata_spec, host):
    parent = MagicMock()
    machine = StateMachine(host, kata_spec, [parent.first, parent.second])

    machine.change("needs_feedback")
    machine.change("needs_approval")

    assert parent.mock_calls == [call.first(host), call.second(host), call.first(host), call.second(host)]


def test_is_valid(machine, host):
    assert machine.is_valid() is True
    host.state = "beta"
    assert machine.is_valid() is False
    host.state = "archived"
    assert machine.is_valid() is False
    host.state = None
    assert machine.is_valid() is False


def test_invalid_current_value_reaches_nothing(machine, host):
    host.state = "beta"
    assert machine.can_transition_to("needs_feedback") is False
    assert machine.available_transitions() == []
    assert machine.change("needs_feedback") is False
    with pytest.raises(IllegalTransition):
        machine.change_strict("needs_feedback")

    host.state = "archived"
    assert machine.info is None
    assert machine.change("draft") is False


def test_can_transition_to(machine):
    assert machine.can_transition_to("needs_feedback") is True
    assert machine.can_transition_to("needs_approval") is True
    assert machine.can_transition_to("approved") is False
    assert machine.can_transition_to("beta") is False
    assert machine.can_transition_to(Stage.FEEDBACK) is True


def test_in_state(machine, host):
    host.state = "needs_approval"
    assert machine.in_state("needs_approval") is True
    assert machine.in_state("beta") is True
    assert machine.in_state("published") is True
    assert machine.in_state("draft") is False
    host.state = "archived"
    assert machine.in_state("archived") is False


def test_terminal_states(machine, host):
    assert machine.is_terminal() is False
    host.state = "retired"
    assert machine.is_terminal() is True
    assert machine.available_transitions() == []


def test_available_transitions(machine):
    assert machine.available_transitions() == ["needs_feedback", "needs_approval"]


def test_lenient_rejection_is_logged(machine, caplog):
    with caplog.at_level("DEBUG", logger="stateful.runtime.executor"):
        machine.change("retired")
    assert "Rejected transition of 'state'" in caplog.text
