# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from unittest.mock import MagicMock

import pytest

KATA_STATES = {
    "draft": "beta",
    "published": {
        "beta": {
            "needs_feedback": ["draft", "needs_approval"],
            "needs_approval": ["draft", "approved"],
        },
        "approved": "retired",
    },
    "retired": None,
}

MERGE_STATES = {
    "na": "pending",
    "pending": ["approved", "rejected"],
    "approved": None,
    "rejected": "pending",
}


def make_kata_class():
    """Build a fresh host type so registry freezing never leaks between tests."""
    from stateful.core.declarations import StateAttribute, Stateful, after_state_change

    class Kata(Stateful):
        state = StateAttribute(
            default="draft",
            events=["publish", "unpublish", "approve", "retire"],
            states=KATA_STATES,
        )
        merge_status = StateAttribute(
            default="na",
            events=["merge", "approve_merge", "reject_merge"],
            states=MERGE_STATES,
        )

        def __init__(self):
            self.ready_score = 0
            self.state_changes = 0
            self.approved_by = None
            self.published_at = None

        @after_state_change
        def _count_change(self):
            self.state_changes += 1

        def enough_votes_for_approval(self):
            return self.ready_score >= 10

        def vote(self, ready):
            self.ready_score += 1 if ready else -1
            # votes only affect state when in beta
            if Kata.state.in_state(self, "beta"):
                if self.enough_votes_for_approval() and Kata.state.in_state(self, "needs_feedback"):
                    Kata.state.change(self, "needs_approval")
                elif not self.enough_votes_for_approval() and Kata.state.in_state(self, "needs_approval"):
                    Kata.state.change(self, "needs_feedback")

        def publish(self):
            target = "needs_approval" if self.enough_votes_for_approval() else "needs_feedback"
            return Kata.state.change(self, target, lambda: setattr(self, "published_at", "now"))

        def unpublish(self):
            return Kata.state.change(self, "draft")

        def approve(self, approved_by):
            return Kata.state.change(self, "approved", lambda: setattr(self, "approved_by", approved_by))

    return Kata


@pytest.fixture
def kata_states():
    return KATA_STATES


@pytest.fixture
def merge_states():
    return MERGE_STATES


@pytest.fixture
def kata_graph():
    """The compiled graph of the kata `state` attribute."""
    from stateful.core.compiler import compile_states

    return compile_states("draft", KATA_STATES)


@pytest.fixture
def merge_graph():
    from stateful.core.compiler import compile_states

    return compile_states("na", MERGE_STATES)


@pytest.fixture
def kata_class():
    return make_kata_class()


@pytest.fixture
def kata(kata_class):
    return kata_class()


@pytest.fixture
def kata_spec():
    from stateful.core.attribute import AttributeSpec

    return AttributeSpec.build("state", "draft", ["publish"], KATA_STATES)


@pytest.fixture
def host():
    """A plain host object carrying no declarations."""

    class Host:
        pass

    return Host()


@pytest.fixture
def observer():
    """An after-change observer mock."""
    return MagicMock()


@pytest.fixture
def effect():
    """A side effect mock."""
    return MagicMock()


@pytest.fixture
def error_classes():
    """Provides a tuple of error classes for quick reference."""
    from stateful.core.errors import StatefulError, StateNotFoundError, TransitionError, ValidationError

    return (StatefulError, StateNotFoundError, TransitionError, ValidationError)


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive():
            thread.join(timeout=1.0)
