# tests/unit/core/test_errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest


def test_error_hierarchy(error_classes):
    StatefulError, StateNotFoundError, TransitionError, ValidationError = error_classes
    assert issubclass(StateNotFoundError, StatefulError)
    assert issubclass(TransitionError, StatefulError)
    assert issubclass(ValidationError, StatefulError)


def test_definition_errors_are_validation_errors():
    from stateful.core.errors import (
        DefinitionError,
        DuplicateStateName,
        InvalidDefaultState,
        UnknownStateReference,
        ValidationError,
    )

    assert issubclass(DefinitionError, ValidationError)
    assert issubclass(DuplicateStateName, DefinitionError)
    assert issubclass(InvalidDefaultState, DefinitionError)
    # unknown references are raised at definition time and at runtime
    assert issubclass(UnknownStateReference, DefinitionError)


def test_runtime_errors():
    from stateful.core.errors import (
        IllegalTransition,
        NotALeafState,
        StateNotFoundError,
        TransitionError,
        UnknownStateReference,
    )

    assert issubclass(UnknownStateReference, StateNotFoundError)
    assert issubclass(NotALeafState, TransitionError)
    assert issubclass(IllegalTransition, TransitionError)


def test_errors_carry_names():
    from stateful.core.errors import IllegalTransition, NotALeafState, UnknownStateReference

    e = UnknownStateReference("missing", source="draft")
    assert e.name == "missing"
    assert e.source == "draft"
    assert "draft" in str(e) and "missing" in str(e)

    e = NotALeafState("beta")
    assert e.name == "beta"

    e = IllegalTransition("draft", "retired", attribute="state")
    assert (e.current, e.target, e.attribute) == ("draft", "retired", "state")
    assert str(e) == "Cannot transition on 'state' from 'draft' to 'retired'."


def test_unknown_attribute_is_a_key_error():
    from stateful.core.errors import StateNotFoundError, UnknownAttribute

    class Host:
        pass

    with pytest.raises(KeyError):
        raise UnknownAttribute("status", Host)

    e = UnknownAttribute("status", Host)
    assert isinstance(e, StateNotFoundError)
    assert str(e) == "No stateful attribute 'status' registered on Host."
