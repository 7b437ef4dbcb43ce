# stateful/core/compiler.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Compile nested state declarations into a validated, frozen StateGraph."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, List, Optional

from stateful.core.errors import DefinitionError, InvalidDefaultState
from stateful.core.graph import StateGraph
from stateful.core.states import GroupState, LeafState
from stateful.core.validations import Validator
from stateful.interfaces.types import StateDeclaration, StateName

logger = logging.getLogger(__name__)


def state_name(value: Any) -> StateName:
    """
    Normalize a declared or requested state name. Strings pass through and
    enum members contribute their string value.

    :raises DefinitionError: If the value cannot name a state.
    """
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str) or not value:
        raise DefinitionError(f"State names must be non-empty strings, got {value!r}.")
    return value


class StateTreeCompiler:
    """
    Turns a declaration mapping into a StateGraph. Each value of the mapping
    is one of:

    - ``None``: a terminal leaf,
    - a single name: a leaf with one target,
    - a list or tuple of names: a leaf with several targets,
    - a nested mapping: a group whose children are declared the same way.

    The graph is validated once the whole tree exists, then frozen.
    """

    def __init__(self, validator: Optional[Validator] = None) -> None:
        self._validator = validator or Validator()

    def compile(self, default: Any, states: Mapping) -> StateGraph:
        """
        Build, validate and freeze the graph for one attribute.

        :param default: Name of the leaf every new instance starts in.
        :param states: The (possibly nested) state declaration.
        :raises DefinitionError: If the declaration is malformed.
        """
        if not isinstance(states, Mapping):
            raise DefinitionError(f"States must be declared as a mapping, got {type(states).__name__}.")

        graph = StateGraph()
        self._compile_level(graph, states, parent=None)
        self._validator.validate_graph(graph, self._default_name(default))
        graph.freeze()
        logger.debug(
            "Compiled state tree with %d leaves and %d groups", len(graph.leaves()), len(graph.groups())
        )
        return graph

    @staticmethod
    def _default_name(default: Any) -> Optional[StateName]:
        if default is None:
            return None
        try:
            return state_name(default)
        except DefinitionError:
            raise InvalidDefaultState(default, "is not a state name") from None

    def _compile_level(self, graph: StateGraph, states: Mapping, parent: Optional[GroupState]) -> None:
        for key, declaration in states.items():
            name = state_name(key)
            if isinstance(declaration, Mapping):
                group = GroupState(name)
                graph.add_state(group, parent)
                self._compile_level(graph, declaration, parent=group)
            else:
                graph.add_state(LeafState(name, self._targets(name, declaration)), parent)

    @staticmethod
    def _targets(name: StateName, declaration: StateDeclaration) -> List[StateName]:
        if declaration is None:
            return []
        if isinstance(declaration, (str, Enum)):
            return [state_name(declaration)]
        if isinstance(declaration, (list, tuple)):
            return [state_name(target) for target in declaration]
        raise DefinitionError(
            f"State '{name}' has an unsupported declaration of type {type(declaration).__name__}."
        )


def compile_states(default: Any, states: Mapping) -> StateGraph:
    """Compile a state declaration with the default validator."""
    return StateTreeCompiler().compile(default, states)
