# stateful/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Optional

from stateful.core.errors import DefinitionError, InvalidDefaultState, UnknownStateReference
from stateful.core.graph import StateGraph
from stateful.core.states import GroupState


class Validator:
    """
    Performs definition-time validation of a compiled state graph, ensuring
    transition targets resolve and the default state is assignable.
    """

    def __init__(self) -> None:
        """
        Initialize the validator with the default rules.
        """
        self._rules_engine = _ValidationRulesEngine()

    def validate_graph(self, graph: StateGraph, default: Optional[str]) -> None:
        """
        Check the graph's structure, targets and default for consistency.

        :param graph: The compiled state graph.
        :param default: The declared default state name.
        :raises DefinitionError: If validation fails.
        """
        self._rules_engine.validate_graph(graph, default)


class _ValidationRulesEngine:
    """
    Internal engine applying a set of validation rules to a state graph.
    Centralizes validation logic for easier maintenance.
    """

    def __init__(self) -> None:
        self._default_rules = _DefaultValidationRules

    def validate_graph(self, graph: StateGraph, default: Optional[str]) -> None:
        """
        Apply all graph-level validation rules, structure first.

        :raises DefinitionError: If a rule fails.
        """
        self._default_rules.validate_structure(graph)
        self._default_rules.validate_targets(graph)
        self._default_rules.validate_default(graph, default)


class _DefaultValidationRules:
    """
    Provides built-in validation rules ensuring basic correctness of a state
    tree out of the box.
    """

    @staticmethod
    def validate_structure(graph: StateGraph) -> None:
        """
        Check that the tree has at least one leaf and every group owns a leaf.
        """
        if not graph.leaves():
            raise DefinitionError("A state tree must declare at least one leaf state.")
        for group in graph.groups():
            if not group.children:
                raise DefinitionError(f"Group state '{group.name}' has no children.")

    @staticmethod
    def validate_targets(graph: StateGraph) -> None:
        """
        Check that every raw target of every leaf names a state of this graph.
        """
        for leaf in graph.leaves():
            for target in leaf.targets:
                if target not in graph:
                    raise UnknownStateReference(target, source=leaf.name)

    @staticmethod
    def validate_default(graph: StateGraph, default: Optional[str]) -> None:
        """
        Check that the default state exists and is a leaf.
        """
        if default is None:
            raise InvalidDefaultState(default, "is missing")
        node = graph.get(default)
        if node is None:
            raise InvalidDefaultState(default, "is not a declared state")
        if isinstance(node, GroupState):
            raise InvalidDefaultState(default, "is a group, not a leaf state")
