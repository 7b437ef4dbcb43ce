# stateful/core/attribute.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional, Tuple

from stateful.core.base import StateBase
from stateful.core.compiler import StateTreeCompiler, state_name
from stateful.core.errors import DefinitionError
from stateful.core.graph import StateGraph
from stateful.interfaces.types import AttributeName, StateName

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "has invalid value"

_OPTIONS = frozenset({"prefix", "allow_nil", "message"})


class AttributeSpec:
    """
    The compiled, immutable definition of one named state machine on a host
    type. Shared by every instance of the type.
    """

    def __init__(
        self,
        name: AttributeName,
        default: StateName,
        graph: StateGraph,
        events: Iterable[Any] = (),
        prefix: Optional[str] = None,
        allow_nil: bool = False,
        message: str = DEFAULT_MESSAGE,
    ) -> None:
        """
        :param name: The attribute the state is stored under.
        :param default: Leaf every new instance starts in.
        :param graph: The frozen state graph.
        :param events: Opaque event labels, kept for collaborators.
        :param prefix: Prefix for scope names; see `scopes()`.
        :param allow_nil: Whether `validate_value` accepts None.
        :param message: Message `validate_value` returns for invalid values.
        """
        if not graph.frozen:
            raise DefinitionError(f"State graph for '{name}' must be compiled before use.")
        self._name = name
        self._default = default
        self._graph = graph
        self._events = tuple(events)
        self._prefix = default_prefix(name) if prefix is None else prefix
        self._allow_nil = bool(allow_nil)
        self._message = message
        self._values = tuple(leaf.name for leaf in graph.leaves())

    @classmethod
    def build(
        cls,
        name: AttributeName,
        default: Any,
        events: Optional[Iterable[Any]] = None,
        states: Optional[Mapping] = None,
        **options: Any,
    ) -> AttributeSpec:
        """
        Compile a declaration into a spec.

        :raises DefinitionError: If the declaration or its options are invalid.
        """
        if not isinstance(name, str) or not name.isidentifier():
            raise DefinitionError(f"Attribute name must be an identifier, got {name!r}.")
        unknown = set(options) - _OPTIONS
        if unknown:
            raise DefinitionError(f"Unknown options for '{name}': {', '.join(sorted(unknown))}.")
        if states is None:
            raise DefinitionError(f"Attribute '{name}' declares no states.")

        graph = StateTreeCompiler().compile(default, states)
        spec = cls(name, state_name(default), graph, events or (), **options)
        logger.debug("Built stateful attribute '%s' with default '%s'", name, spec.default)
        return spec

    def __repr__(self) -> str:
        return f"AttributeSpec({self._name!r}, default={self._default!r})"

    @property
    def name(self) -> AttributeName:
        return self._name

    @property
    def default(self) -> StateName:
        return self._default

    @property
    def graph(self) -> StateGraph:
        return self._graph

    @property
    def events(self) -> Tuple[Any, ...]:
        return self._events

    @property
    def values(self) -> Tuple[StateName, ...]:
        """Leaf names in declaration order; the only assignable values."""
        return self._values

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def allow_nil(self) -> bool:
        return self._allow_nil

    @property
    def message(self) -> str:
        return self._message

    def info(self, name: Optional[StateName]) -> Optional[StateBase]:
        """The node called `name`, or None when there is no such state."""
        if not isinstance(name, str):
            return None
        return self._graph.get(name)

    def infos(self) -> Dict[StateName, StateBase]:
        """Every node, leaves and groups, keyed by name in declaration order."""
        return {node.name: node for node in self._graph.states()}

    def is_valid_state(self, value: Any) -> bool:
        """True if `value` names a leaf of this attribute."""
        return isinstance(value, str) and self._graph.is_leaf(value)

    def validate_value(self, value: Any) -> Optional[str]:
        """
        Inclusion check for storage collaborators.

        :return: None if the value is acceptable, otherwise the configured message.
        """
        if value is None and self._allow_nil:
            return None
        if self.is_valid_state(value):
            return None
        return self._message

    def scopes(self) -> Dict[str, Tuple[StateName, ...]]:
        """
        One entry per leaf and group: the prefixed scope name mapped to the leaf
        values a query for that name has to match.
        """
        return {
            f"{self._prefix}{node.name}": tuple(node.collect_child_states()) for node in self._graph.states()
        }

    def read(self, instance: Any) -> Any:
        return getattr(instance, self._name, self._default)

    def write(self, instance: Any, value: StateName) -> None:
        setattr(instance, self._name, value)


def default_prefix(name: AttributeName) -> str:
    """The conventional `state` attribute goes unprefixed; others use their name."""
    return "" if name == "state" else f"{name}_"
