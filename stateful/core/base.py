# stateful/core/base.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple
from weakref import ReferenceType, ref

if TYPE_CHECKING:
    from stateful.core.graph import StateGraph


class StateBase:
    """Base class for compiled state nodes"""

    is_leaf: bool = False

    def __init__(self, name: str) -> None:
        if not name or not isinstance(name, str):
            raise ValueError("State name must be a non-empty string")
        self._name = name
        self._parent: Optional[ReferenceType[StateBase]] = None
        self._graph: Optional[StateGraph] = None
        self._flattened: Optional[Tuple[str, ...]] = None

    def __hash__(self) -> int:
        """Make states hashable based on their name and memory address."""
        return hash((self._name, id(self)))

    def __eq__(self, other: object) -> bool:
        """States are equal if they are the same object."""
        if not isinstance(other, StateBase):
            return NotImplemented
        return id(self) == id(other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> Optional[StateBase]:
        """The owning group, or None for a top-level state."""
        # the graph this node holds keeps the parent alive
        return self._parent() if self._parent is not None else None

    @property
    def graph(self) -> StateGraph:
        """The graph this node was registered in."""
        if self._graph is None:
            raise RuntimeError(f"State '{self._name}' is not attached to a state graph")
        return self._graph

    @property
    def children(self) -> Tuple[StateBase, ...]:
        return ()

    def attach(self, graph: StateGraph, parent: Optional[StateBase] = None) -> None:
        """
        Record the registering graph and a non-owning link to the owning group.
        Only the graph calls this, once per node.
        """
        if self._graph is not None:
            raise ValueError(f"State '{self._name}' is already attached to a state graph")
        self._graph = graph
        self._parent = ref(parent) if parent is not None else None

    def is_a(self, name: str) -> bool:
        """
        Return True if this state is `name` or is nested (at any depth) in a
        group called `name`.
        """
        current: Optional[StateBase] = self
        while current is not None:
            if current.name == name:
                return True
            current = current.parent
        return False

    def ancestors(self) -> List[StateBase]:
        """Get all ancestor groups in order from immediate parent to root."""
        result = []
        current = self.parent
        while current is not None:
            result.append(current)
            current = current.parent
        return result

    def flatten(self) -> Tuple[str, ...]:
        """
        The leaf names this node stands for, in declaration order. Computed
        once and memoized on the node.
        """
        if self._flattened is None:
            self._flattened = tuple(dict.fromkeys(self._flatten()))
        return self._flattened

    def collect_child_states(self) -> List[str]:
        """
        Leaf names under this node, depth first in declaration order. A leaf
        collects only itself.
        """
        raise NotImplementedError()

    def _flatten(self) -> List[str]:
        raise NotImplementedError()
