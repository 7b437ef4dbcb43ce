# stateful/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from stateful.core.base import StateBase
from stateful.core.errors import NotALeafState


class LeafState(StateBase):
    """
    Represents an assignable state. A leaf stores the raw target names it was
    declared with; groups among them are expanded to their leaves on demand.
    """

    is_leaf = True

    def __init__(self, name: str, targets: Iterable[str] = ()) -> None:
        """
        Initialize a leaf with its declared targets.

        :param name: Name identifying this state within its attribute.
        :param targets: Raw target names, leaf or group, in declaration order.
        """
        super().__init__(name)
        self._targets: Tuple[str, ...] = tuple(targets)
        self._transitions: Optional[Tuple[str, ...]] = None

    @property
    def targets(self) -> Tuple[str, ...]:
        """The raw declared target names."""
        return self._targets

    @property
    def is_terminal(self) -> bool:
        return not self._targets

    def to_transitions(self) -> List[str]:
        """
        Expand the declared targets into the leaf names this state may move to.
        Duplicates introduced by overlapping declarations are kept.

        :return: Leaf names in declaration order; empty for a terminal state.
        """
        if self._transitions is None:
            graph = self.graph
            expanded: List[str] = []
            for target in self._targets:
                expanded.extend(graph[target].flatten())
            self._transitions = tuple(expanded)
        return list(self._transitions)

    def can_transition_to(self, name: str) -> bool:
        """Exact membership test against the expanded transitions."""
        return name in self.to_transitions()

    def collect_child_states(self) -> List[str]:
        return [self.name]

    def _flatten(self) -> List[str]:
        return [self.name]


class GroupState(StateBase):
    """
    A named grouping of child states. A group is never itself a current value;
    it stands for all of its leaves when used as a transition target, a
    predicate or a scope.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._children: List[StateBase] = []

    @property
    def children(self) -> Tuple[StateBase, ...]:
        return tuple(self._children)

    @property
    def is_terminal(self) -> bool:
        return False

    def add_child(self, state: StateBase) -> None:
        """
        Append a child in declaration order. The graph links the parent side.
        """
        self._children.append(state)

    def to_transitions(self) -> List[str]:
        """
        Groups have no transitions of their own.

        :raises NotALeafState: Always.
        """
        raise NotALeafState(self.name)

    def can_transition_to(self, name: str) -> bool:
        raise NotALeafState(self.name)

    def collect_child_states(self) -> List[str]:
        states: List[str] = []
        for child in self._children:
            states.extend(child.collect_child_states())
        return states

    def _flatten(self) -> List[str]:
        flattened: List[str] = []
        for child in self._children:
            flattened.extend(child.flatten())
        return flattened
