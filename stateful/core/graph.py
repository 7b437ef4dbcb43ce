# stateful/core/graph.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Flat name registry owning every compiled state node of one attribute."""

import logging
from typing import Dict, Iterator, List, Optional

from stateful.core.base import StateBase
from stateful.core.errors import DuplicateStateName, UnknownStateReference
from stateful.core.states import GroupState, LeafState

logger = logging.getLogger(__name__)


class StateGraph:
    """
    Manages the structural relationships between the states of one attribute.
    The graph is the sole owner of its nodes. Each node keeps its graph alive and
    refers to its parent group weakly.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, StateBase] = {}
        self._frozen = False

    def add_state(self, state: StateBase, parent: Optional[GroupState] = None) -> None:
        """
        Register a state, optionally as the last child of `parent`.
        The parent must already be in the graph.
        """
        if self._frozen:
            raise ValueError("Cannot add states to a frozen state graph")
        if state.name in self._nodes:
            raise DuplicateStateName(state.name)

        if parent is not None and self._nodes.get(parent.name) is not parent:
            raise ValueError(f"Parent state '{parent.name}' must be added to the graph first")

        state.attach(self, parent)
        self._nodes[state.name] = state
        if parent is not None:
            parent.add_child(state)

    def freeze(self) -> None:
        """
        Reject further additions and compute every memoized expansion so that
        readers on other threads only ever see finished values.
        """
        for node in self._nodes.values():
            node.flatten()
        for leaf in self.leaves():
            leaf.to_transitions()
        self._frozen = True
        logger.debug("Froze state graph with %d states", len(self._nodes))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, name: str) -> StateBase:
        try:
            return self._nodes[name]
        except KeyError:
            raise UnknownStateReference(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, name: Optional[str]) -> Optional[StateBase]:
        if name is None:
            return None
        return self._nodes.get(name)

    def states(self) -> List[StateBase]:
        """All nodes, leaves and groups, in registration order."""
        return list(self._nodes.values())

    def leaves(self) -> List[LeafState]:
        """Leaf nodes in declaration order."""
        return [node for node in self._nodes.values() if isinstance(node, LeafState)]

    def groups(self) -> List[GroupState]:
        return [node for node in self._nodes.values() if isinstance(node, GroupState)]

    def get_root_states(self) -> List[StateBase]:
        """Get all states that have no parent."""
        return [node for node in self._nodes.values() if node.parent is None]

    def get_ancestors(self, name: str) -> List[StateBase]:
        """Get all ancestor states in order from immediate parent to root."""
        return self[name].ancestors()

    def get_children(self, name: str) -> List[StateBase]:
        """Get immediate child states of a state."""
        return list(self[name].children)

    def is_leaf(self, name: Optional[str]) -> bool:
        node = self.get(name)
        return node is not None and node.is_leaf
