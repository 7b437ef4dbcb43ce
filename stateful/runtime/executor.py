# stateful/runtime/executor.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from stateful.core.attribute import AttributeSpec
from stateful.core.base import StateBase
from stateful.core.errors import (
    IllegalTransition,
    NotALeafState,
    StateNotFoundError,
    TransitionError,
    UnknownStateReference,
)
from stateful.core.hooks import _HookInvoker
from stateful.interfaces.types import AfterChangeCallback, SideEffect, StateName

logger = logging.getLogger(__name__)

_Rejection = Union[StateNotFoundError, TransitionError]


class StateMachine:
    """
    Validates and performs transitions of one stateful attribute on one host
    instance. The compiled spec is shared and read-only; the only thing this
    object mutates is the instance's stored value.

    Not synchronized: callers driving the same instance attribute from several
    threads must lock around it themselves.
    """

    def __init__(
        self,
        instance: Any,
        spec: AttributeSpec,
        observers: Sequence[AfterChangeCallback] = (),
    ) -> None:
        """
        :param instance: The host object holding the current value.
        :param spec: The attribute's compiled definition.
        :param observers: After-change observers of the host type, in order.
        """
        self._instance = instance
        self._spec = spec
        self._observers: Tuple[AfterChangeCallback, ...] = tuple(observers)

    def __repr__(self) -> str:
        return f"StateMachine({self._spec.name!r}, current={self.current!r})"

    @property
    def instance(self) -> Any:
        return self._instance

    @property
    def spec(self) -> AttributeSpec:
        return self._spec

    @property
    def current(self) -> Optional[StateName]:
        """The raw stored value, which may have been set out-of-band."""
        return self._spec.read(self._instance)

    @property
    def info(self) -> Optional[StateBase]:
        """The node of the current value, or None when it names no state."""
        return self._spec.info(self.current)

    @property
    def values(self) -> Tuple[StateName, ...]:
        return self._spec.values

    def is_valid(self) -> bool:
        """True if the stored value names a leaf of this attribute."""
        return self._spec.is_valid_state(self.current)

    def in_state(self, name: Any) -> bool:
        """True if the current state is `name` or lies inside group `name`."""
        info = self.info
        return info is not None and info.is_a(_normalize(name))

    def is_terminal(self) -> bool:
        info = self.info
        return info is not None and info.is_leaf and info.is_terminal

    def available_transitions(self) -> List[StateName]:
        """Leaf names reachable in one step; empty when the current value is invalid."""
        info = self.info
        if info is None or not info.is_leaf:
            return []
        return info.to_transitions()

    def can_transition_to(self, name: Any) -> bool:
        """
        Exact membership of `name` in the current state's transitions. An
        invalid current value can reach nothing.
        """
        info = self.info
        if info is None or not info.is_leaf:
            return False
        return info.can_transition_to(_normalize(name))

    def change(self, target: Any, effect: Optional[SideEffect] = None) -> bool:
        """
        Move to `target` if it is reachable.

        :param target: Leaf name to move to.
        :param effect: Called after the value is stored and before observers.
        :return: True if the state changed. False for the current state and for
            unknown, group or unreachable targets.
        """
        return self._change(target, effect, strict=False)

    def change_strict(self, target: Any, effect: Optional[SideEffect] = None) -> bool:
        """
        Move to `target`, raising when it cannot be reached.

        :return: True if the state changed, False if `target` is already current.
        :raises UnknownStateReference: If `target` names no state.
        :raises NotALeafState: If `target` is a group.
        :raises IllegalTransition: If `target` is not reachable from the current state.
        """
        return self._change(target, effect, strict=True)

    def _change(self, target: Any, effect: Optional[SideEffect], strict: bool) -> bool:
        target = _normalize(target)
        current = self.current
        if target == current:
            return False

        rejection = self._rejection(current, target)
        if rejection is not None:
            if strict:
                raise rejection
            logger.debug("Rejected transition of '%s': %s", self._spec.name, rejection)
            return False

        self._spec.write(self._instance, target)
        logger.debug("Transitioned '%s' from '%s' to '%s'", self._spec.name, current, target)
        if effect is not None:
            effect()
        _HookInvoker(self._observers).invoke_after_change(self._instance)
        return True

    def _rejection(self, current: Optional[StateName], target: Any) -> Optional[_Rejection]:
        node = self._spec.info(target)
        if node is None:
            return UnknownStateReference(str(target))
        if not node.is_leaf:
            return NotALeafState(node.name)
        source = self._spec.info(current)
        if source is None or not source.is_leaf or not source.can_transition_to(node.name):
            return IllegalTransition(current, node.name, attribute=self._spec.name)
        return None


def _normalize(name: Any) -> Any:
    if isinstance(name, Enum):
        return name.value
    return name
