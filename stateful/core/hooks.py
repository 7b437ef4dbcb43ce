# stateful/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from stateful.core.base import StateBase
from stateful.core.errors import InvalidHookName, RegistryFrozenError
from stateful.interfaces.types import (
    LIFECYCLE_HOOKS,
    AfterChangeCallback,
    AttributeName,
    HookName,
    StateName,
    TransitionCallback,
)


@dataclass(frozen=True)
class TransitionHook:
    """
    A callback bound to one attribute and one storage lifecycle hook, optionally
    filtered on the state left and the state entered. Filters match groups too.
    """

    attribute: AttributeName
    hook: HookName
    callback: TransitionCallback
    from_state: Optional[StateName] = None
    to_state: Optional[StateName] = None

    def matches(
        self,
        attribute: AttributeName,
        hook: HookName,
        old_info: Optional[StateBase],
        new_info: Optional[StateBase],
    ) -> bool:
        if attribute != self.attribute or hook != self.hook:
            return False
        if self.from_state is not None and (old_info is None or not old_info.is_a(self.from_state)):
            return False
        if self.to_state is not None and (new_info is None or not new_info.is_a(self.to_state)):
            return False
        return True


def check_hook_name(hook: HookName) -> None:
    if hook not in LIFECYCLE_HOOKS:
        raise InvalidHookName(f"Unknown lifecycle hook '{hook}', expected one of {', '.join(LIFECYCLE_HOOKS)}.")


class HookManager:
    """
    Owns the hooks registered on one host type: after-change observers, which
    fire on every successful transition of any attribute, and transition hooks,
    which a persistence collaborator triggers through its lifecycle. Both lists
    are append-only until the manager is frozen.
    """

    def __init__(self, hooks: Optional[Iterable[AfterChangeCallback]] = None) -> None:
        """
        Initialize with an optional list of after-change observers.
        """
        self._hooks: List[AfterChangeCallback] = list(hooks or [])
        self._transition_hooks: List[TransitionHook] = []
        self._frozen = False

    @property
    def hooks(self) -> Tuple[AfterChangeCallback, ...]:
        return tuple(self._hooks)

    @property
    def transition_hooks(self) -> Tuple[TransitionHook, ...]:
        return tuple(self._transition_hooks)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register_hook(self, hook: AfterChangeCallback) -> None:
        """
        Append an after-change observer.

        :param hook: Callable receiving the host instance.
        :raises RegistryFrozenError: If the manager is frozen.
        """
        self._check_open()
        if not callable(hook):
            raise TypeError("After-change observers must be callable.")
        self._hooks.append(hook)

    def register_transition_hook(self, transition_hook: TransitionHook) -> None:
        """
        Append a transition hook.

        :raises InvalidHookName: If the lifecycle hook is unknown.
        :raises RegistryFrozenError: If the manager is frozen.
        """
        self._check_open()
        check_hook_name(transition_hook.hook)
        if not callable(transition_hook.callback):
            raise TypeError("Transition hook callbacks must be callable.")
        self._transition_hooks.append(transition_hook)

    def _check_open(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Hooks cannot be registered after the registry has been frozen.")


class _HookInvoker:
    """
    Internal helper that iterates through a list of hooks in registration order.
    Exceptions raised by a hook propagate to the caller and stop the iteration.
    """

    def __init__(self, hooks: Iterable[AfterChangeCallback]) -> None:
        self._hooks = tuple(hooks)

    def invoke_after_change(self, instance: Any) -> None:
        """
        Call each observer with the host instance.
        """
        for hook in self._hooks:
            hook(instance)

    @staticmethod
    def invoke_transition_hooks(
        transition_hooks: Iterable[TransitionHook],
        instance: Any,
        attribute: AttributeName,
        hook: HookName,
        old_value: Optional[StateName],
        new_value: Optional[StateName],
        old_info: Optional[StateBase],
        new_info: Optional[StateBase],
    ) -> int:
        """
        Call every matching transition hook with the instance and the raw values.

        :return: The number of hooks called.
        """
        called = 0
        for transition_hook in transition_hooks:
            if transition_hook.matches(attribute, hook, old_info, new_info):
                transition_hook.callback(instance, old_value, new_value)
                called += 1
        return called
