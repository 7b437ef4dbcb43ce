# stateful/core/declarations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Class-body declaration helpers: the StateAttribute descriptor, the Stateful
mixin and the decorators that register hooks from method definitions.

Example:
    class Kata(Stateful):
        state = StateAttribute(
            default="draft",
            states={"draft": "beta", "beta": {"needs_feedback": "draft"}},
        )

        @after_state_change
        def _count_change(self):
            self.state_changes += 1

    kata = Kata()
    Kata.state.change(kata, "needs_feedback")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from stateful.core.attribute import AttributeSpec
from stateful.core.base import StateBase
from stateful.core.errors import DefinitionError
from stateful.core.registry import AttributeRegistry
from stateful.interfaces.types import AttributeName, HookName, SideEffect, StateName
from stateful.runtime.executor import StateMachine

_AFTER_CHANGE_MARK = "__stateful_after_change__"
_TRANSITION_MARK = "__stateful_transition_hooks__"


class StateAttribute:
    """
    Declares a stateful attribute in a class body. The attribute name is taken
    from the class attribute the descriptor is assigned to, and the definition
    is compiled right away, while the class is being created.

    On an instance the descriptor reads and writes the raw stored value. On the
    class it is the handle for the attribute's operations, each taking the
    instance as first argument.
    """

    def __init__(
        self,
        default: Any,
        events: Optional[Iterable[Any]] = None,
        states: Optional[Mapping] = None,
        **options: Any,
    ) -> None:
        self._default = default
        self._events = events
        self._states = states
        self._options = options
        self._name: Optional[AttributeName] = None
        self._spec: Optional[AttributeSpec] = None

    def __set_name__(self, owner: type, name: str) -> None:
        if self._spec is not None:
            raise DefinitionError(f"StateAttribute '{self._name}' cannot also be declared as '{name}'.")
        self._name = name
        self._spec = AttributeRegistry.for_type(owner).register(
            name, self._default, self._events, self._states, **self._options
        )

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        name = self.name
        try:
            return instance.__dict__[name]
        except KeyError:
            return AttributeRegistry.for_type(type(instance)).get(name).default

    def __set__(self, instance: Any, value: Optional[StateName]) -> None:
        instance.__dict__[self.name] = value

    def __repr__(self) -> str:
        return f"StateAttribute({self._name!r})"

    @property
    def name(self) -> AttributeName:
        if self._name is None:
            raise DefinitionError("StateAttribute has not been assigned to a class attribute.")
        return self._name

    @property
    def spec(self) -> AttributeSpec:
        """The definition compiled for the class this descriptor was declared on."""
        if self._spec is None:
            raise DefinitionError("StateAttribute has not been assigned to a class attribute.")
        return self._spec

    def machine(self, instance: Any) -> StateMachine:
        """The transition executor for this attribute of `instance`."""
        return AttributeRegistry.for_type(type(instance)).machine(instance, self.name)

    def info(self, instance: Any) -> Optional[StateBase]:
        return self.machine(instance).info

    def values(self) -> Tuple[StateName, ...]:
        return self.spec.values

    def infos(self) -> Dict[StateName, StateBase]:
        return self.spec.infos()

    def scopes(self) -> Dict[str, Tuple[StateName, ...]]:
        return self.spec.scopes()

    def is_valid(self, instance: Any) -> bool:
        return self.machine(instance).is_valid()

    def in_state(self, instance: Any, name: StateName) -> bool:
        return self.machine(instance).in_state(name)

    def can_transition_to(self, instance: Any, name: StateName) -> bool:
        return self.machine(instance).can_transition_to(name)

    def change(self, instance: Any, target: StateName, effect: Optional[SideEffect] = None) -> bool:
        return self.machine(instance).change(target, effect)

    def change_strict(self, instance: Any, target: StateName, effect: Optional[SideEffect] = None) -> bool:
        return self.machine(instance).change_strict(target, effect)


class _MethodHook:
    """
    Calls the method `name` as resolved on the instance at dispatch time, so a
    subclass override runs in place of the decorated base method.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __call__(self, instance: Any, *args: Any) -> Any:
        return getattr(instance, self.name)(*args)

    def __repr__(self) -> str:
        return f"_MethodHook({self.name!r})"


def after_state_change(fn: Callable[[Any], None]) -> Callable[[Any], None]:
    """
    Mark a method of a Stateful class as an after-change observer. Marked
    methods are registered in definition order when the class is created and
    looked up by name on each call, so overriding one in a subclass replaces it.
    """
    setattr(fn, _AFTER_CHANGE_MARK, True)
    return fn


def on_transition(
    attribute: AttributeName,
    hook: HookName,
    from_state: Optional[StateName] = None,
    to_state: Optional[StateName] = None,
) -> Callable[[Callable], Callable]:
    """
    Mark a method of a Stateful class as a transition hook, called as
    ``method(self, old_value, new_value)`` when a persistence collaborator
    processes a matching transition. May be stacked.
    """

    def decorator(fn: Callable) -> Callable:
        marks: List[Tuple[Any, ...]] = list(getattr(fn, _TRANSITION_MARK, ()))
        marks.append((attribute, hook, from_state, to_state))
        setattr(fn, _TRANSITION_MARK, marks)
        return fn

    return decorator


class Stateful:
    """
    Mixin for host types carrying stateful attributes. Stores every attribute's
    default on new instances, registers decorated hook methods, and exposes the
    registry operations on the type and its instances.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        registry = AttributeRegistry.for_type(cls)
        for name, value in list(cls.__dict__.items()):
            inherited = [klass.__dict__[name] for klass in cls.__mro__[1:] if name in klass.__dict__]
            # an override of a marked base method replaces its body, it is not registered twice
            if getattr(value, _AFTER_CHANGE_MARK, False) is True and not any(
                getattr(base, _AFTER_CHANGE_MARK, False) is True for base in inherited
            ):
                registry.register_after_change(_MethodHook(name))
            inherited_marks = {mark for base in inherited for mark in getattr(base, _TRANSITION_MARK, ())}
            # stacked marks are recorded bottom-up; register them top-down
            for mark in reversed(getattr(value, _TRANSITION_MARK, ())):
                if mark in inherited_marks:
                    continue
                attribute, hook, from_state, to_state = mark
                registry.register_transition_hook(
                    attribute, hook, _MethodHook(name), from_state=from_state, to_state=to_state
                )

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        instance = super().__new__(cls)
        AttributeRegistry.for_type(cls).initialize(instance)
        return instance

    @classmethod
    def stateful_registry(cls) -> AttributeRegistry:
        return AttributeRegistry.for_type(cls)

    @classmethod
    def register_after_change(cls, callback: Callable[[Any], None]) -> Callable[[Any], None]:
        return AttributeRegistry.for_type(cls).register_after_change(callback)

    @classmethod
    def stateful_spec(cls, name: AttributeName) -> AttributeSpec:
        return AttributeRegistry.for_type(cls).get(name)

    def state_machine(self, name: AttributeName = "state") -> StateMachine:
        return AttributeRegistry.for_type(type(self)).machine(self, name)

    def process_transition(
        self,
        attribute: AttributeName,
        hook: HookName,
        old_value: Optional[StateName],
        new_value: Optional[StateName],
    ) -> None:
        """Entry point for persistence collaborators; see AttributeRegistry.process_transition."""
        AttributeRegistry.for_type(type(self)).process_transition(self, attribute, hook, old_value, new_value)
