# stateful/core/registry.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from stateful.core.attribute import AttributeSpec
from stateful.core.errors import RegistryFrozenError, UnknownAttribute, UnknownStateReference
from stateful.core.hooks import HookManager, TransitionHook, _HookInvoker, check_hook_name
from stateful.interfaces.types import (
    AfterChangeCallback,
    AttributeName,
    HookName,
    StateName,
    TransitionCallback,
)
from stateful.runtime.executor import StateMachine

logger = logging.getLogger(__name__)

_REGISTRY_ATTR = "_stateful_registry"


class AttributeRegistry:
    """
    Per-host-type store of stateful attributes and of the hooks shared by all of
    them. A registry lives on the type it describes; lookups walk the type's MRO
    so that a subtype sees its ancestors' attributes, with its own definitions
    shadowing theirs, and their observers ahead of its own.

    Registration happens while the type is defined. The first time a state
    machine is bound for an instance of the type, the registries along its MRO
    are frozen.
    """

    def __init__(self, owner: type) -> None:
        self._owner = owner
        self._attributes: Dict[AttributeName, AttributeSpec] = {}
        self._hook_manager = HookManager()
        self._frozen = False
        self._resolved: Optional[Tuple[Dict[AttributeName, AttributeSpec], Tuple[AfterChangeCallback, ...]]] = None

    @classmethod
    def for_type(cls, owner: type) -> AttributeRegistry:
        """
        Return the registry stored on `owner` itself, creating it if needed.
        Registries of base classes are never returned for a subtype.
        """
        registry = owner.__dict__.get(_REGISTRY_ATTR)
        if registry is None:
            registry = cls(owner)
            setattr(owner, _REGISTRY_ATTR, registry)
        return registry

    def __repr__(self) -> str:
        return f"AttributeRegistry({self._owner.__name__}, attributes={list(self._attributes)})"

    @property
    def owner(self) -> type:
        return self._owner

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        name: AttributeName,
        default: Any,
        events: Optional[Iterable[Any]] = None,
        states: Optional[Mapping] = None,
        **options: Any,
    ) -> AttributeSpec:
        """
        Compile and store the definition of one stateful attribute.

        :param name: Attribute the state value is stored under.
        :param default: Leaf new instances start in.
        :param events: Opaque event labels.
        :param states: The (possibly nested) state declaration.
        :param options: ``prefix``, ``allow_nil`` and ``message``.
        :raises DefinitionError: If the declaration is invalid.
        :raises RegistryFrozenError: If the registry is frozen.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{name}' on {self._owner.__name__} after its registry has been frozen."
            )
        spec = AttributeSpec.build(name, default, events, states, **options)
        if name in self._attributes:
            logger.debug("Redefining stateful attribute '%s' on %s", name, self._owner.__name__)
        self._attributes[name] = spec
        return spec

    def register_after_change(self, callback: AfterChangeCallback) -> AfterChangeCallback:
        """
        Append an observer called with the instance after every successful
        transition of any attribute of this type. Returns the callback so this
        can be used as a decorator.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register observers on {self._owner.__name__} after its registry has been frozen."
            )
        self._hook_manager.register_hook(callback)
        return callback

    def register_transition_hook(
        self,
        attribute: AttributeName,
        hook: HookName,
        callback: TransitionCallback,
        from_state: Optional[StateName] = None,
        to_state: Optional[StateName] = None,
    ) -> TransitionCallback:
        """
        Append a callback that `process_transition` calls for `attribute` on the
        lifecycle `hook`, when the old value is in `from_state` and the new value
        in `to_state` (either filter may be a group, or None for any value).

        :raises UnknownAttribute: If `attribute` is not registered for this type.
        :raises UnknownStateReference: If a filter names no state of the attribute.
        :raises InvalidHookName: If `hook` is not a known lifecycle hook.
        """
        check_hook_name(hook)
        spec = self.get(attribute)
        for name in (from_state, to_state):
            if name is not None and name not in spec.graph:
                raise UnknownStateReference(name)
        self._hook_manager.register_transition_hook(
            TransitionHook(attribute, hook, callback, from_state=from_state, to_state=to_state)
        )
        return callback

    def freeze(self) -> None:
        """Freeze this registry and those of every base class."""
        for klass in self._owner.__mro__:
            registry = klass.__dict__.get(_REGISTRY_ATTR)
            if registry is not None and not registry._frozen:
                registry._frozen = True
                registry._hook_manager.freeze()
                logger.debug("Froze stateful registry of %s", klass.__name__)

    def _registries(self) -> Iterator[AttributeRegistry]:
        """Registries along the MRO, most basic type first."""
        for klass in reversed(self._owner.__mro__):
            registry = klass.__dict__.get(_REGISTRY_ATTR)
            if registry is not None:
                yield registry

    def _resolve(self) -> Tuple[Dict[AttributeName, AttributeSpec], Tuple[AfterChangeCallback, ...]]:
        if self._resolved is not None:
            return self._resolved
        attributes: Dict[AttributeName, AttributeSpec] = {}
        observers: List[AfterChangeCallback] = []
        for registry in self._registries():
            attributes.update(registry._attributes)
            observers.extend(registry._hook_manager.hooks)
        resolved = (attributes, tuple(observers))
        if self._frozen:
            self._resolved = resolved
        return resolved

    @property
    def attributes(self) -> Dict[AttributeName, AttributeSpec]:
        """Effective attributes of the owner type, inherited ones included."""
        return dict(self._resolve()[0])

    @property
    def observers(self) -> Tuple[AfterChangeCallback, ...]:
        """Effective after-change observers, base types first."""
        return self._resolve()[1]

    @property
    def transition_hooks(self) -> Tuple[TransitionHook, ...]:
        hooks: List[TransitionHook] = []
        for registry in self._registries():
            hooks.extend(registry._hook_manager.transition_hooks)
        return tuple(hooks)

    def get(self, name: AttributeName) -> AttributeSpec:
        """
        :raises UnknownAttribute: If no attribute called `name` is registered.
        """
        try:
            return self._resolve()[0][name]
        except KeyError:
            raise UnknownAttribute(name, self._owner) from None

    def __contains__(self, name: object) -> bool:
        return name in self._resolve()[0]

    def initialize(self, instance: Any) -> None:
        """Store every attribute's default on a freshly constructed instance."""
        values = vars(instance)
        for name, spec in self._resolve()[0].items():
            values.setdefault(name, spec.default)

    def machine(self, instance: Any, name: AttributeName) -> StateMachine:
        """
        Bind the transition executor for one attribute of `instance`. Freezes
        the registry on first use.
        """
        if not self._frozen:
            self.freeze()
        return StateMachine(instance, self.get(name), self.observers)

    def process_transition(
        self,
        instance: Any,
        attribute: AttributeName,
        hook: HookName,
        old_value: Optional[StateName],
        new_value: Optional[StateName],
    ) -> None:
        """
        Called by a persistence collaborator on each storage lifecycle hook with
        the old and new values it tracked. Runs the matching transition hooks.
        An unchanged value runs nothing.
        """
        check_hook_name(hook)
        spec = self.get(attribute)
        if old_value == new_value:
            return
        called = _HookInvoker.invoke_transition_hooks(
            self.transition_hooks,
            instance,
            attribute,
            hook,
            old_value,
            new_value,
            spec.info(old_value),
            spec.info(new_value),
        )
        logger.debug(
            "Processed %s transition of '%s' from '%s' to '%s' (%d hooks)", hook, attribute, old_value, new_value, called
        )
