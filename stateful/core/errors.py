# stateful/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Optional


class StatefulError(Exception):
    """
    Base exception class for errors within the stateful attribute library.
    """


class StateNotFoundError(StatefulError):
    """
    Raised when a requested state does not exist in an attribute's state tree.
    """


class TransitionError(StatefulError):
    """
    Raised when an attempted state transition is invalid or cannot be completed.
    """


class ValidationError(StatefulError):
    """
    Raised when validation detects configuration or runtime constraints violations.
    """


class DefinitionError(ValidationError):
    """
    Raised when a state tree declaration is malformed. Definition errors abort
    the definition of the host type.
    """


class DuplicateStateName(DefinitionError):
    """
    Raised when two nodes of the same state tree (leaves or groups) share a name.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"State '{name}' is declared more than once.")
        self.name = name


class InvalidDefaultState(DefinitionError):
    """
    Raised when the default state is missing, unknown or names a group.
    """

    def __init__(self, name: Optional[str], reason: str = "is not a leaf state") -> None:
        super().__init__(f"Default state '{name}' {reason}.")
        self.name = name


class UnknownStateReference(StateNotFoundError, DefinitionError):
    """
    Raised when a name cannot be resolved in the state tree, either as a
    declared transition target or as the target of a runtime transition.
    """

    def __init__(self, name: str, source: Optional[str] = None) -> None:
        if source is None:
            message = f"Unknown state '{name}'."
        else:
            message = f"State '{source}' references unknown state '{name}'."
        super().__init__(message)
        self.name = name
        self.source = source


class NotALeafState(TransitionError):
    """
    Raised when a group state is used where only a leaf state is allowed.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"State '{name}' is a group and cannot be assigned.")
        self.name = name


class IllegalTransition(TransitionError):
    """
    Raised when the target leaf is not reachable from the current state.
    """

    def __init__(self, current: Optional[str], target: str, attribute: Optional[str] = None) -> None:
        where = f" on '{attribute}'" if attribute else ""
        super().__init__(f"Cannot transition{where} from '{current}' to '{target}'.")
        self.current = current
        self.target = target
        self.attribute = attribute


class UnknownAttribute(StateNotFoundError, KeyError):
    """
    Raised when no stateful attribute with the given name is registered.
    """

    def __init__(self, attribute: str, owner: Optional[type] = None) -> None:
        where = f" on {owner.__name__}" if owner is not None else ""
        super().__init__(f"No stateful attribute '{attribute}' registered{where}.")
        self.attribute = attribute

    def __str__(self) -> str:
        return self.args[0]


class RegistryFrozenError(ValidationError):
    """
    Raised when registering attributes or observers after a registry has been frozen.
    """


class InvalidHookName(ValidationError):
    """
    Raised when a transition hook is registered or dispatched for an unknown lifecycle hook.
    """
