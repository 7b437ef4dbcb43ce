# stateful/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import List, Optional, Protocol, runtime_checkable

from stateful.interfaces.types import AttributeName, HookName, StateName


@runtime_checkable
class StateInfo(Protocol):
    """
    Read-only view of a compiled state, as handed to collaborators.

    Runtime Invariants:
    - The view never changes after the owning attribute is compiled.
    - `collect_child_states()` of a leaf is exactly `[name]`.
    """

    @property
    def name(self) -> StateName:
        ...

    def is_a(self, name: StateName) -> bool:
        """True if this state is `name` or nested in a group called `name`."""
        ...

    def collect_child_states(self) -> List[StateName]:
        """Leaf names this state stands for, e.g. to build a query scope."""
        ...


@runtime_checkable
class TransitionProcessor(Protocol):
    """
    Entry point a persistence collaborator calls on a host instance for each
    storage lifecycle hook.

    The collaborator tracks the old and new stored values itself and passes
    them in; the processor only dispatches to registered transition hooks.

    Error Handling:
    - Unknown hook names raise InvalidHookName.
    - Exceptions from transition hooks propagate to the collaborator.
    """

    def process_transition(
        self,
        attribute: AttributeName,
        hook: HookName,
        old_value: Optional[StateName],
        new_value: Optional[StateName],
    ) -> None:
        ...
