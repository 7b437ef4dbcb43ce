"""stateful: hierarchical state machines for attributes of Python objects

This package compiles nested state declarations into immutable state graphs and
drives per-instance transitions over them.

Responsibilities:
    - State tree compilation and definition-time validation
    - Group flattening into concrete reachable leaf states
    - Strict and lenient transition execution
    - After-change observers and storage lifecycle transition hooks
    - Several independent state machines per host type

Interactions:
    - Client code through the declaration API (StateAttribute, Stateful)
    - Persistence collaborators through process_transition, values and scopes
    - Logging system for diagnostics

Cross-cutting Concerns:
    Thread Safety:
        - Compiled graphs are read-only and safe to share across threads
        - One instance attribute driven from several threads needs external locking

    Error Handling:
        - Structured error hierarchy rooted at StatefulError
        - Definition errors abort the host type definition
        - Side effect and observer errors propagate unchanged

    Logging:
        - Module loggers under the ``stateful`` namespace
        - Compilation and transitions reported at DEBUG level
"""

from stateful.core.attribute import AttributeSpec
from stateful.core.compiler import StateTreeCompiler, compile_states
from stateful.core.declarations import StateAttribute, Stateful, after_state_change, on_transition
from stateful.core.errors import (
    DefinitionError,
    DuplicateStateName,
    IllegalTransition,
    InvalidDefaultState,
    InvalidHookName,
    NotALeafState,
    RegistryFrozenError,
    StatefulError,
    StateNotFoundError,
    TransitionError,
    UnknownAttribute,
    UnknownStateReference,
    ValidationError,
)
from stateful.core.graph import StateGraph
from stateful.core.registry import AttributeRegistry
from stateful.core.states import GroupState, LeafState
from stateful.runtime.executor import StateMachine

__version__ = "0.1.0"

__all__ = [
    # Declaration
    "Stateful",
    "StateAttribute",
    "after_state_change",
    "on_transition",
    "AttributeRegistry",
    "AttributeSpec",
    # Compilation
    "StateTreeCompiler",
    "compile_states",
    "StateGraph",
    "LeafState",
    "GroupState",
    # Execution
    "StateMachine",
    # Errors
    "StatefulError",
    "StateNotFoundError",
    "TransitionError",
    "ValidationError",
    "DefinitionError",
    "DuplicateStateName",
    "InvalidDefaultState",
    "UnknownStateReference",
    "NotALeafState",
    "IllegalTransition",
    "UnknownAttribute",
    "RegistryFrozenError",
    "InvalidHookName",
]
