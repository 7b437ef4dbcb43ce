"""
Core package providing state tree compilation and attribute registration.

Architecture:
- Compiles nested declarations into a flat, frozen StateGraph
- Models leaves and groups as distinct node types
- Stores compiled attributes and hooks per host type

Design Patterns:
- Composite Pattern for the state hierarchy
- Observer Pattern for after-change notifications
- Descriptor Protocol for class-body declarations
"""

# Import order matters to avoid circular dependencies
from .errors import StatefulError
from .states import GroupState, LeafState
from .graph import StateGraph
from .compiler import StateTreeCompiler, compile_states
from .attribute import AttributeSpec
from .registry import AttributeRegistry
from .declarations import StateAttribute, Stateful, after_state_change, on_transition

__all__ = [
    "StatefulError",
    "LeafState",
    "GroupState",
    "StateGraph",
    "StateTreeCompiler",
    "compile_states",
    "AttributeSpec",
    "AttributeRegistry",
    "StateAttribute",
    "Stateful",
    "after_state_change",
    "on_transition",
]
