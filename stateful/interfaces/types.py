# stateful/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Mapping, Optional, Sequence, Union

StateName = str
AttributeName = str
HookName = str

# Value of one entry of a state declaration: terminal, one target, several
# targets, or a nested group.
StateDeclaration = Union[None, str, Sequence[str], Mapping[str, Any]]

# Callback Types
SideEffect = Callable[[], None]
AfterChangeCallback = Callable[[Any], None]
TransitionCallback = Callable[[Any, Optional[StateName], Optional[StateName]], None]

LIFECYCLE_HOOKS = ("validate", "before_save", "after_save", "before_validation", "after_validation")
