"""
Interfaces package: type aliases and the protocols collaborators rely on.
"""

from .protocols import StateInfo, TransitionProcessor

__all__ = ["StateInfo", "TransitionProcessor"]
