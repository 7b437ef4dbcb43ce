"""
Runtime package for transition execution.

Architecture:
- Binds a compiled attribute to one host instance
- Validates, performs and reports transitions synchronously
"""

from .executor import StateMachine

__all__ = ["StateMachine"]
