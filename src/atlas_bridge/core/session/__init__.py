"""
Session Manager do Atlas Bridge.

Componentes:
    - context     → SessionContext (eventos estruturados e warnings)
    - environment → Environment, EnvironmentRegistry
    - manager     → SessionManager, Session, ActivationResult
"""

from .context import SessionContext
from .environment import Environment, EnvironmentRegistry, EnvironmentState
from .manager import ActivationResult, Session, SessionManager, require_session

__all__ = [
    "SessionContext",
    "Environment",
    "EnvironmentRegistry",
    "EnvironmentState",
    "ActivationResult",
    "Session",
    "SessionManager",
    "require_session",
]
