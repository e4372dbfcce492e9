"""Session-oriented HTTP transport."""

from .main import create_app
from .sessions import Session, SessionManager

__all__ = ["Session", "SessionManager", "create_app"]
