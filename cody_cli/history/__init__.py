"""Last-session storage for cody_cli."""
from .session_store import SessionRecord, SessionStore, get_session_store

__all__ = ['SessionRecord', 'SessionStore', 'get_session_store']
