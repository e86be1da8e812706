from .sqlite import DEFAULT_FILENAME, SessionStore, session_table

__all__ = ["DEFAULT_FILENAME", "SessionStore", "session_table"]
