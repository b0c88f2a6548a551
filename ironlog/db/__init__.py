"""Database package: engine, session, base."""

from ironlog.db.session import async_session_maker, get_db

__all__ = ["async_session_maker", "get_db"]
