"""
Database package public API.

This makes `from app.db import get_db, Base, engine, etc.` work
and keeps imports consistent.
"""

from .session import (
    engine,
    AsyncSessionLocal,
    Base,
    begin_write,
    configure_sqlite,
    get_db,
    init_db,
    close_db,
)

__all__ = [
    "engine",
    "AsyncSessionLocal",
    "Base",
    "begin_write",
    "configure_sqlite",
    "get_db",
    "init_db",
    "close_db",
]
