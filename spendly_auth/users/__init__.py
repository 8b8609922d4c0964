"""
User Records
============
User model, store interface and its in-memory and SQL implementations.
"""

from .models import UserRecord
from .store import UserStore, InMemoryUserStore
from .sql_store import SqlUserStore

__all__ = [
    "UserRecord",
    "UserStore",
    "InMemoryUserStore",
    "SqlUserStore",
]
