"""
Persistence layer for stored doubts.
No business logic; only read/write interfaces.
"""
from .db import get_connection, get_db_path, init_db, set_db_path
from .repositories import DoubtRepository

__all__ = [
    "get_connection",
    "get_db_path",
    "init_db",
    "set_db_path",
    "DoubtRepository",
]
