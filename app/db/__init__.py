"""
Database module - relational store connection and table definitions.
"""
from app.db.postgres import get_db_session, execute_raw_sql, test_database_connection
from app.db.tables import metadata, init_db

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "test_database_connection",
    "metadata",
    "init_db"
]
