"""Async SQLAlchemy access layer: models, engine, sessions, repositories.

- **base**: Declarative base, naming convention and shared columns
- **models**: ``User`` and ``Post`` tables
- **session**: Engine, session lifecycle and schema creation
- **repository**: Generic repository with store error translation
- **dependencies**: FastAPI dependency providing a request session
"""

from src.infrastructure.database.base import Base, BaseModel
from src.infrastructure.database.dependencies import DatabaseSession, get_db
from src.infrastructure.database.models import Post, User
from src.infrastructure.database.repository import BaseRepository
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    create_schema,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "Post",
    "User",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "create_schema",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
]
