"""Database module - re-exports from the core package."""

from casebridge.database import async_session, engine, get_db, init_db, transaction
from casebridge.models import Base

from casebridge_api.config import settings

engine.echo = settings.DATABASE_ECHO

__all__ = ["async_session", "engine", "Base", "init_db", "get_db", "transaction"]
