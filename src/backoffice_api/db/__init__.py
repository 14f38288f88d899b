"""Database module for the back-office API."""

from backoffice_api.db.base import Base
from backoffice_api.db.engine import engine
from backoffice_api.db.session import SessionLocal, get_db

__all__ = ["Base", "engine", "SessionLocal", "get_db"]
