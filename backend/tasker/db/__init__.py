"""Database package."""

from tasker.db.base import Base, BaseModel
from tasker.db.session import DBSession, get_db_session

__all__ = ["Base", "BaseModel", "DBSession", "get_db_session"]
