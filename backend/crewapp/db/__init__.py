from crewapp.db.base import Base
from crewapp.db.session import get_db, engine, SessionLocal
from crewapp.db.tables import ALL_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
