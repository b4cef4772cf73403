"""
Database configuration and models.
"""

from estimators.db.database import engine, SessionLocal, get_db, init_db
from estimators.db.models import Base, ScenarioSnapshot

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "init_db",
    "Base",
    "ScenarioSnapshot",
]
