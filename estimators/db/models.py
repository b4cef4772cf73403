"""
SQLAlchemy ORM models for saved estimator scenarios.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    JSON,
)
from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


class ScenarioSnapshot(Base):
    """A named input/output snapshot saved for later comparison."""

    __tablename__ = "scenario_snapshots"

    id = Column(String, primary_key=True, default=generate_uuid)
    calculator = Column(String(100), nullable=False, index=True)
    label = Column(String(255), nullable=False)

    # Inputs as submitted and the headline outputs computed from them
    inputs = Column(JSON, default=dict, nullable=False)
    computed_summary = Column(JSON, default=dict, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    # Insertion counter; breaks ties between snapshots saved in the same instant
    sequence = Column(Integer, nullable=False, index=True)
