"""
Saved scenario log.

Keeps the most recent snapshots per calculator, newest first; saving past
the limit evicts the oldest. Listings are capped at the same limit, across
calculators too.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from estimators.config import get_settings
from estimators.db.models import ScenarioSnapshot
from estimators.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_COMPARED = 3


class ScenarioStore:
    """Bounded, recency-ordered store of scenario snapshots."""

    def __init__(self, db: Session, limit: Optional[int] = None):
        self.db = db
        self.limit = limit if limit is not None else get_settings().scenario_store_limit
        if self.limit < 1:
            raise ValidationError("limit", "must be at least 1")

    def save(
        self,
        calculator: str,
        label: str,
        inputs: Dict[str, Any],
        computed_summary: Dict[str, Any],
    ) -> str:
        """
        Store a snapshot and evict anything beyond the limit.

        Returns:
            The new snapshot id
        """
        if not calculator.strip():
            raise ValidationError("calculator", "must not be blank")
        label = label.strip() or f"Scenario {datetime.utcnow():%Y-%m-%d %H:%M}"

        last = self.db.query(func.max(ScenarioSnapshot.sequence)).scalar()
        snapshot = ScenarioSnapshot(
            calculator=calculator,
            label=label,
            inputs=inputs,
            computed_summary=computed_summary,
            sequence=(last or 0) + 1,
        )
        self.db.add(snapshot)
        self.db.flush()

        evicted = self._evict(calculator)
        self.db.commit()
        if evicted:
            logger.info(f"Evicted {evicted} old scenario(s) for {calculator}")
        return snapshot.id

    def _evict(self, calculator: str) -> int:
        stale = (
            self.db.query(ScenarioSnapshot)
            .filter(ScenarioSnapshot.calculator == calculator)
            .order_by(ScenarioSnapshot.sequence.desc())
            .offset(self.limit)
            .all()
        )
        for snapshot in stale:
            self.db.delete(snapshot)
        return len(stale)

    def list(self, calculator: Optional[str] = None) -> List[ScenarioSnapshot]:
        """The most recent snapshots, newest first, never more than ``limit``."""
        query = self.db.query(ScenarioSnapshot)
        if calculator:
            query = query.filter(ScenarioSnapshot.calculator == calculator)
        return query.order_by(ScenarioSnapshot.sequence.desc()).limit(self.limit).all()

    def get(self, snapshot_id: str) -> ScenarioSnapshot:
        snapshot = (
            self.db.query(ScenarioSnapshot)
            .filter(ScenarioSnapshot.id == snapshot_id)
            .first()
        )
        if not snapshot:
            raise NotFoundError(f"scenario {snapshot_id!r} not found")
        return snapshot

    def delete(self, snapshot_id: str) -> None:
        snapshot = self.get(snapshot_id)
        self.db.delete(snapshot)
        self.db.commit()

    def compare(self, snapshot_ids: List[str]) -> List[ScenarioSnapshot]:
        """Fetch up to three snapshots side by side, in the order requested."""
        if not snapshot_ids:
            raise ValidationError("ids", "select at least one scenario")
        if len(snapshot_ids) > MAX_COMPARED:
            raise ValidationError("ids", f"at most {MAX_COMPARED} scenarios can be compared")
        return [self.get(snapshot_id) for snapshot_id in snapshot_ids]


def snapshot_to_dict(snapshot: ScenarioSnapshot) -> Dict[str, Any]:
    return {
        "id": snapshot.id,
        "calculator": snapshot.calculator,
        "label": snapshot.label,
        "inputs": snapshot.inputs,
        "computed_summary": snapshot.computed_summary,
        "timestamp": snapshot.created_at.isoformat() if snapshot.created_at else None,
    }
