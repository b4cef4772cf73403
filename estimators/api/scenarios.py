"""
Saved scenario API endpoints.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from estimators.db.database import get_db
from estimators.services.scenario_store import ScenarioStore, snapshot_to_dict

router = APIRouter()


class ScenarioCreate(BaseModel):
    """Schema for saving a scenario."""

    calculator: str
    label: str = ""
    inputs: Dict[str, Any] = {}
    computed_summary: Dict[str, Any] = {}


class ScenarioResponse(BaseModel):
    """Schema for scenario response."""

    id: str
    calculator: str
    label: str
    inputs: Dict[str, Any]
    computed_summary: Dict[str, Any]
    timestamp: Optional[str]


class ScenarioListResponse(BaseModel):
    """Response for listing scenarios."""

    scenarios: List[ScenarioResponse]
    total: int


class CompareRequest(BaseModel):
    ids: List[str]


@router.get("/", response_model=ScenarioListResponse)
async def list_scenarios(
    calculator: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Saved scenarios, most recent first."""
    snapshots = ScenarioStore(db).list(calculator)
    return ScenarioListResponse(
        scenarios=[ScenarioResponse(**snapshot_to_dict(s)) for s in snapshots],
        total=len(snapshots),
    )


@router.post("/", response_model=ScenarioResponse, status_code=201)
async def save_scenario(
    scenario_data: ScenarioCreate,
    db: Session = Depends(get_db),
):
    """Save a scenario snapshot."""
    store = ScenarioStore(db)
    snapshot_id = store.save(
        calculator=scenario_data.calculator,
        label=scenario_data.label,
        inputs=scenario_data.inputs,
        computed_summary=scenario_data.computed_summary,
    )
    return ScenarioResponse(**snapshot_to_dict(store.get(snapshot_id)))


@router.post("/compare", response_model=ScenarioListResponse)
async def compare_scenarios(
    request: CompareRequest,
    db: Session = Depends(get_db),
):
    """Up to three scenarios side by side."""
    snapshots = ScenarioStore(db).compare(request.ids)
    return ScenarioListResponse(
        scenarios=[ScenarioResponse(**snapshot_to_dict(s)) for s in snapshots],
        total=len(snapshots),
    )


@router.get("/{scenario_id}", response_model=ScenarioResponse)
async def get_scenario(scenario_id: str, db: Session = Depends(get_db)):
    """Get a scenario by ID."""
    return ScenarioResponse(**snapshot_to_dict(ScenarioStore(db).get(scenario_id)))


@router.delete("/{scenario_id}")
async def delete_scenario(scenario_id: str, db: Session = Depends(get_db)):
    """Delete a scenario."""
    ScenarioStore(db).delete(scenario_id)
    return {"deleted": True, "id": scenario_id}
