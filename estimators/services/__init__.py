"""
Application services module.
"""

from estimators.services.scenario_store import ScenarioStore, snapshot_to_dict

__all__ = ["ScenarioStore", "snapshot_to_dict"]
