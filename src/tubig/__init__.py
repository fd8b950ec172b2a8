"""
tubig

Emergency water redistribution planning for a small network of zones
(barangays), supply towers and pumping stations.

A planning run is a single deterministic pass over a snapshot of static
topology and live telemetry:

    predict_shortages: Ranks zones by shortage risk and computes each zone's water deficit.
    allocate_water: Greedily covers deficits from donor zones first, then from towers.
    assign_stations: Routes tower water through the nearest eligible pumping station.
    summarize: Folds the results into totals for reporting.

run_emergency_plan chains the four stages; SupplyNetwork holds validated
topology and runs the pipeline against fresh telemetry.
"""

from .allocation import Donor, SourceContribution, WaterAllocation, allocate_water, find_donors
from .assignment import StationAssignment, assign_stations
from .common import DEFAULT_CONFIG, PlanningConfig, SourceKind, Status
from .geo import eligibility_from_locations, haversine
from .ledger import UsageLedger
from .network import DuplicateIdError, EmptyInputError, SupplyNetwork, ValidationError
from .pipeline import PlanResult, run_emergency_plan
from .prediction import ShortagePrediction, predict_shortages
from .summary import PlanSummary, summarize
from .telemetry import LiveStationReading, LiveTowerReading, LiveZoneReading, PlanningInput
from .topology import EligibilityEntry, Station, Tower, TowerStationLink, Zone

__all__ = [
    # Configuration
    "DEFAULT_CONFIG",
    "PlanningConfig",
    "SourceKind",
    "Status",
    # Topology
    "EligibilityEntry",
    "Station",
    "Tower",
    "TowerStationLink",
    "Zone",
    "SupplyNetwork",
    "eligibility_from_locations",
    "haversine",
    # Telemetry
    "LiveStationReading",
    "LiveTowerReading",
    "LiveZoneReading",
    "PlanningInput",
    # Pipeline
    "ShortagePrediction",
    "predict_shortages",
    "Donor",
    "SourceContribution",
    "WaterAllocation",
    "allocate_water",
    "find_donors",
    "StationAssignment",
    "assign_stations",
    "PlanSummary",
    "summarize",
    "PlanResult",
    "run_emergency_plan",
    "UsageLedger",
    # Errors
    "DuplicateIdError",
    "EmptyInputError",
    "ValidationError",
]

__version__ = "0.1.0"
