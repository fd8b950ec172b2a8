"""Tabular views of planning results for the reporting layer."""

from collections.abc import Iterable

import pandas as pd

from tubig.allocation import WaterAllocation
from tubig.assignment import StationAssignment
from tubig.pipeline import PlanResult
from tubig.prediction import ShortagePrediction
from tubig.summary import PlanSummary

PREDICTION_COLUMNS = [
    "zone_id",
    "zone_name",
    "status",
    "g_score",
    "h_score",
    "f_score",
    "time_to_shortage",
    "current_flow_rate",
    "threshold",
    "target_flow_rate",
    "water_needed_to_be_safe",
]

ALLOCATION_COLUMNS = [
    "zone_id",
    "zone_name",
    "status",
    "priority",
    "water_needed",
    "water_allocated",
    "allocated",
    "donor_volume",
    "tower_volume",
    "sources",
]

CONTRIBUTION_COLUMNS = ["zone_id", "kind", "source_id", "source_name", "amount"]

ASSIGNMENT_COLUMNS = [
    "station_id",
    "station_name",
    "zone_ids",
    "zone_count",
    "total_water_delivered",
    "total_distance",
]

SCORE_COLUMNS = ["g_score", "h_score", "f_score", "time_to_shortage"]


def predictions_frame(predictions: Iterable[ShortagePrediction], decimals: int = 1) -> pd.DataFrame:
    """One row per zone in ranking order. Scores are rounded for display; ``inf`` is kept."""
    rows = [
        {
            "zone_id": p.zone.id,
            "zone_name": p.zone.name,
            "status": p.status.value,
            "g_score": p.g_score,
            "h_score": p.h_score,
            "f_score": p.f_score,
            "time_to_shortage": p.time_to_shortage,
            "current_flow_rate": p.current_flow_rate,
            "threshold": p.threshold,
            "target_flow_rate": p.target_flow_rate,
            "water_needed_to_be_safe": p.water_needed_to_be_safe,
        }
        for p in predictions
    ]
    df = pd.DataFrame(rows, columns=PREDICTION_COLUMNS)
    df[SCORE_COLUMNS] = df[SCORE_COLUMNS].astype(float).round(decimals)
    return df


def allocations_frame(allocations: Iterable[WaterAllocation]) -> pd.DataFrame:
    rows = [
        {
            "zone_id": a.zone.id,
            "zone_name": a.zone.name,
            "status": a.status.value,
            "priority": a.priority,
            "water_needed": a.water_needed,
            "water_allocated": a.water_allocated,
            "allocated": a.allocated,
            "donor_volume": a.donor_volume,
            "tower_volume": a.tower_volume,
            "sources": "; ".join(s.label for s in a.water_sources),
        }
        for a in allocations
    ]
    return pd.DataFrame(rows, columns=ALLOCATION_COLUMNS)


def contributions_frame(allocations: Iterable[WaterAllocation]) -> pd.DataFrame:
    """Long format: one row per source contribution, in draw order."""
    rows = [
        {
            "zone_id": a.zone.id,
            "kind": s.kind.value,
            "source_id": s.source_id,
            "source_name": s.source_name,
            "amount": s.amount,
        }
        for a in allocations
        for s in a.water_sources
    ]
    return pd.DataFrame(rows, columns=CONTRIBUTION_COLUMNS)


def assignments_frame(assignments: Iterable[StationAssignment]) -> pd.DataFrame:
    rows = [
        {
            "station_id": a.station.id,
            "station_name": a.station.name,
            "zone_ids": ", ".join(z.id for z in a.zones),
            "zone_count": len(a.zones),
            "total_water_delivered": a.total_water_delivered,
            "total_distance": a.total_distance,
        }
        for a in assignments
    ]
    return pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)


def summary_series(summary: PlanSummary) -> pd.Series:
    return pd.Series(
        {
            "total_water_needed": summary.total_water_needed,
            "total_water_available": summary.total_water_available,
            "total_water_allocated": summary.total_water_allocated,
            "zones_aid_eligible": summary.zones_aid_eligible,
            "zones_needing_help": summary.zones_needing_help,
            "zones_helped": summary.zones_helped,
            "coverage": summary.coverage,
        },
        name="summary",
    )


def plan_frames(result: PlanResult) -> dict[str, pd.DataFrame | pd.Series]:
    return {
        "predictions": predictions_frame(result.predictions),
        "allocations": allocations_frame(result.allocations),
        "contributions": contributions_frame(result.allocations),
        "assignments": assignments_frame(result.assignments),
        "summary": summary_series(result.summary),
    }
