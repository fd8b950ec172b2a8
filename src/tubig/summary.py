import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from tubig.allocation import WaterAllocation, find_donors
from tubig.common import DEFAULT_CONFIG, PlanningConfig
from tubig.prediction import ShortagePrediction
from tubig.telemetry import LiveTowerReading, LiveZoneReading, PlanningInput


@dataclass(frozen=True, slots=True)
class PlanSummary:
    total_water_needed: float
    total_water_available: float
    total_water_allocated: float
    zones_aid_eligible: int
    zones_needing_help: int
    zones_helped: int

    @property
    def coverage(self) -> float:
        """Share of the total need that was allocated, 1.0 when nothing was needed."""
        if self.total_water_needed <= 0:
            return 1.0
        return self.total_water_allocated / self.total_water_needed


def summarize(
    predictions: Iterable[ShortagePrediction],
    allocations: list[WaterAllocation],
    zone_readings: Iterable[LiveZoneReading] | Mapping[str, LiveZoneReading],
    tower_readings: Iterable[LiveTowerReading],
    planning: PlanningInput,
    config: PlanningConfig = DEFAULT_CONFIG,
) -> PlanSummary:
    return PlanSummary(
        total_water_needed=math.fsum(a.water_needed for a in allocations),
        total_water_available=math.fsum(r.current_water for r in tower_readings),
        total_water_allocated=math.fsum(a.water_allocated for a in allocations),
        zones_aid_eligible=len(find_donors(predictions, zone_readings, planning, config)),
        zones_needing_help=len(allocations),
        zones_helped=sum(1 for a in allocations if a.allocated),
    )
