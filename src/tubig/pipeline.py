import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from tubig.allocation import WaterAllocation, allocate_water
from tubig.assignment import StationAssignment, assign_stations
from tubig.common import DEFAULT_CONFIG, PlanningConfig, SourceKind
from tubig.ledger import PlanEvent, UsageLedger
from tubig.network.validation import EmptyInputError
from tubig.prediction import ShortagePrediction, predict_shortages
from tubig.summary import PlanSummary, summarize
from tubig.telemetry import (
    LiveStationReading,
    LiveTowerReading,
    LiveZoneReading,
    PlanningInput,
    index_tower_readings,
    index_zone_readings,
)
from tubig.topology import EligibilityEntry, Station, Tower, TowerStationLink, Zone

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=PlanEvent)


@dataclass(frozen=True, slots=True)
class PlanResult:
    """Complete snapshot of one planning run: its inputs and everything derived from them."""

    towers: tuple[Tower, ...]
    stations: tuple[Station, ...]
    zones: tuple[Zone, ...]
    eligibility: tuple[EligibilityEntry, ...]
    links: tuple[TowerStationLink, ...]
    zone_readings: tuple[LiveZoneReading, ...]
    tower_readings: tuple[LiveTowerReading, ...]
    station_readings: tuple[LiveStationReading, ...]
    planning: PlanningInput
    predictions: tuple[ShortagePrediction, ...]
    allocations: tuple[WaterAllocation, ...]
    assignments: tuple[StationAssignment, ...]
    summary: PlanSummary
    events: tuple[PlanEvent, ...] = ()

    def events_of_type(self, event_type: type[T]) -> list[T]:
        return [e for e in self.events if isinstance(e, event_type)]


def validate_inputs(
    zones: Sequence[Zone],
    stations: Sequence[Station],
    zone_readings: Sequence[LiveZoneReading],
) -> None:
    """Refuse to plan without zones, stations or zone telemetry."""
    if not zones:
        raise EmptyInputError("zones")
    if not stations:
        raise EmptyInputError("pumping stations")
    if not zone_readings:
        raise EmptyInputError("live zone readings")


def run_emergency_plan(
    towers: Sequence[Tower],
    stations: Sequence[Station],
    zones: Sequence[Zone],
    eligibility: Sequence[EligibilityEntry],
    links: Sequence[TowerStationLink],
    zone_readings: Sequence[LiveZoneReading],
    tower_readings: Sequence[LiveTowerReading],
    planning: PlanningInput,
    station_readings: Sequence[LiveStationReading] = (),
    config: PlanningConfig = DEFAULT_CONFIG,
) -> PlanResult:
    """Run prediction, balancing, station assignment and the summary in one pass.

    Raises:
        EmptyInputError: If zones, stations or zone readings are empty.
    """
    validate_inputs(zones, stations, zone_readings)

    link_list = list(links)
    eligibility_list = list(eligibility)
    zone_index = index_zone_readings(zone_readings)
    tower_index = index_tower_readings(tower_readings)

    logger.info(
        "Planning a %s hour emergency for %d zone(s), %d tower(s), %d station(s)",
        planning.duration_hours,
        len(zones),
        len(towers),
        len(stations),
    )

    predictions = predict_shortages(zones, zone_index, planning, config)

    donor_ledger = UsageLedger(SourceKind.DONOR)
    tower_ledger = UsageLedger(SourceKind.TOWER)
    allocations = allocate_water(
        zones,
        zone_index,
        tower_index,
        link_list,
        predictions,
        planning,
        towers=towers,
        donor_ledger=donor_ledger,
        tower_ledger=tower_ledger,
        config=config,
    )

    delivery_ledger = UsageLedger(SourceKind.TOWER)
    assignments = assign_stations(
        zones,
        stations,
        eligibility_list,
        allocations,
        tower_index,
        link_list,
        ledger=delivery_ledger,
        station_readings=station_readings,
    )

    summary = summarize(predictions, allocations, zone_index, tower_index.values(), planning, config)
    logger.info(
        "Allocated %.0f of %.0f liters needed; %d of %d zone(s) helped",
        summary.total_water_allocated,
        summary.total_water_needed,
        summary.zones_helped,
        summary.zones_needing_help,
    )

    return PlanResult(
        towers=tuple(towers),
        stations=tuple(stations),
        zones=tuple(zones),
        eligibility=tuple(eligibility_list),
        links=tuple(link_list),
        zone_readings=tuple(zone_readings),
        tower_readings=tuple(tower_readings),
        station_readings=tuple(station_readings),
        planning=planning,
        predictions=tuple(predictions),
        allocations=tuple(allocations),
        assignments=tuple(assignments),
        summary=summary,
        events=tuple(donor_ledger.events + tower_ledger.events + delivery_ledger.events),
    )
