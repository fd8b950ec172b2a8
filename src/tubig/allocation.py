"""Greedy donor/recipient water balancing.

Recipients are served one at a time in priority order. Each draws first
from donor zones, most stable donor first, then from towers in link-list
order. Running capacity lives in two :class:`UsageLedger` objects, one per
source kind, and is never rolled back within a run.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from tubig.common import DEFAULT_CONFIG, SECONDS_PER_HOUR, PlanningConfig, SourceKind, Status
from tubig.ledger import (
    VOLUME_TOLERANCE,
    CapacityAdvisory,
    ReadingMissing,
    SourceDrawn,
    TowerUnlinked,
    UsageLedger,
)
from tubig.prediction import ShortagePrediction, target_flow_rate
from tubig.telemetry import (
    LiveTowerReading,
    LiveZoneReading,
    PlanningInput,
    index_tower_readings,
    index_zone_readings,
)
from tubig.topology import Tower, TowerStationLink, Zone, tower_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceContribution:
    kind: SourceKind
    source_id: str
    source_name: str
    amount: float  # liters

    @property
    def label(self) -> str:
        return f"{self.source_name} ({self.amount:,.0f}L)"


@dataclass(frozen=True, slots=True)
class WaterAllocation:
    zone: Zone
    water_needed: float
    water_allocated: float
    allocated: bool
    priority: int
    status: Status
    water_sources: tuple[SourceContribution, ...] = ()

    @property
    def tower_volume(self) -> float:
        return math.fsum(s.amount for s in self.water_sources if s.kind is SourceKind.TOWER)

    @property
    def donor_volume(self) -> float:
        return math.fsum(s.amount for s in self.water_sources if s.kind is SourceKind.DONOR)

    @property
    def shortfall(self) -> float:
        return max(0.0, self.water_needed - self.water_allocated)


@dataclass(frozen=True, slots=True)
class Donor:
    prediction: ShortagePrediction
    max_safe_donation: float  # liters

    @property
    def zone(self) -> Zone:
        return self.prediction.zone


def find_donors(
    predictions: Iterable[ShortagePrediction],
    zone_readings: Iterable[LiveZoneReading] | Mapping[str, LiveZoneReading],
    planning: PlanningInput,
    config: PlanningConfig = DEFAULT_CONFIG,
) -> list[Donor]:
    """Zones that stay safe through the whole window and have water to spare.

    Ordered by descending time to shortage; ties keep prediction order.
    """
    readings = zone_readings if isinstance(zone_readings, Mapping) else index_zone_readings(zone_readings)

    donors: list[Donor] = []
    for prediction in predictions:
        if not prediction.time_to_shortage > planning.duration_hours:
            continue
        reading = readings.get(prediction.zone.id)
        if reading is None:
            continue
        threshold = reading.threshold_or(config.default_threshold)
        target = target_flow_rate(threshold, reading.drop_rate, planning.duration_hours)
        max_safe_donation = max(0.0, (reading.current_flow_rate - target) * SECONDS_PER_HOUR)
        if max_safe_donation <= 0:
            continue
        donors.append(Donor(prediction=prediction, max_safe_donation=max_safe_donation))

    donors.sort(key=lambda d: d.prediction.time_to_shortage, reverse=True)
    return donors


def allocate_water(
    zones: Iterable[Zone],
    zone_readings: Iterable[LiveZoneReading] | Mapping[str, LiveZoneReading],
    tower_readings: Iterable[LiveTowerReading] | Mapping[str, LiveTowerReading],
    links: list[TowerStationLink],
    predictions: list[ShortagePrediction],
    planning: PlanningInput,
    *,
    towers: Iterable[Tower] = (),
    donor_ledger: UsageLedger | None = None,
    tower_ledger: UsageLedger | None = None,
    config: PlanningConfig = DEFAULT_CONFIG,
) -> list[WaterAllocation]:
    """Allocate water to every zone with a deficit.

    Args:
        zones: Zones taking part in this run; predictions for other zones are ignored.
        zone_readings: Live zone telemetry.
        tower_readings: Live tower storage.
        links: Tower-station links; their order fixes the tower draw order.
        predictions: Output of ``predict_shortages``, in its ranking order.
        planning: Emergency window.
        towers: Static tower records. When given, live storage is clipped to
            each tower's ``max_capacity`` and tower names label contributions.
        donor_ledger: Accumulator for donor draws. A fresh one is used if omitted.
        tower_ledger: Accumulator for tower draws. A fresh one is used if omitted.
        config: Planning constants.

    Returns:
        One allocation per recipient, in the order recipients were served.
    """
    donor_ledger = donor_ledger if donor_ledger is not None else UsageLedger(SourceKind.DONOR)
    tower_ledger = tower_ledger if tower_ledger is not None else UsageLedger(SourceKind.TOWER)
    readings = zone_readings if isinstance(zone_readings, Mapping) else index_zone_readings(zone_readings)

    zone_ids = {zone.id for zone in zones}
    ranked = [p for p in predictions if p.zone.id in zone_ids]

    recipients = _recipients(ranked, readings, donor_ledger, config)
    if not recipients:
        logger.info("No zone needs water within %s hours", planning.duration_hours)
        return []

    donors = find_donors(ranked, readings, planning, config)
    for donor in donors:
        donor_ledger.open(donor.zone.id, donor.max_safe_donation)
    donor_ids = [donor.zone.id for donor in donors]
    donor_names = {donor.zone.id: donor.zone.name for donor in donors}

    tower_ids, tower_names = _open_towers(tower_readings, links, towers, tower_ledger)

    logger.info(
        "Allocating water to %d recipient(s) from %d donor(s) and %d tower(s)",
        len(recipients),
        len(donors),
        len(tower_ids),
    )

    allocations: list[WaterAllocation] = []
    for prediction, priority in recipients:
        need = prediction.water_needed_to_be_safe
        available = donor_ledger.total_remaining(donor_ids) + tower_ledger.total_remaining(tower_ids)
        target = min(need, available)

        sources: list[SourceContribution] = []
        remaining = target
        for donor_id in donor_ids:
            if remaining <= VOLUME_TOLERANCE:
                break
            taken = donor_ledger.draw(donor_id, remaining)
            if taken > 0:
                sources.append(SourceContribution(SourceKind.DONOR, donor_id, donor_names[donor_id], taken))
                donor_ledger.record(SourceDrawn(SourceKind.DONOR, donor_id, prediction.zone.id, taken))
                remaining -= taken

        for tower_id in tower_ids:
            if remaining <= VOLUME_TOLERANCE:
                break
            before = tower_ledger.utilisation(tower_id)
            taken = tower_ledger.draw(tower_id, remaining)
            if taken > 0:
                sources.append(SourceContribution(SourceKind.TOWER, tower_id, tower_names[tower_id], taken))
                tower_ledger.record(SourceDrawn(SourceKind.TOWER, tower_id, prediction.zone.id, taken))
                remaining -= taken
                _advise(tower_ledger, tower_id, before, config)

        water_allocated = min(need, math.fsum(s.amount for s in sources))
        if water_allocated < need - VOLUME_TOLERANCE:
            logger.warning(
                "Zone '%s' receives %.0f of %.0f liters needed",
                prediction.zone.id,
                water_allocated,
                need,
            )
        else:
            logger.debug("Zone '%s' fully supplied with %.0f liters", prediction.zone.id, water_allocated)

        allocations.append(
            WaterAllocation(
                zone=prediction.zone,
                water_needed=need,
                water_allocated=water_allocated,
                allocated=water_allocated > 0,
                priority=priority,
                status=prediction.status,
                water_sources=tuple(sources),
            )
        )

    return allocations


def _recipients(
    ranked: list[ShortagePrediction],
    readings: Mapping[str, LiveZoneReading],
    ledger: UsageLedger,
    config: PlanningConfig,
) -> list[tuple[ShortagePrediction, int]]:
    recipients: list[tuple[ShortagePrediction, int]] = []
    for prediction in ranked:
        if not prediction.needs_aid:
            continue
        if prediction.zone.id not in readings:
            logger.warning("No live reading for zone '%s' during allocation; skipping", prediction.zone.id)
            ledger.record(ReadingMissing("zone", prediction.zone.id))
            continue
        recipients.append((prediction, config.priority_of(prediction.status)))
    recipients.sort(key=lambda r: r[1], reverse=True)
    return recipients


def _open_towers(
    tower_readings: Iterable[LiveTowerReading] | Mapping[str, LiveTowerReading],
    links: list[TowerStationLink],
    towers: Iterable[Tower],
    ledger: UsageLedger,
) -> tuple[list[str], dict[str, str]]:
    readings = tower_readings if isinstance(tower_readings, Mapping) else index_tower_readings(tower_readings)
    known = {tower.id: tower for tower in towers}

    linked = tower_order(links)
    for tower_id in readings:
        if tower_id not in linked:
            logger.warning("Tower '%s' feeds no station; its water cannot be delivered", tower_id)
            ledger.record(TowerUnlinked(tower_id))

    tower_ids: list[str] = []
    names: dict[str, str] = {}
    for tower_id in linked:
        reading = readings.get(tower_id)
        if reading is None:
            logger.warning("No live reading for tower '%s'; treating it as empty", tower_id)
            ledger.record(ReadingMissing("tower", tower_id))
            continue
        capacity = reading.current_water
        tower = known.get(tower_id)
        if tower is not None:
            capacity = min(capacity, tower.max_capacity)
        ledger.open(tower_id, capacity)
        tower_ids.append(tower_id)
        names[tower_id] = tower.name if tower is not None else tower_id
    return tower_ids, names


def _advise(ledger: UsageLedger, tower_id: str, before: float, config: PlanningConfig) -> None:
    after = ledger.utilisation(tower_id)
    if before < config.advisory_utilisation <= after:
        capacity = ledger.capacities[tower_id]
        logger.warning("Tower '%s' is at %.0f%% of its available water", tower_id, after * 100)
        ledger.record(CapacityAdvisory(tower_id, ledger.drawn[tower_id], capacity))
