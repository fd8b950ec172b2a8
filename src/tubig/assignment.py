import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from tubig.allocation import WaterAllocation
from tubig.common import SourceKind
from tubig.ledger import (
    DeliveryClipped,
    NoEligibleStation,
    ReadingMissing,
    SourceDrawn,
    StationBelowThreshold,
    StationUnlinked,
    TowerExhausted,
    UsageLedger,
)
from tubig.telemetry import (
    LiveStationReading,
    LiveTowerReading,
    index_station_readings,
    index_tower_readings,
)
from tubig.topology import EligibilityEntry, Station, TowerStationLink, Zone, towers_feeding

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StationAssignment:
    station: Station
    zones: tuple[Zone, ...]
    total_water_delivered: float  # liters
    total_distance: float  # km


@dataclass
class _Accumulator:
    station: Station
    zones: list[Zone] = field(default_factory=list)
    delivered: float = 0.0
    distance: float = 0.0

    def add(self, zone: Zone, delivered: float, distance: float) -> None:
        self.zones.append(zone)
        self.delivered += delivered
        self.distance += distance

    def freeze(self) -> StationAssignment:
        return StationAssignment(
            station=self.station,
            zones=tuple(self.zones),
            total_water_delivered=self.delivered,
            total_distance=self.distance,
        )


def nearest_station(
    zone_id: str,
    stations: Mapping[str, Station],
    eligibility: Iterable[EligibilityEntry],
) -> EligibilityEntry | None:
    """Closest eligible station entry for a zone; the first one found wins ties."""
    best: EligibilityEntry | None = None
    for entry in eligibility:
        if entry.zone_id != zone_id or entry.station_id not in stations:
            continue
        if best is None or entry.distance < best.distance:
            best = entry
    return best


def assign_stations(
    zones: Iterable[Zone],
    stations: Iterable[Station],
    eligibility: list[EligibilityEntry],
    allocations: Iterable[WaterAllocation],
    tower_readings: Iterable[LiveTowerReading] | Mapping[str, LiveTowerReading],
    links: list[TowerStationLink],
    *,
    ledger: UsageLedger | None = None,
    station_readings: Iterable[LiveStationReading] | Mapping[str, LiveStationReading] = (),
) -> list[StationAssignment]:
    """Route tower-sourced allocations through their nearest eligible station.

    Only allocations that drew from at least one tower are delivered. The
    volume delivered through a station is clipped to what its feeding tower
    still holds; that capacity is tracked in ``ledger`` independently of
    the balancer's own accounting. Stations that serve nobody are left out.
    """
    ledger = ledger if ledger is not None else UsageLedger(SourceKind.TOWER)
    station_by_id = {station.id: station for station in stations}
    zone_ids = {zone.id for zone in zones}
    towers = tower_readings if isinstance(tower_readings, Mapping) else index_tower_readings(tower_readings)
    station_flows = (
        station_readings if isinstance(station_readings, Mapping) else index_station_readings(station_readings)
    )

    for tower_id, reading in towers.items():
        ledger.open(tower_id, reading.current_water)

    accumulators: dict[str, _Accumulator] = {}
    for allocation in allocations:
        zone = allocation.zone
        if zone.id not in zone_ids:
            continue
        requested = allocation.tower_volume
        if requested <= 0:
            continue

        entry = nearest_station(zone.id, station_by_id, eligibility)
        if entry is None:
            logger.warning("No pumping station can serve zone '%s' (%s)", zone.id, zone.name)
            ledger.record(NoEligibleStation(zone.id))
            continue
        station = station_by_id[entry.station_id]

        linked = towers_feeding(links, station.id)
        if not linked:
            logger.warning("Station '%s' has no feeding tower; zone '%s' left unassigned", station.id, zone.id)
            ledger.record(StationUnlinked(station.id, zone.id))
            continue

        tower_id = _tower_with_water(linked, ledger)
        if tower_id is None:
            logger.warning(
                "Every tower feeding station '%s' is exhausted; zone '%s' left unassigned",
                station.id,
                zone.id,
            )
            ledger.record(TowerExhausted(station.id, zone.id, requested))
            continue

        delivered = ledger.draw(tower_id, requested)
        ledger.record(SourceDrawn(SourceKind.TOWER, tower_id, zone.id, delivered))
        if delivered < requested:
            logger.warning(
                "Tower '%s' can only deliver %.0f of %.0f liters to zone '%s'",
                tower_id,
                delivered,
                requested,
                zone.id,
            )
            ledger.record(DeliveryClipped(tower_id, zone.id, requested, delivered))

        _check_station_flow(station, station_flows, ledger)

        accumulator = accumulators.get(station.id)
        if accumulator is None:
            accumulator = accumulators[station.id] = _Accumulator(station)
        accumulator.add(zone, delivered, entry.distance)

    return [accumulator.freeze() for accumulator in accumulators.values()]


def _tower_with_water(tower_ids: list[str], ledger: UsageLedger) -> str | None:
    for tower_id in tower_ids:
        if tower_id not in ledger.capacities:
            logger.warning("No live reading for tower '%s'; skipping it", tower_id)
            ledger.record(ReadingMissing("tower", tower_id))
            continue
        if ledger.remaining(tower_id) > 0:
            return tower_id
    return None


def _check_station_flow(
    station: Station,
    station_flows: Mapping[str, LiveStationReading],
    ledger: UsageLedger,
) -> None:
    reading = station_flows.get(station.id)
    if reading is None or reading.current_flow_rate >= station.threshold_flow_rate:
        return
    advisory = StationBelowThreshold(station.id, reading.current_flow_rate, station.threshold_flow_rate)
    if advisory not in ledger.events:
        logger.warning(
            "Station '%s' runs at %.1f L/s, below its %.1f L/s threshold",
            station.id,
            reading.current_flow_rate,
            station.threshold_flow_rate,
        )
        ledger.record(advisory)
