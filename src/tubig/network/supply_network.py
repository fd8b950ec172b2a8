import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import networkx as nx

from tubig.common import DEFAULT_CONFIG, PlanningConfig
from tubig.geo import haversine
from tubig.telemetry import LiveStationReading, LiveTowerReading, LiveZoneReading, PlanningInput
from tubig.topology import EligibilityEntry, Station, Tower, TowerStationLink, Zone

from .validation import DuplicateIdError, ValidationError

if TYPE_CHECKING:
    from tubig.pipeline import PlanResult

logger = logging.getLogger(__name__)

TOWER = "tower"
STATION = "station"
ZONE = "zone"


@dataclass
class SupplyNetwork:
    """Static topology of towers, stations and zones.

    Towers feed stations and stations serve zones; both relations become
    edges of a directed graph (tower -> station -> zone) once the network
    is validated. Graph nodes are ``(kind, id)`` pairs so ids only need to
    be unique within their kind.
    """

    _zones: dict[str, Zone] = field(default_factory=dict, init=False, repr=False)
    _towers: dict[str, Tower] = field(default_factory=dict, init=False, repr=False)
    _stations: dict[str, Station] = field(default_factory=dict, init=False, repr=False)
    _eligibility: list[EligibilityEntry] = field(default_factory=list, init=False, repr=False)
    _links: list[TowerStationLink] = field(default_factory=list, init=False, repr=False)
    _graph: nx.DiGraph = field(default_factory=nx.DiGraph, init=False, repr=False)
    _validated: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_records(
        cls,
        zones: Iterable[Zone] = (),
        towers: Iterable[Tower] = (),
        stations: Iterable[Station] = (),
        eligibility: Iterable[EligibilityEntry] = (),
        links: Iterable[TowerStationLink] = (),
    ) -> "SupplyNetwork":
        network = cls()
        for zone in zones:
            network.add_zone(zone)
        for tower in towers:
            network.add_tower(tower)
        for station in stations:
            network.add_station(station)
        for entry in eligibility:
            network.add_eligibility(entry)
        for link in links:
            network.add_link(link)
        return network

    def add_zone(self, zone: Zone) -> None:
        if zone.id in self._zones:
            raise DuplicateIdError(ZONE, zone.id)
        self._zones[zone.id] = zone
        self._validated = False

    def add_tower(self, tower: Tower) -> None:
        if tower.id in self._towers:
            raise DuplicateIdError(TOWER, tower.id)
        self._towers[tower.id] = tower
        self._validated = False

    def add_station(self, station: Station) -> None:
        if station.id in self._stations:
            raise DuplicateIdError(STATION, station.id)
        self._stations[station.id] = station
        self._validated = False

    def add_eligibility(self, entry: EligibilityEntry) -> None:
        self._eligibility.append(entry)
        self._validated = False

    def add_link(self, link: TowerStationLink) -> None:
        self._links.append(link)
        self._validated = False

    def validate(self) -> None:
        errors: list[str] = []

        # 1. Every reference must name a known entity
        for i, link in enumerate(self._links):
            if link.tower_id not in self._towers:
                errors.append(f"Link {i}: tower '{link.tower_id}' does not exist")
            if link.station_id not in self._stations:
                errors.append(f"Link {i}: station '{link.station_id}' does not exist")

        seen: set[tuple[str, str]] = set()
        for i, entry in enumerate(self._eligibility):
            if entry.station_id not in self._stations:
                errors.append(f"Eligibility {i}: station '{entry.station_id}' does not exist")
            if entry.zone_id not in self._zones:
                errors.append(f"Eligibility {i}: zone '{entry.zone_id}' does not exist")
            pair = (entry.station_id, entry.zone_id)
            if pair in seen:
                errors.append(f"Eligibility {i}: station '{entry.station_id}' listed twice for zone '{entry.zone_id}'")
            seen.add(pair)

        if errors:
            raise ValidationError("\n".join(errors))

        # 2. Build the graph
        self._graph.clear()
        for tower_id in self._towers:
            self._graph.add_node((TOWER, tower_id))
        for station_id in self._stations:
            self._graph.add_node((STATION, station_id))
        for zone_id in self._zones:
            self._graph.add_node((ZONE, zone_id))
        for link in self._links:
            self._graph.add_edge((TOWER, link.tower_id), (STATION, link.station_id), efficiency=link.efficiency)
        for entry in self._eligibility:
            self._graph.add_edge(
                (STATION, entry.station_id),
                (ZONE, entry.zone_id),
                distance=entry.distance,
                cost=entry.cost,
            )

        # 3. Gaps are reported, not rejected: planning still runs around them
        for station_id in self._stations:
            if self._graph.in_degree((STATION, station_id)) == 0:
                logger.warning("Station '%s' is not fed by any tower", station_id)
        for zone_id in self.unserved_zones():
            logger.warning("Zone '%s' cannot be reached from any tower", zone_id)

        self._validated = True

    def _ensure_validated(self) -> None:
        if not self._validated:
            self.validate()

    @property
    def zones(self) -> list[Zone]:
        return list(self._zones.values())

    @property
    def towers(self) -> list[Tower]:
        return list(self._towers.values())

    @property
    def stations(self) -> list[Station]:
        return list(self._stations.values())

    @property
    def eligibility(self) -> list[EligibilityEntry]:
        return list(self._eligibility)

    @property
    def links(self) -> list[TowerStationLink]:
        return list(self._links)

    def eligible_stations(self, zone_id: str) -> list[EligibilityEntry]:
        """Eligibility entries for a zone, nearest first."""
        entries = [e for e in self._eligibility if e.zone_id == zone_id]
        return sorted(entries, key=lambda e: e.distance)

    def towers_feeding(self, station_id: str) -> list[str]:
        self._ensure_validated()
        node = (STATION, station_id)
        if node not in self._graph:
            return []
        return [tower_id for _, tower_id in self._graph.predecessors(node)]

    def reachable_zones(self, tower_id: str) -> list[str]:
        """Zones a tower can supply through any of its stations."""
        self._ensure_validated()
        node = (TOWER, tower_id)
        if node not in self._graph:
            return []
        return sorted(entity_id for kind, entity_id in nx.descendants(self._graph, node) if kind == ZONE)

    def unserved_zones(self) -> list[str]:
        """Zones with no tower -> station -> zone path."""
        served: set[str] = set()
        for tower_id in self._towers:
            node = (TOWER, tower_id)
            if node in self._graph:
                served.update(entity_id for kind, entity_id in nx.descendants(self._graph, node) if kind == ZONE)
        return [zone_id for zone_id in self._zones if zone_id not in served]

    def leg_length(self, station_id: str, zone_id: str) -> float | None:
        """Straight-line distance in km between a station and a zone.

        Returns None if either entity is unknown.
        """
        station = self._stations.get(station_id)
        zone = self._zones.get(zone_id)
        if station is None or zone is None:
            return None
        return haversine(*station.location, *zone.location)

    def run(
        self,
        zone_readings: Sequence[LiveZoneReading],
        tower_readings: Sequence[LiveTowerReading],
        planning: PlanningInput,
        station_readings: Sequence[LiveStationReading] = (),
        config: PlanningConfig = DEFAULT_CONFIG,
    ) -> "PlanResult":
        """Validate the topology and run the full planning pipeline against it."""
        from tubig.pipeline import run_emergency_plan

        self._ensure_validated()
        return run_emergency_plan(
            towers=self.towers,
            stations=self.stations,
            zones=self.zones,
            eligibility=self.eligibility,
            links=self.links,
            zone_readings=zone_readings,
            tower_readings=tower_readings,
            planning=planning,
            station_readings=station_readings,
            config=config,
        )
