from dataclasses import dataclass

Location = tuple[float, float]  # (lat, lon) in WGS84


def _check_location(location: Location) -> None:
    lat, lon = location
    if not -90.0 <= lat <= 90.0:
        raise ValueError("latitude must be within [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise ValueError("longitude must be within [-180, 180]")


@dataclass(frozen=True, slots=True)
class Zone:
    id: str
    name: str
    location: Location

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id cannot be empty")
        _check_location(self.location)


@dataclass(frozen=True, slots=True)
class Tower:
    id: str
    name: str
    location: Location
    max_capacity: float  # liters

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.max_capacity <= 0:
            raise ValueError("max_capacity must be positive")
        _check_location(self.location)


@dataclass(frozen=True, slots=True)
class Station:
    id: str
    name: str
    location: Location
    threshold_flow_rate: float  # L/s
    priority: int = 0
    population_served: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.threshold_flow_rate < 0:
            raise ValueError("threshold_flow_rate cannot be negative")
        if self.population_served < 0:
            raise ValueError("population_served cannot be negative")
        _check_location(self.location)


@dataclass(frozen=True, slots=True)
class EligibilityEntry:
    """A station allowed to serve a zone, with the leg's distance and cost."""

    station_id: str
    zone_id: str
    distance: float  # km
    cost: float = 0.0

    def __post_init__(self) -> None:
        if not self.station_id:
            raise ValueError("station_id cannot be empty")
        if not self.zone_id:
            raise ValueError("zone_id cannot be empty")
        if self.distance < 0:
            raise ValueError("distance cannot be negative")
        if self.cost < 0:
            raise ValueError("cost cannot be negative")


@dataclass(frozen=True, slots=True)
class TowerStationLink:
    tower_id: str
    station_id: str
    efficiency: float = 1.0

    def __post_init__(self) -> None:
        if not self.tower_id:
            raise ValueError("tower_id cannot be empty")
        if not self.station_id:
            raise ValueError("station_id cannot be empty")
        if not 0 < self.efficiency <= 1:
            raise ValueError("efficiency must be in (0, 1]")


def tower_order(links: list[TowerStationLink]) -> list[str]:
    """Tower ids in order of their first appearance in the link list."""
    return list(dict.fromkeys(link.tower_id for link in links))


def towers_feeding(links: list[TowerStationLink], station_id: str) -> list[str]:
    """Tower ids linked to a station, in link-list order."""
    return list(dict.fromkeys(link.tower_id for link in links if link.station_id == station_id))
