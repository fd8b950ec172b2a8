import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class LiveZoneReading:
    zone_id: str
    current_flow_rate: float  # L/s
    drop_rate: float  # L/s lost per hour
    threshold: float | None = None  # L/s; None falls back to the configured default

    def __post_init__(self) -> None:
        if not self.zone_id:
            raise ValueError("zone_id cannot be empty")
        if self.current_flow_rate < 0:
            raise ValueError("current_flow_rate cannot be negative")
        if self.threshold is not None and self.threshold < 0:
            raise ValueError("threshold cannot be negative")

    def threshold_or(self, default: float) -> float:
        return default if self.threshold is None else self.threshold


@dataclass(frozen=True, slots=True)
class LiveTowerReading:
    tower_id: str
    current_water: float  # liters

    def __post_init__(self) -> None:
        if not self.tower_id:
            raise ValueError("tower_id cannot be empty")
        if self.current_water < 0:
            raise ValueError("current_water cannot be negative")


@dataclass(frozen=True, slots=True)
class LiveStationReading:
    station_id: str
    current_flow_rate: float  # L/s

    def __post_init__(self) -> None:
        if not self.station_id:
            raise ValueError("station_id cannot be empty")
        if self.current_flow_rate < 0:
            raise ValueError("current_flow_rate cannot be negative")


@dataclass(frozen=True, slots=True)
class PlanningInput:
    duration_hours: float

    def __post_init__(self) -> None:
        if not self.duration_hours > 0:
            raise ValueError("duration_hours must be positive")


def index_zone_readings(readings: Iterable[LiveZoneReading]) -> dict[str, LiveZoneReading]:
    return _index(readings, lambda r: r.zone_id, "zone")


def index_tower_readings(readings: Iterable[LiveTowerReading]) -> dict[str, LiveTowerReading]:
    return _index(readings, lambda r: r.tower_id, "tower")


def index_station_readings(readings: Iterable[LiveStationReading]) -> dict[str, LiveStationReading]:
    return _index(readings, lambda r: r.station_id, "station")


def _index(readings: Iterable[R], key: Callable[[R], str], kind: str) -> dict[str, R]:
    """Map entity id to reading. A repeated id keeps the last reading."""
    index: dict[str, R] = {}
    for reading in readings:
        entity_id = key(reading)
        if entity_id in index:
            logger.warning("Duplicate %s reading for '%s'; using the latest one", kind, entity_id)
        index[entity_id] = reading
    return index
