from dataclasses import dataclass, field
from typing import TypeVar

from tubig.common import SourceKind

VOLUME_TOLERANCE = 1e-6  # liters; smaller remainders count as empty


@dataclass(frozen=True, slots=True)
class SourceDrawn:
    kind: SourceKind
    source_id: str
    zone_id: str
    amount: float  # liters


@dataclass(frozen=True, slots=True)
class CapacityAdvisory:
    source_id: str
    drawn: float
    capacity: float


@dataclass(frozen=True, slots=True)
class ReadingMissing:
    entity: str  # "zone", "tower" or "station"
    entity_id: str


@dataclass(frozen=True, slots=True)
class TowerUnlinked:
    tower_id: str


@dataclass(frozen=True, slots=True)
class NoEligibleStation:
    zone_id: str


@dataclass(frozen=True, slots=True)
class StationUnlinked:
    station_id: str
    zone_id: str


@dataclass(frozen=True, slots=True)
class TowerExhausted:
    station_id: str
    zone_id: str
    requested: float


@dataclass(frozen=True, slots=True)
class DeliveryClipped:
    tower_id: str
    zone_id: str
    requested: float
    delivered: float


@dataclass(frozen=True, slots=True)
class StationBelowThreshold:
    station_id: str
    current_flow_rate: float
    threshold_flow_rate: float


PlanEvent = (
    SourceDrawn
    | CapacityAdvisory
    | ReadingMissing
    | TowerUnlinked
    | NoEligibleStation
    | StationUnlinked
    | TowerExhausted
    | DeliveryClipped
    | StationBelowThreshold
)

T = TypeVar("T", bound=PlanEvent)


@dataclass
class UsageLedger:
    """Running account of how much each source has given in one planning run.

    Opening a source that is already on the ledger keeps its original
    capacity, so a ledger handed to several calls continues the same
    accounting instead of restarting it.
    """

    kind: SourceKind
    capacities: dict[str, float] = field(default_factory=dict)
    drawn: dict[str, float] = field(default_factory=dict)
    events: list[PlanEvent] = field(default_factory=list, repr=False)

    def open(self, source_id: str, capacity: float) -> None:
        if capacity < 0:
            raise ValueError("capacity cannot be negative")
        self.capacities.setdefault(source_id, capacity)
        self.drawn.setdefault(source_id, 0.0)

    def remaining(self, source_id: str) -> float:
        if source_id not in self.capacities:
            return 0.0
        left = self.capacities[source_id] - self.drawn[source_id]
        return left if left > VOLUME_TOLERANCE else 0.0

    def total_remaining(self, source_ids: list[str] | None = None) -> float:
        ids = self.capacities if source_ids is None else source_ids
        return sum(self.remaining(source_id) for source_id in ids)

    def draw(self, source_id: str, amount: float) -> float:
        """Take up to ``amount`` from a source and return what was actually taken."""
        available = self.remaining(source_id)
        if amount <= VOLUME_TOLERANCE or available <= 0:
            return 0.0
        if amount >= available - VOLUME_TOLERANCE:
            # drain completely so float drift cannot leave a sliver behind
            self.drawn[source_id] = self.capacities[source_id]
            return available
        self.drawn[source_id] += amount
        return amount

    def utilisation(self, source_id: str) -> float:
        capacity = self.capacities.get(source_id, 0.0)
        if capacity <= 0:
            return 1.0
        return self.drawn[source_id] / capacity

    def record(self, event: PlanEvent) -> None:
        self.events.append(event)

    def events_of_type(self, event_type: type[T]) -> list[T]:
        return [e for e in self.events if isinstance(e, event_type)]
