from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

SECONDS_PER_HOUR = 3600


class Status(str, Enum):
    """Shortage status of a zone."""

    SAFE = "Safe"
    WARNING = "Warning"
    CRITICAL = "Critical"


class SourceKind(str, Enum):
    """Where a unit of allocated water comes from."""

    DONOR = "donor"
    TOWER = "tower"


def _default_priority_weights() -> Mapping[Status, int]:
    return MappingProxyType({Status.CRITICAL: 10, Status.WARNING: 5, Status.SAFE: 1})


@dataclass(frozen=True, slots=True)
class PlanningConfig:
    """Tunable constants shared by the pipeline stages.

    Attributes:
        default_threshold: Safety flow in L/s used when a zone reading
            does not carry its own threshold.
        reference_flow_rate: Reference point for the g-score ranking
            heuristic (g = reference - current flow).
        priority_weights: Recipient priority per status.
        advisory_utilisation: Fraction of a tower's capacity past which a
            capacity advisory is raised.
    """

    default_threshold: float = 20.0
    reference_flow_rate: float = 50.0
    priority_weights: Mapping[Status, int] = field(default_factory=_default_priority_weights)
    advisory_utilisation: float = 0.9

    def __post_init__(self) -> None:
        if self.default_threshold < 0:
            raise ValueError("default_threshold cannot be negative")
        if not 0 < self.advisory_utilisation <= 1:
            raise ValueError("advisory_utilisation must be in (0, 1]")
        missing = set(Status) - set(self.priority_weights)
        if missing:
            names = ", ".join(sorted(s.value for s in missing))
            raise ValueError(f"priority_weights missing statuses: {names}")

    def priority_of(self, status: Status) -> int:
        return self.priority_weights[status]


DEFAULT_CONFIG = PlanningConfig()
