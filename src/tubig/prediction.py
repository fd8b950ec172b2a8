"""Shortage prediction from live zone flow telemetry.

Each zone gets a ranking score in the style of an A* estimate: ``g`` is the
flow deficit against a fixed reference point and ``h`` the hours left before
linear decay carries the flow below the zone's safety threshold.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from tubig.common import DEFAULT_CONFIG, SECONDS_PER_HOUR, PlanningConfig, Status
from tubig.telemetry import LiveZoneReading, PlanningInput, index_zone_readings
from tubig.topology import Zone

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ShortagePrediction:
    zone: Zone
    g_score: float
    h_score: float
    f_score: float
    time_to_shortage: float  # hours
    status: Status
    water_needed_to_be_safe: float | None = None  # liters; None when the zone has no reading
    current_flow_rate: float | None = None
    threshold: float | None = None
    target_flow_rate: float | None = None

    @property
    def has_reading(self) -> bool:
        return self.current_flow_rate is not None

    @property
    def needs_aid(self) -> bool:
        return (self.water_needed_to_be_safe or 0.0) > 0


def target_flow_rate(threshold: float, drop_rate: float, duration_hours: float) -> float:
    """Flow a zone must hold now to stay at or above ``threshold`` for the whole window."""
    drop_rate_per_second = drop_rate / SECONDS_PER_HOUR
    return threshold + drop_rate_per_second * duration_hours * SECONDS_PER_HOUR


def predict_zone(
    zone: Zone,
    reading: LiveZoneReading | None,
    planning: PlanningInput,
    config: PlanningConfig = DEFAULT_CONFIG,
) -> ShortagePrediction:
    if reading is None:
        return ShortagePrediction(
            zone=zone,
            g_score=0.0,
            h_score=math.inf,
            f_score=math.inf,
            time_to_shortage=math.inf,
            status=Status.SAFE,
        )

    flow = reading.current_flow_rate
    threshold = reading.threshold_or(config.default_threshold)
    target = target_flow_rate(threshold, reading.drop_rate, planning.duration_hours)

    g_score = config.reference_flow_rate - flow
    h_score = (flow - threshold) / reading.drop_rate if reading.drop_rate > 0 else math.inf
    f_score = g_score + h_score

    if flow < threshold:
        status = Status.CRITICAL
    elif flow == threshold or h_score <= 1:
        status = Status.WARNING
    else:
        status = Status.SAFE

    water_needed = (target - flow) * SECONDS_PER_HOUR if flow < target else 0.0

    return ShortagePrediction(
        zone=zone,
        g_score=g_score,
        h_score=h_score,
        f_score=f_score,
        time_to_shortage=h_score,
        status=status,
        water_needed_to_be_safe=water_needed,
        current_flow_rate=flow,
        threshold=threshold,
        target_flow_rate=target,
    )


def predict_shortages(
    zones: Iterable[Zone],
    zone_readings: Iterable[LiveZoneReading] | Mapping[str, LiveZoneReading],
    planning: PlanningInput,
    config: PlanningConfig = DEFAULT_CONFIG,
) -> list[ShortagePrediction]:
    """Predict shortage status for every zone, least safe first.

    Zones with a reading are ordered by descending f-score; ties keep input
    order. Zones without a reading default to ``Safe`` and come last.
    """
    readings = zone_readings if isinstance(zone_readings, Mapping) else index_zone_readings(zone_readings)

    measured: list[ShortagePrediction] = []
    unmeasured: list[ShortagePrediction] = []
    for zone in zones:
        reading = readings.get(zone.id)
        if reading is None:
            logger.warning("No live reading for zone '%s' (%s); defaulting to Safe", zone.id, zone.name)
            unmeasured.append(predict_zone(zone, None, planning, config))
        else:
            measured.append(predict_zone(zone, reading, planning, config))

    measured.sort(key=lambda p: p.f_score, reverse=True)
    return measured + unmeasured
