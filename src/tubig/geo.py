import math
from collections.abc import Iterable

from tubig.topology import EligibilityEntry, Station, Zone

EARTH_RADIUS_KM = 6_371.0


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two (lat, lon) points in degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_dphi = math.radians(lat2 - lat1) / 2
    half_dlambda = math.radians(lon2 - lon1) / 2
    h = math.sin(half_dphi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
    # sqrt(h) can round past 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def eligibility_from_locations(
    stations: Iterable[Station],
    zones: Iterable[Zone],
    max_distance_km: float,
    cost_per_km: float = 1.0,
) -> list[EligibilityEntry]:
    """Derive an eligibility matrix from straight-line distances.

    A station may serve a zone when the two lie within ``max_distance_km``
    of each other. Cost is distance times ``cost_per_km``. Entries are
    ordered station-major in the order the inputs are given.
    """
    if max_distance_km <= 0:
        raise ValueError("max_distance_km must be positive")
    if cost_per_km < 0:
        raise ValueError("cost_per_km cannot be negative")

    zone_list = list(zones)
    entries: list[EligibilityEntry] = []
    for station in stations:
        for zone in zone_list:
            distance = haversine(*station.location, *zone.location)
            if distance <= max_distance_km:
                entries.append(
                    EligibilityEntry(
                        station_id=station.id,
                        zone_id=zone.id,
                        distance=distance,
                        cost=distance * cost_per_km,
                    )
                )
    return entries
