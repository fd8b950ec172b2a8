import pytest

from tubig.telemetry import LiveStationReading, LiveTowerReading, LiveZoneReading, PlanningInput
from tubig.topology import EligibilityEntry, Station, Tower, TowerStationLink, Zone


@pytest.fixture
def towers() -> list[Tower]:
    return [
        Tower("WT1", "Marikina Water Tower", (14.6500, 121.1000), max_capacity=150_000),
        Tower("WT2", "Antipolo Water Tower", (14.6200, 121.1200), max_capacity=150_000),
        Tower("WT3", "Pasig Water Tower", (14.6100, 121.1000), max_capacity=150_000),
    ]


@pytest.fixture
def stations() -> list[Station]:
    return [
        Station("PS1", "San Mateo Pumping Station", (14.6787, 121.1110), 40, priority=10, population_served=50_000),
        Station("PS2", "Modesta Pumping Station", (14.6702, 121.1378), 35, priority=8, population_served=30_000),
        Station("PS3", "Pasig Pumping Station", (14.6131, 121.1022), 30, priority=9, population_served=40_000),
        Station("PS4", "Antipolo Pumping Station", (14.6224, 121.1213), 45, priority=7, population_served=35_000),
    ]


@pytest.fixture
def zones() -> list[Zone]:
    return [
        Zone("B1", "Tumana", (14.6577, 121.0965)),
        Zone("B2", "Barangka", (14.6381, 121.0840)),
        Zone("B3", "Nangka", (14.6681, 121.1089)),
        Zone("B4", "Fortune", (14.6590, 121.1275)),
        Zone("B5", "Concepcion Uno", (14.6470, 121.1049)),
    ]


@pytest.fixture
def zone_by_id(zones) -> dict[str, Zone]:
    return {zone.id: zone for zone in zones}


@pytest.fixture
def eligibility() -> list[EligibilityEntry]:
    distances = {
        "PS1": {"B1": 2.1, "B2": 3.2, "B3": 1.5, "B4": 2.8, "B5": 4.2},
        "PS2": {"B1": 3.2, "B2": 4.8, "B3": 2.8, "B4": 1.1, "B5": 3.5},
        "PS3": {"B1": 4.1, "B2": 2.5, "B3": 5.2, "B4": 6.1, "B5": 1.8},
        "PS4": {"B1": 3.8, "B2": 4.2, "B3": 2.9, "B4": 2.3, "B5": 2.7},
    }
    return [
        EligibilityEntry(station_id, zone_id, distance, cost=distance * 10)
        for station_id, row in distances.items()
        for zone_id, distance in row.items()
    ]


@pytest.fixture
def links() -> list[TowerStationLink]:
    return [
        TowerStationLink("WT1", "PS1", efficiency=0.95),
        TowerStationLink("WT2", "PS2", efficiency=0.92),
        TowerStationLink("WT3", "PS3", efficiency=0.94),
        TowerStationLink("WT1", "PS4", efficiency=0.93),
    ]


@pytest.fixture
def zone_readings() -> list[LiveZoneReading]:
    return [
        LiveZoneReading("B1", current_flow_rate=25, drop_rate=2),
        LiveZoneReading("B2", current_flow_rate=20, drop_rate=1.5),
        LiveZoneReading("B3", current_flow_rate=35, drop_rate=1.8),
        LiveZoneReading("B4", current_flow_rate=15, drop_rate=2.5),
        LiveZoneReading("B5", current_flow_rate=28, drop_rate=1.2),
    ]


@pytest.fixture
def tower_readings() -> list[LiveTowerReading]:
    return [
        LiveTowerReading("WT1", current_water=80_000),
        LiveTowerReading("WT2", current_water=120_000),
        LiveTowerReading("WT3", current_water=90_000),
    ]


@pytest.fixture
def station_readings() -> list[LiveStationReading]:
    return [
        LiveStationReading("PS1", current_flow_rate=30),
        LiveStationReading("PS2", current_flow_rate=25),
        LiveStationReading("PS3", current_flow_rate=28),
    ]


@pytest.fixture
def planning() -> PlanningInput:
    return PlanningInput(duration_hours=3)
