import logging

import pytest

from tubig.network import DuplicateIdError, SupplyNetwork, ValidationError
from tubig.pipeline import PlanResult
from tubig.topology import EligibilityEntry, Station, TowerStationLink, Zone


@pytest.fixture
def network(zones, towers, stations, eligibility, links) -> SupplyNetwork:
    return SupplyNetwork.from_records(
        zones=zones,
        towers=towers,
        stations=stations,
        eligibility=eligibility,
        links=links,
    )


class TestSupplyNetworkBuild:
    def test_from_records(self, network):
        assert [z.id for z in network.zones] == ["B1", "B2", "B3", "B4", "B5"]
        assert [t.id for t in network.towers] == ["WT1", "WT2", "WT3"]
        assert len(network.eligibility) == 20
        assert len(network.links) == 4

    def test_duplicate_zone_rejected(self, network):
        with pytest.raises(DuplicateIdError, match="Zone 'B1' already exists"):
            network.add_zone(Zone("B1", "Again", (14.6, 121.1)))

    def test_duplicate_station_rejected(self, network, stations):
        with pytest.raises(DuplicateIdError):
            network.add_station(stations[0])

    def test_same_id_allowed_across_kinds(self, network):
        network.add_zone(Zone("PS1", "Zone named like a station", (14.6, 121.1)))
        network.validate()


class TestSupplyNetworkValidate:
    def test_valid_network(self, network):
        network.validate()

    def test_reports_every_unknown_reference(self, network):
        network.add_link(TowerStationLink("WT9", "PS9"))
        network.add_eligibility(EligibilityEntry("PS1", "B9", 1.0))
        with pytest.raises(ValidationError) as excinfo:
            network.validate()
        message = str(excinfo.value)
        assert "tower 'WT9' does not exist" in message
        assert "station 'PS9' does not exist" in message
        assert "zone 'B9' does not exist" in message
        assert len(message.splitlines()) == 3

    def test_duplicate_eligibility_pair(self, network):
        network.add_eligibility(EligibilityEntry("PS1", "B1", 9.0))
        with pytest.raises(ValidationError, match="listed twice"):
            network.validate()

    def test_warns_about_unfed_station(self, network, caplog):
        network.add_station(Station("PS5", "Orphan", (14.6, 121.1), 10))
        with caplog.at_level(logging.WARNING, logger="tubig.network.supply_network"):
            network.validate()
        assert "PS5" in caplog.text

    def test_warns_about_unreachable_zone(self, network, caplog):
        network.add_zone(Zone("B6", "Isolated", (14.6, 121.1)))
        with caplog.at_level(logging.WARNING, logger="tubig.network.supply_network"):
            network.validate()
        assert "B6" in caplog.text


class TestSupplyNetworkQueries:
    def test_eligible_stations_nearest_first(self, network):
        assert [e.station_id for e in network.eligible_stations("B1")] == ["PS1", "PS2", "PS4", "PS3"]

    def test_towers_feeding(self, network):
        assert network.towers_feeding("PS1") == ["WT1"]
        assert network.towers_feeding("PS4") == ["WT1"]
        assert network.towers_feeding("PS9") == []

    def test_reachable_zones(self, network):
        assert network.reachable_zones("WT2") == ["B1", "B2", "B3", "B4", "B5"]
        assert network.reachable_zones("WT9") == []

    def test_unserved_zones(self, network):
        network.add_zone(Zone("B6", "Isolated", (14.6, 121.1)))
        network.validate()
        assert network.unserved_zones() == ["B6"]

    def test_leg_length(self, network):
        length = network.leg_length("PS3", "B5")
        assert 3.0 < length < 4.5
        assert network.leg_length("PS3", "B9") is None


class TestSupplyNetworkRun:
    def test_runs_pipeline(self, network, zone_readings, tower_readings, planning):
        result = network.run(zone_readings, tower_readings, planning)
        assert isinstance(result, PlanResult)
        assert [a.station.id for a in result.assignments] == ["PS3", "PS1"]

    def test_invalid_topology_blocks_run(self, network, zone_readings, tower_readings, planning):
        network.add_link(TowerStationLink("WT9", "PS1"))
        with pytest.raises(ValidationError):
            network.run(zone_readings, tower_readings, planning)
