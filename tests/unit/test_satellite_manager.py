"""
Tests for the satellite catalog manager.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests
import yaml

from backend.satellite_manager import SatelliteManager, normalize_catalog_id
from sensor_planner.tle_parser import OrbitalElementRecord
from sensor_planner.tree import TreeSelectionModel

LANDSAT_L1 = "1 39084U 13008A   25306.50000000  .00000400  00000-0  99000-4 0  9991"
LANDSAT_L2 = "2 39084  98.2000 100.0000 0001000  90.0000 270.0000 14.57000000600000"


@pytest.fixture
def manager(catalog_file):
    return SatelliteManager(str(catalog_file))


def _response(text):
    response = MagicMock()
    response.text = text
    response.raise_for_status.return_value = None
    return response


class TestNormalizeCatalogId:
    @pytest.mark.parametrize("raw,expected", [
        ("00005", "5"),
        (" 25544 ", "25544"),
        (25544, "25544"),
        ("ABC12", "ABC12"),
    ])
    def test_normalize(self, raw, expected) -> None:
        assert normalize_catalog_id(raw) == expected


class TestLoading:
    """Tests for catalog persistence."""

    def test_loads_catalog(self, manager) -> None:
        satellites = manager.get_satellites()
        assert [s.catalog_id for s in satellites] == ["62707", "39084", "25544"]
        assert [s.id for s in satellites[0].sensors] == ["a1", "a2", "a3"]
        assert len(manager.tle_sites) == 1

    def test_missing_file_creates_default(self, tmp_path) -> None:
        path = tmp_path / "new" / "satellites.yaml"
        manager = SatelliteManager(str(path))

        assert manager.get_satellites() == []
        assert path.exists()
        assert manager.tle_sites[0]["url"].startswith("https://celestrak.org/")

    def test_lookup_ignores_leading_zeros(self, manager) -> None:
        assert manager.get_satellite_by_catalog_id("039084").name == "LANDSAT 8"
        assert manager.get_satellite_by_catalog_id("11111") is None

    def test_tree_payload_builds_tree(self, manager) -> None:
        """The payload loads into a selection model keyed by catalog id."""
        tree = TreeSelectionModel.from_payload(manager.tree_payload())

        assert [s.id for s in tree.satellites()] == [
            "satellite:62707", "satellite:39084", "satellite:25544",
        ]
        assert tree.find_by_id("sensor:a1").satellite_catalog_id == "62707"
        assert tree.find_by_id("satellite:62707").has_tle


class TestApplyTleRecords:
    """Tests for storing TLE updates."""

    def test_updates_and_persists(self, manager, catalog_file) -> None:
        record = OrbitalElementRecord("39084", 1700000000, LANDSAT_L1, LANDSAT_L2)

        summary = manager.apply_tle_records([record])

        assert summary.inserted == 1
        assert summary.skipped == 0
        saved = yaml.safe_load(catalog_file.read_text())
        landsat = next(s for s in saved["satellites"] if s["catalog_id"] == "39084")
        assert landsat["tle1"] == LANDSAT_L1
        assert landsat["tle_epoch_seconds"] == 1700000000

    def test_reload_sees_update(self, manager, catalog_file) -> None:
        manager.apply_tle_records([OrbitalElementRecord("39084", 1, LANDSAT_L1, LANDSAT_L2)])
        reloaded = SatelliteManager(str(catalog_file))
        assert reloaded.get_satellite_by_catalog_id("39084").tle2 == LANDSAT_L2

    def test_unknown_satellite_skipped(self, manager, catalog_file) -> None:
        before = catalog_file.read_text()
        summary = manager.apply_tle_records([
            OrbitalElementRecord("99999", 1, LANDSAT_L1, LANDSAT_L2),
        ])

        assert summary.inserted == 0
        assert summary.not_found == ["99999"]
        assert "Failed to insert any TLE records" in summary.message
        assert catalog_file.read_text() == before

    def test_message_counts(self, manager) -> None:
        summary = manager.apply_tle_records([
            OrbitalElementRecord("39084", 1, LANDSAT_L1, LANDSAT_L2),
            OrbitalElementRecord("99999", 1, LANDSAT_L1, LANDSAT_L2),
        ])
        assert summary.message == "Successfully updated 1 TLE record(s) (1 skipped)"
        assert "sites_count" not in summary.to_dict()

    def test_tle_age(self, manager) -> None:
        assert manager.get_tle_age_days("39084") is None
        manager.apply_tle_records([OrbitalElementRecord("39084", 0, LANDSAT_L1, LANDSAT_L2)])
        assert manager.get_tle_age_days("39084") > 365


class TestAutoUpdate:
    """Tests for fetching remote TLE feeds."""

    def test_auto_update(self, manager) -> None:
        feed = f"LANDSAT 8\n{LANDSAT_L1}\n{LANDSAT_L2}\nUNKNOWN\n1 99999U\n2 99999\n"
        with patch('backend.satellite_manager.requests.get', return_value=_response(feed)) as mock_get:
            summary = manager.auto_update_tles()

        mock_get.assert_called_once_with("https://example.invalid/tle.txt", timeout=10)
        assert summary.inserted == 1
        assert summary.total == 2
        assert summary.sites_count == 1
        assert summary.failed_sites == []
        assert "from 1 site(s)" in summary.message

    def test_failed_site(self, manager) -> None:
        with patch(
            'backend.satellite_manager.requests.get',
            side_effect=requests.ConnectionError("down"),
        ):
            summary = manager.auto_update_tles()

        assert summary.total == 0
        assert summary.failed_sites == ["test"]
        assert summary.sites_count == 0

    def test_apply_site_records(self, manager) -> None:
        """Fetched records and failed sites combine into one summary."""
        records = [OrbitalElementRecord("39084", 1, LANDSAT_L1, LANDSAT_L2)]

        summary = manager.apply_site_records(records, ["test"])

        assert summary.inserted == 1
        assert summary.sites_count == 0
        assert summary.failed_sites == ["test"]
        assert manager.get_satellite_by_catalog_id("39084").tle1 == LANDSAT_L1
