"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- Shared fixtures for common test setup
- A recording substitute for the footprint engine
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
import yaml
from _pytest.config import Config
from _pytest.python import Function

# Add src and project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from sensor_planner.engine import SensorSpec  # noqa: E402
from sensor_planner.regions import Region  # noqa: E402
from sensor_planner.session import PlanningArea  # noqa: E402
from sensor_planner.tree import TreeSelectionModel  # noqa: E402


# =============================================================================
# COLLECTION HOOKS
# =============================================================================


def pytest_collection_modifyitems(config: Config, items: List[Function]) -> None:
    """Auto-mark tests under tests/integration."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks integration tests")


# =============================================================================
# ENGINE SUBSTITUTE
# =============================================================================


class FakeFootprintEngine:
    """Records compute_footprints calls and returns canned regions per satellite."""

    def __init__(
        self,
        regions_by_satellite: Optional[Dict[str, List[Region]]] = None,
        ready: bool = True,
    ) -> None:
        self.regions_by_satellite = regions_by_satellite or {}
        self.ready = ready
        self.calls: List[Dict[str, Any]] = []

    def is_ready(self) -> bool:
        return self.ready

    async def compute_footprints(
        self,
        satellite_id: str,
        satellite_name: str,
        tle_line1: str,
        tle_line2: str,
        sensors: Sequence[SensorSpec],
        start_epoch_seconds: int,
        end_epoch_seconds: int,
        area: Dict[str, float],
    ) -> List[Region]:
        self.calls.append({
            "satellite_id": satellite_id,
            "satellite_name": satellite_name,
            "tle_line1": tle_line1,
            "tle_line2": tle_line2,
            "sensors": list(sensors),
            "start": start_epoch_seconds,
            "end": end_epoch_seconds,
            "area": area,
        })
        return list(self.regions_by_satellite.get(satellite_id, []))


def make_region(
    satellite_id: str = "satellite:A",
    sensor_id: str = "sensor:a1",
    start: int = 100,
    end: Optional[int] = None,
    polygon: Optional[Sequence[Tuple[float, float]]] = None,
) -> Region:
    return Region(
        satellite_id=satellite_id,
        satellite_name=satellite_id.split(":")[-1],
        sensor_id=sensor_id,
        polygon=tuple(polygon or ((20.0, 35.0), (21.0, 35.0), (21.0, 36.0))),
        start_epoch_seconds=start,
        end_epoch_seconds=end if end is not None else start + 60,
        color_hex="#56B4E9",
    )


# =============================================================================
# FIXTURES - Common test setup
# =============================================================================


@pytest.fixture
def sample_tle_lines() -> Tuple[str, str]:
    """Sample TLE data for ICEYE-X44."""
    return (
        "1 62707U 25009DC  25306.22031033  .00004207  00000+0  39848-3 0  9995",
        "2 62707  97.7269  23.9854 0002193 135.9671 224.1724 14.94137357 66022",
    )


@pytest.fixture
def iss_tle_lines() -> Tuple[str, str]:
    """Sample TLE data for the ISS."""
    return (
        "1 25544U 98067A   24001.00000000  .00002182  00000-0  40864-4 0  9990",
        "2 25544  51.6461 339.7939 0001220  92.8340 267.3124 15.49309239426382",
    )


@pytest.fixture
def tree_payload(sample_tle_lines: Tuple[str, str]) -> Dict[str, Any]:
    """Satellite A has TLE and three sensors, B lacks TLE, C has no sensors."""
    line1, line2 = sample_tle_lines
    return {
        "satellites": [
            {
                "id": "A",
                "catalog_id": "62707",
                "name": "ICEYE-X44",
                "color_hex": "#E69F00",
                "tle1": line1,
                "tle2": line2,
                "sensors": [
                    {"id": "a1", "name": "Stripmap", "left_side_angle": 25.0,
                     "observe_angle": 5.0, "init_angle": 1.5, "resolution": 3.0,
                     "color_hex": "#112233"},
                    {"id": "a2", "name": "Spotlight", "resolution": 1.0},
                    {"id": "a3", "name": "ScanSAR", "observe_angle": 20.0},
                ],
            },
            {
                "id": "B",
                "catalog_id": "39084",
                "name": "LANDSAT 8",
                "tle1": "",
                "tle2": None,
                "sensors": [{"id": "b1", "name": "OLI", "resolution": 30.0}],
            },
            {"id": "C", "catalog_id": "25544", "name": "ISS", "sensors": []},
        ]
    }


@pytest.fixture
def tree(tree_payload: Dict[str, Any]) -> TreeSelectionModel:
    return TreeSelectionModel.from_payload(tree_payload)


@pytest.fixture
def fixed_now() -> datetime:
    """Mid-afternoon UTC so horizon truncation is observable."""
    return datetime(2025, 11, 8, 15, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def area() -> PlanningArea:
    return PlanningArea(min_lon=20.0, min_lat=34.0, max_lon=30.0, max_lat=42.0)


@pytest.fixture
def fake_engine() -> FakeFootprintEngine:
    return FakeFootprintEngine()


@pytest.fixture
def catalog_file(tmp_path: Path, tree_payload: Dict[str, Any]) -> Path:
    """Satellite catalog YAML in the SatelliteManager format."""
    satellites = []
    for sat in tree_payload["satellites"]:
        satellites.append({
            "catalog_id": sat["catalog_id"],
            "name": sat["name"],
            "color_hex": sat.get("color_hex"),
            "tle1": sat.get("tle1") or "",
            "tle2": sat.get("tle2") or "",
            "sensors": [
                {k: v for k, v in sensor.items()} for sensor in sat["sensors"]
            ],
        })
    path = tmp_path / "satellites.yaml"
    path.write_text(yaml.safe_dump({
        "satellites": satellites,
        "tle_sites": [{"site": "test", "url": "https://example.invalid/tle.txt"}],
    }))
    return path


@pytest.fixture
def region_factory():
    """Build Regions with sensible defaults."""
    return make_region


@pytest.fixture
def engine_factory():
    """Build FakeFootprintEngine instances with canned output."""
    return FakeFootprintEngine
