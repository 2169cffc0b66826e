"""
Tests for region normalization and ordering.
"""

from sensor_planner.regions import Region, RegionAggregator


class TestRegion:
    """Tests for the Region value object."""

    def test_duration(self, region_factory) -> None:
        assert region_factory(start=100, end=160).duration_seconds == 60

    def test_closed_ring(self, region_factory) -> None:
        """GeoJSON rings repeat the first vertex at the end."""
        ring = region_factory().closed_ring()
        assert ring[0] == ring[-1]
        assert len(ring) == 4

    def test_to_dict(self, region_factory) -> None:
        data = region_factory(start=5).to_dict()
        assert data["start_epoch_seconds"] == 5
        assert data["polygon"][0] == [20.0, 35.0]


class TestSortByStart:
    """Tests for start-time ordering."""

    def test_ascending(self, region_factory) -> None:
        """Regions come back ordered by start time."""
        regions = [region_factory(start=s) for s in (300, 100, 200)]
        ordered = RegionAggregator.sort_by_start(regions)
        assert [r.start_epoch_seconds for r in ordered] == [100, 200, 300]

    def test_stable_for_ties(self, region_factory) -> None:
        """Equal start times keep their input order."""
        regions = [
            region_factory(sensor_id="sensor:x", start=100),
            region_factory(sensor_id="sensor:y", start=50),
            region_factory(sensor_id="sensor:z", start=100),
        ]
        ordered = RegionAggregator.sort_by_start(regions)
        assert [r.sensor_id for r in ordered] == ["sensor:y", "sensor:x", "sensor:z"]

    def test_idempotent(self, region_factory) -> None:
        regions = [region_factory(start=s) for s in (3, 1, 2, 1)]
        once = RegionAggregator.sort_by_start(regions)
        assert RegionAggregator.sort_by_start(once) == once

    def test_input_not_mutated(self, region_factory) -> None:
        regions = [region_factory(start=s) for s in (300, 100)]
        RegionAggregator.sort_by_start(regions)
        assert [r.start_epoch_seconds for r in regions] == [300, 100]

    def test_empty(self) -> None:
        assert RegionAggregator.sort_by_start([]) == []


class TestGroupBySatellite:
    """Tests for grouping."""

    def test_first_appearance_order(self, region_factory) -> None:
        """Groups appear in the order their satellite first shows up."""
        regions = [
            region_factory(satellite_id="satellite:B", start=1),
            region_factory(satellite_id="satellite:A", start=2),
            region_factory(satellite_id="satellite:B", start=3),
        ]
        groups = RegionAggregator.group_by_satellite(regions)

        assert list(groups) == ["satellite:B", "satellite:A"]
        assert [r.start_epoch_seconds for r in groups["satellite:B"]] == [1, 3]

    def test_index_by_satellite(self, region_factory) -> None:
        regions = [
            region_factory(satellite_id="satellite:B", start=1),
            region_factory(satellite_id="satellite:A", start=2),
            region_factory(satellite_id="satellite:B", start=3),
        ]
        assert RegionAggregator.index_by_satellite(regions) == {
            "satellite:B": [0, 2],
            "satellite:A": [1],
        }

    def test_group_by_satellite_accepts_generator(self, region_factory) -> None:
        regions = (region_factory(satellite_id=f"satellite:{s}") for s in "ABA")
        groups = RegionAggregator.group_by_satellite(regions)
        assert {k: len(v) for k, v in groups.items()} == {"satellite:A": 2, "satellite:B": 1}


class TestNormalize:
    """Tests for polygon clean-up."""

    def test_drops_closing_vertex(self, region_factory) -> None:
        region = region_factory(polygon=[(0, 0), (1, 0), (1, 1), (0, 0)])
        normalized = RegionAggregator.normalize([region])

        assert normalized[0].polygon == ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0))

    def test_drops_degenerate(self, region_factory) -> None:
        """Fewer than three distinct vertices is not a polygon."""
        regions = [
            region_factory(polygon=[(0, 0), (1, 1), (0, 0)]),
            region_factory(polygon=[(0, 0), (0, 0), (0, 0), (0, 0)]),
            region_factory(sensor_id="sensor:ok"),
        ]
        normalized = RegionAggregator.normalize(regions)

        assert [r.sensor_id for r in normalized] == ["sensor:ok"]

    def test_unchanged_region_kept_as_is(self, region_factory) -> None:
        region = region_factory()
        assert RegionAggregator.normalize([region])[0] is region

    def test_originals_not_mutated(self, region_factory) -> None:
        region = region_factory(polygon=[(0, 0), (1, 0), (1, 1), (0, 0)])
        RegionAggregator.normalize([region])
        assert len(region.polygon) == 4


class TestAggregate:
    """Tests for the combined pipeline."""

    def test_normalizes_and_sorts(self, region_factory) -> None:
        regions = [
            region_factory(start=300),
            region_factory(start=100, polygon=[(0, 0), (0, 0), (0, 0)]),
            region_factory(start=200),
        ]
        aggregated = RegionAggregator.aggregate(regions)

        assert [r.start_epoch_seconds for r in aggregated] == [200, 300]
        assert all(isinstance(r, Region) for r in aggregated)

    def test_accepts_generators(self, region_factory) -> None:
        aggregated = RegionAggregator.aggregate(region_factory(start=s) for s in (2, 1))
        assert [r.start_epoch_seconds for r in aggregated] == [1, 2]
