"""
Footprint regions and their presentation ordering.

A Region is the ground polygon and time window during which one sensor on
one satellite can observe inside the planning area. The aggregator functions
are pure: they return new containers and never mutate their input.
"""

from dataclasses import asdict, dataclass, replace
from typing import Dict, Iterable, List, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

LonLat = Tuple[float, float]


@dataclass(frozen=True)
class Region:
    """Engine output for one sensor coverage window."""

    satellite_id: str
    satellite_name: str
    sensor_id: str
    polygon: Tuple[LonLat, ...]
    start_epoch_seconds: int
    end_epoch_seconds: int
    color_hex: str

    @property
    def duration_seconds(self) -> int:
        return self.end_epoch_seconds - self.start_epoch_seconds

    def closed_ring(self) -> List[List[float]]:
        """Polygon as a closed ``[lon, lat]`` ring (GeoJSON order)."""
        ring = [[lon, lat] for lon, lat in self.polygon]
        if ring and ring[0] != ring[-1]:
            ring.append(list(ring[0]))
        return ring

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["polygon"] = [list(point) for point in self.polygon]
        return data


class RegionAggregator:
    """Normalizes, orders and groups raw engine output."""

    @staticmethod
    def normalize(regions: Iterable[Region]) -> List[Region]:
        """
        Drop explicit closing vertices and discard degenerate polygons.

        Regions with fewer than three distinct vertices after dropping the
        closing vertex carry no usable geometry and are skipped.
        """
        normalized: List[Region] = []
        for region in regions:
            points = tuple((float(lon), float(lat)) for lon, lat in region.polygon)
            if len(points) > 1 and points[0] == points[-1]:
                points = points[:-1]
            if len(set(points)) < 3:
                logger.warning(
                    f"Discarding degenerate region for sensor {region.sensor_id} "
                    f"({len(points)} vertices)"
                )
                continue
            if points != region.polygon:
                region = replace(region, polygon=points)
            normalized.append(region)
        return normalized

    @staticmethod
    def sort_by_start(regions: Sequence[Region]) -> List[Region]:
        """Stable ascending sort by start time; ties keep input order."""
        return sorted(regions, key=lambda region: region.start_epoch_seconds)

    @staticmethod
    def index_by_satellite(regions: Sequence[Region]) -> Dict[str, List[int]]:
        """Positions of each satellite's regions, keyed in order of first appearance."""
        indices: Dict[str, List[int]] = {}
        for i, region in enumerate(regions):
            indices.setdefault(region.satellite_id, []).append(i)
        return indices

    @classmethod
    def group_by_satellite(cls, regions: Iterable[Region]) -> Dict[str, List[Region]]:
        """Regions keyed by satellite id, in order of first appearance."""
        regions = list(regions)
        return {
            satellite_id: [regions[i] for i in positions]
            for satellite_id, positions in cls.index_by_satellite(regions).items()
        }

    @classmethod
    def aggregate(cls, regions: Iterable[Region]) -> List[Region]:
        return cls.sort_by_start(cls.normalize(regions))
