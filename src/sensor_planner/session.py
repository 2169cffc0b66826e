"""
Planning session orchestration.

A PlanningSession ties one interaction together: it holds the operator's
drawn area, reads the active sensor set from the selection model, calls the
footprint engine once per satellite and returns an ordered region list.

The session is pull-based. Callers re-run it whenever the selection or area
changes; every run returns a complete replacement result and the session
keeps no result state, so overlapping runs cannot interfere.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
import logging
import math

from .config import PlanningConfig
from .engine import FootprintEngine, SensorSpec
from .errors import EngineUnavailable, NoAreaDefined, NotFound
from .regions import Region, RegionAggregator
from .tree import TreeNode, TreeSelectionModel
from .utils import days, get_current_utc, utc_midnight

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanningArea:
    """Geographic bounding box in degrees."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def is_well_formed(self) -> bool:
        values = (self.min_lon, self.min_lat, self.max_lon, self.max_lat)
        if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
            return False
        return (
            -180.0 <= self.min_lon < self.max_lon <= 180.0
            and -90.0 <= self.min_lat < self.max_lat <= 90.0
        )

    def to_bounds(self) -> Dict[str, float]:
        """Engine view of the area."""
        return {
            "west": self.min_lon,
            "east": self.max_lon,
            "north": self.max_lat,
            "south": self.min_lat,
        }

    @classmethod
    def from_bounds(cls, bounds: Mapping[str, float]) -> "PlanningArea":
        return cls(
            min_lon=bounds["west"],
            min_lat=bounds["south"],
            max_lon=bounds["east"],
            max_lat=bounds["north"],
        )


@dataclass(frozen=True)
class PlanningHorizon:
    """Time window of a planning request, in epoch seconds."""

    start_epoch_seconds: int
    end_epoch_seconds: int

    @classmethod
    def from_days(cls, day_count: int, now: Optional[datetime] = None) -> "PlanningHorizon":
        """Window starting at UTC midnight of ``now`` spanning ``day_count`` days."""
        if day_count < 1:
            raise ValueError(f"Planning horizon must be at least one day, got {day_count}")
        start = utc_midnight(now or get_current_utc())
        end = start + days(day_count)
        return cls(int(start.timestamp()), int(end.timestamp()))


@dataclass(frozen=True)
class SkippedSatellite:
    """A satellite group left out of a run, with the reason."""

    satellite_id: str
    satellite_name: str
    catalog_id: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "satellite_id": self.satellite_id,
            "satellite_name": self.satellite_name,
            "catalog_id": self.catalog_id,
            "reason": self.reason,
        }


@dataclass
class PlanningResult:
    """Outcome of one planning run."""

    regions: List[Region] = field(default_factory=list)
    skipped_satellites: List[SkippedSatellite] = field(default_factory=list)
    horizon: Optional[PlanningHorizon] = None

    @property
    def by_satellite(self) -> Dict[str, List[Region]]:
        return RegionAggregator.group_by_satellite(self.regions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regions": [region.to_dict() for region in self.regions],
            "skipped_satellites": [skip.to_dict() for skip in self.skipped_satellites],
            "horizon": (
                {
                    "start_epoch_seconds": self.horizon.start_epoch_seconds,
                    "end_epoch_seconds": self.horizon.end_epoch_seconds,
                }
                if self.horizon
                else None
            ),
        }


def _first_number(attributes: Mapping[str, Any], keys: Tuple[str, ...], default: float) -> float:
    for key in keys:
        value = attributes.get(key)
        if value is not None:
            return float(value)
    return default


class PlanningSession:
    """
    Orchestrates footprint computation for the current selection and area.

    Args:
        tree: Selection model providing the active sensor set
        engine: Footprint engine; None is treated as unavailable
        config: Planning defaults (horizon length, sensor fallbacks)
        clock: Returns the current UTC time; used for the horizon
    """

    def __init__(
        self,
        tree: TreeSelectionModel,
        engine: Optional[FootprintEngine],
        config: Optional[PlanningConfig] = None,
        clock: Callable[[], datetime] = get_current_utc,
    ) -> None:
        self.tree = tree
        self.engine = engine
        self.config = config or PlanningConfig()
        self._clock = clock
        self._area: Optional[PlanningArea] = None

    @property
    def area(self) -> Optional[PlanningArea]:
        return self._area

    def set_area(self, area: PlanningArea) -> None:
        """Replace the held area with a newly drawn one."""
        if area is None or not area.is_well_formed():
            raise NoAreaDefined(f"Planning area is malformed: {area}")
        self._area = area
        logger.info(f"Planning area set to {area.to_bounds()}")

    def clear_area(self) -> None:
        self._area = None
        logger.info("Planning area cleared")

    async def run_current(self, horizon_days: Optional[int] = None) -> PlanningResult:
        """Run against the area held by the session."""
        return await self.run(self._area, horizon_days)

    async def run(
        self, area: Optional[PlanningArea], horizon_days: Optional[int] = None
    ) -> PlanningResult:
        """
        Compute footprints for the selected sensors inside ``area``.

        Args:
            area: Area of interest
            horizon_days: Whole-day horizon length (defaults to config)

        Returns:
            PlanningResult with regions sorted by start time and the
            satellites skipped for missing element data

        Raises:
            NoAreaDefined: ``area`` is missing or malformed
            EngineUnavailable: No engine, or the engine is not ready
        """
        if area is None or not area.is_well_formed():
            raise NoAreaDefined()

        if self.engine is None or not self.engine.is_ready():
            raise EngineUnavailable()

        horizon = PlanningHorizon.from_days(
            horizon_days if horizon_days is not None else self.config.horizon_days,
            self._clock(),
        )

        selected = self.tree.selected_sensor_ids()
        if not selected:
            logger.info("No sensors selected, returning empty result")
            return PlanningResult(horizon=horizon)

        result = PlanningResult(horizon=horizon)
        raw_regions: List[Region] = []
        bounds = area.to_bounds()

        for satellite, sensors in self._group_by_satellite(selected):
            if not satellite.has_tle:
                logger.warning(f"Skipping satellite {satellite.name}: no TLE data")
                result.skipped_satellites.append(SkippedSatellite(
                    satellite_id=satellite.id,
                    satellite_name=satellite.name,
                    catalog_id=satellite.catalog_id or "",
                    reason="missing TLE data",
                ))
                continue

            specs = [self._sensor_spec(sensor) for sensor in sensors]
            logger.info(
                f"Requesting footprints for {satellite.name} with {len(specs)} sensor(s)"
            )
            regions = await self.engine.compute_footprints(
                satellite.id,
                satellite.name,
                satellite.tle1,
                satellite.tle2,
                specs,
                horizon.start_epoch_seconds,
                horizon.end_epoch_seconds,
                bounds,
            )
            raw_regions.extend(regions or [])

        result.regions = RegionAggregator.aggregate(raw_regions)
        logger.info(
            f"Planning run produced {len(result.regions)} region(s), "
            f"{len(result.skipped_satellites)} satellite(s) skipped"
        )
        return result

    def _group_by_satellite(self, selected: set) -> List[Tuple[TreeNode, List[TreeNode]]]:
        """Selected sensors grouped by owning satellite, in tree order."""
        groups: Dict[str, Tuple[TreeNode, List[TreeNode]]] = {}
        for satellite in self.tree.satellites():
            for sensor in self.tree.sensors_of(satellite.id):
                if sensor.id not in selected:
                    continue
                try:
                    owner = self.tree.find_satellite_by_catalog_id(sensor.satellite_catalog_id)
                except NotFound:
                    logger.warning(
                        f"Sensor {sensor.id} references unknown satellite "
                        f"{sensor.satellite_catalog_id}, skipping"
                    )
                    continue
                groups.setdefault(owner.id, (owner, []))[1].append(sensor)
        return list(groups.values())

    def _sensor_spec(self, sensor: TreeNode) -> SensorSpec:
        attributes = sensor.attributes
        return SensorSpec(
            sensor_id=sensor.id,
            name=sensor.name,
            satellite_catalog_id=sensor.satellite_catalog_id or "",
            side_angle=_first_number(
                attributes, ("left_side_angle",),
                self.config.default_side_angle_deg,
            ),
            observe_angle=_first_number(
                attributes, ("observe_angle",), self.config.default_observe_angle_deg
            ),
            init_angle=_first_number(
                attributes, ("init_angle",), self.config.default_init_angle_deg
            ),
            color_hex=sensor.color_hex or self.config.default_color,
        )
