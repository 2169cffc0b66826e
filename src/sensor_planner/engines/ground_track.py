"""
Ground-track footprint engine.

A FootprintEngine implementation built on orbit-predictor. The satellite is
sampled at a fixed step over the window; for every sensor a cross-track
swath is laid on either side of the ground track and each contiguous run of
samples whose swath touches the area becomes one Region.

Flat-earth offsets (altitude * tan(off-nadir angle)) are used for the swath
edges, which is adequate for footprint previews but not for tasking-grade
geometry. Runs are split where the track crosses the antimeridian.
"""

from datetime import datetime, timezone
from typing import Dict, List, Sequence, Tuple
import asyncio
import logging

import numpy as np
from orbit_predictor.sources import get_predictor_from_tle_lines  # type: ignore[import-untyped]

from ..engine import SensorSpec
from ..regions import Region

logger = logging.getLogger(__name__)

KM_PER_DEG_LAT = 111.32


def _wrap_lon(lon: np.ndarray) -> np.ndarray:
    return (lon + 180.0) % 360.0 - 180.0


class GroundTrackFootprintEngine:
    """
    Footprint engine sampling the SGP4 ground track.

    Args:
        sample_step_seconds: Time between ground-track samples
        max_off_nadir_deg: Swath edges are clipped to this off-nadir angle
    """

    def __init__(self, sample_step_seconds: float = 30.0, max_off_nadir_deg: float = 70.0) -> None:
        if sample_step_seconds <= 0:
            raise ValueError(f"sample_step_seconds must be > 0, got {sample_step_seconds}")
        self.sample_step_seconds = sample_step_seconds
        self.max_off_nadir_deg = max_off_nadir_deg

    def is_ready(self) -> bool:
        return True

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
        return await asyncio.to_thread(
            self.compute_footprints_sync,
            satellite_id,
            satellite_name,
            tle_line1,
            tle_line2,
            sensors,
            start_epoch_seconds,
            end_epoch_seconds,
            area,
        )

    def compute_footprints_sync(
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
        """Blocking variant of ``compute_footprints``."""
        if not sensors or end_epoch_seconds <= start_epoch_seconds:
            return []

        times, lat, lon, alt = self._sample_track(
            tle_line1, tle_line2, start_epoch_seconds, end_epoch_seconds
        )
        perp_east, perp_north = self._cross_track(lat, lon)

        regions: List[Region] = []
        for sensor in sensors:
            inner, outer = self._swath_angles(sensor)
            inner_lat, inner_lon = self._offset(lat, lon, alt, perp_east, perp_north, inner)
            outer_lat, outer_lon = self._offset(lat, lon, alt, perp_east, perp_north, outer)

            touches = self._touches_area(inner_lat, inner_lon, outer_lat, outer_lon, area)
            # A swath segment across the antimeridian cannot be drawn in one polygon
            touches &= ~self._straddles(inner_lon, outer_lon)
            for first, last in self._runs(touches, inner_lon, outer_lon):
                if last - first < 1:
                    continue
                ring = list(zip(inner_lon[first:last + 1], inner_lat[first:last + 1]))
                ring += list(zip(outer_lon[first:last + 1], outer_lat[first:last + 1]))[::-1]
                regions.append(Region(
                    satellite_id=satellite_id,
                    satellite_name=satellite_name,
                    sensor_id=sensor.sensor_id,
                    polygon=tuple((float(x), float(y)) for x, y in ring),
                    start_epoch_seconds=int(times[first]),
                    end_epoch_seconds=int(times[last]),
                    color_hex=sensor.color_hex,
                ))

        logger.debug(f"{satellite_name}: {len(regions)} region(s) over {len(times)} samples")
        return regions

    def _sample_track(
        self, line1: str, line2: str, start: int, end: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        predictor = get_predictor_from_tle_lines((line1, line2))
        times = np.arange(start, end + 1, self.sample_step_seconds)

        llh = np.empty((len(times), 3))
        for i, t in enumerate(times):
            when = datetime.fromtimestamp(float(t), tz=timezone.utc).replace(tzinfo=None)
            llh[i] = predictor.get_position(when).position_llh
        return times, llh[:, 0], llh[:, 1], llh[:, 2]

    @staticmethod
    def _cross_track(lat: np.ndarray, lon: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Unit vector (east, north) pointing right of the direction of travel."""
        if len(lat) < 2:
            return np.zeros_like(lat), np.zeros_like(lat)
        lon_unwrapped = np.degrees(np.unwrap(np.radians(lon)))
        d_east = np.gradient(lon_unwrapped) * np.cos(np.radians(lat))
        d_north = np.gradient(lat)
        norm = np.hypot(d_east, d_north)
        norm[norm == 0] = 1.0
        return d_north / norm, -d_east / norm

    def _swath_angles(self, sensor: SensorSpec) -> Tuple[float, float]:
        """Signed off-nadir angles of the swath edges (positive = right)."""
        center = sensor.init_angle + sensor.side_angle
        half = sensor.observe_angle / 2.0
        limit = self.max_off_nadir_deg
        inner = float(np.clip(center - half, -limit, limit))
        outer = float(np.clip(center + half, -limit, limit))
        return inner, outer

    @staticmethod
    def _offset(
        lat: np.ndarray,
        lon: np.ndarray,
        alt: np.ndarray,
        perp_east: np.ndarray,
        perp_north: np.ndarray,
        angle_deg: float,
    ) -> Tuple[np.ndarray, np.ndarray]:
        distance_km = alt * np.tan(np.radians(angle_deg))
        cos_lat = np.maximum(np.cos(np.radians(lat)), 1e-6)
        new_lat = np.clip(lat + distance_km * perp_north / KM_PER_DEG_LAT, -90.0, 90.0)
        new_lon = _wrap_lon(lon + distance_km * perp_east / (KM_PER_DEG_LAT * cos_lat))
        return new_lat, new_lon

    @staticmethod
    def _touches_area(
        inner_lat: np.ndarray,
        inner_lon: np.ndarray,
        outer_lat: np.ndarray,
        outer_lon: np.ndarray,
        area: Dict[str, float],
    ) -> np.ndarray:
        """
        Samples whose swath segment bounding box overlaps the area.

        Segments crossing the antimeridian are boxed in a 0..360 frame with
        the western edge shifted east, and matched against the area in both
        frames.
        """
        straddles = GroundTrackFootprintEngine._straddles(inner_lon, outer_lon)
        inner_lon = np.where(straddles & (inner_lon < 0), inner_lon + 360.0, inner_lon)
        outer_lon = np.where(straddles & (outer_lon < 0), outer_lon + 360.0, outer_lon)

        seg_west = np.minimum(inner_lon, outer_lon)
        seg_east = np.maximum(inner_lon, outer_lon)
        seg_south = np.minimum(inner_lat, outer_lat)
        seg_north = np.maximum(inner_lat, outer_lat)
        in_lat = (seg_north >= area["south"]) & (seg_south <= area["north"])
        in_lon = (seg_east >= area["west"]) & (seg_west <= area["east"])
        in_lon_shifted = (seg_east >= area["west"] + 360.0) & (seg_west <= area["east"] + 360.0)
        return in_lat & (in_lon | in_lon_shifted)

    @staticmethod
    def _straddles(inner_lon: np.ndarray, outer_lon: np.ndarray) -> np.ndarray:
        return np.abs(inner_lon - outer_lon) > 180.0

    @staticmethod
    def _runs(mask: np.ndarray, inner_lon: np.ndarray, outer_lon: np.ndarray) -> List[Tuple[int, int]]:
        """Inclusive index ranges of contiguous True samples, split at the antimeridian."""
        runs: List[Tuple[int, int]] = []
        first = None
        for i, inside in enumerate(mask):
            wraps = i > 0 and (
                abs(inner_lon[i] - inner_lon[i - 1]) > 180.0
                or abs(outer_lon[i] - outer_lon[i - 1]) > 180.0
            )
            if first is not None and (not inside or wraps):
                runs.append((first, i - 1))
                first = None
            if inside and first is None:
                first = i
        if first is not None:
            runs.append((first, len(mask) - 1))
        return runs
