"""
Port interface for the external footprint engine.

The planning core never propagates orbits or computes sensor geometry
itself; it hands one satellite's element set and selected sensors to an
engine implementing this protocol and receives Regions back.
"""

from dataclasses import asdict, dataclass
from typing import Dict, List, Protocol, Sequence, runtime_checkable

from .regions import Region


@dataclass(frozen=True)
class SensorSpec:
    """Sensor parameters passed to the engine, with fallbacks applied."""

    sensor_id: str
    name: str
    satellite_catalog_id: str
    side_angle: float
    observe_angle: float
    init_angle: float
    color_hex: str

    def to_dict(self) -> Dict:
        return asdict(self)


@runtime_checkable
class FootprintEngine(Protocol):
    """Port for computing sensor footprints over a planning window."""

    def is_ready(self) -> bool:
        """Whether the engine is initialized and can accept requests."""
        ...

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
        """
        Compute coverage regions for one satellite's sensors.

        ``area`` carries ``west``, ``east``, ``north`` and ``south`` in
        degrees. Sensors without coverage in the window are simply absent
        from the result.
        """
        ...
