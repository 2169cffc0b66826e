"""Planning session schemas."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AreaModel(BaseModel):
    """Bounding box of the planning area, in degrees.

    Ordering and range checks are left to the planning session so that a
    malformed box is reported as "no area defined" rather than a schema error.
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float


class PlanningRequest(BaseModel):
    """Request for a footprint planning run."""

    area: Optional[AreaModel] = Field(
        default=None,
        description="Area of interest; when omitted the session's drawn area is used",
    )
    horizon_days: Optional[int] = Field(
        default=None, ge=1, le=30, description="Planning horizon in whole days"
    )


class RegionModel(BaseModel):
    satellite_id: str
    satellite_name: str
    sensor_id: str
    polygon: List[List[float]]
    start_epoch_seconds: int
    end_epoch_seconds: int
    color_hex: str


class SkippedSatelliteModel(BaseModel):
    satellite_id: str
    satellite_name: str
    catalog_id: str
    reason: str


class PlanningResponse(BaseModel):
    """Response from a planning run."""

    success: bool
    message: str
    regions: List[RegionModel] = Field(default_factory=list)
    regions_by_satellite: Dict[str, List[int]] = Field(
        default_factory=dict,
        description="Satellite id -> indices into regions, in first-appearance order",
    )
    skipped_satellites: List[SkippedSatelliteModel] = Field(default_factory=list)
    horizon: Optional[Dict[str, Any]] = None
