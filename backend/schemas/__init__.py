"""
Backend Pydantic schemas for API request/response models.

All schemas are re-exported here for convenient imports:
    from backend.schemas import PlanningRequest, TLEBulkRequest
"""

from backend.schemas.planning import (
    AreaModel,
    PlanningRequest,
    PlanningResponse,
    RegionModel,
    SkippedSatelliteModel,
)
from backend.schemas.tle import (
    OrbitalElementRecordModel,
    TLEBulkRequest,
    TLESingleUpdateRequest,
    TLEUpdateResponse,
)
from backend.schemas.tree import SelectionResponse, ToggleRequest

__all__ = [
    # TLE
    "TLEBulkRequest",
    "TLESingleUpdateRequest",
    "OrbitalElementRecordModel",
    "TLEUpdateResponse",
    # Planning
    "AreaModel",
    "PlanningRequest",
    "RegionModel",
    "SkippedSatelliteModel",
    "PlanningResponse",
    # Tree
    "ToggleRequest",
    "SelectionResponse",
]
