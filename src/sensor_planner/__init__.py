"""
Sensor Footprint Planner

Selection of satellites and sensors from a catalog hierarchy, orchestration
of footprint computation over a planning area and horizon, and validation
of two-line element (TLE) batches.
"""

from .regions import Region, RegionAggregator
from .session import PlanningArea, PlanningHorizon, PlanningResult, PlanningSession
from .tle_parser import OrbitalElementRecord, parse_bulk
from .tree import TreeSelectionModel

__version__ = "0.1.0"
__author__ = "Sensor Planner Team"

__all__ = [
    "OrbitalElementRecord",
    "PlanningArea",
    "PlanningHorizon",
    "PlanningResult",
    "PlanningSession",
    "Region",
    "RegionAggregator",
    "TreeSelectionModel",
    "parse_bulk",
]
