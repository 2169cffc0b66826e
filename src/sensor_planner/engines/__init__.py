"""Footprint engine implementations."""

from .ground_track import GroundTrackFootprintEngine

__all__ = ["GroundTrackFootprintEngine"]
