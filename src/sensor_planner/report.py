"""
Tabular and map-layer output for planning results.

Consumers receive regions already sorted by the aggregator; these helpers
only shape them: a text table for the terminal, CSV/JSON rows for reports
and a GeoJSON FeatureCollection for map layers.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
import json
import logging

import pandas as pd
from tabulate import tabulate

from .colors import hex_to_rgba
from .errors import NotFound
from .regions import Region
from .tree import TreeSelectionModel
from .utils import ensure_directory_exists, epoch_to_datetime, format_duration, format_epoch

logger = logging.getLogger(__name__)

ROW_COLUMNS = [
    "satellite_name", "sensor_name", "resolution_m", "start_time",
    "end_time", "duration_s", "color_hex",
]


def _sensor_metadata(tree: Optional[TreeSelectionModel], sensor_id: str) -> Dict[str, Any]:
    if tree is None:
        return {"name": sensor_id, "resolution": None}
    try:
        sensor = tree.find_by_id(sensor_id)
    except NotFound:
        return {"name": sensor_id, "resolution": None}
    return {"name": sensor.name, "resolution": sensor.attributes.get("resolution")}


def region_rows(
    regions: Sequence[Region], tree: Optional[TreeSelectionModel] = None
) -> List[Dict[str, Any]]:
    """One flat row per region, enriched with sensor name and resolution."""
    rows = []
    for region in regions:
        meta = _sensor_metadata(tree, region.sensor_id)
        rows.append({
            "satellite_name": region.satellite_name,
            "sensor_name": meta["name"],
            "resolution_m": meta["resolution"],
            "start_time": epoch_to_datetime(region.start_epoch_seconds).isoformat(),
            "end_time": epoch_to_datetime(region.end_epoch_seconds).isoformat(),
            "duration_s": region.duration_seconds,
            "color_hex": region.color_hex,
        })
    return rows


def format_region_table(
    regions: Sequence[Region], tree: Optional[TreeSelectionModel] = None
) -> str:
    """Render regions as a grid table for terminal output."""
    table = []
    for i, region in enumerate(regions, start=1):
        meta = _sensor_metadata(tree, region.sensor_id)
        table.append([
            i,
            region.satellite_name,
            meta["name"],
            meta["resolution"] if meta["resolution"] is not None else "-",
            format_epoch(region.start_epoch_seconds),
            format_epoch(region.end_epoch_seconds),
            format_duration(region.duration_seconds),
        ])
    return tabulate(
        table,
        headers=["#", "Satellite", "Sensor", "Res (m)", "Start (UTC)", "End (UTC)", "Duration"],
        tablefmt="grid",
    )


def regions_to_geojson(regions: Sequence[Region]) -> Dict[str, Any]:
    """GeoJSON FeatureCollection with one Polygon feature per region."""
    features = []
    for region in regions:
        features.append({
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": [region.closed_ring()]},
            "properties": {
                "satellite_id": region.satellite_id,
                "satellite_name": region.satellite_name,
                "sensor_id": region.sensor_id,
                "start_epoch_seconds": region.start_epoch_seconds,
                "end_epoch_seconds": region.end_epoch_seconds,
                "color_hex": region.color_hex,
                "fill_rgba": hex_to_rgba(region.color_hex, alpha=96),
            },
        })
    return {"type": "FeatureCollection", "features": features}


def export_regions(
    regions: Sequence[Region],
    output_file: Union[str, Path],
    tree: Optional[TreeSelectionModel] = None,
    format: str = "auto",
) -> Path:
    """
    Export regions to file.

    Args:
        regions: Sorted regions from a planning run
        output_file: Output file path
        tree: Selection model used to resolve sensor metadata
        format: Output format ("json", "csv", "geojson", or "auto")

    Returns:
        Path of the written file
    """
    output_path = Path(output_file)

    if format == "auto":
        format = output_path.suffix.lower().lstrip('.')
        if format not in ["json", "csv", "geojson"]:
            format = "json"

    ensure_directory_exists(output_path.parent)

    if format == "geojson":
        with open(output_path, 'w') as f:
            json.dump(regions_to_geojson(regions), f, indent=2)
    elif format == "json":
        export_data = {
            "metadata": {
                "export_time": datetime.now(timezone.utc).isoformat(),
                "total_regions": len(regions),
            },
            "regions": region_rows(regions, tree),
        }
        with open(output_path, 'w') as f:
            json.dump(export_data, f, indent=2)
    elif format == "csv":
        df = pd.DataFrame(region_rows(regions, tree), columns=ROW_COLUMNS)
        df.to_csv(output_path, index=False)
    else:
        raise ValueError(f"Unsupported format: {format}")

    logger.info(f"Exported {len(regions)} regions to {output_path}")
    return output_path
