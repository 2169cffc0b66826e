"""
Command-line interface for the sensor footprint planner.

This module provides a CLI for inspecting the satellite/sensor catalog,
validating TLE files and running footprint planning from the command line.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import asyncio
import logging
import sys

import click
import yaml  # type: ignore[import-untyped]

from .config import load_planning_config
from .engines import GroundTrackFootprintEngine
from .errors import InvalidReference, PlanningError
from .report import export_regions, format_region_table
from .session import PlanningArea, PlanningSession
from .tle_parser import parse_bulk, parse_pair
from .tree import TreeSelectionModel
from .utils import format_epoch, setup_logging

logger = logging.getLogger(__name__)


def _load_tree(catalog: str) -> TreeSelectionModel:
    with open(catalog, "r", encoding="utf-8") as f:
        payload: Dict[str, Any] = yaml.safe_load(f) or {}
    return TreeSelectionModel.from_payload(payload)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.option('--log-file', type=click.Path(), help='Log file path')
def main(log_level: str, log_file: Optional[str]) -> None:
    """Sensor Footprint Planner - select sensors and compute coverage regions."""
    setup_logging(log_level, log_file)


@main.command()
@click.option('--catalog', required=True, type=click.Path(exists=True),
              help='Satellite catalog YAML (satellites with sensors and TLE lines)')
def tree(catalog: str) -> None:
    """Print the satellite/sensor hierarchy with node ids."""
    try:
        model = _load_tree(catalog)
    except (PlanningError, OSError, yaml.YAMLError) as e:
        _fail(str(e))
        return

    for sat in model.satellites():
        tle_note = "" if sat.has_tle else "  [no TLE]"
        click.echo(f"{sat.id}  {sat.name} ({sat.catalog_id}){tle_note}")
        for sensor in model.sensors_of(sat.id):
            click.echo(f"    {sensor.id}  {sensor.name}")


@main.command('parse-tle')
@click.argument('tle_file', type=click.Path(exists=True))
@click.option('--pair', is_flag=True,
              help='File holds a single bare line1/line2 pair')
def parse_tle(tle_file: str, pair: bool) -> None:
    """Validate a TLE file and list the records it contains."""
    text = Path(tle_file).read_text()
    try:
        if pair:
            records = [parse_pair(text)]
            discarded = 0
        else:
            batch = parse_bulk(text)
            records, discarded = batch.records, batch.discarded_lines
    except PlanningError as e:
        _fail(str(e))
        return

    for record in records:
        click.echo(f"{record.catalog_id:<8} captured {format_epoch(record.epoch_seconds)} UTC")
    click.echo(f"\n{len(records)} record(s) parsed")
    if discarded:
        click.echo(f"{discarded} trailing line(s) discarded", err=True)


@main.command()
@click.option('--catalog', required=True, type=click.Path(exists=True),
              help='Satellite catalog YAML (satellites with sensors and TLE lines)')
@click.option('--bbox', required=True, nargs=4, type=float,
              metavar='MIN_LON MIN_LAT MAX_LON MAX_LAT',
              help='Planning area bounding box in degrees')
@click.option('--select', 'selections', multiple=True, required=True,
              help='Satellite or sensor node id to select (can specify multiple)')
@click.option('--days', type=int, default=None,
              help='Planning horizon in whole days (default from config)')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='Planning config YAML')
@click.option('--output', type=click.Path(),
              help='Export file (.json, .csv or .geojson)')
def plan(
    catalog: str,
    bbox: Tuple[float, float, float, float],
    selections: Tuple[str, ...],
    days: Optional[int],
    config_path: Optional[str],
    output: Optional[str],
) -> None:
    """Compute footprint regions for the selected sensors over an area."""
    try:
        config = load_planning_config(config_path)
        model = _load_tree(catalog)
        for node_id in selections:
            model.toggle(node_id, True)

        engine = GroundTrackFootprintEngine(sample_step_seconds=config.sample_step_seconds)
        session = PlanningSession(model, engine, config)
        area = PlanningArea(*bbox)

        click.echo(f"Planning {len(model.selected_sensor_ids())} sensor(s)...")
        result = asyncio.run(session.run(area, days))
    except InvalidReference as e:
        _fail(f"{e}. Use the 'tree' command to list node ids.")
        return
    except (PlanningError, ValueError, OSError) as e:
        logger.error(f"Planning failed: {e}")
        _fail(str(e))
        return

    if result.regions:
        click.echo(format_region_table(result.regions, model))
    else:
        click.echo("No coverage regions in the planning window")

    for skipped in result.skipped_satellites:
        click.echo(f"Skipped {skipped.satellite_name}: {skipped.reason}", err=True)

    if output:
        path = export_regions(result.regions, output, tree=model)
        click.echo(f"\nResults saved to: {path}")


if __name__ == '__main__':
    main()
