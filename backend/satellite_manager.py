"""
Satellite Catalog Manager
Holds satellites, their sensors and latest TLE lines with YAML persistence,
serves the combined tree payload and applies TLE updates
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests  # type: ignore[import-untyped]
import yaml  # type: ignore[import-untyped]

from sensor_planner.tle_parser import OrbitalElementRecord, parse_feed

logger = logging.getLogger(__name__)


def normalize_catalog_id(catalog_id: str) -> str:
    """Numeric catalog ids compare without leading zeros."""
    catalog_id = str(catalog_id).strip()
    if catalog_id.isdigit():
        return str(int(catalog_id))
    return catalog_id


@dataclass
class Sensor:
    """Sensor mounted on a satellite"""

    id: str
    name: str
    resolution: float = 0.0
    width: float = 0.0
    left_side_angle: Optional[float] = None
    right_side_angle: Optional[float] = None
    observe_angle: Optional[float] = None
    init_angle: Optional[float] = None
    color_hex: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class Satellite:
    """Satellite with its latest TLE and sensors"""

    catalog_id: str
    name: str
    color_hex: Optional[str] = None
    tle1: str = ""
    tle2: str = ""
    tle_epoch_seconds: Optional[int] = None
    sensors: List[Sensor] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.catalog_id = str(self.catalog_id).strip()
        self.sensors = [
            s if isinstance(s, Sensor) else Sensor(**s) for s in (self.sensors or [])
        ]

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class TLEUpdateSummary:
    """Outcome of applying a batch of TLE records"""

    inserted: int = 0
    skipped: int = 0
    total: int = 0
    not_found: List[str] = field(default_factory=list)
    sites_count: Optional[int] = None
    failed_sites: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.inserted == 0:
            message = (
                f"Failed to insert any TLE records. All {self.skipped} records were skipped."
            )
            if self.not_found:
                message += f" Satellites not found: {self.not_found}"
            return message
        message = f"Successfully updated {self.inserted} TLE record(s)"
        if self.sites_count is not None:
            message += f" from {self.sites_count} site(s)"
        if self.skipped:
            message += f" ({self.skipped} skipped)"
        return message

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.sites_count is None:
            data.pop("sites_count")
            data.pop("failed_sites")
        return data


class SatelliteManager:
    """Manages the satellite/sensor catalog with YAML persistence"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._get_default_config_path()
        self.satellites: List[Satellite] = []
        self.tle_sites: List[Dict[str, str]] = []
        self._raw_config: Dict = {}

        self.load_config()

    def _get_default_config_path(self) -> str:
        """Get default configuration file path"""
        backend_dir = Path(__file__).parent
        return str(backend_dir.parent / "config" / "satellites.yaml")

    def load_config(self) -> bool:
        """Load satellite catalog from YAML file"""
        config_path = Path(self.config_path)

        if not config_path.exists():
            logger.warning(f"Satellite config file not found: {config_path}")
            self._create_default_config()
            return False

        with open(config_path, "r", encoding="utf-8") as file:
            self._raw_config = yaml.safe_load(file) or {}

        self.satellites = [
            Satellite(**sat_data) for sat_data in self._raw_config.get("satellites", []) or []
        ]
        self.tle_sites = list(self._raw_config.get("tle_sites", []) or [])

        logger.info(
            f"Loaded {len(self.satellites)} satellites from {self.config_path}"
        )
        return True

    def save_config(self) -> bool:
        """Save current catalog to YAML file"""
        try:
            config_data = {
                "satellites": [sat.to_dict() for sat in self.satellites],
                "tle_sites": self.tle_sites,
            }

            config_path = Path(self.config_path)
            config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(config_path, "w", encoding="utf-8") as file:
                yaml.safe_dump(
                    config_data, file, default_flow_style=False, allow_unicode=True,
                    sort_keys=False,
                )

            logger.info(
                f"Saved {len(self.satellites)} satellites to {self.config_path}"
            )
            return True

        except OSError as e:
            logger.error(f"Error saving satellite configuration: {str(e)}")
            return False

    def _create_default_config(self) -> None:
        """Create an empty catalog with the default CelesTrak source"""
        self.satellites = []
        self.tle_sites = [
            {
                "site": "celestrak_active",
                "url": "https://celestrak.org/NORAD/elements/gp.php?GROUP=active&FORMAT=tle",
                "description": "CelesTrak active satellites",
            }
        ]
        self.save_config()

    def get_satellites(self) -> List[Satellite]:
        return list(self.satellites)

    def get_satellite_by_catalog_id(self, catalog_id: str) -> Optional[Satellite]:
        """Get satellite by catalog id (leading zeros ignored)"""
        wanted = normalize_catalog_id(catalog_id)
        for sat in self.satellites:
            if normalize_catalog_id(sat.catalog_id) == wanted:
                return sat
        return None

    def tree_payload(self) -> Dict[str, Any]:
        """Combined satellite/sensor hierarchy with embedded TLE lines"""
        satellites = []
        for sat in self.satellites:
            satellites.append({
                "id": sat.catalog_id,
                "catalog_id": sat.catalog_id,
                "name": sat.name,
                "color_hex": sat.color_hex,
                "tle1": sat.tle1,
                "tle2": sat.tle2,
                "sensors": [
                    {**sensor.to_dict(), "satellite_catalog_id": sat.catalog_id}
                    for sensor in sat.sensors
                ],
            })
        return {"satellites": satellites}

    def apply_tle_records(self, records: Sequence[OrbitalElementRecord]) -> TLEUpdateSummary:
        """
        Store TLE records for satellites present in the catalog.

        Records for unknown catalog ids are skipped and reported.
        """
        summary = TLEUpdateSummary(total=len(records))

        for record in records:
            satellite = self.get_satellite_by_catalog_id(record.catalog_id)
            if satellite is None:
                logger.info(
                    f"Satellite with catalog id {record.catalog_id} not in catalog, skipping"
                )
                summary.not_found.append(record.catalog_id)
                summary.skipped += 1
                continue

            satellite.tle1 = record.line1
            satellite.tle2 = record.line2
            satellite.tle_epoch_seconds = record.epoch_seconds
            summary.inserted += 1

        if summary.inserted:
            self.save_config()

        logger.info(summary.message)
        return summary

    def fetch_site_records(self) -> Tuple[List[OrbitalElementRecord], List[str]]:
        """Download and parse every configured TLE site"""
        records: List[OrbitalElementRecord] = []
        failed_sites: List[str] = []

        for site in self.tle_sites:
            name = site.get("site", site.get("url", "?"))
            try:
                response = requests.get(site["url"], timeout=10)
                response.raise_for_status()
            except requests.RequestException as e:
                logger.error(f"Failed to fetch TLE from {name}: {e}")
                failed_sites.append(name)
                continue
            site_records = parse_feed(response.text)
            logger.info(f"Fetched {len(site_records)} TLE record(s) from {name}")
            records.extend(site_records)

        return records, failed_sites

    def apply_site_records(
        self, records: Sequence[OrbitalElementRecord], failed_sites: List[str]
    ) -> TLEUpdateSummary:
        """Apply records fetched by ``fetch_site_records`` and note the site outcome"""
        summary = self.apply_tle_records(records)
        summary.sites_count = len(self.tle_sites) - len(failed_sites)
        summary.failed_sites = list(failed_sites)
        return summary

    def auto_update_tles(self) -> TLEUpdateSummary:
        """Refresh catalog TLEs from all configured sites"""
        records, failed_sites = self.fetch_site_records()
        return self.apply_site_records(records, failed_sites)

    def get_tle_age_days(self, catalog_id: str) -> Optional[int]:
        """Get the age of stored TLE data in days"""
        satellite = self.get_satellite_by_catalog_id(catalog_id)
        if not satellite or satellite.tle_epoch_seconds is None:
            return None
        captured = datetime.fromtimestamp(satellite.tle_epoch_seconds, tz=timezone.utc)
        return (datetime.now(timezone.utc) - captured).days
