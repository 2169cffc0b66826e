"""
Planning configuration.

Defaults for the planning horizon, sensor fallbacks handed to the footprint
engine and the engine's sampling step. Values are read from a YAML file
(``config/planning.yaml`` by default, or the path in
``SENSOR_PLANNER_CONFIG``) under a top-level ``planning`` key.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import os

import yaml  # type: ignore[import-untyped]

from .colors import DEFAULT_REGION_COLOR

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "SENSOR_PLANNER_CONFIG"


@dataclass
class PlanningConfig:
    """Tunable planning defaults."""

    horizon_days: int = 3
    default_side_angle_deg: float = 0.0
    default_observe_angle_deg: float = 60.0
    default_init_angle_deg: float = 0.0
    default_color: str = DEFAULT_REGION_COLOR
    # Ground-track sampling step for the bundled engine
    sample_step_seconds: float = 30.0

    def __post_init__(self) -> None:
        if int(self.horizon_days) != self.horizon_days or self.horizon_days < 1:
            raise ValueError(f"horizon_days must be a whole number >= 1, got {self.horizon_days}")
        self.horizon_days = int(self.horizon_days)
        if not 0 < self.default_observe_angle_deg < 180:
            raise ValueError(
                f"default_observe_angle_deg must be in (0, 180), got {self.default_observe_angle_deg}"
            )
        if self.sample_step_seconds <= 0:
            raise ValueError(f"sample_step_seconds must be > 0, got {self.sample_step_seconds}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanningConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown planning settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict:
        return asdict(self)


def _default_config_path() -> Path:
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    # src/sensor_planner/config.py -> project root
    return Path(__file__).resolve().parents[2] / "config" / "planning.yaml"


def load_planning_config(config_path: Optional[Union[str, Path]] = None) -> PlanningConfig:
    """
    Load planning configuration from YAML.

    Args:
        config_path: Optional path; falls back to ``SENSOR_PLANNER_CONFIG``
            and then ``config/planning.yaml``

    Returns:
        PlanningConfig (defaults when the file does not exist)
    """
    path = Path(config_path) if config_path else _default_config_path()
    if not path.exists():
        logger.warning(f"Planning config file not found: {path}, using defaults")
        return PlanningConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = PlanningConfig.from_dict(raw.get("planning", {}) or {})
    logger.info(f"Loaded planning config from {path}")
    return config
