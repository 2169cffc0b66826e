"""
Tests for planning configuration loading.
"""

import pytest
import yaml

from sensor_planner.config import CONFIG_PATH_ENV, PlanningConfig, load_planning_config


class TestPlanningConfig:
    """Tests for PlanningConfig validation."""

    def test_defaults(self) -> None:
        config = PlanningConfig()
        assert config.horizon_days == 3
        assert config.default_side_angle_deg == 0.0
        assert config.default_observe_angle_deg == 60.0
        assert config.default_init_angle_deg == 0.0
        assert config.default_color == "#FF0000"

    @pytest.mark.parametrize("kwargs", [
        {"horizon_days": 0},
        {"horizon_days": 1.5},
        {"default_observe_angle_deg": 0},
        {"default_observe_angle_deg": 180},
        {"sample_step_seconds": 0},
    ])
    def test_invalid_values(self, kwargs) -> None:
        with pytest.raises(ValueError):
            PlanningConfig(**kwargs)

    def test_whole_float_horizon_accepted(self) -> None:
        """YAML may give 2.0 for a whole number of days."""
        assert PlanningConfig(horizon_days=2.0).horizon_days == 2

    def test_from_dict_ignores_unknown(self) -> None:
        config = PlanningConfig.from_dict({"horizon_days": 7, "unexpected": True})
        assert config.horizon_days == 7


class TestLoadPlanningConfig:
    """Tests for reading the YAML file."""

    def test_explicit_path(self, tmp_path) -> None:
        path = tmp_path / "planning.yaml"
        path.write_text(yaml.safe_dump({"planning": {"horizon_days": 2, "default_color": "#00FF00"}}))

        config = load_planning_config(path)

        assert config.horizon_days == 2
        assert config.default_color == "#00FF00"

    def test_missing_file_gives_defaults(self, tmp_path) -> None:
        config = load_planning_config(tmp_path / "absent.yaml")
        assert config == PlanningConfig()

    def test_empty_file_gives_defaults(self, tmp_path) -> None:
        path = tmp_path / "planning.yaml"
        path.write_text("")
        assert load_planning_config(path) == PlanningConfig()

    def test_env_override(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "env.yaml"
        path.write_text(yaml.safe_dump({"planning": {"horizon_days": 9}}))
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))

        assert load_planning_config().horizon_days == 9

    def test_invalid_file_values(self, tmp_path) -> None:
        path = tmp_path / "planning.yaml"
        path.write_text(yaml.safe_dump({"planning": {"horizon_days": -1}}))
        with pytest.raises(ValueError):
            load_planning_config(path)

    def test_project_config_loads(self, monkeypatch) -> None:
        """The shipped config/planning.yaml is valid."""
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        assert load_planning_config().horizon_days >= 1
