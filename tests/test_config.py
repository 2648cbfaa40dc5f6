"""
Unit tests for configuration loading and validation.

Tests defaults, strict validation and error handling for dashboard configs.
"""

import os
import tempfile

import pytest
import yaml

from ai_spend_dashboard.config.loader import (
    DashboardConfig,
    DatasetSources,
    FetchConfig,
    load_dashboard_config,
)
from ai_spend_dashboard.core.presentation import ChartStyle
from ai_spend_dashboard.core.pricing import InvalidRatePolicy


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_valid_config_loads_correctly(self):
        """Test that a full configuration loads correctly."""
        config_path = self._write_config({
            "datasets": {
                "usages": "https://example.com/usages.csv",
                "costs": "data/costs.csv"
            },
            "fetch": {
                "retries": 4,
                "backoff_seconds": 1,
                "timeout_seconds": 10.5
            },
            "invalid_rates": "reject",
            "chart": {
                "label": "Spend",
                "background_color": "#111",
                "border_color": "#222"
            }
        })
        config = load_dashboard_config(config_path)

        assert config.datasets.usages == "https://example.com/usages.csv"
        assert config.datasets.costs == "data/costs.csv"
        assert config.fetch == FetchConfig(retries=4, backoff_seconds=1.0, timeout_seconds=10.5)
        assert config.invalid_rates == InvalidRatePolicy.REJECT
        assert config.chart == ChartStyle(label="Spend", background_color="#111", border_color="#222")

    def test_partial_config_uses_defaults(self):
        """Test that omitted sections and keys fall back to defaults."""
        config_path = self._write_config({"datasets": {"usages": "u.csv"}})
        config = load_dashboard_config(config_path)

        assert config.datasets == DatasetSources(usages="u.csv", costs="assets/costs.csv")
        assert config.fetch == FetchConfig()
        assert config.invalid_rates == InvalidRatePolicy.PROPAGATE
        assert config.chart == ChartStyle()

    def test_default_config(self):
        """Test the built-in defaults."""
        config = DashboardConfig()
        assert config.datasets.usages == "assets/usages.csv"
        assert config.fetch.retries == 2
        assert config.chart.label == "Daily usage"

    def test_policy_case_insensitive(self):
        """Test that policy names are case insensitive."""
        config = load_dashboard_config(self._write_config({"invalid_rates": "PROPAGATE"}))
        assert config.invalid_rates == InvalidRatePolicy.PROPAGATE

    def test_missing_file_raises(self):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Dashboard config file not found"):
            load_dashboard_config(os.path.join(self.temp_dir, "missing.yaml"))

    def test_empty_file_raises(self):
        """Test that an empty file is rejected."""
        config_path = os.path.join(self.temp_dir, "empty.yaml")
        open(config_path, 'w').close()
        with pytest.raises(ValueError, match="Configuration file is empty"):
            load_dashboard_config(config_path)

    def test_invalid_yaml_raises(self):
        """Test that malformed YAML raises YAMLError."""
        config_path = os.path.join(self.temp_dir, "bad.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write("datasets: [unclosed\n")
        with pytest.raises(yaml.YAMLError, match="Invalid YAML"):
            load_dashboard_config(config_path)

    def test_non_mapping_raises(self):
        """Test that a top-level list is rejected."""
        with pytest.raises(ValueError, match="must be a dictionary"):
            load_dashboard_config(self._write_config(["datasets"]))

    def test_unknown_top_level_key_raises(self):
        """Test that unknown top-level keys are rejected."""
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_dashboard_config(self._write_config({"budget": {"daily": 1}}))

    def test_unknown_section_key_raises(self):
        """Test that unknown keys inside a section are rejected."""
        with pytest.raises(ValueError, match="Unknown keys in fetch"):
            load_dashboard_config(self._write_config({"fetch": {"retry": 3}}))

    def test_section_must_be_mapping(self):
        """Test that a section given as a scalar is rejected."""
        with pytest.raises(ValueError, match="'chart' must be a dictionary"):
            load_dashboard_config(self._write_config({"chart": "blue"}))

    def test_invalid_policy_raises(self):
        """Test that an unknown policy lists the valid ones."""
        with pytest.raises(ValueError, match="must be one of"):
            load_dashboard_config(self._write_config({"invalid_rates": "zero"}))

    def test_non_string_policy_raises(self):
        """Test that a non-string policy is rejected."""
        with pytest.raises(ValueError, match="'invalid_rates' must be a string"):
            load_dashboard_config(self._write_config({"invalid_rates": 1}))

    def test_negative_retries_raises(self):
        """Test that negative retries are rejected."""
        with pytest.raises(ValueError, match="retries cannot be negative"):
            load_dashboard_config(self._write_config({"fetch": {"retries": -1}}))

    def test_float_retries_raises(self):
        """Test that retries must be an integer."""
        with pytest.raises(ValueError, match="'fetch.retries' must be an integer"):
            load_dashboard_config(self._write_config({"fetch": {"retries": 1.5}}))

    def test_zero_timeout_raises(self):
        """Test that the timeout must be positive."""
        with pytest.raises(ValueError, match="timeout_seconds must be > 0"):
            load_dashboard_config(self._write_config({"fetch": {"timeout_seconds": 0}}))

    def test_non_numeric_backoff_raises(self):
        """Test that backoff must be a number."""
        with pytest.raises(ValueError, match="'fetch.backoff_seconds' must be a number"):
            load_dashboard_config(self._write_config({"fetch": {"backoff_seconds": "fast"}}))

    def test_empty_source_raises(self):
        """Test that dataset sources cannot be blank."""
        with pytest.raises(ValueError, match="costs source cannot be empty"):
            load_dashboard_config(self._write_config({"datasets": {"costs": " "}}))

    def test_non_string_source_raises(self):
        """Test that dataset sources must be strings."""
        with pytest.raises(ValueError, match="'datasets.usages' must be a string"):
            load_dashboard_config(self._write_config({"datasets": {"usages": 42}}))

    def test_non_string_chart_value_raises(self):
        """Test that chart styling values must be strings."""
        with pytest.raises(ValueError, match="'chart.label' must be a string"):
            load_dashboard_config(self._write_config({"chart": {"label": 3}}))


class TestConfigDataclasses:
    """Test dataclass-level validation."""

    def test_fetch_config_negative_backoff(self):
        """Verify negative backoff is rejected."""
        with pytest.raises(ValueError, match="backoff_seconds cannot be negative"):
            FetchConfig(backoff_seconds=-0.1)

    def test_config_is_frozen(self):
        """Verify configuration objects are immutable."""
        config = DashboardConfig()
        with pytest.raises(AttributeError):
            config.invalid_rates = InvalidRatePolicy.REJECT
