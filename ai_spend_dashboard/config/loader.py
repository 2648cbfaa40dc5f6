"""
Configuration management and loading.

Handles dataset locations, fetch behavior and chart styling.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ai_spend_dashboard.core.presentation import ChartStyle
from ai_spend_dashboard.core.pricing import InvalidRatePolicy


@dataclass(frozen=True)
class DatasetSources:
    """Locations of the two CSV datasets (file paths or http(s) URLs)."""
    usages: str = "assets/usages.csv"
    costs: str = "assets/costs.csv"

    def __post_init__(self):
        """Validate both sources are set."""
        if not self.usages or not self.usages.strip():
            raise ValueError("usages source cannot be empty")
        if not self.costs or not self.costs.strip():
            raise ValueError("costs source cannot be empty")


@dataclass(frozen=True)
class FetchConfig:
    """Retry and timeout settings for dataset fetches."""
    retries: int = 2
    backoff_seconds: float = 0.5
    timeout_seconds: float = 30.0

    def __post_init__(self):
        """Validate fetch values."""
        if self.retries < 0:
            raise ValueError("retries cannot be negative")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds cannot be negative")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")


@dataclass(frozen=True)
class DashboardConfig:
    """Complete dashboard configuration."""
    datasets: DatasetSources = field(default_factory=DatasetSources)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    invalid_rates: InvalidRatePolicy = InvalidRatePolicy.PROPAGATE
    chart: ChartStyle = field(default_factory=ChartStyle)


def load_dashboard_config(path: str) -> DashboardConfig:
    """Load and validate dashboard configuration from a YAML file.

    Every section is optional and falls back to its defaults, but unknown
    keys and wrongly typed values are rejected.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated DashboardConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Dashboard config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'datasets', 'fetch', 'invalid_rates', 'chart'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    datasets_data = _section(raw_config, 'datasets', {'usages', 'costs'})
    for key, value in datasets_data.items():
        if not isinstance(value, str):
            raise ValueError(f"'datasets.{key}' must be a string")
    datasets = DatasetSources(**datasets_data)

    fetch_data = _section(raw_config, 'fetch', {'retries', 'backoff_seconds', 'timeout_seconds'})
    if 'retries' in fetch_data and (
            not isinstance(fetch_data['retries'], int) or isinstance(fetch_data['retries'], bool)):
        raise ValueError("'fetch.retries' must be an integer")
    for key in ('backoff_seconds', 'timeout_seconds'):
        if key in fetch_data:
            value = fetch_data[key]
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"'fetch.{key}' must be a number")
            fetch_data[key] = float(value)
    fetch = FetchConfig(**fetch_data)

    invalid_rates = InvalidRatePolicy.PROPAGATE
    if 'invalid_rates' in raw_config:
        policy_str = raw_config['invalid_rates']
        if not isinstance(policy_str, str):
            raise ValueError("'invalid_rates' must be a string")
        try:
            invalid_rates = InvalidRatePolicy(policy_str.lower())
        except ValueError:
            valid_policies = [policy.value for policy in InvalidRatePolicy]
            raise ValueError(f"'invalid_rates' must be one of: {valid_policies}")

    chart_data = _section(raw_config, 'chart', {'label', 'background_color', 'border_color'})
    for key, value in chart_data.items():
        if not isinstance(value, str):
            raise ValueError(f"'chart.{key}' must be a string")
    chart = ChartStyle(**chart_data)

    return DashboardConfig(
        datasets=datasets,
        fetch=fetch,
        invalid_rates=invalid_rates,
        chart=chart
    )


def _section(raw_config: Dict[str, Any], name: str, allowed_keys: set) -> Dict[str, Any]:
    """Extract an optional dictionary section and reject unknown keys.

    Args:
        raw_config: Parsed top-level configuration
        name: Section name
        allowed_keys: Keys permitted inside the section

    Returns:
        A copy of the section data (empty if the section is absent)

    Raises:
        ValueError: If the section is not a dictionary or has unknown keys
    """
    data: Optional[Dict[str, Any]] = raw_config.get(name)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")

    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return dict(data)
