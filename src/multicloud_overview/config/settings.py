"""
Configuration management for the unified overview.

Uses dynaconf for flexible configuration with YAML files and environment overrides.
"""

import logging
from pathlib import Path
from typing import Any

from dynaconf import Dynaconf, Validator
from dynaconf.validator import ValidationError

logger = logging.getLogger(__name__)

# Get the project root directory
PROJECT_ROOT = Path(__file__).resolve().parents[3]
CONFIG_DIR = PROJECT_ROOT / "config"

DEFAULTS = {
    "timeline_window": 30,
    "insight_limit": 6,
    "notes_per_provider": 3,
    "usage_breakdown_limit": 12,
    "services_per_provider": 5,
    "aws_lookback_days": 60,
    "trend_threshold": 0.05,
    "provider_timeout": 30.0,
    "reporting_currency": "USD",
}

VALIDATORS = {
    "timeline_window": Validator("overview.timeline_window", cast=int, gte=1),
    "insight_limit": Validator("overview.insight_limit", cast=int, gte=0),
    "notes_per_provider": Validator("overview.notes_per_provider", cast=int, gte=0),
    "usage_breakdown_limit": Validator("overview.usage_breakdown_limit", cast=int, gte=0),
    "services_per_provider": Validator("overview.services_per_provider", cast=int, gte=0),
    # The AWS trend compares two 30-day windows
    "aws_lookback_days": Validator("overview.aws_lookback_days", cast=int, gte=30),
    "trend_threshold": Validator("overview.trend_threshold", cast=float, gte=0),
    "provider_timeout": Validator("overview.provider_timeout", cast=float),
    "reporting_currency": Validator("overview.reporting_currency", cast=str, len_eq=3),
}

# Initialize dynaconf with multiple configuration sources
settings = Dynaconf(
    envvar_prefix="CLOUDOVERVIEW",
    settings_files=[
        str(CONFIG_DIR / "config.yaml"),  # Base configuration
        str(CONFIG_DIR / "config.local.yaml"),  # Local overrides (git-ignored)
        str(CONFIG_DIR / ".secrets.yaml"),  # Secrets file (git-ignored)
    ],
    environments=False,
    load_dotenv=True,
    merge_enabled=True,
    envvar_separator="__",  # Support nested config via CLOUDOVERVIEW_OVERVIEW__TIMELINE_WINDOW=14
)


class OverviewConfig:
    """Configuration wrapper for the overview aggregation settings."""

    def __init__(self, source: Dynaconf | None = None):
        self.settings = source if source is not None else settings
        self._invalid: set[str] = set()
        self._validate_config()

    def _validate_config(self):
        """Validate each overview setting; invalid ones fall back to DEFAULTS."""
        self._invalid = set()
        for key, validator in VALIDATORS.items():
            try:
                validator.validate(self.settings)
            except (ValidationError, ValueError, TypeError) as e:
                self._invalid.add(key)
                logger.warning(f"Configuration validation warning: {e}")
                logger.warning(f"Falling back to default overview.{key}={DEFAULTS[key]!r}")

    def _get(self, key: str) -> Any:
        if key in self._invalid:
            return DEFAULTS[key]
        value = self.settings.get(f"overview.{key}")
        return DEFAULTS[key] if value is None else value

    @property
    def timeline_window(self) -> int:
        """Number of most recent days kept in the merged timeline."""
        return int(self._get("timeline_window"))

    @property
    def insight_limit(self) -> int:
        return int(self._get("insight_limit"))

    @property
    def notes_per_provider(self) -> int:
        """Maximum section-error notes emitted per provider."""
        return int(self._get("notes_per_provider"))

    @property
    def usage_breakdown_limit(self) -> int:
        return int(self._get("usage_breakdown_limit"))

    @property
    def services_per_provider(self) -> int:
        return int(self._get("services_per_provider"))

    @property
    def aws_lookback_days(self) -> int:
        """Length of the AWS cost window requested (covers both trend periods)."""
        return int(self._get("aws_lookback_days"))

    @property
    def trend_threshold(self) -> float:
        return float(self._get("trend_threshold"))

    @property
    def provider_timeout(self) -> float | None:
        """Per-branch deadline in seconds; 0 or negative disables it."""
        value = float(self._get("provider_timeout"))
        return value if value > 0 else None

    @property
    def reporting_currency(self) -> str:
        return str(self._get("reporting_currency")).upper()

    def override_from_cli(self, cli_args: dict[str, Any]):
        """Override configuration with CLI arguments."""
        # Map CLI arguments to configuration paths
        cli_mapping = {
            "timeout": "overview.provider_timeout",
            "timeline_window": "overview.timeline_window",
            "currency": "overview.reporting_currency",
        }

        for cli_key, config_path in cli_mapping.items():
            if cli_args.get(cli_key) is not None:
                self.settings.set(config_path, cli_args[cli_key])

        # Re-validate after overrides
        self._validate_config()


# Global configuration instance
config = OverviewConfig()


def get_config() -> OverviewConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> OverviewConfig:
    """Reload configuration from files."""
    global config
    settings.reload()
    config = OverviewConfig()
    return config
