"""Configuration for the unified overview."""

from .settings import OverviewConfig, get_config, reload_config
