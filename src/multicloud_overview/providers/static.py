"""
Fixture-backed collaborators.

Serve preloaded snapshots (or preloaded failures) so the overview can be
produced offline, e.g. from the CLI or in tests.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .aws import AwsCostSummary, AwsSummaryProvider, Ec2InstanceSummary, S3BucketSummary
from .azure import AzureOverviewProvider, AzureOverviewResult
from .base import APIError, ConfigurationError
from .gcp import GcpOverviewProvider, GcpOverviewResponse

logger = logging.getLogger(__name__)

FIXTURE_FILES = {
    "aws_cost": "aws_cost.json",
    "aws_instances": "aws_instances.json",
    "aws_buckets": "aws_buckets.json",
    "azure_overview": "azure_overview.json",
    "gcp_overview": "gcp_overview.json",
}


def _resolve(value: Any) -> Any:
    """Return a preloaded value or raise a preloaded failure."""
    if isinstance(value, Exception):
        raise value
    return value


class StaticAwsProvider(AwsSummaryProvider):
    """AWS collaborator serving preloaded results."""

    def __init__(
        self,
        cost: AwsCostSummary | Exception,
        instances: list[Ec2InstanceSummary] | Exception,
        buckets: list[S3BucketSummary] | Exception,
    ):
        super().__init__()
        self.cost = cost
        self.instances = instances
        self.buckets = buckets
        self.requested_windows: list[tuple[date, date]] = []

    async def get_cost_summary(
        self, start_date: date, end_date: date, granularity: str = "DAILY"
    ) -> AwsCostSummary:
        self.requested_windows.append((start_date, end_date))
        return _resolve(self.cost)

    async def list_instances(self) -> list[Ec2InstanceSummary]:
        return _resolve(self.instances)

    async def list_buckets(self) -> list[S3BucketSummary]:
        return _resolve(self.buckets)


class StaticAzureProvider(AzureOverviewProvider):
    """Azure collaborator serving a preloaded overview."""

    def __init__(self, overview: AzureOverviewResult | Exception):
        super().__init__()
        self.overview = overview

    async def get_overview(self) -> AzureOverviewResult:
        return _resolve(self.overview)


class StaticGcpProvider(GcpOverviewProvider):
    """GCP collaborator serving a preloaded overview."""

    def __init__(self, overview: GcpOverviewResponse | Exception):
        super().__init__()
        self.overview = overview

    async def get_overview(self) -> GcpOverviewResponse:
        return _resolve(self.overview)


def _load_fixture(directory: Path, key: str, loader) -> Any:
    """
    Load one fixture file.

    A missing file becomes a ConfigurationError and a file holding
    ``{"error": "..."}`` becomes an APIError, both served as failures.
    Malformed JSON or a snapshot that does not match its model raises
    ConfigurationError.
    """
    path = directory / FIXTURE_FILES[key]
    if not path.exists():
        logger.info(f"No fixture for {key} at {path}")
        return ConfigurationError(f"No fixture configured for {key}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict) and set(data.keys()) == {"error"}:
            return APIError(str(data["error"]))

        return loader(data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid fixture {path}: {e}") from e


def load_fixture_providers(
    directory: str | Path,
) -> tuple[StaticAwsProvider, StaticAzureProvider, StaticGcpProvider]:
    """
    Build fixture-backed collaborators from a directory of JSON files.

    Args:
        directory: Directory holding the files named in FIXTURE_FILES

    Returns:
        Tuple of (aws, azure, gcp) collaborators

    Raises:
        ConfigurationError: If the directory is missing or a fixture is invalid
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ConfigurationError(f"Fixture directory not found: {directory}")

    aws = StaticAwsProvider(
        cost=_load_fixture(directory, "aws_cost", AwsCostSummary.model_validate),
        instances=_load_fixture(
            directory,
            "aws_instances",
            lambda items: [Ec2InstanceSummary.model_validate(i) for i in items],
        ),
        buckets=_load_fixture(
            directory,
            "aws_buckets",
            lambda items: [S3BucketSummary.model_validate(i) for i in items],
        ),
    )
    azure = StaticAzureProvider(
        _load_fixture(directory, "azure_overview", AzureOverviewResult.model_validate)
    )
    gcp = StaticGcpProvider(
        _load_fixture(directory, "gcp_overview", GcpOverviewResponse.model_validate)
    )
    return aws, azure, gcp
