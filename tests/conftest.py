"""
Pytest configuration and shared fixtures for overview tests.

Provides snapshot builders, fixture-backed collaborators and an isolated
configuration so tests never depend on local config files or env vars.
"""

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
from dynaconf import Dynaconf

from multicloud_overview.config.settings import OverviewConfig
from multicloud_overview.providers.aws import (
    AwsCostSummary,
    Ec2InstanceSummary,
    S3BucketSummary,
)
from multicloud_overview.providers.azure import (
    AzureComputeSummary,
    AzureCostWindow,
    AzureOverviewResult,
    AzureStorageAccount,
    AzureStorageSummary,
)
from multicloud_overview.providers.base import CostPoint, MoneyAmount, SectionError, ServiceCost
from multicloud_overview.providers.gcp import (
    GcpAlertInsight,
    GcpComputeSummary,
    GcpComputeTotals,
    GcpCostBreakdown,
    GcpOverviewResponse,
    GcpStorageSummary,
    GcpStorageTotals,
)
from multicloud_overview.providers.static import (
    StaticAwsProvider,
    StaticAzureProvider,
    StaticGcpProvider,
)

FIXED_NOW = datetime(2024, 5, 30, 12, 0, tzinfo=timezone.utc)
SAMPLE_FIXTURES = Path(__file__).resolve().parent.parent / "fixtures" / "sample"


def daily_series(start: date, amounts: list[float]) -> list[CostPoint]:
    """Consecutive daily points starting at ``start``."""
    return [
        CostPoint(day=(start + timedelta(days=i)).isoformat(), amount=amount)
        for i, amount in enumerate(amounts)
    ]


@pytest.fixture
def make_series() -> Callable[[date, list[float]], list[CostPoint]]:
    """Builder for consecutive daily cost points."""
    return daily_series


@pytest.fixture
def sample_fixtures_dir() -> Path:
    """The bundled sample snapshot directory."""
    return SAMPLE_FIXTURES


# Configuration fixtures
@pytest.fixture
def overview_settings() -> Dynaconf:
    """An empty dynaconf instance; tests set what they need."""
    return Dynaconf(environments=False, envvar_prefix="CLOUDOVERVIEW_TEST")


@pytest.fixture
def overview_config(overview_settings) -> OverviewConfig:
    """Overview configuration using built-in defaults."""
    return OverviewConfig(overview_settings)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


# Sample data fixtures
@pytest.fixture
def aws_cost_summary() -> AwsCostSummary:
    """60 days: prior 30 sum to 100, recent 30 sum to 130."""
    amounts = [100 / 30] * 30 + [130 / 30] * 30
    return AwsCostSummary(
        total=MoneyAmount(amount=230.0, currency="USD"),
        top_services=[
            ServiceCost(service="Amazon Elastic Compute Cloud - Compute", amount=150.0),
            ServiceCost(service="Amazon Simple Storage Service", amount=50.0),
            ServiceCost(service="AWS Lambda", amount=30.0),
        ],
        time_series=daily_series(date(2024, 4, 1), amounts),
    )


@pytest.fixture
def aws_instances() -> list[Ec2InstanceSummary]:
    return [
        Ec2InstanceSummary(instance_id="i-001", name="api-1", state="running"),
        Ec2InstanceSummary(instance_id="i-002", name="api-2", state="running"),
        Ec2InstanceSummary(instance_id="i-003", name="batch", state="stopped"),
        Ec2InstanceSummary(instance_id="i-004", name="drain", state="stopping"),
        Ec2InstanceSummary(instance_id="i-005", name="old", state="terminated"),
        Ec2InstanceSummary(instance_id="i-006", name="new", state="pending"),
    ]


@pytest.fixture
def aws_buckets() -> list[S3BucketSummary]:
    return [S3BucketSummary(name="assets"), S3BucketSummary(name="logs")]


@pytest.fixture
def azure_overview() -> AzureOverviewResult:
    return AzureOverviewResult(
        cost=[
            AzureCostWindow(
                label="Month to date",
                total=MoneyAmount(amount=120.0, currency="USD"),
                by_service=[
                    ServiceCost(service="Virtual Machines", amount=70.0),
                    ServiceCost(service="Storage", amount=50.0),
                ],
                daily=[
                    CostPoint(day="2024-05-01", amount=10),
                    CostPoint(day="2024-05-02", amount=12),
                ],
            ),
            AzureCostWindow(
                label="Previous month",
                total=MoneyAmount(amount=100.0, currency="USD"),
            ),
        ],
        compute=AzureComputeSummary(
            totals={"total": 4, "running": 2, "stopped": 1, "deallocated": 1}
        ),
        storage=AzureStorageSummary(
            accounts=[AzureStorageAccount(name="prodstorage"), AzureStorageAccount(name="backup")]
        ),
        errors=[],
    )


@pytest.fixture
def gcp_overview() -> GcpOverviewResponse:
    return GcpOverviewResponse(
        cost=GcpCostBreakdown(
            total=80.0,
            currency="USD",
            change_percentage=0.012345,
            by_service=[
                ServiceCost(service="BigQuery", amount=60.0),
                ServiceCost(service="Cloud Storage", amount=20.0),
            ],
            daily=[CostPoint(day="2024-05-02", amount=5)],
        ),
        compute=GcpComputeSummary(
            totals=GcpComputeTotals(total=3, running=3, stopped=0, terminated=0)
        ),
        storage=GcpStorageSummary(totals=GcpStorageTotals(bucket_count=4, storage_gb=120.5)),
        alerts=[
            GcpAlertInsight(type="storage", message="Storage growing quickly.", severity="info")
        ],
        errors=[],
    )


@pytest.fixture
def section_errors() -> list[SectionError]:
    return [
        SectionError(section="Networking", message="Forbidden"),
        SectionError(section="Databases", message="AuthorizationFailed"),
        SectionError(section="Monitoring", message="Timeout"),
        SectionError(section="Resource Inventory", message="Throttled"),
    ]


# Collaborator fixtures
@pytest.fixture
def aws_provider(aws_cost_summary, aws_instances, aws_buckets) -> StaticAwsProvider:
    return StaticAwsProvider(aws_cost_summary, aws_instances, aws_buckets)


@pytest.fixture
def azure_provider(azure_overview) -> StaticAzureProvider:
    return StaticAzureProvider(azure_overview)


@pytest.fixture
def gcp_provider(gcp_overview) -> StaticGcpProvider:
    return StaticGcpProvider(gcp_overview)
