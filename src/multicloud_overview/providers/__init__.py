"""Provider summary collaborator contracts for AWS, Azure, and GCP."""

from .aws import AwsCostSummary, AwsSummaryProvider, Ec2InstanceSummary, S3BucketSummary
from .azure import AzureCostWindow, AzureOverviewProvider, AzureOverviewResult
from .base import (
    APIError,
    AuthenticationError,
    CloudProviderError,
    ConfigurationError,
    CostPoint,
    MoneyAmount,
    ProviderAlert,
    ProviderTimeoutError,
    RateLimitError,
    SectionError,
    ServiceCost,
    gather_sections,
)
from .gcp import GcpAlertInsight, GcpCostBreakdown, GcpOverviewProvider, GcpOverviewResponse
