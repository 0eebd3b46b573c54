"""
AWS summary collaborator contract.

AWS is not bundled: cost, instances and buckets are three independent
top-level calls, each of which may raise.
"""

from abc import abstractmethod
from datetime import date

from pydantic import BaseModel, Field, field_validator

from .base import CostPoint, MoneyAmount, ServiceCost, SummaryProvider

# EC2 lifecycle states grouped by how the overview counts them
EC2_STOPPED_STATES = {"stopped", "stopping", "shutting-down"}


class AwsCostSummary(BaseModel):
    """Cost Explorer style summary over a requested window."""

    total: MoneyAmount
    top_services: list[ServiceCost] = Field(default_factory=list)
    time_series: list[CostPoint] = Field(default_factory=list)


class Ec2InstanceSummary(BaseModel):
    """Minimal view of an EC2 instance."""

    instance_id: str
    name: str | None = None
    state: str = "unknown"
    instance_type: str | None = None
    region: str | None = None

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str) -> str:
        return v.lower().strip() if v else "unknown"


class S3BucketSummary(BaseModel):
    """Minimal view of an S3 bucket."""

    name: str
    region: str | None = None
    created_at: str | None = None


class AwsSummaryProvider(SummaryProvider):
    """Collaborator returning AWS cost, compute and storage summaries."""

    def _get_provider_name(self) -> str:
        return "aws"

    @abstractmethod
    async def get_cost_summary(
        self, start_date: date, end_date: date, granularity: str = "DAILY"
    ) -> AwsCostSummary:
        """
        Retrieve the cost summary for a date window.

        Args:
            start_date: First day of the window
            end_date: Last day of the window
            granularity: Cost Explorer granularity

        Raises:
            APIError: If the Cost Explorer call fails
        """
        pass

    @abstractmethod
    async def list_instances(self) -> list[Ec2InstanceSummary]:
        """List EC2 instances across configured regions."""
        pass

    @abstractmethod
    async def list_buckets(self) -> list[S3BucketSummary]:
        """List S3 buckets."""
        pass
