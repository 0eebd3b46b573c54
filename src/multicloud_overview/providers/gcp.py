"""
GCP summary collaborator contract.

GCP is a bundled collaborator that also classifies its own alerts.
"""

from abc import abstractmethod

from pydantic import BaseModel, Field

from .base import CostPoint, ProviderAlert, SectionError, ServiceCost, SummaryProvider


class GcpCostBreakdown(BaseModel):
    """Billing export breakdown for the current period."""

    total: float
    currency: str = "USD"
    change_percentage: float | None = None
    is_mock: bool = False
    by_service: list[ServiceCost] = Field(default_factory=list)
    daily: list[CostPoint] | None = None


class GcpComputeTotals(BaseModel):
    total: int = 0
    running: int = 0
    stopped: int = 0
    terminated: int = 0


class GcpComputeSummary(BaseModel):
    totals: GcpComputeTotals = Field(default_factory=GcpComputeTotals)


class GcpStorageTotals(BaseModel):
    bucket_count: int = 0
    storage_gb: float | None = None


class GcpStorageSummary(BaseModel):
    totals: GcpStorageTotals = Field(default_factory=GcpStorageTotals)


class GcpAlertInsight(ProviderAlert):
    """An alert the GCP collaborator derived from its own resources."""

    pass


class GcpOverviewResponse(BaseModel):
    """Bundled GCP overview; null sections are explained by ``errors``."""

    is_mock: bool = False
    project_id: str | None = None
    cost: GcpCostBreakdown | None = None
    compute: GcpComputeSummary | None = None
    storage: GcpStorageSummary | None = None
    alerts: list[GcpAlertInsight] = Field(default_factory=list)
    errors: list[SectionError] = Field(default_factory=list)


class GcpOverviewProvider(SummaryProvider):
    """Bundled GCP collaborator. Implementations must never raise."""

    def _get_provider_name(self) -> str:
        return "gcp"

    @abstractmethod
    async def get_overview(self) -> GcpOverviewResponse:
        """Fetch the bundled GCP overview."""
        pass
