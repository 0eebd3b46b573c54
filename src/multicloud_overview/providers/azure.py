"""
Azure summary collaborator contract.

Azure is a bundled collaborator: one ``get_overview`` call aggregates cost
windows, virtual machines, storage accounts and databases, and reports any
sub-resource failure in ``errors`` instead of raising.
"""

from abc import abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from .base import CostPoint, MoneyAmount, SectionError, ServiceCost, SummaryProvider


class AzureCostWindow(BaseModel):
    """Cost for a named reporting window such as "Month to date"."""

    label: str
    total: MoneyAmount
    by_service: list[ServiceCost] = Field(default_factory=list)
    daily: list[CostPoint] | None = None


class AzureComputeSummary(BaseModel):
    """Virtual machine counts keyed by power state."""

    totals: dict[str, int] = Field(default_factory=dict)


class AzureStorageAccount(BaseModel):
    name: str
    location: str | None = None
    kind: str | None = None


class AzureStorageSummary(BaseModel):
    accounts: list[AzureStorageAccount] = Field(default_factory=list)


class AzureOverviewResult(BaseModel):
    """Bundled Azure overview; null sections are explained by ``errors``."""

    cost: list[AzureCostWindow] | None = None
    compute: AzureComputeSummary | None = None
    storage: AzureStorageSummary | None = None
    databases: dict[str, Any] | None = None
    errors: list[SectionError] = Field(default_factory=list)

    def find_window(self, *keywords: str, exclude: tuple[str, ...] = ()) -> AzureCostWindow | None:
        """
        Find the first cost window whose label contains every keyword.

        Args:
            keywords: Lower-case fragments that must appear in the label
            exclude: Lower-case fragments that must not appear in the label

        Returns:
            Matching window or None
        """
        for window in self.cost or []:
            label = window.label.lower()
            if all(k in label for k in keywords) and not any(x in label for x in exclude):
                return window
        return None

    @property
    def month_to_date(self) -> AzureCostWindow | None:
        return self.find_window("month", exclude=("previous", "last"))

    @property
    def previous_month(self) -> AzureCostWindow | None:
        return self.find_window("previous")


class AzureOverviewProvider(SummaryProvider):
    """Bundled Azure collaborator. Implementations must never raise."""

    def _get_provider_name(self) -> str:
        return "azure"

    @abstractmethod
    async def get_overview(self) -> AzureOverviewResult:
        """Fetch the bundled Azure overview."""
        pass
