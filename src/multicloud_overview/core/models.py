"""
Unified overview data model.

The overview is rebuilt from scratch on every call and never persisted.
"""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

ProviderName = Literal["aws", "azure", "gcp"]
Severity = Literal["info", "warning", "critical"]


class ProviderCostTotals(BaseModel):
    """Normalized cost figures for one provider (or the combined view)."""

    total: float
    currency: str = "USD"
    change_percentage: float | None = None
    is_mock: bool = False


class ProviderComputeTotals(BaseModel):
    total: int = 0
    running: int = 0
    stopped: int = 0
    terminated: int = 0

    def __add__(self, other: "ProviderComputeTotals") -> "ProviderComputeTotals":
        return ProviderComputeTotals(
            total=self.total + other.total,
            running=self.running + other.running,
            stopped=self.stopped + other.stopped,
            terminated=self.terminated + other.terminated,
        )


class ProviderStorageTotals(BaseModel):
    buckets: int | None = None
    accounts: int | None = None
    storage_gb: float | None = None


class UnifiedCostTimelinePoint(BaseModel):
    """One calendar day with a sparse set of per-provider amounts."""

    day: str
    aws: float | None = None
    azure: float | None = None
    gcp: float | None = None

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: str) -> str:
        """Days must be ISO calendar dates so that string order is date order."""
        return date.fromisoformat(v).isoformat()


class CostTotals(BaseModel):
    aws: ProviderCostTotals | None = None
    azure: ProviderCostTotals | None = None
    gcp: ProviderCostTotals | None = None
    combined: ProviderCostTotals


class ComputeTotals(BaseModel):
    aws: ProviderComputeTotals | None = None
    azure: ProviderComputeTotals | None = None
    gcp: ProviderComputeTotals | None = None
    combined: ProviderComputeTotals = Field(default_factory=ProviderComputeTotals)


class StorageTotals(BaseModel):
    aws: ProviderStorageTotals | None = None
    azure: ProviderStorageTotals | None = None
    gcp: ProviderStorageTotals | None = None


class UsageBreakdownEntry(BaseModel):
    provider: ProviderName
    service: str
    amount: float


class UnifiedInsight(BaseModel):
    """An operational insight shown alongside the overview."""

    id: str
    provider: Literal["aws", "azure", "gcp", "multi"]
    title: str
    detail: str
    severity: Severity


class OverviewNote(BaseModel):
    """Explains a gap in the overview caused by a provider failure."""

    provider: ProviderName
    message: str


class UnifiedOverview(BaseModel):
    """Aggregated multi-cloud snapshot returned to the HTTP layer."""

    fetched_at: datetime
    cost_timeline: list[UnifiedCostTimelinePoint] = Field(default_factory=list)
    cost_totals: CostTotals
    compute_totals: ComputeTotals
    storage: StorageTotals = Field(default_factory=StorageTotals)
    usage_breakdown: list[UsageBreakdownEntry] = Field(default_factory=list)
    insights: list[UnifiedInsight] = Field(default_factory=list)
    notes: list[OverviewNote] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary; timeline points stay sparse."""
        data = self.model_dump(mode="json")
        data["cost_timeline"] = [
            point.model_dump(mode="json", exclude_none=True) for point in self.cost_timeline
        ]
        return data
