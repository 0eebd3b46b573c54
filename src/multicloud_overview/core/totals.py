"""
Totals normalization for the unified overview.

Turns provider-shaped snapshots into comparable cost, compute and storage
totals. Each provider has its own source of truth for cost and its own
windowing rule for the change percentage; everything is rounded here.
"""

import logging
import math
from collections.abc import Sequence

from ..providers.aws import EC2_STOPPED_STATES, AwsCostSummary, Ec2InstanceSummary, S3BucketSummary
from ..providers.azure import AzureOverviewResult
from ..providers.base import CostPoint
from ..providers.gcp import GcpOverviewResponse
from .models import (
    ProviderComputeTotals,
    ProviderCostTotals,
    ProviderStorageTotals,
    UsageBreakdownEntry,
)

logger = logging.getLogger(__name__)

# AWS trend: recent window vs. the one before it
AWS_TREND_WINDOW_DAYS = 30
AWS_TREND_MIN_POINTS = 14


class AggregationError(ArithmeticError):
    """An aggregation produced a value that cannot be reported."""

    pass


def _finite(value: float, label: str) -> float:
    if not math.isfinite(value):
        raise AggregationError(f"{label} is not finite: {value}")
    return value


def round_amount(value: float, label: str = "amount") -> float:
    """Round a currency amount to cents."""
    return round(_finite(float(value), label), 2)


def round_change(value: float | None, label: str = "change percentage") -> float | None:
    """Round a change fraction to 4 decimal places, keeping None."""
    if value is None:
        return None
    return round(_finite(float(value), label), 4)


def _relative_change(current: float, previous: float) -> float | None:
    if previous == 0:
        return None
    return (current - previous) / previous


# Change percentages


def compute_aws_change(series: Sequence[CostPoint]) -> float | None:
    """
    Compare the most recent 30 days of AWS spend with the 30 days before.

    Returns None when the series is too short to be meaningful (fewer than
    14 points), when there is nothing before the recent window, or when the
    prior window sums to zero.
    """
    if len(series) < AWS_TREND_MIN_POINTS:
        return None

    ordered = sorted(series, key=lambda point: point.day)
    recent = ordered[-AWS_TREND_WINDOW_DAYS:]
    prior = ordered[: max(len(ordered) - AWS_TREND_WINDOW_DAYS, 0)][-AWS_TREND_WINDOW_DAYS:]
    if not prior:
        return None

    recent_sum = sum(point.amount for point in recent)
    prior_sum = sum(point.amount for point in prior)
    return round_change(_relative_change(recent_sum, prior_sum), "AWS change percentage")


def compute_azure_change(overview: AzureOverviewResult | None) -> float | None:
    """Month-to-date total against the previous month's total."""
    if overview is None or not overview.cost:
        return None
    current = overview.month_to_date
    previous = overview.previous_month
    if current is None or previous is None:
        return None
    change = _relative_change(current.total.amount, previous.total.amount)
    return round_change(change, "Azure change percentage")


def compute_gcp_change(overview: GcpOverviewResponse | None) -> float | None:
    """GCP reports its own change percentage; pass it through."""
    if overview is None or overview.cost is None:
        return None
    return round_change(overview.cost.change_percentage, "GCP change percentage")


# Cost totals


def aws_cost_totals(summary: AwsCostSummary | None) -> ProviderCostTotals | None:
    """AWS total is the sum of the daily series it reported."""
    if summary is None:
        return None
    total = sum(point.amount for point in summary.time_series)
    return ProviderCostTotals(
        total=round_amount(total, "AWS cost total"),
        currency=summary.total.currency,
        change_percentage=compute_aws_change(summary.time_series),
        is_mock=False,
    )


def azure_cost_totals(overview: AzureOverviewResult | None) -> ProviderCostTotals | None:
    """Azure total is the month-to-date window's reported total."""
    if overview is None:
        return None
    window = overview.month_to_date
    if window is None:
        return None
    return ProviderCostTotals(
        total=round_amount(window.total.amount, "Azure cost total"),
        currency=window.total.currency,
        change_percentage=compute_azure_change(overview),
        is_mock=False,
    )


def gcp_cost_totals(overview: GcpOverviewResponse | None) -> ProviderCostTotals | None:
    if overview is None or overview.cost is None:
        return None
    cost = overview.cost
    return ProviderCostTotals(
        total=round_amount(cost.total, "GCP cost total"),
        currency=cost.currency,
        change_percentage=compute_gcp_change(overview),
        is_mock=cost.is_mock or overview.is_mock,
    )


def combine_cost_totals(
    totals: Sequence[ProviderCostTotals | None], currency: str = "USD"
) -> ProviderCostTotals:
    """
    Sum the providers that reported a total.

    Amounts are assumed to already be in the reporting currency. The combined
    change percentage is always None: per-provider deltas are not blended.
    """
    present = [t for t in totals if t is not None]
    mismatched = {t.currency for t in present} - {currency}
    if mismatched:
        logger.warning(
            f"Provider totals reported in {sorted(mismatched)}; summing as {currency} without conversion"
        )
    return ProviderCostTotals(
        total=round_amount(sum(t.total for t in present), "combined cost total"),
        currency=currency,
        change_percentage=None,
        is_mock=any(t.is_mock for t in present),
    )


# Compute totals


def summarise_ec2(instances: Sequence[Ec2InstanceSummary] | None) -> ProviderComputeTotals | None:
    if instances is None:
        return None
    totals = ProviderComputeTotals()
    for instance in instances:
        totals.total += 1
        if instance.state == "running":
            totals.running += 1
        elif instance.state in EC2_STOPPED_STATES:
            totals.stopped += 1
        elif instance.state == "terminated":
            totals.terminated += 1
    return totals


def summarise_azure_compute(overview: AzureOverviewResult | None) -> ProviderComputeTotals | None:
    """Deallocated VMs count as stopped and as terminated."""
    if overview is None or overview.compute is None:
        return None
    counts = overview.compute.totals
    deallocated = counts.get("deallocated", 0)
    return ProviderComputeTotals(
        total=counts.get("total", 0),
        running=counts.get("running", 0),
        stopped=counts.get("stopped", 0) + deallocated,
        terminated=deallocated,
    )


def summarise_gcp_compute(overview: GcpOverviewResponse | None) -> ProviderComputeTotals | None:
    if overview is None or overview.compute is None:
        return None
    return ProviderComputeTotals(**overview.compute.totals.model_dump())


def combine_compute_totals(
    totals: Sequence[ProviderComputeTotals | None],
) -> ProviderComputeTotals:
    """Field-wise sum; a missing provider counts as zero everywhere."""
    combined = ProviderComputeTotals()
    for provider_totals in totals:
        if provider_totals is not None:
            combined = combined + provider_totals
    return combined


# Storage totals


def aws_storage_totals(buckets: Sequence[S3BucketSummary] | None) -> ProviderStorageTotals | None:
    if buckets is None:
        return None
    return ProviderStorageTotals(buckets=len(buckets))


def azure_storage_totals(overview: AzureOverviewResult | None) -> ProviderStorageTotals | None:
    if overview is None or overview.storage is None:
        return None
    return ProviderStorageTotals(accounts=len(overview.storage.accounts))


def gcp_storage_totals(overview: GcpOverviewResponse | None) -> ProviderStorageTotals | None:
    if overview is None or overview.storage is None:
        return None
    totals = overview.storage.totals
    return ProviderStorageTotals(buckets=totals.bucket_count, storage_gb=totals.storage_gb)


# Usage breakdown


def build_usage_breakdown(
    aws: AwsCostSummary | None,
    azure: AzureOverviewResult | None,
    gcp: GcpOverviewResponse | None,
    per_provider: int = 5,
    limit: int = 12,
) -> list[UsageBreakdownEntry]:
    """
    Rank the top services of every provider in one list.

    Takes the first ``per_provider`` services each provider reports (their
    lists are already ranked), then sorts by amount descending and keeps
    ``limit`` entries. Ties keep provider order.
    """
    entries: list[UsageBreakdownEntry] = []

    if aws is not None:
        entries.extend(
            UsageBreakdownEntry(provider="aws", service=s.service, amount=s.amount)
            for s in aws.top_services[:per_provider]
        )

    azure_window = azure.month_to_date if azure is not None else None
    if azure_window is not None:
        entries.extend(
            UsageBreakdownEntry(provider="azure", service=s.service, amount=s.amount)
            for s in azure_window.by_service[:per_provider]
        )

    if gcp is not None and gcp.cost is not None:
        entries.extend(
            UsageBreakdownEntry(provider="gcp", service=s.service, amount=s.amount)
            for s in gcp.cost.by_service[:per_provider]
        )

    for entry in entries:
        _finite(entry.amount, f"{entry.provider} {entry.service} amount")

    return sorted(entries, key=lambda entry: entry.amount, reverse=True)[:limit]
