"""
Calendar-aligned merging of per-provider daily cost series.
"""

import logging
from collections.abc import Iterable
from datetime import date

from ..providers.aws import AwsCostSummary
from ..providers.azure import AzureOverviewResult
from ..providers.base import CostPoint
from ..providers.gcp import GcpOverviewResponse
from .models import UnifiedCostTimelinePoint

logger = logging.getLogger(__name__)


def aws_cost_points(summary: AwsCostSummary | None) -> list[CostPoint]:
    if summary is None:
        return []
    return list(summary.time_series)


def azure_cost_points(overview: AzureOverviewResult | None) -> list[CostPoint]:
    """Daily points of the month-to-date window, else of the first window."""
    if overview is None or not overview.cost:
        return []
    window = overview.month_to_date or overview.cost[0]
    return list(window.daily or [])


def gcp_cost_points(overview: GcpOverviewResponse | None) -> list[CostPoint]:
    if overview is None or overview.cost is None:
        return []
    return list(overview.cost.daily or [])


def merge_timelines(
    aws: Iterable[CostPoint] = (),
    azure: Iterable[CostPoint] = (),
    gcp: Iterable[CostPoint] = (),
) -> list[UnifiedCostTimelinePoint]:
    """
    Merge per-provider daily series into one ascending timeline.

    Each provider only ever writes its own field on a day's entry, so the
    result does not depend on the order providers are merged in. Each
    provider's series is expected to hold at most one point per day.

    Args:
        aws: AWS daily points
        azure: Azure daily points
        gcp: GCP daily points

    Returns:
        Timeline entries, unique per day, sorted ascending

    Raises:
        ValueError: If a point's day is not an ISO calendar date
    """
    by_day: dict[str, UnifiedCostTimelinePoint] = {}

    for field, points in (("aws", aws), ("azure", azure), ("gcp", gcp)):
        for point in points:
            day = date.fromisoformat(point.day).isoformat()
            entry = by_day.get(day)
            if entry is None:
                entry = by_day[day] = UnifiedCostTimelinePoint(day=day)
            setattr(entry, field, point.amount)

    logger.debug(f"Merged timeline spans {len(by_day)} days")

    # ISO days sort lexicographically in calendar order
    return [by_day[day] for day in sorted(by_day)]
