"""
Rule-based operational insights for the unified overview.

The engine is a pure function of its inputs: the same totals and alerts
always produce the same insights in the same order.
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from itertools import chain, islice

from ..providers.base import VALID_PROVIDERS, ProviderAlert
from .models import ComputeTotals, CostTotals, UnifiedInsight

logger = logging.getLogger(__name__)

# Alert type a collaborator uses for its own spend-trend alert
COST_ALERT_TYPE = "cost"

PROVIDER_LABELS = {"aws": "AWS", "azure": "Azure", "gcp": "GCP"}

TREND_HINTS = {
    "aws": "Review EC2 and S3 usage for optimisation opportunities.",
    "azure": "Review the month-to-date service breakdown for unexpected growth.",
    "gcp": "Review Compute Engine and BigQuery usage for optimisation opportunities.",
}

IDLE_RULES = {
    "aws": (
        "Stopped EC2 instances detected",
        "{count} EC2 instances are stopped or stopping. "
        "Schedule terminations or re-use to avoid idle costs.",
    ),
    "azure": (
        "Azure VMs available to deallocate",
        "{count} Azure virtual machines are not running. "
        "Consider deallocating to release compute capacity and cut spend.",
    ),
    "gcp": (
        "Stopped Compute Engine instances detected",
        "{count} compute instances are stopped or suspended. Review schedules to optimise spend.",
    ),
}


class InsightEngine:
    """Evaluates the fixed, ordered insight rules."""

    def __init__(self, trend_threshold: float = 0.05, limit: int = 6):
        self.trend_threshold = trend_threshold
        self.limit = limit

    def evaluate(
        self,
        cost_totals: CostTotals,
        compute_totals: ComputeTotals,
        alerts: Mapping[str, Sequence[ProviderAlert]] | None = None,
    ) -> list[UnifiedInsight]:
        """
        Run every rule in order and keep the first ``limit`` matches.

        Rules, in evaluation order:
            1. Spend trending upward, per provider, unless the provider
               passed its own cost alert
            2. Idle (stopped) compute, per provider
            3. Provider-classified alerts, passed through

        Args:
            cost_totals: Normalized cost totals
            compute_totals: Normalized compute totals
            alerts: Pre-classified alerts keyed by provider

        Returns:
            Ordered list of at most ``limit`` insights
        """
        alerts = alerts or {}
        matches = chain(
            self._trend_insights(cost_totals, alerts),
            self._idle_insights(compute_totals),
            self._alert_insights(alerts),
        )
        return list(islice(matches, max(self.limit, 0)))

    def _trend_insights(
        self, cost_totals: CostTotals, alerts: Mapping[str, Sequence[ProviderAlert]]
    ) -> Iterator[UnifiedInsight]:
        for provider in VALID_PROVIDERS:
            # The provider already reported its own spend trend
            if any(alert.type == COST_ALERT_TYPE for alert in alerts.get(provider, ())):
                continue
            totals = getattr(cost_totals, provider)
            change = totals.change_percentage if totals is not None else None
            if change is None or change <= self.trend_threshold:
                continue
            label = PROVIDER_LABELS[provider]
            yield UnifiedInsight(
                id=f"{provider}-cost-trend",
                provider=provider,
                title=f"{label} spend trending upward",
                detail=(
                    f"{label} cost increased {change * 100:.1f}% over the previous period. "
                    f"{TREND_HINTS[provider]}"
                ),
                severity="warning",
            )

    def _idle_insights(self, compute_totals: ComputeTotals) -> Iterator[UnifiedInsight]:
        for provider in VALID_PROVIDERS:
            totals = getattr(compute_totals, provider)
            if totals is None or totals.stopped <= 0:
                continue
            title, detail = IDLE_RULES[provider]
            yield UnifiedInsight(
                id=f"{provider}-idle-compute",
                provider=provider,
                title=title,
                detail=detail.format(count=totals.stopped),
                severity="info",
            )

    def _alert_insights(
        self, alerts: Mapping[str, Sequence[ProviderAlert]]
    ) -> Iterator[UnifiedInsight]:
        for provider in VALID_PROVIDERS:
            for index, alert in enumerate(alerts.get(provider, ())):
                yield UnifiedInsight(
                    id=f"{provider}-alert-{index}",
                    provider=provider,
                    title=f"{PROVIDER_LABELS[provider]} {alert.type} alert",
                    detail=alert.message,
                    severity=alert.severity,
                )
