"""
Unified multi-cloud overview service.

Fans out to the AWS, Azure and GCP summary collaborators concurrently,
absorbs their failures as notes, and assembles one fresh snapshot per call.
"""

import logging
import time
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone

from ..config.settings import OverviewConfig, get_config
from ..providers.aws import AwsCostSummary, AwsSummaryProvider
from ..providers.azure import AzureOverviewProvider, AzureOverviewResult
from ..providers.gcp import GcpOverviewProvider, GcpOverviewResponse
from . import totals as normalizer
from .insights import InsightEngine
from .models import ComputeTotals, CostTotals, StorageTotals, UnifiedOverview
from .notes import NotesCollector
from .settle import settle_all, value_or_none
from .timeline import aws_cost_points, azure_cost_points, gcp_cost_points, merge_timelines

logger = logging.getLogger(__name__)

# Section labels used in notes for each top-level call
AWS_COST_SECTION = "Cost data"
AWS_COMPUTE_SECTION = "EC2 instances"
AWS_STORAGE_SECTION = "S3 buckets"
BUNDLED_SECTION = "Overview"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OverviewService:
    """Builds the unified overview from the three provider collaborators."""

    def __init__(
        self,
        aws: AwsSummaryProvider,
        azure: AzureOverviewProvider,
        gcp: GcpOverviewProvider,
        config: OverviewConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the service.

        Args:
            aws: AWS collaborator (three independent calls)
            azure: Bundled Azure collaborator
            gcp: Bundled GCP collaborator
            config: Overview configuration (global config if omitted)
            clock: Source of the snapshot timestamp
        """
        self.aws = aws
        self.azure = azure
        self.gcp = gcp
        self.config = config or get_config()
        self.clock = clock

    def _aws_cost_window(self, today: date) -> tuple[date, date]:
        start = today - timedelta(days=self.config.aws_lookback_days - 1)
        return start, today

    async def get_unified_overview(self) -> UnifiedOverview:
        """
        Fetch every provider concurrently and assemble the overview.

        Provider failures never propagate: a rejected call becomes a null
        section plus a note. Only defects in the aggregation itself raise.

        Returns:
            A structurally complete UnifiedOverview
        """
        fetched_at = self.clock()
        start, end = self._aws_cost_window(fetched_at.date())
        timeout = self.config.provider_timeout

        fetch_start = time.time()
        outcomes = await settle_all(
            [
                self.aws.get_cost_summary(start, end, "DAILY"),
                self.aws.list_instances(),
                self.aws.list_buckets(),
                self.azure.get_overview(),
                self.gcp.get_overview(),
            ],
            labels=["aws cost", "aws instances", "aws buckets", "azure overview", "gcp overview"],
            timeout=timeout,
        )
        logger.info(f"Provider fan-out settled in {time.time() - fetch_start:.3f}s")

        aws_cost_outcome, aws_instances_outcome, aws_buckets_outcome, azure_outcome, gcp_outcome = (
            outcomes
        )
        aws_cost: AwsCostSummary | None = value_or_none(aws_cost_outcome)
        aws_instances = value_or_none(aws_instances_outcome)
        aws_buckets = value_or_none(aws_buckets_outcome)
        azure: AzureOverviewResult | None = value_or_none(azure_outcome)
        gcp: GcpOverviewResponse | None = value_or_none(gcp_outcome)

        timeline = merge_timelines(
            aws_cost_points(aws_cost), azure_cost_points(azure), gcp_cost_points(gcp)
        )

        cost_aws = normalizer.aws_cost_totals(aws_cost)
        cost_azure = normalizer.azure_cost_totals(azure)
        cost_gcp = normalizer.gcp_cost_totals(gcp)
        cost_totals = CostTotals(
            aws=cost_aws,
            azure=cost_azure,
            gcp=cost_gcp,
            combined=normalizer.combine_cost_totals(
                [cost_aws, cost_azure, cost_gcp], self.config.reporting_currency
            ),
        )

        compute_aws = normalizer.summarise_ec2(aws_instances)
        compute_azure = normalizer.summarise_azure_compute(azure)
        compute_gcp = normalizer.summarise_gcp_compute(gcp)
        compute_totals = ComputeTotals(
            aws=compute_aws,
            azure=compute_azure,
            gcp=compute_gcp,
            combined=normalizer.combine_compute_totals([compute_aws, compute_azure, compute_gcp]),
        )

        storage = StorageTotals(
            aws=normalizer.aws_storage_totals(aws_buckets),
            azure=normalizer.azure_storage_totals(azure),
            gcp=normalizer.gcp_storage_totals(gcp),
        )

        usage_breakdown = normalizer.build_usage_breakdown(
            aws_cost,
            azure,
            gcp,
            per_provider=self.config.services_per_provider,
            limit=self.config.usage_breakdown_limit,
        )

        insights = InsightEngine(
            trend_threshold=self.config.trend_threshold, limit=self.config.insight_limit
        ).evaluate(
            cost_totals,
            compute_totals,
            alerts={"gcp": gcp.alerts if gcp is not None else []},
        )

        notes = NotesCollector(per_provider_limit=self.config.notes_per_provider).collect(
            rejected={
                "aws": [
                    (AWS_COST_SECTION, aws_cost_outcome),
                    (AWS_COMPUTE_SECTION, aws_instances_outcome),
                    (AWS_STORAGE_SECTION, aws_buckets_outcome),
                ],
                "azure": [(BUNDLED_SECTION, azure_outcome)],
                "gcp": [(BUNDLED_SECTION, gcp_outcome)],
            },
            section_errors={
                "azure": azure.errors if azure is not None else [],
                "gcp": gcp.errors if gcp is not None else [],
            },
        )

        window = self.config.timeline_window
        return UnifiedOverview(
            fetched_at=fetched_at,
            cost_timeline=timeline[-window:] if window > 0 else [],
            cost_totals=cost_totals,
            compute_totals=compute_totals,
            storage=storage,
            usage_breakdown=usage_breakdown,
            insights=insights,
            notes=notes,
        )
