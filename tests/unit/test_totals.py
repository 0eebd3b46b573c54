"""
Tests for totals normalization: cost totals, change percentages, compute,
storage and the usage breakdown.
"""

from datetime import date

import pytest

from multicloud_overview.core.models import ProviderComputeTotals, ProviderCostTotals
from multicloud_overview.core.totals import (
    AggregationError,
    aws_cost_totals,
    aws_storage_totals,
    azure_cost_totals,
    azure_storage_totals,
    build_usage_breakdown,
    combine_compute_totals,
    combine_cost_totals,
    compute_aws_change,
    compute_azure_change,
    compute_gcp_change,
    gcp_cost_totals,
    gcp_storage_totals,
    round_amount,
    summarise_azure_compute,
    summarise_ec2,
    summarise_gcp_compute,
)
from multicloud_overview.providers.azure import AzureCostWindow, AzureOverviewResult
from multicloud_overview.providers.base import MoneyAmount, ServiceCost
from multicloud_overview.providers.gcp import GcpCostBreakdown, GcpOverviewResponse


@pytest.mark.unit
@pytest.mark.aws
class TestAwsChange:
    """AWS compares its last 30 days with the 30 before."""

    def test_recent_130_prior_100(self, make_series):
        series = make_series(date(2024, 4, 1), [100 / 30] * 30 + [130 / 30] * 30)

        assert compute_aws_change(series) == 0.3

    def test_fewer_than_14_points_is_none(self, make_series):
        series = make_series(date(2024, 4, 1), [1.0] * 13)

        assert compute_aws_change(series) is None

    def test_prior_sum_zero_is_none(self, make_series):
        series = make_series(date(2024, 4, 1), [0.0] * 30 + [5.0] * 30)

        assert compute_aws_change(series) is None

    def test_no_prior_period_is_none(self, make_series):
        """20 points all fall inside the recent window."""
        series = make_series(date(2024, 4, 1), [1.0] * 20)

        assert compute_aws_change(series) is None

    def test_short_prior_period(self, make_series):
        """With 40 points the prior window is the first 10 days."""
        series = make_series(date(2024, 4, 1), [3.0] * 10 + [1.0] * 30)

        assert compute_aws_change(series) == 0.0

    def test_only_two_windows_are_compared(self, make_series):
        """Days older than the prior window are ignored."""
        series = make_series(date(2024, 3, 1), [999.0] * 10 + [1.0] * 30 + [2.0] * 30)

        assert compute_aws_change(series) == 1.0

    def test_decrease_is_negative(self, make_series):
        series = make_series(date(2024, 4, 1), [2.0] * 30 + [1.0] * 30)

        assert compute_aws_change(series) == -0.5

    def test_unsorted_series_uses_calendar_order(self, make_series):
        series = make_series(date(2024, 4, 1), [100 / 30] * 30 + [130 / 30] * 30)

        assert compute_aws_change(list(reversed(series))) == 0.3

    def test_rounded_to_four_places(self, make_series):
        series = make_series(date(2024, 4, 1), [3.0] * 30 + [4.0] * 30)

        assert compute_aws_change(series) == 0.3333


@pytest.mark.unit
@pytest.mark.azure
class TestAzureChange:
    def _overview(self, current: float | None, previous: float | None) -> AzureOverviewResult:
        windows = []
        if current is not None:
            windows.append(
                AzureCostWindow(label="Month to date", total=MoneyAmount(amount=current))
            )
        if previous is not None:
            windows.append(
                AzureCostWindow(label="Previous month", total=MoneyAmount(amount=previous))
            )
        return AzureOverviewResult(cost=windows)

    def test_month_to_date_vs_previous(self):
        assert compute_azure_change(self._overview(120.0, 100.0)) == 0.2

    def test_missing_window_is_none(self):
        assert compute_azure_change(self._overview(120.0, None)) is None
        assert compute_azure_change(self._overview(None, 100.0)) is None

    def test_previous_zero_is_none(self):
        assert compute_azure_change(self._overview(120.0, 0.0)) is None

    def test_no_cost_section_is_none(self):
        assert compute_azure_change(AzureOverviewResult(cost=None)) is None
        assert compute_azure_change(None) is None

    def test_previous_window_is_not_mistaken_for_current(self):
        """A leading "Previous month" window must not be read as month to date."""
        overview = AzureOverviewResult(
            cost=[
                AzureCostWindow(label="Previous month", total=MoneyAmount(amount=100.0)),
                AzureCostWindow(label="Month to date", total=MoneyAmount(amount=50.0)),
            ]
        )

        assert compute_azure_change(overview) == -0.5


@pytest.mark.unit
@pytest.mark.gcp
class TestGcpChange:
    def test_passthrough_rounded(self):
        overview = GcpOverviewResponse(
            cost=GcpCostBreakdown(total=10.0, change_percentage=0.123456)
        )

        assert compute_gcp_change(overview) == 0.1235

    def test_absent_is_none(self):
        assert compute_gcp_change(GcpOverviewResponse(cost=GcpCostBreakdown(total=1.0))) is None
        assert compute_gcp_change(GcpOverviewResponse()) is None
        assert compute_gcp_change(None) is None


@pytest.mark.unit
class TestCostTotals:
    def test_aws_total_is_sum_of_series(self, aws_cost_summary):
        totals = aws_cost_totals(aws_cost_summary)

        assert totals.total == 230.0
        assert totals.currency == "USD"
        assert totals.change_percentage == 0.3
        assert totals.is_mock is False

    def test_azure_total_from_month_to_date(self, azure_overview):
        totals = azure_cost_totals(azure_overview)

        assert totals.total == 120.0
        assert totals.change_percentage == 0.2

    def test_azure_without_month_window_is_none(self):
        overview = AzureOverviewResult(
            cost=[AzureCostWindow(label="Previous month", total=MoneyAmount(amount=1))]
        )

        assert azure_cost_totals(overview) is None

    def test_gcp_total_and_mock_flag(self):
        overview = GcpOverviewResponse(
            cost=GcpCostBreakdown(total=80.456, is_mock=True)
        )

        totals = gcp_cost_totals(overview)

        assert totals.total == 80.46
        assert totals.currency == "USD"
        assert totals.is_mock is True

    def test_gcp_response_level_mock_flag_is_kept(self):
        overview = GcpOverviewResponse(is_mock=True, cost=GcpCostBreakdown(total=1.0))

        assert gcp_cost_totals(overview).is_mock is True

    def test_missing_snapshots_are_none(self):
        assert aws_cost_totals(None) is None
        assert azure_cost_totals(None) is None
        assert gcp_cost_totals(None) is None
        assert gcp_cost_totals(GcpOverviewResponse(cost=None)) is None

    def test_combined_sums_present_providers(self):
        combined = combine_cost_totals(
            [None, ProviderCostTotals(total=120.0), ProviderCostTotals(total=80.0)]
        )

        assert combined.total == 200.0
        assert combined.currency == "USD"
        assert combined.change_percentage is None

    def test_combined_single_provider_equals_its_total(self):
        combined = combine_cost_totals([ProviderCostTotals(total=42.42), None, None])

        assert combined.total == 42.42

    def test_combined_rounding(self):
        combined = combine_cost_totals(
            [ProviderCostTotals(total=0.1), ProviderCostTotals(total=0.2)]
        )

        assert combined.total == 0.3

    def test_combined_all_missing_is_zero(self):
        combined = combine_cost_totals([None, None, None], currency="EUR")

        assert combined.total == 0.0
        assert combined.currency == "EUR"

    def test_combined_change_never_blended(self):
        combined = combine_cost_totals(
            [
                ProviderCostTotals(total=10, change_percentage=0.5),
                ProviderCostTotals(total=10, change_percentage=0.1),
            ]
        )

        assert combined.change_percentage is None

    def test_non_finite_raises(self):
        with pytest.raises(AggregationError):
            round_amount(float("inf"))
        with pytest.raises(AggregationError):
            combine_cost_totals([ProviderCostTotals(total=float("nan"))])


@pytest.mark.unit
class TestComputeTotals:
    def test_ec2_state_classification(self, aws_instances):
        totals = summarise_ec2(aws_instances)

        assert totals == ProviderComputeTotals(total=6, running=2, stopped=2, terminated=1)

    def test_ec2_failed_listing_is_none(self):
        assert summarise_ec2(None) is None
        assert summarise_ec2([]) == ProviderComputeTotals()

    def test_azure_deallocated_counts(self, azure_overview):
        totals = summarise_azure_compute(azure_overview)

        assert totals == ProviderComputeTotals(total=4, running=2, stopped=2, terminated=1)

    def test_gcp_passthrough(self, gcp_overview):
        assert summarise_gcp_compute(gcp_overview) == ProviderComputeTotals(
            total=3, running=3, stopped=0, terminated=0
        )

    def test_combined_treats_missing_as_zero(self):
        combined = combine_compute_totals(
            [
                None,
                ProviderComputeTotals(total=4, running=2, stopped=2, terminated=1),
                ProviderComputeTotals(total=3, running=3),
            ]
        )

        assert combined == ProviderComputeTotals(total=7, running=5, stopped=2, terminated=1)

    def test_combined_all_missing_is_zeroed(self):
        assert combine_compute_totals([None, None, None]) == ProviderComputeTotals()


@pytest.mark.unit
class TestStorageTotals:
    def test_storage_counts(self, aws_buckets, azure_overview, gcp_overview):
        assert aws_storage_totals(aws_buckets).buckets == 2
        assert azure_storage_totals(azure_overview).accounts == 2
        gcp = gcp_storage_totals(gcp_overview)
        assert (gcp.buckets, gcp.storage_gb) == (4, 120.5)

    def test_missing_is_none(self):
        assert aws_storage_totals(None) is None
        assert azure_storage_totals(AzureOverviewResult()) is None
        assert gcp_storage_totals(GcpOverviewResponse()) is None


@pytest.mark.unit
class TestUsageBreakdown:
    def test_ranked_across_providers(self, aws_cost_summary, azure_overview, gcp_overview):
        breakdown = build_usage_breakdown(aws_cost_summary, azure_overview, gcp_overview)

        amounts = [entry.amount for entry in breakdown]
        assert amounts == sorted(amounts, reverse=True)
        assert breakdown[0].provider == "aws"
        assert {entry.provider for entry in breakdown} == {"aws", "azure", "gcp"}

    def test_per_provider_and_overall_limits(self):
        services = [ServiceCost(service=f"svc-{i}", amount=100 - i) for i in range(8)]
        gcp = GcpOverviewResponse(cost=GcpCostBreakdown(total=1.0, by_service=services))

        breakdown = build_usage_breakdown(None, None, gcp, per_provider=5, limit=3)

        assert [entry.service for entry in breakdown] == ["svc-0", "svc-1", "svc-2"]
        assert len(build_usage_breakdown(None, None, gcp, per_provider=5, limit=12)) == 5

    def test_ties_keep_provider_order(self):
        azure = AzureOverviewResult(
            cost=[
                AzureCostWindow(
                    label="Month to date",
                    total=MoneyAmount(amount=10),
                    by_service=[ServiceCost(service="Storage", amount=10)],
                )
            ]
        )
        gcp = GcpOverviewResponse(
            cost=GcpCostBreakdown(total=10, by_service=[ServiceCost(service="BigQuery", amount=10)])
        )

        breakdown = build_usage_breakdown(None, azure, gcp)

        assert [entry.provider for entry in breakdown] == ["azure", "gcp"]

    def test_no_providers(self):
        assert build_usage_breakdown(None, None, None) == []
