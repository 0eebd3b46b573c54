"""Aggregation core: orchestration, merging, normalization, insights and notes."""

from .insights import InsightEngine
from .models import (
    OverviewNote,
    ProviderComputeTotals,
    ProviderCostTotals,
    ProviderStorageTotals,
    UnifiedCostTimelinePoint,
    UnifiedInsight,
    UnifiedOverview,
)
from .notes import NotesCollector
from .overview import OverviewService
from .settle import Err, Ok, settle_all
from .timeline import merge_timelines
from .totals import AggregationError
