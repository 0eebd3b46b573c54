"""
Text rendering of the unified overview for console output.
"""

import json
import logging
import sys
from enum import Enum

from pydantic import BaseModel, Field

from .core.models import ProviderCostTotals, UnifiedOverview
from .providers.base import VALID_PROVIDERS

logger = logging.getLogger(__name__)


class OutputFormat(Enum):
    """Supported output formats for the overview."""

    PLAIN = "plain"
    COLORED = "colored"
    JSON = "json"


class Color:
    """ANSI color codes for terminal output."""

    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    END = "\033[0m"  # Reset color


SEVERITY_COLORS = {"info": Color.BLUE, "warning": Color.YELLOW, "critical": Color.RED}


class OverviewFormatConfig(BaseModel):
    """Configuration for overview formatting."""

    show_timeline: bool = Field(True, description="Whether to print the daily timeline")
    timeline_rows: int = Field(7, ge=0, le=366, description="Most recent timeline days to print")
    show_breakdown: bool = Field(True, description="Whether to print the usage breakdown")


def _format_money(amount: float | None, currency: str = "USD") -> str:
    if amount is None:
        return "n/a"
    if currency.upper() == "USD":
        return f"${amount:,.2f}"
    return f"{amount:,.2f} {currency}"


def _format_change(change: float | None) -> str:
    if change is None:
        return "n/a"
    return f"{change * 100:+.1f}%"


class OverviewTextFormatter:
    """Formats a UnifiedOverview for the terminal."""

    def __init__(self, config: OverviewFormatConfig | None = None):
        self.config = config or OverviewFormatConfig()

    def _supports_color(self) -> bool:
        """Check if the terminal supports color output."""
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    def format_overview(
        self, overview: UnifiedOverview, format_type: OutputFormat = OutputFormat.PLAIN
    ) -> str:
        """
        Format the overview for text output.

        Args:
            overview: Overview to format
            format_type: Output format type

        Returns:
            Formatted overview string
        """
        if format_type == OutputFormat.JSON:
            return json.dumps(overview.to_dict(), indent=2)

        use_colors = format_type == OutputFormat.COLORED and self._supports_color()

        def paint(color: str, text: str) -> str:
            return f"{color}{text}{Color.END}" if use_colors else text

        lines = [paint(Color.BOLD, f"Unified overview ({overview.fetched_at.isoformat()})"), ""]
        lines.extend(self._cost_lines(overview, paint))
        lines.append("")
        lines.extend(self._compute_lines(overview))
        lines.extend(self._storage_lines(overview))

        if self.config.show_breakdown and overview.usage_breakdown:
            lines.append("")
            lines.append("Top services:")
            for entry in overview.usage_breakdown:
                lines.append(
                    f"  {entry.provider.upper():<6} {entry.service:<40} {_format_money(entry.amount)}"
                )

        if self.config.show_timeline and overview.cost_timeline and self.config.timeline_rows:
            lines.append("")
            lines.append(f"{'DAY':<12} {'AWS':>12} {'AZURE':>12} {'GCP':>12}")
            for point in overview.cost_timeline[-self.config.timeline_rows :]:
                cells = [
                    f"{value:>12.2f}" if value is not None else f"{'-':>12}"
                    for value in (point.aws, point.azure, point.gcp)
                ]
                lines.append(f"{point.day:<12} {' '.join(cells)}")

        if overview.insights:
            lines.append("")
            lines.append("Insights:")
            for insight in overview.insights:
                level = paint(SEVERITY_COLORS[insight.severity], f"[{insight.severity.upper()}]")
                lines.append(f"  {level} {insight.title}: {insight.detail}")

        if overview.notes:
            lines.append("")
            lines.append("Notes:")
            for note in overview.notes:
                lines.append(f"  [{note.provider.upper()}] {paint(Color.YELLOW, note.message)}")

        return "\n".join(lines)

    def _cost_lines(self, overview: UnifiedOverview, paint) -> list[str]:
        lines = ["Cost:"]
        for provider in VALID_PROVIDERS:
            totals: ProviderCostTotals | None = getattr(overview.cost_totals, provider)
            if totals is None:
                lines.append(f"  {provider.upper():<9} unavailable")
                continue
            mock = paint(Color.CYAN, " (sample data)") if totals.is_mock else ""
            lines.append(
                f"  {provider.upper():<9} {_format_money(totals.total, totals.currency):>14}"
                f"  change {_format_change(totals.change_percentage)}{mock}"
            )
        combined = overview.cost_totals.combined
        lines.append(
            paint(
                Color.BOLD,
                f"  {'COMBINED':<9} {_format_money(combined.total, combined.currency):>14}",
            )
        )
        return lines

    def _compute_lines(self, overview: UnifiedOverview) -> list[str]:
        lines = [f"Compute: {'':<6} {'TOTAL':>6} {'RUNNING':>8} {'STOPPED':>8} {'TERMINATED':>10}"]
        for provider in (*VALID_PROVIDERS, "combined"):
            totals = getattr(overview.compute_totals, provider)
            if totals is None:
                lines.append(f"  {provider.upper():<13} unavailable")
                continue
            lines.append(
                f"  {provider.upper():<13} {totals.total:>6} {totals.running:>8} "
                f"{totals.stopped:>8} {totals.terminated:>10}"
            )
        return lines

    def _storage_lines(self, overview: UnifiedOverview) -> list[str]:
        lines = ["Storage:"]
        for provider in VALID_PROVIDERS:
            totals = getattr(overview.storage, provider)
            if totals is None:
                lines.append(f"  {provider.upper():<9} unavailable")
                continue
            parts = []
            if totals.buckets is not None:
                parts.append(f"{totals.buckets} buckets")
            if totals.accounts is not None:
                parts.append(f"{totals.accounts} accounts")
            if totals.storage_gb is not None:
                parts.append(f"{totals.storage_gb:,.0f} GB")
            lines.append(f"  {provider.upper():<9} {', '.join(parts) or 'no data'}")
        return lines
