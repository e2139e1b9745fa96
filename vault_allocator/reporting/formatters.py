"""
ASCII terminal formatters for CLI output.

All formatters return plain multi-line strings suitable for ``typer.echo()``.
Unknown values render as ``"—"``.

Decision table layout::

    Rank  Market                     Util  Status        Exit      APY    Score    Regime   Weight  Current
    -------------------------------------------------------------------------------------------------------
       1  USDT0 / WETH             83.00%  OPTIMAL     17.00%    6.10%   0.0017        OK   71.23%   40.00%
       2  USDT0 / wstETH           90.00%  SATURATED   10.00%    8.00%   0.0002       SAT   28.77%   35.00%
       3  USDT0 / cbBTC            95.00%  CRITICAL     5.00%   12.00%        —      CRIT    0.00%   25.00%
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from vault_allocator.models.market import MarketDecision
    from vault_allocator.strategy.engine import AllocationSummary

_DASH = "—"


def format_pct(value: Optional[float], decimals: int = 2) -> str:
    """Format a value that is already in percent units (``12.5`` -> ``"12.50%"``)."""
    if value is None:
        return _DASH
    return f"{value:.{decimals}f}%"


def format_fraction(value: Optional[float], decimals: int = 2) -> str:
    """Format a decimal fraction as a percentage (``0.125`` -> ``"12.50%"``)."""
    if value is None:
        return _DASH
    return format_pct(value * 100.0, decimals)


def format_apy(value: Optional[float]) -> str:
    """Format a decimal APY (``0.05`` -> ``"5.00%"``)."""
    return format_fraction(value, 2)


def format_score(value: Optional[float]) -> str:
    if value is None:
        return _DASH
    return f"{value:.4f}"


def format_decisions_table(
    decisions: Sequence["MarketDecision"],
    summary:   Optional["AllocationSummary"] = None,
) -> str:
    """Format ranked decisions as an ASCII table.

    Args:
        decisions: Output of ``compute_market_decisions()`` (already ranked).
        summary:   Optional ``AllocationSummary`` printed under the table.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Target Allocation ===")

    if not decisions:
        lines.append("")
        lines.append("  (no markets in batch)")
        return "\n".join(lines)

    header = (
        f"  {'Rank':>4}  {'Market':<22}  {'Util':>7}  {'Status':<9}  {'Exit':>7}  {'APY':>7}  "
        f"{'Score':>7}  {'Regime':>8}  {'Weight':>7}  {'Current':>7}"
    )
    lines.append("")
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    for rank, d in enumerate(decisions, start=1):
        label = d.market_label if len(d.market_label) <= 22 else d.market_label[:21] + "~"
        lines.append(
            f"  {rank:>4}  {label:<22}  {format_fraction(d.utilization):>7}  "
            f"{str(d.utilization_status or _DASH):<9}  "
            f"{format_fraction(d.exit_ratio):>7}  {format_apy(d.yield_rate):>7}  "
            f"{format_score(d.raw_score_after_regime):>7}  {str(d.regime):>8}  "
            f"{format_fraction(d.weight):>7}  {format_pct(d.current_allocation_pct):>7}"
        )

    if summary is not None:
        lines.append("")
        regimes = ", ".join(
            f"{name}={count}" for name, count in sorted(summary.regime_counts.items())
        )
        lines.append(f"  Markets:   {summary.market_count} ({regimes})")
        lines.append(
            f"  Eligible:  {summary.eligible_count}    Gated: {summary.zeroed_count}    "
            f"Active: {summary.active_count}"
        )
        lines.append(f"  Best:      {summary.best_market_id or _DASH}")
        if summary.active_count == 0:
            lines.append("  [HOLD] No market has a positive adjusted score; deposit nowhere.")
        if summary.exceeds_concentration_cap:
            lines.append(
                f"  [WARN] Max weight {format_fraction(summary.max_weight)} exceeds "
                "the concentration cap."
            )
        if summary.below_min_active_markets and summary.active_count > 0:
            lines.append(
                f"  [WARN] Only {summary.active_count} active market(s); below the "
                "minimum active market target."
            )

    return "\n".join(lines)
