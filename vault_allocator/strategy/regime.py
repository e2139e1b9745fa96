"""
Regime gate: classify a market and adjust its raw score.

Rules (evaluated in order — first match wins)
---------------------------------------------
    1. MISSING  : utilization or exit_ratio unknown     -> score 0
    2. CRIT     : utilization >= u_crit                 -> score 0
    3. EXIT_MIN : exit_ratio < exit_min                 -> score 0
    4. SAT      : u_sat <= utilization < u_crit         -> score * sat_inflow_mult
    5. OK       : everything else                       -> score unchanged

The zeroing rules come before the SAT discount so that a market which is both
saturated and unsafe is always zeroed.  CRIT is checked before EXIT_MIN, so a
market at ``u = 0.95, exit_ratio = 0.01`` is reported as CRIT.

Each call classifies one market independently; there is no state carried
between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from vault_allocator.strategy.policy import DEFAULT_POLICY, StrategyPolicy
from vault_allocator.taxonomy.regime_taxonomy import RegimeReason, UtilizationStatus


@dataclass(frozen=True)
class RegimeResult:
    """Outcome of the regime gate for one market.

    Attributes:
        adjusted_score: Raw score after zeroing or discounting.
        regime:         The regime that matched.
    """

    adjusted_score: float
    regime:         RegimeReason


def apply_regime(
    utilization: Optional[float],
    exit_ratio:  Optional[float],
    raw_score:   float,
    policy:      StrategyPolicy = DEFAULT_POLICY,
) -> RegimeResult:
    """Classify a market into its regime and compute the adjusted score.

    Args:
        utilization: Utilization in [0, 1], or ``None``.
        exit_ratio:  Withdrawable fraction, or ``None``.
        raw_score:   Output of :func:`~vault_allocator.strategy.scorer.raw_score`.
        policy:      Gate thresholds.

    Returns:
        :class:`RegimeResult` with the adjusted score and regime.
    """
    if utilization is None or exit_ratio is None:
        return RegimeResult(adjusted_score=0.0, regime=RegimeReason.MISSING)

    if utilization >= policy.u_crit:
        return RegimeResult(adjusted_score=0.0, regime=RegimeReason.CRIT)

    if exit_ratio < policy.exit_min:
        return RegimeResult(adjusted_score=0.0, regime=RegimeReason.EXIT_MIN)

    if policy.u_sat <= utilization < policy.u_crit:
        return RegimeResult(
            adjusted_score=raw_score * policy.sat_inflow_mult,
            regime=RegimeReason.SAT,
        )

    return RegimeResult(adjusted_score=raw_score, regime=RegimeReason.OK)


def utilization_status(
    utilization: Optional[float],
    policy:      StrategyPolicy = DEFAULT_POLICY,
) -> Optional[UtilizationStatus]:
    """Utilization band shown next to each market; ``None`` when unknown."""
    if utilization is None:
        return None
    if utilization >= policy.u_crit:
        return UtilizationStatus.CRITICAL
    if utilization >= policy.u_sat:
        return UtilizationStatus.SATURATED
    if utilization >= policy.u_opt_low:
        return UtilizationStatus.OPTIMAL
    return UtilizationStatus.STABLE
