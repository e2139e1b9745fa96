"""
Raw market scoring, before any regime gating.

    raw = yield_rate * utilization_attractiveness(u) * exit_safety(exit_ratio)

Returns 0.0 when any of the three inputs is unknown.  A negative yield gives a
negative raw score; it is passed to the regime gate unclamped.
"""

from __future__ import annotations

from typing import Optional

from vault_allocator.strategy.attractiveness import exit_safety, utilization_attractiveness
from vault_allocator.strategy.policy import DEFAULT_POLICY, StrategyPolicy


def raw_score(
    yield_rate:  Optional[float],
    utilization: Optional[float],
    exit_ratio:  Optional[float],
    policy:      StrategyPolicy = DEFAULT_POLICY,
) -> float:
    """Compute the unregimed score for one market.

    Args:
        yield_rate:  Annualized yield as a decimal; ``None`` if unknown.
        utilization: Utilization in [0, 1]; ``None`` if unknown.
        exit_ratio:  Withdrawable fraction; ``None`` if unknown.
        policy:      Scoring constants.

    Returns:
        The raw score (any real number), or 0.0 when an input is missing.
    """
    if yield_rate is None or utilization is None or exit_ratio is None:
        return 0.0

    return (
        yield_rate
        * utilization_attractiveness(utilization, policy)
        * exit_safety(exit_ratio, policy)
    )
