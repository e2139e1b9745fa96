"""
Attractiveness functions: scalar maps from market metrics to [0, 1] factors.

utilization_attractiveness(u)
    Gaussian bell centred on the policy sweet spot ``u0``::

        exp(-((u - u0) / sigma) ** 2)

    Exactly 1.0 at ``u == u0`` and strictly decreasing in both directions.

exit_safety(ratio)
    Convex penalty on thin exit liquidity::

        clamp01(ratio) ** exit_power

    Clamping keeps the result in [0, 1] even for anomalous ratios outside
    [0, 1].

Both functions are total and pure.
"""

from __future__ import annotations

import math

from vault_allocator.strategy.policy import DEFAULT_POLICY, StrategyPolicy


def clamp01(x: float) -> float:
    """Clamp ``x`` to [0, 1]."""
    return max(0.0, min(1.0, x))


def utilization_attractiveness(
    u: float,
    policy: StrategyPolicy = DEFAULT_POLICY,
) -> float:
    """Bell-curve attractiveness of a utilization ratio.

    Args:
        u:      Utilization in [0, 1].
        policy: Supplies ``u0`` (peak) and ``sigma`` (width).

    Returns:
        Value in [0, 1]; 1.0 exactly at ``u == policy.u0``.
    """
    diff = (u - policy.u0) / policy.sigma
    return math.exp(-(diff * diff))


def exit_safety(
    ratio: float,
    policy: StrategyPolicy = DEFAULT_POLICY,
) -> float:
    """Exit-liquidity safety factor.

    Args:
        ratio:  Withdrawable fraction of supplied liquidity.
        policy: Supplies ``exit_power``.

    Returns:
        ``clamp01(ratio) ** policy.exit_power`` in [0, 1].
    """
    return clamp01(ratio) ** policy.exit_power
