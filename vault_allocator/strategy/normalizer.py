"""
Weight normalization: adjusted scores -> allocation weights.

softmax_weights()
-----------------
Temperature-scaled softmax over the strictly positive scores::

    w_i = exp((s_i - m) / T) / sum_j exp((s_j - m) / T)     for s_i > 0
    w_i = 0                                                 for s_i <= 0

with ``m = max(scores)``.  Subtracting ``m`` before exponentiating keeps the
exponent <= 0, so large score spreads never overflow.  Lower ``T`` sharpens
the distribution towards the best market; higher ``T`` flattens it.

Markets whose adjusted score is <= 0 (every gated-out market) receive weight 0,
so capital is never directed at a CRIT / EXIT_MIN / MISSING market.

Degenerate batches:
  - empty input            -> empty output
  - ``m <= 0``             -> uniform ``1 / count(s > 0)`` over positive scores,
                              which means all zeros: a valid "deposit nowhere"
                              signal, not an error.

apply_concentration_cap()
-------------------------
Optional post-processing step (``StrategyPolicy.enforce_concentration_cap``).
Caps each weight at ``max_weight`` and hands the excess to the uncapped
markets in proportion to their softmax weights, repeating until no weight is
over the cap.  Zero weights stay zero and the total is preserved.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

logger = logging.getLogger(__name__)

# Slack for float comparisons against the cap.
_TOL = 1e-12


def softmax_weights(scores: Sequence[float], temperature: float) -> list[float]:
    """Convert adjusted scores into weights that sum to 1 (or to 0).

    Args:
        scores:      Regime-adjusted scores, one per market, in batch order.
        temperature: Softmax temperature; must be > 0.

    Returns:
        Weights in the same order as ``scores``.

    Raises:
        ValueError: If ``temperature`` is not strictly positive.
    """
    if temperature <= 0:
        raise ValueError(f"temperature must be strictly positive, got {temperature}.")

    if not scores:
        return []

    max_score = max(scores)
    if max_score <= 0:
        eligible = sum(1 for s in scores if s > 0)
        if eligible == 0:
            return [0.0] * len(scores)
        return [1.0 / eligible if s > 0 else 0.0 for s in scores]

    exp_scores = [
        math.exp((s - max_score) / temperature) if s > 0 else 0.0
        for s in scores
    ]
    total = math.fsum(exp_scores)
    if total == 0:
        return [0.0] * len(scores)

    return [e / total for e in exp_scores]


def apply_concentration_cap(weights: Sequence[float], max_weight: float) -> list[float]:
    """Cap each weight at ``max_weight`` and redistribute the excess.

    If the cap cannot be met (fewer positive-weight markets than
    ``1 / max_weight``), the total is split evenly across the positive-weight
    markets instead and a warning is logged.

    Args:
        weights:    Softmax weights.
        max_weight: Per-market cap as a fraction in (0, 1].

    Returns:
        New weight list with the same length and total as ``weights``.
    """
    active = [i for i, w in enumerate(weights) if w > 0]
    if not active:
        return list(weights)

    total = math.fsum(weights)

    if len(active) * max_weight < total - _TOL:
        logger.warning(
            "Concentration cap %.2f%% infeasible with %d active market(s); "
            "splitting weight evenly.",
            max_weight * 100, len(active),
        )
        even = total / len(active)
        return [even if w > 0 else 0.0 for w in weights]

    capped = list(weights)
    fixed: set[int] = set()
    while True:
        over = [i for i in active if i not in fixed and capped[i] > max_weight + _TOL]
        if not over:
            break
        for i in over:
            capped[i] = max_weight
            fixed.add(i)

        free = [i for i in active if i not in fixed]
        free_sum = math.fsum(weights[i] for i in free)
        if free_sum <= 0:
            break
        remaining = total - max_weight * len(fixed)
        for i in free:
            capped[i] = weights[i] * remaining / free_sum

    return capped
