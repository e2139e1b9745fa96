"""
Decision assembly: MarketSnapshot batch -> ranked MarketDecision list.

Usage flow
----------
1. compute_market_decisions(snapshots, policy)
   -> list[MarketDecision]  (best market first)

2. eligible_markets(decisions) / best_market(decisions)
   -> dashboard selections (OK/SAT markets, top positive-score market)

3. summarize_decisions(decisions, policy)
   -> AllocationSummary  (counts and threshold flags for an operator)

Per snapshot, the assembler computes the raw score, runs the regime gate, and
records the attractiveness and safety factors for auditability.  The
normalizer then runs once over the whole batch's adjusted scores.  Output is
sorted by adjusted score descending; Python's sort is stable, so equal scores
keep their input order.

The assembler never raises for a list of valid snapshots: empty batches give
an empty list, all-missing batches give every market MISSING with weight 0.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence

from vault_allocator.models.market import MarketDecision, MarketSnapshot
from vault_allocator.strategy.attractiveness import exit_safety, utilization_attractiveness
from vault_allocator.strategy.normalizer import apply_concentration_cap, softmax_weights
from vault_allocator.strategy.policy import DEFAULT_POLICY, StrategyPolicy
from vault_allocator.strategy.regime import RegimeResult, apply_regime, utilization_status
from vault_allocator.strategy.scorer import raw_score
from vault_allocator.taxonomy.regime_taxonomy import DEPOSITABLE_REGIMES, ZEROED_REGIMES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationSummary:
    """Batch-level view of a decision list.

    Attributes:
        market_count:              Number of decisions.
        eligible_count:            Decisions in a depositable regime (OK / SAT).
        zeroed_count:              Decisions gated to zero (CRIT / EXIT_MIN / MISSING).
        active_count:              Decisions with weight > 0.
        regime_counts:             Regime value -> count.
        best_market_id:            ``market_id`` of :func:`best_market`, or ``None``.
        max_weight:                Largest single weight (0.0 for empty batches).
        total_weight:              Sum of weights (1.0 or 0.0).
        exceeds_concentration_cap: True if any weight is over the policy cap.
        below_min_active_markets:  True if fewer than ``min_active_markets``
                                   markets are funded.
    """

    market_count:              int
    eligible_count:            int
    zeroed_count:              int
    active_count:              int
    regime_counts:             dict[str, int]
    best_market_id:            Optional[str]
    max_weight:                float
    total_weight:              float
    exceeds_concentration_cap: bool
    below_min_active_markets:  bool


def compute_market_decisions(
    snapshots: Sequence[MarketSnapshot],
    policy:    StrategyPolicy = DEFAULT_POLICY,
) -> list[MarketDecision]:
    """Score, gate, and weight every market in a batch.

    Args:
        snapshots: One snapshot per market.
        policy:    Scoring, gating, and normalization constants.

    Returns:
        One :class:`MarketDecision` per snapshot, sorted by regime-adjusted
        score descending (stable).
    """
    raw_scores: list[float] = []
    gated: list[RegimeResult] = []
    for snap in snapshots:
        score = raw_score(snap.yield_rate, snap.utilization, snap.exit_ratio, policy)
        raw_scores.append(score)
        gated.append(apply_regime(snap.utilization, snap.exit_ratio, score, policy))

    weights = softmax_weights([g.adjusted_score for g in gated], policy.softmax_t)
    if policy.enforce_concentration_cap:
        weights = apply_concentration_cap(weights, policy.max_weight)

    decisions = [
        _build_decision(snap, score, result, weight, policy)
        for snap, score, result, weight in zip(snapshots, raw_scores, gated, weights)
    ]
    decisions.sort(key=lambda d: d.adjusted_score, reverse=True)

    if decisions:
        logger.debug(
            "Scored %d market(s): %d eligible, best=%s",
            len(decisions),
            len(eligible_markets(decisions)),
            decisions[0].market_id if decisions[0].adjusted_score > 0 else None,
        )
    return decisions


def eligible_markets(decisions: Sequence[MarketDecision]) -> list[MarketDecision]:
    """Decisions in a depositable regime (OK or SAT), in ranked order."""
    return [d for d in decisions if d.regime in DEPOSITABLE_REGIMES]


def best_market(decisions: Sequence[MarketDecision]) -> Optional[MarketDecision]:
    """First decision with a positive adjusted score, or ``None``."""
    for d in decisions:
        if d.raw_score_after_regime is not None and d.raw_score_after_regime > 0:
            return d
    return None


def summarize_decisions(
    decisions: Sequence[MarketDecision],
    policy:    StrategyPolicy = DEFAULT_POLICY,
) -> AllocationSummary:
    """Summarize a decision list against the policy's concentration targets.

    ``max_concentration_bps`` and ``min_active_markets`` are reported here as
    flags; only the cap can be enforced, and only when
    ``policy.enforce_concentration_cap`` is set.
    """
    weights = [d.weight for d in decisions]
    active_count = sum(1 for w in weights if w > 0)
    top = best_market(decisions)
    max_weight = max(weights, default=0.0)

    return AllocationSummary(
        market_count=len(decisions),
        eligible_count=len(eligible_markets(decisions)),
        zeroed_count=sum(1 for d in decisions if d.regime in ZEROED_REGIMES),
        active_count=active_count,
        regime_counts=dict(Counter(str(d.regime) for d in decisions)),
        best_market_id=top.market_id if top is not None else None,
        max_weight=max_weight,
        total_weight=sum(weights),
        exceeds_concentration_cap=max_weight > policy.max_weight + 1e-9,
        below_min_active_markets=active_count < policy.min_active_markets,
    )


# ── Helper ────────────────────────────────────────────────────────────────────

def _build_decision(
    snap:   MarketSnapshot,
    score:  float,
    result: RegimeResult,
    weight: float,
    policy: StrategyPolicy,
) -> MarketDecision:
    return MarketDecision(
        market_id=snap.market_id,
        market_label=snap.market_label,
        utilization=snap.utilization,
        yield_rate=snap.yield_rate,
        exit_ratio=snap.exit_ratio,
        current_allocation_pct=snap.current_allocation_pct,
        attractiveness=(
            utilization_attractiveness(snap.utilization, policy)
            if snap.utilization is not None else None
        ),
        safety=(
            exit_safety(snap.exit_ratio, policy)
            if snap.exit_ratio is not None else None
        ),
        raw_score_before_regime=score if score > 0 else None,
        raw_score_after_regime=result.adjusted_score if result.adjusted_score > 0 else None,
        regime=result.regime,
        utilization_status=utilization_status(snap.utilization, policy),
        weight=weight,
    )
