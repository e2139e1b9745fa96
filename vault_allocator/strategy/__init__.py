"""
Market-scoring and capital-allocation engine.

Modules
-------
policy         : StrategyPolicy — frozen constants passed into every function.
attractiveness : utilization_attractiveness() + exit_safety() — scalar factors.
scorer         : raw_score() — yield x attractiveness x safety.
regime         : apply_regime() — OK / SAT / CRIT / EXIT_MIN / MISSING gate.
normalizer     : softmax_weights() + apply_concentration_cap().
engine         : compute_market_decisions() + summary helpers.

Everything here is pure: no I/O, no module-level mutable state.
"""

from vault_allocator.strategy.engine import (
    AllocationSummary,
    best_market,
    compute_market_decisions,
    eligible_markets,
    summarize_decisions,
)
from vault_allocator.strategy.policy import DEFAULT_POLICY, StrategyPolicy

__all__ = [
    "AllocationSummary",
    "DEFAULT_POLICY",
    "StrategyPolicy",
    "best_market",
    "compute_market_decisions",
    "eligible_markets",
    "summarize_decisions",
]
