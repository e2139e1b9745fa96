"""
Market models — engine input snapshots and scored output decisions.

Two-stage design:
  1. ``MarketSnapshot`` — observed metrics for one lending market, as handed
                          over by the data layer.  Unknown values are ``None``.
  2. ``MarketDecision`` — the snapshot echoed back with every intermediate
                          scoring value, the regime, and the final weight.

Both models are frozen (immutable) after construction.  A caller wanting
history must keep its own copies of the output lists; nothing is cached here.

Non-finite numbers (NaN, ±Infinity) are normalized to ``None`` when a snapshot
is built, so a single bad reading degrades that market to ``MISSING`` instead
of poisoning the softmax sum for the whole batch.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from vault_allocator.taxonomy.regime_taxonomy import RegimeReason, UtilizationStatus

logger = logging.getLogger(__name__)


class MarketSnapshot(BaseModel):
    """Observed metrics for a single lending market.

    Attributes:
        market_id: Stable unique market identifier (e.g. a market unique key).
        market_label: Display name; not used in scoring.
        utilization: Borrowed / supplied liquidity in [0, 1], or ``None``.
        yield_rate: Annualized supply yield as a decimal (0.05 = 5%), or ``None``.
            May be negative.
        exit_ratio: Fraction of supplied liquidity currently withdrawable,
            or ``None``.
        current_allocation_pct: Vault's current allocation to this market in
            percent; informational only.
    """

    model_config = ConfigDict(frozen=True)

    market_id: str
    market_label: str
    utilization: Optional[float] = None
    yield_rate: Optional[float] = None
    exit_ratio: Optional[float] = None
    current_allocation_pct: Optional[float] = None

    @field_validator("utilization", "yield_rate", "exit_ratio", "current_allocation_pct")
    @classmethod
    def drop_non_finite(cls, v: Optional[float], info: ValidationInfo) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            logger.warning(
                "Non-finite %s=%r treated as unknown.", info.field_name, v
            )
            return None
        return v


class MarketDecision(BaseModel):
    """Scored allocation decision for one market.

    Attributes:
        market_id: Echoed from the snapshot.
        market_label: Echoed from the snapshot.
        utilization: Echoed from the snapshot.
        yield_rate: Echoed from the snapshot.
        exit_ratio: Echoed from the snapshot.
        current_allocation_pct: Echoed from the snapshot.
        attractiveness: Bell-curve utilization attractiveness; ``None`` when
            utilization is unknown.
        safety: Exit-safety factor; ``None`` when exit ratio is unknown.
        raw_score_before_regime: Unregimed score; ``None`` unless strictly positive.
        raw_score_after_regime: Regime-adjusted score; ``None`` unless strictly
            positive.
        utilization_status: Utilization band (CRITICAL / SATURATED / OPTIMAL /
            STABLE); ``None`` when utilization is unknown.
        regime: Terminal regime assigned by the gate.
        weight: Target allocation weight in [0, 1]; 0 for gated markets.
    """

    model_config = ConfigDict(frozen=True)

    market_id: str
    market_label: str
    utilization: Optional[float] = None
    yield_rate: Optional[float] = None
    exit_ratio: Optional[float] = None
    current_allocation_pct: Optional[float] = None
    attractiveness: Optional[float] = None
    safety: Optional[float] = None
    raw_score_before_regime: Optional[float] = None
    raw_score_after_regime: Optional[float] = None
    regime: RegimeReason
    utilization_status: Optional[UtilizationStatus] = None
    weight: float = 0.0

    @field_validator("weight")
    @classmethod
    def validate_weight_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"weight must be in [0.0, 1.0], got {v}.")
        return v

    @property
    def adjusted_score(self) -> float:
        """Regime-adjusted score with ``None`` read as 0 (ranking key)."""
        return self.raw_score_after_regime or 0.0
