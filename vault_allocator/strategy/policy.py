"""
Allocation policy: the immutable set of constants every scoring function reads.

A ``StrategyPolicy`` is passed explicitly into each engine function instead of
being read from module globals, so tests and deployments can vary policy
without touching code.  ``DEFAULT_POLICY`` carries the production defaults:

    ========================  =======  =====================================
    Field                     Default  Meaning
    ========================  =======  =====================================
    u_crit                    0.92     utilization at which deposits stop
    u_sat                     0.88     start of the saturated (discount) band
    u_opt_low                 0.75     lower edge of the optimal band
    u0                        0.82     utilization sweet spot (bell peak)
    sigma                     0.07     bell-curve tolerance width
    exit_min                  0.05     minimum withdrawable fraction
    exit_power                2.0      convexity of the exit-safety penalty
    sat_inflow_mult           0.25     score multiplier in the SAT regime
    softmax_t                 0.20     softmax temperature
    max_concentration_bps     4000     per-market weight cap (40%)
    min_active_markets        3        desired count of funded markets
    enforce_concentration_cap False    apply the cap after the softmax
    ========================  =======  =====================================
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

BPS_DENOMINATOR = 10_000


class StrategyPolicy(BaseModel):
    """Scoring, gating, and normalization constants for one vault."""

    model_config = ConfigDict(frozen=True)

    u_crit: float = 0.92
    u_sat: float = 0.88
    u_opt_low: float = 0.75
    u0: float = 0.82
    sigma: float = 0.07
    exit_min: float = 0.05
    exit_power: float = 2.0
    sat_inflow_mult: float = 0.25
    softmax_t: float = 0.20
    max_concentration_bps: int = 4000
    min_active_markets: int = 3
    enforce_concentration_cap: bool = False

    @field_validator("sigma", "softmax_t")
    @classmethod
    def validate_strictly_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"must be strictly positive, got {v}.")
        return v

    @field_validator("exit_power")
    @classmethod
    def validate_exit_power(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"exit_power must be non-negative, got {v}.")
        return v

    @field_validator("sat_inflow_mult")
    @classmethod
    def validate_sat_inflow_mult(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"sat_inflow_mult must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("max_concentration_bps")
    @classmethod
    def validate_concentration_bps(cls, v: int) -> int:
        if not 0 < v <= BPS_DENOMINATOR:
            raise ValueError(
                f"max_concentration_bps must be in (0, {BPS_DENOMINATOR}], got {v}."
            )
        return v

    @field_validator("min_active_markets")
    @classmethod
    def validate_min_active(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"min_active_markets must be non-negative, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_band_order(self) -> "StrategyPolicy":
        if self.u_sat > self.u_crit:
            raise ValueError(
                f"u_sat ({self.u_sat}) must be <= u_crit ({self.u_crit})."
            )
        if self.u_opt_low > self.u_sat:
            raise ValueError(
                f"u_opt_low ({self.u_opt_low}) must be <= u_sat ({self.u_sat})."
            )
        return self

    @property
    def max_weight(self) -> float:
        """Per-market weight cap as a fraction (``max_concentration_bps / 10_000``)."""
        return self.max_concentration_bps / BPS_DENOMINATOR


DEFAULT_POLICY = StrategyPolicy()
