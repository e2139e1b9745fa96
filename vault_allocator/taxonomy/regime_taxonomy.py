"""
Regime taxonomy for lending-market risk classification.

Every market is placed in exactly one ``RegimeReason`` per engine call:

  - ``OK``       — no gate triggered; score used as-is.
  - ``SAT``      — utilization in the saturated band; inflow discounted.
  - ``CRIT``     — utilization at or above the critical threshold; zeroed.
  - ``EXIT_MIN`` — withdrawable liquidity below the minimum; zeroed.
  - ``MISSING``  — utilization or exit ratio unknown; zeroed.

Usage example::

    from vault_allocator.taxonomy.regime_taxonomy import RegimeReason

    if decision.regime in DEPOSITABLE_REGIMES:
        ...

This module has NO imports from any other ``vault_allocator`` package.
"""

from enum import StrEnum


class RegimeReason(StrEnum):
    """Terminal risk regime assigned to a market by the regime gate."""

    OK = "OK"
    """Healthy market; raw score passes through unchanged."""

    SAT = "SAT"
    """Saturated utilization band; partial-inflow discount applied."""

    CRIT = "CRIT"
    """Critically saturated; deposits must never be directed here."""

    EXIT_MIN = "EXIT_MIN"
    """Too little exit liquidity to safely hold a position."""

    MISSING = "MISSING"
    """Utilization or exit ratio unknown."""


DEPOSITABLE_REGIMES: frozenset[RegimeReason] = frozenset(
    {RegimeReason.OK, RegimeReason.SAT}
)

ZEROED_REGIMES: frozenset[RegimeReason] = frozenset(
    {RegimeReason.CRIT, RegimeReason.EXIT_MIN, RegimeReason.MISSING}
)


class UtilizationStatus(StrEnum):
    """Operator-facing utilization band, independent of the regime gate.

    Bands (lower edges from ``StrategyPolicy``):
      ``CRITICAL`` >= u_crit, ``SATURATED`` >= u_sat, ``OPTIMAL`` >= u_opt_low,
      otherwise ``STABLE``.
    """

    CRITICAL = "CRITICAL"
    SATURATED = "SATURATED"
    OPTIMAL = "OPTIMAL"
    STABLE = "STABLE"
