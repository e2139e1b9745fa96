"""
Shared pytest fixtures for the vault allocator test suite.

Provides:
  - ``policy``: the default ``StrategyPolicy``.
  - ``make_snapshot``: factory for ``MarketSnapshot`` with healthy defaults.
  - ``mixed_batch``: one market per regime, in a fixed input order.
  - ``allocations_payload``: a vault-allocations response body.
"""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from vault_allocator.models.market import MarketSnapshot
from vault_allocator.strategy.policy import DEFAULT_POLICY, StrategyPolicy

_UNSET = object()


@pytest.fixture
def policy() -> StrategyPolicy:
    return DEFAULT_POLICY


@pytest.fixture
def make_snapshot() -> Callable[..., MarketSnapshot]:
    """Build a ``MarketSnapshot``; pass ``None`` explicitly to blank a field."""

    def _make(
        market_id: str = "m1",
        market_label: Optional[str] = None,
        utilization=_UNSET,
        yield_rate=_UNSET,
        exit_ratio=_UNSET,
        current_allocation_pct: Optional[float] = None,
    ) -> MarketSnapshot:
        return MarketSnapshot(
            market_id=market_id,
            market_label=market_label or market_id.upper(),
            utilization=0.82 if utilization is _UNSET else utilization,
            yield_rate=0.05 if yield_rate is _UNSET else yield_rate,
            exit_ratio=0.5 if exit_ratio is _UNSET else exit_ratio,
            current_allocation_pct=current_allocation_pct,
        )

    return _make


@pytest.fixture
def mixed_batch(make_snapshot) -> list[MarketSnapshot]:
    """Five markets, one per regime: MISSING, CRIT, EXIT_MIN, SAT, OK."""
    return [
        make_snapshot("missing", utilization=None),
        make_snapshot("crit", utilization=0.95, exit_ratio=0.01, yield_rate=0.10),
        make_snapshot("exit_min", utilization=0.80, exit_ratio=0.02),
        make_snapshot("sat", utilization=0.90, exit_ratio=0.5, yield_rate=0.10),
        make_snapshot("ok", utilization=0.82, exit_ratio=0.5, yield_rate=0.06),
    ]


@pytest.fixture
def allocations_payload() -> dict:
    return {
        "vaultByAddress": {
            "address": "0x0000000000000000000000000000000000000001",
            "state": {
                "totalAssetsUsd": "1000000",
                "allocation": [
                    {
                        "market": {
                            "uniqueKey": "0xaaaa1111bbbb2222cccc3333dddd4444",
                            "loanAsset": {"symbol": "USDT0"},
                            "collateralAsset": {"symbol": "WETH"},
                            "state": {
                                "utilization": 0.82,
                                "supplyApy": "0.061",
                                "supplyAssets": "1000000",
                                "borrowAssets": "820000",
                            },
                        },
                        "supplyAssetsUsd": 400000,
                    },
                    {
                        "market": {
                            "uniqueKey": "0xeeee5555ffff6666",
                            "loanAsset": {"symbol": "USDT0"},
                            "collateralAsset": None,
                            "state": {
                                "utilization": "0.5",
                                "supplyApy": 0.02,
                                "supplyAssets": 0,
                                "borrowAssets": 0,
                            },
                        },
                        "supplyAssetsUsd": "600000",
                    },
                    {"supplyAssetsUsd": 10},
                ],
            },
        }
    }
