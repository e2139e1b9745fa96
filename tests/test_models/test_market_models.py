"""Tests for market models (snapshots and decisions) and the policy model."""

from __future__ import annotations

import logging
import math

import pytest
from pydantic import ValidationError

from vault_allocator.models.market import MarketDecision, MarketSnapshot
from vault_allocator.strategy.policy import DEFAULT_POLICY, StrategyPolicy
from vault_allocator.taxonomy.regime_taxonomy import RegimeReason


class TestMarketSnapshot:
    def test_valid_construction(self, make_snapshot):
        snap = make_snapshot("abc", utilization=0.7, yield_rate=0.04, exit_ratio=0.3)
        assert snap.market_id == "abc"
        assert snap.market_label == "ABC"
        assert snap.utilization == 0.7

    def test_optional_fields_default_to_none(self):
        snap = MarketSnapshot(market_id="x", market_label="X")
        assert snap.utilization is None
        assert snap.yield_rate is None
        assert snap.exit_ratio is None
        assert snap.current_allocation_pct is None

    def test_zero_is_not_none(self):
        snap = MarketSnapshot(market_id="x", market_label="X", utilization=0.0, exit_ratio=0.0)
        assert snap.utilization == 0.0
        assert snap.exit_ratio == 0.0

    def test_frozen(self, make_snapshot):
        snap = make_snapshot()
        with pytest.raises(ValidationError):
            snap.utilization = 0.5

    @pytest.mark.parametrize("field", [
        "utilization", "yield_rate", "exit_ratio", "current_allocation_pct",
    ])
    def test_nan_becomes_none(self, field):
        snap = MarketSnapshot(market_id="x", market_label="X", **{field: math.nan})
        assert getattr(snap, field) is None

    def test_infinity_becomes_none_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="vault_allocator.models.market"):
            snap = MarketSnapshot(market_id="x", market_label="X", exit_ratio=math.inf)
        assert snap.exit_ratio is None
        assert "exit_ratio" in caplog.text

    def test_numeric_string_accepted(self):
        snap = MarketSnapshot(market_id="x", market_label="X", utilization="0.81")
        assert snap.utilization == pytest.approx(0.81)

    def test_garbage_string_rejected(self):
        with pytest.raises(ValidationError, match="utilization"):
            MarketSnapshot(market_id="x", market_label="X", utilization="lots")

    def test_missing_id_rejected(self):
        with pytest.raises(ValidationError):
            MarketSnapshot(market_label="X")


class TestMarketDecision:
    def test_valid_construction(self):
        d = MarketDecision(market_id="x", market_label="X", regime=RegimeReason.OK, weight=0.4,
                           raw_score_after_regime=0.02)
        assert d.weight == 0.4
        assert d.adjusted_score == 0.02

    def test_adjusted_score_none_reads_zero(self):
        d = MarketDecision(market_id="x", market_label="X", regime=RegimeReason.CRIT)
        assert d.adjusted_score == 0.0
        assert d.weight == 0.0

    @pytest.mark.parametrize("weight", [-0.1, 1.01])
    def test_weight_out_of_range_rejected(self, weight):
        with pytest.raises(ValidationError, match="weight"):
            MarketDecision(market_id="x", market_label="X", regime=RegimeReason.OK,
                           weight=weight)

    def test_regime_from_string(self):
        d = MarketDecision(market_id="x", market_label="X", regime="SAT")
        assert d.regime is RegimeReason.SAT

    def test_unknown_regime_rejected(self):
        with pytest.raises(ValidationError):
            MarketDecision(market_id="x", market_label="X", regime="MAYBE")


class TestStrategyPolicy:
    def test_defaults(self):
        assert DEFAULT_POLICY.u_crit == 0.92
        assert DEFAULT_POLICY.u_sat == 0.88
        assert DEFAULT_POLICY.u0 == 0.82
        assert DEFAULT_POLICY.sigma == 0.07
        assert DEFAULT_POLICY.exit_min == 0.05
        assert DEFAULT_POLICY.exit_power == 2
        assert DEFAULT_POLICY.sat_inflow_mult == 0.25
        assert DEFAULT_POLICY.softmax_t == 0.20
        assert DEFAULT_POLICY.max_concentration_bps == 4000
        assert DEFAULT_POLICY.min_active_markets == 3
        assert DEFAULT_POLICY.enforce_concentration_cap is False

    def test_max_weight(self):
        assert DEFAULT_POLICY.max_weight == pytest.approx(0.4)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_POLICY.softmax_t = 1.0

    @pytest.mark.parametrize("kwargs", [
        {"sigma": 0.0},
        {"softmax_t": -0.1},
        {"exit_power": -1.0},
        {"sat_inflow_mult": 1.5},
        {"max_concentration_bps": 0},
        {"max_concentration_bps": 10_001},
        {"min_active_markets": -1},
        {"u_sat": 0.95, "u_crit": 0.92},
        {"u_opt_low": 0.9, "u_sat": 0.88},
    ])
    def test_invalid_policy_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            StrategyPolicy(**kwargs)
