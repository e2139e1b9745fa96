"""
Tests for vault_allocator/ingestion/snapshot_builder.py.

What we test
------------
safe_number():
  - Numbers and numeric strings parse; None / garbage / NaN / bool -> None.

build_market_label():
  - "LOAN / COLLATERAL", loan only, truncated uniqueKey, "Unknown".

build_market_snapshots():
  - One snapshot per allocation with a market; entries without one skipped.
  - exit_ratio = (supply - borrow) / supply; None when supply is 0 or unknown.
  - current_allocation_pct from supplyAssetsUsd / totalAssetsUsd.
  - market_id falls back to the label.
  - None / empty payloads -> empty list.

load_snapshots():
  - Array file -> snapshot dicts; object file -> allocations payload.
  - Missing file -> FileNotFoundError; scalar JSON -> ValueError.
"""

from __future__ import annotations

import json
import math
from pathlib import Path

import pytest

from vault_allocator.ingestion.snapshot_builder import (
    build_market_label,
    build_market_snapshots,
    load_snapshots,
    safe_number,
)


class TestSafeNumber:
    @pytest.mark.parametrize("value, expected", [
        (1, 1.0), (0.25, 0.25), ("0.5", 0.5), (" 12 ", 12.0), ("-3e-2", -0.03),
    ])
    def test_parses(self, value, expected):
        assert safe_number(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [
        None, "", "abc", "nan", "inf", math.nan, math.inf, True, [1], {"a": 1},
    ])
    def test_unknown(self, value):
        assert safe_number(value) is None


class TestBuildMarketLabel:
    def test_loan_and_collateral(self):
        market = {"loanAsset": {"symbol": "USDT0"}, "collateralAsset": {"symbol": "WETH"}}
        assert build_market_label(market) == "USDT0 / WETH"

    def test_loan_only(self):
        assert build_market_label({"loanAsset": {"symbol": "USDT0"},
                                   "collateralAsset": None}) == "USDT0"

    def test_unique_key_truncated(self):
        key = "0x" + "ab" * 30
        assert build_market_label({"uniqueKey": key}) == key[:20]

    def test_unknown(self):
        assert build_market_label({}) == "Unknown"


class TestBuildMarketSnapshots:
    def test_skips_allocations_without_market(self, allocations_payload):
        snapshots = build_market_snapshots(allocations_payload)
        assert len(snapshots) == 2

    def test_first_market_fields(self, allocations_payload):
        snap = build_market_snapshots(allocations_payload)[0]
        assert snap.market_id == "0xaaaa1111bbbb2222cccc3333dddd4444"
        assert snap.market_label == "USDT0 / WETH"
        assert snap.utilization == pytest.approx(0.82)
        assert snap.yield_rate == pytest.approx(0.061)
        assert snap.exit_ratio == pytest.approx(0.18)
        assert snap.current_allocation_pct == pytest.approx(40.0)

    def test_zero_supply_gives_unknown_exit_ratio(self, allocations_payload):
        snap = build_market_snapshots(allocations_payload)[1]
        assert snap.market_label == "USDT0"
        assert snap.utilization == pytest.approx(0.5)
        assert snap.exit_ratio is None
        assert snap.current_allocation_pct == pytest.approx(60.0)

    def test_missing_borrow_gives_unknown_exit_ratio(self):
        payload = {"vaultByAddress": {"state": {"allocation": [
            {"market": {"uniqueKey": "k", "state": {"supplyAssets": "100"}}},
        ]}}}
        (snap,) = build_market_snapshots(payload)
        assert snap.exit_ratio is None
        assert snap.utilization is None
        assert snap.current_allocation_pct is None

    def test_market_id_falls_back_to_label(self):
        payload = {"vaultByAddress": {"state": {"allocation": [
            {"market": {"loanAsset": {"symbol": "USDC"}, "state": {}}},
        ]}}}
        (snap,) = build_market_snapshots(payload)
        assert snap.market_id == "USDC"

    def test_zero_total_assets_gives_unknown_allocation(self, allocations_payload):
        allocations_payload["vaultByAddress"]["state"]["totalAssetsUsd"] = 0
        snapshots = build_market_snapshots(allocations_payload)
        assert all(s.current_allocation_pct is None for s in snapshots)

    def test_non_object_market_state_degrades_to_missing(self, allocations_payload):
        first = allocations_payload["vaultByAddress"]["state"]["allocation"][0]
        first["market"]["state"] = "n/a"
        snapshots = build_market_snapshots(allocations_payload)
        assert len(snapshots) == 2
        assert snapshots[0].market_id == "0xaaaa1111bbbb2222cccc3333dddd4444"
        assert snapshots[0].utilization is None
        assert snapshots[0].exit_ratio is None

    def test_non_object_assets_fall_back_in_label(self, allocations_payload):
        market = allocations_payload["vaultByAddress"]["state"]["allocation"][0]["market"]
        market["loanAsset"] = "USDT0"
        market["collateralAsset"] = ["WETH"]
        snapshots = build_market_snapshots(allocations_payload)
        assert len(snapshots) == 2
        assert snapshots[0].market_label == "0xaaaa1111bbbb2222cc"
        assert snapshots[0].utilization == pytest.approx(0.82)

    def test_non_object_market_skipped(self, allocations_payload):
        allocations_payload["vaultByAddress"]["state"]["allocation"][0]["market"] = "0xaaaa"
        snapshots = build_market_snapshots(allocations_payload)
        assert [s.market_id for s in snapshots] == ["0xeeee5555ffff6666"]

    @pytest.mark.parametrize("payload", [
        None, {}, {"vaultByAddress": None}, {"vaultByAddress": {"state": {}}},
        {"vaultByAddress": {"state": {"allocation": []}}},
        {"vaultByAddress": "0x01"}, {"vaultByAddress": {"state": "n/a"}},
        {"vaultByAddress": {"state": {"allocation": "none"}}},
    ])
    def test_empty_payloads(self, payload):
        assert build_market_snapshots(payload) == []


class TestLoadSnapshots:
    def test_array_file(self, tmp_path: Path):
        path = tmp_path / "snapshots.json"
        path.write_text(json.dumps([
            {"market_id": "a", "market_label": "A", "utilization": 0.8,
             "yield_rate": 0.05, "exit_ratio": 0.3},
            {"market_id": "b", "market_label": "B"},
        ]), encoding="utf-8")
        snapshots = load_snapshots(path)
        assert [s.market_id for s in snapshots] == ["a", "b"]
        assert snapshots[1].utilization is None

    def test_payload_file(self, tmp_path: Path, allocations_payload):
        path = tmp_path / "payload.json"
        path.write_text(json.dumps(allocations_payload), encoding="utf-8")
        assert len(load_snapshots(path)) == 2

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_snapshots(tmp_path / "nope.json")

    def test_non_object_row_rejected(self, tmp_path: Path):
        path = tmp_path / "rows.json"
        path.write_text(json.dumps([{"market_id": "a", "market_label": "A"}, 2]),
                        encoding="utf-8")
        with pytest.raises(ValueError, match="row 1 is not an object"):
            load_snapshots(path)

    def test_scalar_json_rejected(self, tmp_path: Path):
        path = tmp_path / "scalar.json"
        path.write_text("42", encoding="utf-8")
        with pytest.raises(ValueError, match="expected a JSON array"):
            load_snapshots(path)
