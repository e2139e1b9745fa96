"""
Snapshot builder — reshape an already-fetched vault-allocations payload into
``MarketSnapshot`` records.

Expected payload shape (GraphQL ``vaultByAddress`` response body)::

    {
      "vaultByAddress": {
        "state": {
          "totalAssetsUsd": 1250000.0,
          "allocation": [
            {
              "market": {
                "uniqueKey": "0xabc...",
                "loanAsset": {"symbol": "USDT0"},
                "collateralAsset": {"symbol": "WETH"},
                "state": {
                  "utilization": 0.83,
                  "supplyApy": 0.061,
                  "supplyAssets": "1000000",
                  "borrowAssets": "830000"
                }
              },
              "supplyAssetsUsd": 500000.0
            }
          ]
        }
      }
    }

Numbers may arrive as JSON numbers or numeric strings; anything unparsable is
treated as unknown (``None``) so the market degrades to MISSING instead of
failing the batch.

No network access happens here — fetching the payload is the caller's job.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Optional

from vault_allocator.models.market import MarketSnapshot

logger = logging.getLogger(__name__)

_MAX_KEY_LABEL_CHARS = 20


def safe_number(value: Any) -> Optional[float]:
    """Coerce a JSON number or numeric string to ``float``.

    Returns ``None`` for ``None``, booleans, unparsable strings, and
    non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return num if math.isfinite(num) else None


def _obj(value: Any) -> dict[str, Any]:
    """Nested JSON object, or an empty dict for anything that is not one."""
    return value if isinstance(value, dict) else {}


def build_market_label(market: dict[str, Any]) -> str:
    """Human-readable market name.

    ``"LOAN / COLLATERAL"`` when both symbols are known, otherwise the loan
    symbol, otherwise the first 20 characters of ``uniqueKey``, otherwise
    ``"Unknown"``.
    """
    loan = _obj(market.get("loanAsset")).get("symbol")
    collateral = _obj(market.get("collateralAsset")).get("symbol")
    if loan and collateral:
        return f"{loan} / {collateral}"
    if loan:
        return str(loan)
    unique_key = market.get("uniqueKey")
    if unique_key:
        return str(unique_key)[:_MAX_KEY_LABEL_CHARS]
    return "Unknown"


def build_market_snapshots(payload: Optional[dict[str, Any]]) -> list[MarketSnapshot]:
    """Convert a vault-allocations payload into snapshots, one per market.

    Allocation entries without a ``market`` object are skipped.  Nested values
    of the wrong JSON type are read as absent, so the market degrades to
    MISSING instead of failing the batch.

    Args:
        payload: Parsed JSON response body; ``None`` yields an empty list.

    Returns:
        Snapshots in allocation order.
    """
    vault = _obj(_obj(payload).get("vaultByAddress"))
    state = _obj(vault.get("state"))
    allocations = state.get("allocation")
    if not isinstance(allocations, list):
        allocations = []
    total_usd = safe_number(state.get("totalAssetsUsd"))

    snapshots: list[MarketSnapshot] = []
    skipped = 0
    for alloc in allocations:
        market = _obj(alloc.get("market")) if isinstance(alloc, dict) else {}
        if not market:
            skipped += 1
            continue

        market_state = _obj(market.get("state"))
        supply = safe_number(market_state.get("supplyAssets"))
        borrow = safe_number(market_state.get("borrowAssets"))

        # Withdrawable share of supplied liquidity
        if supply is not None and supply > 0 and borrow is not None:
            exit_ratio: Optional[float] = (supply - borrow) / supply
        else:
            exit_ratio = None

        supply_usd = safe_number(alloc.get("supplyAssetsUsd"))
        if supply_usd is not None and total_usd is not None and total_usd > 0:
            current_pct: Optional[float] = supply_usd / total_usd * 100.0
        else:
            current_pct = None

        label = build_market_label(market)
        snapshots.append(
            MarketSnapshot(
                market_id=str(market.get("uniqueKey") or label),
                market_label=label,
                utilization=safe_number(market_state.get("utilization")),
                yield_rate=safe_number(market_state.get("supplyApy")),
                exit_ratio=exit_ratio,
                current_allocation_pct=current_pct,
            )
        )

    if skipped:
        logger.info("Skipped %d allocation(s) without market info.", skipped)
    return snapshots


def load_snapshots(path: Path) -> list[MarketSnapshot]:
    """Load snapshots from a JSON file.

    A top-level list is read as snapshot dicts (``MarketSnapshot`` fields);
    a top-level object is read as a vault-allocations payload.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the JSON is neither a list nor an object, or a list
            element is not an object.
        pydantic.ValidationError: If a snapshot dict fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        snapshots = []
        for i, row in enumerate(data):
            if not isinstance(row, dict):
                raise ValueError(f"{path}: row {i} is not an object")
            snapshots.append(MarketSnapshot(**row))
    elif isinstance(data, dict):
        snapshots = build_market_snapshots(data)
    else:
        raise ValueError(
            f"{path}: expected a JSON array of snapshots or an allocations object."
        )

    logger.info("Loaded %d market snapshot(s) from %s", len(snapshots), path)
    return snapshots
