"""
Flat-file export of ranked decisions.

``export_decisions()`` picks the writer from the target suffix:

  - ``.csv``  : one row per market in ``DECISION_FIELDS`` order, regime and
                utilization status as plain strings.
  - ``.json`` : ``{"summary": {...}, "decisions": [...]}`` with the same rows.

Writers create parent directories and return the written ``Path``.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from vault_allocator.models.market import MarketDecision
    from vault_allocator.strategy.engine import AllocationSummary

EXPORT_SUFFIXES: tuple[str, ...] = (".csv", ".json")

DECISION_FIELDS: list[str] = [
    "rank",
    "market_id",
    "market_label",
    "regime",
    "weight",
    "raw_score_before_regime",
    "raw_score_after_regime",
    "utilization",
    "utilization_status",
    "yield_rate",
    "exit_ratio",
    "attractiveness",
    "safety",
    "current_allocation_pct",
]


def decisions_to_records(decisions: Sequence["MarketDecision"]) -> list[dict]:
    """Flatten ranked decisions into JSON-safe row dicts with a 1-based ``rank``."""
    records: list[dict] = []
    for rank, d in enumerate(decisions, start=1):
        row = d.model_dump(mode="json")
        row["rank"] = rank
        records.append({key: row.get(key) for key in DECISION_FIELDS})
    return records


def export_to_csv(
    records:    Sequence[dict],
    path:       Path,
    fieldnames: Sequence[str] = DECISION_FIELDS,
) -> Path:
    """Write decision rows as UTF-8 CSV; an empty batch still gets a header row."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(fieldnames), extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: dict | list, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def export_decisions(
    decisions: Sequence["MarketDecision"],
    path:      Path,
    summary:   Optional["AllocationSummary"] = None,
) -> Path:
    """Write decisions to ``path``, choosing CSV or JSON by suffix.

    Args:
        decisions: Ranked output of ``compute_market_decisions()``.
        path:      Target file; suffix must be one of ``EXPORT_SUFFIXES``.
        summary:   Included under ``"summary"`` in JSON exports; CSV ignores it.

    Raises:
        ValueError: For any other suffix.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in EXPORT_SUFFIXES:
        raise ValueError(
            f"Unsupported export format: {path} (use {' or '.join(EXPORT_SUFFIXES)})"
        )

    records = decisions_to_records(decisions)
    if suffix == ".json":
        return export_to_json(
            {"summary": asdict(summary) if summary is not None else None,
             "decisions": records},
            path,
        )
    return export_to_csv(records, path)
