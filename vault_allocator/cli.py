"""
Vault Allocator — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load and validate inputs.
  4. Run the scoring engine.
  5. Report result to stdout.

Install and run::

    pip install -e .
    vault-allocator --help
    vault-allocator validate-config
    vault-allocator score snapshots.json
    vault-allocator score allocations_payload.json --json
    vault-allocator score snapshots.json --export out/decisions.csv --enforce-cap
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="vault-allocator",
    help="Risk-gated market scoring and target weights for lending vaults.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from vault_allocator.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from vault_allocator.utils.logging import configure_logging
    configure_logging(config.logging)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print the active policy.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)
    policy = config.policy

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Utilization peak:   u0={policy.u0}  sigma={policy.sigma}")
    typer.echo(f"  Regime thresholds:  u_sat={policy.u_sat}  u_crit={policy.u_crit}  "
               f"exit_min={policy.exit_min}")
    typer.echo(f"  SAT inflow mult:    {policy.sat_inflow_mult}")
    typer.echo(f"  Softmax T:          {policy.softmax_t}")
    typer.echo(f"  Concentration cap:  {policy.max_concentration_bps} bps "
               f"({'enforced' if policy.enforce_concentration_cap else 'report only'})")
    typer.echo(f"  Min active markets: {policy.min_active_markets}")
    typer.echo(f"  Log level:          {config.logging.level}")
    typer.echo(f"  Debug mode:         {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("score")
def score(
    input_path: str = typer.Argument(
        ...,
        help="JSON file: an array of market snapshots or a vault-allocations payload.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print decisions and summary as JSON instead of a table.",
    ),
    export_path: Optional[str] = typer.Option(
        None,
        "--export",
        help="Also write decisions to this .csv or .json file.",
    ),
    save: bool = typer.Option(
        False,
        "--save",
        help="Write decisions CSV into the configured export_dir.",
    ),
    enforce_cap: bool = typer.Option(
        False,
        "--enforce-cap",
        help="Cap per-market weight at max_concentration_bps and redistribute.",
    ),
) -> None:
    """Score a batch of markets and print target allocation weights."""
    from pydantic import ValidationError

    from vault_allocator.ingestion.snapshot_builder import load_snapshots
    from vault_allocator.reporting.export import (
        EXPORT_SUFFIXES,
        decisions_to_records,
        export_decisions,
    )
    from vault_allocator.reporting.formatters import format_decisions_table
    from vault_allocator.strategy.engine import compute_market_decisions, summarize_decisions

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    policy = config.policy
    if enforce_cap:
        policy = policy.model_copy(update={"enforce_concentration_cap": True})

    if export_path and Path(export_path).suffix.lower() not in EXPORT_SUFFIXES:
        typer.echo(f"[ERROR] Unsupported export format: {export_path} (use .csv or .json)",
                   err=True)
        raise typer.Exit(code=1)

    src = Path(input_path)
    try:
        snapshots = load_snapshots(src)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValueError, ValidationError) as exc:
        typer.echo(f"[ERROR] Invalid snapshot input:\n{exc}", err=True)
        raise typer.Exit(code=1)

    decisions = compute_market_decisions(snapshots, policy)
    summary = summarize_decisions(decisions, policy)
    records = decisions_to_records(decisions)

    if as_json:
        typer.echo(json.dumps({"summary": asdict(summary), "decisions": records}, indent=2))
    else:
        typer.echo(format_decisions_table(decisions, summary))

    targets: list[Path] = []
    if export_path:
        targets.append(Path(export_path))
    if save:
        targets.append(Path(config.output.export_dir) / f"decisions_{src.stem}.csv")

    for target in targets:
        export_decisions(decisions, target, summary)
        typer.echo(f"[OK] Decisions written to {target}", err=as_json)
