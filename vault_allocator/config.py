"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``VAULT_ALLOCATOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The scoring engine itself only ever sees the ``StrategyPolicy`` section;
``AppConfig`` exists for the CLI and any service embedding the engine.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from vault_allocator.strategy.policy import StrategyPolicy

# ── Sub-config models ─────────────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class OutputConfig(BaseModel):
    """Where CLI exports go when no explicit path is given."""

    model_config = ConfigDict(frozen=True)

    export_dir: str = "data/outputs"


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + env vars.
    """

    model_config = ConfigDict(frozen=True)

    policy: StrategyPolicy = StrategyPolicy()
    logging: LoggingConfig = LoggingConfig()
    output: OutputConfig = OutputConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply VAULT_ALLOCATOR_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply VAULT_ALLOCATOR_* env vars to the raw config dict.

    Supported overrides:
      VAULT_ALLOCATOR_LOG_LEVEL    → raw["logging"]["level"]
      VAULT_ALLOCATOR_DEBUG        → raw["debug"]
      VAULT_ALLOCATOR_SOFTMAX_T    → raw["policy"]["softmax_t"]
      VAULT_ALLOCATOR_ENFORCE_CAP  → raw["policy"]["enforce_concentration_cap"]
    """
    if log_level := os.environ.get("VAULT_ALLOCATOR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("VAULT_ALLOCATOR_DEBUG"):
        raw["debug"] = _truthy(debug)

    if softmax_t := os.environ.get("VAULT_ALLOCATOR_SOFTMAX_T"):
        raw.setdefault("policy", {})["softmax_t"] = float(softmax_t)

    if enforce_cap := os.environ.get("VAULT_ALLOCATOR_ENFORCE_CAP"):
        raw.setdefault("policy", {})["enforce_concentration_cap"] = _truthy(enforce_cap)

    return raw


def _truthy(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        policy=StrategyPolicy(**raw.get("policy", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        output=OutputConfig(**raw.get("output", {})),
        debug=raw.get("debug", False),
    )
