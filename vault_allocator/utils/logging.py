"""
Logging setup for the vault allocator CLI.

``configure_logging(config)`` runs once per command, right after the config is
loaded.  Library modules only ever call ``logging.getLogger(__name__)``.

Console records go to stderr; stdout is reserved for command output such as
``score --json``.  With ``[logging] json_format = true`` every record becomes a
single JSON object, e.g.::

    {"ts": "2026-02-24T15:00:00Z", "level": "WARNING",
     "logger": "vault_allocator.strategy.normalizer", "msg": "..."}

Fields passed through ``extra=`` are appended to the object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vault_allocator.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in via ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict = {
            "ts": ts.strftime(LOG_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (key, val)
            for key, val in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    return logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def _open_log_file(log_file: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def configure_logging(config: "LoggingConfig") -> None:
    """Point the root logger at stderr (and ``config.log_file`` when set).

    Replaces any handlers installed by an earlier call, so repeated CLI
    invocations in one process do not duplicate output.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(_open_log_file(config.log_file))

    formatter = _make_formatter(config.json_format)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
