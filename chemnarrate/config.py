"""Configuration utilities for chemnarrate.

Reads environment variables and exposes configuration values for the
narration tools.

Notes:
- Trend thresholds and descriptor bands are NOT configurable here; they are
  module constants in chemnarrate.trends / chemnarrate.narration so that the
  same cell always reads the same way.
- NARRATION_LOG_PATH:
  Where the CLI appends narration JSONL rows when logging is requested.
  Tests can set it (even after import) or pass `--log-path` explicitly.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_NARRATION_LOG_PATH = "logs/narration.jsonl"
DEFAULT_HISTORY_DURATION_MS = 10000
DEFAULT_HISTORY_SAMPLE_MS = 150
DEFAULT_HISTORY_MAX_SAMPLES = 200


def _bool_from_env(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _int_from_env(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Settings loaded from environment variables.

    Attributes:
        log_level: Application log level string.
        log_narration: Whether the CLI appends narration rows to the JSONL log.
        narration_log_path: JSONL file for narration rows.
        catalogue_path: Default reaction/material catalogue for the CLI.
        history_duration_ms: How far back the history recorder keeps samples.
        history_sample_ms: Minimum spacing between samples of the same cell.
        history_max_samples: Hard cap on samples kept per cell.
    """

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_narration: bool = _bool_from_env("LOG_NARRATION", default=False)
    narration_log_path: Path = Path(os.getenv("NARRATION_LOG_PATH", DEFAULT_NARRATION_LOG_PATH))
    catalogue_path: Path | None = Path(os.environ["CATALOGUE_PATH"]) if os.getenv("CATALOGUE_PATH") else None
    history_duration_ms: int = _int_from_env("HISTORY_DURATION_MS", DEFAULT_HISTORY_DURATION_MS)
    history_sample_ms: int = _int_from_env("HISTORY_SAMPLE_MS", DEFAULT_HISTORY_SAMPLE_MS)
    history_max_samples: int = _int_from_env("HISTORY_MAX_SAMPLES", DEFAULT_HISTORY_MAX_SAMPLES)


def get_settings() -> Settings:
    """Return a Settings instance using current environment variables."""
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_narration=_bool_from_env("LOG_NARRATION", default=False),
        narration_log_path=get_narration_log_path(),
        catalogue_path=Path(os.environ["CATALOGUE_PATH"]) if os.getenv("CATALOGUE_PATH") else None,
        history_duration_ms=_int_from_env("HISTORY_DURATION_MS", DEFAULT_HISTORY_DURATION_MS),
        history_sample_ms=_int_from_env("HISTORY_SAMPLE_MS", DEFAULT_HISTORY_SAMPLE_MS),
        history_max_samples=_int_from_env("HISTORY_MAX_SAMPLES", DEFAULT_HISTORY_MAX_SAMPLES),
    )


def get_narration_log_path() -> Path:
    """Return the effective narration JSONL path from env or default."""
    return Path(os.getenv("NARRATION_LOG_PATH", DEFAULT_NARRATION_LOG_PATH))
