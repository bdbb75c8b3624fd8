from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from chemnarrate.types import Cell, NarrationLogEntry, ProductionInsight

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Apply a basic stderr handler at the given level name."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class JsonlNarrationLogger:
    """
    Minimal JSONL logger for narration output.

    Writes one JSON object per line, one line per narrated cell.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def write_entry(self, entry: NarrationLogEntry) -> None:
        line = json.dumps(entry.to_dict(), separators=(",", ":"))
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line)
            f.write("\n")


def log_narration(
    narration_logger: JsonlNarrationLogger,
    cell: Cell,
    lines: List[str],
    insights: List[ProductionInsight],
    time: Optional[float] = None,
) -> None:
    entry = NarrationLogEntry(
        cell_id=cell.cell_id,
        time=time,
        lines=list(lines),
        insights=list(insights),
    )
    # Logging must not break narration.
    try:
        narration_logger.write_entry(entry)
    except OSError as e:
        logger.debug("Could not write narration entry to %s: %s", narration_logger.path, e)


def _read_jsonl(path: Path) -> List[dict]:
    p = Path(path)
    if not p.exists():
        return []
    rows: List[dict] = []
    try:
        with p.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug("Skipping malformed line in %s", p)
                    continue
                if isinstance(data, dict):
                    rows.append(data)
    except OSError as e:
        # If the file becomes unreadable, return what we have so far
        logger.debug("Stopped reading %s: %s", p, e)
    return rows


def read_cell_snapshots(path: Path) -> List[Cell]:
    """Read a JSONL file of cell snapshots.

    Fail-soft: if the file doesn't exist, return an empty list. Any
    malformed lines are skipped.
    """
    cells: List[Cell] = []
    for data in _read_jsonl(path):
        try:
            cells.append(Cell.from_dict(data))
        except (TypeError, ValueError) as e:
            logger.debug("Skipping unusable cell snapshot: %s", e)
    return cells


def read_narration_log(path: Path) -> List[NarrationLogEntry]:
    """Read back rows written by JsonlNarrationLogger (fail-soft)."""
    entries: List[NarrationLogEntry] = []
    for data in _read_jsonl(path):
        try:
            entries.append(NarrationLogEntry.from_dict(data))
        except (TypeError, ValueError) as e:
            logger.debug("Skipping unusable narration row: %s", e)
    return entries
