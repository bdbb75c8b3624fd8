"""Short-term history sampling for the cells currently being inspected.

Only subscribed cells are sampled, which bounds memory to what a host is
actually looking at. Hosts subscribe a cell when it gains focus and
unsubscribe it when focus moves away.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from .config import get_settings
from .types import Cell, HistorySample


class HistoryRecorder:
    """Appends time-bounded samples to subscribed cells' history lists."""

    def __init__(
        self,
        duration_ms: Optional[int] = None,
        sample_ms: Optional[int] = None,
        max_samples: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.duration_ms = settings.history_duration_ms if duration_ms is None else duration_ms
        self.sample_ms = settings.history_sample_ms if sample_ms is None else sample_ms
        self.max_samples = settings.history_max_samples if max_samples is None else max_samples
        # Keyed by id(): cells are mutable dataclasses and not hashable.
        self._subscribers: Dict[int, Cell] = {}
        self._last_sample_at: Dict[int, float] = {}

    def subscribe(self, cell: Optional[Cell]) -> None:
        if cell is None:
            return
        if cell.history is None:
            cell.history = []
        self._subscribers[id(cell)] = cell

    def unsubscribe(self, cell: Optional[Cell], clear: bool = False) -> None:
        if cell is None:
            return
        self._subscribers.pop(id(cell), None)
        self._last_sample_at.pop(id(cell), None)
        if clear and cell.history:
            cell.history.clear()

    def clear_subscribers(self) -> None:
        self._subscribers.clear()
        self._last_sample_at.clear()

    def is_subscribed(self, cell: Cell) -> bool:
        return id(cell) in self._subscribers

    def record(self, now: float) -> None:
        """Take one sample per subscribed cell, then expire old samples."""
        if not self._subscribers:
            return
        cutoff = now - self.duration_ms
        for key, cell in self._subscribers.items():
            last = self._last_sample_at.get(key, float("-inf"))
            if now - last < self.sample_ms:
                continue
            history = cell.history
            history.append(
                HistorySample(
                    time=now,
                    temperature=cell.temperature,
                    pressure=cell.pressure or 0.0,
                    ph=cell.ph,
                    gas_sum=cell.gas_total(),
                )
            )
            self._last_sample_at[key] = now
            while history and history[0].time < cutoff:
                history.pop(0)
            while len(history) > self.max_samples:
                history.pop(0)


def history_of(cell: Optional[Cell]) -> List[HistorySample]:
    """Ordered samples for a cell; empty when it has none."""
    if cell is None or not cell.history:
        return []
    return cell.history
