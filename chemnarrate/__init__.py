"""chemnarrate package.

Plain-English diagnostics for cells of a running chemistry simulation:
trend detection, causal selection among concurrent reactions, and rule-based
sentence composition.
"""

from .narration import TileNarrator, narrate_tile  # re-export entry points
from .types import Cell, HistorySample, Material, ProductEntry, ProductionInsight, Reaction, ReactionActivity

__all__ = [
    "config",
    "types",
    "registry",
    "phases",
    "trends",
    "causes",
    "phrases",
    "narration",
    "history",
    "inspector",
    "logging_utils",
    # re-exports
    "TileNarrator",
    "narrate_tile",
    "Cell",
    "HistorySample",
    "Material",
    "ProductEntry",
    "ProductionInsight",
    "Reaction",
    "ReactionActivity",
]
