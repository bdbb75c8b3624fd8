from __future__ import annotations

"""
Structured inspector records for a focused cell.

Constraints:
- Presentation-neutral: rows of plain values, no markup or colours.
- Deterministic ordering so hosts can compare `rows_signature` between ticks
  and skip redisplay when nothing changed.
"""

import json
import math
from decimal import ROUND_HALF_UP, Decimal
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .phases import resolve_phase
from .registry import MaterialRegistry
from .types import Cell

SPECIES_ROW_LIMIT = 8
REACTION_ROW_LIMIT = 5
PRODUCT_LIMIT = 4
MIN_BAR_PERCENT = 4
SIGNATURE_PLACES = 3


@dataclass
class SpeciesRow:
    species_id: str
    quantity: float
    quantity_label: str
    width_percent: float
    species_class: str


@dataclass
class ReactionRow:
    reaction_id: str
    intensity_percent: int
    limiter_label: str
    fizz: bool
    heat: bool
    products: List[str] = field(default_factory=list)


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def _fixed(value: float, places: int) -> str:
    # Halves round away from zero on the exact binary value, not to even.
    return str(Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def format_qty(value: Optional[float]) -> str:
    if value is None or not math.isfinite(value):
        return "0.00"
    magnitude = abs(value)
    if magnitude >= 10:
        return _fixed(value, 0)
    if magnitude >= 1:
        return _fixed(value, 1)
    return _fixed(value, 2)


def species_class(species_id: str, bag: str, materials: Optional[MaterialRegistry]) -> str:
    if bag == "gas":
        return "gas"
    if bag == "solids":
        return "solid"
    m = materials.get(species_id) if materials is not None else None
    corrosivity = (m.corrosivity or "") if m is not None else ""
    tags = m.hazard_tags if m is not None else []
    if "acid" in tags or "acid" in corrosivity:
        return "acid"
    if "base" in tags or "base" in corrosivity:
        return "base"
    phase = resolve_phase(species_id, None, materials)
    if phase == "g":
        return "gas"
    if phase == "s":
        return "solid"
    return "neutral"


def _bag(cell: Cell, bag: str) -> Dict[str, float]:
    if bag == "gas":
        return cell.gas_species or {}
    if bag == "solids":
        return cell.solid_species or {}
    return cell.aqueous_species or {}


def species_rows(
    cell: Cell,
    bag: str,
    materials: Optional[MaterialRegistry],
    limit: int = SPECIES_ROW_LIMIT,
) -> List[SpeciesRow]:
    """Rows for one species bag ("species", "gas" or "solids"), largest first."""
    items = [(k, float(v)) for k, v in _bag(cell, bag).items() if (v or 0.0) > 0.0001]
    items.sort(key=lambda kv: kv[1], reverse=True)
    items = items[:limit]
    if not items:
        return []
    top = items[0][1]
    return [
        SpeciesRow(
            species_id=k,
            quantity=v,
            quantity_label=format_qty(v),
            width_percent=clamp_percent(max(MIN_BAR_PERCENT, (v / top) * 100)),
            species_class=species_class(k, bag, materials),
        )
        for k, v in items
    ]


def reaction_rows(cell: Cell, limit: int = REACTION_ROW_LIMIT) -> List[ReactionRow]:
    acts = [a for a in (cell.activity or []) if a]
    acts.sort(key=lambda a: a.extent or 0.0, reverse=True)
    rows: List[ReactionRow] = []
    for a in acts[:limit]:
        products = sorted(a.products, key=lambda p: p.quantity or 0.0, reverse=True)[:PRODUCT_LIMIT]
        rows.append(
            ReactionRow(
                reaction_id=a.reaction_id,
                intensity_percent=math.floor(a.intensity * 100 + 0.5),
                limiter_label=a.limiter if a.limiter and a.limiter != "rate" else "rate-limited",
                fizz=bool(a.fizz),
                heat=bool(a.heat),
                products=[f"{p.species_id} ({format_qty(p.quantity or 0.0)})" for p in products],
            )
        )
    return rows


def _rounded(value: Any) -> Any:
    if isinstance(value, float):
        return round(value, SIGNATURE_PLACES)
    if isinstance(value, dict):
        return {k: _rounded(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_rounded(v) for v in value]
    return value


def rows_signature(rows: Sequence[Any]) -> str:
    """Stable string identity for a list of row dataclasses.

    Floats are rounded to three places first so sub-visible jitter between
    ticks does not count as a change.
    """
    return json.dumps([_rounded(asdict(r)) for r in rows], sort_keys=True, separators=(",", ":"))


def stat_readout(cell: Cell) -> Dict[str, str]:
    moisture = float(cell.moisture or 0.0)
    return {
        "temperature": f"{float(cell.temperature or 0.0):.1f}°C",
        "ph": f"{float(cell.ph or 0.0):.2f}",
        "moisture": f"{int(moisture * 100)}%",
        "pressure": f"{float(cell.pressure or 0.0):.2f}",
    }


def inspect_cell(cell: Cell, materials: Optional[MaterialRegistry]) -> Dict[str, Any]:
    """All inspector records for one cell as a JSON-safe dict."""
    return {
        "cell_id": cell.cell_id,
        "stats": stat_readout(cell),
        "reactions": [asdict(r) for r in reaction_rows(cell)],
        "species": [asdict(r) for r in species_rows(cell, "species", materials)],
        "gas": [asdict(r) for r in species_rows(cell, "gas", materials)],
        "solids": [asdict(r) for r in species_rows(cell, "solids", materials)],
    }
