"""Material registry and reaction index.

Both are built once per narration session and passed into the narrator
explicitly. Lookups are plain dict hits.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .types import Material, Reaction

logger = logging.getLogger(__name__)


class CatalogueError(ValueError):
    """Raised when a catalogue file cannot be used at all."""


class MaterialRegistry:
    """Point lookups from species id to Material metadata."""

    def __init__(self, materials: Iterable[Material] = ()) -> None:
        self._by_id: Dict[str, Material] = {}
        for m in materials:
            self.register(m)

    def register(self, material: Material) -> None:
        self._by_id[material.id] = material

    def get(self, species_id: Optional[str]) -> Optional[Material]:
        if not species_id:
            return None
        return self._by_id.get(species_id)

    def __contains__(self, species_id: object) -> bool:
        return species_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)


def lookup_material(registry: Optional[MaterialRegistry], species_id: str) -> Optional[Material]:
    if registry is None:
        return None
    return registry.get(species_id)


def build_reaction_index(reactions: Iterable[Reaction]) -> Dict[str, Reaction]:
    """Map reaction id -> Reaction. Later duplicates win."""
    return {r.id: r for r in reactions}


def _as_records(data: Any) -> List[Dict[str, Any]]:
    # Accept either a list of records or an id-keyed mapping of records.
    if isinstance(data, list):
        return [d for d in data if isinstance(d, dict)]
    if isinstance(data, Mapping):
        out = []
        for key, value in data.items():
            if isinstance(value, dict):
                rec = dict(value)
                rec.setdefault("id", key)
                out.append(rec)
        return out
    return []


def parse_catalogue(data: Mapping[str, Any]) -> Tuple[MaterialRegistry, List[Reaction]]:
    """Build a registry and reaction list from a decoded catalogue object.

    Shape: {"materials": [...] | {id: {...}}, "reactions": [...] | {id: {...}}}.
    Records without an id, or with fields of the wrong type, are skipped.
    """
    registry = MaterialRegistry()
    for rec in _as_records(data.get("materials")):
        try:
            material = Material.from_dict(rec)
        except (TypeError, ValueError, AttributeError) as e:
            logger.debug("Skipping unusable material record %r: %s", rec, e)
            continue
        if not material.id:
            logger.debug("Skipping material without id: %r", rec)
            continue
        registry.register(material)

    reactions: List[Reaction] = []
    for rec in _as_records(data.get("reactions")):
        try:
            reaction = Reaction.from_dict(rec)
        except (TypeError, ValueError, AttributeError) as e:
            logger.debug("Skipping unusable reaction record %r: %s", rec, e)
            continue
        if not reaction.id:
            logger.debug("Skipping reaction without id: %r", rec)
            continue
        reactions.append(reaction)
    return registry, reactions


def load_catalogue(path: str | Path) -> Tuple[MaterialRegistry, List[Reaction]]:
    """Load a JSON catalogue file.

    Unlike the telemetry readers this is not fail-soft: a missing or
    undecodable catalogue raises CatalogueError.
    """
    p = Path(path)
    if not p.exists():
        raise CatalogueError(f"catalogue not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CatalogueError(f"catalogue is not valid JSON: {p}") from e
    except OSError as e:
        raise CatalogueError(f"catalogue could not be read: {p}") from e
    if not isinstance(data, dict):
        raise CatalogueError(f"catalogue must be a JSON object: {p}")
    return parse_catalogue(data)
