"""Phase resolution for species ids.

Structured metadata wins: a reaction's per-species phase override, then the
material's phase at standard conditions. Only when both are absent does the
naming-convention classifier below get a say.
"""
from __future__ import annotations

import re
from typing import Optional

from .registry import MaterialRegistry
from .types import Reaction

_GAS_SUFFIX = re.compile(r"(_g|\(g\))$")
_SOLID_SUFFIX = re.compile(r"\(s\)$")
_WATER = re.compile(r"^H2O(_g|\(g\))?$")


def phase_from_name(species_id: str) -> Optional[str]:
    """Guess a phase from naming conventions: ``CO2_g``/``CO2(g)`` and ``AgCl(s)``."""
    if _GAS_SUFFIX.search(species_id or ""):
        return "g"
    if _SOLID_SUFFIX.search(species_id or ""):
        return "s"
    return None


def declared_phase(
    species_id: str,
    reaction: Optional[Reaction],
    materials: Optional[MaterialRegistry],
) -> Optional[str]:
    if reaction is not None:
        override = reaction.phases.get(species_id)
        if override:
            return override
    material = materials.get(species_id) if materials is not None else None
    if material is not None and material.phase_stp:
        return material.phase_stp
    return None


def resolve_phase(
    species_id: str,
    reaction: Optional[Reaction],
    materials: Optional[MaterialRegistry],
) -> Optional[str]:
    return declared_phase(species_id, reaction, materials) or phase_from_name(species_id)


def is_gas(species_id: str, reaction: Optional[Reaction], materials: Optional[MaterialRegistry]) -> bool:
    return resolve_phase(species_id, reaction, materials) == "g"


def is_solid(species_id: str, reaction: Optional[Reaction], materials: Optional[MaterialRegistry]) -> bool:
    return resolve_phase(species_id, reaction, materials) == "s"


def is_water(species_id: str) -> bool:
    return bool(_WATER.match(species_id or "")) or species_id == "H2O(l)"
