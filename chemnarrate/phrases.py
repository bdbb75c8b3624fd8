"""Phrase rules turning reactions and their products into sentence fragments.

Classification and wording are kept apart: `classify_actor` and
`resolve_gas` decide which case applies, the `*_TEMPLATES` tables and the
`describe_*` helpers turn that decision into text. Everything here is pure;
the material registry is passed in by the caller.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .causes import Cause, is_acidic_species, is_basic_species
from .phases import is_gas, is_solid, is_water
from .registry import MaterialRegistry
from .types import Cell, ProductEntry, Reaction

_NAME_NOISE = re.compile(r"_g$|_l$|\(.*?\)|_")


# ----------------- Names & hazards -----------------

def nice_name(species_id: str, materials: Optional[MaterialRegistry]) -> str:
    """Display name from the registry, else the id with phase noise stripped."""
    m = materials.get(species_id) if materials is not None else None
    if m is not None and m.display_name:
        return m.display_name
    return _NAME_NOISE.sub(lambda s: " " if s.group(0) == "_" else "", species_id or "").strip()


def hazards_for(species_id: str, materials: Optional[MaterialRegistry]) -> Set[str]:
    """Hazard tags plus those implied by flammability, corrosivity and toxicity."""
    m = materials.get(species_id) if materials is not None else None
    if m is None:
        return set()
    tags = set(m.hazard_tags)
    if m.flammability == "high":
        tags.add("flammable")
    if m.corrosivity in ("base", "acid"):
        tags.add("caustic")
    if m.corrosivity == "oxidizer":
        tags.add("oxidizer")
    if m.toxicity == "high":
        tags.add("toxic")
    return tags


def hazard_flair(species_id: str, materials: Optional[MaterialRegistry]) -> str:
    tags = hazards_for(species_id, materials)
    if "flammable" in tags:
        return " (flammable)"
    if "toxic" in tags:
        return " (toxic)"
    if "oxidizer" in tags:
        return " (oxidizer)"
    return ""


def color_word(species_id: str, materials: Optional[MaterialRegistry]) -> Optional[str]:
    m = materials.get(species_id) if materials is not None else None
    return m.color if m is not None and m.color else None


def reactant_names(reaction: Reaction, materials: Optional[MaterialRegistry]) -> List[str]:
    return [nice_name(r, materials) for r in reaction.reactants]


# ----------------- Actor clause -----------------

class ActorKind(str, Enum):
    NEUTRALIZATION = "neutralization"
    METAL_WATER = "metal_water"
    ACID = "acid"
    BASE = "base"
    GENERIC = "generic"


ACTOR_TEMPLATES: Dict[ActorKind, str] = {
    ActorKind.NEUTRALIZATION: "The acid is neutralizing the base",
    ActorKind.METAL_WATER: "The metal is reacting with water",
    ActorKind.ACID: "The acid is reacting with a reactant",
    ActorKind.BASE: "The base is reacting with a reactant",
    ActorKind.GENERIC: "A reaction is proceeding",
}


def classify_actor(reaction: Reaction, materials: Optional[MaterialRegistry]) -> ActorKind:
    ids = list(reaction.reactants)
    found = [materials.get(i) if materials is not None else None for i in ids]
    mats = [m for m in found if m is not None]
    has_water = any(is_water(i) for i in ids)
    has_acid = any(m.corrosivity == "acid" or "acid" in m.hazard_tags for m in mats)
    has_base = any(m.corrosivity == "base" or "base" in m.hazard_tags for m in mats)
    has_metal = any(m.phase_stp == "s" and "water_reactive" in m.hazard_tags for m in mats)

    if has_acid and has_base:
        return ActorKind.NEUTRALIZATION
    if has_metal and has_water:
        return ActorKind.METAL_WATER
    if has_acid:
        return ActorKind.ACID
    if has_base:
        return ActorKind.BASE
    return ActorKind.GENERIC


def actor_phrase(reaction: Reaction, materials: Optional[MaterialRegistry]) -> str:
    return ACTOR_TEMPLATES[classify_actor(reaction, materials)]


# ----------------- Consequence clauses -----------------

def describe_heat(reaction: Reaction) -> Optional[str]:
    if reaction.exothermic_tag() or reaction.effects.heat_per_unit > 0:
        return "heating the tile"
    return None


class GasSource(str, Enum):
    CELL = "cell"  # a gas already accumulating in the cell
    PRODUCT = "product"  # the biggest gas product of this step
    GENERIC = "generic"  # flagged as gassy, species unknown


@dataclass(frozen=True)
class GasResolution:
    source: GasSource
    species_id: Optional[str] = None


# A cell gas must beat the step's best gas product by this factor to be named instead.
CELL_GAS_DOMINANCE = 1.25
CELL_GAS_MIN = 0.05


def _product_gas_candidate(
    products: Sequence[ProductEntry],
    reaction: Reaction,
    materials: Optional[MaterialRegistry],
) -> Tuple[Optional[str], float]:
    best_id: Optional[str] = None
    best_qty = 0.0
    for p in products:
        if not is_gas(p.species_id, reaction, materials):
            continue
        qty = p.quantity or 0.0
        if best_id is None or qty > best_qty:
            best_id, best_qty = p.species_id, qty
    return best_id, best_qty


def top_gas_product(
    products: Sequence[ProductEntry],
    reaction: Reaction,
    materials: Optional[MaterialRegistry],
) -> Optional[str]:
    """Highest-quantity gas product with a positive quantity, if any."""
    best_id: Optional[str] = None
    best_qty = 0.0
    for p in products:
        if is_gas(p.species_id, reaction, materials):
            qty = p.quantity or 0.0
            if qty > best_qty:
                best_id, best_qty = p.species_id, qty
    return best_id


def resolve_gas(
    reaction: Reaction,
    products: Sequence[ProductEntry],
    cell: Optional[Cell],
    materials: Optional[MaterialRegistry],
) -> Optional[GasResolution]:
    """Decide which gas, if any, a reaction entry should be said to release."""
    product_gas, product_qty = _product_gas_candidate(products, reaction, materials)

    cell_gas: Optional[Tuple[str, float]] = None
    if cell is not None:
        present = [(k, v) for k, v in (cell.gas_species or {}).items() if (v or 0.0) > CELL_GAS_MIN]
        present.sort(key=lambda kv: kv[1], reverse=True)
        if present:
            cell_gas = present[0]

    if cell_gas is not None:
        gas_id, qty = cell_gas
        if product_gas is None or qty > product_qty * CELL_GAS_DOMINANCE:
            return GasResolution(GasSource.CELL, gas_id)
    if product_gas is not None:
        return GasResolution(GasSource.PRODUCT, product_gas)
    if reaction.has_tag("gas_evolution") or reaction.effects.emit_gas:
        return GasResolution(GasSource.GENERIC)
    return None


def describe_gas(resolution: Optional[GasResolution], materials: Optional[MaterialRegistry]) -> Optional[str]:
    if resolution is None:
        return None
    if resolution.species_id is None:
        return "releasing gas"
    pretty = nice_name(resolution.species_id, materials)
    return f"releasing {pretty}{hazard_flair(resolution.species_id, materials)}"


def describe_products(products: Sequence[ProductEntry], materials: Optional[MaterialRegistry]) -> Optional[str]:
    """Top three products by quantity, comma-separated."""
    if not products:
        return None
    ranked = sorted(products, key=lambda p: p.quantity or 0.0, reverse=True)
    return ", ".join(nice_name(p.species_id, materials) for p in ranked[:3])


def describe_precipitate(
    products: Sequence[ProductEntry],
    reaction: Reaction,
    materials: Optional[MaterialRegistry],
) -> Optional[str]:
    solid = next((p for p in products if is_solid(p.species_id, reaction, materials)), None)
    if solid is None:
        return None
    label = nice_name(solid.species_id, materials)
    color = color_word(solid.species_id, materials)
    if color:
        return f"forming a {color} precipitate ({label})"
    return f"forming a precipitate ({label})"


def describe_limiter(limiter: Optional[str], materials: Optional[MaterialRegistry]) -> str:
    if not limiter or limiter == "rate":
        return "rate-limited"
    return f"limited by {nice_name(limiter, materials)}"


# ----------------- "Because" clauses -----------------

def because_heat(cause: Cause, materials: Optional[MaterialRegistry]) -> str:
    names = reactant_names(cause.reaction, materials)[:2]
    if len(names) == 2:
        head = f"{names[0]} and {names[1]}"
    elif len(names) == 1:
        head = names[0]
    else:
        head = nice_name(cause.reaction.id, materials)
    return f"temperature rising because {head} react exothermically"


def because_pressure(cause: Cause, materials: Optional[MaterialRegistry]) -> str:
    gas_id = top_gas_product(cause.activity.products, cause.reaction, materials)
    gas_name = nice_name(gas_id, materials) if gas_id else "gas"
    return f"pressure building because {gas_name} is accumulating"


def because_ph(cause: Cause, direction: str, materials: Optional[MaterialRegistry]) -> str:
    check = is_basic_species if direction == "up" else is_acidic_species
    matching = [p for p in cause.activity.products if check(materials, p.species_id)]
    label = nice_name(matching[0].species_id, materials) if matching else "products"
    if direction == "up":
        return f"pH increasing because {label} (basic) is forming"
    return f"pH decreasing because {label} (acidic) is forming"


def because_gas(cause: Cause, materials: Optional[MaterialRegistry]) -> str:
    gas_id = top_gas_product(cause.activity.products, cause.reaction, materials)
    if gas_id is None:
        return "gas increasing because gas is being released"
    flair = hazard_flair(gas_id, materials)
    return f"gas increasing because {nice_name(gas_id, materials)}{flair} is being released"
