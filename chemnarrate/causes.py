"""Causal candidate selection among a cell's concurrent reactions.

One primitive, `select_best_cause`, answers every "why is X trending"
question: filter the active reactions with a predicate, keep the one with
the greatest extent. The predicates for the four questions narration asks
live here too, keyed by CauseKind.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Mapping, NamedTuple, Optional

from .phases import is_gas
from .registry import MaterialRegistry
from .types import Cell, ReactionActivity, Reaction

CausePredicate = Callable[[ReactionActivity, Reaction], bool]


class CauseKind(str, Enum):
    HEAT = "heat"
    PH_UP = "ph_up"
    PH_DOWN = "ph_down"
    GAS = "gas"
    PRESSURE = "pressure"


class Cause(NamedTuple):
    activity: ReactionActivity
    reaction: Reaction


def select_best_cause(
    cell: Cell,
    reactions: Mapping[str, Reaction],
    predicate: Optional[CausePredicate] = None,
) -> Optional[Cause]:
    """Return the highest-extent active reaction satisfying `predicate`.

    Empty entries, non-positive extents and ids missing from `reactions` are
    skipped. Ties keep the first entry seen.
    """
    best: Optional[Cause] = None
    best_score = float("-inf")
    for activity in cell.activity or []:
        if not activity or (activity.extent or 0.0) <= 0:
            continue
        reaction = reactions.get(activity.reaction_id)
        if reaction is None:
            continue
        if predicate is not None and not predicate(activity, reaction):
            continue
        score = activity.extent or 0.0
        if score > best_score:
            best_score = score
            best = Cause(activity, reaction)
    return best


# ----------------- Predicates -----------------

def is_basic_species(materials: Optional[MaterialRegistry], species_id: str) -> bool:
    m = materials.get(species_id) if materials is not None else None
    return m is not None and m.corrosivity == "base"


def is_acidic_species(materials: Optional[MaterialRegistry], species_id: str) -> bool:
    m = materials.get(species_id) if materials is not None else None
    return m is not None and m.corrosivity == "acid"


def heats(activity: ReactionActivity, reaction: Reaction) -> bool:
    return (
        bool(activity.heat)
        or reaction.effects.heat_per_unit > 0
        or reaction.exothermic_tag() is not None
    )


def ph_shifter(direction: str, materials: Optional[MaterialRegistry]) -> CausePredicate:
    """Predicate for reactions forming a basic ("up") or acidic ("down") product."""
    check = is_basic_species if direction == "up" else is_acidic_species

    def predicate(activity: ReactionActivity, reaction: Reaction) -> bool:
        return any(check(materials, p.species_id) for p in activity.products)

    return predicate


def gas_releaser(materials: Optional[MaterialRegistry]) -> CausePredicate:
    def predicate(activity: ReactionActivity, reaction: Reaction) -> bool:
        if reaction.effects.emit_gas:
            return True
        return (
            any(is_gas(p.species_id, reaction, materials) for p in activity.products)
            or reaction.has_tag("gas_evolution")
        )

    return predicate


def pressure_builder(materials: Optional[MaterialRegistry]) -> CausePredicate:
    def predicate(activity: ReactionActivity, reaction: Reaction) -> bool:
        if reaction.effects.pressure_pulse:
            return True
        return (
            any(is_gas(p.species_id, reaction, materials) for p in activity.products)
            or reaction.has_tag("gas_evolution")
        )

    return predicate


def predicate_for(kind: CauseKind, materials: Optional[MaterialRegistry]) -> CausePredicate:
    if kind is CauseKind.HEAT:
        return heats
    if kind is CauseKind.PH_UP:
        return ph_shifter("up", materials)
    if kind is CauseKind.PH_DOWN:
        return ph_shifter("down", materials)
    if kind is CauseKind.GAS:
        return gas_releaser(materials)
    return pressure_builder(materials)
