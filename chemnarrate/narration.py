from __future__ import annotations

"""
Plain-English narration for a single grid cell.

Constraints:
- Pure functions of (cell, material registry, reaction index); no state is
  kept between calls, so repeated calls give byte-identical output.
- The cell is passed explicitly through every helper; activity records are
  never annotated or mutated.
- Missing data shortens the text, it never raises.
"""

import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .causes import Cause, CauseKind, predicate_for, select_best_cause
from .phrases import (
    actor_phrase,
    because_gas,
    because_heat,
    because_ph,
    because_pressure,
    describe_gas,
    describe_heat,
    describe_limiter,
    describe_precipitate,
    describe_products,
    nice_name,
    reactant_names,
    resolve_gas,
)
from .phases import is_gas
from .registry import MaterialRegistry, build_reaction_index
from .trends import (
    gas_trend_label,
    ph_trend_label,
    pressure_trend_label,
    temperature_trend_suffix,
)
from .types import Cell, ProductEntry, ProductionInsight, Reaction, ReactionActivity

NO_ACTIVITY_LINE = "No active reactions detected."
MAX_REACTION_LINES = 3
NOTABLE_SPECIES_MIN = 0.0001
NOTABLE_SPECIES_COUNT = 2


# ----------------- Descriptor bands -----------------

def describe_temperature(temperature: Optional[float]) -> str:
    t = float(temperature or 0.0)
    if t >= 120:
        return "very hot"
    if t >= 60:
        return "hot"
    if t <= 0:
        return "freezing"
    if t < 20:
        return "cool"
    return "temperate"


def describe_ph(ph: Optional[float]) -> str:
    # An unknown pH is not the same as pH 0.
    if ph is None:
        return "near neutral"
    if ph <= 2:
        return "strongly acidic"
    if ph < 6:
        return "slightly acidic"
    if 8 < ph < 12:
        return "slightly basic"
    if ph >= 12:
        return "strongly basic"
    return "near neutral"


def describe_gas_level(gas_total: float) -> Optional[str]:
    if gas_total > 1:
        return "gassy"
    if gas_total > 0.1:
        return "traces of gas"
    return None


def describe_pressure(pressure: Optional[float]) -> Optional[str]:
    if float(pressure or 0.0) > 4:
        return "pressurized"
    return None


def _intensity_percent(activity: ReactionActivity) -> int:
    # Round half up.
    return math.floor(activity.intensity * 100 + 0.5)


class TileNarrator:
    """Narration engine bound to one session's material registry and reactions."""

    def __init__(self, materials: Optional[MaterialRegistry], reactions: Iterable[Reaction] | Mapping[str, Reaction]) -> None:
        self.materials = materials
        if isinstance(reactions, Mapping):
            self.reactions: Dict[str, Reaction] = dict(reactions)
        else:
            self.reactions = build_reaction_index(reactions)

    # ----------------- Summary -----------------

    def summarize_tile(self, cell: Cell) -> str:
        history = cell.history
        temp_suffix = temperature_trend_suffix(history)
        bits: List[str] = [describe_temperature(cell.temperature) + temp_suffix, describe_ph(cell.ph)]
        for extra in (describe_gas_level(cell.gas_total()), describe_pressure(cell.pressure)):
            if extra:
                bits.append(extra)

        p_trend = pressure_trend_label(history)
        ph_trend = ph_trend_label(history)
        g_trend = gas_trend_label(history)
        trend_bits = [t for t in (p_trend, ph_trend, g_trend) if t]

        head = ", ".join(bits) if bits else "stable"
        if trend_bits:
            head += "; " + ", ".join(trend_bits)

        because = self._because_clauses(
            cell,
            heating=temp_suffix == " (heating up)",
            pressure_building=p_trend == "pressure building",
            ph_trend=ph_trend,
            gas_building=g_trend == "gas building",
        )
        because_text = f" Because: {'; '.join(because)}." if because else ""

        notable = self._notable_species(cell)
        species_text = f" Notable species: {', '.join(notable)}." if notable else ""
        return f"This tile is {head}.{because_text}{species_text}"

    def _because_clauses(
        self,
        cell: Cell,
        *,
        heating: bool,
        pressure_building: bool,
        ph_trend: Optional[str],
        gas_building: bool,
    ) -> List[str]:
        clauses: List[str] = []
        if heating:
            cause = self._best_cause(cell, CauseKind.HEAT)
            if cause:
                clauses.append(because_heat(cause, self.materials))
        if pressure_building:
            cause = self._best_cause(cell, CauseKind.PRESSURE)
            if cause:
                clauses.append(because_pressure(cause, self.materials))
        if ph_trend:
            direction = "up" if "basic" in ph_trend else ("down" if "acidic" in ph_trend else None)
            if direction:
                kind = CauseKind.PH_UP if direction == "up" else CauseKind.PH_DOWN
                cause = self._best_cause(cell, kind)
                if cause:
                    clauses.append(because_ph(cause, direction, self.materials))
        if gas_building:
            cause = self._best_cause(cell, CauseKind.GAS)
            if cause:
                clauses.append(because_gas(cause, self.materials))
        return clauses

    def _best_cause(self, cell: Cell, kind: CauseKind) -> Optional[Cause]:
        return select_best_cause(cell, self.reactions, predicate_for(kind, self.materials))

    def _notable_species(self, cell: Cell) -> List[str]:
        present = [(k, v) for k, v in (cell.aqueous_species or {}).items() if (v or 0.0) > NOTABLE_SPECIES_MIN]
        present.sort(key=lambda kv: kv[1], reverse=True)
        return [nice_name(k, self.materials) for k, _ in present[:NOTABLE_SPECIES_COUNT]]

    # ----------------- Per-reaction sentences -----------------

    def describe_reaction_entry(self, activity: ReactionActivity, cell: Optional[Cell] = None) -> Optional[str]:
        """One sentence for an active reaction, or None if its id is unknown."""
        reaction = self.reactions.get(activity.reaction_id)
        if reaction is None:
            return None

        consequences: List[str] = []
        heat = describe_heat(reaction)
        if heat:
            consequences.append(heat)

        gas = describe_gas(resolve_gas(reaction, activity.products, cell, self.materials), self.materials)
        if gas:
            consequences.append(gas)

        products = describe_products(activity.products, self.materials)
        if products and not gas:
            consequences.append(
                describe_precipitate(activity.products, reaction, self.materials) or f"forming {products}"
            )
        elif products and gas:
            self._name_generic_gas(consequences, activity.products, reaction)

        cons_text = f", {' and '.join(consequences)}" if consequences else ""
        limiter = describe_limiter(activity.limiter, self.materials)
        return f"{actor_phrase(reaction, self.materials)}{cons_text}. Intensity {_intensity_percent(activity)}%, {limiter}."

    def _name_generic_gas(self, consequences: List[str], products: Sequence[ProductEntry], reaction: Reaction) -> None:
        gas_product = next((p for p in products if is_gas(p.species_id, reaction, self.materials)), None)
        if gas_product is None:
            return
        if "releasing gas" in consequences:
            idx = consequences.index("releasing gas")
            consequences[idx] = f"releasing {nice_name(gas_product.species_id, self.materials)}"

    def top_activities(self, cell: Cell, limit: int = MAX_REACTION_LINES) -> List[ReactionActivity]:
        acts = [a for a in (cell.activity or []) if a]
        acts.sort(key=lambda a: a.extent or 0.0, reverse=True)
        return acts[:limit]

    # ----------------- Production insights -----------------

    def production_insight_records(self, cell: Cell) -> List[ProductionInsight]:
        """Group every positive product across active reactions by species."""
        productions: Dict[str, List[tuple]] = {}
        for activity in cell.activity or []:
            if not activity or (activity.extent or 0.0) <= 0:
                continue
            reaction = self.reactions.get(activity.reaction_id)
            if reaction is None:
                continue
            for product in activity.products:
                if not product or (product.quantity or 0.0) <= 0:
                    continue
                productions.setdefault(product.species_id, []).append((activity, reaction))

        insights: List[ProductionInsight] = []
        for product_id, sources in productions.items():
            labels = list(dict.fromkeys(reaction.label for _, reaction in sources))
            activity, reaction = sources[0]
            limiter = (
                nice_name(activity.limiter, self.materials)
                if activity.limiter and activity.limiter != "rate"
                else None
            )
            reactants = reactant_names(reaction, self.materials)
            if limiter:
                increase = f"adding more {limiter}"
            elif reactants:
                increase = f"supplying more {', '.join(reactants)}"
            else:
                increase = "supplying more reactants"
            decrease = f"removing {', '.join(reactants)}" if reactants else "reducing the available reactants"
            insights.append(
                ProductionInsight(
                    product_id=product_id,
                    product_name=nice_name(product_id, self.materials),
                    sources=labels,
                    increase=increase,
                    decrease=decrease,
                )
            )
        return insights

    def build_production_insights(self, cell: Cell) -> List[str]:
        return [i.sentence for i in self.production_insight_records(cell)]

    # ----------------- Entry point -----------------

    def narrate_tile(self, cell: Cell) -> List[str]:
        lines = [self.summarize_tile(cell)]
        acts = self.top_activities(cell)
        for activity in acts:
            sentence = self.describe_reaction_entry(activity, cell)
            if sentence:
                lines.append(sentence)
        production = self.build_production_insights(cell)
        lines.extend(production)
        if not acts and not production:
            lines.append(NO_ACTIVITY_LINE)
        return lines


def narrate_tile(
    cell: Cell,
    materials: Optional[MaterialRegistry],
    reactions: Iterable[Reaction] | Mapping[str, Reaction],
) -> List[str]:
    """Convenience wrapper building a one-off TileNarrator."""
    return TileNarrator(materials, reactions).narrate_tile(cell)
