from __future__ import annotations

from chemnarrate.causes import (
    CauseKind,
    gas_releaser,
    heats,
    ph_shifter,
    predicate_for,
    pressure_builder,
    select_best_cause,
)
from chemnarrate.types import Cell, ProductEntry, Reaction, ReactionActivity, ReactionEffects


def _mk_activity(rid: str, extent: float, products: dict[str, float] | None = None, **kw) -> ReactionActivity:
    prods = [ProductEntry(species_id=k, quantity=v) for k, v in (products or {}).items()]
    return ReactionActivity(reaction_id=rid, extent=extent, products=prods, **kw)


def test_select_picks_greatest_extent(reaction_index):
    cell = Cell(activity=[
        _mk_activity("neutralization", 0.3),
        _mk_activity("sodium_water", 0.9),
        _mk_activity("limestone_acid", 0.5),
    ])
    best = select_best_cause(cell, reaction_index)
    assert best is not None
    assert best.activity.reaction_id == "sodium_water"
    assert best.reaction.id == "sodium_water"


def test_select_tie_keeps_first_seen(reaction_index):
    cell = Cell(activity=[
        _mk_activity("limestone_acid", 0.5),
        _mk_activity("neutralization", 0.5),
    ])
    best = select_best_cause(cell, reaction_index)
    assert best.activity.reaction_id == "limestone_acid"


def test_select_skips_empty_unknown_and_inactive(reaction_index):
    cell = Cell(activity=[
        None,
        _mk_activity("not_in_catalogue", 1.0),
        _mk_activity("sodium_water", 0.0),
        _mk_activity("neutralization", -0.2),
    ])
    assert select_best_cause(cell, reaction_index) is None
    assert select_best_cause(Cell(), reaction_index) is None


def test_select_applies_predicate(reaction_index):
    cell = Cell(activity=[
        _mk_activity("sodium_water", 0.9),
        _mk_activity("neutralization", 0.4),
    ])
    best = select_best_cause(cell, reaction_index, lambda a, r: r.id == "neutralization")
    assert best.activity.reaction_id == "neutralization"
    assert select_best_cause(cell, reaction_index, lambda a, r: False) is None


def test_heat_predicate_sources():
    plain = Reaction(id="plain")
    assert heats(_mk_activity("plain", 1.0), plain) is False
    assert heats(_mk_activity("plain", 1.0, heat=True), plain) is True
    assert heats(_mk_activity("x", 1.0), Reaction(id="x", effects=ReactionEffects(heat_per_unit=1.0))) is True
    assert heats(_mk_activity("x", 1.0), Reaction(id="x", tags=["exothermic_low"])) is True
    assert heats(_mk_activity("x", 1.0), Reaction(id="x", tags=["endothermic"])) is False


def test_ph_predicates(materials):
    rx = Reaction(id="x")
    basic = _mk_activity("x", 1.0, {"NaOH": 1.0})
    acidic = _mk_activity("x", 1.0, {"HCl": 1.0})
    assert ph_shifter("up", materials)(basic, rx) is True
    assert ph_shifter("up", materials)(acidic, rx) is False
    assert ph_shifter("down", materials)(acidic, rx) is True
    assert ph_shifter("down", materials)(basic, rx) is False


def test_gas_and_pressure_predicates(materials):
    plain = Reaction(id="x")
    no_gas = _mk_activity("x", 1.0, {"NaCl": 1.0})
    named_gas = _mk_activity("x", 1.0, {"CO2_g": 1.0})
    suffix_gas = _mk_activity("x", 1.0, {"N2(g)": 1.0})

    assert gas_releaser(materials)(no_gas, plain) is False
    assert gas_releaser(materials)(named_gas, plain) is True
    assert gas_releaser(materials)(suffix_gas, plain) is True
    assert gas_releaser(materials)(no_gas, Reaction(id="x", tags=["gas_evolution"])) is True
    assert gas_releaser(materials)(no_gas, Reaction(id="x", effects=ReactionEffects(emit_gas=True))) is True

    assert pressure_builder(materials)(no_gas, plain) is False
    assert pressure_builder(materials)(named_gas, plain) is True
    assert pressure_builder(materials)(no_gas, Reaction(id="x", effects=ReactionEffects(pressure_pulse=0.3))) is True


def test_predicate_for_covers_every_kind(materials):
    for kind in CauseKind:
        assert callable(predicate_for(kind, materials))
    assert predicate_for(CauseKind.HEAT, materials) is heats
