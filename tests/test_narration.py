from __future__ import annotations

from chemnarrate.narration import (
    NO_ACTIVITY_LINE,
    TileNarrator,
    describe_ph,
    describe_temperature,
    narrate_tile,
)
from chemnarrate.types import Cell, HistorySample, ProductEntry, Reaction, ReactionActivity


def _mk_activity(rid: str, extent: float, products: dict[str, float] | None = None, limiter: str | None = None) -> ReactionActivity:
    prods = [ProductEntry(species_id=k, quantity=v) for k, v in (products or {}).items()]
    return ReactionActivity(reaction_id=rid, extent=extent, limiter=limiter, products=prods)


def _mk_narrator(materials, reactions, *extra: Reaction) -> TileNarrator:
    return TileNarrator(materials, list(reactions) + list(extra))


# ----------------- Descriptor bands -----------------

def test_temperature_bands():
    assert describe_temperature(130) == "very hot"
    assert describe_temperature(120) == "very hot"
    assert describe_temperature(60) == "hot"
    assert describe_temperature(0) == "freezing"
    assert describe_temperature(-5) == "freezing"
    assert describe_temperature(19.9) == "cool"
    assert describe_temperature(20) == "temperate"
    assert describe_temperature(None) == "freezing"


def test_ph_bands():
    assert describe_ph(2) == "strongly acidic"
    assert describe_ph(5.9) == "slightly acidic"
    assert describe_ph(6) == "near neutral"
    assert describe_ph(8) == "near neutral"
    assert describe_ph(9) == "slightly basic"
    assert describe_ph(12) == "strongly basic"
    assert describe_ph(None) == "near neutral"


# ----------------- Summary -----------------

def test_quiet_cell_scenario(materials, reactions):
    cell = Cell(temperature=25, ph=7.0, moisture=0.5, pressure=0, gas_species={}, aqueous_species={}, activity=[])
    assert narrate_tile(cell, materials, reactions) == [
        "This tile is temperate, near neutral.",
        "No active reactions detected.",
    ]


def test_missing_species_maps_narrate_quietly(materials, reactions):
    cell = Cell(temperature=25, ph=7.0, aqueous_species=None, gas_species=None, solid_species=None)
    assert narrate_tile(cell, materials, reactions) == [
        "This tile is temperate, near neutral.",
        "No active reactions detected.",
    ]


def test_summary_always_starts_with_this_tile_is(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    assert narrator.summarize_tile(Cell()) == "This tile is freezing, near neutral."
    assert narrator.summarize_tile(Cell(temperature=70, ph=10)).startswith("This tile is ")


def test_heating_scenario_names_top_reactants(materials, reactions):
    history = [
        HistorySample(time=0, temperature=20.0),
        HistorySample(time=2500, temperature=22.5),
        HistorySample(time=5000, temperature=25.0),
    ]
    cell = Cell(
        temperature=25,
        ph=7.0,
        history=history,
        activity=[
            _mk_activity("neutralization", 0.2),
            _mk_activity("sodium_water", 0.9, {"NaOH": 1.0, "H2_g": 0.5}),
        ],
    )
    summary = _mk_narrator(materials, reactions).summarize_tile(cell)
    assert " (heating up)" in summary
    assert summary == (
        "This tile is temperate (heating up), near neutral. "
        "Because: temperature rising because sodium and water react exothermically."
    )


def test_no_heating_trend_means_no_heat_cause(materials, reactions):
    cell = Cell(temperature=25, ph=7.0, activity=[_mk_activity("sodium_water", 0.9, {"H2_g": 0.5})])
    summary = _mk_narrator(materials, reactions).summarize_tile(cell)
    assert "temperature rising because" not in summary
    assert "Because:" not in summary

    cooling = [HistorySample(time=0, temperature=30.0), HistorySample(time=1000, temperature=25.0)]
    cell.history = cooling
    summary = _mk_narrator(materials, reactions).summarize_tile(cell)
    assert "(cooling)" in summary
    assert "temperature rising because" not in summary


def test_trend_without_matching_cause_keeps_sentence_well_formed(materials, reactions):
    history = [HistorySample(time=0, temperature=20.0), HistorySample(time=1000, temperature=30.0)]
    cell = Cell(temperature=30, ph=7.0, history=history)
    assert _mk_narrator(materials, reactions).summarize_tile(cell) == "This tile is temperate (heating up), near neutral."


def test_full_summary_with_all_trends(materials, reactions):
    chlorine = Reaction(
        id="chlorine_hydrolysis",
        equation="Cl2 + H2O -> HCl + HOCl",
        reactants={"Cl2_g": 1, "H2O": 1},
    )
    history = [
        HistorySample(time=0, temperature=130.0, pressure=4.0, ph=3.0, gas_sum=0.5),
        HistorySample(time=1000, temperature=130.0, pressure=4.5, ph=2.2, gas_sum=1.0),
        HistorySample(time=2000, temperature=130.0, pressure=5.0, ph=1.5, gas_sum=1.5),
    ]
    cell = Cell(
        temperature=130,
        ph=1.5,
        pressure=5.0,
        gas_species={"H2_g": 1.5},
        aqueous_species={"HCl": 2.0, "NaCl": 0.5, "NaOH": 0.00005},
        history=history,
        activity=[
            _mk_activity("sodium_water", 0.9, {"NaOH": 1.0, "H2_g": 0.5}),
            _mk_activity("chlorine_hydrolysis", 0.3, {"HCl": 0.4}),
        ],
    )
    summary = _mk_narrator(materials, reactions, chlorine).summarize_tile(cell)
    assert summary == (
        "This tile is very hot, strongly acidic, gassy, pressurized; "
        "pressure building, becoming more acidic, gas building. "
        "Because: pressure building because hydrogen is accumulating; "
        "pH decreasing because hydrochloric acid (acidic) is forming; "
        "gas increasing because hydrogen (flammable) is being released. "
        "Notable species: hydrochloric acid, table salt."
    )


def test_summary_trace_gas_and_neutralizing(materials, reactions):
    history = [
        HistorySample(time=0, ph=4.0),
        HistorySample(time=1000, ph=7.0),
    ]
    cell = Cell(temperature=25, ph=7.0, gas_species={"CO2_g": 0.2}, history=history)
    summary = _mk_narrator(materials, reactions).summarize_tile(cell)
    assert summary == "This tile is temperate, near neutral, traces of gas; neutralizing."


# ----------------- Per-reaction sentences -----------------

def test_neutralization_sentence_scenario(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(temperature=25, ph=7.0, activity=[_mk_activity("neutralization", 0.8, {"H2O": 2.0})])
    lines = narrator.narrate_tile(cell)
    assert lines[1] == "The acid is neutralizing the base, forming water. Intensity 80%, rate-limited."


def test_metal_water_sentence_names_gas_and_limiter(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    activity = _mk_activity("sodium_water", 0.9, {"NaOH": 1.0, "H2_g": 0.5}, limiter="H2O")
    assert narrator.describe_reaction_entry(activity, Cell()) == (
        "The metal is reacting with water, heating the tile and releasing hydrogen (flammable). "
        "Intensity 90%, limited by water."
    )


def test_generic_gas_stays_generic_without_gas_product(materials, reactions):
    fizz = Reaction(id="fizz", reactants={"NaCl": 1}, tags=["gas_evolution"])
    narrator = _mk_narrator(materials, reactions, fizz)
    activity = _mk_activity("fizz", 0.5, {"NaCl": 1.0}, limiter="rate")
    assert narrator.describe_reaction_entry(activity, Cell()) == (
        "A reaction is proceeding, releasing gas. Intensity 50%, rate-limited."
    )


def test_precipitate_sentence(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    activity = _mk_activity("silver_chloride_precipitation", 0.45, {"AgCl(s)": 0.4, "NaNO3": 0.4})
    assert narrator.describe_reaction_entry(activity, Cell()) == (
        "A reaction is proceeding, forming a white precipitate (silver chloride). Intensity 45%, rate-limited."
    )


def test_sentence_without_products_and_clamped_intensity(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    activity = _mk_activity("neutralization", 1.4)
    assert narrator.describe_reaction_entry(activity, Cell()) == (
        "The acid is neutralizing the base. Intensity 100%, rate-limited."
    )


def test_cell_gas_dominates_product_clause(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(gas_species={"CO2_g": 0.3})
    activity = _mk_activity("neutralization", 0.8, {"H2O": 2.0})
    assert narrator.describe_reaction_entry(activity, cell) == (
        "The acid is neutralizing the base, releasing carbon dioxide. Intensity 80%, rate-limited."
    )


def test_unknown_reaction_has_no_sentence(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    assert narrator.describe_reaction_entry(_mk_activity("nope", 0.5), Cell()) is None


def test_describe_does_not_touch_activity(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    activity = _mk_activity("sodium_water", 0.9, {"H2_g": 0.5})
    before = activity.to_dict()
    narrator.narrate_tile(Cell(activity=[activity]))
    assert activity.to_dict() == before
    assert not hasattr(activity, "_tile")


# ----------------- narrate_tile -----------------

def test_narrate_keeps_top_three_by_extent(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(
        temperature=25,
        ph=7.0,
        activity=[
            _mk_activity("neutralization", 0.2),
            _mk_activity("sodium_water", 0.9),
            _mk_activity("limestone_acid", 0.5),
            _mk_activity("silver_chloride_precipitation", 0.7),
        ],
    )
    lines = narrator.narrate_tile(cell)
    assert len(lines) == 4
    assert lines[1].startswith("The metal is reacting with water")
    assert lines[2].startswith("A reaction is proceeding")
    assert lines[3].startswith("The acid is reacting with a reactant")
    assert NO_ACTIVITY_LINE not in lines


def test_narrate_equal_extents_keep_input_order(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(activity=[_mk_activity("limestone_acid", 0.5), _mk_activity("neutralization", 0.5)])
    acts = narrator.top_activities(cell)
    assert [a.reaction_id for a in acts] == ["limestone_acid", "neutralization"]


def test_narrate_is_deterministic(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(
        temperature=65,
        ph=9.0,
        gas_species={"H2_g": 0.4, "CO2_g": 0.4},
        aqueous_species={"NaOH": 1.0, "NaCl": 1.0},
        history=[HistorySample(time=0, temperature=60, pressure=1.0), HistorySample(time=1000, temperature=65, pressure=2.0)],
        activity=[
            _mk_activity("sodium_water", 0.6, {"NaOH": 1.0, "H2_g": 0.5}),
            _mk_activity("limestone_acid", 0.6, {"CO2_g": 0.5, "H2O": 0.5}),
        ],
    )
    first = narrator.narrate_tile(cell)
    second = narrator.narrate_tile(cell)
    third = narrate_tile(cell, materials, reactions)
    assert first == second == third


# ----------------- Production insights -----------------

def test_production_grouping_lists_both_sources(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(
        activity=[
            _mk_activity("neutralization", 0.5, {"NaCl": 1.0}),
            _mk_activity("silver_chloride_precipitation", 0.4, {"NaCl": 2.0}),
        ]
    )
    lines = narrator.build_production_insights(cell)
    assert lines == [
        "table salt is being produced by HCl + NaOH -> NaCl + H2O and silver chloride precipitation. "
        "Increase production by supplying more hydrochloric acid, sodium hydroxide. "
        "Reduce it by removing hydrochloric acid, sodium hydroxide."
    ]


def test_production_order_limiter_and_fallbacks(materials, reactions):
    mystery = Reaction(id="mystery")
    narrator = _mk_narrator(materials, reactions, mystery)
    cell = Cell(
        activity=[
            _mk_activity("mystery", 0.9, {"H2O": 1.0}),
            _mk_activity("sodium_water", 0.5, {"NaOH": 1.0, "H2O": 0.5, "H2_g": 0.0}, limiter="H2O"),
            _mk_activity("neutralization", 0.0, {"NaCl": 1.0}),
            _mk_activity("ghost", 0.9, {"NaCl": 1.0}),
        ]
    )
    records = narrator.production_insight_records(cell)
    assert [r.product_id for r in records] == ["H2O", "NaOH"]
    water, lye = records
    assert water.sources == ["mystery", "2Na + 2H2O -> 2NaOH + H2"]
    assert water.increase == "supplying more reactants"
    assert water.decrease == "reducing the available reactants"
    assert lye.sentence == (
        "sodium hydroxide is being produced by 2Na + 2H2O -> 2NaOH + H2. "
        "Increase production by adding more water. Reduce it by removing sodium, water."
    )


def test_same_reaction_twice_is_one_source(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(
        activity=[
            _mk_activity("neutralization", 0.5, {"NaCl": 1.0}),
            _mk_activity("neutralization", 0.3, {"NaCl": 2.0}),
        ]
    )
    (record,) = narrator.production_insight_records(cell)
    assert record.sources == ["HCl + NaOH -> NaCl + H2O"]


def test_production_lines_follow_reaction_lines(materials, reactions):
    narrator = _mk_narrator(materials, reactions)
    cell = Cell(temperature=25, ph=7.0, activity=[_mk_activity("neutralization", 0.8, {"H2O": 2.0})])
    lines = narrator.narrate_tile(cell)
    assert lines == [
        "This tile is temperate, near neutral.",
        "The acid is neutralizing the base, forming water. Intensity 80%, rate-limited.",
        "water is being produced by HCl + NaOH -> NaCl + H2O. "
        "Increase production by supplying more hydrochloric acid, sodium hydroxide. "
        "Reduce it by removing hydrochloric acid, sodium hydroxide.",
    ]
