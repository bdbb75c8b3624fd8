from __future__ import annotations

import pytest

from chemnarrate.registry import MaterialRegistry
from chemnarrate.types import Material, Reaction, ReactionEffects


def _mk_materials() -> MaterialRegistry:
    return MaterialRegistry(
        [
            Material(id="HCl", display_name="hydrochloric acid", phase_stp="aq", corrosivity="acid"),
            Material(id="NaOH", display_name="sodium hydroxide", phase_stp="aq", corrosivity="base"),
            Material(id="NH3", display_name="ammonia", phase_stp="aq", corrosivity="base"),
            Material(id="H2O", display_name="water", phase_stp="l"),
            Material(id="NaCl", display_name="table salt", phase_stp="aq"),
            Material(id="Na", display_name="sodium", phase_stp="s", hazard_tags=["water_reactive"]),
            Material(id="H2_g", display_name="hydrogen", phase_stp="g", flammability="high"),
            Material(id="CO2_g", display_name="carbon dioxide", phase_stp="g"),
            Material(id="Cl2_g", display_name="chlorine", phase_stp="g", toxicity="high"),
            Material(id="O2_g", display_name="oxygen", phase_stp="g", corrosivity="oxidizer"),
            Material(id="AgNO3", display_name="silver nitrate", phase_stp="aq"),
            Material(id="AgCl(s)", display_name="silver chloride", phase_stp="s", color="white"),
            Material(id="CaCO3", display_name="limestone", phase_stp="s"),
        ]
    )


def _mk_reactions() -> list[Reaction]:
    return [
        Reaction(
            id="neutralization",
            equation="HCl + NaOH -> NaCl + H2O",
            reactants={"HCl": 1, "NaOH": 1},
        ),
        Reaction(
            id="sodium_water",
            equation="2Na + 2H2O -> 2NaOH + H2",
            reactants={"Na": 2, "H2O": 2},
            effects=ReactionEffects(heat_per_unit=5.0),
            tags=["exothermic_high", "gas_evolution"],
        ),
        Reaction(
            id="limestone_acid",
            equation="CaCO3 + 2HCl -> CaCl2 + H2O + CO2",
            reactants={"CaCO3": 1, "HCl": 2},
            effects=ReactionEffects(emit_gas=True, pressure_pulse=0.5),
        ),
        Reaction(
            id="silver_chloride_precipitation",
            reactants={"AgNO3": 1, "NaCl": 1},
        ),
    ]


@pytest.fixture
def materials() -> MaterialRegistry:
    return _mk_materials()


@pytest.fixture
def reactions() -> list[Reaction]:
    return _mk_reactions()


@pytest.fixture
def reaction_index(reactions) -> dict[str, Reaction]:
    return {r.id: r for r in reactions}
