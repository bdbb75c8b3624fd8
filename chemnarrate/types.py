from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _float_or_none(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _quantities(data: Any) -> Dict[str, float]:
    out: Dict[str, float] = {}
    if not isinstance(data, dict):
        return out
    for key, value in data.items():
        q = _float_or_none(value)
        out[str(key)] = 0.0 if q is None else q
    return out


# --- HistorySample -----------------------------------------------------------


@dataclass
class HistorySample:
    """One point of a cell's short-term history.

    `time` is in milliseconds. `ph` and `gas_sum` are optional because older
    recorders only sampled temperature and pressure.
    """

    time: float
    temperature: Optional[float] = None
    pressure: Optional[float] = None
    ph: Optional[float] = None
    gas_sum: Optional[float] = None

    def value(self, name: str) -> Optional[float]:
        return getattr(self, name, None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": float(self.time),
            "temperature": self.temperature,
            "pressure": self.pressure,
            "ph": self.ph,
            "gas_sum": self.gas_sum,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistorySample":
        return cls(
            time=float(data.get("time", 0.0) or 0.0),
            temperature=_float_or_none(data.get("temperature")),
            pressure=_float_or_none(data.get("pressure")),
            ph=_float_or_none(data.get("ph")),
            gas_sum=_float_or_none(data.get("gas_sum")),
        )


# --- Reaction activity -------------------------------------------------------


@dataclass
class ProductEntry:
    species_id: str
    quantity: Optional[float] = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"species_id": self.species_id, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductEntry":
        return cls(
            species_id=str(data.get("species_id", "")),
            quantity=_float_or_none(data.get("quantity")),
        )


@dataclass(frozen=True)
class ReactionActivity:
    """Snapshot of one reaction progressing in a cell during a single step.

    Created fresh by the simulation every step; narration only reads it.
    """

    reaction_id: str
    extent: Optional[float] = 0.0
    limiter: Optional[str] = None  # "rate" or the bottlenecking species id
    fizz: bool = False
    heat: bool = False
    products: List[ProductEntry] = field(default_factory=list)

    @property
    def intensity(self) -> float:
        """Extent clamped to [0, 1]."""
        e = float(self.extent or 0.0)
        return 0.0 if e <= 0.0 else (1.0 if e >= 1.0 else e)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reaction_id": self.reaction_id,
            "extent": self.extent,
            "limiter": self.limiter,
            "fizz": bool(self.fizz),
            "heat": bool(self.heat),
            "products": [p.to_dict() for p in self.products],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReactionActivity":
        products = [
            ProductEntry.from_dict(p)
            for p in (data.get("products") or [])
            if isinstance(p, dict)
        ]
        limiter = data.get("limiter")
        return cls(
            reaction_id=str(data.get("reaction_id", "")),
            extent=_float_or_none(data.get("extent")),
            limiter=None if limiter is None else str(limiter),
            fizz=bool(data.get("fizz", False)),
            heat=bool(data.get("heat", False)),
            products=products,
        )


# --- Static catalogue --------------------------------------------------------


@dataclass(frozen=True)
class ReactionEffects:
    heat_per_unit: float = 0.0
    emit_gas: bool = False
    pressure_pulse: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReactionEffects":
        return cls(
            heat_per_unit=float(data.get("heat_per_unit", 0.0) or 0.0),
            emit_gas=bool(data.get("emit_gas", False)),
            pressure_pulse=float(data.get("pressure_pulse", 0.0) or 0.0),
        )


@dataclass(frozen=True)
class Reaction:
    """Static reaction definition from the catalogue."""

    id: str
    equation: Optional[str] = None
    reactants: Dict[str, float] = field(default_factory=dict)  # species id -> coefficient
    phases: Dict[str, str] = field(default_factory=dict)  # per-species phase overrides
    effects: ReactionEffects = field(default_factory=ReactionEffects)
    tags: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        """Equation string, or the id with underscores as spaces."""
        if self.equation:
            return self.equation
        return (self.id or "reaction").replace("_", " ")

    def has_tag(self, key: str) -> bool:
        return any(key in str(t) for t in self.tags)

    def exothermic_tag(self) -> Optional[str]:
        for t in self.tags:
            if str(t).startswith("exothermic"):
                return str(t)
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reaction":
        effects = data.get("effects")
        return cls(
            id=str(data.get("id", "")),
            equation=data.get("equation") or None,
            reactants={str(k): float(v or 0.0) for k, v in (data.get("reactants") or {}).items()},
            phases={str(k): str(v) for k, v in (data.get("phases") or {}).items()},
            effects=ReactionEffects.from_dict(effects) if isinstance(effects, dict) else ReactionEffects(),
            tags=[str(t) for t in (data.get("tags") or [])],
        )


@dataclass(frozen=True)
class Material:
    """Descriptive metadata for a species, as held by the material registry."""

    id: str
    display_name: Optional[str] = None
    phase_stp: Optional[str] = None  # "g" | "s" | "l" | "aq" ...
    corrosivity: Optional[str] = None  # "acid" | "base" | "oxidizer" | ...
    hazard_tags: List[str] = field(default_factory=list)
    flammability: Optional[str] = None
    toxicity: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Material":
        return cls(
            id=str(data.get("id", "")),
            display_name=data.get("display_name") or None,
            phase_stp=data.get("phase_stp") or None,
            corrosivity=data.get("corrosivity") or None,
            hazard_tags=[str(t) for t in (data.get("hazard_tags") or [])],
            flammability=data.get("flammability") or None,
            toxicity=data.get("toxicity") or None,
            color=data.get("color") or None,
        )


# --- Cell --------------------------------------------------------------------


@dataclass
class Cell:
    """A single grid cell as seen by the narration layer.

    Treated as read-only by narration. The history list is owned by the
    history recorder; narration only reads it.
    """

    temperature: Optional[float] = None
    ph: Optional[float] = None
    moisture: Optional[float] = None
    pressure: Optional[float] = None
    aqueous_species: Dict[str, float] = field(default_factory=dict)
    gas_species: Dict[str, float] = field(default_factory=dict)
    solid_species: Dict[str, float] = field(default_factory=dict)
    history: List[HistorySample] = field(default_factory=list)
    activity: List[Optional[ReactionActivity]] = field(default_factory=list)
    cell_id: Optional[str] = None

    def gas_total(self) -> float:
        return sum(float(v or 0.0) for v in (self.gas_species or {}).values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cell_id": self.cell_id,
            "temperature": self.temperature,
            "ph": self.ph,
            "moisture": self.moisture,
            "pressure": self.pressure,
            "aqueous_species": dict(self.aqueous_species or {}),
            "gas_species": dict(self.gas_species or {}),
            "solid_species": dict(self.solid_species or {}),
            "history": [h.to_dict() for h in (self.history or [])],
            "activity": [a.to_dict() for a in (self.activity or []) if a is not None],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cell":
        """Best-effort constructor from a telemetry dict."""
        history = [
            HistorySample.from_dict(h)
            for h in (data.get("history") or [])
            if isinstance(h, dict)
        ]
        activity: List[Optional[ReactionActivity]] = [
            ReactionActivity.from_dict(a)
            for a in (data.get("activity") or [])
            if isinstance(a, dict)
        ]
        cell_id = data.get("cell_id")
        return cls(
            temperature=_float_or_none(data.get("temperature")),
            ph=_float_or_none(data.get("ph")),
            moisture=_float_or_none(data.get("moisture")),
            pressure=_float_or_none(data.get("pressure")),
            aqueous_species=_quantities(data.get("aqueous_species")),
            gas_species=_quantities(data.get("gas_species")),
            solid_species=_quantities(data.get("solid_species")),
            history=history,
            activity=activity,
            cell_id=None if cell_id is None else str(cell_id),
        )


# --- Narration outputs -------------------------------------------------------


@dataclass
class ProductionInsight:
    """How one product species is being made, and how to steer it."""

    product_id: str
    product_name: str
    sources: List[str]
    increase: str
    decrease: str

    @property
    def sentence(self) -> str:
        return (
            f"{self.product_name} is being produced by {' and '.join(self.sources)}. "
            f"Increase production by {self.increase}. Reduce it by {self.decrease}."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "sources": list(self.sources),
            "increase": self.increase,
            "decrease": self.decrease,
            "sentence": self.sentence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductionInsight":
        return cls(
            product_id=str(data.get("product_id", "")),
            product_name=str(data.get("product_name", "")),
            sources=[str(s) for s in (data.get("sources") or [])],
            increase=str(data.get("increase", "")),
            decrease=str(data.get("decrease", "")),
        )


@dataclass
class NarrationLogEntry:
    """One JSONL row describing the narration produced for a cell."""

    cell_id: Optional[str]
    time: Optional[float]
    lines: List[str] = field(default_factory=list)
    insights: List[ProductionInsight] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cell_id": self.cell_id,
            "time": self.time,
            "lines": list(self.lines),
            "insights": [i.to_dict() for i in self.insights],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NarrationLogEntry":
        cell_id = data.get("cell_id")
        return cls(
            cell_id=None if cell_id is None else str(cell_id),
            time=_float_or_none(data.get("time")),
            lines=[str(line) for line in (data.get("lines") or [])],
            insights=[
                ProductionInsight.from_dict(i)
                for i in (data.get("insights") or [])
                if isinstance(i, dict)
            ],
        )
