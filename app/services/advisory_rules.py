"""
Advisory rule table.

Each AdvisoryRule pairs a predicate over a WeatherObservation with an optional
planting message and an optional pesticide message. The built-in table below
uses RuleCondition predicates so every rule states its thresholds and their
inclusivity as data:

    temp_min / temp_max             inclusive °C bounds
    temp_above / temp_below         exclusive °C bounds
    humidity_min / humidity_max     inclusive % bounds
    humidity_above / humidity_below exclusive % bounds
    conditions                      any substring present in the description
    exclude_conditions              no substring present in the description

A deployment can replace the table with a JSON file (settings.ADVISORY_RULES_PATH)
holding a list of {"name", "priority", "planting", "pesticide", "when": {...}}
objects, where "when" takes the RuleCondition fields above.
"""
import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from app.schemas.weather import WeatherObservation

logger = logging.getLogger(__name__)


class RuleConfigError(Exception):
    """Raised when a rule file cannot be read or fails validation."""


@dataclass(frozen=True)
class RuleCondition:
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    temp_above: Optional[float] = None
    temp_below: Optional[float] = None
    humidity_min: Optional[float] = None
    humidity_max: Optional[float] = None
    humidity_above: Optional[float] = None
    humidity_below: Optional[float] = None
    conditions: tuple[str, ...] = ()
    exclude_conditions: tuple[str, ...] = ()

    def __post_init__(self):
        # Substring matching is case-insensitive; store the needles lower-cased
        object.__setattr__(self, "conditions", tuple(c.lower() for c in self.conditions))
        object.__setattr__(self, "exclude_conditions", tuple(c.lower() for c in self.exclude_conditions))

    def __call__(self, obs: WeatherObservation) -> bool:
        t = obs.temperature_celsius
        h = obs.humidity_percent
        text = obs.condition_description.lower()

        if self.temp_min is not None and t < self.temp_min:
            return False
        if self.temp_max is not None and t > self.temp_max:
            return False
        if self.temp_above is not None and t <= self.temp_above:
            return False
        if self.temp_below is not None and t >= self.temp_below:
            return False
        if self.humidity_min is not None and h < self.humidity_min:
            return False
        if self.humidity_max is not None and h > self.humidity_max:
            return False
        if self.humidity_above is not None and h <= self.humidity_above:
            return False
        if self.humidity_below is not None and h >= self.humidity_below:
            return False
        if self.conditions and not any(c in text for c in self.conditions):
            return False
        if any(c in text for c in self.exclude_conditions):
            return False
        return True

    def describe(self) -> str:
        parts = []
        parts += _range("temp", self.temp_min, self.temp_max, self.temp_above, self.temp_below)
        parts += _range("humidity", self.humidity_min, self.humidity_max, self.humidity_above, self.humidity_below)
        if self.conditions:
            parts.append("condition contains " + _any_of(self.conditions))
        if self.exclude_conditions:
            parts.append("condition lacks " + _any_of(self.exclude_conditions))
        return " and ".join(parts) if parts else "always"


def _range(label, lo, hi, above, below) -> list[str]:
    lower = [(op, v) for op, v in (("<=", lo), ("<", above)) if v is not None]
    upper = [(op, v) for op, v in (("<=", hi), ("<", below)) if v is not None]

    parts = []
    if lower and upper:
        (lop, lv), (uop, uv) = lower.pop(0), upper.pop(0)
        parts.append(f"{lv:g} {lop} {label} {uop} {uv:g}")
    for op, v in lower:
        parts.append(f"{label} {'>=' if op == '<=' else '>'} {v:g}")
    for op, v in upper:
        parts.append(f"{label} {op} {v:g}")
    return parts


def _any_of(needles: tuple[str, ...]) -> str:
    if len(needles) == 1:
        return repr(needles[0])
    return "any of (" + ", ".join(repr(n) for n in needles) + ")"


@dataclass(frozen=True)
class AdvisoryRule:
    name: str
    predicate: Callable[[WeatherObservation], bool]
    planting: Optional[str] = None
    pesticide: Optional[str] = None
    priority: int = 100   # lower runs first

    def __post_init__(self):
        if self.planting is None and self.pesticide is None:
            raise ValueError(f"advisory rule {self.name!r} has no planting or pesticide message")

    def describe(self) -> str:
        describe = getattr(self.predicate, "describe", None)
        if callable(describe):
            return describe()
        return getattr(self.predicate, "__name__", "custom predicate")


# ── Built-in rule table ───────────────────────────────────────────────────────

_RULES: list[AdvisoryRule] = [
    # ── Hazards first — these override everything else ───────────────────────
    AdvisoryRule(
        "storm_or_heavy_rain",
        RuleCondition(conditions=("heavy", "thunderstorm", "storm", "extreme rain")),
        planting="Postpone sowing and transplanting — waterlogged soil washes out seed and rots young roots.",
        pesticide="Do not spray. Heavy rain washes pesticide off the crop and into waterways.",
        priority=10,
    ),
    AdvisoryRule(
        "frost_risk",
        RuleCondition(temp_below=5),
        planting="Too cold for sowing. Protect seedlings with mulch or row cover and wait for warmer days.",
        priority=10,
    ),
    AdvisoryRule(
        "extreme_heat",
        RuleCondition(temp_above=35),
        planting="Avoid planting in extreme heat. Irrigate early morning or late evening to reduce stress.",
        pesticide="Spray only in the cool of early morning or late evening to avoid evaporation and leaf scorch.",
        priority=20,
    ),

    # ── Wet weather ───────────────────────────────────────────────────────────
    AdvisoryRule(
        "light_rain",
        RuleCondition(conditions=("light rain", "drizzle", "shower", "moderate rain")),
        planting="Good soil moisture for sowing beans, maize and leafy vegetables.",
        pesticide="Delay spraying until foliage is dry — rain will dilute and wash off the product.",
        priority=30,
    ),
    AdvisoryRule(
        "humid_fungal_risk",
        RuleCondition(temp_min=20, humidity_min=80),
        pesticide="Warm, humid air favours fungal disease. Apply a preventive fungicide and scout for blight and mildew.",
        priority=40,
    ),
    AdvisoryRule(
        "fog_or_mist",
        RuleCondition(conditions=("mist", "fog", "haze")),
        pesticide="Avoid spraying in fog or mist — droplets drift and leaves stay wet for hours.",
        priority=40,
    ),

    # ── Fair weather ──────────────────────────────────────────────────────────
    AdvisoryRule(
        "clear_and_warm",
        RuleCondition(temp_min=20, temp_max=30, conditions=("clear",)),
        planting="Ideal for sowing maize, beans and tomatoes.",
        pesticide="Calm, clear weather suits pesticide application — spray in the morning after dew dries.",
        priority=50,
    ),
    AdvisoryRule(
        "mild_and_cloudy",
        RuleCondition(temp_min=15, temp_max=30, conditions=("cloud", "overcast")),
        planting="Overcast, mild weather reduces transplant shock — a good day to transplant seedlings.",
        priority=60,
    ),
    AdvisoryRule(
        "cool",
        RuleCondition(temp_min=5, temp_below=15),
        planting="Cool weather suits leafy greens, peas, onions and root crops.",
        priority=70,
    ),
    AdvisoryRule(
        "dry_air",
        RuleCondition(humidity_below=30),
        planting="Low humidity — water seedlings thoroughly after planting and mulch to hold moisture.",
        pesticide="Watch for spider mites and aphids, which thrive in dry air.",
        priority=80,
    ),
]


def default_rules() -> list[AdvisoryRule]:
    return list(_RULES)


# ── JSON rule files ───────────────────────────────────────────────────────────


class _ConditionDef(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    temp_above: Optional[float] = None
    temp_below: Optional[float] = None
    humidity_min: Optional[float] = None
    humidity_max: Optional[float] = None
    humidity_above: Optional[float] = None
    humidity_below: Optional[float] = None
    conditions: list[str] = []
    exclude_conditions: list[str] = []


class _RuleDef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    priority: int = 100
    planting: Optional[str] = None
    pesticide: Optional[str] = None
    when: _ConditionDef = _ConditionDef()

    @model_validator(mode="after")
    def _has_message(self):
        if self.planting is None and self.pesticide is None:
            raise ValueError("rule needs a planting or pesticide message")
        return self


def _to_rule(d: _RuleDef) -> AdvisoryRule:
    kwargs = {f.name: getattr(d.when, f.name) for f in fields(RuleCondition)}
    kwargs["conditions"] = tuple(d.when.conditions)
    kwargs["exclude_conditions"] = tuple(d.when.exclude_conditions)
    return AdvisoryRule(
        name=d.name,
        predicate=RuleCondition(**kwargs),
        planting=d.planting,
        pesticide=d.pesticide,
        priority=d.priority,
    )


def load_rules(path: str | Path) -> list[AdvisoryRule]:
    """
    Read a JSON rule file and return its rules in file order.

    Raises RuleConfigError if the file is missing, is not valid JSON, or any
    entry fails validation.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuleConfigError(f"cannot read rule file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RuleConfigError(f"rule file {path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, list):
        raise RuleConfigError(f"rule file {path} must contain a JSON array")

    rules = []
    for i, entry in enumerate(raw):
        try:
            rules.append(_to_rule(_RuleDef.model_validate(entry)))
        except ValidationError as exc:
            raise RuleConfigError(f"rule #{i} in {path} is invalid: {exc}") from exc

    logger.info("loaded %d advisory rules from %s", len(rules), path)
    return rules
