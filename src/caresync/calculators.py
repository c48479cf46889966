"""
Health calculators.

High-level flow
---------------
1) The caller gathers raw form values (strings or numbers) plus unit labels.
2) `calculate()` parses them leniently (invalid -> 0.0), converts lengths to
   centimeters and masses to kilograms.
3) The formula for the CalculatorKind runs on canonical units.
4) The result is paired with an advice category and message.

Formulas never raise for the inputs they accept: zero heights and
waist <= neck are clamped to a small epsilon, so the result may be
meaningless but is always a number.
"""

import logging
import math
import typing
from dataclasses import dataclass, field
from enum import Enum

from . import config
from .advice import (
    BMR_ADVICE,
    WATER_ADVICE,
    Category,
    Gender,
    bmi_advice,
    body_fat_advice,
    classify_bmi,
    classify_body_fat,
)
from .measurement import Measurement, is_blank, parse_int


class CalculatorKind(Enum):
    BMI = "BMI"
    BMR = "BMR"
    WATER = "WATER"
    BODY_FAT = "BODY_FAT"

    @classmethod
    def from_label(cls, label) -> "CalculatorKind":
        """
        Convert a label into the enum.
        Accepts names and titles: 'bmi', 'Body Fat %', 'water intake', 'body-fat'.
        """
        if isinstance(label, CalculatorKind):
            return label
        key = (
            str(label).strip().lower()
            .replace("%", "").replace("-", " ").replace("_", " ").strip()
        )
        key = "_".join(key.split())
        mapping = {
            "bmi": cls.BMI,
            "body_mass_index": cls.BMI,
            "bmr": cls.BMR,
            "basal_metabolic_rate": cls.BMR,
            "water": cls.WATER,
            "water_intake": cls.WATER,
            "daily_water_intake": cls.WATER,
            "body_fat": cls.BODY_FAT,
            "bodyfat": cls.BODY_FAT,
            "body_fat_percentage": cls.BODY_FAT,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown calculator label: {label!r}")

    @property
    def title(self) -> str:
        return _KIND_TITLES[self][0]

    @property
    def full_name(self) -> str:
        return _KIND_TITLES[self][1]

    @property
    def description(self) -> str:
        return _KIND_TITLES[self][2]

    @property
    def unit(self) -> str:
        return _KIND_UNITS[self]


_KIND_TITLES = {
    CalculatorKind.BMI: (
        "BMI",
        "Body Mass Index",
        "BMI estimates your body fat using your height and weight. It is a quick "
        "screening tool to understand whether your weight is in a healthy range for your height.",
    ),
    CalculatorKind.BMR: (
        "BMR",
        "Basal Metabolic Rate",
        "BMR is the number of calories your body needs at rest to keep vital functions "
        "running. It helps you plan daily calorie targets for weight loss, gain, or maintenance.",
    ),
    CalculatorKind.WATER: (
        "Water Intake",
        "Daily Water Intake",
        "Your recommended daily water intake is estimated from your body weight. "
        "Increase fluids during hot weather, illness, or workouts.",
    ),
    CalculatorKind.BODY_FAT: (
        "Body Fat %",
        "Body Fat Percentage",
        "This uses the U.S. Navy method with body measurements to estimate your body "
        "fat percentage, a better indicator of composition than weight alone.",
    ),
}

_KIND_UNITS = {
    CalculatorKind.BMI: "kg/m²",
    CalculatorKind.BMR: "kcal/day",
    CalculatorKind.WATER: "L/day",
    CalculatorKind.BODY_FAT: "%",
}


class BmrFormula(Enum):
    MIFFLIN_ST_JEOR = "mifflin-st-jeor"
    HARRIS_BENEDICT = "harris-benedict"

    @classmethod
    def from_label(cls, label) -> "BmrFormula":
        if isinstance(label, BmrFormula):
            return label
        key = str(label).strip().lower().replace("_", "-").replace(" ", "-")
        mapping = {
            "mifflin-st-jeor": cls.MIFFLIN_ST_JEOR,
            "mifflin": cls.MIFFLIN_ST_JEOR,
            "harris-benedict": cls.HARRIS_BENEDICT,
            "harris": cls.HARRIS_BENEDICT,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown BMR formula label: {label!r}")


# --------
# Formulas
# --------


def compute_bmi(height_cm: float, weight_kg: float) -> float:
    height_m = max(height_cm / 100.0, config.EPSILON)
    return weight_kg / (height_m * height_m)


def compute_bmr(
    height_cm: float,
    weight_kg: float,
    age_years: int,
    gender,
    formula: BmrFormula | str | None = None,
) -> float:
    """
    Basal metabolic rate in kcal/day.

    Mifflin-St Jeor is the default. Harris-Benedict (revised) is kept for
    callers that need the older figures. `formula=None` uses the configured
    default (CARESYNC_BMR_FORMULA).
    """
    chosen = BmrFormula.from_label(formula if formula is not None else config.BMR_FORMULA)
    male = Gender.from_label(gender) is Gender.MALE

    if chosen is BmrFormula.HARRIS_BENEDICT:
        if male:
            return 66.47 + 13.75 * weight_kg + 5.003 * height_cm - 6.755 * age_years
        return 655.1 + 9.563 * weight_kg + 1.850 * height_cm - 4.676 * age_years

    base = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    return base + 5 if male else base - 161


def compute_water_liters(weight_kg: float) -> float:
    return weight_kg * config.WATER_LITERS_PER_KG


def compute_body_fat_percent(
    height_cm: float,
    neck_cm: float,
    waist_cm: float,
    hip_cm: float | None,
    gender,
) -> float:
    """
    U.S. Navy method. `hip_cm` is only used for women (None counts as 0).
    log10 arguments are clamped to EPSILON so waist <= neck never raises.
    """
    height = max(height_cm, config.EPSILON)
    if Gender.from_label(gender) is Gender.MALE:
        girth = max(waist_cm - neck_cm, config.EPSILON)
        return 495.0 / (1.0324 - 0.19077 * math.log10(girth) + 0.15456 * math.log10(height)) - 450.0

    hip = hip_cm if hip_cm is not None else 0.0
    girth = max(waist_cm + hip - neck_cm, config.EPSILON)
    return 495.0 / (1.29579 - 0.35004 * math.log10(girth) + 0.22100 * math.log10(height)) - 450.0


# -------------
# Orchestration
# -------------

# (value field, unit field, default unit)
_LENGTH_FIELDS = {
    "height": ("height", "height_unit", "cm"),
    "neck": ("neck", "neck_unit", "cm"),
    "waist": ("waist", "waist_unit", "cm"),
    "hip": ("hip", "hip_unit", "cm"),
}
_WEIGHT_FIELD = ("weight", "weight_unit", "kg")


def required_fields(kind, gender="Male") -> list[str]:
    """Input fields that must be filled in before a calculation is allowed."""
    kind = CalculatorKind.from_label(kind)
    if kind is CalculatorKind.BMI:
        return ["height", "weight"]
    if kind is CalculatorKind.BMR:
        return ["height", "weight", "age"]
    if kind is CalculatorKind.WATER:
        return ["weight"]
    fields = ["height", "neck", "waist"]
    if Gender.from_label(gender) is Gender.FEMALE:
        fields.append("hip")
    return fields


def missing_fields(kind, gender, inputs: typing.Mapping[str, typing.Any]) -> list[str]:
    return [name for name in required_fields(kind, gender) if is_blank(inputs.get(name))]


def can_calculate(kind, gender, inputs: typing.Mapping[str, typing.Any]) -> bool:
    return not missing_fields(kind, gender, inputs)


@dataclass(frozen=True)
class CalculatorResult:
    """
    Output of a single calculation.

    Attributes:
        kind: Which calculator produced the value.
        value: The computed index in `unit`.
        unit: Output unit ('kg/m²', 'kcal/day', 'L/day', '%').
        category: Advice category for the value.
        advice: Human-readable advice message.
        inputs: Canonical inputs the value was computed from.
    """

    kind: CalculatorKind
    value: float
    unit: str
    category: Category
    advice: str
    inputs: dict = field(default_factory=dict)

    def to_document(self) -> dict:
        """Flat record in the shape the document store keeps per user and calculator."""
        return {
            "type": self.kind.name,
            "result": self.value,
            "unit": self.unit,
            "version": 1,
            "category": self.category.value,
            "advice": self.advice,
            "inputs": dict(self.inputs),
        }


def _length_cm(inputs: typing.Mapping[str, typing.Any], name: str) -> float:
    value_field, unit_field, default_unit = _LENGTH_FIELDS[name]
    unit = inputs.get(unit_field)
    if is_blank(unit):
        unit = default_unit
    return Measurement.from_raw(inputs.get(value_field), unit).in_centimeters()


def _weight_kg(inputs: typing.Mapping[str, typing.Any]) -> float:
    value_field, unit_field, default_unit = _WEIGHT_FIELD
    unit = inputs.get(unit_field)
    if is_blank(unit):
        unit = default_unit
    return Measurement.from_raw(inputs.get(value_field), unit).in_kilograms()


def calculate(
    kind,
    inputs: typing.Mapping[str, typing.Any],
    gender="Male",
    formula: BmrFormula | str | None = None,
) -> CalculatorResult:
    """
    Run one calculator on raw form inputs.

    `inputs` keys: height, height_unit, weight, weight_unit, age, neck,
    neck_unit, waist, waist_unit, hip, hip_unit. Missing units default to
    cm / kg. `gender` is only read by BMR and BODY_FAT. Presence of required
    fields is the caller's job (see `can_calculate`); blank values here
    simply count as zero.
    """
    kind = CalculatorKind.from_label(kind)

    if kind is CalculatorKind.BMI:
        height_cm = _length_cm(inputs, "height")
        weight_kg = _weight_kg(inputs)
        value = compute_bmi(height_cm, weight_kg)
        category = classify_bmi(value)
        advice = bmi_advice(value)
        used = {"height_cm": height_cm, "weight_kg": weight_kg}

    elif kind is CalculatorKind.BMR:
        gender = Gender.from_label(gender)
        height_cm = _length_cm(inputs, "height")
        weight_kg = _weight_kg(inputs)
        age_years = parse_int(inputs.get("age"))
        value = compute_bmr(height_cm, weight_kg, age_years, gender, formula)
        category = Category.BASELINE
        advice = BMR_ADVICE
        used = {
            "height_cm": height_cm,
            "weight_kg": weight_kg,
            "age_years": age_years,
            "gender": gender.value,
        }

    elif kind is CalculatorKind.WATER:
        weight_kg = _weight_kg(inputs)
        value = compute_water_liters(weight_kg)
        category = Category.REMINDER
        advice = WATER_ADVICE
        used = {"weight_kg": weight_kg}

    else:
        gender = Gender.from_label(gender)
        height_cm = _length_cm(inputs, "height")
        neck_cm = _length_cm(inputs, "neck")
        waist_cm = _length_cm(inputs, "waist")
        hip_cm = _length_cm(inputs, "hip") if gender is Gender.FEMALE else None
        value = compute_body_fat_percent(height_cm, neck_cm, waist_cm, hip_cm, gender)
        category = classify_body_fat(value, gender)
        advice = body_fat_advice(value, gender)
        used = {
            "gender": gender.value,
            "height_cm": height_cm,
            "neck_cm": neck_cm,
            "waist_cm": waist_cm,
            "hip_cm": hip_cm,
        }

    logging.debug(f"{kind.name} computed {value:.4f} {kind.unit} from {used}")
    return CalculatorResult(
        kind=kind,
        value=value,
        unit=kind.unit,
        category=category,
        advice=advice,
        inputs=used,
    )


def format_result(result: CalculatorResult) -> str:
    """Display line: BMR has no decimals, everything else one decimal."""
    if result.kind is CalculatorKind.BMR:
        return f"Result: {result.value:.0f} {result.unit}"
    if result.kind is CalculatorKind.BODY_FAT:
        return f"Body Fat: {result.value:.1f} {result.unit}"
    return f"Result: {result.value:.1f} {result.unit}"
