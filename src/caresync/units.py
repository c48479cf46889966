"""
Unit conversion.

Normalizes user-entered lengths to centimeters and masses to kilograms before
any formula runs. Unknown unit labels pass the value through unchanged, so a
caller can never trip an exception here.

Length units:
    cm, m, in  : plain metric / imperial factors
    ft         : decimal feet (5.5 ft == 5 ft 6 in)
    ftin       : encoded "feet.inches" (5.10 == 5 ft 10 in)
Mass units:
    kg, g, lb
"""

import logging
import math
from enum import Enum

from . import config


class LengthUnit(Enum):
    """Length units accepted by the calculators."""
    CM = "cm"
    M = "m"
    FT = "ft"
    FT_IN = "ftin"
    IN = "in"

    @classmethod
    def from_label(cls, label: str) -> "LengthUnit":
        """
        Convert a label ("cm", " Feet ", "ft.in") into the enum.
        Matching is case-insensitive and ignores surrounding spaces.
        """
        key = _unit_key(label)
        mapping = {
            "cm": cls.CM,
            "centimeter": cls.CM,
            "centimeters": cls.CM,
            "m": cls.M,
            "meter": cls.M,
            "meters": cls.M,
            "ft": cls.FT,
            "feet": cls.FT,
            "foot": cls.FT,
            "ftin": cls.FT_IN,
            "ft.in": cls.FT_IN,
            "feet.inches": cls.FT_IN,
            "in": cls.IN,
            "inch": cls.IN,
            "inches": cls.IN,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown length unit label: {label!r}")


class MassUnit(Enum):
    """Mass units accepted by the calculators."""
    KG = "kg"
    G = "g"
    LB = "lb"

    @classmethod
    def from_label(cls, label: str) -> "MassUnit":
        key = _unit_key(label)
        mapping = {
            "kg": cls.KG,
            "kilogram": cls.KG,
            "kilograms": cls.KG,
            "g": cls.G,
            "gram": cls.G,
            "grams": cls.G,
            "lb": cls.LB,
            "lbs": cls.LB,
            "pound": cls.LB,
            "pounds": cls.LB,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown mass unit label: {label!r}")


def _unit_key(label) -> str:
    if isinstance(label, Enum):
        label = label.value
    return str(label).strip().lower()


def is_length_unit(label) -> bool:
    try:
        LengthUnit.from_label(label)
    except ValueError:
        return False
    return True


def is_mass_unit(label) -> bool:
    try:
        MassUnit.from_label(label)
    except ValueError:
        return False
    return True


def feet_inches_to_centimeters(feet: float, inches: float = 0.0) -> float:
    """Two-field height input: whole feet plus inches."""
    return feet * config.CM_PER_FOOT + inches * config.CM_PER_INCH


def decode_feet_inches(value: float) -> tuple[int, float]:
    """
    Split an encoded "feet.inches" number into (feet, inches).

    The integer part is feet; the fractional part times 100 is inches,
    clamped to 0..11.99. The fraction is rounded to two places first so that
    5.10 reads as 10 inches rather than 9.999...
    """
    feet = math.trunc(value)
    inches = round((value - feet) * 100, 2)
    inches = min(max(inches, 0.0), config.MAX_ENCODED_INCHES)
    return feet, inches


def to_centimeters(value: float, unit) -> float:
    """
    Convert a length to centimeters.
    Unrecognized units return `value` unchanged.
    """
    try:
        length_unit = LengthUnit.from_label(unit)
    except ValueError:
        logging.debug(f"Unknown length unit {unit!r}; passing {value} through")
        return value

    if length_unit is LengthUnit.CM:
        return value
    if length_unit is LengthUnit.M:
        return value * config.CM_PER_METER
    if length_unit is LengthUnit.FT:
        return value * config.CM_PER_FOOT
    if length_unit is LengthUnit.FT_IN:
        feet, inches = decode_feet_inches(value)
        return feet_inches_to_centimeters(feet, inches)
    return value * config.CM_PER_INCH


def to_kilograms(value: float, unit) -> float:
    """
    Convert a mass to kilograms.
    Unrecognized units return `value` unchanged.
    """
    try:
        mass_unit = MassUnit.from_label(unit)
    except ValueError:
        logging.debug(f"Unknown mass unit {unit!r}; passing {value} through")
        return value

    if mass_unit is MassUnit.KG:
        return value
    if mass_unit is MassUnit.G:
        return value / config.GRAMS_PER_KG
    return value * config.KG_PER_POUND
