"""
Measurement domain model.

Defines the Measurement dataclass for a single user-entered quantity and the
lenient parsers that turn form text into numbers.
"""

import math
import typing
from dataclasses import dataclass

from .units import is_length_unit, is_mass_unit, to_centimeters, to_kilograms


def numbers_only(text: str) -> str:
    """
    Keep digits and the first decimal point, the way the input fields filter
    keystrokes ("12a.3.4" -> "12.34").
    """
    out = "".join(ch for ch in str(text) if ch.isdigit() or ch == ".")
    first_dot = out.find(".")
    if first_dot != -1:
        out = out[: first_dot + 1] + out[first_dot + 1:].replace(".", "")
    return out


def digits_only(text: str) -> str:
    return "".join(ch for ch in str(text) if ch.isdigit())


def parse_decimal(value: typing.Any) -> float:
    """
    Lenient number parsing:
    - ints/floats are returned as float (NaN and infinities become 0.0)
    - strings are stripped and parsed; anything unparsable is 0.0
    - None / empty -> 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_int(value: typing.Any) -> int:
    """Whole-number parsing for ages; "31.0" is 31, anything else invalid is 0."""
    number = parse_decimal(value)
    if number != int(number):
        return 0
    return int(number)


def is_blank(value: typing.Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return not str(value).strip()


@dataclass(frozen=True)
class Measurement:
    """
    A user-entered quantity.

    Attributes:
        value: Non-negative decimal as entered (already parsed).
        unit: Unit label (e.g. 'cm', 'ft', 'lb').
    """

    value: float
    unit: str

    @classmethod
    def from_raw(cls, raw_value: typing.Any, unit: str) -> "Measurement":
        return cls(value=parse_decimal(raw_value), unit=str(unit).strip())

    @property
    def is_length(self) -> bool:
        return is_length_unit(self.unit)

    @property
    def is_mass(self) -> bool:
        return is_mass_unit(self.unit)

    def in_centimeters(self) -> float:
        return to_centimeters(self.value, self.unit)

    def in_kilograms(self) -> float:
        return to_kilograms(self.value, self.unit)
