"""
Advice categories for calculator results.

BMI and body fat map onto threshold tables (inclusive lower bounds); BMR and
water intake always produce the same message.
"""

from enum import Enum

from . import config


class Gender(Enum):
    MALE = "Male"
    FEMALE = "Female"

    @classmethod
    def from_label(cls, label) -> "Gender":
        """Accepts 'Male', 'female', 'M', 'F' (case-insensitive)."""
        if isinstance(label, Gender):
            return label
        key = str(label).strip().lower()
        mapping = {
            "male": cls.MALE,
            "m": cls.MALE,
            "female": cls.FEMALE,
            "f": cls.FEMALE,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown gender label: {label!r}")


class Category(Enum):
    # BMI
    UNDERWEIGHT = "Underweight"
    HEALTHY = "Healthy"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"
    # Body fat
    LOW = "Low"
    OVERFAT = "Overfat"
    # Single-message calculators
    BASELINE = "Baseline"
    REMINDER = "Reminder"


BMI_ADVICE = {
    Category.UNDERWEIGHT: "You are underweight. Consider a balanced diet to gain weight.",
    Category.HEALTHY: "Your weight is normal. Maintain your healthy lifestyle.",
    Category.OVERWEIGHT: "You are overweight. Regular exercise and a balanced diet are recommended.",
    Category.OBESE: "Obese. Seek guidance for weight management.",
}

BODY_FAT_ADVICE = {
    Category.LOW: "Too low body fat. May affect health.",
    Category.HEALTHY: "Healthy range.",
    Category.OVERFAT: "Overfat. Consider exercise and diet.",
    Category.OBESE: "Obese. Seek professional guidance.",
}

BMR_ADVICE = "This is your daily calorie requirement at rest."
WATER_ADVICE = "Drink adequate water daily for optimal health."


def classify_bmi(bmi: float) -> Category:
    thresholds = config.BMI_THRESHOLDS
    if bmi < thresholds["underweight_below"]:
        return Category.UNDERWEIGHT
    if bmi < thresholds["overweight_from"]:
        return Category.HEALTHY
    if bmi < thresholds["obese_from"]:
        return Category.OVERWEIGHT
    return Category.OBESE


def classify_body_fat(percent: float, gender) -> Category:
    """
    U.S. Navy body fat bands:
      male   <6 low, <24 healthy, <31 overfat, else obese
      female <14 low, <32 healthy, <36 overfat, else obese
    """
    key = Gender.from_label(gender).value.lower()
    low_below, healthy_below, overfat_below = config.BODY_FAT_THRESHOLDS[key]
    if percent < low_below:
        return Category.LOW
    if percent < healthy_below:
        return Category.HEALTHY
    if percent < overfat_below:
        return Category.OVERFAT
    return Category.OBESE


def bmi_advice(bmi: float) -> str:
    return BMI_ADVICE[classify_bmi(bmi)]


def body_fat_advice(percent: float, gender) -> str:
    return BODY_FAT_ADVICE[classify_body_fat(percent, gender)]
