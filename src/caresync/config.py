"""
Settings for the CareSync health rules.

Thresholds and constants live here so they can be reviewed in one place.
A few of them can be overridden from the environment.

Environment flags
----------------------------------------
CARESYNC_BMR_FORMULA      : "mifflin-st-jeor" (default) or "harris-benedict".
CARESYNC_DEFAULT_CAPACITY : Patients per doctor per day when a doctor
                            profile has no usable capacity (default 30).
CARESYNC_OUTPUT_DIR       : Base folder for batch results (default: cwd).
"""

import os

# Guards for degenerate inputs (zero height, waist <= neck)
EPSILON = 0.0001

# Unit factors
CM_PER_METER = 100.0
CM_PER_FOOT = 30.48
CM_PER_INCH = 2.54
KG_PER_POUND = 0.45359237
GRAMS_PER_KG = 1000.0
MAX_ENCODED_INCHES = 11.99

# Litres of water per kg of body weight per day
WATER_LITERS_PER_KG = 0.033

BMI_THRESHOLDS = {
    "underweight_below": 18.5,
    "overweight_from": 25.0,
    "obese_from": 30.0,
}

# Upper bounds (exclusive) for low / healthy / overfat; anything above is obese
BODY_FAT_THRESHOLDS = {
    "male": (6.0, 24.0, 31.0),
    "female": (14.0, 32.0, 36.0),
}

# Appointments
CANCELLATION_LEAD_HOURS = 24
CLINIC_FIRST_HOUR = 9
CLINIC_LAST_HOUR = 21

BMR_FORMULA = os.getenv("CARESYNC_BMR_FORMULA", "mifflin-st-jeor").strip().lower()
OUTPUT_DIR = os.getenv("CARESYNC_OUTPUT_DIR", "")


def default_capacity() -> int:
    """Capacity fallback; a non-numeric override is ignored."""
    raw = os.getenv("CARESYNC_DEFAULT_CAPACITY", "30").strip()
    try:
        return int(raw)
    except ValueError:
        return 30
