import math

import pytest
from caresync import config
from caresync.advice import Category
from caresync.calculators import (
    BmrFormula,
    CalculatorKind,
    calculate,
    can_calculate,
    compute_bmi,
    compute_bmr,
    compute_body_fat_percent,
    compute_water_liters,
    format_result,
    missing_fields,
    required_fields,
)


def test_bmi_reference_value():
    assert compute_bmi(180, 81) == pytest.approx(25.0, abs=0.01)


def test_bmi_zero_height_is_finite():
    """Height is clamped to a tiny epsilon instead of dividing by zero."""
    value = compute_bmi(0, 70)
    assert math.isfinite(value)
    assert value > 1e6


def test_bmr_mifflin_st_jeor():
    assert compute_bmr(175, 70, 25, "Male") == pytest.approx(1673.75)
    assert compute_bmr(175, 70, 25, "Female") == pytest.approx(1507.75)


def test_bmr_harris_benedict():
    male = compute_bmr(175, 70, 25, "Male", formula=BmrFormula.HARRIS_BENEDICT)
    assert male == pytest.approx(66.47 + 13.75 * 70 + 5.003 * 175 - 6.755 * 25)
    female = compute_bmr(175, 70, 25, "Female", formula="harris-benedict")
    assert female == pytest.approx(655.1 + 9.563 * 70 + 1.850 * 175 - 4.676 * 25)


def test_bmr_default_formula_comes_from_config(monkeypatch):
    monkeypatch.setattr(config, "BMR_FORMULA", "harris-benedict")
    assert compute_bmr(175, 70, 25, "Male") == pytest.approx(
        compute_bmr(175, 70, 25, "Male", formula=BmrFormula.HARRIS_BENEDICT)
    )


def test_water_intake():
    assert compute_water_liters(70) == pytest.approx(2.31)


def test_body_fat_male_plausible():
    value = compute_body_fat_percent(180, 38, 80, None, "Male")
    assert 0 < value < 60
    assert value == pytest.approx(12.05, abs=0.05)


def test_body_fat_female_uses_hip():
    with_hip = compute_body_fat_percent(165, 32, 70, 95, "Female")
    assert with_hip == pytest.approx(24.86, abs=0.05)
    # missing hip counts as zero
    assert compute_body_fat_percent(165, 32, 70, None, "Female") != with_hip


@pytest.mark.parametrize("waist", [38, 30, 0])
def test_body_fat_waist_not_above_neck_does_not_raise(waist):
    value = compute_body_fat_percent(180, 38, waist, None, "Male")
    assert math.isfinite(value)


def test_required_fields_per_kind():
    assert required_fields("BMI") == ["height", "weight"]
    assert required_fields(CalculatorKind.BMR) == ["height", "weight", "age"]
    assert required_fields("water") == ["weight"]
    assert required_fields("body fat", "Male") == ["height", "neck", "waist"]
    assert required_fields("BODY_FAT", "Female") == ["height", "neck", "waist", "hip"]


def test_can_calculate_gates_on_blank_fields():
    assert can_calculate("BMI", "Male", {"height": "180", "weight": "81"})
    assert not can_calculate("BMI", "Male", {"height": "180", "weight": "  "})
    assert missing_fields("BODY_FAT", "Female", {"height": "1", "neck": "1", "waist": "1"}) == ["hip"]


def test_calculate_bmi_with_units():
    result = calculate("BMI", {"height": "5.10", "height_unit": "ftin", "weight": "180", "weight_unit": "lb"})
    assert result.kind is CalculatorKind.BMI
    assert result.unit == "kg/m²"
    assert result.inputs["height_cm"] == pytest.approx(177.8, abs=0.01)
    assert result.value == pytest.approx(25.83, abs=0.01)
    assert result.category is Category.OVERWEIGHT


def test_calculate_invalid_numbers_count_as_zero():
    result = calculate("WATER", {"weight": "seventy"})
    assert result.value == 0.0
    assert result.category is Category.REMINDER


@pytest.mark.parametrize("gender", ["", None, "unknown"])
def test_calculate_gender_free_kinds_ignore_gender(gender):
    bmi = calculate("BMI", {"height": "180", "weight": "81"}, gender=gender)
    assert bmi.value == pytest.approx(25.0, abs=0.01)
    assert "gender" not in bmi.inputs

    water = calculate("WATER", {"weight": "70"}, gender=gender)
    assert water.value == pytest.approx(2.31)


def test_calculate_gendered_kinds_reject_unknown_gender():
    with pytest.raises(ValueError):
        calculate("BMR", {"height": "170", "weight": "70", "age": "40"}, gender="")


def test_calculate_body_fat_ignores_hip_for_men():
    result = calculate(
        "BODY_FAT",
        {"height": "180", "neck": "38", "waist": "80", "hip": "100"},
        gender="Male",
    )
    assert result.inputs["hip_cm"] is None
    assert result.category is Category.HEALTHY


def test_calculate_bmr_document():
    result = calculate("BMR", {"height": "175", "weight": "70", "age": "25"}, gender="Female")
    document = result.to_document()
    assert document["type"] == "BMR"
    assert document["result"] == pytest.approx(1507.75)
    assert document["unit"] == "kcal/day"
    assert document["version"] == 1
    assert document["category"] == "Baseline"
    assert document["inputs"]["gender"] == "Female"


def test_calculate_is_idempotent():
    inputs = {"height": "180", "neck": "38", "waist": "80"}
    assert calculate("BODY_FAT", inputs) == calculate("BODY_FAT", inputs)


def test_format_result():
    assert format_result(calculate("BMR", {"height": "175", "weight": "70", "age": "25"})) == "Result: 1674 kcal/day"
    assert format_result(calculate("BMI", {"height": "180", "weight": "81"})) == "Result: 25.0 kg/m²"
    assert format_result(calculate("WATER", {"weight": "70"})) == "Result: 2.3 L/day"
    body_fat = calculate("BODY_FAT", {"height": "180", "neck": "38", "waist": "80"})
    assert format_result(body_fat).startswith("Body Fat: 12.")


def test_kind_labels_and_metadata():
    assert CalculatorKind.from_label("Body Fat %") is CalculatorKind.BODY_FAT
    assert CalculatorKind.from_label("water intake") is CalculatorKind.WATER
    assert CalculatorKind.WATER.title == "Water Intake"
    assert CalculatorKind.BMR.full_name == "Basal Metabolic Rate"
    with pytest.raises(ValueError):
        CalculatorKind.from_label("steps")
