from datetime import datetime

import pandas as pd
import pytest


@pytest.fixture(scope="session")
def fixed_now() -> datetime:
    """
    A pinned local "now" so cancellation checks are deterministic.
    """
    return datetime(2025, 10, 25, 10, 30)


@pytest.fixture
def measurements_workbook(tmp_path) -> str:
    """
    Excel workbook with:
      - a 'bmi' sheet (calculator implied by the sheet name)
      - a 'body_fat' sheet with one male and one female row
      - a 'mixed' sheet that names the calculator per row, including one bad row
    """
    bmi = pd.DataFrame({
        "Height (cm)": ["180", "165"],
        "Weight": ["81", "50"],
        "Weight Unit": ["kg", "kg"],
    }, index=pd.Index(["PAT1", "PAT2"], name="subject"))

    body_fat = pd.DataFrame({
        "sex": ["Male", "Female"],
        "height": ["180", "165"],
        "neck": ["38", "32"],
        "waist": ["80", "70"],
        "hip": ["", "95"],
    }, index=pd.Index(["PAT1", "PAT2"], name="subject"))

    mixed = pd.DataFrame({
        "type": ["water", "bmr", "bmr"],
        "gender": ["", "Female", ""],
        "height": ["", "5.5", "170"],
        "height_unit": ["", "ft", "cm"],
        "weight": ["154", "60", "70"],
        "weight_unit": ["lb", "kg", "kg"],
        "age": ["", "30", "40"],
    }, index=pd.Index(["PAT3", "PAT4", "PAT5"], name="subject"))

    path = tmp_path / "measurements.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        bmi.to_excel(w, sheet_name="bmi")
        body_fat.to_excel(w, sheet_name="body_fat")
        mixed.to_excel(w, sheet_name="mixed")
    return str(path)


@pytest.fixture
def measurements_csv(tmp_path) -> str:
    path = tmp_path / "clinic_day.csv"
    path.write_text(
        "subject,kind,gender,height,height_unit,weight,weight_unit,age\n"
        "A1,bmi,,1.8,m,81,kg,\n"
        "A2,water,,,,70,kg,\n"
        "A3,steps,,,,70,kg,\n",
        encoding="utf-8",
    )
    return str(path)
