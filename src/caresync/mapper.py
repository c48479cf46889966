import abc
import math
import typing

from dataclasses import dataclass

import pandas as pd
from stairval.notepad import Notepad

from .advice import Gender
from .calculators import (
    BmrFormula,
    CalculatorKind,
    CalculatorResult,
    calculate,
    missing_fields,
)
from .measurement import is_blank
from .units import is_length_unit, is_mass_unit

# Numeric input columns and the unit column that qualifies each one
NUMERIC_COLUMNS = {
    "height": "height_unit",
    "weight": "weight_unit",
    "age": None,
    "neck": "neck_unit",
    "waist": "waist_unit",
    "hip": "hip_unit",
}
MASS_UNIT_COLUMNS = {"weight_unit"}

# Sheets named after a calculator do not need a 'kind' column
KNOWN_SHEET_ALIASES: dict[CalculatorKind, set[str]] = {
    CalculatorKind.BMI: {"bmi", "body_mass_index"},
    CalculatorKind.BMR: {"bmr", "basal_metabolic_rate", "calories"},
    CalculatorKind.WATER: {"water", "water_intake", "hydration"},
    CalculatorKind.BODY_FAT: {"body_fat", "bodyfat", "body fat", "fat"},
}

SUBJECT_COLUMN = "subject_ID"


@dataclass
class SubjectResult:
    """
    One computed row of a measurement table.

    Attributes:
        subject_ID: Value of the table's index column for the row.
        sheet: Sheet (or CSV file stem) the row came from.
        result: The calculator output.
    """

    subject_ID: str
    sheet: str
    result: CalculatorResult

    def to_document(self) -> dict:
        document = self.result.to_document()
        document["subject_ID"] = self.subject_ID
        document["sheet"] = self.sheet
        return document


def sheet_kind(sheet_name: str) -> CalculatorKind | None:
    """Calculator implied by a sheet's name, if any."""
    key = sheet_name.strip().casefold()
    for kind, aliases in KNOWN_SHEET_ALIASES.items():
        if key in aliases:
            return kind
    return None


def _looks_numeric(value: typing.Any) -> bool:
    try:
        number = float(str(value).strip())
    except ValueError:
        return False
    return math.isfinite(number)


class TableMapper(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> typing.Sequence[SubjectResult]:
        raise NotImplementedError


class DefaultMapper(TableMapper):
    def __init__(self, formula: BmrFormula | str | None = None, default_gender: str | None = None):
        """
        - formula: BMR formula to use for every row (None → configured default)
        - default_gender: used when a row leaves gender blank; None makes a
          blank gender an error for BMR and body fat rows
        """
        self.formula = formula
        self.default_gender = default_gender

    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> list[SubjectResult]:
        """
        Process:
        1) decide which calculator each sheet (or row) uses
        2) validate each row, recording problems on the notepad
        3) compute every valid row
        """
        results: list[SubjectResult] = []
        for sheet_name, df in tables.items():
            results.extend(self._map_table(sheet_name, df, notepad))
        return results

    @staticmethod
    def _prepare_sheet(df: pd.DataFrame) -> pd.DataFrame:
        """Bring the index into a column and name it 'subject_ID'."""
        working = df.reset_index()
        original = working.columns[0]
        return working.rename(columns={original: SUBJECT_COLUMN})

    def _map_table(self, sheet_name: str, df: pd.DataFrame, notepad: Notepad) -> list[SubjectResult]:
        """
        Sheet-level wrapper:
          - normalize index to 'subject_ID'
          - require a calculator kind from the sheet name or a 'kind' column
          - delegate row conversion to parse_calculator_row
        """
        implied_kind = sheet_kind(sheet_name)
        if implied_kind is None and "kind" not in df.columns:
            notepad.add_error(
                f"Sheet {sheet_name!r}: cannot determine calculator; "
                f"name the sheet after a calculator or add a 'kind' column"
            )
            return []

        working = self._prepare_sheet(df)
        records: list[SubjectResult] = []
        for index, row in working.iterrows():
            result = self.parse_calculator_row(
                row, implied_kind, sheet_name, notepad,
                formula=self.formula, default_gender=self.default_gender,
            )
            if result is not None:
                records.append(
                    SubjectResult(subject_ID=str(row[SUBJECT_COLUMN]), sheet=sheet_name, result=result)
                )
        return records

    @staticmethod
    def parse_calculator_row(
            row: pd.Series,
            implied_kind: CalculatorKind | None,
            sheet_name: str,
            notepad: Notepad,
            formula: BmrFormula | str | None = None,
            default_gender: str | None = None,
    ) -> CalculatorResult | None:
        """
        Validate one row and compute it.
        Returns None (after recording an error) if the row cannot be computed.
        """
        subject = row.get(SUBJECT_COLUMN, "?")
        where = f"Sheet {sheet_name!r}, subject {subject!r}"

        # 1) Which calculator
        raw_kind = row.get("kind")
        if is_blank(raw_kind):
            if implied_kind is None:
                notepad.add_error(f"{where}: missing calculator kind")
                return None
            kind = implied_kind
        else:
            try:
                kind = CalculatorKind.from_label(raw_kind)
            except ValueError as e:
                notepad.add_error(f"{where}: {e}")
                return None

        # 2) Gender, only for calculators that depend on it
        raw_gender = row.get("gender")
        gender = Gender.MALE
        if kind in (CalculatorKind.BMR, CalculatorKind.BODY_FAT):
            if is_blank(raw_gender):
                if default_gender is None:
                    notepad.add_error(f"{where}: {kind.title} requires a gender")
                    return None
                raw_gender = default_gender
            try:
                gender = Gender.from_label(raw_gender)
            except ValueError as e:
                notepad.add_error(f"{where}: {e}")
                return None

        # 3) Required fields must be filled in
        inputs = {name: row.get(name) for name in row.index if name != SUBJECT_COLUMN}
        missing = missing_fields(kind, gender, inputs)
        if missing:
            notepad.add_error(f"{where}: missing required fields for {kind.title}: {missing}")
            return None

        # 4) Soft checks: non-numeric values count as 0, unknown units pass through
        for column, unit_column in NUMERIC_COLUMNS.items():
            value = inputs.get(column)
            if is_blank(value):
                continue
            if not _looks_numeric(value):
                notepad.add_warning(f"{where}: {column} {value!r} is not a number; treated as 0")
            if unit_column is None or is_blank(inputs.get(unit_column)):
                continue
            unit = inputs[unit_column]
            known = is_mass_unit(unit) if unit_column in MASS_UNIT_COLUMNS else is_length_unit(unit)
            if not known:
                notepad.add_warning(f"{where}: unknown unit {unit!r} for {column}; value used as-is")

        return calculate(kind, inputs, gender=gender, formula=formula)
