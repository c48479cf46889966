import pathlib

import pandas as pd

# Columns that need renaming → calculator input fields
RENAME_MAP = {
    "sex": "gender",
    "age_years": "age",
    "type": "kind",
    "calculator": "kind",
    "height_units": "height_unit",
    "weight_units": "weight_unit",
    "neck_units": "neck_unit",
    "waist_units": "waist_unit",
    "hip_units": "hip_unit",
}

CSV_SUFFIXES = {".csv", ".txt"}


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """
    - normalize all headers to snake_case lowercase
    - drop any "(…)" annotations such as "Height (cm)"
    - apply renames from RENAME_MAP
    """
    df = df.copy()
    df.columns = (
        df.columns.astype(str).str.strip()
        .str.replace(r"\s*\(.*?\)", "", regex=True)  # drop any "(…)"
        .str.replace(r"[\s\-]+", "_", regex=True)  # spaces/dashes → underscore
        .str.replace(":", "", regex=False)  # drop colons
        .str.lower()
    )
    return df.rename(
        columns={
            orig: target
            for orig, target in RENAME_MAP.items()
            if orig in df.columns
        }
    )


def load_sheets_as_tables(table_path: str) -> dict[str, pd.DataFrame]:
    """
    Read a measurement table into DataFrames keyed by sheet name:
      - first row = header
      - first column = index (subject id)
      - CSV files produce a single table named after the file stem
      - Excel workbooks produce one table per worksheet
    Cells are kept as strings so the lenient parsers decide what is a number.
    """
    path = pathlib.Path(table_path)
    tables: dict[str, pd.DataFrame] = {}

    if path.suffix.lower() in CSV_SUFFIXES:
        df = pd.read_csv(path, header=0, index_col=0, dtype=str, keep_default_na=False)
        tables[path.stem] = normalize_headers(df)
        return tables

    excel = pd.ExcelFile(path, engine="openpyxl")
    for sheet_name in excel.sheet_names:
        df = pd.read_excel(
            excel,
            sheet_name=sheet_name,
            header=0,
            index_col=0,
            dtype=str,
            keep_default_na=False,
            engine="openpyxl",
        )
        tables[sheet_name] = normalize_headers(df)

    return tables
