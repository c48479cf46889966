"""
Command-line interface for the CareSync health rules.
Runs a single calculator from options, checks the 24-hour cancellation rule,
and computes whole measurement tables (CSV or Excel) in batch.
"""

import json
import logging
import pathlib
import sys
import typing

from collections import namedtuple
from datetime import datetime

import click
import pandas as pd
from stairval.notepad import create_notepad

from . import config
from .appointment import can_cancel_appointment, is_within_clinic_hours
from .calculators import (
    BmrFormula,
    CalculatorKind,
    calculate,
    format_result,
    missing_fields,
    required_fields,
)
from .loader import load_sheets_as_tables
from .mapper import DefaultMapper, SubjectResult, sheet_kind

AuditEntry = namedtuple("AuditEntry", ["step", "sheet", "message", "level"])

KIND_CHOICES = [kind.name for kind in CalculatorKind]
FORMULA_CHOICES = [formula.value for formula in BmrFormula]


@click.group()
@click.option("--verbose-logging", is_flag=True, help="Also emit debug logs to stderr")
@click.option(
    "--log-file-path",
    type=click.Path(dir_okay=False, writable=True),
    help="Append timestamped logs to this file",
)
def main(verbose_logging: bool = False, log_file_path: typing.Optional[str] = None):
    """CareSync: health calculators and appointment rules."""
    _configure_logging(verbose_logging, log_file_path)


def _configure_logging(verbose_logging: bool, log_file_path: typing.Optional[str]) -> None:
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose_logging:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose_logging else logging.INFO,
            format="%(asctime)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
            force=True,
        )


@main.command(name="calculate")
@click.argument("kind", type=click.Choice(KIND_CHOICES, case_sensitive=False))
@click.option("--height", default="", help="Height value")
@click.option("--height-unit", default="cm", show_default=True, help="cm | m | ft | ftin | in")
@click.option("--weight", default="", help="Weight value")
@click.option("--weight-unit", default="kg", show_default=True, help="kg | g | lb")
@click.option("--age", default="", help="Age in whole years (BMR)")
@click.option("--neck", default="", help="Neck circumference (body fat)")
@click.option("--neck-unit", default="cm", show_default=True)
@click.option("--waist", default="", help="Waist circumference (body fat)")
@click.option("--waist-unit", default="cm", show_default=True)
@click.option("--hip", default="", help="Hip circumference (body fat, female)")
@click.option("--hip-unit", default="cm", show_default=True)
@click.option(
    "-g",
    "--gender",
    default="Male",
    show_default=True,
    type=click.Choice(["Male", "Female"], case_sensitive=False),
)
@click.option(
    "--formula",
    default=None,
    type=click.Choice(FORMULA_CHOICES, case_sensitive=False),
    help="BMR formula (default: CARESYNC_BMR_FORMULA or mifflin-st-jeor)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the stored result document as JSON")
def calculate_command(kind: str, gender: str, formula: typing.Optional[str], as_json: bool, **fields):
    """
    Run one calculator. Required fields depend on KIND:
      BMI: height, weight; BMR: height, weight, age; WATER: weight;
      BODY_FAT: height, neck, waist (+ hip for Female).
    """
    missing = missing_fields(kind, gender, fields)
    if missing:
        click.echo(f"Error: {kind.upper()} needs {', '.join('--' + name for name in missing)}", err=True)
        sys.exit(1)

    result = calculate(kind, fields, gender=gender, formula=formula)
    logging.info(f"Calculated {result.kind.name}: {result.value} {result.unit}")

    if as_json:
        click.echo(json.dumps(result.to_document(), indent=2, ensure_ascii=False))
        return
    click.echo(format_result(result))
    click.echo(result.advice)


@main.command(name="can-cancel")
@click.argument("date_label")
@click.argument("time_label")
@click.option(
    "--now",
    "now_label",
    default=None,
    type=click.DateTime(formats=["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M:%S"]),
    help="Evaluate against this local time instead of the clock",
)
def can_cancel(date_label: str, time_label: str, now_label: typing.Optional[datetime]):
    """
    Check whether an appointment on DATE_LABEL (d/m/yyyy) at TIME_LABEL
    ("hh:mm AM") can still be cancelled (at least 24 hours ahead).
    """
    allowed = can_cancel_appointment(date_label, time_label, now=now_label)
    click.echo("yes" if allowed else "no")
    if not allowed:
        click.echo(
            f"Appointments must be cancelled at least {config.CANCELLATION_LEAD_HOURS} hours "
            f"before the scheduled time.",
            err=True,
        )
    if not is_within_clinic_hours(time_label):
        click.echo(
            f"Note: {time_label!r} is outside clinic hours "
            f"({config.CLINIC_FIRST_HOUR:02d}:00 to {config.CLINIC_LAST_HOUR:02d}:59).",
            err=True,
        )


@main.command(name="batch-calculate")
@click.option(
    "-t",
    "--table-path",
    "table_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="path to a CSV file or Excel workbook of measurements",
)
@click.option(
    "-o",
    "--output-dir",
    "output_dir",
    default=None,
    type=click.Path(file_okay=False),
    help="base folder for results (default: CARESYNC_OUTPUT_DIR or cwd)",
)
@click.option(
    "--formula",
    default=None,
    type=click.Choice(FORMULA_CHOICES, case_sensitive=False),
    help="BMR formula for every row",
)
@click.option("--default-gender", default=None, type=click.Choice(["Male", "Female"], case_sensitive=False),
              help="Gender for rows that leave it blank")
@click.option("--verbose", is_flag=True, help="Show the table audit before computing")
def batch_calculate(table_file: str, output_dir: typing.Optional[str], formula: typing.Optional[str],
                    default_gender: typing.Optional[str], verbose: bool):
    """
    Compute every row of a measurement table:
      - sheets named bmi / bmr / water / body_fat use that calculator
      - other sheets need a 'kind' column
    Results are written as JSON into a timestamped folder.
    """
    # 1) Read all sheets into DataFrames
    tables = _read_tables(table_file)

    # optionally audit the tables first
    if verbose:
        for entry in preprocess(tables):
            _echo_audit_entry(entry)
        click.echo("")

    # 2) Compute rows and collect issues
    notepad = create_notepad("calculators")
    mapper = DefaultMapper(formula=formula, default_gender=default_gender)
    results = mapper.apply_mapping(tables, notepad)

    # 3) Report any errors or warnings
    _report_issues(notepad)

    # 4) Write results
    out_dir = _prepare_output_dir(output_dir)
    out_path = _write_results(results, out_dir)

    # 5) Final summary
    click.echo(f"Wrote {len(results)} results to {out_path}")
    for kind in CalculatorKind:
        count = sum(1 for item in results if item.result.kind is kind)
        if count:
            click.echo(f"Computed {count} {kind.title} results")


@main.command(name="audit-table")
@click.option(
    "-t",
    "--table-path",
    "table_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="path to a CSV file or Excel workbook of measurements",
)
@click.option("-r", "--raw", is_flag=True, help="Print the audit as JSON")
def audit_table(table_file: str, raw: bool):
    """Header counts, sheet classification and missing columns for each sheet."""
    entries = preprocess(_read_tables(table_file))
    if raw:
        click.echo(json.dumps([entry._asdict() for entry in entries], indent=2))
        return
    click.echo(f"{'SHEET':15}  {'STEP':20}  {'LEVEL':7}  MESSAGE")
    for entry in entries:
        click.echo(f"{entry.sheet:15}  {entry.step:20}  {entry.level:7}  {entry.message}")


def _read_tables(table_file: str) -> dict[str, pd.DataFrame]:
    try:
        return load_sheets_as_tables(table_file)
    except (ValueError, OSError) as e:
        logging.error(f"Failed to read '{table_file}': {e}")
        click.echo(f"Error: cannot read {table_file}: {e}", err=True)
        sys.exit(1)


def _echo_audit_entry(entry: AuditEntry) -> None:
    indent = "  "
    line = f"{entry.step:20} {entry.sheet:15} {entry.message}"
    # color by level
    if entry.level == "error":
        colored = click.style(line, fg="red")
    elif entry.level in ("warn", "warning"):
        colored = click.style(line, fg="yellow")
    else:
        colored = click.style(line, fg="cyan")
    click.echo(indent + colored)


def _report_issues(notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in table:")
        for err in notepad.errors():
            click.echo(f"- {err}")
    # show any warnings but keep going
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in table:")
        for w in notepad.warnings():
            click.echo(f"- {w}")


def _prepare_output_dir(base_dir: typing.Optional[str] = None) -> pathlib.Path:
    # use YYYY-MM-DD_HH-MM-SS for human-readable timestamps
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    base = pathlib.Path(base_dir or config.OUTPUT_DIR or pathlib.Path.cwd())
    results_dir = base / "caresync_results" / timestamp
    results_dir.mkdir(parents=True, exist_ok=True)
    return results_dir


def _write_results(results: list[SubjectResult], results_dir: pathlib.Path) -> pathlib.Path:
    out_path = results_dir / "results.json"
    with open(out_path, "w", encoding="utf-8") as out_f:
        json.dump([item.to_document() for item in results], out_f, indent=2, ensure_ascii=False)
    return out_path


def preprocess(tables: dict[str, pd.DataFrame]) -> list[AuditEntry]:
    """
    Run lightweight audits on each sheet:
      - header counts
      - sheet classification (calculator from name, 'kind' column, or skip)
      - required input columns for the sheet's calculator
    """
    entries: list[AuditEntry] = []

    # Step 1: header counts
    for name, df in tables.items():
        entries.append(AuditEntry(
            step="normalize-headers",
            sheet=name,
            message=f"{len(df.columns)} cols, {len(df)} rows",
            level="info",
        ))

    # Step 2: classify
    for name, df in tables.items():
        kind = sheet_kind(name)
        if kind is not None:
            message, level = kind.name, "info"
        elif "kind" in df.columns:
            message, level = "per-row (kind column)", "info"
        else:
            message, level = "skip (no calculator)", "error"
        entries.append(AuditEntry(step="classify-sheet", sheet=name, message=message, level=level))

    # Step 3: required columns (women need hip for body fat; checked per row later)
    for name, df in tables.items():
        kind = sheet_kind(name)
        if kind is None:
            continue
        cols = set(df.columns)
        missing = [field for field in required_fields(kind, "Male") if field not in cols]
        if kind in (CalculatorKind.BMR, CalculatorKind.BODY_FAT) and "gender" not in cols:
            missing.append("gender")
        if missing:
            entries.append(AuditEntry(
                step="column-check",
                sheet=name,
                message=f"missing {', '.join(missing)}",
                level="error",
            ))
    return entries


if __name__ == "__main__":
    main()
