import json

import pytest

from click.testing import CliRunner
from caresync.__main__ import main


def test_calculate_bmi_prints_result_and_advice():
    runner = CliRunner()
    result = runner.invoke(main, ["calculate", "bmi", "--height", "180", "--weight", "81"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "Result: 25.0 kg/m²"
    assert "overweight" in lines[1].lower()


def test_calculate_body_fat_female_requires_hip():
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["calculate", "BODY_FAT", "-g", "female", "--height", "165", "--neck", "32", "--waist", "70"],
    )
    assert result.exit_code == 1
    assert "--hip" in result.output


def test_calculate_json_document():
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["calculate", "BMR", "--height", "5.5", "--height-unit", "ft", "--weight", "132",
         "--weight-unit", "lb", "--age", "30", "--gender", "Female", "--json"],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["type"] == "BMR"
    assert payload["unit"] == "kcal/day"
    assert payload["inputs"]["height_cm"] == pytest.approx(167.64)


def test_calculate_harris_benedict_option():
    runner = CliRunner()
    mifflin = runner.invoke(main, ["calculate", "BMR", "--height", "175", "--weight", "70", "--age", "25"])
    harris = runner.invoke(
        main,
        ["calculate", "BMR", "--height", "175", "--weight", "70", "--age", "25", "--formula", "harris-benedict"],
    )
    assert mifflin.output.splitlines()[0] == "Result: 1674 kcal/day"
    assert harris.output.splitlines()[0] != mifflin.output.splitlines()[0]


def test_can_cancel_far_future_and_past():
    runner = CliRunner()
    future = runner.invoke(main, ["can-cancel", "26/10/2099", "10:30 AM"])
    assert future.exit_code == 0
    assert future.output.splitlines()[0] == "yes"

    past = runner.invoke(main, ["can-cancel", "01/01/2000", "10:30 AM"])
    assert past.exit_code == 0
    assert past.output.splitlines()[0] == "no"


def test_can_cancel_with_pinned_now():
    runner = CliRunner()
    result = runner.invoke(main, ["can-cancel", "26/10/2025", "10:29 AM", "--now", "2025-10-25 10:30"])
    assert result.exit_code == 0
    assert result.output.splitlines()[0] == "no"


def test_can_cancel_notes_time_outside_clinic_hours():
    runner = CliRunner()
    late = runner.invoke(main, ["can-cancel", "26/10/2099", "11:30 PM"])
    assert late.exit_code == 0
    assert late.output.splitlines()[0] == "yes"
    assert "outside clinic hours" in late.output

    open_hours = runner.invoke(main, ["can-cancel", "26/10/2099", "10:30 AM"])
    assert "outside clinic hours" not in open_hours.output


def test_log_file_receives_records(tmp_path):
    log_path = tmp_path / "caresync.log"
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["--log-file-path", str(log_path), "calculate", "WATER", "--weight", "70"],
    )
    assert result.exit_code == 0, result.output
    assert "Calculated WATER" in log_path.read_text(encoding="utf-8")
