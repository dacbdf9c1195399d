import pytest
from rich.console import Console

from isimipplus import fileops


def test_read_criteria_splits_sections(tmp_path):
    config_path = tmp_path / "climatology.yaml"
    config_path.write_text(
        "search_criteria:\n"
        "  simulation_round: ISIMIP3b\n"
        "  climate_variable: tas\n"
        "meta_criteria:\n"
        "  years: [1981, 2010]\n"
    )

    search_criteria, meta_criteria = fileops.read_criteria(config_path)

    assert search_criteria == {"simulation_round": "ISIMIP3b", "climate_variable": "tas"}
    assert meta_criteria == {"years": [1981, 2010]}


def test_read_criteria_of_empty_file(tmp_path):
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("")

    assert fileops.read_criteria(config_path) == ({}, {})


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0s"), (5.4, "5s"), (125, "2m 05s"), (3725, "1h 02m 05s"), (7200, "2h 00m 00s")],
)
def test_format_elapsed(seconds, expected):
    assert fileops.format_elapsed(seconds) == expected


def test_log_stage_reports_elapsed_time():
    console = Console(record=True, width=200)

    now = fileops.log_stage(console, "Starting climatology run")
    fileops.log_stage(console, "Ending climatology run", now - 125)

    first, second = console.export_text().splitlines()
    assert "Starting climatology run" in first and "took" not in first
    assert second.endswith("(took 2m 05s)")
