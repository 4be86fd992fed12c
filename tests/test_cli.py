import json

from click.testing import CliRunner

from avalanche_calc.export import CSV_HEADER
from avalanche_calc.main import cli

BASE_ARGS = ["--loan", "L1:Home:10000:12:1000", "--start-date", "2025-01"]


def test_summary_command_prints_metrics():
    result = CliRunner().invoke(cli, ["summary", *BASE_ARGS])

    assert result.exit_code == 0, result.output
    assert "Months simulated   : 11" in result.output
    assert "Total interest     : 589.85" in result.output


def test_schedule_command_prints_rows():
    result = CliRunner().invoke(cli, ["schedule", *BASE_ARGS, "--lumpsum", "2025-01:2000:bonus"])

    assert result.exit_code == 0, result.output
    assert "Month\tDate" in result.output
    assert "1\t2025-01\t0.00\t2,000.00" in result.output


def test_months_cap_is_reported():
    result = CliRunner().invoke(cli, ["summary", *BASE_ARGS, "--months-limit", "3"])

    assert result.exit_code == 0, result.output
    assert "Months cap reached" in result.output


def test_validation_error_is_reported_to_user():
    result = CliRunner().invoke(
        cli, ["summary", "--loan", "L3:Business loan:600000:27:12000", "--start-date", "2025-01"]
    )

    assert result.exit_code != 0
    assert "does not cover first-month interest" in result.output


def test_bad_loan_option_is_rejected():
    result = CliRunner().invoke(cli, ["summary", "--loan", "L1:Home"])

    assert result.exit_code != 0
    assert "ID:NAME:PRINCIPAL:RATE:EMI" in result.output


def test_csv_export(tmp_path):
    out = tmp_path / "out.csv"
    result = CliRunner().invoke(cli, ["schedule", *BASE_ARGS, "--output", str(out)])

    assert result.exit_code == 0, result.output
    lines = out.read_text(encoding="utf-8").split("\n")
    assert lines[0] == CSV_HEADER
    assert len(lines) == 12


def test_json_input_and_output(tmp_path):
    payload = {
        "salary": 80000,
        "extra_income": 10000,
        "expenses": 40000,
        "months_limit": 240,
        "loans": [
            {"id": "L1", "name": "Personal loan", "principal": 50000, "emi": 3000, "annual_rate": 0.14},
            {"id": "L2", "name": "Car loan", "principal": 100000, "emi": 6000, "annual_rate": 0.12},
        ],
    }
    source = tmp_path / "payload.json"
    source.write_text(json.dumps(payload), encoding="utf-8")
    out = tmp_path / "result.json"

    result = CliRunner().invoke(
        cli, ["schedule", "--input", str(source), "--start-date", "2025-01", "--output", str(out)]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["summary"]["total_outstanding"] == 0.0
    assert data["schedule"][0]["date"] == "2025-01"
    assert [loan["id"] for loan in data["schedule"][0]["loans"]] == ["L1", "L2"]
