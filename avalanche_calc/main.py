"""Command-line interface for the avalanche calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can simulate the full payoff schedule or view only the
summary. Inputs come from options or from a JSON payload file, and results can
be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Tuple

import click

from .data_models import SimulationInput, SimulationResult
from .engine import simulate
from .errors import ValidationError
from .export import export_to_csv, export_to_json, summary_to_dict
from .formatter import print_schedule, print_summary
from .inputs import build_input_from_options, build_input_from_payload
from .utils import first_of_month, parse_year_month

MAX_PRINTED_MONTHS = 120


def resolve_start(start_date: Optional[str]) -> date:
    if not start_date:
        return first_of_month()
    try:
        return parse_year_month(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def build_input(
    input_path: Optional[str],
    salary: str,
    extra_income: str,
    expenses: str,
    months_limit: Optional[str],
    loan: Tuple[str, ...],
    lumpsum: Tuple[str, ...],
    start: date,
) -> SimulationInput:
    """Build the simulation request from a payload file or from options."""
    try:
        if input_path:
            with Path(input_path).open("r", encoding="utf-8") as f:
                payload = json.load(f)
            return build_input_from_payload(payload, start)
        return build_input_from_options(
            salary, extra_income, expenses, months_limit, loan, lumpsum, start
        )
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Invalid JSON in {input_path}: {exc}")
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def run_simulation(sim_input: SimulationInput, start: date) -> SimulationResult:
    try:
        return simulate(sim_input, start=start)
    except ValidationError as exc:
        raise click.ClickException(exc.message)


def simulation_options(func: Callable) -> Callable:
    """Options shared by the ``simulate`` and ``summary`` commands."""
    options = [
        click.option("--input", "input_path", type=click.Path(exists=True, dir_okay=False), help="JSON payload with salary, expenses, loans and lumps"),
        click.option("--salary", "salary", default="0", help="Monthly take-home salary"),
        click.option("--extra-income", "extra_income", default="0", help="Other monthly income"),
        click.option("--expenses", "expenses", default="0", help="Monthly expenses excluding EMIs"),
        click.option("--months-limit", "months_limit", help="Maximum number of months to simulate (default 600)"),
        click.option("--loan", "loan", multiple=True, help="Loan in ID:NAME:PRINCIPAL:RATE:EMI format; RATE of 1 or more is a percentage (12 = 12%), below 1 a fraction (0.12)"),
        click.option("--lumpsum", "lumpsum", multiple=True, help="Lumpsum in YYYY-MM:AMOUNT[:NOTE] format"),
        click.option("--start-date", "-s", "start_date", help="First simulated month (YYYY-MM); defaults to the current month"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log simulation progress to stderr")
def cli(verbose: bool) -> None:
    """Debt avalanche payoff simulator."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@simulation_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    input_path: Optional[str],
    salary: str,
    extra_income: str,
    expenses: str,
    months_limit: Optional[str],
    loan: Tuple[str, ...],
    lumpsum: Tuple[str, ...],
    start_date: Optional[str],
    output: Optional[str],
) -> None:
    """Simulate and print the full payoff schedule."""
    start = resolve_start(start_date)
    sim_input = build_input(input_path, salary, extra_income, expenses, months_limit, loan, lumpsum, start)
    result = run_simulation(sim_input, start)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result.schedule)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result.summary)
    # Limit schedule length printed to avoid flooding the terminal
    rows = result.schedule
    if len(rows) > MAX_PRINTED_MONTHS:
        click.echo(f"Schedule has {len(rows)} months; showing first {MAX_PRINTED_MONTHS}.")
        rows = rows[:MAX_PRINTED_MONTHS]
    print_schedule(rows)


@cli.command()
@simulation_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    input_path: Optional[str],
    salary: str,
    extra_income: str,
    expenses: str,
    months_limit: Optional[str],
    loan: Tuple[str, ...],
    lumpsum: Tuple[str, ...],
    start_date: Optional[str],
    output: Optional[str],
) -> None:
    """Simulate and print only the summary metrics."""
    start = resolve_start(start_date)
    sim_input = build_input(input_path, salary, extra_income, expenses, months_limit, loan, lumpsum, start)
    result = run_simulation(sim_input, start)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_to_dict(result.summary)}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result.summary)


if __name__ == "__main__":
    cli()
