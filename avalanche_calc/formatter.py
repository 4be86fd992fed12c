"""Output helpers for the avalanche calculator.

This module provides simple functions to render the payoff schedule and its
summary in a tabular text format using ``click.echo``. Each month prints one
line per active loan; the month-level columns are only filled on the first
line of a month.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import click

from .data_models import ScheduleRow, Summary


def money(value: Decimal) -> str:
    return f"{value:,.2f}"


def print_summary(summary: Summary) -> None:
    """Print the summary metrics in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Months simulated   : {summary.total_months}")
    click.echo(f"Total interest     : {money(summary.total_interest_paid)}")
    click.echo(f"Total paid         : {money(summary.total_paid)}")
    click.echo(f"Total outstanding  : {money(summary.total_outstanding)}")
    if summary.months_limit_reached:
        click.echo("Months cap reached before all loans were repaid.")
    click.echo("-" * 72)


def print_schedule(schedule: Iterable[ScheduleRow]) -> None:
    """Print the payoff schedule as a tab separated table."""
    headers = [
        "Month",
        "Date",
        "Surplus",
        "Lumpsum",
        "Interest",
        "Paid",
        "Loan",
        "Rate%",
        "Extra",
        "Balance",
        "Outstanding",
    ]
    click.echo("\t".join(headers))
    for row in schedule:
        for idx, entry in enumerate(row.loans):
            first = idx == 0
            cells = [
                str(row.month) if first else "",
                row.date if first else "",
                money(row.surplus_before) if first else "",
                money(row.lumpsum_total) if first and row.lumps_this_month else "",
                money(row.total_interest_this_month) if first else "",
                money(row.total_paid_this_month) if first else "",
                entry.id,
                f"{entry.rate * 100:.2f}",
                money(entry.extra_paid),
                money(entry.balance_after),
                money(row.total_outstanding) if first else "",
            ]
            click.echo("\t".join(cells))
