"""Serialization of simulation results.

The CSV layout is shared with the spreadsheet download of the web front end
and must stay byte-for-byte stable: one line per (month, loan) pair, numbers
rounded to cents without trailing zeros, the rate as a percentage with two
decimals and the lumpsum notes always quoted.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List

from .data_models import LoanLedgerEntry, ScheduleRow, SimulationResult, Summary
from .utils import round_money

CSV_HEADER = (
    "month,date,surplus_before,total_interest,total_paid,total_outstanding,"
    "lumpsum_amount,lumpsum_note,loan_id,loan_name,loan_rate_pct,interest,emi,"
    "extra_paid,principal_paid,balance_after"
)
CSV_FILENAME = "avalanche_schedule.csv"


def format_number(value: Decimal) -> str:
    """Cent-rounded value without trailing zeros: 9100, 9100.5, 9100.25."""
    rounded = round_money(value)
    if rounded == 0:
        return "0"
    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_rate_pct(rate: Decimal) -> str:
    return format(round_money(rate * 100), "f")


# Hand-built rather than csv.writer: lumpsum_note is always quoted while the
# other text columns are quoted only when needed.
def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _text_field(text: str) -> str:
    if any(ch in text for ch in ',"\r\n'):
        return _quote(text)
    return text


def _csv_line(row: ScheduleRow, entry: LoanLedgerEntry) -> str:
    notes = "; ".join(lp.note for lp in row.lumps_this_month if lp.note)
    fields = [
        str(row.month),
        row.date,
        format_number(row.surplus_before),
        format_number(row.total_interest_this_month),
        format_number(row.total_paid_this_month),
        format_number(row.total_outstanding),
        format_number(row.lumpsum_total),
        _quote(notes),
        _text_field(entry.id),
        _text_field(entry.name),
        format_rate_pct(entry.rate),
        format_number(entry.interest),
        format_number(entry.emi),
        format_number(entry.extra_paid),
        format_number(entry.principal_paid),
        format_number(entry.balance_after),
    ]
    return ",".join(fields)


def schedule_to_csv(schedule: List[ScheduleRow]) -> str:
    """Render the schedule as CSV text (``\\n`` separated, no trailing newline)."""
    lines = [CSV_HEADER]
    for row in schedule:
        for entry in row.loans:
            lines.append(_csv_line(row, entry))
    return "\n".join(lines)


def export_to_csv(path: Path, schedule: List[ScheduleRow]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(schedule_to_csv(schedule))


def _entry_to_dict(entry: LoanLedgerEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "name": entry.name,
        "rate": float(entry.rate),
        "interest": float(entry.interest),
        "emi": float(entry.emi),
        "extra_paid": float(entry.extra_paid),
        "principal_paid": float(entry.principal_paid),
        "balance_after": float(entry.balance_after),
        "payment": float(entry.payment),
    }


def row_to_dict(row: ScheduleRow) -> Dict[str, Any]:
    return {
        "month": row.month,
        "date": row.date,
        "surplus_before": float(row.surplus_before),
        "lumps_this_month": [
            {"amount": float(lp.amount), "note": lp.note, "label": lp.label}
            for lp in row.lumps_this_month
        ],
        "total_interest_this_month": float(row.total_interest_this_month),
        "total_paid_this_month": float(row.total_paid_this_month),
        "total_outstanding": float(row.total_outstanding),
        "loans": [_entry_to_dict(e) for e in row.loans],
    }


def summary_to_dict(summary: Summary) -> Dict[str, Any]:
    return {
        "total_months": summary.total_months,
        "total_interest_paid": float(summary.total_interest_paid),
        "total_paid": float(summary.total_paid),
        "total_outstanding": float(summary.total_outstanding),
        "months_limit_reached": summary.months_limit_reached,
    }


def result_to_dict(result: SimulationResult) -> Dict[str, Any]:
    return {
        "summary": summary_to_dict(result.summary),
        "schedule": [row_to_dict(r) for r in result.schedule],
    }


def export_to_json(path: Path, result: SimulationResult) -> None:
    """Export schedule and summary to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2)
