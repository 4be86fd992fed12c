"""Core simulation engine for the avalanche calculator.

This module drives the month-by-month payoff loop. Every month the active
loans are ordered by descending annual rate, the surplus pool is built from
the recurring cash left after all EMIs plus any lumpsum due that month, and the
pool cascades down the loans through ``allocator.allocate``. Retired loans
drop out and their EMIs become surplus from the following month on. The run
ends when every loan is retired or the months cap is hit.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from .allocator import WorkingLoan, allocate
from .data_models import LumpsumPayment, ScheduleRow, SimulationInput, SimulationResult
from .recorder import ScheduleRecorder
from .utils import first_of_month, month_label, round_money
from .validation import validate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _group_lumps(lumps: List[LumpsumPayment]) -> Dict[int, List[LumpsumPayment]]:
    """Group lumpsums by month index for quick lookup."""
    mapping: Dict[int, List[LumpsumPayment]] = {}
    for lp in lumps:
        mapping.setdefault(lp.month_index, []).append(lp)
    return mapping


def _sort_by_rate(loans: List[WorkingLoan]) -> None:
    # list.sort is stable, reverse=True included: equal rates keep their order.
    loans.sort(key=lambda loan: loan.annual_rate, reverse=True)


def simulate(sim_input: SimulationInput, start: Optional[date] = None) -> SimulationResult:
    """Simulate the avalanche payoff of ``sim_input``.

    Parameters
    ----------
    sim_input: SimulationInput
        The loans, cash flow, lumpsums and months cap. It is validated first
        and never modified.
    start: date, optional
        Any day of the calendar month treated as simulation month 1. Defaults
        to the current month.

    Returns
    -------
    SimulationResult
        The schedule (one row per simulated month) and its summary.

    Raises
    ------
    ValidationError
        If the input is rejected. No schedule is produced in that case.
    """
    validate(sim_input)

    start = first_of_month(start)
    months_limit = int(sim_input.months_limit)
    base_cash = sim_input.cash_flow.base_monthly_cash
    lumps_by_month = _group_lumps(sim_input.lumps)

    working = [WorkingLoan.from_account(loan) for loan in sim_input.loans]
    initial_outstanding = sum((loan.principal for loan in working), ZERO)
    recorder = ScheduleRecorder(fallback_outstanding=initial_outstanding)

    logger.info(
        "Simulating %d loan(s) from %s, cap %d months",
        len(working), start.strftime("%Y-%m"), months_limit,
    )

    month = 1
    while working and month <= months_limit:
        _sort_by_rate(working)

        current_emis = sum((loan.emi for loan in working), ZERO)
        surplus_before = max(ZERO, base_cash - current_emis)
        lumps = lumps_by_month.get(month, [])
        lump_total = sum((lp.amount for lp in lumps), ZERO)
        pool = surplus_before + lump_total

        allocations, _ = allocate(working, pool)
        entries = [a.to_entry() for a in allocations]

        for loan in working:
            if loan.paid_off:
                logger.debug("Loan %s paid off in month %d", loan.id, month)
        working = [loan for loan in working if not loan.paid_off]

        total_outstanding = sum((e.balance_after for e in entries), ZERO)
        month_interest = sum((a.interest for a in allocations), ZERO)
        month_paid = sum((a.payment for a in allocations), ZERO)

        row = ScheduleRow(
            month=month,
            date=month_label(start, month),
            surplus_before=round_money(surplus_before),
            lumps_this_month=list(lumps),
            total_interest_this_month=round_money(month_interest),
            total_paid_this_month=round_money(month_paid),
            total_outstanding=round_money(total_outstanding),
            loans=entries,
        )
        recorder.record(row, month_interest, month_paid)
        month += 1

    # Set whenever the counter ran past the cap, even if the last loan
    # was retired in the final allowed month.
    limit_reached = month > months_limit
    summary = recorder.summary(months_limit_reached=limit_reached)
    logger.info(
        "Simulation finished after %d month(s); outstanding %s%s",
        summary.total_months,
        summary.total_outstanding,
        " (months cap reached)" if limit_reached else "",
    )
    return SimulationResult(schedule=recorder.rows, summary=summary)
