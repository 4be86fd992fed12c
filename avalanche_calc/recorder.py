"""Accumulation of monthly rows into a schedule and its summary."""

from __future__ import annotations

from decimal import Decimal
from typing import List

from .data_models import ScheduleRow, Summary
from .utils import round_money


class ScheduleRecorder:
    """Append-only schedule plus running interest and payment totals.

    ``fallback_outstanding`` is reported as the final outstanding balance when
    no month was simulated at all.
    """

    def __init__(self, fallback_outstanding: Decimal = Decimal("0")) -> None:
        self.rows: List[ScheduleRow] = []
        self.total_interest = Decimal("0")
        self.total_paid = Decimal("0")
        self._fallback_outstanding = fallback_outstanding

    def record(self, row: ScheduleRow, month_interest: Decimal, month_paid: Decimal) -> None:
        """Append ``row``; the totals take the unrounded monthly figures."""
        self.rows.append(row)
        self.total_interest += month_interest
        self.total_paid += month_paid

    def summary(self, months_limit_reached: bool) -> Summary:
        if self.rows:
            outstanding = self.rows[-1].total_outstanding
        else:
            outstanding = self._fallback_outstanding
        return Summary(
            total_months=len(self.rows),
            total_interest_paid=round_money(self.total_interest),
            total_paid=round_money(self.total_paid),
            total_outstanding=round_money(outstanding),
            months_limit_reached=months_limit_reached,
        )
