"""Data models for the avalanche calculator.

This module defines dataclasses representing the entities used by the
simulator: the loans being repaid, the household cash flow, one-time lumpsum
payments, the request that bundles them and the schedule produced by a run.
Monetary values are ``Decimal`` throughout; annual rates are decimal fractions
(``Decimal("0.12")`` means 12 %).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

EPSILON = Decimal("1e-9")
DEFAULT_MONTHS_LIMIT = 600


@dataclass(frozen=True)
class LoanAccount:
    """An installment loan as entered by the user.

    Attributes
    ----------
    id: str
        Unique identifier of the loan.
    name: str
        Display name used in messages and exports.
    principal: Decimal
        Outstanding principal at the start of the simulation.
    annual_rate: Decimal
        Nominal annual interest rate as a fraction; interest compounds monthly
        at ``annual_rate / 12``.
    emi: Decimal
        The fixed minimum monthly installment.
    """

    id: str
    name: str
    principal: Decimal
    annual_rate: Decimal
    emi: Decimal


@dataclass(frozen=True)
class CashFlowProfile:
    """Recurring monthly income and spending."""

    salary: Decimal = Decimal("0")
    extra_income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def base_monthly_cash(self) -> Decimal:
        # Not floored: a negative value simply leaves nothing for prepayment.
        return self.salary + self.extra_income - self.expenses


@dataclass(frozen=True)
class LumpsumPayment:
    """A one-time extra payment.

    ``month_index`` is 1-based: index 1 is the calendar month in which the
    simulation starts.
    """

    month_index: int
    amount: Decimal
    note: str = ""
    label: str = ""


@dataclass(frozen=True)
class SimulationInput:
    """Everything a simulation run needs, collected into one immutable value."""

    cash_flow: CashFlowProfile
    loans: List[LoanAccount]
    lumps: List[LumpsumPayment] = field(default_factory=list)
    months_limit: int = DEFAULT_MONTHS_LIMIT


@dataclass
class LoanLedgerEntry:
    """What happened to one loan in one month, rounded to 2 decimals."""

    id: str
    name: str
    rate: Decimal
    interest: Decimal
    emi: Decimal
    extra_paid: Decimal
    principal_paid: Decimal
    balance_after: Decimal
    payment: Decimal


@dataclass
class ScheduleRow:
    """One simulated month.

    ``lumps_this_month`` holds the lumpsums consumed in this month and
    ``loans`` one ledger entry per loan that was active when the month began,
    ordered by descending rate.
    """

    month: int
    date: str  # YYYY-MM
    surplus_before: Decimal
    lumps_this_month: List[LumpsumPayment]
    total_interest_this_month: Decimal
    total_paid_this_month: Decimal
    total_outstanding: Decimal
    loans: List[LoanLedgerEntry]

    @property
    def lumpsum_total(self) -> Decimal:
        return sum((lp.amount for lp in self.lumps_this_month), Decimal("0"))


@dataclass
class Summary:
    total_months: int
    total_interest_paid: Decimal
    total_paid: Decimal
    total_outstanding: Decimal
    months_limit_reached: bool


@dataclass
class SimulationResult:
    schedule: List[ScheduleRow]
    summary: Summary
