"""Monthly payment allocation across the active loans.

Loans are paid in the order given (highest rate first). Each loan receives its
EMI plus whatever is left in the month's surplus pool; when that would more
than retire the loan, only the payoff amount is taken and the rest of the pool
moves on to the next loan.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Tuple

from .data_models import EPSILON, LoanAccount, LoanLedgerEntry
from .utils import round_money

ZERO = Decimal("0")


@dataclass
class WorkingLoan:
    """The engine's private, mutable copy of a ``LoanAccount``."""

    id: str
    name: str
    principal: Decimal
    annual_rate: Decimal
    emi: Decimal

    @classmethod
    def from_account(cls, account: LoanAccount) -> "WorkingLoan":
        return cls(
            id=account.id,
            name=account.name,
            principal=account.principal,
            annual_rate=account.annual_rate,
            emi=account.emi,
        )

    @property
    def monthly_rate(self) -> Decimal:
        return self.annual_rate / 12

    @property
    def paid_off(self) -> bool:
        return self.principal <= EPSILON


@dataclass
class Allocation:
    """Unrounded result of paying one loan for one month."""

    loan: WorkingLoan
    interest: Decimal
    payment: Decimal
    extra_paid: Decimal
    principal_paid: Decimal

    def to_entry(self) -> LoanLedgerEntry:
        return LoanLedgerEntry(
            id=self.loan.id,
            name=self.loan.name,
            rate=self.loan.annual_rate,
            interest=round_money(self.interest),
            emi=round_money(self.loan.emi),
            extra_paid=round_money(self.extra_paid),
            principal_paid=round_money(self.principal_paid),
            balance_after=round_money(self.loan.principal),
            payment=round_money(self.payment),
        )


def pay_loan(loan: WorkingLoan, pool: Decimal) -> Tuple[Allocation, Decimal]:
    """Pay one month on ``loan`` from its EMI and ``pool``.

    Returns the allocation and what is left of the pool for the next loan.
    ``loan.principal`` is reduced in place.
    """
    interest = loan.principal * loan.monthly_rate
    payment = loan.emi
    extra_paid = ZERO
    if pool > 0:
        extra_paid = pool
        payment += extra_paid

    payoff_amount = loan.principal + interest
    if payment >= payoff_amount - EPSILON:
        payment = payoff_amount
        used_extra = max(ZERO, payoff_amount - loan.emi)
        pool = max(ZERO, pool - used_extra)
        extra_paid = used_extra
    else:
        extra_paid = min(extra_paid, pool)
        pool = ZERO

    principal_paid = payment - interest
    loan.principal = max(ZERO, loan.principal - principal_paid)
    return Allocation(loan, interest, payment, extra_paid, principal_paid), pool


def allocate(loans: List[WorkingLoan], pool: Decimal) -> Tuple[List[Allocation], Decimal]:
    """Run one month of the cascade over ``loans``.

    Parameters
    ----------
    loans: List[WorkingLoan]
        Active loans sorted by descending annual rate. Principals are updated
        in place.
    pool: Decimal
        Surplus available this month on top of the EMIs (recurring surplus
        plus lumpsums due). Must not be negative.

    Returns
    -------
    allocations: List[Allocation]
        One allocation per loan, in the order paid.
    remaining: Decimal
        Pool left over after every loan was retired; zero otherwise.
    """
    allocations: List[Allocation] = []
    for loan in loans:
        allocation, pool = pay_loan(loan, pool)
        allocations.append(allocation)
    return allocations, pool
