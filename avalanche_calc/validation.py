"""Input validation performed before any simulation state is created.

``validate`` walks the whole request and raises the first
``ValidationError`` it finds. It only reads the request.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Iterator, Tuple

from .data_models import EPSILON, SimulationInput
from .errors import (
    DuplicateLoanId,
    EmiBelowInterest,
    InvalidLoanTerms,
    InvalidLumpsumAmount,
    InvalidLumpsumMonth,
    NonFiniteInput,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _is_finite(value: object) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return True


def _numeric_fields(sim_input: SimulationInput) -> Iterator[Tuple[str, object]]:
    cash = sim_input.cash_flow
    yield "salary", cash.salary
    yield "extra_income", cash.extra_income
    yield "expenses", cash.expenses
    yield "months_limit", sim_input.months_limit
    for loan in sim_input.loans:
        yield f"loans[{loan.id}].principal", loan.principal
        yield f"loans[{loan.id}].annual_rate", loan.annual_rate
        yield f"loans[{loan.id}].emi", loan.emi
    for lump in sim_input.lumps:
        yield f"lumps[{lump.month_index}].amount", lump.amount


def first_month_interest(principal: Decimal, annual_rate: Decimal) -> Decimal:
    return principal * (annual_rate / 12)


def _check(sim_input: SimulationInput) -> None:
    for name, value in _numeric_fields(sim_input):
        if not _is_finite(value):
            raise NonFiniteInput(name, value)

    seen = set()
    for loan in sim_input.loans:
        if loan.id in seen:
            raise DuplicateLoanId(loan.id)
        seen.add(loan.id)

    for loan in sim_input.loans:
        if loan.principal < 0:
            raise InvalidLoanTerms(loan.id, "principal", loan.principal)
        if loan.annual_rate < 0:
            raise InvalidLoanTerms(loan.id, "annual_rate", loan.annual_rate)

    for loan in sim_input.loans:
        interest = first_month_interest(loan.principal, loan.annual_rate)
        if loan.emi <= interest - EPSILON:
            raise EmiBelowInterest(loan.id, loan.emi, interest, loan_name=loan.name)
        # Interest-free loans pass the check above with any EMI.
        if loan.emi <= 0:
            raise InvalidLoanTerms(loan.id, "emi", loan.emi)

    for lump in sim_input.lumps:
        if lump.month_index < 1:
            raise InvalidLumpsumMonth(lump.month_index)
        if lump.amount <= 0:
            raise InvalidLumpsumAmount(lump.amount, lump.month_index)


def validate(sim_input: SimulationInput) -> None:
    """Raise ``ValidationError`` if ``sim_input`` cannot be simulated.

    Non-finite numbers are checked first, then duplicate ids, negative
    principal or rate, EMI versus first-month interest and finally the
    lumpsums. The first failure is raised.
    """
    try:
        _check(sim_input)
    except ValidationError as exc:
        logger.info("Rejected simulation input: %s", exc.kind)
        raise
