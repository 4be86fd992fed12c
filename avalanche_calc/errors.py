"""Validation errors raised before a simulation starts.

Each kind of failure is its own subclass of ``ValidationError`` and keeps the
offending values as attributes. The human-readable ``message`` is composed
from those attributes on demand.
"""

from __future__ import annotations

from decimal import Decimal


def _amount(value: Decimal) -> str:
    return f"{value:,.2f}"


class ValidationError(ValueError):
    """Base class for every input rejection."""

    def __init__(self) -> None:
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def message(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NonFiniteInput(ValidationError):
    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__()

    @property
    def message(self) -> str:
        return f"{self.field} must be a finite number; got {self.value}."


class DuplicateLoanId(ValidationError):
    def __init__(self, loan_id: str) -> None:
        self.loan_id = loan_id
        super().__init__()

    @property
    def message(self) -> str:
        return f"Loan id {self.loan_id!r} is used by more than one loan."


class InvalidLoanTerms(ValidationError):
    """Negative principal or rate, or a non-positive EMI."""

    def __init__(self, loan_id: str, field: str, value: Decimal) -> None:
        self.loan_id = loan_id
        self.field = field
        self.value = value
        super().__init__()

    @property
    def message(self) -> str:
        if self.field == "emi":
            return f"EMI for loan {self.loan_id} must be positive; got {self.value}."
        return f"{self.field} for loan {self.loan_id} cannot be negative; got {self.value}."


class EmiBelowInterest(ValidationError):
    """The minimum payment does not even cover the first month's interest."""

    def __init__(self, loan_id: str, emi: Decimal, first_interest: Decimal, loan_name: str = "") -> None:
        self.loan_id = loan_id
        self.loan_name = loan_name
        self.emi = emi
        self.first_interest = first_interest
        super().__init__()

    @property
    def message(self) -> str:
        who = self.loan_name or self.loan_id
        return (
            f"EMI for {who} ({_amount(self.emi)}) does not cover "
            f"first-month interest ({_amount(self.first_interest)})."
        )


class InvalidLumpsumMonth(ValidationError):
    def __init__(self, month_index: int) -> None:
        self.month_index = month_index
        super().__init__()

    @property
    def message(self) -> str:
        return (
            f"Lumpsum month index {self.month_index} falls before the first "
            "simulated month (index 1)."
        )


class InvalidLumpsumAmount(ValidationError):
    def __init__(self, amount: Decimal, month_index: int) -> None:
        self.amount = amount
        self.month_index = month_index
        super().__init__()

    @property
    def message(self) -> str:
        return f"Lumpsum in month {self.month_index} must be positive; got {self.amount}."
