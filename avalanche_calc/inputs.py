"""Builders turning user-supplied values into a ``SimulationInput``.

Two front ends feed the engine: the command line, which passes loans and
lumpsums as compact ``:``-separated strings, and the web API, which posts a
JSON payload. Both end up here. Malformed values raise ``ValueError``;
arithmetic checks are left to ``validation.validate``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .data_models import (
    DEFAULT_MONTHS_LIMIT,
    CashFlowProfile,
    LoanAccount,
    LumpsumPayment,
    SimulationInput,
)
from .utils import decimal_from_str, month_index_for, parse_year_month, to_decimal

HUNDRED = Decimal("100")


def parse_amount(value: Any) -> Decimal:
    """Parse a numeric value with optional suffixes.

    Accepts numbers, plain numeric strings ("500000", "5,00,000") and
    shorthand with ``k``/``m`` suffixes (e.g. "500k" meaning 500 000).
    """
    if not isinstance(value, str):
        return to_decimal(value)
    text = value.strip().lower().replace(",", "")
    factor = Decimal("1")
    if text.endswith("k"):
        factor = Decimal("1000")
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal("1000000")
        text = text[:-1]
    return decimal_from_str(text) * factor


def parse_percent(value: Any) -> Decimal:
    """Parse an annual rate given as "14", "14%" or "0.14" into a fraction.

    A trailing ``%`` always means a percentage ("0.5%" is half a percent).
    Without it, values of 1 and above are percentages ("1" is 1 %) and values
    below 1 are fractions ("0.14" is 14 %).
    """
    text = str(value).strip()
    explicit = text.endswith("%")
    if explicit:
        text = text[:-1]
    rate = to_decimal(value) if not isinstance(value, str) else decimal_from_str(text)
    if rate.is_finite() and (explicit or rate >= 1):
        rate = rate / HUNDRED
    return rate


def coerce_months_limit(value: Any, default: int = DEFAULT_MONTHS_LIMIT) -> Any:
    """Return the months cap, or ``default`` when unset or unparseable.

    Non-finite numbers are passed through so validation can reject them.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = to_decimal(value)
    except ValueError:
        return default
    if not number.is_finite():
        return number
    return int(number)


def parse_loan_string(item: str, position: int = 1) -> LoanAccount:
    """Parse ``ID:NAME:PRINCIPAL:RATE:EMI`` into a ``LoanAccount``."""
    parts = item.split(":")
    if len(parts) != 5:
        raise ValueError(f"Loan must be in ID:NAME:PRINCIPAL:RATE:EMI format; got {item}")
    loan_id, name, principal, rate, emi = (p.strip() for p in parts)
    loan_id = loan_id or f"loan_{position}"
    return LoanAccount(
        id=loan_id,
        name=name or loan_id,
        principal=parse_amount(principal),
        annual_rate=parse_percent(rate),
        emi=parse_amount(emi),
    )


def parse_lumpsum_string(item: str, start: date) -> LumpsumPayment:
    """Parse ``YYYY-MM:AMOUNT[:NOTE]`` relative to the simulation start."""
    parts = item.split(":", 2)
    if len(parts) < 2:
        raise ValueError(f"Lumpsum must be in YYYY-MM:AMOUNT[:NOTE] format; got {item}")
    ym = parts[0].strip()
    when = parse_year_month(ym)
    note = parts[2].strip() if len(parts) == 3 else ""
    return LumpsumPayment(
        month_index=month_index_for(when, start),
        amount=parse_amount(parts[1]),
        note=note,
        label=when.strftime("%Y-%m"),
    )


def build_input_from_options(
    salary: str,
    extra_income: str,
    expenses: str,
    months_limit: Optional[str],
    loans: Iterable[str],
    lumps: Iterable[str],
    start: date,
) -> SimulationInput:
    return SimulationInput(
        cash_flow=CashFlowProfile(
            salary=parse_amount(salary or "0"),
            extra_income=parse_amount(extra_income or "0"),
            expenses=parse_amount(expenses or "0"),
        ),
        loans=[parse_loan_string(item, i) for i, item in enumerate(loans, start=1)],
        lumps=[parse_lumpsum_string(item, start) for item in lumps],
        months_limit=coerce_months_limit(months_limit),
    )


def _loan_from_mapping(data: Mapping[str, Any], position: int) -> LoanAccount:
    loan_id = str(data.get("id") or f"loan_{position}")
    if "annual_rate" in data:
        rate = to_decimal(data["annual_rate"])
    elif "rate_pct" in data:
        rate = parse_amount(data["rate_pct"]) / HUNDRED
    else:
        raise ValueError(f"Loan {loan_id} needs 'annual_rate' or 'rate_pct'")
    try:
        principal, emi = data["principal"], data["emi"]
    except KeyError as exc:
        raise ValueError(f"Loan {loan_id} is missing {exc.args[0]!r}") from exc
    return LoanAccount(
        id=loan_id,
        name=str(data.get("name") or loan_id),
        principal=parse_amount(principal),
        annual_rate=rate,
        emi=parse_amount(emi),
    )


def _month_index(value: Any) -> int:
    try:
        return int(value)
    except (OverflowError, TypeError, ValueError) as exc:
        raise ValueError(f"Lumpsum month_index must be a whole number; got {value!r}") from exc


def _lump_from_mapping(data: Mapping[str, Any], start: date) -> LumpsumPayment:
    label = str(data.get("label") or "")
    if "month_index" in data:
        month_index = _month_index(data["month_index"])
    elif "month" in data:
        month_index = month_index_for(str(data["month"]), start)
        label = label or str(data["month"]).strip()
    else:
        raise ValueError("Lumpsum needs 'month_index' or 'month'")
    if "amount" not in data:
        raise ValueError("Lumpsum is missing 'amount'")
    return LumpsumPayment(
        month_index=month_index,
        amount=parse_amount(data["amount"]),
        note=str(data.get("note") or ""),
        label=label,
    )


def build_input_from_payload(
    payload: Mapping[str, Any],
    start: date,
    default_months_limit: int = DEFAULT_MONTHS_LIMIT,
) -> SimulationInput:
    """Build a ``SimulationInput`` from a decoded JSON payload.

    Income and expense fields default to zero. Loans without an id get
    ``loan_<n>`` and loans without a name reuse their id.
    """
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a JSON object")
    loans_data: List[Dict[str, Any]] = payload.get("loans") or []
    lumps_data: List[Dict[str, Any]] = payload.get("lumps") or []
    if not isinstance(loans_data, list) or not isinstance(lumps_data, list):
        raise ValueError("'loans' and 'lumps' must be lists")
    try:
        loans = [_loan_from_mapping(d, i) for i, d in enumerate(loans_data, start=1)]
        lumps = [_lump_from_mapping(d, start) for d in lumps_data]
    except (AttributeError, TypeError) as exc:
        raise ValueError("Loans and lumpsums must be JSON objects") from exc
    return SimulationInput(
        cash_flow=CashFlowProfile(
            salary=parse_amount(payload.get("salary") or 0),
            extra_income=parse_amount(payload.get("extra_income") or 0),
            expenses=parse_amount(payload.get("expenses") or 0),
        ),
        loans=loans,
        lumps=lumps,
        months_limit=coerce_months_limit(payload.get("months_limit"), default_months_limit),
    )
