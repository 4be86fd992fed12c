from datetime import date
from decimal import Decimal

import pytest

from avalanche_calc.data_models import DEFAULT_MONTHS_LIMIT
from avalanche_calc.errors import InvalidLumpsumMonth
from avalanche_calc.inputs import (
    build_input_from_options,
    build_input_from_payload,
    coerce_months_limit,
    parse_amount,
    parse_loan_string,
    parse_lumpsum_string,
    parse_percent,
)
from avalanche_calc.utils import month_index_for
from avalanche_calc.validation import validate

D = Decimal
START = date(2025, 1, 1)


def test_parse_amount_suffixes():
    assert parse_amount("500k") == D("500000")
    assert parse_amount("1.5m") == D("1500000")
    assert parse_amount("5,00,000") == D("500000")
    assert parse_amount(2500) == D("2500")
    with pytest.raises(ValueError):
        parse_amount("lots")


@pytest.mark.parametrize("value", ["14", "14%", "0.14", 14, 0.14])
def test_parse_percent(value):
    assert parse_percent(value) == D("0.14")


def test_parse_percent_boundaries():
    assert parse_percent("1") == D("0.01")
    assert parse_percent(1) == D("0.01")
    assert parse_percent("0.5%") == D("0.005")
    assert parse_percent("0.99") == D("0.99")
    assert parse_loan_string("L1:Home:10000:1:1000").annual_rate == D("0.01")


def test_months_limit_defaults():
    assert coerce_months_limit(None) == DEFAULT_MONTHS_LIMIT
    assert coerce_months_limit("") == DEFAULT_MONTHS_LIMIT
    assert coerce_months_limit("soon") == DEFAULT_MONTHS_LIMIT
    assert coerce_months_limit("24") == 24
    assert coerce_months_limit(0) == 0
    assert not coerce_months_limit(float("inf")).is_finite()


def test_parse_loan_string():
    loan = parse_loan_string("L2:Car loan:100k:12:6000")
    assert (loan.id, loan.name) == ("L2", "Car loan")
    assert loan.principal == D("100000")
    assert loan.annual_rate == D("0.12")
    assert loan.emi == D("6000")

    with pytest.raises(ValueError):
        parse_loan_string("L2:Car loan:100k")


def test_parse_lumpsum_string():
    lump = parse_lumpsum_string("2025-03:50k:annual bonus", START)
    assert lump.month_index == 3
    assert lump.amount == D("50000")
    assert lump.note == "annual bonus"
    assert lump.label == "2025-03"


def test_month_index_convention():
    assert month_index_for("2025-01", START) == 1
    assert month_index_for("2026-02", START) == 14
    assert month_index_for("2024-12", START) == 0


def test_lumpsum_before_start_fails_validation():
    sim_input = build_input_from_options(
        "80000", "0", "40000", None, ["L1:Home:10000:12:1000"], ["2024-12:1000"], START
    )
    with pytest.raises(InvalidLumpsumMonth):
        validate(sim_input)


def test_build_input_from_payload_fills_defaults():
    payload = {
        "salary": 80000,
        "extra_income": "10,000",
        "expenses": 40000,
        "loans": [
            {"principal": 50000, "emi": 3000, "annual_rate": 0.14},
            {"id": "CAR", "name": "Car loan", "principal": "100k", "emi": 6000, "rate_pct": 12},
        ],
        "lumps": [
            {"month": "2025-04", "amount": 20000, "note": "bonus"},
            {"month_index": 2, "amount": 500},
        ],
    }
    sim_input = build_input_from_payload(payload, START)

    assert sim_input.cash_flow.base_monthly_cash == D("50000")
    assert sim_input.months_limit == DEFAULT_MONTHS_LIMIT
    first, second = sim_input.loans
    assert (first.id, first.name, first.annual_rate) == ("loan_1", "loan_1", D("0.14"))
    assert (second.id, second.annual_rate, second.principal) == ("CAR", D("0.12"), D("100000"))
    assert [(lp.month_index, lp.label) for lp in sim_input.lumps] == [(4, "2025-04"), (2, "")]


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"loans": [{"emi": 100, "annual_rate": 0.1}]},
        {"loans": [{"principal": 100, "emi": 100}]},
        {"loans": ["L1"]},
        {"lumps": [{"amount": 10}]},
        {"lumps": [{"month_index": float("inf"), "amount": 10}]},
        {"lumps": [{"month_index": "soon", "amount": 10}]},
        {"salary": "a lot"},
    ],
)
def test_malformed_payloads_raise_value_error(payload):
    with pytest.raises(ValueError):
        build_input_from_payload(payload, START)
