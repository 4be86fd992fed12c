import json
from datetime import date
from decimal import Decimal

from avalanche_calc.data_models import CashFlowProfile, LoanAccount, LumpsumPayment, SimulationInput
from avalanche_calc.engine import simulate
from avalanche_calc.export import (
    CSV_HEADER,
    export_to_csv,
    format_number,
    format_rate_pct,
    result_to_dict,
    schedule_to_csv,
)

D = Decimal
START = date(2025, 1, 1)


def run(loans, lumps=(), salary="0"):
    sim_input = SimulationInput(
        cash_flow=CashFlowProfile(salary=D(salary)),
        loans=loans,
        lumps=list(lumps),
    )
    return simulate(sim_input, start=START)


def home_loan(name="Home"):
    return LoanAccount(id="L1", name=name, principal=D("10000"), annual_rate=D("0.12"), emi=D("1000"))


def test_number_formatting():
    assert format_number(D("9100.00")) == "9100"
    assert format_number(D("9100.50")) == "9100.5"
    assert format_number(D("1234.567")) == "1234.57"
    assert format_number(D("0.004")) == "0"
    assert format_rate_pct(D("0.12")) == "12.00"
    assert format_rate_pct(D("0.145")) == "14.50"


def test_csv_rows_match_expected_layout():
    lumps = [LumpsumPayment(month_index=1, amount=D("2000"), note="bonus")]
    lines = schedule_to_csv(run([home_loan()], lumps).schedule).split("\n")

    assert lines[0] == CSV_HEADER
    assert lines[0] == (
        "month,date,surplus_before,total_interest,total_paid,total_outstanding,"
        "lumpsum_amount,lumpsum_note,loan_id,loan_name,loan_rate_pct,interest,emi,"
        "extra_paid,principal_paid,balance_after"
    )
    assert lines[1] == '1,2025-01,0,100,3000,7100,2000,"bonus",L1,Home,12.00,100,1000,2000,2900,7100'
    assert lines[2] == '2,2025-02,0,71,1000,6171,0,"",L1,Home,12.00,71,1000,0,929,6171'


def test_one_line_per_loan_per_month():
    loans = [
        home_loan(),
        LoanAccount(id="L2", name="Car", principal=D("5000"), annual_rate=D("0.10"), emi=D("500")),
    ]
    result = run(loans)
    text = schedule_to_csv(result.schedule)

    expected = sum(len(row.loans) for row in result.schedule)
    assert len(text.split("\n")) == expected + 1
    assert not text.endswith("\n")


def test_notes_are_joined_and_names_quoted():
    lumps = [
        LumpsumPayment(month_index=1, amount=D("100"), note="bonus"),
        LumpsumPayment(month_index=1, amount=D("50"), note='gift "cash"'),
    ]
    line = schedule_to_csv(run([home_loan("Home, main")], lumps).schedule).split("\n")[1]

    assert ',150,"bonus; gift ""cash""",L1,"Home, main",' in line


def test_export_to_csv_writes_file(tmp_path):
    path = tmp_path / "schedule.csv"
    result = run([home_loan()])
    export_to_csv(path, result.schedule)

    assert path.read_text(encoding="utf-8") == schedule_to_csv(result.schedule)


def test_result_dict_is_json_serialisable():
    lumps = [LumpsumPayment(month_index=1, amount=D("2000"), note="bonus", label="2025-01")]
    data = json.loads(json.dumps(result_to_dict(run([home_loan()], lumps))))

    assert data["summary"]["months_limit_reached"] is False
    first = data["schedule"][0]
    assert first["lumps_this_month"] == [{"amount": 2000.0, "note": "bonus", "label": "2025-01"}]
    assert first["loans"][0]["balance_after"] == 7100.0
