"""Unit tests for single and bulk payslip building and history upsert."""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from crewledger.payroll import builder
from crewledger.payroll.builder import (
    build_payslip,
    bulk_build_payslips,
    bulk_generate,
    to_amount,
    upsert_history,
)
from crewledger.payroll.exceptions import EmployeeNotFoundError, InvalidInputError
from crewledger.payroll.period import Period
from crewledger.payroll.types import EmployeeStatus


MARCH = Period(2024, 3)


def test_single_payslip_for_harvest_day(crew, march_log):
    """Harvest 20 x 10 shared by two, plus 50 allowance less 20 deduction."""
    payslip = build_payslip(
        crew["A"].id, MARCH, crew.values(), [march_log],
        allowance=Decimal("50"), deduction=Decimal("20"),
    )

    assert payslip.gross_salary == Decimal("100")
    assert payslip.net_salary == Decimal("130")
    assert payslip.period == "March 2024"
    assert (payslip.period_year, payslip.period_month) == (2024, 3)
    assert payslip.employee_name == "Ayu"
    assert payslip.employee_position == "Picker"
    assert len(payslip.logs) == 1
    assert payslip.logs[0].workers_present == 2
    assert payslip.logs[0].total_daily_gross == Decimal("200")


def test_net_salary_may_be_negative(crew, march_log):
    payslip = build_payslip(
        crew["A"].id, MARCH, crew.values(), [march_log],
        allowance=Decimal("10"), deduction=Decimal("500"),
    )

    assert payslip.net_salary == Decimal("-390")
    assert payslip.net_salary == payslip.gross_salary + payslip.allowance - payslip.deduction


def test_negative_allowance_is_accepted(crew, march_log):
    payslip = build_payslip(crew["A"].id, MARCH, crew.values(), [march_log], allowance="-5")

    assert payslip.net_salary == Decimal("95")


def test_period_without_logs_gives_zero_payslip(crew, march_log):
    payslip = build_payslip(crew["A"].id, Period(2024, 5), crew.values(), [march_log])

    assert payslip.logs == ()
    assert payslip.gross_salary == Decimal("0")
    assert payslip.net_salary == Decimal("0")


def test_unknown_employee_raises(crew, march_log):
    with pytest.raises(EmployeeNotFoundError):
        build_payslip(uuid4(), MARCH, crew.values(), [march_log])


def test_invalid_amount_raises(crew, march_log):
    with pytest.raises(InvalidInputError):
        build_payslip(crew["A"].id, MARCH, crew.values(), [march_log], allowance="lots")


@pytest.mark.parametrize("amount", ["NaN", "Infinity", Decimal("-Infinity"), float("nan")])
def test_non_finite_amount_raises(crew, march_log, amount):
    with pytest.raises(InvalidInputError):
        build_payslip(crew["A"].id, MARCH, crew.values(), [march_log], deduction=amount)


def test_to_amount_keeps_decimals():
    assert to_amount(Decimal("1.10")) == Decimal("1.10")
    assert to_amount(2.5) == Decimal("2.5")


def test_employee_details_are_copied(crew, march_log):
    """Renaming an employee later does not alter a built payslip."""
    payslip = build_payslip(crew["A"].id, MARCH, crew.values(), [march_log])
    renamed = crew["A"].model_copy(update={"name": "Ayu Lestari"})

    rebuilt = build_payslip(renamed.id, MARCH, [renamed], [march_log])

    assert payslip.employee_name == "Ayu"
    assert rebuilt.employee_name == "Ayu Lestari"


def test_bulk_scenario_skips_employee_without_days(crew, march_log):
    result = bulk_generate(MARCH, crew.values(), [march_log])

    assert result.total == 3
    assert result.generated == 2
    assert result.skipped == 1
    assert result.failed == []
    assert {p.employee_id for p in result.payslips} == {crew["A"].id, crew["B"].id}
    for payslip in result.payslips:
        assert payslip.gross_salary == Decimal("100")
        assert payslip.net_salary == Decimal("100")
        assert payslip.allowance == Decimal("0")
        assert payslip.deduction == Decimal("0")


def test_bulk_build_returns_payslips_only(crew, march_log):
    payslips = bulk_build_payslips(MARCH, crew.values(), [march_log])

    assert len(payslips) == 2


def test_bulk_includes_single_positive_day(make_employee, make_log, make_task):
    employee = make_employee()
    log = make_log(date(2024, 3, 9), [employee], tasks=[make_task(rate="0.01", quantity="1")])

    result = bulk_generate(MARCH, [employee], [log])

    assert result.generated == 1
    assert result.payslips[0].gross_salary == Decimal("0.01")


def test_bulk_excludes_zero_rate_days(make_employee, make_log, make_task):
    employee = make_employee()
    log = make_log(date(2024, 3, 9), [employee], tasks=[make_task(rate="0", quantity="30")])

    result = bulk_generate(MARCH, [employee], [log])

    assert result.generated == 0
    assert result.skipped == 1


def test_bulk_ignores_inactive_employees(make_employee, make_log):
    active = make_employee("Ayu")
    inactive = make_employee("Dewi", status=EmployeeStatus.INACTIVE)
    log = make_log(date(2024, 3, 5), [active, inactive])

    result = bulk_generate(MARCH, [active, inactive], [log])

    assert result.total == 1
    assert [p.employee_id for p in result.payslips] == [active.id]


def test_bulk_failure_does_not_stop_run(crew, march_log, monkeypatch):
    original = builder.aggregate_earnings

    def failing(employee_id, *args, **kwargs):
        if employee_id == crew["A"].id:
            raise ArithmeticError("corrupt log")
        return original(employee_id, *args, **kwargs)

    monkeypatch.setattr(builder, "aggregate_earnings", failing)

    result = bulk_generate(MARCH, crew.values(), [march_log])

    assert [p.employee_id for p in result.payslips] == [crew["B"].id]
    assert len(result.failed) == 1
    assert result.failed[0].employee_id == crew["A"].id
    assert result.failed[0].reason == "corrupt log"
    assert result.skipped == 2


def test_bulk_payslips_share_creation_time(crew, march_log):
    created = datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)

    result = bulk_generate(MARCH, crew.values(), [march_log], created_at=created)

    assert {p.created_at for p in result.payslips} == {created}


def test_upsert_replaces_same_employee_and_period(crew, march_log):
    first = build_payslip(crew["A"].id, MARCH, crew.values(), [march_log])
    second = build_payslip(crew["A"].id, MARCH, crew.values(), [march_log], allowance="25")

    history = upsert_history(upsert_history([], [first]), [second])

    assert len(history) == 1
    assert history[0].id == second.id
    assert history[0].net_salary == Decimal("125")


def test_upsert_appends_other_periods_and_keeps_input(crew, march_log):
    march = build_payslip(crew["A"].id, MARCH, crew.values(), [march_log])
    april = build_payslip(crew["A"].id, Period(2024, 4), crew.values(), [march_log])
    other = build_payslip(crew["B"].id, MARCH, crew.values(), [march_log])
    history = [march]

    merged = upsert_history(history, [april, other])

    assert [p.id for p in merged] == [march.id, april.id, other.id]
    assert history == [march]
