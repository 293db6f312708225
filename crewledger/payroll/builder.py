"""
Payslip generation for single employees and bulk runs.

Building and saving are separate steps: the functions here return
payslips without persisting them, so callers can preview a payslip
before committing it to history with ``upsert_history`` (or the storage
layer's equivalent).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Collection, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from crewledger.payroll.earnings import ZERO, aggregate_earnings
from crewledger.payroll.exceptions import EmployeeNotFoundError, InvalidInputError, PayrollError
from crewledger.payroll.period import Period
from crewledger.payroll.types import DailyGroupLog, Employee, Payslip


@dataclass
class BulkFailure:
    employee_id: UUID
    employee_name: str
    reason: str


@dataclass
class BulkGenerationResult:
    """
    Outcome of a bulk run.

    ``skipped`` counts every considered employee without a payslip,
    i.e. ``total - len(payslips)``; ``failed`` lists the subset that
    could not be processed at all.
    """
    total: int = 0
    payslips: List[Payslip] = field(default_factory=list)
    failed: List[BulkFailure] = field(default_factory=list)

    @property
    def generated(self) -> int:
        return len(self.payslips)

    @property
    def skipped(self) -> int:
        return self.total - self.generated


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_amount(value) -> Decimal:
    """Coerce a user-supplied amount to Decimal."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError:
        raise InvalidInputError(f"Invalid amount '{value}'")
    if not amount.is_finite():
        raise InvalidInputError(f"Invalid amount '{value}'")
    return amount


def _assemble(
    employee: Employee,
    period: Period,
    logs: Iterable[DailyGroupLog],
    allowance: Decimal,
    deduction: Decimal,
    carry_over_log_ids: Collection[UUID],
    created_at: datetime,
) -> Payslip:
    earnings = aggregate_earnings(employee.id, period, logs, carry_over_log_ids)
    return Payslip(
        id=uuid4(),
        employee_id=employee.id,
        employee_name=employee.name,
        employee_position=employee.position,
        employee_avatar=employee.avatar,
        period_year=period.year,
        period_month=period.month,
        period=period.label,
        logs=earnings.entries,
        gross_salary=earnings.gross_salary,
        allowance=allowance,
        deduction=deduction,
        # Not clamped: a negative net salary is a valid result.
        net_salary=earnings.gross_salary + allowance - deduction,
        created_at=created_at,
    )


def find_employee(employee_id: UUID, employees: Iterable[Employee]) -> Employee:
    """
    Look up an employee in a snapshot.

    Raises:
        EmployeeNotFoundError: If the id is not in the collection
    """
    for employee in employees:
        if employee.id == employee_id:
            return employee
    raise EmployeeNotFoundError(employee_id)


def build_payslip(
    employee_id: UUID,
    period: Period,
    employees: Iterable[Employee],
    logs: Iterable[DailyGroupLog],
    allowance=ZERO,
    deduction=ZERO,
    carry_over_log_ids: Collection[UUID] = (),
    created_at: Optional[datetime] = None,
) -> Payslip:
    """
    Build one payslip for one employee and period.

    The employee's name, position and avatar are copied into the payslip,
    so later edits to the employee do not alter it. A period without any
    qualifying logs yields a payslip with zero gross salary. Allowance and
    deduction are taken as given, negative values included.

    Args:
        employee_id: Employee to build for
        period: Calendar month
        employees: Snapshot of known employees
        logs: Snapshot of all daily logs
        allowance: Amount added to the gross salary
        deduction: Amount subtracted from the gross salary
        carry_over_log_ids: Logs from earlier periods to include
        created_at: Creation timestamp, defaults to now (UTC)

    Returns:
        The built, unsaved payslip

    Raises:
        EmployeeNotFoundError: If the employee is not in ``employees``
        InvalidInputError: If allowance or deduction is not a number
    """
    employee = find_employee(employee_id, employees)
    return _assemble(
        employee,
        period,
        logs,
        to_amount(allowance),
        to_amount(deduction),
        carry_over_log_ids,
        created_at or _utcnow(),
    )


def bulk_generate(
    period: Period,
    active_employees: Iterable[Employee],
    logs: Sequence[DailyGroupLog],
    created_at: Optional[datetime] = None,
) -> BulkGenerationResult:
    """
    Generate payslips for every active employee with earnings in a period.

    Allowance and deduction are always zero on this path. Employees whose
    gross salary is zero are left out. An error while processing one
    employee is recorded and the run carries on with the rest.
    """
    created_at = created_at or _utcnow()
    employees = [e for e in active_employees if e.is_active]
    result = BulkGenerationResult(total=len(employees))

    for employee in employees:
        try:
            payslip = _assemble(employee, period, logs, ZERO, ZERO, (), created_at)
        except (PayrollError, ArithmeticError, ValueError, TypeError) as exc:
            result.failed.append(BulkFailure(employee.id, employee.name, str(exc)))
            continue
        if payslip.gross_salary > 0:
            result.payslips.append(payslip)

    return result


def bulk_build_payslips(
    period: Period,
    active_employees: Iterable[Employee],
    logs: Sequence[DailyGroupLog],
) -> List[Payslip]:
    """Bulk-generate and return only the payslips."""
    return bulk_generate(period, active_employees, logs).payslips


def upsert_history(history: Iterable[Payslip], payslips: Iterable[Payslip]) -> List[Payslip]:
    """
    Merge payslips into a history list keyed on (employee, period).

    An existing entry for the same employee and period is replaced in
    place; anything else is appended. The input list is not modified.
    """
    merged = list(history)
    index = {p.history_key: i for i, p in enumerate(merged)}
    for payslip in payslips:
        key: Tuple[UUID, int, int] = payslip.history_key
        if key in index:
            merged[index[key]] = payslip
        else:
            index[key] = len(merged)
            merged.append(payslip)
    return merged
