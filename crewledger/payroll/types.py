"""
Immutable value objects consumed and produced by the payroll core.

The storage layer converts its rows into these models before calling the
aggregator or the payslip builder, so every build call works on a frozen
snapshot of employees and logs rather than on live, mutable collections.
"""

from uuid import UUID
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class EmployeeStatus(str, Enum):
    """Lifecycle status of an employee (manual toggle)."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


class Employee(_Snapshot):
    """Employee identity and the display fields copied onto payslips."""

    id: UUID
    name: str
    position: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    avatar: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE


class PieceRate(_Snapshot):
    """A catalog entry: task name and rate per unit."""

    id: UUID
    task_name: str
    rate: Decimal


class DailyTask(_Snapshot):
    """
    A task performed on a given day.

    ``task_name`` and ``rate`` are value copies taken from the catalog when
    the task was entered. ``sub_total`` is a cached value; readers use
    ``earnings.task_subtotal`` instead of trusting it.
    """

    piece_rate_id: Optional[UUID] = None
    task_name: str
    rate: Decimal
    quantity: Decimal
    sub_total: Optional[Decimal] = None


class LogTotals(_Snapshot):
    """Recomputed aggregate figures for one daily log."""

    total_gross_earnings: Decimal
    individual_earnings: Decimal
    workers_present: int


class DailyGroupLog(_Snapshot):
    """
    The work of one group on one calendar day.

    ``custom_tasks`` holds ad hoc tasks without a catalog reference; they
    contribute to the day's earnings exactly like catalog tasks. The two
    ``*_earnings`` fields are a cache and may be missing or stale on
    records written by older versions.
    """

    id: UUID
    log_date: date
    tasks: Tuple[DailyTask, ...] = ()
    custom_tasks: Tuple[DailyTask, ...] = ()
    present_employee_ids: Tuple[UUID, ...] = ()
    total_gross_earnings: Optional[Decimal] = None
    individual_earnings: Optional[Decimal] = None

    @property
    def all_tasks(self) -> Tuple[DailyTask, ...]:
        return self.tasks + self.custom_tasks


class PayslipLogEntry(_Snapshot):
    """One contributing day in a payslip's audit trail."""

    log_date: date
    task_name: str
    total_daily_gross: Decimal
    workers_present: int
    your_earning: Decimal
    carried_over: bool = False


class EarningsResult(_Snapshot):
    """Output of the aggregator for one employee and period."""

    entries: Tuple[PayslipLogEntry, ...] = ()
    gross_salary: Decimal = Decimal("0")


class Payslip(_Snapshot):
    """A payslip as generated; never recomputed after the fact."""

    id: UUID
    employee_id: UUID
    employee_name: str
    employee_position: Optional[str] = None
    employee_avatar: Optional[str] = None
    period_year: int = Field(..., ge=1, le=9999)
    period_month: int = Field(..., ge=1, le=12)
    period: str
    logs: Tuple[PayslipLogEntry, ...] = ()
    gross_salary: Decimal
    allowance: Decimal = Decimal("0")
    deduction: Decimal = Decimal("0")
    net_salary: Decimal
    created_at: datetime

    @property
    def history_key(self) -> Tuple[UUID, int, int]:
        """Identity used when merging into payslip history."""
        return (self.employee_id, self.period_year, self.period_month)
