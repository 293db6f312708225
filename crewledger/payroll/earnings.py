"""
Earnings aggregation.

Turns daily group logs into one employee's earnings for a period. Each
day's gross is split equally among everyone present that day, whatever
tasks they personally did.

Cached totals on a log are never trusted: ``recompute_totals`` derives
them from the tasks and the presence list every time a log is read.
"""

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Collection, Iterable, List, Tuple
from uuid import UUID

from crewledger.payroll.period import Period
from crewledger.payroll.types import (
    DailyGroupLog,
    DailyTask,
    EarningsResult,
    LogTotals,
    PayslipLogEntry,
)


ZERO = Decimal("0")

# Individual shares are kept to sub-cent precision.
SHARE_QUANTUM = Decimal("0.0001")


def task_subtotal(task: DailyTask) -> Decimal:
    """
    Compute ``rate * quantity`` for a task.

    Tasks with a non-positive rate or quantity contribute nothing. They
    cannot be entered through a draft, but may exist in imported data.
    """
    if task.quantity <= 0 or task.rate <= 0:
        return ZERO
    return task.rate * task.quantity


def present_employees(log: DailyGroupLog) -> Tuple[UUID, ...]:
    """Presence list with duplicates removed, in original order."""
    return tuple(dict.fromkeys(log.present_employee_ids))


def recompute_totals(log: DailyGroupLog) -> LogTotals:
    """
    Derive a log's totals from its tasks and presence list.

    This is a pure projection; running it twice yields the same result.
    A log with nobody present has an individual share of zero.
    """
    gross = sum((task_subtotal(task) for task in log.all_tasks), ZERO)
    workers = len(present_employees(log))
    if workers:
        share = (gross / Decimal(workers)).quantize(SHARE_QUANTUM, rounding=ROUND_HALF_EVEN)
    else:
        share = ZERO
    return LogTotals(
        total_gross_earnings=gross,
        individual_earnings=share,
        workers_present=workers,
    )


def is_cache_stale(log: DailyGroupLog) -> bool:
    """Check whether a log's cached totals disagree with its contents."""
    totals = recompute_totals(log)
    if log.total_gross_earnings is None or log.individual_earnings is None:
        return True
    return (
        Decimal(log.total_gross_earnings) != totals.total_gross_earnings
        or Decimal(log.individual_earnings) != totals.individual_earnings
    )


def refresh_cached_totals(log: DailyGroupLog) -> DailyGroupLog:
    """Return a copy of the log with task subtotals and cached totals recomputed."""
    totals = recompute_totals(log)
    return log.model_copy(update={
        "tasks": tuple(t.model_copy(update={"sub_total": task_subtotal(t)}) for t in log.tasks),
        "custom_tasks": tuple(
            t.model_copy(update={"sub_total": task_subtotal(t)}) for t in log.custom_tasks
        ),
        "total_gross_earnings": totals.total_gross_earnings,
        "individual_earnings": totals.individual_earnings,
    })


def _chronological(logs: Iterable[DailyGroupLog]) -> List[DailyGroupLog]:
    return sorted(logs, key=lambda log: (log.log_date, str(log.id)))


def _entry(log: DailyGroupLog, carried_over: bool = False) -> PayslipLogEntry:
    totals = recompute_totals(log)
    return PayslipLogEntry(
        log_date=log.log_date,
        task_name=", ".join(task.task_name for task in log.all_tasks),
        total_daily_gross=totals.total_gross_earnings,
        workers_present=totals.workers_present,
        your_earning=totals.individual_earnings,
        carried_over=carried_over,
    )


def period_entries(
    employee_id: UUID,
    period: Period,
    logs: Iterable[DailyGroupLog],
) -> List[Tuple[DailyGroupLog, PayslipLogEntry]]:
    """
    List the days of a period an employee was present, with their share.

    Used to offer a previous period's days for carry-over before a
    payslip is built.
    """
    matching = [
        log for log in logs
        if period.contains(log.log_date) and employee_id in log.present_employee_ids
    ]
    return [(log, _entry(log)) for log in _chronological(matching)]


def aggregate_earnings(
    employee_id: UUID,
    period: Period,
    logs: Iterable[DailyGroupLog],
    carry_over_log_ids: Collection[UUID] = (),
) -> EarningsResult:
    """
    Compute an employee's payslip entries and gross salary for a period.

    A log contributes when its date falls in the period's calendar month
    and the employee is on its presence list. Logs named in
    ``carry_over_log_ids`` that fall outside the period are included too,
    flagged as carried over and listed before the period's own days.
    A carry-over id pointing at a log inside the period is counted once.

    Args:
        employee_id: Employee to aggregate for
        period: Calendar month to aggregate
        logs: All daily logs (read only)
        carry_over_log_ids: Previous-period logs to include

    Returns:
        Entries in chronological order and their summed earnings
    """
    carry_ids = set(carry_over_log_ids)
    current: List[DailyGroupLog] = []
    carried: List[DailyGroupLog] = []

    for log in logs:
        if employee_id not in log.present_employee_ids:
            continue
        if period.contains(log.log_date):
            current.append(log)
        elif log.id in carry_ids:
            carried.append(log)

    entries = [_entry(log, carried_over=True) for log in _chronological(carried)]
    entries.extend(_entry(log) for log in _chronological(current))

    return EarningsResult(
        entries=tuple(entries),
        gross_salary=sum((entry.your_earning for entry in entries), ZERO),
    )
