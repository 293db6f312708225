"""
Editing protocol for daily group logs.

A date is either absent, being drafted, or saved. A draft is composed by
adding tasks one at a time and toggling who was present; saving turns it
into an immutable ``DailyGroupLog`` with freshly computed totals. Opening
a saved log for correction loads it back into a draft.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from crewledger.payroll.earnings import recompute_totals, refresh_cached_totals, task_subtotal
from crewledger.payroll.exceptions import InvalidInputError
from crewledger.payroll.types import DailyGroupLog, DailyTask, LogTotals, PieceRate


def _positive(value, field_name: str) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError:
        raise InvalidInputError(f"{field_name} must be a number, got '{value}'")
    if not amount.is_finite() or amount <= 0:
        raise InvalidInputError(f"{field_name} must be greater than zero, got {value}")
    return amount


class DailyLogDraft:
    """In-memory daily log being composed or corrected."""

    def __init__(self, log_date: date, log_id: Optional[UUID] = None):
        self.log_date = log_date
        self.log_id = log_id
        self.tasks: List[DailyTask] = []
        self.custom_tasks: List[DailyTask] = []
        self.present_employee_ids: List[UUID] = []

    @classmethod
    def from_log(cls, log: DailyGroupLog) -> "DailyLogDraft":
        """Re-open a saved log; its task snapshots are kept as they are."""
        draft = cls(log.log_date, log_id=log.id)
        draft.tasks = list(log.tasks)
        draft.custom_tasks = list(log.custom_tasks)
        draft.present_employee_ids = list(dict.fromkeys(log.present_employee_ids))
        return draft

    def add_task(self, piece_rate: PieceRate, quantity) -> DailyTask:
        """
        Add a catalog task, copying the rate's current name and value.

        Raises:
            InvalidInputError: If the quantity or the catalog rate is not positive
        """
        rate = _positive(piece_rate.rate, "Rate")
        task = DailyTask(
            piece_rate_id=piece_rate.id,
            task_name=piece_rate.task_name,
            rate=rate,
            quantity=_positive(quantity, "Quantity"),
        )
        task = task.model_copy(update={"sub_total": task_subtotal(task)})
        self.tasks.append(task)
        return task

    def add_snapshot_task(self, task: DailyTask) -> DailyTask:
        """Add a task that already carries its snapshot (e.g. from a re-opened log)."""
        _positive(task.rate, "Rate")
        _positive(task.quantity, "Quantity")
        task = task.model_copy(update={"sub_total": task_subtotal(task)})
        self.tasks.append(task)
        return task

    def add_custom_task(self, task_name: str, rate, quantity) -> DailyTask:
        """Add an ad hoc task that has no catalog entry."""
        if not task_name or not task_name.strip():
            raise InvalidInputError("Custom task name is required")
        task = DailyTask(
            task_name=task_name.strip(),
            rate=_positive(rate, "Rate"),
            quantity=_positive(quantity, "Quantity"),
        )
        task = task.model_copy(update={"sub_total": task_subtotal(task)})
        self.custom_tasks.append(task)
        return task

    def remove_task(self, index: int) -> DailyTask:
        try:
            return self.tasks.pop(index)
        except IndexError:
            raise InvalidInputError(f"No task at position {index}")

    def remove_custom_task(self, index: int) -> DailyTask:
        try:
            return self.custom_tasks.pop(index)
        except IndexError:
            raise InvalidInputError(f"No custom task at position {index}")

    def toggle_employee(self, employee_id: UUID) -> bool:
        """Flip an employee's presence; returns True if now present."""
        if employee_id in self.present_employee_ids:
            self.present_employee_ids.remove(employee_id)
            return False
        self.present_employee_ids.append(employee_id)
        return True

    def set_present(self, employee_ids: Iterable[UUID]) -> None:
        self.present_employee_ids = list(dict.fromkeys(employee_ids))

    def _as_log(self, log_id: UUID) -> DailyGroupLog:
        return DailyGroupLog(
            id=log_id,
            log_date=self.log_date,
            tasks=tuple(self.tasks),
            custom_tasks=tuple(self.custom_tasks),
            present_employee_ids=tuple(self.present_employee_ids),
        )

    @property
    def totals(self) -> LogTotals:
        """Running totals while the draft is edited."""
        return recompute_totals(self._as_log(self.log_id or uuid4()))

    def to_log(self, log_id: Optional[UUID] = None) -> DailyGroupLog:
        """
        Finish the draft.

        Args:
            log_id: Identity to assign; defaults to the re-opened log's id
                or a new one

        Returns:
            The saved form of the log with cached totals filled in

        Raises:
            InvalidInputError: If there are no tasks or nobody is present
        """
        if self.log_date is None:
            raise InvalidInputError("A log date is required")
        if not self.tasks and not self.custom_tasks:
            raise InvalidInputError("At least one task is required to save a daily log")
        if not self.present_employee_ids:
            raise InvalidInputError("At least one employee must be present to save a daily log")
        return refresh_cached_totals(self._as_log(log_id or self.log_id or uuid4()))
