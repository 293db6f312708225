"""
Shared pytest fixtures for CrewLedger tests.

Factories build frozen payroll snapshots so unit tests can describe a
crew and its daily logs in a line or two.
"""
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from crewledger.payroll.types import DailyGroupLog, DailyTask, Employee, EmployeeStatus, PieceRate


@pytest.fixture
def make_employee():
    """Factory for employee snapshots."""
    def _make(name="Ayu", status=EmployeeStatus.ACTIVE, position="Picker"):
        return Employee(id=uuid4(), name=name, position=position, status=status)
    return _make


@pytest.fixture
def make_task():
    def _make(task_name="Harvest", rate="10", quantity="20", piece_rate_id=None):
        return DailyTask(
            piece_rate_id=piece_rate_id,
            task_name=task_name,
            rate=Decimal(str(rate)),
            quantity=Decimal(str(quantity)),
        )
    return _make


@pytest.fixture
def make_log(make_task):
    """Factory for daily logs; ``present`` takes employees or ids."""
    def _make(log_date, present, tasks=None, custom_tasks=(), log_id=None, **cached):
        if tasks is None:
            tasks = (make_task(),)
        ids = tuple(getattr(p, "id", p) for p in present)
        return DailyGroupLog(
            id=log_id or uuid4(),
            log_date=log_date,
            tasks=tuple(tasks),
            custom_tasks=tuple(custom_tasks),
            present_employee_ids=ids,
            **cached,
        )
    return _make


@pytest.fixture
def harvest_rate():
    return PieceRate(id=uuid4(), task_name="Harvest", rate=Decimal("10"))


@pytest.fixture
def crew(make_employee):
    """Employees A and B, who work in March 2024, and C, who never does."""
    return {
        "A": make_employee("Ayu"),
        "B": make_employee("Budi"),
        "C": make_employee("Citra"),
    }


@pytest.fixture
def march_log(make_log, crew):
    """Harvest x 20 at rate 10 on 2024-03-05 with A and B present."""
    return make_log(date(2024, 3, 5), [crew["A"], crew["B"]])
