"""
Employee CRUD operations.

This module provides Create, Read, Update, Delete operations for crew
members, plus conversion of employee rows into payroll core snapshots.
"""

import logging
from uuid import UUID
from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import asc

from crewledger.fastapi.models.employee import Employee
from crewledger.fastapi.schemas.employee import EmployeeCreate, EmployeeUpdate
from crewledger.fastapi.core.utils import normalize_name
from crewledger.payroll import types as ledger
from crewledger.payroll.types import EmployeeStatus

logger = logging.getLogger(__name__)


def employee_to_snapshot(employee: Employee) -> ledger.Employee:
    """Copy an employee row into an immutable core value."""
    return ledger.Employee(
        id=employee.id,
        name=employee.name,
        position=employee.position,
        status=employee.status,
        avatar=employee.avatar,
    )


def create_employee(db: Session, employee_data: EmployeeCreate) -> Employee:
    """
    Create a new employee.

    Args:
        db: Database session
        employee_data: Employee creation data

    Returns:
        Created employee instance
    """
    db_employee = Employee(
        name=normalize_name(employee_data.name),
        position=employee_data.position,
        status=employee_data.status,
        avatar=employee_data.avatar
    )

    db.add(db_employee)
    db.commit()
    db.refresh(db_employee)

    logger.info("Created employee %s (%s)", db_employee.name, db_employee.id)
    return db_employee


def get_employee(db: Session, employee_id: UUID, include_deleted: bool = False) -> Optional[Employee]:
    """
    Get an employee by ID.

    Args:
        db: Database session
        employee_id: Employee unique identifier
        include_deleted: Also return soft-deleted employees

    Returns:
        Employee instance if found, None otherwise
    """
    query = db.query(Employee).filter(Employee.id == employee_id)
    if not include_deleted:
        query = query.filter(Employee.deleted_at.is_(None))
    return query.first()


def _filtered(db: Session, status: Optional[EmployeeStatus], search: Optional[str]):
    query = db.query(Employee).filter(Employee.deleted_at.is_(None))
    if status:
        query = query.filter(Employee.status == status)
    if search:
        query = query.filter(Employee.name.ilike(f"%{search.strip()}%"))
    return query


def get_employees(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    status: Optional[EmployeeStatus] = None,
    search: Optional[str] = None
) -> List[Employee]:
    """
    Get a list of employees, ordered by name.

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return
        status: Filter by lifecycle status
        search: Case-insensitive name filter

    Returns:
        List of employee instances (soft-deleted ones excluded)
    """
    return (
        _filtered(db, status, search)
        .order_by(asc(Employee.name))
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_employees_count(
    db: Session,
    status: Optional[EmployeeStatus] = None,
    search: Optional[str] = None
) -> int:
    """Count employees matching the same filters as get_employees."""
    return _filtered(db, status, search).count()


def get_active_employees(db: Session) -> List[Employee]:
    """All employees who can be marked present and are included in bulk runs."""
    return (
        db.query(Employee)
        .filter(Employee.status == EmployeeStatus.ACTIVE, Employee.deleted_at.is_(None))
        .order_by(asc(Employee.name))
        .all()
    )


def update_employee(db: Session, employee_id: UUID, employee_update: EmployeeUpdate) -> Optional[Employee]:
    """
    Update an existing employee.

    Payslips already generated keep the name, position and avatar they
    were generated with.

    Returns:
        Updated employee instance if found, None otherwise
    """
    db_employee = get_employee(db, employee_id)
    if not db_employee:
        return None

    update_data = employee_update.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is not None:
        update_data["name"] = normalize_name(update_data["name"])
    for field, value in update_data.items():
        if value is None and field in ("name", "status"):
            continue
        setattr(db_employee, field, value)

    db.commit()
    db.refresh(db_employee)

    return db_employee


def set_employee_status(db: Session, employee_id: UUID, status: EmployeeStatus) -> Optional[Employee]:
    """Switch an employee between Active and Inactive."""
    db_employee = get_employee(db, employee_id)
    if not db_employee:
        return None

    db_employee.status = status
    db.commit()
    db.refresh(db_employee)

    logger.info("Employee %s is now %s", db_employee.id, status.value)
    return db_employee


def delete_employee(db: Session, employee_id: UUID) -> bool:
    """
    Soft delete an employee.

    Daily logs and payslips that reference the employee are left as they
    are.

    Returns:
        True if the employee was deleted, False if not found
    """
    db_employee = get_employee(db, employee_id)
    if not db_employee:
        return False

    db_employee.deleted_at = datetime.now(timezone.utc)
    db.commit()

    return True
