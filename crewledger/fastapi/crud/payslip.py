"""
Payslip CRUD operations.

Payslips are built by the payroll core from snapshots of the employee
table and every daily log, then stored as history keyed on employee and
calendar month. Saving over an existing month replaces it.
"""

import logging
from uuid import UUID
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc
from fastapi import HTTPException, status

from crewledger.fastapi.models.employee import Employee
from crewledger.fastapi.models.payslip import Payslip, PayslipLogEntry
from crewledger.fastapi.schemas.payslip import PayslipGenerateRequest, PayslipSave
from crewledger.fastapi.crud.employee import employee_to_snapshot, get_active_employees
from crewledger.fastapi.crud.daily_log import load_log_snapshots
from crewledger.fastapi.core.utils import parse_period_param
from crewledger.payroll import types as ledger
from crewledger.payroll.builder import BulkGenerationResult, build_payslip, bulk_generate
from crewledger.payroll.earnings import period_entries
from crewledger.payroll.exceptions import EmployeeNotFoundError, InvalidInputError
from crewledger.payroll.period import Period

logger = logging.getLogger(__name__)


def payslip_to_snapshot(payslip: Payslip) -> ledger.Payslip:
    return ledger.Payslip(
        id=payslip.id,
        employee_id=payslip.employee_id,
        employee_name=payslip.employee_name,
        employee_position=payslip.employee_position,
        employee_avatar=payslip.employee_avatar,
        period_year=payslip.period_year,
        period_month=payslip.period_month,
        period=payslip.period,
        logs=tuple(
            ledger.PayslipLogEntry(
                log_date=entry.log_date,
                task_name=entry.task_name,
                total_daily_gross=entry.total_daily_gross,
                workers_present=entry.workers_present,
                your_earning=entry.your_earning,
                carried_over=entry.carried_over,
            )
            for entry in payslip.entries
        ),
        gross_salary=payslip.gross_salary,
        allowance=payslip.allowance,
        deduction=payslip.deduction,
        net_salary=payslip.net_salary,
        created_at=payslip.created_at,
    )


def payslip_read_data(payslip: Payslip) -> dict:
    """Shape a stored payslip for the read schema (``entries`` become ``logs``)."""
    return payslip_to_snapshot(payslip).model_dump()


def _employee_snapshots(db: Session) -> List[ledger.Employee]:
    rows = db.query(Employee).filter(Employee.deleted_at.is_(None)).all()
    return [employee_to_snapshot(row) for row in rows]


def preview_payslip(db: Session, request: PayslipGenerateRequest) -> ledger.Payslip:
    """
    Build a payslip without saving it.

    Args:
        db: Database session
        request: Employee, period, allowance, deduction and carry-over logs

    Returns:
        The built payslip

    Raises:
        HTTPException: 404 if the employee does not exist, 422 on an
            invalid period or amount
    """
    period = parse_period_param(request.period)
    try:
        return build_payslip(
            request.employee_id,
            period,
            _employee_snapshots(db),
            load_log_snapshots(db),
            allowance=request.allowance,
            deduction=request.deduction,
            carry_over_log_ids=request.carry_over_log_ids,
        )
    except EmployeeNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc)
        )
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc)
        )


def carry_over_candidates(db: Session, employee_id: UUID, period: Period) -> List[dict]:
    """
    Days from the month before ``period`` on which the employee was present.

    Any of the returned ``log_id`` values may be passed as carry-over logs
    when previewing the payslip for ``period``.
    """
    if not db.query(Employee).filter(Employee.id == employee_id, Employee.deleted_at.is_(None)).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with ID {employee_id} not found"
        )

    return [
        {"log_id": log.id, **entry.model_dump()}
        for log, entry in period_entries(employee_id, period.previous(), load_log_snapshots(db))
    ]


def get_payslip(db: Session, payslip_id: UUID) -> Optional[Payslip]:
    return (
        db.query(Payslip)
        .options(selectinload(Payslip.entries))
        .filter(Payslip.id == payslip_id)
        .first()
    )


def get_payslip_for_period(db: Session, employee_id: UUID, period: Period) -> Optional[Payslip]:
    return (
        db.query(Payslip)
        .filter(
            Payslip.employee_id == employee_id,
            Payslip.period_year == period.year,
            Payslip.period_month == period.month,
        )
        .first()
    )


def _filtered(db: Session, employee_id: Optional[UUID], period: Optional[Period]):
    query = db.query(Payslip)
    if employee_id:
        query = query.filter(Payslip.employee_id == employee_id)
    if period:
        query = query.filter(Payslip.period_year == period.year, Payslip.period_month == period.month)
    return query


def get_payslips(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    employee_id: Optional[UUID] = None,
    period: Optional[Period] = None
) -> List[Payslip]:
    """
    Get payslip history, newest first.

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return
        employee_id: Filter by employee
        period: Filter by calendar month

    Returns:
        List of payslip rows
    """
    return (
        _filtered(db, employee_id, period)
        .options(selectinload(Payslip.entries))
        .order_by(desc(Payslip.created_at), desc(Payslip.period_year), desc(Payslip.period_month))
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_payslips_count(db: Session, employee_id: Optional[UUID] = None, period: Optional[Period] = None) -> int:
    return _filtered(db, employee_id, period).count()


def _store(db: Session, payslip: ledger.Payslip) -> Payslip:
    """Insert or replace the history row for the payslip's employee and month."""
    db_payslip = (
        db.query(Payslip)
        .filter(
            Payslip.employee_id == payslip.employee_id,
            Payslip.period_year == payslip.period_year,
            Payslip.period_month == payslip.period_month,
        )
        .first()
    )
    if db_payslip is None:
        db_payslip = Payslip(id=payslip.id, employee_id=payslip.employee_id)
        db.add(db_payslip)
    else:
        db_payslip.entries.clear()

    db_payslip.employee_name = payslip.employee_name
    db_payslip.employee_position = payslip.employee_position
    db_payslip.employee_avatar = payslip.employee_avatar
    db_payslip.period_year = payslip.period_year
    db_payslip.period_month = payslip.period_month
    db_payslip.period = payslip.period
    db_payslip.gross_salary = payslip.gross_salary
    db_payslip.allowance = payslip.allowance
    db_payslip.deduction = payslip.deduction
    db_payslip.net_salary = payslip.net_salary
    db_payslip.created_at = payslip.created_at

    for position, entry in enumerate(payslip.logs):
        db_payslip.entries.append(PayslipLogEntry(
            position=position,
            log_date=entry.log_date,
            task_name=entry.task_name,
            total_daily_gross=entry.total_daily_gross,
            workers_present=entry.workers_present,
            your_earning=entry.your_earning,
            carried_over=entry.carried_over,
        ))
    return db_payslip


def save_payslip(db: Session, payslip_data: PayslipSave) -> Payslip:
    """
    Build a payslip and commit it to history.

    The payslip is built from the same inputs as the preview, against the
    logs as they are now. An existing payslip for the same employee and
    month is replaced; the stored row keeps its identifier.

    Raises:
        HTTPException: 404 if the employee does not exist, 422 on an
            invalid period or amount
    """
    db_payslip = _store(db, preview_payslip(db, payslip_data))
    db.commit()
    db.refresh(db_payslip)

    logger.info(
        "Saved payslip for %s (%s), net %s",
        db_payslip.employee_name, db_payslip.period, db_payslip.net_salary
    )
    return db_payslip


def bulk_generate_payslips(db: Session, period: Period) -> tuple:
    """
    Generate and save payslips for every active employee with earnings.

    Allowance and deduction are zero. Employees without earnings in the
    period are skipped; an employee that cannot be processed is reported
    and does not stop the run.

    Returns:
        Tuple of (core run result, saved payslip rows)
    """
    employees = [employee_to_snapshot(e) for e in get_active_employees(db)]
    result: BulkGenerationResult = bulk_generate(period, employees, load_log_snapshots(db))

    saved = [_store(db, payslip) for payslip in result.payslips]
    db.commit()
    for db_payslip in saved:
        db.refresh(db_payslip)

    for failure in result.failed:
        logger.warning(
            "Bulk generation failed for %s (%s): %s",
            failure.employee_name, failure.employee_id, failure.reason
        )
    logger.info(
        "Bulk generation for %s: %d active, %d generated, %d skipped",
        period.label, result.total, result.generated, result.skipped
    )
    return result, saved


def delete_payslip(db: Session, payslip_id: UUID) -> bool:
    db_payslip = get_payslip(db, payslip_id)
    if not db_payslip:
        return False

    db.delete(db_payslip)
    db.commit()

    return True
