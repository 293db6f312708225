"""
Backup export and restore.

A backup is a single JSON document holding every employee, piece rate,
daily log and payslip. Restoring replaces all stored data in one
transaction: either the whole document is written or nothing changes.

Older backups are accepted as they are. Their quirks are repaired on the
way in:

- non-UUID identifiers are mapped to stable UUIDs
- several logs for the same date are merged into one
- employees referenced by logs or payslips but missing from the
  employee list are recreated as deleted placeholders, so headcounts
  and history stay intact
- cached totals are recomputed
- payslips without a usable period are dated from their label, period
  key, first log entry or creation time, in that order
"""

import logging
from uuid import UUID
from datetime import datetime, timezone
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException, status

from crewledger.fastapi.models.employee import Employee
from crewledger.fastapi.models.piece_rate import PieceRate
from crewledger.fastapi.models.daily_log import DailyGroupLog, DailyTask, DailyLogAttendance
from crewledger.fastapi.models.payslip import Payslip, PayslipLogEntry
from crewledger.fastapi.schemas.backup import (
    BackupDocument, BackupEmployee, BackupPieceRate, BackupDailyLog, BackupDailyTask,
    BackupPayslip, BackupPayslipLogEntry, RestoreSummary,
)
from crewledger.fastapi.crud.daily_log import load_log_snapshots
from crewledger.fastapi.crud.payslip import payslip_to_snapshot
from crewledger.fastapi.core.utils import legacy_uuid, normalize_name
from crewledger.payroll import types as ledger
from crewledger.payroll.builder import upsert_history
from crewledger.payroll.earnings import refresh_cached_totals
from crewledger.payroll.exceptions import InvalidInputError
from crewledger.payroll.period import Period
from crewledger.payroll.types import EmployeeStatus

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Unknown employee"


def export_backup(db: Session) -> BackupDocument:
    """Export every record, soft-deleted employees included."""
    employees = [
        BackupEmployee(
            id=str(e.id),
            name=e.name,
            position=e.position or "",
            status=e.status.value,
            profile_picture=e.avatar,
            deleted_at=e.deleted_at,
        )
        for e in db.query(Employee).order_by(Employee.created_at).all()
    ]

    piece_rates = [
        BackupPieceRate(id=str(r.id), task_name=r.task_name, rate=r.rate)
        for r in db.query(PieceRate).order_by(PieceRate.created_at).all()
    ]

    def backup_task(task: ledger.DailyTask) -> BackupDailyTask:
        return BackupDailyTask(
            piece_rate_id=str(task.piece_rate_id) if task.piece_rate_id else None,
            task_name=task.task_name,
            rate=task.rate,
            quantity=task.quantity,
            sub_total=task.sub_total,
        )

    daily_logs = []
    for log in load_log_snapshots(db):
        log = refresh_cached_totals(log)
        daily_logs.append(BackupDailyLog(
            id=str(log.id),
            date=log.log_date,
            tasks=[backup_task(t) for t in log.tasks],
            custom_tasks=[backup_task(t) for t in log.custom_tasks],
            present_employee_ids=[str(i) for i in log.present_employee_ids],
            total_gross_earnings=log.total_gross_earnings,
            individual_earnings=log.individual_earnings,
        ))

    payslips = []
    for row in db.query(Payslip).order_by(Payslip.created_at).all():
        payslip = payslip_to_snapshot(row)
        payslips.append(BackupPayslip(
            id=str(payslip.id),
            employee_id=str(payslip.employee_id),
            employee_name=payslip.employee_name,
            employee_position=payslip.employee_position or "",
            employee_profile_picture=payslip.employee_avatar,
            period=payslip.period,
            period_key=str(Period(payslip.period_year, payslip.period_month)),
            logs=[
                BackupPayslipLogEntry(
                    date=entry.log_date,
                    task_name=entry.task_name,
                    total_daily_gross=entry.total_daily_gross,
                    workers_present=entry.workers_present,
                    your_earning=entry.your_earning,
                    carried_over=entry.carried_over,
                )
                for entry in payslip.logs
            ],
            gross_salary=payslip.gross_salary,
            allowance=payslip.allowance,
            deduction=payslip.deduction,
            net_salary=payslip.net_salary,
            created_at=payslip.created_at,
        ))

    logger.info(
        "Exported backup: %d employees, %d rates, %d logs, %d payslips",
        len(employees), len(piece_rates), len(daily_logs), len(payslips)
    )
    return BackupDocument(
        employees=employees,
        piece_rates=piece_rates,
        daily_logs=daily_logs,
        payslips=payslips,
        exported_at=datetime.now(timezone.utc),
    )


def _employee_status(value: str) -> EmployeeStatus:
    for candidate in EmployeeStatus:
        if candidate.value.lower() == (value or "").strip().lower():
            return candidate
    raise InvalidInputError(f"Unknown employee status '{value}'")


def _task_snapshot(task: BackupDailyTask, rate_ids: set) -> ledger.DailyTask:
    piece_rate_id = legacy_uuid(task.piece_rate_id) if task.piece_rate_id else None
    # Drop references to rates that are no longer in the catalog
    if piece_rate_id not in rate_ids:
        piece_rate_id = None
    return ledger.DailyTask(
        piece_rate_id=piece_rate_id,
        task_name=task.task_name,
        rate=task.rate,
        quantity=task.quantity,
    )


def _merge_logs(logs: List[BackupDailyLog], rate_ids: set) -> tuple:
    """Convert backup logs to snapshots, merging logs that share a date."""
    by_date: Dict = {}
    merged = 0
    for log in logs:
        tasks = tuple(_task_snapshot(t, rate_ids) for t in log.tasks)
        custom = tuple(_task_snapshot(t, rate_ids) for t in (log.custom_tasks or []))
        present = tuple(legacy_uuid(i) for i in log.present_employee_ids)

        existing = by_date.get(log.date)
        if existing is None:
            by_date[log.date] = ledger.DailyGroupLog(
                id=legacy_uuid(log.id),
                log_date=log.date,
                tasks=tasks,
                custom_tasks=custom,
                present_employee_ids=tuple(dict.fromkeys(present)),
            )
            continue

        merged += 1
        by_date[log.date] = existing.model_copy(update={
            "tasks": existing.tasks + tasks,
            "custom_tasks": existing.custom_tasks + custom,
            "present_employee_ids": tuple(dict.fromkeys(existing.present_employee_ids + present)),
        })

    snapshots = [refresh_cached_totals(log) for log in sorted(by_date.values(), key=lambda l: l.log_date)]
    return snapshots, merged


def _payslip_period(payslip: BackupPayslip) -> Period:
    period = Period.from_label(payslip.period) or Period.from_label(payslip.period_key or "")
    if period:
        return period
    if payslip.logs:
        return Period.of(min(entry.date for entry in payslip.logs))
    return Period.of(payslip.created_at)


def _payslip_snapshot(payslip: BackupPayslip) -> ledger.Payslip:
    period = _payslip_period(payslip)
    created_at = payslip.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return ledger.Payslip(
        id=legacy_uuid(payslip.id),
        employee_id=legacy_uuid(payslip.employee_id),
        employee_name=payslip.employee_name,
        employee_position=payslip.employee_position or None,
        employee_avatar=payslip.employee_profile_picture,
        period_year=period.year,
        period_month=period.month,
        period=period.label,
        logs=tuple(
            ledger.PayslipLogEntry(
                log_date=entry.date,
                task_name=entry.task_name,
                total_daily_gross=entry.total_daily_gross,
                workers_present=entry.workers_present,
                your_earning=entry.your_earning,
                carried_over=entry.carried_over,
            )
            for entry in payslip.logs
        ),
        gross_salary=payslip.gross_salary,
        allowance=payslip.allowance,
        deduction=payslip.deduction,
        net_salary=payslip.net_salary,
        created_at=created_at,
    )


def _clear_all(db: Session) -> None:
    for model in (PayslipLogEntry, Payslip, DailyLogAttendance, DailyTask, DailyGroupLog, PieceRate, Employee):
        db.query(model).delete(synchronize_session=False)
    # Restored rows may reuse the identities of rows just deleted
    db.expunge_all()


def _log_rows(snapshot: ledger.DailyGroupLog) -> DailyGroupLog:
    db_log = DailyGroupLog(
        id=snapshot.id,
        log_date=snapshot.log_date,
        total_gross_earnings=snapshot.total_gross_earnings,
        individual_earnings=snapshot.individual_earnings,
    )
    position = 0
    for is_custom, tasks in ((False, snapshot.tasks), (True, snapshot.custom_tasks)):
        for task in tasks:
            db_log.tasks.append(DailyTask(
                piece_rate_id=task.piece_rate_id,
                position=position,
                task_name=task.task_name,
                rate=task.rate,
                quantity=task.quantity,
                sub_total=task.sub_total,
                is_custom=is_custom,
            ))
            position += 1
    for employee_id in snapshot.present_employee_ids:
        db_log.attendance.append(DailyLogAttendance(employee_id=employee_id))
    return db_log


def _payslip_row(payslip: ledger.Payslip) -> Payslip:
    db_payslip = Payslip(
        id=payslip.id,
        employee_id=payslip.employee_id,
        employee_name=payslip.employee_name,
        employee_position=payslip.employee_position,
        employee_avatar=payslip.employee_avatar,
        period_year=payslip.period_year,
        period_month=payslip.period_month,
        period=payslip.period,
        gross_salary=payslip.gross_salary,
        allowance=payslip.allowance,
        deduction=payslip.deduction,
        net_salary=payslip.net_salary,
        created_at=payslip.created_at,
    )
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


def restore_backup(db: Session, document: BackupDocument) -> RestoreSummary:
    """
    Replace all stored data with the contents of a backup document.

    Args:
        db: Database session
        document: Parsed backup

    Returns:
        Counts of the records written

    Raises:
        HTTPException: 422 if the document cannot be restored; the
            existing data is left untouched
    """
    try:
        employees: Dict[UUID, Employee] = {}
        for item in document.employees:
            employee_id = legacy_uuid(item.id)
            employees[employee_id] = Employee(
                id=employee_id,
                name=normalize_name(item.name),
                position=item.position or None,
                status=_employee_status(item.status),
                avatar=item.profile_picture,
                deleted_at=item.deleted_at,
            )

        rates = {}
        for item in document.piece_rates:
            rate_id = legacy_uuid(item.id)
            rates[rate_id] = PieceRate(id=rate_id, task_name=normalize_name(item.task_name), rate=item.rate)

        logs, merged = _merge_logs(document.daily_logs, set(rates))
        payslips = upsert_history([], (_payslip_snapshot(p) for p in document.payslips))

        names: Dict[UUID, Optional[str]] = {}
        for log in logs:
            for employee_id in log.present_employee_ids:
                names.setdefault(employee_id, None)
        for payslip in payslips:
            names[payslip.employee_id] = names.get(payslip.employee_id) or payslip.employee_name

        placeholders = 0
        now = datetime.now(timezone.utc)
        for employee_id, name in names.items():
            if employee_id in employees:
                continue
            employees[employee_id] = Employee(
                id=employee_id,
                name=name or PLACEHOLDER_NAME,
                status=EmployeeStatus.INACTIVE,
                deleted_at=now,
            )
            placeholders += 1

        _clear_all(db)
        db.add_all(employees.values())
        db.add_all(rates.values())
        db.flush()
        db.add_all(_log_rows(log) for log in logs)
        db.add_all(_payslip_row(p) for p in payslips)
        db.commit()
    except (InvalidInputError, SQLAlchemyError, ValueError) as exc:
        db.rollback()
        logger.error("Restore failed, existing data kept: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Backup could not be restored: {exc}"
        )

    if merged or placeholders:
        logger.warning(
            "Restore repaired legacy data: %d duplicate dates merged, %d placeholder employees",
            merged, placeholders
        )
    summary = RestoreSummary(
        employees=len(employees),
        piece_rates=len(rates),
        daily_logs=len(logs),
        payslips=len(payslips),
        merged_duplicate_dates=merged,
        placeholder_employees=placeholders,
    )
    logger.info("Restored backup: %s", summary.model_dump())
    return summary
