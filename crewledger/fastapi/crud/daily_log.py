"""
Daily group log CRUD operations.

Saving a date goes through ``DailyLogDraft`` so the same validation and
total computation apply whatever the caller sends. Reads never trust the
cached totals stored on a row; they are recomputed from the tasks and the
presence list.
"""

import logging
from uuid import UUID
from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc, extract
from fastapi import HTTPException, status

from crewledger.fastapi.models.daily_log import DailyGroupLog, DailyTask, DailyLogAttendance
from crewledger.fastapi.models.employee import Employee
from crewledger.fastapi.schemas.daily_log import DailyLogUpsert, DailyLogRead, DailyTaskRead
from crewledger.fastapi.crud.piece_rate import get_piece_rate, piece_rate_to_snapshot
from crewledger.payroll import types as ledger
from crewledger.payroll.draft import DailyLogDraft
from crewledger.payroll.earnings import is_cache_stale, recompute_totals, refresh_cached_totals, task_subtotal
from crewledger.payroll.exceptions import InvalidInputError
from crewledger.payroll.period import Period

logger = logging.getLogger(__name__)


def _task_snapshot(task: DailyTask) -> ledger.DailyTask:
    return ledger.DailyTask(
        piece_rate_id=task.piece_rate_id,
        task_name=task.task_name,
        rate=task.rate,
        quantity=task.quantity,
        sub_total=task.sub_total,
    )


def log_to_snapshot(log: DailyGroupLog) -> ledger.DailyGroupLog:
    """Copy a log row, its tasks and its presence list into a core value."""
    return ledger.DailyGroupLog(
        id=log.id,
        log_date=log.log_date,
        tasks=tuple(_task_snapshot(t) for t in log.tasks if not t.is_custom),
        custom_tasks=tuple(_task_snapshot(t) for t in log.tasks if t.is_custom),
        present_employee_ids=tuple(log.present_employee_ids),
        total_gross_earnings=log.total_gross_earnings,
        individual_earnings=log.individual_earnings,
    )


def _log_query(db: Session):
    return db.query(DailyGroupLog).options(
        selectinload(DailyGroupLog.tasks),
        selectinload(DailyGroupLog.attendance),
    )


def _period_filter(query, period: Optional[Period]):
    if period is None:
        return query
    return query.filter(
        extract("year", DailyGroupLog.log_date) == period.year,
        extract("month", DailyGroupLog.log_date) == period.month,
    )


def get_daily_log(db: Session, log_id: UUID) -> Optional[DailyGroupLog]:
    return _log_query(db).filter(DailyGroupLog.id == log_id).first()


def get_daily_log_by_date(db: Session, log_date: date) -> Optional[DailyGroupLog]:
    return _log_query(db).filter(DailyGroupLog.log_date == log_date).first()


def get_daily_logs(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    period: Optional[Period] = None
) -> List[DailyGroupLog]:
    """
    Get daily logs, newest date first.

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return
        period: Only logs dated within this calendar month

    Returns:
        List of daily log rows
    """
    query = _period_filter(_log_query(db), period)
    return query.order_by(desc(DailyGroupLog.log_date)).offset(skip).limit(limit).all()


def get_daily_logs_count(db: Session, period: Optional[Period] = None) -> int:
    return _period_filter(db.query(DailyGroupLog), period).count()


def load_log_snapshots(db: Session) -> List[ledger.DailyGroupLog]:
    """Snapshot every daily log for a payslip build."""
    return [log_to_snapshot(log) for log in _log_query(db).order_by(DailyGroupLog.log_date).all()]


def daily_log_read(log: DailyGroupLog) -> DailyLogRead:
    """Build the response model for a log, recomputing every figure."""
    snapshot = log_to_snapshot(log)
    totals = recompute_totals(snapshot)

    def read_task(task: ledger.DailyTask) -> DailyTaskRead:
        return DailyTaskRead(
            piece_rate_id=task.piece_rate_id,
            task_name=task.task_name,
            rate=task.rate,
            quantity=task.quantity,
            sub_total=task_subtotal(task),
        )

    return DailyLogRead(
        id=log.id,
        log_date=log.log_date,
        tasks=[read_task(t) for t in snapshot.tasks],
        custom_tasks=[read_task(t) for t in snapshot.custom_tasks],
        present_employee_ids=list(dict.fromkeys(snapshot.present_employee_ids)),
        total_gross_earnings=totals.total_gross_earnings,
        individual_earnings=totals.individual_earnings,
        workers_present=totals.workers_present,
        created_at=log.created_at,
        updated_at=log.updated_at,
    )


def _check_presence(db: Session, employee_ids: List[UUID], existing: Optional[DailyGroupLog]) -> None:
    """
    Validate the presence list of a log being saved.

    Unknown employees are rejected. Newly added employees must be Active;
    employees already present on the stored log may stay even if they
    have since been deactivated or deleted.
    """
    already_present = set(existing.present_employee_ids) if existing else set()
    rows = db.query(Employee).filter(Employee.id.in_(employee_ids)).all()
    by_id = {row.id: row for row in rows}

    for employee_id in employee_ids:
        employee = by_id.get(employee_id)
        if employee is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Employee with ID {employee_id} not found"
            )
        if employee_id not in already_present and not employee.is_active:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Employee '{employee.name}' is not active and cannot be marked present"
            )


def _snapshot_key(piece_rate_id: Optional[UUID], task_name: str, rate) -> tuple:
    return piece_rate_id, task_name, Decimal(rate)


def _unknown_snapshot(task_input, log_date: date) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=(
            f"Task '{task_input.task_name}' at rate {task_input.rate} is not on the stored log "
            f"for {log_date}; new tasks take their name and rate from the catalog"
        )
    )


def _build_draft(db: Session, log_date: date, log_data: DailyLogUpsert, existing: Optional[DailyGroupLog]) -> DailyLogDraft:
    draft = DailyLogDraft(log_date, log_id=existing.id if existing else None)
    # Copied tasks may only come back from the log they were copied into
    stored = {
        _snapshot_key(task.piece_rate_id, task.task_name, task.rate)
        for task in (existing.tasks if existing else [])
        if not task.is_custom
    }

    for task_input in log_data.tasks:
        if task_input.is_snapshot:
            key = _snapshot_key(task_input.piece_rate_id, task_input.task_name, task_input.rate)
            if key in stored:
                draft.add_snapshot_task(ledger.DailyTask(
                    piece_rate_id=task_input.piece_rate_id,
                    task_name=task_input.task_name,
                    rate=task_input.rate,
                    quantity=task_input.quantity,
                ))
                continue
            if task_input.piece_rate_id is None:
                raise _unknown_snapshot(task_input, log_date)
        piece_rate = get_piece_rate(db, task_input.piece_rate_id)
        if not piece_rate:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Piece rate with ID {task_input.piece_rate_id} not found"
            )
        if task_input.is_snapshot and key != _snapshot_key(piece_rate.id, piece_rate.task_name, piece_rate.rate):
            raise _unknown_snapshot(task_input, log_date)
        draft.add_task(piece_rate_to_snapshot(piece_rate), task_input.quantity)

    for custom in log_data.custom_tasks:
        draft.add_custom_task(custom.task_name, custom.rate, custom.quantity)

    draft.set_present(log_data.present_employee_ids)
    return draft


def _task_row(task: ledger.DailyTask, position: int, is_custom: bool) -> DailyTask:
    return DailyTask(
        piece_rate_id=task.piece_rate_id,
        position=position,
        task_name=task.task_name,
        rate=task.rate,
        quantity=task.quantity,
        sub_total=task.sub_total,
        is_custom=is_custom,
    )


def upsert_daily_log(db: Session, log_date: date, log_data: DailyLogUpsert) -> DailyGroupLog:
    """
    Save the log for a date, creating it or replacing its contents.

    Task names and rates are copied from the catalog at this point, so
    later catalog edits leave the log untouched. Cached totals are written
    from a fresh computation.

    Args:
        db: Database session
        log_date: Calendar date of the log
        log_data: Whole-day contents

    Returns:
        The saved log row

    Raises:
        HTTPException: 404 if a piece rate or employee does not exist,
            422 if the log has no tasks, nobody present, or an inactive
            employee newly marked present
    """
    existing = get_daily_log_by_date(db, log_date)
    if existing:
        previous = log_to_snapshot(existing)
        if is_cache_stale(previous):
            totals = recompute_totals(previous)
            logger.info(
                "Cached totals for %s were stale: gross %s -> %s, share %s -> %s",
                log_date, previous.total_gross_earnings, totals.total_gross_earnings,
                previous.individual_earnings, totals.individual_earnings
            )
    _check_presence(db, list(dict.fromkeys(log_data.present_employee_ids)), existing)

    try:
        draft = _build_draft(db, log_date, log_data, existing)
        saved = draft.to_log()
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc)
        )

    if existing:
        db_log = existing
        db_log.tasks.clear()
        db_log.attendance.clear()
        # Old attendance rows must be gone before identical keys are re-added
        db.flush()
    else:
        db_log = DailyGroupLog(id=saved.id, log_date=log_date)
        db.add(db_log)

    position = 0
    for task in saved.tasks:
        db_log.tasks.append(_task_row(task, position, is_custom=False))
        position += 1
    for task in saved.custom_tasks:
        db_log.tasks.append(_task_row(task, position, is_custom=True))
        position += 1
    for employee_id in saved.present_employee_ids:
        db_log.attendance.append(DailyLogAttendance(employee_id=employee_id))

    db_log.total_gross_earnings = saved.total_gross_earnings
    db_log.individual_earnings = saved.individual_earnings

    db.commit()
    db.refresh(db_log)

    logger.info(
        "Saved daily log %s: %d tasks, %d present, gross %s",
        log_date, len(saved.all_tasks), len(saved.present_employee_ids), saved.total_gross_earnings
    )
    return db_log


def delete_daily_log(db: Session, log_id: UUID) -> bool:
    """
    Delete a daily log.

    Payslips already generated from it keep their copy of the day.
    """
    db_log = get_daily_log(db, log_id)
    if not db_log:
        return False

    db.delete(db_log)
    db.commit()

    return True


def repair_cached_totals(db: Session, dry_run: bool = False) -> List[DailyGroupLog]:
    """
    Rewrite cached totals that disagree with the log contents.

    Args:
        db: Database session
        dry_run: Report stale logs without writing anything

    Returns:
        The logs whose cached totals were stale
    """
    stale = []
    for db_log in _log_query(db).order_by(DailyGroupLog.log_date).all():
        snapshot = log_to_snapshot(db_log)
        if not is_cache_stale(snapshot):
            continue
        stale.append(db_log)
        if dry_run:
            continue
        refreshed = refresh_cached_totals(snapshot)
        refreshed_tasks = refreshed.tasks + refreshed.custom_tasks
        ordered_rows = [t for t in db_log.tasks if not t.is_custom] + [t for t in db_log.tasks if t.is_custom]
        for row, task in zip(ordered_rows, refreshed_tasks):
            row.sub_total = task.sub_total
        db_log.total_gross_earnings = refreshed.total_gross_earnings
        db_log.individual_earnings = refreshed.individual_earnings
        logger.info(
            "Repaired cached totals for %s: gross %s, share %s",
            db_log.log_date, refreshed.total_gross_earnings, refreshed.individual_earnings
        )

    if stale and not dry_run:
        db.commit()
    return stale
