"""
Daily group log API endpoints.

A log is addressed by its date when saving and re-opening, and by its ID
otherwise. Every response carries totals recomputed from the tasks and
presence list.
"""

from typing import Optional
from uuid import UUID
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from crewledger.fastapi.dependencies.database import get_sync_db
from crewledger.fastapi.schemas.daily_log import DailyLogUpsert, DailyLogRead, DailyLogListResponse
from crewledger.fastapi.crud.daily_log import (
    upsert_daily_log, get_daily_log, get_daily_log_by_date, get_daily_logs,
    get_daily_logs_count, delete_daily_log, daily_log_read
)
from crewledger.fastapi.core.utils import parse_optional_period


router = APIRouter(tags=["daily-logs"])


@router.get("/", response_model=DailyLogListResponse, summary="List Daily Logs")
async def list_daily_logs(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    period: Optional[str] = Query(None, description="Calendar month in YYYY-MM format"),
    db: Session = Depends(get_sync_db)
):
    """
    Get daily logs, newest date first.

    **Parameters:**
    - **skip**: Number of records to skip (pagination)
    - **limit**: Maximum number of records to return
    - **period**: Only logs in this month (YYYY-MM)

    **Errors:**
    - **422**: Invalid period
    """
    period_value = parse_optional_period(period)
    logs = get_daily_logs(db, skip=skip, limit=limit, period=period_value)

    return DailyLogListResponse(
        daily_logs=[daily_log_read(log) for log in logs],
        total=get_daily_logs_count(db, period=period_value),
        skip=skip,
        limit=limit
    )


@router.get("/date/{log_date}", response_model=DailyLogRead, summary="Get Daily Log by Date")
async def get_daily_log_for_date(
    log_date: date,
    db: Session = Depends(get_sync_db)
):
    """
    Re-open the log of a date.

    Tasks come back with the name and rate they were entered with; send
    them back unchanged to keep those copies when resaving.

    **Errors:**
    - **404**: No log for this date
    """
    log = get_daily_log_by_date(db, log_date)
    if not log:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No daily log for {log_date}"
        )

    return daily_log_read(log)


@router.put("/date/{log_date}", response_model=DailyLogRead, summary="Save Daily Log")
async def save_daily_log(
    log_date: date,
    log_data: DailyLogUpsert,
    db: Session = Depends(get_sync_db)
):
    """
    Create or replace the log of a date.

    **Parameters:**
    - **tasks**: Catalog tasks (piece_rate_id and quantity); re-opened
      tasks may also carry their copied task_name and rate
    - **custom_tasks**: Ad hoc tasks with their own name and rate
    - **present_employee_ids**: Employees sharing the day's earnings

    **Returns:**
    - The saved log with recomputed totals

    **Errors:**
    - **404**: Piece rate or employee not found
    - **422**: No tasks, nobody present, non-positive quantity or rate,
      or an inactive employee newly marked present
    """
    try:
        log = upsert_daily_log(db, log_date, log_data)
        return daily_log_read(log)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save daily log: {str(e)}"
        )


@router.get("/{log_id}", response_model=DailyLogRead, summary="Get Daily Log by ID")
async def get_daily_log_by_id(
    log_id: UUID,
    db: Session = Depends(get_sync_db)
):
    log = get_daily_log(db, log_id)
    if not log:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Daily log not found"
        )

    return daily_log_read(log)


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Daily Log")
async def delete_daily_log_by_id(
    log_id: UUID,
    db: Session = Depends(get_sync_db)
):
    """
    Delete a daily log.

    Payslips already generated keep their copy of the day.

    **Errors:**
    - **404**: Daily log not found
    """
    if not delete_daily_log(db, log_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Daily log not found"
        )
