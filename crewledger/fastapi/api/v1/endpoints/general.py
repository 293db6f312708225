"""
General API endpoints: liveness and a combined monthly overview.

The overview combines the daily logs, each active employee's earnings
and the saved payslips of one month for reporting.
"""

from typing import List, Dict, Any
from decimal import Decimal
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field, ConfigDict

from crewledger.fastapi.dependencies.database import get_sync_db
from crewledger.fastapi.core.config import Settings, get_app_settings
from crewledger.fastapi.core.utils import parse_period_param
from crewledger.fastapi.crud import daily_log as daily_log_crud
from crewledger.fastapi.crud import employee as employee_crud
from crewledger.fastapi.crud import payslip as payslip_crud
from crewledger.fastapi.schemas.daily_log import DailyLogRead
from crewledger.fastapi.schemas.payslip import PayslipRead
from crewledger.payroll.earnings import aggregate_earnings, recompute_totals

base_router = APIRouter()
router = APIRouter()


class EmployeeEarnings(BaseModel):
    employee_id: str
    employee_name: str
    days_present: int
    gross_salary: Decimal


class PeriodOverviewResponse(BaseModel):
    """Schema for the combined data of one month."""

    period: str = Field(..., description="Month label, e.g. 'March 2024'")

    daily_logs: List[DailyLogRead] = Field(
        ...,
        description="Daily logs of the month, oldest first"
    )

    earnings: List[EmployeeEarnings] = Field(
        ...,
        description="Earnings of each active employee in the month, not yet saved as payslips"
    )

    payslips: List[PayslipRead] = Field(
        ...,
        description="Payslips saved for the month"
    )

    summary: Dict[str, Any] = Field(
        ...,
        description="Summary statistics for the month"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "period": "March 2024",
                "daily_logs": [],
                "earnings": [],
                "payslips": [],
                "summary": {
                    "total_gross": "4200.0000",
                    "log_count": 21,
                    "payslip_count": 6,
                    "total_net_paid": "4350.0000"
                }
            }
        }
    )


@base_router.get("/health", summary="Health Check")
async def health(settings: Settings = Depends(get_app_settings)):
    return {"status": "ok", "app": settings.APP_NAME, "version": settings.APP_VERSION}


@router.get(
    "/period-overview",
    response_model=PeriodOverviewResponse,
    summary="Get Monthly Overview",
    description="Get daily logs, employee earnings and saved payslips for one month with summary statistics."
)
async def get_period_overview(
    *,
    db: Session = Depends(get_sync_db),
    period: str = Query(..., description="Calendar month in YYYY-MM format")
) -> PeriodOverviewResponse:
    """
    Get combined data for one month.

    - **No pagination**: returns every record of the month
    - **Earnings** are computed live from the logs and may differ from
      payslips saved earlier

    **Parameters:**
    - **period**: Month in YYYY-MM format

    **Errors:**
    - **422**: Invalid period
    """
    period_value = parse_period_param(period)

    logs = daily_log_crud.get_daily_logs(db, skip=0, limit=10000, period=period_value)
    logs = sorted(logs, key=lambda log: log.log_date)
    snapshots = [daily_log_crud.log_to_snapshot(log) for log in logs]

    earnings = []
    for employee in employee_crud.get_active_employees(db):
        result = aggregate_earnings(employee.id, period_value, snapshots)
        earnings.append(EmployeeEarnings(
            employee_id=str(employee.id),
            employee_name=employee.name,
            days_present=len(result.entries),
            gross_salary=result.gross_salary
        ))

    payslips = payslip_crud.get_payslips(db, skip=0, limit=10000, period=period_value)

    total_gross = sum((recompute_totals(s).total_gross_earnings for s in snapshots), Decimal("0"))
    total_net = sum((p.net_salary for p in payslips), Decimal("0"))

    return PeriodOverviewResponse(
        period=period_value.label,
        daily_logs=[daily_log_crud.daily_log_read(log) for log in logs],
        earnings=earnings,
        payslips=[PayslipRead.model_validate(payslip_crud.payslip_read_data(p)) for p in payslips],
        summary={
            "total_gross": str(total_gross),
            "log_count": len(logs),
            "payslip_count": len(payslips),
            "total_net_paid": str(total_net)
        }
    )
