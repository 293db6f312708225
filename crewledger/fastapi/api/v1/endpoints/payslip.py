"""
Payslip API endpoints.

This module provides FastAPI endpoints for previewing a payslip, saving
it to history, generating payslips for the whole crew and browsing the
history.
"""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from crewledger.fastapi.dependencies.database import get_sync_db
from crewledger.fastapi.core.config import Settings, get_app_settings
from crewledger.fastapi.core.utils import parse_period_param, parse_optional_period
from crewledger.fastapi.schemas.payslip import (
    PayslipGenerateRequest, PayslipSave, PayslipRead, PayslipListResponse,
    BulkGenerateRequest, BulkGenerateResponse, BulkFailureRead, CarryOverCandidate
)
from crewledger.fastapi.crud.payslip import (
    preview_payslip, save_payslip, bulk_generate_payslips, carry_over_candidates,
    get_payslip, get_payslips, get_payslips_count, delete_payslip, payslip_read_data
)


router = APIRouter(tags=["payslips"])


@router.post("/preview", response_model=PayslipRead, summary="Preview Payslip")
async def preview_single_payslip(
    request: PayslipGenerateRequest,
    db: Session = Depends(get_sync_db)
):
    """
    Build a payslip for one employee and month without saving it.

    Every day in the month on which the employee was present contributes
    that day's equal share. Days from earlier months can be added through
    ``carry_over_log_ids``.

    **Parameters:**
    - **employee_id**: Employee to pay
    - **period**: Month in YYYY-MM format
    - **allowance**: Added to the gross salary
    - **deduction**: Subtracted from the gross salary
    - **carry_over_log_ids**: Earlier days to include

    **Returns:**
    - The payslip; POST it to ``/payslips/`` to keep it

    **Errors:**
    - **404**: Employee not found
    - **422**: Invalid period or amount
    """
    payslip = preview_payslip(db, request)
    return PayslipRead.model_validate(payslip.model_dump())


@router.get("/carry-over-candidates", response_model=List[CarryOverCandidate], summary="List Carry-over Days")
async def list_carry_over_candidates(
    employee_id: UUID = Query(..., description="Employee to pay"),
    period: str = Query(..., description="Payslip month in YYYY-MM format"),
    db: Session = Depends(get_sync_db)
):
    """
    Days of the previous month on which the employee was present.

    **Errors:**
    - **404**: Employee not found
    - **422**: Invalid period
    """
    candidates = carry_over_candidates(db, employee_id, parse_period_param(period))
    return [CarryOverCandidate.model_validate(c) for c in candidates]


@router.post("/", response_model=PayslipRead, summary="Save Payslip")
async def save_payslip_to_history(
    payslip_data: PayslipSave,
    db: Session = Depends(get_sync_db)
):
    """
    Build a payslip and save it to history.

    Takes the same body as ``/preview``; the payslip is built again from
    the current logs rather than accepted from the client. A payslip
    already saved for the same employee and month is replaced.

    **Errors:**
    - **404**: Employee not found
    - **422**: Invalid period or amount
    """
    try:
        payslip = save_payslip(db, payslip_data)
        return PayslipRead.model_validate(payslip_read_data(payslip))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save payslip: {str(e)}"
        )


@router.post("/bulk", response_model=BulkGenerateResponse, summary="Generate Payslips for All Active Employees")
async def bulk_generate(
    request: BulkGenerateRequest,
    db: Session = Depends(get_sync_db),
    settings: Settings = Depends(get_app_settings)
):
    """
    Generate and save payslips for every active employee with earnings.

    Allowance and deduction are zero. Employees without earnings in the
    month are skipped. Existing payslips for the month are replaced.

    **Returns:**
    - Counts of generated, skipped and failed employees, and the payslips

    **Errors:**
    - **403**: Bulk generation is disabled
    - **422**: Invalid period
    """
    if not settings.ENABLE_BULK_GENERATE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Bulk payslip generation is disabled"
        )

    period = parse_period_param(request.period)
    result, saved = bulk_generate_payslips(db, period)

    return BulkGenerateResponse(
        period=period.label,
        total_active=result.total,
        generated=result.generated,
        skipped=result.skipped,
        failed=[BulkFailureRead.model_validate(f) for f in result.failed],
        payslips=[PayslipRead.model_validate(payslip_read_data(p)) for p in saved]
    )


@router.get("/", response_model=PayslipListResponse, summary="List Payslip History")
async def list_payslips(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    employee_id: Optional[UUID] = Query(None, description="Filter by employee"),
    period: Optional[str] = Query(None, description="Filter by month (YYYY-MM)"),
    db: Session = Depends(get_sync_db)
):
    """
    Get saved payslips, newest first.

    **Errors:**
    - **422**: Invalid period
    """
    period_value = parse_optional_period(period)
    payslips = get_payslips(db, skip=skip, limit=limit, employee_id=employee_id, period=period_value)

    return PayslipListResponse(
        payslips=[PayslipRead.model_validate(payslip_read_data(p)) for p in payslips],
        total=get_payslips_count(db, employee_id=employee_id, period=period_value),
        skip=skip,
        limit=limit
    )


@router.get("/{payslip_id}", response_model=PayslipRead, summary="Get Payslip by ID")
async def get_payslip_by_id(
    payslip_id: UUID,
    db: Session = Depends(get_sync_db)
):
    payslip = get_payslip(db, payslip_id)
    if not payslip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payslip not found"
        )

    return PayslipRead.model_validate(payslip_read_data(payslip))


@router.delete("/{payslip_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Payslip")
async def delete_payslip_by_id(
    payslip_id: UUID,
    db: Session = Depends(get_sync_db)
):
    if not delete_payslip(db, payslip_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payslip not found"
        )
