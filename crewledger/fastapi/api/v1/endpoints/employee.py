"""
Employee management API endpoints.

This module provides FastAPI endpoints for managing the crew: creating,
listing, editing, toggling status and soft-deleting employees.
"""

from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from crewledger.fastapi.dependencies.database import get_sync_db
from crewledger.fastapi.schemas.employee import (
    EmployeeCreate, EmployeeRead, EmployeeUpdate, EmployeeStatusUpdate, EmployeeListResponse
)
from crewledger.fastapi.crud.employee import (
    create_employee, get_employee, get_employees, get_employees_count,
    update_employee, set_employee_status, delete_employee
)
from crewledger.payroll.types import EmployeeStatus


router = APIRouter(tags=["employee-management"])


@router.post("/", response_model=EmployeeRead, status_code=status.HTTP_201_CREATED, summary="Create Employee")
async def create_new_employee(
    employee_data: EmployeeCreate,
    db: Session = Depends(get_sync_db)
):
    """
    Add a crew member.

    **Parameters:**
    - **name**: Display name (required)
    - **position**: Optional position label
    - **status**: Active (default) or Inactive
    - **avatar**: Optional profile picture as a data string

    **Returns:**
    - Employee information with generated ID

    **Errors:**
    - **422**: Validation errors
    """
    try:
        employee = create_employee(db, employee_data)
        return EmployeeRead.model_validate(employee)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create employee: {str(e)}"
        )


@router.get("/", response_model=EmployeeListResponse, summary="List Employees")
async def list_employees(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    status_filter: Optional[EmployeeStatus] = Query(None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(None, description="Search term for employee names"),
    db: Session = Depends(get_sync_db)
):
    """
    Get the list of employees, ordered by name.

    Deleted employees are not listed.

    **Parameters:**
    - **skip**: Number of records to skip (pagination)
    - **limit**: Maximum number of records to return
    - **status**: Only Active or only Inactive employees
    - **search**: Optional search term for names

    **Returns:**
    - Paginated list of employees with total count
    """
    employees = get_employees(db, skip=skip, limit=limit, status=status_filter, search=search)
    total = get_employees_count(db, status=status_filter, search=search)

    return EmployeeListResponse(
        employees=[EmployeeRead.model_validate(e) for e in employees],
        total=total,
        skip=skip,
        limit=limit
    )


@router.get("/{employee_id}", response_model=EmployeeRead, summary="Get Employee by ID")
async def get_employee_by_id(
    employee_id: UUID,
    db: Session = Depends(get_sync_db)
):
    """
    Get a specific employee.

    **Errors:**
    - **404**: Employee not found
    - **422**: Invalid UUID format
    """
    employee = get_employee(db, employee_id)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )

    return EmployeeRead.model_validate(employee)


@router.put("/{employee_id}", response_model=EmployeeRead, summary="Update Employee")
async def update_employee_info(
    employee_id: UUID,
    employee_update: EmployeeUpdate,
    db: Session = Depends(get_sync_db)
):
    """
    Edit an employee.

    Payslips already generated keep the details they were generated with.

    **Errors:**
    - **404**: Employee not found
    - **422**: Validation errors
    """
    employee = update_employee(db, employee_id, employee_update)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )

    return EmployeeRead.model_validate(employee)


@router.patch("/{employee_id}/status", response_model=EmployeeRead, summary="Set Employee Status")
async def update_employee_status(
    employee_id: UUID,
    status_update: EmployeeStatusUpdate,
    db: Session = Depends(get_sync_db)
):
    """
    Switch an employee between Active and Inactive.

    Inactive employees cannot be newly marked present on a daily log and
    are left out of bulk payslip generation.

    **Errors:**
    - **404**: Employee not found
    """
    employee = set_employee_status(db, employee_id, status_update.status)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )

    return EmployeeRead.model_validate(employee)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Employee")
async def delete_employee_by_id(
    employee_id: UUID,
    db: Session = Depends(get_sync_db)
):
    """
    Soft-delete an employee.

    Daily logs and payslips that mention the employee are kept.

    **Errors:**
    - **404**: Employee not found
    """
    if not delete_employee(db, employee_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )
