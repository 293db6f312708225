"""
Payslip Pydantic schemas for request/response validation.
"""

from uuid import UUID
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


PERIOD_PATTERN = r"^\d{4}-\d{2}$"


class PayslipGenerateRequest(BaseModel):
    """Schema for building (previewing) a single payslip."""
    
    employee_id: UUID = Field(
        ...,
        description="Employee to generate the payslip for"
    )
    
    period: str = Field(
        ...,
        pattern=PERIOD_PATTERN,
        description="Calendar month in YYYY-MM format"
    )
    
    allowance: Decimal = Field(
        default=Decimal("0"),
        max_digits=14,
        decimal_places=4,
        description="Amount added to the gross salary (negative values are accepted)"
    )
    
    deduction: Decimal = Field(
        default=Decimal("0"),
        max_digits=14,
        decimal_places=4,
        description="Amount subtracted from the gross salary (negative values are accepted)"
    )
    
    carry_over_log_ids: List[UUID] = Field(
        default_factory=list,
        description="Daily logs from earlier periods to include"
    )
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "employee_id": "123e4567-e89b-12d3-a456-426614174000",
                "period": "2024-03",
                "allowance": "50.00",
                "deduction": "20.00"
            }
        }
    )


class PayslipLogEntrySchema(BaseModel):
    """One contributing day on a payslip."""
    
    log_date: date
    task_name: str
    total_daily_gross: Decimal
    workers_present: int = Field(..., ge=0)
    your_earning: Decimal
    carried_over: bool = False
    
    model_config = ConfigDict(from_attributes=True)


class PayslipBase(BaseModel):
    """Base Payslip schema with common fields."""
    
    employee_id: UUID = Field(..., description="Employee the payslip belongs to")
    employee_name: str = Field(..., max_length=100, description="Employee name at generation time")
    employee_position: Optional[str] = Field(None, description="Employee position at generation time")
    employee_avatar: Optional[str] = Field(None, description="Employee avatar at generation time")
    period_year: int = Field(..., ge=1, le=9999, description="Period year")
    period_month: int = Field(..., ge=1, le=12, description="Period month")
    period: str = Field(..., description="Period display label, e.g. 'March 2024'")
    logs: List[PayslipLogEntrySchema] = Field(default_factory=list, description="Contributing days")
    gross_salary: Decimal = Field(..., description="Sum of daily shares")
    allowance: Decimal = Field(default=Decimal("0"), description="Allowance")
    deduction: Decimal = Field(default=Decimal("0"), description="Deduction")
    net_salary: Decimal = Field(..., description="gross + allowance - deduction; may be negative")
    created_at: datetime = Field(..., description="When the payslip was generated")


class PayslipSave(PayslipGenerateRequest):
    """
    Schema for committing a payslip to history.
    
    Takes the same inputs as the preview. The payslip is built again from
    the stored logs when saved, so what lands in history always matches
    the logs at save time.
    """


class PayslipRead(PayslipBase):
    """Schema for reading a payslip."""
    
    id: UUID = Field(..., description="Unique identifier of the payslip")
    
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "789e0123-e89b-12d3-a456-426614174000",
                "employee_id": "123e4567-e89b-12d3-a456-426614174000",
                "employee_name": "Ayu Lestari",
                "employee_position": "Picker",
                "period_year": 2024,
                "period_month": 3,
                "period": "March 2024",
                "logs": [
                    {
                        "log_date": "2024-03-05",
                        "task_name": "Harvest",
                        "total_daily_gross": "200",
                        "workers_present": 2,
                        "your_earning": "100.0000",
                        "carried_over": False
                    }
                ],
                "gross_salary": "100.0000",
                "allowance": "50.00",
                "deduction": "20.00",
                "net_salary": "130.0000",
                "created_at": "2024-04-01T09:00:00Z"
            }
        }
    )


class PayslipListResponse(BaseModel):
    """Schema for payslip history listing."""
    
    payslips: List[PayslipRead] = Field(..., description="Payslips, newest first")
    total: int = Field(..., description="Total number of matching payslips")
    skip: int = Field(..., description="Number of records skipped")
    limit: int = Field(..., description="Maximum number of records returned")


class BulkGenerateRequest(BaseModel):
    """Schema for generating payslips for all active employees."""
    
    period: str = Field(
        ...,
        pattern=PERIOD_PATTERN,
        description="Calendar month in YYYY-MM format"
    )


class BulkFailureRead(BaseModel):
    employee_id: UUID
    employee_name: str
    reason: str
    
    model_config = ConfigDict(from_attributes=True)


class BulkGenerateResponse(BaseModel):
    """Summary of a bulk generation run."""
    
    period: str = Field(..., description="Period display label")
    total_active: int = Field(..., description="Active employees considered")
    generated: int = Field(..., description="Payslips generated and saved")
    skipped: int = Field(..., description="Active employees without a payslip")
    failed: List[BulkFailureRead] = Field(default_factory=list, description="Employees that could not be processed")
    payslips: List[PayslipRead] = Field(default_factory=list, description="Saved payslips")


class CarryOverCandidate(PayslipLogEntrySchema):
    """A day from an earlier period that can be carried onto a payslip."""
    
    log_id: UUID = Field(..., description="Daily log to pass in carry_over_log_ids")
