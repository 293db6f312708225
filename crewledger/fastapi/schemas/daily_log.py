"""
Daily group log Pydantic schemas for request/response validation.

Logs are saved per date: the request body describes the whole day (tasks,
custom tasks and who was present) and replaces whatever was stored for
that date before.
"""

from uuid import UUID
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator


class DailyTaskInput(BaseModel):
    """
    A catalog task in a daily log submission.
    
    New tasks only name the catalog rate; its current name and rate are
    copied in when the log is saved. Tasks re-submitted from a re-opened
    log carry ``task_name`` and ``rate`` back so the original copy is kept.
    """
    
    piece_rate_id: Optional[UUID] = Field(
        None,
        description="Catalog rate the task is entered from"
    )
    
    quantity: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=4,
        description="Units of work performed"
    )
    
    task_name: Optional[str] = Field(
        None,
        max_length=100,
        description="Task name copied when first entered"
    )
    
    rate: Optional[Decimal] = Field(
        None,
        gt=0,
        max_digits=12,
        decimal_places=4,
        description="Rate copied when first entered"
    )
    
    @model_validator(mode='after')
    def check_source(self):
        """Require either a catalog reference or a complete snapshot."""
        has_snapshot = self.task_name is not None and self.rate is not None
        if (self.task_name is None) != (self.rate is None):
            raise ValueError("task_name and rate must be given together")
        if not has_snapshot and self.piece_rate_id is None:
            raise ValueError("piece_rate_id is required for a new task")
        return self

    @property
    def is_snapshot(self) -> bool:
        return self.task_name is not None and self.rate is not None


class CustomTaskInput(BaseModel):
    """An ad hoc task that is not in the rate catalog."""
    
    task_name: str = Field(..., min_length=1, max_length=100, description="Task name")
    rate: Decimal = Field(..., gt=0, max_digits=12, decimal_places=4, description="Rate per unit")
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=4, description="Units of work performed")


class DailyLogUpsert(BaseModel):
    """Schema for saving (creating or replacing) the log of one date."""
    
    tasks: List[DailyTaskInput] = Field(
        default_factory=list,
        description="Catalog tasks performed that day"
    )
    
    custom_tasks: List[CustomTaskInput] = Field(
        default_factory=list,
        description="Ad hoc tasks performed that day"
    )
    
    present_employee_ids: List[UUID] = Field(
        ...,
        description="Employees present and sharing the day's earnings"
    )
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "tasks": [
                    {"piece_rate_id": "456e7890-e89b-12d3-a456-426614174000", "quantity": "20"}
                ],
                "custom_tasks": [],
                "present_employee_ids": [
                    "123e4567-e89b-12d3-a456-426614174000",
                    "223e4567-e89b-12d3-a456-426614174000"
                ]
            }
        }
    )


class DailyTaskRead(BaseModel):
    """A recorded task with its subtotal recomputed."""
    
    piece_rate_id: Optional[UUID] = None
    task_name: str
    rate: Decimal
    quantity: Decimal
    sub_total: Decimal


class DailyLogRead(BaseModel):
    """
    Schema for reading a daily log.
    
    Totals are recomputed from the tasks and presence list on every read.
    """
    
    id: UUID = Field(..., description="Unique identifier of the log")
    log_date: date = Field(..., description="Calendar date of the work")
    tasks: List[DailyTaskRead] = Field(..., description="Catalog tasks")
    custom_tasks: List[DailyTaskRead] = Field(..., description="Ad hoc tasks")
    present_employee_ids: List[UUID] = Field(..., description="Employees present")
    total_gross_earnings: Decimal = Field(..., description="Sum of all task subtotals")
    individual_earnings: Decimal = Field(..., description="Equal share per present employee")
    workers_present: int = Field(..., description="Number of employees present")
    created_at: Optional[datetime] = Field(None, description="When the log was first saved")
    updated_at: Optional[datetime] = Field(None, description="When the log was last saved")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "789e0123-e89b-12d3-a456-426614174000",
                "log_date": "2024-03-05",
                "tasks": [
                    {
                        "piece_rate_id": "456e7890-e89b-12d3-a456-426614174000",
                        "task_name": "Harvest",
                        "rate": "10.0000",
                        "quantity": "20",
                        "sub_total": "200.0000"
                    }
                ],
                "custom_tasks": [],
                "present_employee_ids": [
                    "123e4567-e89b-12d3-a456-426614174000",
                    "223e4567-e89b-12d3-a456-426614174000"
                ],
                "total_gross_earnings": "200.0000",
                "individual_earnings": "100.0000",
                "workers_present": 2
            }
        }
    )


class DailyLogListResponse(BaseModel):
    """Schema for daily log listing."""
    
    daily_logs: List[DailyLogRead] = Field(..., description="Daily logs, newest first")
    total: int = Field(..., description="Total number of matching logs")
    skip: int = Field(..., description="Number of records skipped")
    limit: int = Field(..., description="Maximum number of records returned")
