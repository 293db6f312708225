"""
Backup document schemas.

The layout matches the JSON backups written by earlier versions of the
app: four top-level collections with camelCase field names. Records from
older versions may lack cached totals, custom tasks or UUID identifiers;
those gaps are filled in on restore.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional, List
from pydantic import BaseModel, Field, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


# Numbers are written as JSON numbers, not strings, to stay readable by older versions
JsonNumber = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BackupModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BackupEmployee(BackupModel):
    id: str
    name: str
    position: Optional[str] = ""
    status: str = "Active"
    profile_picture: Optional[str] = None
    deleted_at: Optional[datetime] = None


class BackupPieceRate(BackupModel):
    id: str
    task_name: str
    rate: JsonNumber


class BackupDailyTask(BackupModel):
    piece_rate_id: Optional[str] = None
    task_name: str
    rate: JsonNumber
    quantity: JsonNumber
    sub_total: Optional[JsonNumber] = None


class BackupDailyLog(BackupModel):
    id: str
    date: date
    tasks: List[BackupDailyTask] = Field(default_factory=list)
    custom_tasks: Optional[List[BackupDailyTask]] = None
    present_employee_ids: List[str] = Field(default_factory=list)
    total_gross_earnings: Optional[JsonNumber] = None
    individual_earnings: Optional[JsonNumber] = None


class BackupPayslipLogEntry(BackupModel):
    date: date
    task_name: str = ""
    total_daily_gross: JsonNumber
    workers_present: int
    your_earning: JsonNumber
    carried_over: bool = False


class BackupPayslip(BackupModel):
    id: str
    employee_id: str
    employee_name: str
    employee_position: Optional[str] = ""
    employee_profile_picture: Optional[str] = None
    period: str
    period_key: Optional[str] = None
    logs: List[BackupPayslipLogEntry] = Field(default_factory=list)
    gross_salary: JsonNumber
    allowance: JsonNumber = Decimal("0")
    deduction: JsonNumber = Decimal("0")
    net_salary: JsonNumber
    created_at: datetime


class BackupDocument(BackupModel):
    """A full export of employees, rates, daily logs and payslips."""
    
    employees: List[BackupEmployee]
    piece_rates: List[BackupPieceRate]
    daily_logs: List[BackupDailyLog]
    payslips: List[BackupPayslip]
    exported_at: Optional[datetime] = None


class RestoreSummary(BaseModel):
    """Counts of records written by a restore."""
    
    employees: int
    piece_rates: int
    daily_logs: int
    payslips: int
    merged_duplicate_dates: int = 0
    placeholder_employees: int = 0
