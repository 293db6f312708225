"""
Payslip history models.

A payslip is a snapshot taken when it was generated: the employee's
display fields, every contributing day and the resulting amounts. It is
not recomputed when logs or employees change later. Saving a payslip for
an employee and month that already has one replaces the stored one.
"""

from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String,
    Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship

from crewledger.fastapi.dependencies.database import Base


class Payslip(Base):
    """
    Payslip history record.
    
    Attributes:
        id: Unique identifier (UUID)
        employee_id: Employee the payslip was generated for
        employee_name: Name at generation time
        employee_position: Position at generation time
        employee_avatar: Avatar at generation time
        period_year: Calendar year of the period
        period_month: Calendar month of the period (1-12)
        period: Display label, e.g. "March 2024"
        gross_salary: Sum of daily shares
        allowance: Amount added on top of gross
        deduction: Amount subtracted from gross
        net_salary: gross + allowance - deduction (may be negative)
        created_at: When the payslip was generated
    """
    
    __tablename__ = "payslips"
    __table_args__ = (
        UniqueConstraint("employee_id", "period_year", "period_month", name="uq_payslip_employee_period"),
    )
    
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
        doc="Unique payslip identifier"
    )
    
    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employees.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="Employee the payslip belongs to"
    )
    
    employee_name = Column(String(100), nullable=False, doc="Employee name snapshot")
    employee_position = Column(String(100), nullable=True, doc="Employee position snapshot")
    employee_avatar = Column(Text, nullable=True, doc="Employee avatar snapshot")
    
    period_year = Column(Integer, nullable=False, index=True, doc="Period year")
    period_month = Column(Integer, nullable=False, index=True, doc="Period month (1-12)")
    period = Column(String(32), nullable=False, doc="Period display label")
    
    gross_salary = Column(Numeric(precision=14, scale=4), nullable=False, doc="Gross salary")
    allowance = Column(Numeric(precision=14, scale=4), nullable=False, default=0, doc="Allowance")
    deduction = Column(Numeric(precision=14, scale=4), nullable=False, default=0, doc="Deduction")
    net_salary = Column(Numeric(precision=14, scale=4), nullable=False, doc="Net salary")
    
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        doc="Generation timestamp"
    )
    
    # Relationships
    employee = relationship("Employee", back_populates="payslips")
    entries = relationship(
        "PayslipLogEntry",
        back_populates="payslip",
        cascade="all, delete-orphan",
        order_by="PayslipLogEntry.position",
    )
    
    def __repr__(self) -> str:
        return (
            f"<Payslip(id='{self.id}', "
            f"employee_id='{self.employee_id}', "
            f"period='{self.period}', "
            f"net={self.net_salary})>"
        )


class PayslipLogEntry(Base):
    """One contributing day recorded on a payslip."""
    
    __tablename__ = "payslip_log_entries"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    
    payslip_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("payslips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    position = Column(Integer, nullable=False, default=0, doc="Order on the payslip")
    log_date = Column(Date, nullable=False, doc="Day of work")
    task_name = Column(Text, nullable=False, default="", doc="Task names of the day")
    total_daily_gross = Column(Numeric(precision=14, scale=4), nullable=False, doc="Group total that day")
    workers_present = Column(Integer, nullable=False, doc="Headcount that day")
    your_earning = Column(Numeric(precision=14, scale=4), nullable=False, doc="Employee share that day")
    carried_over = Column(Boolean, nullable=False, default=False, doc="Day from an earlier period")
    
    payslip = relationship("Payslip", back_populates="entries")
