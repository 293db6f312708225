"""
Daily group log models.

A daily log records the tasks a group performed on one calendar date and
who was present to share the day's earnings. At most one log exists per
date; saving a date again replaces its tasks and presence.
"""

from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Uuid,
)
from sqlalchemy.orm import relationship

from crewledger.fastapi.dependencies.database import Base


class DailyGroupLog(Base):
    """
    Daily group log.
    
    Attributes:
        id: Unique identifier (UUID)
        log_date: Calendar date of the work (unique)
        total_gross_earnings: Cached sum of task subtotals
        individual_earnings: Cached equal share per present employee
        created_at: Record creation timestamp
        updated_at: Last resave timestamp
        
    The two earnings columns are a read cache only. They are rewritten on
    every save and recomputed from ``tasks`` and ``attendance`` on read.
    """
    
    __tablename__ = "daily_group_logs"
    
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
        doc="Unique daily log identifier"
    )
    
    log_date = Column(
        Date,
        nullable=False,
        unique=True,
        index=True,
        doc="Calendar date of the work"
    )
    
    total_gross_earnings = Column(
        Numeric(precision=14, scale=4),
        nullable=True,
        doc="Cached total of all task subtotals"
    )
    
    individual_earnings = Column(
        Numeric(precision=14, scale=4),
        nullable=True,
        doc="Cached share of each present employee"
    )
    
    created_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        doc="Record creation timestamp"
    )
    
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        doc="Last update timestamp"
    )
    
    # Relationships
    tasks = relationship(
        "DailyTask",
        back_populates="log",
        cascade="all, delete-orphan",
        order_by="DailyTask.position",
    )
    attendance = relationship(
        "DailyLogAttendance",
        back_populates="log",
        cascade="all, delete-orphan",
        order_by="DailyLogAttendance.employee_id",
    )
    
    def __repr__(self) -> str:
        return f"<DailyGroupLog(id={self.id}, date='{self.log_date}', tasks={len(self.tasks)})>"
    
    @property
    def present_employee_ids(self):
        return [row.employee_id for row in self.attendance]


class DailyTask(Base):
    """
    A task entry within a daily log.
    
    ``task_name`` and ``rate`` are copies taken at entry time. Custom tasks
    (``is_custom``) were typed in by hand and have no catalog reference.
    """
    
    __tablename__ = "daily_tasks"
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        doc="Unique task entry identifier"
    )
    
    log_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("daily_group_logs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Daily log this task belongs to"
    )
    
    piece_rate_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("piece_rates.id", ondelete="SET NULL"),
        nullable=True,
        doc="Catalog rate the task was entered from"
    )
    
    position = Column(
        Integer,
        nullable=False,
        default=0,
        doc="Order of entry within the log"
    )
    
    task_name = Column(
        String(100),
        nullable=False,
        doc="Task name at entry time"
    )
    
    rate = Column(
        Numeric(precision=12, scale=4),
        nullable=False,
        doc="Rate per unit at entry time"
    )
    
    quantity = Column(
        Numeric(precision=12, scale=4),
        nullable=False,
        doc="Units of work performed"
    )
    
    sub_total = Column(
        Numeric(precision=14, scale=4),
        nullable=True,
        doc="Cached rate * quantity"
    )
    
    is_custom = Column(
        Boolean,
        nullable=False,
        default=False,
        doc="Whether the task was entered without a catalog rate"
    )
    
    log = relationship("DailyGroupLog", back_populates="tasks")
    
    def __repr__(self) -> str:
        return f"<DailyTask(task_name='{self.task_name}', rate={self.rate}, quantity={self.quantity})>"


class DailyLogAttendance(Base):
    """Presence of one employee on one daily log."""
    
    __tablename__ = "daily_log_attendance"
    log_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("daily_group_logs.id", ondelete="CASCADE"),
        primary_key=True,
        doc="Daily log"
    )
    
    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employees.id", ondelete="RESTRICT"),
        primary_key=True,
        index=True,
        doc="Employee present that day"
    )
    
    log = relationship("DailyGroupLog", back_populates="attendance")
    employee = relationship("Employee", back_populates="attendance")
