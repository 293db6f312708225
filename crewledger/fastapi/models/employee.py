"""
Employee model for piece-rate crew members.

Employees are never hard-deleted: historical daily logs and payslips keep
pointing at them, so deletion only stamps ``deleted_at``.
"""

from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import Column, String, Text, DateTime, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship

from crewledger.fastapi.dependencies.database import Base
from crewledger.payroll.types import EmployeeStatus


class Employee(Base):
    """
    Employee model for crew members paid from group piece work.
    
    Attributes:
        id: Unique identifier (UUID)
        name: Display name
        position: Optional position label
        status: Active or Inactive (manual toggle)
        avatar: Optional profile picture as a base64 data string
        created_at: Record creation timestamp
        updated_at: Last update timestamp
        deleted_at: Soft delete timestamp
    """
    
    __tablename__ = "employees"
    
    # Primary key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
        doc="Unique employee identifier"
    )
    
    name = Column(
        String(100),
        nullable=False,
        index=True,
        doc="Employee display name"
    )
    
    position = Column(
        String(100),
        nullable=True,
        doc="Position or role label"
    )
    
    status = Column(
        SQLEnum(EmployeeStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EmployeeStatus.ACTIVE,
        index=True,
        doc="Lifecycle status (Active or Inactive)"
    )
    
    avatar = Column(
        Text,
        nullable=True,
        doc="Profile picture as a base64 data string"
    )
    
    # Timestamps
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
    
    deleted_at = Column(
        DateTime,
        nullable=True,
        index=True,
        doc="Soft delete timestamp"
    )
    
    # Relationships
    attendance = relationship("DailyLogAttendance", back_populates="employee")
    payslips = relationship("Payslip", back_populates="employee")
    
    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, name='{self.name}', status={self.status})>"
    
    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE and self.deleted_at is None
