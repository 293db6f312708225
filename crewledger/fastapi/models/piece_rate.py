"""
PieceRate model for the task rate catalog.
"""

from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import Column, String, Numeric, DateTime, Uuid

from crewledger.fastapi.dependencies.database import Base


class PieceRate(Base):
    """
    A named task and the amount paid per unit.
    
    Task names are not unique. Rates can be edited at any time; daily
    tasks copy the name and rate when they are recorded, so editing a
    rate never changes what was already logged.
    """
    
    __tablename__ = "piece_rates"
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
        doc="Unique piece rate identifier"
    )
    
    task_name = Column(
        String(100),
        nullable=False,
        index=True,
        doc="Task display label (duplicates allowed)"
    )
    
    rate = Column(
        Numeric(precision=12, scale=4),
        nullable=False,
        doc="Amount paid per unit of work"
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
    
    def __repr__(self) -> str:
        return f"<PieceRate(id={self.id}, task_name='{self.task_name}', rate={self.rate})>"
