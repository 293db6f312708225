"""
Piece rate Pydantic schemas for request/response validation.
"""

from uuid import UUID
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class PieceRateBase(BaseModel):
    """Base PieceRate schema with common fields."""
    
    task_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Task display label (need not be unique)"
    )
    
    rate: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=4,
        description="Amount paid per unit"
    )


class PieceRateCreate(PieceRateBase):
    """Schema for adding a rate to the catalog."""
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task_name": "Harvest",
                "rate": "10.00"
            }
        }
    )


class PieceRateUpdate(BaseModel):
    """
    Schema for editing a catalog rate.
    
    Edits apply to future daily tasks only; recorded tasks keep the
    values copied when they were entered.
    """
    
    task_name: Optional[str] = Field(None, min_length=1, max_length=100, description="Updated task label")
    rate: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=4, description="Updated rate")


class PieceRateRead(PieceRateBase):
    """Schema for reading a catalog rate."""
    
    id: UUID = Field(..., description="Unique identifier of the rate")
    created_at: datetime = Field(..., description="When the rate was created")
    updated_at: datetime = Field(..., description="When the rate was last edited")
    
    model_config = ConfigDict(from_attributes=True)


class PieceRateListResponse(BaseModel):
    """Schema for rate catalog listing."""
    
    piece_rates: List[PieceRateRead] = Field(..., description="Catalog entries")
    total: int = Field(..., description="Total number of entries")
