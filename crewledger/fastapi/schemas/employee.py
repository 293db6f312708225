"""
Employee Pydantic schemas for request/response validation.
"""

from uuid import UUID
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator

from crewledger.payroll.types import EmployeeStatus


class EmployeeBase(BaseModel):
    """Base Employee schema with common fields."""
    
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Employee display name"
    )
    
    position: Optional[str] = Field(
        None,
        max_length=100,
        description="Position or role label"
    )
    
    status: EmployeeStatus = Field(
        default=EmployeeStatus.ACTIVE,
        description="Lifecycle status (Active or Inactive)"
    )
    
    avatar: Optional[str] = Field(
        None,
        description="Profile picture as a base64 data string"
    )
    
    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Strip surrounding whitespace and reject blank names."""
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class EmployeeCreate(EmployeeBase):
    """Schema for creating a new employee."""
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ayu Lestari",
                "position": "Picker",
                "status": "Active"
            }
        }
    )


class EmployeeUpdate(BaseModel):
    """Schema for updating an existing employee."""
    
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Updated name")
    position: Optional[str] = Field(None, max_length=100, description="Updated position")
    status: Optional[EmployeeStatus] = Field(None, description="Updated status")
    avatar: Optional[str] = Field(None, description="Updated avatar")
    
    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class EmployeeStatusUpdate(BaseModel):
    """Schema for switching an employee between Active and Inactive."""
    
    status: EmployeeStatus = Field(..., description="New status")


class EmployeeRead(EmployeeBase):
    """Schema for reading employee information."""
    
    id: UUID = Field(..., description="Unique identifier of the employee")
    created_at: datetime = Field(..., description="When the employee was created")
    updated_at: datetime = Field(..., description="When the employee was last updated")
    
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "Ayu Lestari",
                "position": "Picker",
                "status": "Active",
                "avatar": None,
                "created_at": "2024-03-01T08:00:00",
                "updated_at": "2024-03-01T08:00:00"
            }
        }
    )


class EmployeeListResponse(BaseModel):
    """Schema for paginated employee listing."""
    
    employees: List[EmployeeRead] = Field(..., description="List of employees")
    total: int = Field(..., description="Total number of matching employees")
    skip: int = Field(..., description="Number of records skipped")
    limit: int = Field(..., description="Maximum number of records returned")
