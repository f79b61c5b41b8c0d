"""
Pydantic schemas for hall-related request/response validation.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class HallCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    capacity: int = Field(..., gt=0, le=100000)
    equipment_included: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    hourly_rate: float = Field(..., ge=0)
    is_available: bool = True
    location: Optional[str] = Field(None, max_length=255)
    rules: Optional[str] = Field(None, max_length=2000)


class HallAvailabilityUpdate(BaseModel):
    is_available: bool


class HallResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    capacity: int
    equipment_included: list[str]
    images: list[str]
    hourly_rate: float
    is_available: bool
    location: Optional[str]
    rules: Optional[str]
    booked_dates: list[date]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HallListResponse(BaseModel):
    halls: list[HallResponse]
    total: int
    cached: bool = False
