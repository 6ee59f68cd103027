"""Pydantic schemas for catalog ingredients."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class IngredientWrite(BaseModel):
    """Schema for creating or updating a catalog ingredient."""

    name: str = Field(..., description="Unique ingredient name")
    unit: str = Field(..., description="Display unit, e.g. 'g', 'ml', 'each'")


class IngredientResponse(BaseModel):
    """Schema for ingredient response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    unit: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
