"""Pydantic schemas for Recipe and RecipeIngredient shapes.

``yield`` is a Python keyword, so the field is named ``recipe_yield`` and
exposed under the ``yield`` alias. Dump with ``by_alias=True`` to get the
external shape.
"""
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Write Schemas
# ============================================================================


class AssociationWrite(BaseModel):
    """One ingredient line in a recipe write request."""

    catalog_id: UUID
    quantity: Decimal = Field(..., description="Amount of the ingredient, in its catalog unit")


class RecipeWrite(BaseModel):
    """Full recipe write: root fields plus the complete association set.

    Updates replace everything, so create and update share this schema.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    category: str
    instructions: str
    prep_time: int = Field(..., description="Preparation time in minutes")
    recipe_yield: str = Field(..., alias="yield", description="e.g. '12 servings', '1 loaf'")
    associations: list[AssociationWrite]


# ============================================================================
# Response Schemas
# ============================================================================


class AssociationDetail(BaseModel):
    """Association with its resolved catalog name and unit."""

    catalog_id: UUID
    name: str
    unit: str
    quantity: Decimal


class RecipeResponse(BaseModel):
    """Persisted recipe root fields."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    name: str
    category: str
    instructions: str
    prep_time: int
    recipe_yield: str = Field(..., alias="yield")
    created_at: datetime
    updated_at: datetime


class RecipeWithDetails(RecipeResponse):
    """Recipe with its resolved ingredient associations."""

    associations: list[AssociationDetail] = []


class RecipeListItem(RecipeResponse):
    """Recipe list entry with a one-line ingredient summary."""

    summary: str = ""
