"""Ingredient catalog model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, TIMESTAMP
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from . import Base

INGREDIENT_NAME_MAX_LENGTH = 100
UNIT_MAX_LENGTH = 20


class Ingredient(Base):
    """Shared catalog of ingredients referenced by recipes."""

    __tablename__ = "ingredients"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(INGREDIENT_NAME_MAX_LENGTH), nullable=False, unique=True)
    unit = Column(String(UNIT_MAX_LENGTH), nullable=False)  # 'g', 'ml', 'each', ...
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    recipe_ingredients = relationship(
        "RecipeIngredient", back_populates="ingredient", passive_deletes="all"
    )

    def __repr__(self):
        return f"<Ingredient(name='{self.name}', unit='{self.unit}')>"
