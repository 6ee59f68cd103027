"""Recipe and RecipeIngredient models."""
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Text, TIMESTAMP,
    ForeignKey, Numeric, UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from . import Base

# Column limits, checked by request validation before any write
RECIPE_NAME_MAX_LENGTH = 100
CATEGORY_MAX_LENGTH = 50
YIELD_MAX_LENGTH = 50
PREP_TIME_MAX = 2**31 - 1  # 32-bit INTEGER
QUANTITY_PRECISION = 10
QUANTITY_SCALE = 3


class Recipe(Base):
    """Recipe root; owns its ingredient associations."""

    __tablename__ = "recipes"
    __table_args__ = (
        CheckConstraint("prep_time > 0", name="ck_recipes_prep_time_positive"),
        Index("idx_recipes_category", "category"),
        Index("idx_recipes_created_at", "created_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(RECIPE_NAME_MAX_LENGTH), nullable=False)
    category = Column(String(CATEGORY_MAX_LENGTH), nullable=False)  # 'Dessert', 'Breakfast', ...
    instructions = Column(Text, nullable=False)
    prep_time = Column(Integer, nullable=False)  # Minutes
    recipe_yield = Column("yield", String(YIELD_MAX_LENGTH), nullable=False)  # '12 servings', '1 loaf'
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    # Associations are removed by the database's ON DELETE CASCADE
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Recipe(name='{self.name}')>"


class RecipeIngredient(Base):
    """Quantity of one catalog ingredient used in one recipe."""

    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        UniqueConstraint("recipe_id", "ingredient_id", name="uq_recipe_ingredients"),
        CheckConstraint("quantity > 0", name="ck_recipe_ingredients_quantity_positive"),
        Index("idx_recipe_ingredients_recipe", "recipe_id"),
        Index("idx_recipe_ingredients_ingredient", "ingredient_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recipe_id = Column(
        UUID(as_uuid=True), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_id = Column(
        UUID(as_uuid=True), ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=False
    )
    quantity = Column(Numeric(QUANTITY_PRECISION, QUANTITY_SCALE), nullable=False)  # In the ingredient's unit

    # Relationships
    recipe = relationship("Recipe", back_populates="ingredients")
    ingredient = relationship("Ingredient", back_populates="recipe_ingredients")

    def __repr__(self):
        return f"<RecipeIngredient(recipe_id={self.recipe_id}, ingredient_id={self.ingredient_id})>"
