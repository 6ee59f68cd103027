"""SQLAlchemy models for recipebook."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models to register them with Base.metadata
from .ingredient import Ingredient
from .recipe import Recipe, RecipeIngredient

__all__ = [
    "Base",
    "Ingredient",
    "Recipe",
    "RecipeIngredient",
]
