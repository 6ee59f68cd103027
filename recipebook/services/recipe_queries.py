"""Read model for recipes: joined detail reads and summarized list reads.

Nothing here opens an explicit transaction. Recipes with no ingredient rows
are tolerated everywhere (empty association list, empty summary) even though
the write path never produces them.
"""
from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from recipebook.database import ConnectionPool
from recipebook.exceptions import NotFoundError
from recipebook.models.ingredient import Ingredient
from recipebook.models.recipe import Recipe, RecipeIngredient
from recipebook.schemas.recipe import (
    AssociationDetail,
    RecipeListItem,
    RecipeWithDetails,
)


def format_quantity(quantity: Decimal) -> str:
    """Render a quantity without trailing zeros: 300.000 -> '300', 1.500 -> '1.5'."""
    return format(Decimal(quantity).normalize(), "f")


def _ordered(pairs: Iterable[tuple[RecipeIngredient, Ingredient]]):
    return sorted(pairs, key=lambda pair: pair[1].name)


def build_summary(pairs: Iterable[tuple[RecipeIngredient, Ingredient]]) -> str:
    """``"flour (300g), sugar (250g)"``; empty string for no ingredients."""
    return ", ".join(
        f"{ingredient.name} ({format_quantity(ri.quantity)}{ingredient.unit})"
        for ri, ingredient in _ordered(pairs)
    )


def _root_fields(recipe: Recipe) -> dict:
    return dict(
        id=recipe.id,
        name=recipe.name,
        category=recipe.category,
        instructions=recipe.instructions,
        prep_time=recipe.prep_time,
        recipe_yield=recipe.recipe_yield,
        created_at=recipe.created_at,
        updated_at=recipe.updated_at,
    )


def build_recipe_details(
    recipe: Recipe,
    pairs: Iterable[tuple[RecipeIngredient, Ingredient]],
) -> RecipeWithDetails:
    """Recipe response with every association resolved to its catalog entry."""
    return RecipeWithDetails(
        **_root_fields(recipe),
        associations=[
            AssociationDetail(
                catalog_id=ingredient.id,
                name=ingredient.name,
                unit=ingredient.unit,
                quantity=ri.quantity,
            )
            for ri, ingredient in _ordered(pairs)
        ],
    )


def _pairs(recipe: Recipe) -> list[tuple[RecipeIngredient, Ingredient]]:
    return [(ri, ri.ingredient) for ri in recipe.ingredients]


class RecipeQueries:
    """Recipe reads joined against the ingredient catalog."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def get_by_id(self, recipe_id: UUID) -> RecipeWithDetails:
        """Get a single recipe with all of its ingredients."""
        with self.pool.session() as session:
            recipe = session.scalars(
                select(Recipe)
                .options(selectinload(Recipe.ingredients).joinedload(RecipeIngredient.ingredient))
                .where(Recipe.id == recipe_id)
            ).first()
            if recipe is None:
                raise NotFoundError("Recipe", recipe_id)
            return build_recipe_details(recipe, _pairs(recipe))

    def list(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[RecipeListItem]:
        """List recipes, newest first, each with an ingredient summary.

        Args:
            category: Exact category to keep.
            search: Case-insensitive substring of the recipe name.
        """
        query = select(Recipe).options(
            selectinload(Recipe.ingredients).joinedload(RecipeIngredient.ingredient)
        )
        if category is not None:
            query = query.where(Recipe.category == category)
        if search:
            escaped = (
                search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            query = query.where(Recipe.name.ilike(f"%{escaped}%", escape="\\"))
        query = query.order_by(Recipe.created_at.desc(), Recipe.name)

        with self.pool.session() as session:
            recipes = session.scalars(query).all()
            return [
                RecipeListItem(**_root_fields(recipe), summary=build_summary(_pairs(recipe)))
                for recipe in recipes
            ]

    def filter_by_category(self, category: str) -> list[RecipeListItem]:
        return self.list(category=category)

    def search_by_name(self, substring: str) -> list[RecipeListItem]:
        return self.list(search=substring)

    def categories(self) -> list[str]:
        """Distinct recipe categories, alphabetically."""
        with self.pool.session() as session:
            return list(
                session.scalars(
                    select(Recipe.category).distinct().order_by(Recipe.category)
                )
            )
