"""Atomic writes of a recipe together with its full ingredient set.

A recipe and its ingredient rows are written as one unit:

    validate -> acquire connection -> begin -> statements -> commit/rollback -> release

Updates replace the whole association set (delete every existing row, insert
the requested rows) instead of diffing against what is stored, so after a
committed update the stored set is exactly the requested one.
"""
import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from recipebook.database import ConnectionPool
from recipebook.exceptions import NotFoundError, StoreError
from recipebook.models.recipe import Recipe, RecipeIngredient
from recipebook.schemas.recipe import AssociationWrite, RecipeWithDetails, RecipeWrite
from recipebook.services.ingredient_catalog import IngredientCatalog
from recipebook.services.recipe_queries import build_recipe_details
from recipebook.services.validation import normalize_recipe_write, validate_recipe_write

logger = logging.getLogger(__name__)


class RecipeManager:
    """Creates, replaces, and deletes recipes with their ingredient associations.

    Args:
        catalog: Ingredient catalog used for the in-transaction existence check.
        pool: Connection pool handle; each write holds one connection for the
            duration of its transaction.
    """

    def __init__(self, catalog: IngredientCatalog, pool: ConnectionPool):
        self.catalog = catalog
        self.pool = pool

    def create(self, data: Any) -> RecipeWithDetails:
        """Create a recipe and all of its ingredient rows atomically.

        Args:
            data: ``RecipeWrite`` or the equivalent request mapping.

        Raises:
            ValidationError: Request rejected before any connection is acquired.
            NotFoundError: An association references a missing ingredient.
            TransactionError: Unexpected failure; nothing was written.
            ServiceUnavailableError: No pooled connection became available.
        """
        request = self._validated(data, operation="create")

        try:
            with self.pool.transaction() as session:
                recipe = Recipe(
                    name=request.name,
                    category=request.category,
                    instructions=request.instructions,
                    prep_time=request.prep_time,
                    recipe_yield=request.recipe_yield,
                )
                session.add(recipe)
                session.flush()

                ingredients = self.catalog.require_all(
                    session, [a.catalog_id for a in request.associations]
                )
                rows = self._insert_associations(session, recipe.id, request.associations)
                session.flush()
                result = build_recipe_details(
                    recipe, [(ri, ingredients[ri.ingredient_id]) for ri in rows]
                )
        except StoreError as e:
            logger.warning(f"Recipe create '{request.name}' rejected: {e.kind}: {e.message}")
            raise

        logger.info(
            f"Created recipe '{result.name}' ({result.id}) with {len(result.associations)} ingredients"
        )
        return result

    def update(self, recipe_id: UUID, data: Any) -> RecipeWithDetails:
        """Replace a recipe's fields and its entire ingredient set atomically.

        Raises:
            NotFoundError: The recipe, or a referenced ingredient, is missing.
            ValidationError: Request rejected before any write was attempted.
            TransactionError: Unexpected failure; the previous state is kept.
            ServiceUnavailableError: No pooled connection became available.
        """
        self._require_recipe(recipe_id)
        request = self._validated(data, operation="update")

        try:
            with self.pool.transaction() as session:
                recipe = session.scalars(
                    select(Recipe).where(Recipe.id == recipe_id).with_for_update()
                ).first()
                if recipe is None:
                    # Deleted between the existence check and the lock
                    raise NotFoundError("Recipe", recipe_id)

                recipe.name = request.name
                recipe.category = request.category
                recipe.instructions = request.instructions
                recipe.prep_time = request.prep_time
                recipe.recipe_yield = request.recipe_yield
                recipe.updated_at = datetime.utcnow()

                session.execute(
                    delete(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id)
                )
                ingredients = self.catalog.require_all(
                    session, [a.catalog_id for a in request.associations]
                )
                rows = self._insert_associations(session, recipe_id, request.associations)
                session.flush()
                result = build_recipe_details(
                    recipe, [(ri, ingredients[ri.ingredient_id]) for ri in rows]
                )
        except StoreError as e:
            logger.warning(f"Recipe update {recipe_id} rejected: {e.kind}: {e.message}")
            raise

        logger.info(
            f"Replaced recipe {recipe_id} with {len(result.associations)} ingredients"
        )
        return result

    def delete(self, recipe_id: UUID) -> None:
        """Delete a recipe; the database cascades the delete to its ingredient rows."""
        self._require_recipe(recipe_id)

        with self.pool.transaction() as session:
            result = session.execute(delete(Recipe).where(Recipe.id == recipe_id))
            if result.rowcount == 0:
                raise NotFoundError("Recipe", recipe_id)

        logger.info(f"Deleted recipe {recipe_id}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validated(self, data: Any, operation: str) -> RecipeWrite:
        result = validate_recipe_write(data)
        if not result.valid:
            logger.warning(
                f"Recipe {operation} failed validation: "
                + "; ".join(str(v) for v in result.violations)
            )
            result.raise_for_violations()
        return normalize_recipe_write(data)

    def _require_recipe(self, recipe_id: UUID) -> None:
        with self.pool.session() as session:
            if session.get(Recipe, recipe_id) is None:
                raise NotFoundError("Recipe", recipe_id)

    def _insert_associations(
        self,
        session: Session,
        recipe_id: UUID,
        associations: list[AssociationWrite],
    ) -> list[RecipeIngredient]:
        rows = [
            RecipeIngredient(
                recipe_id=recipe_id,
                ingredient_id=association.catalog_id,
                quantity=association.quantity,
            )
            for association in associations
        ]
        session.add_all(rows)
        return rows
