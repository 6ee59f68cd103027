"""Ingredient catalog: independent CRUD over shared catalog entries."""
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from recipebook.database import ConnectionPool
from recipebook.exceptions import ConflictError, NotFoundError, ValidationError, Violation
from recipebook.models.ingredient import INGREDIENT_NAME_MAX_LENGTH, UNIT_MAX_LENGTH, Ingredient
from recipebook.models.recipe import RecipeIngredient
from recipebook.schemas.ingredient import IngredientResponse

logger = logging.getLogger(__name__)


def _clean(name, unit) -> tuple[str, str]:
    """Strip inputs and reject blanks or over-long values, reporting every bad field."""
    violations = []
    for field, value, max_length in (
        ("name", name, INGREDIENT_NAME_MAX_LENGTH),
        ("unit", unit, UNIT_MAX_LENGTH),
    ):
        if not isinstance(value, str) or not value.strip():
            violations.append(Violation(field, "must be a non-empty string"))
        elif len(value.strip()) > max_length:
            violations.append(Violation(field, f"must be at most {max_length} characters"))
    if violations:
        raise ValidationError(violations)
    return name.strip(), unit.strip()


class IngredientCatalog:
    """Catalog of ingredients referenced by recipes.

    Reads use a plain pooled session. Writes run in ``pool.transaction()``,
    so a UNIQUE or RESTRICT violation that slips past the pre-checks is still
    reported as ConflictError.
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[IngredientResponse]:
        """All ingredients ordered by name."""
        with self.pool.session() as session:
            ingredients = session.scalars(select(Ingredient).order_by(Ingredient.name)).all()
            return [IngredientResponse.model_validate(i) for i in ingredients]

    def get_by_id(self, ingredient_id: UUID) -> IngredientResponse:
        with self.pool.session() as session:
            ingredient = session.get(Ingredient, ingredient_id)
            if ingredient is None:
                raise NotFoundError("Ingredient", ingredient_id)
            return IngredientResponse.model_validate(ingredient)

    def get_by_name(self, name: str) -> Optional[IngredientResponse]:
        with self.pool.session() as session:
            ingredient = session.scalars(
                select(Ingredient).where(Ingredient.name == name.strip())
            ).first()
            return IngredientResponse.model_validate(ingredient) if ingredient else None

    def usage_count(self, ingredient_id: UUID) -> int:
        """Number of recipe associations referencing the ingredient."""
        with self.pool.session() as session:
            return self._count_references(session, ingredient_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, name: str, unit: str) -> IngredientResponse:
        name, unit = _clean(name, unit)
        with self.pool.transaction() as session:
            self._ensure_name_free(session, name)
            ingredient = Ingredient(name=name, unit=unit)
            session.add(ingredient)
            session.flush()
            response = IngredientResponse.model_validate(ingredient)

        logger.info(f"Created ingredient '{name}' ({response.id})")
        return response

    def update(self, ingredient_id: UUID, name: str, unit: str) -> IngredientResponse:
        name, unit = _clean(name, unit)
        with self.pool.transaction() as session:
            ingredient = session.get(Ingredient, ingredient_id)
            if ingredient is None:
                raise NotFoundError("Ingredient", ingredient_id)
            if name != ingredient.name:
                self._ensure_name_free(session, name, exclude_id=ingredient_id)

            ingredient.name = name
            ingredient.unit = unit
            ingredient.updated_at = datetime.utcnow()
            session.flush()
            response = IngredientResponse.model_validate(ingredient)

        logger.info(f"Updated ingredient {ingredient_id}")
        return response

    def delete(self, ingredient_id: UUID) -> None:
        """Delete an ingredient no recipe uses.

        Raises:
            NotFoundError: No ingredient has this id.
            ConflictError: At least one recipe references the ingredient.
        """
        with self.pool.transaction() as session:
            ingredient = session.get(Ingredient, ingredient_id)
            if ingredient is None:
                raise NotFoundError("Ingredient", ingredient_id)

            in_use = self._count_references(session, ingredient_id)
            if in_use > 0:
                logger.warning(
                    f"Refused to delete ingredient '{ingredient.name}': used in {in_use} recipe(s)"
                )
                raise ConflictError(
                    f"Cannot delete ingredient '{ingredient.name}': entry in use by {in_use} recipe(s)",
                    field="id",
                )

            session.delete(ingredient)

        logger.info(f"Deleted ingredient {ingredient_id}")

    # ------------------------------------------------------------------
    # Helpers shared with the recipe write path
    # ------------------------------------------------------------------

    def require_all(self, session: Session, catalog_ids: Sequence[UUID]) -> dict[UUID, Ingredient]:
        """Load every referenced ingredient inside the caller's transaction.

        Raises:
            NotFoundError: For the first id with no catalog entry, naming its
                position in the association list.
        """
        found = {
            ingredient.id: ingredient
            for ingredient in session.scalars(
                select(Ingredient).where(Ingredient.id.in_(catalog_ids))
            )
        }
        for index, catalog_id in enumerate(catalog_ids):
            if catalog_id not in found:
                raise NotFoundError(
                    "Ingredient", catalog_id, field=f"associations[{index}].catalog_id"
                )
        return found

    @staticmethod
    def _count_references(session: Session, ingredient_id: UUID) -> int:
        return session.scalar(
            select(func.count(RecipeIngredient.id)).where(
                RecipeIngredient.ingredient_id == ingredient_id
            )
        )

    @staticmethod
    def _ensure_name_free(session: Session, name: str, exclude_id: Optional[UUID] = None) -> None:
        query = select(Ingredient.id).where(Ingredient.name == name)
        if exclude_id is not None:
            query = query.where(Ingredient.id != exclude_id)
        if session.scalar(query) is not None:
            logger.warning(f"Duplicate ingredient name rejected: '{name}'")
            raise ConflictError(f"Ingredient with name '{name}' already exists", field="name")
