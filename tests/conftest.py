"""Test fixtures and configuration."""
import uuid
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from recipebook.database import ConnectionPool, create_database_engine
from recipebook.models import Base
from recipebook.models.recipe import Recipe, RecipeIngredient
from recipebook.services import IngredientCatalog, RecipeManager, RecipeQueries


@pytest.fixture(scope="function")
def engine():
    """Create an in-memory SQLite engine with foreign keys enforced."""
    engine = create_database_engine("sqlite:///:memory:")

    # Create all tables
    Base.metadata.create_all(engine)

    yield engine

    # Clean up
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def pool(engine):
    return ConnectionPool(engine)


@pytest.fixture
def catalog(pool):
    return IngredientCatalog(pool)


@pytest.fixture
def manager(catalog, pool):
    return RecipeManager(catalog, pool)


@pytest.fixture
def queries(pool):
    return RecipeQueries(pool)


@pytest.fixture
def count_rows(pool):
    """Count rows of a model, optionally filtered by column equality."""
    def _count(model, **filters):
        query = select(func.count()).select_from(model)
        for column, value in filters.items():
            query = query.where(getattr(model, column) == value)
        with pool.session() as session:
            return session.scalar(query)
    return _count


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------

def make_uuid():
    return uuid.uuid4()


def recipe_payload(associations, name="Chocolate Cake", category="Dessert", **overrides):
    """Request mapping in the external create/update shape."""
    payload = {
        "name": name,
        "category": category,
        "instructions": "Mix the dry ingredients, fold in the eggs, bake for 35 minutes.",
        "prep_time": 45,
        "yield": "1 cake",
        "associations": [
            {"catalog_id": str(catalog_id), "quantity": quantity}
            for catalog_id, quantity in associations
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def ingredient_factory(catalog):
    """Factory to create catalog ingredients through the catalog store."""
    def _create(name="Test Ingredient", unit="g"):
        return catalog.create(name, unit)
    return _create


@pytest.fixture
def pantry(ingredient_factory):
    """flour, sugar and egg catalog entries."""
    return {
        "flour": ingredient_factory("flour", "g"),
        "sugar": ingredient_factory("sugar", "g"),
        "egg": ingredient_factory("egg", "each"),
    }


@pytest.fixture
def recipe_factory(pool):
    """Factory that writes recipe rows directly, bypassing the manager.

    Used to set created_at explicitly and to build rows the manager would
    never produce (for example a recipe with no ingredients).
    """
    def _create(name="Test Recipe", category="Dessert", ingredients=(), **kwargs):
        with pool.transaction() as session:
            recipe = Recipe(
                id=kwargs.pop("id", make_uuid()),
                name=name,
                category=category,
                instructions=kwargs.pop("instructions", "Combine and bake."),
                prep_time=kwargs.pop("prep_time", 30),
                recipe_yield=kwargs.pop("recipe_yield", "12 servings"),
                created_at=kwargs.pop("created_at", datetime.utcnow()),
                updated_at=datetime.utcnow(),
                **kwargs,
            )
            session.add(recipe)
            session.flush()
            for ingredient, quantity in ingredients:
                session.add(
                    RecipeIngredient(
                        recipe_id=recipe.id,
                        ingredient_id=ingredient.id,
                        quantity=Decimal(str(quantity)),
                    )
                )
        return recipe
    return _create


@pytest.fixture
def payload():
    """Builder for create/update request mappings."""
    return recipe_payload


@pytest.fixture
def cake(manager, pantry):
    """Chocolate Cake with flour, sugar and eggs."""
    return manager.create(
        recipe_payload([
            (pantry["flour"].id, 300),
            (pantry["sugar"].id, 250),
            (pantry["egg"].id, 3),
        ])
    )
