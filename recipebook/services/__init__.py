"""Store services and their composition."""
from typing import NamedTuple

from recipebook.database import ConnectionPool
from recipebook.services.ingredient_catalog import IngredientCatalog
from recipebook.services.recipe_manager import RecipeManager
from recipebook.services.recipe_queries import RecipeQueries


class Services(NamedTuple):
    catalog: IngredientCatalog
    recipes: RecipeManager
    queries: RecipeQueries


def build_services(pool: ConnectionPool) -> Services:
    """Wire the store services onto one connection pool."""
    catalog = IngredientCatalog(pool)
    return Services(
        catalog=catalog,
        recipes=RecipeManager(catalog, pool),
        queries=RecipeQueries(pool),
    )


__all__ = [
    "IngredientCatalog",
    "RecipeManager",
    "RecipeQueries",
    "Services",
    "build_services",
]
