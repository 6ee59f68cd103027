"""Add indexes for recipe list filters

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

List reads filter on category and sort newest first.
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index("idx_recipes_category", "recipes", ["category"])
    op.create_index("idx_recipes_created_at", "recipes", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_recipes_created_at", table_name="recipes")
    op.drop_index("idx_recipes_category", table_name="recipes")
