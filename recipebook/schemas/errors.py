"""Pydantic schema for error responses."""
from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error shape returned to callers: ``{kind, message, field?}``."""

    kind: str
    message: str
    field: Optional[str] = None
