"""Exception classes raised by the recipebook store.

Every error carries a ``kind`` taken from the fixed error taxonomy, so the
calling layer can translate it to a transport response without inspecting
the message:

    StoreError
    ├── ValidationError          (kind "ValidationError")
    ├── NotFoundError            (kind "NotFoundError")
    ├── ConflictError            (kind "ConflictError")
    ├── TransactionError         (kind "TransactionError")
    └── ServiceUnavailableError  (kind "ServiceUnavailable")

None of these are retried inside the store.
"""
from dataclasses import dataclass
from typing import Optional

from recipebook.schemas.errors import ErrorResponse


class StoreError(Exception):
    """Base exception for all store errors."""

    kind = "StoreError"

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Build the ``{kind, message, field?}`` error shape."""
        return ErrorResponse(kind=self.kind, message=self.message, field=self.field)


@dataclass(frozen=True)
class Violation:
    """A single failed validation rule."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationError(StoreError):
    """Raised when a proposed write fails validation.

    Args:
        violations: Every rule the write violated, in the order checked.
    """

    kind = "ValidationError"

    def __init__(self, violations: list[Violation]):
        self.violations = list(violations)
        message = "; ".join(str(v) for v in self.violations) or "invalid request"
        field = self.violations[0].field if self.violations else None
        super().__init__(f"Validation failed: {message}", field=field)


class NotFoundError(StoreError):
    """Raised when a recipe or catalog entry does not exist."""

    kind = "NotFoundError"

    def __init__(self, entity: str, entity_id, field: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found", field=field)


class ConflictError(StoreError):
    """Raised on duplicate catalog names or blocked catalog deletions."""

    kind = "ConflictError"


class TransactionError(StoreError):
    """Raised when a write fails unexpectedly and was rolled back."""

    kind = "TransactionError"

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        self.original_error = original_error
        super().__init__(message)


class ServiceUnavailableError(StoreError):
    """Raised when no pooled connection became free before the timeout."""

    kind = "ServiceUnavailable"
