"""Validation of proposed recipe writes.

Pure functions: no database access and no side effects. They run before a
connection is acquired, so a rejected request never touches the pool.
Catalog existence is deliberately not checked here; that check races with
catalog deletions and belongs inside the write transaction.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel

from recipebook.exceptions import ValidationError, Violation
from recipebook.models.recipe import (
    CATEGORY_MAX_LENGTH,
    PREP_TIME_MAX,
    QUANTITY_PRECISION,
    QUANTITY_SCALE,
    RECIPE_NAME_MAX_LENGTH,
    YIELD_MAX_LENGTH,
)
from recipebook.schemas.recipe import AssociationWrite, RecipeWrite

REQUIRED_TEXT_FIELDS = ("name", "category", "instructions", "yield")

# instructions is TEXT and has no limit
TEXT_FIELD_MAX_LENGTHS = {
    "name": RECIPE_NAME_MAX_LENGTH,
    "category": CATEGORY_MAX_LENGTH,
    "yield": YIELD_MAX_LENGTH,
}

# NUMERIC(10, 3) holds values below 10**7 with at most 3 decimal places
QUANTITY_LIMIT = Decimal(10) ** (QUANTITY_PRECISION - QUANTITY_SCALE)
QUANTITY_STEP = Decimal(1).scaleb(-QUANTITY_SCALE)


@dataclass
class ValidationResult:
    """Outcome of validating a proposed write."""

    violations: list[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations

    def raise_for_violations(self) -> None:
        if self.violations:
            raise ValidationError(self.violations)


def as_request_mapping(data: Any) -> Any:
    """Return the external ``{name, ..., yield, associations}`` shape."""
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    return data


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    return None


def _parse_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _parse_uuid(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            return None
    return None


def validate_recipe_fields(data: Mapping) -> list[Violation]:
    """Check root fields. Every violated field is reported."""
    violations = []
    for name in REQUIRED_TEXT_FIELDS:
        value = data.get(name)
        if value is None:
            violations.append(Violation(name, "is required"))
        elif not isinstance(value, str) or not value.strip():
            violations.append(Violation(name, "must be a non-empty string"))
        elif name in TEXT_FIELD_MAX_LENGTHS and len(value.strip()) > TEXT_FIELD_MAX_LENGTHS[name]:
            violations.append(
                Violation(name, f"must be at most {TEXT_FIELD_MAX_LENGTHS[name]} characters")
            )

    prep_time = data.get("prep_time")
    if prep_time is None:
        violations.append(Violation("prep_time", "is required"))
    else:
        minutes = _parse_int(prep_time)
        if minutes is None:
            violations.append(Violation("prep_time", "must be an integer"))
        elif minutes <= 0:
            violations.append(Violation("prep_time", "must be greater than 0"))
        elif minutes > PREP_TIME_MAX:
            violations.append(Violation("prep_time", f"must be at most {PREP_TIME_MAX}"))

    return violations


def validate_associations(associations: Any) -> list[Violation]:
    """Check the association list.

    Each rule reports only its first offending index.
    """
    if associations is None:
        return [Violation("associations", "is required")]
    if not isinstance(associations, (list, tuple)):
        return [Violation("associations", "must be a list")]
    if not associations:
        return [Violation("associations", "must contain at least one ingredient")]

    bad_shape = bad_catalog_id = bad_quantity = non_positive = duplicate = None
    too_large = too_precise = None
    seen: set[UUID] = set()

    for index, entry in enumerate(associations):
        if not isinstance(entry, Mapping):
            if bad_shape is None:
                bad_shape = Violation(
                    f"associations[{index}]", "must be an object with catalog_id and quantity"
                )
            continue

        catalog_id = _parse_uuid(entry.get("catalog_id"))
        if catalog_id is None:
            if bad_catalog_id is None:
                message = "is required" if entry.get("catalog_id") is None else "must be a UUID"
                bad_catalog_id = Violation(f"associations[{index}].catalog_id", message)
        elif catalog_id in seen:
            if duplicate is None:
                duplicate = Violation(
                    f"associations[{index}].catalog_id",
                    f"duplicate catalog_id {catalog_id}",
                )
        else:
            seen.add(catalog_id)

        raw_quantity = entry.get("quantity")
        quantity = _parse_decimal(raw_quantity)
        if quantity is None:
            if bad_quantity is None:
                message = "is required" if raw_quantity is None else "must be a number"
                bad_quantity = Violation(f"associations[{index}].quantity", message)
        elif quantity <= 0:
            if non_positive is None:
                non_positive = Violation(
                    f"associations[{index}].quantity", "must be greater than 0"
                )
        elif quantity >= QUANTITY_LIMIT:
            if too_large is None:
                too_large = Violation(
                    f"associations[{index}].quantity", f"must be less than {QUANTITY_LIMIT}"
                )
        elif quantity != quantity.quantize(QUANTITY_STEP):
            if too_precise is None:
                too_precise = Violation(
                    f"associations[{index}].quantity",
                    f"must have at most {QUANTITY_SCALE} decimal places",
                )

    return [
        v for v in (
            bad_shape, bad_catalog_id, bad_quantity, non_positive, too_large, too_precise,
            duplicate,
        )
        if v is not None
    ]


def validate_recipe_write(data: Any) -> ValidationResult:
    """Validate a full recipe write (root fields plus associations)."""
    data = as_request_mapping(data)
    if not isinstance(data, Mapping):
        return ValidationResult([Violation("request", "must be an object")])
    violations = validate_recipe_fields(data)
    violations.extend(validate_associations(data.get("associations")))
    return ValidationResult(violations)


def normalize_recipe_write(data: Any) -> RecipeWrite:
    """Build the typed request from data that passed validate_recipe_write."""
    data = as_request_mapping(data)
    return RecipeWrite(
        name=data["name"].strip(),
        category=data["category"].strip(),
        instructions=data["instructions"].strip(),
        prep_time=_parse_int(data["prep_time"]),
        recipe_yield=data["yield"].strip(),
        associations=[
            AssociationWrite(
                catalog_id=_parse_uuid(entry["catalog_id"]),
                quantity=_parse_decimal(entry["quantity"]),
            )
            for entry in data["associations"]
        ],
    )
