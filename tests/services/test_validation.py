"""Tests for recipebook/services/validation.py - pure request validation."""
import uuid
from decimal import Decimal

import pytest

from recipebook.exceptions import ValidationError
from recipebook.schemas.recipe import AssociationWrite, RecipeWrite
from recipebook.services.validation import (
    normalize_recipe_write,
    validate_associations,
    validate_recipe_fields,
    validate_recipe_write,
)


FLOUR = uuid.uuid4()
SUGAR = uuid.uuid4()
EGG = uuid.uuid4()


def valid_request(**overrides):
    request = {
        "name": "Chocolate Cake",
        "category": "Dessert",
        "instructions": "Mix and bake.",
        "prep_time": 45,
        "yield": "1 cake",
        "associations": [
            {"catalog_id": str(FLOUR), "quantity": 300},
            {"catalog_id": str(SUGAR), "quantity": "250"},
            {"catalog_id": EGG, "quantity": Decimal("3")},
        ],
    }
    request.update(overrides)
    return request


def fields_of(violations):
    return [v.field for v in violations]


# ============================================================================
# validate_recipe_fields
# ============================================================================


class TestValidateRecipeFields:
    def test_valid(self):
        assert validate_recipe_fields(valid_request()) == []

    def test_reports_every_missing_field(self):
        violations = validate_recipe_fields({})
        assert fields_of(violations) == ["name", "category", "instructions", "yield", "prep_time"]
        assert all(v.message == "is required" for v in violations)

    @pytest.mark.parametrize("value", ["", "   ", 12])
    def test_blank_or_non_string_name(self, value):
        violations = validate_recipe_fields(valid_request(name=value))
        assert fields_of(violations) == ["name"]

    @pytest.mark.parametrize("value", [0, -5, "0"])
    def test_prep_time_must_be_positive(self, value):
        violations = validate_recipe_fields(valid_request(prep_time=value))
        assert fields_of(violations) == ["prep_time"]
        assert violations[0].message == "must be greater than 0"

    @pytest.mark.parametrize("value", ["soon", 12.5, True, "3.5", "²", "--5", Decimal("Infinity")])
    def test_prep_time_must_be_integer(self, value):
        violations = validate_recipe_fields(valid_request(prep_time=value))
        assert fields_of(violations) == ["prep_time"]
        assert violations[0].message == "must be an integer"

    def test_integral_string_and_float_accepted(self):
        assert validate_recipe_fields(valid_request(prep_time="30")) == []
        assert validate_recipe_fields(valid_request(prep_time=30.0)) == []

    def test_prep_time_fits_integer_column(self):
        assert validate_recipe_fields(valid_request(prep_time=2**31 - 1)) == []

        violations = validate_recipe_fields(valid_request(prep_time=2**31))
        assert fields_of(violations) == ["prep_time"]
        assert violations[0].message == "must be at most 2147483647"

    @pytest.mark.parametrize("field, max_length", [
        ("name", 100),
        ("category", 50),
        ("yield", 50),
    ])
    def test_text_fields_fit_their_columns(self, field, max_length):
        assert validate_recipe_fields(valid_request(**{field: "x" * max_length})) == []

        violations = validate_recipe_fields(valid_request(**{field: "x" * (max_length + 1)}))
        assert fields_of(violations) == [field]
        assert violations[0].message == f"must be at most {max_length} characters"

    def test_length_measured_after_stripping(self):
        assert validate_recipe_fields(valid_request(category="  " + "x" * 50 + "  ")) == []

    def test_instructions_have_no_length_limit(self):
        assert validate_recipe_fields(valid_request(instructions="Stir. " * 2000)) == []


# ============================================================================
# validate_associations
# ============================================================================


class TestValidateAssociations:
    def test_valid(self):
        assert validate_associations(valid_request()["associations"]) == []

    def test_missing(self):
        violations = validate_associations(None)
        assert fields_of(violations) == ["associations"]

    def test_empty_list_rejected(self):
        violations = validate_associations([])
        assert fields_of(violations) == ["associations"]
        assert "at least one" in violations[0].message

    def test_not_a_list(self):
        violations = validate_associations({"catalog_id": str(FLOUR), "quantity": 1})
        assert violations[0].message == "must be a list"

    def test_entry_not_a_mapping(self):
        violations = validate_associations([{"catalog_id": str(FLOUR), "quantity": 1}, "sugar"])
        assert fields_of(violations) == ["associations[1]"]

    def test_missing_catalog_id(self):
        violations = validate_associations([{"quantity": 1}])
        assert fields_of(violations) == ["associations[0].catalog_id"]
        assert violations[0].message == "is required"

    def test_catalog_id_not_a_uuid(self):
        violations = validate_associations([{"catalog_id": "flour", "quantity": 1}])
        assert violations[0].message == "must be a UUID"

    @pytest.mark.parametrize("quantity", [None, "lots", "NaN", "Infinity"])
    def test_quantity_must_be_a_number(self, quantity):
        violations = validate_associations([{"catalog_id": str(FLOUR), "quantity": quantity}])
        assert fields_of(violations) == ["associations[0].quantity"]

    @pytest.mark.parametrize("quantity", [0, -1, "0", Decimal("-0.5")])
    def test_non_positive_quantity_rejected(self, quantity):
        violations = validate_associations([{"catalog_id": str(FLOUR), "quantity": quantity}])
        assert fields_of(violations) == ["associations[0].quantity"]
        assert violations[0].message == "must be greater than 0"

    @pytest.mark.parametrize("quantity", ["0.0004", "1.2345", Decimal("1E-400")])
    def test_quantity_limited_to_three_decimal_places(self, quantity):
        violations = validate_associations([{"catalog_id": str(FLOUR), "quantity": quantity}])
        assert fields_of(violations) == ["associations[0].quantity"]
        assert violations[0].message == "must have at most 3 decimal places"

    @pytest.mark.parametrize("quantity", ["1e400", 10_000_000, "10000000.000"])
    def test_quantity_must_fit_numeric_column(self, quantity):
        violations = validate_associations([{"catalog_id": str(FLOUR), "quantity": quantity}])
        assert fields_of(violations) == ["associations[0].quantity"]
        assert violations[0].message == "must be less than 10000000"

    @pytest.mark.parametrize("quantity", ["0.001", "1.5000", "9999999.999", "2E+3"])
    def test_quantity_within_column_limits_accepted(self, quantity):
        assert validate_associations([{"catalog_id": str(FLOUR), "quantity": quantity}]) == []

    def test_reports_first_out_of_range_index_only(self):
        violations = validate_associations([
            {"catalog_id": str(FLOUR), "quantity": 300},
            {"catalog_id": str(SUGAR), "quantity": "0.0004"},
            {"catalog_id": str(EGG), "quantity": "0.0001"},
        ])
        assert fields_of(violations) == ["associations[1].quantity"]

    def test_reports_first_non_positive_index_only(self):
        violations = validate_associations([
            {"catalog_id": str(FLOUR), "quantity": 300},
            {"catalog_id": str(SUGAR), "quantity": 0},
            {"catalog_id": str(EGG), "quantity": -3},
        ])
        assert fields_of(violations) == ["associations[1].quantity"]

    def test_duplicate_catalog_id(self):
        violations = validate_associations([
            {"catalog_id": str(FLOUR), "quantity": 300},
            {"catalog_id": str(FLOUR), "quantity": 100},
        ])
        assert fields_of(violations) == ["associations[1].catalog_id"]
        assert "duplicate catalog_id" in violations[0].message

    def test_duplicate_detected_across_uuid_and_string_forms(self):
        violations = validate_associations([
            {"catalog_id": FLOUR, "quantity": 300},
            {"catalog_id": str(FLOUR).upper(), "quantity": 100},
        ])
        assert "duplicate catalog_id" in violations[0].message

    def test_independent_rules_all_reported(self):
        violations = validate_associations([
            {"catalog_id": str(FLOUR), "quantity": -1},
            {"catalog_id": str(FLOUR), "quantity": 2},
            {"quantity": 5},
        ])
        assert fields_of(violations) == [
            "associations[2].catalog_id",
            "associations[0].quantity",
            "associations[1].catalog_id",
        ]


# ============================================================================
# validate_recipe_write / normalize_recipe_write
# ============================================================================


class TestValidateRecipeWrite:
    def test_valid_request(self):
        result = validate_recipe_write(valid_request())
        assert result.valid
        result.raise_for_violations()  # no-op

    def test_combines_field_and_association_violations(self):
        result = validate_recipe_write(valid_request(name="", prep_time=0, associations=[]))
        assert not result.valid
        assert fields_of(result.violations) == ["name", "prep_time", "associations"]

    def test_raise_for_violations_lists_every_violation(self):
        result = validate_recipe_write(valid_request(category=" ", associations=[]))
        with pytest.raises(ValidationError) as exc_info:
            result.raise_for_violations()
        error = exc_info.value
        assert len(error.violations) == 2
        assert error.field == "category"
        assert "category" in error.message and "associations" in error.message

    def test_request_must_be_a_mapping(self):
        result = validate_recipe_write(["not", "a", "request"])
        assert fields_of(result.violations) == ["request"]

    def test_accepts_schema_instance(self):
        request = RecipeWrite(
            name="Bread",
            category="Baking",
            instructions="Knead.",
            prep_time=20,
            recipe_yield="1 loaf",
            associations=[AssociationWrite(catalog_id=FLOUR, quantity=Decimal("500"))],
        )
        assert validate_recipe_write(request).valid

    def test_schema_instance_with_duplicates_rejected(self):
        request = RecipeWrite(
            name="Bread",
            category="Baking",
            instructions="Knead.",
            prep_time=20,
            recipe_yield="1 loaf",
            associations=[
                AssociationWrite(catalog_id=FLOUR, quantity=Decimal("500")),
                AssociationWrite(catalog_id=FLOUR, quantity=Decimal("20")),
            ],
        )
        result = validate_recipe_write(request)
        assert "duplicate catalog_id" in result.violations[0].message


class TestNormalizeRecipeWrite:
    def test_types_are_coerced(self):
        request = normalize_recipe_write(valid_request(name="  Chocolate Cake ", prep_time="45"))
        assert request.name == "Chocolate Cake"
        assert request.prep_time == 45
        assert request.recipe_yield == "1 cake"
        assert [a.catalog_id for a in request.associations] == [FLOUR, SUGAR, EGG]
        assert [a.quantity for a in request.associations] == [
            Decimal("300"), Decimal("250"), Decimal("3"),
        ]

    def test_float_quantity_keeps_decimal_text(self):
        request = normalize_recipe_write(
            valid_request(associations=[{"catalog_id": str(FLOUR), "quantity": 0.1}])
        )
        assert request.associations[0].quantity == Decimal("0.1")
