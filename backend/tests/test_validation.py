"""Unit tests for the declarative rule interpreter."""

from decimal import Decimal

import pytest

from app.api.routers.products import AVAILABILITY_RULES, ID_RULES, PRODUCT_RULES
from app.api.validation import Check, Rule, body, evaluate, path, to_decimal
from app.core.errors import FieldError


class TestToDecimal:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (10, Decimal("10")),
            (19.99, Decimal("19.99")),
            ("49.90", Decimal("49.90")),
            ("-3", Decimal("-3")),
            (".5", Decimal(".5")),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize(
        "value", [True, False, None, "", "hola", "1e", "1,5", " 5", [], {}, float("nan"), float("inf")]
    )
    def test_non_numeric_values(self, value):
        assert to_decimal(value) is None


class TestEvaluate:
    def test_stops_at_first_failing_check_per_field(self):
        errors = evaluate(PRODUCT_RULES, {}, {"name": "ok", "price": ""})
        assert errors == [FieldError(field="price", message="Price is required")]

    def test_reports_every_failing_field(self):
        errors = evaluate(PRODUCT_RULES, {}, {"price": "abc"})
        assert errors == [
            FieldError(field="name", message="Name is required"),
            FieldError(field="price", message="Price must be a number"),
        ]

    def test_passing_payload_has_no_errors(self):
        assert evaluate(PRODUCT_RULES, {}, {"name": "Apple", "price": 1.99}) == []

    def test_optional_rule_skipped_when_absent(self):
        assert evaluate(AVAILABILITY_RULES, {}, {}) == []

    def test_optional_rule_checked_when_present(self):
        errors = evaluate(AVAILABILITY_RULES, {}, {"availability": "true"})
        assert errors == [
            FieldError(field="availability", message="Availability must be a boolean")
        ]

    def test_explicit_null_is_not_absent(self):
        errors = evaluate(AVAILABILITY_RULES, {}, {"name": None})
        assert errors == [FieldError(field="name", message="Name is required")]

    @pytest.mark.parametrize(
        "raw_id, message",
        [
            ("abc", "Id must be a number"),
            ("1.5", "Id must be a number"),
            ("0", "Id must be greater than 0"),
            ("-4", "Id must be greater than 0"),
        ],
    )
    def test_id_rules(self, raw_id, message):
        errors = evaluate(ID_RULES, {"product_id": raw_id}, {})
        assert errors == [FieldError(field="product_id", message=message)]

    def test_valid_id(self):
        assert evaluate(ID_RULES, {"product_id": "12"}, {}) == []

    def test_path_and_body_rules_read_their_own_source(self):
        rules = (path("name", Check("not_empty", "path name")), body("name", Check("not_empty", "body name")))
        errors = evaluate(rules, {"name": "x"}, {})
        assert errors == [FieldError(field="name", message="body name")]


class TestRuleDescriptors:
    def test_unknown_check_kind_rejected(self):
        with pytest.raises(ValueError, match="Unknown validation check"):
            Check("is_email", "nope")

    def test_as_optional_keeps_checks(self):
        rule = body("price", Check("numeric", "Price must be a number"))
        optional = rule.as_optional()
        assert isinstance(optional, Rule)
        assert optional.optional is True
        assert optional.checks == rule.checks
        assert rule.optional is False


class TestBoundedChecks:
    @pytest.mark.parametrize(
        "value, passes",
        [(1, True), ("0.01", True), ("1.500", True), (0.001, False), (1.999, False), ("abc", False)],
    )
    def test_max_decimals(self, value, passes):
        assert Check("max_decimals", "too precise", 2).passes(value) is passes

    @pytest.mark.parametrize(
        "value, passes",
        [("99999999.99", True), (100000000, False), ("1e", False)],
    )
    def test_max_value(self, value, passes):
        assert Check("max_value", "too large", Decimal("99999999.99")).passes(value) is passes

    def test_max_length_measures_stripped_string(self):
        check = Check("max_length", "too long", 3)
        assert check.passes("  abc  ") is True
        assert check.passes("abcd") is False
        assert check.passes(1234) is False

    def test_string(self):
        check = Check("string", "not a string")
        assert check.passes("x") is True
        assert check.passes({"a": 1}) is False
        assert check.passes(5) is False

    @pytest.mark.parametrize("kind", ["max_length", "max_value", "max_decimals"])
    def test_bounded_check_requires_limit(self, kind):
        with pytest.raises(ValueError, match="needs a limit"):
            Check(kind, "missing limit")

    def test_price_rules_follow_the_column(self):
        errors = evaluate(PRODUCT_RULES, {}, {"name": "n" * 101, "price": 0.001})
        assert errors == [
            FieldError(field="name", message="Name must be at most 100 characters"),
            FieldError(field="price", message="Price must have at most 2 decimal places"),
        ]
