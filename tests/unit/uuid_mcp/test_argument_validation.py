from __future__ import annotations

import pytest

from apps.uuid_mcp.service.errors import InvalidParams
from apps.uuid_mcp.service.tools import generate_schema, validate_schema
from apps.uuid_mcp.validation import ArgumentValidator


@pytest.fixture
def validator() -> ArgumentValidator:
    return ArgumentValidator()


def test_defaults_are_applied(validator: ArgumentValidator) -> None:
    assert validator.validate(generate_schema(10), {}) == {"version": "random", "count": 1}
    assert validator.validate(generate_schema(10), None) == {"version": "random", "count": 1}


def test_supplied_values_override_defaults(validator: ArgumentValidator) -> None:
    arguments = {"version": "time-ordered", "count": 10}
    assert validator.validate(generate_schema(10), arguments) == arguments


def test_undeclared_arguments_are_stripped(validator: ArgumentValidator) -> None:
    result = validator.validate(generate_schema(10), {"count": 2, "extra": True})
    assert result == {"version": "random", "count": 2}


def test_integral_floats_are_coerced(validator: ArgumentValidator) -> None:
    result = validator.validate(generate_schema(10), {"count": 3.0})
    assert result["count"] == 3
    assert isinstance(result["count"], int)


@pytest.mark.parametrize(
    "arguments",
    [
        {"count": 0},
        {"count": 11},
        {"count": -1},
        {"count": 2.5},
        {"count": "3"},
        {"count": True},
        {"version": "v4"},
        {"version": "RANDOM"},
        {"version": 4},
    ],
)
def test_constraint_violations_raise_invalid_params(
    validator: ArgumentValidator, arguments: dict[str, object]
) -> None:
    with pytest.raises(InvalidParams, match="Invalid params"):
        validator.validate(generate_schema(10), arguments)


def test_required_field_is_enforced(validator: ArgumentValidator) -> None:
    with pytest.raises(InvalidParams, match="identifier"):
        validator.validate(validate_schema(), {})
    with pytest.raises(InvalidParams):
        validator.validate(validate_schema(), {"identifier": 12})
    assert validator.validate(validate_schema(), {"identifier": ""}) == {"identifier": ""}


def test_non_mapping_arguments_are_rejected(validator: ArgumentValidator) -> None:
    with pytest.raises(InvalidParams, match="must be an object"):
        validator.validate(generate_schema(10), ["count", 1])  # type: ignore[arg-type]


def test_validators_are_cached_by_schema_fingerprint(validator: ArgumentValidator) -> None:
    first = validator._load_validator(generate_schema(10))
    second = validator._load_validator(generate_schema(10))
    third = validator._load_validator(generate_schema(5))
    assert first is second
    assert third is not first
