from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from jsonschema import ValidationError, validators
from jsonschema.protocols import Validator

from apps.uuid_mcp.service.errors import InvalidParams
from apps.uuid_mcp.service.registry import InputSchema, to_json_schema

__all__ = ["ArgumentValidator"]


class ArgumentValidator:
    """Apply defaults and enforce an :class:`InputSchema` on tool arguments."""

    def __init__(self) -> None:
        self._fingerprint_cache: dict[str, Validator] = {}

    def validate(self, schema: InputSchema, arguments: Mapping[str, Any] | None) -> dict[str, Any]:
        """Return the coerced arguments or raise :class:`InvalidParams`.

        Only declared fields are kept. Missing fields with defaults are filled
        before validation; integral floats are narrowed to ``int`` afterwards.
        """

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise InvalidParams("Invalid params: arguments must be an object")

        declared = {spec.name for spec in schema}
        candidate = schema.defaults()
        candidate.update({key: value for key, value in arguments.items() if key in declared})

        validator = self._load_validator(schema)
        try:
            validator.validate(candidate)
        except ValidationError as exc:
            raise InvalidParams(f"Invalid params: {_describe(exc)}") from exc

        for spec in schema:
            value = candidate.get(spec.name)
            if spec.kind == "integer" and isinstance(value, float):
                candidate[spec.name] = int(value)
        return candidate

    def _load_validator(self, schema: InputSchema) -> Validator:
        document = to_json_schema(schema)
        fingerprint = _fingerprint(document)
        cached = self._fingerprint_cache.get(fingerprint)
        if cached is not None:
            return cached
        validator_cls = validators.validator_for(document)
        validator_cls.check_schema(document)
        validator = validator_cls(document)
        self._fingerprint_cache[fingerprint] = validator
        return validator


def _fingerprint(document: Mapping[str, Any]) -> str:
    payload = json.dumps(document, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _describe(error: ValidationError) -> str:
    path = ".".join(str(part) for part in error.absolute_path)
    return f"{path}: {error.message}" if path else error.message
