from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from .errors import DuplicateName

__all__ = [
    "ActionDescriptor",
    "ActionRegistry",
    "FieldSpec",
    "InputSchema",
    "ResourceDescriptor",
    "to_json_schema",
]

FieldKind = Literal["string", "integer"]
ActionHandler = Callable[[Mapping[str, Any]], Mapping[str, Any]]
ResourceHandler = Callable[[str], Mapping[str, Any]]

_MISSING: Any = object()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Declarative constraints for a single action argument."""

    name: str
    kind: FieldKind
    description: str = ""
    default: Any = _MISSING
    enum: tuple[str, ...] | None = None
    minimum: int | None = None
    maximum: int | None = None

    @property
    def required(self) -> bool:
        return self.default is _MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.kind}
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.has_default:
            schema["default"] = self.default
        if self.description:
            schema["description"] = self.description
        return schema


@dataclass(frozen=True, slots=True)
class InputSchema:
    fields: tuple[FieldSpec, ...] = ()

    def __iter__(self):
        return iter(self.fields)

    def defaults(self) -> dict[str, Any]:
        return {spec.name: spec.default for spec in self.fields if spec.has_default}


def to_json_schema(schema: InputSchema) -> dict[str, Any]:
    """Translate a declarative :class:`InputSchema` to the wire JSON Schema."""

    payload: dict[str, Any] = {
        "type": "object",
        "properties": {spec.name: spec.to_json_schema() for spec in schema},
    }
    required = [spec.name for spec in schema if spec.required]
    if required:
        payload["required"] = required
    payload["$schema"] = "http://json-schema.org/draft-07/schema#"
    return payload


@dataclass(frozen=True, slots=True)
class ActionDescriptor:
    name: str
    title: str
    description: str
    input_schema: InputSchema
    handler: ActionHandler = field(compare=False, repr=False)

    def to_listing(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": to_json_schema(self.input_schema),
        }


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    name: str
    uri: str
    title: str
    description: str
    mime_type: str
    handler: ResourceHandler = field(compare=False, repr=False)

    def to_listing(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "uri": self.uri,
            "title": self.title,
            "description": self.description,
            "mimeType": self.mime_type,
        }


class ActionRegistry:
    """Name-to-action and URI-to-resource lookup, frozen after population."""

    def __init__(
        self,
        actions: Iterable[ActionDescriptor] = (),
        resources: Iterable[ResourceDescriptor] = (),
    ) -> None:
        self._actions: dict[str, ActionDescriptor] = {}
        self._resources: dict[str, ResourceDescriptor] = {}
        self._frozen = False
        for action in actions:
            self.register_action(action)
        for resource in resources:
            self.register_resource(resource)

    def register_action(self, descriptor: ActionDescriptor) -> None:
        self._ensure_mutable()
        if descriptor.name in self._actions:
            raise DuplicateName(f"action '{descriptor.name}' already registered")
        self._actions[descriptor.name] = descriptor

    def register_resource(self, descriptor: ResourceDescriptor) -> None:
        self._ensure_mutable()
        if descriptor.uri in self._resources:
            raise DuplicateName(f"resource '{descriptor.uri}' already registered")
        self._resources[descriptor.uri] = descriptor

    def freeze(self) -> ActionRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve_action(self, name: str) -> ActionDescriptor | None:
        return self._actions.get(name)

    def resolve_resource(self, uri: str) -> ResourceDescriptor | None:
        return self._resources.get(uri)

    def list_actions(self) -> list[ActionDescriptor]:
        return list(self._actions.values())

    def list_resources(self) -> list[ResourceDescriptor]:
        return list(self._resources.values())

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("registry is read-only once the server is constructed")
