"""Actions and resources exposed by the UUID server."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from apps.uuid_mcp.config import ServerSettings
from apps.uuid_mcp.history import HistoryLog, HistoryRecord
from apps.uuid_mcp.identifiers import IdentifierCodec, IdentifierVariant

from .registry import ActionDescriptor, ActionRegistry, FieldSpec, InputSchema, ResourceDescriptor

__all__ = [
    "HISTORY_RESOURCE_URI",
    "build_registry",
    "generate_schema",
    "validate_schema",
]

HISTORY_RESOURCE_URI = "history://recent"
_HISTORY_MIME_TYPE = "application/json"


def generate_schema(max_count: int) -> InputSchema:
    return InputSchema(
        fields=(
            FieldSpec(
                name="version",
                kind="string",
                description=(
                    "Identifier layout: 'random' (version 4) or "
                    "'time-ordered' (version 7, sortable by creation time)"
                ),
                enum=tuple(variant.value for variant in IdentifierVariant),
                default=IdentifierVariant.RANDOM.value,
            ),
            FieldSpec(
                name="count",
                kind="integer",
                description=f"Number of identifiers to generate (1-{max_count})",
                minimum=1,
                maximum=max_count,
                default=1,
            ),
        )
    )


def validate_schema() -> InputSchema:
    return InputSchema(
        fields=(
            FieldSpec(
                name="identifier",
                kind="string",
                description="Candidate identifier string to check",
            ),
        )
    )


def _text_result(text: str, structured: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "content": [{"type": "text", "text": text}],
        "structuredContent": dict(structured),
    }


def _generate_summary(version: str, identifiers: list[str]) -> str:
    if len(identifiers) == 1:
        return f"Generated UUID ({version}): {identifiers[0]}"
    lines = [f"{index}. {value}" for index, value in enumerate(identifiers, start=1)]
    return f"Generated UUIDs ({version}):\n" + "\n".join(lines)


def build_registry(
    *,
    history: HistoryLog,
    codec: IdentifierCodec,
    settings: ServerSettings,
) -> ActionRegistry:
    """Populate and freeze the registry for one server instance.

    Handlers close over ``history`` so each instance keeps its own log.
    """

    def generate_uuid(arguments: Mapping[str, Any]) -> Mapping[str, Any]:
        variant = IdentifierVariant(arguments["version"])
        count = int(arguments["count"])
        identifiers: list[str] = []
        for _ in range(count):
            identifier = codec.generate(variant)
            identifiers.append(identifier)
            history.append(
                HistoryRecord(
                    identifier=identifier,
                    variant=variant,
                    created_at=datetime.now(UTC),
                )
            )
        return _text_result(
            _generate_summary(variant.value, identifiers),
            {"version": variant.value, "uuids": identifiers},
        )

    def validate_uuid(arguments: Mapping[str, Any]) -> Mapping[str, Any]:
        candidate = arguments["identifier"]
        result = codec.validate(candidate)
        if result.valid:
            text = f"Valid UUID (version: {result.detected_version})"
        else:
            text = f"Invalid UUID format: {candidate}"
        return _text_result(text, result.to_dict())

    def read_history(uri: str) -> Mapping[str, Any]:
        document = {
            "totalCount": len(history),
            "history": [record.to_payload() for record in history.snapshot(settings.history_window)],
        }
        return {
            "contents": [
                {
                    "uri": uri,
                    "mimeType": _HISTORY_MIME_TYPE,
                    "text": json.dumps(document, indent=2),
                }
            ]
        }

    registry = ActionRegistry(
        actions=(
            ActionDescriptor(
                name="generate_uuid",
                title="UUID Generator",
                description=(
                    "Generate UUIDs. Choose 'random' (v4) or 'time-ordered' (v7, "
                    "timestamp based)."
                ),
                input_schema=generate_schema(settings.max_generate_count),
                handler=generate_uuid,
            ),
            ActionDescriptor(
                name="validate_uuid",
                title="UUID Validator",
                description="Check whether a string is a well-formed UUID.",
                input_schema=validate_schema(),
                handler=validate_uuid,
            ),
        ),
        resources=(
            ResourceDescriptor(
                name="uuid-history",
                uri=HISTORY_RESOURCE_URI,
                title="UUID History",
                description="UUIDs generated during this session, most recent last",
                mime_type=_HISTORY_MIME_TYPE,
                handler=read_history,
            ),
        ),
    )
    return registry.freeze()
