from __future__ import annotations

import re
from uuid import RFC_4122, UUID

import pytest

from apps.uuid_mcp.identifiers import (
    IdentifierCodec,
    IdentifierVariant,
    ValidationResult,
    format_identifier,
)
from apps.uuid_mcp.service.errors import GenerationUnavailable, InternalError

CANONICAL = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


@pytest.mark.parametrize("variant", list(IdentifierVariant))
def test_generated_identifiers_are_canonical(codec: IdentifierCodec, variant: IdentifierVariant) -> None:
    value = codec.generate(variant)
    assert CANONICAL.match(value)
    parsed = UUID(value)
    assert parsed.version == variant.version
    assert parsed.variant == RFC_4122


@pytest.mark.parametrize("fill", [b"\x00" * 16, b"\xff" * 16])
def test_marker_bits_are_forced_regardless_of_fill(fill: bytes) -> None:
    for variant in IdentifierVariant:
        codec = IdentifierCodec(random_source=lambda size, fill=fill: fill[:size], clock=lambda: 0)
        value = codec.generate(variant)
        raw = UUID(value).bytes
        assert raw[6] >> 4 == variant.version
        assert raw[8] >> 6 == 0b10


def test_time_ordered_embeds_big_endian_milliseconds(deterministic_codec: IdentifierCodec, clock) -> None:
    clock.now_ms = 0x0123456789AB
    value = deterministic_codec.generate(IdentifierVariant.TIME_ORDERED)
    assert value.startswith("01234567-89ab-7")
    assert int.from_bytes(UUID(value).bytes[:6], "big") == 0x0123456789AB


def test_time_ordered_sorts_across_milliseconds(clock) -> None:
    codec = IdentifierCodec(clock=clock)
    values = []
    for _ in range(50):
        values.append(codec.generate(IdentifierVariant.TIME_ORDERED))
        clock.advance(1)
    assert values == sorted(values)


def test_generate_accepts_wire_value(codec: IdentifierCodec) -> None:
    assert UUID(codec.generate("time-ordered")).version == 7
    with pytest.raises(ValueError, match="is not a valid IdentifierVariant"):
        codec.generate("v5")


def test_random_source_failure_raises_generation_unavailable() -> None:
    def _broken(size: int) -> bytes:
        raise OSError("entropy pool exhausted")

    codec = IdentifierCodec(random_source=_broken)
    with pytest.raises(GenerationUnavailable, match="entropy pool exhausted") as excinfo:
        codec.generate(IdentifierVariant.RANDOM)
    assert isinstance(excinfo.value, InternalError)


def test_short_random_read_raises_generation_unavailable() -> None:
    codec = IdentifierCodec(random_source=lambda size: b"\x01" * (size - 1))
    with pytest.raises(GenerationUnavailable):
        codec.generate(IdentifierVariant.TIME_ORDERED)


@pytest.mark.parametrize(
    ("candidate", "version"),
    [
        ("123e4567-e89b-42d3-a456-426614174000", "v4"),
        ("123E4567-E89B-42D3-A456-426614174000", "v4"),
        ("01890a5d-ac96-774b-bcce-b302099a8057", "v7"),
        ("c232ab00-9414-11ec-b3c8-9e6bdeced846", "v1"),
    ],
)
def test_validate_accepts_canonical_strings(codec: IdentifierCodec, candidate: str, version: str) -> None:
    assert codec.validate(candidate) == ValidationResult(valid=True, detected_version=version)


@pytest.mark.parametrize(
    "candidate",
    [
        "",
        "not-a-uuid",
        "123e4567e89b42d3a456426614174000",
        "123e4567-e89b-42d3-a456-4266141740000",
        "123e4567-e89b-42d3-a456-42661417400",
        "123e456-7e89b-42d3-a456-426614174000",
        "123e4567-e89b-42d3-a456-42661417400g",
        "123e4567-e89b-02d3-a456-426614174000",
        "123e4567-e89b-82d3-a456-426614174000",
        "123e4567-e89b-42d3-c456-426614174000",
        "123e4567-e89b-42d3-7456-426614174000",
        "123e4567-e89b-42d3-a456-426614174000\n",
        " 123e4567-e89b-42d3-a456-426614174000",
    ],
)
def test_validate_rejects_malformed_strings(codec: IdentifierCodec, candidate: str) -> None:
    result = codec.validate(candidate)
    assert result.valid is False
    assert result.detected_version is None


@pytest.mark.parametrize("candidate", [None, 42, b"123e4567-e89b-42d3-a456-426614174000"])
def test_validate_is_total_over_non_strings(codec: IdentifierCodec, candidate: object) -> None:
    assert codec.validate(candidate).valid is False


def test_validate_round_trips_generated_values(codec: IdentifierCodec) -> None:
    for variant in IdentifierVariant:
        result = codec.validate(codec.generate(variant))
        assert result.to_dict() == {"valid": True, "detectedVersion": f"v{variant.version}"}


def test_format_identifier_requires_sixteen_bytes() -> None:
    assert format_identifier(bytes(16)) == "00000000-0000-0000-0000-000000000000"
    with pytest.raises(ValueError, match="16 bytes"):
        format_identifier(bytes(15))
