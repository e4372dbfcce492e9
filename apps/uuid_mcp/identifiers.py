"""Generation and validation of 128-bit identifiers.

Two layouts are supported:

* ``random`` - RFC 4122 version 4, every bit random except the version and
  variant markers.
* ``time-ordered`` - version 7, a 48-bit big-endian Unix millisecond
  timestamp followed by random bits.

Marker bits are forced after the random fill so the random source never has
to know about the layout.
"""

from __future__ import annotations

import re
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from apps.uuid_mcp.service.errors import GenerationUnavailable

__all__ = [
    "IdentifierCodec",
    "IdentifierVariant",
    "ValidationResult",
    "format_identifier",
]

RandomSource = Callable[[int], bytes]
Clock = Callable[[], int]

_IDENTIFIER_BYTES = 16
_TIMESTAMP_MASK = (1 << 48) - 1
_CANONICAL_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-7][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


class IdentifierVariant(str, Enum):
    RANDOM = "random"
    TIME_ORDERED = "time-ordered"

    @property
    def version(self) -> int:
        return 4 if self is IdentifierVariant.RANDOM else 7


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    detected_version: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {"valid": self.valid, "detectedVersion": self.detected_version}


def _system_clock_ms() -> int:
    return time.time_ns() // 1_000_000


def format_identifier(raw: bytes) -> str:
    """Render 16 bytes as the canonical 8-4-4-4-12 lowercase string."""

    if len(raw) != _IDENTIFIER_BYTES:
        raise ValueError(f"identifier must be {_IDENTIFIER_BYTES} bytes, got {len(raw)}")
    return str(UUID(bytes=bytes(raw)))


class IdentifierCodec:
    """Stateless generator/validator over an injectable random source and clock."""

    def __init__(
        self,
        *,
        random_source: RandomSource | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._random_source = random_source or secrets.token_bytes
        self._clock = clock or _system_clock_ms

    def generate(self, variant: IdentifierVariant | str) -> str:
        if not isinstance(variant, IdentifierVariant):
            variant = IdentifierVariant(variant)
        if variant is IdentifierVariant.TIME_ORDERED:
            return self._generate_time_ordered()
        return self._generate_random()

    def validate(self, candidate: object) -> ValidationResult:
        """Return whether ``candidate`` is a canonical identifier string.

        Total over its input: anything that is not a well-formed string yields
        ``valid=False`` instead of raising.
        """

        if not isinstance(candidate, str):
            return ValidationResult(valid=False)
        if _CANONICAL_PATTERN.fullmatch(candidate) is None:
            return ValidationResult(valid=False)
        return ValidationResult(valid=True, detected_version=f"v{candidate[14]}")

    def _generate_random(self) -> str:
        buffer = bytearray(self._random_bytes(_IDENTIFIER_BYTES))
        self._apply_markers(buffer, version=IdentifierVariant.RANDOM.version)
        return format_identifier(bytes(buffer))

    def _generate_time_ordered(self) -> str:
        timestamp = int(self._clock()) & _TIMESTAMP_MASK
        buffer = bytearray(timestamp.to_bytes(6, "big"))
        buffer.extend(self._random_bytes(_IDENTIFIER_BYTES - 6))
        self._apply_markers(buffer, version=IdentifierVariant.TIME_ORDERED.version)
        return format_identifier(bytes(buffer))

    @staticmethod
    def _apply_markers(buffer: bytearray, *, version: int) -> None:
        buffer[6] = (buffer[6] & 0x0F) | (version << 4)
        buffer[8] = (buffer[8] & 0x3F) | 0x80

    def _random_bytes(self, size: int) -> bytes:
        try:
            chunk = self._random_source(size)
        except (OSError, NotImplementedError) as exc:
            raise GenerationUnavailable(f"random source unavailable: {exc}") from exc
        if not isinstance(chunk, (bytes, bytearray)) or len(chunk) != size:
            raise GenerationUnavailable(
                f"random source returned {len(chunk) if chunk else 0} of {size} bytes"
            )
        return bytes(chunk)
