"""Structured request log: one JSON object per handled request."""

from __future__ import annotations

import json
import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Any

from apps.uuid_mcp.identifiers import IdentifierCodec, IdentifierVariant

__all__ = ["JsonLogWriter", "RequestLogEvent"]

_FILE_PREFIX = "requests-"


def _utc_iso(ts: datetime) -> str:
    ts = ts.replace(tzinfo=UTC) if ts.tzinfo is None else ts.astimezone(UTC)
    return ts.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class RequestLogEvent:
    """One handled JSON-RPC request."""

    ts: datetime
    transport: str
    session_id: str | None
    method: str | None
    request_id: Any
    status: str
    duration_ms: float
    error: Mapping[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["ts"] = _utc_iso(self.ts)
        payload["duration_ms"] = float(self.duration_ms)
        return payload


class JsonLogWriter:
    """Append request events to ``requests-<run id>.jsonl`` under ``directory``.

    Each line carries the run id and a per-run sequence number. On start-up
    only the newest ``retention - 1`` earlier run files are kept.
    """

    def __init__(self, directory: str | Path, *, retention: int = 5) -> None:
        if retention < 1:
            raise ValueError("retention must be at least 1")
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        self._prune(directory, keep=retention - 1)

        self.run_id = IdentifierCodec().generate(IdentifierVariant.TIME_ORDERED)
        self.path = directory / f"{_FILE_PREFIX}{self.run_id}.jsonl"
        self._stream: IO[str] | None = self.path.open("a", encoding="utf-8")
        self._lock = threading.Lock()
        self._sequence = 0

    def write(self, event: RequestLogEvent) -> None:
        record = event.to_payload()
        with self._lock:
            if self._stream is None:
                raise RuntimeError(f"request log {self.path} is closed")
            record["run_id"] = self.run_id
            record["sequence"] = self._sequence
            self._sequence += 1
            line = json.dumps(record, sort_keys=True, ensure_ascii=False, default=str)
            self._stream.write(line + "\n")
            self._stream.flush()

    def close(self) -> None:
        with self._lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def __enter__(self) -> JsonLogWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @staticmethod
    def _prune(directory: Path, *, keep: int) -> None:
        previous = sorted(
            directory.glob(f"{_FILE_PREFIX}*.jsonl"),
            key=lambda path: (path.stat().st_mtime, path.name),
        )
        for path in previous[: max(len(previous) - keep, 0)]:
            path.unlink(missing_ok=True)
