"""Diagnostic request logging for the UUID server.

Lines go through the ``uuid_mcp.server`` logger, which the CLI routes to
stderr, so they never mix with stdio protocol output.
"""

from __future__ import annotations

import json
import logging
from typing import Any

LOGGER_NAME = "uuid_mcp.server"

logger = logging.getLogger(LOGGER_NAME)


def log_event(*, transport: str, status: str, **fields: Any) -> None:
    """Log one handled request as a JSON object; ``None`` fields are omitted.

    Failed requests are logged at WARNING, everything else at INFO.
    """

    level = logging.WARNING if status == "error" else logging.INFO
    if not logger.isEnabledFor(level):
        return
    record = {key: value for key, value in fields.items() if value is not None}
    record.update(transport=transport, status=status)
    logger.log(level, json.dumps(record, sort_keys=True, default=str))
