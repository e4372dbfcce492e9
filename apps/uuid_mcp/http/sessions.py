"""Session lifecycle for the HTTP transport.

Each session moves ``absent -> active -> closed``. Sessions are only minted by
an explicit handshake; a missing, unknown or closed token is always rejected.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from apps.uuid_mcp.identifiers import IdentifierCodec, IdentifierVariant
from apps.uuid_mcp.service.dispatcher import RequestDispatcher
from apps.uuid_mcp.service.errors import InvalidSession

__all__ = ["Session", "SessionManager"]

LOGGER = logging.getLogger(__name__)

DispatcherFactory = Callable[[str], RequestDispatcher]
TokenFactory = Callable[[], str]


@dataclass(eq=False)
class Session:
    id: str
    dispatcher: RequestDispatcher
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    _closed: asyncio.Event = field(default_factory=asyncio.Event, init=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def handle(self, message: object) -> dict | None:
        return self.dispatcher.handle(message)

    async def stream(self, *, keepalive: float) -> AsyncIterator[str]:
        """Server-push channel as SSE frames; ends once the session closes."""

        yield ": stream open\n\n"
        while not self._closed.is_set():
            try:
                await asyncio.wait_for(self._closed.wait(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": ping\n\n"


class SessionManager:
    """Token-to-session map guarded by a lock for insert and delete."""

    def __init__(
        self,
        dispatcher_factory: DispatcherFactory,
        *,
        token_factory: TokenFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._dispatcher_factory = dispatcher_factory
        self._token_factory = token_factory or self._default_token
        self._logger = logger or LOGGER
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._codec = IdentifierCodec()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._sessions

    def create(self) -> Session:
        """Mint a session under a token no live session is using."""

        while True:
            token = self._token_factory()
            session = Session(id=token, dispatcher=self._dispatcher_factory(token))
            with self._lock:
                if token not in self._sessions:
                    self._sessions[token] = session
                    break
        self._logger.info("Session initialized: %s", token)
        return session

    def get(self, token: str | None) -> Session:
        if not token:
            raise InvalidSession()
        with self._lock:
            session = self._sessions.get(token)
        if session is None or session.closed:
            raise InvalidSession()
        return session

    def close(self, token: str | None) -> bool:
        """Close ``token``'s session. Returns ``False`` if it was not active."""

        if not token:
            return False
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return False
            del self._sessions[token]
        session.close()
        self._logger.info("Session closed: %s", token)
        return True

    def close_all(self) -> int:
        with self._lock:
            tokens = list(self._sessions)
        return sum(1 for token in tokens if self.close(token))

    def _default_token(self) -> str:
        return self._codec.generate(IdentifierVariant.RANDOM)
