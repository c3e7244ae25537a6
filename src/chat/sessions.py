"""Per-message response sessions.

A session is opened the first time a message summons one or more cards and tracks, for each
summons in order of occurrence, which reply answers it. Edits of the message re-resolve every
summons and update the existing replies in place; once any reply has been accepted or deleted
the session is closed and later edits are ignored. Sessions are purged lazily: whenever a message
without summons passes by and the purge interval has elapsed, sessions whose message is older
than the TTL are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Protocol

from src.cards.resolver import lookup
from src.cards.store import CardIndexStore
from src.chat.replies import Reply, build_reply
from src.chat.triggers import extract_requests

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)
DEFAULT_PURGE_INTERVAL = timedelta(hours=1)


@dataclass(frozen=True)
class MessageRef:
    """Identity of a chat message."""

    chat_id: int
    message_id: int


@dataclass(frozen=True)
class IncomingMessage:
    """A created or edited user message, as seen by the session manager."""

    ref: MessageRef
    author_id: int
    text: str
    timestamp: datetime


class Transport(Protocol):
    """Outbound side of the chat platform."""

    async def send_reply(self, source: MessageRef, reply: Reply) -> MessageRef: ...

    async def edit(self, ref: MessageRef, reply: Reply) -> None: ...

    async def delete(self, ref: MessageRef) -> None: ...


class SlotState(StrEnum):
    empty = "empty"
    active = "active"
    closed = "closed"


@dataclass
class Slot:
    """Response tracking for one summons in a message."""

    state: SlotState = SlotState.empty
    response: MessageRef | None = None


@dataclass
class Session:
    source: MessageRef
    requester_id: int
    created_at: datetime
    slots: list[Slot] = field(default_factory=list)

    @property
    def closed(self) -> bool:
        return any(slot.state is SlotState.closed for slot in self.slots)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Owns every open session and the response -> session lookup."""

    def __init__(
            self,
            store: CardIndexStore,
            *,
            ttl: timedelta = DEFAULT_SESSION_TTL,
            purge_interval: timedelta = DEFAULT_PURGE_INTERVAL,
            clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._purge_interval = purge_interval
        self._clock = clock
        self._sessions: dict[MessageRef, Session] = {}
        self._responses: dict[MessageRef, tuple[MessageRef, int]] = {}
        self._locks: dict[MessageRef, asyncio.Lock] = {}
        self._last_purge = clock()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, source: MessageRef) -> Session | None:
        return self._sessions.get(source)

    def _lock_for(self, source: MessageRef) -> asyncio.Lock:
        lock = self._locks.get(source)
        if lock is None:
            lock = self._locks[source] = asyncio.Lock()
        return lock

    async def handle_message(
            self,
            message: IncomingMessage,
            transport: Transport,
            *,
            edited: bool = False,
    ) -> int:
        """Answer every summons in a created or edited message.

        Returns:
            The number of summons answered (0 when the message had none or the edit was ignored).
        """

        requests = extract_requests(message.text)
        if not requests:
            self.maybe_purge()
            return 0

        async with self._lock_for(message.ref):
            session = self._sessions.get(message.ref)
            if edited and session is not None and session.closed:
                logger.debug("edit ignored on closed session chat=%s msg=%s",
                             message.ref.chat_id, message.ref.message_id)
                return 0

            if session is None:
                session = Session(
                    source=message.ref,
                    requester_id=message.author_id,
                    created_at=message.timestamp,
                )
                self._sessions[message.ref] = session

            bundle = self._store.bundle
            for index, request in enumerate(requests):
                if index >= len(session.slots):
                    session.slots.append(Slot())
                slot = session.slots[index]

                resolution = lookup(request.query, bundle)
                reply = build_reply(resolution, request.kind, session.requester_id)
                logger.info(
                    "summons kind=%s outcome=%s candidates=%d edited=%s",
                    request.kind,
                    resolution.outcome,
                    len(resolution.candidates),
                    edited,
                )

                # One rejected reply must not cost the other summons theirs.
                # noinspection PyBroadException
                try:
                    if slot.state is SlotState.active and slot.response is not None:
                        await transport.edit(slot.response, reply)
                    else:
                        response = await transport.send_reply(message.ref, reply)
                        slot.state = SlotState.active
                        slot.response = response
                        self._responses[response] = (message.ref, index)
                except Exception:
                    logger.exception(
                        "reply failed chat=%s msg=%s slot=%d",
                        message.ref.chat_id,
                        message.ref.message_id,
                        index,
                    )

        return len(requests)

    def find_response(self, response: MessageRef) -> tuple[Session, int] | None:
        """Return the session and slot index a reply belongs to, if it is tracked."""

        entry = self._responses.get(response)
        if entry is None:
            return None
        source, index = entry
        session = self._sessions.get(source)
        if session is None:
            return None
        return session, index

    def close_response(self, response: MessageRef) -> bool:
        """Mark the slot answered by `response` as closed.

        Returns:
            `True` if the reply belonged to a tracked session.
        """

        found = self.find_response(response)
        if found is None:
            return False
        session, index = found
        session.slots[index].state = SlotState.closed
        return True

    def maybe_purge(self) -> int:
        """Purge expired sessions if the purge interval has elapsed since the last run."""

        now = self._clock()
        if now - self._last_purge < self._purge_interval:
            return 0
        self._last_purge = now
        return self.purge(now)

    def purge(self, now: datetime | None = None) -> int:
        """Drop every session whose triggering message is older than the TTL."""

        now = now or self._clock()
        removed = 0
        for source in list(self._sessions):
            session = self._sessions[source]
            if now - session.created_at <= self._ttl:
                continue
            del self._sessions[source]
            self._locks.pop(source, None)
            for slot in session.slots:
                if slot.response is not None:
                    self._responses.pop(slot.response, None)
            removed += 1

        if removed:
            logger.info("purged sessions removed=%d remaining=%d", removed, len(self._sessions))
        return removed
