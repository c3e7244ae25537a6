"""Tests for Accept/Delete/selection handling on bot replies."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.cards.record import CardRecord
from src.cards.store import CardIndexStore
from src.chat.controls import (
    ButtonControl,
    DeleteAction,
    LinkControl,
    LockInAction,
    SelectAction,
)
from src.chat.interactions import InteractionContext, handle_interaction, handle_reaction
from src.chat.replies import Reply
from src.chat.sessions import IncomingMessage, MessageRef, SessionManager, SlotState
from src.chat.triggers import MatchKind

SOURCE = MessageRef(chat_id=-100, message_id=7)
REQUESTER = 42


@pytest.fixture
def sessions(store: CardIndexStore) -> SessionManager:
    return SessionManager(store)


async def _summon(sessions: SessionManager, transport, text: str) -> tuple[MessageRef, Reply]:
    message = IncomingMessage(
        ref=SOURCE,
        author_id=REQUESTER,
        text=text,
        timestamp=datetime.now(timezone.utc),
    )
    await sessions.handle_message(message, transport)
    _, response, reply = transport.sent[-1]
    return response, reply


def _ctx(response: MessageRef, reply: Reply, actor: int = REQUESTER, **kwargs) -> InteractionContext:
    return InteractionContext(actor_id=actor, response=response, current=reply, **kwargs)


@pytest.mark.asyncio
async def test_delete_removes_reply_and_closes_session(sessions, store, transport) -> None:
    response, reply = await _summon(sessions, transport, "[[lom]]")

    done = await handle_interaction(
        DeleteAction(REQUESTER, MatchKind.image),
        _ctx(response, reply),
        sessions=sessions,
        store=store,
        transport=transport,
    )

    assert done
    assert transport.deleted == [response]
    assert sessions.get(SOURCE).slots[0].state is SlotState.closed


@pytest.mark.asyncio
async def test_lockin_keeps_only_link(sessions, store, transport, enquea: CardRecord) -> None:
    response, reply = await _summon(sessions, transport, "[[lom]]")

    await handle_interaction(
        LockInAction(REQUESTER, MatchKind.image),
        _ctx(response, reply),
        sessions=sessions,
        store=store,
        transport=transport,
    )

    edited_ref, edited = transport.edits[-1]
    assert edited_ref == response
    assert edited.text == enquea.image_url
    assert edited.controls == (LinkControl(label="Wiki", url=enquea.wiki_url),)
    assert sessions.get(SOURCE).closed


@pytest.mark.asyncio
async def test_select_shows_card_and_keeps_menu(sessions, store, transport, catalog) -> None:
    response, reply = await _summon(sessions, transport, "{{gandalf}}")
    menu = reply.select
    assert menu is not None
    assert [o.value for o in menu.options] == ["1R364", "2R22"]

    done = await handle_interaction(
        SelectAction(REQUESTER, MatchKind.wiki, selected="2R22"),
        _ctx(response, reply),
        sessions=sessions,
        store=store,
        transport=transport,
    )

    assert done
    _, edited = transport.edits[-1]
    assert edited.text == catalog[2].label
    assert isinstance(edited.controls[0], LinkControl)
    assert [c.label for c in edited.controls if isinstance(c, ButtonControl)] == ["Accept", "Delete"]
    assert edited.controls[-1] == menu
    assert not sessions.get(SOURCE).closed


@pytest.mark.asyncio
async def test_select_unknown_value_changes_nothing(sessions, store, transport) -> None:
    response, reply = await _summon(sessions, transport, "[[gandalf]]")

    done = await handle_interaction(
        SelectAction(REQUESTER, MatchKind.image, selected="gandalf"),
        _ctx(response, reply),
        sessions=sessions,
        store=store,
        transport=transport,
    )

    assert not done
    assert transport.edits == []


@pytest.mark.asyncio
async def test_unauthorized_actor_is_ignored(sessions, store, transport) -> None:
    response, reply = await _summon(sessions, transport, "[[lom]]")

    done = await handle_interaction(
        DeleteAction(REQUESTER, MatchKind.image),
        _ctx(response, reply, actor=99, replied_author_id=REQUESTER, owner_id=1),
        sessions=sessions,
        store=store,
        transport=transport,
    )

    assert not done
    assert transport.deleted == []
    assert not sessions.get(SOURCE).closed


@pytest.mark.asyncio
async def test_chat_owner_may_delete(sessions, store, transport) -> None:
    response, reply = await _summon(sessions, transport, "[[lom]]")

    assert await handle_interaction(
        DeleteAction(REQUESTER, MatchKind.image),
        _ctx(response, reply, actor=1, owner_id=1),
        sessions=sessions,
        store=store,
        transport=transport,
    )


@pytest.mark.asyncio
async def test_anyone_may_delete_not_found_reply(sessions, store, transport) -> None:
    response, reply = await _summon(sessions, transport, "[[no such card]]")
    delete = reply.controls[0]
    assert isinstance(delete, ButtonControl) and delete.requester_id == 0

    assert await handle_interaction(
        DeleteAction(delete.requester_id, MatchKind.image),
        _ctx(response, reply, actor=99),
        sessions=sessions,
        store=store,
        transport=transport,
    )


@pytest.mark.asyncio
async def test_delete_reaction_from_requester(sessions, transport) -> None:
    response, _ = await _summon(sessions, transport, "[[lom]]")

    assert not await handle_reaction(
        response, REQUESTER, ["🔥"], delete_emoji="👎", sessions=sessions, transport=transport
    )
    assert not await handle_reaction(
        response, 99, ["👎"], delete_emoji="👎", sessions=sessions, transport=transport
    )
    assert await handle_reaction(
        response, REQUESTER, ["👎"], delete_emoji="👎", sessions=sessions, transport=transport
    )

    assert transport.deleted == [response]
    assert sessions.get(SOURCE).closed

