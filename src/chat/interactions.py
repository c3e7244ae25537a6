"""Handling of reply controls: delete, accept (lock in) and candidate selection.

Unauthorized interactions are ignored without any feedback to the user.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.cards.resolver import by_collector_info
from src.cards.store import CardIndexStore
from src.chat.controls import (
    Action,
    DeleteAction,
    LockInAction,
    SelectAction,
    is_authorized,
)
from src.chat.replies import Reply, card_reply
from src.chat.sessions import MessageRef, SessionManager, Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InteractionContext:
    """Who acted on which reply, and what that reply currently shows."""

    actor_id: int
    response: MessageRef
    current: Reply
    replied_author_id: int | None = None
    owner_id: int | None = None


async def handle_interaction(
        action: Action,
        ctx: InteractionContext,
        *,
        sessions: SessionManager,
        store: CardIndexStore,
        transport: Transport,
) -> bool:
    """Apply a decoded control action to the reply it was attached to.

    Returns:
        `True` if the action was carried out.
    """

    if not is_authorized(
            action.requester_id,
            ctx.actor_id,
            replied_author_id=ctx.replied_author_id,
            owner_id=ctx.owner_id,
    ):
        logger.debug("interaction ignored actor=%s requester=%s", ctx.actor_id, action.requester_id)
        return False

    if isinstance(action, DeleteAction):
        await transport.delete(ctx.response)
        sessions.close_response(ctx.response)
        return True

    if isinstance(action, LockInAction):
        await transport.edit(ctx.response, ctx.current.links_only())
        sessions.close_response(ctx.response)
        return True

    if isinstance(action, SelectAction):
        card = by_collector_info(store.bundle, action.selected)
        if card is None:
            logger.warning("selection not in catalog value=%s", action.selected)
            return False

        reply = card_reply(card, action.kind, action.requester_id)
        select = ctx.current.select
        if select is not None:
            reply = Reply(text=reply.text, controls=reply.controls + (select,))
        await transport.edit(ctx.response, reply)
        return True

    raise TypeError(f"unsupported action: {action!r}")


async def handle_reaction(
        response: MessageRef,
        actor_id: int,
        emojis: Iterable[str],
        *,
        delete_emoji: str,
        sessions: SessionManager,
        transport: Transport,
        owner_id: int | None = None,
) -> bool:
    """Legacy path: reacting to a tracked reply with the delete emoji removes it."""

    if delete_emoji not in set(emojis):
        return False

    found = sessions.find_response(response)
    if found is None:
        return False
    session, _ = found

    if not is_authorized(
            session.requester_id,
            actor_id,
            replied_author_id=session.requester_id,
            owner_id=owner_id,
    ):
        logger.debug("reaction ignored actor=%s requester=%s", actor_id, session.requester_id)
        return False

    await transport.delete(response)
    sessions.close_response(response)
    return True
