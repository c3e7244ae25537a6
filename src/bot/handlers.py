"""aiogram update handlers.

Every handler waits briefly while the catalog is reloading and drops the update if the reload is
still running. Failures are logged and never reported back to the chat.
"""

from __future__ import annotations

import logging

from aiogram import Bot
from aiogram.types import CallbackQuery, Message, MessageReactionUpdated, ReactionTypeEmoji

from src.app import App
from src.bot.telegram import (
    TelegramTransport,
    chat_owner_id,
    incoming_from_message,
    message_ref,
    reply_from_message,
)
from src.chat.controls import ControlIdError, decode_action
from src.chat.interactions import InteractionContext, handle_interaction, handle_reaction
from src.chat.sessions import MessageRef

logger = logging.getLogger(__name__)


async def _ready(app: App, event: str) -> bool:
    if await app.cards.wait_until_ready(app.settings.loading_wait_s):
        return True
    logger.warning("dropped event=%s reason=catalog_loading", event)
    return False


async def _handle_summons(message: Message, bot: Bot, app: App, *, edited: bool) -> None:
    # Never answer bots, ourselves included.
    if message.from_user is None or message.from_user.is_bot:
        return
    if not await _ready(app, "edited_message" if edited else "message"):
        return

    # noinspection PyBroadException
    try:
        await app.sessions.handle_message(
            incoming_from_message(message),
            TelegramTransport(bot),
            edited=edited,
        )
    except Exception:
        logger.exception("summons handler failed chat=%s msg=%s", message.chat.id, message.message_id)


async def handle_message(message: Message, bot: Bot, app: App) -> None:
    """Answer card summons in a new message."""

    await _handle_summons(message, bot, app, edited=False)


async def handle_edited_message(message: Message, bot: Bot, app: App) -> None:
    """Re-resolve card summons in an edited message."""

    await _handle_summons(message, bot, app, edited=True)


async def handle_callback(callback: CallbackQuery, bot: Bot, app: App) -> None:
    """Handle Accept/Delete buttons and candidate selection on a bot reply."""

    message = callback.message
    if not isinstance(message, Message) or not callback.data:
        await callback.answer()
        return

    custom_id, _, value = callback.data.partition(":")
    try:
        action = decode_action(custom_id, (value,) if value else ())
    except ControlIdError as exc:
        logger.debug("callback ignored reason=%s", exc)
        await callback.answer()
        return

    if not await _ready(app, "callback_query"):
        await callback.answer()
        return

    replied = message.reply_to_message
    ctx = InteractionContext(
        actor_id=callback.from_user.id,
        response=message_ref(message),
        current=reply_from_message(message),
        replied_author_id=replied.from_user.id if replied and replied.from_user else None,
        owner_id=await chat_owner_id(bot, message.chat),
    )

    # noinspection PyBroadException
    try:
        await handle_interaction(
            action,
            ctx,
            sessions=app.sessions,
            store=app.cards,
            transport=TelegramTransport(bot),
        )
    except Exception:
        logger.exception("interaction failed chat=%s msg=%s", message.chat.id, message.message_id)

    await callback.answer()


async def handle_message_reaction(update: MessageReactionUpdated, bot: Bot, app: App) -> None:
    """Legacy delete path: the configured reaction on a bot reply removes it."""

    if update.user is None:
        return
    emojis = [r.emoji for r in update.new_reaction if isinstance(r, ReactionTypeEmoji)]
    if app.settings.delete_reaction not in emojis:
        return
    if not await _ready(app, "message_reaction"):
        return

    # noinspection PyBroadException
    try:
        await handle_reaction(
            MessageRef(chat_id=update.chat.id, message_id=update.message_id),
            update.user.id,
            emojis,
            delete_emoji=app.settings.delete_reaction,
            sessions=app.sessions,
            transport=TelegramTransport(bot),
            owner_id=await chat_owner_id(bot, update.chat),
        )
    except Exception:
        logger.exception("reaction failed chat=%s msg=%s", update.chat.id, update.message_id)


async def handle_reload(message: Message, app: App) -> None:
    """`/reload`: re-download and re-index the catalog (admins only)."""

    if message.from_user is None or message.from_user.id not in app.settings.admin_user_ids:
        return

    if await app.reload_catalog():
        await message.answer(f"Catalog reloaded: {len(app.cards.bundle)} cards.")
    else:
        await message.answer("Catalog reload failed; the previous catalog is still in use.")
