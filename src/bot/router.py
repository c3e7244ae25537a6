"""Bot router composition."""

from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command

from src.bot.handlers import (
    handle_callback,
    handle_edited_message,
    handle_message,
    handle_message_reaction,
    handle_reload,
)

router = Router(name="root")
router.message.register(handle_reload, Command("reload"))
router.message.register(handle_message)
router.edited_message.register(handle_edited_message)
router.callback_query.register(handle_callback)
router.message_reaction.register(handle_message_reaction)
