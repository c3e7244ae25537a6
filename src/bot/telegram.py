"""Telegram adapter: aiogram types <-> platform-neutral chat types.

Controls render into an inline keyboard. The first row holds the link and action buttons; every
select option gets its own row with callback data `{selectId}:{collectorInfo}`. Disabled buttons
are not rendered, Telegram has no such state. Keyboards parse back into controls so lock-in and
selection can rebuild a reply from the message alone.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from aiogram import Bot
from aiogram.enums import ChatMemberStatus, ChatType
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import (
    Chat,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    Message,
    ReplyParameters,
)

from src.chat.controls import (
    ActionName,
    ButtonControl,
    Control,
    ControlIdError,
    LinkControl,
    SelectControl,
    SelectOption,
    parse_control_id,
)
from src.chat.replies import Reply
from src.chat.sessions import IncomingMessage, MessageRef

logger = logging.getLogger(__name__)

SELECT_VALUE_SEPARATOR = ":"


def render_markup(controls: tuple[Control, ...]) -> InlineKeyboardMarkup:
    """Render controls as an inline keyboard (empty keyboard when there are none)."""

    first_row: list[InlineKeyboardButton] = []
    option_rows: list[list[InlineKeyboardButton]] = []

    for control in controls:
        if isinstance(control, LinkControl):
            first_row.append(InlineKeyboardButton(text=control.label, url=control.url))
        elif isinstance(control, ButtonControl):
            if control.disabled:
                continue
            first_row.append(
                InlineKeyboardButton(text=control.label, callback_data=control.custom_id)
            )
        elif isinstance(control, SelectControl):
            option_rows.extend(
                [
                    InlineKeyboardButton(
                        text=option.label,
                        callback_data=f"{control.custom_id}{SELECT_VALUE_SEPARATOR}{option.value}",
                    )
                ]
                for option in control.options
            )

    rows = ([first_row] if first_row else []) + option_rows
    return InlineKeyboardMarkup(inline_keyboard=rows)


def parse_markup(markup: InlineKeyboardMarkup | None) -> tuple[Control, ...]:
    """Rebuild controls from an inline keyboard produced by `render_markup`."""

    if markup is None:
        return ()

    controls: list[Control] = []
    selects: dict[str, list[SelectOption]] = {}

    for row in markup.inline_keyboard:
        for button in row:
            if button.url:
                controls.append(LinkControl(label=button.text, url=button.url))
                continue
            if not button.callback_data:
                continue

            custom_id, _, value = button.callback_data.partition(SELECT_VALUE_SEPARATOR)
            try:
                action, requester_id, kind = parse_control_id(custom_id)
            except ControlIdError:
                logger.debug("foreign button skipped data=%s", button.callback_data)
                continue

            if action is ActionName.dropdown:
                selects.setdefault(custom_id, []).append(SelectOption(label=button.text, value=value))
            else:
                controls.append(ButtonControl(action, requester_id, kind, button.text))

    for custom_id, options in selects.items():
        _, requester_id, kind = parse_control_id(custom_id)
        controls.append(SelectControl(requester_id=requester_id, kind=kind, options=tuple(options)))

    return tuple(controls)


def reply_from_message(message: Message) -> Reply:
    """What a bot reply currently shows."""

    return Reply(text=message.text or "", controls=parse_markup(message.reply_markup))


def message_ref(message: Message) -> MessageRef:
    return MessageRef(chat_id=message.chat.id, message_id=message.message_id)


def incoming_from_message(message: Message) -> IncomingMessage:
    timestamp = message.date or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return IncomingMessage(
        ref=message_ref(message),
        author_id=message.from_user.id if message.from_user else 0,
        text=message.text or message.caption or "",
        timestamp=timestamp,
    )


async def chat_owner_id(bot: Bot, chat: Chat) -> int | None:
    """User id of the chat creator; `None` for private chats or when it cannot be fetched."""

    if chat.type == ChatType.PRIVATE:
        return None
    try:
        admins = await bot.get_chat_administrators(chat_id=chat.id)
    except TelegramAPIError as exc:
        logger.warning("owner lookup failed chat=%s reason=%s", chat.id, exc)
        return None
    for member in admins:
        if member.status == ChatMemberStatus.CREATOR:
            return member.user.id
    return None


class TelegramTransport:
    """Sends, edits and deletes bot replies through the Bot API."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send_reply(self, source: MessageRef, reply: Reply) -> MessageRef:
        markup = render_markup(reply.controls)
        sent = await self._bot.send_message(
            chat_id=source.chat_id,
            text=reply.text,
            reply_parameters=ReplyParameters(
                message_id=source.message_id,
                allow_sending_without_reply=True,
            ),
            reply_markup=markup if markup.inline_keyboard else None,
        )
        return MessageRef(chat_id=sent.chat.id, message_id=sent.message_id)

    async def edit(self, ref: MessageRef, reply: Reply) -> None:
        try:
            await self._bot.edit_message_text(
                text=reply.text,
                chat_id=ref.chat_id,
                message_id=ref.message_id,
                reply_markup=render_markup(reply.controls),
            )
        except TelegramBadRequest as exc:
            # Re-resolving an edit often yields the same reply.
            if "message is not modified" not in str(exc):
                raise

    async def delete(self, ref: MessageRef) -> None:
        await self._bot.delete_message(chat_id=ref.chat_id, message_id=ref.message_id)
