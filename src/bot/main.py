"""Bot process entrypoint."""

from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from src.app import create_app
from src.bot.router import router
from src.config.logging import configure_logging
from src.config.settings import load_settings

logger = logging.getLogger(__name__)


async def main() -> None:
    """Load the catalog and run the Telegram bot polling loop."""

    settings = load_settings()
    configure_logging()

    app = create_app(settings)
    if not await app.reload_catalog():
        logger.error("starting with an empty catalog path=%s", settings.card_file_path)

    bot = Bot(token=settings.telegram_bot_token, default=DefaultBotProperties(parse_mode=None))
    dp = Dispatcher()
    dp.include_router(router)

    try:
        await dp.start_polling(bot, app=app, allowed_updates=dp.resolve_used_update_types())
    finally:
        logger.info("shutting down sessions=%d", len(app.sessions))
        await bot.session.close()


def run() -> None:
    """Console script entry point."""

    asyncio.run(main())


if __name__ == "__main__":
    run()
