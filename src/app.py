"""Application composition root.

This module wires together configuration, the card index store, the catalog source and the
response session manager for the bot runtime.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.cards.store import CardIndexStore
from src.catalog.loader import CatalogSource
from src.chat.sessions import SessionManager
from src.config.settings import Settings


@dataclass(frozen=True)
class App:
    """Shared application dependencies for handlers."""

    settings: Settings
    cards: CardIndexStore
    catalog: CatalogSource
    sessions: SessionManager

    async def reload_catalog(self) -> bool:
        """Reload the catalog; the previous indices stay in force on failure."""

        return await self.cards.reload(self.catalog.load)


def create_app(settings: Settings) -> App:
    """Create the application container.

    Note:
        The card index starts empty. Call `await app.reload_catalog()` at startup.
    """

    cards = CardIndexStore()
    catalog = CatalogSource(
        card_file_path=settings.card_file_path,
        google_sheet_id=settings.google_sheet_id,
        timeout_s=settings.catalog_timeout_s,
    )
    sessions = SessionManager(
        cards,
        ttl=settings.session_ttl,
        purge_interval=settings.purge_interval,
    )
    return App(settings=settings, cards=cards, catalog=catalog, sessions=sessions)
