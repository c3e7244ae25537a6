"""Process-wide holder of the current `IndexBundle`.

Readers take `store.bundle` and keep working with that snapshot; a reload builds a complete new
bundle off the event loop and publishes it with a single attribute assignment. While a reload is
running `loading` is set and inbound events are expected to wait briefly, then drop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from src.cards.index import IndexBundle, build_index
from src.cards.record import CardRecord

logger = logging.getLogger(__name__)

CatalogLoader = Callable[[], Iterable[CardRecord]]


class CardIndexStore:
    """Holds one catalog version and swaps it wholesale on reload."""

    def __init__(self, bundle: IndexBundle | None = None) -> None:
        self._bundle = bundle if bundle is not None else IndexBundle()
        self._loading = False
        self._reload_lock = asyncio.Lock()

    @property
    def bundle(self) -> IndexBundle:
        return self._bundle

    @property
    def loading(self) -> bool:
        return self._loading

    async def reload(self, loader: CatalogLoader) -> bool:
        """Load the catalog, rebuild the indices and publish them.

        Returns:
            `True` if a new bundle was published. On failure the error is logged, the previous
            bundle stays in force and `False` is returned.
        """

        async with self._reload_lock:
            self._loading = True
            try:
                records = await asyncio.to_thread(lambda: list(loader()))
                bundle = await asyncio.to_thread(build_index, records)
            except Exception:
                # Catalog failures must never take the bot down; keep serving the old bundle.
                logger.exception("catalog reload failed; keeping cards=%d", len(self._bundle))
                return False
            else:
                self._bundle = bundle
                logger.info("catalog reloaded cards=%d", len(bundle))
                return True
            finally:
                self._loading = False

    async def wait_until_ready(self, delay: float = 1.0) -> bool:
        """Give an in-flight reload one bounded chance to finish.

        Returns:
            `True` if queries may be served, `False` if the caller should drop the event.
        """

        if not self._loading:
            return True
        await asyncio.sleep(delay)
        return not self._loading
