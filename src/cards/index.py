"""Lookup index construction.

`build_index` derives every lookup key for each catalog record (titles, subtitles, full titles,
generated abbreviations, explicit nicknames, personas and collector info) and returns an
immutable `IndexBundle`. Bundles are never mutated after construction; a catalog reload builds a
new one and swaps it in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from src.cards.normalize import abbreviate, scrub
from src.cards.record import CardRecord

logger = logging.getLogger(__name__)

# Title words that never start a "<word> <subtitle abbreviation>" nickname.
TITLE_STOP_WORDS: frozenset[str] = frozenset({"the", "of"})

Index = Mapping[str, tuple[CardRecord, ...]]


def _freeze(index: dict[str, list[CardRecord]]) -> Index:
    return MappingProxyType({key: tuple(cards) for key, cards in index.items()})


@dataclass(frozen=True)
class IndexBundle:
    """A complete, read-only set of lookup indices for one catalog version."""

    titles: Index = field(default_factory=lambda: MappingProxyType({}))
    subtitles: Index = field(default_factory=lambda: MappingProxyType({}))
    full_titles: Index = field(default_factory=lambda: MappingProxyType({}))
    nicknames: Index = field(default_factory=lambda: MappingProxyType({}))
    personas: Index = field(default_factory=lambda: MappingProxyType({}))
    collector_info: Mapping[str, CardRecord] = field(default_factory=lambda: MappingProxyType({}))
    records: tuple[CardRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.records)


class _IndexBuilder:
    """Mutable accumulator; only ever visible inside `build_index`."""

    def __init__(self) -> None:
        self.titles: dict[str, list[CardRecord]] = {}
        self.subtitles: dict[str, list[CardRecord]] = {}
        self.full_titles: dict[str, list[CardRecord]] = {}
        self.nicknames: dict[str, list[CardRecord]] = {}
        self.personas: dict[str, list[CardRecord]] = {}
        self.collector_info: dict[str, CardRecord] = {}
        self.records: list[CardRecord] = []

    @staticmethod
    def _add(index: dict[str, list[CardRecord]], key: str, card: CardRecord) -> None:
        if not key.strip():
            return
        index.setdefault(key, []).append(card)

    def add(self, card: CardRecord) -> None:
        title = card.title
        subtitle = card.subtitle
        suffix = card.title_suffix

        self._add(self.titles, scrub(title), card)
        self._add(self.subtitles, scrub(subtitle), card)
        self._add(self.full_titles, scrub(f"{title}{subtitle}{suffix}"), card)

        for persona in _split_list(card.personas):
            self._add(self.personas, scrub(persona), card)

        if subtitle.strip():
            # "Lieutenant of Morgul" -> lom
            short_abbr = abbreviate(subtitle)
            self._add(self.nicknames, short_abbr, card)
            self._add(self.nicknames, scrub(f"{title}{short_abbr}"), card)

            for word in title.split():
                if word.lower() in TITLE_STOP_WORDS:
                    continue
                self._add(self.nicknames, scrub(f"{word}{short_abbr}"), card)

            if suffix.strip():
                self._add(self.full_titles, scrub(f"{short_abbr}{suffix}"), card)

            # "Ulaire Enquea, Lieutenant of Morgul" -> uelom
            long_abbr = abbreviate(f"{title} {subtitle}")
            self._add(self.nicknames, long_abbr, card)

            if suffix.strip():
                self._add(self.full_titles, scrub(f"{long_abbr}{suffix}"), card)
        else:
            abbr = abbreviate(title)
            self._add(self.nicknames, abbr, card)

            if suffix.strip():
                self._add(self.full_titles, scrub(f"{abbr}{suffix}"), card)

        for nickname in _split_list(card.nicknames):
            nick = scrub(nickname)
            self._add(self.nicknames, nick, card)

            if suffix.strip():
                self._add(self.full_titles, scrub(f"{nick}{suffix}"), card)

        coll_key = scrub(card.collector_info)
        if not coll_key:
            logger.debug("blank collector info key id=%s", card.identifier)
        elif coll_key in self.collector_info:
            logger.debug("duplicate collector info key=%s id=%s", coll_key, card.identifier)
        else:
            self.collector_info[coll_key] = card

        self.records.append(card)

    def freeze(self) -> IndexBundle:
        return IndexBundle(
            titles=_freeze(self.titles),
            subtitles=_freeze(self.subtitles),
            full_titles=_freeze(self.full_titles),
            nicknames=_freeze(self.nicknames),
            personas=_freeze(self.personas),
            collector_info=MappingProxyType(dict(self.collector_info)),
            records=tuple(self.records),
        )


def _split_list(value: str) -> list[str]:
    """Split a comma-separated catalog field, skipping blank entries."""

    return [entry for entry in (value or "").split(",") if entry.strip()]


def build_index(records: Iterable[CardRecord]) -> IndexBundle:
    """Build a fresh `IndexBundle` from catalog records.

    Records without an identifier or collector info are skipped entirely.
    """

    builder = _IndexBuilder()
    skipped = 0
    for card in records:
        if not card.is_indexable:
            skipped += 1
            continue
        builder.add(card)

    bundle = builder.freeze()
    logger.info("index built cards=%d skipped=%d", len(bundle), skipped)
    return bundle
