"""Query resolution against an `IndexBundle`.

Resolution is a pure read: the query is scrubbed, looked up in every index for an exact key
and, for queries longer than two characters, matched as a substring of index keys. The result is
deduplicated by record identity and keeps first-hit order, so earlier indices list first.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from src.cards.index import Index, IndexBundle
from src.cards.normalize import scrub
from src.cards.record import CardRecord

# Queries this short only get exact-key lookups.
MIN_SUBSTRING_QUERY_LEN = 3


class Outcome(StrEnum):
    """Classification of a resolved query."""

    not_found = "not_found"
    unique = "unique"
    ambiguous = "ambiguous"


@dataclass(frozen=True)
class Resolution:
    """Candidates for one query after the collapse heuristic."""

    query: str
    candidates: tuple[CardRecord, ...]

    @property
    def outcome(self) -> Outcome:
        if not self.candidates:
            return Outcome.not_found
        if len(self.candidates) == 1:
            return Outcome.unique
        return Outcome.ambiguous

    @property
    def card(self) -> CardRecord | None:
        """The single matching record, if the query was unambiguous."""

        return self.candidates[0] if len(self.candidates) == 1 else None


def _exact_hits(bundle: IndexBundle, key: str) -> Iterable[CardRecord]:
    yield from bundle.subtitles.get(key, ())
    card = bundle.collector_info.get(key)
    if card is not None:
        yield card
    yield from bundle.full_titles.get(key, ())
    yield from bundle.titles.get(key, ())
    yield from bundle.nicknames.get(key, ())
    yield from bundle.personas.get(key, ())


def _substring_hits(bundle: IndexBundle, key: str) -> Iterable[CardRecord]:
    indices: tuple[Index, ...] = (
        bundle.titles,
        bundle.subtitles,
        bundle.full_titles,
        bundle.nicknames,
    )
    for index in indices:
        for index_key, cards in index.items():
            if key in index_key:
                yield from cards


def resolve(query: str, bundle: IndexBundle) -> list[CardRecord]:
    """Return every record matching the query, deduplicated, in first-hit order."""

    key = scrub(query)
    # dict keeps insertion order; records hash by identity.
    found: dict[CardRecord, None] = dict.fromkeys(_exact_hits(bundle, key))

    if len(key) >= MIN_SUBSTRING_QUERY_LEN:
        found.update(dict.fromkeys(_substring_hits(bundle, key)))

    return list(found)


def collapse(candidates: list[CardRecord]) -> list[CardRecord]:
    """Collapse printings of the same card into one candidate.

    When every candidate shares one title, the set is narrowed to the printings with no suffix or
    an errata suffix. If none qualify, or the titles differ, the input comes back unchanged.
    """

    if len(candidates) <= 1:
        return candidates

    if len({card.title for card in candidates}) != 1:
        return candidates

    preferred = [
        card
        for card in candidates
        if not card.title_suffix.strip() or "errata" in card.title_suffix.lower()
    ]
    return preferred or candidates


def lookup(query: str, bundle: IndexBundle) -> Resolution:
    """Resolve a query and apply the collapse heuristic."""

    return Resolution(query=query, candidates=tuple(collapse(resolve(query, bundle))))


def by_collector_info(bundle: IndexBundle, value: str) -> CardRecord | None:
    """Exact collector-info lookup (used for selection values, never free text)."""

    return bundle.collector_info.get(scrub(value))
