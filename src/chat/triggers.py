"""Card summons syntax: `[[query]]` for an image, `{{query}}` for a name with wiki link."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class MatchKind(StrEnum):
    """How a resolved card is presented."""

    image = "image"
    wiki = "wiki"


# Queries starting with "@" are reserved and never matched.
_SQUARE_RE = re.compile(r"\[\[(?!@)(.*?)]]")
_CURLY_RE = re.compile(r"\{\{(?!@)(.*?)}}")

_PATTERNS: tuple[tuple[MatchKind, re.Pattern[str]], ...] = (
    (MatchKind.image, _SQUARE_RE),
    (MatchKind.wiki, _CURLY_RE),
)


@dataclass(frozen=True)
class CardRequest:
    """One summons embedded in a message."""

    kind: MatchKind
    query: str
    position: int


def extract_requests(text: str | None) -> list[CardRequest]:
    """Return every summons in the text, ordered by where it occurs."""

    requests = [
        CardRequest(kind=kind, query=match.group(1), position=match.start())
        for kind, pattern in _PATTERNS
        for match in pattern.finditer(text or "")
    ]
    return sorted(requests, key=lambda r: r.position)
