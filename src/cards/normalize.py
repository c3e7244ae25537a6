"""Text normalization for lookup keys and generated abbreviations."""

from __future__ import annotations

import re

_NON_WORD_RE = re.compile(r"\W+")
_PUNCTUATION_RE = re.compile(r"[^\w\s]+")


def scrub(text: str, strip_symbols: bool = True) -> str:
    """Normalize text into a lookup key.

    Lowercases and trims the input; with `strip_symbols` every non-word character is removed,
    interior spaces included, so spacing and punctuation typos still hit the same key.
    """

    value = (text or "").lower().strip()
    if strip_symbols:
        value = _NON_WORD_RE.sub("", value)
    return value


def abbreviate(text: str) -> str:
    """Reduce text to the first letters of its words.

    Hyphens count as word breaks ("Obi-wan Kenobi" -> "owk"); words that start with a digit or
    underscore contribute nothing.
    """

    value = (text or "").lower().strip()
    value = value.replace("-", " ")
    value = _PUNCTUATION_RE.sub("", value)
    return "".join(word[0] for word in value.split() if word[0].isalpha())
