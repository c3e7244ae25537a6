"""Reply bodies and control layouts for resolved, ambiguous and unknown cards."""

from __future__ import annotations

from dataclasses import dataclass, replace

from src.cards.record import CardRecord
from src.cards.resolver import Outcome, Resolution
from src.chat.controls import (
    MAX_SELECT_OPTIONS,
    PUBLIC_REQUESTER_ID,
    ActionName,
    ButtonControl,
    Control,
    LinkControl,
    SelectControl,
    SelectOption,
)
from src.chat.triggers import MatchKind

NOT_FOUND_TEMPLATE = (
    "What is `{query}`, I wonder? I cannot place it. It does not seem to come in the old lists "
    "that I learned when I was young. But that was a long, long time ago, and they may have made "
    "new lists."
)


@dataclass(frozen=True)
class Reply:
    """Platform-neutral outgoing message: body text plus interactive controls."""

    text: str
    controls: tuple[Control, ...] = ()

    def links_only(self) -> Reply:
        """Same body with every control except links removed."""

        return replace(self, controls=tuple(c for c in self.controls if isinstance(c, LinkControl)))

    @property
    def select(self) -> SelectControl | None:
        return next((c for c in self.controls if isinstance(c, SelectControl)), None)


def _accept(requester_id: int, kind: MatchKind, disabled: bool = False) -> ButtonControl:
    return ButtonControl(ActionName.lockin, requester_id, kind, "Accept", disabled=disabled)


def _delete(requester_id: int, kind: MatchKind) -> ButtonControl:
    return ButtonControl(ActionName.delete, requester_id, kind, "Delete")


def card_reply(card: CardRecord, kind: MatchKind, requester_id: int) -> Reply:
    """Reply for an unambiguous match.

    Image summons reply with the image URL (rendered as a preview); wiki summons reply with the
    card label. Both carry the wiki link and the Accept/Delete buttons.
    """

    # A card without an image falls back to its label; Telegram rejects empty messages.
    text = card.image_url if kind is MatchKind.image and card.image_url.strip() else card.label
    controls: list[Control] = []
    if card.wiki_url:
        controls.append(LinkControl(label="Wiki", url=card.wiki_url))
    controls.append(_accept(requester_id, kind))
    controls.append(_delete(requester_id, kind))
    return Reply(text=text, controls=tuple(controls))


def not_found_reply(query: str) -> Reply:
    return Reply(
        text=NOT_FOUND_TEMPLATE.format(query=query),
        controls=(_delete(PUBLIC_REQUESTER_ID, MatchKind.image),),
    )


def collision_reply(
        query: str,
        kind: MatchKind,
        candidates: tuple[CardRecord, ...],
        requester_id: int,
) -> Reply:
    """Disambiguation reply listing up to 25 candidates in a select control."""

    text = f"Found multiple potential candidates for card image `{query}`."
    if len(candidates) > MAX_SELECT_OPTIONS:
        text += (
            f"\nFound {len(candidates)} options.  The top {MAX_SELECT_OPTIONS} are shown below, "
            "but you may need to try a more specific query.\n"
        )
    text += "\nSelect your choice from the dropdown below:\n\n"

    select = SelectControl(
        requester_id=requester_id,
        kind=kind,
        options=tuple(
            SelectOption(label=card.label, value=card.collector_info)
            for card in candidates[:MAX_SELECT_OPTIONS]
        ),
    )
    return Reply(
        text=text,
        controls=(_accept(requester_id, kind, disabled=True), _delete(requester_id, kind), select),
    )


def build_reply(resolution: Resolution, kind: MatchKind, requester_id: int) -> Reply:
    """Pick the reply shape for a resolved query."""

    if resolution.outcome is Outcome.not_found:
        return not_found_reply(resolution.query)
    if resolution.card is not None:
        return card_reply(resolution.card, kind, requester_id)
    return collision_reply(resolution.query, kind, resolution.candidates, requester_id)
