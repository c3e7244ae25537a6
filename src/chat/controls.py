"""Interactive controls attached to replies and the actions they carry back.

Every action control is identified by `{action}_{requesterId}_{kind}`; a requester id of `0`
marks a control anyone may use. Identifiers are decoded once, at the platform boundary, into
one of the typed `Action` variants.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from src.chat.triggers import MatchKind

MAX_SELECT_OPTIONS = 25
PUBLIC_REQUESTER_ID = 0

_CONTROL_ID_RE = re.compile(r"^(?P<action>[a-z]+)_(?P<requester>\d+)_(?P<kind>\w+)$")


class ControlIdError(ValueError):
    """Raised when a control identifier cannot be decoded."""


class ActionName(StrEnum):
    delete = "delete"
    lockin = "lockin"
    dropdown = "dropdown"


def control_id(action: ActionName, requester_id: int, kind: MatchKind) -> str:
    return f"{action}_{requester_id}_{kind}"


@dataclass(frozen=True)
class LinkControl:
    """Static external link; survives lock-in."""

    label: str
    url: str


@dataclass(frozen=True)
class ButtonControl:
    action: ActionName
    requester_id: int
    kind: MatchKind
    label: str
    disabled: bool = False

    @property
    def custom_id(self) -> str:
        return control_id(self.action, self.requester_id, self.kind)


@dataclass(frozen=True)
class SelectOption:
    label: str
    value: str


@dataclass(frozen=True)
class SelectControl:
    """Single-select menu of candidate cards; values are collector info strings."""

    requester_id: int
    kind: MatchKind
    options: tuple[SelectOption, ...]

    def __post_init__(self) -> None:
        if len(self.options) > MAX_SELECT_OPTIONS:
            raise ValueError(f"a select control holds at most {MAX_SELECT_OPTIONS} options")

    @property
    def custom_id(self) -> str:
        return control_id(ActionName.dropdown, self.requester_id, self.kind)


Control = LinkControl | ButtonControl | SelectControl


@dataclass(frozen=True)
class DeleteAction:
    requester_id: int
    kind: MatchKind


@dataclass(frozen=True)
class LockInAction:
    requester_id: int
    kind: MatchKind


@dataclass(frozen=True)
class SelectAction:
    requester_id: int
    kind: MatchKind
    selected: str


Action = DeleteAction | LockInAction | SelectAction


def parse_control_id(custom_id: str) -> tuple[ActionName, int, MatchKind]:
    """Split a control identifier into action, requester id and match kind.

    Raises:
        ControlIdError: If the identifier is malformed or names an unknown action or kind.
    """

    match = _CONTROL_ID_RE.match(custom_id or "")
    if match is None:
        raise ControlIdError(f"malformed control id: {custom_id!r}")

    try:
        action = ActionName(match.group("action"))
        kind = MatchKind(match.group("kind"))
    except ValueError as exc:
        raise ControlIdError(f"unknown control id: {custom_id!r}") from exc

    return action, int(match.group("requester")), kind


def decode_action(custom_id: str, values: tuple[str, ...] = ()) -> Action:
    """Decode a control identifier (plus selected values) into a typed action.

    Raises:
        ControlIdError: If the identifier cannot be parsed or a selection arrives without a
            value.
    """

    action, requester_id, kind = parse_control_id(custom_id)

    if action is ActionName.delete:
        return DeleteAction(requester_id=requester_id, kind=kind)
    if action is ActionName.lockin:
        return LockInAction(requester_id=requester_id, kind=kind)

    if not values or not values[0]:
        raise ControlIdError(f"selection without a value: {custom_id!r}")
    return SelectAction(requester_id=requester_id, kind=kind, selected=values[0])


def is_authorized(
        requester_id: int,
        actor_id: int,
        *,
        replied_author_id: int | None = None,
        owner_id: int | None = None,
) -> bool:
    """Whether `actor_id` may use a control issued for `requester_id`.

    Allowed for public controls, the original requester, the author of the message the reply
    answers, and the chat owner.
    """

    return (
            requester_id == PUBLIC_REQUESTER_ID
            or actor_id == requester_id
            or (replied_author_id is not None and actor_id == replied_author_id)
            or (owner_id is not None and actor_id == owner_id)
    )
