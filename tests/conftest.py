"""Pytest configuration and shared fixtures.

The repository uses a flat `src/` layout. This conftest ensures tests can import from the `src.*`
namespace when running `pytest` without installing the package, and provides a small catalog
plus a recording transport used across the chat tests.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.cards.index import IndexBundle, build_index  # noqa: E402
from src.cards.record import CardRecord  # noqa: E402
from src.cards.store import CardIndexStore  # noqa: E402
from src.chat.replies import Reply  # noqa: E402
from src.chat.sessions import MessageRef  # noqa: E402


def _make_card(identifier: str, title: str, collector_info: str, **fields: str) -> CardRecord:
    fields.setdefault("display_name", title)
    fields.setdefault("image_url", f"https://cards.example/{collector_info}.jpg")
    fields.setdefault("wiki_url", f"https://wiki.example/{collector_info}")
    return CardRecord(identifier=identifier, title=title, collector_info=collector_info, **fields)


@pytest.fixture
def make_card():
    """Factory for catalog records with predictable image and wiki URLs."""

    return _make_card


@pytest.fixture
def enquea() -> CardRecord:
    return _make_card(
        "101",
        "Ulaire Enquea",
        "1U231",
        subtitle="Lieutenant of Morgul",
        title_suffix="(T)",
        display_name="Úlairë Enquëa, Lieutenant of Morgul",
    )


@pytest.fixture
def catalog(enquea: CardRecord) -> list[CardRecord]:
    return [
        enquea,
        _make_card("102", "Gandalf", "1R364", subtitle="Friend of Shadowfax", nicknames="Greyhame"),
        _make_card("103", "Gandalf", "2R22", subtitle="The Grey Wizard", personas="Gandalf,Mithrandir"),
        _make_card("104", "A Wizard Is Never Late", "1C55"),
        _make_card("105", "Sting", "1R313", nicknames="Shotgun, ,Spider Stabber"),
    ]


@pytest.fixture
def bundle(catalog: list[CardRecord]) -> IndexBundle:
    return build_index(catalog)


@pytest.fixture
def store(bundle: IndexBundle) -> CardIndexStore:
    return CardIndexStore(bundle)


class FakeTransport:
    """Records outbound replies instead of talking to a chat platform."""

    def __init__(self) -> None:
        self.sent: list[tuple[MessageRef, MessageRef, Reply]] = []
        self.edits: list[tuple[MessageRef, Reply]] = []
        self.deleted: list[MessageRef] = []
        self._next_id = 1000

    async def send_reply(self, source: MessageRef, reply: Reply) -> MessageRef:
        self._next_id += 1
        ref = MessageRef(chat_id=source.chat_id, message_id=self._next_id)
        self.sent.append((source, ref, reply))
        return ref

    async def edit(self, ref: MessageRef, reply: Reply) -> None:
        self.edits.append((ref, reply))

    async def delete(self, ref: MessageRef) -> None:
        self.deleted.append(ref)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
