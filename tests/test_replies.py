"""Tests for reply bodies and control layouts."""

from __future__ import annotations

from src.cards.index import IndexBundle, build_index
from src.cards.record import CardRecord
from src.cards.resolver import lookup
from src.chat.controls import ButtonControl, LinkControl, SelectControl
from src.chat.replies import build_reply, card_reply, not_found_reply
from src.chat.triggers import MatchKind


def test_wiki_reply_shows_label(enquea: CardRecord) -> None:
    reply = card_reply(enquea, MatchKind.wiki, 42)

    assert reply.text == "Úlairë Enquëa, Lieutenant of Morgul (1U231)"
    assert reply.controls[0] == LinkControl(label="Wiki", url=enquea.wiki_url)
    assert [c.custom_id for c in reply.controls[1:]] == ["lockin_42_wiki", "delete_42_wiki"]


def test_not_found_reply_is_public() -> None:
    reply = not_found_reply("bombadil")

    assert "`bombadil`" in reply.text
    (delete,) = reply.controls
    assert isinstance(delete, ButtonControl)
    assert delete.custom_id == "delete_0_image"


def test_collision_reply_disables_accept(bundle: IndexBundle) -> None:
    reply = build_reply(lookup("gandalf", bundle), MatchKind.image, 42)

    accept, delete, select = reply.controls
    assert isinstance(accept, ButtonControl) and accept.disabled
    assert isinstance(delete, ButtonControl) and not delete.disabled
    assert isinstance(select, SelectControl)
    assert [o.label for o in select.options] == ["Gandalf (1R364)", "Gandalf (2R22)"]
    assert "top 25" not in reply.text


def test_collision_reply_caps_options_at_25(make_card) -> None:
    cards = [make_card(str(i), f"Orc Raider {i}", f"1C{i}") for i in range(30)]

    reply = build_reply(lookup("orcraider", build_index(cards)), MatchKind.image, 42)

    assert "Found 30 options.  The top 25 are shown below" in reply.text
    assert len(reply.select.options) == 25
    assert reply.select.options[0].value == "1C0"


def test_image_reply_without_image_falls_back_to_label(make_card) -> None:
    card = make_card("7", "Orcrist", "2R33", display_name="Orcrist", image_url="  ")

    reply = card_reply(card, MatchKind.image, 42)

    assert reply.text == "Orcrist (2R33)"


def test_build_reply_picks_shape_by_outcome(enquea: CardRecord, bundle: IndexBundle) -> None:
    found = build_reply(lookup("lom", bundle), MatchKind.image, 42)
    missing = build_reply(lookup("bombadil", bundle), MatchKind.image, 42)

    assert found.text == enquea.image_url
    assert missing == not_found_reply("bombadil")
