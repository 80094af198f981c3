"""Upgrades for player records written by older releases.

Saved player records are plain dicts.  Older releases stored things the
current ``PlayerState`` no longer accepts:

- corporation cards as their printed title (``"Saturn Systems"``) or as an
  embedded card object (``{"name": "Saturn Systems", "cost": 0, ...}``),
- card lists and the action history as printed titles,
- played cards as bare names, or with a ``resources`` count, instead of
  ``{"name", "resource_count"}``,
- no ``timer`` sub-record,
- derived counters such as ``science_tag_count``.

``upgrade_player_record`` applies every step in ``_STEPS`` in order.  Each
step is idempotent, so a current-format record passes through unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from cards.models import CardName
from game.errors import DeserializationToleranceError

logger = logging.getLogger(__name__)

Record = dict[str, Any]

_CORPORATION_FIELDS = ("picked_corporation_card", "corporation_card")
_CARD_LIST_FIELDS = (
    "actions_this_generation",
    "dealt_corporation_cards",
    "dealt_project_cards",
    "dealt_prelude_cards",
    "cards_in_hand",
    "prelude_cards_in_hand",
    "drafted_cards",
    "removed_from_play_cards",
)

# Keys older releases persisted that are now derived or gone.
_OBSOLETE_KEYS = ("science_tag_count",)


def card_name_from_legacy(value: Any) -> str:
    """Return the canonical card id for a stored id, title or card object."""
    from cards.registry import card_name_from_title

    if isinstance(value, dict):
        value = value.get("name")
    if not isinstance(value, str):
        raise DeserializationToleranceError(f"Cannot read a card reference from {value!r}")
    try:
        return CardName(value).value
    except ValueError:
        pass
    name = card_name_from_title(value)
    if name is None:
        raise DeserializationToleranceError(f"Unknown card: {value!r}")
    return name.value


# ── Steps ───────────────────────────────────────────────────────────────────


def _corporation_ids(record: Record) -> None:
    for key in _CORPORATION_FIELDS:
        value = record.get(key)
        if value is not None:
            record[key] = card_name_from_legacy(value)


def _card_list_ids(record: Record) -> None:
    for key in _CARD_LIST_FIELDS:
        if key in record and record[key] is not None:
            record[key] = [card_name_from_legacy(v) for v in record[key]]


def _played_card_entries(record: Record) -> None:
    played = record.get("played_cards")
    if not played:
        return
    upgraded = []
    for entry in played:
        if isinstance(entry, dict):
            upgraded.append({
                "name": card_name_from_legacy(entry.get("name")),
                "resource_count": entry.get("resource_count") or entry.get("resources") or 0,
            })
        else:
            upgraded.append({"name": card_name_from_legacy(entry), "resource_count": 0})
    record["played_cards"] = upgraded


def _missing_timer(record: Record) -> None:
    if record.get("timer") is None:
        from game.state import Timer

        record["timer"] = Timer.new_instance().model_dump(mode="json")


def _drop_unknown_keys(record: Record) -> None:
    from game.state import PlayerState

    for key in _OBSOLETE_KEYS:
        record.pop(key, None)
    unknown = set(record) - set(PlayerState.model_fields)
    for key in sorted(unknown):
        logger.warning("Dropping unknown key %r from player %r", key, record.get("id"))
        del record[key]


_STEPS: list[Callable[[Record], None]] = [
    _corporation_ids,
    _card_list_ids,
    _played_card_entries,
    _missing_timer,
    _drop_unknown_keys,
]


def upgrade_player_record(record: Record) -> Record:
    """Return an upgraded copy of *record*; the input is left untouched."""
    upgraded = dict(record)
    for step in _STEPS:
        step(upgraded)
    return upgraded
