"""Payload parser — validates a client answer against a pending input.

Clients answer with a flat ``list[list[str]]``.  Each input consumes its own
payload according to its variant:

  ``SelectOption``  ``[[...]]``          one inner array, contents ignored
  ``SelectAmount``  ``[["3"]]``          one integer string
  ``SelectPlayer``  ``[["p2"]]``         one allowed player id
  ``SelectCard``    ``[["a", "b"]]``     offered card ids within the bounds
  ``SelectValue``   ``[["north"]]``      one allowed value
  ``AndOptions``    ``[[..], [..]]``     child *i* parses ``[payload[i]]``
  ``OrOptions``     ``[["1", ...], ...]`` index first, the child parses
                                         ``[payload[0][1:], *payload[1:]]``

Parsing is pure: it returns an ``Answer`` tree mirroring the input tree and
never calls a callback.  Any mismatch raises ``MalformedPayloadError``, so a
payload is either accepted whole or rejected whole.
"""

from __future__ import annotations

import logging
import re
from typing import Annotated, Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from game.config import MAX_INPUT_DEPTH
from game.errors import MalformedPayloadError
from inputs.models import (
    AndOptions,
    InputBase,
    OrOptions,
    SelectAmount,
    SelectCard,
    SelectOption,
    SelectPlayer,
    SelectValue,
)

logger = logging.getLogger(__name__)

Payload = Sequence[Sequence[str]]

_INTEGER = re.compile(r"^-?\d+$")


# ── Answers ─────────────────────────────────────────────────────────────────


class AnswerBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class OptionAnswer(AnswerBase):
    type: Literal["option"] = "option"


class AmountAnswer(AnswerBase):
    type: Literal["amount"] = "amount"
    amount: int


class PlayerAnswer(AnswerBase):
    type: Literal["player"] = "player"
    player_id: str


class CardAnswer(AnswerBase):
    type: Literal["card"] = "card"
    cards: tuple[str, ...]


class ValueAnswer(AnswerBase):
    type: Literal["value"] = "value"
    value: str


class AndAnswer(AnswerBase):
    type: Literal["and"] = "and"
    answers: tuple[Answer, ...]


class OrAnswer(AnswerBase):
    type: Literal["or"] = "or"
    index: int
    answer: Answer


Answer = Annotated[
    Union[
        OptionAnswer,
        AmountAnswer,
        PlayerAnswer,
        CardAnswer,
        ValueAnswer,
        AndAnswer,
        OrAnswer,
    ],
    Field(discriminator="type"),
]

AndAnswer.model_rebuild()
OrAnswer.model_rebuild()


# ── Parser ──────────────────────────────────────────────────────────────────


def parse_payload(node: InputBase, payload: Payload) -> Answer:
    """Validate *payload* against *node* and return the structured answer."""
    return _parse(node, payload, depth=0)


def _parse(node: InputBase, payload: Payload, depth: int) -> Answer:
    if depth > MAX_INPUT_DEPTH:
        raise MalformedPayloadError("Input nested too deeply")

    if isinstance(node, SelectOption):
        _single_row(payload)
        return OptionAnswer()
    if isinstance(node, SelectAmount):
        return _parse_amount(node, payload)
    if isinstance(node, SelectPlayer):
        return _parse_player(node, payload)
    if isinstance(node, SelectCard):
        return _parse_cards(node, payload)
    if isinstance(node, SelectValue):
        return _parse_value(node, payload)
    if isinstance(node, AndOptions):
        return _parse_and(node, payload, depth)
    if isinstance(node, OrOptions):
        return _parse_or(node, payload, depth)
    raise TypeError(f"Unsupported input type: {type(node).__name__}")


def _single_row(payload: Payload) -> Sequence[str]:
    if len(payload) != 1:
        raise MalformedPayloadError("Incorrect options provided")
    return payload[0]


def _parse_amount(node: SelectAmount, payload: Payload) -> AmountAnswer:
    row = _single_row(payload)
    if len(row) != 1:
        raise MalformedPayloadError("Incorrect options provided")
    raw = str(row[0]).strip()
    if not _INTEGER.match(raw):
        raise MalformedPayloadError("Number not provided for amount")
    amount = int(raw)
    if amount > node.max_amount:
        raise MalformedPayloadError("Amount provided too high")
    if amount < node.min_amount:
        raise MalformedPayloadError("Amount provided too low")
    return AmountAnswer(amount=amount)


def _parse_player(node: SelectPlayer, payload: Payload) -> PlayerAnswer:
    row = _single_row(payload)
    if len(row) != 1:
        raise MalformedPayloadError("Invalid players array provided")
    if row[0] not in node.players:
        raise MalformedPayloadError("Player not available")
    return PlayerAnswer(player_id=row[0])


def _parse_cards(node: SelectCard, payload: Payload) -> CardAnswer:
    row = _single_row(payload)
    if len(row) < node.min_cards_to_select:
        raise MalformedPayloadError("Not enough cards selected")
    if len(row) > node.max_cards_to_select:
        raise MalformedPayloadError("Too many cards selected")
    seen: set[str] = set()
    for card in row:
        if card not in node.cards:
            raise MalformedPayloadError("Card not found")
        if card in seen:
            raise MalformedPayloadError("Duplicate card selected")
        seen.add(card)
    return CardAnswer(cards=tuple(row))


def _parse_value(node: SelectValue, payload: Payload) -> ValueAnswer:
    row = _single_row(payload)
    if len(row) != 1:
        raise MalformedPayloadError("Incorrect options provided")
    if row[0] not in node.values:
        raise MalformedPayloadError("Value not available")
    return ValueAnswer(value=row[0])


def _parse_and(node: AndOptions, payload: Payload, depth: int) -> AndAnswer:
    if len(payload) != len(node.options):
        raise MalformedPayloadError("Incorrect options provided")
    answers = tuple(
        _parse(child, [row], depth + 1)
        for child, row in zip(node.options, payload)
    )
    return AndAnswer(answers=answers)


def _parse_or(node: OrOptions, payload: Payload, depth: int) -> OrAnswer:
    if not payload:
        raise MalformedPayloadError("Incorrect options provided")
    head = payload[0]
    if not head or not _INTEGER.match(str(head[0]).strip()):
        raise MalformedPayloadError("Invalid option index")
    index = int(str(head[0]).strip())
    if not 0 <= index < len(node.options):
        raise MalformedPayloadError("Invalid option index")
    child_payload = [list(head[1:]), *payload[1:]]
    logger.debug("Or input %r: option %d selected", node.title, index)
    return OrAnswer(index=index, answer=_parse(node.options[index], child_payload, depth + 1))
