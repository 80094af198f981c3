"""Player input models — the unit of pending interaction in a game.

A ``PlayerInput`` describes one decision a player still owes the game.  Leaf
inputs ask for a single thing:

``SelectOption`` — a bare confirmation ("Save", "Pass", ...).
``SelectAmount`` — an integer between ``min_amount`` and ``max_amount``.
``SelectPlayer`` — exactly one player id out of ``players``.
``SelectCard``   — a subset of ``cards`` within the selection bounds.
``SelectValue``  — one string out of an explicit list of ``values``.

Containers embed other inputs, including other containers:

``AndOptions`` — every child must be answered.
``OrOptions``  — exactly one child is answered, picked by index.

Every input carries a completion callback ``cb``.  It receives the parsed
answer for that node and returns ``None`` when the decision is fully applied,
or another ``PlayerInput`` when the answer immediately opens a new decision.
Inputs are frozen once built; the callback is never serialised, so
``model_dump()`` is the client-facing description of the waiting state.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _done(*args: Any) -> None:
    return None


# ── Input Base ──────────────────────────────────────────────────────────────


class InputBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    button_label: str = "Save"
    cb: Callable[..., Any] = Field(default=_done, exclude=True, repr=False)


# ── Leaf Inputs ─────────────────────────────────────────────────────────────


class SelectOption(InputBase):
    """Zero-argument confirmation."""

    type: Literal["option"] = "option"


class SelectAmount(InputBase):
    type: Literal["amount"] = "amount"
    min_amount: int = 0
    max_amount: int

    @model_validator(mode="after")
    def _check_bounds(self) -> SelectAmount:
        if self.min_amount > self.max_amount:
            raise ValueError(
                f"min_amount {self.min_amount} is greater than max_amount {self.max_amount}"
            )
        return self


class SelectPlayer(InputBase):
    type: Literal["player"] = "player"
    players: tuple[str, ...]

    @model_validator(mode="after")
    def _check_players(self) -> SelectPlayer:
        if not self.players:
            raise ValueError("SelectPlayer needs at least one candidate")
        return self


class SelectCard(InputBase):
    type: Literal["card"] = "card"
    cards: tuple[str, ...]
    min_cards_to_select: int = 1
    max_cards_to_select: int = 1

    @model_validator(mode="after")
    def _check_bounds(self) -> SelectCard:
        if not 0 <= self.min_cards_to_select <= self.max_cards_to_select:
            raise ValueError("Card selection bounds must satisfy 0 <= min <= max")
        if self.min_cards_to_select > len(self.cards):
            raise ValueError("Fewer cards offered than the minimum selection")
        return self


class SelectValue(InputBase):
    type: Literal["value"] = "value"
    values: tuple[str, ...]

    @model_validator(mode="after")
    def _check_values(self) -> SelectValue:
        if not self.values:
            raise ValueError("SelectValue needs at least one value")
        return self


# ── Containers ──────────────────────────────────────────────────────────────


class AndOptions(InputBase):
    """All children must be answered before ``cb`` runs."""

    type: Literal["and"] = "and"
    options: tuple[PlayerInput, ...] = ()


class OrOptions(InputBase):
    """Exactly one child is answered; ``cb`` receives the chosen index."""

    type: Literal["or"] = "or"
    options: tuple[PlayerInput, ...]

    @model_validator(mode="after")
    def _check_options(self) -> OrOptions:
        if not self.options:
            raise ValueError("OrOptions needs at least one option")
        return self


# ── Union Type ──────────────────────────────────────────────────────────────

PlayerInput = Annotated[
    Union[
        SelectOption,
        SelectAmount,
        SelectPlayer,
        SelectCard,
        SelectValue,
        AndOptions,
        OrOptions,
    ],
    Field(discriminator="type"),
]

# Rebuild for forward references
AndOptions.model_rebuild()
OrOptions.model_rebuild()
