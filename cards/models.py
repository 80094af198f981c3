"""Card models — the effect collaborators that feed the input core.

Every card is a frozen ``CardBase`` instance registered once in
``cards.registry``.  Cards hold no per-game state; anything a card
accumulates (animals, microbes) lives on the owning player's ``PlayedCard``
entry, so a registry lookup by ``CardName`` is all it takes to rehydrate a
card from a save.

A card talks to the game through a small capability surface:

``can_resolve(player, game)`` — pure eligibility check, no side effects.
``resolve(player, game)``     — apply the card; may mutate state and push
                                 deferred actions.  Returns a ``PlayerInput``
                                 when it still needs input, else ``None``.

Optional hooks: ``on_card_played`` (any player put a card into play),
``on_resource_added`` (the owner added resources to one of their cards),
``can_act`` / ``act`` (once-per-generation card actions).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from game.engine import Game
    from game.state import PlayerState
    from inputs.models import InputBase


# ── Enums ───────────────────────────────────────────────────────────────────


class CardName(str, Enum):
    """Canonical card identifiers (stable across releases)."""

    AQUIFER_TURBINES = "aquifer_turbines"
    BUSINESS_CONTACTS = "business_contacts"
    FACTORUM = "factorum"
    FISH = "fish"
    FOOD_FACTORY = "food_factory"
    GENE_REPAIR = "gene_repair"
    INSULATION = "insulation"
    IO_MINING_INDUSTRIES = "io_mining_industries"
    LAGRANGE_OBSERVATORY = "lagrange_observatory"
    LUNAR_BEAM = "lunar_beam"
    MEAT_INDUSTRY = "meat_industry"
    POWER_SUPPLY_CONSORTIUM = "power_supply_consortium"
    SATURN_SYSTEMS = "saturn_systems"


class Tag(str, Enum):
    ANIMAL = "animal"
    BUILDING = "building"
    EARTH = "earth"
    ENERGY = "energy"
    JOVIAN = "jovian"
    SCIENCE = "science"
    SPACE = "space"


class CardType(str, Enum):
    AUTOMATED = "automated"
    ACTIVE = "active"
    EVENT = "event"
    PRELUDE = "prelude"
    CORPORATION = "corporation"


class CardResource(str, Enum):
    ANIMAL = "animal"
    MICROBE = "microbe"


# ── Card Base ───────────────────────────────────────────────────────────────


class CardBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: CardName
    title: str  # printed name; older saves stored this instead of ``name``
    card_type: CardType
    cost: int = 0
    tags: tuple[Tag, ...] = ()
    resource_type: CardResource | None = None
    victory_points: int = 0

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return True

    def resolve(self, player: PlayerState, game: Game) -> InputBase | None:
        return None

    def get_victory_points(self, player: PlayerState, game: Game) -> int:
        return self.victory_points

    # ── Hooks ───────────────────────────────────────────────────────────

    def on_card_played(
        self, owner: PlayerState, game: Game, card: CardBase, played_by: PlayerState
    ) -> None:
        return None

    def on_resource_added(
        self, owner: PlayerState, game: Game, card: CardBase, count: int
    ) -> None:
        return None

    def can_act(self, player: PlayerState, game: Game) -> bool:
        return False

    def act(self, player: PlayerState, game: Game) -> InputBase | None:
        return None

    @property
    def has_action(self) -> bool:
        return type(self).act is not CardBase.act


class CorporationCard(CardBase):
    card_type: CardType = CardType.CORPORATION
    starting_mega_credits: int = 0
