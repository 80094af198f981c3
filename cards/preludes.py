"""Prelude cards, played for free before the first generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cards.models import CardBase, CardName, CardType, Tag
from game.actions import place_ocean_tile, select_how_to_pay
from game.state import Resource

if TYPE_CHECKING:
    from game.engine import Game
    from game.state import PlayerState


class AquiferTurbines(CardBase):
    """+2 energy production, place an ocean, then pay 3 M€."""

    name: CardName = CardName.AQUIFER_TURBINES
    title: str = "Aquifer Turbines"
    card_type: CardType = CardType.PRELUDE
    tags: tuple[Tag, ...] = (Tag.ENERGY,)

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return player.can_afford(3)

    def resolve(self, player: PlayerState, game: Game) -> None:
        player.add_production(Resource.ENERGY, 2)
        game.defer(place_ocean_tile(game, player), front=True)
        game.defer(select_how_to_pay(game, player, 3, title="Select how to pay for Aquifer Turbines"))
