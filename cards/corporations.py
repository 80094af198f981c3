"""Corporation cards.

A corporation is played once at setup through ``Game.play_corporation_card``:
the player receives ``starting_mega_credits`` and ``resolve`` applies the
printed starting effect.  Its hooks stay live for the rest of the game.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cards.models import CardBase, CardName, CorporationCard, Tag
from game.actions import draw_cards, select_how_to_pay
from game.state import Resource
from inputs.models import OrOptions, SelectOption

if TYPE_CHECKING:
    from game.engine import Game
    from game.state import PlayerState
    from inputs.models import InputBase


class SaturnSystems(CorporationCard):
    """Effect: each Jovian tag put into play, by anyone, raises your M€ production 1 step."""

    name: CardName = CardName.SATURN_SYSTEMS
    title: str = "Saturn Systems"
    tags: tuple[Tag, ...] = (Tag.JOVIAN,)
    starting_mega_credits: int = 42

    def resolve(self, player: PlayerState, game: Game) -> None:
        player.add_production(Resource.TITANIUM, 1)

    def on_card_played(self, owner: PlayerState, game: Game, card: CardBase, played_by: PlayerState) -> None:
        jovian = card.tags.count(Tag.JOVIAN)
        if jovian:
            owner.add_production(Resource.MEGACREDITS, jovian)


class Factorum(CorporationCard):
    """Action: raise energy production 1 step if you have no energy,
    or spend 3 M€ to draw a card."""

    name: CardName = CardName.FACTORUM
    title: str = "Factorum"
    tags: tuple[Tag, ...] = (Tag.ENERGY, Tag.BUILDING)
    starting_mega_credits: int = 37

    def resolve(self, player: PlayerState, game: Game) -> None:
        player.add_production(Resource.STEEL, 1)

    def can_act(self, player: PlayerState, game: Game) -> bool:
        return player.energy == 0 or player.can_afford(3)

    def act(self, player: PlayerState, game: Game) -> InputBase:
        def increase_energy() -> None:
            player.add_production(Resource.ENERGY, 1)

        def buy_card() -> None:
            game.defer(select_how_to_pay(
                game,
                player,
                3,
                title="Select how to pay for Factorum action",
                after_paying=lambda: game.defer(draw_cards(game, player, 1), front=True),
            ))

        options: list[InputBase] = []
        if player.energy == 0:
            options.append(SelectOption(title="Increase your energy production 1 step", cb=increase_energy))
        if player.can_afford(3):
            options.append(SelectOption(title="Spend 3 MC to draw a card", cb=buy_card))
        return OrOptions(title="Choose Factorum action", options=tuple(options))
