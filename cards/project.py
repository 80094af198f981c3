"""Project cards.

Automated cards apply their effect once in ``resolve``.  Active cards also
keep reacting through hooks (``on_resource_added``) or offer a
once-per-generation ``act``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cards.models import CardBase, CardName, CardResource, CardType, Tag
from game.actions import draw_and_keep, select_player
from game.state import Resource
from inputs.models import SelectAmount

if TYPE_CHECKING:
    from game.engine import Game
    from game.state import PlayerState
    from inputs.models import InputBase


class PowerSupplyConsortium(CardBase):
    name: CardName = CardName.POWER_SUPPLY_CONSORTIUM
    title: str = "Power Supply Consortium"
    card_type: CardType = CardType.AUTOMATED
    cost: int = 5
    tags: tuple[Tag, ...] = (Tag.ENERGY,)

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return player.get_tag_count(Tag.ENERGY) >= 2

    def resolve(self, player: PlayerState, game: Game) -> InputBase | None:
        candidates = [p for p in game.players if p.get_production(Resource.ENERGY) > 0]
        if not candidates:
            player.add_production(Resource.ENERGY, 1)
            return None

        def steal(target: PlayerState) -> None:
            target.add_production(Resource.ENERGY, -1, from_player=player)
            player.add_production(Resource.ENERGY, 1)

        return select_player(
            candidates,
            "Select player to decrease energy production",
            steal,
            auto_resolve_single=False,
        )


class LunarBeam(CardBase):
    name: CardName = CardName.LUNAR_BEAM
    title: str = "Lunar Beam"
    card_type: CardType = CardType.AUTOMATED
    cost: int = 13
    tags: tuple[Tag, ...] = (Tag.EARTH, Tag.ENERGY)

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return player.get_production(Resource.MEGACREDITS) >= -3

    def resolve(self, player: PlayerState, game: Game) -> None:
        player.add_production(Resource.MEGACREDITS, -2)
        player.add_production(Resource.HEAT, 2)
        player.add_production(Resource.ENERGY, 2)


class Insulation(CardBase):
    name: CardName = CardName.INSULATION
    title: str = "Insulation"
    card_type: CardType = CardType.AUTOMATED
    cost: int = 2

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return player.get_production(Resource.HEAT) >= 1

    def resolve(self, player: PlayerState, game: Game) -> InputBase:
        def convert(amount: int) -> None:
            player.add_production(Resource.HEAT, -amount)
            player.add_production(Resource.MEGACREDITS, amount)

        return SelectAmount(
            title="Select amount of heat production to decrease",
            max_amount=player.get_production(Resource.HEAT),
            cb=convert,
        )


class IoMiningIndustries(CardBase):
    name: CardName = CardName.IO_MINING_INDUSTRIES
    title: str = "Io Mining Industries"
    card_type: CardType = CardType.AUTOMATED
    cost: int = 41
    tags: tuple[Tag, ...] = (Tag.JOVIAN, Tag.SPACE)

    def resolve(self, player: PlayerState, game: Game) -> None:
        player.add_production(Resource.TITANIUM, 2)
        player.add_production(Resource.MEGACREDITS, 2)

    def get_victory_points(self, player: PlayerState, game: Game) -> int:
        return player.get_tag_count(Tag.JOVIAN)


class MeatIndustry(CardBase):
    """Effect: whenever you add animals to any of your cards, gain 2 M€ each."""

    name: CardName = CardName.MEAT_INDUSTRY
    title: str = "Meat Industry"
    card_type: CardType = CardType.ACTIVE
    cost: int = 5
    tags: tuple[Tag, ...] = (Tag.BUILDING,)

    def on_resource_added(self, owner: PlayerState, game: Game, card: CardBase, count: int) -> None:
        if card.resource_type == CardResource.ANIMAL:
            owner.add_resource(Resource.MEGACREDITS, 2 * count)


class LagrangeObservatory(CardBase):
    name: CardName = CardName.LAGRANGE_OBSERVATORY
    title: str = "Lagrange Observatory"
    card_type: CardType = CardType.AUTOMATED
    cost: int = 9
    tags: tuple[Tag, ...] = (Tag.SCIENCE, Tag.SPACE)
    victory_points: int = 1

    def resolve(self, player: PlayerState, game: Game) -> None:
        game.draw_cards(player.id, 1)


class FoodFactory(CardBase):
    name: CardName = CardName.FOOD_FACTORY
    title: str = "Food Factory"
    card_type: CardType = CardType.AUTOMATED
    cost: int = 12
    tags: tuple[Tag, ...] = (Tag.BUILDING,)
    victory_points: int = 1

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return player.get_production(Resource.PLANTS) >= 1

    def resolve(self, player: PlayerState, game: Game) -> None:
        player.add_production(Resource.PLANTS, -1)
        player.add_production(Resource.MEGACREDITS, 4)


class GeneRepair(CardBase):
    name: CardName = CardName.GENE_REPAIR
    title: str = "Gene Repair"
    card_type: CardType = CardType.AUTOMATED
    cost: int = 12
    tags: tuple[Tag, ...] = (Tag.SCIENCE,)
    victory_points: int = 2

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return player.get_tag_count(Tag.SCIENCE) >= 3

    def resolve(self, player: PlayerState, game: Game) -> None:
        player.add_production(Resource.MEGACREDITS, 2)


class Fish(CardBase):
    """Decrease any plant production 1 step.  Action: add 1 animal here.

    1 VP per animal on this card.
    """

    name: CardName = CardName.FISH
    title: str = "Fish"
    card_type: CardType = CardType.ACTIVE
    cost: int = 9
    tags: tuple[Tag, ...] = (Tag.ANIMAL,)
    resource_type: CardResource | None = CardResource.ANIMAL

    def _targets(self, game: Game) -> list[PlayerState]:
        return [p for p in game.players if p.get_production(Resource.PLANTS) > 0]

    def can_resolve(self, player: PlayerState, game: Game) -> bool:
        return bool(self._targets(game))

    def resolve(self, player: PlayerState, game: Game) -> InputBase | None:
        def decrease(target: PlayerState) -> None:
            target.add_production(Resource.PLANTS, -1, from_player=player)

        return select_player(
            self._targets(game),
            "Select player to decrease plant production",
            decrease,
            auto_resolve_single=True,
        )

    def can_act(self, player: PlayerState, game: Game) -> bool:
        return True

    def act(self, player: PlayerState, game: Game) -> None:
        game.add_resource_to_card(player.id, self.name, 1)

    def get_victory_points(self, player: PlayerState, game: Game) -> int:
        played = player.get_played_card(self.name)
        return played.resource_count if played is not None else 0


class BusinessContacts(CardBase):
    name: CardName = CardName.BUSINESS_CONTACTS
    title: str = "Business Contacts"
    card_type: CardType = CardType.EVENT
    cost: int = 7
    tags: tuple[Tag, ...] = (Tag.EARTH,)

    def resolve(self, player: PlayerState, game: Game) -> InputBase | None:
        return draw_and_keep(game, player, count=4, keep=2)
