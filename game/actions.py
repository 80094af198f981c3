"""Reusable building blocks for card effects.

Each factory returns either a ``PlayerInput`` (something the player must
answer right now) or a ``DeferredAction`` (work to queue on the game):

  ``select_player``       — choose a target player, optionally auto-picking
                            a lone candidate.
  ``select_how_to_pay``   — pay a cost, asking how only when there is a real
                            choice of resources.
  ``place_ocean_tile``    — ask for a free ocean space and place a tile.
  ``draw_cards``          — draw from the project deck into the hand.
  ``draw_and_keep``       — draw, then ask which of the drawn cards to keep.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Sequence

from game import config
from game.deferred import DeferredAction
from game.errors import MalformedPayloadError
from game.state import Resource
from inputs.models import AndOptions, InputBase, SelectAmount, SelectCard, SelectPlayer, SelectValue

if TYPE_CHECKING:
    from game.engine import Game
    from game.state import PlayerState

logger = logging.getLogger(__name__)


# ── Player selection ────────────────────────────────────────────────────────


def select_player(
    candidates: Sequence[PlayerState],
    title: str,
    cb: Callable[[PlayerState], InputBase | None],
    auto_resolve_single: bool | None = None,
) -> InputBase | None:
    """Ask the acting player to pick one of *candidates*.

    With ``auto_resolve_single`` and exactly one candidate, *cb* runs
    immediately and its result is returned instead of a ``SelectPlayer``.
    ``None`` falls back to ``config.auto_resolve_single_player()``.
    """
    if not candidates:
        raise ValueError("select_player needs at least one candidate")
    if auto_resolve_single is None:
        auto_resolve_single = config.auto_resolve_single_player()
    if auto_resolve_single and len(candidates) == 1:
        logger.debug("Auto-selecting %s for %r", candidates[0].id, title)
        return cb(candidates[0])

    by_id = {p.id: p for p in candidates}
    return SelectPlayer(
        title=title,
        players=tuple(by_id),
        cb=lambda player_id: cb(by_id[player_id]),
    )


# ── Payment ─────────────────────────────────────────────────────────────────


def select_how_to_pay(
    game: Game,
    player: PlayerState,
    amount: int,
    title: str | None = None,
    can_use_steel: bool = False,
    can_use_titanium: bool = False,
    after_paying: Callable[[], None] | None = None,
) -> DeferredAction:
    """Deferred payment of *amount* M€.

    When M€ is the only usable resource the cost is taken straight away.
    Otherwise the player gets an ``AndOptions`` with one ``SelectAmount`` per
    usable resource; the container rejects splits that do not cover the cost.
    """
    title = title or f"Select how to pay {amount} MC"

    def _pay() -> None:
        if after_paying is not None:
            after_paying()

    def execute() -> InputBase | None:
        use_heat = player.can_use_heat_as_mega_credits and player.heat > 0
        use_steel = can_use_steel and player.steel > 0
        use_titanium = can_use_titanium and player.titanium > 0
        if not (use_heat or use_steel or use_titanium):
            player.add_resource(Resource.MEGACREDITS, -amount)
            _pay()
            return None

        chosen: dict[Resource, int] = {}
        rates = {Resource.MEGACREDITS: 1, Resource.HEAT: 1}
        options: list[InputBase] = [
            SelectAmount(
                title="Mega credits",
                max_amount=min(player.mega_credits, amount),
                cb=lambda n: chosen.__setitem__(Resource.MEGACREDITS, n),
            )
        ]
        if use_heat:
            options.append(SelectAmount(
                title="Heat",
                max_amount=player.heat,
                cb=lambda n: chosen.__setitem__(Resource.HEAT, n),
            ))
        if use_steel:
            rates[Resource.STEEL] = player.steel_value
            options.append(SelectAmount(
                title="Steel",
                max_amount=player.steel,
                cb=lambda n: chosen.__setitem__(Resource.STEEL, n),
            ))
        if use_titanium:
            rates[Resource.TITANIUM] = player.titanium_value
            options.append(SelectAmount(
                title="Titanium",
                max_amount=player.titanium,
                cb=lambda n: chosen.__setitem__(Resource.TITANIUM, n),
            ))

        def settle() -> None:
            total = sum(count * rates[res] for res, count in chosen.items())
            if total < amount:
                raise MalformedPayloadError("Haven't spent enough")
            for res, count in chosen.items():
                if count:
                    player.add_resource(res, -count)
            _pay()

        return AndOptions(title=title, options=tuple(options), cb=settle)

    return DeferredAction(player_id=player.id, execute=execute, title=title)


# ── Board ───────────────────────────────────────────────────────────────────


def place_ocean_tile(game: Game, player: PlayerState, title: str = "Select space for ocean tile") -> DeferredAction:
    def execute() -> InputBase | None:
        spaces = game.available_ocean_spaces()
        if not spaces:
            logger.info("No ocean spaces left; %s places nothing", player.id)
            return None
        return SelectValue(
            title=title,
            values=tuple(spaces),
            cb=lambda space: game.add_ocean_tile(player, space),
        )

    return DeferredAction(player_id=player.id, execute=execute, title=title)


# ── Cards ───────────────────────────────────────────────────────────────────


def draw_cards(game: Game, player: PlayerState, count: int = 1) -> DeferredAction:
    def execute() -> None:
        game.draw_cards(player.id, count)

    return DeferredAction(player_id=player.id, execute=execute, title=f"Draw {count} card(s)")


def draw_and_keep(game: Game, player: PlayerState, count: int, keep: int) -> SelectCard | None:
    """Draw *count* cards and ask which *keep* of them go to the hand.

    The rest are discarded.  Returns None when the deck cannot supply more
    than *keep* cards, in which case everything drawn is kept.
    """
    drawn = game.deal_cards(count)
    if len(drawn) <= keep:
        player.cards_in_hand.extend(drawn)
        return None

    def keep_selected(selected: list[str]) -> None:
        for name in drawn:
            if name.value in selected:
                player.cards_in_hand.append(name)
            else:
                game.discard_pile.append(name)

    return SelectCard(
        title=f"Select {keep} card(s) to keep",
        cards=tuple(n.value for n in drawn),
        min_cards_to_select=keep,
        max_cards_to_select=keep,
        cb=keep_selected,
    )
