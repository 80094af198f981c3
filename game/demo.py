"""Scripted two-player session for the ``--demo`` CLI mode.

``build_demo_game`` sets up a deterministic game (fixed deck, fixed hands)
and ``DEMO_SCRIPT`` plays it through every kind of input: an ocean
``SelectValue`` from a deferred action, a ``SelectAmount``, a contested
``SelectPlayer``, a ``SelectCard`` draw, an auto-resolved target, card
actions and an ``OrOptions`` corporation action.
"""

from __future__ import annotations

import logging
from typing import Iterator, NamedTuple

from cards.models import CardName
from game.engine import Game
from game.state import Color, PlayerState

logger = logging.getLogger(__name__)

BLUE = "blue"
RED = "red"

_DEMO_DECK = [
    CardName.FISH,
    CardName.MEAT_INDUSTRY,
    CardName.GENE_REPAIR,
    CardName.FOOD_FACTORY,
    CardName.LAGRANGE_OBSERVATORY,
    CardName.IO_MINING_INDUSTRIES,
]


class DemoStep(NamedTuple):
    kind: str  # corporation | play | action | answer | generation
    player_id: str = ""
    card: CardName | None = None
    payload: list[list[str]] | None = None
    note: str = ""


DEMO_SCRIPT: list[DemoStep] = [
    DemoStep("corporation", BLUE, CardName.SATURN_SYSTEMS),
    DemoStep("corporation", RED, CardName.FACTORUM),
    DemoStep("play", BLUE, CardName.AQUIFER_TURBINES, note="ocean placement and payment are deferred"),
    DemoStep("answer", BLUE, payload=[["ocean_05"]], note="place the ocean; the 3 MC payment then drains"),
    DemoStep("play", RED, CardName.LUNAR_BEAM),
    DemoStep("play", RED, CardName.INSULATION),
    DemoStep("answer", RED, payload=[["2"]], note="move all heat production to MC"),
    DemoStep("play", RED, CardName.POWER_SUPPLY_CONSORTIUM),
    DemoStep("answer", RED, payload=[[BLUE]], note="steal energy production from blue"),
    DemoStep("play", BLUE, CardName.BUSINESS_CONTACTS),
    DemoStep("answer", BLUE, payload=[["fish", "meat_industry"]], note="keep two of four"),
    DemoStep("play", BLUE, CardName.MEAT_INDUSTRY),
    DemoStep("play", BLUE, CardName.FISH, note="only red has plant production, so the target is automatic"),
    DemoStep("action", BLUE, CardName.FISH, note="Meat Industry pays 2 MC for the animal"),
    DemoStep("action", RED, CardName.FACTORUM),
    DemoStep("answer", RED, payload=[["1"]], note="pay 3 MC and draw"),
    DemoStep("generation"),
]


def build_demo_game() -> Game:
    blue = PlayerState(id=BLUE, name="Ada", color=Color.BLUE)
    blue.prelude_cards_in_hand = [CardName.AQUIFER_TURBINES]
    blue.cards_in_hand = [CardName.BUSINESS_CONTACTS]

    red = PlayerState(id=RED, name="Bo", color=Color.RED, plant_production=1)
    red.cards_in_hand = [CardName.LUNAR_BEAM, CardName.INSULATION, CardName.POWER_SUPPLY_CONSORTIUM]

    return Game("demo", [blue, red], project_deck=list(_DEMO_DECK))


def apply_step(game: Game, step: DemoStep) -> None:
    if step.kind == "corporation":
        game.play_corporation_card(step.player_id, step.card)
    elif step.kind == "play":
        game.play_card(step.player_id, step.card)
    elif step.kind == "action":
        game.take_card_action(step.player_id, step.card)
    elif step.kind == "answer":
        game.process(step.player_id, step.payload)
        return
    elif step.kind == "generation":
        game.next_generation()
        return
    else:
        raise ValueError(f"Unknown demo step: {step.kind!r}")
    if not game.is_anyone_waiting():
        game.drain_deferred_actions()


def run_demo(game: Game | None = None) -> Iterator[tuple[DemoStep, Game]]:
    """Apply ``DEMO_SCRIPT`` step by step, yielding the game after each one."""
    game = game or build_demo_game()
    for step in DEMO_SCRIPT:
        logger.debug("Demo step: %s", step)
        apply_step(game, step)
        yield step, game
