"""Game session — owns the players and drives input resolution.

``Game`` is the central coordinator for one session.  It owns:
- ``players``     — the ``PlayerState`` of every participant, in turn order
- ``registries``  — one ``WaitingRegistry`` per player (the pending input)
- ``deferred``    — the ``DeferredActionQueue`` shared by all players
- the project deck, discard pile and free ocean spaces
- the generation counter

Clients interact through ``process(player_id, payload)``; card effects reach
the session through the collaborator methods (``defer``, ``draw_cards``,
``add_resource_to_card``, ...).  The engine is free of I/O so tests drive it
directly.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Sequence

from cards.models import CardBase, CardName, CardType, CorporationCard
from cards.registry import get_card, project_card_names
from game.deferred import DeferredAction, DeferredActionQueue
from game.errors import NoPendingDecisionError
from game.state import PlayedCard, PlayerState, Resource, VictoryPointsBreakdown
from game.waiting import WaitingRegistry
from inputs.dispatch import run_callbacks
from inputs.models import InputBase
from inputs.parser import Payload, parse_payload

logger = logging.getLogger(__name__)

# ── Constants ───────────────────────────────────────────────────────────────

DEFAULT_OCEAN_SPACES: tuple[str, ...] = tuple(f"ocean_{i:02d}" for i in range(1, 10))


class Game:
    """One play session.

    The driver never touches the generation counter or turn order;
    ``next_generation`` is the only method that advances time.
    """

    def __init__(
        self,
        game_id: str,
        players: Sequence[PlayerState],
        project_deck: Sequence[CardName] | None = None,
        ocean_spaces: Sequence[str] | None = None,
        seed: int | None = None,
    ) -> None:
        if not players:
            raise ValueError("A game needs at least one player")
        ids = [p.id for p in players]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate player ids: {ids}")

        self.game_id = game_id
        self.players: list[PlayerState] = list(players)
        self.registries: dict[str, WaitingRegistry] = {pid: WaitingRegistry(pid) for pid in ids}
        self.deferred = DeferredActionQueue(self.registries)
        self.generation = 1
        self._rng = random.Random(seed)

        if project_deck is None:
            deck = project_card_names()
            self._rng.shuffle(deck)
        else:
            deck = list(project_deck)
        self.project_deck: list[CardName] = deck
        self.discard_pile: list[CardName] = []
        self.ocean_spaces: list[str] = list(DEFAULT_OCEAN_SPACES if ocean_spaces is None else ocean_spaces)
        self.oceans: dict[str, str] = {}  # space id -> player id

    # ── Players ─────────────────────────────────────────────────────────

    def get_player(self, player_id: str) -> PlayerState:
        for player in self.players:
            if player.id == player_id:
                return player
        raise KeyError(f"Unknown player: {player_id!r}")

    def get_other_players(self, player_id: str) -> list[PlayerState]:
        return [p for p in self.players if p.id != player_id]

    def _registry(self, player_id: str) -> WaitingRegistry:
        registry = self.registries.get(player_id)
        if registry is None:
            raise KeyError(f"Unknown player: {player_id!r}")
        return registry

    # ── Waiting state ───────────────────────────────────────────────────

    def set_waiting_for(
        self,
        player_id: str,
        node: InputBase,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._registry(player_id).set_waiting_for(node, on_complete)

    def get_waiting_for(self, player_id: str) -> InputBase | None:
        return self._registry(player_id).get_waiting_for()

    def is_anyone_waiting(self) -> bool:
        return any(r.is_waiting for r in self.registries.values())

    def describe_waiting_for(self, player_id: str) -> dict[str, Any] | None:
        """Client-facing description of the pending input (no callbacks)."""
        node = self.get_waiting_for(player_id)
        return node.model_dump(mode="json") if node is not None else None

    # ── Resolution driver ───────────────────────────────────────────────

    def process(self, player_id: str, payload: Payload) -> None:
        """Apply a client answer to the player's pending input.

        The payload is parsed against the whole pending tree before any
        callback runs, so a rejected payload leaves the session untouched.
        A callback that returns a new input chains it into the same slot,
        keeping the same completion hook.  When the chain bottoms out the
        slot is cleared, the hook runs, and deferred actions drain until some
        player is waiting again.
        """
        registry = self._registry(player_id)
        node = registry.get_waiting_for()
        if node is None:
            raise NoPendingDecisionError()

        on_complete = registry.on_complete
        answer = parse_payload(node, payload)
        follow_ups = run_callbacks(node, answer)

        if follow_ups:
            first, *rest = follow_ups
            logger.debug("Player %s: %r chains into %r", player_id, node.title, first.title)
            registry.set_waiting_for(first, on_complete)
            self.deferred.insert_front([_input_action(player_id, extra) for extra in rest])
            return

        registry.clear()
        logger.debug("Player %s: %r resolved", player_id, node.title)
        on_complete()
        self.drain_deferred_actions()

    # ── Deferred actions ────────────────────────────────────────────────

    def defer(self, action: DeferredAction, front: bool | None = None) -> None:
        self.deferred.push(action, front=front)

    def drain_deferred_actions(self) -> None:
        """Run queued actions until the queue is empty or someone must answer."""
        while not self.deferred.is_empty() and not self.is_anyone_waiting():
            self.deferred.run_next()

    # ── Cards ───────────────────────────────────────────────────────────

    def play_card(self, player_id: str, name: CardName) -> InputBase | None:
        """Pay for and resolve a card from the player's hand or preludes.

        Returns the input the card asked for (already installed for the
        player), or None.  Queued effects are left for the caller to drain.
        If ``resolve`` raises, the hand, the M€ and the played list are
        restored before the error propagates.
        """
        player = self.get_player(player_id)
        card = get_card(name)
        if name in player.cards_in_hand:
            hand = player.cards_in_hand
        elif name in player.prelude_cards_in_hand:
            hand = player.prelude_cards_in_hand
        else:
            raise ValueError(f"{player_id} does not hold {card.title}")
        cost = 0 if card.card_type == CardType.PRELUDE else card.cost
        if player.mega_credits < cost:
            raise ValueError(f"{player_id} cannot afford {card.title} ({cost} MC)")
        if not card.can_resolve(player, self):
            raise ValueError(f"{card.title} cannot be played by {player_id}")

        first_action = player.timer.after_first_action
        hand_index = hand.index(name)
        hand.remove(name)
        if cost:
            player.add_resource(Resource.MEGACREDITS, -cost)
        played = PlayedCard(name=name)
        player.played_cards.append(played)
        player.timer.after_first_action = True
        logger.debug("%s plays %s", player_id, card.title)

        try:
            result = card.resolve(player, self)
        except Exception:
            logger.warning("%s failed to resolve for %s; undoing the play", card.title, player_id)
            player.played_cards.remove(played)
            if cost:
                player.add_resource(Resource.MEGACREDITS, cost)
            hand.insert(hand_index, name)
            player.timer.after_first_action = first_action
            raise
        self._fire_card_played(card, player)
        if result is not None:
            self.set_waiting_for(player_id, result)
        return result

    def play_corporation_card(self, player_id: str, name: CardName) -> InputBase | None:
        player = self.get_player(player_id)
        card = get_card(name)
        if not isinstance(card, CorporationCard):
            raise ValueError(f"{card.title} is not a corporation")
        if player.corporation_card is not None:
            raise ValueError(f"{player_id} already runs {player.corporation_card.title}")

        player.picked_corporation_card = card
        player.corporation_card = card
        player.add_resource(Resource.MEGACREDITS, card.starting_mega_credits)
        result = card.resolve(player, self)
        player.corporation_initial_action_done = True
        logger.info("%s starts as %s", player_id, card.title)
        if result is not None:
            self.set_waiting_for(player_id, result)
        return result

    def take_card_action(self, player_id: str, name: CardName) -> InputBase | None:
        """Use a card's once-per-generation action."""
        player = self.get_player(player_id)
        card = get_card(name)
        owns = player.has_played(name) or (
            player.corporation_card is not None and player.corporation_card.name == name
        )
        if not owns or not card.has_action:
            raise ValueError(f"{player_id} has no action on {card.title}")
        if name in player.actions_this_generation:
            raise ValueError(f"{card.title} action already used this generation")
        if not card.can_act(player, self):
            raise ValueError(f"{card.title} action is not available")

        player.actions_this_generation.append(name)
        player.actions_taken_this_round += 1
        result = card.act(player, self)
        if result is not None:
            self.set_waiting_for(player_id, result)
        return result

    def add_resource_to_card(self, player_id: str, name: CardName, count: int = 1) -> None:
        player = self.get_player(player_id)
        played = player.get_played_card(name)
        if played is None:
            raise ValueError(f"{player_id} has not played {name.value}")
        card = get_card(name)
        if card.resource_type is None:
            raise ValueError(f"{card.title} does not hold resources")
        played.resource_count += count
        for active in player.active_cards():
            active.on_resource_added(player, self, card, count)

    def _fire_card_played(self, card: CardBase, played_by: PlayerState) -> None:
        for owner in self.players:
            for active in owner.active_cards():
                if active.name == card.name and owner is played_by:
                    continue
                active.on_card_played(owner, self, card, played_by)

    # ── Deck ────────────────────────────────────────────────────────────

    def deal_cards(self, count: int) -> list[CardName]:
        """Take up to *count* cards off the deck, reshuffling the discards once."""
        if len(self.project_deck) < count and self.discard_pile:
            self._rng.shuffle(self.discard_pile)
            self.project_deck.extend(self.discard_pile)
            self.discard_pile = []
            logger.info("Project deck reshuffled")
        drawn = self.project_deck[:count]
        del self.project_deck[:count]
        if len(drawn) < count:
            logger.warning("Project deck ran out: dealt %d of %d", len(drawn), count)
        return drawn

    def draw_cards(self, player_id: str, count: int = 1) -> list[CardName]:
        player = self.get_player(player_id)
        drawn = self.deal_cards(count)
        player.cards_in_hand.extend(drawn)
        return drawn

    # ── Board ───────────────────────────────────────────────────────────

    def available_ocean_spaces(self) -> list[str]:
        return list(self.ocean_spaces)

    def add_ocean_tile(self, player: PlayerState, space: str) -> None:
        if space not in self.ocean_spaces:
            raise ValueError(f"Space {space!r} is not available for an ocean")
        self.ocean_spaces.remove(space)
        self.oceans[space] = player.id
        player.increase_terraform_rating()
        logger.debug("%s placed an ocean on %s", player.id, space)

    # ── Generations ─────────────────────────────────────────────────────

    def next_generation(self) -> None:
        if self.is_anyone_waiting() or not self.deferred.is_empty():
            raise RuntimeError("Cannot end the generation while decisions are pending")
        for player in self.players:
            player.run_production_phase()
            player.start_generation()
        self.generation += 1
        logger.info("Generation %d begins", self.generation)

    def victory_points(self, player_id: str) -> int:
        """Terraform rating plus card points, recorded on the breakdown."""
        player = self.get_player(player_id)
        breakdown = VictoryPointsBreakdown()
        breakdown.set_victory_points("terraform_rating", player.terraform_rating)
        for card in player.active_cards():
            points = card.get_victory_points(player, self)
            if points:
                breakdown.set_victory_points("victory_points", points, card.title)
        player.victory_points_breakdown = breakdown
        return breakdown.total

    # ── Persistence ─────────────────────────────────────────────────────

    def to_save_dict(self) -> dict[str, Any]:
        """Serialise the session.

        Callbacks cannot be persisted, so this refuses while any player is
        waiting or deferred actions are queued.
        """
        if self.is_anyone_waiting() or not self.deferred.is_empty():
            raise RuntimeError("Cannot save while decisions are pending")
        return {
            "game_id": self.game_id,
            "generation": self.generation,
            "players": [p.serialize() for p in self.players],
            "project_deck": [n.value for n in self.project_deck],
            "discard_pile": [n.value for n in self.discard_pile],
            "ocean_spaces": list(self.ocean_spaces),
            "oceans": dict(self.oceans),
        }

    @classmethod
    def load_from_save(cls, data: dict[str, Any], legacy: bool = True) -> Game:
        """Rebuild a session from ``to_save_dict`` output."""
        players = [PlayerState.deserialize(record, legacy=legacy) for record in data["players"]]
        game = cls(
            data["game_id"],
            players,
            project_deck=[CardName(n) for n in data.get("project_deck", [])],
            ocean_spaces=data.get("ocean_spaces"),
        )
        game.generation = data.get("generation", 1)
        game.discard_pile = [CardName(n) for n in data.get("discard_pile", [])]
        game.oceans = dict(data.get("oceans", {}))
        return game


def _input_action(player_id: str, node: InputBase) -> DeferredAction:
    """Wrap an already-built input so it is asked once the queue reaches it."""
    return DeferredAction(player_id=player_id, execute=lambda: node, title=node.title)
