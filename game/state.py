"""Per-player session state — the substrate every card effect mutates.

``PlayerState`` is a Pydantic model holding everything about one player that
survives between requests:

- Resources and their per-generation production (flat fields)
- Terraform rating and the per-generation flags around it
- Card sequences (hand, preludes, played, drafted, dealt, removed)
- The corporation card (rehydrated from the card registry)
- A victory point breakdown and a turn timer

``serialize()`` produces the persisted record.  Its key set is exactly the
model's field set; ``deserialize()`` reverses it, optionally upgrading older
records first (see ``game.migrations``).
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from cards.models import CardBase, CardName, CardType, CorporationCard, Tag
from game.config import STARTING_TERRAFORM_RATING
from game.errors import DeserializationToleranceError

logger = logging.getLogger(__name__)


# ── Enums ───────────────────────────────────────────────────────────────────


class Resource(str, Enum):
    MEGACREDITS = "megacredits"
    STEEL = "steel"
    TITANIUM = "titanium"
    PLANTS = "plants"
    ENERGY = "energy"
    HEAT = "heat"


class Color(str, Enum):
    BLUE = "blue"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLACK = "black"
    PURPLE = "purple"


# (amount field, production field) per resource
_RESOURCE_FIELDS: dict[Resource, tuple[str, str]] = {
    Resource.MEGACREDITS: ("mega_credits", "mega_credit_production"),
    Resource.STEEL: ("steel", "steel_production"),
    Resource.TITANIUM: ("titanium", "titanium_production"),
    Resource.PLANTS: ("plants", "plant_production"),
    Resource.ENERGY: ("energy", "energy_production"),
    Resource.HEAT: ("heat", "heat_production"),
}

MIN_MEGACREDIT_PRODUCTION = -5


# ── Timer ───────────────────────────────────────────────────────────────────


def _now_ms() -> int:
    return int(time.time() * 1000)


class Timer(BaseModel):
    """Wall-clock time a player has spent on their turns, in milliseconds."""

    sum_elapsed: int = 0
    started_at: int = 0
    running: bool = False
    after_first_action: bool = False
    last_stopped_at: int = 0

    @classmethod
    def new_instance(cls) -> Timer:
        return cls()

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self.started_at = _now_ms()

    def stop(self) -> None:
        """Stop the clock.  Time before the player's first action is free."""
        if not self.running:
            return
        now = _now_ms()
        self.running = False
        self.last_stopped_at = now
        if self.after_first_action:
            self.sum_elapsed += now - self.started_at

    def get_elapsed(self) -> int:
        if self.running and self.after_first_action:
            return self.sum_elapsed + (_now_ms() - self.started_at)
        return self.sum_elapsed


# ── Victory Points ──────────────────────────────────────────────────────────


class VictoryPointsDetail(BaseModel):
    message: str
    victory_points: int


_VP_KEYS = ("terraform_rating", "milestones", "awards", "greenery", "city", "victory_points")
_VP_DETAILS = {
    "victory_points": "details_cards",
    "milestones": "details_milestones",
    "awards": "details_awards",
}


class VictoryPointsBreakdown(BaseModel):
    terraform_rating: int = 0
    milestones: int = 0
    awards: int = 0
    greenery: int = 0
    city: int = 0
    victory_points: int = 0
    total: int = 0
    details_cards: list[VictoryPointsDetail] = Field(default_factory=list)
    details_milestones: list[VictoryPointsDetail] = Field(default_factory=list)
    details_awards: list[VictoryPointsDetail] = Field(default_factory=list)

    def set_victory_points(self, key: str, points: int, message: str | None = None) -> None:
        """Add *points* under *key* (and to ``total``), recording a detail line if given."""
        if key not in _VP_KEYS:
            raise ValueError(f"Unknown victory point category: {key}")
        setattr(self, key, getattr(self, key) + points)
        self.total += points
        if message is not None and key in _VP_DETAILS:
            getattr(self, _VP_DETAILS[key]).append(
                VictoryPointsDetail(message=message, victory_points=points)
            )


# ── Played Card ─────────────────────────────────────────────────────────────


class PlayedCard(BaseModel):
    name: CardName
    resource_count: int = 0

    @property
    def card(self) -> CardBase:
        from cards.registry import get_card

        return get_card(self.name)


# ── Player State ────────────────────────────────────────────────────────────


class PlayerState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Identity
    id: str
    name: str
    color: Color = Color.BLUE
    beginner: bool = False
    handicap: int = 0

    # Corporation
    picked_corporation_card: CorporationCard | None = None
    corporation_card: CorporationCard | None = None
    corporation_initial_action_done: bool = False

    # Terraform rating
    terraform_rating: int = STARTING_TERRAFORM_RATING
    has_increased_terraform_rating_this_generation: bool = False
    terraform_rating_at_generation_start: int = STARTING_TERRAFORM_RATING

    # Resources and production
    mega_credits: int = 0
    mega_credit_production: int = 0
    steel: int = 0
    steel_production: int = 0
    titanium: int = 0
    titanium_production: int = 0
    plants: int = 0
    plant_production: int = 0
    energy: int = 0
    energy_production: int = 0
    heat: int = 0
    heat_production: int = 0

    # Payment rules
    titanium_value: int = 3
    steel_value: int = 2
    can_use_heat_as_mega_credits: bool = False
    card_cost: int = 3
    card_discount: int = 0
    power_plant_cost: int = 11
    plants_needed_for_greenery: int = 8
    ocean_bonus: int = 2

    # Turn bookkeeping
    actions_taken_this_round: int = 0
    actions_this_generation: list[CardName] = Field(default_factory=list)
    needs_to_draft: bool = False
    used_undo: bool = False

    # Cards
    dealt_corporation_cards: list[CardName] = Field(default_factory=list)
    dealt_project_cards: list[CardName] = Field(default_factory=list)
    dealt_prelude_cards: list[CardName] = Field(default_factory=list)
    cards_in_hand: list[CardName] = Field(default_factory=list)
    prelude_cards_in_hand: list[CardName] = Field(default_factory=list)
    played_cards: list[PlayedCard] = Field(default_factory=list)
    drafted_cards: list[CardName] = Field(default_factory=list)
    removed_from_play_cards: list[CardName] = Field(default_factory=list)

    # Colonies and turmoil counters
    fleet_size: int = 1
    trades_this_turn: int = 0
    colony_trade_offset: int = 0
    colony_trade_discount: int = 0
    colony_victory_points: int = 0
    turmoil_scientists_action_used: bool = False
    removing_players: list[str] = Field(default_factory=list)

    # Sub-records
    victory_points_breakdown: VictoryPointsBreakdown = Field(default_factory=VictoryPointsBreakdown)
    timer: Timer = Field(default_factory=Timer.new_instance)

    # ── Corporation (de)serialisation ───────────────────────────────────

    @field_validator("picked_corporation_card", "corporation_card", mode="before")
    @classmethod
    def _rehydrate_corporation(cls, value: Any) -> Any:
        if value is None or isinstance(value, CardBase):
            return value
        from cards.registry import get_card

        try:
            card = get_card(CardName(value))
        except ValueError as exc:
            raise ValueError(f"Unknown corporation card: {value!r}") from exc
        if card.card_type != CardType.CORPORATION:
            raise ValueError(f"{value!r} is not a corporation card")
        return card

    @field_serializer("picked_corporation_card", "corporation_card")
    def _serialize_corporation(self, card: CorporationCard | None) -> str | None:
        return card.name.value if card is not None else None

    def serialize(self) -> dict[str, Any]:
        """Return the persisted record (JSON-ready, one key per field)."""
        return self.model_dump(mode="json")

    @classmethod
    def deserialize(cls, record: dict[str, Any], legacy: bool = True) -> PlayerState:
        """Rebuild a player from a persisted record.

        ``legacy=True`` runs the record through ``game.migrations`` first so
        older formats load.  ``legacy=False`` is strict: the record must carry
        exactly the current field set and is validated as-is.
        """
        if legacy:
            from game.migrations import upgrade_player_record

            record = upgrade_player_record(record)
        else:
            missing = set(cls.model_fields) - set(record)
            unknown = set(record) - set(cls.model_fields)
            if missing or unknown:
                raise DeserializationToleranceError(
                    f"Player record does not match the current format "
                    f"(missing: {sorted(missing)}, unknown: {sorted(unknown)})"
                )
        try:
            return cls.model_validate(record)
        except ValidationError as exc:
            raise DeserializationToleranceError(
                f"Cannot restore player {record.get('id')!r}: {exc}"
            ) from exc

    # ── Resources ───────────────────────────────────────────────────────

    def get_resource(self, resource: Resource) -> int:
        return getattr(self, _RESOURCE_FIELDS[resource][0])

    def add_resource(self, resource: Resource, amount: int, from_player: PlayerState | None = None) -> None:
        field_name = _RESOURCE_FIELDS[resource][0]
        current = getattr(self, field_name)
        if current + amount < 0:
            raise ValueError(
                f"Player {self.id} cannot lose {-amount} {resource.value}, only has {current}"
            )
        setattr(self, field_name, current + amount)
        if from_player is not None and from_player.id != self.id:
            logger.debug("%s changed %s's %s by %d", from_player.id, self.id, resource.value, amount)

    def get_production(self, resource: Resource) -> int:
        return getattr(self, _RESOURCE_FIELDS[resource][1])

    def add_production(self, resource: Resource, amount: int, from_player: PlayerState | None = None) -> None:
        """Change production, flooring M€ at -5 and everything else at 0."""
        field_name = _RESOURCE_FIELDS[resource][1]
        floor = MIN_MEGACREDIT_PRODUCTION if resource == Resource.MEGACREDITS else 0
        setattr(self, field_name, max(floor, getattr(self, field_name) + amount))
        if from_player is not None and from_player.id != self.id:
            logger.debug(
                "%s changed %s's %s production by %d", from_player.id, self.id, resource.value, amount
            )

    def can_afford(self, cost: int, use_steel: bool = False, use_titanium: bool = False) -> bool:
        budget = self.mega_credits
        if self.can_use_heat_as_mega_credits:
            budget += self.heat
        if use_steel:
            budget += self.steel * self.steel_value
        if use_titanium:
            budget += self.titanium * self.titanium_value
        return budget >= cost

    # ── Cards ───────────────────────────────────────────────────────────

    def get_played_card(self, name: CardName) -> PlayedCard | None:
        for played in self.played_cards:
            if played.name == name:
                return played
        return None

    def has_played(self, name: CardName) -> bool:
        return self.get_played_card(name) is not None

    def get_tag_count(self, tag: Tag) -> int:
        """Tags on played non-event cards plus the corporation card."""
        count = 0
        for played in self.played_cards:
            card = played.card
            if card.card_type != CardType.EVENT:
                count += card.tags.count(tag)
        if self.corporation_card is not None:
            count += self.corporation_card.tags.count(tag)
        return count

    def active_cards(self) -> list[CardBase]:
        """Cards whose hooks are live: the corporation then played non-events."""
        cards: list[CardBase] = []
        if self.corporation_card is not None:
            cards.append(self.corporation_card)
        cards.extend(p.card for p in self.played_cards if p.card.card_type != CardType.EVENT)
        return cards

    # ── Generation lifecycle ────────────────────────────────────────────

    def increase_terraform_rating(self, steps: int = 1) -> None:
        self.terraform_rating += steps
        self.has_increased_terraform_rating_this_generation = True

    def run_production_phase(self) -> None:
        """Convert energy to heat, then collect production and TR income."""
        self.heat += self.energy
        self.energy = 0
        self.mega_credits = max(0, self.mega_credits + self.mega_credit_production + self.terraform_rating)
        self.steel += self.steel_production
        self.titanium += self.titanium_production
        self.plants += self.plant_production
        self.energy += self.energy_production
        self.heat += self.heat_production

    def start_generation(self) -> None:
        self.actions_this_generation = []
        self.actions_taken_this_round = 0
        self.has_increased_terraform_rating_this_generation = False
        self.terraform_rating_at_generation_start = self.terraform_rating
        self.turmoil_scientists_action_used = False
        self.trades_this_turn = 0
