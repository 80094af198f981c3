"""Tests for the card catalogue, game.actions and the card-facing Game methods."""

from __future__ import annotations

import pytest

from cards.models import CardName, CardType
from cards.project import LunarBeam
from cards.registry import ALL_CARDS, card_name_from_title, get_card
from game.actions import draw_cards, select_how_to_pay, select_player
from game.engine import Game
from game.errors import MalformedPayloadError
from game.state import PlayedCard, PlayerState, Resource
from inputs.models import AndOptions, OrOptions, SelectAmount, SelectCard, SelectPlayer, SelectValue


def _make_game(*ids: str, deck: list[CardName] | None = None) -> Game:
    players = [PlayerState(id=pid, name=pid.title()) for pid in (ids or ("blue",))]
    return Game("cards", players, project_deck=deck or [])


def _give(player: PlayerState, name: CardName, mega_credits: int | None = None) -> None:
    if get_card(name).card_type == CardType.PRELUDE:
        player.prelude_cards_in_hand.append(name)
    else:
        player.cards_in_hand.append(name)
    if mega_credits is not None:
        player.mega_credits = mega_credits


# ── Registry ──────────────────────────────────────────────────────────────────


class TestRegistry:
    def test_every_card_name_registered(self) -> None:
        assert set(ALL_CARDS) == set(CardName)

    def test_lookup_by_id_and_title(self) -> None:
        assert get_card("fish").title == "Fish"
        assert card_name_from_title("Food Factory") == CardName.FOOD_FACTORY
        assert card_name_from_title("Nope") is None

    def test_unknown_id(self) -> None:
        with pytest.raises(ValueError):
            get_card("tharsis_republic")


# ── Actions ───────────────────────────────────────────────────────────────────


class TestSelectPlayer:
    def test_single_candidate_auto_resolves_when_asked(self) -> None:
        game = _make_game("blue", "red")
        picked: list[str] = []
        result = select_player([game.get_player("red")], "t", lambda p: picked.append(p.id), auto_resolve_single=True)
        assert result is None
        assert picked == ["red"]

    def test_single_candidate_still_asks_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MARS_AUTO_RESOLVE_SINGLE_PLAYER", raising=False)
        game = _make_game("blue", "red")
        result = select_player([game.get_player("red")], "t", lambda p: None)
        assert isinstance(result, SelectPlayer)
        assert result.players == ("red",)

    def test_environment_sets_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MARS_AUTO_RESOLVE_SINGLE_PLAYER", "true")
        game = _make_game("blue", "red")
        assert select_player([game.get_player("red")], "t", lambda p: None) is None


class TestSelectHowToPay:
    def test_pays_with_mega_credits_when_no_choice(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.mega_credits = 5
        paid: list[str] = []
        game.defer(select_how_to_pay(game, player, 3, after_paying=lambda: paid.append("ok")))
        game.drain_deferred_actions()
        assert player.mega_credits == 2
        assert paid == ["ok"]

    def test_asks_when_heat_can_be_used(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.mega_credits = 2
        player.heat = 4
        player.can_use_heat_as_mega_credits = True
        game.defer(select_how_to_pay(game, player, 3))
        game.drain_deferred_actions()

        node = game.get_waiting_for("blue")
        assert isinstance(node, AndOptions)
        assert all(isinstance(o, SelectAmount) for o in node.options)

        with pytest.raises(MalformedPayloadError, match="Haven't spent enough"):
            game.process("blue", [["1"], ["1"]])
        assert game.get_waiting_for("blue") is node
        assert (player.mega_credits, player.heat) == (2, 4)

        game.process("blue", [["2"], ["1"]])
        assert (player.mega_credits, player.heat) == (0, 3)
        assert game.get_waiting_for("blue") is None


# ── Cards ─────────────────────────────────────────────────────────────────────


class TestAquiferTurbines:
    def test_can_play(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.mega_credits = 3
        assert get_card(CardName.AQUIFER_TURBINES).can_resolve(player, game)

    def test_should_play(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        _give(player, CardName.AQUIFER_TURBINES, mega_credits=3)
        game.play_card("blue", CardName.AQUIFER_TURBINES)

        assert game.deferred.titles[0] == "Select space for ocean tile"
        game.deferred.shift()  # ocean placement
        game.deferred.run_next()  # payment

        assert player.get_production(Resource.ENERGY) == 2
        assert player.mega_credits == 0

    def test_ocean_placement_raises_terraform_rating(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        _give(player, CardName.AQUIFER_TURBINES, mega_credits=3)
        game.play_card("blue", CardName.AQUIFER_TURBINES)
        game.drain_deferred_actions()

        node = game.get_waiting_for("blue")
        assert isinstance(node, SelectValue)
        game.process("blue", [[node.values[0]]])
        assert player.terraform_rating == 21
        assert node.values[0] in game.oceans
        assert player.mega_credits == 0


class TestInsulation:
    def test_moves_heat_to_mega_credit_production(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.heat_production = 3
        _give(player, CardName.INSULATION, mega_credits=2)
        node = game.play_card("blue", CardName.INSULATION)
        assert isinstance(node, SelectAmount)
        assert node.max_amount == 3
        game.process("blue", [["2"]])
        assert player.heat_production == 1
        assert player.mega_credit_production == 2

    def test_cannot_play_without_heat_production(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        _give(player, CardName.INSULATION, mega_credits=2)
        with pytest.raises(ValueError):
            game.play_card("blue", CardName.INSULATION)
        assert player.cards_in_hand == [CardName.INSULATION]
        assert player.mega_credits == 2


class TestPowerSupplyConsortium:
    def test_requires_two_energy_tags(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        card = get_card(CardName.POWER_SUPPLY_CONSORTIUM)
        assert not card.can_resolve(player, game)
        player.played_cards = [PlayedCard(name=CardName.LUNAR_BEAM), PlayedCard(name=CardName.AQUIFER_TURBINES)]
        assert card.can_resolve(player, game)

    def test_no_targets_just_gains(self) -> None:
        game = _make_game("blue", "red")
        player = game.get_player("blue")
        assert get_card(CardName.POWER_SUPPLY_CONSORTIUM).resolve(player, game) is None
        assert player.energy_production == 1

    def test_single_target_is_still_asked(self) -> None:
        game = _make_game("blue", "red")
        game.get_player("red").energy_production = 1
        result = get_card(CardName.POWER_SUPPLY_CONSORTIUM).resolve(game.get_player("blue"), game)
        assert isinstance(result, SelectPlayer)


class TestFish:
    def test_lone_target_is_picked_automatically(self) -> None:
        game = _make_game("blue", "red")
        blue, red = game.players
        red.plant_production = 2
        _give(blue, CardName.FISH, mega_credits=9)
        assert game.play_card("blue", CardName.FISH) is None
        assert red.plant_production == 1

    def test_several_targets_are_asked(self) -> None:
        game = _make_game("blue", "red")
        blue, red = game.players
        blue.plant_production = 1
        red.plant_production = 1
        _give(blue, CardName.FISH, mega_credits=9)
        node = game.play_card("blue", CardName.FISH)
        assert isinstance(node, SelectPlayer)
        game.process("blue", [["red"]])
        assert red.plant_production == 0

    def test_action_adds_animal_and_meat_industry_pays(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.played_cards = [PlayedCard(name=CardName.FISH), PlayedCard(name=CardName.MEAT_INDUSTRY)]

        game.take_card_action("blue", CardName.FISH)
        assert player.get_played_card(CardName.FISH).resource_count == 1
        assert player.mega_credits == 2
        assert get_card(CardName.FISH).get_victory_points(player, game) == 1

    def test_action_once_per_generation(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.played_cards = [PlayedCard(name=CardName.FISH)]
        game.take_card_action("blue", CardName.FISH)
        with pytest.raises(ValueError):
            game.take_card_action("blue", CardName.FISH)
        game.next_generation()
        game.take_card_action("blue", CardName.FISH)
        assert player.get_played_card(CardName.FISH).resource_count == 2


class TestDrawCards:
    def test_deferred_draw_reaches_the_hand(self) -> None:
        game = _make_game("blue", "red", deck=[CardName.FISH, CardName.GENE_REPAIR])
        red = game.get_player("red")
        game.defer(draw_cards(game, red, 2))
        game.drain_deferred_actions()
        assert red.cards_in_hand == [CardName.FISH, CardName.GENE_REPAIR]
        assert game.deferred.is_empty()


class TestPlayCardFailure:
    def test_failed_resolve_undoes_the_play(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def explode(self, player, game):
            raise RuntimeError("boom")

        monkeypatch.setattr(LunarBeam, "resolve", explode)
        game = _make_game()
        player = game.get_player("blue")
        _give(player, CardName.LUNAR_BEAM, mega_credits=20)

        with pytest.raises(RuntimeError, match="boom"):
            game.play_card("blue", CardName.LUNAR_BEAM)
        assert player.cards_in_hand == [CardName.LUNAR_BEAM]
        assert player.mega_credits == 20
        assert player.played_cards == []
        assert player.timer.after_first_action is False


class TestSimpleProjects:
    def test_lunar_beam(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        _give(player, CardName.LUNAR_BEAM, mega_credits=13)
        game.play_card("blue", CardName.LUNAR_BEAM)
        assert (player.mega_credit_production, player.heat_production, player.energy_production) == (-2, 2, 2)
        assert player.mega_credits == 0

    def test_food_factory(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.plant_production = 1
        _give(player, CardName.FOOD_FACTORY, mega_credits=12)
        game.play_card("blue", CardName.FOOD_FACTORY)
        assert (player.plant_production, player.mega_credit_production) == (0, 4)

    def test_gene_repair_needs_three_science_tags(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        card = get_card(CardName.GENE_REPAIR)
        player.played_cards = [PlayedCard(name=CardName.LAGRANGE_OBSERVATORY)] * 2
        assert not card.can_resolve(player, game)
        player.played_cards.append(PlayedCard(name=CardName.GENE_REPAIR))
        assert card.can_resolve(player, game)

    def test_lagrange_observatory(self) -> None:
        game = _make_game("blue", "red", deck=[CardName.FISH, CardName.LUNAR_BEAM])
        player = game.get_player("blue")
        _give(player, CardName.LAGRANGE_OBSERVATORY, mega_credits=9)
        assert game.play_card("blue", CardName.LAGRANGE_OBSERVATORY) is None
        assert player.cards_in_hand == [CardName.FISH]
        assert game.victory_points("blue") == 21
        assert player.victory_points_breakdown.victory_points == 1

    def test_io_mining_industries_scores_jovian_tags(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        player.corporation_card = get_card(CardName.SATURN_SYSTEMS)
        _give(player, CardName.IO_MINING_INDUSTRIES, mega_credits=41)
        game.play_card("blue", CardName.IO_MINING_INDUSTRIES)
        assert player.titanium_production == 2
        assert get_card(CardName.IO_MINING_INDUSTRIES).get_victory_points(player, game) == 2


class TestBusinessContacts:
    def test_keep_two_of_four(self) -> None:
        deck = [CardName.FISH, CardName.LUNAR_BEAM, CardName.INSULATION, CardName.GENE_REPAIR, CardName.FOOD_FACTORY]
        game = _make_game(deck=deck)
        player = game.get_player("blue")
        _give(player, CardName.BUSINESS_CONTACTS, mega_credits=7)
        node = game.play_card("blue", CardName.BUSINESS_CONTACTS)
        assert isinstance(node, SelectCard)
        assert node.cards == ("fish", "lunar_beam", "insulation", "gene_repair")

        with pytest.raises(MalformedPayloadError, match="Not enough cards selected"):
            game.process("blue", [["fish"]])
        game.process("blue", [["insulation", "fish"]])
        assert player.cards_in_hand == [CardName.FISH, CardName.INSULATION]
        assert game.discard_pile == [CardName.LUNAR_BEAM, CardName.GENE_REPAIR]
        assert game.project_deck == [CardName.FOOD_FACTORY]

    def test_short_deck_keeps_everything(self) -> None:
        game = _make_game(deck=[CardName.FISH])
        player = game.get_player("blue")
        _give(player, CardName.BUSINESS_CONTACTS, mega_credits=7)
        assert game.play_card("blue", CardName.BUSINESS_CONTACTS) is None
        assert player.cards_in_hand == [CardName.FISH]


class TestCorporations:
    def test_saturn_systems_counts_every_jovian_tag(self) -> None:
        game = _make_game("blue", "red")
        blue, red = game.players
        game.play_corporation_card("blue", CardName.SATURN_SYSTEMS)
        assert blue.mega_credits == 42
        assert blue.titanium_production == 1

        _give(red, CardName.IO_MINING_INDUSTRIES, mega_credits=41)
        game.play_card("red", CardName.IO_MINING_INDUSTRIES)
        assert blue.mega_credit_production == 1
        assert red.mega_credit_production == 2

    def test_only_one_corporation(self) -> None:
        game = _make_game()
        game.play_corporation_card("blue", CardName.FACTORUM)
        with pytest.raises(ValueError):
            game.play_corporation_card("blue", CardName.SATURN_SYSTEMS)

    def test_project_card_is_not_a_corporation(self) -> None:
        game = _make_game()
        with pytest.raises(ValueError):
            game.play_corporation_card("blue", CardName.FISH)

    def test_factorum_energy_option(self) -> None:
        game = _make_game()
        player = game.get_player("blue")
        game.play_corporation_card("blue", CardName.FACTORUM)
        node = game.take_card_action("blue", CardName.FACTORUM)
        assert isinstance(node, OrOptions)
        game.process("blue", [["0"]])
        assert player.energy_production == 1
        assert player.steel_production == 1

    def test_factorum_buy_card_option(self) -> None:
        game = _make_game(deck=[CardName.GENE_REPAIR])
        player = game.get_player("blue")
        game.play_corporation_card("blue", CardName.FACTORUM)
        game.take_card_action("blue", CardName.FACTORUM)
        game.process("blue", [["1"]])
        assert player.mega_credits == 34
        assert player.cards_in_hand == [CardName.GENE_REPAIR]
        assert game.deferred.is_empty()
