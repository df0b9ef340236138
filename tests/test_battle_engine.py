"""
Tests for the battle engine.

Covers setup, action validation and resolution, turn transitions,
victory conditions and state serialization.
"""
import pytest

from siegefront.core.actions import (
    AttackCard,
    AttackCastle,
    DeployCard,
    EndTurn,
    Surrender,
    UseAbility,
)
from siegefront.core.battle_engine import (
    calculate_card_damage,
    check_victory_conditions,
    end_turn,
    execute_action,
    get_effective_stats,
    initialize_battle,
    validate_action,
)
from siegefront.core.dice import RandomSource
from siegefront.core.errors import (
    AbilityOnCooldownError,
    BattleOverError,
    DuplicateCardError,
    InvalidPlayerCountError,
    InvalidPositionError,
    NotYourTurnError,
    OutOfRangeError,
    ResourceExhaustedError,
    TargetInvalidError,
)
from siegefront.core.models import (
    AbilityEffectKind,
    BattlePhase,
    BattleState,
    CombatType,
    Player,
    Position,
    Stat,
    StatusEffect,
    StatusEffectType,
    VictoryCondition,
    WeatherEffect,
    WeatherType,
)

from conftest import active, make_card, make_deck, passive, place_card


def total_cards(state: BattleState, player_id: str) -> int:
    player = state.players[player_id]
    return (
        len(player.hand) + len(player.deck) + len(player.discard)
        + len(state.cards_of(player_id))
    )


@pytest.mark.combat
class TestInitializeBattle:
    """Tests for battle setup."""

    def test_deals_starting_hand(self, battle):
        """A 15-card deck leaves 5 cards in hand and 10 in the deck."""
        for player in battle.players.values():
            assert len(player.hand) == 5
            assert len(player.deck) == 10

    def test_initial_turn_state(self, battle):
        """First-seated player acts on turn 1 with full mana."""
        assert battle.current_turn == 1
        assert battle.active_player_id == "p1"
        assert battle.phase == BattlePhase.IN_PROGRESS
        assert battle.winner is None
        assert all(p.mana == p.max_mana == 3 for p in battle.players.values())

    def test_logs_battle_start(self, battle):
        """Setup appends a single system log entry."""
        assert len(battle.battle_log) == 1
        entry = battle.battle_log[0]
        assert entry.action == "BATTLE_START"
        assert entry.player_id == "system"
        assert "Aria vs Borin" in entry.result

    def test_inputs_are_not_mutated(self, player_a, player_b, config):
        """The caller's players keep their decks."""
        initialize_battle(player_a, player_b, config, RandomSource(1))
        assert len(player_a.deck) == 15
        assert player_a.hand == []

    def test_same_player_ids_rejected(self, player_a, config):
        """Two seats with one id is not a valid battle."""
        twin = Player(id="p1", name="Twin", deck=make_deck("t"))
        with pytest.raises(InvalidPlayerCountError):
            initialize_battle(player_a, twin, config)

    def test_duplicate_card_ids_rejected(self, player_a, config):
        """Card ids must be unique across both players."""
        mirror = Player(id="p2", name="Mirror", deck=make_deck("a"))
        with pytest.raises(DuplicateCardError) as exc_info:
            initialize_battle(player_a, mirror, config)
        assert "a-0" in exc_info.value.details["duplicate_ids"]

    def test_duplicate_copies_in_one_deck_rejected(self, player_b, config):
        copies = Player(id="p1", name="Aria", deck=[make_card("knight") for _ in range(3)])
        with pytest.raises(DuplicateCardError):
            initialize_battle(copies, player_b, config)

    def test_missing_player_rejected(self, player_a, config):
        with pytest.raises(InvalidPlayerCountError):
            initialize_battle(player_a, None, config)

    def test_short_deck_deals_what_it_has(self, config):
        """A deck smaller than the hand size is dealt completely."""
        small = Player(id="p1", name="Aria", deck=make_deck("a", size=3))
        other = Player(id="p2", name="Borin", deck=make_deck("b"))
        state = initialize_battle(small, other, config, RandomSource(5))
        assert len(state.players["p1"].hand) == 3
        assert state.players["p1"].deck == []

    def test_same_seed_same_battle(self, player_a, player_b, config):
        """Identical inputs and seeds produce identical states."""
        first = initialize_battle(player_a, player_b, config, RandomSource(7)).to_dict()
        second = initialize_battle(player_a, player_b, config, RandomSource(7)).to_dict()
        first.pop("id")
        second.pop("id")
        assert first == second


@pytest.mark.combat
class TestDeployCard:
    """Tests for deploying cards from hand."""

    def test_deploy_moves_card_to_battlefield(self, battle):
        """Deploying pays mana and removes the card from hand."""
        card = battle.players["p1"].hand[0]
        result = execute_action(battle, DeployCard("p1", card.id, Position(1, 1)))

        assert result.success
        new_state = result.state
        placed = new_state.card_at(Position(1, 1))
        assert placed.id == card.id
        assert placed.owner_id == "p1"
        assert new_state.players["p1"].mana == 2
        assert len(new_state.players["p1"].hand) == 4
        assert len(new_state.battle_log) == len(battle.battle_log) + 1

    def test_deploy_does_not_touch_input_state(self, battle):
        card = battle.players["p1"].hand[0]
        execute_action(battle, DeployCard("p1", card.id, Position(1, 1)))
        assert battle.card_at(Position(1, 1)) is None
        assert len(battle.players["p1"].hand) == 5

    def test_deploy_removes_only_the_played_copy(self, empty_board_state):
        """A hand holding two cards with one id keeps the other copy."""
        player = empty_board_state.players["p1"]
        player.hand.extend([make_card("knight"), make_card("knight")])

        result = execute_action(empty_board_state, DeployCard("p1", "knight", Position(0, 0)))

        assert result.success
        assert [c.id for c in result.state.players["p1"].hand] == ["knight"]
        assert total_cards(result.state, "p1") == 2

    def test_lp_bonus_scales_stats(self, empty_board_state):
        """lp_bonus multiplies deployed stats, floored."""
        player = empty_board_state.players["p1"]
        player.lp_bonus = 0.25
        player.hand.append(make_card("hero", attack=10, defense=5, hp=21))

        result = execute_action(empty_board_state, DeployCard("p1", "hero", Position(0, 0)))
        placed = result.state.card_at(Position(0, 0))
        assert (placed.attack, placed.defense, placed.hp) == (12, 6, 26)

    def test_card_not_in_hand(self, battle):
        result = execute_action(battle, DeployCard("p1", "missing", Position(1, 1)))
        assert not result.success
        assert isinstance(result.error, TargetInvalidError)

    def test_occupied_cell(self, empty_board_state):
        place_card(empty_board_state, "wall", "p2", 1, 1)
        empty_board_state.players["p1"].hand.append(make_card("knight"))
        result = execute_action(empty_board_state, DeployCard("p1", "knight", Position(1, 1)))
        assert isinstance(result.error, InvalidPositionError)

    def test_blocked_cell(self, empty_board_state):
        empty_board_state.blocked_tiles = {Position(1, 1)}
        empty_board_state.players["p1"].hand.append(make_card("knight"))
        result = execute_action(empty_board_state, DeployCard("p1", "knight", Position(1, 1)))
        assert isinstance(result.error, InvalidPositionError)

    def test_out_of_bounds(self, empty_board_state):
        empty_board_state.players["p1"].hand.append(make_card("knight"))
        result = execute_action(empty_board_state, DeployCard("p1", "knight", Position(3, 0)))
        assert isinstance(result.error, InvalidPositionError)

    def test_not_enough_mana(self, empty_board_state):
        empty_board_state.players["p1"].hand.append(make_card("giant", mana_cost=5))
        result = execute_action(empty_board_state, DeployCard("p1", "giant", Position(0, 0)))
        assert isinstance(result.error, ResourceExhaustedError)
        assert result.error.details["required"] == 5


@pytest.mark.combat
class TestAttacks:
    """Tests for card and castle attacks."""

    def test_castle_attack_deals_full_attack(self, battle):
        """A 10-attack card takes a 50 HP castle to 40."""
        card = battle.players["p1"].hand[0]
        deployed = execute_action(battle, DeployCard("p1", card.id, Position(1, 1))).state

        result = execute_action(deployed, AttackCastle("p1", card.id, "p2"))

        assert result.success
        assert result.damage_dealt == 10
        assert result.state.players["p2"].castle_hp == 40
        assert result.state.last_damaged_player_id == "p2"
        assert result.state.card_at(Position(1, 1)).has_attacked

    def test_card_attack_subtracts_defense(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 0, attack=10)
        place_card(empty_board_state, "orc", "p2", 1, 2, defense=5, hp=20)

        result = execute_action(empty_board_state, AttackCard("p1", "knight", "orc"))

        assert result.success
        assert result.damage_dealt == 5
        assert result.state.card_at(Position(1, 2)).hp == 15

    def test_damage_never_negative(self, empty_board_state):
        place_card(empty_board_state, "squire", "p1", 1, 0, attack=2)
        place_card(empty_board_state, "golem", "p2", 1, 2, defense=9)
        attacker = empty_board_state.card_at(Position(1, 0))
        defender = empty_board_state.card_at(Position(1, 2))
        assert calculate_card_damage(attacker, defender, empty_board_state) == 0

    def test_destroyed_card_goes_to_discard(self, empty_board_state):
        """Destroyed cards leave the board and return to full hp in the discard pile."""
        place_card(empty_board_state, "knight", "p1", 1, 0, attack=10)
        victim = place_card(empty_board_state, "orc", "p2", 1, 2, defense=5, hp=20)
        victim.hp = 4

        result = execute_action(empty_board_state, AttackCard("p1", "knight", "orc"))

        assert result.state.card_at(Position(1, 2)) is None
        discard = result.state.players["p2"].discard
        assert [c.id for c in discard] == ["orc"]
        assert discard[0].hp == 20
        assert "destroyed" in result.description

    def test_thorns_reflect_damage(self, empty_board_state):
        """Thorns send 30% of damage taken back, floored."""
        place_card(empty_board_state, "knight", "p1", 1, 0, attack=10, hp=20)
        place_card(empty_board_state, "bramble", "p2", 1, 2, defense=0, hp=30,
                   abilities=[passive("Thorns")])

        result = execute_action(empty_board_state, AttackCard("p1", "knight", "bramble"))

        assert result.state.card_at(Position(1, 2)).hp == 20
        assert result.state.card_at(Position(1, 0)).hp == 17

    def test_melee_range(self, empty_board_state):
        """Melee cards only reach one row away."""
        place_card(empty_board_state, "knight", "p1", 0, 0)
        place_card(empty_board_state, "archer", "p2", 2, 2)
        result = execute_action(empty_board_state, AttackCard("p1", "knight", "archer"))
        assert isinstance(result.error, OutOfRangeError)

    def test_ranged_reaches_any_row(self, empty_board_state):
        place_card(empty_board_state, "archer", "p1", 0, 0, combat_type=CombatType.RANGED)
        place_card(empty_board_state, "orc", "p2", 2, 2)
        result = execute_action(empty_board_state, AttackCard("p1", "archer", "orc"))
        assert result.success

    def test_cannot_attack_twice(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 1)
        once = execute_action(empty_board_state, AttackCastle("p1", "knight", "p2")).state
        twice = execute_action(once, AttackCastle("p1", "knight", "p2"))
        assert isinstance(twice.error, TargetInvalidError)

    def test_cannot_attack_own_cards(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 0)
        place_card(empty_board_state, "squire", "p1", 1, 1)
        result = execute_action(empty_board_state, AttackCard("p1", "knight", "squire"))
        assert isinstance(result.error, TargetInvalidError)

    def test_cannot_attack_own_castle(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 1)
        result = execute_action(empty_board_state, AttackCastle("p1", "knight", "p1"))
        assert isinstance(result.error, TargetInvalidError)

    def test_stunned_card_cannot_attack(self, empty_board_state):
        knight = place_card(empty_board_state, "knight", "p1", 1, 1)
        knight.status_effects.append(StatusEffect(id="stun-1", type=StatusEffectType.STUN, duration=1))
        result = execute_action(empty_board_state, AttackCastle("p1", "knight", "p2"))
        assert isinstance(result.error, TargetInvalidError)

    def test_shared_card_id_resolves_to_each_owner(self, empty_board_state):
        """Both players fielding a "knight" still act with their own card."""
        place_card(empty_board_state, "knight", "p1", 1, 0, attack=10)
        place_card(empty_board_state, "knight", "p2", 1, 2, attack=10, defense=5, hp=20)
        empty_board_state.active_player_id = "p2"

        castle = execute_action(empty_board_state, AttackCastle("p2", "knight", "p1"))
        assert castle.success
        assert castle.state.players["p1"].castle_hp < empty_board_state.players["p1"].castle_hp

        duel = execute_action(empty_board_state, AttackCard("p2", "knight", "knight"))
        assert duel.success
        assert duel.state.card_at(Position(1, 0)).hp == 15
        assert duel.state.card_at(Position(1, 2)).hp == 20

    def test_defeated_target_rejected(self, empty_board_state):
        """A card left at 0 hp by a loaded snapshot cannot be attacked again."""
        place_card(empty_board_state, "knight", "p1", 1, 0)
        place_card(empty_board_state, "orc", "p2", 1, 2).hp = 0

        result = execute_action(empty_board_state, AttackCard("p1", "knight", "orc"))

        assert not result.success
        assert isinstance(result.error, TargetInvalidError)
        assert result.state is empty_board_state

    def test_castle_hp_clamped_at_zero(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 1, attack=30)
        empty_board_state.players["p2"].castle_hp = 5
        result = execute_action(empty_board_state, AttackCastle("p1", "knight", "p2"))
        assert result.state.players["p2"].castle_hp == 0


@pytest.mark.combat
class TestRejectedActions:
    """Illegal actions return the input state untouched."""

    def test_opponent_card_rejected_without_change(self, empty_board_state):
        place_card(empty_board_state, "orc", "p2", 1, 1)
        before = empty_board_state.to_dict()

        result = execute_action(empty_board_state, AttackCastle("p1", "orc", "p2"))

        assert not result.success
        assert isinstance(result.error, TargetInvalidError)
        assert result.state is empty_board_state
        assert empty_board_state.to_dict() == before

    def test_not_your_turn(self, battle):
        result = execute_action(battle, EndTurn(player_id="p2"))
        assert isinstance(result.error, NotYourTurnError)
        assert result.state is battle

    def test_unknown_actor(self, battle):
        assert isinstance(validate_action(battle, Surrender("nobody")), NotYourTurnError)

    def test_no_log_entry_on_rejection(self, battle):
        result = execute_action(battle, DeployCard("p1", "missing", Position(0, 0)))
        assert len(result.state.battle_log) == 1


@pytest.mark.combat
class TestAbilities:
    """Tests for activated abilities through the engine."""

    def test_damage_ability(self, empty_board_state):
        """Ability damage ignores defense, costs mana and starts the cooldown."""
        place_card(empty_board_state, "mage", "p1", 2, 1,
                   abilities=[active("fireball", AbilityEffectKind.DAMAGE, 6)])
        place_card(empty_board_state, "orc", "p2", 0, 1, defense=5, hp=20)

        result = execute_action(empty_board_state, UseAbility("p1", "mage", "fireball", "orc"))

        assert result.success
        assert result.damage_dealt == 6
        state = result.state
        assert state.card_at(Position(0, 1)).hp == 14
        assert state.players["p1"].mana == 2
        mage = state.card_at(Position(2, 1))
        assert mage.abilities[0].current_cooldown == 2
        assert not mage.has_attacked

    def test_ability_on_cooldown(self, empty_board_state):
        place_card(empty_board_state, "mage", "p1", 2, 1,
                   abilities=[active("fireball", AbilityEffectKind.DAMAGE, 6)])
        place_card(empty_board_state, "orc", "p2", 0, 1)

        used = execute_action(empty_board_state, UseAbility("p1", "mage", "fireball", "orc")).state
        again = execute_action(used, UseAbility("p1", "mage", "fireball", "orc"))
        assert isinstance(again.error, AbilityOnCooldownError)

    def test_single_target_needs_enemy(self, empty_board_state):
        place_card(empty_board_state, "mage", "p1", 2, 1,
                   abilities=[active("fireball", AbilityEffectKind.DAMAGE, 6)])
        result = execute_action(empty_board_state, UseAbility("p1", "mage", "fireball"))
        assert isinstance(result.error, TargetInvalidError)

    def test_passive_cannot_be_activated(self, empty_board_state):
        place_card(empty_board_state, "troll", "p1", 1, 1, abilities=[passive("Regeneration")])
        result = execute_action(empty_board_state, UseAbility("p1", "troll", "regeneration"))
        assert isinstance(result.error, TargetInvalidError)

    def test_ability_mana_cost(self, empty_board_state):
        place_card(empty_board_state, "mage", "p1", 2, 1,
                   abilities=[active("meteor", AbilityEffectKind.DAMAGE, 9, mana_cost=4)])
        place_card(empty_board_state, "orc", "p2", 0, 1)
        result = execute_action(empty_board_state, UseAbility("p1", "mage", "meteor", "orc"))
        assert isinstance(result.error, ResourceExhaustedError)


@pytest.mark.combat
class TestEndTurn:
    """Tests for turn transitions."""

    def test_passes_to_second_player(self, battle, rng):
        """Second player gains mana, refills and draws."""
        state = end_turn(battle, rng)
        p2 = state.players["p2"]

        assert state.active_player_id == "p2"
        assert state.current_turn == 1
        assert p2.max_mana == 4
        assert p2.mana == 4
        assert len(p2.hand) == 6
        assert len(p2.deck) == 9
        assert state.battle_log[-1].action == "TURN_START"

    def test_turn_number_advances_on_wrap(self, battle, rng):
        state = end_turn(end_turn(battle, rng), rng)
        assert state.active_player_id == "p1"
        assert state.current_turn == 2
        assert state.players["p1"].max_mana == 4

    def test_end_turn_action_without_player(self, battle):
        result = execute_action(battle, EndTurn())
        assert result.success
        assert result.state.active_player_id == "p2"

    def test_mana_cap(self, battle, rng):
        battle.players["p2"].max_mana = 10
        state = end_turn(battle, rng)
        assert state.players["p2"].max_mana == 10

    def test_readies_active_players_cards(self, empty_board_state, rng):
        knight = place_card(empty_board_state, "knight", "p2", 0, 0)
        knight.has_attacked = True
        state = end_turn(empty_board_state, rng)
        assert not state.card_at(Position(0, 0)).has_attacked

    def test_cooldowns_tick(self, empty_board_state, rng):
        mage = place_card(empty_board_state, "mage", "p2", 0, 0,
                          abilities=[active("fireball", AbilityEffectKind.DAMAGE, 6)])
        mage.abilities[0].current_cooldown = 2
        state = end_turn(empty_board_state, rng)
        assert state.card_at(Position(0, 0)).abilities[0].current_cooldown == 1

    def test_regeneration(self, empty_board_state, rng):
        troll = place_card(empty_board_state, "troll", "p2", 0, 0, hp=20,
                           abilities=[passive("Regeneration")])
        troll.hp = 10
        state = end_turn(empty_board_state, rng)
        assert state.card_at(Position(0, 0)).hp == 12

    def test_poison_can_destroy(self, empty_board_state, rng):
        rat = place_card(empty_board_state, "rat", "p2", 0, 0, hp=5)
        rat.hp = 2
        rat.status_effects.append(StatusEffect(id="venom", type=StatusEffectType.POISON, modifier=3, duration=2))
        state = end_turn(empty_board_state, rng)
        assert state.card_at(Position(0, 0)) is None
        assert state.players["p2"].discard[0].id == "rat"

    def test_weather_counts_down_on_wrap(self, empty_board_state, rng):
        empty_board_state.weather = WeatherEffect(WeatherType.RAIN, 0.9, 1.0, 0.95, turns_remaining=1)
        empty_board_state.active_player_id = "p2"
        empty_board_state.current_turn = 2
        state = end_turn(empty_board_state, rng)
        assert state.current_turn == 3
        assert state.weather is None

    def test_cards_are_conserved(self, battle, rng):
        """Cards never appear or vanish across a sequence of turns."""
        state = battle
        for _ in range(6):
            active_id = state.active_player_id
            hand = state.players[active_id].hand
            if hand:
                cell = next(
                    Position(r, c) for r in range(3) for c in range(3)
                    if state.battlefield[r][c] is None
                )
                state = execute_action(state, DeployCard(active_id, hand[0].id, cell), rng).state
            state = end_turn(state, rng)
        assert total_cards(state, "p1") == 15
        assert total_cards(state, "p2") == 15

    def test_finished_battle_is_unchanged(self, battle, rng):
        battle.winner = "p1"
        assert end_turn(battle, rng) is battle


@pytest.mark.combat
class TestEffectiveStats:
    """Tests for modifier ordering."""

    def test_status_then_formation_then_weather(self, empty_board_state):
        """(attack + buff) * formation * weather"""
        knight = place_card(empty_board_state, "knight", "p1", 0, 0, attack=10)
        place_card(empty_board_state, "squire", "p1", 0, 1)
        knight.status_effects.append(StatusEffect(
            id="rally", type=StatusEffectType.BUFF, modifier=2, duration=2,
            stat=Stat.ATTACK,
        ))
        empty_board_state.weather = WeatherEffect(WeatherType.STORM, 0.8, 1.0, 0.9, 3)

        stats = get_effective_stats(knight, empty_board_state)
        # Siege formation (+25%) then storm (-20%)
        assert stats.attack == pytest.approx(12 * 1.25 * 0.8)


@pytest.mark.combat
class TestVictory:
    """Tests for victory conditions."""

    def test_castle_destroyed(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 1, attack=10)
        empty_board_state.players["p2"].castle_hp = 5

        result = execute_action(empty_board_state, AttackCastle("p1", "knight", "p2"))

        assert result.state.winner == "p1"
        assert result.state.victory_condition == VictoryCondition.CASTLE_DESTROYED
        assert result.state.phase == BattlePhase.VICTORY

    def test_actions_rejected_after_victory(self, empty_board_state):
        empty_board_state.winner = "p2"
        result = execute_action(empty_board_state, EndTurn())
        assert isinstance(result.error, BattleOverError)

    def test_mutual_destruction_last_damaged_loses(self, empty_board_state):
        for player in empty_board_state.players.values():
            player.castle_hp = 0
        empty_board_state.last_damaged_player_id = "p1"
        assert check_victory_conditions(empty_board_state).winner_id == "p2"

    def test_mutual_destruction_falls_back_to_non_active(self, empty_board_state):
        for player in empty_board_state.players.values():
            player.castle_hp = 0
        empty_board_state.active_player_id = "p2"
        assert check_victory_conditions(empty_board_state).winner_id == "p2"

    def test_turn_limit_higher_castle_wins(self, empty_board_state):
        empty_board_state.current_turn = 50
        empty_board_state.players["p1"].castle_hp = 20
        empty_board_state.players["p2"].castle_hp = 30
        result = check_victory_conditions(empty_board_state)
        assert result.winner_id == "p2"
        assert result.condition == VictoryCondition.TURN_LIMIT

    def test_turn_limit_tie_goes_to_first_player(self, empty_board_state):
        empty_board_state.current_turn = 50
        assert check_victory_conditions(empty_board_state).winner_id == "p1"

    def test_no_winner_mid_battle(self, battle):
        assert check_victory_conditions(battle) is None

    def test_exhaustion_is_opt_in(self, empty_board_state):
        """Empty hands and decks only lose when exhaustion victory is enabled."""
        empty_board_state.players["p2"].hand.append(make_card("spare"))
        assert check_victory_conditions(empty_board_state) is None

        empty_board_state.config.exhaustion_victory = True
        result = check_victory_conditions(empty_board_state)
        assert result.winner_id == "p2"
        assert result.condition == VictoryCondition.RESOURCE_EXHAUSTION

    def test_surrender(self, battle):
        result = execute_action(battle, Surrender("p1"))
        assert result.state.winner == "p2"
        assert result.state.victory_condition == VictoryCondition.SURRENDER


@pytest.mark.combat
class TestSerialization:
    """Tests for BattleState to_dict/from_dict."""

    def test_state_survives_round_trip(self, battle, rng):
        card = battle.players["p1"].hand[0]
        state = execute_action(battle, DeployCard("p1", card.id, Position(0, 2)), rng).state
        state = execute_action(state, AttackCastle("p1", card.id, "p2"), rng).state
        state = end_turn(state, rng)
        state.blocked_tiles = {Position(2, 2)}

        data = state.to_dict()
        assert BattleState.from_dict(data).to_dict() == data
