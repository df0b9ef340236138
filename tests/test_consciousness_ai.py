"""Tests for the ConsciousnessAI decision engine."""
import pytest

from siegefront.core.actions import AttackCard, AttackCastle, EndTurn
from siegefront.core.ai import (
    AIMemory,
    AIMode,
    ConsciousnessAI,
    GROK,
    THORNWICK,
    ALL_PERSONALITIES,
    get_personality_by_name,
    get_recommended_personality,
    weights_for,
)
from siegefront.core.battle_engine import validate_action
from siegefront.core.dice import RandomSource

from conftest import make_card, place_card


@pytest.mark.ai
class TestDecisions:
    """Tests for select_action."""

    def test_finished_battle_ends_turn_without_rolling(self, empty_board_state):
        """A terminal state returns END_TURN and leaves the rng untouched."""
        empty_board_state.winner = "p2"
        rng = RandomSource(5)
        ai = ConsciousnessAI(personality=GROK, rng=rng)

        action = ai.select_action(empty_board_state.players["p1"], empty_board_state)

        assert isinstance(action, EndTurn)
        assert rng.random() == RandomSource(5).random()
        assert ai.memory.pending is None

    def test_nothing_to_do_ends_turn(self, empty_board_state):
        ai = ConsciousnessAI(personality=THORNWICK, rng=RandomSource(1))
        action = ai.select_action(empty_board_state.players["p1"], empty_board_state)
        assert isinstance(action, EndTurn)

    def test_spent_cards_and_no_mana_end_turn(self, empty_board_state):
        """No affordable deploys and every card already attacked leaves only END_TURN."""
        empty_board_state.players["p1"].hand.append(make_card("giant", mana_cost=9))
        knight = place_card(empty_board_state, "knight", "p1", 1, 0)
        knight.has_attacked = True
        place_card(empty_board_state, "orc", "p2", 1, 2)

        ai = ConsciousnessAI(personality=GROK, rng=RandomSource(13))
        action = ai.select_action(empty_board_state.players["p1"], empty_board_state)

        assert action == EndTurn(player_id="p1")

    def test_takes_lethal_castle_shot(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 1, attack=10)
        empty_board_state.players["p2"].castle_hp = 8

        ai = ConsciousnessAI(personality=GROK, rng=RandomSource(3))
        action = ai.select_action(empty_board_state.players["p1"], empty_board_state)

        assert action == AttackCastle("p1", "knight", "p2")

    def test_chosen_action_is_legal(self, battle):
        ai = ConsciousnessAI(personality=THORNWICK, rng=RandomSource(8))
        action = ai.select_action(battle.players["p1"], battle)
        assert validate_action(battle, action) is None

    def test_same_seed_same_choice(self, battle):
        first = ConsciousnessAI(personality=GROK, rng=RandomSource(21))
        second = ConsciousnessAI(personality=GROK, rng=RandomSource(21))
        player = battle.players["p1"]
        assert first.select_action(player, battle) == second.select_action(player, battle)

    def test_input_state_is_not_mutated(self, empty_board_state):
        """Out-of-range values are clamped in a private copy only."""
        empty_board_state.players["p1"].castle_hp = 80
        empty_board_state.players["p1"].hand.append(make_card("knight"))
        before = empty_board_state.to_dict()

        ConsciousnessAI(personality=GROK, rng=RandomSource(2)).select_action(
            empty_board_state.players["p1"], empty_board_state
        )

        assert empty_board_state.to_dict() == before


@pytest.mark.ai
class TestOptions:
    """Tests for option enumeration."""

    def test_every_option_is_legal(self, battle):
        ai = ConsciousnessAI(personality=THORNWICK, rng=RandomSource(0))
        options = ai.generate_options(battle.players["p1"], battle)

        assert isinstance(options[-1], EndTurn)
        assert len(options) > 1
        for action in options[:-1]:
            assert validate_action(battle, action) is None

    def test_defeated_cards_are_not_targets(self, empty_board_state):
        place_card(empty_board_state, "knight", "p1", 1, 0)
        ghost = place_card(empty_board_state, "ghost", "p2", 1, 2)
        ghost.hp = 0

        ai = ConsciousnessAI(personality=GROK, rng=RandomSource(0))
        options = ai.generate_options(empty_board_state.players["p1"], empty_board_state)

        assert not any(isinstance(a, AttackCard) for a in options)

    def test_sanitize_drops_defeated_cards(self, empty_board_state):
        place_card(empty_board_state, "ghost", "p2", 1, 2).hp = -3

        view = ConsciousnessAI(personality=GROK, rng=RandomSource(0))._sanitize(empty_board_state)

        assert view.battlefield[1][2] is None
        assert empty_board_state.battlefield[1][2] is not None

    def test_inactive_player_only_ends_turn(self, battle):
        ai = ConsciousnessAI(personality=THORNWICK, rng=RandomSource(0))
        options = ai.generate_options(battle.players["p2"], battle)
        assert options == [EndTurn(player_id="p2")]


@pytest.mark.ai
class TestModesAndMemory:
    """Tests for strategic mode and rolling memory."""

    def test_desperate_when_castle_low(self, empty_board_state):
        empty_board_state.players["p1"].castle_hp = 10
        ai = ConsciousnessAI(personality=THORNWICK, rng=RandomSource(0))
        ai.select_action(empty_board_state.players["p1"], empty_board_state)
        assert ai.last_mode == AIMode.DESPERATE

    def test_building_without_cards(self, empty_board_state):
        ai = ConsciousnessAI(personality=THORNWICK, rng=RandomSource(0))
        ai.select_action(empty_board_state.players["p1"], empty_board_state)
        assert ai.last_mode == AIMode.BUILDING

    def test_memory_records_previous_decision(self, empty_board_state):
        memory = AIMemory(max_size=2)
        ai = ConsciousnessAI(personality=GROK, rng=RandomSource(0), memory=memory)
        player = empty_board_state.players["p1"]

        for _ in range(4):
            ai.select_action(player, empty_board_state)

        assert len(memory.records) == 2
        assert memory.pending is not None
        assert memory.stuck_counter == 0  # empty board hashes to ""

    def test_aggression_scales_castle_damage(self):
        calm = weights_for(AIMode.AGGRESSIVE, THORNWICK)
        wild = weights_for(AIMode.AGGRESSIVE, GROK)
        assert wild.castle_damage > calm.castle_damage


class TestPersonalities:
    """Tests for the personality roster."""

    def test_five_personalities(self):
        assert len(ALL_PERSONALITIES) == 5
        for personality in ALL_PERSONALITIES:
            for trait in ("aggression", "creativity", "risk_tolerance", "patience", "adaptability"):
                assert 0.0 <= getattr(personality, trait) <= 1.0

    def test_lookup_by_name(self):
        assert get_personality_by_name("grok") is GROK
        assert get_personality_by_name("Nobody") is None

    def test_skill_levels(self):
        assert get_recommended_personality("beginner").name == "Sir Stumbleheart"
        assert get_recommended_personality("advanced") is THORNWICK
