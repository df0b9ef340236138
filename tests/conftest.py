"""
Siegefront - Test Configuration and Fixtures
Shared test utilities and fixtures for pytest.
"""
import pytest
from typing import List, Optional

from siegefront.core.battle_engine import initialize_battle
from siegefront.core.dice import RandomSource
from siegefront.core.models import (
    AbilityEffect,
    AbilityEffectKind,
    AbilityTarget,
    BattleCard,
    BattleConfig,
    BattlePhase,
    BattleState,
    Card,
    CardAbility,
    CombatType,
    Player,
    Position,
    empty_battlefield,
)


# ==================== Card Builders ====================

def make_card(
    card_id: str,
    attack: int = 10,
    defense: int = 5,
    hp: int = 20,
    mana_cost: int = 1,
    combat_type: CombatType = CombatType.MELEE,
    abilities: Optional[List[CardAbility]] = None,
    name: Optional[str] = None,
) -> Card:
    return Card(
        id=card_id,
        name=name or card_id.title(),
        attack=attack,
        defense=defense,
        hp=hp,
        max_hp=hp,
        mana_cost=mana_cost,
        combat_type=combat_type,
        abilities=abilities or [],
    )


def make_deck(prefix: str, size: int = 15, **card_options) -> List[Card]:
    return [make_card(f"{prefix}-{i}", **card_options) for i in range(size)]


def place_card(
    state: BattleState,
    card_id: str,
    owner_id: str,
    row: int,
    col: int,
    **card_options,
) -> BattleCard:
    """Put a battle card straight onto the battlefield, bypassing deploy rules."""
    card = BattleCard.from_card(make_card(card_id, **card_options), Position(row, col), owner_id)
    state.battlefield[row][col] = card
    return card


def passive(name: str) -> CardAbility:
    return CardAbility(id=name.lower().replace(" ", "-"), name=name)


def active(
    ability_id: str,
    kind: AbilityEffectKind,
    amount: int,
    target: AbilityTarget = AbilityTarget.SINGLE,
    mana_cost: int = 1,
    cooldown: int = 2,
    **effect_options,
) -> CardAbility:
    return CardAbility(
        id=ability_id,
        name=ability_id.title(),
        mana_cost=mana_cost,
        cooldown=cooldown,
        effect=AbilityEffect(kind=kind, amount=amount, target=target, **effect_options),
    )


# ==================== Player & Battle Fixtures ====================

@pytest.fixture
def rng() -> RandomSource:
    return RandomSource(42)


@pytest.fixture
def config() -> BattleConfig:
    """Plain 3x3 battle with no preset weather."""
    return BattleConfig(turn_limit=50)


@pytest.fixture
def player_a() -> Player:
    return Player(id="p1", name="Aria", deck=make_deck("a"))


@pytest.fixture
def player_b() -> Player:
    return Player(id="p2", name="Borin", deck=make_deck("b"))


@pytest.fixture
def battle(player_a, player_b, config, rng) -> BattleState:
    """Freshly initialized battle, p1 to act."""
    return initialize_battle(player_a, player_b, config, rng)


@pytest.fixture
def empty_board_state(config) -> BattleState:
    """Hand-built state with empty hands and decks for precise scenarios."""
    return BattleState(
        players={
            "p1": Player(id="p1", name="Aria", mana=3, max_mana=3),
            "p2": Player(id="p2", name="Borin", mana=3, max_mana=3),
        },
        battlefield=empty_battlefield(3, 3),
        active_player_id="p1",
        phase=BattlePhase.IN_PROGRESS,
        config=config,
    )


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
    config.addinivalue_line("markers", "combat: Battle engine tests")
    config.addinivalue_line("markers", "ai: AI decision tests")
