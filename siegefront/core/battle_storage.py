"""
Shared storage for active battles.

Battles live in memory for the lifetime of the process. Routes read and write
through these helpers so lookups of unknown ids raise BattleNotFoundError.
"""
from typing import Dict, Optional

from siegefront.core.dice import RandomSource
from siegefront.core.errors import BattleNotFoundError
from siegefront.core.models import BattleState
from siegefront.core.strategies import AIStrategy

# In-memory storage, keyed by battle_id
active_battles: Dict[str, BattleState] = {}
battle_rngs: Dict[str, RandomSource] = {}  # shuffles, weather and turn events
ai_strategies: Dict[str, Dict[str, AIStrategy]] = {}  # battle_id -> player_id -> strategy


def save_battle(state: BattleState, rng: Optional[RandomSource] = None) -> BattleState:
    active_battles[state.id] = state
    if rng is not None:
        battle_rngs[state.id] = rng
    return state


def get_battle(battle_id: str) -> BattleState:
    """Raises BattleNotFoundError if no battle has this id."""
    state = active_battles.get(battle_id)
    if state is None:
        raise BattleNotFoundError(battle_id)
    return state


def get_battle_rng(battle_id: str) -> RandomSource:
    return battle_rngs.setdefault(battle_id, RandomSource())


def delete_battle(battle_id: str) -> bool:
    ai_strategies.pop(battle_id, None)
    battle_rngs.pop(battle_id, None)
    return active_battles.pop(battle_id, None) is not None


def set_ai_strategy(battle_id: str, player_id: str, strategy: AIStrategy) -> None:
    ai_strategies.setdefault(battle_id, {})[player_id] = strategy


def get_ai_strategy(battle_id: str, player_id: str) -> Optional[AIStrategy]:
    return ai_strategies.get(battle_id, {}).get(player_id)


def clear_battles() -> None:
    active_battles.clear()
    battle_rngs.clear()
    ai_strategies.clear()
