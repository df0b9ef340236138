"""
Siegefront battle core.

Pure game rules: models, actions, the battle engine, formations, weather,
abilities, maps, player strategies and the AI opponents.
"""
from .models import (
    BattleCard,
    BattleConfig,
    BattleState,
    Card,
    Player,
    Position,
)
from .actions import (
    AttackCard,
    AttackCastle,
    BattleAction,
    DeployCard,
    EndTurn,
    Surrender,
    UseAbility,
    action_from_dict,
)
from .battle_engine import (
    ActionResult,
    check_victory_conditions,
    end_turn,
    execute_action,
    initialize_battle,
    validate_action,
)
from .dice import RandomSource

__all__ = [
    # Models
    'BattleCard',
    'BattleConfig',
    'BattleState',
    'Card',
    'Player',
    'Position',
    # Actions
    'AttackCard',
    'AttackCastle',
    'BattleAction',
    'DeployCard',
    'EndTurn',
    'Surrender',
    'UseAbility',
    'action_from_dict',
    # Engine
    'ActionResult',
    'check_victory_conditions',
    'end_turn',
    'execute_action',
    'initialize_battle',
    'validate_action',
    # Randomness
    'RandomSource',
]
