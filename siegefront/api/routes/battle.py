"""
Battle API Routes.

Endpoints for running a battle:
- Start a battle between two players (human or AI)
- Submit actions and end turns
- Delete a battle once it is no longer needed
- Let the AI play its turn
- Query state, formation analysis, personalities and maps

Illegal actions are raised as GameErrors and rendered by the error handlers.
"""
from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
import logging

from siegefront.config import get_settings
from siegefront.core.actions import EndTurn, action_from_dict
from siegefront.core.ai.personalities import (
    ALL_PERSONALITIES,
    get_personality_by_name,
    personality_summary,
)
from siegefront.core.battle_engine import execute_action, initialize_battle
from siegefront.core.battle_storage import (
    delete_battle,
    get_ai_strategy,
    get_battle,
    get_battle_rng,
    save_battle,
    set_ai_strategy,
)
from siegefront.core.dice import RandomSource
from siegefront.core.errors import (
    BattleOverError,
    ErrorCode,
    GameError,
    InvalidPlayerCountError,
)
from siegefront.core.formation import analyze_formation_opportunities
from siegefront.core.maps import DEFAULT_PRESET, battle_config_for_map, list_map_presets
from siegefront.core.models import Card, Player
from siegefront.core.strategies import (
    AIStrategy,
    create_ai_player,
    create_human_player,
    play_ai_turn,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class CardData(BaseModel):
    """A deck card supplied by the client."""
    id: str
    name: str
    attack: int
    defense: int
    hp: int
    max_hp: Optional[int] = None
    speed: int = 1
    mana_cost: int = 1
    rarity: str = "common"
    combat_type: str = "melee"
    abilities: List[Dict[str, Any]] = Field(default_factory=list)
    description: str = ""


class PlayerData(BaseModel):
    """A seat in the battle. Set ai_personality to make it an AI player."""
    id: str
    name: Optional[str] = None
    deck: List[CardData] = Field(default_factory=list)
    ai_personality: Optional[str] = None
    castle_hp: Optional[int] = None
    lp_bonus: float = 0.0


class StartBattleRequest(BaseModel):
    players: List[PlayerData]
    map_preset: str = DEFAULT_PRESET
    seed: Optional[int] = None
    turn_limit: Optional[int] = None
    starting_hand_size: Optional[int] = None


class ActionRequest(BaseModel):
    """Tagged action, e.g. {"type": "ATTACK_CASTLE", "player_id": ..., ...}."""
    action: Dict[str, Any]


class EndTurnRequest(BaseModel):
    player_id: Optional[str] = None


class AITurnRequest(BaseModel):
    max_actions: int = Field(default=20, ge=1, le=100)


# =============================================================================
# Helpers
# =============================================================================

def _bad_request(message: str, **details) -> GameError:
    return GameError(
        code=ErrorCode.VALIDATION_ERROR,
        message=message,
        details=details,
        http_status=400,
    )


def _build_player(data: PlayerData) -> Player:
    try:
        deck = [Card.from_dict(card.model_dump(exclude_none=True)) for card in data.deck]
    except (KeyError, ValueError) as e:
        raise _bad_request(f"Invalid card in deck of {data.id}: {e}")
    if data.ai_personality:
        personality = get_personality_by_name(data.ai_personality)
        if personality is None:
            raise _bad_request(f"Unknown AI personality: {data.ai_personality}",
                               available=[p.name for p in ALL_PERSONALITIES])
        return create_ai_player(data.id, personality, deck, data.castle_hp, lp_bonus=data.lp_bonus)
    return create_human_player(data.id, data.name or data.id, deck, data.castle_hp, lp_bonus=data.lp_bonus)


def _state_response(battle_id: str) -> Dict[str, Any]:
    return {"battle_id": battle_id, "state": get_battle(battle_id).to_dict()}


# =============================================================================
# Battle lifecycle
# =============================================================================

@router.post("/start")
async def start_battle(request: StartBattleRequest):
    """
    Start a new battle.

    The first player in the list moves first. Passing a seed makes deck
    shuffles, weather and AI decisions reproducible.
    """
    if len(request.players) != 2:
        raise InvalidPlayerCountError(f"A battle needs exactly two players, got {len(request.players)}")

    overrides = {}
    if request.turn_limit is not None:
        overrides["turn_limit"] = request.turn_limit
    if request.starting_hand_size is not None:
        overrides["starting_hand_size"] = request.starting_hand_size
    try:
        config = battle_config_for_map(request.map_preset, **overrides)
    except KeyError:
        raise _bad_request(f"Unknown map preset: {request.map_preset}")

    player_a, player_b = (_build_player(p) for p in request.players)
    rng = RandomSource(request.seed)
    state = initialize_battle(player_a, player_b, config, rng)
    save_battle(state, rng)

    for player in state.players.values():
        if player.is_ai:
            # Each AI gets its own stream so its variance does not shift the battle's rolls
            ai_seed = None if request.seed is None else rng.randint(0, 2 ** 31)
            set_ai_strategy(state.id, player.id, AIStrategy(
                personality=player.ai_personality,
                rng=RandomSource(ai_seed),
            ))

    logger.info(f"Started battle {state.id} on {config.map_name}")
    return _state_response(state.id)


@router.get("/{battle_id}/state")
async def get_battle_state(battle_id: str):
    return _state_response(battle_id)


@router.post("/{battle_id}/action")
async def take_action(battle_id: str, request: ActionRequest):
    """
    Submit an action for the active player.

    Returns the action result and the new state. Illegal actions respond
    with the error envelope and leave the battle unchanged.
    """
    state = get_battle(battle_id)
    try:
        action = action_from_dict(request.action)
    except ValueError as e:
        raise _bad_request(str(e))

    result = execute_action(state, action, get_battle_rng(battle_id))
    if not result.success:
        raise result.error

    save_battle(result.state)
    return result.to_dict()


@router.post("/{battle_id}/end-turn")
async def end_battle_turn(battle_id: str, request: Optional[EndTurnRequest] = None):
    state = get_battle(battle_id)
    player_id = request.player_id if request else None
    result = execute_action(state, EndTurn(player_id=player_id), get_battle_rng(battle_id))
    if not result.success:
        raise result.error

    save_battle(result.state)
    return result.to_dict()


@router.post("/{battle_id}/ai-turn")
async def run_ai_turn(battle_id: str, request: Optional[AITurnRequest] = None):
    """Play the active AI player's whole turn and return every step taken."""
    state = get_battle(battle_id)
    if state.is_over:
        raise BattleOverError(state.winner)

    strategy = get_ai_strategy(battle_id, state.active_player_id)
    if strategy is None:
        raise GameError(
            code=ErrorCode.CONFLICT,
            message="The active player is not controlled by the AI",
            details={"active_player": state.active_player_id},
            http_status=409,
            recovery_hint="Submit an action for the human player instead",
        )

    max_actions = request.max_actions if request else 20
    new_state, results = play_ai_turn(strategy, state, max_actions=max_actions, rng=get_battle_rng(battle_id))
    save_battle(new_state)

    return {
        "battle_id": battle_id,
        "actions": [
            {"success": r.success, "description": r.description, "damage_dealt": r.damage_dealt}
            for r in results
        ],
        "decision": strategy.last_decision.to_dict() if strategy.last_decision else None,
        "state": new_state.to_dict(),
    }


@router.delete("/{battle_id}")
async def remove_battle(battle_id: str):
    """Drop a battle and its random source and AI strategies from storage."""
    state = get_battle(battle_id)
    delete_battle(battle_id)
    logger.info(f"Deleted battle {battle_id} ({state.phase.value})")
    return {"message": f"Battle {battle_id} deleted", "battle_id": battle_id}


@router.get("/{battle_id}/formation/{player_id}")
async def get_formation_analysis(battle_id: str, player_id: str):
    state = get_battle(battle_id)
    if player_id not in state.players:
        raise GameError(
            code=ErrorCode.NOT_FOUND,
            message="Player not found in this battle",
            details={"player_id": player_id},
            http_status=404,
        )
    return analyze_formation_opportunities(player_id, state.battlefield).to_dict()


# =============================================================================
# Reference data
# =============================================================================

@router.get("/personalities")
async def get_personalities():
    return {"personalities": [personality_summary(p) for p in ALL_PERSONALITIES]}


@router.get("/maps")
async def get_maps():
    settings = get_settings()
    return {
        "default": DEFAULT_PRESET,
        "default_grid": {"rows": settings.GRID_ROWS, "cols": settings.GRID_COLS},
        "maps": [preset.to_dict() for preset in list_map_presets()],
    }
