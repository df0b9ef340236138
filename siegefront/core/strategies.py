"""
Player strategies.

A strategy decides what a player does next. It is a tagged union of two
plain-data variants dispatched by the functions below:

- HumanStrategy: waits for an action submitted from outside (UI, HTTP)
- AIStrategy: personality, rolling memory and a random source; answers
  immediately through ConsciousnessAI

Also provides player factories and a driver that plays a full AI turn.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union
import asyncio
import logging

from siegefront.config import get_settings
from siegefront.core.actions import BattleAction, EndTurn
from siegefront.core.ai.consciousness import AIMemory, ConsciousnessAI, ScoredAction
from siegefront.core.ai.personalities import get_recommended_personality
from siegefront.core.battle_engine import ActionResult, end_turn, execute_action
from siegefront.core.dice import RandomSource
from siegefront.core.models import AIPersonality, BattleState, Card, Player, PlayerType

logger = logging.getLogger(__name__)

DEFAULT_MAX_AI_ACTIONS = 20


@dataclass
class HumanStrategy:
    """Actions arrive through submit_action; select_action awaits the next one."""
    actions: asyncio.Queue = field(default_factory=asyncio.Queue)

    def submit_action(self, action: BattleAction) -> None:
        self.actions.put_nowait(action)

    @property
    def pending(self) -> int:
        return self.actions.qsize()


@dataclass
class AIStrategy:
    """Everything the AI carries between decisions."""
    personality: AIPersonality
    rng: RandomSource = field(default_factory=RandomSource)
    memory: Optional[AIMemory] = None
    variance_factor: Optional[float] = None
    last_decision: Optional[ScoredAction] = None

    def __post_init__(self):
        settings = get_settings()
        if self.memory is None:
            self.memory = AIMemory(max_size=settings.AI_MEMORY_SIZE)
        if self.variance_factor is None:
            self.variance_factor = settings.AI_VARIANCE_FACTOR


Strategy = Union[HumanStrategy, AIStrategy]


# =============================================================================
# Dispatch
# =============================================================================

def decide_ai_action(strategy: AIStrategy, player: Player, state: BattleState) -> BattleAction:
    """Run one ConsciousnessAI decision with the strategy's memory and rng."""
    brain = ConsciousnessAI(
        personality=strategy.personality,
        rng=strategy.rng,
        memory=strategy.memory,
        variance_factor=strategy.variance_factor,
    )
    action = brain.select_action(player, state)
    if brain.last_decision is not None:
        strategy.last_decision = brain.last_decision
    return action


async def select_action(strategy: Strategy, player: Player, state: BattleState) -> BattleAction:
    """
    Ask a strategy for the player's next action.

    Human strategies suspend until an action is submitted. AI strategies
    return without awaiting anything.
    """
    if isinstance(strategy, HumanStrategy):
        return await strategy.actions.get()
    if isinstance(strategy, AIStrategy):
        return decide_ai_action(strategy, player, state)
    raise TypeError(f"Unknown strategy: {type(strategy).__name__}")


def get_available_cards(strategy: Strategy, player: Player, state: BattleState) -> List[Card]:
    """
    Cards the player could deploy.

    Humans see their whole hand; the AI only considers cards it can pay for.
    """
    current = state.players.get(player.id, player)
    if isinstance(strategy, HumanStrategy):
        return list(current.hand)
    if isinstance(strategy, AIStrategy):
        return [c for c in current.hand if c.mana_cost <= current.mana]
    raise TypeError(f"Unknown strategy: {type(strategy).__name__}")


def play_ai_turn(
    strategy: AIStrategy,
    state: BattleState,
    max_actions: int = DEFAULT_MAX_AI_ACTIONS,
    rng: Optional[RandomSource] = None,
) -> Tuple[BattleState, List[ActionResult]]:
    """
    Let the active AI player act until it ends its turn.

    The turn is ended automatically after `max_actions` actions or if the
    engine rejects an action.

    Returns:
        (state after the turn, results of every action taken)
    """
    rng = rng or strategy.rng
    player_id = state.active_player_id
    results: List[ActionResult] = []

    for _ in range(max_actions):
        if state.is_over:
            return state, results

        action = decide_ai_action(strategy, state.players[player_id], state)
        result = execute_action(state, action, rng)
        results.append(result)
        state = result.state

        if isinstance(action, EndTurn):
            return state, results
        if not result.success:
            logger.warning(f"AI action rejected, ending turn: {result.description}")
            break

    if not state.is_over and state.active_player_id == player_id:
        state = end_turn(state, rng)
        results.append(ActionResult(state=state, success=True, description=state.battle_log[-1].result))
    return state, results


# =============================================================================
# Player factories
# =============================================================================

def create_human_player(
    player_id: str,
    name: str,
    deck: Optional[List[Card]] = None,
    castle_hp: Optional[int] = None,
    max_mana: Optional[int] = None,
    lp_bonus: float = 0.0,
) -> Player:
    settings = get_settings()
    hp = castle_hp if castle_hp is not None else settings.CASTLE_HP
    return Player(
        id=player_id,
        name=name,
        type=PlayerType.HUMAN,
        castle_hp=hp,
        max_castle_hp=hp,
        max_mana=max_mana if max_mana is not None else settings.STARTING_MAX_MANA,
        deck=list(deck or []),
        lp_bonus=max(0.0, lp_bonus),
    )


def create_ai_player(
    player_id: str,
    personality: AIPersonality,
    deck: Optional[List[Card]] = None,
    castle_hp: Optional[int] = None,
    max_mana: Optional[int] = None,
    lp_bonus: float = 0.0,
) -> Player:
    """AI player named after its personality."""
    player = create_human_player(player_id, personality.name, deck, castle_hp, max_mana, lp_bonus)
    player.type = PlayerType.AI
    player.ai_personality = personality
    return player


def create_ai_player_for_skill_level(
    player_id: str,
    skill_level: str,
    deck: Optional[List[Card]] = None,
    rng: Optional[RandomSource] = None,
    **options,
) -> Player:
    personality = get_recommended_personality(skill_level, rng)
    return create_ai_player(player_id, personality, deck, **options)


def strategy_for(player: Player, rng: Optional[RandomSource] = None) -> Strategy:
    """Default strategy for a player: AI players think, humans wait."""
    if player.is_ai and player.ai_personality is not None:
        return AIStrategy(personality=player.ai_personality, rng=rng or RandomSource())
    return HumanStrategy()
