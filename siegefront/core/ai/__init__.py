"""
Siegefront AI opponents.

Personality-driven decision making for AI players using weighted
heuristic scoring with controlled, seedable variance.

Modules:
- consciousness: Six-step decision loop (ConsciousnessAI)
- personalities: The five Tasern opponents and lookups
- scoring: Named scoring coefficients per strategic mode
"""
from .scoring import AIMode, ScoringWeights, weights_for
from .consciousness import (
    AIMemory,
    ConsciousnessAI,
    ScoredAction,
    TurnRecord,
)
from .personalities import (
    ALL_PERSONALITIES,
    SIR_STUMBLEHEART,
    LADY_SWIFTBLADE,
    THORNWICK,
    GROK,
    ARCHMAGUS_NETHYS,
    get_personality_by_name,
    get_personality_difficulty,
    get_random_personality,
    get_recommended_personality,
)

__all__ = [
    # Scoring
    'AIMode',
    'ScoringWeights',
    'weights_for',
    # Decision engine
    'AIMemory',
    'ConsciousnessAI',
    'ScoredAction',
    'TurnRecord',
    # Personalities
    'ALL_PERSONALITIES',
    'SIR_STUMBLEHEART',
    'LADY_SWIFTBLADE',
    'THORNWICK',
    'GROK',
    'ARCHMAGUS_NETHYS',
    'get_personality_by_name',
    'get_personality_difficulty',
    'get_random_personality',
    'get_recommended_personality',
]
