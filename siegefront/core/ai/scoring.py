"""
AI scoring weights.

Every coefficient the decision engine uses lives in ScoringWeights so weights
can be tuned or swapped without touching control flow. `weights_for` derives
the weights for a strategic mode and personality from a base set.
"""
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Dict, Optional

from siegefront.core.models import AIPersonality


class AIMode(str, Enum):
    """Strategic posture chosen at the start of each decision."""
    AGGRESSIVE = "AGGRESSIVE"
    DEFENSIVE = "DEFENSIVE"
    BUILDING = "BUILDING"
    DESPERATE = "DESPERATE"


@dataclass(frozen=True)
class ScoringWeights:
    """Named coefficients for action scoring."""
    # Base scores per action kind
    base_deploy: float = 50.0
    base_attack_card: float = 40.0
    base_attack_castle: float = 60.0
    base_ability: float = 35.0
    end_turn: float = 5.0

    # Deploy
    card_attack: float = 2.0
    card_hp: float = 1.5
    mana_efficiency: float = 5.0
    position_bonus: float = 20.0
    formation: float = 60.0

    # Card attacks
    damage: float = 2.0
    kill_bonus: float = 50.0
    threat: float = 2.0
    thorns_penalty: float = 3.0

    # Castle attacks
    castle_damage: float = 3.0
    lethal_bonus: float = 1000.0

    # Abilities
    heal: float = 2.0
    buff: float = 1.5
    mana_cost: float = 2.0

    # Mode bonuses
    attack_mode_bonus: float = 0.0
    castle_mode_bonus: float = 0.0
    deploy_mode_bonus: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


DEFAULT_WEIGHTS = ScoringWeights()

MODE_ADJUSTMENTS: Dict[AIMode, Dict[str, float]] = {
    AIMode.AGGRESSIVE: {"attack_mode_bonus": 20.0, "castle_mode_bonus": 30.0},
    AIMode.DEFENSIVE: {"deploy_mode_bonus": 15.0, "threat": 3.0, "castle_damage": 2.0},
    AIMode.BUILDING: {"deploy_mode_bonus": 25.0, "formation": 90.0},
    AIMode.DESPERATE: {"castle_mode_bonus": 40.0, "kill_bonus": 30.0},
}


def weights_for(
    mode: AIMode,
    personality: Optional[AIPersonality] = None,
    base: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoringWeights:
    """
    Weights for a mode, tilted by personality.

    Aggression scales castle and card damage, patience scales deployment and
    formation value, low risk tolerance makes thorns hurt more.
    """
    weights = replace(base, **MODE_ADJUSTMENTS.get(mode, {}))
    if personality is None:
        return weights

    aggression = 0.5 + personality.aggression
    patience = 0.5 + personality.patience
    caution = 1.5 - personality.risk_tolerance

    return replace(
        weights,
        castle_damage=weights.castle_damage * aggression,
        damage=weights.damage * aggression,
        position_bonus=weights.position_bonus * patience,
        formation=weights.formation * patience,
        thorns_penalty=weights.thorns_penalty * caution,
    )
