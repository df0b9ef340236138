"""
AI Personalities.

Five opponents from the Tales of Tasern, each a fixed set of traits in [0, 1]
that tilts the decision engine's mode selection and scoring.
"""
from typing import Dict, List, Optional

from siegefront.core.dice import RandomSource, ensure_rng
from siegefront.core.models import AIPersonality


# Unpredictable, creative, often sub-optimal
SIR_STUMBLEHEART = AIPersonality(
    name="Sir Stumbleheart",
    title="The Noble Blunderer",
    aggression=0.3,
    creativity=0.8,
    risk_tolerance=0.4,
    patience=0.6,
    adaptability=0.5,
    flavor_text='"By the honor of my forefathers, I shall... wait, where did my knight go? Oh dear."',
)

# Aggressive rushdown, minimal defense
LADY_SWIFTBLADE = AIPersonality(
    name="Lady Swiftblade",
    title="The Lightning Duelist",
    aggression=0.8,
    creativity=0.6,
    risk_tolerance=0.7,
    patience=0.2,
    adaptability=0.5,
    flavor_text="\"You'll be defeated before you even draw your sword. Speed is everything.\"",
)

# Calculated, defensive; the hardest opponent
THORNWICK = AIPersonality(
    name="Thornwick",
    title="The Chess Master",
    aggression=0.5,
    creativity=0.5,
    risk_tolerance=0.3,
    patience=0.8,
    adaptability=0.9,
    flavor_text='"Every move is a calculation. Every piece serves a purpose. Checkmate."',
)

# Chaotic and experimental
GROK = AIPersonality(
    name="Grok",
    title="The Chaos Warrior",
    aggression=0.7,
    creativity=0.9,
    risk_tolerance=0.8,
    patience=0.3,
    adaptability=0.6,
    flavor_text='"Plan? Grok no need plan! Grok SMASH! Then... maybe SMASH more?"',
)

# Balanced but unpredictable
ARCHMAGUS_NETHYS = AIPersonality(
    name="Archmagus Nethys",
    title="Master of the Arcane",
    aggression=0.4,
    creativity=0.9,
    risk_tolerance=0.5,
    patience=0.7,
    adaptability=0.7,
    flavor_text='"Fascinating... let us see what happens when I apply THIS spell configuration..."',
)

ALL_PERSONALITIES: List[AIPersonality] = [
    SIR_STUMBLEHEART,
    LADY_SWIFTBLADE,
    THORNWICK,
    GROK,
    ARCHMAGUS_NETHYS,
]

SKILL_LEVELS = ("beginner", "intermediate", "advanced")


def get_random_personality(rng: Optional[RandomSource] = None) -> AIPersonality:
    return ensure_rng(rng).choice(ALL_PERSONALITIES)


def get_personality_by_name(name: str) -> Optional[AIPersonality]:
    """Case-insensitive lookup; None if no personality has that name."""
    wanted = name.strip().lower()
    for personality in ALL_PERSONALITIES:
        if personality.name.lower() == wanted:
            return personality
    return None


def get_personality_difficulty(personality: AIPersonality) -> float:
    """Difficulty in [0, 1], driven by patience and adaptability."""
    return personality.patience * 0.5 + personality.adaptability * 0.5


def get_recommended_personality(skill_level: str, rng: Optional[RandomSource] = None) -> AIPersonality:
    """
    Pick an opponent for a player's skill level.

    Args:
        skill_level: "beginner", "intermediate" or "advanced"; anything else
            gets a random opponent
        rng: Random source for the intermediate and fallback picks
    """
    rng = ensure_rng(rng)
    level = skill_level.lower()
    if level == "beginner":
        return SIR_STUMBLEHEART
    if level == "intermediate":
        return LADY_SWIFTBLADE if rng.chance(0.5) else GROK
    if level == "advanced":
        return THORNWICK
    return get_random_personality(rng)


def personality_summary(personality: AIPersonality) -> Dict:
    data = personality.to_dict()
    data["difficulty"] = round(get_personality_difficulty(personality), 2)
    return data
