"""
Weather System.

Battlefield-wide weather that scales every card's attack, defense and speed.
Random weather only rolls the four common types; the rest come from map
presets.
"""
from typing import Dict, List, Optional, Tuple

from siegefront.core.dice import RandomSource, ensure_rng
from siegefront.core.models import WeatherEffect, WeatherType


# (attack_mod, defense_mod, speed_mod)
WEATHER_MODIFIERS: Dict[WeatherType, Tuple[float, float, float]] = {
    WeatherType.CLEAR: (1.0, 1.0, 1.0),
    WeatherType.RAIN: (0.9, 1.0, 0.95),
    WeatherType.STORM: (0.8, 1.0, 0.9),
    WeatherType.FOG: (0.85, 1.1, 1.0),
    WeatherType.SNOW: (1.0, 0.9, 0.85),
    WeatherType.BLIZZARD: (0.7, 1.2, 0.7),
    WeatherType.SANDSTORM: (0.75, 0.9, 0.8),
    WeatherType.HEATWAVE: (1.1, 0.9, 0.85),
    WeatherType.ARCANE_STORM: (1.2, 0.8, 1.1),
    WeatherType.BLOOD_MOON: (1.3, 0.7, 1.0),
}

RANDOM_WEATHER_TYPES: List[WeatherType] = [
    WeatherType.RAIN,
    WeatherType.STORM,
    WeatherType.FOG,
    WeatherType.SNOW,
]

CLEAR_SKIES_CHANCE = 0.30
MIN_DURATION = 3
MAX_DURATION = 6
CHANGE_INTERVAL = 7
CHANGE_CHANCE = 0.4

WEATHER_DESCRIPTIONS: Dict[WeatherType, str] = {
    WeatherType.CLEAR: "The skies are clear and calm",
    WeatherType.RAIN: "Rain begins to fall, dampening the battlefield",
    WeatherType.STORM: "A fierce storm rages, lightning crackling overhead",
    WeatherType.FOG: "Dense fog rolls in, obscuring vision",
    WeatherType.SNOW: "Snow begins to fall, freezing the battlefield",
    WeatherType.BLIZZARD: "A howling blizzard buries the field in ice",
    WeatherType.SANDSTORM: "Scouring sand whips across the battlefield",
    WeatherType.HEATWAVE: "A searing heat shimmers over the ground",
    WeatherType.ARCANE_STORM: "Arcane energy crackles through the air",
    WeatherType.BLOOD_MOON: "A blood moon rises, stirring battle fury",
}

WEATHER_TACTICS: Dict[WeatherType, str] = {
    WeatherType.RAIN: "Attack power reduced. Focus on defense.",
    WeatherType.STORM: "Heavy attack penalty. Defensive formations recommended.",
    WeatherType.FOG: "Attack reduced but defense increased. Good for turtling.",
    WeatherType.SNOW: "Speed greatly reduced. Plan moves carefully.",
    WeatherType.BLIZZARD: "Attacks barely land. Dig in and wait it out.",
    WeatherType.SANDSTORM: "Everything is weakened. Trade carefully.",
    WeatherType.HEATWAVE: "Attacks hit harder but armor softens.",
    WeatherType.ARCANE_STORM: "Offense is amplified. Strike first.",
    WeatherType.BLOOD_MOON: "Brutal offense, fragile defense. Go all in.",
}


def create_weather_effect(
    weather_type: WeatherType,
    rng: Optional[RandomSource] = None,
    duration: Optional[int] = None,
) -> WeatherEffect:
    """
    Build a weather effect with the fixed modifiers for its type.

    Args:
        weather_type: Which weather to create
        rng: Random source for the duration roll
        duration: Explicit duration; rolled in [3, 6] when omitted

    Returns:
        WeatherEffect with turns_remaining set
    """
    attack_mod, defense_mod, speed_mod = WEATHER_MODIFIERS[weather_type]
    if duration is None:
        duration = ensure_rng(rng).randint(MIN_DURATION, MAX_DURATION)

    return WeatherEffect(
        type=weather_type,
        attack_mod=attack_mod,
        defense_mod=defense_mod,
        speed_mod=speed_mod,
        turns_remaining=duration,
    )


def generate_random_weather(rng: Optional[RandomSource] = None) -> Optional[WeatherEffect]:
    """Clear skies (None) 30% of the time, otherwise one of the common weathers."""
    rng = ensure_rng(rng)
    if rng.random() < CLEAR_SKIES_CHANCE:
        return None
    return create_weather_effect(rng.choice(RANDOM_WEATHER_TYPES), rng)


def should_change_weather(current_turn: int, rng: Optional[RandomSource] = None) -> bool:
    """Weather always rolls on turn 1, then has a 40% chance every 7th turn."""
    if current_turn == 1:
        return True
    if current_turn % CHANGE_INTERVAL == 0:
        return ensure_rng(rng).chance(CHANGE_CHANCE)
    return False


def describe_weather(weather_type: Optional[WeatherType]) -> str:
    if weather_type is None:
        return WEATHER_DESCRIPTIONS[WeatherType.CLEAR]
    return WEATHER_DESCRIPTIONS.get(weather_type, "The weather shifts")


def weather_tactics(weather_type: Optional[WeatherType]) -> str:
    if weather_type is None:
        return "Standard conditions."
    return WEATHER_TACTICS.get(weather_type, "Standard conditions.")
