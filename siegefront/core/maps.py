"""
Map presets.

Grid layouts (size plus impassable tiles) and complete presets that pair a
layout with a default weather. A preset turns into a BattleConfig for the
engine.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from siegefront.core.models import BattleConfig, GridConfig, Position, WeatherType


def _tiles(*cells: Tuple[int, int]) -> List[Position]:
    return [Position(row, col) for row, col in cells]


MAP_LAYOUTS: Dict[str, GridConfig] = {
    "CLASSIC_3X3": GridConfig(3, 3, "Classic Arena", "Traditional 3x3 battlefield"),
    "LARGE_4X4": GridConfig(
        4, 4, "Grand Battlefield", "4x4 arena with center obstacle",
        _tiles((1, 1), (1, 2), (2, 1), (2, 2)),
    ),
    "WIDE_5X3": GridConfig(3, 5, "Wide Front", "Horizontal battlefield"),
    "NARROW_3X5": GridConfig(5, 3, "Deep Trenches", "Vertical battlefield"),
    "COMPACT_2X4": GridConfig(2, 4, "Skirmish Line", "Fast-paced encounters"),
    "MASSIVE_5X5": GridConfig(5, 5, "Epic Siege", "Grand scale warfare"),
    "L_SHAPED": GridConfig(
        4, 4, "L-Shaped Pass", "Asymmetric L-shaped battlefield",
        _tiles((0, 2), (0, 3), (1, 3)),
    ),
    "T_SHAPED": GridConfig(
        4, 5, "T-Junction", "Three-way tactical chokepoint",
        _tiles((0, 0), (0, 1), (0, 3), (0, 4)),
    ),
    "CROSS_SHAPED": GridConfig(
        5, 5, "Crossroads", "Four-way intersection",
        _tiles((0, 0), (0, 4), (4, 0), (4, 4), (1, 0), (1, 4), (3, 0), (3, 4)),
    ),
    "DIAMOND": GridConfig(
        5, 5, "Diamond Arena", "Diamond-shaped battlefield",
        _tiles(
            (0, 0), (0, 1), (0, 3), (0, 4),
            (1, 0), (1, 4), (3, 0), (3, 4),
            (4, 0), (4, 1), (4, 3), (4, 4),
        ),
    ),
    "CASTLE_WALLS": GridConfig(
        4, 5, "Castle Walls", "Fortified chokepoint with walls",
        _tiles((1, 1), (1, 3), (2, 1), (2, 3)),
    ),
}


@dataclass(frozen=True)
class MapPreset:
    """A layout plus its default weather."""
    layout: str
    name: str
    description: str
    weather: Optional[WeatherType] = None

    def to_dict(self) -> Dict:
        grid = MAP_LAYOUTS[self.layout]
        return {
            "layout": self.layout,
            "name": self.name,
            "description": self.description,
            "weather": self.weather.value if self.weather else None,
            "grid": grid.to_dict(),
        }


MAP_PRESETS: Dict[str, MapPreset] = {
    "CLASSIC_ARENA": MapPreset(
        "CLASSIC_3X3", "Classic Arena", "Traditional stone battlefield under clear skies"),
    "FOREST_CLEARING": MapPreset(
        "WIDE_5X3", "Misty Forest Clearing", "Wide forest battlefield shrouded in fog", WeatherType.FOG),
    "MOUNTAIN_FORTRESS": MapPreset(
        "CASTLE_WALLS", "Mountain Fortress", "Fortified mountain pass in snowy conditions", WeatherType.SNOW),
    "DESERT_RUINS": MapPreset(
        "DIAMOND", "Desert Ruins", "Ancient diamond-shaped ruins in a sandstorm", WeatherType.SANDSTORM),
    "FROZEN_WASTE": MapPreset(
        "NARROW_3X5", "Frozen Wasteland", "Treacherous tundra ravaged by blizzards", WeatherType.BLIZZARD),
    "VOLCANIC_CRATER": MapPreset(
        "CROSS_SHAPED", "Volcanic Crater", "Scorching crossroads amid flowing lava", WeatherType.HEATWAVE),
    "CURSED_SWAMP": MapPreset(
        "L_SHAPED", "Cursed Swamp", "Twisted L-shaped marshland in thick fog", WeatherType.FOG),
    "ROYAL_COURTYARD": MapPreset(
        "LARGE_4X4", "Royal Courtyard", "Grand castle courtyard in the rain", WeatherType.RAIN),
    "ARCANE_NEXUS": MapPreset(
        "MASSIVE_5X5", "Arcane Nexus", "Mystical void crackling with arcane energy", WeatherType.ARCANE_STORM),
    "L_SHAPED_CANYON": MapPreset(
        "L_SHAPED", "L-Shaped Canyon", "Asymmetric mountain canyon passage"),
    "T_CROSSROADS": MapPreset(
        "T_SHAPED", "T-Junction Crossroads", "Three-way stone crossroads"),
}

DEFAULT_PRESET = "CLASSIC_ARENA"


def get_map_preset(name: str) -> MapPreset:
    """Look up a preset by key (case-insensitive). Raises KeyError if unknown."""
    key = name.upper()
    if key not in MAP_PRESETS:
        raise KeyError(f"Unknown map preset: {name}")
    return MAP_PRESETS[key]


def list_map_presets() -> List[MapPreset]:
    return list(MAP_PRESETS.values())


def battle_config_for_map(name: str = DEFAULT_PRESET, **overrides) -> BattleConfig:
    """
    Build a BattleConfig for a map preset.

    Args:
        name: Preset key, e.g. "ROYAL_COURTYARD"
        **overrides: Any BattleConfig field (starting_hand_size, turn_limit, ...)

    Returns:
        BattleConfig with the preset's grid, blocked tiles and weather
    """
    preset = get_map_preset(name)
    layout = MAP_LAYOUTS[preset.layout]
    values = {
        "rows": layout.rows,
        "cols": layout.cols,
        "blocked_tiles": list(layout.blocked_tiles),
        "map_name": preset.name,
        "map_description": preset.description,
        "initial_weather": preset.weather,
    }
    values.update(overrides)
    return BattleConfig.from_settings(**values)
