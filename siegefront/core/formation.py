"""
Formation Calculator.

Positional patterns of a player's own cards grant fixed multiplicative
combat modifiers. Formations are checked in strict priority order and the
first match wins; they never stack.

Row 0 is the front row and the last row is the back row. Column 0 is the
left flank and the last column the right flank.
"""
from dataclasses import dataclass, field
from typing import List, Dict, Callable, Tuple

from siegefront.core.models import (
    Battlefield,
    BattleCard,
    FormationBonus,
    FormationType,
    Position,
)


FORMATION_BONUSES: Dict[FormationType, FormationBonus] = {
    FormationType.SIEGE: FormationBonus(FormationType.SIEGE, attack_mod=1.25, defense_mod=0.85),
    FormationType.PHALANX: FormationBonus(FormationType.PHALANX, defense_mod=1.30, speed_mod=0.90),
    FormationType.VANGUARD: FormationBonus(FormationType.VANGUARD, attack_mod=1.20),
    FormationType.ARCHER_LINE: FormationBonus(FormationType.ARCHER_LINE, attack_mod=1.15, defense_mod=0.90),
    FormationType.FLANKING: FormationBonus(FormationType.FLANKING, attack_mod=1.10, speed_mod=1.15),
    FormationType.SKIRMISH: FormationBonus(FormationType.SKIRMISH, speed_mod=1.05),
}

FORMATION_DESCRIPTIONS: Dict[FormationType, str] = {
    FormationType.SIEGE: "Siege: All-out assault (+25% attack, -15% defense)",
    FormationType.PHALANX: "Phalanx: Impenetrable wall (+30% defense, -10% speed)",
    FormationType.VANGUARD: "Vanguard: Front-loaded offense (+20% attack)",
    FormationType.ARCHER_LINE: "Archer Line: Ranged superiority (+15% attack, -10% defense)",
    FormationType.FLANKING: "Flanking: Swift encirclement (+10% attack, +15% speed)",
    FormationType.SKIRMISH: "Skirmish: Flexible positioning (+5% speed)",
}

FORMATION_TACTICS: Dict[FormationType, str] = {
    FormationType.SIEGE: "High-risk offense. All chips on the table.",
    FormationType.PHALANX: "Defensive wall. Slow but nearly unbreakable.",
    FormationType.VANGUARD: "Strong offense. Keep pressure on enemy front line.",
    FormationType.ARCHER_LINE: "Hit from range. Protect your back line.",
    FormationType.FLANKING: "Speed advantage. Strike from multiple angles.",
    FormationType.SKIRMISH: "Flexible positioning. Adapt to enemy strategy.",
}


def _ally_cards(owner_id: str, battlefield: Battlefield) -> List[BattleCard]:
    return [card for row in battlefield for card in row if card is not None and card.owner_id == owner_id]


def _grid_shape(battlefield: Battlefield) -> Tuple[int, int]:
    rows = len(battlefield)
    cols = len(battlefield[0]) if rows else 0
    return rows, cols


# =============================================================================
# Formation checks (priority order)
# =============================================================================

def _check_siege(allies: List[BattleCard], card: BattleCard, rows: int, cols: int) -> bool:
    front = [c for c in allies if c.position.row == 0]
    return len(front) >= 2 and card.position.row == 0


def _check_phalanx(allies: List[BattleCard], card: BattleCard, rows: int, cols: int) -> bool:
    return any(
        sum(1 for c in allies if c.position.row == row) == 3
        for row in range(rows)
    )


def _check_vanguard(allies: List[BattleCard], card: BattleCard, rows: int, cols: int) -> bool:
    return sum(1 for c in allies if c.position.row == 0) >= 2


def _check_archer_line(allies: List[BattleCard], card: BattleCard, rows: int, cols: int) -> bool:
    back_row = rows - 1
    return sum(1 for c in allies if c.position.row == back_row) >= 2


def _check_flanking(allies: List[BattleCard], card: BattleCard, rows: int, cols: int) -> bool:
    right_col = cols - 1
    has_left = any(c.position.col == 0 for c in allies)
    has_right = any(c.position.col == right_col for c in allies)
    return has_left and has_right


FormationCheck = Callable[[List[BattleCard], BattleCard, int, int], bool]

FORMATION_PRIORITY: List[Tuple[FormationType, FormationCheck]] = [
    (FormationType.SIEGE, _check_siege),
    (FormationType.PHALANX, _check_phalanx),
    (FormationType.VANGUARD, _check_vanguard),
    (FormationType.ARCHER_LINE, _check_archer_line),
    (FormationType.FLANKING, _check_flanking),
]


def calculate_formation_bonus(card: BattleCard, battlefield: Battlefield) -> FormationBonus:
    """
    Formation bonus for a card given the current battlefield.

    Pure: depends only on the owner's card positions and the evaluated
    card's own row. Returns the first matching formation, SKIRMISH otherwise.
    """
    rows, cols = _grid_shape(battlefield)
    allies = _ally_cards(card.owner_id, battlefield)

    for formation_type, check in FORMATION_PRIORITY:
        if check(allies, card, rows, cols):
            return FORMATION_BONUSES[formation_type]

    return FORMATION_BONUSES[FormationType.SKIRMISH]


# =============================================================================
# Descriptions and planning helpers
# =============================================================================

def describe_formation(formation_type: FormationType) -> str:
    return FORMATION_DESCRIPTIONS.get(formation_type, "Standard formation")


def formation_tactics(formation_type: FormationType) -> str:
    return FORMATION_TACTICS.get(formation_type, "Position units for formation bonuses.")


def suggest_positioning(formation_type: FormationType, rows: int = 3, cols: int = 3) -> List[Position]:
    """Cells to fill to reach the given formation on a rows x cols grid."""
    back_row = rows - 1
    right_col = cols - 1
    middle_row = rows // 2

    if formation_type in (FormationType.VANGUARD, FormationType.SIEGE):
        return [Position(0, c) for c in range(cols)]
    if formation_type == FormationType.PHALANX:
        return [Position(middle_row, c) for c in range(min(3, cols))]
    if formation_type == FormationType.ARCHER_LINE:
        return [Position(back_row, c) for c in range(cols)]
    if formation_type == FormationType.FLANKING:
        return [
            Position(0, 0),
            Position(min(1, back_row), 0),
            Position(0, right_col),
            Position(min(1, back_row), right_col),
        ]
    return [Position(middle_row, cols // 2), Position(0, 0), Position(back_row, right_col)]


@dataclass
class FormationAnalysis:
    """Current formation of a player and formations within reach."""
    current: FormationType
    suggestions: List[Tuple[FormationType, int]] = field(default_factory=list)  # (formation, cards needed)

    def to_dict(self) -> Dict:
        return {
            "current": self.current.value,
            "description": describe_formation(self.current),
            "tactics": formation_tactics(self.current),
            "suggestions": [
                {"formation": f.value, "cards_needed": n, "tactics": formation_tactics(f)}
                for f, n in self.suggestions
            ],
        }


def analyze_formation_opportunities(owner_id: str, battlefield: Battlefield) -> FormationAnalysis:
    """Current formation for a player's first card and the cheapest formations to reach."""
    rows, cols = _grid_shape(battlefield)
    allies = _ally_cards(owner_id, battlefield)

    if not allies:
        return FormationAnalysis(
            current=FormationType.SKIRMISH,
            suggestions=[(FormationType.VANGUARD, 2), (FormationType.ARCHER_LINE, 2)],
        )

    current = calculate_formation_bonus(allies[0], battlefield).type

    front = sum(1 for c in allies if c.position.row == 0)
    back = sum(1 for c in allies if c.position.row == rows - 1)
    left = sum(1 for c in allies if c.position.col == 0)
    right = sum(1 for c in allies if c.position.col == cols - 1)

    suggestions: List[Tuple[FormationType, int]] = []
    if front < 2:
        suggestions.append((FormationType.VANGUARD, 2 - front))
    if back < 2:
        suggestions.append((FormationType.ARCHER_LINE, 2 - back))
    if left == 0 or right == 0:
        suggestions.append((FormationType.FLANKING, int(left == 0) + int(right == 0)))

    return FormationAnalysis(current=current, suggestions=suggestions)

