"""
Ability Engine.

Handles card abilities during battle:
- Passive keywords matched by ability name (regeneration, thorns)
- Active ability effects (damage, heal, buff, debuff)
- Status effect stat modifiers and per-turn ticking

Functions here edit the cards they are given. The battle engine only ever
passes cards that live in its private working copy of the state.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from siegefront.core.models import (
    AbilityEffectKind,
    AbilityTarget,
    BattleCard,
    BattleState,
    CardAbility,
    Stat,
    StatusEffect,
    StatusEffectType,
)


REGENERATION_KEYWORD = "regen"
THORNS_KEYWORD = "thorns"
REGENERATION_AMOUNT = 2
THORNS_REFLECT_RATIO = 0.3


# =============================================================================
# Passive keywords
# =============================================================================

def has_keyword(card: BattleCard, keyword: str) -> bool:
    """True if any ability name on the card contains the keyword (case-insensitive)."""
    keyword = keyword.lower()
    return any(keyword in ability.name.lower() for ability in card.abilities)


def regeneration_amount(card: BattleCard) -> int:
    """HP a regenerating card heals at its owner's turn start, never above max_hp."""
    if not has_keyword(card, REGENERATION_KEYWORD) or card.hp >= card.max_hp:
        return 0
    return min(REGENERATION_AMOUNT, card.max_hp - card.hp)


def thorns_damage(card: BattleCard, damage_received: int) -> int:
    """Damage reflected back at an attacker by a card with thorns (30%, floored)."""
    if damage_received <= 0 or not has_keyword(card, THORNS_KEYWORD):
        return 0
    return int(damage_received * THORNS_REFLECT_RATIO)


# =============================================================================
# Status effects
# =============================================================================

def status_modifier(card: BattleCard, stat: Stat) -> int:
    """Flat bonus to a stat from buffs and debuffs. Added before multipliers."""
    total = 0
    for effect in card.status_effects:
        if effect.stat != stat:
            continue
        if effect.type == StatusEffectType.BUFF:
            total += abs(effect.modifier)
        elif effect.type == StatusEffectType.DEBUFF:
            total -= abs(effect.modifier)
    return total


def is_stunned(card: BattleCard) -> bool:
    return any(e.type == StatusEffectType.STUN for e in card.status_effects)


def tick_status_effects(card: BattleCard) -> int:
    """
    Advance a card's status effects by one turn.

    Poison deals its modifier as damage, then every effect loses one turn of
    duration and expired effects are removed.

    Returns:
        Poison damage dealt to the card
    """
    poison = sum(
        abs(e.modifier) for e in card.status_effects
        if e.type == StatusEffectType.POISON
    )
    if poison:
        card.hp -= poison

    remaining = []
    for effect in card.status_effects:
        effect.duration -= 1
        if effect.duration > 0:
            remaining.append(effect)
    card.status_effects = remaining
    return poison


def tick_cooldowns(card: BattleCard) -> None:
    for ability in card.abilities:
        if ability.current_cooldown > 0:
            ability.current_cooldown -= 1


# =============================================================================
# Active abilities
# =============================================================================

@dataclass
class AbilityOutcome:
    """What an ability did, for the battle log and the action result."""
    description: str
    damage_dealt: int = 0
    affected: List[BattleCard] = field(default_factory=list)


def ability_targets(
    state: BattleState,
    caster: BattleCard,
    ability: CardAbility,
    target: Optional[BattleCard],
) -> List[BattleCard]:
    """Cards an ability resolves against. Target legality is checked by the engine."""
    effect = ability.effect
    if effect is None:
        return []
    if effect.target == AbilityTarget.AREA:
        return [c for c in state.iter_cards() if c.owner_id != caster.owner_id]
    if effect.target == AbilityTarget.SELF:
        return [caster]
    if effect.target == AbilityTarget.ALLY:
        return [target or caster]
    return [target] if target is not None else []


def apply_ability_effect(
    state: BattleState,
    caster: BattleCard,
    ability: CardAbility,
    target: Optional[BattleCard] = None,
) -> AbilityOutcome:
    """
    Resolve an ability's effect on the battle cards it targets.

    Damage ignores defense. Heals stop at max_hp. Buffs and debuffs attach a
    StatusEffect that lasts `effect.duration` of the owner's turns.

    Args:
        state: Working copy of the battle state
        caster: Card using the ability
        ability: The ability being used
        target: Chosen target card for single/ally abilities

    Returns:
        AbilityOutcome with a log description and total damage dealt
    """
    effect = ability.effect
    if effect is None:
        return AbilityOutcome(description=f"{caster.name} used {ability.name}")

    targets = ability_targets(state, caster, ability, target)
    outcome = AbilityOutcome(description="", affected=targets)
    parts = []

    for card in targets:
        if effect.kind == AbilityEffectKind.DAMAGE:
            dealt = max(0, effect.amount)
            card.hp -= dealt
            outcome.damage_dealt += dealt
            parts.append(f"{dealt} damage to {card.name}")

        elif effect.kind == AbilityEffectKind.HEAL:
            healed = max(0, min(effect.amount, card.max_hp - card.hp))
            card.hp += healed
            parts.append(f"healed {card.name} for {healed}")

        else:
            is_buff = effect.kind == AbilityEffectKind.BUFF
            card.status_effects.append(StatusEffect(
                id=f"{ability.id}-{card.id}-{len(card.status_effects)}",
                type=StatusEffectType.BUFF if is_buff else StatusEffectType.DEBUFF,
                modifier=abs(effect.amount) if is_buff else -abs(effect.amount),
                duration=max(1, effect.duration),
                stat=effect.stat,
                source=ability.name,
            ))
            sign = "+" if is_buff else "-"
            stat_name = effect.stat.value if effect.stat else "stats"
            parts.append(f"{card.name} {sign}{abs(effect.amount)} {stat_name}")

    detail = ", ".join(parts) if parts else "no effect"
    outcome.description = f"{caster.name} used {ability.name}: {detail}"
    return outcome
