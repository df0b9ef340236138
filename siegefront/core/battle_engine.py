"""
Battle Engine.

Core state machine for a Siegefront battle. Handles setup, action
validation and resolution, turn transitions and victory checks.

Every transition copies the incoming BattleState, edits the copy and returns
it. A rejected action hands back the very same state object together with
the IllegalActionError that explains the rejection.
"""
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
import copy
import logging
import math

from siegefront.core.abilities import (
    apply_ability_effect,
    is_stunned,
    regeneration_amount,
    status_modifier,
    thorns_damage,
    tick_cooldowns,
    tick_status_effects,
)
from siegefront.core.actions import (
    ActionType,
    AttackCard,
    AttackCastle,
    BattleAction,
    DeployCard,
    EndTurn,
    Surrender,
    UseAbility,
    action_actor,
)
from siegefront.core.dice import RandomSource, ensure_rng
from siegefront.core.errors import (
    AbilityOnCooldownError,
    BattleOverError,
    DuplicateCardError,
    IllegalActionError,
    InvalidPlayerCountError,
    InvalidPositionError,
    NotYourTurnError,
    OutOfRangeError,
    ResourceExhaustedError,
    TargetInvalidError,
)
from siegefront.core.formation import calculate_formation_bonus
from siegefront.core.models import (
    AbilityTarget,
    BattleCard,
    BattleConfig,
    BattleLogEntry,
    BattlePhase,
    BattleState,
    CardAbility,
    CombatType,
    Player,
    Position,
    Stat,
    VictoryCondition,
    VictoryResult,
    empty_battlefield,
)
from siegefront.core.weather import (
    create_weather_effect,
    describe_weather,
    generate_random_weather,
    should_change_weather,
)

logger = logging.getLogger(__name__)

SYSTEM_PLAYER_ID = "system"
MELEE_ROW_RANGE = 1


@dataclass
class ActionResult:
    """Result of executing an action against a battle state."""
    state: BattleState
    success: bool
    description: str
    error: Optional[IllegalActionError] = None
    damage_dealt: int = 0

    def to_dict(self) -> Dict:
        return {
            "success": self.success,
            "description": self.description,
            "damage_dealt": self.damage_dealt,
            "error": self.error.to_dict()["error"] if self.error else None,
            "state": self.state.to_dict(),
        }


@dataclass(frozen=True)
class EffectiveStats:
    """Card stats after status effects, formation and weather."""
    attack: float
    defense: float
    speed: float


# =============================================================================
# Read-only helpers (shared with the AI)
# =============================================================================

def find_card(state: BattleState, card_id: str, owner_id: Optional[str] = None) -> Optional[BattleCard]:
    """Look up a battlefield card by id, optionally among one player's cards only."""
    for card in state.iter_cards():
        if card.id == card_id and (owner_id is None or card.owner_id == owner_id):
            return card
    return None


def find_enemy_card(state: BattleState, player_id: str, card_id: str) -> Optional[BattleCard]:
    for card in state.iter_cards():
        if card.id == card_id and card.owner_id != player_id:
            return card
    return None


def ability_target(state: BattleState, action: UseAbility, ability: CardAbility) -> Optional[BattleCard]:
    """Single-target abilities aim at enemy cards, every other kind at the caster's side."""
    if not action.target_id:
        return None
    if ability.effect.target == AbilityTarget.SINGLE:
        return find_enemy_card(state, action.player_id, action.target_id)
    return find_card(state, action.target_id, owner_id=action.player_id)


def can_attack_target(attacker: BattleCard, target: BattleCard) -> bool:
    """
    Combat range rule.

    Melee: only targets within one row
    Ranged/Hybrid: any row
    """
    if attacker.combat_type in (CombatType.RANGED, CombatType.HYBRID):
        return True
    return abs(attacker.position.row - target.position.row) <= MELEE_ROW_RANGE


def empty_positions(state: BattleState) -> List[Position]:
    """Cells a card can be deployed to: empty and not blocked."""
    return [
        Position(row, col)
        for row in range(state.rows)
        for col in range(state.cols)
        if state.battlefield[row][col] is None and Position(row, col) not in state.blocked_tiles
    ]


def get_effective_stats(card: BattleCard, state: BattleState) -> EffectiveStats:
    """
    Apply modifiers in one fixed order: status effects are added to the base
    stat, then the formation multiplier, then the weather multiplier.
    """
    formation = calculate_formation_bonus(card, state.battlefield)
    weather = state.weather

    attack = (card.attack + status_modifier(card, Stat.ATTACK)) * formation.attack_mod
    defense = (card.defense + status_modifier(card, Stat.DEFENSE)) * formation.defense_mod
    speed = (card.speed + status_modifier(card, Stat.SPEED)) * formation.speed_mod

    if weather is not None:
        attack *= weather.attack_mod
        defense *= weather.defense_mod
        speed *= weather.speed_mod

    return EffectiveStats(attack=attack, defense=defense, speed=speed)


def calculate_card_damage(attacker: BattleCard, defender: BattleCard, state: BattleState) -> int:
    """floor(max(0, effective attack - effective defense))"""
    attack = get_effective_stats(attacker, state).attack
    defense = get_effective_stats(defender, state).defense
    return math.floor(max(0.0, attack - defense))


def calculate_castle_damage(attacker: BattleCard, state: BattleState) -> int:
    """Castles have no defense: floor(effective attack)."""
    return max(0, math.floor(get_effective_stats(attacker, state).attack))


# =============================================================================
# Validation
# =============================================================================

def _validate_attacker(state: BattleState, actor: str, card_id: str) -> Tuple[Optional[BattleCard], Optional[IllegalActionError]]:
    card = find_card(state, card_id, owner_id=actor)
    if card is None:
        if find_card(state, card_id) is not None:
            return None, TargetInvalidError("You do not control that card")
        return None, TargetInvalidError("Card is not on the battlefield")
    if is_stunned(card):
        return None, TargetInvalidError(f"{card.name} is stunned")
    return card, None


def _validate_deploy(state: BattleState, action: DeployCard) -> Optional[IllegalActionError]:
    player = state.players[action.player_id]
    card = next((c for c in player.hand if c.id == action.card_id), None)
    if card is None:
        return TargetInvalidError("Card is not in your hand")

    pos = action.position
    if not state.in_bounds(pos):
        return InvalidPositionError(pos.row, pos.col, "Position is outside the battlefield")
    if pos in state.blocked_tiles:
        return InvalidPositionError(pos.row, pos.col, "Position is blocked")
    if state.card_at(pos) is not None:
        return InvalidPositionError(pos.row, pos.col, "Position is occupied")

    if player.mana < card.mana_cost:
        return ResourceExhaustedError("mana", player.mana, card.mana_cost)
    return None


def _validate_attack_card(state: BattleState, action: AttackCard) -> Optional[IllegalActionError]:
    attacker, error = _validate_attacker(state, action.player_id, action.attacker_card_id)
    if error:
        return error
    if attacker.has_attacked:
        return TargetInvalidError(f"{attacker.name} has already attacked this turn")

    target = find_enemy_card(state, action.player_id, action.target_card_id)
    if target is None:
        if find_card(state, action.target_card_id, owner_id=action.player_id) is not None:
            return TargetInvalidError("Cannot attack your own cards")
        return TargetInvalidError("Target is not on the battlefield")
    if target.hp <= 0:
        return TargetInvalidError(f"{target.name} is already defeated")
    if not can_attack_target(attacker, target):
        distance = abs(attacker.position.row - target.position.row)
        return OutOfRangeError(distance, MELEE_ROW_RANGE)
    return None


def _validate_attack_castle(state: BattleState, action: AttackCastle) -> Optional[IllegalActionError]:
    attacker, error = _validate_attacker(state, action.player_id, action.attacker_card_id)
    if error:
        return error
    if attacker.has_attacked:
        return TargetInvalidError(f"{attacker.name} has already attacked this turn")
    if action.target_player_id not in state.players:
        return TargetInvalidError("Target player does not exist")
    if action.target_player_id == action.player_id:
        return TargetInvalidError("Cannot attack your own castle")
    return None


def _validate_use_ability(state: BattleState, action: UseAbility) -> Optional[IllegalActionError]:
    card, error = _validate_attacker(state, action.player_id, action.card_id)
    if error:
        return error

    ability = next((a for a in card.abilities if a.id == action.ability_id), None)
    if ability is None:
        return TargetInvalidError("Ability not found")
    if ability.effect is None:
        return TargetInvalidError(f"{ability.name} is a passive ability")
    if not ability.is_ready:
        return AbilityOnCooldownError(ability.name, ability.current_cooldown)

    player = state.players[action.player_id]
    if player.mana < ability.mana_cost:
        return ResourceExhaustedError("mana", player.mana, ability.mana_cost)

    target_kind = ability.effect.target
    if target_kind == AbilityTarget.SINGLE:
        target = find_enemy_card(state, action.player_id, action.target_id) if action.target_id else None
        if target is None:
            return TargetInvalidError(f"{ability.name} needs an enemy card as target")
        if target.hp <= 0:
            return TargetInvalidError(f"{target.name} is already defeated")
    elif target_kind == AbilityTarget.ALLY and action.target_id:
        target = find_card(state, action.target_id, owner_id=action.player_id)
        if target is None:
            return TargetInvalidError(f"{ability.name} needs an allied card as target")
    return None


_VALIDATORS: Dict[ActionType, Callable[[BattleState, BattleAction], Optional[IllegalActionError]]] = {
    ActionType.DEPLOY_CARD: _validate_deploy,
    ActionType.ATTACK_CARD: _validate_attack_card,
    ActionType.ATTACK_CASTLE: _validate_attack_castle,
    ActionType.USE_ABILITY: _validate_use_ability,
}


def validate_action(state: BattleState, action: BattleAction) -> Optional[IllegalActionError]:
    """
    Check an action against the rules without applying it.

    Returns:
        None if the action is legal, otherwise the IllegalActionError describing why not
    """
    if state.is_over:
        return BattleOverError(state.winner)

    actor = action_actor(action)
    if isinstance(action, EndTurn) and actor is None:
        return None
    if actor not in state.players or actor != state.active_player_id:
        return NotYourTurnError(actor, state.active_player_id)

    validator = _VALIDATORS.get(action.type)
    if validator is None:
        return None
    return validator(state, action)


# =============================================================================
# Resolution (operates on a private copy)
# =============================================================================

def _discard_card(state: BattleState, card: BattleCard) -> None:
    state.battlefield[card.position.row][card.position.col] = None
    discarded = card.to_card()
    discarded.hp = discarded.max_hp
    state.players[card.owner_id].discard.append(discarded)


def _remove_destroyed(state: BattleState) -> List[str]:
    """Move every card at hp <= 0 to its owner's discard pile. Returns their names."""
    destroyed = [card for card in state.iter_cards() if card.hp <= 0]
    for card in destroyed:
        _discard_card(state, card)
    return [card.name for card in destroyed]


def _with_destroyed(description: str, destroyed: List[str]) -> str:
    if not destroyed:
        return description
    return f"{description}; destroyed: {', '.join(destroyed)}"


def _resolve_deploy(state: BattleState, action: DeployCard) -> Tuple[str, int]:
    player = state.players[action.player_id]
    index = next(i for i, c in enumerate(player.hand) if c.id == action.card_id)
    card = player.hand[index]

    battle_card = BattleCard.from_card(
        card, action.position, player.id, multiplier=1 + player.lp_bonus
    )
    state.battlefield[action.position.row][action.position.col] = battle_card
    del player.hand[index]
    player.mana -= card.mana_cost

    return f"{card.name} deployed to {action.position}", 0


def _resolve_attack_card(state: BattleState, action: AttackCard) -> Tuple[str, int]:
    attacker = find_card(state, action.attacker_card_id, owner_id=action.player_id)
    target = find_enemy_card(state, action.player_id, action.target_card_id)

    damage = calculate_card_damage(attacker, target, state)
    target.hp -= damage
    attacker.has_attacked = True

    description = f"{attacker.name} dealt {damage} damage to {target.name}"
    reflected = thorns_damage(target, damage)
    if reflected:
        attacker.hp -= reflected
        description += f"; thorns dealt {reflected} damage to {attacker.name}"

    return _with_destroyed(description, _remove_destroyed(state)), damage


def _resolve_attack_castle(state: BattleState, action: AttackCastle) -> Tuple[str, int]:
    attacker = find_card(state, action.attacker_card_id, owner_id=action.player_id)
    defender = state.players[action.target_player_id]

    damage = calculate_castle_damage(attacker, state)
    defender.castle_hp = max(0, defender.castle_hp - damage)
    attacker.has_attacked = True
    state.last_damaged_player_id = defender.id

    return f"{attacker.name} dealt {damage} damage to {defender.name}'s castle", damage


def _resolve_use_ability(state: BattleState, action: UseAbility) -> Tuple[str, int]:
    caster = find_card(state, action.card_id, owner_id=action.player_id)
    ability = next(a for a in caster.abilities if a.id == action.ability_id)
    target = ability_target(state, action, ability)

    state.players[action.player_id].mana -= ability.mana_cost
    ability.current_cooldown = ability.cooldown

    outcome = apply_ability_effect(state, caster, ability, target)
    return _with_destroyed(outcome.description, _remove_destroyed(state)), outcome.damage_dealt


def _resolve_surrender(state: BattleState, action: Surrender) -> Tuple[str, int]:
    winner_id = state.opponent_id(action.player_id)
    _declare_winner(state, VictoryResult(winner_id, VictoryCondition.SURRENDER, state.current_turn))
    return f"{state.players[action.player_id].name} surrendered", 0


_RESOLVERS: Dict[ActionType, Callable[[BattleState, BattleAction], Tuple[str, int]]] = {
    ActionType.DEPLOY_CARD: _resolve_deploy,
    ActionType.ATTACK_CARD: _resolve_attack_card,
    ActionType.ATTACK_CASTLE: _resolve_attack_castle,
    ActionType.USE_ABILITY: _resolve_use_ability,
    ActionType.SURRENDER: _resolve_surrender,
}


def _declare_winner(state: BattleState, result: VictoryResult) -> None:
    state.winner = result.winner_id
    state.victory_condition = result.condition
    state.phase = BattlePhase.VICTORY
    logger.info(
        f"Battle {state.id} won by {result.winner_id} "
        f"({result.condition.value}, turn {result.turn})"
    )


def _apply_victory(state: BattleState) -> Optional[VictoryResult]:
    if state.is_over:
        return None
    result = check_victory_conditions(state)
    if result is not None:
        _declare_winner(state, result)
    return result


def _draw_card(player: Player) -> bool:
    if not player.deck:
        return False
    player.hand.append(player.deck.pop(0))
    return True


# =============================================================================
# Public operations
# =============================================================================

def initialize_battle(
    player_a: Player,
    player_b: Player,
    config: Optional[BattleConfig] = None,
    rng: Optional[RandomSource] = None,
) -> BattleState:
    """
    Create the starting state for a battle.

    Decks are shuffled with `rng`, each player is dealt `starting_hand_size`
    cards from the front of their deck and their mana is refilled.
    player_a moves first.

    Args:
        player_a: First-seated player
        player_b: Second-seated player
        config: Rules and map settings; defaults come from application settings
        rng: Random source for shuffles and preset weather

    Returns:
        BattleState in the IN_PROGRESS phase

    Raises:
        InvalidPlayerCountError: if a player is missing or both share an id
        DuplicateCardError: if two cards in the decks or hands share an id
    """
    if player_a is None or player_b is None:
        raise InvalidPlayerCountError("A battle needs two players")
    if player_a.id == player_b.id:
        raise InvalidPlayerCountError("Players must have different ids")

    counts = Counter(card.id for p in (player_a, player_b) for card in p.deck + p.hand)
    duplicates = sorted(card_id for card_id, n in counts.items() if n > 1)
    if duplicates:
        raise DuplicateCardError(duplicates)

    config = config or BattleConfig.from_settings()
    rng = ensure_rng(rng)

    players: Dict[str, Player] = {}
    for source in (player_a, player_b):
        player = copy.deepcopy(source)
        rng.shuffle(player.deck)
        dealt = player.deck[:config.starting_hand_size]
        player.deck = player.deck[config.starting_hand_size:]
        player.hand.extend(dealt)
        player.mana = player.max_mana
        players[player.id] = player

    blocked = {
        pos for pos in config.blocked_tiles
        if 0 <= pos.row < config.rows and 0 <= pos.col < config.cols
    }
    weather = create_weather_effect(config.initial_weather, rng) if config.initial_weather else None

    state = BattleState(
        players=players,
        battlefield=empty_battlefield(config.rows, config.cols),
        current_turn=1,
        active_player_id=player_a.id,
        phase=BattlePhase.IN_PROGRESS,
        weather=weather,
        grid_config=config.grid_config(),
        blocked_tiles=blocked,
        config=config,
    )
    state.battle_log.append(BattleLogEntry(
        turn=1,
        player_id=SYSTEM_PLAYER_ID,
        action="BATTLE_START",
        result=f"Battle initialized: {player_a.name} vs {player_b.name} on {config.map_name}",
    ))

    logger.info(f"Battle {state.id} initialized: {player_a.id} vs {player_b.id}")
    return state


def execute_action(
    state: BattleState,
    action: BattleAction,
    rng: Optional[RandomSource] = None,
) -> ActionResult:
    """
    Validate and apply one action.

    Illegal actions never raise: the result carries the unchanged input state
    and the error. A successful action appends exactly one battle log entry.
    """
    error = validate_action(state, action)
    if error is not None:
        logger.warning(f"Rejected {action.type.value} from {action_actor(action)}: {error.message}")
        return ActionResult(state=state, success=False, description=error.message, error=error)

    if isinstance(action, EndTurn):
        new_state = end_turn(state, rng)
        return ActionResult(
            state=new_state,
            success=True,
            description=new_state.battle_log[-1].result,
        )

    draft = copy.deepcopy(state)
    actor = action_actor(action)
    description, damage = _RESOLVERS[action.type](draft, action)
    _apply_victory(draft)

    draft.battle_log.append(BattleLogEntry(
        turn=draft.current_turn,
        player_id=actor,
        action=action.type.value,
        result=description,
    ))

    logger.info(f"Battle {draft.id} turn {draft.current_turn}: {description}")
    return ActionResult(state=draft, success=True, description=description, damage_dealt=damage)


def end_turn(state: BattleState, rng: Optional[RandomSource] = None) -> BattleState:
    """
    Pass the turn to the other player.

    - Turn number advances when play returns to the first-seated player
    - The new active player's cards are readied, cooldowns and statuses tick,
      regenerating cards heal
    - max_mana grows by one (up to the cap), mana refills, one card is drawn
    - Weather counts down once per full turn and may be re-rolled
    - Victory is re-evaluated

    Returns the input unchanged if the battle is already over.
    """
    if state.is_over:
        return state

    rng = ensure_rng(rng)
    draft = copy.deepcopy(state)
    events: List[str] = []

    order = draft.player_order
    next_index = (order.index(draft.active_player_id) + 1) % len(order)
    draft.active_player_id = order[next_index]
    wrapped = next_index == 0
    if wrapped:
        draft.current_turn += 1

    player = draft.active_player()
    for card in draft.cards_of(player.id):
        card.has_moved = False
        card.has_attacked = False
        tick_cooldowns(card)
        poison = tick_status_effects(card)
        if poison:
            events.append(f"{card.name} took {poison} poison damage")
        if card.hp > 0:
            healed = regeneration_amount(card)
            if healed:
                card.hp += healed
                events.append(f"{card.name} regenerated {healed} HP")

    destroyed = _remove_destroyed(draft)
    if destroyed:
        events.append(f"destroyed: {', '.join(destroyed)}")

    player.max_mana = min(player.max_mana + 1, draft.config.mana_cap)
    player.mana = player.max_mana
    _draw_card(player)

    if wrapped and draft.weather is not None:
        draft.weather.turns_remaining -= 1
        if draft.weather.turns_remaining <= 0:
            draft.weather = None
            events.append("Weather cleared")

    first_roll = draft.current_turn == 1 and draft.config.initial_weather is None
    if (wrapped or first_roll) and should_change_weather(draft.current_turn, rng):
        draft.weather = generate_random_weather(rng)
        events.append(describe_weather(draft.weather.type if draft.weather else None))

    _apply_victory(draft)

    result = f"{player.name}'s turn begins"
    if events:
        result = f"{result} ({'; '.join(events)})"
    draft.battle_log.append(BattleLogEntry(
        turn=draft.current_turn,
        player_id=player.id,
        action="TURN_START",
        result=result,
    ))

    logger.info(f"Battle {draft.id}: turn {draft.current_turn}, {player.id} active")
    return draft


def check_victory_conditions(state: BattleState) -> Optional[VictoryResult]:
    """
    Determine whether the battle has been won.

    Checked in order:
    1. CASTLE_DESTROYED: a castle at 0 HP loses. If both are down, the player
       whose castle was damaged last loses (or the non-active player when that
       is unknown).
    2. TURN_LIMIT: once current_turn reaches the limit the higher castle HP
       wins; a tie goes to the first-seated player.
    3. RESOURCE_EXHAUSTION (opt-in): a player with no cards in hand, deck or
       on the battlefield loses.

    A battle that already has a winner (e.g. by surrender) reports it as is.
    """
    if state.winner is not None:
        condition = state.victory_condition or VictoryCondition.CASTLE_DESTROYED
        return VictoryResult(state.winner, condition, state.current_turn)

    order = state.player_order
    fallen = [pid for pid in order if state.players[pid].castle_hp <= 0]
    if len(fallen) == 1:
        return VictoryResult(state.opponent_id(fallen[0]), VictoryCondition.CASTLE_DESTROYED, state.current_turn)
    if len(fallen) > 1:
        loser = state.last_damaged_player_id
        if loser not in state.players:
            loser = state.opponent_id(state.active_player_id)
        return VictoryResult(state.opponent_id(loser), VictoryCondition.CASTLE_DESTROYED, state.current_turn)

    limit = state.config.turn_limit
    if limit and state.current_turn >= limit:
        # max() keeps the first-seated player on ties
        winner = max(order, key=lambda pid: state.players[pid].castle_hp)
        return VictoryResult(winner, VictoryCondition.TURN_LIMIT, state.current_turn)

    if state.config.exhaustion_victory:
        for pid in order:
            player = state.players[pid]
            if not player.hand and not player.deck and not state.cards_of(pid):
                return VictoryResult(state.opponent_id(pid), VictoryCondition.RESOURCE_EXHAUSTION, state.current_turn)

    return None
