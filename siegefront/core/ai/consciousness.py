"""
Consciousness AI - Core Decision Framework.

A six-step decision loop that makes the AI feel intentional rather than
optimal:

1. Validate: clamp out-of-range values in a private copy of the state
2. Self-assessment: confidence from adaptability and recent outcomes
3. Strategic mode: AGGRESSIVE / DEFENSIVE / BUILDING / DESPERATE
4. Enumerate options: every legal action plus END_TURN
5. Score & choose: weighted heuristics plus personality-scaled variance
6. Record: remember the choice and, on the next call, how it turned out

All randomness comes from the injected RandomSource, so a seeded AI makes
the same choices on the same state.
"""
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional
import copy
import logging

from siegefront.core.actions import (
    AttackCard,
    AttackCastle,
    BattleAction,
    DeployCard,
    EndTurn,
    UseAbility,
)
from siegefront.core.ai.scoring import AIMode, ScoringWeights, weights_for
from siegefront.core.abilities import is_stunned, thorns_damage
from siegefront.core.battle_engine import (
    ability_target,
    calculate_card_damage,
    calculate_castle_damage,
    can_attack_target,
    empty_positions,
    find_card,
    find_enemy_card,
    validate_action,
)
from siegefront.core.dice import RandomSource, ensure_rng
from siegefront.core.errors import InvalidStateError
from siegefront.core.formation import calculate_formation_bonus
from siegefront.core.models import (
    AbilityEffectKind,
    AbilityTarget,
    AIPersonality,
    BattleCard,
    BattleState,
    Card,
    Player,
)

logger = logging.getLogger(__name__)

DEFAULT_PERSONALITY = AIPersonality(name="Balanced", title="The Steady Hand")
DEFAULT_VARIANCE_FACTOR = 0.3
DEFAULT_MEMORY_SIZE = 5


# =============================================================================
# Memory
# =============================================================================

@dataclass
class TurnRecord:
    """One decision and, once known, how the board moved afterwards."""
    turn: int
    action_type: str
    description: str
    score: float
    mode: AIMode
    own_castle_hp: int
    enemy_castle_hp: int
    own_cards: int
    enemy_cards: int
    outcome: Optional[float] = None  # in [-1, 1], positive is good for us

    def to_dict(self) -> Dict:
        return {
            "turn": self.turn,
            "action_type": self.action_type,
            "description": self.description,
            "score": round(self.score, 2),
            "mode": self.mode.value,
            "outcome": self.outcome,
        }


@dataclass
class AIMemory:
    """Short rolling memory of past decisions for one AI player."""
    max_size: int = DEFAULT_MEMORY_SIZE
    records: Deque[TurnRecord] = field(default_factory=deque)
    pending: Optional[TurnRecord] = None
    stuck_counter: int = 0
    last_board_hash: str = ""

    def __post_init__(self):
        self.records = deque(self.records, maxlen=self.max_size)

    def recent_outcomes(self) -> List[float]:
        return [r.outcome for r in self.records if r.outcome is not None]

    def average_outcome(self) -> float:
        outcomes = self.recent_outcomes()
        return sum(outcomes) / len(outcomes) if outcomes else 0.0

    def to_dict(self) -> Dict:
        return {
            "records": [r.to_dict() for r in self.records],
            "stuck_counter": self.stuck_counter,
            "average_outcome": round(self.average_outcome(), 3),
        }


@dataclass
class ScoredAction:
    """A candidate action with its heuristic and final (varied) score."""
    action: BattleAction
    base_score: float
    score: float = 0.0
    reasoning: str = ""

    def to_dict(self) -> Dict:
        return {
            "action": self.action.to_dict(),
            "base_score": round(self.base_score, 2),
            "score": round(self.score, 2),
            "reasoning": self.reasoning,
        }


def board_hash(state: BattleState) -> str:
    return "|".join(
        f"{c.id}@{c.position.row},{c.position.col}:{c.hp}" for c in state.iter_cards()
    )


# =============================================================================
# Decision engine
# =============================================================================

class ConsciousnessAI:
    """
    Personality-driven decision engine for AI players.

    Memory and the random source are passed in so callers (the AI strategy)
    own them between calls.
    """

    def __init__(
        self,
        personality: Optional[AIPersonality] = None,
        rng: Optional[RandomSource] = None,
        memory: Optional[AIMemory] = None,
        variance_factor: float = DEFAULT_VARIANCE_FACTOR,
        base_weights: Optional[ScoringWeights] = None,
    ):
        self.personality = personality
        self.rng = ensure_rng(rng)
        self.memory = memory if memory is not None else AIMemory()
        self.variance_factor = variance_factor
        self.base_weights = base_weights or ScoringWeights()
        self.last_decision: Optional[ScoredAction] = None
        self.last_mode: Optional[AIMode] = None
        self.last_confidence: float = 1.0

    def select_action(self, player: Player, state: BattleState) -> BattleAction:
        """
        Main decision entry point.

        Returns END_TURN on a finished battle without touching memory or the
        random source.
        """
        if state.is_over or player.id not in state.players:
            return EndTurn(player_id=player.id)

        personality = self.personality or player.ai_personality or DEFAULT_PERSONALITY

        # 1. Validate
        view = self._sanitize(state)
        me = view.players[player.id]
        enemy = view.opponent_of(player.id)

        # 6 (previous call). Realized outcome of the last decision
        self._settle_pending(me, enemy, view)

        # 2. Self-assessment
        confidence = self._assess_confidence(personality, me, enemy, view)

        # 3. Strategic mode
        mode = self._determine_mode(personality, me, enemy, view, confidence)
        weights = weights_for(mode, personality, self.base_weights)
        logger.debug(f"{personality.name}: confidence {confidence:.2f}, mode {mode.value}")

        # 4. Enumerate options
        candidates = self.generate_options(me, view)

        # 5. Score & choose
        scored = [self._score(action, me, enemy, view, mode, weights) for action in candidates]
        chosen = self._choose(scored, personality)
        logger.debug(
            f"{personality.name} chose {chosen.action.type.value} "
            f"(base {chosen.base_score:.1f}, final {chosen.score:.1f}) from {len(scored)} options"
        )

        # 6. Record
        self._record(chosen, mode, me, enemy, view)
        self.last_decision = chosen
        self.last_mode = mode
        self.last_confidence = confidence
        return chosen.action

    # ── Step 1: validate ─────────────────────────────────────────────────

    def _sanitize(self, state: BattleState) -> BattleState:
        """Copy the state, clamping hp/mana and dropping orphaned or defeated cards."""
        view = copy.deepcopy(state)

        for player in view.players.values():
            clamped = {
                "castle_hp": (player.castle_hp, max(0, min(player.castle_hp, player.max_castle_hp))),
                "mana": (player.mana, max(0, min(player.mana, player.max_mana))),
            }
            for name, (before, after) in clamped.items():
                if before != after:
                    self._report(InvalidStateError(
                        f"{player.id} {name} out of range",
                        {"player": player.id, "field": name, "value": before},
                    ))
                    setattr(player, name, after)

        for row in view.battlefield:
            for col, card in enumerate(row):
                if card is None:
                    continue
                if card.owner_id not in view.players:
                    self._report(InvalidStateError(
                        "Card owner does not exist",
                        {"card": card.id, "owner": card.owner_id},
                    ))
                    row[col] = None
                elif card.hp <= 0:
                    self._report(InvalidStateError(
                        "Defeated card left on the battlefield",
                        {"card": card.id, "hp": card.hp},
                    ))
                    row[col] = None
                elif card.hp > card.max_hp:
                    self._report(InvalidStateError(
                        "Card hp above max_hp",
                        {"card": card.id, "hp": card.hp, "max_hp": card.max_hp},
                    ))
                    card.hp = card.max_hp
        return view

    @staticmethod
    def _report(error: InvalidStateError) -> None:
        logger.warning(f"Sanitized invalid state: {error.message} {error.details}")

    # ── Step 2: self-assessment ──────────────────────────────────────────

    def _settle_pending(self, me: Player, enemy: Player, state: BattleState) -> None:
        pending = self.memory.pending
        if pending is not None:
            enemy_loss = (pending.enemy_castle_hp - enemy.castle_hp) + 5 * (pending.enemy_cards - len(state.cards_of(enemy.id)))
            own_loss = (pending.own_castle_hp - me.castle_hp) + 5 * (pending.own_cards - len(state.cards_of(me.id)))
            pending.outcome = max(-1.0, min(1.0, (enemy_loss - own_loss) / 10.0))
            self.memory.records.append(pending)
            self.memory.pending = None

        current = board_hash(state)
        if current and current == self.memory.last_board_hash:
            self.memory.stuck_counter += 1
        else:
            self.memory.stuck_counter = 0
        self.memory.last_board_hash = current

    def _assess_confidence(self, personality: AIPersonality, me: Player, enemy: Player, state: BattleState) -> float:
        confidence = 0.6 + 0.4 * personality.adaptability * self.memory.average_outcome()
        confidence -= 0.1 * min(self.memory.stuck_counter, 3)
        if me.castle_hp < 0.5 * max(1, enemy.castle_hp):
            confidence -= 0.2
        return max(0.1, min(1.0, confidence))

    # ── Step 3: strategic mode ───────────────────────────────────────────

    def _determine_mode(
        self,
        personality: AIPersonality,
        me: Player,
        enemy: Player,
        state: BattleState,
        confidence: float,
    ) -> AIMode:
        hp_ratio = me.castle_hp / max(1, enemy.castle_hp)
        own_cards = len(state.cards_of(me.id))
        card_diff = own_cards - len(state.cards_of(enemy.id))

        if hp_ratio < 0.4:
            return AIMode.DESPERATE

        tempo = personality.aggression * (1 + 0.25 * card_diff) * min(hp_ratio, 2.0) * (0.5 + confidence)
        caution = personality.patience * (1 - 0.25 * card_diff)

        if own_cards == 0:
            return AIMode.BUILDING
        if card_diff <= -2 and tempo < caution:
            return AIMode.DEFENSIVE
        if tempo >= caution:
            return AIMode.AGGRESSIVE
        return AIMode.BUILDING

    # ── Step 4: enumerate options ────────────────────────────────────────

    def generate_options(self, me: Player, state: BattleState) -> List[BattleAction]:
        """Every legal action for the player, END_TURN always last."""
        options: List[BattleAction] = []
        if state.active_player_id != me.id:
            return [EndTurn(player_id=me.id)]

        cells = empty_positions(state)
        for card in me.hand:
            if card.mana_cost <= me.mana:
                options.extend(DeployCard(me.id, card.id, pos) for pos in cells)

        enemy_id = state.opponent_id(me.id)
        enemy_cards = [c for c in state.cards_of(enemy_id) if c.hp > 0]
        own_cards = state.cards_of(me.id)

        for card in own_cards:
            if is_stunned(card):
                continue
            if not card.has_attacked:
                options.extend(
                    AttackCard(me.id, card.id, target.id)
                    for target in enemy_cards
                    if can_attack_target(card, target)
                )
                options.append(AttackCastle(me.id, card.id, enemy_id))

            for ability in card.abilities:
                effect = ability.effect
                if effect is None or not ability.is_ready or ability.mana_cost > me.mana:
                    continue
                if effect.target == AbilityTarget.SINGLE:
                    options.extend(UseAbility(me.id, card.id, ability.id, t.id) for t in enemy_cards)
                elif effect.target == AbilityTarget.ALLY:
                    options.extend(UseAbility(me.id, card.id, ability.id, t.id) for t in own_cards)
                else:
                    options.append(UseAbility(me.id, card.id, ability.id))

        legal = [a for a in options if validate_action(state, a) is None]
        legal.append(EndTurn(player_id=me.id))
        return legal

    # ── Step 5: score & choose ───────────────────────────────────────────

    def _score(
        self,
        action: BattleAction,
        me: Player,
        enemy: Player,
        state: BattleState,
        mode: AIMode,
        w: ScoringWeights,
    ) -> ScoredAction:
        if isinstance(action, DeployCard):
            card = next(c for c in me.hand if c.id == action.card_id)
            score = self._score_deploy(card, action, me, state, mode, w)
        elif isinstance(action, AttackCard):
            score = self._score_attack_card(action, state, w)
        elif isinstance(action, AttackCastle):
            score = self._score_attack_castle(action, enemy, state, w)
        elif isinstance(action, UseAbility):
            score = self._score_ability(action, me, state, w)
        else:
            score = w.end_turn

        return ScoredAction(
            action=action,
            base_score=score,
            reasoning=f"{action.describe()} scored {score:.1f} in {mode.value} mode",
        )

    def _score_deploy(
        self,
        card: Card,
        action: DeployCard,
        me: Player,
        state: BattleState,
        mode: AIMode,
        w: ScoringWeights,
    ) -> float:
        score = w.base_deploy + w.deploy_mode_bonus
        score += card.attack * w.card_attack + card.hp * w.card_hp
        score += (card.attack + card.hp) / max(1, card.mana_cost) * w.mana_efficiency

        row = action.position.row
        if mode in (AIMode.AGGRESSIVE, AIMode.DESPERATE) and row == 0:
            score += w.position_bonus
        if mode in (AIMode.DEFENSIVE, AIMode.BUILDING) and row == state.rows - 1:
            score += w.position_bonus

        # Formation the new card would join
        placed = BattleCard.from_card(card, action.position, me.id, 1 + me.lp_bonus)
        battlefield = [list(r) for r in state.battlefield]
        battlefield[row][action.position.col] = placed
        bonus = calculate_formation_bonus(placed, battlefield)
        score += (bonus.attack_mod + bonus.defense_mod - 2.0) * w.formation
        return max(0.0, score)

    def _score_attack_card(self, action: AttackCard, state: BattleState, w: ScoringWeights) -> float:
        attacker = find_card(state, action.attacker_card_id, owner_id=action.player_id)
        target = find_enemy_card(state, action.player_id, action.target_card_id)
        damage = calculate_card_damage(attacker, target, state)
        if damage <= 0:
            return w.end_turn * 0.5

        score = w.base_attack_card + w.attack_mode_bonus + damage * w.damage
        if damage >= target.hp:
            score += w.kill_bonus
        score += target.attack * w.threat
        score -= thorns_damage(target, damage) * w.thorns_penalty
        return max(0.0, score)

    def _score_attack_castle(self, action: AttackCastle, enemy: Player, state: BattleState, w: ScoringWeights) -> float:
        attacker = find_card(state, action.attacker_card_id, owner_id=action.player_id)
        damage = calculate_castle_damage(attacker, state)
        if damage <= 0:
            return w.end_turn * 0.5

        score = w.base_attack_castle + w.castle_mode_bonus + damage * w.castle_damage
        if damage >= enemy.castle_hp:
            score += w.lethal_bonus
        return score

    def _score_ability(self, action: UseAbility, me: Player, state: BattleState, w: ScoringWeights) -> float:
        caster = find_card(state, action.card_id, owner_id=action.player_id)
        ability = next(a for a in caster.abilities if a.id == action.ability_id)
        effect = ability.effect
        target = ability_target(state, action, ability)

        if effect.kind == AbilityEffectKind.DAMAGE:
            if effect.target == AbilityTarget.AREA:
                victims = [c for c in state.iter_cards() if c.owner_id != me.id]
            else:
                victims = [target] if target else []
            if not victims:
                return w.end_turn * 0.5
            score = w.base_ability + effect.amount * w.damage * len(victims)
            score += w.kill_bonus * sum(1 for v in victims if effect.amount >= v.hp)
        elif effect.kind == AbilityEffectKind.HEAL:
            patient = caster if effect.target == AbilityTarget.SELF else (target or caster)
            healed = min(effect.amount, patient.max_hp - patient.hp)
            if healed <= 0:
                return w.end_turn * 0.5
            score = w.base_ability + healed * w.heal
        else:
            score = w.base_ability + abs(effect.amount) * max(1, effect.duration) * w.buff

        score -= ability.mana_cost * w.mana_cost
        return max(0.0, score)

    def _choose(self, scored: List[ScoredAction], personality: AIPersonality) -> ScoredAction:
        """Apply variance, take the maximum, break ties with the same rng."""
        spread = personality.creativity * self.variance_factor
        for option in scored:
            option.score = option.base_score * (1 + (self.rng.random() - 0.5) * spread)

        best = max(option.score for option in scored)
        top = [option for option in scored if option.score == best]
        return top[0] if len(top) == 1 else self.rng.choice(top)

    # ── Step 6: record ───────────────────────────────────────────────────

    def _record(self, chosen: ScoredAction, mode: AIMode, me: Player, enemy: Player, state: BattleState) -> None:
        self.memory.pending = TurnRecord(
            turn=state.current_turn,
            action_type=chosen.action.type.value,
            description=chosen.action.describe(),
            score=chosen.score,
            mode=mode,
            own_castle_hp=me.castle_hp,
            enemy_castle_hp=enemy.castle_hp,
            own_cards=len(state.cards_of(me.id)),
            enemy_cards=len(state.cards_of(enemy.id)),
        )

