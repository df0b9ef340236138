"""
Battle data model.

Cards, players, modifiers and the BattleState snapshot. Everything here is
plain data: the engine copies a state, edits the copy and hands it back, so
a snapshot is never changed after it has been returned. to_dict()/from_dict()
give the JSON-safe form consumed by rendering, persistence and sync layers.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional, Any, Iterator, Set
import uuid


class CardRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class CombatType(str, Enum):
    """Attack reach of a card."""
    MELEE = "melee"    # adjacent rows only
    RANGED = "ranged"  # any row
    HYBRID = "hybrid"  # any row


class PlayerType(str, Enum):
    HUMAN = "human"
    AI = "ai"


class BattlePhase(str, Enum):
    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    VICTORY = "victory"


class FormationType(str, Enum):
    SIEGE = "SIEGE"
    PHALANX = "PHALANX"
    VANGUARD = "VANGUARD"
    ARCHER_LINE = "ARCHER_LINE"
    FLANKING = "FLANKING"
    SKIRMISH = "SKIRMISH"


class WeatherType(str, Enum):
    CLEAR = "CLEAR"
    RAIN = "RAIN"
    STORM = "STORM"
    FOG = "FOG"
    SNOW = "SNOW"
    BLIZZARD = "BLIZZARD"
    SANDSTORM = "SANDSTORM"
    HEATWAVE = "HEATWAVE"
    ARCANE_STORM = "ARCANE_STORM"
    BLOOD_MOON = "BLOOD_MOON"


class VictoryCondition(str, Enum):
    CASTLE_DESTROYED = "CASTLE_DESTROYED"
    TURN_LIMIT = "TURN_LIMIT"
    RESOURCE_EXHAUSTION = "RESOURCE_EXHAUSTION"
    SURRENDER = "SURRENDER"


class Stat(str, Enum):
    ATTACK = "attack"
    DEFENSE = "defense"
    SPEED = "speed"


class AbilityEffectKind(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"


class AbilityTarget(str, Enum):
    SINGLE = "single"  # one enemy card
    AREA = "area"      # every enemy card
    SELF = "self"
    ALLY = "ally"      # one allied card (the caster included)


class StatusEffectType(str, Enum):
    BUFF = "buff"
    DEBUFF = "debuff"
    STUN = "stun"
    POISON = "poison"


# =============================================================================
# Cards
# =============================================================================

@dataclass(frozen=True)
class Position:
    """A battlefield cell. Row 0 is the front row, the last row is the back row."""
    row: int
    col: int

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, data: Any) -> "Position":
        if isinstance(data, Position):
            return data
        if isinstance(data, (list, tuple)):
            return cls(row=int(data[0]), col=int(data[1]))
        return cls(row=int(data["row"]), col=int(data["col"]))

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


@dataclass
class AbilityEffect:
    """What an activated ability does when it resolves."""
    kind: AbilityEffectKind
    amount: int = 0
    target: AbilityTarget = AbilityTarget.SINGLE
    stat: Optional[Stat] = None  # buff/debuff only
    duration: int = 0            # buff/debuff only

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "amount": self.amount,
            "target": self.target.value,
            "stat": self.stat.value if self.stat else None,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AbilityEffect":
        stat = data.get("stat")
        return cls(
            kind=AbilityEffectKind(data["kind"]),
            amount=int(data.get("amount", 0)),
            target=AbilityTarget(data.get("target", AbilityTarget.SINGLE.value)),
            stat=Stat(stat) if stat else None,
            duration=int(data.get("duration", 0)),
        )


@dataclass
class CardAbility:
    """An ability on a card. Abilities without an effect are passive keywords."""
    id: str
    name: str
    description: str = ""
    mana_cost: int = 0
    cooldown: int = 0
    current_cooldown: int = 0
    effect: Optional[AbilityEffect] = None

    @property
    def is_ready(self) -> bool:
        return self.current_cooldown <= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "mana_cost": self.mana_cost,
            "cooldown": self.cooldown,
            "current_cooldown": self.current_cooldown,
            "effect": self.effect.to_dict() if self.effect else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CardAbility":
        effect = data.get("effect")
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            mana_cost=int(data.get("mana_cost", 0)),
            cooldown=int(data.get("cooldown", 0)),
            current_cooldown=int(data.get("current_cooldown", 0)),
            effect=AbilityEffect.from_dict(effect) if effect else None,
        )


@dataclass
class StatusEffect:
    """A temporary modifier on a battle card, ticked at its owner's turn start."""
    id: str
    type: StatusEffectType
    modifier: int = 0
    duration: int = 1
    stat: Optional[Stat] = None
    source: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "modifier": self.modifier,
            "duration": self.duration,
            "stat": self.stat.value if self.stat else None,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusEffect":
        stat = data.get("stat")
        return cls(
            id=data["id"],
            type=StatusEffectType(data["type"]),
            modifier=int(data.get("modifier", 0)),
            duration=int(data.get("duration", 1)),
            stat=Stat(stat) if stat else None,
            source=data.get("source", ""),
        )


@dataclass
class Card:
    """A card as it sits in a deck or hand. Content is supplied by the caller."""
    id: str
    name: str
    attack: int
    defense: int
    hp: int
    max_hp: int
    speed: int = 1
    mana_cost: int = 1
    rarity: CardRarity = CardRarity.COMMON
    combat_type: CombatType = CombatType.MELEE
    abilities: List[CardAbility] = field(default_factory=list)
    description: str = ""

    def _card_fields(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "attack": self.attack,
            "defense": self.defense,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "speed": self.speed,
            "mana_cost": self.mana_cost,
            "rarity": self.rarity.value,
            "combat_type": self.combat_type.value,
            "abilities": [a.to_dict() for a in self.abilities],
            "description": self.description,
        }

    def to_dict(self) -> Dict[str, Any]:
        return self._card_fields()

    @staticmethod
    def _parse_card_fields(data: Dict[str, Any]) -> Dict[str, Any]:
        hp = int(data["hp"])
        return {
            "id": data["id"],
            "name": data["name"],
            "attack": int(data["attack"]),
            "defense": int(data["defense"]),
            "hp": hp,
            "max_hp": int(data.get("max_hp", hp)),
            "speed": int(data.get("speed", 1)),
            "mana_cost": int(data.get("mana_cost", 1)),
            "rarity": CardRarity(data.get("rarity", CardRarity.COMMON.value)),
            "combat_type": CombatType(data.get("combat_type", CombatType.MELEE.value)),
            "abilities": [CardAbility.from_dict(a) for a in data.get("abilities", [])],
            "description": data.get("description", ""),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        return cls(**cls._parse_card_fields(data))


@dataclass
class BattleCard(Card):
    """A card deployed on the battlefield."""
    position: Position = field(default_factory=lambda: Position(0, 0))
    owner_id: str = ""
    has_moved: bool = False
    has_attacked: bool = False
    status_effects: List[StatusEffect] = field(default_factory=list)

    @classmethod
    def from_card(cls, card: Card, position: Position, owner_id: str, multiplier: float = 1.0) -> "BattleCard":
        """Deploy a hand card, scaling its stats by the owner's multiplier (floored)."""
        def scale(value: int) -> int:
            return int(value * multiplier)

        return cls(
            id=card.id,
            name=card.name,
            attack=scale(card.attack),
            defense=scale(card.defense),
            hp=scale(card.hp),
            max_hp=scale(card.max_hp),
            speed=scale(card.speed),
            mana_cost=card.mana_cost,
            rarity=card.rarity,
            combat_type=card.combat_type,
            abilities=[CardAbility.from_dict(a.to_dict()) for a in card.abilities],
            description=card.description,
            position=position,
            owner_id=owner_id,
        )

    def to_card(self) -> Card:
        """Strip battle-only fields (used when a destroyed card is discarded)."""
        return Card.from_dict(self._card_fields())

    def to_dict(self) -> Dict[str, Any]:
        data = self._card_fields()
        data.update({
            "position": self.position.to_dict(),
            "owner_id": self.owner_id,
            "has_moved": self.has_moved,
            "has_attacked": self.has_attacked,
            "status_effects": [s.to_dict() for s in self.status_effects],
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleCard":
        return cls(
            **cls._parse_card_fields(data),
            position=Position.from_dict(data["position"]),
            owner_id=data["owner_id"],
            has_moved=bool(data.get("has_moved", False)),
            has_attacked=bool(data.get("has_attacked", False)),
            status_effects=[StatusEffect.from_dict(s) for s in data.get("status_effects", [])],
        )


# =============================================================================
# Players
# =============================================================================

@dataclass(frozen=True)
class AIPersonality:
    """Personality traits of an AI opponent, each in [0, 1]."""
    name: str
    title: str = ""
    aggression: float = 0.5     # attack vs. preserve
    creativity: float = 0.5     # scales score variance
    risk_tolerance: float = 0.5
    patience: float = 0.5       # early vs. late game focus
    adaptability: float = 0.5   # how much recent outcomes move confidence
    flavor_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "aggression": self.aggression,
            "creativity": self.creativity,
            "risk_tolerance": self.risk_tolerance,
            "patience": self.patience,
            "adaptability": self.adaptability,
            "flavor_text": self.flavor_text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIPersonality":
        return cls(
            name=data["name"],
            title=data.get("title", ""),
            aggression=float(data.get("aggression", 0.5)),
            creativity=float(data.get("creativity", 0.5)),
            risk_tolerance=float(data.get("risk_tolerance", 0.5)),
            patience=float(data.get("patience", 0.5)),
            adaptability=float(data.get("adaptability", 0.5)),
            flavor_text=data.get("flavor_text", ""),
        )


@dataclass
class Player:
    id: str
    name: str
    type: PlayerType = PlayerType.HUMAN
    castle_hp: int = 50
    max_castle_hp: int = 50
    mana: int = 0
    max_mana: int = 3
    hand: List[Card] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)  # drawn from the front
    discard: List[Card] = field(default_factory=list)
    ai_personality: Optional[AIPersonality] = None
    lp_bonus: float = 0.0  # stat multiplier bonus applied on deploy

    @property
    def is_ai(self) -> bool:
        return self.type == PlayerType.AI

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "castle_hp": self.castle_hp,
            "max_castle_hp": self.max_castle_hp,
            "mana": self.mana,
            "max_mana": self.max_mana,
            "hand": [c.to_dict() for c in self.hand],
            "deck": [c.to_dict() for c in self.deck],
            "discard": [c.to_dict() for c in self.discard],
            "ai_personality": self.ai_personality.to_dict() if self.ai_personality else None,
            "lp_bonus": self.lp_bonus,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        personality = data.get("ai_personality")
        castle_hp = int(data.get("castle_hp", 50))
        return cls(
            id=data["id"],
            name=data["name"],
            type=PlayerType(data.get("type", PlayerType.HUMAN.value)),
            castle_hp=castle_hp,
            max_castle_hp=int(data.get("max_castle_hp", castle_hp)),
            mana=int(data.get("mana", 0)),
            max_mana=int(data.get("max_mana", 3)),
            hand=[Card.from_dict(c) for c in data.get("hand", [])],
            deck=[Card.from_dict(c) for c in data.get("deck", [])],
            discard=[Card.from_dict(c) for c in data.get("discard", [])],
            ai_personality=AIPersonality.from_dict(personality) if personality else None,
            lp_bonus=float(data.get("lp_bonus", 0.0)),
        )


# =============================================================================
# Modifiers
# =============================================================================

@dataclass(frozen=True)
class FormationBonus:
    """Multiplicative modifiers from a formation. Computed on demand, never stored."""
    type: FormationType
    attack_mod: float = 1.0
    defense_mod: float = 1.0
    speed_mod: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "attack_mod": self.attack_mod,
            "defense_mod": self.defense_mod,
            "speed_mod": self.speed_mod,
        }


@dataclass
class WeatherEffect:
    type: WeatherType
    attack_mod: float = 1.0
    defense_mod: float = 1.0
    speed_mod: float = 1.0
    turns_remaining: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "attack_mod": self.attack_mod,
            "defense_mod": self.defense_mod,
            "speed_mod": self.speed_mod,
            "turns_remaining": self.turns_remaining,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherEffect":
        return cls(
            type=WeatherType(data["type"]),
            attack_mod=float(data.get("attack_mod", 1.0)),
            defense_mod=float(data.get("defense_mod", 1.0)),
            speed_mod=float(data.get("speed_mod", 1.0)),
            turns_remaining=int(data.get("turns_remaining", 0)),
        )


# =============================================================================
# Battle
# =============================================================================

@dataclass
class GridConfig:
    rows: int = 3
    cols: int = 3
    name: str = "Classic Arena"
    description: str = "Traditional 3x3 battlefield"
    blocked_tiles: List[Position] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "name": self.name,
            "description": self.description,
            "blocked_tiles": [p.to_dict() for p in self.blocked_tiles],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GridConfig":
        return cls(
            rows=int(data.get("rows", 3)),
            cols=int(data.get("cols", 3)),
            name=data.get("name", "Classic Arena"),
            description=data.get("description", ""),
            blocked_tiles=[Position.from_dict(p) for p in data.get("blocked_tiles", [])],
        )


@dataclass
class BattleConfig:
    """Rules knobs for one battle."""
    starting_hand_size: int = 5
    mana_cap: int = 10
    rows: int = 3
    cols: int = 3
    blocked_tiles: List[Position] = field(default_factory=list)
    turn_limit: int = 50  # 0 disables
    exhaustion_victory: bool = False
    map_name: str = "Classic Arena"
    map_description: str = "Traditional 3x3 battlefield"
    initial_weather: Optional[WeatherType] = None

    @classmethod
    def from_settings(cls, settings=None, **overrides) -> "BattleConfig":
        """Build a config from application settings, then apply overrides."""
        if settings is None:
            from siegefront.config import get_settings
            settings = get_settings()
        values = {
            "starting_hand_size": settings.STARTING_HAND_SIZE,
            "mana_cap": settings.MANA_CAP,
            "rows": settings.GRID_ROWS,
            "cols": settings.GRID_COLS,
            "turn_limit": settings.TURN_LIMIT,
        }
        values.update(overrides)
        return cls(**values)

    def grid_config(self) -> GridConfig:
        return GridConfig(
            rows=self.rows,
            cols=self.cols,
            name=self.map_name,
            description=self.map_description,
            blocked_tiles=list(self.blocked_tiles),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "starting_hand_size": self.starting_hand_size,
            "mana_cap": self.mana_cap,
            "rows": self.rows,
            "cols": self.cols,
            "blocked_tiles": [p.to_dict() for p in self.blocked_tiles],
            "turn_limit": self.turn_limit,
            "exhaustion_victory": self.exhaustion_victory,
            "map_name": self.map_name,
            "map_description": self.map_description,
            "initial_weather": self.initial_weather.value if self.initial_weather else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleConfig":
        weather = data.get("initial_weather")
        return cls(
            starting_hand_size=int(data.get("starting_hand_size", 5)),
            mana_cap=int(data.get("mana_cap", 10)),
            rows=int(data.get("rows", 3)),
            cols=int(data.get("cols", 3)),
            blocked_tiles=[Position.from_dict(p) for p in data.get("blocked_tiles", [])],
            turn_limit=int(data.get("turn_limit", 50)),
            exhaustion_victory=bool(data.get("exhaustion_victory", False)),
            map_name=data.get("map_name", "Classic Arena"),
            map_description=data.get("map_description", ""),
            initial_weather=WeatherType(weather) if weather else None,
        )


@dataclass
class BattleLogEntry:
    turn: int
    player_id: str
    action: str
    result: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "turn": self.turn,
            "player_id": self.player_id,
            "action": self.action,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleLogEntry":
        return cls(
            turn=int(data["turn"]),
            player_id=data["player_id"],
            action=data["action"],
            result=data["result"],
        )


@dataclass(frozen=True)
class VictoryResult:
    winner_id: str
    condition: VictoryCondition
    turn: int

    def to_dict(self) -> Dict[str, Any]:
        return {"winner_id": self.winner_id, "condition": self.condition.value, "turn": self.turn}


Battlefield = List[List[Optional[BattleCard]]]


def empty_battlefield(rows: int, cols: int) -> Battlefield:
    return [[None for _ in range(cols)] for _ in range(rows)]


@dataclass
class BattleState:
    """
    Complete state of a battle.

    `players` keeps seating order: the first entry is the first player, whose
    turn starts every new turn number.
    """
    players: Dict[str, Player]
    battlefield: Battlefield
    id: str = field(default_factory=lambda: f"battle-{uuid.uuid4().hex[:12]}")
    current_turn: int = 1
    active_player_id: str = ""
    phase: BattlePhase = BattlePhase.SETUP
    battle_log: List[BattleLogEntry] = field(default_factory=list)
    weather: Optional[WeatherEffect] = None
    winner: Optional[str] = None
    victory_condition: Optional[VictoryCondition] = None
    grid_config: GridConfig = field(default_factory=GridConfig)
    blocked_tiles: Set[Position] = field(default_factory=set)
    last_damaged_player_id: Optional[str] = None
    config: BattleConfig = field(default_factory=BattleConfig)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def player_order(self) -> List[str]:
        return list(self.players.keys())

    @property
    def first_player_id(self) -> str:
        return self.player_order[0]

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    @property
    def rows(self) -> int:
        return len(self.battlefield)

    @property
    def cols(self) -> int:
        return len(self.battlefield[0]) if self.battlefield else 0

    def active_player(self) -> Player:
        return self.players[self.active_player_id]

    def opponent_id(self, player_id: str) -> str:
        for pid in self.players:
            if pid != player_id:
                return pid
        raise KeyError(f"No opponent for {player_id}")

    def opponent_of(self, player_id: str) -> Player:
        return self.players[self.opponent_id(player_id)]

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.col < self.cols

    def card_at(self, position: Position) -> Optional[BattleCard]:
        if not self.in_bounds(position):
            return None
        return self.battlefield[position.row][position.col]

    def iter_cards(self) -> Iterator[BattleCard]:
        for row in self.battlefield:
            for card in row:
                if card is not None:
                    yield card

    def cards_of(self, owner_id: str) -> List[BattleCard]:
        return [c for c in self.iter_cards() if c.owner_id == owner_id]

    # ── Serialization ────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "current_turn": self.current_turn,
            "active_player_id": self.active_player_id,
            "phase": self.phase.value,
            "players": {pid: p.to_dict() for pid, p in self.players.items()},
            "battlefield": [
                [card.to_dict() if card else None for card in row]
                for row in self.battlefield
            ],
            "battle_log": [e.to_dict() for e in self.battle_log],
            "weather": self.weather.to_dict() if self.weather else None,
            "winner": self.winner,
            "victory_condition": self.victory_condition.value if self.victory_condition else None,
            "grid_config": self.grid_config.to_dict(),
            "blocked_tiles": [p.to_dict() for p in sorted(self.blocked_tiles, key=lambda p: (p.row, p.col))],
            "last_damaged_player_id": self.last_damaged_player_id,
            "config": self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleState":
        weather = data.get("weather")
        condition = data.get("victory_condition")
        return cls(
            id=data["id"],
            current_turn=int(data.get("current_turn", 1)),
            active_player_id=data["active_player_id"],
            phase=BattlePhase(data.get("phase", BattlePhase.IN_PROGRESS.value)),
            players={pid: Player.from_dict(p) for pid, p in data["players"].items()},
            battlefield=[
                [BattleCard.from_dict(card) if card else None for card in row]
                for row in data["battlefield"]
            ],
            battle_log=[BattleLogEntry.from_dict(e) for e in data.get("battle_log", [])],
            weather=WeatherEffect.from_dict(weather) if weather else None,
            winner=data.get("winner"),
            victory_condition=VictoryCondition(condition) if condition else None,
            grid_config=GridConfig.from_dict(data.get("grid_config", {})),
            blocked_tiles={Position.from_dict(p) for p in data.get("blocked_tiles", [])},
            last_damaged_player_id=data.get("last_damaged_player_id"),
            config=BattleConfig.from_dict(data.get("config", {})),
        )
