"""
Battle actions.

A closed set of tagged variants. Each carries only the identifiers the engine
needs to validate and apply it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional, Union

from siegefront.core.models import Position


class ActionType(str, Enum):
    """Types of actions a player can send to the engine."""
    DEPLOY_CARD = "DEPLOY_CARD"
    ATTACK_CARD = "ATTACK_CARD"
    ATTACK_CASTLE = "ATTACK_CASTLE"
    USE_ABILITY = "USE_ABILITY"
    END_TURN = "END_TURN"
    SURRENDER = "SURRENDER"


@dataclass(frozen=True)
class DeployCard:
    player_id: str
    card_id: str
    position: Position
    type: ActionType = ActionType.DEPLOY_CARD

    def describe(self) -> str:
        return f"deploy {self.card_id} to {self.position}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "player_id": self.player_id,
            "card_id": self.card_id,
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class AttackCard:
    player_id: str
    attacker_card_id: str
    target_card_id: str
    type: ActionType = ActionType.ATTACK_CARD

    def describe(self) -> str:
        return f"{self.attacker_card_id} attacks {self.target_card_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "player_id": self.player_id,
            "attacker_card_id": self.attacker_card_id,
            "target_card_id": self.target_card_id,
        }


@dataclass(frozen=True)
class AttackCastle:
    player_id: str
    attacker_card_id: str
    target_player_id: str
    type: ActionType = ActionType.ATTACK_CASTLE

    def describe(self) -> str:
        return f"{self.attacker_card_id} attacks the castle of {self.target_player_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "player_id": self.player_id,
            "attacker_card_id": self.attacker_card_id,
            "target_player_id": self.target_player_id,
        }


@dataclass(frozen=True)
class UseAbility:
    player_id: str
    card_id: str
    ability_id: str
    target_id: Optional[str] = None  # target card id for single/ally effects
    type: ActionType = ActionType.USE_ABILITY

    def describe(self) -> str:
        target = f" on {self.target_id}" if self.target_id else ""
        return f"{self.card_id} uses {self.ability_id}{target}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "player_id": self.player_id,
            "card_id": self.card_id,
            "ability_id": self.ability_id,
            "target_id": self.target_id,
        }


@dataclass(frozen=True)
class EndTurn:
    player_id: Optional[str] = None  # None means "whoever is active"
    type: ActionType = ActionType.END_TURN

    def describe(self) -> str:
        return "end turn"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "player_id": self.player_id}


@dataclass(frozen=True)
class Surrender:
    player_id: str
    type: ActionType = ActionType.SURRENDER

    def describe(self) -> str:
        return f"{self.player_id} surrenders"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "player_id": self.player_id}


BattleAction = Union[DeployCard, AttackCard, AttackCastle, UseAbility, EndTurn, Surrender]


def action_actor(action: BattleAction) -> Optional[str]:
    """The player id an action claims to come from."""
    return action.player_id


def action_from_dict(data: Dict[str, Any]) -> BattleAction:
    """
    Parse a tagged action dict, e.g. {"type": "DEPLOY_CARD", ...}.

    Raises:
        ValueError: unknown type or missing fields
    """
    try:
        action_type = ActionType(data["type"])
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown action type: {data.get('type')!r}") from e

    try:
        if action_type == ActionType.DEPLOY_CARD:
            return DeployCard(
                player_id=data["player_id"],
                card_id=data["card_id"],
                position=Position.from_dict(data["position"]),
            )
        if action_type == ActionType.ATTACK_CARD:
            return AttackCard(
                player_id=data["player_id"],
                attacker_card_id=data["attacker_card_id"],
                target_card_id=data["target_card_id"],
            )
        if action_type == ActionType.ATTACK_CASTLE:
            return AttackCastle(
                player_id=data["player_id"],
                attacker_card_id=data["attacker_card_id"],
                target_player_id=data["target_player_id"],
            )
        if action_type == ActionType.USE_ABILITY:
            return UseAbility(
                player_id=data["player_id"],
                card_id=data["card_id"],
                ability_id=data["ability_id"],
                target_id=data.get("target_id"),
            )
        if action_type == ActionType.SURRENDER:
            return Surrender(player_id=data["player_id"])
        return EndTurn(player_id=data.get("player_id"))
    except KeyError as e:
        raise ValueError(f"{action_type.value} is missing field {e.args[0]!r}") from e
