"""
Siegefront - Custom Error Types
Structured exceptions for game-specific errors with recovery hints.
"""
from typing import Dict, Any, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the battle engine."""
    # General errors
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Battle setup errors
    BATTLE_NOT_FOUND = "BATTLE_NOT_FOUND"
    BATTLE_INVALID_PLAYER_COUNT = "BATTLE_INVALID_PLAYER_COUNT"
    BATTLE_INVALID_STATE = "BATTLE_INVALID_STATE"
    BATTLE_DUPLICATE_CARD = "BATTLE_DUPLICATE_CARD"

    # Action errors
    BATTLE_OVER = "BATTLE_OVER"
    ACTION_ILLEGAL = "ACTION_ILLEGAL"
    ACTION_NOT_YOUR_TURN = "ACTION_NOT_YOUR_TURN"
    ACTION_TARGET_INVALID = "ACTION_TARGET_INVALID"
    ACTION_OUT_OF_RANGE = "ACTION_OUT_OF_RANGE"
    ACTION_POSITION_INVALID = "ACTION_POSITION_INVALID"
    ACTION_RESOURCE_EXHAUSTED = "ACTION_RESOURCE_EXHAUSTED"
    ACTION_ON_COOLDOWN = "ACTION_ON_COOLDOWN"


class GameError(Exception):
    """
    Base exception for all game-related errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Additional context details
    - Recovery hints for the frontend
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None,
        http_status: int = 500
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# =============================================================================
# Battle Setup Errors
# =============================================================================

class InvalidPlayerCountError(GameError):
    """Raised when a battle is not created with exactly two distinct players."""

    def __init__(self, message: str = "A battle needs exactly two distinct players"):
        super().__init__(
            code=ErrorCode.BATTLE_INVALID_PLAYER_COUNT,
            message=message,
            http_status=400,
            recovery_hint="Supply two players with different ids"
        )


class DuplicateCardError(GameError):
    """Raised when two cards entering a battle share an id."""

    def __init__(self, card_ids: List[str]):
        super().__init__(
            code=ErrorCode.BATTLE_DUPLICATE_CARD,
            message=f"Card ids must be unique within a battle: {', '.join(card_ids)}",
            details={"duplicate_ids": card_ids},
            http_status=400,
            recovery_hint="Give every copy of a card its own id"
        )


class InvalidStateError(GameError):
    """
    Raised when a battle snapshot is malformed (dangling card owner,
    out-of-range hp or mana).

    The AI sanitizes these locally and only logs them.
    """

    def __init__(self, reason: str = "Battle state is malformed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.BATTLE_INVALID_STATE,
            message=reason,
            details=details,
            recoverable=False,
            http_status=500
        )


class BattleNotFoundError(GameError):
    """Raised when a battle id is unknown to the storage."""

    def __init__(self, battle_id: Optional[str] = None):
        details = {}
        if battle_id:
            details["battle_id"] = battle_id
        super().__init__(
            code=ErrorCode.BATTLE_NOT_FOUND,
            message="Battle not found",
            details=details,
            http_status=404,
            recovery_hint="Start a new battle"
        )


# =============================================================================
# Illegal Actions
# =============================================================================

class IllegalActionError(GameError):
    """
    The requested action breaks a game rule.

    Always recoverable: the engine returns the unchanged state together with
    this error instead of raising it to the caller.
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.ACTION_ILLEGAL,
        message: str = "Illegal action",
        **kwargs
    ):
        super().__init__(code=code, message=message, http_status=400, **kwargs)


class NotYourTurnError(IllegalActionError):
    """Raised when the actor is not the active player."""

    def __init__(self, actor_id: Optional[str] = None, active_player_id: Optional[str] = None):
        details = {}
        if actor_id:
            details["actor"] = actor_id
        if active_player_id:
            details["active_player"] = active_player_id
        super().__init__(
            code=ErrorCode.ACTION_NOT_YOUR_TURN,
            message="It's not your turn",
            details=details,
            recovery_hint="Wait for the other player to end their turn"
        )


class TargetInvalidError(IllegalActionError):
    """Raised when a card, ability or player referenced by an action is not usable."""

    def __init__(self, reason: str = "Target is not valid"):
        super().__init__(
            code=ErrorCode.ACTION_TARGET_INVALID,
            message=reason,
            recovery_hint="Select a valid target"
        )


class OutOfRangeError(IllegalActionError):
    """Raised when the target cannot be reached under the combat-range rule."""

    def __init__(self, row_distance: Optional[int] = None, max_range: Optional[int] = None):
        details = {}
        if row_distance is not None:
            details["row_distance"] = row_distance
        if max_range is not None:
            details["max_range"] = max_range
        super().__init__(
            code=ErrorCode.ACTION_OUT_OF_RANGE,
            message="Target is out of range",
            details=details,
            recovery_hint="Melee cards only reach adjacent rows"
        )


class InvalidPositionError(IllegalActionError):
    """Raised when a deploy targets an off-grid, occupied or blocked cell."""

    def __init__(self, row: int, col: int, reason: str = "Position is not available"):
        super().__init__(
            code=ErrorCode.ACTION_POSITION_INVALID,
            message=reason,
            details={"row": row, "col": col},
            recovery_hint="Deploy to an empty, unblocked cell"
        )


class ResourceExhaustedError(IllegalActionError):
    """Raised when the player cannot pay the mana cost."""

    def __init__(self, resource_name: str = "mana", available: int = 0, required: int = 1):
        super().__init__(
            code=ErrorCode.ACTION_RESOURCE_EXHAUSTED,
            message=f"Not enough {resource_name}",
            details={
                "resource": resource_name,
                "available": available,
                "required": required
            },
            recovery_hint=f"Wait for your {resource_name} to refill next turn"
        )


class AbilityOnCooldownError(IllegalActionError):
    """Raised when an ability is used before its cooldown expires."""

    def __init__(self, ability_name: str, turns_left: int):
        super().__init__(
            code=ErrorCode.ACTION_ON_COOLDOWN,
            message=f"{ability_name} is on cooldown",
            details={"ability": ability_name, "turns_left": turns_left},
            recovery_hint="Use another ability or wait for the cooldown"
        )


class BattleOverError(IllegalActionError):
    """Raised when an action is sent to a battle that already has a winner."""

    def __init__(self, winner_id: Optional[str] = None):
        details = {}
        if winner_id:
            details["winner"] = winner_id
        super().__init__(
            code=ErrorCode.BATTLE_OVER,
            message="The battle is over",
            details=details,
            recovery_hint="Start a new battle"
        )
