"""
Exceptions raised by the rules engine and the config factory.

Every error carries a stable ``code`` and a ``context`` dict holding the
offending values, so callers can branch on the failure without parsing
messages.
"""
from typing import Any, Dict, Optional


class GameError(Exception):
    """Base class for all engine errors."""

    code = 'GAME_ERROR'

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = dict(context or {})


class ConfigError(GameError, ValueError):
    """Invalid game configuration, detected before an engine is built."""
    code = 'INVALID_CONFIG'


class MissingConfigError(ConfigError):
    code = 'CONFIG_REQUIRED'


class InvalidBoardSizeError(ConfigError):
    code = 'INVALID_BOARD_SIZE'


class InvalidKInRowError(ConfigError):
    code = 'INVALID_K_IN_ROW'


class InvalidFirstPlayerError(ConfigError):
    code = 'INVALID_FIRST_PLAYER'


class InvalidGameModeError(ConfigError):
    code = 'INVALID_GAME_MODE'


class MoveError(GameError, ValueError):
    """A move violated one of the apply_move preconditions."""
    code = 'INVALID_MOVE'


class TerminalStateError(MoveError):
    code = 'GAME_OVER'


class WrongPlayerError(MoveError):
    code = 'WRONG_PLAYER'


class PositionOutOfRangeError(MoveError):
    code = 'POSITION_OUT_OF_RANGE'


class OccupiedCellError(MoveError):
    code = 'CELL_OCCUPIED'


class NonTerminalStateError(GameError):
    """Result queried on a game that is still in progress."""
    code = 'GAME_NOT_OVER'
