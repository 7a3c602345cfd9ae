"""
Config validation and engine construction.
"""
import logging
import numbers

from .engine import TicTacToeEngine
from .errors import (
    InvalidBoardSizeError,
    InvalidFirstPlayerError,
    InvalidGameModeError,
    InvalidKInRowError,
    MissingConfigError,
)
from .types import BOARD_SIZES, K_FOR_BOARD_SIZE, GameConfig, GameMode, Player

logger = logging.getLogger(__name__)

VALID_MODES = tuple(GameMode)


def _is_integer(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def validate_config(config):
    """
    Reject an invalid game configuration.

    Checks, in order: presence, board size, win length for that board size,
    first player, and game mode.

    Args:
        config (GameConfig): Configuration to validate

    Raises:
        MissingConfigError: config is None
        InvalidBoardSizeError: board size is not 3, 4 or 7
        InvalidKInRowError: k_in_row does not match the board size
        InvalidFirstPlayerError: first player is not X or O
        InvalidGameModeError: mode is not a known GameMode
    """
    if config is None:
        raise MissingConfigError('GameConfig is required')

    if not _is_integer(config.board_size) or config.board_size not in BOARD_SIZES:
        raise InvalidBoardSizeError(
            f"Invalid board size: {config.board_size}. Must be 3, 4, or 7",
            {'board_size': config.board_size, 'accepted': list(BOARD_SIZES)},
        )

    expected_k = K_FOR_BOARD_SIZE[config.board_size]
    if not _is_integer(config.k_in_row) or config.k_in_row != expected_k:
        if expected_k == 3:
            boards = '3x3 and 4x4 boards'
        else:
            boards = '7x7 board'
        raise InvalidKInRowError(
            f"Invalid k value: {config.k_in_row}. Must be {expected_k} for {boards}",
            {'k_in_row': config.k_in_row, 'board_size': config.board_size,
             'accepted': [expected_k]},
        )

    if config.first_player not in (Player.X, Player.O):
        raise InvalidFirstPlayerError(
            f"Invalid first player: {config.first_player}. Must be 'X' or 'O'",
            {'first_player': config.first_player, 'accepted': ['X', 'O']},
        )

    if config.mode not in VALID_MODES:
        accepted = ', '.join(f"'{mode.value}'" for mode in VALID_MODES[:-1])
        raise InvalidGameModeError(
            f"Invalid game mode: {config.mode}. Must be {accepted}, "
            f"or '{VALID_MODES[-1].value}'",
            {'mode': config.mode, 'accepted': [mode.value for mode in VALID_MODES]},
        )


def make_config(board_size, first_player=Player.X, mode=GameMode.HUMAN_VS_HUMAN):
    """
    Build a validated config, deriving k_in_row from the board size.

    Args:
        board_size (int): 3, 4 or 7
        first_player: Player who moves first (default X)
        mode: GameMode (default human-vs-human)

    Returns:
        GameConfig: Validated configuration
    """
    config = GameConfig(
        board_size=board_size,
        k_in_row=K_FOR_BOARD_SIZE.get(board_size),
        first_player=first_player,
        mode=mode,
    )
    validate_config(config)
    return config


def create_engine(config):
    """
    Create an engine for the given configuration.

    Args:
        config (GameConfig): Game configuration

    Returns:
        TicTacToeEngine: Engine ready for initial_state(config)

    Raises:
        ConfigError: if the configuration is invalid
    """
    validate_config(config)
    logger.debug("Creating engine for %dx%d board (k=%d, mode=%s)",
                 config.board_size, config.board_size, config.k_in_row, config.mode)
    return TicTacToeEngine()


def create_3x3_engine(first_player=Player.X):
    """Engine for a human-vs-human 3x3 game."""
    return create_engine(make_config(3, first_player))


def create_4x4_engine(first_player=Player.X):
    """Engine for a human-vs-human 4x4 game."""
    return create_engine(make_config(4, first_player))


def create_7x7_engine(first_player=Player.X):
    """Engine for a human-vs-human 7x7 game with a 4-in-a-row win condition."""
    return create_engine(make_config(7, first_player))


def create_human_vs_computer_engine(board_size, first_player=Player.X):
    """Engine for a human-vs-computer game on a 3x3, 4x4 or 7x7 board."""
    return create_engine(make_config(board_size, first_player, GameMode.HUMAN_VS_COMPUTER))
