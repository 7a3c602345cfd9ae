"""
Value types for the k-in-a-row rules engine.

Board representation: tuple of cells, length board_size ** 2, row-major
  - None: empty cell
  - Player.X / Player.O: occupied cell

Every record is a frozen dataclass. States are never mutated; each move
produces a new GameState and earlier snapshots stay valid.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Player(str, Enum):
    """Player symbol. Compares equal to the plain strings 'X' and 'O'."""
    X = 'X'
    O = 'O'

    @property
    def opponent(self) -> 'Player':
        return Player.O if self is Player.X else Player.X

    def __str__(self):
        return self.value


class GameStatus(str, Enum):
    PLAYING = 'playing'
    WON = 'won'
    DRAW = 'draw'

    def __str__(self):
        return self.value


class GameMode(str, Enum):
    """Who controls each side. Passed through by the engine, never interpreted."""
    HUMAN_VS_HUMAN = 'human-vs-human'
    HUMAN_VS_COMPUTER = 'human-vs-computer'
    COMPUTER_VS_COMPUTER = 'computer-vs-computer'

    def __str__(self):
        return self.value


Cell = Optional[Player]
Board = Tuple[Cell, ...]
Line = Tuple[int, ...]

BOARD_SIZES = (3, 4, 7)

# Win length is fixed per board size
K_FOR_BOARD_SIZE = {3: 3, 4: 3, 7: 4}


def _player_or_none(value):
    return None if value is None else Player(value)


@dataclass(frozen=True)
class GameConfig:
    """
    Game configuration.

    Construction does not validate; use kinrow.core.factory.validate_config
    (or create_engine) to reject invalid combinations.
    """
    board_size: int
    k_in_row: int
    first_player: Player = Player.X
    mode: GameMode = GameMode.HUMAN_VS_HUMAN

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            'board_size': self.board_size,
            'k_in_row': self.k_in_row,
            'first_player': str(self.first_player),
            'mode': str(self.mode),
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'GameConfig':
        """Create config from dictionary."""
        return cls(
            board_size=config_dict['board_size'],
            k_in_row=config_dict['k_in_row'],
            first_player=Player(config_dict['first_player']),
            mode=GameMode(config_dict['mode']),
        )


@dataclass(frozen=True)
class Move:
    """A single placement: who moved, where, and when (seconds since epoch)."""
    player: Player
    position: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player': str(self.player),
            'position': self.position,
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, move_dict: Dict[str, Any]) -> 'Move':
        return cls(
            player=Player(move_dict['player']),
            position=move_dict['position'],
            timestamp=move_dict['timestamp'],
        )


@dataclass(frozen=True)
class GameState:
    """
    Immutable snapshot of a game.

    Sequence fields given as lists are copied into tuples, so a caller
    holding the original list cannot reach into the snapshot.
    """
    board: Board
    current_player: Player
    move_history: Tuple[Move, ...]
    status: GameStatus
    winner: Optional[Player]
    winning_line: Optional[Line]
    config: GameConfig
    start_time: float
    end_time: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, 'board', tuple(self.board))
        object.__setattr__(self, 'move_history', tuple(self.move_history))
        if self.winning_line is not None:
            object.__setattr__(self, 'winning_line', tuple(self.winning_line))

    @property
    def is_over(self) -> bool:
        """True once the recorded status is won or draw."""
        return self.status != GameStatus.PLAYING

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to a JSON-representable dictionary."""
        return {
            'board': [None if cell is None else str(cell) for cell in self.board],
            'current_player': str(self.current_player),
            'move_history': [move.to_dict() for move in self.move_history],
            'status': str(self.status),
            'winner': None if self.winner is None else str(self.winner),
            'winning_line': None if self.winning_line is None else list(self.winning_line),
            'config': self.config.to_dict(),
            'start_time': self.start_time,
            'end_time': self.end_time,
        }

    @classmethod
    def from_dict(cls, state_dict: Dict[str, Any]) -> 'GameState':
        """Create state from dictionary produced by to_dict."""
        return cls(
            board=tuple(_player_or_none(cell) for cell in state_dict['board']),
            current_player=Player(state_dict['current_player']),
            move_history=tuple(Move.from_dict(m) for m in state_dict['move_history']),
            status=GameStatus(state_dict['status']),
            winner=_player_or_none(state_dict['winner']),
            winning_line=state_dict['winning_line'],
            config=GameConfig.from_dict(state_dict['config']),
            start_time=state_dict['start_time'],
            end_time=state_dict.get('end_time'),
        )


@dataclass(frozen=True)
class GameResult:
    """Summary of a finished game."""
    winner: Optional[Player]
    winning_line: Optional[Line]
    total_moves: int
    game_duration: float
    game_mode: GameMode

    def to_dict(self) -> Dict[str, Any]:
        return {
            'winner': None if self.winner is None else str(self.winner),
            'winning_line': None if self.winning_line is None else list(self.winning_line),
            'total_moves': self.total_moves,
            'game_duration': self.game_duration,
            'game_mode': str(self.game_mode),
        }
