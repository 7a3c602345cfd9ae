"""
Rules engine for generalized tic-tac-toe.

The engine is stateless: every method is a function of the GameState it is
given, and apply_move returns a new state instead of changing the old one.
"""
import logging
import numbers
import time
from dataclasses import replace

from .errors import (
    InvalidFirstPlayerError,
    NonTerminalStateError,
    OccupiedCellError,
    PositionOutOfRangeError,
    TerminalStateError,
    WrongPlayerError,
)
from .types import GameResult, GameState, GameStatus, Player
from .win_detector import WinDetector

logger = logging.getLogger(__name__)


class TicTacToeEngine:
    """
    State machine for k-in-a-row games on 3x3, 4x4 and 7x7 boards.

    States move one way only: playing -> won or playing -> draw. Won and
    draw states are terminal and reject further moves.
    """

    def __init__(self):
        self.win_detector = WinDetector()

    def initial_state(self, config):
        """
        Create the starting state for a game.

        Args:
            config (GameConfig): Game configuration

        Returns:
            GameState: Empty board, first player to move, status playing

        Raises:
            InvalidFirstPlayerError: first_player is not X or O
        """
        if config.first_player not in (Player.X, Player.O):
            raise InvalidFirstPlayerError(
                f"Invalid first player: {config.first_player}. Must be 'X' or 'O'",
                {'first_player': config.first_player, 'accepted': ['X', 'O']},
            )

        return GameState(
            board=(None,) * (config.board_size * config.board_size),
            current_player=Player(config.first_player),
            move_history=(),
            status=GameStatus.PLAYING,
            winner=None,
            winning_line=None,
            config=config,
            start_time=time.time(),
        )

    def legal_moves(self, state):
        """
        Get all empty positions, in ascending order.

        Returns:
            list: Board indices; empty for a terminal state
        """
        if state.status != GameStatus.PLAYING or self.is_terminal(state):
            return []
        return [i for i, cell in enumerate(state.board) if cell is None]

    def apply_move(self, state, move):
        """
        Apply a move and return the resulting state.

        The input state is left untouched whether the move succeeds or not.

        Args:
            state (GameState): State to move from
            move (Move): Move by the current player

        Returns:
            GameState: New state with the move recorded and status updated

        Raises:
            TerminalStateError: the game is already over
            WrongPlayerError: it is not move.player's turn
            PositionOutOfRangeError: position is outside the board
            OccupiedCellError: position already holds a symbol
        """
        self._check_move(state, move)
        # History holds plain ints and Player members only (numpy ints are not JSON)
        move = replace(move, player=Player(move.player), position=int(move.position))

        board = list(state.board)
        board[move.position] = Player(move.player)
        board = tuple(board)

        winning_lines = self.k_in_row(replace(state, board=board))

        if winning_lines:
            status = GameStatus.WON
            winner = Player(move.player)
            winning_line = winning_lines[0]
        elif all(cell is not None for cell in board):
            status = GameStatus.DRAW
            winner = None
            winning_line = None
        else:
            status = GameStatus.PLAYING
            winner = None
            winning_line = None

        # No further turn once the game ends
        if status == GameStatus.PLAYING:
            next_player = Player(move.player).opponent
            end_time = None
        else:
            next_player = Player(move.player)
            end_time = time.time()

        logger.debug("%s plays %d -> %s", move.player, move.position, status)

        return GameState(
            board=board,
            current_player=next_player,
            move_history=state.move_history + (move,),
            status=status,
            winner=winner,
            winning_line=winning_line,
            config=state.config,
            start_time=state.start_time,
            end_time=end_time,
        )

    def is_legal_move(self, state, move):
        """Return True if apply_move would accept the move."""
        try:
            self._check_move(state, move)
        except (TerminalStateError, WrongPlayerError,
                PositionOutOfRangeError, OccupiedCellError):
            return False
        return True

    def is_terminal(self, state):
        """True if some player has k in a row or the board is full."""
        if self.k_in_row(state):
            return True
        return all(cell is not None for cell in state.board)

    def winner(self, state):
        """
        Get the winner of a finished game.

        Returns:
            Player or None: Symbol on the first winning line, None for a draw

        Raises:
            NonTerminalStateError: the game is still in progress
        """
        if not self.is_terminal(state):
            raise NonTerminalStateError('Cannot determine winner of non-terminal game state')

        winning_lines = self.k_in_row(state)
        if winning_lines:
            return Player(state.board[winning_lines[0][0]])
        return None

    def k_in_row(self, state):
        """All winning lines on the state's board, in generation order."""
        return self.win_detector.k_in_row(state)

    def game_result(self, state):
        """
        Summarise a finished game.

        Raises:
            NonTerminalStateError: the game is still in progress
        """
        winner = self.winner(state)
        winning_lines = self.k_in_row(state)
        end_time = state.end_time if state.end_time is not None else state.start_time
        return GameResult(
            winner=winner,
            winning_line=winning_lines[0] if winning_lines else None,
            total_moves=len(state.move_history),
            game_duration=end_time - state.start_time,
            game_mode=state.config.mode,
        )

    def _check_move(self, state, move):
        """Raise the matching MoveError if the move cannot be applied."""
        if state.status != GameStatus.PLAYING or self.is_terminal(state):
            raise TerminalStateError(
                f"Cannot apply move to terminal game. Game status: {state.status}, "
                f"Winner: {state.winner}",
                {'status': str(state.status), 'winner': state.winner},
            )

        if move.player != state.current_player:
            raise WrongPlayerError(
                f"Move player {move.player} does not match current player {state.current_player}",
                {'player': move.player, 'current_player': state.current_player},
            )

        size = state.config.board_size
        position = move.position
        if (isinstance(position, bool) or not isinstance(position, numbers.Integral)
                or not 0 <= position < len(state.board)):
            raise PositionOutOfRangeError(
                f"Invalid move position: {position}. Valid range: 0-{len(state.board) - 1} "
                f"for {size}x{size} board",
                {'position': position, 'min': 0, 'max': len(state.board) - 1},
            )

        if state.board[position] is not None:
            raise OccupiedCellError(
                f"Cannot move to occupied cell at position {position}. "
                f"Cell contains: {state.board[position]}",
                {'position': position, 'cell': state.board[position]},
            )
