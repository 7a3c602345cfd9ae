"""
Win detection for k-in-a-row boards.

Lines are enumerated once per (board_size, k) as arrays of board indices and
every window is tested at once against an int8 encoding of the board:
  - 0: empty cell
  - 1: X
  - -1: O

Generation order is fixed and decides which line counts as "the" winning
line when a move completes several at once: rows, then columns, then main
diagonals, then anti-diagonals, each in row-start/column-start order.
"""
from enum import Enum
from functools import lru_cache
from typing import List, NamedTuple, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .errors import InvalidBoardSizeError, InvalidKInRowError
from .types import BOARD_SIZES, Player


class BoardFamily(Enum):
    """Boards sharing line geometry and win length."""
    CLASSIC = (3, 3)
    EXTENDED = (4, 3)
    LARGE = (7, 4)

    def __init__(self, board_size, k_in_row):
        self.board_size = board_size
        self.k_in_row = k_in_row

    @property
    def cell_count(self):
        return self.board_size * self.board_size

    @property
    def lines(self) -> 'LineSet':
        return generate_lines(self.board_size, self.k_in_row)

    @classmethod
    def from_board_size(cls, board_size) -> 'BoardFamily':
        for family in cls:
            if family.board_size == board_size:
                return family
        raise InvalidBoardSizeError(
            f"Invalid board size: {board_size}. Must be 3, 4, or 7",
            {'board_size': board_size, 'accepted': list(BOARD_SIZES)},
        )

    @classmethod
    def from_config(cls, config) -> 'BoardFamily':
        """
        Resolve the family for a config, checking its win length.

        Raises:
            InvalidBoardSizeError: board size is not 3, 4 or 7
            InvalidKInRowError: k_in_row does not match the board size
        """
        family = cls.from_board_size(config.board_size)
        if config.k_in_row != family.k_in_row:
            raise InvalidKInRowError(
                f"Invalid k value: {config.k_in_row}. Must be {family.k_in_row} "
                f"for {family.board_size}x{family.board_size} board",
                {'k_in_row': config.k_in_row, 'board_size': family.board_size,
                 'accepted': [family.k_in_row]},
            )
        return family


class LineSet(NamedTuple):
    """All k-length lines of a board, one (n_lines, k) index array per direction."""
    rows: np.ndarray
    columns: np.ndarray
    main_diagonals: np.ndarray
    anti_diagonals: np.ndarray
    all_lines: np.ndarray

    @property
    def diagonals(self) -> np.ndarray:
        return np.concatenate([self.main_diagonals, self.anti_diagonals])


@lru_cache(maxsize=None)
def generate_lines(board_size: int, k: int) -> LineSet:
    """
    Enumerate every k-length line on a board_size x board_size board.

    Args:
        board_size (int): Side length of the board
        k (int): Line length, 1 <= k <= board_size

    Returns:
        LineSet: Read-only index arrays. Rows are scanned top-to-bottom with
            left-to-right window starts, columns left-to-right with
            top-to-bottom window starts, diagonals by row start then
            column start.
    """
    if not 1 <= k <= board_size:
        raise ValueError(f"Line length {k} does not fit a {board_size}x{board_size} board")

    grid = np.arange(board_size * board_size, dtype=np.intp).reshape(board_size, board_size)
    offsets = np.arange(k, dtype=np.intp)
    span = board_size - k + 1

    rows = sliding_window_view(grid, k, axis=1).reshape(-1, k)
    columns = sliding_window_view(grid.T, k, axis=1).reshape(-1, k)

    # Start cells of each diagonal window, row-major
    start_rows = np.arange(span, dtype=np.intp)[:, None] * board_size
    main_starts = start_rows + np.arange(span, dtype=np.intp)[None, :]
    anti_starts = start_rows + np.arange(k - 1, board_size, dtype=np.intp)[None, :]
    main_diagonals = main_starts.reshape(-1, 1) + offsets * (board_size + 1)
    anti_diagonals = anti_starts.reshape(-1, 1) + offsets * (board_size - 1)

    parts = [np.ascontiguousarray(a) for a in (rows, columns, main_diagonals, anti_diagonals)]
    all_lines = np.concatenate(parts)
    for array in parts + [all_lines]:
        array.setflags(write=False)
    return LineSet(*parts, all_lines)


def encode_board(board: Sequence) -> np.ndarray:
    """
    Encode a board as an int8 vector (1 for X, -1 for O, 0 for empty).

    Args:
        board: Sequence of cells (Player, 'X'/'O' strings, or None)

    Returns:
        np.ndarray: Shape (len(board),), dtype int8
    """
    return np.fromiter(
        (1 if cell == Player.X else -1 if cell == Player.O else 0 for cell in board),
        dtype=np.int8,
        count=len(board),
    )


def is_winning_line(board: Sequence, positions: Sequence[int]) -> bool:
    """
    Check whether the given positions all hold the same non-empty symbol.

    Args:
        board: Sequence of cells
        positions: Board indices forming the line

    Returns:
        bool: True if the first cell is occupied and every other cell matches it
    """
    first = board[positions[0]]
    if first is None:
        return False
    return all(board[pos] == first for pos in positions[1:])


def scan_lines(board: Sequence, lines: np.ndarray) -> List[tuple]:
    """Return the lines (in the given order) fully held by one player."""
    if len(lines) == 0:
        return []
    values = encode_board(board)[lines]
    first = values[:, :1]
    mask = (first[:, 0] != 0) & np.all(values == first, axis=1)
    return [tuple(line) for line in lines[mask].tolist()]


class WinDetector:
    """
    Finds completed lines on a game state.

    Board-family dispatch happens here: the state's config is resolved to a
    BoardFamily, whose cached LineSet drives every scan.
    """

    def check_rows(self, board, board_size, k):
        """Winning row windows, top-to-bottom then left-to-right."""
        return scan_lines(board, generate_lines(board_size, k).rows)

    def check_columns(self, board, board_size, k):
        """Winning column windows, left-to-right then top-to-bottom."""
        return scan_lines(board, generate_lines(board_size, k).columns)

    def check_diagonals(self, board, board_size, k):
        """Winning diagonal windows, main diagonals before anti-diagonals."""
        return scan_lines(board, generate_lines(board_size, k).diagonals)

    def winning_lines(self, board, board_size, k):
        """
        Find every winning line on a raw board.

        Args:
            board: Sequence of cells, length board_size ** 2
            board_size (int): Side length of the board
            k (int): Line length needed to win

        Returns:
            list: Winning lines as tuples of indices, in generation order
        """
        return scan_lines(board, generate_lines(board_size, k).all_lines)

    def k_in_row(self, state):
        """
        Find every winning line on a game state.

        Args:
            state: GameState to analyse

        Returns:
            list: All winning lines, rows first, then columns, then diagonals.
                Empty if nobody has k in a row.
        """
        family = BoardFamily.from_config(state.config)
        return scan_lines(state.board, family.lines.all_lines)

    def is_draw(self, state):
        """
        Check if a state is a draw: board full and no winning line.

        Args:
            state: GameState to analyse

        Returns:
            bool: True if the game is a draw, False otherwise
        """
        if any(cell is None for cell in state.board):
            return False
        return not self.k_in_row(state)
