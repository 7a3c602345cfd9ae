"""
Tests for TicTacToeEngine state transitions.
"""
import json
import random
from dataclasses import FrozenInstanceError, replace

import numpy as np
import pytest
from kinrow.core.engine import TicTacToeEngine
from kinrow.core.errors import (
    InvalidFirstPlayerError,
    MoveError,
    NonTerminalStateError,
    OccupiedCellError,
    PositionOutOfRangeError,
    TerminalStateError,
    WrongPlayerError,
)
from kinrow.core.factory import make_config
from kinrow.core.types import GameConfig, GameMode, GameStatus, Move, Player


def play(engine, state, moves):
    """Apply a list of (player, position) pairs and return the final state."""
    for player, position in moves:
        state = engine.apply_move(state, Move(player=Player(player), position=position, timestamp=0.0))
    return state


def assert_invariants(state):
    """Check the invariants every reachable state must satisfy."""
    size = state.config.board_size
    assert len(state.board) == size * size
    assert len(state.move_history) == sum(1 for cell in state.board if cell is not None)

    if state.status == GameStatus.WON:
        assert state.winner is not None
        assert state.winning_line is not None
        assert len(state.winning_line) == state.config.k_in_row
    elif state.status == GameStatus.DRAW:
        assert state.winner is None
        assert state.winning_line is None
        assert all(cell is not None for cell in state.board)
    else:
        assert state.winner is None
        assert state.winning_line is None


@pytest.fixture
def engine():
    return TicTacToeEngine()


@pytest.mark.parametrize("board_size", [3, 4, 7])
def test_initial_state(engine, board_size):
    """Test that the initial state is an empty board with the first player to move."""
    config = make_config(board_size, Player.O)
    state = engine.initial_state(config)

    assert len(state.board) == board_size * board_size
    assert all(cell is None for cell in state.board)
    assert state.current_player == Player.O
    assert state.move_history == ()
    assert state.status == GameStatus.PLAYING
    assert state.winner is None
    assert state.winning_line is None
    assert state.config == config
    assert state.start_time > 0
    assert state.end_time is None


def test_initial_state_rejects_bad_first_player(engine):
    config = GameConfig(board_size=3, k_in_row=3, first_player='Z')
    with pytest.raises(InvalidFirstPlayerError):
        engine.initial_state(config)


def test_initial_state_accepts_plain_string_player(engine):
    state = engine.initial_state(GameConfig(board_size=3, k_in_row=3, first_player='O'))
    assert state.current_player is Player.O


def test_legal_moves(engine):
    """Test that legal moves are exactly the empty cells, ascending."""
    state = engine.initial_state(make_config(3))
    assert engine.legal_moves(state) == list(range(9))

    state = play(engine, state, [('X', 4), ('O', 0)])
    moves = engine.legal_moves(state)
    assert moves == [1, 2, 3, 5, 6, 7, 8]
    assert set(moves) == {i for i, cell in enumerate(state.board) if cell is None}


def test_legal_moves_empty_when_terminal(engine):
    state = engine.initial_state(make_config(3))
    state = play(engine, state, [('X', 0), ('O', 3), ('X', 1), ('O', 4), ('X', 2)])
    assert engine.legal_moves(state) == []


def test_scenario_row_win_3x3(engine):
    """Test X winning along the top row of a 3x3 board."""
    state = engine.initial_state(make_config(3))
    state = play(engine, state, [('X', 0), ('O', 3), ('X', 1), ('O', 4), ('X', 2)])

    assert state.status == GameStatus.WON
    assert state.winner == Player.X
    assert state.winning_line == (0, 1, 2)
    # Current player should NOT switch after the winning move
    assert state.current_player == Player.X
    assert state.end_time is not None
    assert engine.is_terminal(state) == True
    assert engine.winner(state) == Player.X
    assert_invariants(state)


def test_scenario_draw_3x3(engine):
    """Test a full 3x3 board with no line ending in a draw."""
    state = engine.initial_state(make_config(3))
    state = play(engine, state, [
        ('X', 1), ('O', 0), ('X', 3), ('O', 2), ('X', 4),
        ('O', 5), ('X', 6), ('O', 7), ('X', 8),
    ])

    assert state.status == GameStatus.DRAW
    assert state.winner is None
    assert state.winning_line is None
    assert state.current_player == Player.X
    assert state.end_time is not None
    assert engine.is_terminal(state) == True
    assert engine.winner(state) is None
    assert_invariants(state)


def test_scenario_row_win_7x7(engine):
    """Test four in a row winning on the 7x7 board."""
    state = engine.initial_state(make_config(7))
    state = play(engine, state, [
        ('X', 21), ('O', 0), ('X', 22), ('O', 1), ('X', 23), ('O', 2),
    ])
    assert state.status == GameStatus.PLAYING, "Three O stones must not win on 7x7"

    state = play(engine, state, [('X', 24)])
    assert state.status == GameStatus.WON
    assert state.winning_line == (21, 22, 23, 24)
    assert_invariants(state)


def test_4x4_diagonal_win(engine):
    """Test a three-stone anti-diagonal win on the 4x4 board."""
    state = engine.initial_state(make_config(4, Player.O))
    state = play(engine, state, [('O', 3), ('X', 0), ('O', 6), ('X', 1), ('O', 9)])

    assert state.status == GameStatus.WON
    assert state.winner == Player.O
    assert state.winning_line == (3, 6, 9)


def test_occupied_cell_error_leaves_state_unchanged(engine):
    """Test that moving onto an occupied cell raises and changes nothing."""
    state = play(engine, engine.initial_state(make_config(3)), [('X', 4)])
    snapshot = state.to_dict()

    with pytest.raises(OccupiedCellError) as exc_info:
        engine.apply_move(state, Move(player=Player.O, position=4))

    assert exc_info.value.code == 'CELL_OCCUPIED'
    assert exc_info.value.context['position'] == 4
    assert state.to_dict() == snapshot


def test_terminal_state_error(engine):
    """Test that no move is accepted after the game is won."""
    state = engine.initial_state(make_config(3))
    state = play(engine, state, [('X', 0), ('O', 3), ('X', 1), ('O', 4), ('X', 2)])

    with pytest.raises(TerminalStateError):
        engine.apply_move(state, Move(player=Player.X, position=8))
    with pytest.raises(TerminalStateError):
        engine.apply_move(state, Move(player=Player.O, position=8))


def test_recorded_terminal_status_is_respected(engine):
    """Test that a state marked as over refuses moves even on an open board."""
    state = engine.initial_state(make_config(3))
    finished = replace(state, status=GameStatus.DRAW)

    with pytest.raises(TerminalStateError):
        engine.apply_move(finished, Move(player=Player.X, position=0))
    assert engine.legal_moves(finished) == []


def test_wrong_player_error(engine):
    state = engine.initial_state(make_config(3))
    with pytest.raises(WrongPlayerError):
        engine.apply_move(state, Move(player=Player.O, position=0))


@pytest.mark.parametrize("position", [-1, 9, 100, 1.5, '4', True])
def test_position_out_of_range_error(engine, position):
    state = engine.initial_state(make_config(3))
    with pytest.raises(PositionOutOfRangeError):
        engine.apply_move(state, Move(player=Player.X, position=position))


def test_move_errors_are_distinct_value_errors(engine):
    """Test the move error taxonomy shares a base class but keeps distinct codes."""
    codes = {cls.code for cls in (TerminalStateError, WrongPlayerError,
                                  PositionOutOfRangeError, OccupiedCellError)}
    assert len(codes) == 4
    assert issubclass(OccupiedCellError, MoveError)
    assert issubclass(OccupiedCellError, ValueError)


def test_apply_move_does_not_mutate_input(engine):
    """Test that earlier states remain valid snapshots."""
    initial = engine.initial_state(make_config(3))
    after_one = play(engine, initial, [('X', 4)])
    after_two = play(engine, after_one, [('O', 0)])

    assert initial.board == (None,) * 9
    assert initial.move_history == ()
    assert initial.current_player == Player.X
    assert after_one.board[0] is None
    assert len(after_one.move_history) == 1
    assert after_two.board[0] == Player.O


def test_apply_move_is_referentially_pure(engine):
    """Test equal inputs give equal outputs."""
    state = engine.initial_state(make_config(4))
    move = Move(player=Player.X, position=5, timestamp=123.0)

    assert engine.apply_move(state, move) == engine.apply_move(state, move)


def test_states_are_frozen(engine):
    state = engine.initial_state(make_config(3))
    with pytest.raises(FrozenInstanceError):
        state.status = GameStatus.WON
    with pytest.raises(TypeError):
        state.board[0] = Player.X


def test_multiple_lines_record_first_in_generation_order(engine):
    """Test that completing a row and a column at once records the row."""
    state = engine.initial_state(make_config(3))
    state = play(engine, state, [
        ('X', 1), ('O', 4), ('X', 2), ('O', 5), ('X', 3),
        ('O', 7), ('X', 6), ('O', 8), ('X', 0),
    ])

    # Last move fills the board but completes lines, so it is a win
    assert state.status == GameStatus.WON
    assert state.winning_line == (0, 1, 2)
    assert engine.k_in_row(state) == [(0, 1, 2), (0, 3, 6)]
    assert engine.winner(state) == Player.X


def test_winner_raises_on_non_terminal_state(engine):
    state = engine.initial_state(make_config(3))
    with pytest.raises(NonTerminalStateError):
        engine.winner(state)
    with pytest.raises(NonTerminalStateError):
        engine.game_result(state)


def test_is_terminal(engine):
    state = engine.initial_state(make_config(3))
    assert engine.is_terminal(state) == False
    state = play(engine, state, [('X', 0), ('O', 3), ('X', 1)])
    assert engine.is_terminal(state) == False


def test_is_legal_move(engine):
    state = play(engine, engine.initial_state(make_config(3)), [('X', 4)])

    assert engine.is_legal_move(state, Move(player=Player.O, position=0)) == True
    assert engine.is_legal_move(state, Move(player=Player.O, position=4)) == False
    assert engine.is_legal_move(state, Move(player=Player.X, position=0)) == False
    assert engine.is_legal_move(state, Move(player=Player.O, position=9)) == False


def test_game_result(engine):
    """Test the summary of a finished game."""
    config = make_config(3, mode=GameMode.HUMAN_VS_COMPUTER)
    state = engine.initial_state(config)
    state = play(engine, state, [('X', 0), ('O', 3), ('X', 1), ('O', 4), ('X', 2)])

    result = engine.game_result(state)
    assert result.winner == Player.X
    assert result.winning_line == (0, 1, 2)
    assert result.total_moves == 5
    assert result.game_duration >= 0
    assert result.game_mode == GameMode.HUMAN_VS_COMPUTER


@pytest.mark.parametrize("board_size", [3, 4, 7])
def test_random_playouts_keep_invariants(engine, board_size):
    """Test invariants hold along random games until they end."""
    rng = random.Random(board_size)
    for _ in range(20):
        state = engine.initial_state(make_config(board_size))
        assert_invariants(state)
        while state.status == GameStatus.PLAYING:
            moves = engine.legal_moves(state)
            assert moves, "A playing state must have legal moves"
            state = engine.apply_move(state, Move(player=state.current_player,
                                                  position=rng.choice(moves)))
            assert_invariants(state)

        assert engine.is_terminal(state)
        assert engine.legal_moves(state) == []
        if state.status == GameStatus.WON:
            assert engine.winner(state) == state.winner
            assert tuple(engine.k_in_row(state)[0]) == state.winning_line
        else:
            assert engine.winner(state) is None


def test_numpy_position_is_stored_as_plain_int(engine):
    """Test that a numpy index (e.g. from np.argmax) leaves the state JSON-ready."""
    state = engine.initial_state(make_config(3))
    state = engine.apply_move(state, Move(player='X', position=np.int64(4)))

    move = state.move_history[0]
    assert type(move.position) is int
    assert move.player is Player.X

    payload = json.loads(json.dumps(state.to_dict()))
    assert payload['move_history'][0]['position'] == 4
    assert payload['board'][4] == 'X'
