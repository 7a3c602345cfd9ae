"""
Game session on top of the rules engine.
"""
import logging

from .errors import MoveError
from .factory import create_engine, make_config
from .types import GameStatus, Move

logger = logging.getLogger(__name__)


class Game:
    """
    Manages a single game session.

    Holds the one mutable "current state" cell; the engine underneath stays
    pure. Every snapshot since the start is kept, which makes undo a matter
    of dropping the latest one.
    """

    def __init__(self, config=None):
        """
        Initialize a new game.

        Args:
            config (GameConfig, optional): Defaults to a human-vs-human 3x3 game
        """
        self.config = None
        self.engine = None
        self._history = []
        self.reset(config)

    def reset(self, config=None):
        """
        Start over, optionally with a different configuration.

        Args:
            config (GameConfig, optional): New configuration. Keeps the current
                one when omitted.

        Raises:
            ConfigError: if the configuration is invalid
        """
        if config is None:
            config = self.config or make_config(3)
        self.engine = create_engine(config)
        self.config = config
        self._history = [self.engine.initial_state(config)]

    @property
    def state(self):
        """Current GameState snapshot."""
        return self._history[-1]

    @property
    def history(self):
        """Every state of this game, oldest first."""
        return tuple(self._history)

    @property
    def board(self):
        return self.state.board

    @property
    def current_player(self):
        return self.state.current_player

    @property
    def status(self):
        return self.state.status

    @property
    def winner(self):
        """
        Get the winner of the game.

        Returns:
            Player or None: Winner, or None while playing or after a draw
        """
        return self.state.winner

    @property
    def winning_line(self):
        return self.state.winning_line

    @property
    def legal_moves(self):
        return self.engine.legal_moves(self.state)

    def make_move(self, position):
        """
        Make a move for the current player.

        Args:
            position (int): Board index, row-major from the top-left corner

        Returns:
            bool: True if move was successful, False if invalid or game over
        """
        move = Move(player=self.state.current_player, position=position)
        try:
            new_state = self.engine.apply_move(self.state, move)
        except MoveError as e:
            logger.warning("Rejected move at %s: %s", position, e)
            return False

        self._history.append(new_state)
        return True

    def undo(self):
        """
        Take back the last move.

        Returns:
            bool: True if a move was undone, False at the start of the game
        """
        if len(self._history) == 1:
            return False
        self._history.pop()
        return True

    def result(self):
        """
        Summary of the finished game.

        Returns:
            GameResult or None: None while the game is still being played
        """
        if self.state.status == GameStatus.PLAYING:
            return None
        return self.engine.game_result(self.state)
