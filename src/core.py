# core.py
# The state of a game of 2048 and the logic that tilts it.
#
# Coordinate System: column C, row R of the board (where row 0, column 0 is the
# lower-left corner of the board) corresponds to model.tile(C, R).

from enum import Enum
from typing import Callable, List, Optional, Union
import logging
import random

from board import Board, Side
from tile import Tile

logger = logging.getLogger(__name__)

MAX_PIECE = 2048
"""Largest piece value. A tile of this value ends the game."""


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3


# --- Game State Checks ---

def empty_space_exists(board: Board) -> bool:
    """
    Returns True if at least one cell on the board is empty.
    Args:
        board (Board): The board to check.
    Returns:
        bool: True if an empty cell exists.
    """
    return any(value == 0 for row in board.raw_values() for value in row)


def max_tile_exists(board: Board) -> bool:
    """Returns True if any tile has the value MAX_PIECE."""
    return any(value == MAX_PIECE for row in board.raw_values() for value in row)


def at_least_one_move_exists(board: Board) -> bool:
    """
    Returns True if there are any valid moves on the board: either an empty cell,
    or two orthogonally adjacent tiles with the same value. Adjacency is checked
    in absolute coordinates, whatever the board's current perspective.
    Args:
        board (Board): The board to check.
    Returns:
        bool: True if some tilt can change the board.
    """
    if empty_space_exists(board):
        return True
    values = board.raw_values()
    n = board.size()
    for r in range(n):
        for c in range(n):
            if c + 1 < n and values[r][c] == values[r][c + 1]:
                return True
            if r + 1 < n and values[r][c] == values[r + 1][c]:
                return True
    return False


def check_game_over(board: Board) -> bool:
    return max_tile_exists(board) or not at_least_one_move_exists(board)


# --- The Game Model ---

class Model:
    """
    The state of a game of 2048: a board, the current score, the maximum score
    reached at the end of earlier games, and whether the game is over.
    """

    def __init__(self, size: int = 4):
        """A new game on a SIZE x SIZE board with no tiles and score 0."""
        self._board = Board(size)
        self._score = 0
        self._max_score = 0
        self._game_over = False
        self._observers: List[Callable[["Model"], None]] = []

    @classmethod
    def from_raw_values(cls, raw_values: List[List[int]], score: int = 0,
                        max_score: int = 0, game_over: bool = False) -> "Model":
        """
        A game whose tiles are given by RAW_VALUES, indexed by (row, col) with
        (0, 0) at the bottom-left corner and 0 for an empty cell. Used to set up
        deterministic positions.
        Raises:
            ValueError: If the matrix is not square or holds a value that is not a power of two.
        """
        if score < 0 or max_score < 0:
            raise ValueError("Scores must be non-negative.")
        board = Board.from_raw_values(raw_values)
        model = cls(board.size())
        model._board = board
        model._score = score
        model._max_score = max_score
        model._game_over = game_over
        return model

    # --- Queries ---

    def tile(self, col: int, row: int) -> Optional[Tile]:
        """Returns the tile at (col, row), or None if the cell is empty."""
        return self._board.tile(col, row)

    def size(self) -> int:
        return self._board.size()

    def score(self) -> int:
        return self._score

    def max_score(self) -> int:
        """The maximum game score, updated when a game ends."""
        return self._max_score

    def raw_values(self) -> List[List[int]]:
        return self._board.raw_values()

    def game_over(self) -> bool:
        """
        Returns True if the game is over: there are no moves, or a tile has the
        value MAX_PIECE. Refreshes the cached state; the maximum score is raised
        only when this check moves the game into the over state.
        """
        self._check_game_over()
        return self._game_over

    def progress(self) -> GameProgressState:
        """Distinguishes a won game from a lost one."""
        if max_tile_exists(self._board):
            return GameProgressState.GAME_WON
        if self.game_over():
            return GameProgressState.GAME_OVER
        return GameProgressState.IN_PROGRESS

    # --- Observers ---

    def add_observer(self, observer: Callable[["Model"], None]):
        """Registers OBSERVER to be called with this model after each change."""
        self._observers.append(observer)

    def remove_observer(self, observer: Callable[["Model"], None]):
        self._observers.remove(observer)

    def _notify(self):
        for observer in list(self._observers):
            observer(self)

    # --- Mutations ---

    def clear(self):
        """Clear the board to empty and reset the score."""
        self._score = 0
        self._game_over = False
        self._board.clear()
        self._notify()

    def add_tile(self, tile: Tile):
        """
        Add TILE to the board. There must be no tile currently at the same position.
        Raises:
            ValueError: If the cell is occupied or outside the board.
        """
        self._board.add_tile(tile)
        self._check_game_over()
        self._notify()

    def tilt(self, side: Union[Side, str]) -> bool:
        """
        Tilts the board toward SIDE and returns True if this changes the board.

        1. If two tiles are adjacent in the direction of motion and have the
           same value, they merge into one tile of twice the value, and that
           new value is added to the score.
        2. A tile that is the result of a merge does not merge again on the
           same tilt.
        3. When three adjacent tiles in the direction of motion have the same
           value, the leading two merge and the trailing one does not.

        Args:
            side (Union[Side, str]): The side to tilt toward.
        Returns:
            bool: True if any tile moved or merged.
        Raises:
            ValueError: If SIDE is a string naming no side.
        """
        if not isinstance(side, Side):
            side = Side.parse(side)

        self._board.set_viewing_perspective(side)
        try:
            changed = self._compact()
            gained = self._merge()
            moved = self._compact()
            changed = changed or moved or gained > 0
        finally:
            self._board.set_viewing_perspective(Side.NORTH)

        self._score += gained
        logger.debug("Tilted %s: changed=%s, +%d points", side.name, changed, gained)
        self._check_game_over()
        if changed:
            self._notify()
        return changed

    def _compact(self) -> bool:
        """Slides every tile of each column up, closing the gaps between tiles."""
        board = self._board
        n = board.size()
        moved = False
        for col in range(n):
            gaps = 0
            for row in range(n - 1, -1, -1):
                tile = board.tile(col, row)
                if tile is None:
                    gaps += 1
                elif gaps:
                    board.move(col, row + gaps, tile)
                    moved = True
        return moved

    def _merge(self) -> int:
        """
        Merges equal neighbours of each column, scanning from the top row down.
        A row that received a merge is never compared again.
        Returns:
            int: The sum of the values of the merged tiles.
        """
        board = self._board
        n = board.size()
        gained = 0
        for col in range(n):
            row = n - 1
            while row > 0:
                upper = board.tile(col, row)
                lower = board.tile(col, row - 1)
                if upper is not None and lower is not None and upper.value == lower.value:
                    board.move(col, row, lower)
                    gained += 2 * lower.value
                    row -= 2
                else:
                    row -= 1
        return gained

    def _check_game_over(self):
        was_over = self._game_over
        self._game_over = check_game_over(self._board)
        if self._game_over and not was_over:
            logger.info("Game over with score %d", self._score)
            self._max_score = max(self._max_score, self._score)

    # --- Representation ---

    def __str__(self) -> str:
        n = self.size()
        values = self.raw_values()
        lines = ["", "["]
        for row in range(n - 1, -1, -1):
            cells = ["|    " if value == 0 else f"|{value:4d}" for value in values[row]]
            lines.append("".join(cells) + "|")
        over = "over" if self.game_over() else "not over"
        lines.append(f"] {self._score} (max: {self._max_score}) (game is {over}) ")
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return f"Model(size={self.size()}, score={self._score}, max_score={self._max_score})"

    def __eq__(self, other) -> bool:
        if other is None or type(other) is not type(self):
            return False
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))


# --- Tile Spawning ---

def add_random_tile(model: Model, rng=random) -> Optional[Tile]:
    """
    Adds a new tile (90% chance of 2, 10% chance of 4) to a random empty cell.
    Args:
        model (Model): The game to add the tile to.
        rng: Source of randomness with choice() and random(). Default is the random module.
    Returns:
        Optional[Tile]: The added tile, or None if the board is full.
    """
    values = model.raw_values()
    empty_cells = [(col, row)
                   for row in range(model.size())
                   for col in range(model.size())
                   if values[row][col] == 0]
    if not empty_cells:
        return None
    col, row = rng.choice(empty_cells)
    tile = Tile.create(4 if rng.random() < 0.1 else 2, col, row)
    model.add_tile(tile)
    return tile


def new_game(size: int = 4, rng=random) -> Model:
    """
    Starts a new game with two random tiles.
    Raises:
        ValueError: If board size is not a positive integer.
    """
    model = Model(size)
    add_random_tile(model, rng)
    add_random_tile(model, rng)
    return model
