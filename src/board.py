# board.py
# The N x N board of tiles and the viewing perspective used by the tilt logic.
#
# Coordinate system: column C, row R of the board, with (0, 0) at the lower-left
# corner, like (x, y) coordinates. Tiles are stored in absolute coordinates; the
# viewing perspective only changes how (col, row) arguments are interpreted.

from enum import Enum
from typing import List, Optional, Tuple
import logging

from tile import Tile

logger = logging.getLogger(__name__)


class Side(Enum):
    """
    The four sides of the board. Each member carries the transform that makes
    it behave as the canonical "up" direction:
    (col0, row0, dcol, drow).
    """
    NORTH = (0, 0, 0, 1)
    EAST = (0, 1, 1, 0)
    SOUTH = (1, 1, 0, -1)
    WEST = (1, 0, -1, 0)

    @classmethod
    def parse(cls, text: str) -> "Side":
        """
        Parses a side from its name or from up/right/down/left.
        Raises:
            ValueError: If the text names no side.
        """
        key = str(text).strip().upper()
        aliases = {"UP": cls.NORTH, "RIGHT": cls.EAST, "DOWN": cls.SOUTH, "LEFT": cls.WEST}
        if key in aliases:
            return aliases[key]
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown side: {text!r}.") from None


def to_absolute(col: int, row: int, side: Side, size: int) -> Tuple[int, int]:
    """
    Maps a (col, row) seen from SIDE to absolute board coordinates.
    Args:
        col (int): Column in the SIDE perspective.
        row (int): Row in the SIDE perspective.
        side (Side): The side treated as "up".
        size (int): Board dimension.
    Returns:
        Tuple[int, int]: The absolute (col, row).
    """
    col0, row0, dcol, drow = side.value
    last = size - 1
    return col0 * last + col * drow + row * dcol, row0 * last - col * dcol + row * drow


class Board:
    """An N x N grid holding at most one Tile per cell."""

    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("Board size must be a positive integer.")
        self._size = size
        self._tiles: List[List[Optional[Tile]]] = [[None] * size for _ in range(size)]
        self._perspective = Side.NORTH

    @classmethod
    def from_raw_values(cls, raw_values: List[List[int]]) -> "Board":
        """
        Builds a board from a (row, col)-indexed matrix of values.
        Row 0 is the bottom row and 0 denotes an empty cell.
        Raises:
            ValueError: If the matrix is not a non-empty square or holds an invalid value.
        """
        if not raw_values or not all(len(row) == len(raw_values) for row in raw_values):
            raise ValueError("Board must be a non-empty square matrix.")
        board = cls(len(raw_values))
        for row, values in enumerate(raw_values):
            for col, value in enumerate(values):
                if value != 0:
                    board.add_tile(Tile.create(value, col, row))
        return board

    def size(self) -> int:
        return self._size

    def set_viewing_perspective(self, side: Side):
        """Interprets subsequent tile/move coordinates as if SIDE were north."""
        self._perspective = side

    def _check_range(self, col: int, row: int):
        if not (0 <= col < self._size and 0 <= row < self._size):
            raise ValueError(f"Position ({col}, {row}) is outside a {self._size}x{self._size} board.")

    def _absolute(self, col: int, row: int) -> Tuple[int, int]:
        self._check_range(col, row)
        return to_absolute(col, row, self._perspective, self._size)

    def tile(self, col: int, row: int) -> Optional[Tile]:
        """Returns the tile at (col, row) in the current perspective, or None."""
        abs_col, abs_row = self._absolute(col, row)
        stored = self._tiles[abs_col][abs_row]
        if stored is None:
            return None
        return stored.moved_to(col, row)

    def move(self, col: int, row: int, tile: Tile) -> bool:
        """
        Moves TILE to (col, row) in the current perspective. If another tile
        occupies the destination it is replaced by a tile of double value.
        Args:
            col (int): Destination column.
            row (int): Destination row.
            tile (Tile): A tile previously read from this board in the same perspective.
        Returns:
            bool: True if the move was a merge.
        Raises:
            ValueError: If a position is out of range or TILE is not on the board.
        """
        src_col, src_row = self._absolute(tile.col, tile.row)
        dst_col, dst_row = self._absolute(col, row)
        stored = self._tiles[src_col][src_row]
        if stored is None or stored.value != tile.value:
            raise ValueError(f"No tile of value {tile.value} at ({tile.col}, {tile.row}).")
        if (src_col, src_row) == (dst_col, dst_row):
            return False

        occupant = self._tiles[dst_col][dst_row]
        self._tiles[src_col][src_row] = None
        if occupant is None:
            self._tiles[dst_col][dst_row] = stored.moved_to(dst_col, dst_row)
            return False
        self._tiles[dst_col][dst_row] = stored.merged_to(dst_col, dst_row)
        logger.debug("Merged %d into (%d, %d)", 2 * stored.value, dst_col, dst_row)
        return True

    def add_tile(self, tile: Tile):
        """
        Places TILE at its absolute position.
        Raises:
            ValueError: If the position is out of range or already occupied.
        """
        self._check_range(tile.col, tile.row)
        if self._tiles[tile.col][tile.row] is not None:
            raise ValueError(f"Cell ({tile.col}, {tile.row}) is already occupied.")
        self._tiles[tile.col][tile.row] = tile

    def clear(self):
        for column in self._tiles:
            for row in range(self._size):
                column[row] = None

    def raw_values(self) -> List[List[int]]:
        """Absolute (row, col)-indexed values, row 0 at the bottom, 0 for empty."""
        return [
            [0 if self._tiles[col][row] is None else self._tiles[col][row].value
             for col in range(self._size)]
            for row in range(self._size)
        ]

    def __repr__(self) -> str:
        return f"Board(size={self._size}, perspective={self._perspective.name})"
