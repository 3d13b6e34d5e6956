# tile.py
# Immutable tile value object used by the board and the game engine.

from dataclasses import dataclass


def is_power_of_two(value: int) -> bool:
    """Returns True if value is a positive power of two."""
    return isinstance(value, int) and value > 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class Tile:
    """A numbered tile at (col, row) in the frame of the board it was read from."""
    value: int
    col: int
    row: int

    def __post_init__(self):
        if not is_power_of_two(self.value):
            raise ValueError(f"Tile value must be a positive power of two, got {self.value!r}.")

    @classmethod
    def create(cls, value: int, col: int, row: int) -> "Tile":
        """
        Creates a tile; the constructor checks its value.
        Args:
            value (int): Tile value, a positive power of two.
            col (int): Column of the tile.
            row (int): Row of the tile.
        Returns:
            Tile: The new tile.
        Raises:
            ValueError: If value is not a positive power of two.
        """
        return cls(value, col, row)

    def moved_to(self, col: int, row: int) -> "Tile":
        return Tile(self.value, col, row)

    def merged_to(self, col: int, row: int) -> "Tile":
        """The tile produced by merging this tile with an equal one at (col, row)."""
        return Tile(2 * self.value, col, row)

    def __str__(self) -> str:
        return f"{self.value}@({self.col}, {self.row})"
