"""Tests for tilting, scoring and the game model's representation."""
import random

import pytest

from board import Side
from core import MAX_PIECE, Model, add_random_tile, new_game
from tile import Tile


def rotate_ccw(raw):
    """Rotates a (row, col) matrix, row 0 at the bottom, a quarter turn counterclockwise."""
    n = len(raw)
    out = [[0] * n for _ in range(n)]
    for row in range(n):
        for col in range(n):
            out[col][n - 1 - row] = raw[row][col]
    return out


def rotate(raw, turns):
    for _ in range(turns % 4):
        raw = rotate_ccw(raw)
    return raw


# Quarter turns that bring each side to the top.
TURNS_TO_NORTH = {Side.NORTH: 0, Side.EAST: 1, Side.SOUTH: 2, Side.WEST: 3}


def random_raw(rng, size):
    values = [0, 0, 2, 2, 4, 4, 8, 16]
    return [[rng.choice(values) for _ in range(size)] for _ in range(size)]


def column(model, col):
    return [model.raw_values()[row][col] for row in range(model.size())]


def test_tilt_west_example():
    model = Model.from_raw_values([
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [2, 2, 4, 0],
    ])
    assert model.tilt(Side.WEST) is True
    assert model.raw_values()[3] == [4, 4, 0, 0]
    assert model.score() == 4


def test_tilt_south_merges_leading_pair():
    model = Model.from_raw_values([
        [0, 0, 0, 0],
        [2, 0, 0, 0],
        [2, 0, 0, 0],
        [2, 0, 0, 0],
    ])
    assert model.tilt("south") is True
    assert column(model, 0) == [4, 2, 0, 0]
    assert model.score() == 4


def test_three_equal_tiles_merge_once():
    model = Model.from_raw_values([
        [2, 0, 0],
        [2, 0, 0],
        [2, 0, 0],
    ])
    model.tilt(Side.NORTH)
    assert column(model, 0) == [0, 2, 4]
    assert model.score() == 4


def test_merged_tile_does_not_merge_again():
    model = Model.from_raw_values([
        [2, 2, 4, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ])
    model.tilt(Side.EAST)
    assert model.raw_values()[0] == [0, 0, 4, 4]
    assert model.score() == 4


def test_two_pairs_in_a_line_both_merge():
    model = Model.from_raw_values([
        [4, 4, 2, 2],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ])
    model.tilt(Side.WEST)
    assert model.raw_values()[0] == [8, 4, 0, 0]
    assert model.score() == 12


def test_gap_between_equal_tiles_is_closed_before_merging():
    model = Model.from_raw_values([
        [2, 0, 0, 2],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ])
    assert model.tilt(Side.EAST) is True
    assert model.raw_values()[0] == [0, 0, 0, 4]


def test_slide_without_merge_changes_board():
    model = Model.from_raw_values([
        [2, 0],
        [0, 0],
    ])
    assert model.tilt(Side.NORTH) is True
    assert model.raw_values() == [[0, 0], [2, 0]]
    assert model.score() == 0


def test_noop_tilt_is_idempotent():
    model = Model.from_raw_values([
        [0, 0, 0],
        [0, 0, 0],
        [2, 4, 2],
    ], score=10)
    before = str(model)
    assert model.tilt(Side.NORTH) is False
    assert str(model) == before
    assert model.tilt(Side.NORTH) is False
    assert str(model) == before
    assert model.score() == 10


def test_tilt_restores_north_perspective():
    model = Model.from_raw_values([[2, 0], [0, 0]])
    model.tilt(Side.EAST)
    assert model.tile(1, 0) == Tile(2, 1, 0)


def test_tilt_rejects_unknown_side():
    model = Model(4)
    with pytest.raises(ValueError):
        model.tilt("diagonal")


@pytest.mark.parametrize("seed", range(25))
@pytest.mark.parametrize("side", list(Side))
def test_tilt_matches_rotated_north_tilt(seed, side):
    rng = random.Random(seed)
    raw = random_raw(rng, rng.choice([2, 3, 4, 5]))

    direct = Model.from_raw_values(raw)
    changed = direct.tilt(side)

    turns = TURNS_TO_NORTH[side]
    rotated = Model.from_raw_values(rotate(raw, turns))
    rotated_changed = rotated.tilt(Side.NORTH)

    assert changed == rotated_changed
    assert direct.score() == rotated.score()
    assert direct.raw_values() == rotate(rotated.raw_values(), 4 - turns)


@pytest.mark.parametrize("seed", range(25))
def test_tilt_conserves_tile_sum(seed):
    rng = random.Random(seed)
    raw = random_raw(rng, 4)
    model = Model.from_raw_values(raw)
    side = rng.choice(list(Side))

    tiles_before = sum(1 for row in raw for value in row if value)
    model.tilt(side)
    after = model.raw_values()
    tiles_after = sum(1 for row in after for value in row if value)

    assert sum(map(sum, after)) == sum(map(sum, raw))
    merges = tiles_before - tiles_after
    assert merges >= 0
    assert (model.score() > 0) == (merges > 0)
    assert model.score() % 4 == 0


@pytest.mark.parametrize("seed", range(10))
def test_unchanged_tilt_keeps_state(seed):
    rng = random.Random(seed)
    model = Model.from_raw_values(random_raw(rng, 4))
    side = rng.choice(list(Side))
    while model.tilt(side):
        pass
    snapshot = str(model)
    assert model.tilt(side) is False
    assert str(model) == snapshot


def test_clear_resets_score_but_keeps_max_score():
    model = Model.from_raw_values([[2, 4], [4, 2]], score=20, max_score=8)
    assert model.game_over() is True
    assert model.max_score() == 20
    model.clear()
    assert model.score() == 0
    assert model.max_score() == 20
    assert model.game_over() is False
    assert model.raw_values() == [[0, 0], [0, 0]]


def test_string_rendering():
    model = Model.from_raw_values([
        [2, 0],
        [0, 1024],
    ], score=12, max_score=30)
    assert str(model) == (
        "\n[\n"
        "|    |1024|\n"
        "|   2|    |\n"
        "] 12 (max: 30) (game is not over) \n"
    )


def test_equality_uses_observable_state():
    raw = [[2, 0], [0, 4]]
    assert Model.from_raw_values(raw, 4, 8) == Model.from_raw_values(raw, 4, 8)
    assert hash(Model.from_raw_values(raw, 4)) == hash(Model.from_raw_values(raw, 4))
    assert Model.from_raw_values(raw, 4) != Model.from_raw_values(raw, 8)
    assert Model.from_raw_values(raw) != Model.from_raw_values([[2, 0], [4, 0]])
    assert Model(2) != None
    assert Model(2) != "not a model"


def test_observers_see_changes():
    model = Model(2)
    seen = []
    model.add_observer(seen.append)
    model.add_tile(Tile.create(2, 0, 0))
    assert model.tilt(Side.WEST) is False
    model.tilt(Side.NORTH)
    model.clear()
    assert seen == [model, model, model]
    model.remove_observer(seen.append)
    model.add_tile(Tile.create(2, 0, 0))
    assert len(seen) == 3


class FixedRandom:
    """Deterministic stand-in for the random module."""

    def __init__(self, roll):
        self.roll = roll

    def choice(self, seq):
        return seq[0]

    def random(self):
        return self.roll


def test_add_random_tile_fills_first_empty_cell():
    model = Model.from_raw_values([[2, 0], [0, 0]])
    tile = add_random_tile(model, FixedRandom(0.5))
    assert tile == Tile(2, 1, 0)
    assert model.raw_values() == [[2, 2], [0, 0]]
    tile = add_random_tile(model, FixedRandom(0.05))
    assert tile.value == 4


def test_add_random_tile_on_full_board():
    model = Model.from_raw_values([[2, 4], [8, 16]])
    assert add_random_tile(model) is None


def test_new_game_has_two_tiles():
    model = new_game(4, random.Random(3))
    values = [value for row in model.raw_values() for value in row if value]
    assert len(values) == 2
    assert set(values) <= {2, 4}
    assert model.score() == 0
    assert model.game_over() is False


def test_reaching_max_piece_ends_game():
    half = MAX_PIECE // 2
    model = Model.from_raw_values([
        [half, half, 0],
        [0, 0, 0],
        [0, 0, 0],
    ], score=100)
    model.tilt(Side.WEST)
    assert model.tile(0, 0).value == MAX_PIECE
    assert model.score() == 100 + MAX_PIECE
    assert model.game_over() is True
    assert model.max_score() == 100 + MAX_PIECE
