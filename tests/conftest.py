import matplotlib

matplotlib.use("Agg")

import pytest

from minerisk import Board
from minerisk.engine import BoardSnapshot


@pytest.fixture
def wall_layout():
    """3x5 board whose middle column is all mines; two separate blank regions."""
    return [
        [False, False, True, False, False],
        [False, False, True, False, False],
        [False, False, True, False, False],
    ]


@pytest.fixture
def wall_board(wall_layout):
    return Board.from_layout(wall_layout, seed=0, auto_open=False)


@pytest.fixture
def two_mine_board():
    """3x3 board with mines in opposite corners (0,0) and (2,2)."""
    return Board.from_layout(
        [
            [True, False, False],
            [False, False, False],
            [False, False, True],
        ],
        seed=0,
        auto_open=False,
    )


def _make_snapshot(grid):
    revealed = tuple(tuple(tok != "H" for tok in row) for row in grid)
    clues = tuple(tuple(None if tok == "H" else tok for tok in row) for row in grid)
    return BoardSnapshot(rows=len(grid), cols=len(grid[0]), revealed=revealed, visible_clues=clues)


@pytest.fixture
def snapshot_of():
    """
    Build a BoardSnapshot from rows of tokens: "H" for a covered cell, an int
    for a revealed clue.
    """
    return _make_snapshot

