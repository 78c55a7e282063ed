import pytest

from minerisk import (
    Board,
    CellView,
    GameFinished,
    IllegalState,
    InfeasibleConfiguration,
    Outcome,
    OutOfBounds,
    Visibility,
)
from minerisk.utils import spreading_caps


def _expected_clue(board, r, c):
    return sum(1 for nr, nc in board.neighbors(r, c) if board.mines[nr][nc])


# -----------------------------------------------------------------------------
# Placement
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize("rows,cols,mines", [(9, 9, 10), (16, 16, 40), (16, 30, 100)])
def test_placement_respects_count_and_caps(seed, rows, cols, mines):
    board = Board(rows, cols, mines, seed=seed)
    row_cap, col_cap = spreading_caps(rows, cols)

    assert sum(sum(row) for row in board.mines) == mines
    assert board.mine_count == mines
    assert all(sum(row) <= row_cap for row in board.mines)
    assert all(sum(board.mines[r][c] for r in range(rows)) <= col_cap for c in range(cols))


@pytest.mark.parametrize("seed", range(5))
def test_clues_count_adjacent_mines(seed):
    board = Board(9, 9, 10, seed=seed)
    for r in range(9):
        for c in range(9):
            if board.mines[r][c]:
                assert board.clues[r][c] is None
            else:
                assert board.clues[r][c] == _expected_clue(board, r, c)


def test_same_seed_same_layout():
    assert Board(16, 16, 40, seed=11).mines == Board(16, 16, 40, seed=11).mines


@pytest.mark.parametrize(
    "rows,cols,mines",
    [
        (2, 2, 1),    # caps are zero
        (3, 3, 4),    # one mine per row and column at most
        (9, 9, 0),
        (9, 9, 82),
        (0, 5, 1),
    ],
)
def test_infeasible_configurations(rows, cols, mines):
    with pytest.raises(InfeasibleConfiguration):
        Board(rows, cols, mines)


def test_infeasible_is_value_error():
    with pytest.raises(ValueError):
        Board(3, 3, 4)


def test_tight_configuration_places_one_per_line():
    board = Board(3, 3, 3, seed=4)
    assert all(sum(row) == 1 for row in board.mines)
    assert all(sum(board.mines[r][c] for r in range(3)) == 1 for c in range(3))


def test_from_layout_validation():
    with pytest.raises(InfeasibleConfiguration):
        Board.from_layout([])
    with pytest.raises(InfeasibleConfiguration):
        Board.from_layout([[True, False], [False]])
    with pytest.raises(InfeasibleConfiguration):
        Board.from_layout([[False, False], [False, False]])


# -----------------------------------------------------------------------------
# Reveal / flood fill
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("auto_open", [True, False])
def test_single_corner_mine_reveal_wins(auto_open):
    board = Board.from_layout(
        [[True, False, False], [False, False, False], [False, False, False]],
        seed=3,
        auto_open=auto_open,
    )
    assert board.clues == [[None, 1, 0], [1, 1, 0], [0, 0, 0]]

    outcome, payload = board.reveal(2, 2)

    assert outcome is Outcome.WON
    assert len(payload["revealed_cells"]) == 8
    assert "all_mines" not in payload
    assert board.is_hidden(0, 0)
    assert board.revealed_count == 8


@pytest.mark.parametrize("seed", range(20))
def test_first_reveal_is_safe(seed):
    board = Board(9, 9, 10, seed=seed)
    has_blank = any(clue == 0 for row in board.clues for clue in row)

    outcome, payload = board.reveal(0, 0)

    assert outcome is not Outcome.LOST
    revealed = payload["revealed_cells"]
    assert revealed
    if has_blank:
        assert revealed[0][2] == 0


@pytest.mark.parametrize("seed", range(10))
def test_flood_fill_is_complete(seed):
    board = Board(16, 30, 100, seed=seed)
    _, payload = board.reveal(0, 0)
    revealed = payload["revealed_cells"]

    assert len({(r, c) for r, c, _ in revealed}) == len(revealed)
    for r, c, clue in revealed:
        assert not board.mines[r][c]
        assert clue == board.clues[r][c]
        if clue == 0:
            for nr, nc in board.neighbors(r, c):
                assert board.is_revealed(nr, nc)


@pytest.mark.parametrize("seed", range(4))
def test_opening_without_blank_cells_reveals_one_safe_number(seed):
    board = Board.from_layout([[True, False], [False, False]], seed=seed)

    outcome, payload = board.reveal(0, 0)

    assert outcome is Outcome.IN_PROGRESS
    revealed = payload["revealed_cells"]
    assert len(revealed) == 1
    r, c, clue = revealed[0]
    assert (r, c) != (0, 0)
    assert clue == 1
    assert board.is_hidden(0, 0)
    assert board.revealed_count == 1


def test_reveal_after_opening_honours_coordinate(wall_layout):
    board = Board.from_layout(wall_layout, seed=1)

    outcome, _ = board.reveal(0, 4)
    assert outcome is Outcome.IN_PROGRESS
    assert board.revealed_count == 6

    other = (0, 0) if board.is_hidden(0, 0) else (0, 4)
    outcome, payload = board.reveal(*other)
    assert outcome is Outcome.WON
    assert len(payload["revealed_cells"]) == 6


def test_reveal_without_auto_open_is_literal(wall_board):
    outcome, payload = wall_board.reveal(1, 1)
    assert outcome is Outcome.IN_PROGRESS
    assert payload["revealed_cells"] == [(1, 1, 3)]


def test_reveal_flood_stops_at_numbers(wall_board):
    _, payload = wall_board.reveal(0, 0)
    cells = {(r, c) for r, c, _ in payload["revealed_cells"]}
    assert cells == {(r, c) for r in range(3) for c in range(2)}


def test_reveal_mine_loses_and_reports_mines(wall_board):
    outcome, payload = wall_board.reveal(1, 2)
    assert outcome is Outcome.LOST
    assert payload["all_mines"] == frozenset({(0, 2), (1, 2), (2, 2)})
    assert wall_board.is_finished


def test_commands_after_finish_raise(wall_board):
    wall_board.reveal(0, 2)
    with pytest.raises(GameFinished) as exc_info:
        wall_board.reveal(0, 0)
    assert exc_info.value.outcome is Outcome.LOST
    with pytest.raises(GameFinished):
        wall_board.toggle_flag(0, 0)
    with pytest.raises(GameFinished):
        wall_board.chord_reveal(0, 1)
    with pytest.raises(GameFinished):
        wall_board.use_cheat()
    assert wall_board.revealed_count == 1


def test_reveal_revealed_cell_is_noop(wall_board):
    wall_board.reveal(1, 1)
    outcome, payload = wall_board.reveal(1, 1)
    assert outcome is Outcome.IN_PROGRESS
    assert payload["revealed_cells"] == []


def test_reveal_flagged_cell_is_noop(wall_board):
    wall_board.toggle_flag(0, 0)
    _, payload = wall_board.reveal(0, 0)
    assert payload["revealed_cells"] == []
    assert wall_board.is_flagged(0, 0)


@pytest.mark.parametrize("cell", [(-1, 0), (3, 0), (0, 5), (0, -1)])
def test_out_of_bounds(wall_board, cell):
    with pytest.raises(OutOfBounds):
        wall_board.reveal(*cell)
    with pytest.raises(IndexError):
        wall_board.toggle_flag(*cell)


# -----------------------------------------------------------------------------
# Flags and win conditions
# -----------------------------------------------------------------------------


def test_flagging_every_mine_wins(wall_board):
    assert wall_board.toggle_flag(0, 2)[0] is Outcome.IN_PROGRESS
    assert wall_board.toggle_flag(1, 2)[0] is Outcome.IN_PROGRESS
    outcome, payload = wall_board.toggle_flag(2, 2)
    assert payload == {"flagged": True}
    assert outcome is Outcome.WON


def test_flags_must_match_mines_exactly(wall_board):
    wall_board.toggle_flag(0, 0)
    for r in range(3):
        assert wall_board.toggle_flag(r, 2)[0] is Outcome.IN_PROGRESS
    assert wall_board.flags_remaining == -1

    outcome, payload = wall_board.toggle_flag(0, 0)
    assert payload == {"flagged": False}
    assert outcome is Outcome.WON


def test_wrong_flags_of_right_size_do_not_win(wall_board):
    for r in range(3):
        outcome, _ = wall_board.toggle_flag(r, 0)
    assert outcome is Outcome.IN_PROGRESS
    assert wall_board.flagged_cells() == frozenset({(0, 0), (1, 0), (2, 0)})


def test_toggle_flag_on_revealed_cell_is_noop(wall_board):
    wall_board.reveal(1, 1)
    outcome, payload = wall_board.toggle_flag(1, 1)
    assert payload == {"flagged": False}
    assert wall_board.is_revealed(1, 1)
    assert wall_board.flagged_cells() == frozenset()


# -----------------------------------------------------------------------------
# Chord
# -----------------------------------------------------------------------------


def test_chord_needs_matching_flags(two_mine_board):
    two_mine_board.reveal(1, 1)
    _, payload = two_mine_board.chord_reveal(1, 1)
    assert payload["revealed_cells"] == []

    two_mine_board.toggle_flag(0, 0)
    _, payload = two_mine_board.chord_reveal(1, 1)
    assert payload["revealed_cells"] == []


def test_chord_on_covered_or_blank_cell_is_noop(two_mine_board):
    _, payload = two_mine_board.chord_reveal(0, 1)
    assert payload["revealed_cells"] == []

    two_mine_board.reveal(0, 2)
    _, payload = two_mine_board.chord_reveal(0, 2)
    assert payload["revealed_cells"] == []


def test_chord_reveals_unflagged_neighbours(two_mine_board):
    two_mine_board.reveal(0, 1)
    two_mine_board.toggle_flag(0, 0)

    outcome, payload = two_mine_board.chord_reveal(0, 1)

    cells = {(r, c) for r, c, _ in payload["revealed_cells"]}
    assert cells == {(0, 2), (1, 0), (1, 1), (1, 2)}
    assert outcome is Outcome.IN_PROGRESS
    assert two_mine_board.is_flagged(0, 0)


def test_chord_with_misplaced_flag_loses(two_mine_board):
    two_mine_board.reveal(0, 1)
    two_mine_board.toggle_flag(0, 2)

    outcome, payload = two_mine_board.chord_reveal(0, 1)

    assert outcome is Outcome.LOST
    cells = {(r, c) for r, c, _ in payload["revealed_cells"]}
    assert (0, 0) in cells
    assert {(1, 0), (1, 1), (1, 2)} <= cells


# -----------------------------------------------------------------------------
# Cheat / restart
# -----------------------------------------------------------------------------


def test_cheat_opens_blank_regions(wall_board):
    outcome, payload = wall_board.use_cheat()
    assert payload["uses"] == 1
    assert len(payload["revealed_cells"]) == 6
    assert outcome is Outcome.IN_PROGRESS

    outcome, payload = wall_board.use_cheat()
    assert payload["uses"] == 1
    assert outcome is Outcome.WON


def test_cheat_reveals_numbers_when_no_blank_left():
    board = Board.from_layout([[True, False], [False, False]], seed=2, auto_open=False)

    outcome, payload = board.use_cheat(max_reveals=2)
    assert payload["uses"] == 2
    assert len(payload["revealed_cells"]) == 2
    assert all(clue == 1 for _, _, clue in payload["revealed_cells"])
    assert outcome is Outcome.IN_PROGRESS

    outcome, payload = board.use_cheat(max_reveals=3)
    assert payload["uses"] == 1
    assert outcome is Outcome.WON
    assert board.is_hidden(0, 0)


def test_cheat_rejects_zero_reveals(wall_board):
    with pytest.raises(ValueError):
        wall_board.use_cheat(max_reveals=0)


def test_restart_keeps_layout(wall_board):
    mines = [row[:] for row in wall_board.mines]
    wall_board.toggle_flag(0, 0)
    wall_board.reveal(0, 2)
    assert wall_board.outcome is Outcome.LOST

    wall_board.restart()

    assert wall_board.outcome is Outcome.IN_PROGRESS
    assert wall_board.mines == mines
    assert wall_board.revealed_count == 0
    assert wall_board.flagged_cells() == frozenset()
    assert all(view.visibility is Visibility.HIDDEN for _, _, view in wall_board.iter_cells())


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------


def test_clue_requires_revealed_safe_cell(wall_board):
    with pytest.raises(IllegalState):
        wall_board.clue(0, 0)
    wall_board.reveal(1, 1)
    assert wall_board.clue(1, 1) == 3
    assert wall_board.is_revealed_numbered(1, 1)


def test_cell_view_hides_content_until_finished(wall_board):
    assert wall_board.cell_view(0, 2) == CellView(Visibility.HIDDEN)
    wall_board.reveal(1, 1)
    assert wall_board.cell_view(1, 1) == CellView(Visibility.REVEALED, 3, False)

    wall_board.reveal(0, 2)
    assert wall_board.cell_view(2, 2) == CellView(Visibility.HIDDEN, None, True)
    assert wall_board.cell_view(0, 0).clue == 0


def test_snapshot_is_detached(wall_board):
    wall_board.reveal(1, 1)
    snap = wall_board.snapshot()
    wall_board.reveal(0, 0)

    assert snap.dimensions() == (3, 5)
    assert snap.is_hidden(0, 0)
    assert snap.is_revealed_numbered(1, 1)
    assert snap.clue(1, 1) == 3
    with pytest.raises(IllegalState):
        snap.clue(0, 0)
    with pytest.raises(OutOfBounds):
        snap.is_hidden(3, 0)


def test_format_board_marks_cells(wall_board):
    wall_board.reveal(1, 1)
    wall_board.toggle_flag(0, 0)
    text = wall_board.format_board()
    assert "F" in text
    assert "M" not in text
    assert "M" in wall_board.format_board(reveal_all=True)
