import pytest

from minerisk import (
    Board,
    Cheat,
    Chord,
    GameSession,
    NewGame,
    Outcome,
    OutOfBounds,
    Restart,
    Reveal,
    SecondaryClick,
    ToggleFlag,
    ToggleHints,
)


@pytest.fixture
def session():
    return GameSession(16, 30, 100, seed=5)


@pytest.fixture
def wall_session(wall_layout):
    s = GameSession(9, 9, 10, seed=0)
    s.board = Board.from_layout(wall_layout, seed=0, auto_open=False)
    return s


def test_first_reveal_is_safe(session):
    result = session.apply(Reveal(0, 0))
    assert not result.rejected
    assert result.outcome is not Outcome.LOST
    assert result.revealed_cells
    assert result.overlay is None


def test_cheat_allowance(session):
    for _ in range(3):
        result = session.apply(Cheat())
        assert not result.rejected
    assert session.cheats_left == 0

    result = session.apply(Cheat())
    assert result.rejected
    assert result.message == "No cheats left."

    session.apply(Restart())
    assert session.cheats_left == 3


def test_new_game_resets_cheats_and_dimensions(session):
    session.apply(Cheat())
    result = session.apply(NewGame(9, 9, 10))
    assert session.board.dimensions() == (9, 9)
    assert session.board.mine_count == 10
    assert session.cheats_left == 3
    assert result.outcome is Outcome.IN_PROGRESS


def test_commands_after_loss_are_rejected(wall_session):
    result = wall_session.apply(Reveal(0, 2))
    assert result.outcome is Outcome.LOST
    assert "lost" in result.message

    result = wall_session.apply(Reveal(0, 0))
    assert result.rejected
    assert result.outcome is Outcome.LOST
    assert result.revealed_cells == []

    assert wall_session.apply(ToggleFlag(0, 0)).rejected
    assert wall_session.board.revealed_count == 1


def test_restart_after_loss(wall_session):
    wall_session.apply(Reveal(0, 2))
    result = wall_session.apply(Restart())
    assert result.outcome is Outcome.IN_PROGRESS
    assert not wall_session.apply(Reveal(0, 0)).rejected


def test_flag_messages(wall_session):
    assert wall_session.apply(ToggleFlag(0, 0)).message == "Flag placed."
    assert wall_session.board.is_flagged(0, 0)
    assert wall_session.apply(ToggleFlag(0, 0)).message == "Flag removed."

    wall_session.apply(Reveal(1, 1))
    assert wall_session.apply(ToggleFlag(1, 1)).message == ""


def test_flag_win(wall_session):
    for r in range(3):
        result = wall_session.apply(ToggleFlag(r, 2))
    assert result.outcome is Outcome.WON
    assert "won" in result.message


def test_secondary_click_flags_or_chords(two_mine_board):
    s = GameSession(9, 9, 10, seed=1)
    s.board = two_mine_board

    s.apply(Reveal(0, 1))
    s.apply(SecondaryClick(0, 0))
    assert two_mine_board.is_flagged(0, 0)

    result = s.apply(SecondaryClick(0, 1))
    cells = {(r, c) for r, c, _ in result.revealed_cells}
    assert cells == {(0, 2), (1, 0), (1, 1), (1, 2)}


def test_chord_command(two_mine_board):
    s = GameSession(9, 9, 10, seed=1)
    s.board = two_mine_board
    s.apply(Reveal(1, 1))
    result = s.apply(Chord(1, 1))
    assert result.revealed_cells == []
    assert not result.rejected


def test_hints_attach_overlay(wall_session):
    result = wall_session.apply(ToggleHints())
    assert wall_session.hints_enabled
    assert result.message == "Hints on."
    assert len(result.overlay) == 15

    result = wall_session.apply(Reveal(1, 1))
    assert result.overlay is not None
    assert result.overlay[(0, 0)].probability == pytest.approx(3 / 8)

    result = wall_session.apply(ToggleHints())
    assert result.overlay is None


def test_out_of_bounds_propagates(wall_session):
    with pytest.raises(OutOfBounds):
        wall_session.apply(Reveal(9, 9))


def test_unknown_command(wall_session):
    with pytest.raises(TypeError):
        wall_session.apply("reveal")


def test_from_preset():
    s = GameSession.from_preset("easy", seed=3)
    rows, cols = s.board.dimensions()
    assert rows == cols
    assert 8 <= rows <= 10
    assert s.board.mine_count == 10

    hard = GameSession.from_preset("hard", seed=3)
    assert hard.board.dimensions() == (16, 30)

    with pytest.raises(KeyError):
        GameSession.from_preset("impossible")
