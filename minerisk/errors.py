"""Exceptions raised by the board, the solver and the session layer."""

from typing import Any


class MineRiskError(Exception):
    """Base class for every error raised by minerisk."""


class InfeasibleConfiguration(MineRiskError, ValueError):
    """The requested dimensions and mine count cannot produce a valid board."""


class IllegalState(MineRiskError, RuntimeError):
    """A query was made that the current cell state does not allow."""


class OutOfBounds(MineRiskError, IndexError):
    """A coordinate lies outside the board."""

    def __init__(self, row: int, col: int, rows: int, cols: int) -> None:
        super().__init__(
            f"Cell ({row}, {col}) is outside the {rows}x{cols} board."
        )
        self.row = row
        self.col = col


class GameFinished(MineRiskError):
    """A mutating command was issued after the game was won or lost."""

    def __init__(self, outcome: Any) -> None:
        super().__init__(f"The game is already finished ({outcome.value}).")
        self.outcome = outcome
