"""
Minesweeper Risk Core

Board mechanics for a grid mine-detection puzzle plus a risk solver:
- Board: spread-out mine placement, safe opening, flood fill, chord reveal,
  flags, cheats and win/loss detection
- Solver: fixed-point local deduction (saturated / starved / effective
  starvation rules) and a pooled-evidence risk estimate for the rest
- Session: command dispatcher and terminal UI over the two
"""

from .engine import Board, BoardSnapshot, CellView, Outcome, Visibility
from .errors import (
    GameFinished,
    IllegalState,
    InfeasibleConfiguration,
    MineRiskError,
    OutOfBounds,
)
from .solver import (
    CellResult,
    CellStatus,
    MineRiskSolver,
    SolverReport,
    run_solver,
)
from .session import (
    Cheat,
    Chord,
    CommandResult,
    GameSession,
    NewGame,
    Restart,
    Reveal,
    SecondaryClick,
    ToggleFlag,
    ToggleHints,
    play_cli,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Board",
    "BoardSnapshot",
    "CellView",
    "Outcome",
    "Visibility",
    "MineRiskSolver",
    "SolverReport",
    "CellResult",
    "CellStatus",
    "run_solver",
    # Errors
    "MineRiskError",
    "InfeasibleConfiguration",
    "IllegalState",
    "GameFinished",
    "OutOfBounds",
    # Session / CLI
    "GameSession",
    "CommandResult",
    "Reveal",
    "Chord",
    "ToggleFlag",
    "SecondaryClick",
    "Cheat",
    "Restart",
    "NewGame",
    "ToggleHints",
    "play_cli",
]
