"""Command dispatcher that sits between a user interface and the board/solver core."""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union, cast

from .config import CHEAT_ALLOWANCE, DEFAULT_PASS_LIMIT, resolve_preset
from .engine import Board, Outcome, RevealedCell
from .errors import GameFinished
from .solver import Cell, CellResult, MineRiskSolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reveal:
    row: int
    col: int


@dataclass(frozen=True)
class Chord:
    row: int
    col: int


@dataclass(frozen=True)
class ToggleFlag:
    row: int
    col: int


@dataclass(frozen=True)
class SecondaryClick:
    """Right click: chord on a revealed cell, flag toggle anywhere else."""

    row: int
    col: int


@dataclass(frozen=True)
class Cheat:
    pass


@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class NewGame:
    rows: int
    cols: int
    mine_count: int


@dataclass(frozen=True)
class ToggleHints:
    pass


Command = Union[
    Reveal, Chord, ToggleFlag, SecondaryClick, Cheat, Restart, NewGame, ToggleHints
]


@dataclass
class CommandResult:
    """What a command did, for the caller to render."""

    outcome: Outcome
    revealed_cells: List[RevealedCell] = field(default_factory=list)
    message: str = ""
    rejected: bool = False
    overlay: Optional[Dict[Cell, CellResult]] = None


class GameSession:
    """
    Owns the current board and translates commands into board calls.

    The session enforces the per-game cheat allowance and, when hints are
    enabled, attaches a fresh solver overlay to every result.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        mine_count: int,
        *,
        seed: Optional[int] = None,
        cheat_allowance: int = CHEAT_ALLOWANCE,
        pass_limit: int = DEFAULT_PASS_LIMIT,
    ) -> None:
        self._rng = random.Random(seed)
        self.cheat_allowance: int = cheat_allowance
        self.solver = MineRiskSolver(pass_limit=pass_limit)
        self.hints_enabled: bool = False
        self.board: Board = self._new_board(rows, cols, mine_count)
        self.cheats_used: int = 0

    @classmethod
    def from_preset(cls, name: str, *, seed: Optional[int] = None, **kwargs) -> "GameSession":
        """Start a session on a named difficulty preset ("easy", "medium", "hard")."""
        rows, cols, mines = resolve_preset(name, random.Random(seed))
        return cls(rows, cols, mines, seed=seed, **kwargs)

    def _new_board(self, rows: int, cols: int, mine_count: int) -> Board:
        return Board(rows, cols, mine_count, seed=self._rng.randrange(2**32))

    @property
    def outcome(self) -> Outcome:
        return self.board.outcome

    @property
    def cheats_left(self) -> int:
        return max(0, self.cheat_allowance - self.cheats_used)

    def risk_overlay(self) -> Dict[Cell, CellResult]:
        """Run the solver over a snapshot of the current board."""
        return self.solver.run(self.board.snapshot())

    def apply(self, command: Command) -> CommandResult:
        """
        Execute one command against the current board.

        Commands issued after the game ended come back with ``rejected=True``
        instead of raising. Out-of-range coordinates still raise OutOfBounds.
        """
        try:
            result = self._dispatch(command)
        except GameFinished as exc:
            logger.debug("Rejected %r: game already %s.", command, exc.outcome.value)
            result = CommandResult(
                outcome=exc.outcome,
                message=f"Game already {exc.outcome.value}.",
                rejected=True,
            )

        if self.hints_enabled:
            result.overlay = self.risk_overlay()
        return result

    def _dispatch(self, command: Command) -> CommandResult:
        board = self.board

        if isinstance(command, Reveal):
            return self._from_payload(*board.reveal(command.row, command.col))

        if isinstance(command, Chord):
            return self._from_payload(*board.chord_reveal(command.row, command.col))

        if isinstance(command, SecondaryClick):
            if board.is_revealed(command.row, command.col):
                return self._from_payload(*board.chord_reveal(command.row, command.col))
            return self._apply_flag(command.row, command.col)

        if isinstance(command, ToggleFlag):
            return self._apply_flag(command.row, command.col)

        if isinstance(command, Cheat):
            if self.cheats_left == 0:
                return CommandResult(
                    outcome=board.outcome, message="No cheats left.", rejected=True
                )
            outcome, payload = board.use_cheat(max_reveals=self.cheats_left)
            self.cheats_used += cast(int, payload["uses"])
            result = self._from_payload(outcome, payload)
            result.message = result.message or f"{self.cheats_left} cheat(s) left."
            return result

        if isinstance(command, Restart):
            board.restart()
            self.cheats_used = 0
            return CommandResult(outcome=board.outcome, message="Board restarted.")

        if isinstance(command, NewGame):
            self.board = self._new_board(command.rows, command.cols, command.mine_count)
            self.cheats_used = 0
            return CommandResult(outcome=self.board.outcome, message="New game.")

        if isinstance(command, ToggleHints):
            self.hints_enabled = not self.hints_enabled
            state = "on" if self.hints_enabled else "off"
            return CommandResult(outcome=board.outcome, message=f"Hints {state}.")

        raise TypeError(f"Unknown command: {command!r}")

    def _apply_flag(self, row: int, col: int) -> CommandResult:
        outcome, payload = self.board.toggle_flag(row, col)
        if self.board.is_revealed(row, col):
            return CommandResult(outcome=outcome)
        return self._from_payload(outcome, {"revealed_cells": []}, flagged=payload["flagged"])

    @staticmethod
    def _from_payload(
        outcome: Outcome, payload: Dict[str, object], flagged: object = None
    ) -> CommandResult:
        revealed = cast(List[RevealedCell], payload.get("revealed_cells", []))
        message = ""
        if outcome is Outcome.LOST:
            message = "You hit a mine. You lost."
        elif outcome is Outcome.WON:
            message = "You cleared the board. You won!"
        elif flagged is not None:
            message = "Flag placed." if flagged else "Flag removed."
        return CommandResult(outcome=outcome, revealed_cells=revealed, message=message)


def _parse_cell(parts: List[str]) -> Optional[Tuple[int, int]]:
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def play_cli(session: GameSession) -> None:
    """
    Run a simple terminal UI over a GameSession.

    Args:
        session: The session to play.
    """
    from .analysis import format_risk_overlay

    print(
        "Minesweeper CLI. Coordinates are 0-based (row col).\n"
        "  r R C   reveal        f R C   toggle flag     c R C   chord\n"
        "  cheat   reveal a safe square   hint   toggle risk overlay\n"
        "  restart | new | q\n"
    )
    print(session.board.format_board())

    while True:
        s = input("\nCommand: ").strip().lower()
        if s in {"q", "quit", "exit"}:
            print("Quit.")
            return

        parts = s.replace(",", " ").split()
        if not parts:
            continue
        verb, args = parts[0], parts[1:]

        command: Optional[Command] = None
        if verb in {"r", "f", "c"}:
            cell = _parse_cell(args)
            if cell is None:
                print("Invalid input. Example: r 3 5")
                continue
            if not session.board.in_bounds(*cell):
                print("That cell is outside the board.")
                continue
            command = {"r": Reveal, "f": ToggleFlag, "c": Chord}[verb](*cell)
        elif verb == "cheat":
            command = Cheat()
        elif verb == "hint":
            command = ToggleHints()
        elif verb == "restart":
            command = Restart()
        elif verb == "new":
            rows, cols = session.board.dimensions()
            command = NewGame(rows, cols, session.board.mine_count)
        else:
            print("Unknown command.")
            continue

        result = session.apply(command)
        print()
        print(session.board.format_board())
        if result.overlay is not None:
            print()
            print("Overlay: S safe, X mine, ? no data, NN = estimated risk in %.")
            print(format_risk_overlay(session.board, result.overlay))
        if result.message:
            print(f"\n{result.message}")
