"""Minesweeper board: constrained mine placement, reveal cascades and terminal detection."""

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import (
    Callable,
    Deque,
    Dict,
    FrozenSet,
    Iterator,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    cast,
)

from .config import CHEAT_REVEALS, PLACEMENT_ATTEMPTS
from .errors import GameFinished, IllegalState, InfeasibleConfiguration, OutOfBounds
from .utils import get_neighborhoods, spreading_caps, wrapped_scan

logger = logging.getLogger(__name__)

RevealedCell = Tuple[int, int, Optional[int]]


class Visibility(Enum):
    """What the player currently sees on a cell."""

    HIDDEN = "hidden"
    REVEALED = "revealed"
    FLAGGED = "flagged"


class Outcome(Enum):
    """Game outcome; sticky once it leaves IN_PROGRESS."""

    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class CellView:
    """
    Render-facing view of a single cell.

    ``clue`` is the adjacent-mine count of a revealed safe cell and ``None``
    otherwise. Once the game is finished every cell exposes its true content.
    """

    visibility: Visibility
    clue: Optional[int] = None
    is_mine: bool = False


def check_feasible(rows: int, cols: int, mine_count: int) -> None:
    """
    Reject dimension/mine-count combinations that no spread-out layout can satisfy.

    A row may hold at most ``2*rows//3 - 1`` mines and a column at most
    ``2*cols//3 - 1`` mines.

    Raises:
        InfeasibleConfiguration: If no layout satisfies the caps.
    """
    if rows <= 0 or cols <= 0:
        raise InfeasibleConfiguration("Rows and columns must be positive.")
    if mine_count <= 0 or mine_count > rows * cols:
        raise InfeasibleConfiguration(
            f"mine_count must be in 1..{rows * cols} for a {rows}x{cols} board."
        )

    row_cap, col_cap = spreading_caps(rows, cols)
    if row_cap < 1 or col_cap < 1:
        raise InfeasibleConfiguration(
            f"A {rows}x{cols} board is too small to spread any mines."
        )
    capacity = min(rows * min(row_cap, cols), cols * min(col_cap, rows))
    if mine_count > capacity:
        raise InfeasibleConfiguration(
            f"At most {capacity} mines fit on a {rows}x{cols} board "
            f"(row cap {row_cap}, column cap {col_cap}); got {mine_count}."
        )


class Board:
    """Board state machine: owns the mine layout, clues, visibility and outcome."""

    def __init__(
        self,
        rows: int,
        cols: int,
        mine_count: int,
        *,
        seed: Optional[int] = None,
        auto_open: bool = True,
    ) -> None:
        """
        Create a board with a freshly placed, spread-out mine layout.

        Args:
            rows: Number of rows.
            cols: Number of columns.
            mine_count: Number of mines to place.
            seed: Seed for the board's private random generator (placement,
                auto-opener and cheat scans).
            auto_open: If True, the first reveal opens a random blank region
                instead of the requested cell.

        Raises:
            InfeasibleConfiguration: If the mine count cannot satisfy the
                per-row/per-column caps, or placement exhausts its attempts.
        """
        check_feasible(rows, cols, mine_count)
        rng = random.Random(seed)
        mines = _place_mines(rows, cols, mine_count, rng)
        self._init_state(mines, rng, auto_open)

    @classmethod
    def from_layout(
        cls,
        mines: Sequence[Sequence[bool]],
        *,
        seed: Optional[int] = None,
        auto_open: bool = True,
    ) -> "Board":
        """
        Build a board from an explicit mine grid, bypassing the spreading caps.

        Raises:
            InfeasibleConfiguration: If the grid is empty, ragged or mine-free.
        """
        if not mines or not mines[0]:
            raise InfeasibleConfiguration("Layout must have at least one cell.")
        width = len(mines[0])
        if any(len(row) != width for row in mines):
            raise InfeasibleConfiguration("Layout rows must all have the same length.")
        grid = [[bool(v) for v in row] for row in mines]
        if not any(any(row) for row in grid):
            raise InfeasibleConfiguration("Layout must contain at least one mine.")

        board = cls.__new__(cls)
        board._init_state(grid, random.Random(seed), auto_open)
        return board

    def _init_state(
        self, mines: List[List[bool]], rng: random.Random, auto_open: bool
    ) -> None:
        self.rows: int = len(mines)
        self.cols: int = len(mines[0])
        self.mines: List[List[bool]] = mines
        self.mine_count: int = sum(sum(row) for row in mines)
        self.auto_open: bool = auto_open
        self._rng = rng
        self._neighborhoods: Dict[
            Tuple[int, int], Tuple[Tuple[int, int], ...]
        ] = get_neighborhoods(self.rows, self.cols)
        self._mine_cells: FrozenSet[Tuple[int, int]] = frozenset(
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if mines[r][c]
        )

        # clues[r][c]: None for a mine, else the count of adjacent mines.
        self.clues: List[List[Optional[int]]] = [
            [
                None
                if mines[r][c]
                else sum(1 for nr, nc in self.neighbors(r, c) if mines[nr][nc])
                for c in range(self.cols)
            ]
            for r in range(self.rows)
        ]
        self._reset_visibility()
        logger.info(
            "Created %dx%d board with %d mines.", self.rows, self.cols, self.mine_count
        )

    def _reset_visibility(self) -> None:
        self.visibility: List[List[Visibility]] = [
            [Visibility.HIDDEN for _ in range(self.cols)] for _ in range(self.rows)
        ]
        self._flags: Set[Tuple[int, int]] = set()
        self._opened: bool = False
        self._mine_revealed: bool = False
        self._revealed_count: int = 0
        self._safe_unrevealed: int = self.rows * self.cols - self.mine_count
        self.outcome: Outcome = Outcome.IN_PROGRESS

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def dimensions(self) -> Tuple[int, int]:
        """Return (rows, cols)."""
        return self.rows, self.cols

    @property
    def is_finished(self) -> bool:
        return self.outcome is not Outcome.IN_PROGRESS

    @property
    def revealed_count(self) -> int:
        return self._revealed_count

    @property
    def flags_remaining(self) -> int:
        """Mines not yet accounted for by a flag (negative when over-flagged)."""
        return self.mine_count - len(self._flags)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def neighbors(self, row: int, col: int) -> Tuple[Tuple[int, int], ...]:
        """Return precomputed Moore-neighbourhood coordinates for a cell."""
        return self._neighborhoods[(row, col)]

    def is_revealed(self, row: int, col: int) -> bool:
        self._check_bounds(row, col)
        return self.visibility[row][col] is Visibility.REVEALED

    def is_flagged(self, row: int, col: int) -> bool:
        self._check_bounds(row, col)
        return self.visibility[row][col] is Visibility.FLAGGED

    def is_hidden(self, row: int, col: int) -> bool:
        """True for any covered cell, flagged or not."""
        self._check_bounds(row, col)
        return self.visibility[row][col] is not Visibility.REVEALED

    def is_revealed_numbered(self, row: int, col: int) -> bool:
        """True for a revealed safe cell (its clue may be 0)."""
        self._check_bounds(row, col)
        return (
            self.visibility[row][col] is Visibility.REVEALED
            and not self.mines[row][col]
        )

    def clue(self, row: int, col: int) -> int:
        """
        Return the clue of a revealed safe cell.

        Raises:
            IllegalState: If the cell is not a revealed safe cell.
        """
        if not self.is_revealed_numbered(row, col):
            raise IllegalState(f"Cell ({row}, {col}) is not a revealed number.")
        return cast(int, self.clues[row][col])

    def cell_view(self, row: int, col: int) -> CellView:
        self._check_bounds(row, col)
        visibility = self.visibility[row][col]
        if self.is_finished or visibility is Visibility.REVEALED:
            return CellView(visibility, self.clues[row][col], self.mines[row][col])
        return CellView(visibility)

    def iter_cells(self) -> Iterator[Tuple[int, int, CellView]]:
        """Yield (row, col, view) for every cell in row-major order."""
        for r in range(self.rows):
            for c in range(self.cols):
                yield r, c, self.cell_view(r, c)

    def flagged_cells(self) -> FrozenSet[Tuple[int, int]]:
        return frozenset(self._flags)

    def snapshot(self) -> "BoardSnapshot":
        """Return an immutable copy of what the player can see."""
        return BoardSnapshot(
            rows=self.rows,
            cols=self.cols,
            revealed=tuple(
                tuple(v is Visibility.REVEALED for v in row) for row in self.visibility
            ),
            visible_clues=tuple(
                tuple(
                    self.clues[r][c]
                    if self.visibility[r][c] is Visibility.REVEALED
                    else None
                    for c in range(self.cols)
                )
                for r in range(self.rows)
            ),
        )

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def reveal(self, row: int, col: int) -> Tuple[Outcome, Dict[str, object]]:
        """
        Reveal a cell, cascading through clue-0 cells.

        Before any cell has been revealed (and with ``auto_open`` on) the
        requested coordinate is ignored and a random blank region is opened
        instead, so the first move is always safe.

        Returns:
            Tuple of (outcome, payload). Payload holds "revealed_cells" as a
            list of (row, col, clue) in reveal order, plus "all_mines" on a loss.

        Raises:
            OutOfBounds: If the coordinate is outside the board.
            GameFinished: If the game is already won or lost.
        """
        self._check_bounds(row, col)
        self._ensure_in_progress()

        if not self._opened and self.auto_open:
            revealed = self._auto_open()
        else:
            revealed = self._cascade(row, col)

        if revealed:
            self._opened = True
        return self._finish_command(revealed)

    def chord_reveal(self, row: int, col: int) -> Tuple[Outcome, Dict[str, object]]:
        """
        Reveal every unflagged covered neighbour of a numbered cell whose flags match its clue.

        Does nothing unless the cell is revealed with a non-zero clue and the
        number of flagged neighbours equals that clue.
        """
        self._check_bounds(row, col)
        self._ensure_in_progress()

        clue = self.clues[row][col]
        if self.visibility[row][col] is not Visibility.REVEALED or not clue:
            return self._finish_command([])

        flagged = sum(
            1
            for nr, nc in self.neighbors(row, col)
            if self.visibility[nr][nc] is Visibility.FLAGGED
        )
        if flagged != clue:
            logger.debug(
                "Chord at (%d, %d) ignored: %d flags for clue %d.", row, col, flagged, clue
            )
            return self._finish_command([])

        revealed: List[RevealedCell] = []
        for nr, nc in self.neighbors(row, col):
            revealed.extend(self._cascade(nr, nc))
        return self._finish_command(revealed)

    def toggle_flag(self, row: int, col: int) -> Tuple[Outcome, Dict[str, object]]:
        """
        Flip a covered cell between Hidden and Flagged.

        Revealed cells are left untouched. Returns (outcome, {"flagged": bool}).
        """
        self._check_bounds(row, col)
        self._ensure_in_progress()

        visibility = self.visibility[row][col]
        if visibility is Visibility.REVEALED:
            return self.outcome, {"flagged": False}

        if visibility is Visibility.HIDDEN:
            self.visibility[row][col] = Visibility.FLAGGED
            self._flags.add((row, col))
        else:
            self.visibility[row][col] = Visibility.HIDDEN
            self._flags.discard((row, col))

        flagged = (row, col) in self._flags
        return self._evaluate_outcome(), {"flagged": flagged}

    def use_cheat(
        self, max_reveals: int = CHEAT_REVEALS
    ) -> Tuple[Outcome, Dict[str, object]]:
        """
        Reveal a blank region if one is still covered, else up to ``max_reveals`` numbered cells.

        Never reveals a mine. The payload's "uses" counts cheat uses consumed:
        1 for a blank opening, otherwise one per numbered cell revealed.
        """
        if max_reveals < 1:
            raise ValueError("max_reveals must be at least 1.")
        self._ensure_in_progress()

        revealed: List[RevealedCell] = []
        uses = 0
        target = self._scan_for(self._is_covered_blank)
        if target is not None:
            revealed = self._cascade(*target)
            uses = 1
        else:
            for _ in range(max_reveals):
                target = self._scan_for(self._is_covered_number, from_corner=True)
                if target is None:
                    break
                revealed.extend(self._cascade(*target))
                uses += 1

        if revealed:
            self._opened = True
        logger.debug("Cheat revealed %d cell(s) for %d use(s).", len(revealed), uses)
        return self._finish_command(revealed, uses=uses)

    def restart(self) -> None:
        """Cover every cell and clear flags, keeping the same mine layout."""
        self._reset_visibility()
        logger.info("Restarted %dx%d board.", self.rows, self.cols)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise OutOfBounds(row, col, self.rows, self.cols)

    def _ensure_in_progress(self) -> None:
        if self.is_finished:
            raise GameFinished(self.outcome)

    def _cascade(self, row: int, col: int) -> List[RevealedCell]:
        """
        Reveal (row, col) and flood-fill through connected clue-0 cells.

        Only Hidden cells are touched. Work items are flattened indices and a
        cell is enqueued only at the moment it is revealed, so each cell is
        processed at most once.
        """
        revealed: List[RevealedCell] = []
        if self.visibility[row][col] is not Visibility.HIDDEN:
            return revealed

        self._mark_revealed(row, col, revealed)
        if self.clues[row][col] != 0:
            return revealed

        frontier: Deque[int] = deque([row * self.cols + col])
        while frontier:
            cr, cc = divmod(frontier.popleft(), self.cols)
            for nr, nc in self.neighbors(cr, cc):
                if self.visibility[nr][nc] is not Visibility.HIDDEN or self.mines[nr][nc]:
                    continue
                self._mark_revealed(nr, nc, revealed)
                if self.clues[nr][nc] == 0:
                    frontier.append(nr * self.cols + nc)

        logger.debug("Cascade from (%d, %d) revealed %d cells.", row, col, len(revealed))
        return revealed

    def _mark_revealed(self, row: int, col: int, revealed: List[RevealedCell]) -> None:
        self.visibility[row][col] = Visibility.REVEALED
        self._revealed_count += 1
        if self.mines[row][col]:
            self._mine_revealed = True
        else:
            self._safe_unrevealed -= 1
        revealed.append((row, col, self.clues[row][col]))

    def _auto_open(self) -> List[RevealedCell]:
        target = self._scan_for(self._is_covered_blank)
        if target is None:
            # No blank cell anywhere: open any safe cell instead.
            target = self._scan_for(self._is_covered_safe)
        if target is None:
            return []
        logger.debug("Auto-opener starts at (%d, %d).", *target)
        return self._cascade(*target)

    def _scan_for(
        self, predicate: Callable[[int, int], bool], from_corner: bool = False
    ) -> Optional[Tuple[int, int]]:
        """
        Return the first cell matching ``predicate`` along a randomised scan.

        The scan direction is random on both axes. It starts from a random
        cell, or from the corner the direction points away from.
        """
        direction = (self._rng.choice((1, -1)), self._rng.choice((1, -1)))
        if from_corner:
            origin = (
                0 if direction[0] == 1 else self.rows - 1,
                0 if direction[1] == 1 else self.cols - 1,
            )
        else:
            origin = (self._rng.randrange(self.rows), self._rng.randrange(self.cols))

        for r, c in wrapped_scan(self.rows, self.cols, origin, direction):
            if predicate(r, c):
                return r, c
        return None

    def _is_covered_safe(self, row: int, col: int) -> bool:
        return self.visibility[row][col] is Visibility.HIDDEN and not self.mines[row][col]

    def _is_covered_blank(self, row: int, col: int) -> bool:
        return self._is_covered_safe(row, col) and self.clues[row][col] == 0

    def _is_covered_number(self, row: int, col: int) -> bool:
        return self._is_covered_safe(row, col) and bool(self.clues[row][col])

    def _evaluate_outcome(self) -> Outcome:
        if self.is_finished:
            return self.outcome

        if self._mine_revealed:
            self.outcome = Outcome.LOST
        elif self._flags == self._mine_cells or self._safe_unrevealed == 0:
            self.outcome = Outcome.WON

        if self.is_finished:
            logger.info("Game %s after %d reveals.", self.outcome.value, self._revealed_count)
        return self.outcome

    def _finish_command(
        self, revealed: List[RevealedCell], **extra: object
    ) -> Tuple[Outcome, Dict[str, object]]:
        outcome = self._evaluate_outcome()
        payload: Dict[str, object] = {"revealed_cells": revealed}
        payload.update(extra)
        if outcome is Outcome.LOST:
            payload["all_mines"] = self._mine_cells
        return outcome, payload

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and all clues regardless of visibility.

        Returns:
            A formatted multi-line string with row/column labels and the grid.
            Covered cells are '.', flags 'F', mines 'M'.
        """
        show_all = reveal_all or self.is_finished

        def cell_str(r: int, c: int) -> str:
            visibility = self.visibility[r][c]
            if show_all or visibility is Visibility.REVEALED:
                if self.mines[r][c]:
                    return self._m("M")
                return str(self.clues[r][c])
            if visibility is Visibility.FLAGGED:
                return "F"
            return "."

        header_cells = " ".join(f"{c:2d}" for c in range(self.cols))
        out = [self._c("   ") + self._c(header_cells)]
        out.append(self._c("   " + "-" * (3 * self.cols - 1)))

        for r in range(self.rows):
            row_cells = " ".join(f" {cell_str(r, c)}" for c in range(self.cols))
            out.append(self._c(f"{r:2d} ") + self._c("|") + row_cells)

        return "\n".join(out)


@dataclass(frozen=True)
class BoardSnapshot:
    """Immutable copy of the player-visible board, exposing the solver query surface."""

    rows: int
    cols: int
    revealed: Tuple[Tuple[bool, ...], ...]
    # Clue of each revealed cell, None elsewhere (and for a revealed mine).
    visible_clues: Tuple[Tuple[Optional[int], ...], ...]

    def dimensions(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise OutOfBounds(row, col, self.rows, self.cols)

    def is_hidden(self, row: int, col: int) -> bool:
        self._check_bounds(row, col)
        return not self.revealed[row][col]

    def is_revealed_numbered(self, row: int, col: int) -> bool:
        self._check_bounds(row, col)
        return self.revealed[row][col] and self.visible_clues[row][col] is not None

    def clue(self, row: int, col: int) -> int:
        if not self.is_revealed_numbered(row, col):
            raise IllegalState(f"Cell ({row}, {col}) is not a revealed number.")
        return cast(int, self.visible_clues[row][col])


def _place_mines(
    rows: int, cols: int, mine_count: int, rng: random.Random
) -> List[List[bool]]:
    """
    Place mines by greedy acceptance over shuffled cells, honouring the row/column caps.

    Raises:
        InfeasibleConfiguration: If no attempt within PLACEMENT_ATTEMPTS succeeds.
    """
    row_cap, col_cap = spreading_caps(rows, cols)
    cells: List[Tuple[int, int]] = [(r, c) for r in range(rows) for c in range(cols)]

    for attempt in range(1, PLACEMENT_ATTEMPTS + 1):
        rng.shuffle(cells)
        row_counts = [0] * rows
        col_counts = [0] * cols
        chosen: List[Tuple[int, int]] = []

        for r, c in cells:
            if row_counts[r] >= row_cap or col_counts[c] >= col_cap:
                continue
            row_counts[r] += 1
            col_counts[c] += 1
            chosen.append((r, c))
            if len(chosen) == mine_count:
                break

        if len(chosen) == mine_count:
            logger.debug("Placed %d mines after %d attempt(s).", mine_count, attempt)
            grid = [[False for _ in range(cols)] for _ in range(rows)]
            for r, c in chosen:
                grid[r][c] = True
            return grid

    raise InfeasibleConfiguration(
        f"Could not place {mine_count} mines on a {rows}x{cols} board "
        f"within {PLACEMENT_ATTEMPTS} attempts."
    )
