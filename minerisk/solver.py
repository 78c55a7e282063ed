"""Risk solver: local constraint propagation plus a pooled-evidence probability heuristic."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from .config import DEFAULT_PASS_LIMIT
from .utils import get_neighborhoods

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class BoardView(Protocol):
    """Read-only query surface the solver needs from a board."""

    def dimensions(self) -> Tuple[int, int]: ...

    def is_hidden(self, row: int, col: int) -> bool: ...

    def is_revealed_numbered(self, row: int, col: int) -> bool: ...

    def clue(self, row: int, col: int) -> int: ...


class CellStatus(Enum):
    DEDUCED_SAFE = "deduced_safe"
    DEDUCED_MINE = "deduced_mine"
    NO_DATA = "no_data"
    PROBABILITY = "probability"


@dataclass(frozen=True)
class CellResult:
    """
    Solver verdict for one cell.

    ``probability`` is 0.0 for DEDUCED_SAFE, 1.0 for DEDUCED_MINE, None for
    NO_DATA, and the pooled evidence ratio for PROBABILITY.
    """

    status: CellStatus
    probability: Optional[float] = None

    @property
    def is_deduced(self) -> bool:
        return self.status in (CellStatus.DEDUCED_SAFE, CellStatus.DEDUCED_MINE)


DEDUCED_SAFE = CellResult(CellStatus.DEDUCED_SAFE, 0.0)
DEDUCED_MINE = CellResult(CellStatus.DEDUCED_MINE, 1.0)
NO_DATA = CellResult(CellStatus.NO_DATA, None)


@dataclass
class SolverReport:
    """Everything one solver run produced."""

    results: Dict[Cell, CellResult]
    passes: int
    converged: bool
    inferred_safe_count: int = 0
    inferred_mine_count: int = 0
    rule_hits: Dict[str, int] = field(default_factory=dict)


class MineRiskSolver:
    """
    Deduces certainly-safe and certainly-mined covered cells from revealed clues.

    Each run rebuilds its working arrays from nothing, so results depend only
    on the board passed in. Per revealed safe cell with clue n:

    - Rule A (saturated): n deduced-mine neighbours -> remaining covered
      neighbours are safe.
    - Rule B (starved): n covered neighbours -> all of them are mines.
    - Rule C (effective starvation): n covered, not-safe neighbours -> those
      are mines.

    Passes repeat until nothing changes or ``pass_limit`` is reached. Cells
    left undecided get the pooled ratio sum(n) / sum(m) over their numbered
    neighbours, where n is a neighbour's clue and m its covered neighbours.
    This is an additive pooling of local ratios, not a joint posterior. After
    the first pass rules A and B have settled every cell whose ratio would be
    0 or 1, so on a consistent board the pooled value lies strictly between them.
    """

    def __init__(self, pass_limit: int = DEFAULT_PASS_LIMIT) -> None:
        if pass_limit < 1:
            raise ValueError("pass_limit must be at least 1.")
        self.pass_limit: int = pass_limit

    def run(self, board: BoardView) -> Dict[Cell, CellResult]:
        """Return a CellResult for every cell of ``board``."""
        return self.analyze(board).results

    def analyze(self, board: BoardView) -> SolverReport:
        rows, cols = board.dimensions()
        neighborhoods = get_neighborhoods(rows, cols)

        # Working state: fresh on every call.
        mine: List[List[bool]] = [[False] * cols for _ in range(rows)]
        safe: List[List[bool]] = [[False] * cols for _ in range(rows)]
        hidden: List[List[bool]] = [
            [board.is_hidden(r, c) for c in range(cols)] for r in range(rows)
        ]
        rule_hits = {"saturated": 0, "starved": 0, "effective_starvation": 0}

        passes = 0
        converged = False
        while passes < self.pass_limit:
            passes += 1
            numbered = self._collect_numbered(board, rows, cols)
            changed = False
            for r, c, n in numbered:
                covered = [(nr, nc) for nr, nc in neighborhoods[(r, c)] if hidden[nr][nc]]
                if not covered:
                    continue

                # Rule A
                if sum(1 for nr, nc in covered if mine[nr][nc]) == n:
                    hits = self._classify(covered, safe, exclude=mine)
                    if hits:
                        rule_hits["saturated"] += hits
                        changed = True

                # Rule B
                if n == len(covered):
                    hits = self._classify(covered, mine, exclude=safe)
                    if hits:
                        rule_hits["starved"] += hits
                        changed = True

                # Rule C
                if n == sum(1 for nr, nc in covered if not safe[nr][nc]):
                    hits = self._classify(covered, mine, exclude=safe)
                    if hits:
                        rule_hits["effective_starvation"] += hits
                        changed = True

            if not changed:
                converged = True
                break

        logger.debug(
            "Solver finished after %d pass(es), converged=%s.", passes, converged
        )

        results = self._estimate(board, rows, cols, neighborhoods, hidden, mine, safe)
        return SolverReport(
            results=results,
            passes=passes,
            converged=converged,
            inferred_safe_count=sum(map(sum, safe)),
            inferred_mine_count=sum(map(sum, mine)),
            rule_hits=rule_hits,
        )

    @staticmethod
    def _collect_numbered(
        board: BoardView, rows: int, cols: int
    ) -> List[Tuple[int, int, int]]:
        return [
            (r, c, board.clue(r, c))
            for r in range(rows)
            for c in range(cols)
            if board.is_revealed_numbered(r, c)
        ]

    @staticmethod
    def _classify(
        cells: List[Cell], target: List[List[bool]], exclude: List[List[bool]]
    ) -> int:
        """Set ``target`` on every cell not already in ``target`` or ``exclude``."""
        hits = 0
        for r, c in cells:
            if target[r][c] or exclude[r][c]:
                continue
            target[r][c] = True
            hits += 1
        return hits

    def _estimate(
        self,
        board: BoardView,
        rows: int,
        cols: int,
        neighborhoods: Dict[Cell, Tuple[Cell, ...]],
        hidden: List[List[bool]],
        mine: List[List[bool]],
        safe: List[List[bool]],
    ) -> Dict[Cell, CellResult]:
        evidence: List[List[int]] = [[0] * cols for _ in range(rows)]
        weight: List[List[int]] = [[0] * cols for _ in range(rows)]

        for r, c, n in self._collect_numbered(board, rows, cols):
            covered = [(nr, nc) for nr, nc in neighborhoods[(r, c)] if hidden[nr][nc]]
            for nr, nc in covered:
                if mine[nr][nc] or safe[nr][nc]:
                    continue
                evidence[nr][nc] += n
                weight[nr][nc] += len(covered)

        results: Dict[Cell, CellResult] = {}
        for r in range(rows):
            for c in range(cols):
                if mine[r][c]:
                    results[(r, c)] = DEDUCED_MINE
                elif safe[r][c]:
                    results[(r, c)] = DEDUCED_SAFE
                elif weight[r][c] == 0:
                    results[(r, c)] = NO_DATA
                else:
                    results[(r, c)] = CellResult(
                        CellStatus.PROBABILITY, evidence[r][c] / weight[r][c]
                    )
        return results


def run_solver(
    board: BoardView, pass_limit: int = DEFAULT_PASS_LIMIT
) -> Dict[Cell, CellResult]:
    """Classify every cell of ``board``; see MineRiskSolver."""
    return MineRiskSolver(pass_limit=pass_limit).run(board)
