"""Overlay rendering, display scaling and benchmarking tools for the risk solver."""

import logging
import random
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple, cast

import matplotlib.pyplot as plt
import numpy as np

from .config import DEFAULT_PASS_LIMIT, resolve_preset
from .engine import Board, Outcome, Visibility
from .solver import BoardView, Cell, CellResult, CellStatus, MineRiskSolver

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

SAFE_COLOR: RGB = (6, 82, 255)
MINE_COLOR: RGB = (0, 0, 0)
FLAGGED_MINE_COLOR: RGB = (255, 0, 255)


def format_risk_overlay(
    board: BoardView, results: Dict[Cell, CellResult], *, show_coords: bool = True
) -> str:
    """
    Format a solver overlay as a human-readable grid.

    Args:
        board: Board or snapshot the overlay was computed for.
        results: Output of MineRiskSolver.run().
        show_coords: If True, include row/column labels and a header.

    Returns:
        A text grid where revealed cells show their clue, deduced cells show
        'S' (safe) or 'X' (mine), cells without evidence show '?', and the
        rest show their estimated risk as a two-digit percentage.
    """
    rows, cols = board.dimensions()

    def cell_str(r: int, c: int) -> str:
        if board.is_revealed_numbered(r, c):
            return f"{board.clue(r, c):>2}"
        result = results[(r, c)]
        if result.status is CellStatus.DEDUCED_SAFE:
            return " S"
        if result.status is CellStatus.DEDUCED_MINE:
            return " X"
        if result.status is CellStatus.NO_DATA:
            return " ?"
        return f"{min(99, int(round(cast(float, result.probability) * 100))):2d}"

    lines: List[str] = []
    if show_coords:
        lines.append("   " + " ".join(f"{c:2d}" for c in range(cols)))
        lines.append("   " + "-" * (3 * cols - 1))

    for r in range(rows):
        row = " ".join(cell_str(r, c) for c in range(cols))
        lines.append(f"{r:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def probability_grid(results: Dict[Cell, CellResult], rows: int, cols: int) -> np.ndarray:
    """Return a (rows, cols) float array of mine probabilities, NaN where there is no data."""
    grid = np.full((rows, cols), np.nan, dtype=float)
    for (r, c), result in results.items():
        if result.probability is not None:
            grid[r, c] = result.probability
    return grid


def display_scale(results: Dict[Cell, CellResult]) -> Dict[Cell, Optional[float]]:
    """
    Stretch heuristic probabilities across the display range.

    The least risky ambiguous cell lands near 0 and the riskiest near 1, so
    relative danger stays visible even when all estimates are close together.
    Deduced cells keep 0.0 / 1.0 and cells without data map to None.
    """
    ratios = [
        res.probability
        for res in results.values()
        if res.status is CellStatus.PROBABILITY and res.probability is not None
    ]
    min_val = min(ratios) if ratios else 0.0
    max_val = max(ratios) if ratios else 0.0
    spread = 1 / (1 - min_val + 0.08)
    constant = (max_val - min_val + 0.05) * spread + 0.01

    scaled: Dict[Cell, Optional[float]] = {}
    for cell, res in results.items():
        if res.status is CellStatus.PROBABILITY and res.probability is not None:
            scaled[cell] = (res.probability - min_val + 0.05) * spread / constant
        else:
            scaled[cell] = res.probability
    return scaled


def risk_color(value: float, *, flagged: bool = False) -> RGB:
    """
    Map a scaled risk value to an RGB colour on a green-to-red gradient.

    Exactly 0 and 1 are deduced verdicts and get their own colours.
    """
    if value == 0:
        return SAFE_COLOR
    if value == 1:
        return FLAGGED_MINE_COLOR if flagged else MINE_COLOR
    if value < 0.5:
        return (int(510 * value), 255, 0)
    return (255, int(510 * (1 - value)), 0)


def risk_colors(board: Board, results: Dict[Cell, CellResult]) -> Dict[Cell, RGB]:
    """Colour every covered cell that has solver data."""
    colors: Dict[Cell, RGB] = {}
    for cell, value in display_scale(results).items():
        if value is None or not board.is_hidden(*cell):
            continue
        colors[cell] = risk_color(value, flagged=board.is_flagged(*cell))
    return colors


def play_with_solver(
    board: Board,
    solver: Optional[MineRiskSolver] = None,
    *,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Play a board to the end using only the solver's overlay.

    Deduced mines are flagged, deduced safe cells revealed; when nothing is
    certain the lowest-risk cell is revealed as a guess.

    Returns:
        Dict with "outcome", "moves", "guesses", "solver_calls", "max_passes",
        and "violations" (deductions contradicting the real layout).
    """
    solver = solver or MineRiskSolver()
    rng = rng or random.Random()
    moves = guesses = solver_calls = max_passes = violations = 0

    rows, cols = board.dimensions()
    board.reveal(rows // 2, cols // 2)
    moves += 1

    while not board.is_finished:
        report = solver.analyze(board)
        solver_calls += 1
        max_passes = max(max_passes, report.passes)

        safe_cells: List[Cell] = []
        for (r, c), res in report.results.items():
            if not board.is_hidden(r, c):
                continue
            if res.status is CellStatus.DEDUCED_MINE:
                if not board.mines[r][c]:
                    violations += 1
                if board.visibility[r][c] is Visibility.HIDDEN:
                    board.toggle_flag(r, c)
            elif res.status is CellStatus.DEDUCED_SAFE:
                if board.mines[r][c]:
                    violations += 1
                safe_cells.append((r, c))
            if board.is_finished:
                break

        if board.is_finished:
            break

        if safe_cells:
            for r, c in safe_cells:
                if board.is_finished:
                    break
                if board.visibility[r][c] is Visibility.HIDDEN:
                    board.reveal(r, c)
                    moves += 1
            continue

        target = _pick_guess(board, report.results, rng)
        board.reveal(*target)
        moves += 1
        guesses += 1

    return {
        "outcome": board.outcome,
        "moves": moves,
        "guesses": guesses,
        "solver_calls": solver_calls,
        "max_passes": max_passes,
        "violations": violations,
    }


def _pick_guess(board: Board, results: Dict[Cell, CellResult], rng: random.Random) -> Cell:
    candidates = [
        (cell, res)
        for cell, res in results.items()
        if board.visibility[cell[0]][cell[1]] is Visibility.HIDDEN
    ]
    scored = [(res.probability, cell) for cell, res in candidates if res.probability is not None]
    if scored:
        best = min(p for p, _ in scored)
        return rng.choice([cell for p, cell in scored if p == best])
    return rng.choice([cell for cell, _ in candidates])


def run_solver_coverage(
    rows: int,
    cols: int,
    mine_count: int,
    runs: int,
    *,
    seed: Optional[int] = None,
    pass_limit: int = DEFAULT_PASS_LIMIT,
) -> Dict[str, float]:
    """
    Measure how much of fresh boards the solver can settle, and how often solver play wins.

    Args:
        rows: Board rows.
        cols: Board columns.
        mine_count: Mines per board.
        runs: Number of independent boards.
        seed: Seed for reproducible boards.
        pass_limit: Solver pass limit.

    Returns:
        Averages over all runs:
        - avg_opening_deduced_fraction: share of covered cells deduced right
          after the opening move
        - avg_opening_passes: solver passes needed on the opening position
        - win_rate, avg_moves, avg_guesses, avg_solver_calls
        - violations: total unsound deductions (always 0 for a correct solver)
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    rng = random.Random(seed)
    solver = MineRiskSolver(pass_limit=pass_limit)
    sums: Dict[str, float] = defaultdict(float)
    wins = 0

    for _ in range(runs):
        board = Board(rows, cols, mine_count, seed=rng.randrange(2**32))
        board.reveal(0, 0)
        if not board.is_finished:
            report = solver.analyze(board)
            covered = sum(1 for cell in report.results if board.is_hidden(*cell))
            deduced = sum(
                1
                for cell, res in report.results.items()
                if res.is_deduced and board.is_hidden(*cell)
            )
            sums["avg_opening_deduced_fraction"] += deduced / covered if covered else 1.0
            sums["avg_opening_passes"] += report.passes
        else:
            sums["avg_opening_deduced_fraction"] += 1.0
            sums["avg_opening_passes"] += 0

        board.restart()
        stats = play_with_solver(board, solver, rng=rng)
        if stats["outcome"] is Outcome.WON:
            wins += 1
        for key in ("moves", "guesses", "solver_calls"):
            sums[f"avg_{key}"] += float(stats[key])
        sums["violations"] += float(stats["violations"])

    out: Dict[str, float] = {
        k: (total if k == "violations" else total / runs) for k, total in sums.items()
    }
    out["win_rate"] = wins / runs
    logger.info(
        "Coverage on %dx%d/%d over %d runs: win rate %.2f.",
        rows, cols, mine_count, runs, out["win_rate"],
    )
    return out


def run_solver_preset_analysis(
    runs: int,
    *,
    seed: Optional[int] = None,
    presets: Tuple[str, ...] = ("easy", "medium", "hard"),
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run coverage tests on each difficulty preset and plot summaries.

    Args:
        runs: Boards per preset.
        seed: Seed for reproducible boards and preset dimensions.
        presets: Preset names to include.
        show: If True, display the figures; otherwise close them.

    Returns:
        Mapping from preset name to the statistics from run_solver_coverage().
    """
    rng = random.Random(seed)
    results: Dict[str, Dict[str, float]] = {}
    for name in presets:
        rows, cols, mines = resolve_preset(name, rng)
        results[name] = run_solver_coverage(
            rows, cols, mines, runs, seed=rng.randrange(2**32)
        )

    x = np.arange(len(presets))

    # 1) Opening coverage and win rate
    bar_w = 0.35
    plt.figure()  # type: ignore[misc]
    plt.bar(  # type: ignore[misc]
        x - bar_w / 2,
        [results[n]["avg_opening_deduced_fraction"] for n in presets],
        width=bar_w,
        label="deduced after opening",
    )
    plt.bar(  # type: ignore[misc]
        x + bar_w / 2, [results[n]["win_rate"] for n in presets], width=bar_w, label="win rate"
    )
    plt.xticks(x, presets)  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Solver coverage by difficulty")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    # 2) Guesses per game
    plt.figure()  # type: ignore[misc]
    plt.bar(x, [results[n]["avg_guesses"] for n in presets])  # type: ignore[misc]
    plt.xticks(x, presets)  # type: ignore[misc]
    plt.ylabel("Average guesses")  # type: ignore[misc]
    plt.title("Guesses needed per game")  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]
    else:
        plt.close("all")

    return results
