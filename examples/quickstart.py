"""
Quickstart example for the Minesweeper risk core.

This script demonstrates basic usage of the board and the solver.
"""

from minerisk import Board, CellStatus, MineRiskSolver
from minerisk.analysis import format_risk_overlay, run_solver_coverage


def main():
    print("=" * 60)
    print("Minesweeper Risk Core - Quickstart Example")
    print("=" * 60)

    # Example 1: Open a board and ask the solver about it
    print("\n1. Opening a Medium board (16x16, 40 mines)...")
    print("-" * 60)

    board = Board(16, 16, 40, seed=7)
    outcome, payload = board.reveal(0, 0)
    print(f"Outcome: {outcome.value}")
    print(f"Cells opened: {len(payload['revealed_cells'])}")
    print(board.format_board())

    # Example 2: Risk overlay
    print("\n2. Solver overlay (S safe, X mine, ? no data, NN% risk):")
    print("-" * 60)

    report = MineRiskSolver().analyze(board)
    print(format_risk_overlay(board, report.results))
    print(f"Passes: {report.passes} (converged: {report.converged})")
    print(f"Deduced safe: {report.inferred_safe_count}, deduced mines: {report.inferred_mine_count}")

    safe = [cell for cell, res in report.results.items() if res.status is CellStatus.DEDUCED_SAFE]
    if safe:
        print(f"Revealing deduced-safe cell {safe[0]}...")
        board.reveal(*safe[0])

    # Example 3: Coverage statistics
    print("\n3. Playing 20 Easy games with the solver...")
    print("-" * 60)

    results = run_solver_coverage(9, 9, 10, runs=20, seed=1)
    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Deduced after opening: {results['avg_opening_deduced_fraction']*100:.1f}%")
    print(f"Average guesses per game: {results['avg_guesses']:.1f}")
    print(f"Unsound deductions: {int(results['violations'])}")

    print("\n" + "=" * 60)
    print("Done! Run `python -m minerisk` to play in the terminal.")
    print("=" * 60)


if __name__ == "__main__":
    main()
