"""Grid helpers shared by the board and the solver."""

from typing import Dict, List, Tuple

# Module-level cache: (rows, cols) -> {(r, c): ((nr, nc), ...), ...}
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[int, int],
    Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]
] = {}


def get_neighborhoods(
    rows: int, cols: int
) -> Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]:
    """
    Return the 8-connected neighbours of every cell on a rows x cols board.

    Board and solver both walk neighbourhoods on every reveal and every pass,
    so the table is built once per board shape and shared. Neighbours are
    listed row-major, which fixes the order cascades and chords visit them.

    Raises:
        ValueError: If the board has no rows or no columns.
    """
    if rows <= 0 or cols <= 0:
        raise ValueError("rows and cols must be positive.")

    key = (rows, cols)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]] = {}
    for r in range(rows):
        for c in range(cols):
            nbrs: List[Tuple[int, int]] = []
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = r + dr, c + dc
                    if 0 <= nr < rows and 0 <= nc < cols:
                        nbrs.append((nr, nc))
            neighborhoods[(r, c)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def spreading_caps(rows: int, cols: int) -> Tuple[int, int]:
    """Return (mines allowed per row, mines allowed per column) for a grid."""
    return (2 * rows) // 3 - 1, (2 * cols) // 3 - 1


def wrapped_scan(
    rows: int,
    cols: int,
    origin: Tuple[int, int],
    direction: Tuple[int, int] = (1, 1),
) -> List[Tuple[int, int]]:
    """
    List every cell of the grid once, starting at ``origin`` and wrapping around.

    Rows advance by ``direction[0]`` and columns by ``direction[1]`` (each +1 or -1),
    columns varying fastest.
    """
    r0, c0 = origin
    dr, dc = direction
    return [
        ((r0 + dr * i) % rows, (c0 + dc * j) % cols)
        for i in range(rows)
        for j in range(cols)
    ]
