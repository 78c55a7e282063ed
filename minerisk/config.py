"""Tunable constants and difficulty presets."""

import random
from typing import Dict, Optional, Tuple

# Fixed-point passes the solver runs at most; at least 15 is recommended.
DEFAULT_PASS_LIMIT: int = 50

# Cheat uses a player gets per game (enforced by the session, not the board).
CHEAT_ALLOWANCE: int = 3

# Numbered cells a single cheat may reveal when no blank cell is left.
CHEAT_REVEALS: int = 3

# Shuffles tried by constrained mine placement before giving up.
PLACEMENT_ATTEMPTS: int = 200

# name -> ((min_rows, max_rows), (min_cols, max_cols), mines)
PRESETS: Dict[str, Tuple[Tuple[int, int], Tuple[int, int], int]] = {
    "easy": ((8, 10), (8, 10), 10),
    "medium": ((13, 16), (15, 16), 40),
    "hard": ((16, 16), (30, 30), 100),
}


def resolve_preset(
    name: str, rng: Optional[random.Random] = None
) -> Tuple[int, int, int]:
    """
    Draw concrete (rows, cols, mines) for a named difficulty preset.

    Easy boards are always square, as in the classic menu.

    Raises:
        KeyError: If ``name`` is not a known preset.
    """
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset {name!r}; choose one of {sorted(PRESETS)}.")
    rng = rng or random.Random()
    (r_lo, r_hi), (c_lo, c_hi), mines = PRESETS[key]
    rows = rng.randint(r_lo, r_hi)
    cols = rows if key == "easy" else rng.randint(c_lo, c_hi)
    return rows, cols, mines
