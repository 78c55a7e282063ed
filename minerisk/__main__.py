"""Play in the terminal: python -m minerisk [--preset easy|medium|hard]."""

import argparse
import logging
from typing import List, Optional

from .config import PRESETS
from .session import GameSession, play_cli


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Minesweeper with a risk overlay.")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="easy")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible boards.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    play_cli(GameSession.from_preset(args.preset, seed=args.seed))


if __name__ == "__main__":
    main()
