"""This module provides the entry point for the interactive console menu."""

import argparse
import logging
from pathlib import Path

from src.cli.menu import run_menu
from src.server.session import NameTreeSession

NAMES_PATH = Path("npt_output.txt")


def main() -> None:
    """Load the names file and run the menu."""
    parser = argparse.ArgumentParser(
        description="Manage a Name Prefix Tree from the console.",
    )
    parser.add_argument(
        "--names_path",
        type=str,
        default=str(NAMES_PATH),
        help="File the names are loaded from and saved to.",
        required=False,
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    session = NameTreeSession(Path(args.names_path))
    session.load()
    run_menu(session)


if __name__ == "__main__":
    main()
