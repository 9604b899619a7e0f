"""Load and save the names stored in a Name Prefix Tree."""

import logging
from pathlib import Path
from typing import NamedTuple

from src.custom_data_structures.NamePrefixTree.NamePrefixTree import (
    InvalidCharacterError,
    NamePrefixTree,
)

MAX_NAME_LENGTH = 99


class LoadReport(NamedTuple):
    """Outcome of loading a names file."""

    loaded: int
    skipped: int


def read_tokens(path: Path) -> list[str]:
    """Read all whitespace-separated tokens from `path`.

    Args:
        path (Path): The names file.

    Raises:
        FileNotFoundError: If `path` doesn't exist.

    Returns:
        list[str]: The tokens in file order.

    """
    if not path.exists():
        raise FileNotFoundError(f"Names file '{path}' not found.")

    with path.open("r", encoding="utf-8") as file:
        return file.read().split()


def load_names_from_file(tree: NamePrefixTree, path: Path) -> LoadReport:
    """Insert every name found in `path` into `tree`.

    Tokens longer than MAX_NAME_LENGTH characters or containing anything
    other than ASCII letters are skipped and logged.

    Args:
        tree (NamePrefixTree): The tree to fill.
        path (Path): The names file.

    Raises:
        FileNotFoundError: If `path` doesn't exist.

    Returns:
        LoadReport: How many tokens were loaded and skipped.

    """
    loaded = skipped = 0
    for token in read_tokens(path):
        if len(token) > MAX_NAME_LENGTH:
            logging.warning(
                f"Skipping name longer than {MAX_NAME_LENGTH} characters "
                f"in '{path}': '{token[:20]}...'",
            )
            skipped += 1
            continue
        try:
            tree.insert(token)
        except InvalidCharacterError as e:
            logging.warning(f"Skipping token from '{path}': {e}")
            skipped += 1
            continue
        loaded += 1

    logging.info(
        f"Loaded {loaded} names from '{path}' ({skipped} skipped, "
        f"{tree.count_nodes()} nodes in the tree).",
    )
    return LoadReport(loaded, skipped)


def save_names_to_file(tree: NamePrefixTree, path: Path) -> int:
    """Write every stored name to `path`, one per line, a to z.

    Args:
        tree (NamePrefixTree): The tree to save.
        path (Path): The destination file; overwritten.

    Returns:
        int: The number of names written.

    """
    count = 0
    with path.open("w", encoding="utf-8") as file:
        for name in tree.names():
            file.write(f"{name}\n")
            count += 1

    logging.info(f"Saved {count} names to '{path}'.")
    return count
