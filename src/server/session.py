"""Execute Name Prefix Tree commands on behalf of the menu, the TCP server
and the web front end.
"""

import logging
import string
from enum import IntEnum
from pathlib import Path
from typing import Optional

from src.custom_data_structures.AccessStats.AccessStats import AccessStats
from src.custom_data_structures.NamePrefixTree.NamePrefixTree import (
    InvalidCharacterError,
    NameNotFoundError,
    NamePrefixTree,
)

from .persistence import load_names_from_file, save_names_to_file


class Command(IntEnum):
    """The menu choices of the Name Prefix Tree."""

    INSERT = 1
    LOOKUP = 2
    DELETE = 3
    PRINT = 4
    PROBABILITIES = 5
    AVERAGE = 6
    SAVE = 7
    EXIT = 8


NAME_COMMANDS = {Command.INSERT, Command.LOOKUP, Command.DELETE}

MENU_LABELS = {
    Command.INSERT: "Insert Name",
    Command.LOOKUP: "Lookup Name",
    Command.DELETE: "Delete Name",
    Command.PRINT: "Print NPT",
    Command.PROBABILITIES: "Print Access Probabilities",
    Command.AVERAGE: "Print Average Access Probability",
    Command.SAVE: "Save NPT to File",
    Command.EXIT: "Exit",
}


class RequestParsingError(Exception):
    """Raised when a request line can't be turned into a command."""


def parse_command(token: str) -> Command:
    """Parse a menu number or a command keyword (case-insensitive).

    Args:
        token (str): e.g. "2", "lookup" or "LOOKUP".

    Raises:
        RequestParsingError: If `token` names no command.

    Returns:
        Command: The parsed command.

    """
    token = token.strip()
    if token.isdigit():
        try:
            return Command(int(token))
        except ValueError:
            pass
    else:
        try:
            return Command[token.upper()]
        except KeyError:
            pass
    raise RequestParsingError(f"Unknown command '{token}'.")


def parse_request(line: str) -> tuple[Command, Optional[str]]:
    """Split a request line into a command and its optional name.

    Args:
        line (str): e.g. "INSERT Ann", "2 bob" or "PRINT".

    Raises:
        RequestParsingError: If the command is unknown, a name is missing
        for INSERT/LOOKUP/DELETE, or one is given to any other command.

    Returns:
        tuple[Command, Optional[str]]: The command and the name, if any.

    """
    parts = line.split()
    if not parts:
        raise RequestParsingError("Empty request.")

    command = parse_command(parts[0])
    arguments = parts[1:]

    if command in NAME_COMMANDS:
        if len(arguments) != 1:
            raise RequestParsingError(
                f"{command.name} expects exactly one name.",
            )
        return command, arguments[0]

    if arguments:
        raise RequestParsingError(f"{command.name} takes no arguments.")
    return command, None


def render_tree(tree: NamePrefixTree) -> str:
    """Return the indented listing of the tree, two spaces per level."""
    lines = ["Name Prefix Tree (NPT):"]
    for letter, name, depth in tree.traverse_ordered():
        line = " " * (depth * 2) + letter
        if name is not None:
            line += f" ({name})"
        lines.append(line)
    return "\n".join(lines)


def render_probabilities(stats: AccessStats) -> str:
    """Return one `letter: value` line per letter."""
    lines = ["Access Probabilities:"]
    lines.extend(
        f"{letter}: {stats.get(letter):.2f}"
        for letter in string.ascii_lowercase
    )
    return "\n".join(lines)


def render_average(stats: AccessStats) -> str:
    """Return the average access probability line."""
    return f"Average Access Probability: {stats.average():.2f}"


def render_menu() -> str:
    """Return the numbered command menu."""
    lines = ["Menu:"]
    lines.extend(
        f"{command.value}. {label}" for command, label in MENU_LABELS.items()
    )
    return "\n".join(lines)


class NameTreeSession:
    """Own one name prefix tree and its access statistics."""

    def __init__(self, names_path: Optional[Path] = None) -> None:
        """Initialize an empty session.

        Args:
            names_path (Optional[Path]): The file names are loaded from
            and saved to. Without it SAVE reports an error.

        """
        self.names_path = names_path
        self.tree = NamePrefixTree()
        self.stats = AccessStats()
        self.closed = False

    def load(self) -> int:
        """Load the names file into the tree.

        A names file that is missing or can't be read is logged and
        leaves the tree empty.

        Returns:
            int: The number of names loaded.

        """
        if self.names_path is None:
            return 0
        try:
            report = load_names_from_file(self.tree, self.names_path)
        except OSError as e:
            logging.error(
                f"Error opening file for NPT loading: '{self.names_path}': "
                f"{e}",
            )
            return 0
        return report.loaded

    def save(self) -> int:
        """Save the stored names to the names file.

        Raises:
            RuntimeError: If the session has no names file.

        Returns:
            int: The number of names written.

        """
        if self.names_path is None:
            raise RuntimeError("No names file configured for saving.")
        if self.tree.is_empty():
            logging.warning(
                f"Saving an empty NPT; '{self.names_path}' will be emptied.",
            )
        return save_names_to_file(self.tree, self.names_path)

    def execute(self, command: Command, name: Optional[str] = None) -> str:
        """Run one command and return the text to show to the user.

        Args:
            command (Command): The command to run.
            name (Optional[str]): The name for INSERT, LOOKUP and DELETE.

        Raises:
            RequestParsingError: If a name command gets no name.

        Returns:
            str: The response text.

        """
        if command in NAME_COMMANDS and not name:
            raise RequestParsingError(f"{command.name} expects a name.")

        if command == Command.INSERT:
            try:
                self.tree.insert(name)
            except InvalidCharacterError as e:
                logging.info(f"Rejected insert of '{name}': {e}")
                return f"ERROR: {e}"
            return f"Name '{name}' inserted successfully."

        if command == Command.LOOKUP:
            found = self.tree.lookup(name, self.stats)
            return (
                f"Lookup result for '{name}': "
                f"{'Found' if found else 'Not Found'}"
            )

        if command == Command.DELETE:
            try:
                self.tree.delete(name)
            except NameNotFoundError as e:
                return str(e)
            return f"Node '{name}' deleted successfully."

        if command == Command.PRINT:
            return render_tree(self.tree)

        if command == Command.PROBABILITIES:
            return render_probabilities(self.stats)

        if command == Command.AVERAGE:
            return render_average(self.stats)

        if command == Command.SAVE:
            try:
                self.save()
            except (OSError, RuntimeError) as e:
                logging.error(f"Error saving NPT: {e}")
                return f"ERROR: Error opening file for NPT saving: {e}"
            return "Name Prefix Tree (NPT) saved to file successfully."

        return "Goodbye."

    def close(self) -> None:
        """Release the tree and the statistics table."""
        self.tree.teardown()
        self.stats.teardown()
        self.closed = True
